"""Local artifact materialization.

Makes sure a document's file exists in the vault. The file name is derived
from the document id alone, and the existence check is the only idempotency
guard: once the file is there, no network request is made for that document.
"""

import posixpath

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.errors import TransportError
from shared.helper.HelperConfig import HelperConfig
from shared.host.FileStoreInterface import FileStoreInterface
from services.note_link.ShareLinkResolver import ShareLinkResolver
from services.note_link.models import LocalReference, MaterializeResult

FILENAME_TEMPLATE = "paperless-{document_id}.pdf"


def artifact_filename(document_id: str) -> str:
    return FILENAME_TEMPLATE.format(document_id=document_id)


def normalize_folder(folder: str) -> str:
    """Vault-style normalization: forward slashes, no leading/trailing or duplicate separators."""
    parts = [p for p in folder.replace("\\", "/").split("/") if p and p != "."]
    return "/".join(parts)


class ArtifactMaterializer:
    def __init__(
        self,
        helper_config: HelperConfig,
        dms_client: DMSClientInterface,
        resolver: ShareLinkResolver,
        file_store: FileStoreInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        self._resolver = resolver
        self._file_store = file_store

    def local_reference(self, document_id: str, storage_folder: str) -> LocalReference:
        folder = normalize_folder(storage_folder)
        filename = artifact_filename(document_id)
        path = posixpath.join(folder, filename) if folder else filename
        return LocalReference(document_id=document_id, filename=filename, path=path)

    async def materialize(self, document_id: str, storage_folder: str) -> MaterializeResult | None:
        """
        Ensure the document's file exists in the storage folder.

        Args:
            document_id (str): The id of the document on the DMS.
            storage_folder (str): Vault-relative folder; empty means the vault root.

        Returns:
            MaterializeResult | None: The local reference, or None if no share link
            could be resolved or the download failed. Nothing is written in that case.
        """
        folder = normalize_folder(storage_folder)
        if folder:
            self._file_store.create_folder(folder)

        reference = self.local_reference(document_id, folder)
        if self._file_store.exists(reference.path):
            self.logging.debug("Document %s already stored at %s", document_id, reference.path)
            return MaterializeResult(reference=reference, downloaded=False)

        share_link = await self._resolver.resolve_share_link(document_id)
        if share_link is None:
            self.logging.warning("Document %s not materialized: no share link available", document_id)
            return None

        try:
            data = await self._dms_client.do_download_share_link(share_link)
        except TransportError as e:
            self.logging.error("Download of document %s from %s failed: %s", document_id, share_link.url, e)
            return None

        try:
            self._file_store.create(reference.path, data)
        except FileExistsError:
            # a concurrent materialize for the same id wrote it first
            self.logging.debug("Document %s was stored concurrently at %s", document_id, reference.path)
            return MaterializeResult(reference=reference, downloaded=False, share_url=share_link.url)

        self.logging.info("Stored document %s at %s (%d bytes)", document_id, reference.path, len(data), color="green")
        return MaterializeResult(reference=reference, downloaded=True, share_url=share_link.url)
