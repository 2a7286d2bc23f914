"""Note-link service.

Implements the editor commands on top of the resolver, materializer and
listing cache: replace a Paperless URL in the note by a reference to the
local copy, insert a document picked in the browse view, refresh the
listing cache and test the server connection.
"""

import asyncio

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.ShareLink import ShareLink
from shared.errors import ConfigurationError, TransportError
from shared.helper.HelperConfig import HelperConfig
from shared.host.FileStoreInterface import FileStoreInterface
from shared.host.NotifierInterface import NotifierInterface
from shared.host.TextSurfaceInterface import TextSurfaceInterface, EditorRange
from shared.models.settings import LinkerSettings, MissingArtifactPolicy, validate_base_url
from services.note_link.ArtifactMaterializer import ArtifactMaterializer
from services.note_link.ListingCache import ListingCache
from services.note_link.ReferenceExtractor import parse_reference_at_cursor, extract_from_selection
from services.note_link.ShareLinkResolver import ShareLinkResolver
from services.note_link.models import DocumentTile


class NoteLinkService:
    """Orchestrates the user-facing note-link commands."""

    def __init__(
        self,
        helper_config: HelperConfig,
        settings: LinkerSettings,
        dms_client: DMSClientInterface,
        file_store: FileStoreInterface,
        notifier: NotifierInterface,
        listing_cache: ListingCache | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._settings = settings
        self._dms_client = dms_client
        self._notifier = notifier
        self.resolver = ShareLinkResolver(
            helper_config=helper_config,
            dms_client=dms_client,
            max_retries=settings.share_link_retries,
        )
        self.materializer = ArtifactMaterializer(
            helper_config=helper_config,
            dms_client=dms_client,
            resolver=self.resolver,
            file_store=file_store,
        )
        self.listing_cache = listing_cache or ListingCache(
            helper_config=helper_config,
            dms_client=dms_client,
            notifier=notifier,
        )

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def _get_validated_base_url(self) -> str | None:
        """Returns the base URL, or notifies the user and returns None if it is malformed."""
        try:
            return validate_base_url(self._dms_client.get_base_url())
        except ConfigurationError as e:
            self.logging.error("Configuration error: %s", e)
            self._notifier.notify(str(e), level="error")
            return None

    ##########################################
    ############### COMMANDS #################
    ##########################################

    async def replace_url_with_document(self, surface: TextSurfaceInterface) -> bool:
        """
        Replace the Paperless URL under the cursor (or in the selection) with a
        reference to the document's local copy.

        Returns:
            bool: True if the note was changed.
        """
        base_url = self._get_validated_base_url()
        if base_url is None:
            return False

        reference = parse_reference_at_cursor(surface, base_url)
        if reference is None:
            reference = extract_from_selection(surface, base_url)
        if reference is None:
            self._notifier.notify("No Paperless document URL found at the cursor.", level="warning")
            return False

        return await self._insert_reference(surface, reference.document_id, reference.range)

    async def insert_document(self, surface: TextSurfaceInterface, document_id: str) -> bool:
        """
        Insert a reference to a document picked in the browse view at the
        selection or cursor.

        Returns:
            bool: True if the note was changed.
        """
        if self._get_validated_base_url() is None:
            return False
        return await self._insert_reference(surface, document_id, None)

    async def _insert_reference(self, surface: TextSurfaceInterface, document_id: str, text_range: EditorRange | None) -> bool:
        result = await self.materializer.materialize(document_id, self._settings.storage_path)

        if result is not None:
            text = result.reference.render(self._settings.link_template, share_url=result.share_url)
        else:
            policy = self._settings.missing_artifact_policy
            self._notifier.notify(
                f"Could not obtain a share link for document {document_id}.",
                level="warning" if policy != MissingArtifactPolicy.SKIP else "error",
            )
            if policy == MissingArtifactPolicy.SKIP:
                return False
            if policy == MissingArtifactPolicy.LINK:
                text = f"[paperless-{document_id}]({self._dms_client.get_document_details_url(document_id)})"
            else:
                reference = self.materializer.local_reference(document_id, self._settings.storage_path)
                text = reference.render(self._settings.link_template)

        if text_range is not None:
            surface.replace_range(text, text_range)
        else:
            surface.replace_selection(text)
        return True

    async def get_share_link(self, document_id: str) -> ShareLink | None:
        """Resolve the permanent share link of a document without downloading it."""
        if self._get_validated_base_url() is None:
            return None
        return await self.resolver.resolve_share_link(document_id)

    async def refresh_cache(self, silent: bool = True) -> bool:
        """
        Refresh the listing cache.

        Returns:
            bool: True if both listings were replaced.
        """
        if self._get_validated_base_url() is None:
            return False
        if not silent:
            self._notifier.notify("Refreshing paperless cache.")
        try:
            await self.listing_cache.refresh(silent=silent, notifier=self._notifier)
        except TransportError as e:
            self._notifier.notify(f"Paperless cache refresh failed: {e}", level="error")
            return False
        return True

    async def test_connection(self) -> bool:
        base_url = self._get_validated_base_url()
        if base_url is None:
            return False
        self._notifier.notify(f"Testing connection to {base_url}")
        if await self._dms_client.do_test_connection():
            self._notifier.notify("Connection successful")
            return True
        self._notifier.notify(
            f"Failed to connect to {base_url} - check the log for additional information.",
            level="error",
        )
        return False

    ##########################################
    ################ BROWSE ##################
    ##########################################

    async def get_browse_page(self, page: int = 0, page_size: int | None = None, include_thumbnails: bool = True) -> list[DocumentTile]:
        """
        Returns one page of the browse view, newest documents first.

        Tiles are filled concurrently; a failing fetch leaves only its own slot empty.

        Args:
            page (int): Zero-based page number.
            page_size (int | None): Tiles per page, defaults to the configured browse page size.
            include_thumbnails (bool): Whether to fetch thumbnail bytes.
        """
        if self._get_validated_base_url() is None:
            return []
        if not self.listing_cache.is_filled():
            if not await self.refresh_cache(silent=True):
                return []

        size = page_size or self._settings.browse_page_size
        document_ids = self.listing_cache.get_document_ids()[page * size:(page + 1) * size]
        return list(await asyncio.gather(
            *(self._build_tile(document_id, include_thumbnails) for document_id in document_ids)
        ))

    async def _build_tile(self, document_id: str, include_thumbnail: bool) -> DocumentTile:
        tile = DocumentTile(document_id=document_id)

        async def fill_tags() -> None:
            try:
                details = await self._dms_client.do_fetch_document_details(document_id)
            except TransportError as e:
                self.logging.warning("No tags for document %s: %s", document_id, e)
                return
            tile.tags = [tag for tag in (self.listing_cache.get_tag(tag_id) for tag_id in details.tag_ids) if tag]

        async def fill_thumbnail() -> None:
            try:
                tile.thumbnail = await self._dms_client.do_fetch_thumbnail(document_id)
            except TransportError as e:
                self.logging.warning("No thumbnail for document %s: %s", document_id, e)

        if include_thumbnail:
            await asyncio.gather(fill_tags(), fill_thumbnail())
        else:
            await fill_tags()
        return tile

    async def fetch_thumbnail(self, document_id: str) -> bytes:
        """
        Raises:
            TransportError: If the thumbnail could not be fetched.
        """
        return await self._dms_client.do_fetch_thumbnail(document_id)
