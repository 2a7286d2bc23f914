"""Document and tag listing cache for the browse view.

The cache holds one immutable snapshot. refresh() builds a complete new
snapshot and swaps it in only after both listings were fetched, so a failed
refresh leaves the previous generation untouched. Nothing expires on its own.
"""

import asyncio

from pydantic import BaseModel, ConfigDict

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Tag import TagDetails
from shared.helper.HelperConfig import HelperConfig
from shared.host.NotifierInterface import NotifierInterface


class ListingSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    generation: int
    document_ids: tuple[str, ...] = ()
    tags: dict[int, TagDetails] = {}


class ListingCache:
    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface, notifier: NotifierInterface) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        self._notifier = notifier
        self._snapshot: ListingSnapshot | None = None

    def is_filled(self) -> bool:
        return self._snapshot is not None

    def get_snapshot(self) -> ListingSnapshot | None:
        return self._snapshot

    def get_document_ids(self) -> list[str]:
        """
        Returns the cached document ids, newest (highest id) first.

        Raises:
            RuntimeError: If the cache has never been refreshed.
        """
        if self._snapshot is None:
            raise RuntimeError("Listing cache is not filled yet. Call refresh() first.")
        return sorted(self._snapshot.document_ids, key=_numeric_key, reverse=True)

    def get_tag(self, tag_id: int) -> TagDetails | None:
        if self._snapshot is None:
            return None
        return self._snapshot.tags.get(tag_id)

    async def refresh(self, silent: bool = True, notifier: NotifierInterface | None = None) -> None:
        """
        Replace the cached listings with fresh ones from the DMS.

        Args:
            silent (bool): If False, report the result to the user.
            notifier (NotifierInterface | None): Overrides the cache's own notifier for this call.

        Raises:
            TransportError: If either listing could not be fetched. The cache keeps its previous state.
        """
        results = await asyncio.gather(
            self._dms_client.do_fetch_document_ids(),
            self._dms_client.do_fetch_tags(),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                self.logging.error("Listing cache refresh failed, keeping generation %s: %s", self._snapshot.generation if self._snapshot else None, result)
                raise result
        document_ids, tags = results
        generation = self._snapshot.generation + 1 if self._snapshot else 1
        self._snapshot = ListingSnapshot(
            generation=generation,
            document_ids=tuple(document_ids),
            tags={tag.id: tag for tag in tags},
        )
        self.logging.info(
            "Listing cache generation %d: %d documents, %d tags",
            generation,
            len(document_ids),
            len(tags),
        )
        if not silent:
            (notifier or self._notifier).notify(
                f"Paperless cache refresh completed. Found {len(document_ids)} documents and {len(tags)} tags."
            )


def _numeric_key(document_id: str) -> tuple[int, int | str]:
    # numeric ids sort by value; anything else after them, by text
    if document_id.isdigit():
        return (1, int(document_id))
    return (0, document_id)
