"""Share link resolution.

Paperless creates share links asynchronously: the creation response does not
prove the link is listed yet. The resolver therefore treats a successful
re-query of the document's share links as the only confirmation, and polls a
bounded number of times without delay between requests.
"""

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.ShareLink import ShareLink
from shared.errors import TransportError
from shared.helper.HelperConfig import HelperConfig
from shared.models.settings import DEFAULT_SHARE_LINK_RETRIES


class ShareLinkResolver:
    """Returns a permanent share link for a document, creating one when needed."""

    def __init__(
        self,
        helper_config: HelperConfig,
        dms_client: DMSClientInterface,
        max_retries: int = DEFAULT_SHARE_LINK_RETRIES,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}.")
        self._max_retries = max_retries

    ##########################################
    ################ CHECKS ##################
    ##########################################

    async def _find_permanent_link(self, document_id: str) -> ShareLink | None:
        """
        Returns the first listed share link without expiration.

        Transport errors count as "not found yet" for this attempt.
        """
        try:
            links = await self._dms_client.do_fetch_share_links(document_id)
        except TransportError as e:
            self.logging.warning("Could not list share links of document %s: %s", document_id, e)
            return None
        for link in links:
            if link.is_permanent():
                return link
        return None

    async def _request_creation(self, document_id: str) -> None:
        # the server may still have created the link, so a failure here only gets logged
        try:
            await self._dms_client.do_create_share_link(document_id)
            self.logging.debug("Requested share link creation for document %s", document_id)
        except TransportError as e:
            self.logging.error("Share link creation for document %s failed: %s", document_id, e)

    ##########################################
    ############### RESOLVER #################
    ##########################################

    async def resolve_share_link(self, document_id: str) -> ShareLink | None:
        """
        Resolve the permanent share link of a document.

        Steps: look for an existing permanent link; otherwise request creation,
        re-check once, then re-check up to ``max_retries`` more times.

        Args:
            document_id (str): The id of the document on the DMS.

        Returns:
            ShareLink | None: The first permanent link found, or None once all checks are exhausted.
        """
        link = await self._find_permanent_link(document_id)
        if link is not None:
            self.logging.debug("Reusing share link %s for document %s", link.slug, document_id)
            return link

        await self._request_creation(document_id)

        for attempt in range(1 + self._max_retries):
            link = await self._find_permanent_link(document_id)
            if link is not None:
                self.logging.info("Share link for document %s confirmed after %d check(s)", document_id, attempt + 1, color="green")
                return link

        self.logging.warning(
            "No share link for document %s after creation request and %d retries",
            document_id,
            self._max_retries,
        )
        return None
