from abc import abstractmethod
from typing import Any, Callable, TypeVar

import httpx

from shared.helper.HelperConfig import HelperConfig
from shared.clients.ClientInterface import ClientInterface
from shared.clients.dms.models.Document import DocumentDetails, DocumentIdsResponse
from shared.clients.dms.models.Tag import TagDetails, TagsListResponse
from shared.clients.dms.models.ShareLink import ShareLink
from shared.errors import TransportError

T = TypeVar("T")

class DMSClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "dms"

    @abstractmethod
    def get_share_url(self, slug: str) -> str:
        """
        Returns the absolute URL behind a share link slug.

        Args:
            slug (str): The slug issued by the DMS for the share link.

        Returns:
            str: The public URL of the shared file (e.g. "https://dms.example.com/share/abc")
        """
        pass

    @abstractmethod
    def get_document_details_url(self, document_id: str) -> str:
        """
        Returns the absolute URL of the document's page in the DMS web UI.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_document_ids(self) -> str:
        """
        Returns the endpoint path for the full document id listing (e.g. "/api/documents/?format=json")
        """
        pass

    @abstractmethod
    def _get_endpoint_tags(self, page: int = 1) -> str:
        """
        Returns the endpoint path for one page of the tag listing.

        Args:
            page (int): The page number for paginated tag listing.
        """
        pass

    @abstractmethod
    def _get_endpoint_document_details(self, document_id: str) -> str:
        pass

    @abstractmethod
    def _get_endpoint_document_thumbnail(self, document_id: str) -> str:
        pass

    @abstractmethod
    def _get_endpoint_document_share_links(self, document_id: str) -> str:
        """
        Returns the endpoint path listing the share links of one document.
        """
        pass

    @abstractmethod
    def _get_endpoint_create_share_link(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_share(self, slug: str) -> str:
        """
        Returns the endpoint path serving the file behind a share link (e.g. "/share/<slug>")
        """
        pass

    @abstractmethod
    def _get_create_share_link_payload(self, document_id: str) -> dict:
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    ############# LISTING REQUESTS ##############
    async def do_fetch_document_ids(self) -> list[str]:
        """
        Fetches the ids of all documents from the dms backend.

        Returns:
            list[str]: All document ids in server order.

        Raises:
            TransportError: If the request fails.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_document_ids())
        ids_response = self._parse_response(resp, self._parse_endpoint_document_ids)
        self.logging.info("Fetched %d document ids from %s", len(ids_response.document_ids), self._get_engine_name())
        return ids_response.document_ids

    async def do_fetch_tags(self) -> list[TagDetails]:
        """
        Fetches all tags from the dms backend, following pagination.

        Returns:
            list[TagDetails]: All tags of the backend.

        Raises:
            TransportError: If any page request fails.
        """
        tags: list[TagDetails] = []
        page = 1
        while True:
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_tags(page=page))
            tags_list_response = self._parse_response(resp, self._parse_endpoint_tags)
            tags.extend(tags_list_response.tags)
            self.logging.debug("Fetched tags page %d from %s, total tags so far: %d of %s", page, self._get_engine_name(), len(tags), tags_list_response.overallCount)
            page = tags_list_response.nextPage
            if not page:
                break
        return tags

    ############# GET REQUESTS ##############
    async def do_fetch_document_details(self, document_id: str) -> DocumentDetails:
        """
        Fetches the metadata of a document (title, tags, page count).

        Raises:
            TransportError: If the request fails.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_document_details(document_id))
        return self._parse_response(resp, self._parse_endpoint_document)

    async def do_fetch_thumbnail(self, document_id: str) -> bytes:
        """
        Fetches the thumbnail image of a document.

        Raises:
            TransportError: If the request fails.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_document_thumbnail(document_id))
        return resp.content

    async def do_test_connection(self) -> bool:
        """
        Checks that the backend answers a document listing with our credentials.

        Returns:
            bool: True if the listing could be read, False on any transport error or unexpected body.
        """
        try:
            resp = await self.do_healthcheck()
            body = resp.json()
        except (TransportError, ValueError) as e:
            self.logging.error("Connection test against %s failed: %s", self.get_base_url(), e)
            return False
        return isinstance(body, dict) and "results" in body

    ############# SHARE LINKS ##############
    async def do_fetch_share_links(self, document_id: str) -> list[ShareLink]:
        """
        Fetches the existing share links of a document.

        Returns:
            list[ShareLink]: The share links in the order the server lists them.

        Raises:
            TransportError: If the request fails.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_document_share_links(document_id))
        return self._parse_response(resp, self._parse_endpoint_share_links, document_id)

    async def do_create_share_link(self, document_id: str) -> ShareLink | None:
        """
        Asks the backend to create a permanent share link for the original file.

        The creation is not guaranteed to be visible in the listing right away,
        so callers confirm it with do_fetch_share_links().

        Returns:
            ShareLink | None: The link described in the response body, if the body carries one.

        Raises:
            TransportError: If the request fails.
        """
        resp = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_create_share_link(),
            json=self._get_create_share_link_payload(document_id),
        )
        try:
            body = resp.json()
        except ValueError:
            return None
        if not isinstance(body, dict) or not body.get("slug"):
            return None
        try:
            return self._parse_endpoint_share_link(body, document_id)
        except (ValueError, TypeError, AttributeError) as e:
            self.logging.warning("Unexpected share link creation response from %s: %s", self._get_engine_name(), e)
            return None

    async def do_download_share_link(self, share_link: ShareLink) -> bytes:
        """
        Downloads the file behind a share link.

        Raises:
            TransportError: If the request fails.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_share(share_link.slug))
        return resp.content

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_response(self, resp: httpx.Response, parser: Callable[..., T], *args: Any) -> T:
        """
        Decodes a JSON response body and hands it to a parser.

        Raises:
            TransportError: If the body is not JSON or does not have the expected shape,
                e.g. a login page served by a proxy with status 200.
        """
        try:
            return parser(resp.json(), *args)
        except (ValueError, TypeError, AttributeError) as e:
            # pydantic's ValidationError and json's JSONDecodeError are ValueErrors
            url = str(resp.request.url)
            self.logging.error("Unexpected response body from %s: %s", url, e)
            raise TransportError(url=url, status_code=resp.status_code, body=resp.text) from e

    @abstractmethod
    def _parse_endpoint_document_ids(self, response: dict) -> DocumentIdsResponse:
        pass

    @abstractmethod
    def _parse_endpoint_tags(self, response: dict) -> TagsListResponse:
        """
        Parses one page of the tag listing.

        Args:
            response (dict): The raw response from the tag listing endpoint.
        Returns:
            TagsListResponse: The tags of the page and the number of the next page, if any.
        """
        pass

    @abstractmethod
    def _parse_endpoint_document(self, response: dict) -> DocumentDetails:
        pass

    @abstractmethod
    def _parse_endpoint_share_link(self, response: dict, document_id: str) -> ShareLink:
        pass

    def _parse_endpoint_share_links(self, response: list | dict, document_id: str) -> list[ShareLink]:
        """
        Parses a share link listing. Accepts a bare list or a paginated body with "results".
        """
        items = response.get("results", []) if isinstance(response, dict) else response
        return [self._parse_endpoint_share_link(item, document_id) for item in items]
