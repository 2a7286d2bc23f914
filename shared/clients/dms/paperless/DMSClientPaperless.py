from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.clients.dms.models.Document import DocumentDetails, DocumentIdsResponse
from shared.clients.dms.models.Tag import TagsListResponse, TagDetails
from shared.clients.dms.models.ShareLink import ShareLink
from datetime import datetime
from urllib.parse import urlparse, parse_qs


class DMSClientPaperless(DMSClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Paperless"

    def get_share_url(self, slug: str) -> str:
        return f"{self._base_url.rstrip('/')}{self._get_endpoint_share(slug)}"

    def get_document_details_url(self, document_id: str) -> str:
        return f"{self._base_url.rstrip('/')}/documents/{document_id}/details"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None)
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Token {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/documents/"

    def _get_endpoint_document_ids(self) -> str:
        return "/api/documents/?format=json"

    def _get_endpoint_tags(self, page: int = 1) -> str:
        plain_url = "/api/tags/?format=json"
        if page and page > 1:
            plain_url += f"&page={page}"
        return plain_url

    def _get_endpoint_document_details(self, document_id: str) -> str:
        return f"/api/documents/{document_id}/?format=json"

    def _get_endpoint_document_thumbnail(self, document_id: str) -> str:
        return f"/api/documents/{document_id}/thumb/"

    def _get_endpoint_document_share_links(self, document_id: str) -> str:
        return f"/api/documents/{document_id}/share_links/?format=json"

    def _get_endpoint_create_share_link(self) -> str:
        return "/api/share_links/"

    def _get_endpoint_share(self, slug: str) -> str:
        return f"/share/{slug}"

    def _get_create_share_link_payload(self, document_id: str) -> dict:
        # paperless expects the numeric primary key
        document = int(document_id) if str(document_id).isdigit() else document_id
        return {"document": document, "file_version": "original"}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_endpoint_document_ids(self, response: dict) -> DocumentIdsResponse:
        # paperless lists every id under "all", independent of the requested page
        ids = [str(doc_id) for doc_id in response.get("all", [])]
        return DocumentIdsResponse(
            engine=self._get_engine_name(),
            document_ids=ids,
            overallCount=response.get("count"),
        )

    def _parse_endpoint_tags(self, response: dict) -> TagsListResponse:
        meta = self._parse_listing_meta(response)
        tags = [self._parse_endpoint_tag(item) for item in response.get("results", [])]
        return TagsListResponse(
            engine=self._get_engine_name(),
            tags=tags,
            currentPage=meta["current_page"],
            nextPage=meta["next_page"],
            overallCount=meta["overall_results_count"],
        )

    def _parse_listing_meta(self, listing_response: dict) -> dict:
        """
        Parse the pagination metadata from a listing response.

        Args:
            listing_response (dict): The raw response from the DMS listing endpoint.

        Returns:
            dict: current_page, next_page and overall_results_count.
        """
        next_url = listing_response.get("next")
        next_page: int | None = None
        if next_url:
            params = parse_qs(urlparse(next_url).query)
            page_values = params.get("page", [])
            if page_values and page_values[0].isdigit():
                next_page = int(page_values[0])
        current_page = next_page - 1 if next_page else 1

        return {
            "current_page": current_page,
            "next_page": next_page,
            "overall_results_count": listing_response.get("count"),
        }

    def _parse_endpoint_tag(self, response: dict) -> TagDetails:
        return TagDetails(
                #base
                engine=self._get_engine_name(),
                id=response.get("id"),

                #details
                name=response.get("name"),
                slug=response.get("slug"),
                color=response.get("color"),
                text_color=response.get("text_color"),
                documents=response.get("document_count")
            )

    def _parse_endpoint_document(self, response: dict) -> DocumentDetails:
        return DocumentDetails(
                #base
                engine=self._get_engine_name(),
                id=str(response.get("id")),

                #details
                title=response.get("title"),
                tag_ids=response.get("tags", []),
                page_count=response.get("page_count"),
                created=self._parse_datetime(response.get("created")),
                mime_type=response.get("mime_type"),
                file_name=response.get("original_file_name")
            )

    def _parse_endpoint_share_link(self, response: dict, document_id: str) -> ShareLink:
        slug = response.get("slug")
        return ShareLink(
                engine=self._get_engine_name(),
                id=response.get("id"),
                document_id=str(response.get("document") or document_id),
                slug=slug,
                url=self.get_share_url(slug),
                expiration=self._parse_datetime(response.get("expiration")),
                file_version=response.get("file_version"),
                created=self._parse_datetime(response.get("created"))
            )

    def _parse_datetime(self, value: str | None) -> datetime | None:
        if not value:
            return None
        # python < 3.11 does not accept the "Z" suffix
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
