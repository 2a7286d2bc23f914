"""Document router — share links and the browse view."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from server.dependencies.auth import verify_api_key
from server.dependencies.services import get_note_link_service
from server.models.responses import ShareLinkResponse, BrowsePageResponse, BrowseTileResponse
from services.note_link.NoteLinkService import NoteLinkService

document_router = APIRouter()


@document_router.get(
    "/documents/{document_id}/share_link",
    dependencies=[Depends(verify_api_key)],
    tags=["Documents"],
    response_model=ShareLinkResponse,
)
async def get_share_link(
    document_id: int,
    service: NoteLinkService = Depends(get_note_link_service),
) -> ShareLinkResponse:
    """Return the permanent share link of a document, creating it if necessary.

    Raises:
        HTTPException: 404 if no share link could be obtained.
    """
    link = await service.get_share_link(str(document_id))
    if link is None:
        raise HTTPException(status_code=404, detail=f"No share link available for document {document_id}.")
    return ShareLinkResponse(document_id=link.document_id, url=link.url, slug=link.slug)


@document_router.get(
    "/documents",
    dependencies=[Depends(verify_api_key)],
    tags=["Documents"],
    response_model=BrowsePageResponse,
)
async def get_browse_page(
    request: Request,
    page: int = 0,
    page_size: int | None = None,
    service: NoteLinkService = Depends(get_note_link_service),
) -> BrowsePageResponse:
    """Return one page of the browse view, newest documents first, with their tags."""
    tiles = await service.get_browse_page(page=page, page_size=page_size, include_thumbnails=False)
    return BrowsePageResponse(
        page=page,
        tiles=[
            BrowseTileResponse(
                document_id=tile.document_id,
                thumbnail_path=str(request.url_for("get_thumbnail", document_id=tile.document_id).path),
                tags=tile.tags,
            )
            for tile in tiles
        ],
    )


@document_router.get(
    "/documents/{document_id}/thumb",
    dependencies=[Depends(verify_api_key)],
    tags=["Documents"],
    name="get_thumbnail",
)
async def get_thumbnail(
    document_id: int,
    service: NoteLinkService = Depends(get_note_link_service),
) -> Response:
    """Proxy the document thumbnail so the editor never needs the Paperless token."""
    data = await service.fetch_thumbnail(str(document_id))
    return Response(content=data, media_type="image/webp")
