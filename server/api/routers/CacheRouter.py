"""Cache router — listing cache refresh and connection test."""

from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.dependencies.services import get_note_link_service, get_messages
from server.models.responses import CacheRefreshResponse, ConnectionResponse
from services.note_link.NoteLinkService import NoteLinkService

cache_router = APIRouter()


@cache_router.post(
    "/cache/refresh",
    dependencies=[Depends(verify_api_key)],
    tags=["Cache"],
    response_model=CacheRefreshResponse,
)
async def refresh_cache(
    request: Request,
    silent: bool = False,
    service: NoteLinkService = Depends(get_note_link_service),
) -> CacheRefreshResponse:
    """Replace the document and tag listing cache with fresh data from Paperless."""
    refreshed = await service.refresh_cache(silent=silent)
    snapshot = service.listing_cache.get_snapshot()
    if snapshot is None:
        return CacheRefreshResponse(refreshed=refreshed, messages=get_messages(request))
    return CacheRefreshResponse(
        refreshed=refreshed,
        generation=snapshot.generation,
        documents=len(snapshot.document_ids),
        tags=len(snapshot.tags),
        messages=get_messages(request),
    )


@cache_router.get(
    "/connection",
    dependencies=[Depends(verify_api_key)],
    tags=["Cache"],
    response_model=ConnectionResponse,
)
async def test_connection(
    request: Request,
    service: NoteLinkService = Depends(get_note_link_service),
) -> ConnectionResponse:
    """Check that Paperless answers with the configured credentials."""
    connected = await service.test_connection()
    return ConnectionResponse(connected=connected, messages=get_messages(request))
