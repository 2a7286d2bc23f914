"""Note router — edits of the active note buffer sent by the editor."""

from fastapi import APIRouter, Depends, Request

from server.dependencies.auth import verify_api_key
from server.dependencies.services import get_note_link_service, get_messages
from server.models.requests import NoteBufferRequest
from server.models.responses import NoteEditResponse
from services.note_link.NoteLinkService import NoteLinkService
from shared.host.BufferTextSurface import BufferTextSurface

note_router = APIRouter()


@note_router.post(
    "/references/replace",
    dependencies=[Depends(verify_api_key)],
    tags=["Note"],
    response_model=NoteEditResponse,
)
async def replace_url_with_document(
    request: Request,
    body: NoteBufferRequest,
    service: NoteLinkService = Depends(get_note_link_service),
) -> NoteEditResponse:
    """Replace the Paperless URL under the cursor with a reference to the local copy.

    Args:
        request (Request): The incoming FastAPI request.
        body (NoteBufferRequest): Note text, cursor and optional selection.

    Returns:
        NoteEditResponse: The (possibly unchanged) note text and user messages.
    """
    surface = BufferTextSurface(body.text, cursor=body.get_cursor(), selection=body.selection)
    changed = await service.replace_url_with_document(surface)
    return NoteEditResponse(text=surface.get_text(), changed=changed, messages=get_messages(request))


@note_router.post(
    "/documents/{document_id}/insert",
    dependencies=[Depends(verify_api_key)],
    tags=["Note"],
    response_model=NoteEditResponse,
)
async def insert_document(
    request: Request,
    document_id: int,
    body: NoteBufferRequest,
    service: NoteLinkService = Depends(get_note_link_service),
) -> NoteEditResponse:
    """Insert a reference to a document chosen in the browse view at the cursor or selection."""
    surface = BufferTextSurface(body.text, cursor=body.get_cursor(), selection=body.selection)
    changed = await service.insert_document(surface, str(document_id))
    return NoteEditResponse(text=surface.get_text(), changed=changed, messages=get_messages(request))
