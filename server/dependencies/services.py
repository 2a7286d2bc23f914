from fastapi import Request

from shared.host.LoggingNotifier import MemoryNotifier
from services.note_link.NoteLinkService import NoteLinkService


def get_note_link_service(request: Request) -> NoteLinkService:
    """Build a NoteLinkService for one request.

    The service shares the client, file store and listing cache of the app,
    but collects its notifications in ``request.state.notifier`` so they can be
    returned to the caller.
    """
    notifier = MemoryNotifier()
    request.state.notifier = notifier
    state = request.app.state
    return NoteLinkService(
        helper_config=state.helper_config,
        settings=state.settings,
        dms_client=state.dms_client,
        file_store=state.file_store,
        notifier=notifier,
        listing_cache=state.listing_cache,
    )


def get_messages(request: Request) -> list[str]:
    notifier = getattr(request.state, "notifier", None)
    if notifier is None:
        return []
    return [message for _, message in notifier.messages]
