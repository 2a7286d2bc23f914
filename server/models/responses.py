from pydantic import BaseModel

from shared.clients.dms.models.Tag import TagDetails


class NoteEditResponse(BaseModel):
    text: str
    changed: bool
    messages: list[str] = []


class ShareLinkResponse(BaseModel):
    document_id: str
    url: str
    slug: str


class BrowseTileResponse(BaseModel):
    document_id: str
    thumbnail_path: str
    tags: list[TagDetails] = []


class BrowsePageResponse(BaseModel):
    page: int
    tiles: list[BrowseTileResponse]


class CacheRefreshResponse(BaseModel):
    refreshed: bool
    generation: int | None = None
    documents: int = 0
    tags: int = 0
    messages: list[str] = []


class ConnectionResponse(BaseModel):
    connected: bool
    messages: list[str] = []
