"""Generic DMS Tag model — backend-independent."""

from pydantic import BaseModel


class TagBase(BaseModel):
    engine: str
    id: int


class TagDetails(TagBase):
    """
    A tag with the display attributes needed to render it as a badge.
    """
    name: str | None = None
    slug: str | None = None
    color: str | None = None
    text_color: str | None = None
    documents: int | None = None


class TagsListResponse(BaseModel):
    """
    One page of tags as returned by a DMS listing endpoint.
    """
    engine: str
    tags: list[TagDetails] = []
    currentPage: int
    nextPage: int | None = None
    overallCount: int | None = None
