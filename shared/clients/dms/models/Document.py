"""Generic DMS document models — backend-independent."""

from datetime import datetime

from pydantic import BaseModel


class DocumentBase(BaseModel):
    """
    Identifies a single document on a DMS. Ids are kept as strings since they
    are assigned by the server and only ever referenced, never computed with.
    """
    engine: str
    id: str


class DocumentDetails(DocumentBase):
    """
    Document metadata as shown next to a thumbnail in the browse view.
    """
    title: str | None = None
    tag_ids: list[int] = []
    page_count: int | None = None
    created: datetime | None = None
    mime_type: str | None = None
    file_name: str | None = None


class DocumentIdsResponse(BaseModel):
    """
    The full id listing of a DMS, independent of pagination.
    """
    engine: str
    document_ids: list[str] = []
    overallCount: int | None = None
