"""Share link model — a slug-addressed URL granting bearer-less access to a document file."""

from datetime import datetime

from pydantic import BaseModel


class ShareLink(BaseModel):
    """
    A share link as issued by the DMS. A link without expiration is the
    canonical, reusable one.
    """
    engine: str
    id: int | None = None
    document_id: str
    slug: str
    url: str
    expiration: datetime | None = None
    file_version: str | None = None
    created: datetime | None = None

    def is_permanent(self) -> bool:
        return self.expiration is None
