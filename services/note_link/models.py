"""Models exchanged between the note-link services."""

from pydantic import BaseModel

from shared.clients.dms.models.Tag import TagDetails
from shared.host.TextSurfaceInterface import EditorRange


class DocumentReference(BaseModel):
    """A document id found in the note, with the text range it was read from."""
    document_id: str
    range: EditorRange | None = None


class LocalReference(BaseModel):
    """
    The local copy of a document inside the vault. Named deterministically
    from the document id, so one document maps to exactly one file.
    """
    document_id: str
    filename: str
    path: str

    def render(self, template: str, share_url: str | None = None) -> str:
        """
        Renders the text inserted into the note.

        Supported placeholders: {filename}, {document_id}, {path}, {share_url}.
        """
        return template.format(
            filename=self.filename,
            document_id=self.document_id,
            path=self.path,
            share_url=share_url or "",
        )


class MaterializeResult(BaseModel):
    """Outcome of a materialize call: the reference and whether this call downloaded it."""
    reference: LocalReference
    downloaded: bool = False
    share_url: str | None = None


class DocumentTile(BaseModel):
    """One entry of the browse view. Empty slots mean the fetch for that slot failed."""
    document_id: str
    tags: list[TagDetails] = []
    thumbnail: bytes | None = None
