from pydantic import BaseModel

from shared.host.TextSurfaceInterface import EditorPosition, EditorRange


class NoteBufferRequest(BaseModel):
    """The editor buffer of the active note, with cursor and optional selection."""
    text: str
    cursor_line: int = 0
    cursor_ch: int = 0
    selection: EditorRange | None = None

    def get_cursor(self) -> EditorPosition:
        return EditorPosition(line=self.cursor_line, ch=self.cursor_ch)
