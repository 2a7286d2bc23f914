from shared.host.TextSurfaceInterface import TextSurfaceInterface, EditorPosition, EditorRange


class BufferTextSurface(TextSurfaceInterface):
    """
    In-memory text surface holding a whole note. Backs the HTTP API, where the
    editor sends its buffer and cursor and receives the edited buffer back.
    """

    def __init__(self, text: str, cursor: EditorPosition | None = None, selection: EditorRange | None = None):
        self._lines = text.split("\n")
        self._cursor = cursor or EditorPosition(line=0, ch=0)
        self._selection = selection

    def get_text(self) -> str:
        return "\n".join(self._lines)

    def get_selection(self) -> str:
        if self._selection is None:
            return ""
        return self.get_range(self._selection)

    def get_cursor(self) -> EditorPosition:
        return self._cursor

    def get_line(self, line: int) -> str:
        if line < 0 or line >= len(self._lines):
            return ""
        return self._lines[line]

    def _to_offset(self, pos: EditorPosition) -> int:
        line = min(max(pos.line, 0), len(self._lines) - 1)
        offset = sum(len(l) + 1 for l in self._lines[:line])
        return offset + min(max(pos.ch, 0), len(self._lines[line]))

    def _to_position(self, offset: int) -> EditorPosition:
        line = 0
        for text in self._lines:
            if offset <= len(text):
                break
            offset -= len(text) + 1
            line += 1
        return EditorPosition(line=line, ch=offset)

    def get_range(self, text_range: EditorRange) -> str:
        text = self.get_text()
        return text[self._to_offset(text_range.start):self._to_offset(text_range.end)]

    def replace_range(self, replacement: str, text_range: EditorRange) -> None:
        text = self.get_text()
        start = self._to_offset(text_range.start)
        end = self._to_offset(text_range.end)
        self._lines = (text[:start] + replacement + text[end:]).split("\n")
        self._selection = None
        self._cursor = self._to_position(start + len(replacement))

    def replace_selection(self, replacement: str) -> None:
        text_range = self._selection or EditorRange(start=self._cursor, end=self._cursor)
        self.replace_range(replacement, text_range)
