from abc import ABC, abstractmethod

from pydantic import BaseModel


class EditorPosition(BaseModel):
    line: int
    ch: int


class EditorRange(BaseModel):
    start: EditorPosition
    end: EditorPosition


class TextSurfaceInterface(ABC):
    """
    The editing surface of the active note. Lines and characters are zero-based.
    """

    @abstractmethod
    def get_selection(self) -> str:
        """Returns the currently selected text, or an empty string."""
        pass

    @abstractmethod
    def get_cursor(self) -> EditorPosition:
        pass

    @abstractmethod
    def get_line(self, line: int) -> str:
        pass

    @abstractmethod
    def get_range(self, text_range: EditorRange) -> str:
        pass

    @abstractmethod
    def replace_range(self, replacement: str, text_range: EditorRange) -> None:
        pass

    @abstractmethod
    def replace_selection(self, replacement: str) -> None:
        """Replaces the selection, or inserts at the cursor when nothing is selected."""
        pass
