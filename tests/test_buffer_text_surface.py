from shared.host.BufferTextSurface import BufferTextSurface
from shared.host.TextSurfaceInterface import EditorPosition, EditorRange


def _range(l1, c1, l2, c2):
    return EditorRange(start=EditorPosition(line=l1, ch=c1), end=EditorPosition(line=l2, ch=c2))


def test_replace_range_within_line():
    surface = BufferTextSurface("one two three\nfour")
    surface.replace_range("2", _range(0, 4, 0, 7))

    assert surface.get_text() == "one 2 three\nfour"
    assert surface.get_cursor() == EditorPosition(line=0, ch=5)


def test_replace_range_across_lines():
    surface = BufferTextSurface("ab\ncd\nef")
    surface.replace_range("X", _range(0, 1, 2, 1))

    assert surface.get_text() == "aXf"


def test_replace_selection_without_selection_inserts_at_cursor():
    surface = BufferTextSurface("hello\nworld", cursor=EditorPosition(line=1, ch=0))
    surface.replace_selection(">> ")

    assert surface.get_text() == "hello\n>> world"


def test_selection_is_replaced_and_cleared():
    surface = BufferTextSurface("keep drop keep", selection=_range(0, 5, 0, 9))

    assert surface.get_selection() == "drop"
    surface.replace_selection("new")

    assert surface.get_text() == "keep new keep"
    assert surface.get_selection() == ""


def test_get_line_out_of_bounds_is_empty():
    surface = BufferTextSurface("only")
    assert surface.get_line(3) == ""
