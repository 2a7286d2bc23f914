"""Finds Paperless document references in note text.

Two URL shapes are recognised, both rooted at the configured base URL:

    <base>/api/documents/<id>/preview
    <base>/documents/<id>/details
"""

import re

from shared.host.TextSurfaceInterface import TextSurfaceInterface, EditorPosition, EditorRange
from shared.models.settings import validate_base_url
from services.note_link.models import DocumentReference

_WORD_REGEX = re.compile(r"\S+")


def _build_pattern(base_url: str) -> re.Pattern:
    base = re.escape(validate_base_url(base_url))
    return re.compile(
        base + r"/(?:api/documents/(?P<preview_id>\d+)/preview|documents/(?P<details_id>\d+)/details)"
    )


def extract_document_id(text: str, base_url: str) -> str | None:
    """
    Returns the document id referenced by a preview or details URL in ``text``.

    Args:
        text (str): Text that may contain a document URL.
        base_url (str): The configured Paperless base URL.

    Returns:
        str | None: The id, or None if neither URL shape is present.

    Raises:
        ConfigurationError: If the base URL is malformed.
    """
    if not text:
        return None
    match = _build_pattern(base_url).search(text)
    if match is None:
        return None
    return match.group("preview_id") or match.group("details_id")


def word_at_cursor(line: str, ch: int) -> tuple[int, int] | None:
    """
    Returns the bounds of the whitespace-delimited token containing column ``ch``.
    A cursor directly before or after a token counts as inside it.
    """
    for match in _WORD_REGEX.finditer(line):
        if match.start() <= ch <= match.end():
            return match.start(), match.end()
    return None


def parse_reference_at_cursor(surface: TextSurfaceInterface, base_url: str) -> DocumentReference | None:
    """
    Reads the token under the cursor and extracts a document reference from it.

    Returns:
        DocumentReference | None: The id plus the range of the token, or None.
    """
    cursor = surface.get_cursor()
    bounds = word_at_cursor(surface.get_line(cursor.line), cursor.ch)
    if bounds is None:
        return None
    text_range = EditorRange(
        start=EditorPosition(line=cursor.line, ch=bounds[0]),
        end=EditorPosition(line=cursor.line, ch=bounds[1]),
    )
    document_id = extract_document_id(surface.get_range(text_range), base_url)
    if document_id is None:
        return None
    return DocumentReference(document_id=document_id, range=text_range)


def extract_from_selection(surface: TextSurfaceInterface, base_url: str) -> DocumentReference | None:
    """
    Extracts a document reference from the current selection. The returned
    reference has no range; the selection itself is what gets replaced.
    """
    document_id = extract_document_id(surface.get_selection(), base_url)
    if document_id is None:
        return None
    return DocumentReference(document_id=document_id)
