"""Footnote marker scanner.

Finds ``{{footnote: ...}}`` markers in page text. The body is captured
verbatim; braces inside it only matter for finding the closing ``}}``.

Scanning is a single left-to-right pass tracking brace depth of the
body. No markup inside the body is interpreted, so a nested
``{{footnote:`` inside a body is just text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

OPEN_TOKEN = "{{footnote:"
CLOSE_TOKEN = "}}"


@dataclass(frozen=True, slots=True)
class MarkerOccurrence:
    """A footnote marker located in page text.

    Attributes:
        start: Offset of the opening ``{{`` in the source text.
        end: Offset just past the closing ``}}``.
        body: Text between the delimiters, untouched.
    """

    start: int
    end: int
    body: str


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _find_closing_token(text: str, pos: int) -> int:
    """Find the ``}}`` that closes a marker body starting at *pos*.

    Single braces inside the body nest; a ``}`` at depth 0 that is not
    followed by another ``}`` is ordinary text. If the braces never balance,
    the first ``}}`` after *pos* closes the marker.

    Returns:
        Position of the closing ``}}``, or -1 if the marker is unterminated.
    """
    depth = 0
    for i in range(pos, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            if depth > 0:
                depth -= 1
            elif text.startswith(CLOSE_TOKEN, i):
                return i
    return text.find(CLOSE_TOKEN, pos)


def scan_markers(text: str) -> Iterator[MarkerOccurrence]:
    """Yield footnote markers in *text*, left to right.

    Occurrences never overlap: scanning resumes right after each closing
    token. An unterminated marker ends the scan and stays in the text as-is.

    Example:
        >>> [m.body for m in scan_markers("a{{footnote: b}} c{{footnote:d}}")]
        ['b', 'd']
    """
    cursor = 0
    while True:
        start = text.find(OPEN_TOKEN, cursor)
        if start == -1:
            return

        body_start = _skip_whitespace(text, start + len(OPEN_TOKEN))
        close = _find_closing_token(text, body_start)
        if close == -1:
            logger.debug("Unterminated footnote marker at offset %d", start)
            return

        end = close + len(CLOSE_TOKEN)
        yield MarkerOccurrence(start=start, end=end, body=text[body_start:close])
        cursor = end
