"""Page rewriter: numbered, cross-linked footnotes.

Replaces each footnote marker on a page with a superscript reference and
appends the footnote list after a horizontal rule. Numbering starts at 1
on every page.

Each footnote gets two anchors: ``to-footnote-N`` at the reference in
the text and ``footnote-N`` at the entry in the list. The reference links
to the entry and the entry links back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from footnote_preprocessor.markers import scan_markers

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class RenderingMode(Enum):
    """Output dialect for generated footnote markup."""

    HTML = "html"
    MARKDOWN = "markdown"

    @classmethod
    def from_flag(cls, markdown: bool) -> RenderingMode:
        return cls.MARKDOWN if markdown else cls.HTML


@dataclass(frozen=True, slots=True)
class FootnoteEntry:
    """A numbered footnote collected from one page."""

    number: int
    body: str


@dataclass(frozen=True, slots=True)
class _Dialect:
    reference: str
    rule: str
    entry: str


# Placeholders: {n} number, {ref} reference anchor, {note} footnote anchor,
# {body} footnote text
_DIALECTS: dict[RenderingMode, _Dialect] = {
    RenderingMode.HTML: _Dialect(
        reference='<sup><a name="{ref}"></a><a href="#{note}">{n}</a></sup>',
        rule="<hr/>",
        entry='<p><a name="{note}"></a><a href="#{ref}">{n}</a>: {body}</p>',
    ),
    RenderingMode.MARKDOWN: _Dialect(
        reference='<sup><a name="{ref}"></a>[{n}](#{note})</sup>',
        rule="---",
        entry='<a name="{note}"></a>[{n}](#{ref}): {body}',
    ),
}


def reference_anchor(number: int) -> str:
    """Anchor name at the reference in the text (the back-link target)."""
    return f"to-footnote-{number}"


def footnote_anchor(number: int) -> str:
    """Anchor name at the footnote list entry."""
    return f"footnote-{number}"


def _placeholders(number: int) -> dict[str, object]:
    return {
        "n": number,
        "ref": reference_anchor(number),
        "note": footnote_anchor(number),
    }


def render_reference(number: int, mode: RenderingMode) -> str:
    """Render the inline superscript reference for footnote *number*."""
    return _DIALECTS[mode].reference.format(**_placeholders(number))


def render_entry(entry: FootnoteEntry, mode: RenderingMode) -> str:
    """Render one footnote list entry.

    The body is inserted as given, without escaping.
    """
    # body may contain braces, so it never goes through str.format
    head, tail = _DIALECTS[mode].entry.split("{body}")
    return head.format(**_placeholders(entry.number)) + entry.body + tail


def render_footer(entries: Sequence[FootnoteEntry], mode: RenderingMode) -> str:
    """Render the rule and footnote list appended to a page.

    Returns an empty string when there are no entries.
    """
    if not entries:
        return ""
    lines = [_DIALECTS[mode].rule]
    lines.extend(render_entry(entry, mode) for entry in entries)
    return "\n\n" + "\n\n".join(lines) + "\n"


def transform(page_text: str, mode: RenderingMode) -> str:
    """Rewrite footnote markers on one page.

    Pure function: numbering and the entry list are local to this call,
    so pages can be processed in any order or in parallel.

    Args:
        page_text: Raw page content.
        mode: Output dialect.

    Returns:
        The page with markers replaced by numbered references and the
        footnote list appended, or *page_text* unchanged if it has no
        markers.
    """
    occurrences = list(scan_markers(page_text))
    if not occurrences:
        return page_text

    parts: list[str] = []
    entries: list[FootnoteEntry] = []
    cursor = 0
    for number, occurrence in enumerate(occurrences, start=1):
        parts.append(page_text[cursor : occurrence.start])
        parts.append(render_reference(number, mode))
        entries.append(FootnoteEntry(number=number, body=occurrence.body))
        cursor = occurrence.end
    parts.append(page_text[cursor:])

    logger.debug("Rendered %d footnote(s) as %s", len(entries), mode.value)
    return "".join(parts) + render_footer(entries, mode)
