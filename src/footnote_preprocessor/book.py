"""mdBook preprocessor envelope.

mdBook runs a preprocessor with ``[context, book]`` as JSON on stdin and
expects the processed book as JSON on stdout. The book is a tree of items:

- ``{"Chapter": {"content": ..., "sub_items": [...], ...}}``
- ``{"PartTitle": "..."}``
- ``"Separator"``

Only chapter ``content`` is rewritten; everything else round-trips as
received, so fields this module does not know about survive.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from footnote_preprocessor.rewriter import transform

if TYPE_CHECKING:
    from collections.abc import Iterator

    from footnote_preprocessor.rewriter import RenderingMode

logger = logging.getLogger(__name__)


class MalformedInputError(Exception):
    """The host handed us input that is not a valid mdBook envelope."""


class PreprocessorContext(BaseModel):
    """The context object mdBook passes alongside the book."""

    model_config = ConfigDict(extra="allow")

    root: Path
    config: dict[str, Any]
    renderer: str
    mdbook_version: str


def parse_input(raw: str) -> tuple[PreprocessorContext, dict[str, Any]]:
    """Decode the ``[context, book]`` pair mdBook writes to stdin.

    Raises:
        MalformedInputError: If the JSON or its shape is invalid.
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Unable to parse the input: {exc}"
        raise MalformedInputError(msg) from exc

    if not isinstance(payload, list) or len(payload) != 2:
        msg = "Expected a JSON array of [context, book]"
        raise MalformedInputError(msg)

    raw_context, book = payload
    try:
        context = PreprocessorContext.model_validate(raw_context)
    except ValidationError as exc:
        msg = f"Invalid preprocessor context: {exc}"
        raise MalformedInputError(msg) from exc

    if not isinstance(book, dict) or not isinstance(book.get("sections"), list):
        msg = "Book must be an object with a 'sections' list"
        raise MalformedInputError(msg)

    return context, book


def iter_chapters(items: list[Any]) -> Iterator[dict[str, Any]]:
    """Yield every chapter in *items*, depth-first in document order."""
    for item in items:
        if not isinstance(item, dict) or "Chapter" not in item:
            continue  # Separator / PartTitle
        chapter = item["Chapter"]
        if not isinstance(chapter, dict):
            msg = f"Chapter must be an object, got {type(chapter).__name__}"
            raise MalformedInputError(msg)
        yield chapter
        sub_items = chapter.get("sub_items", [])
        if not isinstance(sub_items, list):
            msg = f"Chapter {chapter.get('name')!r} has non-list sub_items"
            raise MalformedInputError(msg)
        yield from iter_chapters(sub_items)


def preprocess_book(book: dict[str, Any], mode: RenderingMode) -> dict[str, Any]:
    """Expand footnote markers in every chapter of *book*, in place.

    Each chapter is its own page: footnote numbering restarts at 1.

    Returns:
        The same book object, for chaining into serialisation.

    Raises:
        MalformedInputError: If a chapter's content is not a string.
    """
    count = 0
    for chapter in iter_chapters(book["sections"]):
        content = chapter.get("content")
        if not isinstance(content, str):
            msg = f"Chapter {chapter.get('name')!r} has no text content"
            raise MalformedInputError(msg)
        chapter["content"] = transform(content, mode)
        count += 1

    logger.info("Processed %d chapter(s) with %s footnotes", count, mode.value)
    return book


def _version_series(version: str) -> tuple[str, ...]:
    return tuple(version.split("-", 1)[0].split(".")[:2])


def check_mdbook_version(context: PreprocessorContext, supported: str) -> bool:
    """Warn if mdBook's version is outside the supported major.minor series.

    A mismatch is not fatal; the envelope format is stable within a series
    and usually across them.

    Returns:
        True if the versions are in the same series.
    """
    if _version_series(context.mdbook_version) == _version_series(supported):
        return True
    logger.warning(
        "The footnote preprocessor was written against mdbook %s, "
        "but we're being called from version %s",
        supported,
        context.mdbook_version,
    )
    return False
