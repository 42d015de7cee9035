"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import Any

import pytest

from tests.helpers.envelopes import make_chapter


@pytest.fixture
def sample_sections() -> list[Any]:
    """Two top-level chapters (one nested child), a part title and a separator."""
    return [
        {"PartTitle": "Part One"},
        make_chapter(
            "Intro",
            "Normal text{{footnote: Or is it?}} in body.",
            sub_items=[make_chapter("Nested", "Deep{{footnote: down}}.")],
        ),
        "Separator",
        make_chapter("Plain", "No footnotes here."),
    ]
