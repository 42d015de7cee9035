"""Shared pytest fixtures for footnote-preprocessor tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from footnote_preprocessor.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop FOOTNOTE_* env vars and the cached Settings around each test."""
    for key in list(os.environ):
        if key.startswith("FOOTNOTE_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
