"""Centralised configuration using pydantic-settings.

Process-level settings come from ``FOOTNOTE_*`` environment variables
(and an optional ``.env`` in the working directory). Consumers call
``get_settings()`` for a cached, validated instance. Tests construct
``Settings(_env_file=None, ...)`` directly for isolation.

The book's own ``book.toml`` arrives inside the mdBook context and takes
precedence for the rendering mode; see ``resolve_rendering_mode()``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from footnote_preprocessor.rewriter import RenderingMode

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class RenderConfig(BaseModel):
    """Output dialect fallback when book.toml does not set one."""

    markdown: bool = False


class MdbookConfig(BaseModel):
    """How this preprocessor presents itself to mdBook."""

    preprocessor_name: str = "footnote"
    # major.minor series the envelope format was written against
    supported_version: str = "0.4"
    unsupported_renderers: list[str] = ["not-supported"]


class LogConfig(BaseModel):
    """Logging destinations. stdout is reserved for the book JSON."""

    level: str = "WARNING"
    file: Path | None = None

    @field_validator("level")
    @classmethod
    def level_is_known(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value!r}"
            raise ValueError(msg)
        return level


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Preprocessor settings with .env loading and type validation.

    Environment variables use a ``FOOTNOTE_`` prefix and double-underscore
    nesting: ``FOOTNOTE_RENDER__MARKDOWN``, ``FOOTNOTE_LOG__LEVEL``, etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="FOOTNOTE_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    render: RenderConfig = RenderConfig()
    mdbook: MdbookConfig = MdbookConfig()
    log: LogConfig = LogConfig()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    return Settings()


# ---------------------------------------------------------------------------
# book.toml lookups
# ---------------------------------------------------------------------------
def lookup(config: dict[str, Any], key: str) -> Any:
    """Look up a dotted key (``"preprocessor.footnote.markdown"``) in book.toml.

    Returns None if any segment is missing or a non-table is traversed.
    """
    node: Any = config
    for segment in key.split("."):
        if not isinstance(node, dict) or segment not in node:
            return None
        node = node[segment]
    return node


def resolve_rendering_mode(
    book_config: dict[str, Any], settings: Settings
) -> RenderingMode:
    """Pick the output dialect for this run.

    ``[preprocessor.<name>] markdown = true`` selects Markdown and
    ``false`` selects HTML. Anything else (missing, or not a boolean)
    falls back to ``settings.render.markdown``, which defaults to HTML.
    """
    key = f"preprocessor.{settings.mdbook.preprocessor_name}.markdown"
    value = lookup(book_config, key)
    if isinstance(value, bool):
        return RenderingMode.from_flag(value)
    if value is not None:
        logger.warning("Ignoring non-boolean %s = %r", key, value)
    return RenderingMode.from_flag(settings.render.markdown)
