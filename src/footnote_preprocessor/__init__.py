"""footnote-preprocessor - numbered, cross-linked footnotes for mdBook.

Expands ``{{footnote: ...}}`` markers in chapter text into superscript
references and appends a linked footnote list to each chapter.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from footnote_preprocessor.config import LogConfig

__version__ = "0.1.0"


def _setup_logging(config: LogConfig) -> None:
    """Configure logging to stderr and, optionally, a rotating file.

    stdout belongs to mdBook, so no handler may ever write to it.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Console handler - stderr, level from config
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(config.level)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if config.file is None:
        return

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    config.file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    logging.debug("Logging configured. Log file: %s", config.file.absolute())
