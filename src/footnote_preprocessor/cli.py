"""Command-line entry point for the mdBook footnote preprocessor.

Usage:
    footnote-preprocessor                      # preprocess: stdin -> stdout
    footnote-preprocessor supports <renderer>  # exit 0 if supported, else 1

mdBook calls ``supports`` first and skips the preprocessor for renderers
that exit non-zero.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from footnote_preprocessor import __version__, _setup_logging
from footnote_preprocessor.book import (
    MalformedInputError,
    check_mdbook_version,
    parse_input,
    preprocess_book,
)
from footnote_preprocessor.config import get_settings, resolve_rendering_mode

if TYPE_CHECKING:
    from typing import TextIO

    from footnote_preprocessor.config import Settings

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the preprocessor."""
    parser = argparse.ArgumentParser(
        prog="footnote-preprocessor",
        description="An mdbook preprocessor which expands footnote markers.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    sub = parser.add_subparsers(dest="command")

    supports_p = sub.add_parser(
        "supports",
        help="Check whether a renderer is supported by this preprocessor",
    )
    supports_p.add_argument("renderer", help="Renderer name, e.g. html")

    return parser


def supports_renderer(renderer: str, settings: Settings) -> bool:
    """Return True unless *renderer* is listed as unsupported in settings."""
    return renderer not in settings.mdbook.unsupported_renderers


def run_preprocessor(stdin: TextIO, stdout: TextIO, settings: Settings) -> None:
    """Read ``[context, book]`` from *stdin*, write the processed book to *stdout*.

    The rendering mode is resolved once from the book's config before any
    chapter is touched.

    Raises:
        MalformedInputError: If the input is not a valid mdBook envelope.
    """
    try:
        raw = stdin.read()
    except UnicodeDecodeError as exc:
        msg = f"Input is not valid UTF-8: {exc}"
        raise MalformedInputError(msg) from exc

    context, book = parse_input(raw)
    check_mdbook_version(context, settings.mdbook.supported_version)

    mode = resolve_rendering_mode(context.config, settings)
    logger.debug("Renderer %s, footnote mode %s", context.renderer, mode.value)

    json.dump(preprocess_book(book, mode), stdout)


def _report_error(message: str) -> None:
    console.print(f"[red]Error:[/] {escape(message)}", highlight=False)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``footnote-preprocessor`` script."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        _report_error(f"Invalid settings: {exc}")
        sys.exit(1)
    _setup_logging(settings.log)

    match args.command:
        case "supports":
            # Signal support to mdBook with the exit status alone
            sys.exit(0 if supports_renderer(args.renderer, settings) else 1)
        case _:
            try:
                run_preprocessor(sys.stdin, sys.stdout, settings)
            except (MalformedInputError, OSError) as exc:
                _report_error(str(exc))
                sys.exit(1)


if __name__ == "__main__":
    main()
