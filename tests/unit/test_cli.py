"""Tests for the footnote-preprocessor command line.

Verifies the mdBook protocol: ``supports`` exit codes, stdin -> stdout
preprocessing, and exit status 1 with a stderr message on bad input.
"""

from __future__ import annotations

import io
import json
from typing import Any
from unittest.mock import patch

import pytest

from footnote_preprocessor import __version__
from footnote_preprocessor.cli import main
from tests.helpers.envelopes import make_envelope


@pytest.fixture(autouse=True)
def _no_logging_setup():
    """Keep main() from attaching handlers to the root logger."""
    with patch("footnote_preprocessor.cli._setup_logging"):
        yield


def _run_with_stdin(monkeypatch: pytest.MonkeyPatch, data: str) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(data))
    main([])


class TestSupports:
    """``supports <renderer>`` signals support through the exit status."""

    @pytest.mark.parametrize("renderer", ["html", "markdown", "epub"])
    def test_supported(self, renderer: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["supports", renderer])
        assert exc_info.value.code == 0

    def test_not_supported(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["supports", "not-supported"])
        assert exc_info.value.code == 1

    def test_renderer_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["supports"])
        assert exc_info.value.code == 2

    def test_configured_unsupported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOOTNOTE_MDBOOK__UNSUPPORTED_RENDERERS", '["latex"]')
        with pytest.raises(SystemExit) as exc_info:
            main(["supports", "latex"])
        assert exc_info.value.code == 1


class TestVersion:
    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestPreprocessing:
    """No subcommand: read [context, book] from stdin, write the book to stdout."""

    def test_html_by_default(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        sample_sections: list[Any],
    ) -> None:
        _run_with_stdin(monkeypatch, make_envelope(sample_sections))
        book = json.loads(capsys.readouterr().out)

        intro = book["sections"][1]["Chapter"]
        assert "<hr/>" in intro["content"]
        assert intro["content"].endswith(
            '<p><a name="footnote-1"></a><a href="#to-footnote-1">1</a>: Or is it?</p>\n'
        )
        nested = intro["sub_items"][0]["Chapter"]
        assert ": down</p>" in nested["content"]
        assert book["sections"][3]["Chapter"]["content"] == "No footnotes here."
        assert book["__non_exhaustive"] is None

    def test_markdown_from_book_toml(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        sample_sections: list[Any],
    ) -> None:
        config = {"preprocessor": {"footnote": {"markdown": True}}}
        _run_with_stdin(monkeypatch, make_envelope(sample_sections, config=config))
        book = json.loads(capsys.readouterr().out)

        content = book["sections"][1]["Chapter"]["content"]
        assert "\n\n---\n\n" in content
        assert content.endswith("[1](#to-footnote-1): Or is it?\n")

    def test_version_mismatch_still_processes(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        sample_sections: list[Any],
    ) -> None:
        raw = make_envelope(sample_sections, mdbook_version="0.9.0")
        _run_with_stdin(monkeypatch, raw)
        book = json.loads(capsys.readouterr().out)
        assert "<hr/>" in book["sections"][1]["Chapter"]["content"]

    @pytest.mark.parametrize("raw", ["", "not json", '[{"root": "/"}, {}]'])
    def test_malformed_input_exits_1(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        raw: str,
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _run_with_stdin(monkeypatch, raw)
        assert exc_info.value.code == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error:" in captured.err


class TestHostInputErrors:
    """Bad bytes on stdin or bad settings end in an Error: line, exit 1."""

    def test_invalid_utf8_on_stdin(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        stdin = io.TextIOWrapper(io.BytesIO(b'[{"root": "\xff\xfe"}, {}]'), "utf-8")
        monkeypatch.setattr("sys.stdin", stdin)
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error:" in captured.err
        assert "UTF-8" in captured.err
        assert "Traceback" not in captured.err

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("FOOTNOTE_LOG__LEVEL", "chatty"),
            ("FOOTNOTE_RENDER__MARKDOWN", "perhaps"),
        ],
    )
    def test_invalid_settings(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        name: str,
        value: str,
    ) -> None:
        monkeypatch.setenv(name, value)
        with pytest.raises(SystemExit) as exc_info:
            main(["supports", "html"])
        assert exc_info.value.code == 1

        captured = capsys.readouterr()
        assert "Error:" in captured.err
        assert "Invalid settings" in captured.err
        assert "Traceback" not in captured.err
