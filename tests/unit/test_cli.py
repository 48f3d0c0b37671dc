"""Tests for the spanmark command-line entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from rich.console import Console

from spanmark import cli

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path

    from spanmark.session import EditingSession

CORRUPT_TEXT = "body\n# spanmark: load\n# spanmark-data: SM1.5.AAAA\n"


@pytest.fixture(autouse=True)
def _no_log_files() -> Generator[None]:
    with patch("spanmark.cli._setup_logging"):
        yield


@pytest.fixture
def out(monkeypatch: pytest.MonkeyPatch) -> Console:
    """Wide recording consoles so rich never wraps the output under test."""
    console = Console(record=True, width=200)
    monkeypatch.setattr(cli, "console", console)
    monkeypatch.setattr(cli, "err_console", console)
    return console


@pytest.fixture
def annotated_file(
    tmp_path: Path, make_session: Callable[..., EditingSession]
) -> Path:
    session = make_session()
    session.mutator.apply_decoration("bold", 4, 9)
    session.mutator.apply_decoration("comment", 10, 15)
    path = tmp_path / "doc.txt"
    path.write_text(session.save(), encoding="utf-8")
    return path


class TestList:
    def test_lists_spans(self, annotated_file: Path, out: Console) -> None:
        assert cli.main(["list", str(annotated_file)]) == 0

        text = out.export_text()
        assert "quick" in text
        assert "brown" in text
        assert "a note" in text

    def test_file_without_spans(self, tmp_path: Path, out: Console) -> None:
        path = tmp_path / "plain.txt"
        path.write_text("nothing here\n", encoding="utf-8")

        assert cli.main(["list", str(path)]) == 0

        assert "No spans" in out.export_text()


class TestExport:
    def test_default_output_path(self, annotated_file: Path, out: Console) -> None:
        assert cli.main(["export", str(annotated_file)]) == 0

        html = annotated_file.with_suffix(".html").read_text(encoding="utf-8")
        assert "font-weight: bold" in html
        assert 'title="a note"' in html
        assert "spanmark-data" not in html
        assert "Wrote" in out.export_text()

    def test_explicit_output_and_title(
        self, annotated_file: Path, tmp_path: Path, out: Console
    ) -> None:
        target = tmp_path / "page.html"

        code = cli.main(
            ["export", str(annotated_file), "-o", str(target), "--title", "Draft"]
        )

        assert code == 0
        assert "<title>Draft</title>" in target.read_text(encoding="utf-8")


class TestCheck:
    def test_valid_file(self, annotated_file: Path, out: Console) -> None:
        assert cli.main(["check", str(annotated_file)]) == 0

        assert "2 spans" in out.export_text()

    def test_corrupt_file(self, tmp_path: Path, out: Console) -> None:
        path = tmp_path / "bad.txt"
        path.write_text(CORRUPT_TEXT, encoding="utf-8")

        assert cli.main(["check", str(path)]) == 1

        assert "Corrupt span data" in out.export_text()

    def test_missing_file(self, tmp_path: Path, out: Console) -> None:
        assert cli.main(["check", str(tmp_path / "absent.txt")]) == 2


class TestParser:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.main([])
