"""Command-line utilities for inspecting and exporting annotated files.

Subcommands:
    list    Show the spans stored in a file.
    export  Render a file and its spans to HTML.
    check   Verify that a file's stored span data decodes.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from spanmark import __version__, _setup_logging
from spanmark.config import get_settings
from spanmark.export.html import render_document_as_styled_markup
from spanmark.listing import list_view
from spanmark.session import SessionRegistry
from spanmark.spans.codec import CorruptDataError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spanmark",
        description="Inspect and export highlights stored in plain-text files.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List the spans stored in a file.")
    list_cmd.add_argument("file", type=Path)

    export_cmd = sub.add_parser("export", help="Render a file to HTML.")
    export_cmd.add_argument("file", type=Path)
    export_cmd.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output path. Defaults to the input path with an .html suffix.",
    )
    export_cmd.add_argument("--title", help="Page title (default: EXPORT__TITLE).")

    check_cmd = sub.add_parser("check", help="Verify stored span data decodes.")
    check_cmd.add_argument("file", type=Path)
    return parser


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _cmd_list(args: argparse.Namespace) -> int:
    session = SessionRegistry().open(str(args.file), _read(args.file))
    rows = list_view(session)
    if not rows:
        console.print(f"[yellow]No spans in {args.file}[/]")
        return 0

    table = Table(title=str(args.file))
    table.add_column("Pos", justify="right")
    table.add_column("Kind")
    table.add_column("Text")
    table.add_column("Note")
    for row in rows:
        table.add_row(str(row.position), row.kind, row.display_text, row.note)
    console.print(table)
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = SessionRegistry().open(str(args.file), _read(args.file))
    output = args.output or args.file.with_suffix(".html")
    html = render_document_as_styled_markup(
        session.body,
        session.store.all_spans(),
        title=args.title or settings.export.title,
        font_family=settings.export.font_family,
    )
    output.write_text(html, encoding="utf-8")
    console.print(f"[green]Wrote[/] {output} ({len(session.store)} spans)")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    try:
        session = SessionRegistry().open(str(args.file), _read(args.file), strict=True)
    except CorruptDataError as exc:
        err_console.print(f"[red]Corrupt span data in {args.file}:[/] {exc}")
        return 1
    console.print(f"[green]OK[/] {args.file}: {len(session.store)} spans")
    return 0


_COMMANDS = {
    "list": _cmd_list,
    "export": _cmd_export,
    "check": _cmd_check,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``spanmark`` command."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    _setup_logging(settings.app.log_dir, settings.app.log_level)

    try:
        return _COMMANDS[args.command](args)
    except OSError as exc:
        err_console.print(f"[red]{exc}[/]")
        logger.debug("Command %s failed", args.command, exc_info=True)
        return 2


if __name__ == "__main__":
    sys.exit(main())
