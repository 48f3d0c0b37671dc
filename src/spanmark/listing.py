"""Navigable index of the spans in a session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from spanmark.session import ViewState

if TYPE_CHECKING:
    from spanmark.session import EditingSession


@dataclass(frozen=True)
class SpanRow:
    """One line of the span list."""

    display_text: str
    note: str
    position: int
    kind: str


def _one_line(text: str, width: int) -> str:
    flat = " ".join(text.split())
    if len(flat) <= width:
        return flat
    return flat[: max(width - 1, 0)] + "…"


def list_view(session: EditingSession, width: int | None = None) -> list[SpanRow]:
    """Project the session's spans into display rows, in document order."""
    width = session.settings.listing.display_width if width is None else width
    document = session.document
    return [
        SpanRow(
            display_text=_one_line(document.substring(span.start, span.end), width),
            note=span.note or "",
            position=span.start,
            kind=span.kind,
        )
        for span in session.store.all_spans()
    ]


def jump_to(session: EditingSession, position: int) -> None:
    """Move point to *position*, saving the current view for restore_view."""
    document = session.document
    session.saved_view = ViewState(point=document.point, mark=document.mark)
    document.deselect()
    document.point = max(0, min(position, len(document)))


def restore_view(session: EditingSession) -> bool:
    """Return to the view saved by the last jump; False if none was saved."""
    view = session.saved_view
    if view is None:
        return False
    document = session.document
    document.point = min(view.point, len(document))
    document.mark = None if view.mark is None else min(view.mark, len(document))
    session.saved_view = None
    return True
