"""Keep spans anchored to their text while the document is edited.

Two layers live here:

``TextEditAdapter``
    Observes every insert/delete on the document and renumbers spans, and
    provides span-aware copy, cut and paste.

``EditCommands``
    The editing commands a host binds to keys (copy, kill, yank,
    kill-line). Each command is the host's plain-text behaviour wrapped by
    :func:`span_aware`, which substitutes the span-aware variant only when
    the affected range actually holds spans. Ranges without spans go
    through the plain path unchanged.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

from spanmark.spans.model import CapturedSpan, CopyPayload, Span

if TYPE_CHECKING:
    from spanmark.document import EditEvent
    from spanmark.session import EditingSession

logger = logging.getLogger(__name__)


class TextEditAdapter:
    """Renumbers spans under edits and moves them with copied text."""

    def __init__(self, session: EditingSession) -> None:
        self._session = session

    def on_edit(self, event: EditEvent) -> None:
        """Document observer entry point."""
        if event.kind == "insert":
            self.on_insert(event.at, event.length)
        else:
            self.on_delete(event.at, event.length)

    def on_insert(self, at: int, length: int) -> None:
        """Shift spans for *length* characters inserted at *at*.

        Spans starting at or after *at* move right; a span strictly
        enclosing *at* grows to include the new text.
        """
        store = self._session.store
        changed = False
        for span in store.all_spans():
            if span.start >= at:
                span.start += length
                span.end += length
                changed = True
            elif span.end > at:
                span.end += length
                changed = True
        if changed:
            store.reindex()
            self._session.mark_dirty()

    def on_delete(self, at: int, length: int) -> None:
        """Clip spans against the deleted range ``[at, at + length)``.

        A span that loses all of its text is removed. A span straddling a
        boundary keeps only its surviving text, so ``[10, 20)`` after
        deleting ``(5, 10)`` becomes ``[5, 10)``. Zero-width point markers
        inside the range collapse to *at* and are kept.
        """
        store = self._session.store
        cut_end = at + length
        changed = False
        for span in store.all_spans():
            if span.end <= at and span.start < at:
                continue
            if span.start == span.end == at:
                continue
            was_empty = span.start == span.end
            if span.start < at:
                new_start = span.start
            else:
                new_start = max(at, span.start - length)
            new_end = at if span.end <= cut_end else span.end - length
            changed = True
            if new_end <= new_start and not was_empty:
                store.remove(span)
                logger.debug("Span %d deleted with its text", span.id)
                continue
            span.start = new_start
            span.end = max(new_start, new_end)
        if changed:
            store.reindex()
            self._session.mark_dirty()

    def copy_spans(self, start: int, end: int) -> CopyPayload:
        """Capture ``[start, end)`` with its spans, relative to *start*."""
        start, end = min(start, end), max(start, end)
        captured = tuple(
            CapturedSpan.capture(span, start, end)
            for span in self._session.store.spans_in_range(start, end)
        )
        return CopyPayload(
            text=self._session.document.substring(start, end), spans=captured
        )

    def cut_spans(self, start: int, end: int) -> CopyPayload:
        """Copy ``[start, end)`` then delete the text and its spans."""
        start, end = min(start, end), max(start, end)
        payload = self.copy_spans(start, end)
        self._session.document.delete(start, end - start)
        return payload

    def paste_payload(self, payload: CopyPayload, at: int) -> list[Span]:
        """Insert the payload text at *at* and recreate its spans.

        A payload is used once. Pasting an already consumed payload inserts
        the text only.
        """
        self._session.document.insert(at, payload.text)
        if payload.consumed:
            logger.debug("Payload already pasted; inserted plain text only")
            return []
        payload.consumed = True

        created = [
            self._session.store.insert(captured.materialise(at))
            for captured in payload.spans
        ]
        if created:
            self._session.mark_dirty()
        return created


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

RangeCommand: TypeAlias = Callable[["EditingSession", int, int], object]


def span_aware(
    aware: RangeCommand,
) -> Callable[[RangeCommand], RangeCommand]:
    """Route a range command to *aware* when the range holds a span.

    The decorated function is the host's default behaviour; it runs
    untouched for ranges without spans.
    """

    def decorate(default: RangeCommand) -> RangeCommand:
        @functools.wraps(default)
        def command(session: EditingSession, start: int, end: int) -> object:
            if session.store.spans_in_range(min(start, end), max(start, end)):
                return aware(session, start, end)
            return default(session, start, end)

        return command

    return decorate


def _copy_with_spans(session: EditingSession, start: int, end: int) -> CopyPayload:
    payload = session.edits.copy_spans(start, end)
    session.remember(payload)
    return payload


def _kill_with_spans(session: EditingSession, start: int, end: int) -> CopyPayload:
    payload = session.edits.cut_spans(start, end)
    session.remember(payload)
    return payload


@span_aware(_copy_with_spans)
def copy_region(session: EditingSession, start: int, end: int) -> str:
    """Host default: put the plain text on the kill ring."""
    text = session.document.substring(min(start, end), max(start, end))
    session.remember_text(text)
    return text


@span_aware(_kill_with_spans)
def kill_region(session: EditingSession, start: int, end: int) -> str:
    """Host default: kill the plain text."""
    start, end = min(start, end), max(start, end)
    text = session.document.delete(start, end - start)
    session.remember_text(text)
    return text


class EditCommands:
    """Clipboard commands for one session, span-aware where it matters."""

    def __init__(self, session: EditingSession) -> None:
        self._session = session

    def _region(self) -> tuple[int, int] | None:
        return self._session.document.selection()

    def copy(self) -> object:
        """Copy the active selection; no-op without one."""
        region = self._region()
        if region is None:
            return None
        return copy_region(self._session, *region)

    def cut(self) -> object:
        """Kill the active selection; no-op without one."""
        region = self._region()
        if region is None:
            return None
        self._session.document.deselect()
        return kill_region(self._session, *region)

    def kill_line(self) -> object:
        """Kill from point to end of line, or the newline when at line end."""
        document = self._session.document
        start, end = document.line_bounds_at(document.point)
        if start == end:
            return None
        return kill_region(self._session, start, end)

    def paste(self, at: int | None = None) -> list[Span]:
        """Yank at *at* (default: point).

        With a pending payload from a span-aware copy, the text and its
        spans are inserted and the payload is consumed. Otherwise the
        newest kill-ring text is inserted as plain text.
        """
        session = self._session
        at = session.document.point if at is None else at
        payload = session.last_payload
        if payload is not None and not payload.consumed:
            created = session.edits.paste_payload(payload, at)
            session.last_payload = None
            return created
        if session.kill_ring:
            session.document.insert(at, session.kill_ring[-1])
        return []
