"""Commands that create, extend and remove spans.

Every operation here degrades to a no-op when it has no target (no word at
point, no span to clear, a cancelled prompt) instead of raising.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from spanmark.spans.model import Span
from spanmark.spans.styles import (
    FONT_SIZE_KIND,
    StyleCancelled,
    StyleContext,
)

if TYPE_CHECKING:
    from spanmark.session import EditingSession
    from spanmark.spans.store import SpanStore

logger = logging.getLogger(__name__)

# Each step changes the size by at least one point: 12 -> 13 -> 12, 5 -> 6.
_GROW = (11, 10)
_SHRINK = (9, 10)


def scale_font_size(size: int, delta: int) -> int:
    """Scale *size* one step up (``delta > 0``) or down, rounding to an int."""
    if delta > 0:
        numerator, denominator = _GROW
        return max(size + 1, round(size * numerator / denominator))
    numerator, denominator = _SHRINK
    return max(1, min(size - 1, round(size * numerator / denominator)))


class SpanMutator:
    """Decoration commands for one editing session."""

    def __init__(self, session: EditingSession) -> None:
        self._session = session

    @property
    def _store(self) -> SpanStore:
        return self._session.store

    def _target_range(
        self, start: int | None, end: int | None
    ) -> tuple[int, int] | None:
        """Explicit range, else the active selection, else the word at point."""
        document = self._session.document
        if start is not None and end is not None and start != end:
            return min(start, end), max(start, end)
        selection = document.selection()
        if selection is not None:
            return selection
        return document.word_bounds_at(document.point)

    def _merge_anchor(self, target: tuple[int, int]) -> int:
        point = self._session.document.point
        if target[0] <= point < target[1]:
            return point
        return target[0]

    def _apply(
        self,
        target: tuple[int, int],
        kind: str,
        style: dict[str, Any],
        extra: dict[str, Any],
        existing: Span | None,
    ) -> Span:
        if existing is not None:
            existing.style.update(style)
            _apply_extra(existing, extra)
            existing.kind = kind
            span = existing
            logger.debug("Merged %s into span %d", kind, span.id)
        else:
            span = Span(start=target[0], end=target[1], style=dict(style), kind=kind)
            _apply_extra(span, extra)
            self._store.insert(span)
        self._session.mark_dirty()
        return span

    def apply_decoration(
        self, kind: str, start: int | None = None, end: int | None = None
    ) -> Span | None:
        """Decorate a range with *kind*, merging into an existing span at point.

        Returns the created or extended span, or None if there was no target
        or the user cancelled a prompt.

        Raises:
            KeyError: If *kind* is not registered.
        """
        target = self._target_range(start, end)
        if target is None:
            logger.debug("No target for %s; nothing decorated", kind)
            return None

        existing = self._store.span_at(self._merge_anchor(target))
        context = StyleContext(
            prompter=self._session.prompter,
            note=(existing.note or "") if existing is not None else "",
        )
        try:
            resolved = self._session.registry.resolve(kind, context)
        except StyleCancelled:
            logger.debug("Prompt cancelled while applying %s", kind)
            return None
        return self._apply(
            target, resolved.kind, resolved.style, resolved.extra, existing
        )

    def resize_font(
        self,
        delta: int,
        explicit_size: int | None = None,
        start: int | None = None,
        end: int | None = None,
    ) -> Span | None:
        """Grow (``delta > 0``) or shrink the font of the span at point.

        The new ``height`` is *explicit_size* when given, else the current
        height (or the configured default size) scaled one step.
        """
        target = self._target_range(start, end)
        if target is None:
            return None

        existing = self._store.span_at(self._merge_anchor(target))
        if explicit_size is not None:
            size = max(1, int(explicit_size))
        else:
            base = self._session.settings.style.default_font_size
            if existing is not None and "height" in existing.style:
                base = int(existing.style["height"])
            size = scale_font_size(base, delta)
        return self._apply(target, FONT_SIZE_KIND, {"height": size}, {}, existing)

    def set_note(self, note: str | None, offset: int | None = None) -> Span | None:
        """Replace the note on the span at *offset* (default: point).

        An empty or None note clears it. The span becomes interactive.
        """
        offset = self._session.document.point if offset is None else offset
        span = self._store.span_at(offset)
        if span is None:
            return None
        span.note = note or None
        span.interactive = True
        self._session.mark_dirty()
        return span

    def clear(self, offset: int | None = None) -> bool:
        """Remove the span at *offset* (default: point); False if none."""
        offset = self._session.document.point if offset is None else offset
        span = self._store.span_at(offset)
        if span is None:
            return False
        self._store.remove(span)
        self._session.mark_dirty()
        return True

    def clear_all(self) -> int:
        """Remove every span; return the number removed."""
        count = self._store.remove_all()
        self._session.mark_dirty()
        return count


def _apply_extra(span: Span, extra: dict[str, Any]) -> None:
    if "note" in extra:
        span.note = extra["note"] or None
    if "interactive" in extra:
        span.interactive = bool(extra["interactive"])
