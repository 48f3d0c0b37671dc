"""Ordered span storage for one document.

Spans are kept sorted by ``(start, id)`` so enumeration is document order
and lookups can bisect on the start offset. Offsets are mutated in place by
the text-edit adapter, which calls :meth:`SpanStore.reindex` once per edit.
"""

from __future__ import annotations

import bisect
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from spanmark.spans.model import Span

logger = logging.getLogger(__name__)


def _sort_key(span: Span) -> tuple[int, int]:
    return (span.start, span.id)


class SpanStore:
    """The set of annotation spans belonging to one open document."""

    def __init__(self) -> None:
        self._spans: list[Span] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._spans)

    def __iter__(self) -> Iterator[Span]:
        return iter(list(self._spans))

    def __bool__(self) -> bool:
        return bool(self._spans)

    def all_spans(self) -> list[Span]:
        """Return every span in document order."""
        return list(self._spans)

    def _candidates_before(self, offset: int) -> list[Span]:
        """Spans whose start is at or before *offset*."""
        cut = bisect.bisect_right(self._spans, offset, key=lambda s: s.start)
        return self._spans[:cut]

    def span_at(self, offset: int) -> Span | None:
        """Return the innermost span containing *offset*, or None.

        Innermost means shortest; equal lengths resolve to the most
        recently created span.
        """
        best: Span | None = None
        for span in self._candidates_before(offset):
            if not span.contains(offset):
                continue
            if best is None or (len(span), -span.id) < (len(best), -best.id):
                best = span
        return best

    def spans_in_range(self, start: int, end: int) -> list[Span]:
        """Return spans intersecting ``[start, end)`` in document order."""
        if end < start:
            start, end = end, start
        cut = bisect.bisect_left(self._spans, end, key=lambda s: s.start)
        return [span for span in self._spans[:cut] if span.intersects(start, end)]

    def insert(self, span: Span) -> Span:
        """Add *span*, assigning it a fresh id."""
        span.id = self._next_id
        self._next_id += 1
        bisect.insort(self._spans, span, key=_sort_key)
        logger.debug("Inserted span %d at [%d, %d)", span.id, span.start, span.end)
        return span

    def remove(self, span: Span) -> bool:
        """Remove *span* by identity; return False if it is not stored."""
        for index, stored in enumerate(self._spans):
            if stored is span:
                del self._spans[index]
                return True
        return False

    def remove_all(self) -> int:
        """Remove every span; return how many were removed."""
        count = len(self._spans)
        self._spans.clear()
        return count

    def reindex(self) -> None:
        """Restore document order after offsets were changed in place."""
        self._spans.sort(key=_sort_key)
