"""Data types for annotation spans and copy payloads."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Span:
    """A decorated, position-tracked range of document text.

    Attributes:
        start: Start offset (inclusive) in the live document.
        end: End offset (exclusive).
        style: Attribute name to value, e.g. ``{"weight": "bold"}``.
        kind: Registry kind that last created or extended this span.
        note: Optional free-text annotation.
        interactive: True when the note is meant to be edited in place.
        id: Store-assigned identity; not persisted and not compared.
    """

    start: int
    end: int
    style: dict[str, Any] = field(default_factory=dict)
    kind: str = ""
    note: str | None = None
    interactive: bool = False
    id: int = field(default=0, compare=False)

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def intersects(self, start: int, end: int) -> bool:
        """True if this span overlaps ``[start, end)``.

        A zero-width span intersects when its position lies in the range.
        """
        if self.start == self.end:
            return start <= self.start < end
        return self.start < end and self.end > start


@dataclass(frozen=True)
class CapturedSpan:
    """A span recorded by a copy, positioned relative to the copied text."""

    relative_start: int
    relative_end: int
    style: dict[str, Any]
    kind: str
    note: str | None
    interactive: bool

    @classmethod
    def capture(cls, span: Span, start: int, end: int) -> CapturedSpan:
        """Clip *span* to ``[start, end)`` and rebase it onto *start*."""
        return cls(
            relative_start=max(span.start, start) - start,
            relative_end=min(span.end, end) - start,
            style=copy.deepcopy(span.style),
            kind=span.kind,
            note=span.note,
            interactive=span.interactive,
        )

    def materialise(self, at: int) -> Span:
        return Span(
            start=at + self.relative_start,
            end=at + self.relative_end,
            style=copy.deepcopy(self.style),
            kind=self.kind,
            note=self.note,
            interactive=self.interactive,
        )


@dataclass
class CopyPayload:
    """Text plus relative span data from one copy or cut; pasted at most once."""

    text: str
    spans: tuple[CapturedSpan, ...] = ()
    consumed: bool = False
