"""In-memory text buffer standing in for the host editor.

Offsets are Python string indices. Every mutation is reported to observers
as an :class:`EditEvent` after the text has changed, so observers always
see the post-edit buffer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Callable

_WORD_RE = re.compile(r"\w+")


@dataclass(frozen=True)
class EditEvent:
    """A single insertion or deletion applied to a document."""

    kind: Literal["insert", "delete"]
    at: int
    length: int


class TextDocument:
    """Plain-text buffer with a point, an optional mark and edit hooks.

    Attributes:
        point: Cursor offset.
        mark: Other end of the active selection, or None.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self.point = 0
        self.mark: int | None = None
        self._observers: list[Callable[[EditEvent], None]] = []

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def observe(self, callback: Callable[[EditEvent], None]) -> None:
        """Register a callback invoked after each insert or delete."""
        self._observers.append(callback)

    def unobserve(self, callback: Callable[[EditEvent], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: EditEvent) -> None:
        for callback in list(self._observers):
            callback(event)

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._text)))

    # --- Selection ---

    def select(self, start: int, end: int) -> None:
        """Activate a selection with the mark at *start* and point at *end*."""
        self.mark = self._clamp(start)
        self.point = self._clamp(end)

    def deselect(self) -> None:
        self.mark = None

    def selection(self) -> tuple[int, int] | None:
        """Return the active selection as an ordered range, or None."""
        if self.mark is None or self.mark == self.point:
            return None
        return min(self.mark, self.point), max(self.mark, self.point)

    # --- Reading ---

    def substring(self, start: int, end: int) -> str:
        return self._text[self._clamp(start) : self._clamp(end)]

    def word_bounds_at(self, offset: int) -> tuple[int, int] | None:
        """Return the bounds of the word containing or ending at *offset*.

        A word touching the offset from the left (point just after the last
        letter) counts, mirroring how editors resolve "word at point".
        Returns None when no word touches the offset.
        """
        text = self._text
        offset = self._clamp(offset)
        start = offset
        while start > 0 and _is_word_char(text[start - 1]):
            start -= 1
        end = offset
        while end < len(text) and _is_word_char(text[end]):
            end += 1
        if start == end:
            return None
        return start, end

    def line_bounds_at(self, offset: int) -> tuple[int, int]:
        """Return ``(offset, end_of_line)``; at end of line, include the newline."""
        offset = self._clamp(offset)
        newline = self._text.find("\n", offset)
        if newline == -1:
            return offset, len(self._text)
        if newline == offset:
            return offset, offset + 1
        return offset, newline

    # --- Editing ---

    def insert(self, at: int, text: str) -> None:
        """Insert *text* at *at* and notify observers."""
        if not text:
            return
        at = self._clamp(at)
        self._text = self._text[:at] + text + self._text[at:]
        if self.point >= at:
            self.point += len(text)
        if self.mark is not None and self.mark > at:
            self.mark += len(text)
        self._notify(EditEvent("insert", at, len(text)))

    def delete(self, at: int, length: int) -> str:
        """Delete *length* characters starting at *at*; return the removed text."""
        at = self._clamp(at)
        end = self._clamp(at + length)
        if end <= at:
            return ""
        removed = self._text[at:end]
        self._text = self._text[:at] + self._text[end:]
        self.point = _shift_for_delete(self.point, at, end)
        if self.mark is not None:
            self.mark = _shift_for_delete(self.mark, at, end)
        self._notify(EditEvent("delete", at, end - at))
        return removed

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace ``[start, end)`` with *text* as a delete followed by an insert."""
        self.delete(start, end - start)
        self.insert(start, text)


def _is_word_char(char: str) -> bool:
    return _WORD_RE.match(char) is not None


def _shift_for_delete(offset: int, start: int, end: int) -> int:
    if offset <= start:
        return offset
    if offset >= end:
        return offset - (end - start)
    return start
