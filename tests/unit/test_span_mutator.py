"""Unit tests for SpanMutator decoration commands.

Positions refer to SAMPLE_TEXT in conftest:
"The quick brown fox jumps over the lazy dog." -> quick=[4,9), brown=[10,15).
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from spanmark.config import Settings, StyleConfig
from spanmark.spans.mutator import scale_font_size
from spanmark.spans.styles import NoPrompter
from tests.conftest import StubPrompter

if TYPE_CHECKING:
    from collections.abc import Callable

    from spanmark.session import EditingSession


def _ranges(session: EditingSession) -> list[tuple[int, int]]:
    return [(s.start, s.end) for s in session.store.all_spans()]


class TestApplyDecoration:
    """apply_decoration targets and creation."""

    def test_word_at_point_is_target(self, session: EditingSession) -> None:
        session.document.point = 6

        span = session.mutator.apply_decoration("bold")

        assert span is not None
        assert (span.start, span.end) == (4, 9)
        assert span.style == {"weight": "bold"}
        assert span.kind == "bold"

    def test_point_just_after_word_uses_that_word(
        self, session: EditingSession
    ) -> None:
        session.document.point = 9

        span = session.mutator.apply_decoration("italic")

        assert span is not None
        assert (span.start, span.end) == (4, 9)

    def test_explicit_range(self, session: EditingSession) -> None:
        span = session.mutator.apply_decoration("yellow", 10, 19)

        assert span is not None
        assert (span.start, span.end) == (10, 19)
        assert session.document.substring(10, 19) == "brown fox"

    def test_active_selection_is_target(self, session: EditingSession) -> None:
        session.document.select(4, 15)

        span = session.mutator.apply_decoration("green")

        assert span is not None
        assert (span.start, span.end) == (4, 15)

    def test_no_word_is_silent_noop(
        self, make_session: Callable[..., EditingSession]
    ) -> None:
        session = make_session("   ...   ")
        session.document.point = 1

        assert session.mutator.apply_decoration("bold") is None
        assert len(session.store) == 0
        assert session.dirty is False

    def test_cancelled_prompt_is_noop(
        self, make_session: Callable[..., EditingSession]
    ) -> None:
        session = make_session(prompter=StubPrompter(color=None))
        session.document.point = 5

        assert session.mutator.apply_decoration("background") is None
        assert len(session.store) == 0
        assert session.dirty is False

    def test_cancelled_prompt_leaves_existing_span_untouched(
        self, make_session: Callable[..., EditingSession]
    ) -> None:
        session = make_session(prompter=NoPrompter())
        session.document.point = 5
        span = session.mutator.apply_decoration("yellow")
        assert span is not None

        assert session.mutator.apply_decoration("comment") is None
        assert span.style == {"background-color": "#FFFF00"}
        assert span.note is None
        assert span.kind == "yellow"

    def test_unknown_kind_raises(self, session: EditingSession) -> None:
        session.document.point = 5

        with pytest.raises(KeyError):
            session.mutator.apply_decoration("nope")


class TestMergeRules:
    """Applying at an existing span composes instead of overlapping."""

    def test_idempotent(self, session: EditingSession) -> None:
        session.document.point = 5
        session.mutator.apply_decoration("bold")
        once = [(s.start, s.end, dict(s.style), s.kind) for s in session.store]

        session.mutator.apply_decoration("bold")
        twice = [(s.start, s.end, dict(s.style), s.kind) for s in session.store]

        assert once == twice
        assert len(session.store) == 1

    def test_compose_unions_attributes(self, session: EditingSession) -> None:
        session.document.point = 5
        session.mutator.apply_decoration("yellow")

        span = session.mutator.apply_decoration("bold")

        assert len(session.store) == 1
        assert span is not None
        assert span.style == {"background-color": "#FFFF00", "weight": "bold"}
        assert span.kind == "bold"

    def test_later_value_wins_for_same_attribute(
        self, session: EditingSession
    ) -> None:
        session.document.point = 5
        session.mutator.apply_decoration("yellow")

        span = session.mutator.apply_decoration("pink")

        assert span is not None
        assert span.style == {"background-color": "#FFC0CB"}

    def test_merge_keeps_bounds(self, session: EditingSession) -> None:
        span = session.mutator.apply_decoration("yellow", 4, 19)
        session.document.point = 11

        merged = session.mutator.apply_decoration("bold")

        assert merged is span
        assert _ranges(session) == [(4, 19)]

    def test_merge_with_selection_anchors_at_selection_start(
        self, session: EditingSession
    ) -> None:
        session.mutator.apply_decoration("yellow", 10, 15)
        session.document.select(10, 15)

        session.mutator.apply_decoration("italic")

        assert len(session.store) == 1

    def test_comment_sets_note_and_interactive(
        self, session: EditingSession, prompter: StubPrompter
    ) -> None:
        session.document.point = 5
        prompter.note = "check this"

        span = session.mutator.apply_decoration("comment")

        assert span is not None
        assert span.note == "check this"
        assert span.interactive is True

    def test_typo_on_existing_span_overwrites_note(
        self, session: EditingSession
    ) -> None:
        session.document.point = 5
        session.mutator.apply_decoration("comment")

        span = session.mutator.apply_decoration("typo")

        assert span is not None
        assert span.note == "typo"
        assert span.style["background-color"] == "#DB7093"


class TestResizeFont:
    """resize_font scaling and rounding."""

    def test_scale_rule(self) -> None:
        assert scale_font_size(12, +1) == 13
        assert scale_font_size(13, -1) == 12
        assert scale_font_size(100, +1) == 110
        assert scale_font_size(110, -1) == 99

    def test_never_below_one(self) -> None:
        assert scale_font_size(1, -1) == 1
        assert scale_font_size(2, -1) == 1

    def test_small_sizes_still_change(self) -> None:
        assert scale_font_size(5, +1) == 6
        assert scale_font_size(1, +1) == 2
        assert scale_font_size(9, +1) == 10
        assert scale_font_size(5, -1) == 4

    def test_increase_from_small_explicit_size(
        self, session: EditingSession
    ) -> None:
        session.document.point = 5
        span = session.mutator.resize_font(0, explicit_size=5)
        assert span is not None

        session.mutator.resize_font(+1)

        assert span.style["height"] == 6

    def test_new_span_uses_default_size(
        self, make_session: Callable[..., EditingSession]
    ) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            style=StyleConfig(default_font_size=20),
        )
        session = make_session(settings=settings)
        session.document.point = 5

        span = session.mutator.resize_font(+1)

        assert span is not None
        assert span.style == {"height": 22}
        assert span.kind == "font-size"

    def test_increase_then_decrease_returns_to_start(
        self, session: EditingSession
    ) -> None:
        session.document.point = 5
        span = session.mutator.resize_font(0, explicit_size=12)
        assert span is not None

        session.mutator.resize_font(+1)
        assert span.style["height"] == 13
        session.mutator.resize_font(-1)

        assert span.style["height"] == 12
        assert len(session.store) == 1

    def test_explicit_size_overrides(self, session: EditingSession) -> None:
        session.document.point = 5
        session.mutator.apply_decoration("bold")

        span = session.mutator.resize_font(+1, explicit_size=30)

        assert span is not None
        assert span.style == {"weight": "bold", "height": 30}

    def test_no_word_is_noop(
        self, make_session: Callable[..., EditingSession]
    ) -> None:
        session = make_session("  ")

        assert session.mutator.resize_font(+1) is None


class TestClear:
    """clear, clear_all and set_note."""

    def test_clear_removes_exactly_one(self, session: EditingSession) -> None:
        session.mutator.apply_decoration("bold", 4, 9)
        session.mutator.apply_decoration("bold", 10, 15)
        listener = MagicMock()
        session.add_listener(listener)

        assert session.mutator.clear(5) is True

        assert _ranges(session) == [(10, 15)]
        listener.assert_called_once_with(session)

    def test_clear_without_span_is_noop(self, session: EditingSession) -> None:
        listener = MagicMock()
        session.add_listener(listener)

        assert session.mutator.clear(5) is False
        listener.assert_not_called()

    def test_clear_all_empties_store(self, session: EditingSession) -> None:
        session.mutator.apply_decoration("bold", 4, 9)
        session.mutator.apply_decoration("bold", 10, 15)
        listener = MagicMock()
        session.add_listener(listener)

        assert session.mutator.clear_all() == 2

        assert len(session.store) == 0
        listener.assert_called_once_with(session)
        assert session.dirty is True

    def test_clear_all_on_empty_store_still_marks_dirty(
        self, session: EditingSession
    ) -> None:
        listener = MagicMock()
        session.add_listener(listener)

        assert session.mutator.clear_all() == 0

        listener.assert_called_once_with(session)
        assert session.dirty is True

    def test_set_note(self, session: EditingSession) -> None:
        session.mutator.apply_decoration("yellow", 4, 9)

        span = session.mutator.set_note("line one\nline two", 6)

        assert span is not None
        assert span.note == "line one\nline two"
        assert span.interactive is True

    def test_set_note_empty_clears(self, session: EditingSession) -> None:
        session.mutator.apply_decoration("typo", 4, 9)

        span = session.mutator.set_note("", 6)

        assert span is not None
        assert span.note is None

    def test_set_note_without_span_is_noop(self, session: EditingSession) -> None:
        assert session.mutator.set_note("x", 30) is None
