"""Shared pytest fixtures for spanmark tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from spanmark.config import Settings, get_settings
from spanmark.document import TextDocument
from spanmark.session import EditingSession

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

SAMPLE_TEXT = "The quick brown fox jumps over the lazy dog.\nSecond line here.\n"


class StubPrompter:
    """Prompter returning canned answers; None answers mean "cancel"."""

    def __init__(
        self,
        color: str | None = "#123456",
        font: str | None = "Georgia",
        note: str | None = "a note",
    ) -> None:
        self.color = color
        self.font = font
        self.note = note
        self.calls: list[tuple[str, str]] = []

    def choose_color(self, prompt: str) -> str | None:
        self.calls.append(("color", prompt))
        return self.color

    def choose_font(self, prompt: str) -> str | None:
        self.calls.append(("font", prompt))
        return self.font

    def read_note(self, prompt: str, initial: str = "") -> str | None:
        self.calls.append(("note", initial))
        return self.note


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None]:
    """Keep the cached Settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def prompter() -> StubPrompter:
    return StubPrompter()


@pytest.fixture
def make_session(
    settings: Settings, prompter: StubPrompter
) -> Callable[..., EditingSession]:
    """Factory for sessions over a fresh document."""

    def _make(text: str = SAMPLE_TEXT, **kwargs) -> EditingSession:
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("prompter", prompter)
        return EditingSession("test-doc", TextDocument(text), **kwargs)

    return _make


@pytest.fixture
def session(make_session: Callable[..., EditingSession]) -> EditingSession:
    return make_session()
