"""Decoration kinds and their resolution into span attributes.

Each kind is static configuration: a base style and optional extra
attributes (``note``, ``interactive``). Any value may be an
:class:`InteractiveProvider`, which asks the user for the value when the
kind is applied. Providers run once per resolution and are never stored on
a span; only the value they return is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping


class StyleCancelled(Exception):
    """The user dismissed a prompt while a kind was being resolved."""


class Prompter(Protocol):
    """User-input surface for interactive attribute values.

    Each method returns None when the user cancels.
    """

    def choose_color(self, prompt: str) -> str | None: ...

    def choose_font(self, prompt: str) -> str | None: ...

    def read_note(self, prompt: str, initial: str = "") -> str | None: ...


class NoPrompter:
    """Prompter for non-interactive hosts: every prompt is cancelled."""

    def choose_color(self, prompt: str) -> str | None:  # noqa: ARG002
        return None

    def choose_font(self, prompt: str) -> str | None:  # noqa: ARG002
        return None

    def read_note(self, prompt: str, initial: str = "") -> str | None:  # noqa: ARG002
        return None


@dataclass(frozen=True)
class StyleContext:
    """What a provider may consult while resolving a value."""

    prompter: Prompter
    note: str = ""


@dataclass(frozen=True)
class InteractiveProvider:
    """A value obtained from the user at apply time."""

    ask: Callable[[StyleContext], Any]

    def evaluate(self, context: StyleContext) -> Any:
        value = self.ask(context)
        if value is None:
            raise StyleCancelled
        return value


def _resolve_values(
    values: Mapping[str, Any], context: StyleContext
) -> dict[str, Any]:
    resolved: dict[str, Any] = {}
    for name, value in values.items():
        if isinstance(value, InteractiveProvider):
            resolved[name] = value.evaluate(context)
        else:
            resolved[name] = value
    return resolved


@dataclass(frozen=True)
class StyleKind:
    """A named decoration template.

    Attributes:
        name: Kind label recorded on spans it creates or extends.
        style: Base style; values may be literals or providers.
        extra: Extra span attributes (``note``, ``interactive``).
    """

    name: str
    style: Mapping[str, Any]
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedStyle:
    """Concrete attribute patches produced by resolving a kind."""

    kind: str
    style: dict[str, Any]
    extra: dict[str, Any]


class StyleRegistry:
    """Immutable table of decoration kinds keyed by name."""

    def __init__(self, kinds: list[StyleKind]) -> None:
        self._kinds = {kind.name: kind for kind in kinds}

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __iter__(self) -> Iterator[str]:
        return iter(self._kinds)

    def get(self, name: str) -> StyleKind:
        """Return the kind called *name*; raises KeyError if unknown."""
        return self._kinds[name]

    def resolve(self, name: str, context: StyleContext) -> ResolvedStyle:
        """Evaluate every attribute of kind *name*.

        Raises:
            KeyError: If no kind has that name.
            StyleCancelled: If the user cancelled a prompt. Nothing has
                been changed at that point.
        """
        kind = self._kinds[name]
        return ResolvedStyle(
            kind=kind.name,
            style=_resolve_values(kind.style, context),
            extra=_resolve_values(kind.extra, context),
        )


# ---------------------------------------------------------------------------
# Built-in kinds
# ---------------------------------------------------------------------------

FLAT_COLORS = {
    "yellow": "#FFFF00",
    "blue": "#ADD8E6",
    "pink": "#FFC0CB",
    "green": "#90EE90",
}

COMMENT_COLOR = "#FFA500"
TYPO_COLOR = "#DB7093"


def _ask_background(context: StyleContext) -> str | None:
    return context.prompter.choose_color("Background color: ")


def _ask_foreground(context: StyleContext) -> str | None:
    return context.prompter.choose_color("Foreground color: ")


def _ask_font(context: StyleContext) -> str | None:
    return context.prompter.choose_font("Font family: ")


def _ask_note(context: StyleContext) -> str | None:
    return context.prompter.read_note("Comment: ", context.note)


BUILTIN_KINDS: list[StyleKind] = [
    StyleKind("bold", {"weight": "bold"}),
    StyleKind("italic", {"slant": "italic"}),
    StyleKind("underline", {"underline": True}),
    StyleKind("strikethrough", {"strike-through": True}),
    StyleKind("box", {"box": True}),
    StyleKind("emphasized-box", {"box": {"line-width": 2, "color": "red"}}),
    StyleKind("font", {"family": InteractiveProvider(_ask_font)}),
    *(
        StyleKind(name, {"background-color": color})
        for name, color in FLAT_COLORS.items()
    ),
    StyleKind("delete", {"strike-through": True, "foreground-color": "red"}),
    StyleKind("insert", {"foreground-color": "blue"}),
    StyleKind("background", {"background-color": InteractiveProvider(_ask_background)}),
    StyleKind("foreground", {"foreground-color": InteractiveProvider(_ask_foreground)}),
    StyleKind(
        "comment",
        {"background-color": COMMENT_COLOR},
        {"note": InteractiveProvider(_ask_note), "interactive": True},
    ),
    StyleKind(
        "typo",
        {"background-color": TYPO_COLOR},
        {"note": "typo", "interactive": True},
    ),
]

DEFAULT_REGISTRY = StyleRegistry(BUILTIN_KINDS)

# Kind recorded by resize_font, which is parametrised rather than registered.
FONT_SIZE_KIND = "font-size"
