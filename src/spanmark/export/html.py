"""Render a decorated document as a static HTML page.

Overlapping spans are flattened into non-overlapping regions (event sweep),
each emitted as one ``<span style="...">`` whose CSS merges the styles of
every span active there. Where two spans set the same attribute, the span
later in document order wins. Notes become the ``title`` tooltip.
"""

from __future__ import annotations

import logging
from html import escape
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from spanmark.spans.model import Span

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Region data structure
# ---------------------------------------------------------------------------


class _Region:
    """A contiguous character range with a constant set of active spans.

    Attributes:
        start: Start character index (inclusive).
        end: End character index (exclusive).
        active: Indices (into the span list) active in this region.
    """

    __slots__ = ("active", "end", "start")

    def __init__(self, start: int, end: int, active: frozenset[int]) -> None:
        self.start = start
        self.end = end
        self.active = active


def _compute_regions(spans: Sequence[Span], limit: int) -> list[_Region]:
    """Compute non-overlapping regions from overlapping spans.

    Builds ``(position, index, is_end)`` events, sorts them, then sweeps,
    emitting a region wherever the active set is non-empty. Spans are
    clipped to ``[0, limit)``.
    """
    events: list[tuple[int, int, int]] = []
    for idx, span in enumerate(spans):
        start, end = max(span.start, 0), min(span.end, limit)
        if start >= end:
            continue
        events.append((start, 0, idx))
        events.append((end, 1, idx))

    # Starts sort before ends at the same position so adjacent spans meet
    # without a gap.
    events.sort()

    active: set[int] = set()
    regions: list[_Region] = []
    prev_pos: int | None = None
    for pos, is_end, idx in events:
        if prev_pos is not None and pos > prev_pos and active:
            regions.append(_Region(prev_pos, pos, frozenset(active)))
        if is_end:
            active.discard(idx)
        else:
            active.add(idx)
        prev_pos = pos
    return regions


# ---------------------------------------------------------------------------
# Style attributes -> CSS
# ---------------------------------------------------------------------------


def _box_css(value: Any) -> str:
    if isinstance(value, dict):
        width = value.get("line-width", 1)
        color = value.get("color", "currentColor")
        return f"{width}px solid {color}"
    return "1px solid currentColor"


def style_to_css(style: dict[str, Any]) -> dict[str, str]:
    """Translate span style attributes into CSS properties."""
    css: dict[str, str] = {}
    decorations: list[str] = []
    for name, value in style.items():
        if name == "background-color":
            css["background-color"] = str(value)
        elif name == "foreground-color":
            css["color"] = str(value)
        elif name == "weight":
            css["font-weight"] = str(value)
        elif name == "slant":
            css["font-style"] = str(value)
        elif name == "family":
            css["font-family"] = str(value)
        elif name == "height":
            css["font-size"] = f"{int(value)}pt"
        elif name == "underline" and value:
            decorations.append("underline")
        elif name == "strike-through" and value:
            decorations.append("line-through")
        elif name == "box" and value:
            css["border"] = _box_css(value)
        else:
            logger.debug("No CSS for style attribute %s", name)
    if decorations:
        css["text-decoration"] = " ".join(decorations)
    return css


def _region_tag(region: _Region, spans: Sequence[Span]) -> str:
    css: dict[str, str] = {}
    notes: list[str] = []
    for idx in sorted(region.active):
        span = spans[idx]
        for prop, value in style_to_css(span.style).items():
            if prop == "text-decoration" and prop in css:
                lines = [*css[prop].split(), *value.split()]
                value = " ".join(dict.fromkeys(lines))
            css[prop] = value
        if span.note:
            notes.append(span.note)
    attrs = [f'style="{escape("; ".join(f"{k}: {v}" for k, v in css.items()))}"']
    if notes:
        attrs.append(f'title="{escape(chr(10).join(notes))}"')
    kinds = ",".join(dict.fromkeys(spans[idx].kind for idx in sorted(region.active)))
    attrs.append(f'data-kinds="{escape(kinds)}"')
    return f"<span {' '.join(attrs)}>"


# ---------------------------------------------------------------------------
# Document rendering
# ---------------------------------------------------------------------------


def render_body(text: str, spans: Sequence[Span]) -> str:
    """Return escaped *text* with one styled ``<span>`` per decorated region."""
    ordered = sorted(spans, key=lambda s: (s.start, s.id))
    parts: list[str] = []
    cursor = 0
    for region in _compute_regions(ordered, len(text)):
        parts.append(escape(text[cursor : region.start]))
        parts.append(_region_tag(region, ordered))
        parts.append(escape(text[region.start : region.end]))
        parts.append("</span>")
        cursor = region.end
    parts.append(escape(text[cursor:]))
    return "".join(parts)


def render_document_as_styled_markup(
    text: str,
    spans: Sequence[Span],
    title: str = "spanmark export",
    font_family: str = "monospace",
) -> str:
    """Render *text* and its spans as a complete HTML page."""
    body = render_body(text, spans)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{escape(title)}</title>\n"
        "<style>\n"
        f"pre {{ font-family: {escape(font_family)}; white-space: pre-wrap; }}\n"
        "span[title] { cursor: help; }\n"
        "</style>\n"
        "</head>\n<body>\n"
        f"<pre>{body}</pre>\n"
        "</body>\n</html>\n"
    )
