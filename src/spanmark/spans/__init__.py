"""The annotation-span model: store, styles, mutation, edits and codec."""

from spanmark.spans.codec import CorruptDataError, deserialize, serialize
from spanmark.spans.model import CopyPayload, Span
from spanmark.spans.store import SpanStore
from spanmark.spans.styles import DEFAULT_REGISTRY, StyleRegistry

__all__ = [
    "DEFAULT_REGISTRY",
    "CopyPayload",
    "CorruptDataError",
    "Span",
    "SpanStore",
    "StyleRegistry",
    "deserialize",
    "serialize",
]
