"""Encode span sets as a single-line token embedded in the document.

Token layout::

    SM1.<payload byte length>.<base64 payload>

The payload is the gzipped state of a pycrdt ``Doc`` whose ``spans`` array
holds one entry per span, in document order. The token uses only the
base64 alphabet and ``.``, so it survives inside a one-line comment
whatever the notes contain. The length prefix catches truncation and the
gzip CRC catches altered bytes.

The token lives in a trailing metadata block of two comment lines::

    # spanmark: load
    # spanmark-data: SM1.123.H4sIAAAA...

The first line tells the host to load spans on open; the second carries
the data. Both are removed when the span set becomes empty.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import logging
import re
import zlib
from typing import TYPE_CHECKING, Any

from pycrdt import Array, Doc

from spanmark.config import PersistenceConfig, get_settings
from spanmark.spans.model import Span

if TYPE_CHECKING:
    from collections.abc import Iterable

    from spanmark.document import TextDocument

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "SM1"


class CorruptDataError(ValueError):
    """A persisted token could not be decoded into a span set."""


# ---------------------------------------------------------------------------
# Token encoding
# ---------------------------------------------------------------------------


def _span_to_entry(span: Span) -> dict[str, Any]:
    # Style goes in as JSON text so attribute values keep their Python types
    # (ints stay ints, nested box specs stay dicts) across the CRDT layer.
    return {
        "start": span.start,
        "end": span.end,
        "kind": span.kind,
        "note": span.note,
        "interactive": span.interactive,
        "style": json.dumps(span.style, ensure_ascii=False),
    }


def _entry_to_span(entry: Any) -> Span:
    try:
        style = json.loads(entry["style"])
        note = entry["note"]
        span = Span(
            start=int(entry["start"]),
            end=int(entry["end"]),
            style=style,
            kind=str(entry["kind"]),
            note=None if note is None else str(note),
            interactive=bool(entry["interactive"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"malformed span entry: {exc}"
        raise CorruptDataError(msg) from exc
    if not isinstance(style, dict) or span.start < 0 or span.end < span.start:
        msg = f"invalid span entry [{span.start}, {span.end})"
        raise CorruptDataError(msg)
    return span


def serialize(spans: Iterable[Span]) -> str:
    """Encode *spans* (in the order given) as a single-line token."""
    doc = Doc()
    doc["spans"] = Array([_span_to_entry(span) for span in spans])
    payload = gzip.compress(bytes(doc.get_update()), mtime=0)
    encoded = base64.b64encode(payload).decode("ascii")
    return f"{TOKEN_PREFIX}.{len(payload)}.{encoded}"


def deserialize(token: str) -> list[Span]:
    """Decode a token produced by :func:`serialize`.

    Raises:
        CorruptDataError: If the token is truncated, altered, or not a
            span token at all. No partial span set is ever returned.
    """
    version, _, rest = token.strip().partition(".")
    if version != TOKEN_PREFIX:
        msg = f"unrecognised token version {version[:16]!r}"
        raise CorruptDataError(msg)

    length_text, sep, encoded = rest.partition(".")
    if not sep or not (length_text.isascii() and length_text.isdigit()):
        msg = "missing payload length"
        raise CorruptDataError(msg)

    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = "payload is not valid base64"
        raise CorruptDataError(msg) from exc
    if len(payload) != int(length_text):
        msg = f"payload is {len(payload)} bytes, expected {length_text}"
        raise CorruptDataError(msg)

    try:
        update = gzip.decompress(payload)
    except (OSError, EOFError, zlib.error) as exc:
        msg = f"payload failed decompression: {exc}"
        raise CorruptDataError(msg) from exc

    doc = Doc()
    doc["spans"] = Array()
    try:
        doc.apply_update(update)
    except Exception as exc:
        msg = f"payload is not a valid document update: {exc}"
        raise CorruptDataError(msg) from exc

    return [_entry_to_span(entry) for entry in doc["spans"]]


# ---------------------------------------------------------------------------
# Metadata block
# ---------------------------------------------------------------------------


def _config(config: PersistenceConfig | None) -> PersistenceConfig:
    return config if config is not None else get_settings().persistence


def _data_line_re(config: PersistenceConfig) -> re.Pattern[str]:
    prefix = re.escape(config.comment_prefix) + re.escape(config.data_key)
    return re.compile(rf"^{prefix}[ \t]*(?P<token>\S+)[ \t]*$", re.MULTILINE)


def _directive_re(config: PersistenceConfig) -> re.Pattern[str]:
    line = re.escape(config.comment_prefix) + re.escape(config.directive)
    return re.compile(rf"^{line}[ \t]*$", re.MULTILINE)


def _last_match(pattern: re.Pattern[str], text: str) -> re.Match[str] | None:
    matches = list(pattern.finditer(text))
    return matches[-1] if matches else None


def locate_persisted_token(
    text: str, config: PersistenceConfig | None = None
) -> tuple[int, int] | None:
    """Return the ``(start, end)`` offsets of the stored token, or None."""
    match = _last_match(_data_line_re(_config(config)), text)
    if match is None:
        return None
    return match.start("token"), match.end("token")


def metadata_start(text: str, config: PersistenceConfig | None = None) -> int:
    """Offset where the metadata block begins, or ``len(text)`` if absent."""
    config = _config(config)
    starts = [
        match.start()
        for pattern in (_data_line_re(config), _directive_re(config))
        if (match := _last_match(pattern, text)) is not None
    ]
    return min(starts, default=len(text))


def load_spans(text: str, config: PersistenceConfig | None = None) -> list[Span]:
    """Decode the spans stored in *text*; empty if no token is present.

    Raises:
        CorruptDataError: If a token is present but cannot be decoded.
    """
    located = locate_persisted_token(text, config)
    if located is None:
        return []
    return deserialize(text[located[0] : located[1]])


def _delete_line(document: TextDocument, match: re.Match[str]) -> None:
    start, end = match.start(), match.end()
    if end < len(document) and document.text[end] == "\n":
        end += 1
    document.delete(start, end - start)


def save_metadata(
    document: TextDocument,
    spans: list[Span],
    config: PersistenceConfig | None = None,
) -> None:
    """Write, replace or remove the metadata block in *document*.

    An empty span set removes both the token line and the load directive.
    Otherwise the token is replaced in place (or appended) and the
    directive is added if missing.
    """
    config = _config(config)
    data_re = _data_line_re(config)
    directive_re = _directive_re(config)

    if not spans:
        for pattern in (data_re, directive_re):
            match = _last_match(pattern, document.text)
            if match is not None:
                _delete_line(document, match)
        logger.debug("Span set empty; metadata block removed")
        return

    token = serialize(spans)
    located = locate_persisted_token(document.text, config)
    if located is not None:
        document.replace(located[0], located[1], token)
    else:
        if document.text and not document.text.endswith("\n"):
            document.insert(len(document), "\n")
        document.insert(
            len(document), f"{config.comment_prefix}{config.data_key} {token}\n"
        )

    if _last_match(directive_re, document.text) is None:
        data_line = _last_match(data_re, document.text)
        if data_line is not None:
            document.insert(
                data_line.start(), f"{config.comment_prefix}{config.directive}\n"
            )
    logger.debug("Saved %d spans (%d chars)", len(spans), len(token))
