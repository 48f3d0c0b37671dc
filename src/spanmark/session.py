"""Per-document editing sessions.

An :class:`EditingSession` is everything that belongs to one open document:
the text buffer, its span store, the last span-aware copy, the kill ring,
the view state saved by list navigation, and the dirty flag. Nothing here
is process-global, so two open documents never share clipboard or
viewport state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from spanmark.config import Settings, get_settings
from spanmark.document import TextDocument
from spanmark.spans.codec import (
    CorruptDataError,
    load_spans,
    locate_persisted_token,
    metadata_start,
    save_metadata,
)
from spanmark.spans.edits import EditCommands, TextEditAdapter
from spanmark.spans.mutator import SpanMutator
from spanmark.spans.store import SpanStore
from spanmark.spans.styles import DEFAULT_REGISTRY, NoPrompter

if TYPE_CHECKING:
    from collections.abc import Callable

    from spanmark.spans.model import CopyPayload
    from spanmark.spans.styles import Prompter, StyleRegistry

logger = logging.getLogger(__name__)

# Kill ring entries kept per session
KILL_RING_SIZE = 60


@dataclass(frozen=True)
class ViewState:
    """Cursor and selection to restore after a list-view jump."""

    point: int
    mark: int | None


class EditingSession:
    """Owns the span model and editing state for one open document.

    Attributes:
        doc_id: Identifier for the document (e.g. its path).
        document: The text buffer.
        store: Spans anchored in ``document``.
        mutator: Decoration commands.
        edits: Offset maintenance and span-aware copy/cut/paste.
        commands: Clipboard commands with span-aware dispatch.
        last_payload: Most recent span-aware copy, until pasted.
        kill_ring: Plain-text clipboard history, newest last.
        saved_view: View state saved by the last list-view jump.
        hidden_region: Metadata block range hidden from normal viewing.
        dirty: True when spans changed since the last save or load.
    """

    def __init__(
        self,
        doc_id: str,
        document: TextDocument | None = None,
        *,
        settings: Settings | None = None,
        registry: StyleRegistry = DEFAULT_REGISTRY,
        prompter: Prompter | None = None,
    ) -> None:
        self.doc_id = doc_id
        self.document = document if document is not None else TextDocument()
        self.settings = settings if settings is not None else get_settings()
        self.registry = registry
        self.prompter: Prompter = prompter if prompter is not None else NoPrompter()

        self.store = SpanStore()
        self.last_payload: CopyPayload | None = None
        self.kill_ring: list[str] = []
        self.saved_view: ViewState | None = None
        self.hidden_region: tuple[int, int] | None = None
        self.dirty = False
        self._listeners: list[Callable[[EditingSession], None]] = []

        self.mutator = SpanMutator(self)
        self.edits = TextEditAdapter(self)
        self.commands = EditCommands(self)
        self.document.observe(self.edits.on_edit)

    # --- Change notification ---

    def add_listener(self, callback: Callable[[EditingSession], None]) -> None:
        """Register a callback run whenever the span set changes."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[EditingSession], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def mark_dirty(self) -> None:
        """Flag unsaved span changes and ask listeners to re-render."""
        self.dirty = True
        for callback in list(self._listeners):
            callback(self)

    # --- Clipboard state ---

    def remember(self, payload: CopyPayload) -> None:
        """Record a span-aware copy; its text also goes on the kill ring."""
        self.remember_text(payload.text)
        self.last_payload = payload

    def remember_text(self, text: str) -> None:
        """Record a plain-text copy, superseding any pending payload."""
        self.last_payload = None
        self.kill_ring.append(text)
        del self.kill_ring[:-KILL_RING_SIZE]

    # --- Persistence ---

    def _body_end(self) -> int:
        return metadata_start(self.document.text, self.settings.persistence)

    @property
    def body(self) -> str:
        """Document text without the trailing metadata block."""
        return self.document.text[: self._body_end()]

    def _refresh_hidden_region(self) -> None:
        text = self.document.text
        if locate_persisted_token(text, self.settings.persistence) is None:
            self.hidden_region = None
        else:
            self.hidden_region = (self._body_end(), len(text))

    def load(self) -> int:
        """Replace the span set with the spans stored in the document.

        Returns the number of spans loaded.

        Raises:
            CorruptDataError: If the stored token cannot be decoded; the
                current span set is left untouched.
        """
        spans = load_spans(self.document.text, self.settings.persistence)
        self.store.remove_all()
        for span in spans:
            self.store.insert(span)
        self._refresh_hidden_region()
        self.dirty = False
        logger.info("Loaded %d spans for %s", len(spans), self.doc_id)
        return len(spans)

    def save(self) -> str:
        """Write the span set into the document and return the full text.

        Edits to the metadata block never move spans, so a point marker at
        the end of the body stays there when the block is appended after it.
        """
        self.document.unobserve(self.edits.on_edit)
        try:
            save_metadata(
                self.document, self.store.all_spans(), self.settings.persistence
            )
        finally:
            self.document.observe(self.edits.on_edit)
        self._refresh_hidden_region()
        self.dirty = False
        logger.info("Saved %d spans for %s", len(self.store), self.doc_id)
        return self.document.text

    def close(self) -> None:
        """Detach from the document; the span store is discarded."""
        self.document.unobserve(self.edits.on_edit)
        self._listeners.clear()
        self.store.remove_all()
        self.last_payload = None


class SessionRegistry:
    """Registry of open editing sessions by document ID."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._sessions: dict[str, EditingSession] = {}
        self._settings = settings

    def open(
        self,
        doc_id: str,
        text: str = "",
        *,
        strict: bool = False,
        prompter: Prompter | None = None,
    ) -> EditingSession:
        """Return the open session for *doc_id*, or open one from *text*.

        A corrupt token is logged and the document opens with no spans,
        unless *strict* is set, in which case CorruptDataError propagates
        and nothing is registered.
        """
        if doc_id in self._sessions:
            return self._sessions[doc_id]

        session = EditingSession(
            doc_id,
            TextDocument(text),
            settings=self._settings,
            prompter=prompter,
        )
        try:
            session.load()
        except CorruptDataError:
            if strict:
                session.close()
                raise
            logger.warning(
                "Ignoring unreadable span data in %s", doc_id, exc_info=True
            )

        self._sessions[doc_id] = session
        return session

    def get(self, doc_id: str) -> EditingSession | None:
        return self._sessions.get(doc_id)

    def close(self, doc_id: str) -> bool:
        """Close and forget a session; False if it was not open."""
        session = self._sessions.pop(doc_id, None)
        if session is None:
            return False
        session.close()
        return True

    def list_ids(self) -> list[str]:
        """List all open document IDs."""
        return list(self._sessions.keys())

    def close_all(self) -> int:
        """Close every session; return how many were closed."""
        count = len(self._sessions)
        for doc_id in list(self._sessions):
            self.close(doc_id)
        return count
