"""The note store: single source of truth for notes and the active selection.

Invariants held after :meth:`NoteStore.initialize`:

* the collection is never empty (removing the last note synthesizes a default);
* the active id always names a member of the collection.

Operations are synchronous and either apply fully or change nothing. Missing
ids and blank titles are not errors; they are reported through return values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from notepad.metrics import NOTE_OPERATIONS, NOTES_TOTAL
from notepad.models import DEFAULT_TITLE, Note, utc_now
from notepad.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


class NoteStore:
    """Owns the ordered note collection and the active note id."""

    def __init__(
        self,
        persistence: Optional[PersistenceAdapter] = None,
        clock: Callable[[], str] = utc_now,
    ) -> None:
        self._persistence = persistence
        self._clock = clock
        self._notes: list[Note] = []
        self._active_id = ""
        self._initialized = False
        self._durable = True

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def notes(self) -> list[Note]:
        """Notes in insertion order."""
        return list(self._notes)

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def count(self) -> int:
        return len(self._notes)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def durable(self) -> bool:
        """Whether the last snapshot write reached the persistence layer."""
        return self._durable

    def get(self, note_id: str) -> Optional[Note]:
        index = self._index_of(note_id)
        return None if index is None else self._notes[index]

    def active_note(self) -> Optional[Note]:
        """The active note, or the first note if the active id is stale.

        Only returns None before the store holds any note.
        """
        note = self.get(self._active_id)
        if note is not None:
            return note
        return self._notes[0] if self._notes else None

    def search(self, query: str = "") -> list[Note]:
        """Notes whose title contains *query* (case-insensitive), newest first."""
        q = query.strip().lower()
        matches = [n for n in self._notes if q in n.title.lower()]
        return sorted(matches, key=lambda n: n.updated_at, reverse=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> Note:
        """Hydrate from persistence and establish both invariants."""
        snapshot = self._persistence.load() if self._persistence else None
        self._notes = list(snapshot.notes) if snapshot else []
        self._active_id = snapshot.active_id if snapshot else ""

        if not self._notes:
            self._append_default()
            logger.info("No stored notes — created default note %s", self._active_id)
        elif self._index_of(self._active_id) is None:
            self._active_id = self._notes[0].id
            logger.info("Stored active note missing — selected %s", self._active_id)

        self._initialized = True
        self._commit("initialize")
        return self._notes[self._index_of(self._active_id)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, title_hint: Optional[str] = None) -> Note:
        """Append a new empty note and make it active."""
        title = (title_hint or "").strip() or f"{DEFAULT_TITLE} {len(self._notes) + 1}"
        note = self._new_note(title)
        self._notes.append(note)
        self._active_id = note.id
        self._commit("create")
        logger.info("Created note %s — '%s'", note.id, note.title)
        return note

    def select(self, note_id: str) -> bool:
        """Make *note_id* active. Returns False if no such note exists."""
        if self._index_of(note_id) is None:
            self._record("select", "not_found")
            return False
        self._active_id = note_id
        self._commit("select")
        return True

    def rename(self, note_id: str, title: str) -> Optional[Note]:
        """Set a trimmed title; a blank title leaves the note untouched."""
        index = self._index_of(note_id)
        if index is None:
            self._record("rename", "not_found")
            return None
        cleaned = title.strip()
        if not cleaned:
            self._record("rename", "ignored")
            return self._notes[index]
        note = self._notes[index].model_copy(
            update={"title": cleaned, "updated_at": self._clock()}
        )
        self._notes[index] = note
        self._commit("rename")
        logger.info("Renamed note %s — '%s'", note.id, note.title)
        return note

    def update_content(self, note_id: str, content: str) -> Optional[Note]:
        """Replace the body with *content*, which must already be plaintext."""
        index = self._index_of(note_id)
        if index is None:
            self._record("update_content", "not_found")
            return None
        note = self._notes[index].model_copy(
            update={"content": content, "updated_at": self._clock()}
        )
        self._notes[index] = note
        self._commit("update_content")
        logger.debug("Updated content of note %s (%d chars)", note.id, len(content))
        return note

    def delete(self, note_id: str) -> bool:
        """Remove a note, re-establishing a non-empty collection and valid selection."""
        index = self._index_of(note_id)
        if index is None:
            self._record("delete", "not_found")
            return False
        del self._notes[index]
        if not self._notes:
            self._append_default()
        elif self._active_id == note_id:
            self._active_id = self._notes[0].id
        self._commit("delete")
        logger.info("Deleted note %s — active is now %s", note_id, self._active_id)
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _index_of(self, note_id: str) -> Optional[int]:
        for i, note in enumerate(self._notes):
            if note.id == note_id:
                return i
        return None

    def _new_note(self, title: str) -> Note:
        now = self._clock()
        return Note(title=title, created_at=now, updated_at=now)

    def _append_default(self) -> None:
        note = self._new_note(DEFAULT_TITLE)
        self._notes.append(note)
        self._active_id = note.id

    def _record(self, operation: str, outcome: str) -> None:
        NOTE_OPERATIONS.labels(operation=operation, outcome=outcome).inc()

    def _commit(self, operation: str) -> None:
        """Record a successful mutation and mirror the new state to persistence."""
        self._record(operation, "applied")
        NOTES_TOTAL.set(len(self._notes))
        if self._persistence is not None:
            self._durable = self._persistence.save(self._notes, self._active_id)
