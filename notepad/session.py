"""Edit session: debounces keystroke-level edits into note store commits.

The session is bound to one note at a time (the store's active note). Each
edit restarts a quiet-period timer; only the value buffered when the timer
finally fires is committed, so there is at most one pending commit and
commits for a note land in edit order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from notepad.metrics import CONTENT_COMMITS
from notepad.normalizer import to_editable, to_plaintext
from notepad.store import NoteStore
from notepad.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500
DEFAULT_SAVING_INDICATOR_MS = 300


class SessionState(str, Enum):
    IDLE = "idle"
    BUFFERING = "buffering"
    COMMITTING = "committing"


class EditSessionController:
    """Buffers edits from the editing surface and commits them after a quiet period."""

    def __init__(
        self,
        store: NoteStore,
        scheduler: Scheduler,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        saving_indicator_ms: int = DEFAULT_SAVING_INDICATOR_MS,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._debounce_s = debounce_ms / 1000
        self._indicator_s = saving_indicator_ms / 1000

        self._note_id: Optional[str] = None
        self._committed = ""
        self._buffered = ""
        self._state = SessionState.IDLE
        self._commit_timer: Optional[TimerHandle] = None
        self._indicator_timer: Optional[TimerHandle] = None
        self._saving = False
        self._commit_count = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def note_id(self) -> Optional[str]:
        return self._note_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def buffered_content(self) -> str:
        """Latest plaintext seen from the surface (committed or not)."""
        return self._buffered

    @property
    def editable_content(self) -> str:
        """The buffered value rendered for the editing surface."""
        return to_editable(self._buffered)

    @property
    def has_pending(self) -> bool:
        return self._state is SessionState.BUFFERING

    @property
    def is_saving(self) -> bool:
        """Cosmetic "Saving..." flag, cleared shortly after each commit."""
        return self._saving

    @property
    def commit_count(self) -> int:
        return self._commit_count

    # ------------------------------------------------------------------
    # Surface events
    # ------------------------------------------------------------------

    def attach(self) -> Optional[str]:
        """Bind to the store's active note.

        A pending edit for the previously bound note is committed first; the
        buffer is then re-seeded from the newly active note's stored content.
        """
        self.flush()
        note = self._store.active_note()
        self._note_id = note.id if note else None
        self._committed = note.content if note else ""
        self._buffered = self._committed
        self._state = SessionState.IDLE
        logger.debug("Edit session attached to note %s", self._note_id)
        return self._note_id

    def handle_input(self, rich_content: str) -> SessionState:
        """Accept the surface's current content and (re)arm the debounce timer."""
        if self._note_id is None and self.attach() is None:
            return self._state

        value = to_plaintext(rich_content)
        self._cancel_commit_timer()
        self._buffered = value

        if value == self._committed:
            self._state = SessionState.IDLE
            return self._state

        note_id = self._note_id
        self._commit_timer = self._scheduler.call_later(
            self._debounce_s, lambda: self._on_quiet_period(note_id)
        )
        self._state = SessionState.BUFFERING
        return self._state

    def flush(self) -> bool:
        """Commit a pending edit now. Returns True if a commit happened."""
        if self._state is not SessionState.BUFFERING:
            return False
        self._cancel_commit_timer()
        return self._commit()

    def discard(self) -> None:
        """Drop a pending edit without committing it."""
        self._cancel_commit_timer()
        self._buffered = self._committed
        self._state = SessionState.IDLE

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_quiet_period(self, note_id: Optional[str]) -> None:
        self._commit_timer = None
        if note_id != self._note_id or self._state is not SessionState.BUFFERING:
            return
        self._commit()

    def _commit(self) -> bool:
        self._state = SessionState.COMMITTING
        note = self._store.update_content(self._note_id, self._buffered)
        if note is None:
            logger.warning(
                "Note %s no longer exists — dropped buffered edit", self._note_id
            )
            self._state = SessionState.IDLE
            self.attach()
            return False

        self._committed = self._buffered
        self._commit_count += 1
        CONTENT_COMMITS.inc()
        self._show_saving()
        self._state = SessionState.IDLE
        return True

    def _show_saving(self) -> None:
        if self._indicator_timer is not None:
            self._indicator_timer.cancel()
        self._saving = True
        self._indicator_timer = self._scheduler.call_later(
            self._indicator_s, self._clear_saving
        )

    def _clear_saving(self) -> None:
        self._saving = False
        self._indicator_timer = None

    def _cancel_commit_timer(self) -> None:
        if self._commit_timer is not None:
            self._commit_timer.cancel()
            self._commit_timer = None
