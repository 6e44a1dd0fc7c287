"""Key-value persistence for the note collection and the active note id.

The note store is authoritative; this layer only mirrors it. Loading fails
soft (a broken snapshot reads as "nothing stored") and saving is best-effort
(a failed write is logged and reported, never raised).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

import redis
from pydantic import TypeAdapter

from notepad.metrics import PERSISTENCE_LOADS, PERSISTENCE_WRITES
from notepad.models import Note, NoteSnapshot

if TYPE_CHECKING:
    from notepad.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_NOTES_KEY = "onlinetext-notes"
DEFAULT_ACTIVE_KEY = "onlinetext-active-note"

_NOTES_ADAPTER = TypeAdapter(list[Note])


class KeyValueStore(Protocol):
    """Flat string key-value boundary (browser session storage or a substitute)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class MemoryKeyValueStore:
    """Process-local store; lives as long as the session that owns it."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore:
    """All keys kept in one JSON object file on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"{self._path} does not hold a JSON object")
        return raw

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Unreadable store file %s — rewriting: %s", self._path, exc)
            data = {}
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self._path)


class RedisKeyValueStore:
    """Redis-backed store; an optional TTL gives keys session-like expiry."""

    def __init__(
        self,
        redis_url: str,
        *,
        prefix: str = "notepad:",
        ttl_seconds: Optional[int] = None,
        client: Optional[redis.Redis] = None,
    ) -> None:
        self._prefix = prefix
        self._ttl = ttl_seconds
        self._client = client or redis.Redis.from_url(redis_url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(f"{self._prefix}{key}")

    def set(self, key: str, value: str) -> None:
        if self._ttl:
            self._client.setex(f"{self._prefix}{key}", self._ttl, value)
        else:
            self._client.set(f"{self._prefix}{key}", value)


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Return the backend selected by ``settings.storage_backend``."""
    if settings.storage_backend == "redis":
        logger.info("Using Redis session storage: %s", settings.redis_url)
        return RedisKeyValueStore(
            settings.redis_url,
            prefix=settings.redis_prefix,
            ttl_seconds=settings.session_ttl_seconds,
        )
    if settings.storage_backend == "file":
        logger.info("Using file session storage: %s", settings.storage_path)
        return FileKeyValueStore(settings.storage_path)
    logger.info("Using in-memory session storage")
    return MemoryKeyValueStore()


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class PersistenceAdapter:
    """Serializes the note collection and active id under two keys."""

    def __init__(
        self,
        kv: KeyValueStore,
        notes_key: str = DEFAULT_NOTES_KEY,
        active_key: str = DEFAULT_ACTIVE_KEY,
    ) -> None:
        self._kv = kv
        self._notes_key = notes_key
        self._active_key = active_key

    def load(self) -> Optional[NoteSnapshot]:
        """Read the stored snapshot.

        Returns None when nothing is stored or the stored data cannot be
        read or parsed; never raises.
        """
        try:
            raw_notes = self._kv.get(self._notes_key)
            if raw_notes is None:
                PERSISTENCE_LOADS.labels(status="empty").inc()
                logger.info("No stored notes under '%s'", self._notes_key)
                return None
            notes = _NOTES_ADAPTER.validate_json(raw_notes)
            raw_active = self._kv.get(self._active_key)
            active_id = json.loads(raw_active) if raw_active else ""
        except Exception as exc:
            PERSISTENCE_LOADS.labels(status="error").inc()
            logger.error("Failed to load notes: %s — starting fresh", exc)
            return None

        if not isinstance(active_id, str):
            active_id = ""
        unique: dict[str, Note] = {}
        for note in notes:
            if note.id in unique:
                logger.warning("Dropping duplicate stored note id %s", note.id)
                continue
            unique[note.id] = note

        PERSISTENCE_LOADS.labels(status="hydrated").inc()
        logger.info("Loaded %d notes from '%s'", len(unique), self._notes_key)
        return NoteSnapshot(notes=list(unique.values()), active_id=active_id)

    def save(self, notes: Sequence[Note], active_id: str) -> bool:
        """Write the snapshot. Returns False (after logging) if the write failed."""
        try:
            payload = _NOTES_ADAPTER.dump_json(list(notes), by_alias=True)
            self._kv.set(self._notes_key, payload.decode("utf-8"))
            self._kv.set(self._active_key, json.dumps(active_id))
        except Exception as exc:
            PERSISTENCE_WRITES.labels(status="error").inc()
            logger.warning("Failed to persist notes — state kept in memory only: %s", exc)
            return False
        PERSISTENCE_WRITES.labels(status="ok").inc()
        return True
