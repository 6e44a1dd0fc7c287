"""Shared fixtures: a virtual-time scheduler, a ticking clock and store wiring."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from notepad.persistence import MemoryKeyValueStore, PersistenceAdapter
from notepad.store import NoteStore


class ManualTimer:
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by ``advance()`` in whole milliseconds of virtual time."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: list[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now_ms + round(delay * 1000), callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self._timers if not t.cancelled]

    def advance(self, ms: int) -> None:
        """Move time forward, firing due timers in order."""
        target = self.now_ms + ms
        while True:
            due = [t for t in self.pending if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due_ms)
            self._timers.remove(timer)
            self.now_ms = timer.due_ms
            timer.callback()
        self.now_ms = target


class TickingClock:
    """Returns a strictly increasing ISO timestamp on every call."""

    def __init__(self) -> None:
        self._now = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> str:
        self._now += timedelta(seconds=1)
        return self._now.isoformat()


class FailingKeyValueStore(MemoryKeyValueStore):
    """Reads work, writes fail while ``failing`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.failing = True

    def set(self, key: str, value: str) -> None:
        if self.failing:
            raise ConnectionError("storage unavailable")
        super().set(key, value)


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def persistence(kv: MemoryKeyValueStore) -> PersistenceAdapter:
    return PersistenceAdapter(kv)


@pytest.fixture()
def store(persistence: PersistenceAdapter, clock: TickingClock) -> NoteStore:
    """An initialized store holding only the default note."""
    s = NoteStore(persistence, clock=clock)
    s.initialize()
    return s
