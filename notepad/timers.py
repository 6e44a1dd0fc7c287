"""Cancellable timers used by the edit session.

Anything exposing ``call_later(delay_seconds, callback)`` that returns a handle
with ``cancel()`` can drive the session; the asyncio event loop already does.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop.

    Without an explicit loop, the loop running at scheduling time is used, so
    one scheduler can outlive several loops (e.g. across test clients).
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
