"""Timers that drive ``PlaybackEngine.tick``.

A clock owns at most one pending timer. ``start`` on a running clock is a
no-op and ``stop`` is safe to call from inside the tick handler.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Protocol

TickHandler = Callable[[int], Awaitable[None]]


class Clock(Protocol):
    @property
    def running(self) -> bool: ...

    def start(self, handler: TickHandler) -> None: ...

    def stop(self) -> None: ...


class IntervalClock:
    """Wall-clock timer firing ``handler(1)`` every ``interval`` seconds."""

    def __init__(self, interval: float = 1.0) -> None:
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self, handler: TickHandler) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(handler))

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # The running handler finishes its tick; the loop then sees it was stopped.
        if task is not current:
            task.cancel()

    async def _run(self, handler: TickHandler) -> None:
        me = asyncio.current_task()
        while True:
            await asyncio.sleep(self._interval)
            if self._task is not me:
                return
            await handler(1)
            if self._task is not me:
                return


class VirtualClock:
    """Manually advanced clock for deterministic tests."""

    def __init__(self) -> None:
        self._handler: Optional[TickHandler] = None
        self.starts = 0

    @property
    def running(self) -> bool:
        return self._handler is not None

    def start(self, handler: TickHandler) -> None:
        if self._handler is not None:
            return
        self._handler = handler
        self.starts += 1

    def stop(self) -> None:
        self._handler = None

    async def advance(self, seconds: int = 1) -> int:
        """Fire up to ``seconds`` ticks; returns how many fired before a stop."""

        fired = 0
        for _ in range(seconds):
            handler = self._handler
            if handler is None:
                break
            await handler(1)
            fired += 1
        return fired


__all__ = ["Clock", "IntervalClock", "TickHandler", "VirtualClock"]
