"""Scheduled tasks for periodic re-evaluation.

The monitor has no event source of its own; the host supplies a `Scheduler` that
fires callbacks on an interval. Two implementations:

- `ManualScheduler`: virtual clock advanced explicitly (tests, offline simulation)
- `AsyncioScheduler`: re-arming `loop.call_later` handles on an asyncio event loop

Callbacks run to completion on the caller's thread; nothing here spawns threads.
Every arming call returns an idempotent disposer.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from ridgewatch.core.types import Millis

logger = logging.getLogger(__name__)

Task = Callable[[], None]
Disposer = Callable[[], None]


class Scheduler(Protocol):
    def now_ms(self) -> Millis: ...

    def every(self, interval_s: float, callback: Task) -> Disposer: ...

    def call_later(self, delay_s: float, callback: Task) -> Disposer: ...


def _run_task(callback: Task) -> None:
    try:
        callback()
    except Exception:
        logger.exception("Scheduled task %r failed", callback)


@dataclass(order=True)
class _Entry:
    due_ms: Millis
    seq: int
    interval_ms: Millis | None = field(compare=False)
    callback: Task = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class ManualScheduler:
    """Deterministic scheduler driven by `advance()`."""

    def __init__(self, start_ms: Millis = 0) -> None:
        self._now = int(start_ms)
        self._queue: list[_Entry] = []
        self._seq = itertools.count()

    def now_ms(self) -> Millis:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for e in self._queue if not e.cancelled)

    def _arm(self, delay_ms: Millis, interval_ms: Millis | None, callback: Task) -> Disposer:
        entry = _Entry(self._now + delay_ms, next(self._seq), interval_ms, callback)
        heapq.heappush(self._queue, entry)

        def _dispose() -> None:
            entry.cancelled = True

        return _dispose

    def every(self, interval_s: float, callback: Task) -> Disposer:
        interval_ms = int(round(float(interval_s) * 1000))
        if interval_ms <= 0:
            raise ValueError("interval_s must be > 0")
        return self._arm(interval_ms, interval_ms, callback)

    def call_later(self, delay_s: float, callback: Task) -> Disposer:
        return self._arm(max(0, int(round(float(delay_s) * 1000))), None, callback)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in time order.

        Returns the number of callbacks run.
        """

        target = self._now + int(round(float(seconds) * 1000))
        fired = 0
        while self._queue and self._queue[0].due_ms <= target:
            entry = heapq.heappop(self._queue)
            if entry.cancelled:
                continue
            self._now = entry.due_ms
            _run_task(entry.callback)
            fired += 1
            if entry.interval_ms is not None and not entry.cancelled:
                entry.due_ms += entry.interval_ms
                entry.seq = next(self._seq)
                heapq.heappush(self._queue, entry)
        self._now = target
        return fired


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    Without an explicit `loop`, must be constructed from inside a running loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def now_ms(self) -> Millis:
        return int(time.time() * 1000)

    def every(self, interval_s: float, callback: Task) -> Disposer:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        state: dict[str, object] = {"cancelled": False, "handle": None}

        def _fire() -> None:
            if state["cancelled"]:
                return
            _run_task(callback)
            if not state["cancelled"]:
                state["handle"] = self._loop.call_later(interval_s, _fire)

        state["handle"] = self._loop.call_later(interval_s, _fire)

        def _dispose() -> None:
            state["cancelled"] = True
            handle = state["handle"]
            if isinstance(handle, asyncio.TimerHandle):
                handle.cancel()

        return _dispose

    def call_later(self, delay_s: float, callback: Task) -> Disposer:
        handle = self._loop.call_later(max(0.0, float(delay_s)), _run_task, callback)
        return handle.cancel
