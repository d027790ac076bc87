"""Transient user-facing notices.

Only one notice is visible at a time: showing a new one replaces the current
notice and restarts its timer.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from ridgewatch.core.types import Millis

DEFAULT_NOTICE_TTL_MS: Millis = 2500


def violation_message(vehicle_id: int) -> str:
    return f"Vehicle {vehicle_id} parked in a non-parking zone"


def warning_message(vehicle_id: int) -> str:
    return f"Warning issued to Vehicle {vehicle_id}"


@dataclass(frozen=True)
class Notice:
    message: str
    shown_at: Millis
    expires_at: Millis


class NoticeBoard:
    def __init__(self, ttl_ms: Millis = DEFAULT_NOTICE_TTL_MS, history_size: int = 200) -> None:
        self.ttl_ms = int(ttl_ms)
        self._current: Notice | None = None
        self.history: deque[Notice] = deque(maxlen=history_size)

    def show(self, message: str, now: Millis) -> Notice:
        notice = Notice(message=message, shown_at=int(now), expires_at=int(now) + self.ttl_ms)
        self._current = notice
        self.history.append(notice)
        return notice

    def current(self, now: Millis) -> Notice | None:
        """Return the visible notice, dismissing it once expired."""

        if self._current is not None and now >= self._current.expires_at:
            self._current = None
        return self._current

    def dismiss(self) -> None:
        self._current = None
