"""Live metrics publish/subscribe store.

Keeps the latest `LiveMetrics` and a rolling per-minute violation series, and
fans each publish out to every subscriber as a frozen `AnalyticsSnapshot`.

Series rules:
- timestamps are truncated to the containing bucket (one minute by default)
- a publish in the same bucket as the last entry overwrites its count
- otherwise a bucket is appended; past `retention` entries the oldest is dropped
"""

from __future__ import annotations

import itertools
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict

from ridgewatch.core.types import AnalyticsSnapshot, LiveMetrics, Millis

logger = logging.getLogger(__name__)

Subscriber = Callable[[AnalyticsSnapshot], None]
Unsubscribe = Callable[[], None]

DEFAULT_BUCKET_MS: Millis = 60_000
DEFAULT_RETENTION = 60


def floor_to_bucket(ts: Millis, bucket_ms: Millis = DEFAULT_BUCKET_MS) -> Millis:
    """Truncate an epoch-ms timestamp to the start of its bucket."""

    return int(ts) - int(ts) % int(bucket_ms)


def _wall_clock_ms() -> Millis:
    return int(time.time() * 1000)


class MetricsStore:
    """Observer registry plus bounded time-series buffer."""

    def __init__(
        self,
        bucket_ms: Millis = DEFAULT_BUCKET_MS,
        retention: int = DEFAULT_RETENTION,
        clock: Callable[[], Millis] = _wall_clock_ms,
    ) -> None:
        if bucket_ms <= 0:
            raise ValueError("bucket_ms must be > 0")
        if retention < 1:
            raise ValueError("retention must be >= 1")
        self.bucket_ms = int(bucket_ms)
        self.retention = int(retention)
        self._clock = clock
        self._subscribers: dict[int, Subscriber] = {}
        self._handles = itertools.count(1)
        # Parallel (bucket_ts, violations) pairs; deque(maxlen) evicts FIFO.
        self._series: deque[tuple[Millis, int]] = deque(maxlen=self.retention)
        self._latest: LiveMetrics | None = None

    @property
    def latest(self) -> LiveMetrics | None:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Register `callback`; it receives the current snapshot right away if one exists."""

        handle = next(self._handles)
        self._subscribers[handle] = callback
        if self._latest is not None:
            try:
                callback(self.get_snapshot())
            except Exception:
                logger.exception("Metrics subscriber %s failed on first delivery", handle)

        def _unsubscribe() -> None:
            self._subscribers.pop(handle, None)

        return _unsubscribe

    def publish(self, metrics: LiveMetrics) -> AnalyticsSnapshot:
        self._latest = metrics
        self._push_point(metrics.timestamp, metrics.violating_count)
        snapshot = self.get_snapshot()
        logger.debug(
            "publish ts=%s violating=%s buckets=%d subscribers=%d",
            metrics.timestamp,
            metrics.violating_count,
            len(self._series),
            len(self._subscribers),
        )
        # Copy so callbacks may unsubscribe during delivery.
        for handle, callback in list(self._subscribers.items()):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Metrics subscriber %s failed", handle)
        return snapshot

    def _push_point(self, ts: Millis, violations: int) -> None:
        bucket = floor_to_bucket(ts, self.bucket_ms)
        if self._series and bucket < self._series[-1][0]:
            # Series stays ordered; late metrics only update `latest`.
            logger.debug("Dropping out-of-order bucket %s (last=%s)", bucket, self._series[-1][0])
            return
        if self._series and self._series[-1][0] == bucket:
            self._series[-1] = (bucket, int(violations))
        else:
            self._series.append((bucket, int(violations)))

    def get_snapshot(self) -> AnalyticsSnapshot:
        base = self._latest if self._latest is not None else LiveMetrics(timestamp=self._clock())
        return AnalyticsSnapshot(
            **asdict(base),
            timestamps=tuple(ts for ts, _ in self._series),
            violations_series=tuple(n for _, n in self._series),
        )

    def reset(self) -> None:
        """Drop the latest metrics and the series; subscribers stay registered."""

        self._latest = None
        self._series.clear()
