from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from ridgewatch.core.analytics.live import compute_live_metrics
from ridgewatch.core.analytics.store import MetricsStore, Subscriber, Unsubscribe
from ridgewatch.core.config.settings import MonitorSettings
from ridgewatch.core.config.site import default_site, load_site
from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.notifications import NoticeBoard, violation_message, warning_message
from ridgewatch.core.scheduling import Disposer, ManualScheduler, Scheduler
from ridgewatch.core.simulation import jitter, scatter
from ridgewatch.core.types import AnalyticsSnapshot, LiveMetrics, Millis, TickResult, Vehicle
from ridgewatch.core.violations import ViolationTracker

logger = logging.getLogger(__name__)


class MonitorEngine:
    """Runs the classify → track → aggregate → publish cycle on a scheduler.

    The engine owns the tracker (roster), the metrics store and the notice board:
    - tick task reclassifies the roster every `tick_interval_s`
    - jitter task drifts moving vehicles every `jitter_interval_s` (0 = off)
    - metrics are published only when a value other than the timestamp changed
    """

    def __init__(
        self,
        settings: MonitorSettings,
        site: SiteGeometry | None = None,
        vehicles: Iterable[Vehicle] | None = None,
        scheduler: Scheduler | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.settings = settings
        if site is None:
            if settings.site_path:
                site, loaded = load_site(settings.site_path)
            else:
                site, loaded = default_site()
            if vehicles is None:
                vehicles = loaded
        self.site = site
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.rng = rng if rng is not None else np.random.default_rng(settings.seed)
        self.tracker = ViolationTracker(
            vehicles or [], site, warning_threshold_ms=settings.warning_threshold_ms
        )
        self.store = MetricsStore(
            bucket_ms=settings.bucket_ms,
            retention=settings.retention,
            clock=self.scheduler.now_ms,
        )
        self.notices = NoticeBoard(ttl_ms=settings.notice_ttl_ms)
        self.running = False
        self._disposers: list[Disposer] = []
        self._last_published: LiveMetrics | None = None

    @property
    def vehicles(self) -> tuple[Vehicle, ...]:
        return self.tracker.vehicles

    def start(self) -> None:
        """Arm the periodic tasks and run one immediate pass."""

        if self.running:
            return
        self.running = True
        self._disposers.append(self.scheduler.every(self.settings.tick_interval_s, self.step))
        if self.settings.jitter_interval_s > 0:
            self._disposers.append(
                self.scheduler.every(self.settings.jitter_interval_s, self.simulate_jitter)
            )
        logger.info(
            "Monitor started: %d vehicles, tick=%ss, jitter=%ss",
            len(self.tracker.vehicles),
            self.settings.tick_interval_s,
            self.settings.jitter_interval_s,
        )
        self.step()

    def stop(self) -> None:
        if not self.running:
            return
        self.running = False
        for dispose in self._disposers:
            dispose()
        self._disposers.clear()
        logger.info("Monitor stopped")

    def step(self, now: Millis | None = None) -> TickResult:
        """Run one classification pass and publish metrics if they moved."""

        if now is None:
            now = self.scheduler.now_ms()
        result = self.tracker.tick(now)
        for vid in result.newly_violating_ids:
            self.notices.show(violation_message(vid), now)
        self._publish_if_changed(now)
        return result

    def _publish_if_changed(self, now: Millis) -> None:
        metrics = compute_live_metrics(self.tracker.vehicles, self.site, now)
        last = self._last_published
        if last is not None and last.values() == metrics.values():
            return
        self._last_published = metrics
        self.store.publish(metrics)

    def issue_warning(self, vehicle_id: int) -> bool:
        now = self.scheduler.now_ms()
        if not self.tracker.issue_warning(vehicle_id, now):
            return False
        self.notices.show(warning_message(vehicle_id), now)
        self._publish_if_changed(now)
        return True

    def simulate_jitter(self) -> None:
        self.tracker.replace_roster(
            jitter(self.tracker.vehicles, self.rng, step=self.settings.jitter_step)
        )

    def simulate_scatter(self) -> None:
        """Randomly relocate every vehicle within the boundary extent."""

        self.tracker.replace_roster(
            scatter(
                self.tracker.vehicles,
                self.rng,
                self.site.bounds(),
                spread=self.settings.scatter_spread,
            )
        )
        self.step()

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        return self.store.subscribe(callback)

    def snapshot(self) -> AnalyticsSnapshot:
        return self.store.get_snapshot()
