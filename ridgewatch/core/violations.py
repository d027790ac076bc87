"""Violation state tracking.

Each vehicle carries two persisted fields, `violation_start_at` and
`warning_issued`. A classification pass moves every vehicle through three states:

- not violating: both fields cleared (a later violation starts a fresh timer)
- newly violating: `violation_start_at` set to `now`
- ongoing: timer untouched; `warning_issued` latches once the threshold elapses
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace

from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.types import Classification, Millis, Point, TickResult, Vehicle

logger = logging.getLogger(__name__)

DEFAULT_WARNING_THRESHOLD_MS: Millis = 2 * 60 * 1000


def advance_vehicle(
    vehicle: Vehicle,
    classification: Classification,
    now: Millis,
    warning_threshold_ms: Millis = DEFAULT_WARNING_THRESHOLD_MS,
) -> Vehicle:
    """Apply one transition; returns the same object when nothing changes."""

    if not classification.violation:
        if vehicle.violation_start_at is not None or vehicle.warning_issued:
            return replace(vehicle, violation_start_at=None, warning_issued=False)
        return vehicle

    start = vehicle.violation_start_at if vehicle.violation_start_at is not None else now
    warn = vehicle.warning_issued or (now - start) >= warning_threshold_ms
    if start != vehicle.violation_start_at or warn != vehicle.warning_issued:
        return replace(vehicle, violation_start_at=start, warning_issued=warn)
    return vehicle


def tick(
    vehicles: Sequence[Vehicle],
    site: SiteGeometry,
    now: Millis,
    *,
    previous_violating: Iterable[int],
    warning_threshold_ms: Millis = DEFAULT_WARNING_THRESHOLD_MS,
) -> TickResult:
    """Reclassify every vehicle and advance its violation state.

    `vehicles` is returned as the identical object when no vehicle changed, so
    callers can skip downstream work with an identity check.
    `newly_violating_ids` is relative to `previous_violating`; pass the last
    result's `violating_ids` to get one report per violation episode.
    """

    previous = frozenset(previous_violating)
    updated: list[Vehicle] = []
    violating: list[int] = []
    changed = False

    for vehicle in vehicles:
        result = site.classify(vehicle)
        if result.violation:
            violating.append(vehicle.id)
        nxt = advance_vehicle(vehicle, result, now, warning_threshold_ms)
        if nxt is not vehicle:
            changed = True
            if nxt.warning_issued and not vehicle.warning_issued:
                logger.info(
                    "Vehicle %s exceeded violation threshold (%sms)", vehicle.id, warning_threshold_ms
                )
        updated.append(nxt)

    newly = tuple(vid for vid in violating if vid not in previous)
    return TickResult(
        vehicles=updated if changed else vehicles,
        violating_ids=frozenset(violating),
        newly_violating_ids=newly,
        changed=changed,
    )


class ViolationTracker:
    """Owns the vehicle roster and remembers which ids were violating last pass.

    All mutation goes through `tick`, `issue_warning` and the position update
    methods; readers get tuple copies.
    """

    def __init__(
        self,
        vehicles: Iterable[Vehicle],
        site: SiteGeometry,
        warning_threshold_ms: Millis = DEFAULT_WARNING_THRESHOLD_MS,
    ) -> None:
        self.site = site
        self.warning_threshold_ms = int(warning_threshold_ms)
        self._vehicles: tuple[Vehicle, ...] = tuple(vehicles)
        self._violating: frozenset[int] = frozenset()

    @property
    def vehicles(self) -> tuple[Vehicle, ...]:
        return self._vehicles

    @property
    def violating_ids(self) -> frozenset[int]:
        return self._violating

    def get(self, vehicle_id: int) -> Vehicle | None:
        for v in self._vehicles:
            if v.id == vehicle_id:
                return v
        return None

    def classify(self, vehicle_id: int) -> Classification | None:
        vehicle = self.get(vehicle_id)
        return self.site.classify(vehicle) if vehicle is not None else None

    def tick(self, now: Millis) -> TickResult:
        result = tick(
            self._vehicles,
            self.site,
            now,
            previous_violating=self._violating,
            warning_threshold_ms=self.warning_threshold_ms,
        )
        if result.changed:
            self._vehicles = tuple(result.vehicles)
        self._violating = result.violating_ids
        for vid in result.newly_violating_ids:
            logger.info("Vehicle %s parked in a non-parking zone", vid)
        logger.debug(
            "tick now=%s violating=%d new=%d changed=%s",
            now,
            len(result.violating_ids),
            len(result.newly_violating_ids),
            result.changed,
        )
        return result

    def issue_warning(self, vehicle_id: int, now: Millis) -> bool:
        """Manually latch a warning; backfills the violation timer if unset.

        Unknown ids are ignored. Returns True when the vehicle exists.
        """

        def _warn(v: Vehicle) -> Vehicle:
            start = v.violation_start_at if v.violation_start_at is not None else now
            if v.warning_issued and start == v.violation_start_at:
                return v
            return replace(v, warning_issued=True, violation_start_at=start)

        found = self._update(vehicle_id, _warn)
        if found:
            logger.info("Warning issued to vehicle %s", vehicle_id)
        return found

    def move_vehicle(self, vehicle_id: int, position: Point) -> bool:
        return self._update(vehicle_id, lambda v: replace(v, position=position))

    def set_stationary(self, vehicle_id: int, stationary: bool) -> bool:
        return self._update(vehicle_id, lambda v: replace(v, is_stationary=bool(stationary)))

    def replace_positions(self, positions: Mapping[int, Point]) -> None:
        """Apply a batch of external position updates; unknown ids are skipped."""

        if not positions:
            return
        self._vehicles = tuple(
            replace(v, position=positions[v.id]) if v.id in positions else v
            for v in self._vehicles
        )

    def replace_roster(self, vehicles: Iterable[Vehicle]) -> None:
        """Swap in a roster derived from the current one (e.g. simulated movement)."""

        self._vehicles = tuple(vehicles)

    def _update(self, vehicle_id: int, fn) -> bool:
        found = False
        out: list[Vehicle] = []
        for v in self._vehicles:
            if v.id == vehicle_id:
                found = True
                v = fn(v)
            out.append(v)
        if found:
            self._vehicles = tuple(out)
        return found
