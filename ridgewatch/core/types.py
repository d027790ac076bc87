"""Shared type definitions used across the monitor.

This module intentionally centralizes small, stable types (points, zones, vehicles,
and per-tick summaries) so geofence/tracker/analytics code can stay strongly typed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Epoch milliseconds.
Millis = int


@dataclass(frozen=True)
class Point:
    """Geographic position in decimal degrees."""

    latitude: float
    longitude: float


Polygon = tuple[Point, ...]


@dataclass(frozen=True)
class Zone:
    """A named polygon inside the site boundary."""

    id: int
    polygon: Polygon
    name: str = ""


class MotionStatus(str, Enum):
    MOVING = "Moving"
    PARKED = "Parked"


class ZoneKind(str, Enum):
    PARKING = "Parking Zone"
    NON_PARKING = "Non-Parking Zone"
    GENERAL = "General Area"
    OUTSIDE = "Outside Boundary"


@dataclass(frozen=True)
class VehicleDetails:
    """Descriptive payload carried with a vehicle; never read by the tracker."""

    plate_number: str = ""
    make: str = ""
    model: str = ""
    year: int | None = None
    color: str = ""
    owner_name: str = ""
    owner_phone: str = ""
    owner_email: str = ""
    registration_date: str = ""
    last_inspection: str = ""


@dataclass(frozen=True)
class Vehicle:
    """Roster entry. Updates produce new instances via `dataclasses.replace`."""

    id: int
    position: Point
    is_stationary: bool = False
    # None means "not tracked"; 0 is a valid epoch timestamp.
    violation_start_at: Millis | None = None
    warning_issued: bool = False
    details: VehicleDetails | None = None

    @property
    def plate_number(self) -> str:
        return self.details.plate_number if self.details is not None else ""


@dataclass(frozen=True)
class Classification:
    """Zone/status result for one vehicle, recomputed on demand."""

    vehicle_id: int
    status: MotionStatus
    zone: ZoneKind
    violation: bool = False


@dataclass(frozen=True)
class LiveMetrics:
    """Point-in-time aggregate over the vehicles inside the boundary."""

    timestamp: Millis
    total_in_boundary: int = 0
    moving_count: int = 0
    parked_count: int = 0
    violating_count: int = 0
    warnings_count: int = 0
    avg_violation_ms: int = 0

    def values(self) -> tuple[int, int, int, int, int, int]:
        """Metric values without the timestamp (used to skip redundant publishes)."""

        return (
            self.total_in_boundary,
            self.moving_count,
            self.parked_count,
            self.violating_count,
            self.warnings_count,
            self.avg_violation_ms,
        )


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """LiveMetrics plus a copy of the rolling per-minute violation series."""

    timestamp: Millis
    total_in_boundary: int = 0
    moving_count: int = 0
    parked_count: int = 0
    violating_count: int = 0
    warnings_count: int = 0
    avg_violation_ms: int = 0
    timestamps: tuple[Millis, ...] = field(default_factory=tuple)
    violations_series: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TickResult:
    """Outcome of one classification pass over the roster."""

    vehicles: tuple[Vehicle, ...] | list[Vehicle]
    violating_ids: frozenset[int]
    newly_violating_ids: tuple[int, ...]
    changed: bool
