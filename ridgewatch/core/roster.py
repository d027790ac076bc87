"""Read-only queries over the vehicle roster (lists, search, durations)."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.types import Millis, MotionStatus, Vehicle


class VehicleFilter(str, Enum):
    ALL = "All"
    MOVING = "Moving"
    PARKED = "Parked"
    VIOLATING = "Violating"


def in_boundary_vehicles(vehicles: Iterable[Vehicle], site: SiteGeometry) -> list[Vehicle]:
    return [v for v in vehicles if site.contains(v)]


def filter_vehicles(
    vehicles: Iterable[Vehicle], site: SiteGeometry, flt: VehicleFilter | str = VehicleFilter.ALL
) -> list[Vehicle]:
    """Apply a list filter. "Parked" excludes vehicles that are in violation."""

    flt = VehicleFilter(flt)
    if flt is VehicleFilter.MOVING:
        return [v for v in vehicles if not v.is_stationary]
    if flt is VehicleFilter.PARKED:
        return [v for v in vehicles if v.is_stationary and not site.classify(v).violation]
    if flt is VehicleFilter.VIOLATING:
        return [v for v in vehicles if site.classify(v).violation]
    return list(vehicles)


def sort_for_display(vehicles: Iterable[Vehicle], site: SiteGeometry) -> list[Vehicle]:
    """Violators first, then parked before moving, then by id."""

    def _key(v: Vehicle) -> tuple[int, int, int]:
        c = site.classify(v)
        return (0 if c.violation else 1, 0 if c.status is MotionStatus.PARKED else 1, v.id)

    return sorted(vehicles, key=_key)


def find_by_plate(vehicles: Iterable[Vehicle], plate: str) -> Vehicle | None:
    """Case-insensitive exact plate match."""

    needle = plate.strip().lower()
    if not needle:
        return None
    for v in vehicles:
        if v.plate_number.lower() == needle:
            return v
    return None


def format_duration(ms: Millis) -> str:
    """Format milliseconds as mm:ss (negative durations clamp to 00:00)."""

    total_seconds = max(0, int(ms) // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"
