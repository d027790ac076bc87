"""Zone classification.

Pure functions mapping a vehicle position to a zone and a violation flag. Polygons
are plain vertex rings; nothing here validates their shape.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ridgewatch.core.types import (
    Classification,
    MotionStatus,
    Point,
    Polygon,
    Vehicle,
    Zone,
    ZoneKind,
)

Bounds = tuple[float, float, float, float]  # (min_lat, min_lon, max_lat, max_lon)


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Even-odd ray casting along the latitude axis.

    Points exactly on an edge have no defined answer; the result is deterministic
    but may differ between edges.
    """

    inside = False
    lat, lon = point.latitude, point.longitude
    j = len(polygon) - 1
    for i in range(len(polygon)):
        pi = polygon[i]
        pj = polygon[j]
        if (pi.longitude > lon) != (pj.longitude > lon):
            cross_lat = (pj.latitude - pi.latitude) * (lon - pi.longitude) / (
                pj.longitude - pi.longitude
            ) + pi.latitude
            if lat < cross_lat:
                inside = not inside
        j = i
    return inside


def _in_any(point: Point, zones: Iterable[Zone]) -> bool:
    return any(point_in_polygon(point, z.polygon) for z in zones)


def motion_status(vehicle: Vehicle) -> MotionStatus:
    return MotionStatus.PARKED if vehicle.is_stationary else MotionStatus.MOVING


def classify(
    vehicle: Vehicle,
    boundary: Sequence[Point],
    parking_zones: Iterable[Zone],
    non_parking_zones: Iterable[Zone],
) -> Classification:
    """Classify a vehicle; first match wins (outside, parking, non-parking, general)."""

    status = motion_status(vehicle)
    pos = vehicle.position

    if not point_in_polygon(pos, boundary):
        zone = ZoneKind.OUTSIDE
    elif _in_any(pos, parking_zones):
        zone = ZoneKind.PARKING
    elif _in_any(pos, non_parking_zones):
        zone = ZoneKind.NON_PARKING
    else:
        zone = ZoneKind.GENERAL

    violation = zone is ZoneKind.NON_PARKING and status is MotionStatus.PARKED
    return Classification(vehicle_id=vehicle.id, status=status, zone=zone, violation=violation)


def in_boundary(vehicle: Vehicle, boundary: Sequence[Point]) -> bool:
    return point_in_polygon(vehicle.position, boundary)


def boundary_bounds(polygon: Sequence[Point]) -> Bounds:
    """Return (min_lat, min_lon, max_lat, max_lon) of a vertex ring."""

    lats = [p.latitude for p in polygon]
    lons = [p.longitude for p in polygon]
    return (min(lats), min(lons), max(lats), max(lons))


def map_bounds(polygon: Sequence[Point], buffer: float = 0.002) -> Bounds:
    """Boundary extent widened by `buffer` degrees on every side (map region limits)."""

    min_lat, min_lon, max_lat, max_lon = boundary_bounds(polygon)
    b = float(buffer)
    return (min_lat - b, min_lon - b, max_lat + b, max_lon + b)


@dataclass(frozen=True)
class SiteGeometry:
    """Boundary plus the parking and non-parking zone catalogs."""

    boundary: Polygon
    parking_zones: tuple[Zone, ...] = ()
    non_parking_zones: tuple[Zone, ...] = ()

    def classify(self, vehicle: Vehicle) -> Classification:
        return classify(vehicle, self.boundary, self.parking_zones, self.non_parking_zones)

    def contains(self, vehicle: Vehicle) -> bool:
        return in_boundary(vehicle, self.boundary)

    def bounds(self) -> Bounds:
        return boundary_bounds(self.boundary)
