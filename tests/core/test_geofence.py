import pytest

from ridgewatch.core.geofence import (
    SiteGeometry,
    boundary_bounds,
    classify,
    map_bounds,
    point_in_polygon,
)
from ridgewatch.core.types import MotionStatus, Point, Vehicle, Zone, ZoneKind

SQUARE = (Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0))
NO_PARKING = Zone(id=1, polygon=(Point(1, 1), Point(1, 2), Point(2, 2), Point(2, 1)))
PARKING = Zone(id=2, polygon=(Point(5, 5), Point(5, 7), Point(7, 7), Point(7, 5)))
SITE = SiteGeometry(boundary=SQUARE, parking_zones=(PARKING,), non_parking_zones=(NO_PARKING,))


def _vehicle(lat, lon, stationary=True):
    return Vehicle(id=1, position=Point(lat, lon), is_stationary=stationary)


def test_point_in_polygon_square():
    assert point_in_polygon(Point(5, 5), SQUARE)
    assert point_in_polygon(Point(0.5, 9.5), SQUARE)
    assert not point_in_polygon(Point(11, 5), SQUARE)
    assert not point_in_polygon(Point(5, -1), SQUARE)


def test_point_in_concave_polygon():
    # L-shape: the notch at (7..10, 7..10) is outside
    ring = (Point(0, 0), Point(0, 10), Point(5, 10), Point(5, 5), Point(10, 5), Point(10, 0))
    assert point_in_polygon(Point(2, 8), ring)
    assert point_in_polygon(Point(8, 2), ring)
    assert not point_in_polygon(Point(8, 8), ring)


@pytest.mark.parametrize("point", [Point(3, 3), Point(9.9, 0.1), Point(12, 4), Point(-3, -3)])
def test_point_in_polygon_stable_under_rotation(point):
    expected = point_in_polygon(point, SQUARE)
    for k in range(1, len(SQUARE)):
        rotated = SQUARE[k:] + SQUARE[:k]
        assert point_in_polygon(point, rotated) == expected


def test_outside_boundary_short_circuits():
    result = SITE.classify(_vehicle(20, 20))
    assert result.zone is ZoneKind.OUTSIDE
    assert result.violation is False
    assert result.status is MotionStatus.PARKED


def test_stationary_in_parking_zone_never_violates():
    result = SITE.classify(_vehicle(6, 6, stationary=True))
    assert result.zone is ZoneKind.PARKING
    assert result.violation is False


def test_non_parking_violation_depends_on_stationary():
    parked = classify(_vehicle(1.5, 1.5, True), SQUARE, [PARKING], [NO_PARKING])
    assert parked.zone is ZoneKind.NON_PARKING
    assert parked.violation is True

    moving = classify(_vehicle(1.5, 1.5, False), SQUARE, [PARKING], [NO_PARKING])
    assert moving.zone is ZoneKind.NON_PARKING
    assert moving.status is MotionStatus.MOVING
    assert moving.violation is False


def test_general_area():
    result = SITE.classify(_vehicle(8, 2))
    assert result.zone is ZoneKind.GENERAL
    assert result.violation is False


def test_parking_wins_over_non_parking_when_both_match():
    overlap = SiteGeometry(boundary=SQUARE, parking_zones=(NO_PARKING,), non_parking_zones=(NO_PARKING,))
    assert overlap.classify(_vehicle(1.5, 1.5)).zone is ZoneKind.PARKING


def test_bounds_helpers():
    assert boundary_bounds(SQUARE) == (0, 0, 10, 10)
    assert map_bounds(SQUARE, buffer=1.0) == (-1.0, -1.0, 11.0, 11.0)
