import pytest

from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.roster import (
    VehicleFilter,
    filter_vehicles,
    find_by_plate,
    format_duration,
    in_boundary_vehicles,
    sort_for_display,
)
from ridgewatch.core.types import Point, Vehicle, VehicleDetails, Zone

SQUARE = (Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0))
NO_PARKING = Zone(id=1, polygon=(Point(1, 1), Point(1, 2), Point(2, 2), Point(2, 1)))
SITE = SiteGeometry(boundary=SQUARE, non_parking_zones=(NO_PARKING,))

ROSTER = [
    Vehicle(id=4, position=Point(8, 8), is_stationary=False, details=VehicleDetails(plate_number="ABC-1234")),
    Vehicle(id=2, position=Point(6, 6), is_stationary=True, details=VehicleDetails(plate_number="XYZ-5678")),
    Vehicle(id=3, position=Point(1.5, 1.5), is_stationary=True),
    Vehicle(id=1, position=Point(7, 3), is_stationary=False),
    Vehicle(id=9, position=Point(30, 30), is_stationary=True),
]


def test_filters():
    assert [v.id for v in filter_vehicles(ROSTER, SITE, VehicleFilter.MOVING)] == [4, 1]
    assert [v.id for v in filter_vehicles(ROSTER, SITE, "Parked")] == [2, 9]
    assert [v.id for v in filter_vehicles(ROSTER, SITE, VehicleFilter.VIOLATING)] == [3]
    assert len(filter_vehicles(ROSTER, SITE)) == len(ROSTER)


def test_unknown_filter_rejected():
    with pytest.raises(ValueError):
        filter_vehicles(ROSTER, SITE, "Towed")


def test_sort_violators_then_parked_then_id():
    assert [v.id for v in sort_for_display(ROSTER, SITE)] == [3, 2, 9, 1, 4]


def test_in_boundary():
    assert [v.id for v in in_boundary_vehicles(ROSTER, SITE)] == [4, 2, 3, 1]


def test_find_by_plate_is_case_insensitive():
    assert find_by_plate(ROSTER, "abc-1234").id == 4
    assert find_by_plate(ROSTER, " XYZ-5678 ").id == 2
    assert find_by_plate(ROSTER, "NOPE") is None
    assert find_by_plate(ROSTER, "") is None


def test_format_duration():
    assert format_duration(0) == "00:00"
    assert format_duration(61_999) == "01:01"
    assert format_duration(125_000) == "02:05"
    assert format_duration(-5_000) == "00:00"
