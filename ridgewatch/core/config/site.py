"""Site geometry and fleet definitions.

A site file is YAML with a `boundary` ring, `parking_zones`, `non_parking_zones`
and an optional `vehicles` roster. Geometry is validated here, at load time; the
geofence functions trust whatever they are given.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.types import Point, Vehicle, VehicleDetails, Zone


class PointSchema(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    def to_point(self) -> Point:
        return Point(self.latitude, self.longitude)


def _check_ring(points: list[PointSchema]) -> list[PointSchema]:
    if len(points) < 3:
        raise ValueError("polygon must have >= 3 points")
    return points


class ZoneSchema(BaseModel):
    id: int
    name: str = ""
    points: list[PointSchema]

    @field_validator("points")
    @classmethod
    def _ring(cls, pts: list[PointSchema]) -> list[PointSchema]:
        return _check_ring(pts)

    def to_zone(self) -> Zone:
        return Zone(id=self.id, name=self.name, polygon=tuple(p.to_point() for p in self.points))


class VehicleSchema(BaseModel):
    id: int
    latitude: float
    longitude: float
    is_stationary: bool = False
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

    def to_vehicle(self) -> Vehicle:
        return Vehicle(
            id=self.id,
            position=Point(self.latitude, self.longitude),
            is_stationary=self.is_stationary,
            details=VehicleDetails(
                plate_number=self.plate_number,
                make=self.make,
                model=self.model,
                year=self.year,
                color=self.color,
                owner_name=self.owner_name,
                owner_phone=self.owner_phone,
                owner_email=self.owner_email,
                registration_date=self.registration_date,
                last_inspection=self.last_inspection,
            ),
        )


class SiteSchema(BaseModel):
    name: str = ""
    boundary: list[PointSchema]
    parking_zones: list[ZoneSchema] = Field(default_factory=list)
    non_parking_zones: list[ZoneSchema] = Field(default_factory=list)
    vehicles: list[VehicleSchema] = Field(default_factory=list)

    @field_validator("boundary")
    @classmethod
    def _ring(cls, pts: list[PointSchema]) -> list[PointSchema]:
        return _check_ring(pts)

    @field_validator("vehicles")
    @classmethod
    def _unique_ids(cls, vehicles: list[VehicleSchema]) -> list[VehicleSchema]:
        ids = [v.id for v in vehicles]
        if len(ids) != len(set(ids)):
            raise ValueError("vehicle ids must be unique")
        return vehicles

    def to_geometry(self) -> SiteGeometry:
        return SiteGeometry(
            boundary=tuple(p.to_point() for p in self.boundary),
            parking_zones=tuple(z.to_zone() for z in self.parking_zones),
            non_parking_zones=tuple(z.to_zone() for z in self.non_parking_zones),
        )

    def to_vehicles(self) -> list[Vehicle]:
        return [v.to_vehicle() for v in self.vehicles]


def _pt(lat: float, lon: float) -> dict[str, float]:
    return {"latitude": lat, "longitude": lon}


def _rect(lat1: float, lon1: float, lat2: float, lon2: float) -> list[dict[str, float]]:
    return [_pt(lat1, lon1), _pt(lat2, lon1), _pt(lat2, lon2), _pt(lat1, lon2)]


# Blue Ridge B, Quezon City.
BLUE_RIDGE_B: dict[str, Any] = {
    "name": "Blue Ridge B",
    "boundary": [
        _pt(14.62004750426467, 121.07443830194403),
        _pt(14.616393204867702, 121.07273778141894),
        _pt(14.615929596639097, 121.07383236912817),
        _pt(14.616265696928444, 121.07424286284156),
        _pt(14.616462118934791, 121.07620060208043),
        _pt(14.617658106949442, 121.0765344101521),
        _pt(14.617863257522814, 121.07769371656481),
        _pt(14.618500532544994, 121.07782453324269),
    ],
    "parking_zones": [
        {"id": 1, "name": "P1", "points": _rect(14.6162, 121.0735, 14.6166, 121.0739)},
        {"id": 2, "name": "P2", "points": _rect(14.6180, 121.0762, 14.6184, 121.0766)},
    ],
    "non_parking_zones": [
        {"id": 1, "name": "NP1", "points": _rect(14.6168, 121.0740, 14.6172, 121.0745)},
        {"id": 2, "name": "NP2", "points": _rect(14.6175, 121.0755, 14.6179, 121.0760)},
    ],
    "vehicles": [
        {
            "id": 1, "latitude": 14.6170, "longitude": 121.0750, "is_stationary": False,
            "plate_number": "ABC-1234", "make": "Toyota", "model": "Camry", "year": 2020,
            "color": "Silver", "owner_name": "John Smith", "owner_phone": "+63 912 345 6789",
            "owner_email": "john.smith@email.com", "registration_date": "2020-03-15",
            "last_inspection": "2024-01-10",
        },
        {
            "id": 2, "latitude": 14.6180, "longitude": 121.0760, "is_stationary": False,
            "plate_number": "XYZ-5678", "make": "Honda", "model": "Civic", "year": 2019,
            "color": "Blue", "owner_name": "Maria Garcia", "owner_phone": "+63 917 890 1234",
            "owner_email": "maria.garcia@email.com", "registration_date": "2019-07-22",
            "last_inspection": "2023-12-05",
        },
        {
            "id": 3, "latitude": 14.6164, "longitude": 121.0737, "is_stationary": True,
            "plate_number": "DEF-9012", "make": "Ford", "model": "Focus", "year": 2021,
            "color": "Red", "owner_name": "Robert Johnson", "owner_phone": "+63 918 234 5678",
            "owner_email": "robert.johnson@email.com", "registration_date": "2021-05-10",
            "last_inspection": "2024-02-15",
        },
        {
            "id": 4, "latitude": 14.6165, "longitude": 121.0738, "is_stationary": True,
            "plate_number": "GHI-3456", "make": "Nissan", "model": "Altima", "year": 2018,
            "color": "Black", "owner_name": "Sarah Wilson", "owner_phone": "+63 919 456 7890",
            "owner_email": "sarah.wilson@email.com", "registration_date": "2018-11-30",
            "last_inspection": "2023-11-20",
        },
        {
            "id": 5, "latitude": 14.6182, "longitude": 121.0764, "is_stationary": True,
            "plate_number": "JKL-7890", "make": "Hyundai", "model": "Elantra", "year": 2022,
            "color": "White", "owner_name": "Michael Brown", "owner_phone": "+63 920 678 9012",
            "owner_email": "michael.brown@email.com", "registration_date": "2022-01-15",
            "last_inspection": "2024-03-01",
        },
        {
            "id": 6, "latitude": 14.6183, "longitude": 121.0765, "is_stationary": True,
            "plate_number": "MNO-2345", "make": "Mazda", "model": "CX-5", "year": 2020,
            "color": "Gray", "owner_name": "Lisa Davis", "owner_phone": "+63 921 890 1234",
            "owner_email": "lisa.davis@email.com", "registration_date": "2020-09-08",
            "last_inspection": "2023-10-12",
        },
        # Parked inside NP1.
        {
            "id": 7, "latitude": 14.6170, "longitude": 121.0742, "is_stationary": True,
            "plate_number": "PQR-6789", "make": "BMW", "model": "X3", "year": 2021,
            "color": "Black", "owner_name": "David Martinez", "owner_phone": "+63 922 123 4567",
            "owner_email": "david.martinez@email.com", "registration_date": "2021-04-20",
            "last_inspection": "2024-01-25",
        },
    ],
}


def parse_site(data: dict[str, Any]) -> tuple[SiteGeometry, list[Vehicle]]:
    schema = SiteSchema(**data)
    return schema.to_geometry(), schema.to_vehicles()


def default_site() -> tuple[SiteGeometry, list[Vehicle]]:
    """Return the built-in Blue Ridge B geometry and demo fleet."""

    return parse_site(BLUE_RIDGE_B)


def load_site(path: str | Path) -> tuple[SiteGeometry, list[Vehicle]]:
    """Load a YAML site file.

    Raises:
        FileNotFoundError: if `path` does not exist.
        pydantic.ValidationError: if the geometry or roster is malformed.
    """

    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return parse_site(data)
