"""Simulated vehicle movement.

Stands in for a position feed during demos. Offsets are uniform in
[-step/2, step/2) degrees per axis.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

import numpy as np

from ridgewatch.core.geofence import Bounds
from ridgewatch.core.types import Point, Vehicle


def _offsets(rng: np.random.Generator, n: int, step: float) -> np.ndarray:
    return (rng.random((n, 2)) - 0.5) * float(step)


def jitter(vehicles: Sequence[Vehicle], rng: np.random.Generator, step: float = 0.0002) -> list[Vehicle]:
    """Nudge every moving vehicle; stationary vehicles are returned untouched."""

    moving = [i for i, v in enumerate(vehicles) if not v.is_stationary]
    out = list(vehicles)
    if not moving or step <= 0:
        return out
    offsets = _offsets(rng, len(moving), step)
    for (dlat, dlon), i in zip(offsets, moving):
        pos = out[i].position
        out[i] = replace(
            out[i], position=Point(pos.latitude + float(dlat), pos.longitude + float(dlon))
        )
    return out


def scatter(
    vehicles: Sequence[Vehicle],
    rng: np.random.Generator,
    bounds: Bounds,
    spread: float = 0.003,
) -> list[Vehicle]:
    """Move every vehicle by a larger random offset, clamped to `bounds`."""

    if not vehicles:
        return []
    min_lat, min_lon, max_lat, max_lon = bounds
    pts = np.array([[v.position.latitude, v.position.longitude] for v in vehicles], dtype=np.float64)
    pts += _offsets(rng, len(vehicles), spread)
    np.clip(pts[:, 0], min_lat, max_lat, out=pts[:, 0])
    np.clip(pts[:, 1], min_lon, max_lon, out=pts[:, 1])
    return [
        replace(v, position=Point(float(lat), float(lon)))
        for v, (lat, lon) in zip(vehicles, pts)
    ]
