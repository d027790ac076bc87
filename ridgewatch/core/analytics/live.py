"""Live aggregate metrics.

Reduces the roster to the counters shown on the dashboard. Only vehicles inside
the site boundary are counted.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.types import LiveMetrics, Millis, Vehicle


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_live_metrics(vehicles: Iterable[Vehicle], site: SiteGeometry, now: Millis) -> LiveMetrics:
    """Return a `LiveMetrics` snapshot for the vehicles inside `site.boundary`."""

    inside = [v for v in vehicles if site.contains(v)]
    violating = {v.id for v in inside if site.classify(v).violation}

    moving = sum(1 for v in inside if not v.is_stationary)
    parked = sum(1 for v in inside if v.is_stationary and v.id not in violating)
    warnings = sum(1 for v in inside if v.warning_issued)

    durations = np.asarray(
        [now - v.violation_start_at for v in inside if v.violation_start_at is not None],
        dtype=np.float64,
    )
    avg_ms = _round_half_up(float(durations.mean())) if durations.size else 0

    return LiveMetrics(
        timestamp=int(now),
        total_in_boundary=len(inside),
        moving_count=moving,
        parked_count=parked,
        violating_count=len(violating),
        warnings_count=warnings,
        avg_violation_ms=avg_ms,
    )
