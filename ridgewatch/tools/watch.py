"""Live console monitor: runs the session engine in real time on asyncio.

Example:
    python -m ridgewatch.tools.watch --seconds 30 --preset demo
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from ridgewatch.core.config.presets import preset_patch
from ridgewatch.core.roster import format_duration
from ridgewatch.core.types import AnalyticsSnapshot
from ridgewatch.services import state

logger = logging.getLogger(__name__)


def format_snapshot(snap: AnalyticsSnapshot) -> str:
    return (
        f"t={snap.timestamp} in={snap.total_in_boundary} moving={snap.moving_count} "
        f"parked={snap.parked_count} violating={snap.violating_count} "
        f"warnings={snap.warnings_count} avg={format_duration(snap.avg_violation_ms)}"
    )


async def watch(seconds: float, preset: str | None = None, sink=print) -> int:
    """Run the engine for `seconds` and feed each published snapshot to `sink`.

    Returns the number of snapshots delivered.
    """

    if preset:
        state.reload_settings(preset_patch(preset))
    engine = state.get_engine()
    delivered = 0

    def _on_snapshot(snap: AnalyticsSnapshot) -> None:
        nonlocal delivered
        delivered += 1
        sink(format_snapshot(snap))

    unsubscribe = engine.subscribe(_on_snapshot)
    try:
        await asyncio.sleep(seconds)
    finally:
        unsubscribe()
        state.stop_engine()
    logger.info("Watched %.1fs, %d snapshots", seconds, delivered)
    return delivered


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print live metrics as they are published")
    parser.add_argument("--seconds", type=float, default=60.0)
    parser.add_argument("--preset", default=None, help="live|demo|static")
    parser.add_argument("--log-level", default="WARNING")
    parsed = parser.parse_args()
    logging.basicConfig(level=getattr(logging, parsed.log_level.upper(), logging.WARNING))
    try:
        asyncio.run(watch(parsed.seconds, parsed.preset))
    except KeyError as e:
        raise SystemExit(f"Unknown preset {e}")
