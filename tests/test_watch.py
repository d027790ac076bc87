import asyncio

import pytest

import ridgewatch.services.state as state
from ridgewatch.core.config.settings import MonitorSettings
from ridgewatch.core.types import AnalyticsSnapshot
from ridgewatch.tools.watch import format_snapshot, watch


@pytest.fixture(autouse=True)
def _reset_state(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        state, "load_settings", lambda: MonitorSettings(tick_interval_s=0.01, jitter_interval_s=0)
    )
    state._settings = None
    state._engine = None
    state._scheduler = None
    yield
    state.stop_engine()
    state._settings = None


def test_format_snapshot():
    snap = AnalyticsSnapshot(
        timestamp=60_000,
        total_in_boundary=7,
        moving_count=2,
        parked_count=4,
        violating_count=1,
        warnings_count=0,
        avg_violation_ms=65_000,
    )
    assert format_snapshot(snap) == (
        "t=60000 in=7 moving=2 parked=4 violating=1 warnings=0 avg=01:05"
    )


def test_watch_streams_live_snapshots():
    lines = []
    delivered = asyncio.run(watch(0.2, sink=lines.append))
    assert delivered == len(lines)
    assert delivered >= 2
    assert "violating=1" in lines[-1]
    assert state._engine is None


def test_watch_applies_preset():
    lines = []
    asyncio.run(watch(0.05, preset="static", sink=lines.append))
    assert state.get_settings().jitter_interval_s == 0.0
    assert state.get_settings().tick_interval_s == 2.0
    assert len(lines) == 1


def test_watch_rejects_unknown_preset():
    with pytest.raises(KeyError):
        asyncio.run(watch(0.01, preset="turbo"))
