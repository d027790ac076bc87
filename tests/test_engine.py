import numpy as np

from ridgewatch.core.config.settings import MonitorSettings
from ridgewatch.core.geofence import SiteGeometry
from ridgewatch.core.scheduling import ManualScheduler
from ridgewatch.core.types import Point, Vehicle, Zone
from ridgewatch.services.engine import MonitorEngine

SQUARE = (Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0))
NO_PARKING = Zone(id=1, polygon=(Point(1, 1), Point(1, 2), Point(2, 2), Point(2, 1)))
SITE = SiteGeometry(boundary=SQUARE, non_parking_zones=(NO_PARKING,))


def _engine(vehicles, **overrides):
    settings = MonitorSettings(**{"jitter_interval_s": 0, **overrides})
    sched = ManualScheduler()
    return MonitorEngine(settings, site=SITE, vehicles=vehicles, scheduler=sched), sched


def test_start_runs_first_pass_and_publishes():
    engine, sched = _engine([Vehicle(id=1, position=Point(1.5, 1.5), is_stationary=True)])
    received = []
    engine.subscribe(received.append)
    engine.start()

    assert engine.vehicles[0].violation_start_at == 0
    assert received[-1].violating_count == 1
    assert engine.notices.current(0).message == "Vehicle 1 parked in a non-parking zone"
    assert engine.notices.current(2_500) is None


def test_warning_latches_after_threshold():
    engine, sched = _engine([Vehicle(id=1, position=Point(1.5, 1.5), is_stationary=True)])
    engine.start()
    sched.advance(119)
    assert engine.vehicles[0].warning_issued is False
    sched.advance(1)
    assert engine.vehicles[0].warning_issued is True
    snap = engine.snapshot()
    assert snap.warnings_count == 1
    assert snap.avg_violation_ms == 120_000
    assert snap.timestamps == (0, 60_000, 120_000)


def test_violation_notice_raised_once():
    engine, sched = _engine([Vehicle(id=1, position=Point(1.5, 1.5), is_stationary=True)])
    engine.start()
    sched.advance(30)
    assert len(engine.notices.history) == 1


def test_static_roster_is_published_once():
    engine, sched = _engine([Vehicle(id=1, position=Point(8, 8), is_stationary=False)])
    received = []
    engine.subscribe(received.append)
    engine.start()
    sched.advance(10)
    assert len(received) == 1
    assert received[0].moving_count == 1


def test_issue_warning_notifies_and_publishes():
    engine, sched = _engine([Vehicle(id=1, position=Point(8, 8), is_stationary=True)])
    engine.start()
    assert engine.issue_warning(1) is True
    assert engine.notices.current(0).message == "Warning issued to Vehicle 1"
    assert engine.snapshot().warnings_count == 1
    assert engine.issue_warning(99) is False


def test_stop_disposes_timers():
    engine, sched = _engine([Vehicle(id=1, position=Point(8, 8))], jitter_interval_s=2.0)
    engine.start()
    assert sched.pending == 2
    engine.stop()
    engine.stop()
    assert sched.pending == 0
    assert engine.running is False


def test_jitter_task_moves_moving_vehicles():
    engine, sched = _engine(
        [Vehicle(id=1, position=Point(5, 5)), Vehicle(id=2, position=Point(6, 6), is_stationary=True)],
        jitter_interval_s=2.0,
        seed=3,
    )
    engine.start()
    sched.advance(2)
    assert engine.vehicles[0].position != Point(5, 5)
    assert engine.vehicles[1].position == Point(6, 6)


def test_scatter_keeps_vehicles_in_extent():
    engine, sched = _engine(
        [Vehicle(id=i, position=Point(5, 5)) for i in range(1, 6)], scatter_spread=50.0
    )
    engine.rng = np.random.default_rng(0)
    engine.simulate_scatter()
    for v in engine.vehicles:
        assert 0 <= v.position.latitude <= 10
        assert 0 <= v.position.longitude <= 10


def test_default_site_metrics():
    engine = MonitorEngine(MonitorSettings(jitter_interval_s=0), scheduler=ManualScheduler(start_ms=1_000))
    engine.start()
    snap = engine.snapshot()
    assert snap.total_in_boundary == 7
    assert snap.moving_count == 2
    assert snap.parked_count == 4
    assert snap.violating_count == 1
    assert snap.warnings_count == 0
