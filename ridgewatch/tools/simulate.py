from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path

import numpy as np
from pydantic import ValidationError

from ridgewatch.core.config.presets import list_presets, preset_patch
from ridgewatch.core.config.settings import MonitorSettings, load_settings, settings_to_dict
from ridgewatch.core.config.site import default_site, load_site
from ridgewatch.core.roster import VehicleFilter, filter_vehicles, format_duration, sort_for_display
from ridgewatch.core.scheduling import ManualScheduler
from ridgewatch.core.types import Millis
from ridgewatch.services.engine import MonitorEngine


def _to_jsonable(obj):
    if is_dataclass(obj):
        return _to_jsonable(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(v) for v in obj]
    return obj


def _build_settings(args) -> MonitorSettings:
    settings = load_settings()
    patch: dict = {}
    if args.preset:
        patch.update(preset_patch(args.preset))
    if args.seed is not None:
        patch["seed"] = args.seed
    if args.site:
        patch["site_path"] = args.site
    if patch:
        settings = MonitorSettings(**{**settings_to_dict(settings), **patch})
    return settings


def _roster_rows(engine: MonitorEngine, now: Millis, flt: VehicleFilter | str) -> list[dict]:
    """Violators first, then parked, then moving; one row per vehicle in `flt`."""

    shown = filter_vehicles(engine.vehicles, engine.site, flt)
    rows = []
    for v in sort_for_display(shown, engine.site):
        c = engine.site.classify(v)
        started = v.violation_start_at
        rows.append(
            {
                "id": v.id,
                "plate_number": v.plate_number,
                "status": c.status.value,
                "zone": c.zone.value,
                "violation": c.violation,
                "warning_issued": v.warning_issued,
                "violation_for": format_duration(now - started) if started is not None else None,
            }
        )
    return rows


def run(args):
    if args.list_presets:
        print(json.dumps(list_presets(), indent=2))
        return
    if not args.output:
        raise SystemExit("--output is required")
    try:
        settings = _build_settings(args)
        site, vehicles = load_site(settings.site_path) if settings.site_path else default_site()
    except KeyError as e:
        raise SystemExit(f"Unknown preset {e}")
    except FileNotFoundError as e:
        raise SystemExit(f"Cannot open site file {e.filename}")
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration: {e}")
    try:
        flt = VehicleFilter(args.vehicle_filter)
    except ValueError:
        raise SystemExit(f"Unknown filter {args.vehicle_filter!r}")

    scheduler = ManualScheduler(start_ms=int(args.start_ms))
    engine = MonitorEngine(settings, site=site, vehicles=vehicles, scheduler=scheduler)

    outputs = []
    unsubscribe = engine.subscribe(lambda snap: outputs.append(_to_jsonable(snap)))
    engine.start()

    elapsed = 0.0
    step_s = float(args.scatter_every) if args.scatter_every else float(args.duration)
    while elapsed < args.duration:
        chunk = min(step_s, args.duration - elapsed)
        scheduler.advance(chunk)
        elapsed += chunk
        if args.scatter_every and elapsed < args.duration:
            engine.simulate_scatter()

    engine.stop()
    unsubscribe()

    result = {
        "settings": settings_to_dict(settings),
        "snapshots": outputs,
        "vehicles": _to_jsonable(list(engine.vehicles)),
        "notices": _to_jsonable(list(engine.notices.history)),
        "roster": _roster_rows(engine, scheduler.now_ms(), flt),
    }
    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2)
    print(f"Wrote {len(outputs)} snapshots to {out_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a simulated monitoring session")
    parser.add_argument("--output", default=None, help="Where to save JSON output")
    parser.add_argument("--duration", type=float, default=300.0, help="Simulated seconds")
    parser.add_argument("--site", default=None, help="YAML site file (default: built-in)")
    parser.add_argument("--preset", default=None, help="live|demo|static")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--start-ms", type=int, default=0, help="Virtual clock origin (epoch ms)")
    parser.add_argument(
        "--scatter-every", type=float, default=0.0, help="Scatter all vehicles every N seconds"
    )
    parser.add_argument(
        "--filter",
        dest="vehicle_filter",
        default="All",
        help="Roster filter: All|Moving|Parked|Violating",
    )
    parser.add_argument("--list-presets", action="store_true", help="Print presets and exit")
    parser.add_argument("--log-level", default="WARNING")
    parsed = parser.parse_args()
    logging.basicConfig(level=getattr(logging, parsed.log_level.upper(), logging.WARNING))
    run(parsed)
