"""Process-wide monitor session.

The engine has no clock of its own. A host binds the scheduler it drives with
`bind_scheduler` (a `ManualScheduler` for offline runs). When nothing is bound,
`get_engine` runs the engine on the current asyncio loop, so it must then be
called from inside a running loop.
"""

from __future__ import annotations

import logging
from threading import RLock

from ridgewatch.core.config.settings import MonitorSettings, load_settings, settings_to_dict
from ridgewatch.core.scheduling import AsyncioScheduler, Scheduler
from ridgewatch.services.engine import MonitorEngine

logger = logging.getLogger(__name__)

_settings: MonitorSettings | None = None
_engine: MonitorEngine | None = None
_scheduler: Scheduler | None = None
_lock = RLock()


def _start_engine(settings: MonitorSettings) -> MonitorEngine:
    scheduler = _scheduler if _scheduler is not None else AsyncioScheduler()
    engine = MonitorEngine(settings, scheduler=scheduler)
    engine.start()
    logger.info("Monitor engine started on %s", type(scheduler).__name__)
    return engine


def _restart_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.stop()
        _engine = _start_engine(get_settings())


def bind_scheduler(scheduler: Scheduler | None) -> None:
    """Bind the scheduler engines run on; a running engine is moved onto it.

    Passing None falls back to the running asyncio loop.
    """

    global _scheduler
    with _lock:
        _scheduler = scheduler
        _restart_engine()


def get_settings() -> MonitorSettings:
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
    return _settings


def reload_settings(patch: dict | None = None) -> MonitorSettings:
    """Reload settings from disk, apply `patch`, and restart a running engine."""

    global _settings
    with _lock:
        base = load_settings()
        _settings = MonitorSettings(**{**settings_to_dict(base), **patch}) if patch else base
        _restart_engine()
    return _settings


def get_engine() -> MonitorEngine:
    """Return the session engine, starting it on the bound scheduler if needed.

    Raises:
        RuntimeError: no scheduler is bound and no asyncio loop is running.
    """

    global _engine
    with _lock:
        if _engine is None:
            _engine = _start_engine(get_settings())
    return _engine


def stop_engine() -> None:
    global _engine
    with _lock:
        if _engine is not None:
            _engine.stop()
            _engine = None
