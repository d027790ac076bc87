"""Monitor configuration.

Settings are loaded from YAML defaults and overridden by environment variables
prefixed with `RW_`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MonitorSettings(BaseSettings):
    """Runtime configuration loaded from YAML defaults and `RW_` env overrides."""

    # Reclassification cadence.
    tick_interval_s: float = 1.0
    # Simulated drift of moving vehicles; 0 disables the jitter task.
    jitter_interval_s: float = 2.0
    jitter_step: float = 0.0002
    # Offset range for the one-shot "scatter" simulation.
    scatter_spread: float = 0.003
    # Time a vehicle may stay parked in a non-parking zone before a warning latches.
    warning_threshold_s: float = 120.0
    # Violation time-series: bucket width and number of buckets kept.
    bucket_s: int = 60
    retention: int = 60
    notice_ttl_s: float = 2.5
    site_path: str | None = Field(default=None, description="YAML site file; None = built-in site")
    seed: int | None = None

    model_config = SettingsConfigDict(env_prefix="RW_", validate_assignment=True)

    @field_validator("tick_interval_s", "notice_ttl_s")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if float(v) <= 0:
            raise ValueError("must be > 0")
        return float(v)

    @field_validator("jitter_interval_s", "jitter_step", "scatter_spread", "warning_threshold_s")
    @classmethod
    def _validate_non_negative(cls, v: float) -> float:
        if float(v) < 0:
            raise ValueError("must be >= 0")
        return float(v)

    @field_validator("bucket_s")
    @classmethod
    def _validate_bucket(cls, v: int) -> int:
        if int(v) <= 0:
            raise ValueError("bucket_s must be > 0")
        return int(v)

    @field_validator("retention")
    @classmethod
    def _validate_retention(cls, v: int) -> int:
        if int(v) < 1:
            raise ValueError("retention must be >= 1")
        return int(v)

    @property
    def warning_threshold_ms(self) -> int:
        return int(round(self.warning_threshold_s * 1000))

    @property
    def bucket_ms(self) -> int:
        return int(self.bucket_s) * 1000

    @property
    def notice_ttl_ms(self) -> int:
        return int(round(self.notice_ttl_s * 1000))


def settings_to_dict(settings: MonitorSettings) -> dict[str, Any]:
    return cast(dict[str, Any], settings.model_dump())


def _config_path() -> Path:
    """Return the YAML configuration path (defaults to config/ridgewatch.config.yml)."""

    return Path(os.getenv("RW_CONFIG", "config/ridgewatch.config.yml"))


def load_settings() -> MonitorSettings:
    """Load settings from YAML and environment variables.

    YAML provides defaults; environment variables override.
    """

    data: dict[str, Any] = {}
    path = _config_path()
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    env_settings = MonitorSettings()
    env_overrides: dict[str, Any] = {
        name: getattr(env_settings, name) for name in env_settings.model_fields_set
    }

    merged = {**data, **env_overrides}
    return MonitorSettings(**merged)
