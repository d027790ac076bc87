from __future__ import annotations

from typing import Any


# Named settings patches.
#
# Notes:
# - warning_threshold_s: parked-in-no-parking time before a warning latches
# - tick_interval_s / jitter_interval_s: reclassification and drift cadence


PRESETS: dict[str, dict[str, Any]] = {
    # Same cadence as the field app.
    "live": {
        "tick_interval_s": 1.0,
        "jitter_interval_s": 2.0,
        "warning_threshold_s": 120.0,
        "notice_ttl_s": 2.5,
    },
    # Short threshold so warnings show up within a walkthrough.
    "demo": {
        "tick_interval_s": 1.0,
        "jitter_interval_s": 1.0,
        "warning_threshold_s": 15.0,
        "notice_ttl_s": 2.5,
    },
    # No drift; positions change only through explicit updates.
    "static": {
        "tick_interval_s": 2.0,
        "jitter_interval_s": 0.0,
        "warning_threshold_s": 120.0,
    },
}


PRESET_LABELS: dict[str, str] = {
    "live": "Live",
    "demo": "Demo",
    "static": "Static",
}


def list_presets() -> list[dict[str, Any]]:
    return [
        {
            "id": preset_id,
            "label": PRESET_LABELS.get(preset_id, preset_id),
            "settings": PRESETS[preset_id],
        }
        for preset_id in PRESETS.keys()
    ]


def preset_patch(preset_id: str) -> dict[str, Any]:
    if preset_id not in PRESETS:
        raise KeyError(preset_id)
    return dict(PRESETS[preset_id])
