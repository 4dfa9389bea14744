# stepdriver/timings.py
"""
@file timings.py
@brief Timing presets and defaults for searches, waits and step pacing.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict


TIMEOUT_FIELDS: Dict[str, Any] = {
    "find_wait": 10.0,
    "max_wait": 30.0,
    "reduced_find_wait": 5.0,
    "polling_interval": 0.2,
    "backend_retry_attempts": 1,
    "backend_retry_interval": 0.1,
    "window_search_attempts": 10,
}

# Fixed windows used by individual actions, in seconds.
ACTION_WAITS: Dict[str, float] = {
    "assert_exist": 5.0,
    "assert_not_exist": 5.0,
    "assert_enabled": 3.0,
    "assert_not_enabled": 3.0,
    "drag_find": 2.0,
    "focus_display": 5.0,
}

PAUSE_FIELDS: Dict[str, float] = {
    "step_delay": 0.1,
    "write_pause": 0.2,
    "scroll_pause": 0.5,
    "url_pause": 0.5,
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "find_wait": 5.0,
        "max_wait": 15.0,
        "reduced_find_wait": 2.0,
        "polling_interval": 0.1,
        "step_delay": 0.05,
        "write_pause": 0.1,
    },
    "slow": {
        "find_wait": 20.0,
        "max_wait": 60.0,
        "polling_interval": 0.3,
        "backend_retry_attempts": 2,
        "step_delay": 0.3,
        "scroll_pause": 0.8,
    },
    "ci": {
        "find_wait": 15.0,
        "max_wait": 45.0,
        "polling_interval": 0.25,
        "backend_retry_attempts": 2,
        "step_delay": 0.2,
    },
}


def list_presets() -> Dict[str, str]:
    return {
        "default": "Balanced defaults for local desktops",
        "fast": "Short waits for quick local iteration",
        "slow": "Long waits and extra backend attempts for sluggish machines",
        "ci": "Extended waits for shared CI agents",
    }


def build_preset_values(preset: str) -> Dict[str, Any]:
    """Return base values with the named preset applied on top."""
    name = (preset or "default").lower()
    if name != "default" and name not in PRESET_OVERRIDES:
        raise ValueError(f"Unknown timing preset: {preset}")
    values: Dict[str, Any] = deepcopy(TIMEOUT_FIELDS)
    values.update(PAUSE_FIELDS)
    values.update(PRESET_OVERRIDES.get(name, {}))
    return values
