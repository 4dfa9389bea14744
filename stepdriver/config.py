# stepdriver/config.py
"""
@file config.py
@brief Run settings: timeouts, pacing, image/app lookup and the retry budget.

Precedence is deterministic: base defaults -> preset -> settings file -> CLI
overrides. A Settings instance is built once per run and passed explicitly.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Generator, Optional

import yaml

from .exceptions import ConfigurationError
from .timings import ACTION_WAITS, build_preset_values


@dataclass
class Settings:
    find_wait: float = 10.0
    max_wait: float = 30.0
    reduced_find_wait: float = 5.0
    polling_interval: float = 0.2
    backend_retry_attempts: int = 1
    backend_retry_interval: float = 0.1
    window_search_attempts: int = 10
    step_delay: float = 0.1
    write_pause: float = 0.2
    scroll_pause: float = 0.5
    url_pause: float = 0.5
    scale: float = 100.0
    image_similarity: float = 0.7
    retry_enabled: bool = True
    image_dir: str = "."
    repo_path: str = "."
    apps: Dict[str, str] = field(default_factory=dict)
    action_waits: Dict[str, float] = field(default_factory=lambda: dict(ACTION_WAITS))

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def build(
        cls,
        *,
        preset: str = "default",
        file_values: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        """Build a run snapshot from preset, settings file values and overrides."""
        try:
            values = build_preset_values(preset)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        values.setdefault("action_waits", dict(ACTION_WAITS))
        for layer in (file_values or {}, overrides or {}):
            _merge_layer(values, layer)
        return cls(**_coerce(values))

    @classmethod
    def load(
        cls,
        path: str,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        """Load a YAML settings file; relative dirs resolve against the file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Settings file must be a mapping at root")

        base_dir = os.path.dirname(os.path.abspath(path))
        for key in ("image_dir", "repo_path"):
            if key in data and not os.path.isabs(str(data[key])):
                data[key] = os.path.normpath(os.path.join(base_dir, str(data[key])))
        return cls.build(preset=preset, file_values=data, overrides=overrides)

    def validate(self) -> None:
        positive = ("find_wait", "max_wait", "reduced_find_wait", "polling_interval", "scale")
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be > 0")
        for name in ("backend_retry_attempts", "window_search_attempts"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be >= 1")
        if not 0.0 < self.image_similarity <= 1.0:
            raise ConfigurationError("image_similarity must be in (0, 1]")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    # ------------------------------------------------------------- lookups

    def resolve_app(self, name: str) -> str:
        """Map a registered application name (any case) to its path."""
        for key, value in self.apps.items():
            if key.upper() == str(name).upper():
                return value
        return name

    def image_path(self, image: str) -> str:
        if os.path.isabs(image):
            return image
        return os.path.join(self.image_dir, image)

    def repo_file(self, *parts: str) -> str:
        return os.path.join(self.repo_path, *parts)

    def action_wait(self, action: str) -> float:
        return float(self.action_waits.get(action, self.find_wait))

    # ------------------------------------------------------ scoped changes

    def retry_budget(self) -> RetryBudget:
        return RetryBudget(self)

    @contextmanager
    def override(self, **kwargs: Any) -> Generator[Settings, None, None]:
        """
        Temporarily override settings; previous values are always restored.

        Usage:
            with settings.override(find_wait=1.0):
                finder.get_element(...)
        """
        previous: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise ConfigurationError(f"Unknown setting: {key}")
            previous[key] = getattr(self, key)
            setattr(self, key, value)
        try:
            yield self
        finally:
            for key, value in previous.items():
                setattr(self, key, value)


class RetryBudget:
    """
    Nominal and reduced find timeouts for a step's first attempt and retry.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def nominal(self) -> float:
        return self._settings.find_wait

    @property
    def reduced(self) -> float:
        return min(self._settings.find_wait, self._settings.reduced_find_wait)

    @contextmanager
    def reduced_scope(self) -> Generator[float, None, None]:
        """Shrink find_wait for the duration of the block, then restore it."""
        with self._settings.override(find_wait=self.reduced) as s:
            yield s.find_wait


def _merge_layer(values: Dict[str, Any], layer: Dict[str, Any]) -> None:
    known = {f.name for f in fields(Settings)}
    for key, value in layer.items():
        if key not in known:
            raise ConfigurationError(f"Unknown setting: {key}")
        if value is None:
            continue
        if key in ("apps", "action_waits"):
            if not isinstance(value, dict):
                raise ConfigurationError(f"{key} must be a mapping")
            merged = dict(values.get(key) or {})
            merged.update(value)
            values[key] = merged
        else:
            values[key] = value


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Cast raw YAML/CLI values to the declared field types."""
    out: Dict[str, Any] = {}
    for f in fields(Settings):
        if f.name not in values:
            continue
        raw = values[f.name]
        try:
            if f.type in ("float", float):
                out[f.name] = float(raw)
            elif f.type in ("int", int):
                out[f.name] = int(raw)
            elif f.type in ("bool", bool):
                out[f.name] = _to_bool(raw)
            elif f.type in ("str", str):
                out[f.name] = str(raw)
            elif f.name == "action_waits":
                out[f.name] = {str(k): float(v) for k, v in raw.items()}
            else:
                out[f.name] = {str(k): str(v) for k, v in raw.items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value for {f.name}: {raw!r}") from e
    return out


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    raise ValueError(raw)
