# tests/test_config.py
"""
Tests for Settings, presets and the retry budget.
"""

import os

import pytest
import yaml

from stepdriver.config import Settings
from stepdriver.exceptions import ConfigurationError
from stepdriver.timings import build_preset_values, list_presets


class TestPresets:
    """Tests for timing presets."""

    def test_default_values(self):
        """Defaults match the documented timings."""
        settings = Settings.build()
        assert settings.find_wait == 10.0
        assert settings.reduced_find_wait == 5.0
        assert settings.action_wait("assert_exist") == 5.0

    def test_preset_applied(self):
        """A preset overrides the base values it names."""
        assert Settings.build(preset="fast").find_wait == 5.0
        assert Settings.build(preset="CI").backend_retry_attempts == 2

    def test_unknown_preset(self):
        """Unknown presets are rejected."""
        with pytest.raises(ConfigurationError):
            Settings.build(preset="turbo")
        with pytest.raises(ValueError):
            build_preset_values("turbo")

    def test_listed_presets(self):
        """Every preset is described."""
        assert set(list_presets()) == {"default", "fast", "slow", "ci"}


class TestPrecedence:
    """Tests for settings layering."""

    def test_file_then_overrides(self):
        """Overrides beat file values which beat the preset."""
        settings = Settings.build(
            preset="slow",
            file_values={"find_wait": 12, "scale": "125"},
            overrides={"find_wait": 3},
        )
        assert settings.find_wait == 3.0
        assert settings.scale == 125.0
        assert settings.max_wait == 60.0

    def test_mappings_merge(self):
        """action_waits from a file merge into the defaults."""
        settings = Settings.build(file_values={"action_waits": {"drag_find": 4}})
        assert settings.action_wait("drag_find") == 4.0
        assert settings.action_wait("assert_enabled") == 3.0

    def test_unknown_key(self):
        """Unknown settings are configuration errors."""
        with pytest.raises(ConfigurationError):
            Settings.build(file_values={"find_timeout": 3})

    def test_bad_type(self):
        """Values that cannot be coerced are configuration errors."""
        with pytest.raises(ConfigurationError):
            Settings.build(overrides={"find_wait": "soon"})

    def test_validation(self):
        """Non-positive timeouts are rejected."""
        with pytest.raises(ConfigurationError):
            Settings(find_wait=0)
        with pytest.raises(ConfigurationError):
            Settings(image_similarity=1.5)


class TestLoad:
    """Tests for Settings.load."""

    def test_relative_dirs_resolve_against_file(self, tmp_path):
        """image_dir and repo_path are relative to the settings file."""
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "image_dir": "images",
            "repo_path": "repo",
            "retry_enabled": "no",
            "apps": {"Notepad": "C:/Windows/notepad.exe"},
        }), encoding="utf-8")
        settings = Settings.load(str(path))
        assert settings.image_dir == os.path.normpath(str(tmp_path / "images"))
        assert settings.repo_file("out", "a.txt") == os.path.join(settings.repo_path, "out", "a.txt")
        assert settings.retry_enabled is False
        assert settings.resolve_app("NOTEPAD") == "C:/Windows/notepad.exe"
        assert settings.resolve_app("calc.exe") == "calc.exe"

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML is a configuration error."""
        path = tmp_path / "settings.yaml"
        path.write_text("find_wait: [1,", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            Settings.load(str(path))

    def test_missing_file(self, tmp_path):
        """A missing file is a configuration error."""
        with pytest.raises(ConfigurationError):
            Settings.load(str(tmp_path / "absent.yaml"))


class TestRetryBudget:
    """Tests for RetryBudget and scoped overrides."""

    def test_reduced_is_min(self):
        """The reduced timeout never exceeds the nominal one."""
        assert Settings(find_wait=10, reduced_find_wait=5).retry_budget().reduced == 5
        assert Settings(find_wait=2, reduced_find_wait=5).retry_budget().reduced == 2

    def test_reduced_scope_restores(self):
        """find_wait is shrunk inside the block and restored after."""
        settings = Settings(find_wait=10, reduced_find_wait=5)
        with settings.retry_budget().reduced_scope() as reduced:
            assert reduced == 5
            assert settings.find_wait == 5
        assert settings.find_wait == 10

    def test_reduced_scope_restores_on_error(self):
        """find_wait is restored even when the block raises."""
        settings = Settings(find_wait=10, reduced_find_wait=5)
        with pytest.raises(RuntimeError):
            with settings.retry_budget().reduced_scope():
                raise RuntimeError("boom")
        assert settings.find_wait == 10

    def test_to_dict(self):
        """to_dict exposes every field."""
        values = Settings(find_wait=4).to_dict()
        assert values["find_wait"] == 4
        assert "action_waits" in values

    def test_override_unknown(self):
        """override() refuses unknown settings."""
        with pytest.raises(ConfigurationError):
            with Settings().override(speed=2):
                pass
