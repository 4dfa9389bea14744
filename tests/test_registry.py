# tests/test_registry.py
"""
Tests for the (name, arity) action registry.
"""

import pytest

from stepdriver.exceptions import ConfigurationError
from stepdriver.registry import ACTION_TABLE, ActionRegistry, build_registry, normalize_name
from stepdriver.steps import ExecutionStep


class TestNormalizeName:
    """Tests for action name normalization."""

    @pytest.mark.parametrize("raw", ["waitToDisplay", "wait_to_display", "WAIT_TO_DISPLAY", "wait-to-display"])
    def test_spellings(self, raw):
        """camelCase, snake_case and upper case are one name."""
        assert normalize_name(raw) == "wait_to_display"

    def test_alias(self):
        """unCheck is an alias of uncheck."""
        assert normalize_name("unCheck") == "uncheck"


class TestActionRegistry:
    """Tests for ActionRegistry."""

    def test_lookup_by_arity(self):
        """The same name with different arities resolves separately."""
        registry = build_registry()
        assert registry.lookup("shortcut", 2).arity == 2
        assert registry.lookup("waitToDisplay", 4).name == "wait_to_display"

    def test_wrong_arity_names_valid_ones(self):
        """An arity miss lists the arities that exist."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_registry().lookup("click", 2)
        assert "takes 3" in str(exc_info.value)

    def test_unknown_action(self):
        """An unknown name is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_registry().lookup("teleport", 1)
        assert "Unknown action" in str(exc_info.value)

    def test_duplicate_registration(self):
        """Registering a (name, arity) twice is rejected."""
        registry = ActionRegistry()
        registry.register("click", 3)
        with pytest.raises(ConfigurationError):
            registry.register("Click", 3)

    def test_validate_reports_all_problems(self):
        """validate() collects every bad step before failing."""
        steps = [
            ExecutionStep("click", ("name", "BUTTON", "OK"), 1),
            ExecutionStep("click", ("name", "OK"), 2),
            ExecutionStep("fly", (), 3),
        ]
        with pytest.raises(ConfigurationError) as exc_info:
            build_registry().validate(steps)
        message = str(exc_info.value)
        assert "step 2" in message
        assert "step 3" in message
        assert "step 1" not in message

    def test_handlers_bound_from_actions(self):
        """With an Actions object each descriptor carries its bound method."""

        class Recorder:
            def __getattr__(self, name):
                return lambda *args: (name, args)

        registry = build_registry(Recorder())
        assert registry.lookup("double_click", 3).handler("name", "BUTTON", "OK") == (
            "double_click", ("name", "BUTTON", "OK"))

    def test_table_is_complete(self):
        """Every table row is registered once."""
        registry = build_registry()
        assert len(registry) == len(ACTION_TABLE)
        assert ("delete_file", 1) in registry
        assert ("delete_file", 3) not in registry
        assert registry.arities("shortcut") == [1, 2, 3]
