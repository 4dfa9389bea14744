# tests/test_runner.py
"""
Tests for the Dispatcher: ordering, single reduced-timeout retry, fail-fast
and teardown.
"""

import pytest

from conftest import FakeNode
from stepdriver.exceptions import ConfigurationError
from stepdriver.geometry import Point
from stepdriver.runner import summarize
from stepdriver.steps import ExecutionStep


def steps(*rows):
    return [ExecutionStep(row[0], tuple(row[1:]), i) for i, row in enumerate(rows, start=1)]


def spy_find(engine):
    """Record find_wait at every finder.find call."""
    seen = []
    original = engine.finder.find

    def find(spec, timeout=None):
        seen.append(engine.settings.find_wait)
        return original(spec, timeout)

    engine.finder.find = find
    return seen


def events(engine, run_id):
    return [e["event"] for e in engine.dispatcher.sink.events(run_id)]


class TestRetry:
    """Tests for the single retry under a reduced timeout."""

    def test_present_element_no_retry(self, make_engine, port):
        """Clicking a present button passes without a retry."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(("click", "name", "BUTTON", "OK")), run_id="a")
        assert report["status"] == "passed"
        assert report["steps"][0]["retried"] is False
        assert port.named("click") == [("click", Point(125, 325), "left", 1)]
        assert events(engine, "a") == ["step_start", "step_pass"]

    def test_missing_element_retried_then_fails(self, make_engine, port):
        """A missing element is retried once with the reduced timeout, then the run stops."""
        engine = make_engine()
        seen = spy_find(engine)
        report = engine.dispatcher.run(steps(
            ("click", "name", "BUTTON", "Missing"),
            ("click", "name", "BUTTON", "OK"),
        ), run_id="b")
        assert report["status"] == "failed"
        assert len(report["steps"]) == 1
        assert report["steps"][0]["retried"] is True
        assert seen == [0.3, 0.1]
        assert engine.settings.find_wait == 0.3
        assert port.named("click") == []
        assert port.calls[-1] == ("close_all_apps",)
        assert events(engine, "b") == ["step_start", "step_retry", "step_fail"]

    def test_retry_can_recover(self, make_engine, login_window):
        """An element that appears before the retry passes on the second attempt."""
        engine = make_engine()
        original = engine.finder.find
        calls = {"n": 0}

        def find(spec, timeout=None):
            calls["n"] += 1
            if calls["n"] == 2:
                login_window.add(FakeNode("Button", name="Later", rect=(10, 10, 50, 30)))
            return original(spec, timeout)

        engine.finder.find = find
        report = engine.dispatcher.run(steps(("click", "name", "BUTTON", "Later")))
        assert report["status"] == "passed"
        assert report["steps"][0]["retried"] is True

    def test_retry_disabled(self, make_engine):
        """With retry disabled a failed step fails at once."""
        engine = make_engine(retry_enabled=False)
        seen = spy_find(engine)
        report = engine.dispatcher.run(steps(("click", "name", "BUTTON", "Missing")))
        assert report["steps"][0]["retried"] is False
        assert len(seen) == 1

    def test_failed_assertion_is_retried(self, make_engine):
        """Assertions report failure through the status and get the retry."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(("assert_not_exist", "name", "BUTTON", "OK")))
        assert report["status"] == "failed"
        assert report["steps"][0]["retried"] is True
        assert "does not exist" in report["steps"][0]["label"]


class TestFailFast:
    """Tests for unexpected and configuration errors."""

    def test_unexpected_error_not_retried(self, make_engine, port):
        """An exception from the input layer fails the step without a retry."""
        engine = make_engine()
        port.fail_on["click"] = RuntimeError("input blocked")
        seen = spy_find(engine)
        report = engine.dispatcher.run(steps(("click", "name", "BUTTON", "OK")), run_id="c")
        assert report["status"] == "failed"
        assert report["steps"][0]["retried"] is False
        assert "ActionError" in report["steps"][0]["error"]
        assert len(seen) == 1
        assert events(engine, "c") == ["step_start", "step_error"]

    def test_configuration_error_in_handler(self, make_engine):
        """A bad argument stops the run with status error."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(("shortcut", "control", "hyper")))
        assert report["status"] == "error"
        assert report["steps"][0]["status"] == "error"
        assert report["errors"][0]["step"] == 1

    def test_non_numeric_wait_time(self, make_engine):
        """wait_time with a non-numeric delay is a configuration error."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(("wait_time", "soon")))
        assert report["status"] == "error"
        assert "ConfigurationError" in report["steps"][0]["error"]

    def test_unknown_action_rejected_before_running(self, make_engine, port):
        """Registry validation happens before any step or teardown."""
        engine = make_engine()
        with pytest.raises(ConfigurationError):
            engine.dispatcher.run(steps(("launch_application", "Notepad"), ("click", "OK")))
        assert port.calls == []

    def test_teardown_errors_recorded(self, make_engine, port):
        """A failing close_all_apps is reported, not raised."""
        engine = make_engine()
        port.fail_on["close_all_apps"] = OSError("access denied")
        report = engine.dispatcher.run(steps(("clear",)))
        assert report["status"] == "passed"
        assert report["errors"][0]["teardown"] == "close_all_apps"


class TestScript:
    """End-to-end step lists on the fake desktop."""

    def test_login_flow(self, make_engine, port, login_window):
        """Steps run in order against the fakes."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(
            ("start_test", "login"),
            ("launch_application", "Notepad"),
            ("focus_window", "Login"),
            ("write", "id", "EDIT", "userField", "bob"),
            ("check", "name", "BUTTON", "Remember me"),
            ("shortcut", "control", "s"),
            ("assert_name", "EDIT", "mailField", "Email"),
            ("assert_enabled", "name", "BUTTON", "OK"),
        ), run_id="flow")
        assert report["status"] == "passed", report
        assert port.named("launch_app") == [("launch_app", "Notepad")]
        assert ("type_text", "bob") in port.calls
        assert ("special_key", "control", "s") in port.calls
        assert "set_focus" in login_window.calls
        assert engine.context.anchor.native_handle is login_window
        published = engine.dispatcher.sink.events("flow")
        assert published[-1]["test"] == "login"

    def test_region_element_cannot_toggle(self, make_engine):
        """Checking a location element fails with a capability error, not a crash."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(("check", "location", "10", "10")))
        assert report["status"] == "failed"
        assert "does not support" in report["steps"][0]["label"]

    def test_search_context_steps(self, make_engine):
        """Context steps narrow later searches until reset."""
        engine = make_engine()
        report = engine.dispatcher.run(steps(
            ("set_tree_scope", "children"),
            ("set_search_attempts", "2"),
            ("focus_window", "Login"),
            ("set_root_search", "false"),
            ("assert_exist", "name", "EDIT", "Email"),
            ("reset_search_context",),
        ))
        assert report["status"] == "passed", report
        assert engine.context.root_search is True
        assert engine.context.backend_retry_attempts == 2

    def test_files(self, make_engine, tmp_path):
        """File steps resolve against repo_path."""
        (tmp_path / "out").mkdir()
        (tmp_path / "out" / "report.txt").write_text("x", encoding="utf-8")
        engine = make_engine()
        report = engine.dispatcher.run(steps(
            ("assert_file_exists", "out", "report.txt"),
            ("delete_file", "out", "report.txt"),
        ))
        assert report["status"] == "passed"
        assert not (tmp_path / "out" / "report.txt").exists()


def test_summarize():
    """summarize counts passed and failed runs."""
    assert summarize([{"status": "passed"}, {"status": "failed"}, {"status": "error"}]) == {
        "total": 3, "passed": 1, "failed": 2}
