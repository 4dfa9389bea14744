# tests/test_waits.py
"""
Tests for wait utilities.
"""

import time

import pytest

from stepdriver.exceptions import TimeoutError
from stepdriver.waits import poll_until, retry_attempts, wait_until


class TestPollUntil:
    """Tests for poll_until function."""

    def test_returns_truthy_value(self):
        """Should return the truthy value from predicate."""
        assert poll_until(lambda: "hello", timeout=5) == "hello"

    def test_returns_none_on_timeout(self):
        """Should return None when the predicate never succeeds."""
        assert poll_until(lambda: False, timeout=0.2, interval=0.05) is None

    def test_runs_at_least_once_with_zero_timeout(self):
        """A zero duration still evaluates the predicate once."""
        counter = {"value": 0}

        def predicate():
            counter["value"] += 1
            return False

        poll_until(predicate, timeout=0, interval=0.05)
        assert counter["value"] >= 1

    def test_waits_for_condition(self):
        """Should keep polling until the condition becomes true."""
        counter = {"value": 0}

        def predicate():
            counter["value"] += 1
            return counter["value"] >= 3

        start = time.monotonic()
        assert poll_until(predicate, timeout=5, interval=0.1) is True
        elapsed = time.monotonic() - start
        assert elapsed >= 0.2
        assert elapsed < 1.0

    def test_exceptions_count_as_not_yet(self):
        """An exception from the predicate is retried, not propagated."""
        counter = {"value": 0}

        def predicate():
            counter["value"] += 1
            if counter["value"] < 3:
                raise RuntimeError("not ready")
            return "ok"

        assert poll_until(predicate, timeout=2, interval=0.05) == "ok"

    @pytest.mark.parametrize("duration", [0.1, 0.3, 0.5])
    def test_failing_poll_lasts_about_duration(self, duration):
        """A never-true predicate polls for at least duration and not much longer."""
        interval = 0.05
        start = time.monotonic()
        poll_until(lambda: False, timeout=duration, interval=interval)
        elapsed = time.monotonic() - start
        assert elapsed >= duration
        assert elapsed <= duration + interval + 0.25


class TestWaitUntil:
    """Tests for wait_until function."""

    def test_returns_immediately_when_true(self):
        """Should return immediately when predicate is true."""
        assert wait_until(lambda: True, timeout=5) is True

    def test_timeout_raises_error(self):
        """Should raise TimeoutError when timeout expires."""
        with pytest.raises(TimeoutError) as exc_info:
            wait_until(lambda: False, timeout=0.3, interval=0.1)

        assert "Timed out" in str(exc_info.value)
        assert exc_info.value.timeout == 0.3
        assert exc_info.value.attempt_count >= 2

    def test_preserves_exception(self):
        """Should preserve the last exception in TimeoutError."""
        def failing_predicate():
            raise ValueError("test error")

        with pytest.raises(TimeoutError) as exc_info:
            wait_until(failing_predicate, timeout=0.3, interval=0.1, description="dialog")

        assert isinstance(exc_info.value.original_exception, ValueError)
        assert "test error" in str(exc_info.value.original_exception)
        assert exc_info.value.description == "dialog"


class TestRetryAttempts:
    """Tests for retry_attempts function."""

    def test_single_attempt(self):
        """One attempt means exactly one call."""
        calls = []
        result = retry_attempts(lambda: calls.append(1) or None, attempts=1, interval=0)
        assert result is None
        assert len(calls) == 1

    def test_stops_at_first_accepted_result(self):
        """Should return as soon as accept() approves a result."""
        values = iter([None, None, "window", "late"])
        calls = []

        def call():
            calls.append(1)
            return next(values)

        assert retry_attempts(call, attempts=5, interval=0) == "window"
        assert len(calls) == 3

    def test_returns_last_result_when_exhausted(self):
        """Should give back the last rejected result after all attempts."""
        values = iter([1, 2, 3])
        result = retry_attempts(lambda: next(values), attempts=3, interval=0, accept=lambda v: v > 10)
        assert result == 3

    def test_zero_attempts_still_calls_once(self):
        """Attempt counts below one are treated as one."""
        calls = []
        retry_attempts(lambda: calls.append(1), attempts=0, interval=0)
        assert len(calls) == 1
