# stepdriver/waits.py
"""
@file waits.py
@brief Bounded polling and attempt-count retry utilities.

Two bounding styles coexist:
  - poll_until / wait_until are wall-clock bounded (the display, vanish
    and enable predicates);
  - retry_attempts is bounded by attempt count (raw backend calls and the
    window/pane lookup).
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple, TypeVar

from .exceptions import TimeoutError
from .timinglogger import TIMING_LOGGER

T = TypeVar("T")


def _now() -> float:
    """Monotonic time source for deterministic timeout calculations."""
    return time.monotonic()


def _poll(
    predicate: Callable[[], T],
    timeout: float,
    interval: float,
    description: str,
    stage: Optional[str],
) -> Tuple[Optional[T], int, float, Optional[Exception]]:
    start = _now()
    attempts = 0
    last_exception: Optional[Exception] = None

    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.log(
            event="poll_start",
            description=description,
            metadata={"timeout_s": timeout, "interval_s": interval, "stage": stage},
        )

    while True:
        attempts += 1
        try:
            result = predicate()
            if result:
                if TIMING_LOGGER.is_enabled():
                    TIMING_LOGGER.log(
                        event="poll_success",
                        description=description,
                        status="success",
                        metadata={
                            "attempts": attempts,
                            "elapsed_s": round(_now() - start, 3),
                            "stage": stage,
                        },
                    )
                return result, attempts, _now() - start, None
        except Exception as e:
            last_exception = e

        elapsed = _now() - start
        if elapsed > timeout:
            break
        time.sleep(max(0.0, min(interval, timeout - elapsed)) or 0.001)

    elapsed = _now() - start
    if TIMING_LOGGER.is_enabled():
        TIMING_LOGGER.log(
            event="poll_timeout",
            description=description,
            status="error",
            metadata={
                "timeout_s": timeout,
                "attempts": attempts,
                "elapsed_s": round(elapsed, 3),
                "stage": stage,
                "last_error": type(last_exception).__name__ if last_exception else None,
            },
        )
    return None, attempts, elapsed, last_exception


def poll_until(
    predicate: Callable[[], T],
    timeout: float,
    interval: float = 0.2,
    description: str = "condition",
    stage: Optional[str] = None,
) -> Optional[T]:
    """
    Run predicate at least once, then repeatedly until it returns a truthy
    value or more than `timeout` seconds have elapsed.

    Exceptions raised by predicate count as "not yet". Returns the truthy
    value, or None on timeout.
    """
    result, _, _, _ = _poll(predicate, timeout, interval, description, stage)
    return result


def wait_until(
    predicate: Callable[[], T],
    timeout: float,
    interval: float = 0.2,
    description: str = "condition",
    stage: Optional[str] = None,
) -> T:
    """
    Like poll_until, but raise TimeoutError (keeping the last exception
    raised by predicate) instead of returning None.
    """
    result, attempts, elapsed, last_exception = _poll(predicate, timeout, interval, description, stage)
    if result:
        return result

    if last_exception is not None:
        error = TimeoutError(
            f"Timed out waiting for {description} after {timeout}s: "
            f"{type(last_exception).__name__}: {last_exception}"
        )
    else:
        error = TimeoutError(
            f"Timed out waiting for {description} after {timeout}s "
            f"(condition kept returning falsy)"
        )
    error.original_exception = last_exception
    error.description = description
    error.timeout = timeout
    error.attempt_count = attempts
    error.elapsed_time = elapsed
    error.stage = stage
    raise error


def retry_attempts(
    call: Callable[[], T],
    attempts: int,
    interval: float = 0.1,
    accept: Callable[[T], bool] = bool,
    description: str = "call",
) -> T:
    """
    Invoke `call` up to `attempts` times, pausing `interval` between tries,
    and return the first result `accept` approves (or the last result).
    """
    attempts = max(1, int(attempts))
    result = call()
    for attempt in range(2, attempts + 1):
        if accept(result):
            return result
        if TIMING_LOGGER.is_enabled():
            TIMING_LOGGER.log(
                event="attempt_retry",
                description=description,
                metadata={"attempt": attempt, "of": attempts},
            )
        time.sleep(interval)
        result = call()
    return result
