# stepdriver/runner.py
"""
@file runner.py
@brief Sequential step dispatcher with a single reduced-timeout retry.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from .actionlogger import ACTION_LOGGER
from .actions import Actions
from .config import Settings
from .eventhub import EVENT_HUB, EventHub
from .exceptions import ConfigurationError
from .interfaces import ICapabilityPort
from .registry import ActionDescriptor, ActionRegistry
from .steps import ExecutionStep

log = logging.getLogger("stepdriver")


class _Fatal(Exception):
    """Internal: a step ended the run (unexpected error or configuration error)."""

    def __init__(self, status: str, error: BaseException):
        super().__init__(str(error))
        self.status = status
        self.error = error


class Dispatcher:
    """
    Runs steps strictly in order.

    For each step: look up (name, arity), reset the shared status, invoke the
    handler. If the handler reports failure and retry is enabled, invoke it
    once more with find_wait shrunk to the reduced timeout; find_wait is
    restored afterwards whatever happens. The run stops at the first step
    still failing after that, or at the first unexpected error. Launched
    applications are always closed at the end.
    """

    def __init__(
        self,
        registry: ActionRegistry,
        actions: Actions,
        settings: Settings,
        port: ICapabilityPort,
        sink: Optional[EventHub] = None,
    ):
        self.registry = registry
        self.actions = actions
        self.settings = settings
        self.port = port
        self.sink = sink if sink is not None else EVENT_HUB

    def run(self, steps: Sequence[ExecutionStep], run_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Execute the step list and return a report dict.

        Raises ConfigurationError before anything runs when a step's
        name/arity is not registered.
        """
        self.registry.validate(steps)

        run_id = run_id or str(uuid4())
        ACTION_LOGGER.set_run_id(run_id)
        report: Dict[str, Any] = {
            "run_id": run_id,
            "status": "passed",
            "started_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "steps": [],
            "errors": [],
        }
        t0 = time.monotonic()
        try:
            self.port.release_all_keys()
            for position, step in enumerate(steps):
                if position:
                    time.sleep(self.settings.step_delay)
                record = self._execute(step, run_id)
                report["steps"].append(record)
                if record["status"] == "error":
                    report["status"] = "error"
                    report["errors"].append({"step": record["index"], "error": record.get("error")})
                    break
                if record["status"] == "failed":
                    report["status"] = "failed"
                    break
        finally:
            self._teardown(report)
            report["duration_sec"] = round(time.monotonic() - t0, 3)
        log.info("Run %s finished: %s", run_id, report["status"])
        return report

    def _teardown(self, report: Dict[str, Any]) -> None:
        for name, call in (("release_all_keys", self.port.release_all_keys),
                           ("close_all_apps", self.port.close_all_apps)):
            try:
                call()
            except Exception as e:
                log.error("Teardown %s failed: %s", name, e)
                report["errors"].append({"teardown": name, "error": f"{type(e).__name__}: {e}"})

    def _execute(self, step: ExecutionStep, run_id: str) -> Dict[str, Any]:
        descriptor = self.registry.lookup(step.action, len(step.args))
        if descriptor.handler is None:
            raise ConfigurationError(f"Action '{descriptor.name}' has no handler bound")

        record: Dict[str, Any] = {
            "index": step.index,
            "action": descriptor.name,
            "args": list(step.args),
            "status": "passed",
            "retried": False,
            "label": "",
        }
        started = time.monotonic()
        self.actions.status.reset()
        self._emit(run_id, "step_start", step, descriptor, attempt=1)
        try:
            passed = self._invoke(descriptor, step)
            if not passed and self.settings.retry_enabled:
                record["retried"] = True
                self._emit(run_id, "step_retry", step, descriptor, attempt=1, status="failed")
                with self.settings.retry_budget().reduced_scope():
                    passed = self._invoke(descriptor, step)
        except _Fatal as fatal:
            record["status"] = fatal.status
            record["label"] = self.actions.status.label or str(step)
            record["error"] = f"{type(fatal.error).__name__}: {fatal.error}"
            record["duration_sec"] = round(time.monotonic() - started, 3)
            self._emit(run_id, "step_error", step, descriptor, attempt=2 if record["retried"] else 1,
                       status=fatal.status, exception=fatal.error, duration=record["duration_sec"])
            return record

        record["status"] = "passed" if passed else "failed"
        record["label"] = self.actions.status.label
        if not passed and self.actions.status.error is not None:
            record["error"] = str(self.actions.status.error)
        record["duration_sec"] = round(time.monotonic() - started, 3)
        self._emit(run_id, "step_pass" if passed else "step_fail", step, descriptor,
                   attempt=2 if record["retried"] else 1, status=record["status"],
                   duration=record["duration_sec"])
        return record

    def _invoke(self, descriptor: ActionDescriptor, step: ExecutionStep) -> bool:
        self.actions.status.reset()
        try:
            descriptor.handler(*step.args)
        except ConfigurationError as e:
            log.error("Step %s: configuration error: %s", step.index, e)
            raise _Fatal("error", e) from e
        except Exception as e:
            log.exception("Step %s (%s) raised unexpectedly", step.index, step)
            raise _Fatal("failed", e) from e
        return self.actions.status.passed

    def _emit(
        self,
        run_id: str,
        event: str,
        step: ExecutionStep,
        descriptor: ActionDescriptor,
        *,
        attempt: int,
        status: str = "running",
        exception: Optional[BaseException] = None,
        duration: Optional[float] = None,
    ) -> None:
        label = self.actions.status.label or str(step)
        payload: Dict[str, Any] = {
            "event": event,
            "index": step.index,
            "action": descriptor.name,
            "label": label,
            "status": status,
            "attempt": attempt,
            "test": self.actions.current_test,
        }
        if exception is not None:
            payload["error"] = f"{type(exception).__name__}: {exception}"
        self.sink.publish(run_id, payload)
        ACTION_LOGGER.log(
            action=descriptor.name,
            event=event,
            status=status,
            step=step.index,
            args=step.args,
            label=label,
            attempt=attempt,
            duration_ms=int(duration * 1000) if duration is not None else None,
            test=self.actions.current_test,
            exception=exception,
        )


def summarize(reports: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Combine several run reports into pass/fail counts."""
    passed = sum(1 for r in reports if r.get("status") == "passed")
    return {"total": len(reports), "passed": passed, "failed": len(reports) - passed}
