# stepdriver/timinglogger.py
"""
@file timinglogger.py
@brief Timing events for polling loops and raw backend retries.
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Dict, Optional


class TimingLogger:
    """Thread-safe poll/retry timing log with console and file sinks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None
        self._slow_poll_s: Optional[float] = None

    def configure(
        self,
        *,
        console: bool = True,
        file_path: Optional[str] = None,
        slow_poll_s: Optional[float] = None,
    ) -> None:
        """
        @param slow_poll_s When set, only poll_success events at least this
                           slow are emitted; timeouts are always emitted.
        """
        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            self._slow_poll_s = slow_poll_s

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def log(
        self,
        *,
        event: str,
        description: Optional[str] = None,
        status: str = "info",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self._enabled:
            return
        meta = metadata or {}
        if (
            event == "poll_success"
            and self._slow_poll_s is not None
            and float(meta.get("elapsed_s", 0.0)) < self._slow_poll_s
        ):
            return

        fields = [f"[{status.lower()}]", "[timing]", time.strftime("%H:%M:%S"), f"event={event}"]
        if description:
            fields.append(f"what={description}")
        fields.extend(f"{key}={value}" for key, value in meta.items())
        line = " ".join(fields)

        with self._lock:
            if self._console:
                print(line, flush=True)
            if self._file_path:
                self._append(line)

    def _append(self, line: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self._file_path)) or ".", exist_ok=True)
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            pass


TIMING_LOGGER = TimingLogger()
