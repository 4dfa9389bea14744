"""
@file actionlogger.py
@brief Step-level action log (line or jsonl) for dispatcher attempts.
"""

from __future__ import annotations

import json
import os
import threading
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

# Actions whose free-text argument is masked in logs.
_TEXT_ACTIONS = {"write", "keyboard_type", "paste"}
_SECRET_WORDS = ("password", "passwd", "secret", "token")


class ActionLogger:
    """Thread-safe step logger, disabled until enable() is called."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = True
        self._file_path: Optional[str] = None
        self._level = "INFO"
        self._run_id = "default"
        self._format = "line"
        self._max_traceback_chars = 4000

    def configure(
        self,
        *,
        console: bool = True,
        file_path: Optional[str] = None,
        level: str = "INFO",
        run_id: Optional[str] = None,
        format: str = "line",
        max_traceback_chars: int = 4000,
    ) -> None:
        fmt = (format or "line").lower()
        if fmt not in {"line", "jsonl"}:
            raise ValueError("ActionLogger format must be 'line' or 'jsonl'")
        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            self._level = level.upper()
            self._format = fmt
            self._max_traceback_chars = max(256, int(max_traceback_chars))
            if run_id:
                self._run_id = run_id

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def set_run_id(self, run_id: str) -> None:
        if run_id:
            with self._lock:
                self._run_id = run_id

    def log(
        self,
        *,
        action: str,
        event: str,
        status: str = "ok",
        step: Optional[int] = None,
        args: Sequence[str] = (),
        label: Optional[str] = None,
        attempt: Optional[int] = None,
        duration_ms: Optional[int] = None,
        test: Optional[str] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Emit one step event."""
        if not self._enabled:
            return

        record: Dict[str, Any] = {
            "timestamp": time.strftime("%H:%M:%S"),
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": self._level,
            "event": event,
            "action": action,
            "step": step,
            "args": self._redact(action, args),
            "status": status,
            "attempt": attempt,
            "duration_ms": duration_ms,
            "label": label,
            "test": test,
            "run_id": self._run_id,
        }
        if exception is not None:
            record["exception"] = self._format_exception(exception)

        line = json.dumps(record, ensure_ascii=False, separators=(",", ":")) \
            if self._format == "jsonl" else self._format_line(record)

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

    @staticmethod
    def _format_line(record: Dict[str, Any]) -> str:
        parts = [record["timestamp"], record["level"], record["action"], f"event={record['event']}"]
        for key in ("step", "attempt", "status", "duration_ms", "test", "run_id"):
            value = record.get(key)
            if value is not None:
                parts.append(f"{key}={value}")
        if record.get("args"):
            parts.append("args=" + ",".join(record["args"]))
        if record.get("label"):
            parts.append(f"label='{record['label']}'")
        exc = record.get("exception")
        if exc:
            parts.append(f"exc_type={exc['type']}")
            parts.append(f"exc_message={exc['message']}")
        return " | ".join(parts)

    @staticmethod
    def _redact(action: str, args: Sequence[str]) -> list:
        out = []
        for i, value in enumerate(args):
            text = str(value)
            if any(word in text.lower() for word in _SECRET_WORDS):
                out.append("***")
            elif action in _TEXT_ACTIONS and i == len(args) - 1 and len(text) > 10:
                out.append(f"{text[:10]}...")
            else:
                out.append(text)
        return out

    def _format_exception(self, exception: BaseException) -> Dict[str, Any]:
        tb = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
        if len(tb) > self._max_traceback_chars:
            tb = tb[: self._max_traceback_chars] + "...<truncated>"
        cause = exception.__cause__
        return {
            "type": type(exception).__name__,
            "message": str(exception),
            "traceback": tb.strip(),
            "cause_type": type(cause).__name__ if cause is not None else None,
            "cause_message": str(cause) if cause is not None else None,
        }


ACTION_LOGGER = ActionLogger()
