# stepdriver/apps.py
"""
@file apps.py
@brief Bookkeeping for applications launched during a run.

Only the pywinauto Application surface used for shutdown is touched here
(process, kill(soft=...), is_process_running()), so the close logic stays
importable away from Windows.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from .waits import wait_until


class AppTracker:
    """Applications keyed by the path they were started from."""

    def __init__(self, close_timeout: float = 5.0, logger: Optional[logging.Logger] = None):
        self.close_timeout = float(close_timeout)
        self.log = logger or logging.getLogger("stepdriver")
        self._apps: Dict[str, Any] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._apps

    def __len__(self) -> int:
        return len(self._apps)

    def add(self, path: str, app: Any) -> None:
        self._apps[path] = app

    def close(self, path: str) -> None:
        """Soft-kill the app started from `path` and wait for its process to exit."""
        app = self._apps.pop(path, None)
        if app is None:
            self.log.warning("close_app: %s was not launched by this session", path)
            return
        self._soft_close(path, app)

    def close_all(self) -> None:
        """Best-effort: every app is attempted; apps that outlive the soft kill are force-killed."""
        tracked: List[Tuple[str, Any]] = list(self._apps.items())
        self._apps.clear()
        failures: List[Tuple[str, Any]] = []
        for path, app in tracked:
            try:
                self._soft_close(path, app)
            except Exception as e:
                self.log.warning("Failed to close %s: %s", path, e)
                failures.append((path, app))
        for path, app in failures:
            self.log.warning("Force-killing %s (PID=%s)", path, getattr(app, "process", None))
            try:
                app.kill(soft=False)
            except Exception as e:
                self.log.error("Force-kill of %s failed: %s", path, e)

    def _soft_close(self, path: str, app: Any) -> None:
        self.log.info("Closing app: %s (PID=%s)", path, getattr(app, "process", None))
        app.kill(soft=True)
        wait_until(
            lambda: not app.is_process_running(),
            timeout=self.close_timeout,
            description=f"{os.path.basename(path)} to exit",
            stage="close_app",
        )
