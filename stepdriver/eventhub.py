"""
@file eventhub.py
@brief In-memory reporting sink for per-step events, keyed by run_id.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

StepEvent = Dict[str, Any]
Subscriber = Callable[[StepEvent], None]


class EventHub:
    """
    Ring buffer of step events per run plus subscriber callbacks.

    The dispatcher publishes step_start / step_pass / step_fail / step_retry /
    step_error events; report writers and UIs subscribe or page through
    get_since() with a cursor.
    """

    def __init__(self, maxlen: int = 2000):
        self._maxlen = maxlen
        self._lock = threading.Lock()
        self._runs: Dict[str, Deque[StepEvent]] = {}
        self._seq: Dict[str, int] = {}
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def publish(self, run_id: str, event: StepEvent) -> StepEvent:
        """Store a copy of event with a per-run sequence id and notify subscribers."""
        with self._lock:
            seq = self._seq.get(run_id, 0) + 1
            self._seq[run_id] = seq
            stored = dict(event, id=seq, run_id=run_id)
            self._runs.setdefault(run_id, deque(maxlen=self._maxlen)).append(stored)
            callbacks = list(self._subscribers.get(run_id, ())) + list(self._subscribers.get("*", ()))
        for callback in callbacks:
            callback(stored)
        return stored

    def subscribe(self, run_id: str, callback: Subscriber) -> Callable[[], None]:
        """Subscribe to one run ("*" for every run). Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.setdefault(run_id, []).append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                subs = self._subscribers.get(run_id, [])
                if callback in subs:
                    subs.remove(callback)

        return _unsubscribe

    def events(self, run_id: str) -> List[StepEvent]:
        with self._lock:
            return list(self._runs.get(run_id, ()))

    def get_since(self, run_id: str, cursor: int) -> Tuple[List[StepEvent], int]:
        """Events with id > cursor, and the cursor to pass next time."""
        items = [e for e in self.events(run_id) if e["id"] > cursor]
        return items, (items[-1]["id"] if items else cursor)

    def clear(self, run_id: Optional[str] = None) -> None:
        with self._lock:
            if run_id is None:
                self._runs.clear()
                self._seq.clear()
                self._subscribers.clear()
            else:
                self._runs.pop(run_id, None)
                self._seq.pop(run_id, None)
                self._subscribers.pop(run_id, None)


EVENT_HUB = EventHub()
