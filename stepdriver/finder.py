# stepdriver/finder.py
"""
@file finder.py
@brief Backend selection, bounded polling predicates and window/pane caches.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from .backends import Backend, LocationBackend, TextBackend, TreeBackend, VisualBackend
from .config import Settings
from .context import SearchContext
from .element import Capability, Element, TreeElement
from .exceptions import BackendError, CapabilityUnsupportedError, ElementNotFoundError
from .locators import LocatorKind, LocatorSpec
from .results import SearchResult
from .waits import poll_until

log = logging.getLogger("stepdriver")


class TitleCache:
    """
    Title -> element map for windows or panes.

    Entries live until invalidate()/clear() is called. A window closed and
    reopened under the same title keeps returning the old (stale) element
    until its entry is invalidated.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._entries: Dict[str, TreeElement] = {}

    def get(self, title: str) -> Optional[TreeElement]:
        return self._entries.get(title)

    def put(self, title: str, element: TreeElement) -> None:
        self._entries[title] = element

    def invalidate(self, title: str) -> bool:
        """Drop one entry; returns True if it was cached."""
        return self._entries.pop(title, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def titles(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, title: str) -> bool:
        return title in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ElementFinder:
    """
    Picks the backend for a locator kind and wraps it in time-bounded polls.

    All predicates run the search at least once and keep polling until it
    succeeds or more than `duration` seconds have passed. Backend errors
    during a poll count as "not found yet", except in wait_to_vanish where
    an error means the element is gone.
    """

    def __init__(
        self,
        settings: Settings,
        context: SearchContext,
        tree: TreeBackend,
        visual: VisualBackend,
        text: TextBackend,
        location: LocationBackend,
    ):
        self.settings = settings
        self.context = context
        self.tree = tree
        self.visual = visual
        self.text = text
        self.location = location
        self.windows = TitleCache("window")
        self.panes = TitleCache("pane")
        self.last_result: SearchResult = SearchResult.not_found("no search yet")

    # ------------------------------------------------------------ backends

    def backend_for(self, spec: LocatorSpec) -> Backend:
        if spec.kind is LocatorKind.IMAGE:
            return self.visual
        if spec.kind is LocatorKind.OCR:
            return self.text
        if spec.kind is LocatorKind.LOCATION:
            return self.location
        return self.tree

    def search_once(self, spec: LocatorSpec) -> SearchResult:
        result = self.backend_for(spec).find_first(spec, self.context)
        self.last_result = result
        return result

    def _poll(self, spec: LocatorSpec, duration: float, check, description: str):
        return poll_until(
            check,
            timeout=duration,
            interval=self.settings.polling_interval,
            description=f"{description} {spec}",
        )

    # ------------------------------------------------------------- lookups

    def find(self, spec: LocatorSpec, timeout: Optional[float] = None) -> SearchResult:
        """
        Poll until the locator matches or `timeout` (default find_wait) runs out.

        Returns the Found result, or the last miss so callers can tell a
        missing search region from a missing target.
        """
        duration = self.settings.find_wait if timeout is None else float(timeout)
        found = self._poll(spec, duration, lambda: self.search_once(spec), "find")
        return found if found is not None else self.last_result

    def require(self, spec: LocatorSpec, timeout: Optional[float] = None) -> Element:
        """find(), raising ElementNotFoundError instead of returning a miss."""
        result = self.find(spec, timeout)
        if not result.is_found:
            duration = self.settings.find_wait if timeout is None else timeout
            raise ElementNotFoundError(str(spec), duration, result.reason) from result.error
        return result.element

    def get_element(self, kind: str, parameter1: str, parameter2: str,
                    timeout: Optional[float] = None) -> Optional[Element]:
        result = self.find(LocatorSpec.parse(kind, parameter1, parameter2), timeout)
        return result.element

    def find_all(self, spec: LocatorSpec) -> SearchResult:
        """Single (attempt-retried) search returning every match, in traversal order."""
        result = self.backend_for(spec).find_all(spec, self.context)
        self.last_result = result
        return result

    def iter_elements(self, spec: LocatorSpec) -> Iterator[Element]:
        yield from self.find_all(spec).elements

    # ---------------------------------------------------------- predicates

    def wait_to_display(self, spec: LocatorSpec, duration: float) -> bool:
        def _displayed() -> bool:
            result = self.search_once(spec)
            return result.is_found and result.element.is_displayed()

        return bool(self._poll(spec, duration, _displayed, "display"))

    def wait_to_vanish(self, spec: LocatorSpec, duration: float) -> bool:
        def _vanished() -> bool:
            try:
                result = self.search_once(spec)
                if not result.is_found:
                    return True
                return result.element.is_vanished()
            except Exception as e:
                log.debug("vanish check for %s raised %s; treating as vanished", spec, e)
                return True

        return bool(self._poll(spec, duration, _vanished, "vanish"))

    def wait_to_enable(self, spec: LocatorSpec, duration: float) -> bool:
        if not spec.kind.is_tree:
            raise CapabilityUnsupportedError(Capability.ENABLEMENT.value, "RegionElement")

        def _enabled() -> bool:
            result = self.search_once(spec)
            return result.is_found and result.element.is_enabled()

        return bool(self._poll(spec, duration, _enabled, "enable"))

    # --------------------------------------------------- windows and panes

    def _top_level(self, cache: TitleCache, title: str, control_type: str) -> Optional[TreeElement]:
        cached = cache.get(title)
        if cached is not None:
            return cached
        try:
            element = self.tree.find_top_level(title, control_type, self.settings.window_search_attempts)
        except Exception as e:
            log.warning("%s lookup for '%s' failed: %s", cache.kind, title, e)
            self.last_result = SearchResult.failed(BackendError("tree", f"{cache.kind} lookup", e))
            return None
        if element is None:
            self.last_result = SearchResult.not_found(f"{cache.kind} '{title}' not found")
            return None
        cache.put(title, element)
        try:
            element.focus()
        except Exception as e:
            log.warning("Could not focus %s '%s': %s", cache.kind, title, e)
        return element

    def get_window(self, title: str) -> Optional[TreeElement]:
        """Cached, attempt-bounded lookup of a window whose title starts with `title`."""
        return self._top_level(self.windows, title, "Window")

    def get_pane(self, title: str) -> Optional[TreeElement]:
        return self._top_level(self.panes, title, "Pane")

    def invalidate_window(self, title: str) -> bool:
        return self.windows.invalidate(title)

    def invalidate_pane(self, title: str) -> bool:
        return self.panes.invalidate(title)

    def maximize_window(self, title: str) -> bool:
        return self._window_op(self.get_window(title), "maximize")

    def maximize_pane(self, title: str) -> bool:
        return self._window_op(self.get_pane(title), "maximize")

    def close_window(self, title: str) -> bool:
        closed = self._window_op(self.get_window(title), "close")
        if closed:
            self.windows.invalidate(title)
        return closed

    def close_pane(self, title: str) -> bool:
        closed = self._window_op(self.get_pane(title), "close")
        if closed:
            self.panes.invalidate(title)
        return closed

    @staticmethod
    def _window_op(element: Optional[TreeElement], op: str) -> bool:
        if element is None:
            return False
        getattr(element, op)()
        return True
