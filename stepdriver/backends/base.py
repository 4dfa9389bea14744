# stepdriver/backends/base.py
"""
@file base.py
@brief Shared backend contract: tagged results plus raw attempt retry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from ..context import SearchContext
from ..element import ElementFactory
from ..exceptions import BackendError, CapabilityUnsupportedError, ConfigurationError
from ..locators import LocatorSpec
from ..results import SearchResult
from ..waits import retry_attempts

log = logging.getLogger("stepdriver")


class Backend(ABC):
    """
    One element-search strategy.

    Subclasses implement a single raw search (`_find_first_once`,
    `_find_all_once`). The public methods repeat that raw search up to
    `context.backend_retry_attempts` times with a short pause before
    reporting not-found, and convert native exceptions into Error results.
    """

    name = "backend"

    def __init__(self, factory: ElementFactory, retry_interval: float = 0.1):
        self.factory = factory
        self.retry_interval = float(retry_interval)

    def find_first(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        return self._attempt(self._find_first_once, spec, context)

    def find_all(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        return self._attempt(self._find_all_once, spec, context)

    def _attempt(
        self,
        raw: Callable[[LocatorSpec, SearchContext], SearchResult],
        spec: LocatorSpec,
        context: SearchContext,
    ) -> SearchResult:
        return retry_attempts(
            lambda: self._guarded(raw, spec, context),
            context.backend_retry_attempts,
            interval=self.retry_interval,
            accept=lambda result: result.is_found,
            description=f"{self.name} {spec}",
        )

    def _guarded(
        self,
        raw: Callable[[LocatorSpec, SearchContext], SearchResult],
        spec: LocatorSpec,
        context: SearchContext,
    ) -> SearchResult:
        try:
            return raw(spec, context)
        except ConfigurationError:
            raise
        except Exception as e:
            log.debug("%s backend raised for %s: %s", self.name, spec, e)
            if isinstance(e, (BackendError, CapabilityUnsupportedError)):
                return SearchResult.failed(e)
            return SearchResult.failed(BackendError(self.name, f"search {spec} failed", e))

    @abstractmethod
    def _find_first_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        pass

    def _find_all_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        return self._find_first_once(spec, context)
