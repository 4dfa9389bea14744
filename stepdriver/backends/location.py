# stepdriver/backends/location.py
"""
@file location.py
@brief Fixed screen coordinates as a 1x1 region element.
"""

from __future__ import annotations

from ..context import SearchContext
from ..element import ElementFactory
from ..exceptions import LocationError
from ..geometry import Point, Region
from ..interfaces import IScreen
from ..locators import LocatorSpec
from ..results import SearchResult
from .base import Backend


class LocationBackend(Backend):
    name = "location"

    def __init__(self, screen: IScreen, factory: ElementFactory, retry_interval: float = 0.1):
        super().__init__(factory, retry_interval=retry_interval)
        self.screen = screen

    def _point(self, spec: LocatorSpec) -> Point:
        try:
            point = Point(int(spec.parameter1), int(spec.parameter2))
        except ValueError as e:
            raise LocationError(f"Location needs integer x/y, got ({spec.parameter1}, {spec.parameter2})") from e
        width, height = self.screen.size()
        if not Region(0, 0, width, height).contains(point):
            raise LocationError(f"Point ({point.x}, {point.y}) is outside the {width}x{height} screen")
        return point

    def _find_first_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        try:
            point = self._point(spec)
        except LocationError as e:
            return SearchResult.failed(e)
        return SearchResult.found(self.factory.region(Region(point.x, point.y, 1, 1), source=str(spec)))
