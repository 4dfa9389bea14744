# stepdriver/backends/visual.py
"""
@file visual.py
@brief Template matching of reference images against screen captures.

parameter1 names the search-region image, or SCREEN to search the whole
capture; parameter2 names the target image. With a search-region image the
region is located first and the target is matched strictly inside it, so a
missing region (SearchRegionNotFoundError) is never confused with a missing
target (TargetNotFoundError).
"""

from __future__ import annotations

import os
from typing import List, Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from ..config import Settings
from ..context import SearchContext
from ..element import ElementFactory
from ..exceptions import BackendError, SearchRegionNotFoundError, TargetNotFoundError
from ..geometry import Region
from ..interfaces import IScreen
from ..locators import LocatorSpec, is_screen
from ..results import SearchResult
from .base import Backend

Match = Tuple[Region, float]


def to_bgr(image: Image.Image) -> np.ndarray:
    """Convert a PIL image to an OpenCV BGR array."""
    if image.mode != "RGB":
        image = image.convert("RGB")
    return cv2.cvtColor(np.array(image), cv2.COLOR_RGB2BGR)


def match_template(
    haystack: np.ndarray,
    needle: np.ndarray,
    similarity: float,
    limit: Optional[int] = None,
) -> List[Match]:
    """
    Normalized cross-correlation matches at or above `similarity`.

    Overlapping hits are collapsed to the strongest one and the survivors
    are returned in reading order (top to bottom, left to right). Regions
    are relative to the haystack's top-left corner.
    """
    nh, nw = needle.shape[:2]
    hh, hw = haystack.shape[:2]
    if nh > hh or nw > hw or nh == 0 or nw == 0:
        return []

    scores = cv2.matchTemplate(haystack, needle, cv2.TM_CCOEFF_NORMED)
    if limit == 1:
        _, max_val, _, max_loc = cv2.minMaxLoc(scores)
        if max_val >= similarity:
            return [(Region(int(max_loc[0]), int(max_loc[1]), nw, nh), float(max_val))]
        return []

    ys, xs = np.where(scores >= similarity)
    candidates = sorted(
        ((float(scores[y, x]), int(x), int(y)) for y, x in zip(ys, xs)),
        reverse=True,
    )
    accepted: List[Match] = []
    for score, x, y in candidates:
        region = Region(x, y, nw, nh)
        if any(region.intersection(other) is not None for other, _ in accepted):
            continue
        accepted.append((region, score))
        if limit and len(accepted) >= limit:
            break
    accepted.sort(key=lambda m: (m[0].y, m[0].x))
    return accepted


class VisualBackend(Backend):
    name = "visual"

    def __init__(
        self,
        screen: IScreen,
        factory: ElementFactory,
        settings: Settings,
        retry_interval: float = 0.1,
    ):
        super().__init__(factory, retry_interval=retry_interval)
        self.screen = screen
        self.settings = settings

    def _search_area(self, context: SearchContext) -> Region:
        width, height = self.screen.size()
        full = Region(0, 0, width, height)
        if context.anchored:
            return full.intersection(context.anchor.region) or full
        return full

    def _load(self, image: str) -> np.ndarray:
        path = self.settings.image_path(image)
        if not os.path.isfile(path):
            raise BackendError(self.name, f"image file not found: {path}")
        with Image.open(path) as img:
            return to_bgr(img)

    def _frame(self, area: Region) -> np.ndarray:
        return to_bgr(self.screen.grab(area))

    def _locate(self, spec: LocatorSpec, context: SearchContext, limit: Optional[int]) -> SearchResult:
        area = self._search_area(context)
        frame = self._frame(area)
        origin = area

        if not is_screen(spec.parameter1):
            hits = match_template(frame, self._load(spec.parameter1), self.settings.image_similarity, limit=1)
            if not hits:
                return SearchResult.not_found(error=SearchRegionNotFoundError(spec.parameter1))
            inner, _ = hits[0]
            frame = np.ascontiguousarray(frame[inner.y:inner.bottom, inner.x:inner.right])
            origin = inner.offset(area.x, area.y)

        hits = match_template(frame, self._load(spec.parameter2), self.settings.image_similarity, limit=limit)
        if not hits:
            within = "SCREEN" if is_screen(spec.parameter1) else spec.parameter1
            return SearchResult.not_found(error=TargetNotFoundError(spec.parameter2, within=within))
        elements = [
            self.factory.region(region.offset(origin.x, origin.y), source=str(spec))
            for region, _ in hits
        ]
        return SearchResult.found(*elements)

    def _find_first_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        return self._locate(spec, context, limit=1)

    def _find_all_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        return self._locate(spec, context, limit=None)
