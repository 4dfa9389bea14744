# stepdriver/screen.py
"""
@file screen.py
@brief Screen capture of the primary display via PIL.ImageGrab.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image, ImageGrab

from .geometry import Region
from .interfaces import IScreen

log = logging.getLogger("stepdriver")


class DesktopScreen(IScreen):
    def __init__(self) -> None:
        self._size: Optional[Tuple[int, int]] = None

    def size(self) -> Tuple[int, int]:
        if self._size is None:
            self._size = ImageGrab.grab().size
        return self._size

    def grab(self, region: Optional[Region] = None) -> Image.Image:
        bbox = region.as_box() if region is not None else None
        return ImageGrab.grab(bbox=bbox).convert("RGB")

    def is_virtual(self) -> bool:
        try:
            ImageGrab.grab(bbox=(0, 0, 1, 1))
        except OSError as e:
            log.debug("Screen capture unavailable: %s", e)
            return True
        return False
