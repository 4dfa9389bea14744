# stepdriver/uia.py
"""
@file uia.py
@brief UI Automation tree source backed by pywinauto's UIA backend.
"""

from __future__ import annotations

import logging
from typing import Any, List

from comtypes import COMError
from pywinauto import Desktop
from pywinauto.controls.uiawrapper import UIAWrapper
from pywinauto.uia_element_info import UIAElementInfo

from .interfaces import ITreeSource

log = logging.getLogger("stepdriver")


class UIADesktop(ITreeSource):
    def __init__(self) -> None:
        self._desktop = Desktop(backend="uia")

    def root(self) -> UIAWrapper:
        return UIAWrapper(UIAElementInfo())

    def top_level(self) -> List[Any]:
        """Top-level desktop children; windows that vanish mid-read are skipped."""
        alive = []
        for node in self._desktop.windows():
            try:
                node.element_info.name
            except COMError as e:
                log.debug("Skipping stale top-level element: %s", e)
                continue
            alive.append(node)
        return alive
