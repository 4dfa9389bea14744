# stepdriver/element.py
"""
@file element.py
@brief Element handles returned by a successful search.

Exactly two variants exist:

  RegionElement  - a screen rectangle only (image, OCR and location results)
  TreeElement    - a rectangle plus a native UIA handle (tree results)

Each variant declares its capability set. Region operations (click, hover,
drag...) are computed from the stored rectangle and sent through the
capability port; operations that need the native handle raise
CapabilityUnsupportedError on a RegionElement.

The rectangle is captured once at search time and not re-validated until
is_displayed()/is_vanished() is called.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .exceptions import BackendError, CapabilityUnsupportedError
from .geometry import Region
from .interfaces import ICapabilityPort, IScreen


class Capability(str, Enum):
    DISPLAYED = "displayed"
    VANISHED = "vanished"
    CLICKABLE = "clickable"
    CENTER_CLICKABLE = "center_clickable"
    RIGHT_CLICKABLE = "right_clickable"
    DOUBLE_CLICKABLE = "double_clickable"
    HOVERABLE = "hoverable"
    DRAGGABLE = "draggable"
    TEXTUAL = "textual"
    TOGGLEABLE = "toggleable"
    INTROSPECTABLE = "introspectable"
    FOCUSABLE = "focusable"
    ENABLEMENT = "enablement"


REGION_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.DISPLAYED,
    Capability.VANISHED,
    Capability.CLICKABLE,
    Capability.CENTER_CLICKABLE,
    Capability.RIGHT_CLICKABLE,
    Capability.DOUBLE_CLICKABLE,
    Capability.HOVERABLE,
    Capability.DRAGGABLE,
    Capability.TEXTUAL,
})

TREE_CAPABILITIES: FrozenSet[Capability] = REGION_CAPABILITIES | frozenset({
    Capability.TOGGLEABLE,
    Capability.INTROSPECTABLE,
    Capability.FOCUSABLE,
    Capability.ENABLEMENT,
})

# Operations only a native handle can serve, and the capability each needs.
HANDLE_OPERATIONS: Dict[str, Capability] = {
    "toggle_state": Capability.TOGGLEABLE,
    "is_enabled": Capability.ENABLEMENT,
    "name": Capability.INTROSPECTABLE,
    "automation_id": Capability.INTROSPECTABLE,
    "focus": Capability.FOCUSABLE,
}


class Element:
    """Common region behaviour; do not instantiate directly."""

    capabilities: FrozenSet[Capability] = frozenset()

    def __init__(
        self,
        region: Region,
        port: ICapabilityPort,
        screen: IScreen,
        source: str = "",
        write_pause: float = 0.2,
    ):
        self.region = region
        self.source = source
        self._port = port
        self._screen = screen
        self._write_pause = float(write_pause)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source!r}, {self.region})"

    @property
    def native_handle(self) -> Optional[Any]:
        return None

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def _require(self, capability: Capability) -> None:
        if capability not in self.capabilities:
            raise CapabilityUnsupportedError(capability.value, type(self).__name__)

    # ----------------------------------------------------------- presence

    def is_displayed(self) -> bool:
        """True while the stored region is non-empty and overlaps the screen."""
        self._require(Capability.DISPLAYED)
        if self.region.is_empty():
            return False
        width, height = self._screen.size()
        return Region(0, 0, width, height).intersection(self.region) is not None

    def is_vanished(self) -> bool:
        """
        Screen-level flag: True when the display is virtual/disconnected.

        This is not a per-element visibility check; every element reports the
        same value at a given moment.
        """
        self._require(Capability.VANISHED)
        return self._screen.is_virtual()

    # ------------------------------------------------------------- pointer

    def click(self) -> None:
        """Click near the bottom-left corner (5px in from each edge)."""
        self._require(Capability.CLICKABLE)
        self._port.click(self.region.corner_point())

    def click_center(self) -> None:
        self._require(Capability.CENTER_CLICKABLE)
        self._port.click(self.region.center)

    def right_click(self) -> None:
        self._require(Capability.RIGHT_CLICKABLE)
        self._port.click(self.region.center, button="right")

    def double_click(self) -> None:
        self._require(Capability.DOUBLE_CLICKABLE)
        self._port.click(self.region.center, clicks=2)

    def hover(self) -> None:
        self._require(Capability.HOVERABLE)
        self._port.move(self.region.center)

    def drag(self) -> None:
        """Start a drag: press and hold at the region center."""
        self._require(Capability.DRAGGABLE)
        self._port.press(self.region.center)

    def drop(self) -> None:
        """Finish a drag started elsewhere by releasing over this region."""
        self._require(Capability.DRAGGABLE)
        self._port.move(self.region.center)
        self._port.release(self.region.center)

    # ----------------------------------------------------------- keyboard

    def clear(self) -> None:
        self._require(Capability.TEXTUAL)
        self._port.click(self.region.center)
        self._port.special_key("control", "a")
        self._port.special_key("delete")

    def write(self, text: str) -> None:
        """Click, let the control take focus, clear it and type `text`."""
        self._require(Capability.TEXTUAL)
        self.click()
        time.sleep(self._write_pause)
        self.clear()
        self._port.type_text(text)

    # ------------------------------------------- handle-backed operations

    def __getattr__(self, attr: str) -> Any:
        # Reached only for names the variant does not define.
        capability = HANDLE_OPERATIONS.get(attr)
        if capability is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {attr!r}")
        raise CapabilityUnsupportedError(capability.value, type(self).__name__)

    def check(self) -> None:
        self._require(Capability.TOGGLEABLE)
        if self.toggle_state() == 0:
            self.click()

    def uncheck(self) -> None:
        self._require(Capability.TOGGLEABLE)
        if self.toggle_state() == 1:
            self.click()

    def toggle(self, state: int) -> None:
        """Click until the toggle reports `state` (0 off, 1 on, 2 indeterminate)."""
        self._require(Capability.TOGGLEABLE)
        if self.toggle_state() != int(state):
            self.click()


class RegionElement(Element):
    """Element known only by its screen rectangle."""

    capabilities = REGION_CAPABILITIES


class TreeElement(Element):
    """Element backed by a live UIA node."""

    capabilities = TREE_CAPABILITIES

    def __init__(self, handle: Any, region: Region, port: ICapabilityPort, screen: IScreen,
                 source: str = "", write_pause: float = 0.2):
        super().__init__(region, port, screen, source=source, write_pause=write_pause)
        self._handle = handle

    @property
    def native_handle(self) -> Any:
        return self._handle

    def toggle_state(self) -> int:
        try:
            return int(self._handle.get_toggle_state())
        except Exception as e:
            raise BackendError("tree", f"toggle state unavailable for {self.source}", e) from e

    def is_enabled(self) -> bool:
        return bool(self._handle.is_enabled())

    @property
    def name(self) -> str:
        return self._handle.element_info.name or ""

    @property
    def automation_id(self) -> str:
        return self._handle.element_info.automation_id or ""

    def focus(self) -> None:
        self._handle.set_focus()

    def maximize(self) -> None:
        """Maximize through the native window pattern."""
        self._handle.maximize()

    def close(self) -> None:
        """Close through the native window pattern."""
        self._handle.close()


@dataclass
class ElementFactory:
    """Creates elements wired to the run's capability port and screen."""

    port: ICapabilityPort
    screen: IScreen
    scale: float = 100.0
    write_pause: float = 0.2

    def region(self, region: Region, source: str = "") -> RegionElement:
        return RegionElement(region, self.port, self.screen, source=source, write_pause=self.write_pause)

    def tree(self, handle: Any, source: str = "") -> TreeElement:
        rect = handle.rectangle()
        region = Region.from_rect(rect.left, rect.top, rect.right, rect.bottom, scale=self.scale)
        return TreeElement(handle, region, self.port, self.screen, source=source, write_pause=self.write_pause)
