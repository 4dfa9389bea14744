"""
@file interfaces.py
@brief Abstract seams between the search/dispatch core and the desktop.

The core never talks to the OS directly. Input injection and process
management go through ICapabilityPort, screen pixels through IScreen, and
the live accessibility tree through ITreeSource. Default Windows
implementations live in session.py, screen.py and uia.py; tests provide
in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from .geometry import Point, Region


class ICapabilityPort(ABC):
    """
    Keyboard/mouse emulation and application launch/teardown.
    """

    @abstractmethod
    def click(self, point: Point, button: str = "left", clicks: int = 1) -> None:
        """
        Click at a screen point.

        Args:
            point: Screen coordinates
            button: "left" or "right"
            clicks: 1 for single, 2 for double click
        """
        pass

    @abstractmethod
    def move(self, point: Point) -> None:
        """Move the pointer without clicking."""
        pass

    @abstractmethod
    def press(self, point: Point, button: str = "left") -> None:
        """Press and hold a mouse button at point (drag start)."""
        pass

    @abstractmethod
    def release(self, point: Point, button: str = "left") -> None:
        """Release a held mouse button at point (drop)."""
        pass

    @abstractmethod
    def type_text(self, text: str) -> None:
        """Type literal text into the focused control."""
        pass

    @abstractmethod
    def paste(self, text: str) -> None:
        """Put text on the clipboard and paste it into the focused control."""
        pass

    @abstractmethod
    def special_key(self, *keys: str) -> None:
        """
        Press keys in order, then release them in reverse order.

        Args:
            *keys: Key names such as "control", "shift", "a", "f5"
        """
        pass

    @abstractmethod
    def release_all_keys(self) -> None:
        """Release any modifier still held down."""
        pass

    @abstractmethod
    def scroll(self, direction: str, steps: int) -> None:
        """
        Scroll the mouse wheel.

        Args:
            direction: "up" or "down"
            steps: Number of wheel notches
        """
        pass

    @abstractmethod
    def launch_app(self, path: str) -> Any:
        """
        Launch an application.

        Args:
            path: Executable path (or a registered application name)

        Returns:
            Implementation-specific process handle
        """
        pass

    @abstractmethod
    def close_app(self, path: str) -> None:
        """Close an application previously started with launch_app."""
        pass

    @abstractmethod
    def close_all_apps(self) -> None:
        """Close every application launched during this run."""
        pass


class IScreen(ABC):
    """
    Pixel access to the primary display.
    """

    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Return (width, height) in screen pixels."""
        pass

    @abstractmethod
    def grab(self, region: Optional[Region] = None) -> Any:
        """
        Capture the screen.

        Args:
            region: Optional sub-rectangle to capture

        Returns:
            PIL.Image in RGB mode
        """
        pass

    @abstractmethod
    def is_virtual(self) -> bool:
        """Return True when no physical display is attached or capture is unavailable."""
        pass


class ITreeSource(ABC):
    """
    Entry points into the live accessibility tree.

    Nodes follow the pywinauto UIA wrapper surface: element_info (name,
    automation_id, control_type), rectangle(), children(**criteria),
    descendants(**criteria), is_enabled(), set_focus(), get_toggle_state(),
    legacy_properties(), maximize(), close().
    """

    @abstractmethod
    def root(self) -> Any:
        """Return the desktop root node."""
        pass

    @abstractmethod
    def top_level(self) -> List[Any]:
        """Return the top-level nodes directly under the desktop."""
        pass
