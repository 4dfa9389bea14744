# stepdriver/session.py
"""
@file session.py
@brief pywinauto-backed capability port: mouse, keyboard, clipboard, apps.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import win32api
import win32clipboard
import win32con
from pywinauto import keyboard, mouse
from pywinauto.application import Application

from .apps import AppTracker
from .geometry import Point
from .interfaces import ICapabilityPort
from .keys import MODIFIERS, chord

_SEND_KEYS_SPECIAL = re.compile(r"([{}+^%~()\[\]])")


class DesktopSession(ICapabilityPort):
    """
    Owns the applications launched during a run and injects input.
    """

    def __init__(
        self,
        backend: str = "uia",
        app_start_timeout: float = 30.0,
        app_close_timeout: float = 5.0,
        key_pause: float = 0.05,
        logger: Optional[logging.Logger] = None,
    ):
        self.backend = backend
        self.app_start_timeout = float(app_start_timeout)
        self.app_close_timeout = float(app_close_timeout)
        self.key_pause = float(key_pause)
        self.log = logger or logging.getLogger("stepdriver")
        self._apps = AppTracker(close_timeout=app_close_timeout, logger=self.log)

    # --------------------------------------------------------------- mouse

    def click(self, point: Point, button: str = "left", clicks: int = 1) -> None:
        if clicks == 2:
            mouse.double_click(button=button, coords=point.as_tuple())
        else:
            mouse.click(button=button, coords=point.as_tuple())

    def move(self, point: Point) -> None:
        mouse.move(coords=point.as_tuple())

    def press(self, point: Point, button: str = "left") -> None:
        mouse.press(button=button, coords=point.as_tuple())

    def release(self, point: Point, button: str = "left") -> None:
        mouse.release(button=button, coords=point.as_tuple())

    def scroll(self, direction: str, steps: int) -> None:
        distance = int(steps) if direction == "up" else -int(steps)
        mouse.scroll(coords=win32api.GetCursorPos(), wheel_dist=distance)

    # ------------------------------------------------------------ keyboard

    def type_text(self, text: str) -> None:
        escaped = _SEND_KEYS_SPECIAL.sub(r"{\1}", text)
        keyboard.send_keys(escaped, pause=self.key_pause, with_spaces=True, with_tabs=True, with_newlines=True)

    def paste(self, text: str) -> None:
        win32clipboard.OpenClipboard()
        try:
            win32clipboard.EmptyClipboard()
            win32clipboard.SetClipboardText(text, win32con.CF_UNICODETEXT)
        finally:
            win32clipboard.CloseClipboard()
        keyboard.send_keys("^v", pause=self.key_pause)

    def special_key(self, *keys: str) -> None:
        keyboard.send_keys(chord(keys), pause=self.key_pause)

    def release_all_keys(self) -> None:
        keyboard.send_keys("".join(f"{{{code} up}}" for code in MODIFIERS), pause=0)

    # -------------------------------------------------------- applications

    def launch_app(self, path: str) -> Application:
        self.log.info("Starting app: %s", path)
        app = Application(backend=self.backend).start(path)
        self._apps.add(path, app)
        try:
            window = app.top_window()
            window.wait("visible", timeout=self.app_start_timeout)
            window.maximize()
        except Exception as e:
            self.log.warning("Started %s but could not maximize its window: %s", path, e)
        self.log.info("Started PID=%s", app.process)
        return app

    def close_app(self, path: str) -> None:
        self._apps.close(path)

    def close_all_apps(self) -> None:
        self._apps.close_all()
