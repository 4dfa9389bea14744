# stepdriver/actions.py
"""
@file actions.py
@brief Step handlers: element, keyboard, window, wait and assertion actions.

Handlers never raise for an expected miss. They record the outcome on the
shared StepStatus (passed flag + human-readable label), which the
dispatcher inspects to decide whether to retry. Anything else that goes
wrong (a broken capability port, a bad argument) propagates.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Optional

from .config import Settings
from .context import SearchContext, TreeScope
from .element import Element
from .exceptions import ActionError, CapabilityUnsupportedError, ConfigurationError
from .finder import ElementFinder
from .interfaces import ICapabilityPort
from .keys import normalize_keys
from .locators import LocatorKind, LocatorSpec

log = logging.getLogger("stepdriver")


class StepStatus:
    """Out-of-band success flag written by handlers, read by the dispatcher."""

    def __init__(self) -> None:
        self.passed = True
        self.label = ""
        self.error: Optional[BaseException] = None

    def reset(self) -> None:
        self.passed = True
        self.label = ""
        self.error = None

    def succeed(self, label: str) -> None:
        self.passed = True
        self.label = label
        self.error = None

    def fail(self, label: str, error: Optional[BaseException] = None) -> None:
        self.passed = False
        self.label = label
        self.error = error
        log.info("Step failed: %s", label)


def parse_bool(raw: str) -> bool:
    text = str(raw).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ConfigurationError(f"Expected 'true' or 'false', got {raw!r}")


def _describe(spec: LocatorSpec) -> str:
    if spec.kind.is_tree:
        return f"{spec.parameter1.upper()} '{spec.parameter2}'"
    if spec.kind is LocatorKind.LOCATION:
        return f"point ({spec.parameter1}, {spec.parameter2})"
    return f"{spec.kind.value} '{spec.parameter2}' in '{spec.parameter1}'"


class Actions:
    """
    Every operation a step may invoke. Registered by (name, arity) in
    registry.build_registry.
    """

    def __init__(
        self,
        finder: ElementFinder,
        port: ICapabilityPort,
        settings: Settings,
        context: SearchContext,
    ):
        self.finder = finder
        self.port = port
        self.settings = settings
        self.context = context
        self.status = StepStatus()
        self.current_test: Optional[str] = None

    # ------------------------------------------------------------- helpers

    def _on_element(
        self,
        action: str,
        spec: LocatorSpec,
        op: Callable[[Element], None],
        timeout: Optional[float] = None,
    ) -> None:
        target = _describe(spec)
        result = self.finder.find(spec, timeout)
        if not result.is_found:
            self.status.fail(f"{action} {target}: {result.reason}", result.error)
            return
        try:
            op(result.element)
        except CapabilityUnsupportedError as e:
            self.status.fail(f"{action} {target}: {e}", e)
            return
        except Exception as e:
            raise ActionError(action, target=target, details="element operation failed", cause=e) from e
        self.status.succeed(f"{action} {target}")

    def _report(self, ok: bool, label: str) -> bool:
        if ok:
            self.status.succeed(label)
        else:
            reason = self.finder.last_result.reason
            self.status.fail(f"{label} failed ({reason})" if reason else f"{label} failed",
                             self.finder.last_result.error)
        return ok

    # ---------------------------------------------------- element actions

    def click(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("click", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.click())

    def click_center(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("click center", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.click_center())

    def right_click(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("right click", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.right_click())

    def double_click(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("double click", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.double_click())

    def hover(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("hover", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.hover())

    def write(self, kind: str, parameter1: str, parameter2: str, text: str) -> None:
        self._on_element("write into", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.write(text))

    def check(self, kind: str, parameter1: str, parameter2: str) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2).with_control_type("CHECKBOX")
        self._on_element("check", spec, lambda e: e.check())

    def uncheck(self, kind: str, parameter1: str, parameter2: str) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2).with_control_type("CHECKBOX")
        self._on_element("uncheck", spec, lambda e: e.uncheck())

    def toggle(self, kind: str, parameter1: str, parameter2: str, state: str) -> None:
        """
        @param state Target toggle state: 0 (off), 1 (on) or 2 (indeterminate)
        """
        try:
            wanted = int(state)
        except ValueError as e:
            raise ConfigurationError(f"toggle state must be 0, 1 or 2, got {state!r}") from e
        self._on_element("toggle", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.toggle(wanted))

    def drag(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("drag", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.drag(),
                         timeout=self.settings.action_wait("drag_find"))

    def drop(self, kind: str, parameter1: str, parameter2: str) -> None:
        self._on_element("drop on", LocatorSpec.parse(kind, parameter1, parameter2), lambda e: e.drop(),
                         timeout=self.settings.action_wait("drag_find"))

    # ------------------------------------------------- keyboard and mouse

    def clear(self) -> None:
        self.port.special_key("control", "a")
        self.port.special_key("delete")
        self.status.succeed("clear focused field")

    def keyboard_type(self, text: str) -> None:
        self.port.type_text(text)
        self.status.succeed("type text")

    def paste(self, text: str) -> None:
        self.port.paste(text)
        self.status.succeed("paste text")

    def shortcut(self, *keys: str) -> None:
        try:
            names = normalize_keys(keys)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        self.port.special_key(*names)
        self.status.succeed(f"shortcut {'+'.join(names)}")

    def scroll_down(self, steps: str) -> None:
        self._scroll("down", steps)

    def scroll_up(self, steps: str) -> None:
        self._scroll("up", steps)

    def _scroll(self, direction: str, steps: str) -> None:
        try:
            count = int(steps)
        except ValueError as e:
            raise ConfigurationError(f"scroll steps must be an integer, got {steps!r}") from e
        self.port.scroll(direction, count)
        time.sleep(self.settings.scroll_pause)
        self.status.succeed(f"scroll {direction} {count}")

    # ------------------------------------------------------- applications

    def launch_application(self, name: str) -> None:
        path = self.settings.resolve_app(name)
        self.port.launch_app(path)
        self.status.succeed(f"launch application {name}")

    def close_application(self, name: str) -> None:
        self.port.close_app(self.settings.resolve_app(name))
        self.status.succeed(f"close application {name}")

    def open_url(self, url: str) -> None:
        """Open a new browser tab, paste the URL and submit it."""
        self.port.special_key("control", "t")
        time.sleep(self.settings.url_pause)
        self.port.paste(url)
        self.port.special_key("enter")
        self.status.succeed(f"open url {url}")

    # --------------------------------------------------- windows and panes

    def maximize_window(self, title: str) -> None:
        self._report(self.finder.maximize_window(title), f"maximize window '{title}'")

    def maximize_pane(self, title: str) -> None:
        self._report(self.finder.maximize_pane(title), f"maximize pane '{title}'")

    def close_window(self, title: str) -> None:
        self._report(self.finder.close_window(title), f"close window '{title}'")

    def close_pane(self, title: str) -> None:
        self._report(self.finder.close_pane(title), f"close pane '{title}'")

    def focus_window(self, title: str) -> None:
        """Anchor subsequent searches to the window and give it focus."""
        self._focus(title, "WINDOW", self.finder.get_window)

    def focus_pane(self, title: str) -> None:
        self._focus(title, "PANE", self.finder.get_pane)

    def _focus(self, title: str, control: str, lookup) -> None:
        element = lookup(title)
        if element is None:
            spec = LocatorSpec(LocatorKind.NAME, control, title)
            if self.finder.wait_to_display(spec, self.settings.action_wait("focus_display")):
                element = lookup(title)
        if element is None:
            self._report(False, f"focus {control.lower()} '{title}'")
            return
        self.context.set_anchor(element)
        element.focus()
        self.status.succeed(f"focus {control.lower()} '{title}'")

    def forget_window(self, title: str) -> None:
        dropped = self.finder.invalidate_window(title)
        self.status.succeed(f"forget window '{title}'" + ("" if dropped else " (not cached)"))

    def forget_pane(self, title: str) -> None:
        dropped = self.finder.invalidate_pane(title)
        self.status.succeed(f"forget pane '{title}'" + ("" if dropped else " (not cached)"))

    # ------------------------------------------------------ search context

    def set_root_search(self, enabled: str) -> None:
        self.context.set_root_search(parse_bool(enabled))
        self.status.succeed(f"root search {'on' if self.context.root_search else 'off'}")

    def set_tree_scope(self, scope: str) -> None:
        self.context.set_scope(TreeScope.parse(scope))
        self.status.succeed(f"tree scope {self.context.scope.value}")

    def set_search_attempts(self, attempts: str) -> None:
        try:
            self.context.set_backend_retry_attempts(int(attempts))
        except ValueError as e:
            raise ConfigurationError(f"search attempts must be an integer, got {attempts!r}") from e
        self.status.succeed(f"search attempts {self.context.backend_retry_attempts}")

    def reset_search_context(self) -> None:
        self.context.reset()
        self.status.succeed("search context reset")

    # ---------------------------------------------------------------- waits

    def wait_time(self, seconds: str) -> None:
        try:
            delay = float(seconds)
        except ValueError as e:
            raise ConfigurationError(f"wait_time needs a number of seconds, got {seconds!r}") from e
        time.sleep(delay)
        self.status.succeed(f"wait {seconds}s")

    def _duration(self, duration: Optional[str]) -> float:
        if duration is None:
            return self.settings.max_wait
        try:
            return float(duration)
        except ValueError as e:
            raise ConfigurationError(f"duration must be a number of seconds, got {duration!r}") from e

    def wait_to_display(self, kind: str, parameter1: str, parameter2: str, duration: Optional[str] = None) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        self._report(self.finder.wait_to_display(spec, self._duration(duration)), f"wait for {_describe(spec)} to display")

    def wait_to_vanish(self, kind: str, parameter1: str, parameter2: str, duration: Optional[str] = None) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        self._report(self.finder.wait_to_vanish(spec, self._duration(duration)), f"wait for {_describe(spec)} to vanish")

    def wait_to_enable(self, kind: str, parameter1: str, parameter2: str, duration: Optional[str] = None) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        label = f"wait for {_describe(spec)} to enable"
        try:
            ok = self.finder.wait_to_enable(spec, self._duration(duration))
        except CapabilityUnsupportedError as e:
            self.status.fail(f"{label}: {e}", e)
            return
        self._report(ok, label)

    # ----------------------------------------------------------- asserts

    def assert_exist(self, kind: str, parameter1: str, parameter2: str) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        ok = self.finder.wait_to_display(spec, self.settings.action_wait("assert_exist"))
        self._report(ok, f"assert {_describe(spec)} exists")

    def assert_not_exist(self, kind: str, parameter1: str, parameter2: str) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        ok = self.finder.wait_to_vanish(spec, self.settings.action_wait("assert_not_exist"))
        self._report(ok, f"assert {_describe(spec)} does not exist")

    def assert_enabled(self, kind: str, parameter1: str, parameter2: str) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        label = f"assert {_describe(spec)} enabled"
        try:
            ok = self.finder.wait_to_enable(spec, self.settings.action_wait("assert_enabled"))
        except CapabilityUnsupportedError as e:
            self.status.fail(f"{label}: {e}", e)
            return
        self._report(ok, label)

    def assert_not_enabled(self, kind: str, parameter1: str, parameter2: str) -> None:
        spec = LocatorSpec.parse(kind, parameter1, parameter2)
        label = f"assert {_describe(spec)} not enabled"
        try:
            enabled = self.finder.wait_to_enable(spec, self.settings.action_wait("assert_not_enabled"))
        except CapabilityUnsupportedError as e:
            self.status.fail(f"{label}: {e}", e)
            return
        if enabled:
            self.status.fail(f"{label} failed (element is enabled)")
        else:
            self.status.succeed(label)

    def assert_name(self, control: str, automation_id: str, expected: str) -> None:
        """Find a control by automation id and compare its UIA name."""
        spec = LocatorSpec.parse("id", control, automation_id)
        label = f"assert {_describe(spec)} is named '{expected}'"
        result = self.finder.find(spec)
        if not result.is_found:
            self.status.fail(f"{label}: {result.reason}", result.error)
            return
        actual = result.element.name
        if actual == expected:
            self.status.succeed(label)
        else:
            self.status.fail(f"{label}: actual name '{actual}'")

    # -------------------------------------------------- files and labels

    def delete_file(self, folder: str, name: Optional[str] = None) -> None:
        path = self.settings.repo_file(folder, name) if name is not None else self.settings.repo_file(folder)
        try:
            os.remove(path)
        except FileNotFoundError as e:
            self.status.fail(f"delete {path}: file not found", e)
            return
        self.status.succeed(f"delete {path}")

    def assert_file_exists(self, folder: str, name: str) -> None:
        path = self.settings.repo_file(folder, name)
        if os.path.isfile(path):
            self.status.succeed(f"assert file {path} exists")
        else:
            self.status.fail(f"assert file {path} exists failed")

    def start_test(self, name: str) -> None:
        """Label the following steps as belonging to test `name`."""
        self.current_test = name
        self.status.succeed(f"start test {name}")
