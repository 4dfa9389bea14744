# stepdriver/registry.py
"""
@file registry.py
@brief Explicit (name, arity) -> handler table for step dispatch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .actions import Actions
    from .steps import ExecutionStep

# (step name, arity, Actions method)
ACTION_TABLE: List[Tuple[str, int, str]] = [
    ("click", 3, "click"),
    ("click_center", 3, "click_center"),
    ("right_click", 3, "right_click"),
    ("double_click", 3, "double_click"),
    ("hover", 3, "hover"),
    ("write", 4, "write"),
    ("check", 3, "check"),
    ("uncheck", 3, "uncheck"),
    ("toggle", 4, "toggle"),
    ("drag", 3, "drag"),
    ("drop", 3, "drop"),
    ("clear", 0, "clear"),
    ("keyboard_type", 1, "keyboard_type"),
    ("paste", 1, "paste"),
    ("shortcut", 1, "shortcut"),
    ("shortcut", 2, "shortcut"),
    ("shortcut", 3, "shortcut"),
    ("scroll_down", 1, "scroll_down"),
    ("scroll_up", 1, "scroll_up"),
    ("launch_application", 1, "launch_application"),
    ("close_application", 1, "close_application"),
    ("open_url", 1, "open_url"),
    ("maximize_window", 1, "maximize_window"),
    ("maximize_pane", 1, "maximize_pane"),
    ("close_window", 1, "close_window"),
    ("close_pane", 1, "close_pane"),
    ("focus_window", 1, "focus_window"),
    ("focus_pane", 1, "focus_pane"),
    ("forget_window", 1, "forget_window"),
    ("forget_pane", 1, "forget_pane"),
    ("set_root_search", 1, "set_root_search"),
    ("set_tree_scope", 1, "set_tree_scope"),
    ("set_search_attempts", 1, "set_search_attempts"),
    ("reset_search_context", 0, "reset_search_context"),
    ("wait_time", 1, "wait_time"),
    ("wait_to_display", 3, "wait_to_display"),
    ("wait_to_display", 4, "wait_to_display"),
    ("wait_to_vanish", 3, "wait_to_vanish"),
    ("wait_to_vanish", 4, "wait_to_vanish"),
    ("wait_to_enable", 3, "wait_to_enable"),
    ("wait_to_enable", 4, "wait_to_enable"),
    ("assert_exist", 3, "assert_exist"),
    ("assert_not_exist", 3, "assert_not_exist"),
    ("assert_enabled", 3, "assert_enabled"),
    ("assert_not_enabled", 3, "assert_not_enabled"),
    ("assert_name", 3, "assert_name"),
    ("delete_file", 1, "delete_file"),
    ("delete_file", 2, "delete_file"),
    ("assert_file_exists", 2, "assert_file_exists"),
    ("start_test", 1, "start_test"),
]

_CAMEL = re.compile(r"(?<=[a-z0-9])([A-Z])")
_ALIASES = {"un_check": "uncheck"}


def normalize_name(name: str) -> str:
    """'waitToDisplay', 'WAIT_TO_DISPLAY' and 'wait_to_display' are one name."""
    text = _CAMEL.sub(r"_\1", str(name).strip()).lower().replace("-", "_")
    return _ALIASES.get(text, text)


@dataclass(frozen=True)
class ActionDescriptor:
    name: str
    arity: int
    handler: Optional[Callable[..., None]] = None


class ActionRegistry:
    """
    Maps (name, arity) to a descriptor. Populated once before a run; a
    lookup miss is a ConfigurationError, never a retryable failure.
    """

    def __init__(self) -> None:
        self._table: Dict[Tuple[str, int], ActionDescriptor] = {}

    def register(self, name: str, arity: int, handler: Optional[Callable[..., None]] = None) -> ActionDescriptor:
        key = (normalize_name(name), int(arity))
        if key in self._table:
            raise ConfigurationError(f"Action already registered: {key[0]}/{key[1]}")
        descriptor = ActionDescriptor(key[0], key[1], handler)
        self._table[key] = descriptor
        return descriptor

    def lookup(self, name: str, arity: int) -> ActionDescriptor:
        key = (normalize_name(name), int(arity))
        descriptor = self._table.get(key)
        if descriptor is not None:
            return descriptor
        arities = self.arities(key[0])
        if arities:
            raise ConfigurationError(
                f"Action '{name}' takes {' or '.join(map(str, arities))} argument(s), got {arity}"
            )
        raise ConfigurationError(f"Unknown action '{name}'")

    def arities(self, name: str) -> List[int]:
        wanted = normalize_name(name)
        return sorted(arity for (n, arity) in self._table if n == wanted)

    def validate(self, steps: Iterable["ExecutionStep"]) -> None:
        """Check every step's name/arity; report all problems at once."""
        problems: List[str] = []
        for step in steps:
            try:
                self.lookup(step.action, len(step.args))
            except ConfigurationError as e:
                problems.append(f"- step {step.index}: {e}")
        if problems:
            raise ConfigurationError("Step list validation failed:\n" + "\n".join(problems))

    def descriptors(self) -> List[ActionDescriptor]:
        return sorted(self._table.values(), key=lambda d: (d.name, d.arity))

    def __contains__(self, key: Tuple[str, int]) -> bool:
        name, arity = key
        return (normalize_name(name), int(arity)) in self._table

    def __len__(self) -> int:
        return len(self._table)


def build_registry(actions: Optional["Actions"] = None,
                   table: Sequence[Tuple[str, int, str]] = ACTION_TABLE) -> ActionRegistry:
    """
    Build the registry from the static table. Without `actions` the
    descriptors carry no handler, which is enough for validation/listing.
    """
    registry = ActionRegistry()
    for name, arity, method in table:
        handler = getattr(actions, method) if actions is not None else None
        registry.register(name, arity, handler)
    return registry
