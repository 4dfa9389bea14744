# stepdriver/context.py
"""
@file context.py
@brief Search scope and anchoring state shared across steps.

A SearchContext is created once per run and handed to every search call.
Steps may narrow it (anchor to a window, switch to child-only scope) and
the narrowing stays in effect for the following steps until reset.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generator, Optional

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .element import Element


class TreeScope(str, Enum):
    CHILDREN = "children"
    SUBTREE = "subtree"

    @classmethod
    def parse(cls, raw: str) -> TreeScope:
        key = str(raw or "").strip().lower()
        if key in ("children", "child"):
            return cls.CHILDREN
        if key in ("subtree", "descendants"):
            return cls.SUBTREE
        raise ConfigurationError(f"Unknown tree scope: {raw!r}")


@dataclass
class SearchContext:
    scope: TreeScope = TreeScope.SUBTREE
    anchor: Optional["Element"] = None
    root_search: bool = True
    backend_retry_attempts: int = 1

    @property
    def anchored(self) -> bool:
        """True when searches should start at the anchor instead of the desktop."""
        return not self.root_search and self.anchor is not None

    def set_scope(self, scope: TreeScope) -> None:
        self.scope = scope

    def set_anchor(self, anchor: Optional["Element"]) -> None:
        self.anchor = anchor

    def set_root_search(self, enabled: bool) -> None:
        self.root_search = bool(enabled)

    def set_backend_retry_attempts(self, attempts: int) -> None:
        if int(attempts) < 1:
            raise ConfigurationError("backend retry attempts must be >= 1")
        self.backend_retry_attempts = int(attempts)

    def reset(self) -> None:
        self.scope = TreeScope.SUBTREE
        self.anchor = None
        self.root_search = True

    @contextmanager
    def within(self, anchor: "Element", scope: Optional[TreeScope] = None) -> Generator[SearchContext, None, None]:
        """
        Temporarily anchor searches to `anchor`; previous values are restored.

        Usage:
            with ctx.within(window):
                finder.find_all(spec)
        """
        previous = (self.scope, self.anchor, self.root_search)
        self.anchor = anchor
        self.root_search = False
        if scope is not None:
            self.scope = scope
        try:
            yield self
        finally:
            self.scope, self.anchor, self.root_search = previous
