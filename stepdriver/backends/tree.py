# stepdriver/backends/tree.py
"""
@file tree.py
@brief Accessibility-tree search over UIA nodes.

Exact kinds query the tree once with a control-type condition (plus the
name for ByName) and compare the requested property for equality. Partial
kinds fetch every node of the control type and keep those whose property
contains the requested substring, in traversal order.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from ..context import SearchContext, TreeScope
from ..element import ElementFactory, TreeElement
from ..exceptions import CapabilityUnsupportedError
from ..interfaces import ITreeSource
from ..locators import LocatorKind, LocatorSpec
from ..results import SearchResult
from ..waits import retry_attempts
from .base import Backend


def read_property(node: Any, prop: str) -> str:
    """Read a UIA property from a pywinauto UIA wrapper (or a compatible fake)."""
    info = node.element_info
    if prop == "name":
        value = info.name
    elif prop == "automation_id":
        value = info.automation_id
    elif prop == "help_text":
        value = info.element.CurrentHelpText
    elif prop == "value":
        value = node.legacy_properties().get("Value")
    else:
        raise ValueError(f"Unknown tree property: {prop}")
    return "" if value is None else str(value)


def _control_type(node: Any) -> str:
    return node.element_info.control_type or ""


class TreeBackend(Backend):
    name = "tree"

    def __init__(self, source: ITreeSource, factory: ElementFactory, retry_interval: float = 0.1):
        super().__init__(factory, retry_interval=retry_interval)
        self.source = source

    # ---------------------------------------------------------- searching

    def _search_root(self, context: SearchContext) -> Any:
        if not context.anchored:
            return self.source.root()
        handle = context.anchor.native_handle
        if handle is None:
            raise CapabilityUnsupportedError("tree anchor", type(context.anchor).__name__)
        return handle

    def _criteria(self, spec: LocatorSpec) -> Dict[str, Any]:
        criteria: Dict[str, Any] = {"control_type": spec.control_type}
        if spec.kind is LocatorKind.NAME:
            criteria["title"] = spec.parameter2
        return criteria

    def _query(self, spec: LocatorSpec, context: SearchContext) -> Iterator[Any]:
        root = self._search_root(context)
        criteria = self._criteria(spec) if not spec.kind.is_partial else {"control_type": spec.control_type}
        if context.scope is TreeScope.CHILDREN:
            nodes = root.children(**criteria)
        else:
            nodes = root.descendants(**criteria)
        for node in nodes:
            if self._matches(node, spec):
                yield node

    @staticmethod
    def _matches(node: Any, spec: LocatorSpec) -> bool:
        value = read_property(node, spec.tree_property)
        if spec.kind.is_partial:
            return spec.parameter2 in value
        return value == spec.parameter2

    def _find_first_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        for node in self._query(spec, context):
            return SearchResult.found(self.factory.tree(node, source=str(spec)))
        return SearchResult.not_found(f"no {spec.parameter1} matching {spec}")

    def _find_all_once(self, spec: LocatorSpec, context: SearchContext) -> SearchResult:
        elements = [self.factory.tree(node, source=str(spec)) for node in self._query(spec, context)]
        if not elements:
            return SearchResult.not_found(f"no {spec.parameter1} matching {spec}")
        return SearchResult.found(*elements)

    # -------------------------------------------------- windows and panes

    def find_top_level(self, title: str, control_type: str, attempts: int) -> Optional[TreeElement]:
        """
        Look for a top-level node (or a first-level child of one) of the given
        control type whose name starts with `title`.

        Bounded by attempt count, not time: each attempt re-reads the desktop.
        """

        def _once() -> Optional[TreeElement]:
            tops = list(self.source.top_level())
            for node in self._top_level_candidates(tops):
                if _control_type(node) == control_type and (node.element_info.name or "").startswith(title):
                    return self.factory.tree(node, source=f"{control_type.lower()}:{title}")
            return None

        return retry_attempts(
            _once,
            attempts,
            interval=self.retry_interval,
            accept=lambda found: found is not None,
            description=f"{control_type.lower()} '{title}'",
        )

    @staticmethod
    def _top_level_candidates(tops: List[Any]) -> Iterator[Any]:
        yield from tops
        for node in tops:
            try:
                children = node.children()
            except Exception:
                continue
            yield from children
