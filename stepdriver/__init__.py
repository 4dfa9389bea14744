"""
stepdriver - desktop GUI automation driven by step lists.

Elements are located through one of three backends (UI Automation tree,
image template matching, OCR text) plus fixed coordinates, behind a single
Element handle. A Dispatcher runs an ordered list of (action, args) steps,
retrying a failed step once under a reduced timeout.

The Windows implementations of the input/screen/tree seams (session,
screen, uia) are not imported here.
"""

from stepdriver.config import RetryBudget, Settings
from stepdriver.context import SearchContext, TreeScope
from stepdriver.element import Capability, RegionElement, TreeElement
from stepdriver.engine import Engine, build_engine
from stepdriver.exceptions import (
    ActionError,
    BackendError,
    CapabilityUnsupportedError,
    ConfigurationError,
    ElementNotFoundError,
    SearchRegionNotFoundError,
    StepDriverError,
    TargetNotFoundError,
    TextNotFoundError,
    TimeoutError,
)
from stepdriver.finder import ElementFinder
from stepdriver.locators import LocatorKind, LocatorSpec
from stepdriver.registry import ActionRegistry, build_registry
from stepdriver.results import Outcome, SearchResult
from stepdriver.runner import Dispatcher
from stepdriver.steps import ExecutionStep, StepSource, load_steps

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "RetryBudget",
    "SearchContext",
    "TreeScope",
    "Capability",
    "RegionElement",
    "TreeElement",
    "Engine",
    "build_engine",
    "StepDriverError",
    "ConfigurationError",
    "TimeoutError",
    "ElementNotFoundError",
    "CapabilityUnsupportedError",
    "BackendError",
    "SearchRegionNotFoundError",
    "TargetNotFoundError",
    "TextNotFoundError",
    "ActionError",
    "ElementFinder",
    "LocatorKind",
    "LocatorSpec",
    "ActionRegistry",
    "build_registry",
    "Outcome",
    "SearchResult",
    "Dispatcher",
    "ExecutionStep",
    "StepSource",
    "load_steps",
]
