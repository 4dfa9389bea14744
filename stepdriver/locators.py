# stepdriver/locators.py
"""
@file locators.py
@brief Locator kinds, the immutable LocatorSpec and the control-type table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .exceptions import ConfigurationError


class LocatorKind(str, Enum):
    NAME = "name"
    ID = "id"
    TEXT = "text"
    VALUE = "value"
    PARTIAL_NAME = "partialname"
    PARTIAL_ID = "partialid"
    PARTIAL_TEXT = "partialtext"
    PARTIAL_VALUE = "partialvalue"
    IMAGE = "image"
    LOCATION = "location"
    OCR = "ocr"

    @classmethod
    def parse(cls, raw: str) -> LocatorKind:
        """Accepts 'name', 'NAME', 'ByName', 'partial_name', 'partialName'..."""
        key = str(raw or "").strip().lower().replace("_", "").replace("-", "")
        if key.startswith("by") and key[2:] in _BY_VALUE:
            key = key[2:]
        try:
            return _BY_VALUE[key]
        except KeyError:
            raise ConfigurationError(f"Unknown locator kind: {raw!r}") from None

    @property
    def is_tree(self) -> bool:
        return self in TREE_KINDS

    @property
    def is_partial(self) -> bool:
        return self in PARTIAL_KINDS


_BY_VALUE: Dict[str, LocatorKind] = {k.value: k for k in LocatorKind}

TREE_KINDS = frozenset({
    LocatorKind.NAME, LocatorKind.ID, LocatorKind.TEXT, LocatorKind.VALUE,
    LocatorKind.PARTIAL_NAME, LocatorKind.PARTIAL_ID,
    LocatorKind.PARTIAL_TEXT, LocatorKind.PARTIAL_VALUE,
})

PARTIAL_KINDS = frozenset({
    LocatorKind.PARTIAL_NAME, LocatorKind.PARTIAL_ID,
    LocatorKind.PARTIAL_TEXT, LocatorKind.PARTIAL_VALUE,
})

# Tree property read for each tree kind (see backends.tree.read_property).
TREE_PROPERTY: Dict[LocatorKind, str] = {
    LocatorKind.NAME: "name",
    LocatorKind.ID: "automation_id",
    LocatorKind.TEXT: "help_text",
    LocatorKind.VALUE: "value",
    LocatorKind.PARTIAL_NAME: "name",
    LocatorKind.PARTIAL_ID: "automation_id",
    LocatorKind.PARTIAL_TEXT: "help_text",
    LocatorKind.PARTIAL_VALUE: "value",
}

# Upper-case step vocabulary -> UIA control_type as pywinauto names it.
CONTROL_TYPES: Dict[str, str] = {
    "APPBAR": "AppBar",
    "BUTTON": "Button",
    "CALENDAR": "Calendar",
    "CHECKBOX": "CheckBox",
    "COMBOBOX": "ComboBox",
    "CUSTOM": "Custom",
    "DATAGRID": "DataGrid",
    "DATAITEM": "DataItem",
    "DOCUMENT": "Document",
    "EDIT": "Edit",
    "GROUP": "Group",
    "HEADER": "Header",
    "HEADERITEM": "HeaderItem",
    "HYPERLINK": "Hyperlink",
    "IMAGE": "Image",
    "LIST": "List",
    "LISTITEM": "ListItem",
    "MENU": "Menu",
    "MENUBAR": "MenuBar",
    "MENUITEM": "MenuItem",
    "PANE": "Pane",
    "PROGRESSBAR": "ProgressBar",
    "RADIOBUTTON": "RadioButton",
    "SCROLLBAR": "ScrollBar",
    "SEMANTICZOOM": "SemanticZoom",
    "SEPARATOR": "Separator",
    "SLIDER": "Slider",
    "SPINNER": "Spinner",
    "SPLITBUTTON": "SplitButton",
    "STATUSBAR": "StatusBar",
    "TAB": "Tab",
    "TABITEM": "TabItem",
    "TABLE": "Table",
    "TEXT": "Text",
    "THUMB": "Thumb",
    "TITLEBAR": "TitleBar",
    "TOOLBAR": "ToolBar",
    "TOOLTIP": "ToolTip",
    "TREE": "Tree",
    "TREEITEM": "TreeItem",
    "WINDOW": "Window",
}


def control_type_for(name: str) -> str:
    """Map a step-table control name (any case) to a UIA control type."""
    key = str(name or "").strip().upper().replace("_", "")
    try:
        return CONTROL_TYPES[key]
    except KeyError:
        raise ConfigurationError(f"Unknown control type: {name!r}") from None


SCREEN_SENTINEL = "SCREEN"


def is_screen(image: str) -> bool:
    return str(image).strip().upper() == SCREEN_SENTINEL


@dataclass(frozen=True)
class LocatorSpec:
    """
    Which backend to use and what to match.

    For tree kinds parameter1 is the control type and parameter2 the
    property value. For IMAGE and OCR parameter1 is the search-region image
    (or SCREEN) and parameter2 the target image or text. For LOCATION they
    are the x and y coordinates.
    """

    kind: LocatorKind
    parameter1: str
    parameter2: str

    @classmethod
    def parse(cls, kind: str, parameter1: str, parameter2: str) -> LocatorSpec:
        spec = cls(LocatorKind.parse(kind), str(parameter1), str(parameter2))
        if spec.kind.is_tree:
            control_type_for(spec.parameter1)
        return spec

    @property
    def control_type(self) -> Optional[str]:
        if not self.kind.is_tree:
            return None
        return control_type_for(self.parameter1)

    @property
    def tree_property(self) -> Optional[str]:
        return TREE_PROPERTY.get(self.kind)

    def with_control_type(self, control: str) -> LocatorSpec:
        """Copy with parameter1 replaced; only meaningful for tree kinds."""
        if not self.kind.is_tree:
            return self
        return LocatorSpec(self.kind, control, self.parameter2)

    def __str__(self) -> str:
        return f"{self.kind.value}({self.parameter1}, {self.parameter2})"
