"""
Element search backends: accessibility tree, template matching, OCR text
and fixed coordinates.
"""

from .base import Backend
from .location import LocationBackend
from .text import TextBackend
from .tree import TreeBackend
from .visual import VisualBackend

__all__ = ["Backend", "TreeBackend", "VisualBackend", "TextBackend", "LocationBackend"]
