# stepdriver/results.py
"""
@file results.py
@brief Tagged search outcome returned by every backend call.

A search either found elements, found nothing, or failed in the native
layer. Callers branch on the tag instead of catching backend-specific
exception types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .element import Element


class Outcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class SearchResult:
    outcome: Outcome
    elements: Tuple["Element", ...] = ()
    reason: str = ""
    error: Optional[BaseException] = field(default=None, compare=False)

    @classmethod
    def found(cls, *elements: "Element") -> SearchResult:
        if not elements:
            raise ValueError("found() needs at least one element")
        return cls(Outcome.FOUND, tuple(elements))

    @classmethod
    def not_found(cls, reason: str = "", error: Optional[BaseException] = None) -> SearchResult:
        """
        Nothing matched. `error` optionally names *which* miss it was, e.g.
        a SearchRegionNotFoundError versus a TargetNotFoundError.
        """
        return cls(Outcome.NOT_FOUND, (), reason or (str(error) if error else "no match"), error)

    @classmethod
    def failed(cls, error: BaseException) -> SearchResult:
        return cls(Outcome.ERROR, (), f"{type(error).__name__}: {error}", error)

    @property
    def is_found(self) -> bool:
        return self.outcome is Outcome.FOUND

    @property
    def is_error(self) -> bool:
        return self.outcome is Outcome.ERROR

    @property
    def element(self) -> Optional["Element"]:
        return self.elements[0] if self.elements else None

    def __bool__(self) -> bool:
        return self.is_found
