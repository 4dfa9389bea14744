# stepdriver/geometry.py
"""
@file geometry.py
@brief Screen points and rectangular regions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Region:
    """Axis-aligned rectangle in screen pixels (top-left origin)."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_rect(cls, left: int, top: int, right: int, bottom: int, scale: float = 100.0) -> Region:
        """
        Build a region from native rectangle edges.

        @param scale Display scale in percent; native coordinates are divided
                     by scale/100 so regions stay in normalized screen pixels.
        """
        factor = 100.0 / float(scale or 100.0)
        return cls(
            x=int(left * factor),
            y=int(top * factor),
            width=int((right - left) * factor),
            height=int((bottom - top) * factor),
        )

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width // 2, self.y + self.height // 2)

    def corner_point(self, dx: int = 5, dy: int = 5) -> Point:
        """Point `dx` right of the left edge and `dy` above the bottom edge."""
        return Point(self.x + dx, self.bottom - dy)

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, point: Point) -> bool:
        return self.x <= point.x < self.right and self.y <= point.y < self.bottom

    def offset(self, dx: int, dy: int) -> Region:
        return Region(self.x + dx, self.y + dy, self.width, self.height)

    def intersection(self, other: Region) -> Optional[Region]:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Region(left, top, right - left, bottom - top)

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom), the box format PIL crops with."""
        return (self.x, self.y, self.right, self.bottom)
