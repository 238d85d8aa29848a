"""Rectangles in cell coordinates."""

from __future__ import annotations

from collections.abc import Iterator

from tilecity.types import CellCoord, LocalCellPos


class Rect:
    """Rectangle/bounding box in cell coordinates.

    ``x1``/``z1`` are inclusive, ``x2``/``z2`` exclusive, so a Rect of
    width 3 starting at x=2 covers the cells 2, 3 and 4.
    """

    __slots__ = ("x1", "x2", "z1", "z2")

    def __init__(self, x: CellCoord, z: CellCoord, w: CellCoord, h: CellCoord) -> None:
        self.x1: CellCoord = x
        self.z1: CellCoord = z
        self.x2: CellCoord = x + w
        self.z2: CellCoord = z + h

    @classmethod
    def from_bounds(
        cls, x1: CellCoord, z1: CellCoord, x2: CellCoord, z2: CellCoord
    ) -> Rect:
        """Create a Rect from corner coordinates (x1, z1, x2, z2)."""
        return cls(x1, z1, x2 - x1, z2 - z1)

    @classmethod
    def bounding(cls, cells: list[LocalCellPos]) -> Rect:
        """Smallest Rect containing every cell of a non-empty list."""
        xs = [x for x, _ in cells]
        zs = [z for _, z in cells]
        return cls.from_bounds(min(xs), min(zs), max(xs) + 1, max(zs) + 1)

    @property
    def width(self) -> CellCoord:
        return self.x2 - self.x1

    @property
    def height(self) -> CellCoord:
        return self.z2 - self.z1

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains_point(self, x: CellCoord, z: CellCoord) -> bool:
        return self.x1 <= x < self.x2 and self.z1 <= z < self.z2

    def contains_rect(self, other: Rect) -> bool:
        return (
            self.x1 <= other.x1
            and other.x2 <= self.x2
            and self.z1 <= other.z1
            and other.z2 <= self.z2
        )

    def intersects(self, other: Rect) -> bool:
        """True if the two rects share at least one cell."""
        return (
            self.x1 < other.x2
            and other.x1 < self.x2
            and self.z1 < other.z2
            and other.z1 < self.z2
        )

    def shrink(self, margin: int) -> Rect:
        """Return this rect with ``margin`` cells removed from every side."""
        return Rect.from_bounds(
            self.x1 + margin, self.z1 + margin, self.x2 - margin, self.z2 - margin
        )

    def cells(self) -> Iterator[LocalCellPos]:
        """Iterate covered cells in raster order (z outer, x inner)."""
        for z in range(self.z1, self.z2):
            for x in range(self.x1, self.x2):
                yield (x, z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rect):
            return NotImplemented
        return (self.x1, self.z1, self.x2, self.z2) == (
            other.x1,
            other.z1,
            other.x2,
            other.z2,
        )

    def __hash__(self) -> int:
        return hash((self.x1, self.z1, self.x2, self.z2))

    def __repr__(self) -> str:
        return f"Rect(x1={self.x1}, z1={self.z1}, x2={self.x2}, z2={self.z2})"
