"""Lot and Placement dataclasses.

Lots are the buildable regions left between roads. Placements are the
building footprints committed inside a lot. Both live in chunk-local cell
coordinates and are immutable once produced.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from tilecity.types import LocalCellPos, TemplateRef
from tilecity.util.coordinates import Rect


@dataclass(frozen=True)
class Lot:
    """A maximal connected region of non-road cells.

    Attributes:
        id: Lot identifier, unique within its chunk.
        cells: Member cells in flood-fill order.
        bounds: Axis-aligned bounding box of the member cells.
        touches_road: True if any member is orthogonally next to a Way cell.
    """

    id: int
    cells: tuple[LocalCellPos, ...]
    bounds: Rect
    touches_road: bool

    @classmethod
    def from_cells(
        cls, lot_id: int, cells: list[LocalCellPos], touches_road: bool
    ) -> Lot:
        return cls(
            id=lot_id,
            cells=tuple(cells),
            bounds=Rect.bounding(cells),
            touches_road=touches_road,
        )

    @classmethod
    def from_rect(cls, lot_id: int, rect: Rect, touches_road: bool = True) -> Lot:
        """A fully rectangular lot covering ``rect``."""
        return cls(
            id=lot_id,
            cells=tuple(rect.cells()),
            bounds=rect,
            touches_road=touches_road,
        )

    @property
    def cell_count(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class Placement:
    """One committed footprint inside a lot.

    Attributes:
        lot_id: The lot this placement belongs to.
        x: Chunk-local X of the minimum corner cell.
        z: Chunk-local Z of the minimum corner cell.
        span_x: Occupied cells along X (after rotation).
        span_z: Occupied cells along Z (after rotation).
        rotated: True if the footprint was turned 90 degrees.
        option_index: Index of the FootprintOption in the catalog.
        template_index: Index of the chosen template in that option.
        template: The chosen template reference.
    """

    lot_id: int
    x: int
    z: int
    span_x: int
    span_z: int
    rotated: bool
    option_index: int
    template_index: int
    template: TemplateRef

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.z, self.span_x, self.span_z)

    @property
    def area(self) -> int:
        return self.span_x * self.span_z

    def cells(self) -> Iterator[LocalCellPos]:
        return self.rect.cells()
