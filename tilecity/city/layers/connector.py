"""Connector and gap fill layers.

Two passes that make sure a finished chunk has no loose ends:

- LotAccessLayer gives every lot without road contact a strip of road along
  one side, so nothing is built where it cannot be reached.
- GapFillLayer classifies every cell of the chunk as road, building or
  filler, so the host never sees an undefined gap.

Both are idempotent. Running either of them twice changes nothing.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

import numpy as np

from tilecity.city.buildings import Lot
from tilecity.city.context import CellUse
from tilecity.city.grid import CellType, ChunkGrid
from tilecity.city.layer import GenerationLayer
from tilecity.util.coordinates import Rect

from .links import link_road_components
from .lots import connected_pieces

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tilecity.city.context import ChunkContext
    from tilecity.types import LocalCellPos

logger = logging.getLogger(__name__)

WEST, EAST, NORTH, SOUTH = "west", "east", "north", "south"


def facing_side(grid: ChunkGrid, bounds: Rect) -> str:
    """Side of ``bounds`` that faces the nearest road.

    Without any road in the chunk the side facing the nearest chunk edge is
    used, so the strip can meet the neighbouring chunk's network.
    """
    roads = np.argwhere(grid.way_mask)
    if len(roads) == 0:
        gaps = {
            WEST: bounds.x1,
            EAST: grid.width - bounds.x2,
            NORTH: bounds.z1,
            SOUTH: grid.height - bounds.z2,
        }
        return min(gaps, key=gaps.__getitem__)

    cx = (bounds.x1 + bounds.x2 - 1) / 2
    cz = (bounds.z1 + bounds.z2 - 1) / 2
    d2 = (roads[:, 0] - cx) ** 2 + (roads[:, 1] - cz) ** 2
    wx, wz = roads[int(np.argmin(d2))]
    dx, dz = wx - cx, wz - cz
    if abs(dx) >= abs(dz):
        return EAST if dx > 0 else WEST
    return SOUTH if dz > 0 else NORTH


def band_cells(lot: Lot, side: str, band_width: int) -> list[LocalCellPos]:
    """Member cells within ``band_width`` cells of one side of the lot's bounds."""
    b = lot.bounds
    if side == WEST:
        return [(x, z) for x, z in lot.cells if x < b.x1 + band_width]
    if side == EAST:
        return [(x, z) for x, z in lot.cells if x >= b.x2 - band_width]
    if side == NORTH:
        return [(x, z) for x, z in lot.cells if z < b.z1 + band_width]
    return [(x, z) for x, z in lot.cells if z >= b.z2 - band_width]


def touches_way(grid: ChunkGrid, cells: Iterable[LocalCellPos]) -> bool:
    for x, z in cells:
        if (
            grid.is_way(x + 1, z)
            or grid.is_way(x - 1, z)
            or grid.is_way(x, z + 1)
            or grid.is_way(x, z - 1)
        ):
            return True
    return False


class LotAccessLayer(GenerationLayer):
    """Stamps a road strip into every lot that does not touch a road.

    The strip is ``access_band_width`` member cells deep, taken along the
    side facing the nearest road, and is linked into the network. Lots then
    keep only their cells that are still empty. A lot cut apart by the new
    roads becomes one lot per connected piece, pieces smaller than
    ``min_lot_cells`` are dropped, and ids are renumbered densely.

    Runs before packing, so no placements exist yet.
    """

    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        grid = ctx.grid
        band_width = ctx.settings.connector.access_band_width

        stamped = 0
        for lot in ctx.lots:
            if lot.touches_road:
                continue
            side = facing_side(grid, lot.bounds)
            for x, z in band_cells(lot, side, band_width):
                grid.cells[x, z] = CellType.WAY
            stamped += 1
            yield lot.cell_count

        if stamped == 0:
            return

        link_road_components(grid)
        yield grid.width * grid.height

        lot_settings = ctx.settings.lots
        lots: list[Lot] = []
        for lot in ctx.lots:
            remaining = [
                (x, z) for x, z in lot.cells if grid.cells[x, z] == CellType.EMPTY
            ]
            if len(remaining) == lot.cell_count and lot.touches_road:
                lots.append(lot)
                continue
            # Strips and links can cut a lot apart or shrink it below the minimum
            for piece in connected_pieces(remaining, lot_settings.merge_diagonals):
                if len(piece) < lot_settings.min_lot_cells:
                    continue
                lots.append(Lot.from_cells(lot.id, piece, touches_way(grid, piece)))
        ctx.lots = [
            lot if lot.id == i else dataclasses.replace(lot, id=i)
            for i, lot in enumerate(lots)
        ]
        ctx.placements = {lot.id: [] for lot in ctx.lots}
        ctx.street_data.way_cells = grid.count(CellType.WAY)

        logger.debug(
            "Chunk %s: stamped road access into %d lots", ctx.chunk_index, stamped
        )


def row_runs(mask: np.ndarray) -> list[Rect]:
    """Maximal horizontal runs of True cells, one-cell-high Rects in raster order."""
    width, height = mask.shape
    runs: list[Rect] = []
    for z in range(height):
        x = 0
        while x < width:
            if not mask[x, z]:
                x += 1
                continue
            start = x
            while x < width and mask[x, z]:
                x += 1
            runs.append(Rect(start, z, x - start, 1))
    return runs


class GapFillLayer(GenerationLayer):
    """Accounts for every cell: Way cells become ROAD and, when gap filling is
    on, every Empty cell without a building becomes FILLER.
    """

    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        way = ctx.grid.way_mask
        use = ctx.cell_use
        use[way] = CellUse.ROAD

        if ctx.settings.connector.fill_gaps:
            gaps = ~way & (use != CellUse.BUILDING)
            use[gaps] = CellUse.FILLER
            ctx.fillers = row_runs(gaps)
        yield ctx.grid.width * ctx.grid.height

        logger.debug(
            "Chunk %s: %d filler runs", ctx.chunk_index, len(ctx.fillers)
        )
