"""Lot extraction layer.

Recovers buildable lots from the cells the street network left empty. Each
lot is a maximal connected region of Empty cells. Lots that are too small,
or that cannot be reached from any road, are discarded.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

import numpy as np

from tilecity.city.buildings import Lot
from tilecity.city.grid import CellType, ChunkGrid
from tilecity.city.layer import GenerationLayer

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tilecity.city.context import ChunkContext
    from tilecity.city.settings import LotSettings
    from tilecity.types import Direction, LocalCellPos

logger = logging.getLogger(__name__)

ORTHOGONAL: tuple[Direction, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONAL: tuple[Direction, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))


def extract_lots(grid: ChunkGrid, settings: LotSettings) -> list[Lot]:
    """Find the lots of a chunk.

    The grid is scanned in raster order (z outer, x inner). Every Empty cell
    not yet visited seeds a breadth-first flood over connected Empty cells.
    Lot ids follow seed order, counting only lots that are kept.

    Args:
        grid: The chunk grid with its road network carved.
        settings: Connectivity, minimum size and coverage rules.

    Returns:
        The kept lots, ordered by id.
    """
    width, height = grid.width, grid.height
    cells = grid.cells
    visited = np.zeros((width, height), dtype=np.bool_, order="F")
    steps = ORTHOGONAL + DIAGONAL if settings.merge_diagonals else ORTHOGONAL

    lots: list[Lot] = []
    for z in range(height):
        for x in range(width):
            if visited[x, z] or cells[x, z] != CellType.EMPTY:
                continue

            visited[x, z] = True
            queue = deque([(x, z)])
            members: list[LocalCellPos] = []
            touches_road = False
            while queue:
                cx, cz = queue.popleft()
                members.append((cx, cz))
                for dx, dz in steps:
                    nx, nz = cx + dx, cz + dz
                    if not (0 <= nx < width and 0 <= nz < height):
                        continue
                    if cells[nx, nz] == CellType.WAY:
                        # Only orthogonal contact counts as road access
                        if dx == 0 or dz == 0:
                            touches_road = True
                        continue
                    if not visited[nx, nz]:
                        visited[nx, nz] = True
                        queue.append((nx, nz))

            if len(members) < settings.min_lot_cells:
                continue
            if not touches_road and not settings.cover_all:
                continue
            lots.append(Lot.from_cells(len(lots), members, touches_road))

    return lots


def connected_pieces(
    cells: Iterable[LocalCellPos], merge_diagonals: bool = False
) -> list[list[LocalCellPos]]:
    """Split a set of cells into its connected pieces.

    Pieces are seeded in raster order and listed in flood order, the same
    way ``extract_lots`` orders lot cells.
    """
    remaining = set(cells)
    steps = ORTHOGONAL + DIAGONAL if merge_diagonals else ORTHOGONAL

    pieces: list[list[LocalCellPos]] = []
    for seed in sorted(remaining, key=lambda c: (c[1], c[0])):
        if seed not in remaining:
            continue
        remaining.discard(seed)
        queue = deque([seed])
        piece: list[LocalCellPos] = []
        while queue:
            cx, cz = queue.popleft()
            piece.append((cx, cz))
            for dx, dz in steps:
                neighbor = (cx + dx, cz + dz)
                if neighbor in remaining:
                    remaining.discard(neighbor)
                    queue.append(neighbor)
        pieces.append(piece)
    return pieces


class LotExtractionLayer(GenerationLayer):
    """Replaces ``ctx.lots`` with the lots of the current grid."""

    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        ctx.lots = extract_lots(ctx.grid, ctx.settings.lots)
        ctx.placements = {lot.id: [] for lot in ctx.lots}
        yield ctx.grid.width * ctx.grid.height

        logger.debug("Chunk %s: extracted %d lots", ctx.chunk_index, len(ctx.lots))
