"""Per-chunk cell grid and the coordinate systems around it.

Three coordinate systems meet here:
- Local cells: ``(x, z)`` inside one chunk, ``0 <= x, z < chunk_tiles``.
- Global cells: ``chunk_index * chunk_tiles + local``, unique world-wide.
- World units: continuous meters, ``global_cell * cell_size``.

The grid itself holds no generation logic. Layers write ``CellType`` values
into ``cells`` and everything else reads them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from tilecity.types import (
    ChunkIndex,
    GlobalCellPos,
    LocalCellCoord,
    LocalCellPos,
    WorldCoord,
    WorldPos,
)


class CellType(IntEnum):
    """Semantic classification of a single cell."""

    EMPTY = 0
    WAY = 1


def global_to_chunk(gx: int, gz: int, chunk_tiles: int) -> ChunkIndex:
    """Chunk index owning a global cell. Floor division keeps negatives right."""
    return (gx // chunk_tiles, gz // chunk_tiles)


def world_to_chunk(
    x: WorldCoord, z: WorldCoord, chunk_tiles: int, cell_size: float
) -> ChunkIndex:
    """Chunk index containing a world position."""
    size = chunk_tiles * cell_size
    return (math.floor(x / size), math.floor(z / size))


@dataclass
class ChunkGrid:
    """The ``chunk_tiles x chunk_tiles`` cell array of one chunk.

    Attributes:
        chunk_index: Integer 2D index of the chunk in the world.
        chunk_tiles: Cells per chunk side.
        cell_size: World units per cell side.
        cells: 2D numpy array of CellType values. Shape: (width, height),
            indexed ``cells[x, z]``.
    """

    chunk_index: ChunkIndex
    chunk_tiles: int
    cell_size: float
    cells: np.ndarray

    @classmethod
    def create(
        cls, chunk_index: ChunkIndex, chunk_tiles: int, cell_size: float
    ) -> ChunkGrid:
        """Create a cleared grid (every cell EMPTY) for a chunk."""
        cells = np.full(
            (chunk_tiles, chunk_tiles),
            fill_value=CellType.EMPTY,
            dtype=np.uint8,
            order="F",
        )
        return cls(
            chunk_index=chunk_index,
            chunk_tiles=chunk_tiles,
            cell_size=cell_size,
            cells=cells,
        )

    @property
    def width(self) -> int:
        return self.cells.shape[0]

    @property
    def height(self) -> int:
        return self.cells.shape[1]

    @property
    def global_offset(self) -> GlobalCellPos:
        """Global cell coordinate of local cell (0, 0)."""
        cx, cz = self.chunk_index
        return (cx * self.chunk_tiles, cz * self.chunk_tiles)

    @property
    def origin(self) -> WorldPos:
        """World position of the chunk's minimum corner."""
        gx, gz = self.global_offset
        return (gx * self.cell_size, gz * self.cell_size)

    @property
    def way_mask(self) -> np.ndarray:
        return self.cells == CellType.WAY

    def clear(self) -> None:
        self.cells[:, :] = CellType.EMPTY

    def copy(self) -> ChunkGrid:
        return ChunkGrid(
            chunk_index=self.chunk_index,
            chunk_tiles=self.chunk_tiles,
            cell_size=self.cell_size,
            cells=self.cells.copy(order="F"),
        )

    def in_bounds(self, x: LocalCellCoord, z: LocalCellCoord) -> bool:
        return 0 <= x < self.width and 0 <= z < self.height

    def is_way(self, x: LocalCellCoord, z: LocalCellCoord) -> bool:
        return self.in_bounds(x, z) and self.cells[x, z] == CellType.WAY

    def count(self, cell_type: CellType) -> int:
        return int(np.count_nonzero(self.cells == cell_type))

    def local_to_global(self, x: LocalCellCoord, z: LocalCellCoord) -> GlobalCellPos:
        gx, gz = self.global_offset
        return (gx + x, gz + z)

    def global_to_local(self, gx: int, gz: int) -> LocalCellPos:
        """Local cell for a global cell. May lie outside this chunk."""
        ox, oz = self.global_offset
        return (gx - ox, gz - oz)

    def local_to_world_center(
        self, x: LocalCellCoord, z: LocalCellCoord
    ) -> WorldPos:
        """World position of a local cell's center."""
        ox, oz = self.origin
        return (ox + (x + 0.5) * self.cell_size, oz + (z + 0.5) * self.cell_size)

    def world_to_local(self, wx: WorldCoord, wz: WorldCoord) -> LocalCellPos:
        """Local cell containing a world position. May lie outside this chunk."""
        ox, oz = self.origin
        return (
            math.floor((wx - ox) / self.cell_size),
            math.floor((wz - oz) / self.cell_size),
        )
