from __future__ import annotations

from typing import TypeAlias

# =============================================================================
# SPATIAL TYPES
# =============================================================================

CellCoord: TypeAlias = int  # Always integer cell position

# Local coordinates - relative to a chunk's own grid, 0..chunk_tiles-1
LocalCellCoord: TypeAlias = CellCoord  # Example: x=5, z=3
LocalCellPos: TypeAlias = tuple[
    LocalCellCoord, LocalCellCoord
]  # Example: (5, 3) = cell 5,3 of this chunk

# Global cell coordinates - absolute cell positions on the infinite world grid
GlobalCellCoord: TypeAlias = CellCoord  # Example: gx=chunk_x * chunk_tiles + x
GlobalCellPos: TypeAlias = tuple[GlobalCellCoord, GlobalCellCoord]

# Chunk indices - which chunk of the world a cell belongs to
ChunkIndex: TypeAlias = tuple[int, int]  # Example: (-1, 2)

# World coordinates - continuous positions in world units (meters)
WorldCoord: TypeAlias = float
WorldPos: TypeAlias = tuple[WorldCoord, WorldCoord]  # Example: (105.0, 35.0) on X/Z

# Directions - discrete grid steps
Direction: TypeAlias = tuple[int, int]  # Example: (-1, 0) = westward step

# =============================================================================
# GENERATION TYPES
# =============================================================================

# A template reference is opaque to the layout engine; the host resolves it
# into whatever it instantiates (a prefab name, an asset path, ...).
TemplateRef: TypeAlias = str

RandomSeed: TypeAlias = int | str | None
