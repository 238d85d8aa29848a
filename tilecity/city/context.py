"""Generation context for the chunk pipeline.

The ChunkContext is a mutable container that holds all state while one chunk
is generated. Each layer in the pipeline receives the same context and
modifies it in place. This avoids copying numpy arrays between layers.

A context is owned by exactly one chunk. Nothing in it is shared with other
chunks, so several chunks can be generated side by side and abandoning one
halfway only means dropping its context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

from tilecity.city.grid import ChunkGrid
from tilecity.util.rng import ChunkStreams, chunk_seed

if TYPE_CHECKING:
    from random import Random

    from tilecity.city.buildings import Lot, Placement
    from tilecity.city.settings import CitySettings, RoadStrategy
    from tilecity.types import ChunkIndex
    from tilecity.util.coordinates import Rect


class CellUse(IntEnum):
    """What ended up on a cell once the chunk is finished."""

    UNCLAIMED = 0
    ROAD = 1
    BUILDING = 2
    FILLER = 3


@dataclass
class StreetData:
    """Data about the street network, shared between layers.

    Attributes:
        strategy: Secondary strategy that carved the network.
        way_cells: Number of Way cells once carving and linking finished.
        components_before_link: Separate road components before linking.
        links_added: Connecting paths carved by the linking step.
    """

    strategy: RoadStrategy | None = None
    way_cells: int = 0
    components_before_link: int = 0
    links_added: int = 0


@dataclass
class ChunkLayout:
    """Finished layout of one chunk, handed to rendering and navigation.

    Attributes:
        chunk_index: Index of the chunk.
        grid: Final Way/Empty classification.
        lots: Lots in extraction order.
        placements: Placements per lot id, in packing order.
        cell_use: CellUse per cell. Shape: (width, height).
        fillers: Row runs of cells covered by the fallback fill.
        street_data: Summary of the road network.
    """

    chunk_index: ChunkIndex
    grid: ChunkGrid
    lots: list[Lot]
    placements: dict[int, list[Placement]]
    cell_use: np.ndarray
    fillers: list[Rect]
    street_data: StreetData

    def all_placements(self) -> list[Placement]:
        """Every placement of the chunk, lot by lot."""
        return [p for lot in self.lots for p in self.placements.get(lot.id, [])]

    def lot(self, lot_id: int) -> Lot | None:
        for lot in self.lots:
            if lot.id == lot_id:
                return lot
        return None


@dataclass
class ChunkContext:
    """Mutable state container passed through the generation pipeline.

    Attributes:
        settings: Validated world settings.
        grid: The chunk's cell grid.
        streams: Per-stage random streams derived from (seed, chunk index).
        lots: Lots found so far.
        placements: Placements per lot id.
        cell_use: CellUse per cell. Shape: (width, height).
        fillers: Row runs covered by the fallback fill.
        street_data: Street network summary for later layers.
    """

    settings: CitySettings
    grid: ChunkGrid
    streams: ChunkStreams
    lots: list[Lot] = field(default_factory=list)
    placements: dict[int, list[Placement]] = field(default_factory=dict)
    cell_use: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0), dtype=np.uint8)
    )
    fillers: list[Rect] = field(default_factory=list)
    street_data: StreetData = field(default_factory=StreetData)

    @classmethod
    def create(cls, settings: CitySettings, chunk_index: ChunkIndex) -> ChunkContext:
        """Create a fresh context with a cleared grid for a chunk.

        Args:
            settings: World settings (already validated).
            chunk_index: Which chunk to generate.

        Returns:
            A new ChunkContext ready for layer processing.
        """
        grid = ChunkGrid.create(chunk_index, settings.chunk_tiles, settings.cell_size)
        cell_use = np.full(
            grid.cells.shape,
            fill_value=CellUse.UNCLAIMED,
            dtype=np.uint8,
            order="F",
        )
        return cls(
            settings=settings,
            grid=grid,
            streams=ChunkStreams(chunk_seed(settings.seed, chunk_index)),
            cell_use=cell_use,
        )

    @property
    def chunk_index(self) -> ChunkIndex:
        return self.grid.chunk_index

    def rng(self, domain: str) -> Random:
        """The random stream for one generation stage of this chunk."""
        return self.streams.get(domain)

    def to_layout(self) -> ChunkLayout:
        """Convert this context to the pipeline's output.

        Returns:
            A ChunkLayout referencing this context's arrays and lists.
        """
        return ChunkLayout(
            chunk_index=self.chunk_index,
            grid=self.grid,
            lots=self.lots,
            placements=self.placements,
            cell_use=self.cell_use,
            fillers=self.fillers,
            street_data=self.street_data,
        )
