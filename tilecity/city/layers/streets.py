"""Street network layer.

Carves the road network of a chunk in three steps:

1. Arterials: a world-aligned lattice of straight roads. Whether a global
   column or row is an arterial depends only on its global coordinate, so
   arterials line up across every chunk border.
2. Secondary roads: one interchangeable strategy (see strategies.py) fills
   the blocks between arterials.
3. Linking: stray road fragments are joined to the main network.

The result is recorded in ``ctx.street_data`` for the layers that follow.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from tilecity.city.grid import CellType, ChunkGrid
from tilecity.city.layer import GenerationLayer
from tilecity.city.settings import RoadStrategy

from .links import label_components, link_road_components
from .strategies import RoadGenerator, road_generator_for

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tilecity.city.context import ChunkContext
    from tilecity.types import GlobalCellCoord

logger = logging.getLogger(__name__)


def is_arterial(coord: GlobalCellCoord, period: int, width: int) -> bool:
    """True if a global column (or row) index lies on an arterial.

    Python's ``%`` floors, so ``-1 % 8 == 7`` and the test is continuous
    across the origin.
    """
    return coord % period < width


def arterial_mask(offset: int, count: int, period: int, width: int) -> np.ndarray:
    """Boolean arterial flags for ``count`` consecutive global indices."""
    return (np.arange(count, dtype=np.int64) + offset) % period < width


def stamp_arterials(grid: ChunkGrid, period: int, width: int) -> None:
    """Mark every arterial column and row of the chunk as Way."""
    gx, gz = grid.global_offset
    columns = arterial_mask(gx, grid.width, period, width)
    rows = arterial_mask(gz, grid.height, period, width)
    grid.cells[columns, :] = CellType.WAY
    grid.cells[:, rows] = CellType.WAY


class StreetNetworkLayer(GenerationLayer):
    """Carves arterials and a secondary road network into the chunk.

    Args:
        strategy: Secondary strategy. None uses ``settings.strategy``.
        road_generator: A custom RoadGenerator, overriding ``strategy``.
    """

    def __init__(
        self,
        strategy: RoadStrategy | str | None = None,
        road_generator: RoadGenerator | None = None,
    ) -> None:
        self.strategy = RoadStrategy(strategy) if strategy is not None else None
        self.road_generator = road_generator

    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        settings = ctx.settings
        grid = ctx.grid
        cells = grid.width * grid.height

        art = settings.arterial
        if art.enabled:
            stamp_arterials(grid, art.period, art.width)
            yield cells

        strategy = self.strategy or RoadStrategy(settings.strategy)
        generator = self.road_generator or road_generator_for(strategy)
        generator.generate(grid, ctx.rng("roads"), settings)
        yield cells

        if settings.connector.link_road_components:
            components, links = link_road_components(grid)
        else:
            components, links = len(label_components(grid.way_mask)[1]), 0
        yield cells

        ctx.street_data.strategy = strategy
        ctx.street_data.way_cells = grid.count(CellType.WAY)
        ctx.street_data.components_before_link = components
        ctx.street_data.links_added = links

        logger.debug(
            "Chunk %s: %s roads, %d way cells, %d links",
            ctx.chunk_index,
            strategy.value,
            ctx.street_data.way_cells,
            links,
        )
