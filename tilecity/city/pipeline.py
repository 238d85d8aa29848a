"""Chunk generator that runs a sequence of generation layers.

The ChunkGenerator orchestrates chunk generation by:
1. Creating a fresh ChunkContext for the chunk
2. Applying each layer in sequence
3. Converting the final context to a ChunkLayout

Generation can run in one go (``generate``) or be sliced into bounded steps
(``iter_generate``) for a host that spreads work over several frames. Both
produce identical layouts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .context import ChunkContext, ChunkLayout

if TYPE_CHECKING:
    from collections.abc import Generator

    from tilecity.types import ChunkIndex

    from .layer import GenerationLayer
    from .settings import CitySettings

logger = logging.getLogger(__name__)


class ChunkGenerator:
    """Generates one chunk by applying a sequence of layers.

    Example:
        generator = ChunkGenerator(
            layers=[
                StreetNetworkLayer(),
                LotExtractionLayer(),
                BuildingPackingLayer(),
            ],
            settings=CitySettings(seed=42),
            chunk_index=(0, -1),
        )
        layout = generator.generate()
    """

    def __init__(
        self,
        layers: list[GenerationLayer],
        settings: CitySettings,
        chunk_index: ChunkIndex,
    ) -> None:
        """Initialize the chunk generator.

        Args:
            layers: Ordered list of layers to apply.
            settings: Validated world settings.
            chunk_index: The chunk to generate.
        """
        self.layers = layers
        self.settings = settings
        self.chunk_index = chunk_index

    def generate(self) -> ChunkLayout:
        """Generate the chunk without pausing.

        Returns:
            The finished ChunkLayout.
        """
        steps = self.iter_generate()
        while True:
            try:
                next(steps)
            except StopIteration as done:
                return done.value

    def iter_generate(self) -> Generator[None, None, ChunkLayout]:
        """Generate the chunk, pausing every ``yield_every`` work units.

        Each ``None`` yielded is a point where the caller may stop and come
        back later. The layout is the generator's return value. Closing the
        generator abandons the chunk; all state is local to it.
        """
        ctx = ChunkContext.create(self.settings, self.chunk_index)
        budget = self.settings.yield_every
        pending = 0

        for layer in self.layers:
            for units in layer.iter_apply(ctx):
                pending += units
                if pending >= budget:
                    pending = 0
                    yield None

        logger.debug(
            "Chunk %s generated: %d lots, %d placements",
            self.chunk_index,
            len(ctx.lots),
            sum(len(p) for p in ctx.placements.values()),
        )
        return ctx.to_layout()
