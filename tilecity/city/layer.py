"""Abstract base class for generation layers.

Each layer in the pipeline implements the GenerationLayer interface and
transforms the ChunkContext in some way - carving roads, finding lots,
placing buildings or filling gaps.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .context import ChunkContext


class GenerationLayer(ABC):
    """Abstract base class for chunk generation layers.

    Layers are applied sequentially by the ChunkGenerator. Each layer
    receives a ChunkContext and modifies it in place.

    Subclasses implement iter_apply() as a generator that yields the number
    of work units done since its previous yield. The yields are the only
    points where a host scheduler may pause generation, and they never
    change the outcome: draining the generator in one go (apply()) gives the
    same result as resuming it over many frames.
    """

    @abstractmethod
    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        """Apply this layer's generation logic, yielding work units.

        This method should modify the context in place. It may:
        - Modify cells (ctx.grid.cells)
        - Add or replace lots (ctx.lots)
        - Add placements (ctx.placements) and claim cells (ctx.cell_use)
        - Use ctx.rng(domain) for random decisions

        Args:
            ctx: The generation context to modify.
        """
        raise NotImplementedError

    def apply(self, ctx: ChunkContext) -> None:
        """Run the layer to completion without pausing."""
        for _ in self.iter_apply(ctx):
            pass
