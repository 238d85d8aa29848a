"""Footprint options for building packing.

A footprint option is one candidate building size, given in world units, plus
the set of interchangeable templates that can fill it. The packer converts
each option to an integer cell span for the world's cell size.

Footprint variety is controlled via:
- templates: Several templates per size, picked per placement
- weights: Optional per-template weights (higher = more common)
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from tilecity.types import TemplateRef


@dataclass(frozen=True)
class FootprintOption:
    """A candidate building footprint and its templates.

    Footprints are configured once per world and shared, read-only, by every
    lot of every chunk.

    Attributes:
        name: Human-readable name for this option.
        width_m: Footprint width along X in world units.
        depth_m: Footprint depth along Z in world units.
        templates: Template references that fit this footprint.
        weights: Optional selection weight per template. None = uniform.
        height_m: Optional target height for the host's size fitter.
            None keeps whatever height the template has natively.
    """

    name: str
    width_m: float
    depth_m: float
    templates: tuple[TemplateRef, ...] = ()
    weights: tuple[float, ...] | None = None
    height_m: float | None = None

    @property
    def area_m2(self) -> float:
        return self.width_m * self.depth_m

    @property
    def is_square(self) -> bool:
        return self.width_m == self.depth_m

    def cell_span(self, cell_size: float) -> tuple[int, int]:
        """Convert to an integer (x, z) cell span, rounding up, at least 1x1."""
        sx = max(1, math.ceil(self.width_m / cell_size))
        sz = max(1, math.ceil(self.depth_m / cell_size))
        return sx, sz

    def pick_template(self, rng: random.Random) -> int:
        """Pick a template index, honouring weights when present.

        Args:
            rng: Random number generator.

        Returns:
            Index into ``templates``.
        """
        if self.weights is None or sum(self.weights) <= 0:
            return rng.randrange(len(self.templates))
        return rng.choices(range(len(self.templates)), weights=self.weights)[0]


# =============================================================================
# Default catalog
# =============================================================================

TOWER_60X60 = FootprintOption(
    name="tower_60x60",
    width_m=60,
    depth_m=60,
    templates=("tower_a", "tower_b"),
)

BLOCK_50X50 = FootprintOption(
    name="block_50x50",
    width_m=50,
    depth_m=50,
    templates=("block_a", "block_b", "block_c"),
)

SLAB_40X60 = FootprintOption(
    name="slab_40x60",
    width_m=40,
    depth_m=60,
    templates=("slab_a", "slab_b"),
)

HOUSE_30X30 = FootprintOption(
    name="house_30x30",
    width_m=30,
    depth_m=30,
    templates=("house_a", "house_b", "house_c"),
    weights=(2.0, 1.0, 1.0),
)

SHOP_20X20 = FootprintOption(
    name="shop_20x20",
    width_m=20,
    depth_m=20,
    templates=("shop_a",),
)

KIOSK_10X10 = FootprintOption(
    name="kiosk_10x10",
    width_m=10,
    depth_m=10,
    templates=("kiosk_a", "kiosk_b"),
)


def get_default_footprints() -> tuple[FootprintOption, ...]:
    """Get the default footprint catalog, largest first."""
    return (
        TOWER_60X60,
        BLOCK_50X50,
        SLAB_40X60,
        HOUSE_30X30,
        SHOP_20X20,
        KIOSK_10X10,
    )
