from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from tilecity.city import (
    ChunkContext,
    ChunkLayout,
    CitySettings,
    FootprintOption,
    Placement,
)
from tilecity.city.settings import ArterialSettings, RoadStrategy
from tilecity.types import ChunkIndex, LocalCellPos


def small_settings(**changes: object) -> CitySettings:
    """Settings for a fast 32x32 chunk, with optional top-level overrides."""
    settings = CitySettings(seed=1234, chunk_tiles=32)
    return settings.replace(**changes) if changes else settings


def bare_settings(chunk_tiles: int = 16, **changes: object) -> CitySettings:
    """A chunk without arterials or secondary roads."""
    return CitySettings(
        seed=99,
        chunk_tiles=chunk_tiles,
        strategy=RoadStrategy.NONE,
        arterial=ArterialSettings(enabled=False),
    ).replace(**changes)


def make_context(
    settings: CitySettings | None = None, chunk_index: ChunkIndex = (0, 0)
) -> ChunkContext:
    return ChunkContext.create(settings or small_settings(), chunk_index)


def square_option(size_m: float, name: str = "square") -> FootprintOption:
    return FootprintOption(name=name, width_m=size_m, depth_m=size_m, templates=("t",))


def placement_cells(placements: Iterable[Placement]) -> list[LocalCellPos]:
    """Every cell covered by the placements, duplicates included."""
    return [cell for p in placements for cell in p.cells()]


def assert_layouts_equal(a: ChunkLayout, b: ChunkLayout) -> None:
    """Two layouts match cell for cell and placement for placement."""
    assert a.chunk_index == b.chunk_index
    np.testing.assert_array_equal(a.grid.cells, b.grid.cells)
    np.testing.assert_array_equal(a.cell_use, b.cell_use)
    assert a.lots == b.lots
    assert a.placements == b.placements
    assert a.fillers == b.fillers
    assert a.street_data == b.street_data
