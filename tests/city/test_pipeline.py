"""Tests for the chunk generator, the factory and whole-chunk guarantees."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pytest

from tilecity.city import (
    CellType,
    CellUse,
    ChunkGenerator,
    ConfigurationError,
    GenerationLayer,
    create_chunk_generator,
    create_pipeline,
)
from tilecity.city.factory import PIPELINE_NAMES
from tilecity.city.settings import ArterialSettings, RoadStrategy

from tests.helpers import assert_layouts_equal, placement_cells, small_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tilecity.city import ChunkContext

# =============================================================================
# ChunkGenerator
# =============================================================================


class RecordingLayer(GenerationLayer):
    """Appends its name to a shared log and reports a fixed amount of work."""

    def __init__(self, name: str, log: list[str], units: int = 10) -> None:
        self.name = name
        self.log = log
        self.units = units

    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        self.log.append(self.name)
        yield self.units


class TestChunkGenerator:
    """Tests for ChunkGenerator."""

    def test_layers_run_in_order(self) -> None:
        log: list[str] = []
        layers = [RecordingLayer(name, log) for name in ("a", "b", "c")]
        generator = ChunkGenerator(layers, small_settings(), (0, 0))

        layout = generator.generate()

        assert log == ["a", "b", "c"]
        assert layout.chunk_index == (0, 0)

    def test_yields_once_per_budget(self) -> None:
        """Work units accumulate across layers until the budget is reached."""
        log: list[str] = []
        layers = [RecordingLayer(str(i), log, units=30) for i in range(5)]
        settings = small_settings(yield_every=50)

        pauses = list(ChunkGenerator(layers, settings, (0, 0)).iter_generate())

        # 30, 60 -> pause, 30, 60 -> pause, 30
        assert len(pauses) == 2
        assert all(p is None for p in pauses)

    def test_empty_pipeline_gives_empty_chunk(self) -> None:
        layout = ChunkGenerator([], small_settings(), (2, 2)).generate()
        assert layout.grid.count(CellType.WAY) == 0
        assert layout.lots == []
        assert not np.any(layout.cell_use)


# =============================================================================
# Factory
# =============================================================================


class TestFactory:
    """Tests for create_pipeline and create_chunk_generator."""

    def test_known_pipelines(self) -> None:
        for name in PIPELINE_NAMES:
            assert isinstance(create_pipeline(name, small_settings()), ChunkGenerator)

    def test_unknown_pipeline_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown pipeline name"):
            create_pipeline("suburbs", small_settings())

    def test_invalid_settings_rejected_up_front(self) -> None:
        with pytest.raises(ConfigurationError, match="chunk_tiles"):
            create_pipeline("city", small_settings(chunk_tiles=0))

    def test_streets_pipeline_has_no_lots(self) -> None:
        layout = create_pipeline("streets", small_settings(), (1, 1)).generate()
        assert layout.grid.count(CellType.WAY) > 0
        assert layout.lots == []
        assert layout.all_placements() == []

    def test_default_generator_is_city(self) -> None:
        settings = small_settings()
        a = create_chunk_generator(settings, (3, -2)).generate()
        b = create_pipeline("city", settings, (3, -2)).generate()
        assert_layouts_equal(a, b)


# =============================================================================
# Determinism
# =============================================================================


class TestDeterminism:
    """Same seed, settings and chunk index give the same chunk."""

    @pytest.mark.parametrize("strategy", list(RoadStrategy))
    def test_repeatable(self, strategy: RoadStrategy) -> None:
        settings = small_settings(strategy=strategy)
        a = create_pipeline("city", settings, (-3, 5)).generate()
        b = create_pipeline("city", settings, (-3, 5)).generate()
        assert_layouts_equal(a, b)

    def test_sliced_matches_sync(self) -> None:
        settings = small_settings(yield_every=50)
        sync = create_pipeline("city", settings, (7, 1)).generate()

        steps = create_pipeline("city", settings, (7, 1)).iter_generate()
        pauses = 0
        while True:
            try:
                next(steps)
                pauses += 1
            except StopIteration as done:
                sliced = done.value
                break

        assert pauses > 1
        assert_layouts_equal(sync, sliced)

    def test_order_of_generation_does_not_matter(self) -> None:
        settings = small_settings()
        first = create_pipeline("city", settings, (0, 1)).generate()
        create_pipeline("city", settings, (5, 5)).generate()
        again = create_pipeline("city", settings, (0, 1)).generate()
        assert_layouts_equal(first, again)

    def test_different_seeds_differ(self) -> None:
        a = create_pipeline("city", small_settings(seed=1), (0, 0)).generate()
        b = create_pipeline("city", small_settings(seed=2), (0, 0)).generate()
        assert not np.array_equal(a.grid.cells, b.grid.cells)

    def test_mirrored_chunks_differ(self) -> None:
        """Chunks mirrored through the origin get their own secondary roads."""
        settings = small_settings(arterial=ArterialSettings(enabled=False))
        a = create_pipeline("streets", settings, (1, 1)).generate()
        b = create_pipeline("streets", settings, (-1, -1)).generate()
        assert not np.array_equal(a.grid.cells, b.grid.cells)


# =============================================================================
# Whole-chunk guarantees
# =============================================================================


CHUNKS = [(0, 0), (1, 0), (-1, -1), (4, -3), (-7, 2)]


class TestChunkGuarantees:
    """Properties every finished city chunk has."""

    @pytest.mark.parametrize("index", CHUNKS)
    def test_arterials_stay_roads(self, index: tuple[int, int]) -> None:
        settings = small_settings()
        layout = create_pipeline("city", settings, index).generate()
        gx0, gz0 = layout.grid.global_offset
        period = settings.arterial.period
        width = settings.arterial.width
        tiles = settings.chunk_tiles

        for i in range(tiles):
            if (gx0 + i) % period < width:
                assert layout.grid.way_mask[i, :].all()
            if (gz0 + i) % period < width:
                assert layout.grid.way_mask[:, i].all()

    @pytest.mark.parametrize("index", CHUNKS)
    def test_no_overlapping_buildings(self, index: tuple[int, int]) -> None:
        layout = create_pipeline("city", small_settings(), index).generate()
        cells = placement_cells(layout.all_placements())

        assert len(cells) == len(set(cells))
        for x, z in cells:
            assert layout.grid.cells[x, z] == CellType.EMPTY
            assert layout.cell_use[x, z] == CellUse.BUILDING

    @pytest.mark.parametrize("index", CHUNKS)
    def test_buildings_stay_in_their_lot(self, index: tuple[int, int]) -> None:
        layout = create_pipeline("city", small_settings(), index).generate()
        for lot in layout.lots:
            members = set(lot.cells)
            for p in layout.placements[lot.id]:
                assert p.lot_id == lot.id
                assert set(p.cells()) <= members

    @pytest.mark.parametrize("index", CHUNKS)
    def test_every_cell_classified(self, index: tuple[int, int]) -> None:
        layout = create_pipeline("city", small_settings(), index).generate()
        assert not np.any(layout.cell_use == CellUse.UNCLAIMED)
        assert layout.street_data.way_cells == layout.grid.count(CellType.WAY)
