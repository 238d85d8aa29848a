"""Tests for ChunkRealizer."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from tilecity.city import (
    CellUse,
    ChunkContext,
    ChunkLayout,
    ChunkRealizer,
    ElementTransform,
    FootprintOption,
    Lot,
    Placement,
    VisualSettings,
    create_pipeline,
)
from tilecity.city.grid import CellType
from tilecity.util.coordinates import Rect

from tests.helpers import bare_settings, small_settings

TALL = FootprintOption(
    name="tall", width_m=10, depth_m=20, templates=("t",), height_m=30.0
)


class FakeInstancer:
    """Records every request and returns None for unknown templates."""

    def __init__(self, missing: tuple[str, ...] = ()) -> None:
        self.missing = missing
        self.calls: list[tuple[str, ElementTransform, Any]] = []

    def instantiate(
        self, template: str, transform: ElementTransform, parent: Any
    ) -> object | None:
        self.calls.append((template, transform, parent))
        if template in self.missing:
            return None
        return {"template": template}


class RecordingFitter:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, float, float | None, float]] = []

    def __call__(
        self, element: Any, width: float, height: float | None, depth: float
    ) -> None:
        self.calls.append((element, width, height, depth))


def hand_built_layout() -> ChunkLayout:
    """A 4x4 chunk: a road along x=0, one rotated building, fillers elsewhere."""
    ctx = ChunkContext.create(bare_settings(chunk_tiles=4), (0, 0))
    ctx.grid.cells[0, :] = CellType.WAY
    ctx.lots = [Lot.from_rect(0, Rect(1, 0, 3, 4))]
    placement = Placement(
        lot_id=0,
        x=1,
        z=0,
        span_x=2,
        span_z=1,
        rotated=True,
        option_index=0,
        template_index=0,
        template="t",
    )
    ctx.placements = {0: [placement]}
    ctx.cell_use[:, :] = CellUse.FILLER
    ctx.cell_use[0, :] = CellUse.ROAD
    ctx.cell_use[1:3, 0] = CellUse.BUILDING
    return ctx.to_layout()


def calls_for(instancer: FakeInstancer, template: str) -> list[ElementTransform]:
    return [t for name, t, _ in instancer.calls if name == template]


# =============================================================================
# ChunkRealizer
# =============================================================================


class TestChunkRealizer:
    """Tests for ChunkRealizer.realize."""

    def test_counts(self) -> None:
        instancer = FakeInstancer()
        report = ChunkRealizer(instancer, [TALL]).realize(hand_built_layout())

        assert report.ways == 4
        assert report.buildings == 1
        assert report.fillers == 10
        assert report.skipped == 0
        assert report.created == 15
        assert len(instancer.calls) == 15

    def test_order_roads_buildings_fillers(self) -> None:
        instancer = FakeInstancer()
        ChunkRealizer(instancer, [TALL]).realize(hand_built_layout())

        names = [name for name, _, _ in instancer.calls]
        assert names == ["way"] * 4 + ["t"] + ["block"] * 10
        zs = [t.z for t in calls_for(instancer, "way")]
        assert zs == [5.0, 15.0, 25.0, 35.0]

    def test_parent_passed_through(self) -> None:
        instancer = FakeInstancer()
        parent = object()
        ChunkRealizer(instancer, [TALL]).realize(hand_built_layout(), parent)
        assert all(p is parent for _, _, p in instancer.calls)

    def test_rotated_building(self) -> None:
        instancer = FakeInstancer()
        fitter = RecordingFitter()
        realizer = ChunkRealizer(instancer, [TALL], fitter=fitter)
        realizer.realize(hand_built_layout())

        (transform,) = calls_for(instancer, "t")
        assert transform.x == pytest.approx(20.0)
        assert transform.z == pytest.approx(5.0)
        assert transform.y == 0.0
        assert transform.rotation_degrees == 90.0

        building = [c for c in fitter.calls if c[0] == {"template": "t"}]
        assert building == [({"template": "t"}, 10.0, 30.0, 20.0)]

    def test_ground_height(self) -> None:
        instancer = FakeInstancer()
        realizer = ChunkRealizer(instancer, [TALL], ground=lambda x, z: 100.0)
        realizer.realize(hand_built_layout())

        road = calls_for(instancer, "way")[0]
        assert road.y == pytest.approx(100.0 + 10.0 * 0.10 * 0.5)
        (building,) = calls_for(instancer, "t")
        assert building.y == pytest.approx(100.0)

    def test_road_tile_size(self) -> None:
        fitter = RecordingFitter()
        visuals = VisualSettings(way_fill_xz=0.8, way_fill_y=0.2)
        realizer = ChunkRealizer(
            FakeInstancer(), [TALL], fitter=fitter, visuals=visuals
        )
        realizer.realize(hand_built_layout())

        _, width, height, depth = fitter.calls[0]
        assert (width, height, depth) == pytest.approx((8.0, 2.0, 8.0))

    def test_missing_template_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        instancer = FakeInstancer(missing=("way",))
        fitter = RecordingFitter()
        realizer = ChunkRealizer(instancer, [TALL], fitter=fitter)

        with caplog.at_level(logging.WARNING, logger="tilecity.city.instancing"):
            report = realizer.realize(hand_built_layout())

        assert report.skipped == 4
        assert report.ways == 0
        assert report.buildings == 1
        assert report.fillers == 10
        assert len(fitter.calls) == 11
        assert "4 elements skipped" in caplog.text

    def test_fillers_optional(self) -> None:
        instancer = FakeInstancer()
        visuals = VisualSettings(instance_fillers=False)
        report = ChunkRealizer(instancer, [TALL], visuals=visuals).realize(
            hand_built_layout()
        )

        assert report.fillers == 0
        assert calls_for(instancer, "block") == []

    def test_generated_chunk(self) -> None:
        settings = small_settings()
        layout = create_pipeline("city", settings, (2, -1)).generate()
        report = ChunkRealizer(FakeInstancer(), settings.footprints).realize(layout)

        assert report.ways == layout.grid.count(CellType.WAY)
        assert report.buildings == len(layout.all_placements())
        assert report.fillers == int((layout.cell_use == CellUse.FILLER).sum())
