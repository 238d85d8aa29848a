"""Turning a ChunkLayout into scene elements.

The layout engine knows nothing about meshes, prefabs or physics. A host
plugs three small collaborators into the ChunkRealizer:

- GroundSampler: height of the ground at a world position
- SizeFitter: scales an element to a target size
- Instancer: creates an element from a template reference

The realizer walks a finished layout and asks the instancer for one element
per road cell, per building placement and (optionally) per filler cell. An
instancer may return None for a template it cannot resolve. That element is
skipped and counted, and the rest of the chunk is still realized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np

from tilecity import config
from tilecity.city.context import CellUse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tilecity.city.buildings import FootprintOption, Placement
    from tilecity.city.context import ChunkLayout
    from tilecity.types import TemplateRef, WorldCoord

logger = logging.getLogger(__name__)


class GroundSampler(Protocol):
    def __call__(self, x: WorldCoord, z: WorldCoord) -> float: ...


class SizeFitter(Protocol):
    def __call__(
        self, element: Any, width: float, height: float | None, depth: float
    ) -> None: ...


class Instancer(Protocol):
    def instantiate(
        self, template: TemplateRef, transform: ElementTransform, parent: Any
    ) -> Any | None: ...


@dataclass(frozen=True)
class ElementTransform:
    """World placement of one element. Rotation is about the vertical axis."""

    x: float
    y: float
    z: float
    rotation_degrees: float = 0.0


@dataclass(frozen=True)
class VisualSettings:
    """How road tiles and filler blocks are sized relative to a cell.

    Attributes:
        way_fill_xz: Road tile footprint as a fraction of the cell side.
        way_fill_y: Road tile thickness as a fraction of the cell side.
        block_fill_xz: Filler block footprint as a fraction of the cell side.
        block_fill_y: Filler block height as a fraction of the cell side.
        way_template: Template used for road tiles.
        block_template: Template used for filler blocks.
        instance_fillers: Whether filler cells get an element at all.
    """

    way_fill_xz: float = config.WAY_TILE_FILL_XZ
    way_fill_y: float = config.WAY_TILE_FILL_Y
    block_fill_xz: float = config.BLOCK_FILL_XZ
    block_fill_y: float = config.BLOCK_FILL_Y
    way_template: TemplateRef = config.WAY_TEMPLATE
    block_template: TemplateRef = config.BLOCK_TEMPLATE
    instance_fillers: bool = True


@dataclass
class RealizeReport:
    """Counts of what one ``realize`` call created."""

    ways: int = 0
    buildings: int = 0
    fillers: int = 0
    skipped: int = 0

    @property
    def created(self) -> int:
        return self.ways + self.buildings + self.fillers


def _flat_ground(x: WorldCoord, z: WorldCoord) -> float:
    return 0.0


class ChunkRealizer:
    """Creates scene elements for finished chunk layouts.

    Args:
        instancer: Creates elements from template references.
        footprints: The world's footprint catalog, for building heights.
        ground: Ground height sampler. None means flat ground at y=0.
        fitter: Optional size fitter. None leaves elements at native size.
        visuals: Road and filler sizing.
    """

    def __init__(
        self,
        instancer: Instancer,
        footprints: Sequence[FootprintOption],
        ground: GroundSampler | None = None,
        fitter: SizeFitter | None = None,
        visuals: VisualSettings | None = None,
    ) -> None:
        self.instancer = instancer
        self.footprints = tuple(footprints)
        self.ground = ground if ground is not None else _flat_ground
        self.fitter = fitter
        self.visuals = visuals if visuals is not None else VisualSettings()

    def realize(self, layout: ChunkLayout, parent: Any = None) -> RealizeReport:
        """Create every element of a layout under ``parent``.

        Roads come first, then buildings lot by lot, then fillers, each in
        raster order, so the same layout always produces the same calls.
        """
        report = RealizeReport()
        grid = layout.grid
        cell = grid.cell_size
        vis = self.visuals

        for x, z in _raster(layout.grid.way_mask):
            wx, wz = grid.local_to_world_center(x, z)
            y = self.ground(wx, wz) + cell * vis.way_fill_y * 0.5
            size = (
                cell * vis.way_fill_xz,
                cell * vis.way_fill_y,
                cell * vis.way_fill_xz,
            )
            transform = ElementTransform(wx, y, wz)
            if self._create(vis.way_template, transform, parent, size):
                report.ways += 1
            else:
                report.skipped += 1

        for placement in layout.all_placements():
            if self._create_building(layout, placement, parent):
                report.buildings += 1
            else:
                report.skipped += 1

        if vis.instance_fillers:
            for x, z in _raster(layout.cell_use == CellUse.FILLER):
                wx, wz = grid.local_to_world_center(x, z)
                y = self.ground(wx, wz) + cell * vis.block_fill_y * 0.5
                size = (
                    cell * vis.block_fill_xz,
                    cell * vis.block_fill_y,
                    cell * vis.block_fill_xz,
                )
                transform = ElementTransform(wx, y, wz)
                if self._create(vis.block_template, transform, parent, size):
                    report.fillers += 1
                else:
                    report.skipped += 1

        if report.skipped:
            logger.warning(
                "Chunk %s: %d elements skipped, the instancer returned None",
                layout.chunk_index,
                report.skipped,
            )
        return report

    def _create_building(
        self, layout: ChunkLayout, placement: Placement, parent: Any
    ) -> bool:
        grid = layout.grid
        cell = grid.cell_size
        ox, oz = grid.origin
        width = placement.span_x * cell
        depth = placement.span_z * cell
        cx = ox + placement.x * cell + width * 0.5
        cz = oz + placement.z * cell + depth * 0.5

        transform = ElementTransform(
            cx,
            self.ground(cx, cz),
            cz,
            rotation_degrees=90.0 if placement.rotated else 0.0,
        )
        option = self.footprints[placement.option_index]
        # The template's own axes are turned with it
        if placement.rotated:
            width, depth = depth, width
        return self._create(
            placement.template, transform, parent, (width, option.height_m, depth)
        )

    def _create(
        self,
        template: TemplateRef,
        transform: ElementTransform,
        parent: Any,
        size: tuple[float, float | None, float],
    ) -> bool:
        element = self.instancer.instantiate(template, transform, parent)
        if element is None:
            logger.debug("No element for template %r at %s", template, transform)
            return False
        if self.fitter is not None:
            self.fitter(element, *size)
        return True


def _raster(mask: np.ndarray) -> list[tuple[int, int]]:
    """True cells of an ``[x, z]`` mask in raster order (z outer, x inner)."""
    xs, zs = np.nonzero(mask.T)[::-1]
    return [(int(x), int(z)) for x, z in zip(xs, zs, strict=True)]
