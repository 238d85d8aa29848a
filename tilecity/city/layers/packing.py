"""Building packing layer.

Fits rectangular building footprints into every lot with a randomized
multi-start greedy search:

1. Candidate sizes are sorted largest first.
2. Each trial scans the lot interior in a partly shuffled raster order and,
   at every free origin cell, places the first candidate (or its 90 degree
   rotation) whose whole span is free and, with ``building_padding`` set,
   has no other building of the trial within the padding ring.
3. An epsilon-greedy swap occasionally perturbs the size order at an origin,
   so different trials explore different packings.
4. The trial covering the most cells wins.

All trials of a lot draw from one Random seeded by the lot itself, so a lot
packs the same way no matter when or where it is visited.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from tilecity.city.buildings import FootprintOption, Lot, Placement
from tilecity.city.context import CellUse
from tilecity.city.layer import GenerationLayer
from tilecity.util.coordinates import Rect
from tilecity.util.rng import lot_seed, seed_to_int

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from tilecity.city.context import ChunkContext
    from tilecity.city.settings import PackingSettings
    from tilecity.types import GlobalCellPos

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SizeCandidate:
    """One footprint option converted to cells.

    Attributes:
        option_index: Index of the option in the world's catalog.
        option: The footprint option itself.
        span_x: Cells along X when not rotated.
        span_z: Cells along Z when not rotated.
    """

    option_index: int
    option: FootprintOption
    span_x: int
    span_z: int

    def orientations(self) -> list[tuple[int, int, bool]]:
        """(span_x, span_z, rotated) to try, rotation only when not square."""
        if self.span_x == self.span_z:
            return [(self.span_x, self.span_z, False)]
        return [(self.span_x, self.span_z, False), (self.span_z, self.span_x, True)]


@dataclass
class PackResult:
    """Outcome of packing one region.

    Attributes:
        placements: Placements of the best trial, in placement order.
        occupied_cells: Cells covered by those placements.
        trials: Number of trials that were run.
        cells_scanned: Origin cells visited over all trials.
        truncated: True if a safety cap cut the best trial short.
    """

    placements: list[Placement] = field(default_factory=list)
    occupied_cells: int = 0
    trials: int = 0
    cells_scanned: int = 0
    truncated: bool = False


class BuildingPacker:
    """Packs footprints into lots.

    Args:
        footprints: The world's footprint catalog.
        settings: Packing parameters.
        cell_size: World units per cell, used to convert footprint sizes.
        seed_offset: Offset XORed into every per-lot seed. None uses
            ``settings.seed_offset``.
    """

    def __init__(
        self,
        footprints: Sequence[FootprintOption],
        settings: PackingSettings,
        cell_size: float,
        seed_offset: int | None = None,
    ) -> None:
        self.footprints = tuple(footprints)
        self.settings = settings
        self.cell_size = cell_size
        self.seed_offset = settings.seed_offset if seed_offset is None else seed_offset
        self.padding = math.ceil(settings.building_padding / cell_size)
        self._candidates = self._build_candidates()

    def _build_candidates(self) -> list[SizeCandidate]:
        candidates = []
        for i, option in enumerate(self.footprints):
            if not option.templates:
                continue
            span_x, span_z = option.cell_span(self.cell_size)
            candidates.append(SizeCandidate(i, option, span_x, span_z))
        # sort() is stable, equal areas keep catalog order
        candidates.sort(key=lambda c: c.option.area_m2, reverse=True)
        return candidates

    def candidates(self) -> list[SizeCandidate]:
        """Usable sizes, largest world area first."""
        return list(self._candidates)

    def interior(self, lot: Lot) -> Rect | None:
        """The lot's bounding box minus the edge margin, or None if nothing is left."""
        margin = math.ceil(self.settings.lot_edge_margin / self.cell_size)
        rect = lot.bounds.shrink(margin) if margin > 0 else lot.bounds
        if rect.is_empty():
            return None
        return rect

    def lot_seed(self, interior: Rect, global_offset: GlobalCellPos) -> int:
        """Seed derived from the interior's global origin and size."""
        gx, gz = global_offset
        return lot_seed(
            interior.x1 + gx,
            interior.z1 + gz,
            interior.width,
            interior.height,
            self.seed_offset,
        )

    def pack_lot(
        self,
        lot: Lot,
        global_offset: GlobalCellPos,
        rng: random.Random | None = None,
    ) -> PackResult:
        """Pack one lot.

        Interior cells that are not members of the lot are blocked, so
        placements never leave the lot even when it is not rectangular.

        Args:
            lot: The lot to pack.
            global_offset: Global cell of the chunk's local (0, 0).
            rng: The chunk's packing stream. Only used to draw the lot seed
                when ``deterministic_per_lot`` is off.

        Returns:
            The best trial with chunk-local placements.
        """
        interior = self.interior(lot)
        if interior is None or not self._candidates:
            return PackResult()

        blocked = np.ones((interior.width, interior.height), dtype=np.bool_, order="F")
        for x, z in lot.cells:
            if interior.contains_point(x, z):
                blocked[x - interior.x1, z - interior.z1] = False

        if self.settings.deterministic_per_lot or rng is None:
            seed = self.lot_seed(interior, global_offset)
        else:
            seed = rng.getrandbits(32)

        return self.pack_region(interior, seed, blocked=blocked, lot_id=lot.id)

    def pack_region(
        self,
        interior: Rect,
        seed: int,
        blocked: np.ndarray | None = None,
        lot_id: int = 0,
    ) -> PackResult:
        """Run every trial over a rectangle and keep the best one.

        Trials run one after another on a single Random, so the first ``k``
        trials are the same whatever ``multi_start`` is. A later trial only
        wins with strictly more occupied cells, which is why raising
        ``multi_start`` can never make the result worse.

        Args:
            interior: Rectangle to pack, in chunk-local cells.
            seed: Seed for this region's Random.
            blocked: Optional boolean mask over ``interior`` (``[x, z]``);
                True cells are unavailable.
            lot_id: Lot id written into the placements.

        Returns:
            The best PackResult.
        """
        if interior.is_empty() or not self._candidates:
            return PackResult()

        rng = random.Random(seed)
        best = PackResult()
        scanned_total = 0
        for trial in range(self.settings.multi_start):
            placements, occupied, scanned, truncated = self._try_pack_once(
                interior, rng, blocked, lot_id
            )
            scanned_total += scanned
            if trial == 0 or occupied > best.occupied_cells:
                best = PackResult(placements, occupied, 0, 0, truncated)

        best.trials = self.settings.multi_start
        best.cells_scanned = scanned_total
        return best

    def _try_pack_once(
        self,
        interior: Rect,
        rng: random.Random,
        blocked: np.ndarray | None,
        lot_id: int,
    ) -> tuple[list[Placement], int, int, bool]:
        """One greedy trial.

        Returns:
            A tuple of (placements, occupied cells, cells scanned, truncated).
        """
        settings = self.settings
        width, height = interior.width, interior.height
        if blocked is not None:
            occupied = blocked.copy(order="F")
        else:
            occupied = np.zeros((width, height), dtype=np.bool_, order="F")
        # Cells covered by this trial's buildings, for the clearance check
        built = (
            np.zeros((width, height), dtype=np.bool_, order="F")
            if self.padding > 0
            else None
        )

        coords = [(x, z) for z in range(height) for x in range(width)]
        n = len(coords)

        # Partial Fisher-Yates: only the first part of the order is random
        for i in range(min(int(n * settings.position_shuffle_rate), n)):
            j = rng.randrange(i, n)
            coords[i], coords[j] = coords[j], coords[i]

        placements: list[Placement] = []
        occupied_cells = 0
        scanned = 0
        truncated = False

        for x, z in coords:
            if scanned >= settings.max_cells_scanned:
                truncated = True
                break
            scanned += 1
            if occupied[x, z]:
                continue

            order = self._candidates
            if (
                settings.epsilon > 0
                and len(order) > 1
                and rng.random() < settings.epsilon
            ):
                order = list(order)
                a = rng.randrange(len(order))
                b = rng.randrange(len(order))
                order[a], order[b] = order[b], order[a]

            placement = self._place_first_fit(
                interior, occupied, built, rng, order, x, z, lot_id
            )
            if placement is None:
                continue

            placements.append(placement)
            occupied_cells += placement.area
            if len(placements) >= settings.max_placements:
                truncated = True
                break

        return placements, occupied_cells, scanned, truncated

    def _place_first_fit(
        self,
        interior: Rect,
        occupied: np.ndarray,
        built: np.ndarray | None,
        rng: random.Random,
        order: Sequence[SizeCandidate],
        x: int,
        z: int,
        lot_id: int,
    ) -> Placement | None:
        width, height = occupied.shape
        for candidate in order:
            for span_x, span_z, rotated in candidate.orientations():
                if x + span_x > width or z + span_z > height:
                    continue
                if occupied[x : x + span_x, z : z + span_z].any():
                    continue
                if built is not None and self._crowded(built, x, z, span_x, span_z):
                    continue

                occupied[x : x + span_x, z : z + span_z] = True
                if built is not None:
                    built[x : x + span_x, z : z + span_z] = True
                option = candidate.option
                template_index = option.pick_template(rng)
                return Placement(
                    lot_id=lot_id,
                    x=interior.x1 + x,
                    z=interior.z1 + z,
                    span_x=span_x,
                    span_z=span_z,
                    rotated=rotated,
                    option_index=candidate.option_index,
                    template_index=template_index,
                    template=option.templates[template_index],
                )
        return None

    def _crowded(
        self, built: np.ndarray, x: int, z: int, span_x: int, span_z: int
    ) -> bool:
        """True if another building lies within ``padding`` cells of the span."""
        p = self.padding
        return bool(
            built[max(0, x - p) : x + span_x + p, max(0, z - p) : z + span_z + p].any()
        )


class BuildingPackingLayer(GenerationLayer):
    """Packs buildings into every lot and claims their cells.

    Args:
        footprints: Catalog override. None uses ``settings.footprints``.
    """

    def __init__(self, footprints: Sequence[FootprintOption] | None = None) -> None:
        self.footprints = tuple(footprints) if footprints is not None else None

    def iter_apply(self, ctx: ChunkContext) -> Iterator[int]:
        settings = ctx.settings
        footprints = (
            self.footprints if self.footprints is not None else settings.footprints
        )
        packer = BuildingPacker(
            footprints,
            settings.packing,
            settings.cell_size,
            seed_offset=settings.packing.seed_offset ^ seed_to_int(settings.seed),
        )
        rng = ctx.rng("packing")
        offset = ctx.grid.global_offset

        placed = 0
        for lot in ctx.lots:
            result = packer.pack_lot(lot, offset, rng=rng)
            ctx.placements[lot.id] = result.placements
            for p in result.placements:
                ctx.cell_use[p.x : p.x + p.span_x, p.z : p.z + p.span_z] = (
                    CellUse.BUILDING
                )
            placed += len(result.placements)

            if result.truncated:
                logger.debug(
                    "Chunk %s lot %d: packing stopped at a safety cap "
                    "(%d placements, %d cells scanned)",
                    ctx.chunk_index,
                    lot.id,
                    len(result.placements),
                    result.cells_scanned,
                )
            yield max(1, result.cells_scanned)

        logger.debug(
            "Chunk %s: packed %d placements into %d lots",
            ctx.chunk_index,
            placed,
            len(ctx.lots),
        )
