"""Secondary road strategies.

Every strategy carves Way cells into a chunk grid behind the same
``generate(grid, rng, settings)`` call, so the street layer can swap them per
world without knowing how they work:

- RecursivePartitionRoads: splits the chunk into blocks with a work stack
- RotatedLatticeRoads: a regular lattice turned by a fixed angle
- RandomWalkerRoads: turning, branching agents that leave roads behind
- NoSecondaryRoads: arterials only

None of them can fail. A configuration that leaves no room to work simply
produces fewer roads.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from tilecity.city.grid import CellType, ChunkGrid
from tilecity.city.settings import (
    PartitionSettings,
    RoadStrategy,
    lattice_thickness,
)
from tilecity.util.coordinates import Rect

if TYPE_CHECKING:
    from tilecity.city.settings import CitySettings
    from tilecity.types import Direction
    from tilecity.util.rng import RNG

DIRECTIONS: tuple[Direction, ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))


def carve_rect(grid: ChunkGrid, rect: Rect) -> None:
    """Mark every cell of ``rect`` that lies inside the grid as Way."""
    x1, z1 = max(0, rect.x1), max(0, rect.z1)
    x2, z2 = min(grid.width, rect.x2), min(grid.height, rect.z2)
    if x1 < x2 and z1 < z2:
        grid.cells[x1:x2, z1:z2] = CellType.WAY


class RoadGenerator(ABC):
    """Carves a secondary road network into a chunk grid."""

    @abstractmethod
    def generate(self, grid: ChunkGrid, rng: RNG, settings: CitySettings) -> None:
        """Mark Way cells in ``grid`` in place.

        Args:
            grid: The chunk grid, possibly already holding arterials.
            rng: The chunk's road stream.
            settings: World settings.
        """
        raise NotImplementedError


class NoSecondaryRoads(RoadGenerator):
    """Leaves the grid as it is (arterials only)."""

    def generate(self, grid: ChunkGrid, rng: RNG, settings: CitySettings) -> None:
        return None


# =============================================================================
# Recursive partition
# =============================================================================


class RecursivePartitionRoads(RoadGenerator):
    """Binary space partition of the chunk into city blocks.

    Rectangles are processed from an explicit stack rather than by recursion.
    A rectangle can be cut along an axis when that extent leaves at least
    ``min_partition_size`` cells on both sides of a ``road_width`` band.
    Rectangles that cannot be cut get at most one randomized leaf road.
    """

    def generate(self, grid: ChunkGrid, rng: RNG, settings: CitySettings) -> None:
        part = settings.partition
        min_size = part.min_partition_size
        road_w = part.road_width

        stack: list[tuple[Rect, int]] = [(Rect(0, 0, grid.width, grid.height), 0)]
        while stack:
            rect, depth = stack.pop()

            can_split_x = rect.width >= 2 * min_size + road_w
            can_split_z = rect.height >= 2 * min_size + road_w

            if depth >= part.max_depth or not (can_split_x or can_split_z):
                self._carve_leaf_road(grid, rng, rect, part)
                continue

            if rng.random() > part.road_density:
                continue

            # Cut across the longer extent, coin flip on squares
            if can_split_x and can_split_z:
                split_x = rect.width > rect.height or (
                    rect.width == rect.height and rng.random() < 0.5
                )
            else:
                split_x = can_split_x

            if split_x:
                pos = self._split_position(
                    rng,
                    rect.x1 + min_size,
                    rect.x2 - min_size - road_w,
                    rect.width,
                    part.split_jitter,
                )
                carve_rect(grid, Rect(pos, rect.z1, road_w, rect.height))
                first = Rect.from_bounds(rect.x1, rect.z1, pos, rect.z2)
                second = Rect.from_bounds(pos + road_w, rect.z1, rect.x2, rect.z2)
            else:
                pos = self._split_position(
                    rng,
                    rect.z1 + min_size,
                    rect.z2 - min_size - road_w,
                    rect.height,
                    part.split_jitter,
                )
                carve_rect(grid, Rect(rect.x1, pos, rect.width, road_w))
                first = Rect.from_bounds(rect.x1, rect.z1, rect.x2, pos)
                second = Rect.from_bounds(rect.x1, pos + road_w, rect.x2, rect.z2)

            stack.append((second, depth + 1))
            stack.append((first, depth + 1))

        self._carve_extra_crossings(grid, rng, part)

    @staticmethod
    def _split_position(
        rng: RNG, low: int, high: int, extent: int, jitter: float
    ) -> int:
        """Midpoint of [low, high] nudged by up to ``extent * jitter`` cells."""
        base = (low + high) // 2
        spread = round(extent * jitter)
        if spread > 0:
            base += rng.randint(-spread, spread)
        return max(low, min(high, base))

    @staticmethod
    def _carve_leaf_road(
        grid: ChunkGrid, rng: RNG, rect: Rect, part: PartitionSettings
    ) -> None:
        road_w = part.road_width
        if max(rect.width, rect.height) < part.min_partition_size:
            return
        if rng.random() >= part.leaf_road_chance:
            return

        if rect.width >= rect.height:
            if rect.width < road_w + 2:
                return
            pos = rng.randint(rect.x1 + 1, rect.x2 - 1 - road_w)
            carve_rect(grid, Rect(pos, rect.z1, road_w, rect.height))
        else:
            if rect.height < road_w + 2:
                return
            pos = rng.randint(rect.z1 + 1, rect.z2 - 1 - road_w)
            carve_rect(grid, Rect(rect.x1, pos, rect.width, road_w))

    @staticmethod
    def _carve_extra_crossings(
        grid: ChunkGrid, rng: RNG, part: PartitionSettings
    ) -> None:
        """Break up regular blocks with a few short orthogonal streets.

        Each attempt picks a random cell. If the roll succeeds and the cell is
        not a road yet, a street runs through it in both directions until it
        meets an existing road or the chunk edge.
        """
        for _ in range(part.extra_cross_attempts):
            x = rng.randrange(grid.width)
            z = rng.randrange(grid.height)
            if rng.random() >= part.extra_cross_chance:
                continue
            if grid.cells[x, z] == CellType.WAY:
                continue

            if rng.random() < 0.5:
                row = grid.cells[:, z]
                lo, hi = _open_run(row, x)
                carve_rect(
                    grid, Rect.from_bounds(lo, z, hi + 1, z + part.extra_cross_width)
                )
            else:
                col = grid.cells[x, :]
                lo, hi = _open_run(col, z)
                carve_rect(
                    grid, Rect.from_bounds(x, lo, x + part.extra_cross_width, hi + 1)
                )


def _open_run(line: np.ndarray, start: int) -> tuple[int, int]:
    """Inclusive extent of non-Way cells around ``start`` along a 1D line."""
    lo = start
    while lo > 0 and line[lo - 1] != CellType.WAY:
        lo -= 1
    hi = start
    while hi < len(line) - 1 and line[hi + 1] != CellType.WAY:
        hi += 1
    return lo, hi


# =============================================================================
# Rotated lattice
# =============================================================================


class RotatedLatticeRoads(RoadGenerator):
    """Regular road lattice rotated by ``lattice.angle_degrees``.

    Cell centers are rotated in global coordinates, so the result depends
    only on the global cell, the angle and the period. Chunks sharing those
    values join seamlessly; a neighbour with a different angle will not.
    """

    def generate(self, grid: ChunkGrid, rng: RNG, settings: CitySettings) -> None:
        lat = settings.lattice
        gx0, gz0 = grid.global_offset
        xs = np.arange(grid.width, dtype=np.float64) + gx0 + 0.5
        zs = np.arange(grid.height, dtype=np.float64) + gz0 + 0.5
        gx, gz = np.meshgrid(xs, zs, indexing="ij")

        theta = math.radians(lat.angle_degrees)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        u = gx * cos_t + gz * sin_t
        v = -gx * sin_t + gz * cos_t

        thickness = lattice_thickness(lat.width, lat.angle_degrees)
        mask = (np.mod(u, lat.period) < thickness) | (np.mod(v, lat.period) < thickness)
        grid.cells[mask] = CellType.WAY


# =============================================================================
# Random walkers
# =============================================================================


@dataclass
class _Walker:
    x: int
    z: int
    direction: Direction
    steps: int


class RandomWalkerRoads(RoadGenerator):
    """Independent agents wandering the chunk and paving their trail.

    Walkers start on existing roads when there are any, so their trails hang
    off the network. Each step may turn left or right, walkers bounce off
    chunk edges, and stepping onto a road that was already there may spawn a
    perpendicular branch walker.
    """

    def generate(self, grid: ChunkGrid, rng: RNG, settings: CitySettings) -> None:
        walk = settings.walkers
        if grid.width == 0 or grid.height == 0:
            return

        roads = np.argwhere(grid.way_mask)
        queue: deque[_Walker] = deque()
        for _ in range(walk.walker_count):
            if len(roads):
                x, z = roads[rng.randrange(len(roads))]
            else:
                x, z = rng.randrange(grid.width), rng.randrange(grid.height)
            queue.append(_Walker(int(x), int(z), rng.choice(DIRECTIONS), walk.steps))
        spawned = len(queue)

        while queue:
            walker = queue.popleft()
            x, z = walker.x, walker.z
            dx, dz = walker.direction
            self._paint(grid, x, z, walk.path_width)

            for _ in range(walker.steps):
                if rng.random() < walk.turn_chance:
                    dx, dz = (-dz, dx) if rng.random() < 0.5 else (dz, -dx)

                # Reflect off chunk edges
                if not 0 <= x + dx < grid.width:
                    dx = -dx
                if not 0 <= z + dz < grid.height:
                    dz = -dz
                x = max(0, min(grid.width - 1, x + dx))
                z = max(0, min(grid.height - 1, z + dz))

                junction = grid.cells[x, z] == CellType.WAY
                self._paint(grid, x, z, walk.path_width)

                if (
                    junction
                    and spawned < walk.max_walkers
                    and rng.random() < walk.branch_chance
                ):
                    branch = (dz, -dx) if rng.random() < 0.5 else (-dz, dx)
                    queue.append(_Walker(x, z, branch, walker.steps // 2))
                    spawned += 1

    @staticmethod
    def _paint(grid: ChunkGrid, x: int, z: int, width: int) -> None:
        grid.cells[x : x + width, z : z + width] = CellType.WAY


_GENERATORS: dict[RoadStrategy, type[RoadGenerator]] = {
    RoadStrategy.PARTITION: RecursivePartitionRoads,
    RoadStrategy.LATTICE: RotatedLatticeRoads,
    RoadStrategy.WALKERS: RandomWalkerRoads,
    RoadStrategy.NONE: NoSecondaryRoads,
}


def road_generator_for(strategy: RoadStrategy) -> RoadGenerator:
    """Create the road generator implementing a strategy."""
    return _GENERATORS[RoadStrategy(strategy)]()
