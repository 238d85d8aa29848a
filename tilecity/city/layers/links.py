"""Road component labelling and linking.

Strategies such as random walkers or a coarse partition can leave road
fragments that do not touch the rest of the network. ``link_road_components``
joins every fragment to the largest component with an A* path that prefers
running along existing roads, so the finished chunk always has one connected
street network.
"""

from __future__ import annotations

import logging
from collections import deque

import numpy as np
import tcod.path

from tilecity.city.grid import CellType, ChunkGrid
from tilecity.types import LocalCellPos

logger = logging.getLogger(__name__)

WAY_STEP_COST = 1
EMPTY_STEP_COST = 3

_NEIGHBORS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def label_components(mask: np.ndarray) -> tuple[np.ndarray, list[list[LocalCellPos]]]:
    """Label the 4-connected components of a boolean mask.

    Components are discovered in raster order (z outer, x inner), so labels
    are stable for a given mask.

    Args:
        mask: Boolean array indexed ``[x, z]``.

    Returns:
        A tuple of (labels, components). ``labels`` has the mask's shape and
        holds the component index per cell, -1 outside the mask.
        ``components[i]`` lists the cells of component ``i`` in BFS order.
    """
    width, height = mask.shape
    labels = np.full(mask.shape, -1, dtype=np.int32)
    components: list[list[LocalCellPos]] = []

    for z in range(height):
        for x in range(width):
            if not mask[x, z] or labels[x, z] != -1:
                continue
            label = len(components)
            labels[x, z] = label
            queue = deque([(x, z)])
            cells: list[LocalCellPos] = []
            while queue:
                cx, cz = queue.popleft()
                cells.append((cx, cz))
                for dx, dz in _NEIGHBORS:
                    nx, nz = cx + dx, cz + dz
                    if (
                        0 <= nx < width
                        and 0 <= nz < height
                        and mask[nx, nz]
                        and labels[nx, nz] == -1
                    ):
                        labels[nx, nz] = label
                        queue.append((nx, nz))
            components.append(cells)

    return labels, components


def _nearest(cells: np.ndarray, x: int, z: int) -> tuple[int, int]:
    """Cell of an (n, 2) array closest to (x, z); first one wins ties."""
    d2 = (cells[:, 0] - x) ** 2 + (cells[:, 1] - z) ** 2
    i = int(np.argmin(d2))
    return int(cells[i, 0]), int(cells[i, 1])


def link_road_components(grid: ChunkGrid) -> tuple[int, int]:
    """Join every road component to the largest one.

    For each smaller component a pair of nearby cells is chosen: the main
    component cell nearest to the component's first cell, then the component
    cell nearest to that. An A* path between them (no diagonals, road cells
    cheaper than empty ones) is carved as Way. Components that an earlier
    path already ran through are skipped.

    Args:
        grid: The chunk grid, modified in place.

    Returns:
        A tuple of (components before linking, paths carved).
    """
    labels, components = label_components(grid.way_mask)
    if len(components) <= 1:
        return len(components), 0

    # First largest wins, keeps the choice stable
    main = max(range(len(components)), key=lambda i: len(components[i]))
    merged = {main}

    cost = np.where(grid.way_mask, WAY_STEP_COST, EMPTY_STEP_COST).astype(np.int8)
    links = 0

    for index, component in enumerate(components):
        if index in merged:
            continue

        main_cells = np.argwhere(labels == main)
        own_cells = np.array(component, dtype=np.int64)
        sx, sz = component[0]
        gx, gz = _nearest(main_cells, sx, sz)
        sx, sz = _nearest(own_cells, gx, gz)

        astar = tcod.path.AStar(cost=np.ascontiguousarray(cost), diagonal=0)
        path: list[LocalCellPos] = astar.get_path(sx, sz, gx, gz)

        for cx, cz in [(sx, sz), *path]:
            other = int(labels[cx, cz])
            if other != -1 and other != main and other not in merged:
                merged.add(other)
                for ox, oz in components[other]:
                    labels[ox, oz] = main
            grid.cells[cx, cz] = CellType.WAY
            cost[cx, cz] = WAY_STEP_COST
            labels[cx, cz] = main

        merged.add(index)
        links += 1

    logger.debug(
        "Chunk %s: linked %d road components with %d paths",
        grid.chunk_index,
        len(components),
        links,
    )
    return len(components), links
