"""
Configuration constants.

Centralizes the default values used by the layout engine. The settings
dataclasses in ``tilecity.city.settings`` read their defaults from here, so
tweaking a number in this module changes every freshly built CitySettings.
Organized by functional area for easy maintenance.
"""

from typing import Literal

# =============================================================================
# GENERAL
# =============================================================================

RANDOM_SEED = 12345

# =============================================================================
# WORLD / CHUNK
# =============================================================================

CHUNK_TILES = 64  # Cells per chunk side
CELL_SIZE = 10.0  # World units (meters) per cell side, also the minimum road width

# =============================================================================
# ROADS
# =============================================================================

ROAD_STRATEGY: Literal["partition", "lattice", "walkers", "none"] = "partition"

# Global arterial grid. Depends only on global cell coordinates, which is what
# keeps neighbouring chunks seamless.
ARTERIAL_ENABLED = True
ARTERIAL_PERIOD_TILES = 20
ARTERIAL_WIDTH_TILES = 1

# Recursive partition
MIN_PARTITION_SIZE = 6
PARTITION_ROAD_WIDTH = 1
PARTITION_MAX_DEPTH = 7
PARTITION_SPLIT_JITTER = 0.10  # Fraction of the rect extent, 0..0.5
PARTITION_ROAD_DENSITY = 0.85  # Probability that a splittable rect is split
PARTITION_LEAF_ROAD_CHANCE = 0.25
EXTRA_CROSS_ATTEMPTS = 4
EXTRA_CROSS_CHANCE = 0.10
EXTRA_CROSS_WIDTH = 1

# Rotated lattice
LATTICE_ANGLE_DEGREES = 30.0
LATTICE_PERIOD_TILES = 12
LATTICE_WIDTH_TILES = 1

# Random walkers
WALKER_COUNT = 4
WALKER_STEPS = 120
WALKER_TURN_CHANCE = 0.2
WALKER_BRANCH_CHANCE = 0.05
WALKER_MAX_WALKERS = 16
WALKER_PATH_WIDTH = 1

# Join every road component to the largest one after carving
LINK_ROAD_COMPONENTS = True

# =============================================================================
# LOTS
# =============================================================================

MIN_LOT_AREA_CELLS = 25
LOT_MERGE_DIAGONALS = False
# Keep lots that never touch a road (they get an access band later)
LOT_COVER_ALL = False

# =============================================================================
# BUILDING PACKING
# =============================================================================

PACK_MULTI_START = 2
PACK_EPSILON = 0.05
PACK_POSITION_SHUFFLE_RATE = 1.0
PACK_SEED_OFFSET = 12345
PACK_DETERMINISTIC_PER_LOT = True
PACK_MAX_CELLS_SCANNED = 200_000
PACK_MAX_PLACEMENTS = 1000
LOT_EDGE_MARGIN = 0.0  # World units trimmed off each lot side before packing
BUILDING_PADDING = 0.0  # Minimum clearance between buildings of a lot, world units

# =============================================================================
# CONNECTOR / GAP FILL
# =============================================================================

ACCESS_BAND_WIDTH = 1
FILL_GAPS = True

# =============================================================================
# SCHEDULING
# =============================================================================

# Work units (roughly: cells touched) between cooperative yields
WORK_UNITS_PER_YIELD = 2000

# Chunks kept alive around the viewer: +-range in both axes (3 -> 7x7 = 49)
ACTIVE_RANGE = 3

# =============================================================================
# VISUALS (host-side realization only)
# =============================================================================

WAY_TILE_FILL_XZ = 1.0
WAY_TILE_FILL_Y = 0.10
BLOCK_FILL_XZ = 1.0
BLOCK_FILL_Y = 0.05
WAY_TEMPLATE = "way"
BLOCK_TEMPLATE = "block"
