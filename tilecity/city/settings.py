"""Validated configuration for city chunk generation.

Settings are grouped per concern and aggregated in ``CitySettings``. Defaults
come from ``tilecity.config``. All checks live in ``CitySettings.validate()``,
which the factory and the chunk manager call before any generation starts,
so a bad value is reported up front instead of surfacing halfway through a
chunk.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import StrEnum

from tilecity import config
from tilecity.city.buildings.footprints import FootprintOption, get_default_footprints
from tilecity.types import RandomSeed


class ConfigurationError(ValueError):
    """Raised when settings are invalid before generation starts."""


class RoadStrategy(StrEnum):
    """Secondary road network strategy, selectable per world."""

    PARTITION = "partition"
    LATTICE = "lattice"
    WALKERS = "walkers"
    NONE = "none"


@dataclass(frozen=True)
class ArterialSettings:
    """World-aligned arterial lattice shared by every chunk."""

    enabled: bool = config.ARTERIAL_ENABLED
    period: int = config.ARTERIAL_PERIOD_TILES
    width: int = config.ARTERIAL_WIDTH_TILES


@dataclass(frozen=True)
class PartitionSettings:
    """Recursive partition of the chunk into blocks."""

    min_partition_size: int = config.MIN_PARTITION_SIZE
    road_width: int = config.PARTITION_ROAD_WIDTH
    max_depth: int = config.PARTITION_MAX_DEPTH
    split_jitter: float = config.PARTITION_SPLIT_JITTER
    road_density: float = config.PARTITION_ROAD_DENSITY
    leaf_road_chance: float = config.PARTITION_LEAF_ROAD_CHANCE
    extra_cross_attempts: int = config.EXTRA_CROSS_ATTEMPTS
    extra_cross_chance: float = config.EXTRA_CROSS_CHANCE
    extra_cross_width: int = config.EXTRA_CROSS_WIDTH


@dataclass(frozen=True)
class LatticeSettings:
    """Regular lattice rotated by a fixed angle."""

    angle_degrees: float = config.LATTICE_ANGLE_DEGREES
    period: int = config.LATTICE_PERIOD_TILES
    width: int = config.LATTICE_WIDTH_TILES


@dataclass(frozen=True)
class WalkerSettings:
    """Random walker agents painting roads."""

    walker_count: int = config.WALKER_COUNT
    steps: int = config.WALKER_STEPS
    turn_chance: float = config.WALKER_TURN_CHANCE
    branch_chance: float = config.WALKER_BRANCH_CHANCE
    max_walkers: int = config.WALKER_MAX_WALKERS
    path_width: int = config.WALKER_PATH_WIDTH


@dataclass(frozen=True)
class LotSettings:
    """Lot extraction rules."""

    min_lot_cells: int = config.MIN_LOT_AREA_CELLS
    merge_diagonals: bool = config.LOT_MERGE_DIAGONALS
    cover_all: bool = config.LOT_COVER_ALL


@dataclass(frozen=True)
class PackingSettings:
    """Randomized multi-start greedy packing.

    Attributes:
        multi_start: Independent trials per lot; the best one wins.
        epsilon: Chance per origin cell of perturbing the size order.
        position_shuffle_rate: Fraction of the scan order that is shuffled.
        seed_offset: Global offset XORed into every per-lot seed.
        deterministic_per_lot: Seed each lot from its own rectangle. When off,
            lots draw seeds from the chunk's packing stream instead.
        max_cells_scanned: Safety cap on scan positions per trial.
        max_placements: Safety cap on placements per trial.
        lot_edge_margin: World units kept free along every lot side.
        building_padding: Minimum clearance in world units between two
            buildings of the same lot, rounded up to whole cells.
    """

    multi_start: int = config.PACK_MULTI_START
    epsilon: float = config.PACK_EPSILON
    position_shuffle_rate: float = config.PACK_POSITION_SHUFFLE_RATE
    seed_offset: int = config.PACK_SEED_OFFSET
    deterministic_per_lot: bool = config.PACK_DETERMINISTIC_PER_LOT
    max_cells_scanned: int = config.PACK_MAX_CELLS_SCANNED
    max_placements: int = config.PACK_MAX_PLACEMENTS
    lot_edge_margin: float = config.LOT_EDGE_MARGIN
    building_padding: float = config.BUILDING_PADDING


@dataclass(frozen=True)
class ConnectorSettings:
    """Road linking, lot access and gap filling."""

    link_road_components: bool = config.LINK_ROAD_COMPONENTS
    access_band_width: int = config.ACCESS_BAND_WIDTH
    fill_gaps: bool = config.FILL_GAPS


@dataclass(frozen=True)
class CitySettings:
    """Everything needed to generate any chunk of one world.

    Two chunks generated from equal settings and the same chunk index are
    identical, cell for cell and placement for placement.
    """

    seed: RandomSeed = config.RANDOM_SEED
    chunk_tiles: int = config.CHUNK_TILES
    cell_size: float = config.CELL_SIZE
    strategy: RoadStrategy = RoadStrategy(config.ROAD_STRATEGY)
    arterial: ArterialSettings = field(default_factory=ArterialSettings)
    partition: PartitionSettings = field(default_factory=PartitionSettings)
    lattice: LatticeSettings = field(default_factory=LatticeSettings)
    walkers: WalkerSettings = field(default_factory=WalkerSettings)
    lots: LotSettings = field(default_factory=LotSettings)
    packing: PackingSettings = field(default_factory=PackingSettings)
    connector: ConnectorSettings = field(default_factory=ConnectorSettings)
    footprints: tuple[FootprintOption, ...] = field(
        default_factory=get_default_footprints
    )
    yield_every: int = config.WORK_UNITS_PER_YIELD

    def replace(self, **changes: object) -> CitySettings:
        """Return a copy with some top-level fields replaced."""
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    def validate(self) -> None:
        """Check every value, raising ConfigurationError on the first problem."""
        _require(self.cell_size > 0, "cell_size", self.cell_size, "must be > 0")
        _require(self.chunk_tiles >= 1, "chunk_tiles", self.chunk_tiles, "must be >= 1")
        _require(self.yield_every >= 1, "yield_every", self.yield_every, "must be >= 1")
        try:
            RoadStrategy(self.strategy)
        except ValueError:
            raise ConfigurationError(
                f"strategy: unknown road strategy {self.strategy!r}"
            ) from None

        art = self.arterial
        _require(art.period >= 1, "arterial.period", art.period, "must be >= 1")
        _require(art.width >= 1, "arterial.width", art.width, "must be >= 1")
        _require(
            art.width < art.period,
            "arterial.width",
            art.width,
            f"must be smaller than arterial.period ({art.period})",
        )

        part = self.partition
        _require(
            part.min_partition_size >= 1,
            "partition.min_partition_size",
            part.min_partition_size,
            "must be >= 1",
        )
        _require(
            part.min_partition_size <= self.chunk_tiles,
            "partition.min_partition_size",
            part.min_partition_size,
            f"must not exceed chunk_tiles ({self.chunk_tiles})",
        )
        _require(
            part.road_width >= 1,
            "partition.road_width",
            part.road_width,
            "must be >= 1",
        )
        _require(
            part.max_depth >= 0, "partition.max_depth", part.max_depth, "must be >= 0"
        )
        _require(
            0.0 <= part.split_jitter <= 0.5,
            "partition.split_jitter",
            part.split_jitter,
            "must be within [0, 0.5]",
        )
        _require_probability("partition.road_density", part.road_density)
        _require_probability("partition.leaf_road_chance", part.leaf_road_chance)
        _require_probability("partition.extra_cross_chance", part.extra_cross_chance)
        _require(
            part.extra_cross_attempts >= 0,
            "partition.extra_cross_attempts",
            part.extra_cross_attempts,
            "must be >= 0",
        )
        _require(
            part.extra_cross_width >= 1,
            "partition.extra_cross_width",
            part.extra_cross_width,
            "must be >= 1",
        )

        lat = self.lattice
        _require(lat.period >= 1, "lattice.period", lat.period, "must be >= 1")
        _require(lat.width >= 1, "lattice.width", lat.width, "must be >= 1")
        _require(
            lattice_thickness(lat.width, lat.angle_degrees) < lat.period,
            "lattice.width",
            lat.width,
            f"is too thick for lattice.period ({lat.period})"
            f" at {lat.angle_degrees} degrees",
        )

        walk = self.walkers
        _require(
            walk.walker_count >= 0,
            "walkers.walker_count",
            walk.walker_count,
            "must be >= 0",
        )
        _require(walk.steps >= 0, "walkers.steps", walk.steps, "must be >= 0")
        _require_probability("walkers.turn_chance", walk.turn_chance)
        _require_probability("walkers.branch_chance", walk.branch_chance)
        _require(
            walk.max_walkers >= walk.walker_count,
            "walkers.max_walkers",
            walk.max_walkers,
            f"must be >= walkers.walker_count ({walk.walker_count})",
        )
        _require(
            walk.path_width >= 1, "walkers.path_width", walk.path_width, "must be >= 1"
        )

        lots = self.lots
        _require(
            lots.min_lot_cells >= 1,
            "lots.min_lot_cells",
            lots.min_lot_cells,
            "must be >= 1",
        )

        pack = self.packing
        _require(
            pack.multi_start >= 1,
            "packing.multi_start",
            pack.multi_start,
            "must be >= 1",
        )
        _require_probability("packing.epsilon", pack.epsilon)
        _require_probability(
            "packing.position_shuffle_rate", pack.position_shuffle_rate
        )
        _require(
            pack.max_cells_scanned >= 1,
            "packing.max_cells_scanned",
            pack.max_cells_scanned,
            "must be >= 1",
        )
        _require(
            pack.max_placements >= 1,
            "packing.max_placements",
            pack.max_placements,
            "must be >= 1",
        )
        _require(
            pack.lot_edge_margin >= 0,
            "packing.lot_edge_margin",
            pack.lot_edge_margin,
            "must be >= 0",
        )
        _require(
            pack.building_padding >= 0,
            "packing.building_padding",
            pack.building_padding,
            "must be >= 0",
        )

        _require(
            self.connector.access_band_width >= 1,
            "connector.access_band_width",
            self.connector.access_band_width,
            "must be >= 1",
        )

        for i, option in enumerate(self.footprints):
            _validate_footprint(i, option)


def lattice_thickness(width: int, angle_degrees: float) -> float:
    """Band thickness, in rotated units, that keeps a lattice line 4-connected."""
    theta = math.radians(angle_degrees)
    return width * (abs(math.cos(theta)) + abs(math.sin(theta)))


def _require(ok: bool, name: str, value: object, rule: str) -> None:
    if not ok:
        raise ConfigurationError(f"{name}={value!r} {rule}")


def _require_probability(name: str, value: float) -> None:
    _require(0.0 <= value <= 1.0, name, value, "must be within [0, 1]")


def _validate_footprint(index: int, option: FootprintOption) -> None:
    prefix = f"footprints[{index}] ({option.name})"
    _require(option.width_m > 0, f"{prefix}.width_m", option.width_m, "must be > 0")
    _require(option.depth_m > 0, f"{prefix}.depth_m", option.depth_m, "must be > 0")
    if option.weights is not None:
        _require(
            len(option.weights) == len(option.templates),
            f"{prefix}.weights",
            option.weights,
            f"needs one weight per template ({len(option.templates)})",
        )
        _require(
            all(w >= 0 for w in option.weights),
            f"{prefix}.weights",
            option.weights,
            "must be non-negative",
        )
    if option.height_m is not None:
        _require(
            option.height_m > 0, f"{prefix}.height_m", option.height_m, "must be > 0"
        )
