"""Generation layers for the chunk pipeline.

Each layer transforms the ChunkContext in a specific way:
- Street layers: Carve arterials and a secondary road network
- Lot layers: Recover buildable lots from the remaining cells
- Connector layers: Give every lot road access and fill leftover gaps
- Packing layers: Fit building footprints into the lots
"""

from .connector import GapFillLayer, LotAccessLayer
from .links import label_components, link_road_components
from .lots import LotExtractionLayer, connected_pieces, extract_lots
from .packing import BuildingPacker, BuildingPackingLayer, PackResult, SizeCandidate
from .strategies import (
    NoSecondaryRoads,
    RandomWalkerRoads,
    RecursivePartitionRoads,
    RoadGenerator,
    RotatedLatticeRoads,
    road_generator_for,
)
from .streets import StreetNetworkLayer, is_arterial, stamp_arterials

__all__ = [
    "BuildingPacker",
    "BuildingPackingLayer",
    "GapFillLayer",
    "LotAccessLayer",
    "LotExtractionLayer",
    "NoSecondaryRoads",
    "PackResult",
    "RandomWalkerRoads",
    "RecursivePartitionRoads",
    "RoadGenerator",
    "RotatedLatticeRoads",
    "SizeCandidate",
    "StreetNetworkLayer",
    "connected_pieces",
    "extract_lots",
    "is_arterial",
    "label_components",
    "link_road_components",
    "road_generator_for",
    "stamp_arterials",
]
