"""Layered, chunk-based city layout generation.

This package provides a layered architecture for generating one chunk of an
endless city at a time. Each layer transforms a shared ChunkContext, and the
generator outputs a ChunkLayout for rendering and navigation.

Example usage:
    from tilecity.city import CitySettings, create_pipeline

    generator = create_pipeline("city", CitySettings(seed=42), chunk_index=(0, 0))
    layout = generator.generate()

The pipeline can also be assembled manually for custom configurations:
    from tilecity.city import (
        ChunkGenerator,
        LotExtractionLayer,
        StreetNetworkLayer,
    )

    generator = ChunkGenerator(
        layers=[StreetNetworkLayer(strategy="walkers"), LotExtractionLayer()],
        settings=CitySettings(),
        chunk_index=(3, -1),
    )

For an open world, ChunkManager keeps the chunks around a moving focus
generated and forgets the rest.
"""

from .buildings import FootprintOption, Lot, Placement, get_default_footprints
from .context import CellUse, ChunkContext, ChunkLayout, StreetData
from .factory import create_chunk_generator, create_pipeline
from .grid import CellType, ChunkGrid, global_to_chunk, world_to_chunk
from .instancing import (
    ChunkRealizer,
    ElementTransform,
    GroundSampler,
    Instancer,
    RealizeReport,
    SizeFitter,
    VisualSettings,
)
from .layer import GenerationLayer
from .layers import (
    BuildingPacker,
    BuildingPackingLayer,
    GapFillLayer,
    LotAccessLayer,
    LotExtractionLayer,
    StreetNetworkLayer,
)
from .pipeline import ChunkGenerator
from .settings import CitySettings, ConfigurationError, RoadStrategy
from .world import ChunkJob, ChunkManager

__all__ = [
    "BuildingPacker",
    "BuildingPackingLayer",
    "CellType",
    "CellUse",
    "ChunkContext",
    "ChunkGenerator",
    "ChunkGrid",
    "ChunkJob",
    "ChunkLayout",
    "ChunkManager",
    "ChunkRealizer",
    "CitySettings",
    "ConfigurationError",
    "ElementTransform",
    "FootprintOption",
    "GapFillLayer",
    "GenerationLayer",
    "GroundSampler",
    "Instancer",
    "Lot",
    "LotAccessLayer",
    "LotExtractionLayer",
    "Placement",
    "RealizeReport",
    "RoadStrategy",
    "SizeFitter",
    "StreetData",
    "StreetNetworkLayer",
    "VisualSettings",
    "create_chunk_generator",
    "create_pipeline",
    "get_default_footprints",
    "global_to_chunk",
    "world_to_chunk",
]
