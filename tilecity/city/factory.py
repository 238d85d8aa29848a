"""Factory functions for creating pre-configured chunk generators.

These functions provide convenient ways to create common pipeline
configurations without needing to manually assemble layers.

Currently implemented:
- "city": Streets, lots, road access, building packing and gap fill
- "streets": Street network only, for previews and navigation tests
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .layers import (
    BuildingPackingLayer,
    GapFillLayer,
    LotAccessLayer,
    LotExtractionLayer,
    StreetNetworkLayer,
)
from .pipeline import ChunkGenerator
from .settings import CitySettings

if TYPE_CHECKING:
    from tilecity.types import ChunkIndex

    from .layer import GenerationLayer

PIPELINE_NAMES = ("city", "streets")


def city_layers() -> list[GenerationLayer]:
    """The full layer sequence of a city chunk."""
    return [
        # 1. Arterials, secondary roads and component linking
        StreetNetworkLayer(),
        # 2. Flood fill the remaining cells into lots
        LotExtractionLayer(),
        # 3. Road strips for lots without access (before anything is built)
        LotAccessLayer(),
        # 4. Fit buildings into every lot
        BuildingPackingLayer(),
        # 5. Classify every leftover cell
        GapFillLayer(),
    ]


def create_chunk_generator(
    settings: CitySettings | None = None,
    chunk_index: ChunkIndex = (0, 0),
) -> ChunkGenerator:
    """Create the standard city generator for one chunk.

    Args:
        settings: World settings. None uses the defaults.
        chunk_index: The chunk to generate.

    Returns:
        A configured ChunkGenerator.

    Raises:
        ConfigurationError: If the settings are invalid.
    """
    return create_pipeline("city", settings, chunk_index)


def create_pipeline(
    name: str,
    settings: CitySettings | None = None,
    chunk_index: ChunkIndex = (0, 0),
) -> ChunkGenerator:
    """Create a pre-configured pipeline by name.

    Available pipelines:
    - "city": The full city layout
    - "streets": Only the street network

    Args:
        name: Name of the pipeline configuration to use.
        settings: World settings. None uses the defaults.
        chunk_index: The chunk to generate.

    Returns:
        A configured ChunkGenerator ready to generate the chunk.

    Raises:
        ValueError: If the pipeline name is not recognized.
        ConfigurationError: If the settings are invalid.
    """
    if settings is None:
        settings = CitySettings()

    if name == "city":
        layers = city_layers()
    elif name == "streets":
        layers = [StreetNetworkLayer()]
    else:
        raise ValueError(f"Unknown pipeline name: {name!r}")

    settings.validate()
    return ChunkGenerator(layers=layers, settings=settings, chunk_index=chunk_index)
