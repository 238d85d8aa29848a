"""Command line preview of generated city chunks.

Prints a block of chunks as ASCII, or renders it to a PNG:

    python -m tilecity --seed 7 --radius 1
    python -m tilecity --strategy walkers --png city.png --scale 4
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np
from PIL import Image, ImageDraw

from tilecity import config
from tilecity.city import (
    CellUse,
    ChunkLayout,
    CitySettings,
    ConfigurationError,
    RoadStrategy,
    create_pipeline,
)
from tilecity.types import ChunkIndex

logger = logging.getLogger("tilecity")

ASCII_GLYPHS = {
    CellUse.UNCLAIMED: " ",
    CellUse.ROAD: "#",
    CellUse.BUILDING: "B",
    CellUse.FILLER: ".",
}

COLORS = {
    CellUse.UNCLAIMED: (0, 0, 0),
    CellUse.ROAD: (70, 70, 78),
    CellUse.BUILDING: (196, 164, 120),
    CellUse.FILLER: (92, 132, 72),
}
OUTLINE_COLOR = (120, 92, 60)


def generate_block(
    settings: CitySettings, center: ChunkIndex, radius: int
) -> dict[ChunkIndex, ChunkLayout]:
    """Generate every chunk within ``radius`` of ``center``."""
    cx, cz = center
    layouts = {}
    for dz in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            index = (cx + dx, cz + dz)
            layouts[index] = create_pipeline("city", settings, index).generate()
    return layouts


def stitch(
    layouts: dict[ChunkIndex, ChunkLayout], center: ChunkIndex, radius: int
) -> np.ndarray:
    """Combine the cell use of a square block of chunks, indexed ``[x, z]``."""
    tiles = next(iter(layouts.values())).grid.width
    side = (2 * radius + 1) * tiles
    use = np.zeros((side, side), dtype=np.uint8, order="F")
    cx, cz = center
    for (ix, iz), layout in layouts.items():
        x0 = (ix - cx + radius) * tiles
        z0 = (iz - cz + radius) * tiles
        use[x0 : x0 + tiles, z0 : z0 + tiles] = layout.cell_use
    return use


def to_ascii(use: np.ndarray) -> str:
    width, height = use.shape
    rows = []
    for z in range(height):
        rows.append("".join(ASCII_GLYPHS[CellUse(use[x, z])] for x in range(width)))
    return "\n".join(rows)


def to_image(
    use: np.ndarray,
    layouts: dict[ChunkIndex, ChunkLayout],
    center: ChunkIndex,
    radius: int,
    scale: int,
) -> Image.Image:
    """Render cell use to an RGB image, outlining buildings when scale allows."""
    palette = np.zeros((max(COLORS) + 1, 3), dtype=np.uint8)
    for cell_use, color in COLORS.items():
        palette[cell_use] = color

    # PIL wants rows first
    rgb = np.ascontiguousarray(palette[use.T])
    image = Image.fromarray(rgb)
    if scale > 1:
        image = image.resize(
            (image.width * scale, image.height * scale), Image.Resampling.NEAREST
        )

    if scale >= 3:
        draw = ImageDraw.Draw(image)
        cx, cz = center
        for (ix, iz), layout in layouts.items():
            tiles = layout.grid.width
            x0 = (ix - cx + radius) * tiles
            z0 = (iz - cz + radius) * tiles
            for p in layout.all_placements():
                left = (x0 + p.x) * scale
                top = (z0 + p.z) * scale
                right = left + p.span_x * scale - 1
                bottom = top + p.span_z * scale - 1
                draw.rectangle((left, top, right, bottom), outline=OUTLINE_COLOR)
    return image


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilecity",
        description="Generate and preview procedural city chunks",
    )
    parser.add_argument("--seed", default=str(config.RANDOM_SEED), help="World seed")
    parser.add_argument(
        "--chunk",
        type=int,
        nargs=2,
        default=(0, 0),
        metavar=("X", "Z"),
        help="Center chunk index",
    )
    parser.add_argument(
        "--radius", type=int, default=0, help="Chunks to include around the center"
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in RoadStrategy],
        default=config.ROAD_STRATEGY,
        help="Secondary road strategy",
    )
    parser.add_argument(
        "--chunk-tiles",
        type=int,
        default=config.CHUNK_TILES,
        help="Cells per chunk side",
    )
    parser.add_argument("--png", type=str, help="Write a PNG instead of ASCII")
    parser.add_argument(
        "--scale", type=int, default=4, help="Pixels per cell in the PNG"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    seed: int | str = int(args.seed) if args.seed.lstrip("-").isdigit() else args.seed
    settings = CitySettings(
        seed=seed,
        chunk_tiles=args.chunk_tiles,
        strategy=RoadStrategy(args.strategy),
    )
    center: ChunkIndex = (args.chunk[0], args.chunk[1])
    radius = max(0, args.radius)

    try:
        layouts = generate_block(settings, center, radius)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    use = stitch(layouts, center, radius)
    if args.png:
        image = to_image(use, layouts, center, radius, max(1, args.scale))
        image.save(args.png)
        logger.info("Wrote %s (%dx%d)", args.png, image.width, image.height)
    else:
        print(to_ascii(use))
    return 0


if __name__ == "__main__":
    sys.exit(main())
