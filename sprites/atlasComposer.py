"""
Composite packed tiles into a single atlas image.
"""

from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Mapping

from PIL import Image

from .atlasPacker import AtlasLayout, PlacementEntry
from .rasterize import TRANSPARENT, RasterTile

# Fixed encoder settings keep reruns byte-identical
PNG_SAVE_OPTIONS = {'compress_level': 6, 'optimize': False}


@dataclass
class Atlas:
    """One density tier: the composed image and the placements it was built from."""

    pixel_ratio: int
    width: int
    height: int
    entries: List[PlacementEntry] = field(default_factory=list)
    image: Image.Image = None


def compose_atlas(layout: AtlasLayout, tiles: Mapping[str, RasterTile]) -> Atlas:
    """
    Paste every placed tile onto a transparent canvas.

    Tiles are copied as-is (no mask, so no alpha blending and no resampling).

    Raises:
        ValueError: a placement has no tile, or the tile size disagrees with it
    """
    if layout.width <= 0 or layout.height <= 0:
        raise ValueError("Cannot compose an empty atlas")

    canvas = Image.new('RGBA', (layout.width, layout.height), TRANSPARENT)
    for entry in layout.entries:
        tile = tiles.get(entry.name)
        if tile is None:
            raise ValueError(f"No raster tile for placed sprite {entry.name}")
        if tile.size != (entry.width, entry.height):
            raise ValueError(
                f"Tile {entry.name} is {tile.width}x{tile.height}, "
                f"placement expects {entry.width}x{entry.height}"
            )
        canvas.paste(tile.image, (entry.x, entry.y))

    return Atlas(
        pixel_ratio=layout.pixel_ratio,
        width=layout.width,
        height=layout.height,
        entries=list(layout.entries),
        image=canvas,
    )


def encode_png(image: Image.Image) -> bytes:
    """Serialize an image as PNG with deterministic settings."""
    buffer = BytesIO()
    image.save(buffer, format='PNG', **PNG_SAVE_OPTIONS)
    return buffer.getvalue()
