"""
Rasterize SVG documents into fixed-size RGBA tiles.

The SVG is scaled to fit inside the target box while keeping its aspect
ratio, then centered on a transparent canvas of exactly the target size.
Nothing is cropped and nothing is stretched.
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Tuple, Union

import cairosvg
from PIL import Image

from .errors import RasterizationError

TRANSPARENT = (0, 0, 0, 0)


@dataclass
class RasterTile:
    """Rendered pixels for one sprite at one pixel ratio."""

    image: Image.Image
    pixel_ratio: int = 1

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def _as_bytes(vector_doc: Union[str, bytes]) -> bytes:
    if isinstance(vector_doc, bytes):
        return vector_doc
    if isinstance(vector_doc, str):
        return vector_doc.encode('utf-8')
    raise RasterizationError(f"Expected SVG text or bytes, got {type(vector_doc).__name__}")


def _render(data: bytes, output_width=None, output_height=None) -> Image.Image:
    """Render SVG bytes to a Pillow image."""
    png_data = cairosvg.svg2png(
        bytestring=data,
        output_width=output_width,
        output_height=output_height,
    )
    image = Image.open(BytesIO(png_data))
    image.load()
    return image.convert('RGBA')


def fit_size(natural_width: float, natural_height: float, target_width: int, target_height: int) -> Tuple[int, int]:
    """Largest size with the natural aspect ratio that fits inside the target."""
    scale = min(target_width / natural_width, target_height / natural_height)
    width = min(target_width, max(1, int(round(natural_width * scale))))
    height = min(target_height, max(1, int(round(natural_height * scale))))
    return width, height


def rasterize(
    vector_doc: Union[str, bytes],
    target_width: int,
    target_height: int,
    pixel_ratio: int = 1,
) -> RasterTile:
    """
    Convert an SVG document to a tile of exactly (target_width, target_height).

    Args:
        vector_doc: SVG document as text or bytes
        target_width: Tile width in physical pixels
        target_height: Tile height in physical pixels
        pixel_ratio: Density multiplier the target size already includes

    Returns:
        RasterTile

    Raises:
        RasterizationError: the document cannot be parsed or rendered
    """
    if target_width <= 0 or target_height <= 0:
        raise RasterizationError(f"Invalid target size {target_width}x{target_height}")

    data = _as_bytes(vector_doc)
    if not data.strip():
        raise RasterizationError("Empty SVG document")

    try:
        # First pass only measures the intrinsic size (viewBox or width/height)
        natural = _render(data)
        fit_width, fit_height = fit_size(natural.width, natural.height, target_width, target_height)
        rendered = _render(data, output_width=fit_width, output_height=fit_height)
    except RasterizationError:
        raise
    except Exception as e:
        raise RasterizationError(f"Could not render SVG: {e}") from e

    if rendered.size != (fit_width, fit_height):
        # Cairo may round a dimension differently; never let the tile grow past its box
        rendered = rendered.crop((0, 0, min(rendered.width, target_width), min(rendered.height, target_height)))

    if rendered.size == (target_width, target_height):
        return RasterTile(image=rendered, pixel_ratio=pixel_ratio)

    tile = Image.new('RGBA', (target_width, target_height), TRANSPARENT)
    offset = ((target_width - rendered.width) // 2, (target_height - rendered.height) // 2)
    tile.paste(rendered, offset)
    return RasterTile(image=tile, pixel_ratio=pixel_ratio)


def rasterize_file(svg_path, target_width: int, target_height: int, pixel_ratio: int = 1) -> RasterTile:
    """Read an SVG file and rasterize it."""
    path = Path(svg_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise RasterizationError(f"Could not read {path}: {e}") from e
    return rasterize(data, target_width, target_height, pixel_ratio)
