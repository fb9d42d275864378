"""
Write sprite atlas pairs (PNG + JSON index).

The JSON index maps each sprite name to its rectangle in the PNG:

    {
      "airport": {"width": 21, "height": 21, "x": 0, "y": 0, "pixelRatio": 1, "sdf": true},
      ...
    }

Both files are written to temporary siblings first and then renamed into
place together, so a failed write never leaves a mismatched pair behind.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Tuple

from .atlasComposer import Atlas, encode_png

logger = logging.getLogger(__name__)


def atlas_filenames(basename: str, pixel_ratio: int) -> Tuple[str, str]:
    """('basemap.png', 'basemap.json') for 1x, ('basemap@2x.png', ...) otherwise."""
    suffix = '' if pixel_ratio == 1 else f'@{pixel_ratio}x'
    return f'{basename}{suffix}.png', f'{basename}{suffix}.json'


def build_index(atlas: Atlas) -> Dict[str, Dict[str, Any]]:
    """Index records in placement order."""
    index = {}
    for entry in atlas.entries:
        index[entry.name] = {
            'width': entry.width,
            'height': entry.height,
            'x': entry.x,
            'y': entry.y,
            'pixelRatio': entry.pixel_ratio,
            'sdf': entry.sdf,
        }
    return index


def serialize_index(index: Dict[str, Dict[str, Any]]) -> str:
    return json.dumps(index, indent=2) + '\n'


def _temp_path(path: Path) -> Path:
    return path.with_name(path.name + '.tmp')


def _replace_pair(png_tmp: Path, png_path: Path, json_tmp: Path, json_path: Path):
    # The previous image is kept aside until the index is in place, so a
    # failed index rename can put it back.
    backup = None
    if png_path.exists():
        backup = png_path.with_name(png_path.name + '.bak')
        os.replace(png_path, backup)

    try:
        os.replace(png_tmp, png_path)
        os.replace(json_tmp, json_path)
    except OSError:
        if backup is not None:
            os.replace(backup, png_path)
        elif png_path.exists():
            png_path.unlink()
        raise

    if backup is not None:
        backup.unlink()


def write_atlas(atlas: Atlas, output_dir, basename: str = 'basemap') -> Tuple[Path, Path]:
    """
    Write the atlas image and its index.

    Both payloads are encoded and written to temporary files before either
    target is replaced. If the index cannot be moved into place, the
    previous image is restored (or the new one removed), so the directory
    never holds an image next to an index that does not describe it.

    Returns:
        (png_path, json_path)

    Raises:
        OSError: the output directory or either file could not be written
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    png_name, json_name = atlas_filenames(basename, atlas.pixel_ratio)
    png_path = output_dir / png_name
    json_path = output_dir / json_name

    png_bytes = encode_png(atlas.image)
    json_bytes = serialize_index(build_index(atlas)).encode('utf-8')

    png_tmp = _temp_path(png_path)
    json_tmp = _temp_path(json_path)
    temp_files = (png_tmp, json_tmp)
    try:
        png_tmp.write_bytes(png_bytes)
        json_tmp.write_bytes(json_bytes)
        _replace_pair(png_tmp, png_path, json_tmp, json_path)
    finally:
        for tmp_path in temp_files:
            if tmp_path.exists():
                tmp_path.unlink()

    logger.info(f"✓ Created {png_path} ({atlas.width}x{atlas.height}px)")
    logger.info(f"✓ Updated {json_path}")
    return png_path, json_path
