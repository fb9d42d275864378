#!/usr/bin/env python3
"""
Verify written sprite sheets.

Checks each 1x/2x pair for:
- index rectangles that overlap or fall outside the image
- image size different from the bounding box of the index
- pixelRatio fields that do not match the file
- shields in the shared sheet (there should be none), or a basemap sheet
  whose shield count differs from the enabled shields in its theme
- 2x rectangles that are not exactly the 1x rectangles times two

Usage:
    verify-sprites dark-gray
    verify-sprites --shared
    verify-sprites --sprites-dir /tmp/sprites --expect-shields 3
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image

from . import config as sprite_config
from .atlasPacker import PlacementEntry, find_overlaps
from .densityDriver import check_congruence
from .errors import ConfigurationError
from .indexEmitter import atlas_filenames
from .themes import load_theme

logger = logging.getLogger(__name__)

SHIELD_PREFIX = 'shield-'


def entries_from_index(index: Dict[str, Dict], pixel_ratio: int) -> List[PlacementEntry]:
    entries = []
    for name, record in index.items():
        entries.append(PlacementEntry(
            name=name,
            x=int(record['x']),
            y=int(record['y']),
            width=int(record['width']),
            height=int(record['height']),
            pixel_ratio=int(record.get('pixelRatio', pixel_ratio)),
            sdf=bool(record.get('sdf', False)),
        ))
    return entries


def load_atlas_pair(sprites_dir, basename: str, pixel_ratio: int) -> Tuple[List[PlacementEntry], Tuple[int, int]]:
    """
    Read one written tier.

    Returns:
        (entries, (image_width, image_height))

    Raises:
        FileNotFoundError: PNG or JSON missing
        ValueError: JSON unreadable or malformed
    """
    png_name, json_name = atlas_filenames(basename, pixel_ratio)
    png_path = Path(sprites_dir) / png_name
    json_path = Path(sprites_dir) / json_name

    with open(json_path, 'r', encoding='utf-8') as f:
        try:
            index = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse {json_path}: {e}") from e
    if not isinstance(index, dict):
        raise ValueError(f"{json_path} is not a JSON object")
    try:
        entries = entries_from_index(index, pixel_ratio)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed sprite record in {json_path}: {e}") from e

    with Image.open(png_path) as image:
        size = image.size
    return entries, size


def verify_sprites_dir(
    sprites_dir,
    expected_shields: Optional[int] = None,
    basename: str = sprite_config.SPRITE_BASENAME,
    pixel_ratios=sprite_config.PIXEL_RATIOS,
) -> Dict:
    """
    Verify every tier in a sprites directory.

    Returns:
        Dict with 'ok' (bool) and 'errors', 'warnings', 'info' message lists
    """
    results = {'ok': True, 'errors': [], 'warnings': [], 'info': []}
    tiers = {}

    for ratio in pixel_ratios:
        label = f"@{ratio}x"
        try:
            entries, (img_w, img_h) = load_atlas_pair(sprites_dir, basename, ratio)
        except FileNotFoundError as e:
            results['errors'].append(f"{label}: missing file {e.filename}")
            continue
        except (ValueError, OSError) as e:
            results['errors'].append(f"{label}: {e}")
            continue
        tiers[ratio] = entries

        bbox_w = max((e.right for e in entries), default=0)
        bbox_h = max((e.bottom for e in entries), default=0)
        if (bbox_w, bbox_h) != (img_w, img_h):
            results['errors'].append(
                f"{label}: image is {img_w}x{img_h}px but index spans {bbox_w}x{bbox_h}px"
            )

        for entry in entries:
            if entry.x < 0 or entry.y < 0 or entry.right > img_w or entry.bottom > img_h:
                results['errors'].append(f"{label}: {entry.name} lies outside the image")
            if entry.pixel_ratio != ratio:
                results['errors'].append(
                    f"{label}: {entry.name} has pixelRatio {entry.pixel_ratio}, expected {ratio}"
                )

        for first, second in find_overlaps(entries):
            results['errors'].append(f"{label}: {first} overlaps {second}")

        shields = [e.name for e in entries if e.name.startswith(SHIELD_PREFIX)]
        if expected_shields is not None and len(shields) != expected_shields:
            found = ', '.join(shields) if shields else 'none'
            results['errors'].append(
                f"{label}: found {len(shields)} shield(s) (expected {expected_shields}): {found}"
            )
        for entry in entries:
            if entry.name.startswith(SHIELD_PREFIX) and entry.sdf:
                results['warnings'].append(f"{label}: shield {entry.name} is marked sdf")

        results['info'].append(
            f"{label}: {len(entries)} sprites ({len(shields)} shields) in {img_w}x{img_h}px"
        )

    if tiers:
        ratios = sorted(tiers)
        base_ratio = ratios[0]
        base_names = {e.name for e in tiers[base_ratio]}
        for ratio in ratios[1:]:
            names = {e.name for e in tiers[ratio]}
            if names != base_names:
                diff = sorted(names.symmetric_difference(base_names))
                results['warnings'].append(
                    f"@{ratio}x and @{base_ratio}x list different sprites: {', '.join(diff)}"
                )
            if ratio % base_ratio == 0:
                for problem in check_congruence(tiers[base_ratio], tiers[ratio], ratio // base_ratio):
                    results['errors'].append(f"congruence: {problem}")

    results['ok'] = not results['errors']
    return results


def print_report(results, title):
    logger.info(title)
    for line in results['info']:
        logger.info(f"  {line}")
    for line in results['warnings']:
        logger.warning(f"  ⚠ {line}")
    for line in results['errors']:
        logger.error(f"  ✗ {line}")
    if results['ok']:
        logger.info("  ✓ Sprite sheets are consistent")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Verify sprite sheets (PNG + JSON index pairs)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('basemap', nargs='?', help='Basemap identifier to verify')
    parser.add_argument('--shared', action='store_true', help='Verify the shared icons-only sheet')
    parser.add_argument('--sprites-dir', type=Path, help='Verify this directory instead')
    parser.add_argument('--basemaps-dir', type=Path, help='Directory containing basemap folders')
    parser.add_argument('--expect-shields', type=int, help='Expected number of shields per tier')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    config = sprite_config.get_config()
    if args.basemaps_dir:
        config['paths']['basemaps_dir'] = args.basemaps_dir

    expected_shields = args.expect_shields
    if args.sprites_dir:
        sprites_dir = args.sprites_dir
    elif args.shared:
        sprites_dir = sprite_config.sprites_output_dir(None, config)
    elif args.basemap:
        sprites_dir = sprite_config.sprites_output_dir(args.basemap, config)
    else:
        parser.error('a basemap identifier, --shared or --sprites-dir is required')

    if expected_shields is None:
        if args.shared:
            expected_shields = 0
        elif args.basemap:
            try:
                theme = load_theme(args.basemap, config['paths']['basemaps_dir'])
            except ConfigurationError as e:
                logger.error(f"✗ {e}")
                return 1
            expected_shields = len(theme.enabled_kinds())

    results = verify_sprites_dir(sprites_dir, expected_shields=expected_shields)
    print_report(results, f"Verifying sprite sheets in {sprites_dir}")
    return 0 if results['ok'] else 1


if __name__ == '__main__':
    sys.exit(main())
