#!/usr/bin/env python3
"""
Build MapLibre sprite sheets for a basemap.

Creates basemap.png/basemap.json (1x) and basemap@2x.png/basemap@2x.json
(2x) containing the POI icons plus the basemap's themed highway shields.
With --shared, builds the icons-only sprite sheet shared by all basemaps.

Usage:
    build-sprites dark-gray
    build-sprites light-gray --output-dir /tmp/sprites --parallel
    build-sprites --shared
    python -m sprites.buildSprites dark-blue -v

Exit codes:
    0  all tiers built
    1  configuration/template error, or a tier failed to rasterize
    3  internal consistency error (1x and 2x layouts disagree)
"""

import argparse
import logging
import sys
from pathlib import Path

from . import config as sprite_config
from .catalog import CATALOG_VERSION
from .densityDriver import SpriteBuilder
from .errors import SpriteBuildError
from .themes import list_basemaps

logger = logging.getLogger(__name__)


def configure_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def build_parser():
    parser = argparse.ArgumentParser(
        description='Build 1x and 2x sprite sheets (PNG + JSON index) for a basemap',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        'basemap',
        nargs='?',
        help='Basemap identifier (folder under the basemaps directory, e.g. dark-gray)'
    )
    parser.add_argument(
        '--shared',
        action='store_true',
        help='Build the shared icons-only sprite sheet (no shields)'
    )
    parser.add_argument(
        '-o', '--output-dir',
        type=Path,
        help='Directory for the sprite files (default: basemaps/<id>/sprites or the shared dir)'
    )
    parser.add_argument(
        '--icons-dir',
        type=Path,
        help='Directory containing the POI icon SVGs'
    )
    parser.add_argument(
        '--basemaps-dir',
        type=Path,
        help='Directory containing basemap folders with shields.json'
    )
    parser.add_argument(
        '--icon-size',
        type=int,
        help='Icon cell size at 1x in pixels'
    )
    parser.add_argument(
        '--row-capacity',
        type=int,
        help='Number of icons per row before wrapping'
    )
    parser.add_argument(
        '--parallel',
        action='store_true',
        help='Build the density tiers concurrently'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars'
    )
    parser.add_argument(
        '--list',
        action='store_true',
        help='List basemaps with a shield theme and exit'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    return parser


def config_from_args(args):
    """Apply command line overrides to a copy of the default configuration."""
    config = sprite_config.get_config()
    if args.output_dir:
        config['paths']['output_dir'] = args.output_dir
    if args.icons_dir:
        config['paths']['icons_dir'] = args.icons_dir
    if args.basemaps_dir:
        config['paths']['basemaps_dir'] = args.basemaps_dir
    if args.icon_size is not None:
        config['layout']['icon_size'] = args.icon_size
    if args.row_capacity is not None:
        config['layout']['row_capacity'] = args.row_capacity
    if args.parallel:
        config['build']['parallel'] = True
    if args.no_progress:
        config['build']['progress'] = False
    return config


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    config = config_from_args(args)

    if args.list:
        for name in list_basemaps(config['paths']['basemaps_dir']):
            print(name)
        return 0

    if not args.shared and not args.basemap:
        parser.error('a basemap identifier is required (or use --shared)')

    basemap = None if args.shared else args.basemap
    target = 'shared sprites' if basemap is None else f"basemap '{basemap}'"
    logger.info(f"Rebuilding sprite sheets for {target}")
    for line in sprite_config.describe_config(config):
        logger.debug(line)

    try:
        builder = SpriteBuilder(config)
    except ValueError as e:
        # Invalid layout settings from the command line
        logger.error(f"✗ {e}")
        return 1

    try:
        report = builder.build(basemap)
    except SpriteBuildError as e:
        logger.error(f"✗ {type(e).__name__}: {e}")
        return e.exit_code

    if report.missing:
        logger.warning(f"Skipped {len(report.missing)} missing icon(s): {', '.join(report.missing)}")

    if not report.success:
        for tier in report.failed_tiers:
            logger.error(f"✗ {tier.pixel_ratio}x: {tier.error}")
        return 1

    icon_count = len(builder.icon_catalog) - len(report.missing)
    logger.info("✓ Sprite sheets rebuilt!")
    logger.info(f"  - POI icons: {icon_count} icons (catalog v{CATALOG_VERSION})")
    logger.info(f"  - Shields: {len(report.shields)} custom shields")
    logger.info(f"  - Output: {report.output_dir}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
