"""
Sprite atlas builder for the basemaps.

Rasterizes the POI icon catalog and each basemap's themed highway shields
into 1x and 2x sprite sheets (PNG + JSON index) for MapLibre.
"""

from .assetResolver import AssetResolver
from .atlasComposer import Atlas, compose_atlas, encode_png
from .atlasPacker import AtlasLayout, LayoutSettings, PlacementEntry, find_overlaps, pack_atlas
from .densityDriver import BuildReport, BuildState, SpriteBuilder, TierResult, build_sprites, check_congruence
from .errors import (
    ConfigurationError,
    ConsistencyError,
    OutputError,
    RasterizationError,
    SpriteBuildError,
    TemplateError,
)
from .indexEmitter import atlas_filenames, build_index, serialize_index, write_atlas
from .rasterize import RasterTile, rasterize, rasterize_file
from .shieldGenerator import SHIELD_DEFAULTS, generate_shield_svg
from .themes import ThemeShieldSpec, load_theme
from .verifySprites import verify_sprites_dir

__all__ = [
    'AssetResolver',
    'Atlas',
    'compose_atlas',
    'encode_png',
    'AtlasLayout',
    'LayoutSettings',
    'PlacementEntry',
    'find_overlaps',
    'pack_atlas',
    'BuildReport',
    'BuildState',
    'SpriteBuilder',
    'TierResult',
    'build_sprites',
    'check_congruence',
    'ConfigurationError',
    'ConsistencyError',
    'OutputError',
    'RasterizationError',
    'SpriteBuildError',
    'TemplateError',
    'atlas_filenames',
    'build_index',
    'serialize_index',
    'write_atlas',
    'RasterTile',
    'rasterize',
    'rasterize_file',
    'SHIELD_DEFAULTS',
    'generate_shield_svg',
    'ThemeShieldSpec',
    'load_theme',
    'verify_sprites_dir',
]
