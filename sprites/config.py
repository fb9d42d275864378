"""
Configuration module for the sprite atlas builder.

This module centralizes path configuration and layout settings so the
build and verify scripts (and the tests) share one source of truth.

Values can be overridden through environment variables or a .env file at
the repository root:

    SPRITES_ICONS_DIR      directory holding the POI icon SVGs
    SPRITES_BASEMAPS_DIR   directory holding one folder per basemap
    SPRITES_SHARED_DIR     output directory for the shared (icons-only) atlas
    SPRITES_ICON_SIZE      icon cell size at 1x, in pixels
    SPRITES_ROW_CAPACITY   icons per row before wrapping
"""

import copy
import os
from pathlib import Path

from dotenv import load_dotenv


def get_project_root():
    """Repository root (the directory containing the sprites package)."""
    return Path(__file__).resolve().parent.parent


PROJECT_ROOT = get_project_root()


# Load .env from repository root
def load_environment():
    """Load .env file from repository root, if one exists."""
    env_file = PROJECT_ROOT / '.env'
    if env_file.exists():
        load_dotenv(env_file)
        return True
    return False


load_environment()


def _path_from_env(name, default):
    # Relative paths resolve from the repository root, like DATA_DISK in the tile pipeline
    value = os.environ.get(name)
    if not value:
        return default
    if value.startswith(('.', '..')):
        return (PROJECT_ROOT / value).resolve()
    return Path(value)


def _int_from_env(name, default):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise RuntimeError(f"Environment variable '{name}' must be an integer, got: {value!r}")


PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"

ASSETS_DIR = PROJECT_ROOT / "assets"
ICONS_DIR = _path_from_env("SPRITES_ICONS_DIR", ASSETS_DIR / "icons")
SHARED_SPRITES_DIR = _path_from_env("SPRITES_SHARED_DIR", ASSETS_DIR / "sprites")
BASEMAPS_DIR = _path_from_env("SPRITES_BASEMAPS_DIR", PROJECT_ROOT / "basemaps")

# Standard POI icon size (21x21 at 1x, 42x42 at 2x)
ICON_SIZE = _int_from_env("SPRITES_ICON_SIZE", 21)
# Ten 21px icons per row (~200px wide sheet at 1x)
ROW_CAPACITY = _int_from_env("SPRITES_ROW_CAPACITY", 10)

PIXEL_RATIOS = (1, 2)
SPRITE_BASENAME = "basemap"
THEME_FILENAME = "shields.json"


DEFAULT_CONFIG = {
    "paths": {
        "project_root": PROJECT_ROOT,
        "icons_dir": ICONS_DIR,
        "templates_dir": TEMPLATES_DIR,
        "basemaps_dir": BASEMAPS_DIR,
        "shared_sprites_dir": SHARED_SPRITES_DIR,
        # None means basemaps/<id>/sprites (or the shared dir for --shared)
        "output_dir": None,
    },
    "layout": {
        "icon_size": ICON_SIZE,
        "row_capacity": ROW_CAPACITY,
    },
    "build": {
        "pixel_ratios": PIXEL_RATIOS,
        "basename": SPRITE_BASENAME,
        "parallel": False,
        "progress": True,
    },
}


def get_config():
    """
    Get a copy of the default configuration.
    Modifying the returned dict won't affect the default.
    """
    return copy.deepcopy(DEFAULT_CONFIG)


def basemap_dir(basemap, config=None):
    """Directory holding a basemap's configuration and sprites."""
    if config is None:
        config = DEFAULT_CONFIG
    return Path(config["paths"]["basemaps_dir"]) / basemap


def sprites_output_dir(basemap=None, config=None):
    """
    Resolve where a build writes its atlas pair.

    An explicit output_dir in the config wins; otherwise basemap builds go
    to basemaps/<id>/sprites and the shared build to the shared directory.
    """
    if config is None:
        config = DEFAULT_CONFIG
    explicit = config["paths"].get("output_dir")
    if explicit:
        return Path(explicit)
    if basemap is None:
        return Path(config["paths"]["shared_sprites_dir"])
    return basemap_dir(basemap, config) / "sprites"


def describe_config(config=None):
    """Return a list of human-readable lines summarising the configuration."""
    if config is None:
        config = DEFAULT_CONFIG
    paths = config["paths"]
    layout = config["layout"]
    return [
        f"Icons directory:     {paths['icons_dir']}",
        f"Templates directory: {paths['templates_dir']}",
        f"Basemaps directory:  {paths['basemaps_dir']}",
        f"Shared sprites:      {paths['shared_sprites_dir']}",
        f"Icon cell size:      {layout['icon_size']}px @1x",
        f"Row capacity:        {layout['row_capacity']} icons",
        f"Pixel ratios:        {', '.join(f'{r}x' for r in config['build']['pixel_ratios'])}",
    ]
