"""Shared fixtures for the sprite builder tests."""

import json
from pathlib import Path

from PIL import Image

from sprites import config as sprite_config
from sprites.catalog import IconDefinition
from sprites.rasterize import RasterTile

SQUARE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="15" height="15" viewBox="0 0 15 15">'
    '<rect x="1" y="1" width="13" height="13" fill="#000000"/></svg>'
)

WIDE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="30" height="10" viewBox="0 0 30 10">'
    '<rect x="0" y="0" width="30" height="10" fill="#ff0000"/></svg>'
)

TEST_ICONS = [
    IconDefinition('alpha', 'alpha.svg'),
    IconDefinition('bravo', 'bravo.svg'),
    IconDefinition('charlie', 'charlie.svg'),
    IconDefinition('delta', 'delta.svg'),
    IconDefinition('echo', 'echo.svg'),
]

FULL_THEME = {
    "interstate": {
        "upperBackground": "#111111",
        "lowerBackground": "#222222",
        "strokeColor": "#333333",
        "strokeWidth": 2,
    },
    "usHighway": {
        "background": "#444444",
        "strokeColor": "#555555",
        "strokeWidth": 2.5,
    },
    "stateHighway": {
        "background": "#666666",
        "strokeColor": "#777777",
    },
}


def fake_tile(width, height, color=(255, 0, 0, 255), pixel_ratio=1):
    return RasterTile(image=Image.new('RGBA', (width, height), color), pixel_ratio=pixel_ratio)


def write_icons(icons_dir, icons=TEST_ICONS, svg=SQUARE_SVG):
    icons_dir = Path(icons_dir)
    icons_dir.mkdir(parents=True, exist_ok=True)
    for icon in icons:
        (icons_dir / icon.filename).write_text(svg, encoding='utf-8')
    return icons_dir


def write_basemap(basemaps_dir, name, theme=None):
    folder = Path(basemaps_dir) / name
    folder.mkdir(parents=True, exist_ok=True)
    with open(folder / sprite_config.THEME_FILENAME, 'w', encoding='utf-8') as f:
        json.dump(FULL_THEME if theme is None else theme, f)
    return folder


def make_config(root, output_dir=None, icon_size=21, row_capacity=3, templates_dir=None):
    """Config dict pointing at a scratch tree under root."""
    root = Path(root)
    config = sprite_config.get_config()
    config['paths']['icons_dir'] = root / 'icons'
    config['paths']['basemaps_dir'] = root / 'basemaps'
    config['paths']['shared_sprites_dir'] = root / 'shared'
    config['paths']['output_dir'] = output_dir
    if templates_dir is not None:
        config['paths']['templates_dir'] = templates_dir
    config['layout']['icon_size'] = icon_size
    config['layout']['row_capacity'] = row_capacity
    config['build']['progress'] = False
    return config


def read_index(path):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
