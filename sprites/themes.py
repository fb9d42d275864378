"""
Basemap shield themes.

Each basemap folder carries a shields.json mirroring the shields block of
its style theme:

    {
      "interstate":   {"upperBackground": "#4d4d4d", "lowerBackground": "#4d4d4d",
                       "strokeColor": "#4d4d4d", "strokeWidth": 2},
      "usHighway":    {"background": "#4d4d4d", "strokeColor": "#4d4d4d", "strokeWidth": 2.5},
      "stateHighway": {"background": "#4d4d4d", "strokeColor": "#3c3c3c", "strokeWidth": 1}
    }

Keys the shield generator does not use (textColor, textFont, minZoom, ...)
are kept but ignored.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from . import config as sprite_config
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SHIELD_KINDS = ('interstate', 'usHighway', 'stateHighway')


@dataclass(frozen=True)
class ThemeShieldSpec:
    """Read-only shield parameters for one basemap."""

    basemap: str
    styles: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    enabled: bool = True

    def style_for(self, kind: str) -> Dict[str, Any]:
        return dict(self.styles.get(kind) or {})

    def is_enabled(self, kind: str) -> bool:
        if not self.enabled:
            return False
        return bool(self.style_for(kind).get('enabled', True))

    def enabled_kinds(self) -> List[str]:
        return [kind for kind in SHIELD_KINDS if self.is_enabled(kind)]


def theme_from_dict(basemap: str, data: Dict[str, Any]) -> ThemeShieldSpec:
    """Build a ThemeShieldSpec from a parsed shields.json document."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Shield theme for '{basemap}' must be a JSON object")

    styles = {}
    for kind in SHIELD_KINDS:
        style = data.get(kind)
        if style is None:
            continue
        if not isinstance(style, dict):
            raise ConfigurationError(f"Shield theme '{basemap}': '{kind}' must be an object")
        styles[kind] = dict(style)

    unknown = sorted(k for k, v in data.items() if isinstance(v, dict) and k not in SHIELD_KINDS)
    if unknown:
        logger.warning(f"Ignoring unknown shield kinds in '{basemap}' theme: {', '.join(unknown)}")

    return ThemeShieldSpec(basemap=basemap, styles=styles, enabled=bool(data.get('enabled', True)))


def load_theme(basemap: str, basemaps_dir=None) -> ThemeShieldSpec:
    """
    Load the shield theme of a basemap.

    Args:
        basemap: Basemap identifier (folder name, e.g. 'dark-gray')
        basemaps_dir: Directory containing basemap folders (defaults to config)

    Returns:
        ThemeShieldSpec

    Raises:
        ConfigurationError: basemap folder or theme file missing or malformed
    """
    if basemaps_dir is None:
        basemaps_dir = sprite_config.BASEMAPS_DIR
    folder = Path(basemaps_dir) / basemap
    if not folder.is_dir():
        raise ConfigurationError(f"Basemap directory not found: {folder}")

    theme_path = folder / sprite_config.THEME_FILENAME
    if not theme_path.exists():
        raise ConfigurationError(f"Shield theme not found: {theme_path}")

    try:
        with open(theme_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Failed to parse shield theme {theme_path}: {e}") from e

    theme = theme_from_dict(basemap, data)
    logger.debug(f"Loaded shield theme for {basemap}: {', '.join(theme.enabled_kinds()) or 'no shields'}")
    return theme


def list_basemaps(basemaps_dir=None) -> List[str]:
    """Basemap identifiers that have a shield theme."""
    if basemaps_dir is None:
        basemaps_dir = sprite_config.BASEMAPS_DIR
    root = Path(basemaps_dir)
    if not root.is_dir():
        return []
    return sorted(
        p.name for p in root.iterdir()
        if p.is_dir() and (p / sprite_config.THEME_FILENAME).exists()
    )
