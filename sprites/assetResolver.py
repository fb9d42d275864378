"""
Locate vector sources for the sprite catalog.

Missing icons are not errors: the resolver reports them and the build
continues with a reduced sprite set. A missing source directory, however,
means the build is misconfigured and nothing should be written.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .catalog import IconDefinition, ShieldDefinition, SpriteAsset
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class AssetResolver:
    """Resolve logical sprite names to files on disk."""

    def __init__(self, icons_dir, templates_dir):
        self.icons_dir = Path(icons_dir)
        self.templates_dir = Path(templates_dir)

        if not self.icons_dir.is_dir():
            raise ConfigurationError(f"Icons directory not found at {self.icons_dir}")
        if not self.templates_dir.is_dir():
            raise ConfigurationError(f"Shield template directory not found at {self.templates_dir}")

    def resolve_icon(self, filename: str) -> Optional[Path]:
        """Return the icon's SVG path, or None when the file is absent."""
        path = self.icons_dir / filename
        if not path.is_file():
            return None
        return path

    def resolve_template(self, shield: ShieldDefinition) -> Path:
        """Return the shield template path; a missing template is a configuration error."""
        path = self.templates_dir / shield.template_file
        if not path.is_file():
            raise ConfigurationError(f"Shield template not found for {shield.name}: {path}")
        return path

    def resolve_catalog(
        self,
        icons: Sequence[IconDefinition],
        icon_size: int,
    ) -> Tuple[List[Optional[SpriteAsset]], List[str]]:
        """
        Resolve every catalog icon, keeping catalog order.

        Missing icons keep their slot as None so the packer can leave their
        cell vacant.

        Returns:
            (assets, missing_names)
        """
        assets: List[Optional[SpriteAsset]] = []
        missing: List[str] = []
        for icon in icons:
            path = self.resolve_icon(icon.filename)
            if path is None:
                logger.warning(f"{icon.filename} not found, skipping {icon.name}")
                missing.append(icon.name)
                assets.append(None)
                continue
            assets.append(SpriteAsset(
                name=icon.name,
                source_ref=path,
                size_hint=(icon_size, icon_size),
                recolorable=True,
            ))
        return assets, missing
