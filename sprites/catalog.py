"""
Static sprite catalog.

POI icons are listed in atlas order; the order is part of the layout
contract, so append new icons at the end and bump CATALOG_VERSION.
Shields are generated per basemap from the templates in sprites/templates.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

CATALOG_VERSION = "2"


@dataclass(frozen=True)
class IconDefinition:
    name: str
    filename: str


@dataclass(frozen=True)
class ShieldDefinition:
    name: str
    kind: str
    width: int
    height: int

    @property
    def template_file(self):
        return f"{self.name}.svg"


@dataclass(frozen=True)
class SpriteAsset:
    """A resolved vector source, ready to rasterize."""

    name: str
    # Path for icons, generator key (shield kind) for shields
    source_ref: Union[Path, str]
    size_hint: Tuple[int, int]
    recolorable: bool


POI_ICONS = (
    IconDefinition('airport', 'airport.svg'),
    IconDefinition('airfield', 'airfield.svg'),
    IconDefinition('bar', 'bar.svg'),
    IconDefinition('bus', 'bus.svg'),
    IconDefinition('cafe', 'cafe.svg'),
    IconDefinition('charging-station', 'charging-station.svg'),
    IconDefinition('fuel', 'fuel.svg'),
    IconDefinition('hospital', 'hospital.svg'),
    IconDefinition('lodging', 'lodging.svg'),
    IconDefinition('museum', 'museum.svg'),
    IconDefinition('park', 'park-alt1.svg'),
    IconDefinition('parking', 'parking.svg'),
    IconDefinition('police', 'police.svg'),
    IconDefinition('rail', 'rail.svg'),
    IconDefinition('restaurant', 'restaurant.svg'),
    IconDefinition('school', 'college.svg'),
    IconDefinition('stadium', 'stadium.svg'),
    IconDefinition('zoo', 'zoo.svg'),
)

SHIELDS = (
    ShieldDefinition('shield-interstate-custom', 'interstate', 28, 28),
    ShieldDefinition('shield-ushighway-custom', 'usHighway', 26, 26),
    ShieldDefinition('shield-state-custom', 'stateHighway', 32, 34),
)
