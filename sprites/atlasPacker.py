"""
Deterministic atlas layout.

Icons are laid out first, left to right in uniform cells, wrapping to a new
row after `row_capacity` cells. Shields follow in a single column below the
icon block, each at its own size. The layout is a pure function of the
ordered tile sizes, the layout settings and the pixel ratio, so the same
catalog always yields the same coordinates and the 2x layout is exactly the
1x layout scaled by two.

A vacant icon slot (tile is None) still consumes its cell. Skipping an
optional icon therefore never moves any other sprite.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .rasterize import RasterTile


@dataclass(frozen=True)
class LayoutSettings:
    """Icon cell size (at 1x) and the number of cells per row."""

    icon_size: int = 21
    row_capacity: int = 10

    def __post_init__(self):
        if self.icon_size <= 0:
            raise ValueError(f"icon_size must be positive, got {self.icon_size}")
        if self.row_capacity <= 0:
            raise ValueError(f"row_capacity must be positive, got {self.row_capacity}")


@dataclass(frozen=True)
class PlacementEntry:
    name: str
    x: int
    y: int
    width: int
    height: int
    pixel_ratio: int
    sdf: bool

    @property
    def rect(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def overlaps(self, other: "PlacementEntry") -> bool:
        return (
            self.x < other.right and other.x < self.right
            and self.y < other.bottom and other.y < self.bottom
        )


@dataclass
class AtlasLayout:
    """Packer output: placements plus the bounding box they span."""

    pixel_ratio: int
    width: int
    height: int
    icon_block_height: int
    entries: List[PlacementEntry] = field(default_factory=list)

    def by_name(self) -> Dict[str, PlacementEntry]:
        return {entry.name: entry for entry in self.entries}


def _pack_icons(icons, settings: LayoutSettings, pixel_ratio: int):
    cell = settings.icon_size * pixel_ratio
    row_limit = settings.row_capacity * cell

    entries = []
    x = 0
    y = 0
    row_height = 0
    for name, tile in icons:
        width = cell if tile is None else max(cell, tile.width)
        height = cell if tile is None else max(cell, tile.height)

        # Wrap unless the row is empty; an oversized tile gets a row to itself
        if x > 0 and x + width > row_limit:
            x = 0
            y += row_height
            row_height = 0

        if tile is not None:
            entries.append(PlacementEntry(
                name=name,
                x=x,
                y=y,
                width=tile.width,
                height=tile.height,
                pixel_ratio=pixel_ratio,
                sdf=True,
            ))

        x += width
        row_height = max(row_height, height)

    return entries, y + row_height


def _pack_shields(shields, top: int, pixel_ratio: int):
    entries = []
    y = top
    for name, tile in shields:
        entries.append(PlacementEntry(
            name=name,
            x=0,
            y=y,
            width=tile.width,
            height=tile.height,
            pixel_ratio=pixel_ratio,
            sdf=False,
        ))
        y += tile.height
    return entries


def pack_atlas(
    icons: Sequence[Tuple[str, Optional[RasterTile]]],
    shields: Sequence[Tuple[str, RasterTile]],
    settings: LayoutSettings,
    pixel_ratio: int = 1,
) -> AtlasLayout:
    """
    Assign every tile a non-overlapping position.

    Args:
        icons: Ordered (name, tile) pairs; tile None marks a vacant slot
        shields: Ordered (name, tile) pairs stacked below the icons
        settings: Icon cell size and row capacity
        pixel_ratio: Density multiplier applied to the icon cell

    Returns:
        AtlasLayout whose width/height is the bounding box of all placements
    """
    icon_entries, icon_block_height = _pack_icons(icons, settings, pixel_ratio)
    shield_entries = _pack_shields(shields, icon_block_height, pixel_ratio)
    entries = icon_entries + shield_entries

    seen = set()
    for entry in entries:
        if entry.name in seen:
            raise ValueError(f"Duplicate sprite name in atlas: {entry.name}")
        seen.add(entry.name)

    width = max((e.right for e in entries), default=0)
    height = max((e.bottom for e in entries), default=0)
    return AtlasLayout(
        pixel_ratio=pixel_ratio,
        width=width,
        height=height,
        icon_block_height=icon_block_height,
        entries=entries,
    )


def find_overlaps(entries: Sequence[PlacementEntry]) -> List[Tuple[str, str]]:
    """Return every pair of sprite names whose rectangles intersect."""
    overlaps = []
    for i, first in enumerate(entries):
        for second in entries[i + 1:]:
            if first.overlaps(second):
                overlaps.append((first.name, second.name))
    return overlaps
