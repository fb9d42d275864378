"""
Run the sprite pipeline once per pixel-density tier.

    resolve icons -> generate shields -> for each tier:
        rasterize -> pack -> compose -> write PNG + JSON

Configuration and template problems stop the build before anything is
written. A rasterization or write failure only fails its own tier: the other tier
still builds and keeps its output, but the report is unsuccessful. When
every tier succeeds, the layouts are checked for congruence (the 2x
rectangles must be the 1x rectangles times two); a mismatch is raised as a
ConsistencyError because it can only come from a packer bug.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from . import catalog
from . import config as sprite_config
from .assetResolver import AssetResolver
from .atlasComposer import compose_atlas
from .atlasPacker import AtlasLayout, LayoutSettings, PlacementEntry, pack_atlas
from .catalog import SpriteAsset
from .errors import (
    ConfigurationError,
    ConsistencyError,
    OutputError,
    RasterizationError,
    SpriteBuildError,
    TemplateError,
)
from .indexEmitter import write_atlas
from .rasterize import RasterTile, rasterize, rasterize_file
from .shieldGenerator import generate_shield_svg
from .themes import load_theme

logger = logging.getLogger(__name__)


class BuildState(Enum):
    IDLE = 'idle'
    RESOLVING_ASSETS = 'resolving-assets'
    GENERATING_SHIELDS = 'generating-shields'
    RASTERIZING = 'rasterizing'
    PACKING = 'packing'
    COMPOSING = 'composing'
    EMITTING = 'emitting'
    DONE = 'done'
    RESOLUTION_FAILED = 'resolution-failed'
    GENERATION_FAILED = 'generation-failed'
    RASTERIZATION_FAILED = 'rasterization-failed'
    EMISSION_FAILED = 'emission-failed'
    CONSISTENCY_FAILED = 'consistency-failed'


@dataclass
class TierResult:
    pixel_ratio: int
    state: BuildState = BuildState.IDLE
    layout: Optional[AtlasLayout] = None
    png_path: Optional[Path] = None
    json_path: Optional[Path] = None
    error: Optional[SpriteBuildError] = None

    @property
    def succeeded(self) -> bool:
        return self.state is BuildState.DONE


@dataclass
class BuildReport:
    basemap: Optional[str]
    output_dir: Path
    tiers: Dict[int, TierResult] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    shields: List[str] = field(default_factory=list)
    state: BuildState = BuildState.IDLE

    @property
    def success(self) -> bool:
        return self.state is BuildState.DONE and all(t.succeeded for t in self.tiers.values())

    @property
    def failed_tiers(self) -> List[TierResult]:
        return [t for t in self.tiers.values() if not t.succeeded]


def check_congruence(
    base: Sequence[PlacementEntry],
    scaled: Sequence[PlacementEntry],
    factor: int,
) -> List[str]:
    """
    Compare two tiers' placements.

    Returns one message per sprite (present in both tiers) whose scaled
    rectangle is not exactly `factor` times the base rectangle.
    """
    problems = []
    scaled_by_name = {entry.name: entry for entry in scaled}
    for entry in base:
        other = scaled_by_name.get(entry.name)
        if other is None:
            continue
        expected = tuple(v * factor for v in entry.rect)
        if other.rect != expected:
            problems.append(
                f"{entry.name}: @{other.pixel_ratio}x rect {other.rect} != "
                f"@{entry.pixel_ratio}x rect {entry.rect} * {factor}"
            )
    return problems


class SpriteBuilder:
    """Build the atlas pairs for one basemap, or the shared icons-only atlas."""

    def __init__(self, config=None, icons=None, shields=None):
        self.config = config if config is not None else sprite_config.get_config()
        self.icon_catalog = tuple(icons) if icons is not None else catalog.POI_ICONS
        self.shield_catalog = tuple(shields) if shields is not None else catalog.SHIELDS

        layout = self.config["layout"]
        self.settings = LayoutSettings(
            icon_size=int(layout["icon_size"]),
            row_capacity=int(layout["row_capacity"]),
        )
        build = self.config["build"]
        self.pixel_ratios = tuple(build["pixel_ratios"])
        self.basename = build["basename"]
        self.parallel = bool(build.get("parallel", False))
        self.progress = bool(build.get("progress", True))

        self.state = BuildState.IDLE
        self.transitions: List[Tuple[BuildState, Optional[int]]] = []
        self._lock = threading.Lock()

    def _enter(self, state: BuildState, pixel_ratio: Optional[int] = None, tier: Optional[TierResult] = None):
        with self._lock:
            self.state = state
            self.transitions.append((state, pixel_ratio))
        if tier is not None:
            tier.state = state
        where = f" ({pixel_ratio}x)" if pixel_ratio is not None else ""
        logger.debug(f"state -> {state.value}{where}")

    # -- inputs ---------------------------------------------------------

    def resolve_assets(self) -> Tuple[AssetResolver, List[Tuple[str, Optional[SpriteAsset]]], List[str]]:
        """Resolve the icon catalog; missing icons keep a vacant slot."""
        paths = self.config["paths"]
        resolver = AssetResolver(paths["icons_dir"], paths["templates_dir"])
        assets, missing = resolver.resolve_catalog(self.icon_catalog, self.settings.icon_size)
        slots = [(icon.name, asset) for icon, asset in zip(self.icon_catalog, assets)]
        logger.info(f"Resolved {len(slots) - len(missing)}/{len(slots)} POI icons")
        return resolver, slots, missing

    def generate_shields(self, resolver: AssetResolver, basemap: str) -> List[Tuple[SpriteAsset, str]]:
        """Generate the themed SVG of every enabled shield kind."""
        theme = load_theme(basemap, self.config["paths"]["basemaps_dir"])
        shields = []
        for shield in self.shield_catalog:
            if not theme.is_enabled(shield.kind):
                logger.info(f"  Shield {shield.name} disabled in {basemap} theme, skipping")
                continue
            template_path = resolver.resolve_template(shield)
            svg = generate_shield_svg(
                shield.kind,
                theme.style_for(shield.kind),
                template_path.read_text(encoding='utf-8'),
            )
            asset = SpriteAsset(
                name=shield.name,
                source_ref=shield.kind,
                size_hint=(shield.width, shield.height),
                recolorable=False,
            )
            shields.append((asset, svg))
        return shields

    # -- per tier -------------------------------------------------------

    def _rasterize_tier(self, pixel_ratio, icon_slots, shields):
        work = [(name, asset, None) for name, asset in icon_slots]
        work += [(asset.name, asset, svg) for asset, svg in shields]

        icon_tiles: List[Tuple[str, Optional[RasterTile]]] = []
        shield_tiles: List[Tuple[str, RasterTile]] = []
        progress = tqdm(
            work,
            desc=f"Rasterizing {pixel_ratio}x",
            unit="sprite",
            disable=not self.progress or self.parallel,
        )
        for name, asset, svg in progress:
            if asset is None:
                icon_tiles.append((name, None))
                continue
            width = asset.size_hint[0] * pixel_ratio
            height = asset.size_hint[1] * pixel_ratio
            try:
                if svg is None:
                    tile = rasterize_file(asset.source_ref, width, height, pixel_ratio)
                else:
                    tile = rasterize(svg, width, height, pixel_ratio)
            except RasterizationError as e:
                raise RasterizationError(str(e), sprite=name, pixel_ratio=pixel_ratio) from e

            if asset.recolorable:
                icon_tiles.append((name, tile))
            else:
                shield_tiles.append((name, tile))
        return icon_tiles, shield_tiles

    def build_tier(self, pixel_ratio: int, icon_slots, shields, output_dir: Path) -> TierResult:
        """Rasterize, pack, compose and write one density tier."""
        tier = TierResult(pixel_ratio=pixel_ratio)
        logger.info(f"Building {pixel_ratio}x sprite sheet...")

        self._enter(BuildState.RASTERIZING, pixel_ratio, tier)
        try:
            icon_tiles, shield_tiles = self._rasterize_tier(pixel_ratio, icon_slots, shields)
        except RasterizationError as e:
            logger.error(f"✗ {pixel_ratio}x tier failed: {e}")
            tier.error = e
            self._enter(BuildState.RASTERIZATION_FAILED, pixel_ratio, tier)
            return tier

        self._enter(BuildState.PACKING, pixel_ratio, tier)
        layout = pack_atlas(icon_tiles, shield_tiles, self.settings, pixel_ratio)
        for entry in layout.entries:
            logger.debug(f"    Added {entry.name}: {entry.width}x{entry.height} at ({entry.x}, {entry.y})")

        self._enter(BuildState.COMPOSING, pixel_ratio, tier)
        tiles = dict(icon_tiles)
        tiles.update(shield_tiles)
        atlas = compose_atlas(layout, {name: tile for name, tile in tiles.items() if tile is not None})

        self._enter(BuildState.EMITTING, pixel_ratio, tier)
        try:
            tier.png_path, tier.json_path = write_atlas(atlas, output_dir, self.basename)
        except OSError as e:
            tier.error = OutputError(f"Could not write sprite sheet to {output_dir}: {e}")
            logger.error(f"✗ {pixel_ratio}x tier failed: {tier.error}")
            self._enter(BuildState.EMISSION_FAILED, pixel_ratio, tier)
            return tier
        tier.layout = layout
        self._enter(BuildState.DONE, pixel_ratio, tier)
        return tier

    # -- orchestration --------------------------------------------------

    def build(self, basemap: Optional[str] = None) -> BuildReport:
        """
        Build every tier for a basemap (or the shared icons-only atlas when
        basemap is None).

        Raises:
            ConfigurationError: source directories or basemap config missing
            TemplateError: a shield template does not match its theme fields
            ConsistencyError: tier layouts are not congruent
        """
        output_dir = sprite_config.sprites_output_dir(basemap, self.config)
        report = BuildReport(basemap=basemap, output_dir=output_dir)

        self._enter(BuildState.RESOLVING_ASSETS)
        try:
            resolver, icon_slots, missing = self.resolve_assets()
        except ConfigurationError:
            self._enter(BuildState.RESOLUTION_FAILED)
            report.state = self.state
            raise
        report.missing = missing

        shields = []
        if basemap is not None:
            self._enter(BuildState.GENERATING_SHIELDS)
            try:
                shields = self.generate_shields(resolver, basemap)
            except (ConfigurationError, TemplateError):
                self._enter(BuildState.GENERATION_FAILED)
                report.state = self.state
                raise
        report.shields = [asset.name for asset, _ in shields]

        if len(missing) == len(icon_slots) and not shields:
            self._enter(BuildState.RESOLUTION_FAILED)
            report.state = self.state
            raise ConfigurationError("No sprites to build: every icon is missing and there are no shields")

        if self.parallel and len(self.pixel_ratios) > 1:
            with ThreadPoolExecutor(max_workers=len(self.pixel_ratios)) as executor:
                futures = {
                    executor.submit(self.build_tier, ratio, icon_slots, shields, output_dir): ratio
                    for ratio in self.pixel_ratios
                }
                for future in as_completed(futures):
                    report.tiers[futures[future]] = future.result()
            report.tiers = {ratio: report.tiers[ratio] for ratio in self.pixel_ratios}
        else:
            for ratio in self.pixel_ratios:
                report.tiers[ratio] = self.build_tier(ratio, icon_slots, shields, output_dir)

        if report.failed_tiers:
            failed = ', '.join(f"{t.pixel_ratio}x" for t in report.failed_tiers)
            logger.error(f"✗ Sprite build failed for tier(s): {failed}")
            self._enter(report.failed_tiers[0].state)
            report.state = self.state
            return report

        self._check_tiers(report)
        self._enter(BuildState.DONE)
        report.state = self.state
        return report

    def _check_tiers(self, report: BuildReport):
        ratios = sorted(report.tiers)
        base_ratio = ratios[0]
        base = report.tiers[base_ratio].layout
        problems = []
        for ratio in ratios[1:]:
            other = report.tiers[ratio].layout
            if ratio % base_ratio:
                problems.append(f"{ratio}x is not a multiple of {base_ratio}x")
                continue
            factor = ratio // base_ratio
            problems += check_congruence(base.entries, other.entries, factor)
            if (other.width, other.height) != (base.width * factor, base.height * factor):
                problems.append(
                    f"atlas size @{ratio}x {other.width}x{other.height} != "
                    f"@{base_ratio}x {base.width}x{base.height} * {factor}"
                )
        if problems:
            self._enter(BuildState.CONSISTENCY_FAILED)
            report.state = self.state
            raise ConsistencyError(
                "Tier layouts are not congruent (packer bug): " + '; '.join(problems[:5])
            )


def build_sprites(basemap: Optional[str] = None, config=None) -> BuildReport:
    """Convenience wrapper: build one basemap (or the shared atlas) with a config dict."""
    return SpriteBuilder(config).build(basemap)
