#!/usr/bin/env python3

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from sprites import buildSprites, densityDriver, verifySprites
from sprites.catalog import POI_ICONS
from sprites.verifySprites import verify_sprites_dir

from support import read_index, write_basemap, write_icons


class CommandLineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.icons = write_icons(self.root / "icons", POI_ICONS)
        self.basemaps = self.root / "basemaps"
        write_basemap(self.basemaps, "night")
        write_basemap(self.basemaps, "no-us", theme={"usHighway": {"enabled": False}})

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def build(self, *args):
        return buildSprites.main([
            *args,
            "--icons-dir", str(self.icons),
            "--basemaps-dir", str(self.basemaps),
            "--no-progress",
        ])

    def verify(self, *args):
        return verifySprites.main([*args, "--basemaps-dir", str(self.basemaps)])

    def test_build_then_verify_basemap(self) -> None:
        with self.assertLogs("sprites.buildSprites", level="INFO") as logs:
            self.assertEqual(self.build("night"), 0)
        self.assertTrue(any("catalog v2" in line for line in logs.output))
        sprites = self.basemaps / "night" / "sprites"
        index = read_index(sprites / "basemap.json")
        self.assertEqual(len(index), len(POI_ICONS) + 3)
        # 18 icons at 10 per row leave the shields starting at y=42
        self.assertEqual(index["shield-interstate-custom"]["y"], 42)
        self.assertEqual(self.verify("night"), 0)

    def test_verify_counts_only_enabled_shields(self) -> None:
        self.assertEqual(self.build("no-us"), 0)
        self.assertEqual(self.verify("no-us"), 0)
        self.assertEqual(self.verify("no-us", "--expect-shields", "3"), 1)

    def test_shared_build(self) -> None:
        out = self.root / "shared-out"
        self.assertEqual(self.build("--shared", "-o", str(out)), 0)
        self.assertFalse(any(name.startswith("shield-") for name in read_index(out / "basemap@2x.json")))
        self.assertEqual(self.verify("--sprites-dir", str(out), "--expect-shields", "0"), 0)

    def test_unknown_basemap_exits_with_error(self) -> None:
        self.assertEqual(self.build("nowhere"), 1)
        self.assertEqual(self.verify("nowhere"), 1)

    def test_missing_icons_dir(self) -> None:
        code = buildSprites.main(["night", "--icons-dir", str(self.root / "absent"),
                                  "--basemaps-dir", str(self.basemaps), "--no-progress"])
        self.assertEqual(code, 1)
        self.assertFalse((self.basemaps / "night" / "sprites").exists())

    def test_write_failure_names_the_tier(self) -> None:
        real = densityDriver.write_atlas

        def deny_2x(atlas, output_dir, basename="basemap"):
            if atlas.pixel_ratio == 2:
                raise PermissionError(13, "Permission denied", str(output_dir))
            return real(atlas, output_dir, basename)

        with mock.patch.object(densityDriver, "write_atlas", side_effect=deny_2x):
            with self.assertLogs("sprites.buildSprites", level="ERROR") as logs:
                code = self.build("night")

        self.assertEqual(code, 1)
        self.assertTrue(any("✗ 2x: Could not write sprite sheet" in line for line in logs.output))
        self.assertTrue((self.basemaps / "night" / "sprites" / "basemap.png").exists())

    def test_invalid_layout_option(self) -> None:
        self.assertEqual(self.build("night", "--row-capacity", "0"), 1)

    def test_basemap_required(self) -> None:
        with self.assertRaises(SystemExit):
            self.build()

    def test_tampered_index_fails_verification(self) -> None:
        self.assertEqual(self.build("night"), 0)
        path = self.basemaps / "night" / "sprites" / "basemap@2x.json"
        index = read_index(path)
        index["airport"]["x"] += 2
        path.write_text(json.dumps(index, indent=2), encoding="utf-8")
        self.assertEqual(self.verify("night"), 1)

    def test_missing_tier_fails_verification(self) -> None:
        self.assertEqual(self.build("night"), 0)
        (self.basemaps / "night" / "sprites" / "basemap@2x.png").unlink()
        results = verify_sprites_dir(self.basemaps / "night" / "sprites", expected_shields=3)
        self.assertFalse(results["ok"])
        self.assertTrue(any("missing file" in line for line in results["errors"]))


class VerifyTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        write_icons(self.root / "icons", POI_ICONS)
        write_basemap(self.root / "basemaps", "night")
        out = self.root / "sprites"
        code = buildSprites.main([
            "night", "-o", str(out),
            "--icons-dir", str(self.root / "icons"),
            "--basemaps-dir", str(self.root / "basemaps"),
            "--no-progress",
        ])
        self.assertEqual(code, 0)
        self.sprites = out

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_clean_output(self) -> None:
        results = verify_sprites_dir(self.sprites, expected_shields=3)
        self.assertTrue(results["ok"], results["errors"])
        self.assertEqual(results["warnings"], [])
        self.assertEqual(len(results["info"]), 2)

    def test_shields_in_shared_sheet_are_reported(self) -> None:
        results = verify_sprites_dir(self.sprites, expected_shields=0)
        self.assertFalse(results["ok"])
        self.assertTrue(any("found 3 shield(s)" in line for line in results["errors"]))

    def test_overlap_and_pixel_ratio_are_reported(self) -> None:
        path = self.sprites / "basemap.json"
        index = read_index(path)
        index["bar"]["x"] = index["airport"]["x"]
        index["cafe"]["pixelRatio"] = 2
        path.write_text(json.dumps(index), encoding="utf-8")

        errors = verify_sprites_dir(self.sprites, expected_shields=3)["errors"]
        self.assertIn("@1x: airport overlaps bar", errors)
        self.assertIn("@1x: cafe has pixelRatio 2, expected 1", errors)
        self.assertTrue(any(line.startswith("congruence: bar:") for line in errors))

    def test_malformed_index(self) -> None:
        (self.sprites / "basemap.json").write_text("[1, 2, 3]", encoding="utf-8")
        results = verify_sprites_dir(self.sprites, expected_shields=3)
        self.assertFalse(results["ok"])
        self.assertTrue(any("not a JSON object" in line for line in results["errors"]))


if __name__ == "__main__":
    unittest.main()
