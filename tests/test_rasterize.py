#!/usr/bin/env python3

import tempfile
import unittest
from pathlib import Path

from sprites.errors import RasterizationError
from sprites.rasterize import fit_size, rasterize, rasterize_file

from support import SQUARE_SVG, WIDE_SVG


class RasterizeTests(unittest.TestCase):
    def test_exact_target_size(self) -> None:
        for width, height in [(21, 21), (42, 42), (28, 28), (32, 34)]:
            tile = rasterize(SQUARE_SVG, width, height)
            self.assertEqual(tile.size, (width, height))
            self.assertEqual(tile.image.mode, "RGBA")

    def test_pixel_ratio_is_recorded(self) -> None:
        tile = rasterize(SQUARE_SVG, 42, 42, pixel_ratio=2)
        self.assertEqual(tile.pixel_ratio, 2)

    def test_wide_source_is_padded_not_stretched(self) -> None:
        tile = rasterize(WIDE_SVG, 21, 21)
        self.assertEqual(tile.size, (21, 21))
        # 30x10 fits as 21x7, centered vertically at y=7
        self.assertEqual(tile.image.getpixel((10, 0))[3], 0)
        self.assertEqual(tile.image.getpixel((10, 20))[3], 0)
        self.assertEqual(tile.image.getpixel((10, 10)), (255, 0, 0, 255))
        self.assertEqual(tile.image.getbbox(), (0, 7, 21, 14))

    def test_accepts_bytes(self) -> None:
        tile = rasterize(SQUARE_SVG.encode("utf-8"), 21, 21)
        self.assertEqual(tile.size, (21, 21))

    def test_rendering_is_deterministic(self) -> None:
        first = rasterize(SQUARE_SVG, 42, 42)
        second = rasterize(SQUARE_SVG, 42, 42)
        self.assertEqual(first.image.tobytes(), second.image.tobytes())

    def test_unparseable_document(self) -> None:
        with self.assertRaises(RasterizationError):
            rasterize("<svg this is not xml", 21, 21)

    def test_empty_document(self) -> None:
        with self.assertRaises(RasterizationError):
            rasterize("   ", 21, 21)

    def test_invalid_target(self) -> None:
        with self.assertRaises(RasterizationError):
            rasterize(SQUARE_SVG, 0, 21)

    def test_rasterize_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "icon.svg"
            path.write_text(SQUARE_SVG, encoding="utf-8")
            self.assertEqual(rasterize_file(path, 21, 21).size, (21, 21))
            with self.assertRaises(RasterizationError):
                rasterize_file(Path(td) / "missing.svg", 21, 21)

    def test_fit_size(self) -> None:
        self.assertEqual(fit_size(30, 10, 21, 21), (21, 7))
        self.assertEqual(fit_size(10, 30, 21, 21), (7, 21))
        self.assertEqual(fit_size(126, 127.195, 28, 28), (28, 28))


if __name__ == "__main__":
    unittest.main()
