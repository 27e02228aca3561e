from __future__ import annotations

import math
import unittest
from unittest import mock
import xml.etree.ElementTree as ET

import numpy as np

from chartkit.geometry import Rect
from chartkit.surface import RasterSurface, Style, TextStyle, VectorSurface, path_data
from chartkit.surface.raster.canvas import blend_mask, new_canvas
from chartkit.surface.vector import SVG_NS


def _tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


class RasterSurfaceTests(unittest.TestCase):
    def test_filled_rect_covers_interior_only(self) -> None:
        surface = RasterSurface(20, 20, background="#ffffff")
        surface.rect(5, 5, 10, 10, Style(fill="#ff0000"))
        self.assertEqual(surface.pixel(10, 10), (255, 0, 0, 255))
        self.assertEqual(surface.pixel(1, 1), (255, 255, 255, 255))
        self.assertEqual(surface.pixel(18, 10), (255, 255, 255, 255))

    def test_opacity_blends_source_over(self) -> None:
        surface = RasterSurface(10, 10, background="#ffffff")
        surface.rect(0, 0, 10, 10, Style(fill="#000000", opacity=0.5))
        r, g, b, a = surface.pixel(5, 5)
        self.assertTrue(120 <= r <= 135)
        self.assertEqual((r, g, b), (r, r, r))
        self.assertEqual(a, 255)

    def test_translate_and_restore(self) -> None:
        surface = RasterSurface(20, 20)
        surface.save()
        surface.translate(10, 0)
        surface.rect(0, 0, 5, 5, Style(fill="#0000ff"))
        surface.restore()
        surface.rect(0, 10, 5, 5, Style(fill="#00ff00"))
        self.assertEqual(surface.pixel(12, 2), (0, 0, 255, 255))
        self.assertEqual(surface.pixel(2, 2)[3], 0)
        self.assertEqual(surface.pixel(2, 12), (0, 255, 0, 255))

    def test_clip_limits_drawing(self) -> None:
        surface = RasterSurface(20, 20)
        surface.save()
        surface.clip(Rect(0, 0, 10, 20))
        surface.rect(0, 0, 20, 20, Style(fill="#ff0000"))
        surface.restore()
        self.assertEqual(surface.pixel(5, 5), (255, 0, 0, 255))
        self.assertEqual(surface.pixel(15, 5)[3], 0)

    def test_stroked_line_and_circle(self) -> None:
        surface = RasterSurface(40, 40)
        surface.line(0, 20, 39, 20, Style(stroke="#000000", stroke_width=3))
        self.assertEqual(surface.pixel(20, 20)[3], 255)
        surface.circle(20, 8, 5, Style(fill="#ff0000"))
        self.assertEqual(surface.pixel(20, 8)[:3], (255, 0, 0))

    def test_text_draws_ink_and_measures(self) -> None:
        surface = RasterSurface(80, 30, background="#ffffff")
        before = surface.canvas.copy()
        surface.text(4, 15, "Hello", TextStyle(color="#000000", font_size=14, baseline="middle"))
        self.assertFalse(np.array_equal(before, surface.canvas))
        self.assertGreater(surface.measure_text("Hello"), 0.0)
        self.assertGreater(surface.measure_text("Hello world"), surface.measure_text("Hello"))

    def test_to_image_round_trips_canvas(self) -> None:
        surface = RasterSurface(12, 7, background="#102030")
        image = surface.to_image()
        self.assertEqual(image.size, (12, 7))
        self.assertEqual(image.mode, "RGBA")
        self.assertEqual(image.getpixel((0, 0)), (16, 32, 48, 255))

    def test_blend_mask_respects_coverage(self) -> None:
        canvas = new_canvas(4, 4, (0, 0, 0, 0))
        mask = np.zeros((2, 2), dtype=np.uint8)
        mask[0, 0] = 255
        blend_mask(canvas, 1, 1, mask, (10, 20, 30, 255))
        self.assertEqual(tuple(canvas[1, 1]), (10, 20, 30, 255))
        self.assertEqual(int(canvas[2, 2, 3]), 0)


class VectorSurfaceTests(unittest.TestCase):
    def test_records_native_primitives(self) -> None:
        surface = VectorSurface(100, 50)
        surface.rect(1, 2, 30, 20, Style(fill="#ff0000"), radius=4)
        surface.circle(50, 25, 5, Style(fill="#00ff00", stroke="#000000"))
        surface.text(60, 10, "label", TextStyle(align="center", baseline="middle"))
        self.assertEqual([node.tag for node in surface.nodes], ["rect", "circle", "text"])
        rect = surface.find("rect")[0]
        self.assertEqual(rect.attrs["rx"], "4")
        self.assertEqual(surface.find("text")[0].attrs["text-anchor"], "middle")

    def test_svg_export_contains_recorded_shapes(self) -> None:
        surface = VectorSurface(100, 50, background="#ffffff")
        surface.polygon([(0, 0), (10, 0), (10, 10)], Style(fill="#123456"))
        surface.text(5, 5, "hi", TextStyle())
        root = ET.fromstring(surface.to_svg())
        self.assertEqual(root.attrib["viewBox"], "0 0 100 50")
        paths = list(root.iter(_tag("path")))
        self.assertEqual(len(paths), 1)
        self.assertEqual(paths[0].attrib["fill"], "#123456")
        self.assertEqual([t.text for t in root.iter(_tag("text"))], ["hi"])

    def test_transform_and_clip_are_exported(self) -> None:
        surface = VectorSurface(100, 100)
        surface.save()
        surface.translate(10, 20)
        surface.clip(Rect(0, 0, 50, 50))
        surface.rect(0, 0, 80, 80, Style(fill="#000000"))
        surface.restore()
        surface.rect(0, 0, 5, 5, Style(fill="#000000"))
        first, second = surface.find("rect")
        self.assertEqual(first.transform, "translate(10 20)")
        self.assertEqual(first.clip_id, "clip0")
        self.assertIsNone(second.transform)
        self.assertIsNone(second.clip_id)
        root = ET.fromstring(surface.to_svg())
        self.assertEqual(len(list(root.iter(_tag("clipPath")))), 1)

    def test_default_primitives_route_through_path(self) -> None:
        surface = VectorSurface(100, 100)
        with mock.patch.object(surface, "path", wraps=surface.path) as spy:
            surface.polygon([(0, 0), (10, 0), (5, 5)], Style(fill="#000000"))
            surface.sector(50, 50, 10, 20, 0.0, math.pi / 2, Style(fill="#000000"))
            surface.polyline([(0, 0)], Style(stroke="#000000"))
        self.assertEqual(spy.call_count, 2)

    def test_full_circle_arc_is_split(self) -> None:
        d = path_data([("M", 20, 10), ("A", 10, 10, 10, 0.0, 2 * math.pi, True), ("Z",)])
        self.assertEqual(d.count("A"), 2)
        self.assertTrue(d.endswith("Z"))

    def test_rejects_unknown_path_command(self) -> None:
        with self.assertRaises(ValueError):
            path_data([("B", 1, 2)])


if __name__ == "__main__":
    unittest.main()
