from __future__ import annotations

import math
import unittest

from chartkit.geometry import (
    Rect,
    dash_polyline,
    flatten_path,
    path_bounds,
    polar_point,
    polyline_path,
    resolve_length,
    rounded_rect_path,
    sector_path,
    smooth_path,
    step_points,
    union_rect,
)


class RectTests(unittest.TestCase):
    def test_rejects_negative_size(self) -> None:
        with self.assertRaises(ValueError):
            Rect(0, 0, -1, 5)

    def test_edges_contains_and_inset(self) -> None:
        rect = Rect(10, 20, 100, 50)
        self.assertEqual((rect.right, rect.bottom), (110, 70))
        self.assertEqual(rect.center, (60.0, 45.0))
        self.assertTrue(rect.contains(10, 70))
        self.assertFalse(rect.contains(9.9, 30))
        self.assertEqual(rect.inset(5, 5, 5, 5), Rect(15, 25, 90, 40))
        self.assertEqual(rect.inset(80, 0, 80, 0).width, 0.0)

    def test_union(self) -> None:
        self.assertEqual(union_rect(Rect(0, 0, 10, 10), Rect(5, -5, 10, 10)), Rect(0, -5, 15, 15))
        self.assertEqual(union_rect(None, Rect(1, 1, 1, 1)), Rect(1, 1, 1, 1))


class PathHelperTests(unittest.TestCase):
    def test_resolve_length(self) -> None:
        self.assertEqual(resolve_length("50%", 200), 100.0)
        self.assertEqual(resolve_length(" 30 ", 200), 30.0)
        self.assertEqual(resolve_length(12, 200), 12.0)
        self.assertEqual(resolve_length(None, 200, 7.0), 7.0)

    def test_polar_point_is_counter_clockwise_in_screen_space(self) -> None:
        x, y = polar_point(0, 0, 10, math.pi / 2)
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, -10.0)

    def test_smooth_path_passes_through_points(self) -> None:
        points = [(0.0, 0.0), (10.0, 10.0), (20.0, 0.0)]
        commands = smooth_path(points)
        self.assertEqual(commands[0], ("M", 0.0, 0.0))
        self.assertEqual([c[0] for c in commands[1:]], ["C", "C"])
        self.assertEqual(commands[1][5:], (10.0, 10.0))
        self.assertEqual(commands[2][5:], (20.0, 0.0))
        self.assertEqual(smooth_path(points, 0.0), polyline_path(points))

    def test_step_points_modes(self) -> None:
        pts = [(0.0, 0.0), (10.0, 10.0)]
        self.assertEqual(step_points(pts, "start"), [(0.0, 0.0), (0.0, 10.0), (10.0, 10.0)])
        self.assertEqual(step_points(pts, "end"), [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)])
        self.assertEqual(step_points(pts, "middle"), [(0.0, 0.0), (5.0, 0.0), (5.0, 10.0), (10.0, 10.0)])
        with self.assertRaises(ValueError):
            step_points(pts, "sideways")

    def test_rounded_rect_clamps_radius(self) -> None:
        commands = rounded_rect_path(0, 0, 10, 4, 10)
        self.assertEqual(commands[0], ("M", 2.0, 0))
        self.assertEqual(commands[-1], ("Z",))

    def test_flatten_closed_square(self) -> None:
        square = polyline_path([(0, 0), (10, 0), (10, 10), (0, 10)], closed=True)
        polys = flatten_path(square)
        self.assertEqual(len(polys), 1)
        self.assertEqual(polys[0][0], polys[0][-1])
        self.assertEqual(len(polys[0]), 5)

    def test_flatten_rejects_unknown_command(self) -> None:
        with self.assertRaises(ValueError):
            flatten_path([("M", 0, 0), ("X", 1, 1)])

    def test_half_disc_bounds(self) -> None:
        bounds = path_bounds(sector_path(50, 50, 0, 10, 0, math.pi))
        assert bounds is not None
        self.assertAlmostEqual(bounds.x, 40.0)
        self.assertAlmostEqual(bounds.y, 40.0)
        self.assertAlmostEqual(bounds.width, 20.0)
        self.assertAlmostEqual(bounds.height, 10.0)

    def test_dash_polyline_splits_runs(self) -> None:
        runs = dash_polyline([(0.0, 0.0), (20.0, 0.0)], [5, 5])
        self.assertEqual(runs, [[(0.0, 0.0), (5.0, 0.0)], [(10.0, 0.0), (15.0, 0.0)]])
        self.assertEqual(dash_polyline([(0.0, 0.0), (3.0, 0.0)], []), [[(0.0, 0.0), (3.0, 0.0)]])


if __name__ == "__main__":
    unittest.main()
