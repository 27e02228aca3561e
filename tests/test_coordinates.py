from __future__ import annotations

import unittest

from chartkit.coordinates import CartesianCoordinate, PolarCoordinate
from chartkit.geometry import Rect


class CartesianCoordinateTests(unittest.TestCase):
    def test_passthrough_with_origin(self) -> None:
        coord = CartesianCoordinate(Rect(0, 0, 100, 100), origin=(10.0, 5.0))
        self.assertEqual(coord.data_to_point((1.0, 2.0)), (11.0, 7.0))
        self.assertEqual(coord.point_to_data((11.0, 7.0)), (1.0, 2.0))

    def test_contains_and_update(self) -> None:
        coord = CartesianCoordinate(Rect(0, 0, 100, 100))
        self.assertTrue(coord.contains_point((50, 50)))
        coord.update(Rect(200, 200, 10, 10))
        self.assertFalse(coord.contains_point((50, 50)))
        self.assertEqual(coord.get_bounding_rect(), Rect(200, 200, 10, 10))


class PolarCoordinateTests(unittest.TestCase):
    def test_angle_radius_round_trip(self) -> None:
        coord = PolarCoordinate(center=(100.0, 100.0), radius=50.0)
        x, y = coord.data_to_point((90.0, 50.0))
        self.assertAlmostEqual(x, 100.0)
        self.assertAlmostEqual(y, 50.0)
        angle, radius = coord.point_to_data((150.0, 100.0))
        self.assertAlmostEqual(angle, 0.0)
        self.assertAlmostEqual(radius, 50.0)
        self.assertAlmostEqual(coord.get_angle((100.0, 150.0)), 270.0)

    def test_contains_respects_inner_radius(self) -> None:
        coord = PolarCoordinate(center=(0.0, 0.0), radius=10.0, inner_radius=5.0)
        self.assertFalse(coord.contains_point((1.0, 1.0)))
        self.assertTrue(coord.contains_point((7.0, 0.0)))
        self.assertFalse(coord.contains_point((11.0, 0.0)))

    def test_rejects_inner_radius_outside_radius(self) -> None:
        with self.assertRaises(ValueError):
            PolarCoordinate(radius=10.0, inner_radius=20.0)

    def test_update_refits_to_rect(self) -> None:
        coord = PolarCoordinate(center=(0.0, 0.0), radius=100.0, inner_radius=50.0)
        coord.update(Rect(0, 0, 200, 100))
        self.assertEqual(coord.center, (100.0, 50.0))
        self.assertEqual(coord.radius, 50.0)
        self.assertEqual(coord.inner_radius, 25.0)
        self.assertEqual(coord.get_bounding_rect(), Rect(50.0, 0.0, 100.0, 100.0))


if __name__ == "__main__":
    unittest.main()
