from __future__ import annotations

import math
import unittest
from unittest import mock

from chartkit.coordinates import PolarCoordinate
from chartkit.geometry import Rect
from chartkit.series import (
    FunnelSeries,
    GaugeSeries,
    GraphSeries,
    PieSeries,
    RadarSeries,
    RingProgressSeries,
    SankeySeries,
)
from chartkit.series.gauge import value_angle
from chartkit.series.radar import RadarIndicator, parse_indicator
from chartkit.surface import VectorSurface


class PieSeriesTests(unittest.TestCase):
    def test_sweeps_cover_full_turn(self) -> None:
        series = PieSeries({"data": [1, 1, 2]})
        sectors = series.compute_sectors(0.0, 50.0)
        sweeps = [abs(s.end_angle - s.start_angle) for s in sectors]
        self.assertAlmostEqual(sum(sweeps), 2.0 * math.pi)
        self.assertAlmostEqual(sectors[0].start_angle, math.pi / 2.0)
        self.assertAlmostEqual(sectors[0].end_angle, 0.0)
        self.assertAlmostEqual(sectors[2].percentage, 0.5)

    def test_counter_clockwise_direction(self) -> None:
        sectors = PieSeries({"data": [1, 1], "clockwise": False}).compute_sectors(0.0, 50.0)
        self.assertAlmostEqual(sectors[0].end_angle, 1.5 * math.pi)

    def test_pad_angle_reduces_sweeps(self) -> None:
        sectors = PieSeries({"data": [1, 1], "pad_angle": 10}).compute_sectors(0.0, 50.0)
        sweeps = [abs(s.end_angle - s.start_angle) for s in sectors]
        self.assertAlmostEqual(sum(sweeps), 2.0 * math.pi - 2.0 * math.radians(10))

    def test_rose_radius_scales_by_value(self) -> None:
        sectors = PieSeries({"data": [1, 2], "rose_type": "radius"}).compute_sectors(10.0, 50.0)
        self.assertEqual([s.outer_radius for s in sectors], [30.0, 50.0])

    def test_zero_total_draws_nothing(self) -> None:
        self.assertEqual(PieSeries({"data": [0, None]}).compute_sectors(0.0, 50.0), [])

    def test_geometry_resolves_percentages(self) -> None:
        rect = Rect(0.0, 0.0, 200.0, 100.0)
        self.assertEqual(PieSeries().geometry(rect), (100.0, 50.0, 0.0, 37.5))
        ring = PieSeries({"radius": ("40%", "80%")})
        self.assertEqual(ring.geometry(rect), (100.0, 50.0, 20.0, 40.0))

    def test_label_formatter(self) -> None:
        series = PieSeries({"data": [{"name": "a", "value": 1}, {"name": "b", "value": 3}], "label_formatter": "{name}: {percent}"})
        sector = series.compute_sectors(0.0, 10.0)[0]
        self.assertEqual(series.format_label(sector), "a: 25.0%")

    def test_render_publishes_sector_midpoints(self) -> None:
        series = PieSeries({"data": [{"name": "a", "value": 1}, {"name": "b", "value": 1}], "label_show": False})
        series.render(VectorSurface(200, 200))
        positions = series.get_data_positions()
        self.assertEqual([p.name for p in positions], ["a", "b"])
        self.assertEqual(positions[0].radius, 37.5)

    def test_hit_points_convert_through_polar_frame(self) -> None:
        original = PolarCoordinate.data_to_point
        series = PieSeries({"data": [1, 1], "label_show": False})
        with mock.patch.object(PolarCoordinate, "data_to_point", autospec=True, side_effect=original) as spy:
            series.render(VectorSurface(200, 200))
        self.assertEqual(spy.call_count, 2)
        first = series.get_data_positions()[0]
        self.assertAlmostEqual(first.x, 137.5)
        self.assertAlmostEqual(first.y, 100.0)


class GaugeSeriesTests(unittest.TestCase):
    def test_value_angle_is_clamped(self) -> None:
        kwargs = {"minimum": 0.0, "maximum": 100.0, "start_angle": 225.0, "end_angle": -45.0}
        self.assertEqual(value_angle(50.0, **kwargs), 90.0)
        self.assertEqual(value_angle(150.0, **kwargs), -45.0)
        self.assertEqual(value_angle(-10.0, **kwargs), 225.0)

    def test_needles_skip_missing_values(self) -> None:
        needles = GaugeSeries({"data": [{"name": "speed", "value": 25}, None]}).compute_needles()
        self.assertEqual(len(needles), 1)
        self.assertEqual((needles[0].name, needles[0].ratio), ("speed", 0.25))

    def test_render_publishes_pointer_midpoint(self) -> None:
        series = GaugeSeries({"data": [50]})
        series.render(VectorSurface(200, 200))
        (position,) = series.get_data_positions()
        self.assertAlmostEqual(position.x, 100.0)
        self.assertAlmostEqual(position.y, 77.5)
        self.assertEqual(position.value, 50.0)

    def test_degenerate_range_rejected(self) -> None:
        with self.assertRaises(ValueError):
            GaugeSeries({"min": 10, "max": 10})


class RingProgressSeriesTests(unittest.TestCase):
    def test_concentric_rings_share_width(self) -> None:
        series = RingProgressSeries({"data": [0.25, 1.5]})
        rings = series.compute_rings(60.0, 70.0)
        self.assertEqual([r.width for r in rings], [3.5, 3.5])
        self.assertEqual(rings[0].outer_radius, 70.0)
        self.assertEqual(rings[1].inner_radius, 60.0)
        self.assertAlmostEqual(rings[0].end_angle, 0.0)
        self.assertEqual(rings[1].value, 1.0)

    def test_single_ring_fills_band(self) -> None:
        (ring,) = RingProgressSeries({"data": [0.5]}).compute_rings(60.0, 70.0)
        self.assertEqual((ring.inner_radius, ring.outer_radius), (60.0, 70.0))

    def test_render_publishes_progress_end(self) -> None:
        series = RingProgressSeries({"data": [{"name": "cpu", "value": 0.25}]})
        series.render(VectorSurface(200, 200))
        (position,) = series.get_data_positions()
        self.assertAlmostEqual(position.x, 165.0)
        self.assertAlmostEqual(position.y, 100.0)
        self.assertEqual(position.name, "cpu")


class RadarSeriesTests(unittest.TestCase):
    INDICATORS = ({"name": "a"}, {"name": "b"}, {"name": "c", "max": 10}, "d")

    def test_parse_indicator_forms(self) -> None:
        self.assertEqual(parse_indicator("speed"), RadarIndicator("speed"))
        self.assertEqual(parse_indicator({"name": "x", "max": 5, "min": 1}), RadarIndicator("x", 5.0, 1.0))

    def test_fewer_than_three_indicators_warns(self) -> None:
        series = RadarSeries({"indicator": ("a", "b"), "data": ([1, 2],)})
        with self.assertLogs("chartkit.series.radar", level="WARNING"):
            series.render(VectorSurface(200, 200))
        self.assertEqual(series.get_data_positions(), [])

    def test_vertices_follow_axes(self) -> None:
        series = RadarSeries({"indicator": self.INDICATORS})
        points = series.vertex_points([100, 50, 0, 100], 100.0, 100.0, 60.0)
        self.assertAlmostEqual(points[0][0], 100.0)
        self.assertAlmostEqual(points[0][1], 40.0)
        self.assertAlmostEqual(points[1][0], 130.0)
        self.assertAlmostEqual(points[1][1], 100.0)
        self.assertAlmostEqual(points[2][0], 100.0)
        self.assertAlmostEqual(points[2][1], 100.0)
        self.assertAlmostEqual(points[3][0], 40.0)

    def test_values_clamped_to_indicator_range(self) -> None:
        series = RadarSeries({"indicator": self.INDICATORS})
        points = series.vertex_points([500, None, 20, -5], 0.0, 0.0, 10.0)
        self.assertAlmostEqual(points[0][1], -10.0)
        self.assertAlmostEqual(points[2][1], 10.0)
        self.assertAlmostEqual(points[3][0], 0.0)

    def test_render_publishes_each_vertex(self) -> None:
        series = RadarSeries({"indicator": self.INDICATORS, "data": ({"name": "team", "value": [10, 20, 3, 40]},)})
        series.render(VectorSurface(200, 200))
        positions = series.get_data_positions()
        self.assertEqual(len(positions), 4)
        self.assertEqual({p.data_index for p in positions}, {0})
        self.assertEqual(positions[2].value, 3.0)
        self.assertEqual(positions[0].name, "team")

    def test_vertices_convert_through_polar_frame(self) -> None:
        original = PolarCoordinate.data_to_point
        series = RadarSeries({"indicator": self.INDICATORS, "data": ([10, 20, 3, 40],)})
        with mock.patch.object(PolarCoordinate, "data_to_point", autospec=True, side_effect=original) as spy:
            series.render(VectorSurface(200, 200))
        self.assertEqual(spy.call_count, 4)
        frame = PolarCoordinate(center=(100.0, 100.0), radius=65.0)
        first = series.get_data_positions()[0]
        expected = frame.data_to_point((90.0, 6.5))
        self.assertAlmostEqual(first.x, expected[0])
        self.assertAlmostEqual(first.y, expected[1])


class FunnelSeriesTests(unittest.TestCase):
    DATA = ({"name": "visit", "value": 60}, {"name": "lead", "value": 100}, {"name": "sale", "value": 20})

    def test_descending_widths(self) -> None:
        segments = FunnelSeries({"data": self.DATA}).compute_segments(Rect(0.0, 0.0, 100.0, 100.0))
        self.assertEqual([s.name for s in segments], ["lead", "visit", "sale"])
        self.assertEqual([s.top_width for s in segments], [80.0, 48.0, 16.0])
        self.assertEqual(segments[0].bottom_width, segments[1].top_width)
        self.assertAlmostEqual(segments[2].bottom_width, 16.0 * 0.7)
        self.assertEqual((segments[0].x, segments[0].y), (10.0, 10.0))
        self.assertAlmostEqual(segments[1].y, 10.0 + segments[0].height + 2.0)

    def test_ascending_sort(self) -> None:
        segments = FunnelSeries({"data": self.DATA, "sort": "ascending"}).compute_segments(Rect(0.0, 0.0, 100.0, 100.0))
        self.assertEqual([s.value for s in segments], [20.0, 60.0, 100.0])

    def test_left_aligned_corners(self) -> None:
        segments = FunnelSeries({"data": self.DATA, "align": "left"}).compute_segments(Rect(0.0, 0.0, 100.0, 100.0))
        corners = segments[0].corners()
        self.assertEqual(corners[0], (10.0, 10.0))
        self.assertEqual(corners[3][0], 10.0)
        self.assertEqual(corners[2][0], 58.0)

    def test_render_publishes_segments(self) -> None:
        series = FunnelSeries({"data": self.DATA, "label_position": "inside"})
        series.render(VectorSurface(100, 100))
        positions = series.get_data_positions()
        self.assertEqual([p.data_index for p in positions], [1, 0, 2])
        self.assertEqual(positions[0].width, 80.0)

    def test_label_formatter(self) -> None:
        series = FunnelSeries({"data": self.DATA, "label_formatter": "{name} ({value})"})
        segment = series.compute_segments(Rect(0.0, 0.0, 100.0, 100.0))[0]
        self.assertEqual(series.format_label(segment), "lead (100)")

    def test_invalid_sort_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FunnelSeries({"sort": "random"})


class OptionValidationTests(unittest.TestCase):
    def test_out_of_range_opacity_rejected(self) -> None:
        cases = [
            (FunnelSeries, "opacity"),
            (RadarSeries, "area_opacity"),
            (RingProgressSeries, "track_opacity"),
            (GraphSeries, "line_opacity"),
            (SankeySeries, "link_opacity"),
        ]
        for series_class, key in cases:
            for value in (-0.1, 1.5):
                with self.subTest(series=series_class.__name__, value=value):
                    with self.assertRaises(ValueError):
                        series_class({key: value})


if __name__ == "__main__":
    unittest.main()
