from __future__ import annotations

from datetime import datetime
import unittest
from unittest import mock

from chartkit.colors import HEATMAP_PALETTE
from chartkit.config import DEFAULT_THEME
from chartkit.scales import BandScale, LinearScale, TimeScale
from chartkit.series import (
    AreaSeries,
    BarSeries,
    CandlestickSeries,
    HeatmapSeries,
    LineSeries,
    PictorialBarSeries,
    ScatterSeries,
)
from chartkit.surface import VectorSurface


def _axes(categories: list[str], width: float = 300.0) -> tuple[BandScale, LinearScale]:
    return BandScale(categories, (0.0, width)), LinearScale((0.0, 100.0), (200.0, 0.0))


def _value_axes() -> tuple[LinearScale, LinearScale]:
    return LinearScale((0.0, 4.0), (0.0, 400.0)), LinearScale((0.0, 10.0), (200.0, 0.0))


class LineSeriesTests(unittest.TestCase):
    def test_missing_value_breaks_run(self) -> None:
        x, y = _axes(["a", "b", "c"])
        series = LineSeries({"data": [10, None, 30]}, x_scale=x, y_scale=y)
        runs = series.compute_runs()
        self.assertEqual([[p.data_index for p in run] for run in runs], [[0], [2]])
        self.assertEqual(runs[0][0].point, (50.0, 180.0))
        self.assertEqual(runs[1][0].point, (250.0, 140.0))

    def test_connect_nulls_joins_runs(self) -> None:
        x, y = _axes(["a", "b", "c"])
        series = LineSeries({"data": [10, "n/a", 30], "connect_nulls": True}, x_scale=x, y_scale=y)
        runs = series.compute_runs()
        self.assertEqual(len(runs), 1)
        self.assertEqual([p.data_index for p in runs[0]], [0, 2])

    def test_render_publishes_point_positions(self) -> None:
        x, y = _axes(["a", "b", "c"])
        series = LineSeries({"data": [{"value": 10, "name": "first"}, 20, 30]}, x_scale=x, y_scale=y, series_index=2)
        series.render(VectorSurface(300, 200))
        positions = series.get_data_positions()
        self.assertEqual([p.key for p in positions], [(2, 0), (2, 1), (2, 2)])
        self.assertEqual(positions[0].name, "first")
        self.assertEqual(positions[1].radius, 3.0)
        self.assertEqual(positions[2].value, 30.0)

    def test_non_numeric_x_on_value_axis_is_skipped(self) -> None:
        x, y = _value_axes()
        series = LineSeries({"data": [[1, 2], ["bad", 3], [3, 4]]}, x_scale=x, y_scale=y)
        series.render(VectorSurface(400, 200))
        positions = series.get_data_positions()
        self.assertEqual([p.data_index for p in positions], [0, 2])
        self.assertEqual([p.x for p in positions], [100.0, 300.0])

    def test_render_is_idempotent(self) -> None:
        x, y = _axes(["a", "b"])
        series = LineSeries({"data": [1, 2]}, x_scale=x, y_scale=y)
        surface = VectorSurface(300, 200)
        series.render(surface)
        series.render(surface)
        self.assertEqual(len(series.get_data_positions()), 2)

    def test_series_color_falls_back_to_palette(self) -> None:
        x, y = _axes(["a"])
        self.assertEqual(LineSeries({"data": [1]}, x_scale=x, y_scale=y, series_index=1).color, DEFAULT_THEME.palette[1])
        self.assertEqual(LineSeries({"data": [1], "color": "#000000"}, x_scale=x, y_scale=y).color, "#000000")

    def test_unknown_option_rejected(self) -> None:
        with self.assertRaises(ValueError):
            LineSeries({"data": [1], "colour": "#000000"})

    def test_invalid_step_rejected(self) -> None:
        with self.assertRaises(ValueError):
            LineSeries({"step": "sideways"})

    def test_area_fills_down_to_zero_line(self) -> None:
        x, y = _axes(["a", "b"])
        series = AreaSeries({"data": [40, 60]}, x_scale=x, y_scale=y)
        surface = VectorSurface(300, 200)
        with mock.patch.object(surface, "area", wraps=surface.area) as spy:
            series.render(surface)
        spy.assert_called_once()
        self.assertEqual(spy.call_args.args[1], 200.0)
        self.assertEqual(series.baseline(), 200.0)

    def test_stacked_area_uses_lower_polyline(self) -> None:
        x, y = _axes(["a", "b"])
        series = AreaSeries({"data": [40, 60], "stack_base": (10, 20)}, x_scale=x, y_scale=y)
        surface = VectorSurface(300, 200)
        with mock.patch.object(surface, "area", wraps=surface.area) as spy:
            series.render(surface)
        self.assertEqual(spy.call_args.args[1], [(75.0, 180.0), (225.0, 160.0)])


class BarSeriesTests(unittest.TestCase):
    def test_vertical_bars_grow_from_base(self) -> None:
        x, y = _axes(["a", "b", "c"])
        bars = BarSeries({"data": [50, 100, 25]}, x_scale=x, y_scale=y).compute_bars()
        first = bars[0].rect
        self.assertEqual((first.x, first.y, first.width, first.height), (0.0, 100.0, 100.0, 100.0))
        self.assertEqual(bars[1].rect.height, 200.0)
        self.assertEqual(bars[2].value, 25.0)

    def test_grouped_bars_take_their_slot(self) -> None:
        x, y = _axes(["a", "b", "c"])
        bars = BarSeries({"data": [50], "series_count": 2, "series_slot": 1}, x_scale=x, y_scale=y).compute_bars()
        self.assertEqual((bars[0].rect.x, bars[0].rect.width), (50.0, 50.0))

    def test_bar_gap_shrinks_grouped_bars(self) -> None:
        x, y = _axes(["a", "b", "c"])
        options = {"data": [50], "series_count": 2, "series_slot": 0, "bar_gap": 0.2}
        rect = BarSeries(options, x_scale=x, y_scale=y).compute_bars()[0].rect
        self.assertEqual((rect.x, rect.width), (5.0, 40.0))

    def test_horizontal_bars_swap_axes(self) -> None:
        value_scale = LinearScale((0.0, 100.0), (0.0, 200.0))
        category_scale = BandScale(["a", "b"], (0.0, 100.0))
        series = BarSeries({"data": [50, 25], "horizontal": True}, x_scale=value_scale, y_scale=category_scale)
        rect = series.compute_bars()[0].rect
        self.assertEqual((rect.x, rect.y, rect.width, rect.height), (0.0, 0.0, 100.0, 50.0))

    def test_render_publishes_rect_extents(self) -> None:
        x, y = _axes(["a", "b", "c"])
        series = BarSeries({"data": [50, None, 25]}, x_scale=x, y_scale=y)
        series.render(VectorSurface(300, 200))
        positions = series.get_data_positions()
        self.assertEqual([p.data_index for p in positions], [0, 2])
        self.assertEqual((positions[0].width, positions[0].height), (100.0, 100.0))

    def test_non_numeric_x_on_value_axis_is_skipped(self) -> None:
        x, y = _value_axes()
        series = BarSeries({"data": [[1, 2], ["bad", 3], [3, 4]]}, x_scale=x, y_scale=y)
        series.render(VectorSurface(400, 200))
        self.assertEqual([p.data_index for p in series.get_data_positions()], [0, 2])

    def test_invalid_slot_rejected(self) -> None:
        with self.assertRaises(ValueError):
            BarSeries({"series_count": 2, "series_slot": 2})

    def test_out_of_range_opacity_rejected(self) -> None:
        cases = [(BarSeries, "opacity"), (ScatterSeries, "opacity"), (PictorialBarSeries, "opacity"), (LineSeries, "area_opacity")]
        for series_class, key in cases:
            with self.subTest(series=series_class.__name__):
                with self.assertRaises(ValueError):
                    series_class({key: 1.5})


class ScatterSeriesTests(unittest.TestCase):
    def test_callable_symbol_size_and_hit_radius(self) -> None:
        x, y = _axes(["a", "b", "c"])
        series = ScatterSeries(
            {"data": [["a", 20, 4], ["c", 50, 30]], "symbol_size": lambda raw: raw[2]},
            x_scale=x,
            y_scale=y,
        )
        series.render(VectorSurface(300, 200))
        first, second = series.get_data_positions()
        self.assertEqual((first.x, first.y), (50.0, 160.0))
        self.assertEqual(first.radius, 10.0)
        self.assertEqual((second.x, second.y), (250.0, 100.0))
        self.assertEqual(second.radius, 30.0)

    def test_non_numeric_x_on_value_axis_is_skipped(self) -> None:
        x, y = _value_axes()
        series = ScatterSeries({"data": [[1, 2], ["bad", 3], [3, 4]]}, x_scale=x, y_scale=y)
        series.render(VectorSurface(400, 200))
        self.assertEqual([p.data_index for p in series.get_data_positions()], [0, 2])

    def test_time_axis_accepts_datetimes_and_iso_strings(self) -> None:
        x = TimeScale((datetime(2024, 1, 1), datetime(2024, 1, 2)), (0.0, 240.0))
        y = LinearScale((0.0, 10.0), (200.0, 0.0))
        data = [[datetime(2024, 1, 1, 12), 3], ["2024-01-01T06:00", 4], ["soon", 5]]
        series = ScatterSeries({"data": data}, x_scale=x, y_scale=y)
        series.render(VectorSurface(240, 200))
        positions = series.get_data_positions()
        self.assertEqual([p.data_index for p in positions], [0, 1])
        self.assertAlmostEqual(positions[0].x, 120.0)
        self.assertAlmostEqual(positions[1].x, 60.0)


class CandlestickSeriesTests(unittest.TestCase):
    def test_candle_geometry(self) -> None:
        x, y = _axes(["d1", "d2"], width=200.0)
        series = CandlestickSeries(
            {"data": [[20, 40, 10, 50], {"open": 40, "close": 30, "low": 25, "high": 45}, ["bad"]]},
            x_scale=x,
            y_scale=y,
        )
        rising, falling = series.compute_candles()
        self.assertTrue(rising.rising)
        self.assertEqual((rising.body_top, rising.body_height), (120.0, 40.0))
        self.assertEqual((rising.high_y, rising.low_y), (100.0, 180.0))
        self.assertFalse(falling.rising)
        self.assertEqual(series.bar_width(), 70.0)

    def test_render_publishes_wick_extent(self) -> None:
        x, y = _axes(["d1", "d2"], width=200.0)
        series = CandlestickSeries({"data": [[20, 40, 10, 50], [40, 30, 25, 45]]}, x_scale=x, y_scale=y)
        series.render(VectorSurface(200, 200))
        first = series.get_data_positions()[0]
        self.assertEqual((first.x, first.y, first.width, first.height), (15.0, 100.0, 70.0, 80.0))
        self.assertEqual(first.value, (20.0, 40.0, 10.0, 50.0))

    def test_single_item_uses_fixed_width(self) -> None:
        x, y = _axes(["d1"], width=200.0)
        series = CandlestickSeries({"data": [[1, 2, 0, 3]]}, x_scale=x, y_scale=y)
        self.assertEqual(series.bar_width(), 20.0)


class HeatmapSeriesTests(unittest.TestCase):
    def _series(self, **options: object) -> HeatmapSeries:
        x = BandScale(["a", "b"], (0.0, 100.0))
        y = BandScale(["m", "n"], (0.0, 100.0))
        data = [["a", "m", 0], {"x": "b", "y": "n", "value": 10}, [0, 1, 5], ["a", "zz", 3]]
        return HeatmapSeries({"data": data, **options}, x_scale=x, y_scale=y)

    def test_cells_follow_band_axes(self) -> None:
        cells = self._series().compute_cells()
        self.assertEqual([c.data_index for c in cells], [0, 1, 2])
        self.assertEqual((cells[2].x, cells[2].y, cells[2].width, cells[2].height), (0.0, 50.0, 50.0, 50.0))

    def test_colors_span_palette(self) -> None:
        cells = self._series().compute_cells()
        self.assertEqual(cells[0].color, HEATMAP_PALETTE[0])
        self.assertEqual(cells[1].color, HEATMAP_PALETTE[-1])

    def test_visual_range_override(self) -> None:
        series = self._series(visual_min=0, visual_max=20)
        self.assertEqual(series.value_range(), (0.0, 20.0))
        self.assertNotEqual(series.compute_cells()[1].color, HEATMAP_PALETTE[-1])


class PictorialBarSeriesTests(unittest.TestCase):
    def test_repeat_count(self) -> None:
        x, y = _axes(["a"], width=100.0)
        repeat = PictorialBarSeries({"data": [50], "symbol_repeat": True}, x_scale=x, y_scale=y)
        bar = repeat.compute_bars()[0]
        self.assertEqual((bar.rect.x, bar.rect.y, bar.rect.width, bar.rect.height), (0.0, 100.0, 100.0, 100.0))
        self.assertEqual(bar.repeat_count, 5)
        fixed = PictorialBarSeries({"data": [50], "symbol_repeat": 3}, x_scale=x, y_scale=y)
        self.assertEqual(fixed.compute_bars()[0].repeat_count, 3)
        single = PictorialBarSeries({"data": [50]}, x_scale=x, y_scale=y)
        self.assertEqual(single.compute_bars()[0].repeat_count, 1)

    def test_clipped_repeat_stays_inside_bar(self) -> None:
        x, y = _axes(["a"], width=100.0)
        series = PictorialBarSeries(
            {"data": [50], "symbol_repeat": True, "symbol_clip": True}, x_scale=x, y_scale=y
        )
        surface = VectorSurface(100, 200)
        series.render(surface)
        rects = surface.find("rect")
        self.assertEqual(len(rects), 5)
        self.assertTrue(all(node.clip_id == "clip0" for node in rects))
        self.assertEqual(len(series.get_data_positions()), 1)


if __name__ == "__main__":
    unittest.main()
