from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from chartkit.data import item_name
from chartkit.geometry import Rect
from chartkit.scales import Scale
from chartkit.series.base import ChartType, Series, band_size, category_position, check_opacity, resolve_xy
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

DEFAULT_BAR_WIDTH_RATIO = 0.6


@dataclass(frozen=True)
class BarOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    bar_width: float | None = None
    bar_width_ratio: float = DEFAULT_BAR_WIDTH_RATIO
    border_radius: float | tuple[float, float, float, float] = 0.0
    horizontal: bool = False
    series_count: int = 1
    series_slot: int = 0
    bar_gap: float = 0.0
    base_value: float = 0.0
    opacity: float = 1.0

    def __post_init__(self) -> None:
        check_opacity("opacity", self.opacity)
        if not 0.0 < self.bar_width_ratio <= 1.0:
            raise ValueError("bar_width_ratio must be within (0, 1]")
        if self.bar_width is not None and self.bar_width <= 0:
            raise ValueError("bar_width must be > 0")
        if self.series_count < 1:
            raise ValueError("series_count must be >= 1")
        if not 0 <= self.series_slot < self.series_count:
            raise ValueError("series_slot must be within [0, series_count)")
        if not 0.0 <= self.bar_gap < 1.0:
            raise ValueError("bar_gap must be within [0, 1)")


@dataclass(frozen=True)
class BarGeometry:
    data_index: int
    rect: Rect
    value: float


class BarSeries(Series[BarOptions]):
    series_type = ChartType.BAR
    options_class = BarOptions

    def _axes(self) -> tuple[Scale | None, Scale | None]:
        if self.options.horizontal:
            return self.y_scale, self.x_scale
        return self.x_scale, self.y_scale

    def bar_thickness(self) -> float:
        category_scale, _ = self._axes()
        if self.options.bar_width is not None:
            return float(self.options.bar_width)
        return band_size(category_scale, len(self.options.data), self.options.bar_width_ratio)

    def compute_bars(self) -> list[BarGeometry]:
        category_scale, value_scale = self._axes()
        if category_scale is None or value_scale is None:
            return []
        total = self.bar_thickness()
        slot = total / self.options.series_count
        gap = slot * self.options.bar_gap
        thickness = slot - gap
        lo, hi = value_scale.range_extent()
        base = max(lo, min(hi, value_scale.map(self.options.base_value)))

        bars: list[BarGeometry] = []
        for index, raw in enumerate(self.options.data):
            resolved = resolve_xy(raw, index)
            if resolved is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            center = category_position(category_scale, index, resolved[0])
            pos = value_scale.map(resolved[1])
            if center != center or pos != pos:
                continue
            start = center - total / 2.0 + slot * self.options.series_slot + gap / 2.0
            low = min(pos, base)
            length = abs(pos - base)
            if self.options.horizontal:
                x, y = self._to_point(low, start)
                rect = Rect(x, y, length, thickness)
            else:
                x, y = self._to_point(start, low)
                rect = Rect(x, y, thickness, length)
            bars.append(BarGeometry(index, rect, resolved[1]))
        return bars

    def _render(self, surface: Surface) -> None:
        style = Style(fill=self.color, opacity=self.options.opacity)
        for bar in self.compute_bars():
            r = bar.rect
            surface.rect(r.x, r.y, r.width, r.height, style, radius=self.options.border_radius)
            self._publish(
                bar.data_index,
                r.x,
                r.y,
                width=r.width,
                height=r.height,
                value=bar.value,
                name=item_name(self.options.data[bar.data_index]),
            )
