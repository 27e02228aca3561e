from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
import math
from typing import Any, Union

from chartkit.data import to_number
from chartkit.geometry import Rect, polar_point, resolve_length
from chartkit.coordinates import PolarCoordinate
from chartkit.series.base import ChartType, Series, resolve_center, resolve_radius
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

Length = Union[float, str]
ColorStop = tuple[float, str]


@dataclass(frozen=True)
class GaugeOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    min: float = 0.0
    max: float = 100.0
    start_angle: float = 225.0
    end_angle: float = -45.0
    split_number: int = 10
    center: tuple[Length, Length] = ("50%", "50%")
    radius: Length = "75%"
    axis_line_width: float = 20.0
    axis_line_colors: tuple[ColorStop, ...] = ((1.0, "#e6ebf8"),)
    split_line_length: float = 15.0
    split_line_distance: float = 10.0
    split_line_color: str = "#999999"
    tick_split_number: int = 5
    tick_length: float = 6.0
    tick_distance: float = 10.0
    tick_color: str = "#999999"
    label_distance: float = 35.0
    label_color: str = "#666666"
    label_font_size: float = 12.0
    label_formatter: Union[str, Callable[[float], str], None] = None
    progress_show: bool = True
    progress_width: float = 20.0
    pointer_show: bool = True
    pointer_length: Length = "60%"
    pointer_width: float = 6.0
    anchor_show: bool = True
    anchor_size: float = 10.0
    anchor_color: str = "#ffffff"
    anchor_border_color: str = "#5470c6"
    title_show: bool = True
    title_offset: tuple[Length, Length] = (0.0, "20%")
    detail_show: bool = True
    detail_offset: tuple[Length, Length] = (0.0, "40%")
    detail_formatter: Union[str, Callable[[float], str], None] = None
    detail_font_size: float = 30.0

    def __post_init__(self) -> None:
        if self.split_number <= 0:
            raise ValueError("split_number must be > 0")
        if self.tick_split_number <= 0:
            raise ValueError("tick_split_number must be > 0")
        if self.max == self.min:
            raise ValueError("max must differ from min")


@dataclass(frozen=True)
class GaugeNeedle:
    data_index: int
    name: str
    value: float
    ratio: float
    angle: float


def value_angle(value: float, *, minimum: float, maximum: float, start_angle: float, end_angle: float) -> float:
    """Angle in degrees for `value`, clamped to the dial."""

    ratio = max(0.0, min(1.0, (value - minimum) / (maximum - minimum)))
    return start_angle - (start_angle - end_angle) * ratio


def _format(formatter: Union[str, Callable[[float], str], None], value: float, default: str) -> str:
    if callable(formatter):
        return formatter(value)
    if isinstance(formatter, str):
        return formatter.replace("{value}", f"{value:g}")
    return default


class GaugeSeries(Series[GaugeOptions]):
    series_type = ChartType.GAUGE
    options_class = GaugeOptions

    def geometry(self, rect: Rect) -> tuple[float, float, float]:
        cx, cy = resolve_center(self.options.center, rect)
        return (cx, cy, resolve_radius(self.options.radius, rect))

    def compute_needles(self) -> list[GaugeNeedle]:
        opts = self.options
        needles: list[GaugeNeedle] = []
        for index, raw in enumerate(opts.data):
            if isinstance(raw, Mapping):
                name, value = str(raw.get("name") or ""), to_number(raw.get("value"))
            else:
                name, value = "", to_number(raw)
            if value is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            ratio = max(0.0, min(1.0, (value - opts.min) / (opts.max - opts.min)))
            angle = value_angle(value, minimum=opts.min, maximum=opts.max, start_angle=opts.start_angle, end_angle=opts.end_angle)
            needles.append(GaugeNeedle(index, name, value, ratio, angle))
        return needles

    def _render(self, surface: Surface) -> None:
        needles = self.compute_needles()
        if not needles:
            return
        cx, cy, radius = self.geometry(self._layout_rect(surface))
        frame = PolarCoordinate(center=(cx, cy), radius=max(0.0, radius))
        opts = self.options
        start = math.radians(opts.start_angle)
        end = math.radians(opts.end_angle)
        total = start - end

        prev = 0.0
        axis_r = radius - opts.axis_line_width / 2.0
        for stop, color in opts.axis_line_colors:
            surface.arc(cx, cy, axis_r, start - total * prev, start - total * stop, Style(stroke=color, stroke_width=opts.axis_line_width))
            prev = stop

        split_outer = radius - opts.split_line_distance
        split_inner = split_outer - opts.split_line_length
        tick_outer = radius - opts.tick_distance
        tick_inner = tick_outer - opts.tick_length
        label_r = radius - opts.label_distance
        label_style = TextStyle(
            color=opts.label_color,
            font_size=opts.label_font_size,
            font_family=self.theme.font_family,
            align="center",
            baseline="middle",
        )
        split_style = Style(stroke=opts.split_line_color, stroke_width=2.0)
        tick_style = Style(stroke=opts.tick_color, stroke_width=1.0)
        total_ticks = opts.split_number * opts.tick_split_number
        for i in range(total_ticks + 1):
            angle = start - total * i / total_ticks
            if i % opts.tick_split_number == 0:
                x0, y0 = polar_point(cx, cy, split_outer, angle)
                x1, y1 = polar_point(cx, cy, split_inner, angle)
                surface.line(x0, y0, x1, y1, split_style)
                value = opts.min + (opts.max - opts.min) * (i // opts.tick_split_number) / opts.split_number
                lx, ly = polar_point(cx, cy, label_r, angle)
                surface.text(lx, ly, _format(opts.label_formatter, value, str(int(round(value)))), label_style)
            else:
                x0, y0 = polar_point(cx, cy, tick_outer, angle)
                x1, y1 = polar_point(cx, cy, tick_inner, angle)
                surface.line(x0, y0, x1, y1, tick_style)

        for needle in needles:
            color = self._needle_color(needle.data_index)
            angle = math.radians(needle.angle)
            if opts.progress_show:
                surface.arc(
                    cx,
                    cy,
                    radius - opts.progress_width / 2.0,
                    start,
                    angle,
                    Style(stroke=color, stroke_width=opts.progress_width),
                )
            length = resolve_length(opts.pointer_length, radius)
            if opts.pointer_show:
                half = opts.pointer_width / 2.0
                tip = polar_point(cx, cy, length, angle)
                side1 = polar_point(cx, cy, half, angle + math.pi / 2.0)
                side2 = polar_point(cx, cy, half, angle - math.pi / 2.0)
                surface.polygon([tip, side1, side2], Style(fill=color))
            if opts.anchor_show:
                surface.circle(
                    cx, cy, opts.anchor_size, Style(fill=opts.anchor_color, stroke=opts.anchor_border_color, stroke_width=3.0)
                )
            if opts.title_show and needle.name:
                tx = cx + resolve_length(opts.title_offset[0], radius)
                ty = cy + resolve_length(opts.title_offset[1], radius)
                surface.text(tx, ty, needle.name, TextStyle(color="#666666", font_size=14.0, font_family=self.theme.font_family, align="center", baseline="middle"))
            if opts.detail_show:
                dx = cx + resolve_length(opts.detail_offset[0], radius)
                dy = cy + resolve_length(opts.detail_offset[1], radius)
                surface.text(
                    dx,
                    dy,
                    _format(opts.detail_formatter, needle.value, f"{needle.value:.0f}"),
                    TextStyle(color=color, font_size=opts.detail_font_size, font_family=self.theme.font_family, align="center", baseline="middle"),
                )
            mx, my = self._polar_point(frame, length / 2.0, angle)
            self._publish(needle.data_index, mx, my, radius=max(length / 2.0, opts.pointer_width), value=needle.value, name=needle.name or None)

    def _needle_color(self, index: int) -> str:
        raw = self.options.data[index]
        if isinstance(raw, Mapping) and raw.get("color"):
            return str(raw["color"])
        return self.options.color or self.theme.color_for(index)
