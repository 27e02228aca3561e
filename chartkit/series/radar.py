from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
import math
from typing import Any, Literal, Union

from chartkit.data import to_number
from chartkit.geometry import Point, Rect, polar_point
from chartkit.coordinates import PolarCoordinate
from chartkit.series.base import ChartType, Series, check_opacity, resolve_center, resolve_radius
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

Length = Union[float, str]
LINE_DASHES = {"solid": None, "dashed": (5.0, 5.0), "dotted": (2.0, 2.0)}
MIN_INDICATORS = 3


@dataclass(frozen=True)
class RadarIndicator:
    name: str
    max: float = 100.0
    min: float = 0.0


@dataclass(frozen=True)
class RadarOptions:
    indicator: tuple[Any, ...] = ()
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    center: tuple[Length, Length] = ("50%", "50%")
    radius: Length = "65%"
    start_angle: float = 90.0
    split_number: int = 5
    shape: Literal["polygon", "circle"] = "polygon"
    split_line_color: str = "#dddddd"
    split_area_colors: tuple[str, ...] = ()
    axis_line_color: str = "#bbbbbb"
    axis_name_color: str = "#666666"
    axis_name_font_size: float = 12.0
    area_opacity: float = 0.3
    line_width: float = 2.0
    line_type: Literal["solid", "dashed", "dotted"] = "solid"
    symbol_size: float = 4.0

    def __post_init__(self) -> None:
        check_opacity("area_opacity", self.area_opacity)
        if self.split_number <= 0:
            raise ValueError("split_number must be > 0")
        if self.shape not in {"polygon", "circle"}:
            raise ValueError("shape must be `polygon` or `circle`")
        if self.line_type not in LINE_DASHES:
            raise ValueError("line_type must be one of: solid, dashed, dotted")


def parse_indicator(raw: Any) -> RadarIndicator:
    if isinstance(raw, RadarIndicator):
        return raw
    if isinstance(raw, Mapping):
        maximum = to_number(raw.get("max"))
        minimum = to_number(raw.get("min"))
        return RadarIndicator(
            name=str(raw.get("name", "")),
            max=100.0 if maximum is None else maximum,
            min=0.0 if minimum is None else minimum,
        )
    return RadarIndicator(name=str(raw))


class RadarSeries(Series[RadarOptions]):
    series_type = ChartType.RADAR
    options_class = RadarOptions

    @property
    def indicators(self) -> list[RadarIndicator]:
        return [parse_indicator(raw) for raw in self.options.indicator]

    def geometry(self, rect: Rect) -> tuple[float, float, float]:
        cx, cy = resolve_center(self.options.center, rect)
        return (cx, cy, resolve_radius(self.options.radius, rect))

    def axis_angle(self, index: int, count: int) -> float:
        return math.radians(self.options.start_angle) - index * (2.0 * math.pi / count)

    def vertex_points(self, values: Any, cx: float, cy: float, radius: float) -> list[Point]:
        indicators = self.indicators
        frame = PolarCoordinate(center=(cx, cy), radius=max(0.0, radius))
        points: list[Point] = []
        seq = values if isinstance(values, (list, tuple)) else ()
        for i, ind in enumerate(indicators):
            value = to_number(seq[i]) if i < len(seq) else None
            span = ind.max - ind.min
            ratio = ((value or 0.0) - ind.min) / span if span else 0.0
            r = radius * max(0.0, min(1.0, ratio))
            points.append(self._polar_point(frame, r, self.axis_angle(i, len(indicators))))
        return points

    def _ring(self, cx: float, cy: float, r: float, count: int) -> list[Point]:
        return [polar_point(cx, cy, r, self.axis_angle(i, count)) for i in range(count)]

    def _render(self, surface: Surface) -> None:
        indicators = self.indicators
        if len(indicators) < MIN_INDICATORS:
            LOGGER.warning("radar %s needs at least %s indicators, got %s", self.name, MIN_INDICATORS, len(indicators))
            return
        if not self.options.data:
            return
        cx, cy, radius = self.geometry(self._layout_rect(surface))
        n = len(indicators)
        opts = self.options

        for level in range(opts.split_number, 0, -1):
            r = radius * level / opts.split_number
            if opts.split_area_colors:
                fill = Style(fill=opts.split_area_colors[(opts.split_number - level) % len(opts.split_area_colors)])
                if opts.shape == "circle":
                    surface.circle(cx, cy, r, fill)
                else:
                    surface.polygon(self._ring(cx, cy, r, n), fill)
            line = Style(stroke=opts.split_line_color, stroke_width=1.0)
            if opts.shape == "circle":
                surface.circle(cx, cy, r, line)
            else:
                surface.polygon(self._ring(cx, cy, r, n), line)

        axis_style = Style(stroke=opts.axis_line_color, stroke_width=1.0)
        for i, ind in enumerate(indicators):
            angle = self.axis_angle(i, n)
            ex, ey = polar_point(cx, cy, radius, angle)
            surface.line(cx, cy, ex, ey, axis_style)
            nx, ny = polar_point(cx, cy, radius + 15.0, angle)
            cos_a = math.cos(angle)
            align = "center" if abs(cos_a) < 0.17 else ("left" if cos_a > 0 else "right")
            surface.text(
                nx,
                ny,
                ind.name,
                TextStyle(
                    color=opts.axis_name_color,
                    font_size=opts.axis_name_font_size,
                    font_family=self.theme.font_family,
                    align=align,  # type: ignore[arg-type]
                    baseline="middle",
                ),
            )

        for index, raw in enumerate(opts.data):
            values = raw.get("value") if isinstance(raw, Mapping) else raw
            if not isinstance(values, (list, tuple)):
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            color = self._item_color(index)
            points = self.vertex_points(values, cx, cy, radius)
            surface.polygon(points, Style(fill=color, opacity=opts.area_opacity))
            surface.polygon(points, Style(stroke=color, stroke_width=opts.line_width, dash=LINE_DASHES[opts.line_type]))
            name = str(raw.get("name")) if isinstance(raw, Mapping) and raw.get("name") is not None else None
            for vertex, (x, y) in enumerate(points):
                surface.circle(x, y, opts.symbol_size, Style(fill=color, stroke="#ffffff", stroke_width=2.0))
                value = to_number(values[vertex]) if vertex < len(values) else None
                self._publish(index, x, y, radius=opts.symbol_size, value=value, name=name or indicators[vertex].name)

    def _item_color(self, index: int) -> str:
        raw = self.options.data[index]
        if isinstance(raw, Mapping) and raw.get("color"):
            return str(raw["color"])
        return self.theme.color_for(index) if not self.options.color else self.options.color
