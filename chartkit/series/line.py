from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Literal

from chartkit.data import item_name, to_number
from chartkit.geometry import DEFAULT_SMOOTHNESS, Point, step_points
from chartkit.series.base import ChartType, Series, category_position, check_opacity, resolve_xy
from chartkit.series.symbols import SymbolShape, draw_symbol
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

StepMode = Literal["start", "middle", "end"]


@dataclass(frozen=True)
class LineOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    smooth: bool | float = False
    step: StepMode | None = None
    line_width: float = 2.0
    line_dash: tuple[float, ...] | None = None
    show_symbol: bool = True
    symbol: SymbolShape = "circle"
    symbol_size: float = 6.0
    area: bool = False
    area_color: str | None = None
    area_opacity: float = 0.3
    stack_base: tuple[float | None, ...] | None = None
    connect_nulls: bool = False

    def __post_init__(self) -> None:
        if self.step is not None and self.step not in {"start", "middle", "end"}:
            raise ValueError("step must be one of: start, middle, end")
        if self.line_width < 0:
            raise ValueError("line_width must be >= 0")
        check_opacity("area_opacity", self.area_opacity)

    @property
    def smoothness(self) -> float:
        if self.smooth is True:
            return DEFAULT_SMOOTHNESS
        if not self.smooth:
            return 0.0
        return max(0.0, float(self.smooth))


@dataclass(frozen=True)
class LinePoint:
    data_index: int
    scaled_x: float
    point: Point
    value: float


class LineSeries(Series[LineOptions]):
    series_type = ChartType.LINE
    options_class = LineOptions

    def compute_runs(self) -> list[list[LinePoint]]:
        """Screen points grouped into runs; a missing value breaks the run unless nulls are connected."""

        if self.x_scale is None or self.y_scale is None:
            return []
        runs: list[list[LinePoint]] = []
        current: list[LinePoint] = []
        for index, raw in enumerate(self.options.data):
            resolved = resolve_xy(raw, index)
            sx = sy = float("nan")
            if resolved is not None:
                sx = category_position(self.x_scale, index, resolved[0])
                sy = self.y_scale.map(resolved[1])
            if sx != sx or sy != sy:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                if not self.options.connect_nulls and current:
                    runs.append(current)
                    current = []
                continue
            current.append(LinePoint(index, sx, self._to_point(sx, sy), resolved[1]))
        if current:
            runs.append(current)
        return runs

    def _render(self, surface: Surface) -> None:
        runs = self.compute_runs()
        if not runs:
            return
        color = self.color
        smooth = 0.0 if self.options.step else self.options.smoothness
        line_style = Style(stroke=color, stroke_width=self.options.line_width, dash=self.options.line_dash)

        for run in runs:
            points = [p.point for p in run]
            if self.options.step:
                points = step_points(points, self.options.step)
            if self.options.area:
                self._render_area(surface, run, points, smooth)
            if self.options.line_width > 0:
                surface.polyline(points, line_style, smooth=smooth)

        radius = self.options.symbol_size / 2.0
        symbol_style = Style(fill="#ffffff", stroke=color, stroke_width=max(1.0, self.options.line_width / 2.0))
        for run in runs:
            for p in run:
                x, y = p.point
                if self.options.show_symbol:
                    draw_symbol(surface, self.options.symbol, x, y, self.options.symbol_size, None, symbol_style)
                self._publish(
                    p.data_index, x, y, radius=radius, value=p.value, name=item_name(self.options.data[p.data_index])
                )

    def _render_area(self, surface: Surface, run: list[LinePoint], points: list[Point], smooth: float) -> None:
        fill = Style(fill=self.options.area_color or self.color, opacity=self.options.area_opacity)
        stack = self.options.stack_base
        if stack is None:
            surface.area(points, self.baseline(), fill, smooth=smooth)
            return
        lower: list[Point] = []
        for p in run:
            base = to_number(stack[p.data_index]) if p.data_index < len(stack) else None
            lower.append(self._to_point(p.scaled_x, self.y_scale.map(base or 0.0)))
        if self.options.step:
            lower = step_points(lower, self.options.step)
        surface.area(points, lower, fill, smooth=smooth)

    def baseline(self) -> float:
        """Screen y of the zero line, kept inside the value axis range."""

        lo, hi = self.y_scale.range_extent()
        base = self.y_scale.map(0.0)
        if base != base:
            base = hi
        return self._to_point(0.0, max(lo, min(hi, base)))[1]


@dataclass(frozen=True)
class AreaOptions(LineOptions):
    area: bool = True
    show_symbol: bool = False


class AreaSeries(LineSeries):
    series_type = ChartType.AREA
    options_class = AreaOptions
