from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Sequence

from chartkit.component import Component, GridLines
from chartkit.config import DEFAULT_THEME, ChartTheme
from chartkit.coordinates import CartesianCoordinate
from chartkit.geometry import Rect
from chartkit.interaction import InteractionManager
from chartkit.scales import BandScale, LinearScale, Scale
from chartkit.series import CARTESIAN_TYPES, ChartType, DataItemPosition, Series, create_series
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

Padding = tuple[float, float, float, float]


def _padding(value: float | Sequence[float]) -> Padding:
    if isinstance(value, (int, float)):
        p = float(value)
        return (p, p, p, p)
    values = [float(v) for v in value]
    if len(values) == 2:
        return (values[0], values[1], values[0], values[1])
    if len(values) == 4:
        return (values[0], values[1], values[2], values[3])
    raise ValueError("padding must be a number or 2/4 values (top, right, bottom, left)")


class Chart:
    """Owns the scales, series and interaction manager for one drawing area.

    Cartesian series map through the shared `x`/`y` scales, whose ranges follow
    the plot rectangle on every `render`. Changing a scale takes effect on the
    next `render`; series do not detect stale geometry on their own.
    """

    def __init__(
        self,
        width: float,
        height: float,
        *,
        padding: float | Sequence[float] = (40.0, 40.0, 40.0, 50.0),
        theme: ChartTheme = DEFAULT_THEME,
        grid: bool = False,
        throttle_ms: float = 16.0,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width/height must be > 0")
        self.width = float(width)
        self.height = float(height)
        self.padding = _padding(padding)
        self.theme = theme
        self.grid = grid
        self.scales: dict[str, Scale] = {"x": BandScale(), "y": LinearScale()}
        self.series: list[Series[Any]] = []
        self.components: list[Component] = []
        self.interaction = InteractionManager(throttle_ms=throttle_ms)
        self._next_index = 0

    @property
    def bounds(self) -> Rect:
        return Rect(0.0, 0.0, self.width, self.height)

    @property
    def plot_rect(self) -> Rect:
        top, right, bottom, left = self.padding
        return Rect(left, top, max(0.0, self.width - left - right), max(0.0, self.height - top - bottom))

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width/height must be > 0")
        self.width = float(width)
        self.height = float(height)

    def set_scale(self, axis: str, scale: Scale) -> None:
        if axis not in ("x", "y"):
            raise ValueError("axis must be `x` or `y`")
        self.scales[axis] = scale
        for series in self.series:
            if series.series_type in CARTESIAN_TYPES:
                if axis == "x":
                    series.x_scale = scale
                else:
                    series.y_scale = scale

    def add_series(self, series: Series[Any] | ChartType | str, options: Mapping[str, Any] | None = None) -> Series[Any]:
        """Attach a series instance, or build one from a chart type and options."""

        if not isinstance(series, Series):
            chart_type = ChartType(series)
            cartesian = chart_type in CARTESIAN_TYPES
            series = create_series(
                chart_type,
                options,
                x_scale=self.scales["x"] if cartesian else None,
                y_scale=self.scales["y"] if cartesian else None,
                series_index=self._next_index,
                theme=self.theme,
            )
        elif options is not None:
            raise ValueError("options must be None when passing a Series instance")
        self._next_index = max(self._next_index, series.series_index) + 1
        self.series.append(series)
        return series

    def remove_series(self, series: Series[Any]) -> None:
        if series not in self.series:
            raise ValueError("series is not attached to this chart")
        self.series.remove(series)
        series.dispose()

    def add_component(self, component: Component) -> Component:
        self.components.append(component)
        return component

    def _layout(self) -> None:
        plot = self.plot_rect
        self.scales["x"].set_range((plot.x, plot.right))
        self.scales["y"].set_range((plot.bottom, plot.y))
        for series in self.series:
            if series.series_type in CARTESIAN_TYPES:
                series.update(plot)
                if isinstance(series.coordinate, CartesianCoordinate):
                    series.coordinate.update(plot)
            else:
                series.update(self.bounds)
        for component in self.components:
            component.update(plot)

    def render(self, surface: Surface) -> list[DataItemPosition]:
        """Draw every visible series and refresh the hit-test cache."""

        self._layout()
        if self.grid and any(s.series_type in CARTESIAN_TYPES for s in self.series):
            GridLines(
                self.scales["y"],
                self.plot_rect,
                orient="horizontal",
                style=Style(stroke=self.theme.split_line_color, stroke_width=1.0),
            ).render(surface)
        for component in self.components:
            component.render(surface)

        positions: list[DataItemPosition] = []
        for series in self.series:
            if not self.interaction.is_series_visible(series.series_index):
                continue
            series.render(surface)
            positions.extend(series.get_data_positions())
        self.interaction.update_data_positions(positions)
        LOGGER.debug("rendered %s series, %s positions", len(self.series), len(positions))
        return positions

    def dispose(self) -> None:
        for series in self.series:
            series.dispose()
        for component in self.components:
            component.dispose()
        self.series = []
        self.components = []
        self.interaction.dispose()
