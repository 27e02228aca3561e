from chartkit.chart import Chart
from chartkit.component import Component, GridLines
from chartkit.config import DEFAULT_THEME, ChartTheme, resolve_options, validate_theme
from chartkit.coordinates import CartesianCoordinate, CoordinateSystem, PolarCoordinate
from chartkit.errors import ChartDataError, ChartError
from chartkit.geometry import Rect
from chartkit.interaction import (
    AxisPointerOptions,
    InteractionEvent,
    InteractionManager,
    InteractionState,
    PointerEvent,
    PointerThrottle,
)
from chartkit.scales import BandScale, LinearScale, LogScale, Scale, TimeScale
from chartkit.series import ChartType, DataItemPosition, Series, create_series
from chartkit.surface import RasterSurface, Style, Surface, TextStyle, VectorSurface

__all__ = [
    "AxisPointerOptions",
    "BandScale",
    "CartesianCoordinate",
    "Chart",
    "ChartDataError",
    "ChartError",
    "ChartTheme",
    "ChartType",
    "Component",
    "CoordinateSystem",
    "DEFAULT_THEME",
    "DataItemPosition",
    "GridLines",
    "InteractionEvent",
    "InteractionManager",
    "InteractionState",
    "LinearScale",
    "LogScale",
    "PointerEvent",
    "PointerThrottle",
    "PolarCoordinate",
    "RasterSurface",
    "Rect",
    "Scale",
    "Series",
    "Style",
    "Surface",
    "TextStyle",
    "TimeScale",
    "VectorSurface",
    "create_series",
    "resolve_options",
    "validate_theme",
]
