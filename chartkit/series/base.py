from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
import math
from typing import Any, ClassVar, Generic, Mapping, TypeVar

from chartkit.config import DEFAULT_THEME, ChartTheme, resolve_options
from chartkit.data import to_number
from chartkit.coordinates import CartesianCoordinate, CoordinateSystem, PolarCoordinate
from chartkit.geometry import Point, Rect, resolve_length
from chartkit.scales import BandScale, Scale, TimeScale
from chartkit.surface import Surface


LOGGER = logging.getLogger(__name__)

OptionsT = TypeVar("OptionsT")


class ChartType(str, Enum):
    LINE = "line"
    AREA = "area"
    BAR = "bar"
    SCATTER = "scatter"
    CANDLESTICK = "candlestick"
    HEATMAP = "heatmap"
    PICTORIAL_BAR = "pictorialBar"
    PIE = "pie"
    GAUGE = "gauge"
    RING_PROGRESS = "ringProgress"
    RADAR = "radar"
    FUNNEL = "funnel"
    GRAPH = "graph"
    TREE = "tree"
    SANKEY = "sankey"


@dataclass(frozen=True)
class DataItemPosition:
    """Screen geometry of one rendered data item, as consumed by hit-testing.

    `(x, y)` is the item's anchor: the centre for radius/point items and the
    top-left corner when `width`/`height` are set.
    """

    series_index: int
    data_index: int
    x: float
    y: float
    width: float | None = None
    height: float | None = None
    radius: float | None = None
    value: Any = None
    name: str | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.series_index, self.data_index)


class Series(ABC, Generic[OptionsT]):
    """One visual encoding of one data array."""

    series_type: ClassVar[ChartType]
    options_class: ClassVar[type]

    def __init__(
        self,
        options: Mapping[str, Any] | OptionsT | None = None,
        *,
        x_scale: Scale | None = None,
        y_scale: Scale | None = None,
        coordinate: CoordinateSystem | None = None,
        series_index: int = 0,
        rect: Rect | None = None,
        theme: ChartTheme = DEFAULT_THEME,
    ) -> None:
        self.options: OptionsT = resolve_options(self.options_class, options)
        self.x_scale = x_scale
        self.y_scale = y_scale
        self.coordinate = coordinate if coordinate is not None else CartesianCoordinate()
        self.series_index = int(series_index)
        self.rect = rect
        self.theme = theme
        self._positions: list[DataItemPosition] = []
        self._disposed = False

    @property
    def name(self) -> str:
        return str(getattr(self.options, "name", "") or f"series{self.series_index}")

    @property
    def color(self) -> str:
        explicit = getattr(self.options, "color", None)
        return explicit or self.theme.color_for(self.series_index)

    def render(self, surface: Surface) -> None:
        """Draw onto `surface` and replace the geometry cache."""

        if self._disposed:
            return
        self._positions = []
        self._render(surface)

    @abstractmethod
    def _render(self, surface: Surface) -> None:
        ...

    def get_data_positions(self) -> list[DataItemPosition]:
        return list(self._positions)

    def update(self, rect: Rect) -> None:
        self.rect = rect

    def dispose(self) -> None:
        self.x_scale = None
        self.y_scale = None
        self.coordinate = None  # type: ignore[assignment]
        self._positions = []
        self._disposed = True

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _publish(self, data_index: int, x: float, y: float, **extent: Any) -> None:
        self._positions.append(DataItemPosition(series_index=self.series_index, data_index=data_index, x=x, y=y, **extent))

    def _layout_rect(self, surface: Surface) -> Rect:
        if self.rect is not None:
            return self.rect
        return Rect(0.0, 0.0, float(surface.width), float(surface.height))

    def _to_point(self, x: float, y: float) -> Point:
        return self.coordinate.data_to_point((x, y))

    def _polar_point(self, frame: PolarCoordinate, radius: float, angle: float) -> Point:
        """Screen point at `radius` along `angle` (radians) of a polar frame."""

        return frame.data_to_point((math.degrees(angle), radius))


def check_opacity(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1]")


def category_position(scale: Scale, index: int, category: Any = None) -> float:
    """Centre pixel of a data index on the category axis."""

    if isinstance(scale, BandScale):
        domain = scale.get_domain()
        key = category if category is not None and scale.index_of(category) is not None else None
        if key is None:
            if index >= len(domain):
                return math.nan
            key = domain[index]
        return scale.map(key) + scale.get_bandwidth() / 2.0
    key = continuous_key(scale, index if category is None else category)
    return math.nan if key is None else scale.map(key)


def continuous_key(scale: Scale, raw: Any) -> Any:
    """Coerce an x key for a continuous scale; None when it cannot be placed."""

    if isinstance(scale, TimeScale):
        if isinstance(raw, datetime):
            return raw
        if isinstance(raw, str):
            try:
                return datetime.fromisoformat(raw.strip())
            except ValueError:
                pass
    return to_number(raw)


def category_width(scale: Scale | None, count: int) -> float:
    """Pixel spacing between adjacent categories."""

    if scale is None:
        return 0.0
    if isinstance(scale, BandScale):
        return scale.get_step() if scale.get_step() > 0 else scale.get_bandwidth()
    lo, hi = scale.range_extent()
    return (hi - lo) / max(1, count)


def band_size(scale: Scale | None, count: int, ratio: float) -> float:
    if isinstance(scale, BandScale):
        return scale.get_bandwidth()
    return category_width(scale, count) * ratio


def is_number(value: Any) -> bool:
    return to_number(value) is not None and not isinstance(value, (str, Mapping))


def numeric_sequence(raw: Any, length: int) -> list[float] | None:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)) or len(raw) < length:
        return None
    out = []
    for value in raw[:length]:
        if not is_number(value):
            return None
        out.append(float(value))
    return out


def resolve_xy(raw: Any, index: int) -> tuple[Any, float] | None:
    """Split an item into (x key, y value); the x key is None for bare values.

    Accepts `value`, `[x, value]` and `{"value": ...}` forms. Returns None when the
    value is missing or non-numeric.
    """

    if isinstance(raw, Mapping):
        raw = raw.get("value")
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) < 2:
            return None
        y = to_number(raw[1])
        if y is None:
            return None
        x_num = to_number(raw[0])
        return (x_num if x_num is not None else raw[0], y)
    y = to_number(raw)
    if y is None:
        return None
    return (None, y)


def resolve_center(center: Sequence[float | str], rect: Rect) -> Point:
    """Centre from `["50%", "50%"]`-style values relative to `rect`."""

    if len(center) < 2:
        raise ValueError("center must contain two values")
    return (rect.x + resolve_length(center[0], rect.width), rect.y + resolve_length(center[1], rect.height))


def resolve_radius(value: float | str, rect: Rect) -> float:
    """Radius as a number or percentage of half the shorter side of `rect`."""

    return max(0.0, resolve_length(value, min(rect.width, rect.height) / 2.0))
