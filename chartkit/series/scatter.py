from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any, Union

from chartkit.data import item_name
from chartkit.series.base import ChartType, Series, check_opacity, category_position, resolve_xy
from chartkit.series.symbols import SymbolShape, draw_symbol
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

MIN_HIT_RADIUS = 10.0

SymbolSize = Union[float, Callable[[Any], float]]


@dataclass(frozen=True)
class ScatterOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    symbol: SymbolShape = "circle"
    symbol_size: SymbolSize = 10.0
    opacity: float = 0.8

    def __post_init__(self) -> None:
        check_opacity("opacity", self.opacity)


class ScatterSeries(Series[ScatterOptions]):
    series_type = ChartType.SCATTER
    options_class = ScatterOptions

    def _size_for(self, raw: Any) -> float:
        size = self.options.symbol_size
        if callable(size):
            return max(0.0, float(size(raw)))
        return max(0.0, float(size))

    def _render(self, surface: Surface) -> None:
        if self.x_scale is None or self.y_scale is None:
            return
        style = Style(fill=self.color, opacity=self.options.opacity)
        for index, raw in enumerate(self.options.data):
            resolved = resolve_xy(raw, index)
            if resolved is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            sx = category_position(self.x_scale, index, resolved[0])
            sy = self.y_scale.map(resolved[1])
            if sx != sx or sy != sy:
                continue
            x, y = self._to_point(sx, sy)
            size = self._size_for(raw)
            draw_symbol(surface, self.options.symbol, x, y, size, None, style)
            self._publish(index, x, y, radius=max(size, MIN_HIT_RADIUS), value=resolved[1], name=item_name(raw))
