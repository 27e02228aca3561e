from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Literal, Union

from chartkit.data import item_name
from chartkit.geometry import Rect
from chartkit.series.base import ChartType, Series, band_size, category_position, check_opacity, resolve_xy
from chartkit.series.symbols import SymbolShape, draw_symbol
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

DEFAULT_SYMBOL_SIZE = 20.0
DEFAULT_SYMBOL_MARGIN = 2.0
MIN_BAR_WIDTH = 10.0


@dataclass(frozen=True)
class PictorialBarOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    symbol: SymbolShape = "rect"
    symbol_size: Union[float, tuple[float, float]] = DEFAULT_SYMBOL_SIZE
    symbol_repeat: Union[bool, int] = False
    symbol_repeat_direction: Literal["start", "end"] = "start"
    symbol_margin: float = DEFAULT_SYMBOL_MARGIN
    symbol_clip: bool = False
    bar_width: float | None = None
    bar_width_ratio: float = 0.6
    opacity: float = 0.9

    def __post_init__(self) -> None:
        check_opacity("opacity", self.opacity)
        if self.symbol_repeat_direction not in {"start", "end"}:
            raise ValueError("symbol_repeat_direction must be `start` or `end`")
        if self.symbol_margin < 0:
            raise ValueError("symbol_margin must be >= 0")

    @property
    def symbol_box(self) -> tuple[float, float]:
        if isinstance(self.symbol_size, (int, float)):
            return (float(self.symbol_size), float(self.symbol_size))
        return (float(self.symbol_size[0]), float(self.symbol_size[1]))


@dataclass(frozen=True)
class PictorialBar:
    data_index: int
    rect: Rect
    value: float
    repeat_count: int


class PictorialBarSeries(Series[PictorialBarOptions]):
    series_type = ChartType.PICTORIAL_BAR
    options_class = PictorialBarOptions

    def bar_width(self) -> float:
        if self.options.bar_width is not None:
            return float(self.options.bar_width)
        return max(MIN_BAR_WIDTH, band_size(self.x_scale, len(self.options.data), self.options.bar_width_ratio))

    def repeat_count(self, bar_height: float) -> int:
        repeat = self.options.symbol_repeat
        if repeat is True:
            return max(1, math.floor(bar_height / max(self.options.symbol_box[1], 1e-9)))
        if repeat is False:
            return 1
        return max(1, int(repeat))

    def compute_bars(self) -> list[PictorialBar]:
        if self.x_scale is None or self.y_scale is None:
            return []
        width = self.bar_width()
        lo, hi = self.y_scale.range_extent()
        base = max(lo, min(hi, self.y_scale.map(0.0)))
        bars: list[PictorialBar] = []
        for index, raw in enumerate(self.options.data):
            resolved = resolve_xy(raw, index)
            if resolved is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            center = category_position(self.x_scale, index, resolved[0])
            pos = self.y_scale.map(resolved[1])
            if center != center or pos != pos:
                continue
            x, y = self._to_point(center - width / 2.0, min(pos, base))
            height = abs(pos - base)
            bars.append(PictorialBar(index, Rect(x, y, width, height), resolved[1], self.repeat_count(height)))
        return bars

    def _render(self, surface: Surface) -> None:
        style = Style(fill=self.color, opacity=self.options.opacity)
        sym_w, sym_h = self.options.symbol_box
        margin = self.options.symbol_margin
        for bar in self.compute_bars():
            r = bar.rect
            cx = r.x + r.width / 2.0
            if self.options.symbol_clip:
                surface.save()
                surface.clip(r)
            if self.options.symbol_repeat:
                from_start = self.options.symbol_repeat_direction == "start"
                origin = r.bottom if from_start else r.y
                for i in range(bar.repeat_count):
                    offset = i * (sym_h + margin) + sym_h / 2.0
                    cy = origin - offset if from_start else origin + offset
                    if self.options.symbol_clip and not (r.y <= cy <= r.bottom):
                        continue
                    draw_symbol(surface, self.options.symbol, cx, cy, sym_w, sym_h, style)
            else:
                height = r.height if self.options.symbol_clip else sym_h
                draw_symbol(surface, self.options.symbol, cx, r.y + r.height / 2.0, r.width, height, style)
            if self.options.symbol_clip:
                surface.restore()
            self._publish(
                bar.data_index,
                r.x,
                r.y,
                width=r.width,
                height=r.height,
                value=bar.value,
                name=item_name(self.options.data[bar.data_index]),
            )
