from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Any

from chartkit.data import to_number
from chartkit.scales import BandScale
from chartkit.series.base import ChartType, Series, category_position
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

RISING_COLOR = "#ec0000"
FALLING_COLOR = "#00da3c"
SINGLE_ITEM_WIDTH = 20.0
MIN_BAR_WIDTH = 4.0
BAR_WIDTH_RATIO = 0.7


@dataclass(frozen=True)
class CandlestickOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    rising_color: str = RISING_COLOR
    falling_color: str = FALLING_COLOR
    rising_border_color: str | None = None
    falling_border_color: str | None = None
    bar_width: float | None = None
    border_width: float = 1.0


@dataclass(frozen=True)
class Candle:
    data_index: int
    x: float
    open_y: float
    close_y: float
    high_y: float
    low_y: float
    body_top: float
    body_bottom: float
    body_height: float
    rising: bool
    values: tuple[float, float, float, float]


def parse_ohlc(raw: Any) -> tuple[float, float, float, float] | None:
    """Read `[open, close, low, high]` or a mapping with those keys."""

    if isinstance(raw, Mapping):
        fields = [raw.get("open"), raw.get("close"), raw.get("low"), raw.get("high")]
    elif isinstance(raw, (list, tuple)) and len(raw) >= 4:
        fields = list(raw[:4])
    else:
        return None
    values = [to_number(v) for v in fields]
    if any(v is None for v in values):
        return None
    o, c, lo, hi = values
    return (o, c, lo, hi)  # type: ignore[return-value]


class CandlestickSeries(Series[CandlestickOptions]):
    series_type = ChartType.CANDLESTICK
    options_class = CandlestickOptions

    def bar_width(self) -> float:
        if self.options.bar_width is not None:
            return float(self.options.bar_width)
        if len(self.options.data) <= 1 or self.x_scale is None:
            return SINGLE_ITEM_WIDTH
        if isinstance(self.x_scale, BandScale):
            spacing = self.x_scale.get_step()
        else:
            spacing = abs(self._to_point(self.x_scale.map(1), 0.0)[0] - self._to_point(self.x_scale.map(0), 0.0)[0])
        return max(MIN_BAR_WIDTH, spacing * BAR_WIDTH_RATIO)

    def compute_candles(self) -> list[Candle]:
        if self.x_scale is None or self.y_scale is None:
            return []
        candles: list[Candle] = []
        for index, raw in enumerate(self.options.data):
            ohlc = parse_ohlc(raw)
            if ohlc is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            o, c, lo, hi = ohlc
            x = self._to_point(category_position(self.x_scale, index), 0.0)[0]
            if x != x:
                continue
            open_y = self._to_point(0.0, self.y_scale.map(o))[1]
            close_y = self._to_point(0.0, self.y_scale.map(c))[1]
            high_y = self._to_point(0.0, self.y_scale.map(hi))[1]
            low_y = self._to_point(0.0, self.y_scale.map(lo))[1]
            top = min(open_y, close_y)
            bottom = max(open_y, close_y)
            candles.append(
                Candle(
                    data_index=index,
                    x=x,
                    open_y=open_y,
                    close_y=close_y,
                    high_y=high_y,
                    low_y=low_y,
                    body_top=top,
                    body_bottom=bottom,
                    body_height=max(1.0, bottom - top),
                    rising=c >= o,
                    values=ohlc,
                )
            )
        return candles

    def _render(self, surface: Surface) -> None:
        width = self.bar_width()
        half = width / 2.0
        for candle in self.compute_candles():
            if candle.rising:
                fill = self.options.rising_color
                border = self.options.rising_border_color or fill
            else:
                fill = self.options.falling_color
                border = self.options.falling_border_color or fill
            wick = Style(stroke=border, stroke_width=self.options.border_width)
            surface.line(candle.x, candle.high_y, candle.x, candle.body_top, wick)
            surface.line(candle.x, candle.body_top + candle.body_height, candle.x, candle.low_y, wick)
            surface.rect(
                candle.x - half,
                candle.body_top,
                width,
                candle.body_height,
                Style(fill=fill, stroke=border, stroke_width=self.options.border_width),
            )
            top = min(candle.high_y, candle.body_top)
            self._publish(
                candle.data_index,
                candle.x - half,
                top,
                width=width,
                height=max(candle.low_y, candle.body_top + candle.body_height) - top,
                value=candle.values,
            )
