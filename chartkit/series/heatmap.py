from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
import math
from typing import Any

from chartkit.colors import HEATMAP_PALETTE, interpolate_palette
from chartkit.data import coerce_numeric, finite_extent, to_number
from chartkit.scales import BandScale, Scale
from chartkit.series.base import ChartType, Series, category_position
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

DEFAULT_CELL_SIZE = 20.0


@dataclass(frozen=True)
class HeatmapOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    palette: tuple[str, ...] = HEATMAP_PALETTE
    visual_min: float | None = None
    visual_max: float | None = None
    border_color: str | None = None
    border_width: float = 0.0
    label_show: bool = False
    label_color: str = "#000000"
    label_font_size: float = 12.0


@dataclass(frozen=True)
class HeatmapCell:
    data_index: int
    x: float
    y: float
    width: float
    height: float
    value: float
    color: str


def parse_cell(raw: Any) -> tuple[Any, Any, float] | None:
    if isinstance(raw, Mapping):
        x, y, value = raw.get("x"), raw.get("y"), to_number(raw.get("value"))
    elif isinstance(raw, (list, tuple)) and len(raw) >= 3:
        x, y, value = raw[0], raw[1], to_number(raw[2])
    else:
        return None
    if x is None or y is None or value is None:
        return None
    return (x, y, value)


def _axis_center(scale: Scale, value: Any) -> float:
    if isinstance(scale, BandScale):
        if scale.index_of(value) is not None:
            return scale.map(value) + scale.get_bandwidth() / 2.0
        index = to_number(value)
        if index is None or index != int(index):
            return math.nan
        return category_position(scale, int(index))
    number = to_number(value)
    return math.nan if number is None else scale.map(number)


def _cell_extent(scale: Scale) -> float:
    if isinstance(scale, BandScale):
        return scale.get_bandwidth() or DEFAULT_CELL_SIZE
    return abs(scale.map(1) - scale.map(0)) or DEFAULT_CELL_SIZE


class HeatmapSeries(Series[HeatmapOptions]):
    series_type = ChartType.HEATMAP
    options_class = HeatmapOptions

    def value_range(self) -> tuple[float, float]:
        values = coerce_numeric([cell[2] for cell in (parse_cell(raw) for raw in self.options.data) if cell is not None], label="heatmap values")
        extent = finite_extent(values)
        if extent is None:
            return (0.0, 1.0)
        lo = self.options.visual_min if self.options.visual_min is not None else extent[0]
        hi = self.options.visual_max if self.options.visual_max is not None else extent[1]
        return (float(lo), float(hi))

    def color_for(self, value: float, value_range: tuple[float, float] | None = None) -> str:
        lo, hi = value_range or self.value_range()
        ratio = (value - lo) / ((hi - lo) or 1.0)
        return interpolate_palette(self.options.palette, ratio)

    def compute_cells(self) -> list[HeatmapCell]:
        if self.x_scale is None or self.y_scale is None:
            return []
        width = _cell_extent(self.x_scale)
        height = _cell_extent(self.y_scale)
        value_range = self.value_range()
        cells: list[HeatmapCell] = []
        for index, raw in enumerate(self.options.data):
            parsed = parse_cell(raw)
            if parsed is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            x_key, y_key, value = parsed
            sx = _axis_center(self.x_scale, x_key)
            sy = _axis_center(self.y_scale, y_key)
            if sx != sx or sy != sy:
                continue
            cx, cy = self._to_point(sx, sy)
            cells.append(
                HeatmapCell(
                    data_index=index,
                    x=cx - width / 2.0,
                    y=cy - height / 2.0,
                    width=width,
                    height=height,
                    value=value,
                    color=self.color_for(value, value_range),
                )
            )
        return cells

    def _render(self, surface: Surface) -> None:
        label_style = TextStyle(
            color=self.options.label_color,
            font_size=self.options.label_font_size,
            font_family=self.theme.font_family,
            align="center",
            baseline="middle",
        )
        for cell in self.compute_cells():
            style = Style(
                fill=cell.color,
                stroke=self.options.border_color if self.options.border_width > 0 else None,
                stroke_width=self.options.border_width,
            )
            surface.rect(cell.x, cell.y, cell.width, cell.height, style)
            if self.options.label_show:
                surface.text(cell.x + cell.width / 2.0, cell.y + cell.height / 2.0, f"{cell.value:g}", label_style)
            self._publish(cell.data_index, cell.x, cell.y, width=cell.width, height=cell.height, value=cell.value)
