from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
from typing import Any, Literal, Union

from chartkit.data import to_number
from chartkit.geometry import Rect, resolve_length
from chartkit.series.base import ChartType, Series, check_opacity
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

Length = Union[float, str]
FunnelSort = Literal["descending", "ascending", "none"]
FunnelAlign = Literal["center", "left", "right"]
LAST_SEGMENT_TAPER = 0.7


@dataclass(frozen=True)
class FunnelOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    sort: FunnelSort = "descending"
    left: Length = "10%"
    right: Length = "10%"
    top: Length = "10%"
    bottom: Length = "10%"
    min: float = 0.0
    max: float = 100.0
    min_size: Length = "0%"
    max_size: Length = "100%"
    gap: float = 2.0
    align: FunnelAlign = "center"
    border_color: str = "#ffffff"
    border_width: float = 1.0
    opacity: float = 1.0
    label_show: bool = True
    label_position: Literal["inside", "left", "right", "outside"] = "outside"
    label_formatter: Union[str, Callable[[Mapping[str, Any]], str], None] = None
    label_color: str = "#333333"
    label_font_size: float = 12.0
    label_line_color: str = "#999999"

    def __post_init__(self) -> None:
        check_opacity("opacity", self.opacity)
        if self.sort not in {"descending", "ascending", "none"}:
            raise ValueError("sort must be one of: descending, ascending, none")
        if self.align not in {"center", "left", "right"}:
            raise ValueError("align must be one of: center, left, right")
        if self.max == self.min:
            raise ValueError("max must differ from min")
        if self.gap < 0:
            raise ValueError("gap must be >= 0")


@dataclass(frozen=True)
class FunnelSegment:
    data_index: int
    name: str
    value: float
    x: float
    y: float
    top_width: float
    bottom_width: float
    height: float
    align: FunnelAlign = "center"

    def corners(self) -> list[tuple[float, float]]:
        """Trapezoid corners: top-left, top-right, bottom-right, bottom-left."""

        y0, y1 = self.y, self.y + self.height
        if self.align == "left":
            return [(self.x, y0), (self.x + self.top_width, y0), (self.x + self.bottom_width, y1), (self.x, y1)]
        if self.align == "right":
            right = self.x + self.top_width
            return [(self.x, y0), (right, y0), (right, y1), (right - self.bottom_width, y1)]
        mid = self.x + self.top_width / 2.0
        return [
            (mid - self.top_width / 2.0, y0),
            (mid + self.top_width / 2.0, y0),
            (mid + self.bottom_width / 2.0, y1),
            (mid - self.bottom_width / 2.0, y1),
        ]


class FunnelSeries(Series[FunnelOptions]):
    series_type = ChartType.FUNNEL
    options_class = FunnelOptions

    def funnel_rect(self, rect: Rect) -> Rect:
        opts = self.options
        left = resolve_length(opts.left, rect.width)
        right = resolve_length(opts.right, rect.width)
        top = resolve_length(opts.top, rect.height)
        bottom = resolve_length(opts.bottom, rect.height)
        return Rect(rect.x + left, rect.y + top, max(0.0, rect.width - left - right), max(0.0, rect.height - top - bottom))

    def sorted_items(self) -> list[tuple[int, str, float]]:
        items: list[tuple[int, str, float]] = []
        for index, raw in enumerate(self.options.data):
            if isinstance(raw, Mapping):
                name, value = str(raw.get("name", index)), to_number(raw.get("value"))
            else:
                name, value = str(index), to_number(raw)
            if value is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            items.append((index, name, value))
        if self.options.sort == "descending":
            items.sort(key=lambda item: item[2], reverse=True)
        elif self.options.sort == "ascending":
            items.sort(key=lambda item: item[2])
        return items

    def compute_segments(self, rect: Rect) -> list[FunnelSegment]:
        opts = self.options
        items = self.sorted_items()
        if not items:
            return []
        area = self.funnel_rect(rect)
        min_size = resolve_length(opts.min_size, area.width)
        max_size = resolve_length(opts.max_size, area.width)
        count = len(items)
        height = max(0.0, (area.height - opts.gap * (count - 1)) / count)
        span = opts.max - opts.min

        def width(ratio: float) -> float:
            return min_size + (max_size - min_size) * max(0.0, min(1.0, ratio))

        segments = []
        for i, (index, name, value) in enumerate(items):
            ratio = (value - opts.min) / span
            next_ratio = (items[i + 1][2] - opts.min) / span if i + 1 < count else ratio * LAST_SEGMENT_TAPER
            top_width = width(ratio)
            if opts.align == "center":
                x = area.x + (area.width - top_width) / 2.0
            elif opts.align == "right":
                x = area.x + area.width - top_width
            else:
                x = area.x
            segments.append(
                FunnelSegment(
                    data_index=index,
                    name=name,
                    value=value,
                    x=x,
                    y=area.y + i * (height + opts.gap),
                    top_width=top_width,
                    bottom_width=width(next_ratio),
                    height=height,
                    align=opts.align,
                )
            )
        return segments

    def format_label(self, segment: FunnelSegment) -> str:
        formatter = self.options.label_formatter
        if callable(formatter):
            return str(formatter({"name": segment.name, "value": segment.value, "dataIndex": segment.data_index}))
        if isinstance(formatter, str):
            return formatter.replace("{name}", segment.name).replace("{value}", f"{segment.value:g}")
        return segment.name

    def _render(self, surface: Surface) -> None:
        opts = self.options
        for position, segment in enumerate(self.compute_segments(self._layout_rect(surface))):
            color = self._segment_color(segment.data_index, position)
            surface.polygon(
                segment.corners(),
                Style(fill=color, stroke=opts.border_color, stroke_width=opts.border_width, opacity=opts.opacity),
            )
            self._publish(
                segment.data_index,
                segment.x,
                segment.y,
                width=segment.top_width,
                height=segment.height,
                value=segment.value,
                name=segment.name,
            )
            if opts.label_show:
                self._render_label(surface, segment)

    def _segment_color(self, data_index: int, position: int) -> str:
        raw = self.options.data[data_index]
        if isinstance(raw, Mapping) and raw.get("color"):
            return str(raw["color"])
        return self.options.color or self.theme.color_for(position)

    def _render_label(self, surface: Surface, segment: FunnelSegment) -> None:
        opts = self.options
        cy = segment.y + segment.height / 2.0
        line = Style(stroke=opts.label_line_color, stroke_width=1.0)
        if opts.label_position == "inside":
            x, align = segment.x + segment.top_width / 2.0, "center"
        elif opts.label_position == "left":
            x, align = segment.x - 10.0, "right"
            surface.line(segment.x, cy, x + 5.0, cy, line)
        else:
            x, align = segment.x + segment.top_width + 10.0, "left"
            surface.line(segment.x + segment.top_width, cy, x - 5.0, cy, line)
        surface.text(
            x,
            cy,
            self.format_label(segment),
            TextStyle(
                color=opts.label_color,
                font_size=opts.label_font_size,
                font_family=self.theme.font_family,
                align=align,  # type: ignore[arg-type]
                baseline="middle",
            ),
        )
