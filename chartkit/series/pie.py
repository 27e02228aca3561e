from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
import math
from typing import Any, Literal, Union

from chartkit.data import to_number
from chartkit.geometry import Rect, polar_point
from chartkit.coordinates import PolarCoordinate
from chartkit.series.base import ChartType, Series, resolve_center, resolve_radius
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

RoseType = Literal["radius", "area"]
LabelPosition = Literal["inside", "outside", "center"]
Length = Union[float, str]


@dataclass(frozen=True)
class PieOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    center: tuple[Length, Length] = ("50%", "50%")
    radius: Union[Length, tuple[Length, Length]] = "75%"
    start_angle: float = 90.0
    clockwise: bool = True
    pad_angle: float = 0.0
    min_angle: float = 0.0
    rose_type: RoseType | None = None
    border_color: str | None = "#ffffff"
    border_width: float = 1.0
    label_show: bool = True
    label_position: LabelPosition = "outside"
    label_formatter: Union[str, Callable[[Mapping[str, Any]], str], None] = None
    label_color: str = "#333333"
    label_font_size: float = 12.0
    label_line_length: float = 20.0
    label_line_length2: float = 10.0
    label_line_color: str = "#999999"

    def __post_init__(self) -> None:
        if self.rose_type is not None and self.rose_type not in {"radius", "area"}:
            raise ValueError("rose_type must be `radius` or `area`")
        if self.pad_angle < 0 or self.min_angle < 0:
            raise ValueError("pad_angle/min_angle must be >= 0")


@dataclass(frozen=True)
class PieSector:
    data_index: int
    name: str
    value: float
    percentage: float
    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2.0


def _pie_item(raw: Any, index: int) -> tuple[str, float | None]:
    if isinstance(raw, Mapping):
        return (str(raw.get("name", index)), to_number(raw.get("value")))
    return (str(index), to_number(raw))


class PieSeries(Series[PieOptions]):
    series_type = ChartType.PIE
    options_class = PieOptions

    def geometry(self, rect: Rect) -> tuple[float, float, float, float]:
        """(cx, cy, inner_radius, outer_radius) inside `rect`."""

        cx, cy = resolve_center(self.options.center, rect)
        radius = self.options.radius
        if isinstance(radius, (tuple, list)):
            return (cx, cy, resolve_radius(radius[0], rect), resolve_radius(radius[1], rect))
        return (cx, cy, 0.0, resolve_radius(radius, rect))

    def compute_sectors(self, inner: float, outer: float) -> list[PieSector]:
        items = [_pie_item(raw, i) for i, raw in enumerate(self.options.data)]
        values = [max(0.0, v) if v is not None else 0.0 for _, v in items]
        total = sum(values)
        if total <= 0:
            return []
        max_value = max(values)
        pad = math.radians(self.options.pad_angle)
        min_sweep = math.radians(self.options.min_angle)
        direction = -1.0 if self.options.clockwise else 1.0
        current = math.radians(self.options.start_angle)

        sectors: list[PieSector] = []
        for index, ((name, raw_value), value) in enumerate(zip(items, values)):
            if raw_value is None:
                LOGGER.debug("skipping item %s of %s", index, self.name)
                continue
            percentage = value / total
            sweep = max(0.0, percentage * 2.0 * math.pi - pad)
            if value > 0 and sweep < min_sweep:
                sweep = min_sweep
            radius = outer
            if self.options.rose_type == "radius":
                radius = inner + (outer - inner) * (value / max_value)
            elif self.options.rose_type == "area":
                radius = inner + (outer - inner) * math.sqrt(value / max_value)
            sectors.append(
                PieSector(
                    data_index=index,
                    name=name,
                    value=value,
                    percentage=percentage,
                    start_angle=current,
                    end_angle=current + direction * sweep,
                    inner_radius=inner,
                    outer_radius=radius,
                )
            )
            current += direction * (sweep + pad)
        return sectors

    def _render(self, surface: Surface) -> None:
        cx, cy, inner, outer = self.geometry(self._layout_rect(surface))
        frame = PolarCoordinate(center=(cx, cy), radius=max(0.0, outer))
        for sector in self.compute_sectors(inner, outer):
            color = self._sector_color(sector.data_index)
            style = Style(
                fill=color,
                stroke=self.options.border_color if self.options.border_width > 0 else None,
                stroke_width=self.options.border_width,
            )
            surface.sector(cx, cy, sector.inner_radius, sector.outer_radius, sector.start_angle, sector.end_angle, style)
            if self.options.label_show:
                self._render_label(surface, sector, cx, cy)
            mid_r = (sector.inner_radius + sector.outer_radius) / 2.0
            hx, hy = self._polar_point(frame, mid_r, sector.mid_angle)
            self._publish(
                sector.data_index,
                hx,
                hy,
                radius=(sector.outer_radius - sector.inner_radius) / 2.0,
                value=sector.value,
                name=sector.name,
            )

    def _sector_color(self, index: int) -> str:
        raw = self.options.data[index]
        if isinstance(raw, Mapping) and raw.get("color"):
            return str(raw["color"])
        if self.options.color:
            return self.options.color
        return self.theme.color_for(index)

    def format_label(self, sector: PieSector) -> str:
        formatter = self.options.label_formatter
        if callable(formatter):
            return formatter({"name": sector.name, "value": sector.value, "percent": sector.percentage * 100.0})
        if isinstance(formatter, str):
            return (
                formatter.replace("{name}", sector.name)
                .replace("{value}", f"{sector.value:g}")
                .replace("{percent}", f"{sector.percentage * 100.0:.1f}%")
            )
        return sector.name

    def _render_label(self, surface: Surface, sector: PieSector, cx: float, cy: float) -> None:
        mid = sector.mid_angle
        align = "center"
        if self.options.label_position in {"inside", "center"}:
            lx, ly = polar_point(cx, cy, sector.outer_radius * 0.6, mid)
        else:
            l1 = self.options.label_line_length
            l2 = self.options.label_line_length2
            sx, sy = polar_point(cx, cy, sector.outer_radius, mid)
            mx, my = polar_point(cx, cy, sector.outer_radius + l1, mid)
            ex = mx + (l2 if math.cos(mid) > 0 else -l2)
            surface.polyline([(sx, sy), (mx, my), (ex, my)], Style(stroke=self.options.label_line_color))
            lx, ly = polar_point(cx, cy, sector.outer_radius + l1 + l2, mid)
            align = "left" if math.cos(mid) > 0 else "right"
        surface.text(
            lx,
            ly,
            self.format_label(sector),
            TextStyle(
                color=self.options.label_color,
                font_size=self.options.label_font_size,
                font_family=self.theme.font_family,
                align=align,  # type: ignore[arg-type]
                baseline="middle",
            ),
        )
