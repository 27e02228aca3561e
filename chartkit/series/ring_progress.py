from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
import math
from typing import Any, Union

from chartkit.data import to_number
from chartkit.geometry import Rect, polar_point
from chartkit.coordinates import PolarCoordinate
from chartkit.series.base import ChartType, Series, check_opacity, resolve_center, resolve_radius
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

Length = Union[float, str]


@dataclass(frozen=True)
class RingProgressOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    center: tuple[Length, Length] = ("50%", "50%")
    radius: tuple[Length, Length] = ("60%", "70%")
    start_angle: float = 90.0
    end_angle: float = -270.0
    clockwise: bool = True
    gap: float = 3.0
    round_cap: bool = True
    track_color: str = "#e6ebf8"
    track_opacity: float = 0.3
    label_show: bool = True
    label_formatter: Union[str, Callable[[float, str], str], None] = None
    label_color: str = "#333333"
    label_font_size: float = 36.0
    title: str | None = None
    title_offset: float = 30.0

    def __post_init__(self) -> None:
        check_opacity("track_opacity", self.track_opacity)


@dataclass(frozen=True)
class Ring:
    data_index: int
    name: str
    value: float
    inner_radius: float
    outer_radius: float
    start_angle: float
    end_angle: float

    @property
    def radius(self) -> float:
        return (self.inner_radius + self.outer_radius) / 2.0

    @property
    def width(self) -> float:
        return self.outer_radius - self.inner_radius


def _ring_item(raw: Any) -> tuple[str, float | None]:
    if isinstance(raw, Mapping):
        return (str(raw.get("name") or ""), to_number(raw.get("value")))
    return ("", to_number(raw))


class RingProgressSeries(Series[RingProgressOptions]):
    series_type = ChartType.RING_PROGRESS
    options_class = RingProgressOptions

    def geometry(self, rect: Rect) -> tuple[float, float, float, float]:
        cx, cy = resolve_center(self.options.center, rect)
        inner = resolve_radius(self.options.radius[0], rect)
        outer = resolve_radius(self.options.radius[1], rect)
        return (cx, cy, min(inner, outer), max(inner, outer))

    def compute_rings(self, inner: float, outer: float) -> list[Ring]:
        items = [(i, *_ring_item(raw)) for i, raw in enumerate(self.options.data)]
        items = [item for item in items if item[2] is not None]
        if not items:
            return []
        n = len(items)
        gap = self.options.gap if n > 1 else 0.0
        ring_width = max(0.0, (outer - inner - gap * (n - 1)) / n)
        start = math.radians(self.options.start_angle)
        total = abs(math.radians(self.options.end_angle) - start)
        rings: list[Ring] = []
        for slot, (index, name, value) in enumerate(items):
            value = max(0.0, min(1.0, float(value)))
            ring_outer = outer - slot * (ring_width + gap)
            sweep = total * value
            end = start - sweep if self.options.clockwise else start + sweep
            rings.append(Ring(index, name, value, ring_outer - ring_width, ring_outer, start, end))
        return rings

    def _render(self, surface: Surface) -> None:
        cx, cy, inner, outer = self.geometry(self._layout_rect(surface))
        rings = self.compute_rings(inner, outer)
        if not rings:
            return
        frame = PolarCoordinate(center=(cx, cy), radius=max(0.0, outer))
        track = Style(stroke=self.options.track_color, opacity=self.options.track_opacity)
        for ring in rings:
            color = self._ring_color(ring.data_index, len(rings) > 1)
            surface.circle(cx, cy, ring.radius, Style(stroke=track.stroke, stroke_width=ring.width, opacity=track.opacity))
            if ring.value > 0:
                surface.arc(cx, cy, ring.radius, ring.start_angle, ring.end_angle, Style(stroke=color, stroke_width=ring.width))
                if self.options.round_cap:
                    for angle in (ring.start_angle, ring.end_angle):
                        px, py = polar_point(cx, cy, ring.radius, angle)
                        surface.circle(px, py, ring.width / 2.0, Style(fill=color))
            ex, ey = self._polar_point(frame, ring.radius, ring.end_angle)
            self._publish(ring.data_index, ex, ey, radius=ring.width / 2.0, value=ring.value, name=ring.name or None)

        if self.options.label_show:
            primary = rings[0]
            formatter = self.options.label_formatter
            if callable(formatter):
                text = formatter(primary.value, primary.name)
            elif isinstance(formatter, str):
                text = formatter.replace("{value}", f"{primary.value * 100:.0f}").replace("{name}", primary.name)
            else:
                text = f"{primary.value * 100:.0f}%"
            surface.text(
                cx,
                cy,
                text,
                TextStyle(
                    color=self.options.label_color,
                    font_size=self.options.label_font_size,
                    font_family=self.theme.font_family,
                    align="center",
                    baseline="middle",
                ),
            )
        if self.options.title:
            surface.text(
                cx,
                cy + self.options.title_offset,
                self.options.title,
                TextStyle(color="#666666", font_size=14.0, font_family=self.theme.font_family, align="center", baseline="middle"),
            )

    def _ring_color(self, index: int, multi: bool) -> str:
        raw = self.options.data[index]
        if isinstance(raw, Mapping) and raw.get("color"):
            return str(raw["color"])
        if self.options.color and not multi:
            return self.options.color
        return self.theme.color_for(index)
