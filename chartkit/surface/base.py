from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
import math
from typing import Literal

from chartkit.geometry import (
    PathCommand,
    Point,
    Rect,
    polar_point,
    polyline_path,
    rounded_rect_path,
    sector_path,
    smooth_path,
)


SurfaceKind = Literal["raster", "vector"]
TextAlign = Literal["left", "center", "right"]
TextBaseline = Literal["top", "middle", "bottom", "alphabetic"]


@dataclass(frozen=True)
class Style:
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    dash: tuple[float, ...] | None = None
    opacity: float = 1.0

    def __post_init__(self) -> None:
        if self.stroke_width < 0:
            raise ValueError("stroke_width must be >= 0")
        if not 0.0 <= self.opacity <= 1.0:
            raise ValueError("opacity must be within [0, 1]")


@dataclass(frozen=True)
class TextStyle:
    color: str = "#333333"
    font_size: float = 12.0
    font_family: str = "DejaVu Sans"
    align: TextAlign = "left"
    baseline: TextBaseline = "alphabetic"
    opacity: float = 1.0


class Surface(ABC):
    """Primitive drawing contract shared by raster and vector backends.

    Only `path`, `text`, `measure_text`, the transform stack and the metadata are
    backend-specific; the remaining primitives are expressed as paths unless a
    backend has a better native form.
    """

    kind: SurfaceKind

    @property
    @abstractmethod
    def width(self) -> int:
        ...

    @property
    @abstractmethod
    def height(self) -> int:
        ...

    @abstractmethod
    def path(self, commands: Sequence[PathCommand], style: Style) -> None:
        ...

    @abstractmethod
    def text(self, x: float, y: float, text: str, style: TextStyle) -> None:
        ...

    @abstractmethod
    def measure_text(self, text: str, style: TextStyle | None = None) -> float:
        ...

    @abstractmethod
    def save(self) -> None:
        ...

    @abstractmethod
    def restore(self) -> None:
        ...

    @abstractmethod
    def translate(self, dx: float, dy: float) -> None:
        ...

    @abstractmethod
    def rotate(self, radians: float) -> None:
        ...

    @abstractmethod
    def scale(self, sx: float, sy: float | None = None) -> None:
        ...

    @abstractmethod
    def clip(self, rect: Rect) -> None:
        ...

    def rect(self, x: float, y: float, width: float, height: float, style: Style, *, radius: float | Sequence[float] = 0) -> None:
        if width < 0:
            x, width = x + width, -width
        if height < 0:
            y, height = y + height, -height
        has_radius = radius if isinstance(radius, (int, float)) else any(radius)
        if has_radius:
            self.path(rounded_rect_path(x, y, width, height, radius), style)
            return
        self.path(polyline_path([(x, y), (x + width, y), (x + width, y + height), (x, y + height)], closed=True), style)

    def circle(self, cx: float, cy: float, radius: float, style: Style) -> None:
        if radius <= 0:
            return
        self.path(
            [("M", cx + radius, cy), ("A", cx, cy, radius, 0.0, 2.0 * math.pi, True), ("Z",)],
            style,
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, style: Style) -> None:
        self.path([("M", x1, y1), ("L", x2, y2)], _stroke_only(style))

    def polyline(self, points: Sequence[Point], style: Style, *, smooth: float = 0.0) -> None:
        if len(points) < 2:
            return
        commands = smooth_path(points, smooth) if smooth > 0 else polyline_path(points)
        self.path(commands, _stroke_only(style))

    def area(self, points: Sequence[Point], baseline: float | Sequence[Point], style: Style, *, smooth: float = 0.0) -> None:
        """Fill between `points` and either a horizontal baseline or a lower polyline."""

        if len(points) < 2:
            return
        commands = smooth_path(points, smooth) if smooth > 0 else polyline_path(points)
        if isinstance(baseline, (int, float)):
            lower = [(points[-1][0], float(baseline)), (points[0][0], float(baseline))]
        else:
            lower = list(reversed(list(baseline)))
        if smooth > 0 and len(lower) > 2:
            back = smooth_path(lower, smooth)
            commands = list(commands) + [("L", lower[0][0], lower[0][1])] + list(back[1:])
        else:
            commands = list(commands) + [("L", x, y) for x, y in lower]
        commands.append(("Z",))
        self.path(commands, Style(fill=style.fill, stroke=None, opacity=style.opacity))

    def arc(self, cx: float, cy: float, radius: float, start_angle: float, end_angle: float, style: Style) -> None:
        if radius <= 0:
            return
        start = polar_point(cx, cy, radius, start_angle)
        self.path(
            [("M", start[0], start[1]), ("A", cx, cy, radius, start_angle, end_angle, end_angle > start_angle)],
            _stroke_only(style),
        )

    def sector(
        self,
        cx: float,
        cy: float,
        inner_radius: float,
        outer_radius: float,
        start_angle: float,
        end_angle: float,
        style: Style,
    ) -> None:
        if outer_radius <= 0 or start_angle == end_angle:
            return
        self.path(sector_path(cx, cy, inner_radius, outer_radius, start_angle, end_angle), style)

    def polygon(self, points: Sequence[Point], style: Style) -> None:
        if len(points) < 3:
            return
        self.path(polyline_path(points, closed=True), style)


def _stroke_only(style: Style) -> Style:
    if style.fill is None:
        return style
    return Style(stroke=style.stroke or style.fill, stroke_width=style.stroke_width, dash=style.dash, opacity=style.opacity)
