from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from chartkit.geometry import Rect
from chartkit.scales import Scale
from chartkit.surface import Style, Surface


class Component(ABC):
    """Decorative collaborator that consumes core geometry and draws onto a surface."""

    @abstractmethod
    def render(self, surface: Surface) -> None:
        ...

    @abstractmethod
    def get_bounding_rect(self) -> Rect:
        ...

    @abstractmethod
    def update(self, rect: Rect) -> None:
        ...

    @abstractmethod
    def dispose(self) -> None:
        ...


class GridLines(Component):
    """Split lines at a scale's ticks across a plot rectangle."""

    def __init__(
        self,
        scale: Scale,
        rect: Rect,
        *,
        orient: Literal["horizontal", "vertical"] = "horizontal",
        style: Style | None = None,
        tick_count: int | None = None,
    ) -> None:
        if orient not in {"horizontal", "vertical"}:
            raise ValueError("orient must be `horizontal` or `vertical`")
        self.scale: Scale | None = scale
        self.rect = rect
        self.orient = orient
        self.style = style or Style(stroke="#E0E6F1", stroke_width=1.0)
        self.tick_count = tick_count

    def render(self, surface: Surface) -> None:
        if self.scale is None:
            return
        bandwidth = getattr(self.scale, "get_bandwidth", None)
        half = bandwidth() / 2.0 if bandwidth is not None else 0.0
        for tick in self.scale.get_ticks(self.tick_count):
            pos = self.scale.map(tick) + half
            if pos != pos:
                continue
            if self.orient == "horizontal":
                if self.rect.y <= pos <= self.rect.bottom:
                    surface.line(self.rect.x, pos, self.rect.right, pos, self.style)
            elif self.rect.x <= pos <= self.rect.right:
                surface.line(pos, self.rect.y, pos, self.rect.bottom, self.style)

    def get_bounding_rect(self) -> Rect:
        return self.rect

    def update(self, rect: Rect) -> None:
        self.rect = rect

    def dispose(self) -> None:
        self.scale = None
