from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import math

from chartkit.geometry import Point, Rect, polar_point


class CoordinateSystem(ABC):
    """Turns already-scaled values into final screen points."""

    kind: str = "coordinate"

    @abstractmethod
    def data_to_point(self, value: tuple[float, float]) -> Point:
        ...

    @abstractmethod
    def point_to_data(self, point: Point) -> tuple[float, float]:
        ...

    @abstractmethod
    def contains_point(self, point: Point) -> bool:
        ...


@dataclass
class CartesianCoordinate(CoordinateSystem):
    """Affine passthrough with an optional origin offset."""

    rect: Rect = field(default_factory=lambda: Rect(0.0, 0.0, 0.0, 0.0))
    origin: Point = (0.0, 0.0)
    kind: str = "cartesian"

    def data_to_point(self, value: tuple[float, float]) -> Point:
        return (float(value[0]) + self.origin[0], float(value[1]) + self.origin[1])

    def point_to_data(self, point: Point) -> tuple[float, float]:
        return (float(point[0]) - self.origin[0], float(point[1]) - self.origin[1])

    def contains_point(self, point: Point) -> bool:
        return self.rect.contains(point[0], point[1])

    def get_bounding_rect(self) -> Rect:
        return self.rect

    def update(self, rect: Rect) -> "CartesianCoordinate":
        self.rect = rect
        return self


@dataclass
class PolarCoordinate(CoordinateSystem):
    """Interprets the first value as an angle in degrees and the second as a radius."""

    center: Point = (0.0, 0.0)
    radius: float = 100.0
    inner_radius: float = 0.0
    kind: str = "polar"

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError("radius must be >= 0")
        if self.inner_radius < 0 or self.inner_radius > self.radius:
            raise ValueError("inner_radius must be within [0, radius]")

    def data_to_point(self, value: tuple[float, float]) -> Point:
        angle = math.radians(float(value[0]))
        return polar_point(self.center[0], self.center[1], float(value[1]), angle)

    def point_to_data(self, point: Point) -> tuple[float, float]:
        dx = point[0] - self.center[0]
        dy = self.center[1] - point[1]
        return (math.degrees(math.atan2(dy, dx)), math.hypot(dx, dy))

    def get_angle(self, point: Point) -> float:
        """Angle of `point` in degrees within [0, 360)."""

        return self.point_to_data(point)[0] % 360.0

    def contains_point(self, point: Point) -> bool:
        distance = math.hypot(point[0] - self.center[0], point[1] - self.center[1])
        return self.inner_radius <= distance <= self.radius

    def get_bounding_rect(self) -> Rect:
        return Rect(self.center[0] - self.radius, self.center[1] - self.radius, self.radius * 2.0, self.radius * 2.0)

    def update(self, rect: Rect) -> "PolarCoordinate":
        self.center = rect.center
        ratio = self.inner_radius / self.radius if self.radius else 0.0
        self.radius = min(rect.width, rect.height) / 2.0
        self.inner_radius = self.radius * ratio
        return self
