from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
import math
from typing import Any, TypeVar


ScaleT = TypeVar("ScaleT", bound="Scale")


class Scale(ABC):
    """Maps domain values to pixel coordinates and back."""

    kind: str = "scale"
    _r0: float
    _r1: float

    @abstractmethod
    def map(self, value: Any) -> float:
        ...

    @abstractmethod
    def invert(self, pixel: float) -> Any:
        ...

    @abstractmethod
    def get_domain(self) -> list[Any]:
        ...

    @abstractmethod
    def set_domain(self: ScaleT, domain: Sequence[Any]) -> ScaleT:
        ...

    @abstractmethod
    def get_ticks(self, count: int | None = None) -> list[Any]:
        ...

    @abstractmethod
    def clone(self: ScaleT) -> ScaleT:
        ...

    def get_range(self) -> list[float]:
        return [self._r0, self._r1]

    def set_range(self: ScaleT, range_: Sequence[float]) -> ScaleT:
        self._r0, self._r1 = anchors(range_, label="range")
        return self

    def range_extent(self) -> tuple[float, float]:
        return (min(self._r0, self._r1), max(self._r0, self._r1))


def anchors(values: Sequence[Any], *, label: str) -> tuple[float, float]:
    """Resolve a continuous domain/range to its first and last entries."""

    if values is None or len(values) < 2:
        raise ValueError(f"{label} must contain at least two values")
    first = float(values[0])
    last = float(values[-1])
    if not (math.isfinite(first) and math.isfinite(last)):
        raise ValueError(f"{label} values must be finite")
    return (first, last)


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))
