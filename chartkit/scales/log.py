from __future__ import annotations

from collections.abc import Sequence
import math

from .base import Scale, anchors


EPSILON = 1e-10


class LogScale(Scale):
    """Logarithmic scale; non-positive inputs collapse onto the range start."""

    kind = "log"

    def __init__(
        self,
        domain: Sequence[float] = (1.0, 10.0),
        range: Sequence[float] = (0.0, 1.0),
        *,
        base: float = 10.0,
        clamp: bool = False,
        nice: bool = False,
    ) -> None:
        if base <= 0 or base == 1:
            raise ValueError("base must be > 0 and != 1")
        self.base = float(base)
        self._clamp = bool(clamp)
        self._nice = bool(nice)
        self._r0, self._r1 = anchors(range, label="range")
        self.set_domain(domain)

    def _log(self, value: float) -> float:
        if self.base == 10:
            out = math.log10(value)
        elif self.base == 2:
            out = math.log2(value)
        else:
            out = math.log(value) / math.log(self.base)
        nearest = round(out)
        return float(nearest) if abs(out - nearest) < 1e-12 else out

    def map(self, value: float) -> float:
        value = float(value)
        if value <= 0:
            return self._r0
        log_d0 = self._log(self._d0)
        log_d1 = self._log(self._d1)
        t = (self._log(value) - log_d0) / ((log_d1 - log_d0) or 1.0)
        if self._clamp:
            t = max(0.0, min(1.0, t))
        return self._r0 + t * (self._r1 - self._r0)

    def invert(self, pixel: float) -> float:
        if self._r0 == self._r1:
            return self._d0
        t = (float(pixel) - self._r0) / (self._r1 - self._r0)
        if self._clamp:
            t = max(0.0, min(1.0, t))
        log_d0 = self._log(self._d0)
        log_d1 = self._log(self._d1)
        return self.base ** (log_d0 + t * (log_d1 - log_d0))

    def get_domain(self) -> list[float]:
        return [self._d0, self._d1]

    def set_domain(self, domain: Sequence[float]) -> "LogScale":
        d0, d1 = anchors(domain, label="domain")
        self._d0 = max(EPSILON, d0)
        self._d1 = max(EPSILON, d1)
        if self._nice:
            self.nicefy()
        return self

    def get_ticks(self, count: int | None = None) -> list[float]:
        count = count or 10
        lo, hi = min(self._d0, self._d1), max(self._d0, self._d1)
        log_min = math.floor(self._log(lo))
        log_max = math.ceil(self._log(hi))
        multipliers = (2.0, 5.0) if self.base == 10 else (2.0,)

        ticks: list[float] = []
        for power in range(log_min, log_max + 1):
            value = self.base**power
            if lo <= value <= hi:
                ticks.append(value)
            if len(ticks) < count and power < log_max:
                for mult in multipliers:
                    sub = value * mult
                    if lo <= sub <= hi:
                        ticks.append(sub)

        if len(ticks) > count * 2:
            stride = math.ceil(len(ticks) / count)
            ticks = ticks[::stride]
        return sorted(ticks)

    def nicefy(self) -> "LogScale":
        lo_first = self._d0 <= self._d1
        lo, hi = sorted((self._d0, self._d1))
        lo = self.base ** math.floor(self._log(lo))
        hi = self.base ** math.ceil(self._log(hi))
        self._d0, self._d1 = (lo, hi) if lo_first else (hi, lo)
        return self

    def clone(self) -> "LogScale":
        copy = LogScale((self._d0, self._d1), (self._r0, self._r1), base=self.base, clamp=self._clamp)
        copy._nice = self._nice
        return copy
