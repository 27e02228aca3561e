from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
import math

from .base import Scale, anchors


_E10 = math.sqrt(50.0)
_E5 = math.sqrt(10.0)
_E2 = math.sqrt(2.0)

DEFAULT_TICK_COUNT = 10


class LinearScale(Scale):
    """Continuous affine scale."""

    kind = "linear"

    def __init__(
        self,
        domain: Sequence[float] = (0.0, 1.0),
        range: Sequence[float] = (0.0, 1.0),
        *,
        clamp: bool = False,
        nice: bool = False,
        tick_count: int = DEFAULT_TICK_COUNT,
    ) -> None:
        if tick_count <= 0:
            raise ValueError("tick_count must be > 0")
        self._clamp = bool(clamp)
        self._nice = bool(nice)
        self.tick_count = int(tick_count)
        self._r0, self._r1 = anchors(range, label="range")
        self.set_domain(domain)

    def map(self, value: float) -> float:
        d0, d1, r0, r1 = self._d0, self._d1, self._r0, self._r1
        if d0 == d1:
            return r0
        out = r0 + ((float(value) - d0) / (d1 - d0)) * (r1 - r0)
        if self._clamp:
            lo, hi = self.range_extent()
            out = max(lo, min(hi, out))
        return out

    def invert(self, pixel: float) -> float:
        d0, d1, r0, r1 = self._d0, self._d1, self._r0, self._r1
        if r0 == r1:
            return d0
        out = d0 + ((float(pixel) - r0) / (r1 - r0)) * (d1 - d0)
        if self._clamp:
            out = max(min(d0, d1), min(max(d0, d1), out))
        return out

    def get_domain(self) -> list[float]:
        return [self._d0, self._d1]

    def set_domain(self, domain: Sequence[float]) -> "LinearScale":
        self._d0, self._d1 = anchors(domain, label="domain")
        if self._nice:
            self.nicefy()
        return self

    def set_clamp(self, clamp: bool) -> "LinearScale":
        self._clamp = bool(clamp)
        return self

    @property
    def clamped(self) -> bool:
        return self._clamp

    def tick_step(self, count: int | None = None) -> float:
        return tick_increment(self._d0, self._d1, count or self.tick_count)

    def get_ticks(self, count: int | None = None) -> list[float]:
        count = count or self.tick_count
        lo, hi = min(self._d0, self._d1), max(self._d0, self._d1)
        if lo == hi:
            return [lo]
        step = abs(tick_increment(lo, hi, count))
        if step == 0 or not math.isfinite(step):
            return [lo, hi]
        start = math.ceil(lo / step)
        stop = math.floor(hi / step)
        # Multiply integer indices to avoid accumulating drift.
        return [_snap(i * step, step) for i in range(start, stop + 1)]

    def nicefy(self, count: int | None = None) -> "LinearScale":
        count = count or self.tick_count
        d0, d1 = self._d0, self._d1
        if d0 == d1:
            return self
        reverse = d1 < d0
        lo, hi = (d1, d0) if reverse else (d0, d1)
        step = abs(tick_increment(lo, hi, count))
        if step == 0 or not math.isfinite(step):
            return self
        lo = _snap(math.floor(lo / step) * step, step)
        hi = _snap(math.ceil(hi / step) * step, step)
        self._d0, self._d1 = (hi, lo) if reverse else (lo, hi)
        return self

    def format_ticks(self, count: int | None = None) -> list[str]:
        ticks = self.get_ticks(count)
        step = abs(ticks[1] - ticks[0]) if len(ticks) > 1 else None
        return [format_tick(v, step=step) for v in ticks]

    def clone(self) -> "LinearScale":
        copy = LinearScale(
            (self._d0, self._d1),
            (self._r0, self._r1),
            clamp=self._clamp,
            tick_count=self.tick_count,
        )
        copy._nice = self._nice
        return copy


def tick_increment(start: float, stop: float, count: int) -> float:
    """Return a 1/2/5 x 10^k step spanning `count` intervals, signed like `stop - start`."""

    span = stop - start
    step0 = abs(span) / max(1, count)
    if step0 == 0:
        return 0.0
    step1 = 10.0 ** math.floor(math.log10(step0))
    error = step0 / step1
    if error >= _E10:
        step1 *= 10.0
    elif error >= _E5:
        step1 *= 5.0
    elif error >= _E2:
        step1 *= 2.0
    return -step1 if span < 0 else step1


def format_tick(value: float, *, step: float | None = None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step is not None and math.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e9 or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    try:
        q = d.quantize(Decimal("1").scaleb(-decimals))
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def _snap(value: float, step: float) -> float:
    # Round away float noise such as 0.30000000000000004 on decimal steps.
    decimals = _decimals_from_step(step)
    out = round(value, decimals)
    return 0.0 if out == 0 else out


def _decimals_from_step(step: float | None) -> int:
    if step is None or step <= 0 or not math.isfinite(step):
        return 6
    exp = Decimal(repr(step)).normalize().as_tuple().exponent
    return min(12, max(0, -int(exp)))
