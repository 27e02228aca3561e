from __future__ import annotations

from collections.abc import Hashable, Sequence
import math

from .base import Scale, anchors, clamp_unit


class BandScale(Scale):
    """Categorical scale dividing the range into equal bands."""

    kind = "band"

    def __init__(
        self,
        domain: Sequence[Hashable] = (),
        range: Sequence[float] = (0.0, 1.0),
        *,
        padding_inner: float = 0.0,
        padding_outer: float = 0.0,
        align: float = 0.5,
    ) -> None:
        self._r0, self._r1 = anchors(range, label="range")
        self._padding_inner = clamp_unit(padding_inner)
        self._padding_outer = clamp_unit(padding_outer)
        self._align = clamp_unit(align)
        self._domain: list[Hashable] = []
        self._index: dict[Hashable, int] = {}
        self._step = 0.0
        self._bandwidth = 0.0
        self._offset = 0.0
        self.set_domain(domain)

    def map(self, value: Hashable) -> float:
        idx = self._index.get(value)
        if idx is None:
            return math.nan
        lead = self._offset + self._padding_outer * self._step + idx * self._step
        if self._r0 > self._r1:
            # bands run from r0 downward; the returned edge is still the low one
            return self._r0 - lead - self._step + self._padding_inner * self._step
        return self._r0 + lead

    def invert(self, pixel: float) -> Hashable:
        if not self._domain or self._step <= 0:
            return ""
        distance = self._r0 - float(pixel) if self._r0 > self._r1 else float(pixel) - self._r0
        idx = math.floor((distance - self._offset - self._padding_outer * self._step) / self._step)
        if idx < 0 or idx >= len(self._domain):
            return ""
        return self._domain[idx]

    def get_domain(self) -> list[Hashable]:
        return list(self._domain)

    def set_domain(self, domain: Sequence[Hashable]) -> "BandScale":
        self._domain = []
        self._index = {}
        for value in domain:
            if value in self._index:
                continue
            self._index[value] = len(self._domain)
            self._domain.append(value)
        self._rescale()
        return self

    def set_range(self, range_: Sequence[float]) -> "BandScale":
        super().set_range(range_)
        self._rescale()
        return self

    def set_padding(self, padding: float) -> "BandScale":
        self._padding_inner = clamp_unit(padding)
        self._padding_outer = clamp_unit(padding)
        self._rescale()
        return self

    def set_padding_inner(self, padding: float) -> "BandScale":
        self._padding_inner = clamp_unit(padding)
        self._rescale()
        return self

    def set_padding_outer(self, padding: float) -> "BandScale":
        self._padding_outer = clamp_unit(padding)
        self._rescale()
        return self

    def set_align(self, align: float) -> "BandScale":
        self._align = clamp_unit(align)
        self._rescale()
        return self

    @property
    def padding_inner(self) -> float:
        return self._padding_inner

    @property
    def padding_outer(self) -> float:
        return self._padding_outer

    def get_bandwidth(self) -> float:
        return self._bandwidth

    def get_step(self) -> float:
        return self._step

    def index_of(self, value: Hashable) -> int | None:
        return self._index.get(value)

    def get_ticks(self, count: int | None = None) -> list[Hashable]:
        return list(self._domain)

    def clone(self) -> "BandScale":
        return BandScale(
            self._domain,
            (self._r0, self._r1),
            padding_inner=self._padding_inner,
            padding_outer=self._padding_outer,
            align=self._align,
        )

    def _rescale(self) -> None:
        n = len(self._domain)
        size = abs(self._r1 - self._r0)
        pi = self._padding_inner
        po = self._padding_outer
        # n bands and n - 1 inner gaps fill the range between the outer paddings
        slots = n - pi + po * 2 if n else 0.0
        self._step = size / max(1.0, slots)
        self._bandwidth = self._step * (1.0 - pi)
        leftover = size - slots * self._step if n else 0.0
        self._offset = max(0.0, leftover) * self._align
