from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import math
from typing import Union

from .base import Scale, anchors


SECOND = 1000
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY

TimeValue = Union[datetime, int, float]


@dataclass(frozen=True)
class TimeInterval:
    name: str
    ms: int
    label_format: str


TIME_INTERVALS: tuple[TimeInterval, ...] = (
    TimeInterval("second", SECOND, "%H:%M:%S"),
    TimeInterval("5 seconds", 5 * SECOND, "%H:%M:%S"),
    TimeInterval("15 seconds", 15 * SECOND, "%H:%M:%S"),
    TimeInterval("30 seconds", 30 * SECOND, "%H:%M:%S"),
    TimeInterval("minute", MINUTE, "%H:%M"),
    TimeInterval("5 minutes", 5 * MINUTE, "%H:%M"),
    TimeInterval("15 minutes", 15 * MINUTE, "%H:%M"),
    TimeInterval("30 minutes", 30 * MINUTE, "%H:%M"),
    TimeInterval("hour", HOUR, "%H:%M"),
    TimeInterval("3 hours", 3 * HOUR, "%m-%d %H:%M"),
    TimeInterval("6 hours", 6 * HOUR, "%m-%d %H:%M"),
    TimeInterval("12 hours", 12 * HOUR, "%m-%d %H:%M"),
    TimeInterval("day", DAY, "%m-%d"),
    TimeInterval("2 days", 2 * DAY, "%m-%d"),
    TimeInterval("week", WEEK, "%m-%d"),
    TimeInterval("month", MONTH, "%Y-%m"),
    TimeInterval("3 months", 3 * MONTH, "%Y-%m"),
    TimeInterval("6 months", 6 * MONTH, "%Y-%m"),
    TimeInterval("year", YEAR, "%Y"),
    TimeInterval("5 years", 5 * YEAR, "%Y"),
    TimeInterval("10 years", 10 * YEAR, "%Y"),
)


def to_millis(value: TimeValue) -> float:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000.0
    return float(value)


def from_millis(ms: float) -> datetime:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


def choose_interval(span_ms: float, count: int) -> TimeInterval:
    """Largest ladder interval not exceeding `span / count`; the finest when none fits."""

    target = abs(span_ms) / max(1, count)
    chosen = TIME_INTERVALS[0]
    for interval in TIME_INTERVALS:
        if interval.ms <= target:
            chosen = interval
    return chosen


class TimeScale(Scale):
    """Linear scale over millisecond timestamps with calendar-aware ticks."""

    kind = "time"

    def __init__(
        self,
        domain: Sequence[TimeValue] = (0, DAY),
        range: Sequence[float] = (0.0, 1.0),
        *,
        clamp: bool = False,
        nice: bool = False,
        tick_count: int = 10,
    ) -> None:
        if tick_count <= 0:
            raise ValueError("tick_count must be > 0")
        self._clamp = bool(clamp)
        self._nice = bool(nice)
        self.tick_count = int(tick_count)
        self._r0, self._r1 = anchors(range, label="range")
        self.set_domain(domain)

    def map(self, value: TimeValue) -> float:
        t_ms = to_millis(value)
        if self._d0 == self._d1:
            return self._r0
        out = self._r0 + ((t_ms - self._d0) / (self._d1 - self._d0)) * (self._r1 - self._r0)
        if self._clamp:
            lo, hi = self.range_extent()
            out = max(lo, min(hi, out))
        return out

    def invert(self, pixel: float) -> float:
        if self._r0 == self._r1:
            return self._d0
        out = self._d0 + ((float(pixel) - self._r0) / (self._r1 - self._r0)) * (self._d1 - self._d0)
        if self._clamp:
            out = max(min(self._d0, self._d1), min(max(self._d0, self._d1), out))
        return out

    def invert_datetime(self, pixel: float) -> datetime:
        return from_millis(self.invert(pixel))

    def get_domain(self) -> list[float]:
        return [self._d0, self._d1]

    def set_domain(self, domain: Sequence[TimeValue]) -> "TimeScale":
        if domain is None or len(domain) < 2:
            raise ValueError("domain must contain at least two values")
        self._d0, self._d1 = anchors([to_millis(domain[0]), to_millis(domain[-1])], label="domain")
        if self._nice:
            self.nicefy()
        return self

    def interval(self, count: int | None = None) -> TimeInterval:
        return choose_interval(self._d1 - self._d0, count or self.tick_count)

    def get_ticks(self, count: int | None = None) -> list[float]:
        lo, hi = min(self._d0, self._d1), max(self._d0, self._d1)
        interval = self.interval(count)
        current = math.floor(lo / interval.ms) * interval.ms
        ticks: list[float] = []
        while current <= hi:
            if current >= lo:
                ticks.append(float(current))
            current += interval.ms
        return ticks

    def nicefy(self, count: int | None = None) -> "TimeScale":
        interval = self.interval(count)
        lo_first = self._d0 <= self._d1
        lo, hi = sorted((self._d0, self._d1))
        lo = float(math.floor(lo / interval.ms) * interval.ms)
        hi = float(math.ceil(hi / interval.ms) * interval.ms)
        self._d0, self._d1 = (lo, hi) if lo_first else (hi, lo)
        return self

    def format_tick(self, value: TimeValue, count: int | None = None) -> str:
        return from_millis(to_millis(value)).strftime(self.interval(count).label_format)

    def format_ticks(self, count: int | None = None) -> list[str]:
        fmt = self.interval(count).label_format
        return [from_millis(t).strftime(fmt) for t in self.get_ticks(count)]

    def clone(self) -> "TimeScale":
        copy = TimeScale(
            (self._d0, self._d1),
            (self._r0, self._r1),
            clamp=self._clamp,
            tick_count=self.tick_count,
        )
        copy._nice = self._nice
        return copy
