from .band import BandScale
from .base import Scale
from .linear import LinearScale, format_tick, tick_increment
from .log import LogScale
from .time import TIME_INTERVALS, TimeInterval, TimeScale, choose_interval, from_millis, to_millis

__all__ = [
    "BandScale",
    "LinearScale",
    "LogScale",
    "Scale",
    "TIME_INTERVALS",
    "TimeInterval",
    "TimeScale",
    "choose_interval",
    "format_tick",
    "from_millis",
    "tick_increment",
    "to_millis",
]
