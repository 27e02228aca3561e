from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .bar import BarSeries
from .base import ChartType, Series
from .candlestick import CandlestickSeries
from .funnel import FunnelSeries
from .gauge import GaugeSeries
from .graph import GraphSeries
from .heatmap import HeatmapSeries
from .line import AreaSeries, LineSeries
from .pictorial_bar import PictorialBarSeries
from .pie import PieSeries
from .radar import RadarSeries
from .ring_progress import RingProgressSeries
from .sankey import SankeySeries
from .scatter import ScatterSeries
from .tree import TreeSeries


SERIES_TYPES: dict[ChartType, type[Series[Any]]] = {
    cls.series_type: cls
    for cls in (
        LineSeries,
        AreaSeries,
        BarSeries,
        ScatterSeries,
        CandlestickSeries,
        HeatmapSeries,
        PictorialBarSeries,
        PieSeries,
        GaugeSeries,
        RingProgressSeries,
        RadarSeries,
        FunnelSeries,
        GraphSeries,
        TreeSeries,
        SankeySeries,
    )
}

CARTESIAN_TYPES = frozenset(
    {
        ChartType.LINE,
        ChartType.AREA,
        ChartType.BAR,
        ChartType.SCATTER,
        ChartType.CANDLESTICK,
        ChartType.HEATMAP,
        ChartType.PICTORIAL_BAR,
    }
)


def series_class(chart_type: ChartType | str) -> type[Series[Any]]:
    try:
        return SERIES_TYPES[ChartType(chart_type)]
    except ValueError as exc:
        valid = ", ".join(t.value for t in ChartType)
        raise ValueError(f"chart_type must be one of: {valid}") from exc


def create_series(chart_type: ChartType | str, options: Mapping[str, Any] | None = None, **kwargs: Any) -> Series[Any]:
    """Instantiate the series class registered for `chart_type`."""

    return series_class(chart_type)(options, **kwargs)
