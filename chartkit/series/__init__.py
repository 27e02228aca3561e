from .bar import BarOptions, BarSeries
from .base import ChartType, DataItemPosition, Series
from .candlestick import CandlestickOptions, CandlestickSeries
from .funnel import FunnelOptions, FunnelSeries
from .gauge import GaugeOptions, GaugeSeries
from .graph import GraphOptions, GraphSeries, force_layout
from .heatmap import HeatmapOptions, HeatmapSeries
from .line import AreaOptions, AreaSeries, LineOptions, LineSeries
from .pictorial_bar import PictorialBarOptions, PictorialBarSeries
from .pie import PieOptions, PieSeries
from .radar import RadarOptions, RadarSeries
from .registry import CARTESIAN_TYPES, SERIES_TYPES, create_series, series_class
from .ring_progress import RingProgressOptions, RingProgressSeries
from .sankey import SankeyOptions, SankeySeries
from .scatter import ScatterOptions, ScatterSeries
from .tree import TreeOptions, TreeSeries

__all__ = [
    "AreaOptions",
    "AreaSeries",
    "BarOptions",
    "BarSeries",
    "CARTESIAN_TYPES",
    "CandlestickOptions",
    "CandlestickSeries",
    "ChartType",
    "DataItemPosition",
    "FunnelOptions",
    "FunnelSeries",
    "GaugeOptions",
    "GaugeSeries",
    "GraphOptions",
    "GraphSeries",
    "HeatmapOptions",
    "HeatmapSeries",
    "LineOptions",
    "LineSeries",
    "PictorialBarOptions",
    "PictorialBarSeries",
    "PieOptions",
    "PieSeries",
    "RadarOptions",
    "RadarSeries",
    "RingProgressOptions",
    "RingProgressSeries",
    "SERIES_TYPES",
    "SankeyOptions",
    "SankeySeries",
    "ScatterOptions",
    "ScatterSeries",
    "Series",
    "TreeOptions",
    "TreeSeries",
    "create_series",
    "force_layout",
    "series_class",
]
