from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
import math
from typing import Any, Literal, Union

import numpy as np

from chartkit.data import to_number
from chartkit.errors import ChartDataError
from chartkit.geometry import Rect
from chartkit.series.base import ChartType, Series, check_opacity
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

GraphLayout = Literal["force", "circular", "none"]
LabelPosition = Literal["inside", "top", "bottom", "left", "right"]
NONE_LAYOUT_PADDING = 50.0
FORCE_INIT_SPREAD = 200.0
DEFAULT_NODE_SIZE = 10.0


@dataclass(frozen=True)
class GraphOptions:
    data: tuple[Any, ...] = ()
    links: tuple[Any, ...] = ()
    categories: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    layout: GraphLayout = "none"
    symbol_size: Union[float, Callable[[Any], float]] = DEFAULT_NODE_SIZE
    repulsion: float = 50.0
    edge_length: float = 30.0
    gravity: float = 0.1
    iterations: int = 100
    init_layout: Literal["random", "circular"] = "random"
    max_force_nodes: int = 2000
    seed: int = 0
    line_color: str = "#999999"
    line_width: float = 1.0
    line_opacity: float = 0.6
    curveness: float = 0.0
    border_color: str = "#ffffff"
    border_width: float = 1.0
    label_show: bool = True
    label_position: LabelPosition = "bottom"
    label_color: str = "#333333"
    label_font_size: float = 12.0

    def __post_init__(self) -> None:
        check_opacity("line_opacity", self.line_opacity)
        if self.layout not in {"force", "circular", "none"}:
            raise ValueError("layout must be one of: force, circular, none")
        if self.iterations < 0:
            raise ValueError("iterations must be >= 0")
        if self.max_force_nodes <= 0:
            raise ValueError("max_force_nodes must be > 0")


@dataclass
class GraphNode:
    index: int
    id: str | None
    name: str
    size: float
    color: str
    fixed: bool = False
    x: float | None = None
    y: float | None = None
    value: Any = None


@dataclass(frozen=True)
class GraphEdge:
    source: int
    target: int
    curveness: float | None = None
    color: str | None = None
    width: float | None = None


def circular_positions(count: int, cx: float, cy: float) -> np.ndarray:
    """Nodes evenly on a circle of radius `0.7*min(cx, cy)`, first node at the top."""

    radius = min(cx, cy) * 0.7
    angles = 2.0 * np.pi * np.arange(count) / max(count, 1) - np.pi / 2.0
    return np.column_stack([cx + radius * np.cos(angles), cy + radius * np.sin(angles)])


def force_layout(
    positions: np.ndarray,
    edges: list[tuple[int, int]],
    fixed: np.ndarray,
    center: tuple[float, float],
    *,
    repulsion: float = 50.0,
    edge_length: float = 30.0,
    gravity: float = 0.1,
    iterations: int = 100,
) -> np.ndarray:
    """Run the cooling force simulation and return new `(n, 2)` positions.

    Each iteration applies pairwise repulsion `repulsion*alpha/dist`, a spring pull
    `(dist - edge_length)*0.1*alpha` along every edge and a pull towards `center`
    scaled by `gravity*alpha`, with `alpha = 1 - i/iterations`. Rows flagged in
    `fixed` are never moved. Distances below 1 are treated as 1.
    """

    pos = np.array(positions, dtype=np.float64, copy=True)
    count = pos.shape[0]
    if count == 0 or iterations <= 0:
        return pos
    movable = ~np.asarray(fixed, dtype=bool)
    mask = movable[:, None].astype(np.float64)
    center_arr = np.asarray(center, dtype=np.float64)
    src = np.array([s for s, _ in edges], dtype=np.intp)
    dst = np.array([t for _, t in edges], dtype=np.intp)

    for it in range(iterations):
        alpha = 1.0 - it / iterations

        diff = pos[:, None, :] - pos[None, :, :]
        dist = np.sqrt(np.sum(diff * diff, axis=-1))
        dist = np.where(dist < 1.0, 1.0, dist)
        np.fill_diagonal(dist, np.inf)
        push = (repulsion * alpha) / (dist * dist)
        pos += np.sum(diff * push[:, :, None], axis=1) * mask

        if src.size:
            delta = pos[dst] - pos[src]
            length = np.sqrt(np.sum(delta * delta, axis=-1))
            length = np.where(length < 1.0, 1.0, length)
            pull = ((length - edge_length) * 0.1 * alpha / length)[:, None] * delta
            step = np.zeros_like(pos)
            np.add.at(step, src, pull)
            np.add.at(step, dst, -pull)
            pos += step * mask

        pos += (center_arr - pos) * gravity * alpha * mask
    return pos


def resolve_node_ref(ref: Any, nodes: list[GraphNode]) -> int | None:
    """Node index from an index, an id or a name."""

    if isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return ref if 0 <= ref < len(nodes) else None
    key = str(ref)
    for node in nodes:
        if node.id == key:
            return node.index
    for node in nodes:
        if node.name == key:
            return node.index
    return None


class GraphSeries(Series[GraphOptions]):
    series_type = ChartType.GRAPH
    options_class = GraphOptions

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.nodes: list[GraphNode] = []
        self.edges: list[GraphEdge] = []
        self.positions = np.zeros((0, 2), dtype=np.float64)

    def _node_size(self, raw: Mapping[str, Any]) -> float:
        explicit = to_number(raw.get("symbol_size", raw.get("symbolSize")))
        if explicit is not None:
            return explicit
        size = self.options.symbol_size
        if callable(size):
            return float(size(raw.get("value")))
        return float(size)

    def _category_color(self, category: Any) -> str | None:
        if isinstance(category, bool) or not isinstance(category, int):
            return None
        if not 0 <= category < len(self.options.categories):
            return None
        entry = self.options.categories[category]
        return str(entry["color"]) if isinstance(entry, Mapping) and entry.get("color") else None

    def build(self) -> None:
        """Parse nodes and links into the node arena and edge list."""

        nodes: list[GraphNode] = []
        for index, raw in enumerate(self.options.data):
            if not isinstance(raw, Mapping):
                raise ChartDataError(f"graph node {index} must be a mapping")
            color = self._category_color(raw.get("category")) or raw.get("color") or self.theme.color_for(index)
            nodes.append(
                GraphNode(
                    index=index,
                    id=None if raw.get("id") is None else str(raw["id"]),
                    name=str(raw.get("name", raw.get("id", index))),
                    size=self._node_size(raw),
                    color=str(color),
                    fixed=bool(raw.get("fixed", False)),
                    x=to_number(raw.get("x")),
                    y=to_number(raw.get("y")),
                    value=raw.get("value"),
                )
            )
        edges: list[GraphEdge] = []
        for index, raw in enumerate(self.options.links):
            if not isinstance(raw, Mapping):
                raise ChartDataError(f"graph link {index} must be a mapping")
            source = resolve_node_ref(raw.get("source"), nodes)
            target = resolve_node_ref(raw.get("target"), nodes)
            if source is None or target is None:
                LOGGER.debug("skipping link %s of %s: unresolved endpoint", index, self.name)
                continue
            edges.append(
                GraphEdge(
                    source=source,
                    target=target,
                    curveness=to_number(raw.get("curveness")),
                    color=raw.get("color"),
                    width=to_number(raw.get("width")),
                )
            )
        self.nodes = nodes
        self.edges = edges

    def compute_layout(self, rect: Rect) -> np.ndarray:
        self.build()
        opts = self.options
        count = len(self.nodes)
        cx, cy = rect.x + rect.width / 2.0, rect.y + rect.height / 2.0
        rng = np.random.default_rng(opts.seed)

        if opts.layout == "circular":
            pos = circular_positions(count, rect.width / 2.0, rect.height / 2.0) + (rect.x, rect.y)
        elif opts.layout == "force":
            if count > opts.max_force_nodes:
                LOGGER.warning(
                    "graph %s has %s nodes (max_force_nodes=%s); using circular layout",
                    self.name,
                    count,
                    opts.max_force_nodes,
                )
                pos = circular_positions(count, rect.width / 2.0, rect.height / 2.0) + (rect.x, rect.y)
            else:
                if opts.init_layout == "circular":
                    start = circular_positions(count, rect.width / 2.0, rect.height / 2.0) + (rect.x, rect.y)
                else:
                    start = np.column_stack(
                        [
                            cx + (rng.random(count) - 0.5) * FORCE_INIT_SPREAD,
                            cy + (rng.random(count) - 0.5) * FORCE_INIT_SPREAD,
                        ]
                    )
                for node in self.nodes:
                    if node.fixed and node.x is not None and node.y is not None:
                        start[node.index] = (node.x, node.y)
                pos = force_layout(
                    start,
                    [(edge.source, edge.target) for edge in self.edges],
                    np.array([node.fixed for node in self.nodes], dtype=bool),
                    (cx, cy),
                    repulsion=opts.repulsion,
                    edge_length=opts.edge_length,
                    gravity=opts.gravity,
                    iterations=opts.iterations,
                )
        else:
            width = max(0.0, rect.width - 2.0 * NONE_LAYOUT_PADDING)
            height = max(0.0, rect.height - 2.0 * NONE_LAYOUT_PADDING)
            pos = np.zeros((count, 2), dtype=np.float64)
            for node in self.nodes:
                if node.x is not None and node.y is not None:
                    fx, fy = node.x / 100.0, node.y / 100.0
                else:
                    fx, fy = rng.random(), rng.random()
                pos[node.index] = (
                    rect.x + NONE_LAYOUT_PADDING + fx * width,
                    rect.y + NONE_LAYOUT_PADDING + fy * height,
                )
        self.positions = pos.reshape(count, 2)
        return self.positions

    def _render(self, surface: Surface) -> None:
        if not self.options.data:
            return
        pos = self.compute_layout(self._layout_rect(surface))
        for edge in self.edges:
            self._render_edge(surface, edge, pos)
        for node in self.nodes:
            x, y = float(pos[node.index, 0]), float(pos[node.index, 1])
            radius = node.size / 2.0
            surface.circle(x, y, radius, Style(fill=node.color, stroke=self.options.border_color, stroke_width=self.options.border_width))
            self._publish(node.index, x, y, radius=radius, value=node.value, name=node.name)
            if self.options.label_show:
                self._render_label(surface, node, x, y, radius)

    def _render_edge(self, surface: Surface, edge: GraphEdge, pos: np.ndarray) -> None:
        opts = self.options
        x1, y1 = float(pos[edge.source, 0]), float(pos[edge.source, 1])
        x2, y2 = float(pos[edge.target, 0]), float(pos[edge.target, 1])
        style = Style(
            stroke=edge.color or opts.line_color,
            stroke_width=edge.width if edge.width is not None else opts.line_width,
            opacity=opts.line_opacity,
        )
        curveness = edge.curveness if edge.curveness is not None else opts.curveness
        dist = math.hypot(x2 - x1, y2 - y1)
        if curveness == 0 or dist == 0:
            surface.line(x1, y1, x2, y2, style)
            return
        offset = curveness * dist
        ctrl_x = (x1 + x2) / 2.0 - (y2 - y1) / dist * offset
        ctrl_y = (y1 + y2) / 2.0 + (x2 - x1) / dist * offset
        surface.path([("M", x1, y1), ("Q", ctrl_x, ctrl_y, x2, y2)], style)

    def _render_label(self, surface: Surface, node: GraphNode, x: float, y: float, radius: float) -> None:
        opts = self.options
        align, baseline = "center", "middle"
        if opts.label_position == "top":
            y, baseline = y - radius - 5.0, "bottom"
        elif opts.label_position == "bottom":
            y, baseline = y + radius + 5.0, "top"
        elif opts.label_position == "left":
            x, align = x - radius - 5.0, "right"
        elif opts.label_position == "right":
            x, align = x + radius + 5.0, "left"
        surface.text(
            x,
            y,
            node.name,
            TextStyle(
                color=opts.label_color,
                font_size=opts.label_font_size,
                font_family=self.theme.font_family,
                align=align,  # type: ignore[arg-type]
                baseline=baseline,  # type: ignore[arg-type]
            ),
        )
