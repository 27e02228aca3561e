from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
import logging
from typing import Any, Literal

from chartkit.data import to_number
from chartkit.errors import ChartDataError
from chartkit.geometry import PathCommand, Rect
from chartkit.series.base import ChartType, Series, check_opacity
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

SankeyOrient = Literal["horizontal", "vertical"]


@dataclass(frozen=True)
class SankeyOptions:
    data: tuple[Any, ...] = ()
    links: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    orient: SankeyOrient = "horizontal"
    node_width: float = 20.0
    node_gap: float = 10.0
    padding: float = 50.0
    curveness: float = 0.5
    link_color: str = "source"
    link_opacity: float = 0.3
    border_color: str | None = None
    border_width: float = 0.0
    label_show: bool = True
    label_color: str = "#333333"
    label_font_size: float = 12.0

    def __post_init__(self) -> None:
        check_opacity("link_opacity", self.link_opacity)
        if self.orient not in {"horizontal", "vertical"}:
            raise ValueError("orient must be `horizontal` or `vertical`")
        if self.node_width < 0 or self.node_gap < 0 or self.padding < 0:
            raise ValueError("node_width/node_gap/padding must be >= 0")
        if not 0.0 <= self.curveness <= 1.0:
            raise ValueError("curveness must be in [0, 1]")


@dataclass
class SankeyNode:
    index: int
    name: str
    color: str
    depth: int = -1
    in_value: float = 0.0
    out_value: float = 0.0
    main: float = 0.0
    cross: float = 0.0
    band: float = 0.0

    @property
    def flow(self) -> float:
        return max(self.in_value, self.out_value)


@dataclass
class SankeyLink:
    index: int
    source: int
    target: int
    value: float
    band: float = 0.0
    source_offset: float = 0.0
    target_offset: float = 0.0
    color: str | None = None


def assign_depths(nodes: list[SankeyNode], links: list[SankeyLink]) -> None:
    """Breadth-first depths from nodes without incoming links.

    Explicit depths are kept and also seed the traversal. With no source node the
    first node starts at depth 0; nodes never reached fall back to depth 0.
    """

    outgoing: list[list[int]] = [[] for _ in nodes]
    has_incoming = [False] * len(nodes)
    for link in links:
        outgoing[link.source].append(link.target)
        has_incoming[link.target] = True

    queue: deque[int] = deque()
    for node in nodes:
        if node.depth >= 0:
            queue.append(node.index)
        elif not has_incoming[node.index]:
            node.depth = 0
            queue.append(node.index)
    if not queue and nodes:
        nodes[0].depth = 0
        queue.append(0)

    while queue:
        current = queue.popleft()
        for target in outgoing[current]:
            if nodes[target].depth < 0:
                nodes[target].depth = nodes[current].depth + 1
                queue.append(target)

    for node in nodes:
        if node.depth < 0:
            LOGGER.debug("sankey node %s unreachable; depth 0", node.name)
            node.depth = 0


def value_scale(groups: dict[int, list[SankeyNode]], cross_size: float, gap: float) -> float:
    """Pixels per unit of flow such that every depth group fits `cross_size`."""

    scale = float("inf")
    for group in groups.values():
        total = sum(node.flow for node in group)
        if total <= 0:
            continue
        scale = min(scale, (cross_size - gap * (len(group) - 1)) / total)
    if scale == float("inf"):
        return 0.0
    return max(0.0, scale)


class SankeySeries(Series[SankeyOptions]):
    series_type = ChartType.SANKEY
    options_class = SankeyOptions

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.nodes: list[SankeyNode] = []
        self.links: list[SankeyLink] = []

    def build(self) -> None:
        nodes: list[SankeyNode] = []
        by_name: dict[str, int] = {}
        for index, raw in enumerate(self.options.data):
            if not isinstance(raw, Mapping) or raw.get("name") is None:
                raise ChartDataError(f"sankey node {index} must be a mapping with a name")
            depth = raw.get("depth")
            node = SankeyNode(
                index=index,
                name=str(raw["name"]),
                color=str(raw.get("color") or self.theme.color_for(index)),
                depth=int(depth) if isinstance(depth, int) and not isinstance(depth, bool) and depth >= 0 else -1,
            )
            nodes.append(node)
            by_name.setdefault(node.name, index)

        def resolve(ref: Any) -> int | None:
            if isinstance(ref, int) and not isinstance(ref, bool):
                return ref if 0 <= ref < len(nodes) else None
            return by_name.get(str(ref))

        links: list[SankeyLink] = []
        for index, raw in enumerate(self.options.links):
            if not isinstance(raw, Mapping):
                raise ChartDataError(f"sankey link {index} must be a mapping")
            source, target = resolve(raw.get("source")), resolve(raw.get("target"))
            value = to_number(raw.get("value"))
            if source is None or target is None or value is None or value < 0:
                LOGGER.debug("skipping link %s of %s", index, self.name)
                continue
            links.append(SankeyLink(index=index, source=source, target=target, value=value, color=raw.get("color")))
            nodes[source].out_value += value
            nodes[target].in_value += value
        self.nodes = nodes
        self.links = links

    def compute_layout(self, rect: Rect) -> tuple[list[SankeyNode], list[SankeyLink]]:
        self.build()
        nodes, links = self.nodes, self.links
        if not nodes:
            return nodes, links
        opts = self.options
        assign_depths(nodes, links)

        groups: dict[int, list[SankeyNode]] = {}
        for node in nodes:
            groups.setdefault(node.depth, []).append(node)

        horizontal = opts.orient == "horizontal"
        main_size = (rect.width if horizontal else rect.height) - 2.0 * opts.padding
        cross_size = (rect.height if horizontal else rect.width) - 2.0 * opts.padding
        main_origin = (rect.x if horizontal else rect.y) + opts.padding
        cross_origin = (rect.y if horizontal else rect.x) + opts.padding
        depth_size = main_size / (max(groups) + 1)
        scale = value_scale(groups, cross_size, opts.node_gap)

        for depth, group in groups.items():
            main = main_origin + depth * depth_size + depth_size / 2.0 - opts.node_width / 2.0
            for node in group:
                node.band = node.flow * scale
            total = sum(node.band for node in group) + opts.node_gap * (len(group) - 1)
            cross = cross_origin + (cross_size - total) / 2.0
            for node in group:
                node.main, node.cross = main, cross
                cross += node.band + opts.node_gap

        out_offset = [0.0] * len(nodes)
        in_offset = [0.0] * len(nodes)
        for link in links:
            link.band = link.value * scale
            link.source_offset = out_offset[link.source]
            link.target_offset = in_offset[link.target]
            out_offset[link.source] += link.band
            in_offset[link.target] += link.band
        return nodes, links

    def node_rect(self, node: SankeyNode) -> Rect:
        if self.options.orient == "horizontal":
            return Rect(node.main, node.cross, self.options.node_width, node.band)
        return Rect(node.cross, node.main, node.band, self.options.node_width)

    def ribbon(self, link: SankeyLink) -> list[PathCommand]:
        """Closed cubic band from the source slice to the target slice."""

        source, target = self.nodes[link.source], self.nodes[link.target]
        width = self.options.node_width
        m1 = source.main + width
        m2 = target.main
        mid = m1 + (m2 - m1) * self.options.curveness
        a0 = source.cross + link.source_offset
        a1 = a0 + link.band
        b0 = target.cross + link.target_offset
        b1 = b0 + link.band
        if self.options.orient == "horizontal":
            return [
                ("M", m1, a0),
                ("C", mid, a0, mid, b0, m2, b0),
                ("L", m2, b1),
                ("C", mid, b1, mid, a1, m1, a1),
                ("Z",),
            ]
        return [
            ("M", a0, m1),
            ("C", a0, mid, b0, mid, b0, m2),
            ("L", b1, m2),
            ("C", b1, mid, a1, mid, a1, m1),
            ("Z",),
        ]

    def link_color(self, link: SankeyLink) -> str:
        if link.color:
            return str(link.color)
        mode = self.options.link_color
        if mode == "source":
            return self.nodes[link.source].color
        if mode == "target":
            return self.nodes[link.target].color
        return mode

    def _render(self, surface: Surface) -> None:
        opts = self.options
        nodes, links = self.compute_layout(self._layout_rect(surface))
        for link in links:
            if link.band <= 0:
                continue
            surface.path(self.ribbon(link), Style(fill=self.link_color(link), opacity=opts.link_opacity))
        for node in nodes:
            box = self.node_rect(node)
            stroke = opts.border_color if opts.border_width > 0 else None
            surface.rect(box.x, box.y, box.width, box.height, Style(fill=node.color, stroke=stroke, stroke_width=opts.border_width or 1.0))
            self._publish(node.index, box.x, box.y, width=box.width, height=box.height, value=node.flow, name=node.name)
            if opts.label_show:
                self._render_label(surface, box, node.name)

    def _render_label(self, surface: Surface, box: Rect, text: str) -> None:
        opts = self.options
        if opts.orient == "horizontal":
            x, y, align, baseline = box.right + 5.0, box.y + box.height / 2.0, "left", "middle"
        else:
            x, y, align, baseline = box.x + box.width / 2.0, box.bottom + 5.0, "center", "top"
        surface.text(
            x,
            y,
            text,
            TextStyle(
                color=opts.label_color,
                font_size=opts.label_font_size,
                font_family=self.theme.font_family,
                align=align,  # type: ignore[arg-type]
                baseline=baseline,  # type: ignore[arg-type]
            ),
        )
