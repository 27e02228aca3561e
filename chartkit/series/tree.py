from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import math
from typing import Any, Literal

from chartkit.data import to_number
from chartkit.errors import ChartDataError
from chartkit.geometry import PathCommand, Rect
from chartkit.series.base import ChartType, Series
from chartkit.surface import Style, Surface, TextStyle


LOGGER = logging.getLogger(__name__)

TreeOrient = Literal["LR", "RL", "TB", "BT"]
TreeLayout = Literal["orthogonal", "radial"]
EdgeShape = Literal["curve", "polyline"]
LAYOUT_PADDING = 50.0
SIBLING_SPACING = 0.5
RADIAL_EXTENT = 0.8


@dataclass(frozen=True)
class TreeOptions:
    data: tuple[Any, ...] = ()
    name: str | None = None
    color: str | None = None
    layout: TreeLayout = "orthogonal"
    orient: TreeOrient = "LR"
    edge_shape: EdgeShape = "curve"
    symbol_size: float = 10.0
    initial_tree_depth: int = -1
    padding: float = LAYOUT_PADDING
    node_color: str = "#5470c6"
    border_color: str = "#ffffff"
    border_width: float = 2.0
    line_color: str = "#cccccc"
    line_width: float = 1.0
    label_show: bool = True
    label_color: str = "#333333"
    label_font_size: float = 12.0

    def __post_init__(self) -> None:
        if self.layout not in {"orthogonal", "radial"}:
            raise ValueError("layout must be `orthogonal` or `radial`")
        if self.orient not in {"LR", "RL", "TB", "BT"}:
            raise ValueError("orient must be one of: LR, RL, TB, BT")
        if self.edge_shape not in {"curve", "polyline"}:
            raise ValueError("edge_shape must be `curve` or `polyline`")
        if self.symbol_size < 0:
            raise ValueError("symbol_size must be >= 0")


@dataclass
class TreeNode:
    """One visible node; `parent` and `children` index into the arena."""

    index: int
    name: str
    depth: int
    parent: int | None
    value: float | None = None
    color: str | None = None
    collapsed: bool = False
    has_children: bool = False
    children: list[int] = field(default_factory=list)
    width: float = 0.0
    x: float = 0.0
    y: float = 0.0

    @property
    def is_leaf(self) -> bool:
        return not self.children


def build_arena(root: Mapping[str, Any], *, initial_depth: int = -1) -> list[TreeNode]:
    """Flatten a nested `{name, children}` mapping into pre-order arena storage.

    Children of collapsed nodes are left out. A non-negative `initial_depth`
    collapses every node at that depth.
    """

    if not isinstance(root, Mapping):
        raise ChartDataError("tree root must be a mapping")
    arena: list[TreeNode] = []
    stack: list[tuple[Mapping[str, Any], int, int | None]] = [(root, 0, None)]
    while stack:
        raw, depth, parent = stack.pop()
        children = raw.get("children") or ()
        if not isinstance(children, (list, tuple)):
            raise ChartDataError(f"children of tree node {raw.get('name')!r} must be a list")
        collapsed = bool(raw.get("collapsed", False)) or (initial_depth >= 0 and depth >= initial_depth)
        node = TreeNode(
            index=len(arena),
            name=str(raw.get("name", "")),
            depth=depth,
            parent=parent,
            value=to_number(raw.get("value")),
            color=raw.get("color"),
            collapsed=collapsed,
            has_children=bool(children),
        )
        arena.append(node)
        if parent is not None:
            arena[parent].children.append(node.index)
        if collapsed:
            continue
        for child in reversed(children):
            if not isinstance(child, Mapping):
                raise ChartDataError(f"child of tree node {node.name!r} must be a mapping")
            stack.append((child, depth + 1, node.index))
    return arena


def subtree_widths(arena: list[TreeNode]) -> None:
    """Bottom-up widths: a leaf is 1, otherwise the children's sum plus spacing."""

    for node in reversed(arena):
        if node.is_leaf:
            node.width = 1.0
        else:
            node.width = sum(arena[c].width for c in node.children) + SIBLING_SPACING * (len(node.children) - 1)


def orthogonal_layout(arena: list[TreeNode], rect: Rect, orient: TreeOrient, padding: float = LAYOUT_PADDING) -> None:
    if not arena:
        return
    subtree_widths(arena)
    horizontal = orient in ("LR", "RL")
    reverse = orient in ("RL", "BT")
    max_depth = max(node.depth for node in arena)
    main = (rect.width if horizontal else rect.height) - 2.0 * padding
    cross = (rect.height if horizontal else rect.width) - 2.0 * padding
    level_size = main / (max_depth + 1)
    unit = cross / arena[0].width
    main_origin = (rect.x if horizontal else rect.y) + padding
    cross_origin = (rect.y if horizontal else rect.x) + padding

    offsets = {0: 0.0}
    for node in arena:
        offset = offsets[node.index]
        level = max_depth - node.depth if reverse else node.depth
        main_pos = main_origin + level * level_size + level_size / 2.0
        cross_pos = cross_origin + (offset + node.width / 2.0) * unit
        node.x, node.y = (main_pos, cross_pos) if horizontal else (cross_pos, main_pos)
        for child in node.children:
            offsets[child] = offset
            offset += arena[child].width + SIBLING_SPACING


def radial_layout(arena: list[TreeNode], rect: Rect) -> None:
    """Rings by depth; nodes spread evenly by their order within a ring."""

    if not arena:
        return
    cx, cy = rect.x + rect.width / 2.0, rect.y + rect.height / 2.0
    max_radius = min(rect.width, rect.height) / 2.0 * RADIAL_EXTENT
    counts: dict[int, int] = {}
    ring_index: list[int] = []
    for node in arena:
        ring_index.append(counts.get(node.depth, 0))
        counts[node.depth] = ring_index[-1] + 1
    max_depth = max(counts) or 1
    for node in arena:
        if node.depth == 0:
            node.x, node.y = cx, cy
            continue
        radius = node.depth / max_depth * max_radius
        angle = 2.0 * math.pi * ring_index[node.index] / counts[node.depth] - math.pi / 2.0
        node.x = cx + radius * math.cos(angle)
        node.y = cy + radius * math.sin(angle)


def edge_commands(parent: TreeNode, child: TreeNode, shape: EdgeShape, horizontal: bool) -> list[PathCommand]:
    if horizontal:
        mid = (parent.x + child.x) / 2.0
        if shape == "polyline":
            return [("M", parent.x, parent.y), ("L", mid, parent.y), ("L", mid, child.y), ("L", child.x, child.y)]
        return [("M", parent.x, parent.y), ("C", mid, parent.y, mid, child.y, child.x, child.y)]
    mid = (parent.y + child.y) / 2.0
    if shape == "polyline":
        return [("M", parent.x, parent.y), ("L", parent.x, mid), ("L", child.x, mid), ("L", child.x, child.y)]
    return [("M", parent.x, parent.y), ("C", parent.x, mid, child.x, mid, child.x, child.y)]


class TreeSeries(Series[TreeOptions]):
    series_type = ChartType.TREE
    options_class = TreeOptions

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.nodes: list[TreeNode] = []

    def compute_layout(self, rect: Rect) -> list[TreeNode]:
        if not self.options.data:
            self.nodes = []
            return self.nodes
        if len(self.options.data) > 1:
            LOGGER.warning("tree %s has %s roots; only the first is drawn", self.name, len(self.options.data))
        self.nodes = build_arena(self.options.data[0], initial_depth=self.options.initial_tree_depth)
        if self.options.layout == "radial":
            radial_layout(self.nodes, rect)
        else:
            orthogonal_layout(self.nodes, rect, self.options.orient, self.options.padding)
        return self.nodes

    def _render(self, surface: Surface) -> None:
        opts = self.options
        nodes = self.compute_layout(self._layout_rect(surface))
        horizontal = opts.orient in ("LR", "RL")
        edge_style = Style(stroke=opts.line_color, stroke_width=opts.line_width)
        for node in nodes:
            if node.parent is None:
                continue
            surface.path(edge_commands(nodes[node.parent], node, opts.edge_shape, horizontal), edge_style)

        radius = opts.symbol_size / 2.0
        for node in nodes:
            fill = node.color or opts.color or opts.node_color
            if node.collapsed and node.has_children:
                style = Style(fill=opts.border_color, stroke=fill, stroke_width=opts.border_width)
            else:
                style = Style(fill=fill, stroke=opts.border_color, stroke_width=opts.border_width)
            surface.circle(node.x, node.y, radius, style)
            self._publish(node.index, node.x, node.y, radius=radius, value=node.value, name=node.name)
            if opts.label_show:
                self._render_label(surface, node, radius, horizontal)

    def _render_label(self, surface: Surface, node: TreeNode, radius: float, horizontal: bool) -> None:
        x, y = node.x, node.y
        align, baseline = "center", "middle"
        if horizontal:
            x, align = x + radius + 5.0, "left"
        else:
            y, baseline = y + radius + 5.0, "top"
        surface.text(
            x,
            y,
            node.name,
            TextStyle(
                color=self.options.label_color,
                font_size=self.options.label_font_size,
                font_family=self.theme.font_family,
                align=align,  # type: ignore[arg-type]
                baseline=baseline,  # type: ignore[arg-type]
            ),
        )
