from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import logging
import math
from typing import Any, Callable, Literal

from chartkit.geometry import Rect
from chartkit.series.base import DataItemPosition
from chartkit.surface import Style, Surface


LOGGER = logging.getLogger(__name__)

EventType = Literal["move", "down", "up", "click", "dblclick", "leave", "contextmenu"]
EventHandler = Callable[[Any], object | None]
AxisPointerType = Literal["line", "cross", "shadow", "none"]
LineType = Literal["solid", "dashed", "dotted"]

HOVER_TOLERANCE = 5.0
POINT_TOLERANCE = 10.0
AXIS_TRIGGER_DISTANCE = 30.0
DEFAULT_SHADOW_WIDTH = 30.0
LINE_DASHES: dict[str, tuple[float, ...] | None] = {"solid": None, "dashed": (5.0, 5.0), "dotted": (2.0, 2.0)}

_PASSTHROUGH = {"down": "mousedown", "up": "mouseup", "dblclick": "dblclick", "contextmenu": "contextmenu"}


@dataclass(frozen=True)
class PointerEvent:
    event_type: EventType
    timestamp: float
    x: float = 0.0
    y: float = 0.0
    button: int | None = None


@dataclass(frozen=True)
class InteractionEvent:
    """Payload handed to pointer listeners."""

    type: str
    x: float
    y: float
    data: DataItemPosition | None = None
    data_all: tuple[DataItemPosition, ...] = ()


@dataclass(frozen=True)
class InteractionState:
    hovered: DataItemPosition | None = None
    selected: tuple[DataItemPosition, ...] = ()
    highlighted_series: frozenset[int] = frozenset()
    hidden_series: frozenset[int] = frozenset()

    def is_selected(self, item: DataItemPosition) -> bool:
        return any(s.key == item.key for s in self.selected)

    def is_series_visible(self, series_index: int) -> bool:
        return series_index not in self.hidden_series

    def is_series_highlighted(self, series_index: int) -> bool:
        # empty set: nothing filtered
        return not self.highlighted_series or series_index in self.highlighted_series


def apply_hover(state: InteractionState, item: DataItemPosition | None) -> InteractionState:
    return dataclasses.replace(state, hovered=item)


def toggle_selection(state: InteractionState, item: DataItemPosition) -> tuple[InteractionState, bool]:
    """Flip `item`'s membership; returns the new state and whether it is now selected."""

    if state.is_selected(item):
        return (dataclasses.replace(state, selected=tuple(s for s in state.selected if s.key != item.key)), False)
    return (dataclasses.replace(state, selected=state.selected + (item,)), True)


def apply_highlight(state: InteractionState, series_index: int) -> InteractionState:
    return dataclasses.replace(state, highlighted_series=state.highlighted_series | {series_index})


def apply_downplay(state: InteractionState, series_index: int | None = None) -> InteractionState:
    if series_index is None:
        return dataclasses.replace(state, highlighted_series=frozenset())
    return dataclasses.replace(state, highlighted_series=state.highlighted_series - {series_index})


def toggle_hidden(state: InteractionState, series_index: int) -> tuple[InteractionState, bool]:
    """Flip a series' visibility; returns the new state and whether it is now visible."""

    if series_index in state.hidden_series:
        return (dataclasses.replace(state, hidden_series=state.hidden_series - {series_index}), True)
    hovered = state.hovered
    if hovered is not None and hovered.series_index == series_index:
        hovered = None
    return (dataclasses.replace(state, hidden_series=state.hidden_series | {series_index}, hovered=hovered), False)


@dataclass
class PointerThrottle:
    """Coalesces pointer moves to one evaluation per interval (milliseconds)."""

    interval_ms: float = 16.0
    pending: PointerEvent | None = None
    _last_at: float | None = None

    def __post_init__(self) -> None:
        if self.interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")

    def offer(self, event: PointerEvent) -> PointerEvent | None:
        """Return `event` when it may be evaluated now, else keep it pending."""

        if self._last_at is None or event.timestamp - self._last_at >= self.interval_ms:
            self._last_at = event.timestamp
            self.pending = None
            return event
        self.pending = event
        return None

    def flush(self) -> PointerEvent | None:
        event = self.pending
        if event is not None:
            self.pending = None
            self._last_at = event.timestamp
        return event

    def reset(self) -> None:
        self.pending = None
        self._last_at = None


@dataclass(frozen=True)
class AxisPointerOptions:
    type: AxisPointerType = "line"
    show: bool = True
    color: str = "#6366f1"
    width: float = 1.0
    line_type: LineType = "dashed"
    shadow_color: str = "rgba(99, 102, 241, 0.1)"
    shadow_opacity: float = 0.5

    def __post_init__(self) -> None:
        if self.type not in {"line", "cross", "shadow", "none"}:
            raise ValueError("type must be one of: line, cross, shadow, none")
        if self.line_type not in LINE_DASHES:
            raise ValueError("line_type must be one of: solid, dashed, dotted")


def item_center_x(item: DataItemPosition) -> float:
    if item.width is not None and item.radius is None:
        return item.x + item.width / 2.0
    return item.x


def hit_item(item: DataItemPosition, x: float, y: float, *, tolerance: float = HOVER_TOLERANCE, point_tolerance: float = POINT_TOLERANCE) -> bool:
    if item.radius is not None:
        return math.hypot(x - item.x, y - item.y) <= item.radius + tolerance
    if item.width is not None and item.height is not None:
        return item.x <= x <= item.x + item.width and item.y <= y <= item.y + item.height
    return math.hypot(x - item.x, y - item.y) <= point_tolerance


class InteractionManager:
    """Resolves pointer input against the published geometry cache.

    The cache is replaced wholesale by `update_data_positions` after every render.
    Selection, hover, highlight and visibility live in an immutable
    `InteractionState`; every public mutation swaps in a new state.
    """

    def __init__(self, *, throttle_ms: float = 16.0, axis_pointer: AxisPointerOptions | None = None) -> None:
        self._positions: list[DataItemPosition] = []
        self._listeners: dict[str, list[EventHandler]] = {}
        self._throttle = PointerThrottle(interval_ms=throttle_ms)
        self.state = InteractionState()
        self.axis_pointer = axis_pointer or AxisPointerOptions()

    def on(self, event: str, handler: EventHandler) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def off(self, event: str, handler: EventHandler | None = None) -> None:
        if handler is None:
            self._listeners.pop(event, None)
            return
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for handler in list(self._listeners.get(event, ())):
            handler(payload)

    def update_data_positions(self, positions: list[DataItemPosition]) -> None:
        self._positions = list(positions)

    @property
    def positions(self) -> list[DataItemPosition]:
        return list(self._positions)

    @property
    def hovered(self) -> DataItemPosition | None:
        return self.state.hovered

    @property
    def selected(self) -> list[DataItemPosition]:
        return list(self.state.selected)

    def _visible(self) -> list[DataItemPosition]:
        return [item for item in self._positions if self.state.is_series_visible(item.series_index)]

    def find_item(self, x: float, y: float) -> DataItemPosition | None:
        for item in self._visible():
            if hit_item(item, x, y):
                return item
        return None

    def find_items(self, x: float) -> list[DataItemPosition]:
        return [item for item in self._visible() if abs(x - item_center_x(item)) <= AXIS_TRIGGER_DISTANCE]

    def find_nearest_index(self, x: float) -> int | None:
        best: DataItemPosition | None = None
        best_dist = math.inf
        for item in self._visible():
            dist = abs(x - item_center_x(item))
            if dist < best_dist:
                best, best_dist = item, dist
        return None if best is None else best.data_index

    def items_at_index(self, data_index: int) -> list[DataItemPosition]:
        return [item for item in self._visible() if item.data_index == data_index]

    def _event(self, kind: str, x: float, y: float) -> InteractionEvent:
        return InteractionEvent(type=kind, x=x, y=y, data=self.find_item(x, y), data_all=tuple(self.find_items(x)))

    def handle_event(self, event: PointerEvent) -> InteractionEvent | None:
        """Process one pointer event; throttled moves return None."""

        if event.event_type == "move":
            accepted = self._throttle.offer(event)
            if accepted is None:
                return None
            return self._process_move(accepted)
        if event.event_type == "leave":
            return self._process_leave(event)
        if event.event_type == "click":
            return self._process_click(event)
        kind = _PASSTHROUGH.get(event.event_type)
        if kind is None:
            raise ValueError(f"event_type must be one of: move, leave, click, {', '.join(_PASSTHROUGH)}")
        out = self._event(kind, event.x, event.y)
        self.emit(kind, out)
        return out

    def flush(self) -> InteractionEvent | None:
        """Evaluate a move that arrived inside the throttle interval."""

        pending = self._throttle.flush()
        if pending is None:
            return None
        return self._process_move(pending)

    def _process_move(self, event: PointerEvent) -> InteractionEvent:
        out = self._event("mousemove", event.x, event.y)
        previous = self.state.hovered
        current = out.data
        self.state = apply_hover(self.state, current)
        prev_key = None if previous is None else previous.key
        cur_key = None if current is None else current.key
        if prev_key != cur_key:
            if current is not None:
                self.emit("mouseover", dataclasses.replace(out, type="mouseover"))
            if previous is not None:
                self.emit("mouseout", dataclasses.replace(out, type="mouseout", data=previous))
        self.emit("mousemove", out)
        return out

    def _process_leave(self, event: PointerEvent) -> InteractionEvent:
        self._throttle.reset()
        out = InteractionEvent(type="globalout", x=event.x, y=event.y)
        previous = self.state.hovered
        if previous is not None:
            self.emit("mouseout", dataclasses.replace(out, type="mouseout", data=previous))
        self.state = apply_hover(self.state, None)
        self.emit("globalout", out)
        return out

    def _process_click(self, event: PointerEvent) -> InteractionEvent:
        out = self._event("click", event.x, event.y)
        self.emit("click", out)
        if out.data is not None:
            self.toggle_select(out.data)
        return out

    def toggle_select(self, item: DataItemPosition) -> bool:
        self.state, now_selected = toggle_selection(self.state, item)
        self.emit("select" if now_selected else "unselect", {"data": item})
        self.emit("selectchanged", {"selected": list(self.state.selected)})
        return now_selected

    def highlight(self, series_index: int) -> None:
        self.state = apply_highlight(self.state, series_index)
        self.emit("highlight", {"series_index": series_index})

    def downplay(self, series_index: int | None = None) -> None:
        self.state = apply_downplay(self.state, series_index)
        self.emit("downplay", {"series_index": series_index})

    def is_series_highlighted(self, series_index: int) -> bool:
        return self.state.is_series_highlighted(series_index)

    def is_series_visible(self, series_index: int) -> bool:
        return self.state.is_series_visible(series_index)

    def toggle_series_visibility(self, series_index: int) -> bool:
        """Show or hide a series for rendering and hit-testing; returns visibility."""

        self.state, visible = toggle_hidden(self.state, series_index)
        LOGGER.debug("series %s visible=%s", series_index, visible)
        self.emit(
            "legendselectchanged",
            {"series_index": series_index, "selected": visible, "hidden_series": sorted(self.state.hidden_series)},
        )
        return visible

    def render_axis_pointer(
        self,
        surface: Surface,
        x: float,
        y: float | None,
        rect: Rect,
        options: AxisPointerOptions | None = None,
    ) -> None:
        opts = options or self.axis_pointer
        if not opts.show or opts.type == "none":
            return
        if x < rect.x or x > rect.right:
            return
        line = Style(stroke=opts.color, stroke_width=opts.width, dash=LINE_DASHES[opts.line_type])
        if opts.type in ("line", "cross"):
            surface.line(x, rect.y, x, rect.bottom, line)
            cross_y = y if y is not None else (self.state.hovered.y if self.state.hovered is not None else None)
            if opts.type == "cross" and cross_y is not None and rect.y <= cross_y <= rect.bottom:
                surface.line(rect.x, cross_y, rect.right, cross_y, line)
            return
        nearest = self.find_nearest_index(x)
        if nearest is None:
            return
        items = self.items_at_index(nearest)
        if not items:
            return
        first = items[0]
        width = first.width if first.width is not None and first.radius is None else DEFAULT_SHADOW_WIDTH
        left = item_center_x(first) - width / 2.0
        surface.rect(left, rect.y, width, rect.height, Style(fill=opts.shadow_color, opacity=opts.shadow_opacity))

    def dispose(self) -> None:
        self._listeners.clear()
        self._positions = []
        self._throttle.reset()
        self.state = InteractionState()
