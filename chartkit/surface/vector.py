from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import math
from pathlib import Path
import xml.etree.ElementTree as ET

from chartkit.geometry import PathCommand, Rect, polar_point
from chartkit.surface.base import Style, Surface, TextStyle
from chartkit.surface.raster.text import text_size


SVG_NS = "http://www.w3.org/2000/svg"

_ANCHOR = {"left": "start", "center": "middle", "right": "end"}
_BASELINE = {"top": "hanging", "middle": "central", "bottom": "text-after-edge", "alphabetic": "alphabetic"}


@dataclass
class SceneNode:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    transform: str | None = None
    clip_id: str | None = None


@dataclass(frozen=True)
class _VectorState:
    transform: tuple[str, ...] = ()
    clip_id: str | None = None


class VectorSurface(Surface):
    """Retained-mode surface recording a flat scene graph exportable as SVG."""

    kind = "vector"

    def __init__(self, width: int, height: int, *, background: str | None = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("surface width/height must be > 0")
        self._width = int(width)
        self._height = int(height)
        self.background = background
        self.nodes: list[SceneNode] = []
        self.clips: dict[str, Rect] = {}
        self._clip_transforms: dict[str, str | None] = {}
        self._state = _VectorState()
        self._stack: list[_VectorState] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def save(self) -> None:
        self._stack.append(self._state)

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()

    def translate(self, dx: float, dy: float) -> None:
        self._push_transform(f"translate({_fmt(dx)} {_fmt(dy)})")

    def rotate(self, radians: float) -> None:
        self._push_transform(f"rotate({_fmt(math.degrees(radians))})")

    def scale(self, sx: float, sy: float | None = None) -> None:
        self._push_transform(f"scale({_fmt(sx)} {_fmt(sx if sy is None else sy)})")

    def clip(self, rect: Rect) -> None:
        clip_id = f"clip{len(self.clips)}"
        self.clips[clip_id] = rect
        self._clip_transforms[clip_id] = self._transform_attr()
        self._state = _VectorState(transform=self._state.transform, clip_id=clip_id)

    def path(self, commands: Sequence[PathCommand], style: Style) -> None:
        d = path_data(commands)
        if d:
            self._add("path", {"d": d, **_style_attrs(style)})

    def rect(self, x: float, y: float, width: float, height: float, style: Style, *, radius: float | Sequence[float] = 0) -> None:
        if not isinstance(radius, (int, float)):
            super().rect(x, y, width, height, style, radius=radius)
            return
        if width < 0:
            x, width = x + width, -width
        if height < 0:
            y, height = y + height, -height
        attrs = {"x": _fmt(x), "y": _fmt(y), "width": _fmt(width), "height": _fmt(height)}
        if radius:
            r = min(float(radius), width / 2.0, height / 2.0)
            attrs["rx"] = _fmt(r)
            attrs["ry"] = _fmt(r)
        attrs.update(_style_attrs(style))
        self._add("rect", attrs)

    def circle(self, cx: float, cy: float, radius: float, style: Style) -> None:
        if radius <= 0:
            return
        self._add("circle", {"cx": _fmt(cx), "cy": _fmt(cy), "r": _fmt(radius), **_style_attrs(style)})

    def text(self, x: float, y: float, text: str, style: TextStyle) -> None:
        if not text:
            return
        attrs = {
            "x": _fmt(x),
            "y": _fmt(y),
            "fill": style.color,
            "font-size": _fmt(style.font_size),
            "font-family": style.font_family,
            "text-anchor": _ANCHOR[style.align],
            "dominant-baseline": _BASELINE[style.baseline],
        }
        if style.opacity < 1.0:
            attrs["opacity"] = _fmt(style.opacity)
        self._add("text", attrs, text=text)

    def measure_text(self, text: str, style: TextStyle | None = None) -> float:
        style = style or TextStyle()
        return float(text_size(text, font_family=style.font_family, font_size_px=style.font_size)[0])

    def find(self, tag: str) -> list[SceneNode]:
        return [node for node in self.nodes if node.tag == tag]

    def clear(self) -> None:
        self.nodes.clear()
        self.clips.clear()
        self._clip_transforms.clear()
        self._state = _VectorState()
        self._stack.clear()

    def to_element(self) -> ET.Element:
        root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": str(self._width),
                "height": str(self._height),
                "viewBox": f"0 0 {self._width} {self._height}",
            },
        )
        if self.clips:
            defs = ET.SubElement(root, "defs")
            for clip_id, rect in self.clips.items():
                clip_el = ET.SubElement(defs, "clipPath", {"id": clip_id})
                rect_attrs = {"x": _fmt(rect.x), "y": _fmt(rect.y), "width": _fmt(rect.width), "height": _fmt(rect.height)}
                transform = self._clip_transforms.get(clip_id)
                if transform:
                    rect_attrs["transform"] = transform
                ET.SubElement(clip_el, "rect", rect_attrs)
        if self.background:
            ET.SubElement(root, "rect", {"x": "0", "y": "0", "width": "100%", "height": "100%", "fill": self.background})
        for node in self.nodes:
            attrs = dict(node.attrs)
            if node.transform:
                attrs["transform"] = node.transform
            if node.clip_id:
                attrs["clip-path"] = f"url(#{node.clip_id})"
            el = ET.SubElement(root, node.tag, attrs)
            if node.text is not None:
                el.text = node.text
        return root

    def to_svg(self) -> str:
        return ET.tostring(self.to_element(), encoding="unicode")

    def save_svg(self, path: str | Path) -> None:
        Path(path).write_text(self.to_svg(), encoding="utf-8")

    def _add(self, tag: str, attrs: dict[str, str], *, text: str | None = None) -> None:
        self.nodes.append(
            SceneNode(tag=tag, attrs=attrs, text=text, transform=self._transform_attr(), clip_id=self._state.clip_id)
        )

    def _push_transform(self, op: str) -> None:
        self._state = _VectorState(transform=self._state.transform + (op,), clip_id=self._state.clip_id)

    def _transform_attr(self) -> str | None:
        return " ".join(self._state.transform) if self._state.transform else None


def path_data(commands: Sequence[PathCommand]) -> str:
    """Serialize path commands to SVG `d` syntax; arcs become elliptical-arc segments."""

    parts: list[str] = []
    for cmd in commands:
        op = cmd[0]
        if op in {"M", "L", "C", "Q"}:
            parts.append(op + " ".join(_fmt(float(v)) for v in cmd[1:]))
        elif op == "A":
            cx, cy, r, a0, a1 = (float(v) for v in cmd[1:6])
            anticlockwise = bool(cmd[6]) if len(cmd) > 6 else a1 > a0
            parts.extend(_arc_segments(cx, cy, r, a0, a1, anticlockwise, first=not parts))
        elif op == "Z":
            parts.append("Z")
        else:
            raise ValueError(f"unsupported path command: {op!r}")
    return " ".join(parts)


def _arc_segments(cx: float, cy: float, r: float, a0: float, a1: float, anticlockwise: bool, *, first: bool) -> list[str]:
    full = 2.0 * math.pi
    sweep = a1 - a0
    if abs(sweep) >= full:
        sweep = full if anticlockwise else -full
    elif anticlockwise and sweep < 0:
        sweep += full
    elif not anticlockwise and sweep > 0:
        sweep -= full
    start = polar_point(cx, cy, r, a0)
    out = [f"M{_fmt(start[0])} {_fmt(start[1])}" if first else f"L{_fmt(start[0])} {_fmt(start[1])}"]
    # A single SVG arc cannot describe a full turn; split into halves.
    pieces = 2 if abs(sweep) > math.pi else 1
    step = sweep / pieces
    # Counter-clockwise angles run counter-clockwise on screen, i.e. SVG sweep-flag 0.
    sweep_flag = 0 if sweep > 0 else 1
    for i in range(1, pieces + 1):
        end = polar_point(cx, cy, r, a0 + step * i)
        out.append(f"A{_fmt(r)} {_fmt(r)} 0 0 {sweep_flag} {_fmt(end[0])} {_fmt(end[1])}")
    return out


def _style_attrs(style: Style) -> dict[str, str]:
    attrs = {"fill": style.fill or "none"}
    if style.stroke:
        attrs["stroke"] = style.stroke
        attrs["stroke-width"] = _fmt(style.stroke_width)
        if style.dash:
            attrs["stroke-dasharray"] = ",".join(_fmt(v) for v in style.dash)
    if style.opacity < 1.0:
        attrs["opacity"] = _fmt(style.opacity)
    return attrs


def _fmt(value: float) -> str:
    out = f"{float(value):.3f}".rstrip("0").rstrip(".")
    return "0" if out in {"-0", ""} else out
