from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
from typing import Union


Point = tuple[float, float]
PathCommand = tuple[Union[str, float, bool], ...]

DEFAULT_SMOOTHNESS = 0.3


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("rect width/height must be >= 0")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def inset(self, left: float, top: float, right: float, bottom: float) -> "Rect":
        return Rect(
            self.x + left,
            self.y + top,
            max(0.0, self.width - left - right),
            max(0.0, self.height - top - bottom),
        )


def union_rect(a: Rect | None, b: Rect | None) -> Rect | None:
    if a is None:
        return b
    if b is None:
        return a
    x0 = min(a.x, b.x)
    y0 = min(a.y, b.y)
    x1 = max(a.right, b.right)
    y1 = max(a.bottom, b.bottom)
    return Rect(x0, y0, x1 - x0, y1 - y0)


def resolve_length(value: float | str | None, reference: float, default: float = 0.0) -> float:
    """Resolve `"50%"`-style lengths against `reference`; plain numbers pass through."""

    if value is None:
        return default
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("%"):
            return float(raw[:-1]) / 100.0 * reference
        return float(raw)
    return float(value)


def polar_point(cx: float, cy: float, radius: float, angle: float) -> Point:
    """Screen point for `angle` radians measured counter-clockwise from +x (y grows down)."""

    return (cx + radius * math.cos(angle), cy - radius * math.sin(angle))


def smooth_path(points: Sequence[Point], smoothness: float = DEFAULT_SMOOTHNESS) -> list[PathCommand]:
    """Cubic path through `points` with tangents from neighbouring points."""

    if not points:
        return []
    commands: list[PathCommand] = [("M", points[0][0], points[0][1])]
    if len(points) == 1:
        return commands
    if len(points) == 2 or smoothness <= 0:
        commands.extend(("L", x, y) for x, y in points[1:])
        return commands
    n = len(points)
    for i in range(n - 1):
        p0 = points[i - 1] if i > 0 else points[i]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[i + 2] if i + 2 < n else p2
        cp1 = (p1[0] + (p2[0] - p0[0]) * smoothness, p1[1] + (p2[1] - p0[1]) * smoothness)
        cp2 = (p2[0] - (p3[0] - p1[0]) * smoothness, p2[1] - (p3[1] - p1[1]) * smoothness)
        commands.append(("C", cp1[0], cp1[1], cp2[0], cp2[1], p2[0], p2[1]))
    return commands


def polyline_path(points: Sequence[Point], *, closed: bool = False) -> list[PathCommand]:
    if not points:
        return []
    commands: list[PathCommand] = [("M", points[0][0], points[0][1])]
    commands.extend(("L", x, y) for x, y in points[1:])
    if closed:
        commands.append(("Z",))
    return commands


def step_points(points: Sequence[Point], mode: str) -> list[Point]:
    """Expand a polyline into horizontal/vertical steps (`start`, `middle` or `end`)."""

    if len(points) < 2:
        return list(points)
    if mode not in {"start", "middle", "end"}:
        raise ValueError("step mode must be one of: start, middle, end")
    out: list[Point] = [points[0]]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if mode == "start":
            out.append((x0, y1))
        elif mode == "end":
            out.append((x1, y0))
        else:
            mid = (x0 + x1) / 2.0
            out.append((mid, y0))
            out.append((mid, y1))
        out.append((x1, y1))
    return out


def rounded_rect_path(x: float, y: float, w: float, h: float, radius: float | Sequence[float]) -> list[PathCommand]:
    """Rectangle path with quadratic corners; radius is uniform or (tl, tr, br, bl)."""

    if isinstance(radius, (int, float)):
        radii = [float(radius)] * 4
    else:
        radii = [float(r) for r in radius][:4]
        radii += [0.0] * (4 - len(radii))
    limit = min(abs(w), abs(h)) / 2.0
    tl, tr, br, bl = (max(0.0, min(r, limit)) for r in radii)
    return [
        ("M", x + tl, y),
        ("L", x + w - tr, y),
        ("Q", x + w, y, x + w, y + tr),
        ("L", x + w, y + h - br),
        ("Q", x + w, y + h, x + w - br, y + h),
        ("L", x + bl, y + h),
        ("Q", x, y + h, x, y + h - bl),
        ("L", x, y + tl),
        ("Q", x, y, x + tl, y),
        ("Z",),
    ]


def sector_path(
    cx: float,
    cy: float,
    inner_radius: float,
    outer_radius: float,
    start_angle: float,
    end_angle: float,
) -> list[PathCommand]:
    """Annular (or full pie when inner_radius is 0) sector; angles in radians, y-down screen space."""

    anticlockwise = end_angle > start_angle
    outer_start = polar_point(cx, cy, outer_radius, start_angle)
    commands: list[PathCommand] = []
    if inner_radius > 0:
        inner_end = polar_point(cx, cy, inner_radius, end_angle)
        commands.append(("M", outer_start[0], outer_start[1]))
        commands.append(("A", cx, cy, outer_radius, start_angle, end_angle, anticlockwise))
        commands.append(("L", inner_end[0], inner_end[1]))
        commands.append(("A", cx, cy, inner_radius, end_angle, start_angle, not anticlockwise))
    else:
        commands.append(("M", cx, cy))
        commands.append(("L", outer_start[0], outer_start[1]))
        commands.append(("A", cx, cy, outer_radius, start_angle, end_angle, anticlockwise))
    commands.append(("Z",))
    return commands


def arc_points(cx: float, cy: float, radius: float, start: float, end: float, *, segments: int | None = None) -> list[Point]:
    """Sample an arc from `start` to `end` radians (counter-clockwise when end > start)."""

    sweep = end - start
    if segments is None:
        segments = max(2, int(math.ceil(abs(sweep) * max(radius, 1.0) / 4.0)))
        segments = min(segments, 720)
    return [polar_point(cx, cy, radius, start + sweep * i / segments) for i in range(segments + 1)]


def flatten_path(commands: Sequence[PathCommand], *, tolerance: float = 0.5) -> list[list[Point]]:
    """Approximate path commands with polylines, one per subpath."""

    subpaths: list[list[Point]] = []
    current: list[Point] = []
    start: Point | None = None
    pen: Point | None = None
    for cmd in commands:
        op = cmd[0]
        if op == "M":
            if len(current) > 1:
                subpaths.append(current)
            pen = (float(cmd[1]), float(cmd[2]))
            start = pen
            current = [pen]
        elif op == "L":
            pen = (float(cmd[1]), float(cmd[2]))
            current.append(pen)
        elif op == "C":
            p0 = pen if pen is not None else (float(cmd[1]), float(cmd[2]))
            c1 = (float(cmd[1]), float(cmd[2]))
            c2 = (float(cmd[3]), float(cmd[4]))
            p3 = (float(cmd[5]), float(cmd[6]))
            steps = _curve_steps((p0, c1, c2, p3), tolerance)
            for i in range(1, steps + 1):
                current.append(_cubic(p0, c1, c2, p3, i / steps))
            pen = p3
        elif op == "Q":
            p0 = pen if pen is not None else (float(cmd[1]), float(cmd[2]))
            c = (float(cmd[1]), float(cmd[2]))
            p2 = (float(cmd[3]), float(cmd[4]))
            steps = _curve_steps((p0, c, p2), tolerance)
            for i in range(1, steps + 1):
                current.append(_quadratic(p0, c, p2, i / steps))
            pen = p2
        elif op == "A":
            cx, cy, r, a0, a1 = (float(v) for v in cmd[1:6])
            anticlockwise = bool(cmd[6]) if len(cmd) > 6 else a1 > a0
            a1 = _normalize_sweep(a0, a1, anticlockwise)
            pts = arc_points(cx, cy, r, a0, a1)
            if not current:
                current = [pts[0]]
                start = pts[0]
            else:
                current.append(pts[0])
            current.extend(pts[1:])
            pen = pts[-1]
        elif op == "Z":
            if start is not None and current:
                current.append(start)
                subpaths.append(current)
                current = [start]
                pen = start
        else:
            raise ValueError(f"unsupported path command: {op!r}")
    if len(current) > 1:
        subpaths.append(current)
    return subpaths


def path_bounds(commands: Sequence[PathCommand]) -> Rect | None:
    bounds: Rect | None = None
    for poly in flatten_path(commands):
        xs = [p[0] for p in poly]
        ys = [p[1] for p in poly]
        bounds = union_rect(bounds, Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)))
    return bounds


def _normalize_sweep(a0: float, a1: float, anticlockwise: bool) -> float:
    full = 2.0 * math.pi
    if abs(a1 - a0) >= full:
        return a0 + (full if anticlockwise else -full)
    if anticlockwise and a1 < a0:
        a1 += full
    elif not anticlockwise and a1 > a0:
        a1 -= full
    return a1


def _curve_steps(points: Sequence[Point], tolerance: float) -> int:
    length = sum(math.dist(a, b) for a, b in zip(points, points[1:]))
    return max(2, min(128, int(math.ceil(length / max(tolerance * 8.0, 1.0)))))


def _cubic(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    mt = 1.0 - t
    a = mt * mt * mt
    b = 3.0 * mt * mt * t
    c = 3.0 * mt * t * t
    d = t * t * t
    return (
        a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
        a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
    )


def _quadratic(p0: Point, p1: Point, p2: Point, t: float) -> Point:
    mt = 1.0 - t
    return (
        mt * mt * p0[0] + 2.0 * mt * t * p1[0] + t * t * p2[0],
        mt * mt * p0[1] + 2.0 * mt * t * p1[1] + t * t * p2[1],
    )


def dash_polyline(points: Sequence[Point], pattern: Sequence[float]) -> list[list[Point]]:
    """Split a polyline into the visible runs of an on/off dash `pattern`."""

    lengths = [float(v) for v in pattern if v > 0]
    if not lengths or len(points) < 2:
        return [list(points)]
    if len(lengths) % 2 == 1:
        lengths = lengths * 2
    runs: list[list[Point]] = []
    idx = 0
    remaining = lengths[0]
    drawing = True
    current: list[Point] = [points[0]]
    for a, b in zip(points, points[1:]):
        seg = math.dist(a, b)
        pos = 0.0
        while seg - pos > remaining:
            pos += remaining
            t = pos / seg
            p = (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)
            if drawing:
                current.append(p)
                runs.append(current)
                current = []
            else:
                current = [p]
            drawing = not drawing
            idx = (idx + 1) % len(lengths)
            remaining = lengths[idx]
        remaining -= seg - pos
        if drawing:
            current.append(b)
    if drawing and len(current) > 1:
        runs.append(current)
    return runs
