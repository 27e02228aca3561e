from __future__ import annotations

from collections.abc import Sequence
import re


RGBA = tuple[int, int, int, int]

HEATMAP_PALETTE: tuple[str, ...] = (
    "#313695",
    "#4575b4",
    "#74add1",
    "#abd9e9",
    "#e0f3f8",
    "#ffffbf",
    "#fee090",
    "#fdae61",
    "#f46d43",
    "#d73027",
    "#a50026",
)

_NAMED: dict[str, RGBA] = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "blue": (0, 0, 255, 255),
    "gray": (128, 128, 128, 255),
    "grey": (128, 128, 128, 255),
    "transparent": (0, 0, 0, 0),
}

_RGB_FUNC = re.compile(r"^rgba?\(([^)]*)\)$")


def parse_color(value: str | Sequence[int] | None) -> RGBA | None:
    """Parse `#rgb`, `#rgba`, `#rrggbb`, `#rrggbbaa`, `rgb()`/`rgba()` or a named colour."""

    if value is None:
        return None
    if not isinstance(value, str):
        parts = [int(v) for v in value]
        if len(parts) == 3:
            parts.append(255)
        if len(parts) != 4:
            raise ValueError(f"invalid color: {value!r}")
        return (parts[0], parts[1], parts[2], parts[3])
    raw = value.strip().lower()
    if raw in {"", "none"}:
        return None
    if raw in _NAMED:
        return _NAMED[raw]
    if raw.startswith("#"):
        h = raw[1:]
        if len(h) in (3, 4):
            h = "".join(ch * 2 for ch in h)
        if len(h) == 6:
            return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16), 255)
        if len(h) == 8:
            return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16), int(h[6:8], 16))
        raise ValueError(f"invalid color: {value}")
    match = _RGB_FUNC.match(raw)
    if match:
        numbers = [p.strip() for p in match.group(1).split(",")]
        if len(numbers) not in (3, 4):
            raise ValueError(f"invalid color: {value}")
        r, g, b = (int(float(n)) for n in numbers[:3])
        a = 255
        if len(numbers) == 4:
            a = int(round(max(0.0, min(1.0, float(numbers[3]))) * 255))
        return (r, g, b, a)
    raise ValueError(f"invalid color: {value}")


def with_opacity(color: RGBA | None, opacity: float) -> RGBA | None:
    if color is None:
        return None
    if opacity >= 1.0:
        return color
    r, g, b, a = color
    return (r, g, b, max(0, min(255, int(a * max(0.0, opacity)))))


def to_hex(color: RGBA) -> str:
    return f"#{color[0]:02x}{color[1]:02x}{color[2]:02x}"


def lerp_color(a: RGBA, b: RGBA, t: float) -> RGBA:
    t = max(0.0, min(1.0, t))
    return (
        int(round(a[0] + (b[0] - a[0]) * t)),
        int(round(a[1] + (b[1] - a[1]) * t)),
        int(round(a[2] + (b[2] - a[2]) * t)),
        int(round(a[3] + (b[3] - a[3]) * t)),
    )


def interpolate_palette(palette: Sequence[str], ratio: float) -> str:
    """Colour at `ratio` in [0, 1] along evenly spaced palette stops."""

    if not palette:
        raise ValueError("palette must not be empty")
    ratio = max(0.0, min(1.0, ratio))
    if len(palette) == 1:
        return palette[0]
    pos = ratio * (len(palette) - 1)
    idx = min(int(pos), len(palette) - 2)
    c0 = parse_color(palette[idx])
    c1 = parse_color(palette[idx + 1])
    if c0 is None or c1 is None:
        raise ValueError("palette entries must be colors")
    return to_hex(lerp_color(c0, c1, pos - idx))
