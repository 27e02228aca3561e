from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw

from chartkit.colors import RGBA, parse_color, with_opacity
from chartkit.geometry import PathCommand, Rect, dash_polyline, flatten_path
from chartkit.surface.base import Style, Surface, TextStyle
from chartkit.surface.raster.canvas import blend_mask, clip_mask, new_canvas
from chartkit.surface.raster.text import font_metrics, text_mask, text_size


Matrix = tuple[float, float, float, float, float, float]

_IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


@dataclass(frozen=True)
class _RasterState:
    matrix: Matrix = _IDENTITY
    clip: tuple[int, int, int, int] | None = None


class RasterSurface(Surface):
    """Bitmap surface backed by an RGBA numpy canvas."""

    kind = "raster"

    def __init__(self, width: int, height: int, *, background: str | None = None) -> None:
        bg = parse_color(background) if background else (0, 0, 0, 0)
        self.canvas = new_canvas(int(width), int(height), bg or (0, 0, 0, 0))
        self._state = _RasterState()
        self._stack: list[_RasterState] = []

    @property
    def width(self) -> int:
        return int(self.canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self.canvas.shape[0])

    def save(self) -> None:
        self._stack.append(self._state)

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()

    def translate(self, dx: float, dy: float) -> None:
        self._concat((1.0, 0.0, 0.0, 1.0, float(dx), float(dy)))

    def rotate(self, radians: float) -> None:
        c = math.cos(radians)
        s = math.sin(radians)
        self._concat((c, s, -s, c, 0.0, 0.0))

    def scale(self, sx: float, sy: float | None = None) -> None:
        self._concat((float(sx), 0.0, 0.0, float(sx if sy is None else sy), 0.0, 0.0))

    def clip(self, rect: Rect) -> None:
        corners = [self._apply((rect.x, rect.y)), self._apply((rect.right, rect.bottom)),
                   self._apply((rect.x, rect.bottom)), self._apply((rect.right, rect.y))]
        xs = [p[0] for p in corners]
        ys = [p[1] for p in corners]
        box = (int(math.floor(min(xs))), int(math.floor(min(ys))), int(math.ceil(max(xs))), int(math.ceil(max(ys))))
        current = self._state.clip
        if current is not None:
            box = (max(box[0], current[0]), max(box[1], current[1]), min(box[2], current[2]), min(box[3], current[3]))
        self._state = _RasterState(matrix=self._state.matrix, clip=box)

    def path(self, commands: Sequence[PathCommand], style: Style) -> None:
        subpaths = flatten_path(commands)
        if not subpaths:
            return
        device = [[self._apply(p) for p in poly] for poly in subpaths]

        fill = with_opacity(parse_color(style.fill), style.opacity)
        if fill is not None and fill[3] > 0:
            mask = np.zeros((self.height, self.width), dtype=bool)
            for poly in device:
                if len(poly) < 3:
                    continue
                mask ^= self._polygon_mask(poly)
            self._blend(mask.astype(np.uint8) * 255, fill)

        stroke = with_opacity(parse_color(style.stroke), style.opacity)
        if stroke is not None and stroke[3] > 0 and style.stroke_width > 0:
            width = max(1, int(round(style.stroke_width * self._scale_factor())))
            image = Image.new("L", (self.width, self.height), 0)
            draw = ImageDraw.Draw(image)
            for poly in device:
                runs = dash_polyline(poly, style.dash) if style.dash else [poly]
                for run in runs:
                    if len(run) < 2:
                        continue
                    draw.line(run, fill=255, width=width, joint="curve")
            self._blend(np.asarray(image, dtype=np.uint8), stroke)

    def text(self, x: float, y: float, text: str, style: TextStyle) -> None:
        if not text:
            return
        color = with_opacity(parse_color(style.color), style.opacity)
        if color is None:
            return
        mask, left, top = text_mask(text, font_family=style.font_family, font_size_px=style.font_size)
        width, _ = text_size(text, font_family=style.font_family, font_size_px=style.font_size)
        ascent, descent = font_metrics(font_family=style.font_family, font_size_px=style.font_size)
        px, py = self._apply((x, y))
        if style.align == "center":
            px -= width / 2.0
        elif style.align == "right":
            px -= width
        if style.baseline == "top":
            py += ascent
        elif style.baseline == "middle":
            py += (ascent - descent) / 2.0
        elif style.baseline == "bottom":
            py -= descent
        # Glyph boxes are relative to the ascent line.
        ox = int(round(px + left))
        oy = int(round(py - ascent + top))
        placed = np.zeros((self.height, self.width), dtype=np.uint8)
        _paste(placed, ox, oy, mask)
        self._blend(placed, color)

    def measure_text(self, text: str, style: TextStyle | None = None) -> float:
        style = style or TextStyle()
        return float(text_size(text, font_family=style.font_family, font_size_px=style.font_size)[0])

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.canvas)

    def save_png(self, path: str | Path) -> None:
        self.to_image().save(str(path), format="PNG")

    def pixel(self, x: int, y: int) -> RGBA:
        r, g, b, a = (int(v) for v in self.canvas[y, x])
        return (r, g, b, a)

    def _polygon_mask(self, poly: list[tuple[float, float]]) -> np.ndarray:
        image = Image.new("1", (self.width, self.height), 0)
        ImageDraw.Draw(image).polygon(poly, fill=1)
        return np.asarray(image, dtype=bool)

    def _blend(self, mask: np.ndarray, color: RGBA) -> None:
        blend_mask(self.canvas, 0, 0, clip_mask(mask, self._state.clip), color)

    def _concat(self, m: Matrix) -> None:
        a, b, c, d, e, f = self._state.matrix
        a2, b2, c2, d2, e2, f2 = m
        matrix = (
            a * a2 + c * b2,
            b * a2 + d * b2,
            a * c2 + c * d2,
            b * c2 + d * d2,
            a * e2 + c * f2 + e,
            b * e2 + d * f2 + f,
        )
        self._state = _RasterState(matrix=matrix, clip=self._state.clip)

    def _apply(self, point: tuple[float, float]) -> tuple[float, float]:
        a, b, c, d, e, f = self._state.matrix
        x, y = point
        return (a * x + c * y + e, b * x + d * y + f)

    def _scale_factor(self) -> float:
        a, b, c, d, _, _ = self._state.matrix
        return math.sqrt(abs(a * d - b * c)) or 1.0


def _paste(dst: np.ndarray, x: int, y: int, mask: np.ndarray) -> None:
    h, w = mask.shape
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(dst.shape[1], x + w), min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    dst[y0:y1, x0:x1] = mask[y0 - y : y1 - y, x0 - x : x1 - x]
