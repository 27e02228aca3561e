from __future__ import annotations

from typing import Literal

from chartkit.surface import Style, Surface


SymbolShape = Literal["circle", "rect", "roundRect", "diamond", "triangle", "none"]

SYMBOLS = frozenset({"circle", "rect", "roundRect", "diamond", "triangle", "none"})


def draw_symbol(surface: Surface, symbol: str, x: float, y: float, width: float, height: float | None, style: Style) -> None:
    """Draw `symbol` centred on (x, y) inside a `width` x `height` box."""

    if symbol not in SYMBOLS:
        raise ValueError(f"unknown symbol: {symbol}")
    height = width if height is None else height
    if symbol == "none" or width <= 0 or height <= 0:
        return
    hw = width / 2.0
    hh = height / 2.0
    if symbol == "circle":
        surface.circle(x, y, min(hw, hh), style)
    elif symbol == "rect":
        surface.rect(x - hw, y - hh, width, height, style)
    elif symbol == "roundRect":
        surface.rect(x - hw, y - hh, width, height, style, radius=min(hw, hh) * 0.4)
    elif symbol == "diamond":
        surface.polygon([(x, y - hh), (x + hw, y), (x, y + hh), (x - hw, y)], style)
    else:
        surface.polygon([(x, y - hh), (x + hw, y + hh), (x - hw, y + hh)], style)
