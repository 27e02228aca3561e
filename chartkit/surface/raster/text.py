from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 12.0
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "helvetica",
    "arial",
    "liberationsans",
    "menlo",
)


def text_mask(text: str, *, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = DEFAULT_FONT_SIZE_PX) -> tuple[np.ndarray, int, int]:
    """Coverage mask for `text` plus the (left, ascent) offsets of its ink box."""

    font = load_font(font_family=font_family, font_size_px=font_size_px)
    return _render_mask(text, font)


def text_size(text: str, *, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = DEFAULT_FONT_SIZE_PX) -> tuple[int, int]:
    font = load_font(font_family=font_family, font_size_px=font_size_px)
    if not text:
        ascent, descent = _metrics(font)
        return (0, max(1, int(ascent + descent)))
    return (max(0, int(round(font.getlength(text)))), max(1, sum(_metrics(font))))


def font_metrics(*, font_family: str = DEFAULT_FONT_FAMILY, font_size_px: float = DEFAULT_FONT_SIZE_PX) -> tuple[int, int]:
    return _metrics(load_font(font_family=font_family, font_size_px=font_size_px))


def _metrics(font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> tuple[int, int]:
    if isinstance(font, ImageFont.FreeTypeFont):
        ascent, descent = font.getmetrics()
        return (int(ascent), int(descent))
    left, top, right, bottom = font.getbbox("Ag")
    return (int(bottom), 0)


@lru_cache(maxsize=256)
def _render_mask(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> tuple[np.ndarray, int, int]:
    if not text:
        return (np.zeros((1, 1), dtype=np.uint8), 0, 0)
    left, top, right, bottom = font.getbbox(text)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font)
    return (np.asarray(image, dtype=np.uint8), int(left), int(top))


@lru_cache(maxsize=64)
def load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is not None:
        try:
            return ImageFont.truetype(str(font_path), size=size)
        except OSError as exc:
            LOGGER.warning("failed to load font %s: %s", font_path, exc)
    return ImageFont.load_default(size=size)


def _resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower() if font_family.strip() else DEFAULT_FONT_FAMILY.lower()
    patterns = (wanted,) + FONT_FALLBACK_PATTERNS

    font_dirs = [
        Path.home() / "Library" / "Fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
    ]

    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))

    for pattern in patterns:
        p = pattern.replace(" ", "")
        for path in candidates:
            if p in path.stem.lower().replace(" ", "") or p in path.name.lower().replace(" ", ""):
                return path
    return None
