from __future__ import annotations

import dataclasses
from dataclasses import asdict, dataclass
import os
import re
from typing import Any, Mapping, TypeVar


_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")

FONT_FAMILY_ENV = "CHARTKIT_FONT_FAMILY"

OptionsT = TypeVar("OptionsT")

DEFAULT_PALETTE: tuple[str, ...] = (
    "#5470c6",
    "#91cc75",
    "#fac858",
    "#ee6666",
    "#73c0de",
    "#3ba272",
    "#fc8452",
    "#9a60b4",
    "#ea7ccc",
)


@dataclass(frozen=True)
class ChartTheme:
    """Token set shared by series renderers and decorative components."""

    palette: tuple[str, ...] = DEFAULT_PALETTE
    background: str = "#FFFFFF"
    text_color: str = "#333333"
    axis_color: str = "#6E7079"
    split_line_color: str = "#E0E6F1"
    font_family: str = "DejaVu Sans"
    font_size_px: float = 12.0

    def color_for(self, index: int) -> str:
        return self.palette[index % len(self.palette)]


DEFAULT_THEME = ChartTheme()


def validate_theme(overrides: Mapping[str, Any] | None = None) -> ChartTheme:
    """Validate and merge user token overrides against the defaults."""

    raw: dict[str, Any] = asdict(DEFAULT_THEME)
    env_font = os.getenv(FONT_FAMILY_ENV, "").strip()
    if env_font:
        raw["font_family"] = env_font
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown theme token: {key}")
            raw[key] = value

    palette = raw["palette"]
    if isinstance(palette, str) or not palette:
        raise ValueError("Token `palette` must be a non-empty sequence of hex colors")
    for color in palette:
        if not isinstance(color, str) or not _HEX_COLOR.match(color):
            raise ValueError("Token `palette` must be a non-empty sequence of hex colors")

    for key in ("background", "text_color", "axis_color", "split_line_color"):
        if not isinstance(raw[key], str) or not _HEX_COLOR.match(raw[key]):
            raise ValueError(f"Token `{key}` must be a hex color (#RRGGBB or #RRGGBBAA)")

    if not isinstance(raw["font_family"], str) or not raw["font_family"].strip():
        raise ValueError("Token `font_family` must be a non-empty string")

    if not isinstance(raw["font_size_px"], (int, float)) or float(raw["font_size_px"]) <= 0:
        raise ValueError("Token `font_size_px` must be a positive number")

    return ChartTheme(
        palette=tuple(str(c) for c in palette),
        background=str(raw["background"]),
        text_color=str(raw["text_color"]),
        axis_color=str(raw["axis_color"]),
        split_line_color=str(raw["split_line_color"]),
        font_family=str(raw["font_family"]),
        font_size_px=float(raw["font_size_px"]),
    )


def resolve_options(cls: type[OptionsT], overrides: Mapping[str, Any] | OptionsT | None = None) -> OptionsT:
    """Build an options dataclass from a mapping, rejecting unknown keys."""

    if overrides is None:
        return cls()
    if isinstance(overrides, cls):
        return overrides
    if not isinstance(overrides, Mapping):
        raise ValueError(f"options must be a mapping or {cls.__name__}")
    known = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    for key in overrides:
        if key not in known:
            raise ValueError(f"Unknown {cls.__name__} option: {key}")
    return cls(**dict(overrides))
