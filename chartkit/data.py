from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
import math
from typing import Any

import numpy as np

from chartkit.errors import ChartDataError


def to_number(raw: Any) -> float | None:
    """Coerce one data entry to a finite float, or None when it is missing or non-numeric."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Mapping):
        raw = raw.get("value")
        if isinstance(raw, (list, tuple)):
            return None
        return to_number(raw)
    if isinstance(raw, Decimal):
        raw = float(raw)
    if isinstance(raw, (int, float, np.integer, np.floating)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
        return value if math.isfinite(value) else None
    return None


def coerce_numeric(values: Any, *, label: str = "data") -> np.ndarray:
    """Return a float64 array with NaN for entries that are not numeric."""

    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            raise ChartDataError(f"{label} must be 1-D")
        if values.dtype.kind in {"i", "u", "f"}:
            return values.astype(np.float64, copy=False)
        values = values.tolist()
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes, bytearray)):
        raise ChartDataError(f"unsupported {label} input type: {type(values)!r}")

    out = np.empty(len(values), dtype=np.float64)
    for i, raw in enumerate(values):
        value = to_number(raw)
        out[i] = np.nan if value is None else value
    return out


def finite_extent(values: np.ndarray) -> tuple[float, float] | None:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return None
    return (float(np.min(finite)), float(np.max(finite)))


def item_name(raw: Any) -> str | None:
    if isinstance(raw, Mapping) and raw.get("name") is not None:
        return str(raw["name"])
    return None
