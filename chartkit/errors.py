from __future__ import annotations


class ChartError(RuntimeError):
    """Base error for chart construction failures."""


class ChartDataError(ChartError, ValueError):
    """Structured series input that cannot be interpreted."""
