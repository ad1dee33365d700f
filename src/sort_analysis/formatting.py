"""Shared numeric formatting helpers for agreement outputs.

Agreement values are written with three decimal places in tables and as
whole percentages on heatmap cells.
"""

from __future__ import annotations

from typing import Optional


def round3(value: float) -> float:
    """Return ``value`` rounded to three decimal places."""

    return round(value, 3)


def format_rate3(value: Optional[float]) -> str:
    """Return a three-decimal string for a rate, or an empty string for ``None``."""

    if value is None:
        return ""
    return f"{round3(float(value)):.3f}"


def format_percent(value: float) -> str:
    """Return ``value`` (a fraction) as a whole-number percentage string.

    For example ``0.5`` becomes ``"50"`` and ``0.666`` becomes ``"67"``.
    """

    return f"{float(value) * 100:.0f}"


__all__ = ["format_percent", "format_rate3", "round3"]
