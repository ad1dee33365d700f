"""Shared visual styling constants and helpers for agreement plots."""

from __future__ import annotations

import hashlib
from typing import Tuple

from matplotlib import colormaps

# Heatmap cells and graph nodes.
COLOR_AGREEMENT = "#1f77b4"
HEATMAP_COLORMAP = "Blues"

# Neutral guideline, link and label colors.
COLOR_BOUNDARY = "#9ca3af"
COLOR_LINK = "#999999"
COLOR_TEXT_MUTED = "#6b7280"


def category_color(name: str) -> Tuple[float, float, float, float]:
    """Return a deterministic RGBA color for a category name.

    A fixed qualitative colormap is indexed using a stable hash of the name
    so that the same category is drawn with the same color across figures.
    """

    palette = colormaps["tab20"].colors
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    index = int.from_bytes(digest[:8], byteorder="big", signed=False) % len(palette)
    return palette[index]


__all__ = [
    "COLOR_AGREEMENT",
    "COLOR_BOUNDARY",
    "COLOR_LINK",
    "COLOR_TEXT_MUTED",
    "HEATMAP_COLORMAP",
    "category_color",
]
