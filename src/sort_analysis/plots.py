"""
Matplotlib-based rendering for agreement matrices, dendrograms and graphs.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from scipy.cluster.hierarchy import dendrogram

from card_sort.models import Cluster
from sort_analysis.agreement import AgreementMatrix
from sort_analysis.cluster_graph import ClusterGraph
from sort_analysis.clustering import to_linkage_matrix
from sort_analysis.formatting import format_percent
from sort_analysis.style import (
    COLOR_AGREEMENT,
    COLOR_BOUNDARY,
    COLOR_LINK,
    COLOR_TEXT_MUTED,
    HEATMAP_COLORMAP,
    category_color,
)

LOGGER = logging.getLogger(__name__)


def save_figure(output_path: Path, fig: plt.Figure) -> Path:
    """Expand, create parent directories, and save a Matplotlib figure."""

    resolved = output_path.expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(resolved, dpi=150)
    plt.close(fig)
    print(f"Wrote figure to {resolved}")
    return resolved


def render_similarity_heatmap(
    matrix: AgreementMatrix, output_path: Path
) -> Optional[Path]:
    """Render the lower triangle of ``matrix`` as an annotated heatmap.

    Each cell below the diagonal shows the agreement as a whole percentage;
    card titles label the diagonal. Nothing is written for an empty matrix.
    """

    if matrix.is_empty:
        LOGGER.warning("Agreement matrix is empty; skipping heatmap.")
        return None

    plt.switch_backend("Agg")
    n = len(matrix)
    masked = np.ma.masked_where(~np.tri(n, k=-1, dtype=bool), matrix.values)
    size = max(4.0, 0.5 * n + 2.0)
    fig, ax = plt.subplots(figsize=(size, size))
    ax.imshow(masked, cmap=HEATMAP_COLORMAP, vmin=0.0, vmax=1.0)

    for i in range(n):
        for j in range(i):
            value = float(matrix.values[i, j])
            ax.text(
                j,
                i,
                format_percent(value),
                ha="center",
                va="center",
                fontsize=7,
                color="white" if value > 0.5 else "black",
            )
        ax.text(i, i, matrix.titles[i], ha="left", va="center", fontsize=8)

    ax.set_xticks(range(n))
    ax.set_xticklabels([str(i + 1) for i in range(n)])
    ax.set_yticks(range(n))
    ax.set_yticklabels([str(i + 1) for i in range(n)])
    ax.set_title(f"Card agreement (%) across {matrix.session_count} sessions")
    for spine in ax.spines.values():
        spine.set_color(COLOR_BOUNDARY)
    fig.tight_layout()
    return save_figure(output_path, fig)


def render_dendrogram(root: Optional[Cluster], output_path: Path) -> Optional[Path]:
    """Render the merge tree rooted at ``root`` with leaves on the right."""

    if root is None or root.is_leaf:
        LOGGER.warning("Dendrogram has fewer than two cards; skipping plot.")
        return None

    plt.switch_backend("Agg")
    linkage_matrix, labels = to_linkage_matrix(root)
    height = max(3.0, 0.35 * len(labels) + 1.0)
    fig, ax = plt.subplots(figsize=(8.0, height))
    dendrogram(
        linkage_matrix,
        labels=labels,
        orientation="left",
        ax=ax,
        color_threshold=0,
        above_threshold_color=COLOR_AGREEMENT,
    )
    ax.set_xlabel("1 - merge agreement")
    ax.set_title("Card dendrogram")
    fig.tight_layout()
    return save_figure(output_path, fig)


def _circular_layout(titles: Tuple[str, ...]) -> Dict[str, Tuple[float, float]]:
    count = len(titles)
    return {
        title: (
            math.cos(2.0 * math.pi * index / count),
            math.sin(2.0 * math.pi * index / count),
        )
        for index, title in enumerate(titles)
    }


def render_cluster_graph(graph: ClusterGraph, output_path: Path) -> Optional[Path]:
    """Render ``graph`` on a circle; link width grows with ``sqrt(value)``."""

    if not graph.nodes:
        LOGGER.warning("Cluster graph has no nodes; skipping plot.")
        return None

    plt.switch_backend("Agg")
    positions = _circular_layout(tuple(node.title for node in graph.nodes))
    fig, ax = plt.subplots(figsize=(8.0, 8.0))

    for link in graph.links:
        x0, y0 = positions[link.source]
        x1, y1 = positions[link.target]
        ax.plot(
            [x0, x1],
            [y0, y1],
            color=COLOR_LINK,
            linewidth=math.sqrt(link.value) * 5,
            zorder=1,
        )

    for node in graph.nodes:
        x, y = positions[node.title]
        color = (
            category_color(node.categories[0]) if node.categories else COLOR_AGREEMENT
        )
        ax.scatter([x], [y], s=60, color=color, zorder=2)
        ax.annotate(
            node.title,
            (x, y),
            xytext=(6, 0),
            textcoords="offset points",
            fontsize=8,
            va="center",
        )
        if node.categories:
            ax.annotate(
                ", ".join(node.categories),
                (x, y),
                xytext=(6, -10),
                textcoords="offset points",
                fontsize=6,
                color=COLOR_TEXT_MUTED,
                va="center",
            )

    ax.set_title(
        f"Card agreement >= {format_percent(graph.threshold)}% "
        f"({graph.session_count} sessions)"
    )
    ax.set_aspect("equal")
    ax.axis("off")
    ax.margins(0.25)
    fig.tight_layout()
    return save_figure(output_path, fig)


__all__ = [
    "render_cluster_graph",
    "render_dendrogram",
    "render_similarity_heatmap",
    "save_figure",
]
