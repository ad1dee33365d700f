"""Agglomerative clustering of card titles into a dendrogram.

Clusters are merged greedily: at each step every pair of active clusters is
scored by re-deriving agreement from the raw sessions over the full cross
product of their leaf titles, and the best-scoring pair is merged. The
pairwise :class:`~sort_analysis.agreement.AgreementMatrix` is not reused for
this linkage. Helpers at the bottom convert the resulting tree into a SciPy
linkage matrix and reorder agreement matrices by dendrogram leaf order.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from card_sort.configs import CLUSTER_NAME_PREFIX
from card_sort.models import Cluster, Session
from sort_analysis.agreement import AgreementMatrix, collect_card_titles

LOGGER = logging.getLogger(__name__)

# Per session, the title list of each category (all categories, including one
# named like the unsorted sentinel).
CategoryTitles = List[List[FrozenSet[str]]]


def _leaf_nodes(root: Cluster) -> List[Cluster]:
    if root.is_leaf:
        return [root]
    nodes: List[Cluster] = []
    for child in root.children:
        nodes.extend(_leaf_nodes(child))
    return nodes


def leaf_titles(cluster: Cluster) -> List[str]:
    """Return the leaf titles of ``cluster`` in left-to-right order."""

    return [leaf.name for leaf in _leaf_nodes(cluster)]


def _category_titles(sessions: Sequence[Session]) -> CategoryTitles:
    return [
        [frozenset(category.titles) for category in session.categories]
        for session in sessions
    ]


def _cross_pair_score(
    titles_a: Sequence[str], titles_b: Sequence[str], categories: CategoryTitles
) -> float:
    same = 0
    total = 0
    for session_categories in categories:
        for members in session_categories:
            in_a = sum(1 for title in titles_a if title in members)
            in_b = sum(1 for title in titles_b if title in members)
            same += in_a * in_b
            total += len(titles_a) * len(titles_b)
    if total == 0:
        return 0.0
    return same / total


def merge_score(
    cluster_a: Cluster, cluster_b: Cluster, sessions: Sequence[Session]
) -> float:
    """Return the linkage score for merging two clusters.

    For every session, every category and every cross pair ``(x, y)`` with
    ``x`` a leaf of ``cluster_a`` and ``y`` a leaf of ``cluster_b``, the pair
    counts towards the total; it also counts as "same" when both titles are
    in that category. The score is ``same / total``, or ``0.0`` when there
    are no pairs to compare (for example, no sessions or no categories).
    """

    return _cross_pair_score(
        leaf_titles(cluster_a), leaf_titles(cluster_b), _category_titles(sessions)
    )


def _best_pair(
    leaves: Sequence[Sequence[str]], categories: CategoryTitles
) -> Tuple[int, int, float]:
    best_i, best_j, best_score = -1, -1, float("-inf")
    for i in range(len(leaves)):
        for j in range(i + 1, len(leaves)):
            score = _cross_pair_score(leaves[i], leaves[j], categories)
            # Strictly greater keeps the first-encountered pair on ties.
            if score > best_score:
                best_i, best_j, best_score = i, j, score
    return best_i, best_j, best_score


def build_dendrogram(sessions: Sequence[Session]) -> Optional[Cluster]:
    """Return the root of the agglomerative merge tree for ``sessions``.

    Parameters
    ----------
    sessions:
        Sessions whose categories define co-occurrence.

    Returns
    -------
    Optional[Cluster]
        Root cluster whose leaves are the distinct card titles (see
        :func:`~sort_analysis.agreement.collect_card_titles`). A single title
        yields a leaf root. ``None`` is returned when there are no titles.
    """

    titles = collect_card_titles(sessions)
    if not titles:
        LOGGER.info("No card titles found; dendrogram is empty")
        return None

    categories = _category_titles(sessions)
    clusters: List[Cluster] = [Cluster(name=title) for title in titles]
    leaves: List[List[str]] = [[title] for title in titles]
    step = 0

    while len(clusters) > 1:
        i, j, score = _best_pair(leaves, categories)
        merged = Cluster(
            name=f"{CLUSTER_NAME_PREFIX} {len(clusters) - 1}",
            children=(clusters[i], clusters[j]),
            score=score,
            step=step,
        )
        LOGGER.debug(
            "Merge %d: %s + %s -> %s (score %.4f)",
            step,
            clusters[i].name,
            clusters[j].name,
            merged.name,
            score,
        )
        merged_leaves = leaves[i] + leaves[j]
        clusters = [c for k, c in enumerate(clusters) if k not in (i, j)]
        leaves = [t for k, t in enumerate(leaves) if k not in (i, j)]
        clusters.append(merged)
        leaves.append(merged_leaves)
        step += 1

    return clusters[0]


def _internal_nodes(root: Cluster) -> List[Cluster]:
    nodes: List[Cluster] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if not node.is_leaf:
            nodes.append(node)
            stack.extend(node.children)
    return nodes


def to_linkage_matrix(root: Cluster) -> Tuple[np.ndarray, List[str]]:
    """Return a SciPy-style linkage matrix and its leaf labels.

    Leaves are numbered in left-to-right order and internal nodes in merge
    order, following :func:`scipy.cluster.hierarchy.linkage`. Heights are
    ``1 - score`` made non-decreasing so the tree can be drawn with
    :func:`scipy.cluster.hierarchy.dendrogram`.

    Returns
    -------
    tuple[np.ndarray, list[str]]
        ``(n - 1) x 4`` linkage array and the ``n`` leaf labels.

    Raises
    ------
    ValueError
        If an internal cluster has no recorded merge step.
    """

    labels = leaf_titles(root)
    n = len(labels)
    if root.is_leaf:
        return np.zeros((0, 4), dtype=float), labels

    index = {id(leaf_node): pos for pos, leaf_node in enumerate(_leaf_nodes(root))}
    nodes = list(_internal_nodes(root))
    if any(node.step is None for node in nodes):
        raise ValueError("Every internal cluster needs a merge step")
    internal = sorted(nodes, key=lambda node: node.step)
    for rank, node in enumerate(internal):
        index[id(node)] = n + rank

    linkage_matrix = np.zeros((len(internal), 4), dtype=float)
    height = 0.0
    for row, node in enumerate(internal):
        left, right = node.children
        score = node.score if node.score is not None else 0.0
        height = max(height, 1.0 - score)
        linkage_matrix[row] = [index[id(left)], index[id(right)], height, node.size]
    return linkage_matrix, labels


def order_titles_by_dendrogram(
    matrix: AgreementMatrix, root: Optional[Cluster]
) -> AgreementMatrix:
    """Return ``matrix`` with its axes in dendrogram leaf order.

    Titles missing from the tree keep their relative order at the end. When
    ``root`` is ``None`` the matrix is returned unchanged.
    """

    if root is None or matrix.is_empty:
        return matrix
    in_tree = [title for title in leaf_titles(root) if title in matrix.titles]
    remaining = [title for title in matrix.titles if title not in set(in_tree)]
    return matrix.reordered(in_tree + remaining)


__all__ = [
    "build_dendrogram",
    "leaf_titles",
    "merge_score",
    "order_titles_by_dendrogram",
    "to_linkage_matrix",
]
