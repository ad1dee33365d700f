"""Card co-occurrence graph for threshold-based cluster exploration.

Nodes are card titles annotated with every category name they were placed
in. A link joins two titles that shared a category in at least one session;
its value is the fraction of sessions in which that happened. Each session
contributes at most once per pair, however many categories the pair shares.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from card_sort.configs import validate_threshold
from card_sort.models import Session
from utils.schema import (
    GRAPH_LINKS_KEY,
    GRAPH_NODES_KEY,
    GRAPH_SESSION_COUNT_KEY,
    GRAPH_THRESHOLD_KEY,
    LINK_SOURCE_KEY,
    LINK_TARGET_KEY,
    LINK_VALUE_KEY,
    NODE_CATEGORIES_KEY,
    NODE_ID_KEY,
)


@dataclass(frozen=True)
class GraphNode:
    title: str
    categories: Tuple[str, ...]


@dataclass(frozen=True)
class GraphLink:
    source: str
    target: str
    value: float


@dataclass(frozen=True)
class ClusterGraph:
    nodes: Tuple[GraphNode, ...] = ()
    links: Tuple[GraphLink, ...] = ()
    session_count: int = 0
    threshold: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        """Return a JSON-ready ``{"nodes", "links"}`` payload."""

        return {
            GRAPH_SESSION_COUNT_KEY: self.session_count,
            GRAPH_THRESHOLD_KEY: self.threshold,
            GRAPH_NODES_KEY: [
                {NODE_ID_KEY: node.title, NODE_CATEGORIES_KEY: list(node.categories)}
                for node in self.nodes
            ],
            GRAPH_LINKS_KEY: [
                {
                    LINK_SOURCE_KEY: link.source,
                    LINK_TARGET_KEY: link.target,
                    LINK_VALUE_KEY: link.value,
                }
                for link in self.links
            ],
        }


def build_cluster_graph(sessions: Sequence[Session]) -> ClusterGraph:
    """Return the co-occurrence graph for ``sessions``.

    Parameters
    ----------
    sessions:
        Sessions to analyse. Only categorised cards (in any category) become
        nodes; unsorted cards are ignored.

    Returns
    -------
    ClusterGraph
        Nodes in first-seen order with sorted category names, and links in
        first-seen order with each endpoint pair stored as ``(min, max)``.
        With no sessions the graph is empty.
    """

    if not sessions:
        return ClusterGraph()

    node_categories: Dict[str, set] = {}
    link_counts: Dict[Tuple[str, str], int] = {}

    for session in sessions:
        session_pairs: Dict[Tuple[str, str], None] = {}
        for category in session.categories:
            titles = category.titles
            for i, title in enumerate(titles):
                node_categories.setdefault(title, set()).add(category.name)
                for other in titles[i + 1 :]:
                    if other == title:
                        continue
                    pair = (min(title, other), max(title, other))
                    session_pairs.setdefault(pair, None)
        for pair in session_pairs:
            link_counts[pair] = link_counts.get(pair, 0) + 1

    total = len(sessions)
    nodes = tuple(
        GraphNode(title=title, categories=tuple(sorted(categories)))
        for title, categories in node_categories.items()
    )
    links = tuple(
        GraphLink(source=source, target=target, value=count / total)
        for (source, target), count in link_counts.items()
    )
    return ClusterGraph(nodes=nodes, links=links, session_count=total)


def filter_links(graph: ClusterGraph, threshold: float) -> ClusterGraph:
    """Return ``graph`` keeping only links whose value is at least ``threshold``.

    Raises
    ------
    ValueError
        If ``threshold`` is outside ``[0, 1]``.
    """

    cutoff = validate_threshold(threshold)
    kept: List[GraphLink] = [link for link in graph.links if link.value >= cutoff]
    return ClusterGraph(
        nodes=graph.nodes,
        links=tuple(kept),
        session_count=graph.session_count,
        threshold=cutoff,
    )


__all__ = [
    "ClusterGraph",
    "GraphLink",
    "GraphNode",
    "build_cluster_graph",
    "filter_links",
]
