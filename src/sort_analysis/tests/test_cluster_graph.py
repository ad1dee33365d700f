"""
Tests for the co-occurrence cluster graph.
"""

from __future__ import annotations

import pytest

from card_sort.models import Card, Category, Session
from sort_analysis.cluster_graph import build_cluster_graph, filter_links


def _session(*categories: tuple, unsorted: tuple = ()) -> Session:
    return Session(
        categories=tuple(
            Category(name=name, cards=tuple(Card(title=t) for t in titles))
            for name, titles in categories
        ),
        unsorted_cards=tuple(Card(title=t) for t in unsorted),
    )


def test_pairs_are_counted_once_per_session() -> None:
    sessions = [
        _session(("X", ["B", "A"]), ("Y", ["A", "B"])),
        _session(("X", ["A"]), ("Y", ["B"])),
    ]

    graph = build_cluster_graph(sessions)

    assert len(graph.links) == 1
    link = graph.links[0]
    assert (link.source, link.target) == ("A", "B")
    assert link.value == pytest.approx(0.5)
    assert graph.session_count == 2


def test_nodes_collect_category_names_and_skip_unsorted_cards() -> None:
    sessions = [
        _session(("Food", ["Apple", "Bread"]), unsorted=("Lamp",)),
        _session(("Fruit", ["Apple"]), ("Unsorted", ["Bread"])),
    ]

    graph = build_cluster_graph(sessions)

    nodes = {node.title: node.categories for node in graph.nodes}
    assert [node.title for node in graph.nodes] == ["Apple", "Bread"]
    assert nodes["Apple"] == ("Food", "Fruit")
    assert nodes["Bread"] == ("Food", "Unsorted")


def test_filter_links_applies_threshold_inclusively() -> None:
    sessions = [
        _session(("X", ["A", "B", "C"])),
        _session(("X", ["A", "B"]), ("Y", ["C"])),
    ]
    graph = build_cluster_graph(sessions)

    kept = filter_links(graph, 0.5)
    strict = filter_links(graph, 0.75)

    assert {(link.source, link.target) for link in kept.links} == {
        ("A", "B"),
        ("A", "C"),
        ("B", "C"),
    }
    assert [(link.source, link.target) for link in strict.links] == [("A", "B")]
    assert strict.nodes == graph.nodes
    assert strict.threshold == 0.75


def test_filter_links_rejects_out_of_range_threshold() -> None:
    with pytest.raises(ValueError):
        filter_links(build_cluster_graph([]), 1.5)
    with pytest.raises(ValueError):
        filter_links(build_cluster_graph([]), -0.1)


def test_empty_sessions_give_empty_graph() -> None:
    graph = build_cluster_graph([])

    assert graph.nodes == ()
    assert graph.links == ()
    assert graph.to_dict()["nodes"] == []


def test_to_dict_uses_graph_schema() -> None:
    graph = filter_links(build_cluster_graph([_session(("X", ["A", "B"]))]), 0.5)

    payload = graph.to_dict()

    assert payload == {
        "session_count": 1,
        "threshold": 0.5,
        "nodes": [
            {"id": "A", "categories": ["X"]},
            {"id": "B", "categories": ["X"]},
        ],
        "links": [{"source": "A", "target": "B", "value": 1.0}],
    }
