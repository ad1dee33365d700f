"""
Tests for session value types and analysis configuration.
"""

from __future__ import annotations

import argparse

import pytest

from card_sort.configs import (
    DEFAULT_GRAPH_THRESHOLD,
    UNSORTED_CATEGORY_NAME,
    AnalysisConfig,
)
from card_sort.models import Card, Category, Cluster, Session


def test_session_iterates_categorised_then_unsorted_cards() -> None:
    session = Session(
        categories=(
            Category(name="X", cards=(Card("A"), Card("B"))),
            Category(name="Y", cards=(Card("C"),)),
        ),
        unsorted_cards=(Card("D"),),
    )

    assert [card.title for card in session.iter_cards()] == ["A", "B", "C", "D"]
    assert session.card_count == 4
    assert session.categories[0].titles == ["A", "B"]


def test_cluster_size_counts_leaves() -> None:
    inner = Cluster("Cluster 2", (Cluster("A"), Cluster("B")), score=0.5, step=0)
    root = Cluster("Cluster 1", (Cluster("C"), inner), score=0.1, step=1)

    assert Cluster("A").size == 1
    assert inner.size == 2
    assert root.size == 3
    assert not root.is_leaf


def test_cluster_requires_zero_or_two_children() -> None:
    with pytest.raises(ValueError):
        Cluster("bad", (Cluster("A"), Cluster("B"), Cluster("C")))


def test_config_defaults_and_validation() -> None:
    config = AnalysisConfig()

    assert config.unsorted_category_name == UNSORTED_CATEGORY_NAME
    assert config.graph_threshold == DEFAULT_GRAPH_THRESHOLD
    with pytest.raises(ValueError):
        AnalysisConfig(graph_threshold=1.5)
    with pytest.raises(ValueError):
        AnalysisConfig(graph_threshold=float("nan"))


def test_config_from_args_falls_back_to_defaults() -> None:
    config = AnalysisConfig.from_args(argparse.Namespace(unsorted_name=""))
    custom = AnalysisConfig.from_args(
        argparse.Namespace(unsorted_name="Later", threshold=0.25)
    )

    assert config == AnalysisConfig()
    assert custom.unsorted_category_name == "Later"
    assert custom.graph_threshold == 0.25


def test_cluster_to_dict_uses_name_and_children_keys() -> None:
    root = Cluster("Cluster 1", (Cluster("A"), Cluster("B")), score=0.5, step=0)

    assert root.to_dict() == {
        "name": "Cluster 1",
        "children": [{"name": "A", "children": []}, {"name": "B", "children": []}],
    }
