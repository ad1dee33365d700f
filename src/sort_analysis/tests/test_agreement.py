"""
Tests for the pairwise agreement matrix.
"""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from card_sort.configs import AnalysisConfig
from card_sort.models import Card, Category, Session
from sort_analysis.agreement import collect_card_titles, compute_agreement_matrix


def _session(*categories: tuple, unsorted: tuple = ()) -> Session:
    """Return a session from ``(name, [titles])`` tuples."""

    return Session(
        categories=tuple(
            Category(name=name, cards=tuple(Card(title=t) for t in titles))
            for name, titles in categories
        ),
        unsorted_cards=tuple(Card(title=t) for t in unsorted),
    )


def test_single_category_gives_full_agreement() -> None:
    """One session with one category {A, B, C} scores every pair at 1."""

    matrix = compute_agreement_matrix([_session(("Group", ["A", "B", "C"]))])

    assert matrix.titles == ("A", "B", "C")
    for a, b in itertools.combinations("ABC", 2):
        assert matrix.score(a, b) == pytest.approx(1.0)


def test_pair_together_in_one_of_two_sessions_scores_half() -> None:
    sessions = [
        _session(("X", ["A", "B"])),
        _session(("X", ["A"]), ("Y", ["B"])),
    ]

    matrix = compute_agreement_matrix(sessions)

    assert matrix.score("A", "B") == pytest.approx(0.5)
    assert matrix.session_count == 2


def test_matrix_is_symmetric_with_zero_diagonal() -> None:
    sessions = [
        _session(("X", ["A", "B", "C"]), ("Y", ["D"])),
        _session(("X", ["C", "D"]), ("Y", ["A", "B"])),
        _session(("X", ["B", "D"]), unsorted=("A", "C")),
    ]

    matrix = compute_agreement_matrix(sessions)

    assert np.allclose(matrix.values, matrix.values.T)
    assert np.all(np.diag(matrix.values) == 0.0)
    assert np.all(matrix.values >= 0.0)
    assert np.all(matrix.values <= matrix.session_count)


def test_unsorted_category_is_excluded_but_titles_are_kept() -> None:
    session = _session(("Unsorted", ["A", "B"]), ("Group", ["C", "D"]))

    matrix = compute_agreement_matrix([session])

    assert matrix.titles == ("A", "B", "C", "D")
    assert matrix.score("A", "B") == 0.0
    assert matrix.score("C", "D") == pytest.approx(1.0)


def test_custom_unsorted_name_is_respected() -> None:
    session = _session(("Later", ["A", "B"]), ("Unsorted", ["C", "D"]))
    config = AnalysisConfig(unsorted_category_name="Later")

    matrix = compute_agreement_matrix([session], config)

    assert matrix.score("A", "B") == 0.0
    assert matrix.score("C", "D") == pytest.approx(1.0)


def test_unsorted_cards_join_vocabulary_without_co_occurrence() -> None:
    session = _session(("Group", ["A", "B"]), unsorted=("Z",))

    matrix = compute_agreement_matrix([session])

    assert matrix.titles == ("A", "B", "Z")
    assert matrix.score("A", "Z") == 0.0
    assert matrix.score("B", "Z") == 0.0


def test_pair_in_two_categories_of_one_session_exceeds_one() -> None:
    """Co-occurrences are counted per category, not deduplicated per session."""

    session = _session(("X", ["A", "B"]), ("Y", ["A", "B"]))

    matrix = compute_agreement_matrix([session])

    assert matrix.score("A", "B") == pytest.approx(2.0)


def test_zero_sessions_give_empty_matrix() -> None:
    matrix = compute_agreement_matrix([])

    assert matrix.is_empty
    assert matrix.values.shape == (0, 0)
    assert list(matrix.pairs()) == []


def test_collect_card_titles_first_seen_order() -> None:
    sessions = [
        _session(("X", ["B", "A"]), unsorted=("D",)),
        _session(("Y", ["C", "A"])),
    ]

    assert collect_card_titles(sessions) == ["B", "A", "D", "C"]


def test_reordered_permutes_both_axes_and_frame_labels() -> None:
    sessions = [_session(("X", ["A", "B"]), ("Y", ["C"]))]
    matrix = compute_agreement_matrix(sessions)

    reordered = matrix.reordered(["C", "B", "A"])
    frame = reordered.to_frame()

    assert reordered.titles == ("C", "B", "A")
    assert reordered.score("A", "B") == pytest.approx(1.0)
    assert list(frame.index) == ["C", "B", "A"]
    assert frame.loc["B", "A"] == pytest.approx(1.0)
    with pytest.raises(ValueError):
        matrix.reordered(["A", "A", "B"])


def test_top_pairs_orders_by_agreement() -> None:
    sessions = [
        _session(("X", ["A", "B"]), ("Y", ["C", "D"])),
        _session(("X", ["A", "B", "C"]), ("Y", ["D"])),
    ]
    matrix = compute_agreement_matrix(sessions)

    top = matrix.top_pairs(2)

    assert (top[0]["card_a"], top[0]["card_b"]) == ("A", "B")
    assert top[0]["agreement"] == pytest.approx(1.0)
    assert top[1]["agreement"] == pytest.approx(0.5)
    with pytest.raises(KeyError):
        matrix.score("A", "missing")
