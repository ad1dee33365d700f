"""Pairwise card agreement across card-sorting sessions.

The agreement between two card titles is the number of sessions in which
both cards were placed in the same category, divided by the number of
sessions considered. Categories named with the unsorted sentinel never
contribute co-occurrences.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from card_sort.configs import DEFAULT_CONFIG, AnalysisConfig
from card_sort.models import Session
from utils.schema import PAIR_AGREEMENT, PAIR_CARD_A, PAIR_CARD_B


def collect_card_titles(sessions: Sequence[Session]) -> List[str]:
    """Return the distinct card titles across ``sessions`` in first-seen order.

    Within each session, titles from every category (including one named
    like the unsorted sentinel) are visited first, followed by the session's
    unsorted cards.
    """

    seen: Dict[str, None] = {}
    for session in sessions:
        for card in session.iter_cards():
            seen.setdefault(card.title, None)
    return list(seen)


@dataclass(frozen=True, eq=False)
class AgreementMatrix:
    """Symmetric title-by-title agreement scores.

    Parameters
    ----------
    titles:
        Ordered distinct card titles labelling both axes.
    values:
        Square array where ``values[i, j]`` is the agreement between
        ``titles[i]`` and ``titles[j]``. The diagonal is zero and unused.
    session_count:
        Number of sessions the scores were normalised by.
    """

    titles: tuple
    values: np.ndarray
    session_count: int

    def __len__(self) -> int:
        return len(self.titles)

    @property
    def is_empty(self) -> bool:
        return len(self.titles) == 0

    def index_of(self, title: str) -> int:
        try:
            return self.titles.index(title)
        except ValueError as err:
            raise KeyError(title) from err

    def score(self, title_a: str, title_b: str) -> float:
        """Return the agreement between two titles."""

        return float(self.values[self.index_of(title_a), self.index_of(title_b)])

    def pairs(self) -> Iterator[Dict[str, object]]:
        """Yield one record per unordered pair (upper triangle, row-major)."""

        n = len(self.titles)
        for i in range(n):
            for j in range(i + 1, n):
                yield {
                    PAIR_CARD_A: self.titles[i],
                    PAIR_CARD_B: self.titles[j],
                    PAIR_AGREEMENT: float(self.values[i, j]),
                }

    def top_pairs(self, limit: int = 10) -> List[Dict[str, object]]:
        """Return the ``limit`` highest-agreement pairs, ties in pair order."""

        ranked = sorted(
            self.pairs(), key=lambda record: record[PAIR_AGREEMENT], reverse=True
        )
        return ranked[: max(limit, 0)]

    def reordered(self, titles: Sequence[str]) -> "AgreementMatrix":
        """Return a copy with both axes permuted to ``titles``."""

        order = [self.index_of(title) for title in titles]
        if sorted(order) != list(range(len(self.titles))):
            raise ValueError("Reordering must be a permutation of the matrix titles")
        values = self.values[np.ix_(order, order)]
        return AgreementMatrix(
            titles=tuple(titles), values=values, session_count=self.session_count
        )

    def to_frame(self) -> pd.DataFrame:
        """Return the matrix as a DataFrame indexed and labelled by title."""

        return pd.DataFrame(
            self.values, index=list(self.titles), columns=list(self.titles)
        )


def compute_agreement_matrix(
    sessions: Sequence[Session],
    config: Optional[AnalysisConfig] = None,
) -> AgreementMatrix:
    """Return the pairwise agreement matrix for ``sessions``.

    Parameters
    ----------
    sessions:
        Sessions to analyse. Each contributes equally to the denominator.
    config:
        Optional analysis settings; only ``unsorted_category_name`` is used.

    Returns
    -------
    AgreementMatrix
        Scores over :func:`collect_card_titles`. With no sessions the result
        is empty (no titles, ``0 x 0`` values). A pair that co-occurs in
        several categories of one session is counted once per category, so
        scores can exceed one.
    """

    cfg = config or DEFAULT_CONFIG
    if not sessions:
        return AgreementMatrix(
            titles=(), values=np.zeros((0, 0), dtype=float), session_count=0
        )

    titles = collect_card_titles(sessions)
    index = {title: position for position, title in enumerate(titles)}
    counts = np.zeros((len(titles), len(titles)), dtype=float)

    for session in sessions:
        for category in session.categories:
            if category.name == cfg.unsorted_category_name:
                continue
            members = [index[title] for title in category.titles]
            for i, a in enumerate(members):
                for b in members[i + 1 :]:
                    counts[a, b] += 1
                    counts[b, a] += 1

    # Repeated titles within a category land on the diagonal.
    np.fill_diagonal(counts, 0.0)
    return AgreementMatrix(
        titles=tuple(titles),
        values=counts / len(sessions),
        session_count=len(sessions),
    )


__all__ = ["AgreementMatrix", "collect_card_titles", "compute_agreement_matrix"]
