"""Immutable value types for card-sorting sessions and cluster trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

from utils.schema import CLUSTER_CHILDREN_KEY, CLUSTER_NAME_KEY

SessionId = Union[int, str]


@dataclass(frozen=True)
class Card:
    """A single card as seen in one session.

    Parameters
    ----------
    title:
        Card title. Titles are the identity used by every agreement
        computation; two cards sharing a title are indistinguishable.
    card_id:
        Optional identifier assigned by the sorting tool.
    text:
        Optional longer description shown on the card.
    """

    title: str
    card_id: Optional[int] = None
    text: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """A named, ordered group of cards within one session."""

    name: str
    cards: Tuple[Card, ...] = ()
    category_id: Optional[int] = None

    @property
    def titles(self) -> List[str]:
        return [card.title for card in self.cards]


@dataclass(frozen=True)
class Session:
    """One participant's sort: categories plus the cards left unsorted.

    Cards that were never placed in a category live in ``unsorted_cards``
    rather than under a reserved category name.
    """

    categories: Tuple[Category, ...] = ()
    unsorted_cards: Tuple[Card, ...] = ()
    session_id: Optional[SessionId] = None
    name: Optional[str] = None

    def iter_cards(self) -> Iterator[Card]:
        """Yield categorised cards in category order, then unsorted cards."""

        for category in self.categories:
            yield from category.cards
        yield from self.unsorted_cards

    @property
    def card_count(self) -> int:
        return sum(len(category.cards) for category in self.categories) + len(
            self.unsorted_cards
        )


@dataclass(frozen=True)
class Cluster:
    """Node of a dendrogram.

    Leaves carry a card title as ``name`` and have no children. Internal
    nodes carry a synthetic label, exactly two children, the merge score that
    produced them and the zero-based merge ``step``.
    """

    name: str
    children: Tuple["Cluster", ...] = ()
    score: Optional[float] = None
    step: Optional[int] = None
    _size: int = field(default=1, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.children) not in (0, 2):
            raise ValueError(
                f"Cluster {self.name!r} must have 0 or 2 children, "
                f"got {len(self.children)}"
            )
        if self.children:
            object.__setattr__(
                self, "_size", sum(child.size for child in self.children)
            )

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def size(self) -> int:
        """Number of leaf descendants (1 for a leaf)."""

        return self._size

    def to_dict(self) -> Dict[str, object]:
        """Return the recursive ``{"name", "children"}`` form used by renderers."""

        return {
            CLUSTER_NAME_KEY: self.name,
            CLUSTER_CHILDREN_KEY: [child.to_dict() for child in self.children],
        }


__all__ = ["Card", "Category", "Cluster", "Session", "SessionId"]
