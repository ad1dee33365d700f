"""Analysis settings shared by the library helpers and the CLI."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

UNSORTED_CATEGORY_NAME = "Unsorted"
DEFAULT_GRAPH_THRESHOLD = 0.5
CLUSTER_NAME_PREFIX = "Cluster"


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings controlling agreement and graph computations.

    Parameters
    ----------
    unsorted_category_name:
        Category name treated as "not sorted" by the agreement matrix. Cards
        placed in a category with this name never count as co-occurring.
    graph_threshold:
        Minimum link value in ``[0, 1]`` kept when filtering the cluster
        graph.
    """

    unsorted_category_name: str = UNSORTED_CATEGORY_NAME
    graph_threshold: float = DEFAULT_GRAPH_THRESHOLD

    def __post_init__(self) -> None:
        validate_threshold(self.graph_threshold)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "AnalysisConfig":
        """Build a config from parsed CLI arguments, falling back to defaults."""

        unsorted_name = getattr(args, "unsorted_name", None)
        threshold = getattr(args, "threshold", None)
        return cls(
            unsorted_category_name=(
                unsorted_name if unsorted_name else UNSORTED_CATEGORY_NAME
            ),
            graph_threshold=(
                float(threshold) if threshold is not None else DEFAULT_GRAPH_THRESHOLD
            ),
        )


def validate_threshold(threshold: float) -> float:
    """Return ``threshold`` when it lies in ``[0, 1]``.

    Raises
    ------
    ValueError
        If ``threshold`` is outside ``[0, 1]`` or not a finite number.
    """

    value = float(threshold)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Threshold must be between 0 and 1, got {threshold}")
    return value


DEFAULT_CONFIG = AnalysisConfig()

__all__ = [
    "AnalysisConfig",
    "CLUSTER_NAME_PREFIX",
    "DEFAULT_CONFIG",
    "DEFAULT_GRAPH_THRESHOLD",
    "UNSORTED_CATEGORY_NAME",
    "validate_threshold",
]
