"""CLI helper utilities for shared argparse patterns.

This module centralizes common command-line argument definitions used by the
analysis subcommands so that:

- Repeated argument groups (session inputs, filters, plot outputs) remain
  consistent across subcommands.
- Validation of shared values such as thresholds lives in one place.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from card_sort.configs import DEFAULT_GRAPH_THRESHOLD, UNSORTED_CATEGORY_NAME


def threshold_type(raw: str) -> float:
    """Argparse ``type`` accepting a fraction or percentage in ``[0, 100]``.

    Values greater than one are interpreted as percentages, so ``50`` and
    ``0.5`` are equivalent.
    """

    try:
        value = float(raw)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid threshold: {raw!r}") from err
    if value > 1.0:
        value /= 100.0
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError(
            f"threshold must be within [0, 1] or [0, 100]%, got {raw!r}"
        )
    return value


def add_session_source_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the mutually exclusive ``--sessions-dir`` / ``--database`` inputs.

    Parameters
    ----------
    parser:
        Target argument parser.
    """

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--sessions-dir",
        type=Path,
        help="Directory containing exported session JSON payloads.",
    )
    group.add_argument(
        "--database",
        type=Path,
        help="Path to the sorting tool's SQLite database (read-only).",
    )
    parser.add_argument(
        "--created-by",
        type=int,
        default=None,
        help=(
            "With --database, only list sessions created by this user id "
            "(default: all users)."
        ),
    )


def add_sessions_argument(parser: argparse.ArgumentParser) -> None:
    """Add a shared ``--session/-s`` argument for session filters."""

    parser.add_argument(
        "--session",
        "-s",
        action="append",
        dest="sessions",
        help=(
            "Restrict the analysis to these session ids (repeatable). "
            "Defaults to every available session when omitted."
        ),
    )


def add_unsorted_name_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--unsorted-name",
        default=UNSORTED_CATEGORY_NAME,
        help=(
            "Category name excluded from the agreement matrix "
            f"(default: {UNSORTED_CATEGORY_NAME!r})."
        ),
    )


def add_threshold_argument(parser: argparse.ArgumentParser) -> None:
    """Add a ``--threshold`` argument for cluster-graph link filtering."""

    parser.add_argument(
        "--threshold",
        type=threshold_type,
        default=DEFAULT_GRAPH_THRESHOLD,
        help=(
            "Minimum agreement for a link to be kept, as a fraction or "
            f"percentage (default: {DEFAULT_GRAPH_THRESHOLD})."
        ),
    )


def add_output_argument(
    parser: argparse.ArgumentParser, *, help_text: str, required: bool = True
) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        required=required,
        help=help_text,
    )


def add_plot_argument(parser: argparse.ArgumentParser, *, what: str) -> None:
    """Add an optional ``--plot`` PNG destination."""

    parser.add_argument(
        "--plot",
        type=Path,
        default=None,
        help=f"Optional PNG path for a rendering of the {what}.",
    )


def add_runtime_arguments(parser: argparse.ArgumentParser) -> None:
    """Add ``--verbose`` and ``--no-progress`` flags."""

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the loading progress bar"
    )


__all__ = [
    "add_output_argument",
    "add_plot_argument",
    "add_runtime_arguments",
    "add_session_source_arguments",
    "add_sessions_argument",
    "add_threshold_argument",
    "add_unsorted_name_argument",
    "threshold_type",
]
