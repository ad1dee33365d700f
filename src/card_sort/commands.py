"""CLI entry point for card-sort agreement analysis.

Subcommands load sessions from an exported JSON directory or the sorting
tool's SQLite database and write the requested artefact:

- ``matrix``: pairwise agreement CSV (optionally a pair list and heatmap).
- ``dendrogram``: merge tree JSON (optionally a dendrogram plot).
- ``graph``: thresholded co-occurrence graph JSON (optionally a plot).
- ``summary``: counts and the highest-agreement pairs on stdout.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from card_sort.configs import AnalysisConfig
from card_sort.models import Session
from card_sort.sources import (
    JsonSessionSource,
    SessionFormatError,
    SessionLoadError,
    SessionSource,
    SqliteSessionSource,
)
from sort_analysis.agreement import collect_card_titles, compute_agreement_matrix
from sort_analysis.cluster_graph import build_cluster_graph, filter_links
from sort_analysis.clustering import build_dendrogram, order_titles_by_dendrogram
from sort_analysis.csv_utils import (
    write_json,
    write_matrix_csv,
    write_rows_with_fieldnames,
)
from sort_analysis.formatting import format_rate3
from sort_analysis.plots import (
    render_cluster_graph,
    render_dendrogram,
    render_similarity_heatmap,
)
from utils.cli import (
    add_output_argument,
    add_plot_argument,
    add_runtime_arguments,
    add_session_source_arguments,
    add_sessions_argument,
    add_threshold_argument,
    add_unsorted_name_argument,
)
from utils.schema import PAIR_AGREEMENT, PAIR_CARD_A, PAIR_CARD_B, PAIR_FIELDNAMES

LOGGER = logging.getLogger(__name__)

LOGGER_NAMES = ("card_sort", "sort_analysis")


def build_parser() -> argparse.ArgumentParser:
    """Return the ``cardsort-analyze`` argument parser."""

    common = argparse.ArgumentParser(add_help=False)
    add_session_source_arguments(common)
    add_sessions_argument(common)
    add_unsorted_name_argument(common)
    add_runtime_arguments(common)

    parser = argparse.ArgumentParser(
        prog="cardsort-analyze",
        description="Agreement analysis for card-sorting sessions",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_matrix = sub.add_parser(
        "matrix", parents=[common], help="Write the pairwise agreement matrix"
    )
    add_output_argument(p_matrix, help_text="Destination CSV for the square matrix.")
    p_matrix.add_argument(
        "--order",
        choices=["first-seen", "dendrogram"],
        default="first-seen",
        help=(
            "Card order along both axes: first appearance across sessions, "
            "or dendrogram leaf order (default: first-seen)."
        ),
    )
    p_matrix.add_argument(
        "--pairs",
        type=Path,
        default=None,
        help="Optional CSV listing every card pair with its agreement.",
    )
    add_plot_argument(p_matrix, what="similarity heatmap")

    p_dendro = sub.add_parser(
        "dendrogram", parents=[common], help="Write the agglomerative merge tree"
    )
    add_output_argument(p_dendro, help_text="Destination JSON for the tree.")
    add_plot_argument(p_dendro, what="dendrogram")

    p_graph = sub.add_parser(
        "graph", parents=[common], help="Write the thresholded cluster graph"
    )
    add_output_argument(p_graph, help_text="Destination JSON for nodes and links.")
    add_threshold_argument(p_graph)
    add_plot_argument(p_graph, what="cluster graph")

    p_summary = sub.add_parser(
        "summary", parents=[common], help="Print counts and top agreeing pairs"
    )
    p_summary.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of highest-agreement pairs to print (default: 10).",
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO if verbose else logging.WARNING)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def make_session_source(args: argparse.Namespace) -> SessionSource:
    """Return the session source selected by ``--sessions-dir``/``--database``."""

    if args.database is not None:
        return SqliteSessionSource(args.database, created_by=args.created_by)
    return JsonSessionSource(args.sessions_dir)


def load_sessions(
    source: SessionSource, args: argparse.Namespace
) -> Optional[List[Session]]:
    """Load the sessions requested on the command line.

    Returns ``None`` (after logging the reason) when loading fails or no
    sessions are available, so callers never analyse partial data.
    """

    session_ids: Optional[Sequence[str]] = args.sessions or None
    try:
        sessions = source.load_sessions(
            session_ids, show_progress=not args.no_progress
        )
    except (SessionLoadError, SessionFormatError) as err:
        LOGGER.error("Failed to load sessions: %s", err)
        return None
    if not sessions:
        LOGGER.error("No sessions to analyse.")
        return None
    return sessions


def cmd_matrix(
    args: argparse.Namespace, sessions: Sequence[Session], config: AnalysisConfig
) -> None:
    matrix = compute_agreement_matrix(sessions, config)
    if args.order == "dendrogram":
        matrix = order_titles_by_dendrogram(matrix, build_dendrogram(sessions))
    write_matrix_csv(args.output, matrix)
    if args.pairs is not None:
        rows = [
            {**record, PAIR_AGREEMENT: format_rate3(record[PAIR_AGREEMENT])}
            for record in matrix.pairs()
        ]
        write_rows_with_fieldnames(
            args.pairs, PAIR_FIELDNAMES, rows, description="agreement pairs"
        )
    if args.plot is not None:
        render_similarity_heatmap(matrix, args.plot)


def cmd_dendrogram(args: argparse.Namespace, sessions: Sequence[Session]) -> None:
    root = build_dendrogram(sessions)
    write_json(
        args.output,
        root.to_dict() if root is not None else None,
        description="dendrogram",
    )
    if args.plot is not None:
        render_dendrogram(root, args.plot)


def cmd_graph(
    args: argparse.Namespace, sessions: Sequence[Session], config: AnalysisConfig
) -> None:
    graph = filter_links(build_cluster_graph(sessions), config.graph_threshold)
    LOGGER.info(
        "Cluster graph: %d nodes, %d links at threshold %.2f",
        len(graph.nodes),
        len(graph.links),
        graph.threshold,
    )
    write_json(args.output, graph.to_dict(), description="cluster graph")
    if args.plot is not None:
        render_cluster_graph(graph, args.plot)


def cmd_summary(
    args: argparse.Namespace, sessions: Sequence[Session], config: AnalysisConfig
) -> None:
    matrix = compute_agreement_matrix(sessions, config)
    unsorted = sum(len(session.unsorted_cards) for session in sessions)
    print(f"Sessions: {len(sessions)}")
    print(f"Distinct cards: {len(collect_card_titles(sessions))}")
    print(f"Unsorted placements: {unsorted}")
    top = matrix.top_pairs(args.top)
    if not top:
        print("No card pairs to compare.")
        return
    print("Top agreeing pairs:")
    for record in top:
        print(
            f"  {format_rate3(record[PAIR_AGREEMENT])}  "
            f"{record[PAIR_CARD_A]} / {record[PAIR_CARD_B]}"
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI dispatcher.

    Parses arguments, loads sessions and runs the requested subcommand.
    Returns the process exit status.
    """

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.created_by is not None and args.database is None:
        parser.error("--created-by requires --database")
    if getattr(args, "top", 1) <= 0:
        parser.error("--top must be a positive integer")

    _configure_logging(args.verbose)
    config = AnalysisConfig.from_args(args)

    sessions = load_sessions(make_session_source(args), args)
    if sessions is None:
        return 1

    if args.cmd == "matrix":
        cmd_matrix(args, sessions, config)
    elif args.cmd == "dendrogram":
        cmd_dendrogram(args, sessions)
    elif args.cmd == "graph":
        cmd_graph(args, sessions, config)
    elif args.cmd == "summary":
        cmd_summary(args, sessions, config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
