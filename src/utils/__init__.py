"""Utility helper package for shared CLI and schema helpers.

Submodules
----------
cli
    Shared argparse configuration helpers for the analysis commands.
schema
    Field names for session payloads, database tables and output files.
"""

from __future__ import annotations

__all__ = [
    "cli",
    "schema",
]
