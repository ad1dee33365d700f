"""Lightweight helpers for writing agreement tables and JSON artefacts.

These utilities wrap common patterns for emitting analysis outputs, keeping
path handling, rounding and status messages consistent across commands.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping, Sequence

from sort_analysis.agreement import AgreementMatrix


def _prepare(output_path: Path) -> Path:
    resolved = output_path.expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def write_rows_with_fieldnames(
    output_path: Path,
    fieldnames: Sequence[str],
    rows: Sequence[Mapping[str, object]],
    *,
    description: str,
) -> None:
    """Write ``rows`` to ``output_path`` using the given ``fieldnames``.

    Parameters
    ----------
    output_path:
        Destination path for the CSV file.
    fieldnames:
        Ordered list of column names to include in the output.
    rows:
        Iterable of mapping objects providing row data.
    description:
        Human-readable description used in the final status message.
    """

    resolved = _prepare(output_path)
    with resolved.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            trimmed = {name: row.get(name, "") for name in fieldnames}
            writer.writerow(trimmed)

    print(f"Wrote {description} to {resolved}")


def write_matrix_csv(output_path: Path, matrix: AgreementMatrix) -> None:
    """Write ``matrix`` as a square CSV labelled by card title on both axes."""

    resolved = _prepare(output_path)
    frame = matrix.to_frame().round(3)
    frame.to_csv(resolved, index=True, index_label="card", encoding="utf-8")
    print(f"Wrote agreement matrix ({len(matrix)} cards) to {resolved}")


def write_json(output_path: Path, payload: object, *, description: str) -> None:
    """Write ``payload`` as indented UTF-8 JSON."""

    resolved = _prepare(output_path)
    resolved.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
    )
    print(f"Wrote {description} to {resolved}")


__all__ = ["write_json", "write_matrix_csv", "write_rows_with_fieldnames"]
