"""CSV export utilities."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path

from cushionstats.analysis.aggregate import COMPARISON_COLUMNS, SUMMARY_COLUMNS


def write_rows_csv(
    rows: Sequence[dict[str, object]],
    path: str | Path,
    *,
    fieldnames: Sequence[str] | None = None,
) -> Path:
    """Write plain row dicts to CSV; ``None`` becomes an empty cell."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fieldnames is None:
        fieldnames = list(rows[0]) if rows else []
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(fieldnames))
        writer.writeheader()
        for row in rows:
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
    return path


def export_comparison_csv(rows: Sequence[dict[str, object]], path: str | Path) -> Path:
    return write_rows_csv(rows, path, fieldnames=COMPARISON_COLUMNS)


def export_summary_csv(rows: Sequence[dict[str, object]], path: str | Path) -> Path:
    return write_rows_csv(rows, path, fieldnames=SUMMARY_COLUMNS)


def export_density_csv(rows: Sequence[dict[str, object]], path: str | Path) -> Path:
    return write_rows_csv(rows, path)
