"""JSON export utilities."""

from __future__ import annotations

import json
import math
from dataclasses import asdict
from pathlib import Path
from typing import Any

from cushionstats.analysis.aggregate import ResultAggregator
from cushionstats.analysis.pipeline import AnalysisReport


def _clean(value: Any) -> Any:
    # JSON has no NaN/inf
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(v) for v in value]
    return value


def report_to_dict(report: AnalysisReport) -> dict[str, Any]:
    """Plain-data view of a report: config, comparison, summary and density rows."""

    payload = {
        "config": asdict(report.config),
        "groups": len(report.outcomes),
        "failed_groups": [str(key) for key in report.failed_keys],
        "comparison": report.comparison,
        "summary": report.summary_rows,
        "density": ResultAggregator().density_table(report.densities),
    }
    return _clean(payload)


def export_report_json(
    report: AnalysisReport,
    path: str | Path,
    *,
    indent: int = 2,
) -> Path:
    """Serialize the report to JSON for downstream tooling."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report_to_dict(report), indent=indent), encoding="utf-8")
    return path
