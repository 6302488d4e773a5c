"""Utilities for exporting analysis results to CSV and JSON."""

from cushionstats.export.csv import (
    export_comparison_csv,
    export_density_csv,
    export_summary_csv,
    write_rows_csv,
)
from cushionstats.export.json import export_report_json, report_to_dict

__all__ = [
    "write_rows_csv",
    "export_comparison_csv",
    "export_summary_csv",
    "export_density_csv",
    "export_report_json",
    "report_to_dict",
]
