"""Input adapters for tabular data files."""

from __future__ import annotations

from .tables import (
    load_foam_spec,
    load_geometries,
    load_measurement_tables,
    parse_cell,
    read_table,
)

__all__ = [
    "parse_cell",
    "read_table",
    "load_measurement_tables",
    "load_geometries",
    "load_foam_spec",
]
