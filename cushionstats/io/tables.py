"""CSV readers for the geometry, foam spec and measurement tables."""

from __future__ import annotations

import csv
import logging
import math
import re
from pathlib import Path

from pydantic import ValidationError

from cushionstats.core.entities import CushionGeometry, FoamSpec
from cushionstats.exceptions import ConfigurationError, InvalidGeometry, SchemaError
from cushionstats.io.schemas import FoamSpecRow, GeometryRow

logger = logging.getLogger(__name__)

_MISSING = {"", "na", "nan", "n/a", "null"}


def parse_cell(raw: str | None) -> float | str | None:
    """Blank and NA-like cells become None, numbers become floats."""
    if raw is None:
        return None
    text = raw.strip()
    if text.lower() in _MISSING:
        return None
    try:
        value = float(text)
    except ValueError:
        return text
    return None if math.isnan(value) else value


def read_table(path: str | Path) -> list[dict[str, object]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None:
            raise SchemaError(f"Table {path} has no header row")
        return [
            {
                column.strip(): parse_cell(cell)
                for column, cell in row.items()
                if column is not None
            }
            for row in reader
        ]


def load_measurement_tables(directory: str | Path) -> dict[str, list[dict[str, object]]]:
    """Read every ``*.csv`` in ``directory``; the file stem names the variable."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Measurement directory not found: {directory}")
    tables = {path.stem: read_table(path) for path in sorted(directory.glob("*.csv"))}
    if not tables:
        raise SchemaError(f"No measurement tables (*.csv) found in {directory}")
    logger.info(
        "IO: loaded %s measurement table(s) from %s",
        len(tables),
        directory,
        extra={"variables": sorted(tables)},
    )
    return tables


def load_geometries(
    path: str | Path, *, thickness_prefix: str = "T"
) -> list[CushionGeometry]:
    """Read the cushion geometry table.

    Thickness probe columns are the ones named ``<prefix><digits>``
    (``T1``, ``T2``, ...), taken in numeric order.
    """
    probe_pattern = re.compile(rf"^{re.escape(thickness_prefix)}(\d+)$")
    geometries = []
    for line_no, row in enumerate(read_table(path), start=2):
        try:
            parsed = GeometryRow.model_validate(row)
        except ValidationError as exc:
            raise InvalidGeometry(f"{path}, line {line_no}: {exc}") from exc
        probes = sorted(
            (int(match.group(1)), value)
            for column, value in row.items()
            if (match := probe_pattern.match(column))
        )
        for _, value in probes:
            if value is not None and not isinstance(value, float):
                raise InvalidGeometry(
                    f"{path}, line {line_no}: thickness probe value {value!r} is not numeric"
                )
        geometries.append(
            CushionGeometry(
                cushion_id=parsed.cushion,
                foam=parsed.foam,
                length=parsed.length,
                width=parsed.width,
                vf_thickness=parsed.vf_thickness,
                sag_height=parsed.sag_height,
                sag_width=parsed.sag_width,
                mass=parsed.mass,
                thickness_probes=tuple(value for _, value in probes),
            )
        )
    logger.info("IO: loaded %s cushion geometry row(s) from %s", len(geometries), path)
    return geometries


def load_foam_spec(path: str | Path) -> FoamSpec:
    rows = []
    for line_no, row in enumerate(read_table(path), start=2):
        try:
            parsed = FoamSpecRow.model_validate(row)
        except ValidationError as exc:
            raise ConfigurationError(f"{path}, line {line_no}: {exc}") from exc
        rows.append((parsed.foam, parsed.min, parsed.max))
    return FoamSpec.from_rows(rows)


__all__ = [
    "parse_cell",
    "read_table",
    "load_measurement_tables",
    "load_geometries",
    "load_foam_spec",
]
