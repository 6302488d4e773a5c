"""Wide-to-long reshaping of per-variable measurement tables.

Each input table holds one measured variable: identifying columns
(``cushion`` and ``foam`` by default) plus one numeric column per load level.
``LongFormReshaper.to_long`` unpivots every numeric column into
``Measurement`` records; ``widen`` is the inverse.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from numbers import Real

from cushionstats.core.entities import Measurement
from cushionstats.exceptions import SchemaConflict, SchemaError

logger = logging.getLogger(__name__)

Row = Mapping[str, object]
Table = Sequence[Row]


def _is_missing(cell: object) -> bool:
    return cell is None or (isinstance(cell, float) and math.isnan(cell))


def _is_number(cell: object) -> bool:
    return isinstance(cell, Real) and not isinstance(cell, bool)


class LongFormReshaper:
    """Normalise named wide tables into one collection of measurements."""

    def __init__(
        self,
        *,
        cushion_column: str = "cushion",
        foam_column: str = "foam",
    ) -> None:
        self.cushion_column = cushion_column
        self.foam_column = foam_column

    @property
    def id_columns(self) -> tuple[str, str]:
        return (self.cushion_column, self.foam_column)

    def to_long(
        self, tables: Mapping[str, Table] | Iterable[tuple[str, Table]]
    ) -> list[Measurement]:
        """Unpivot every table and concatenate the results.

        Raises:
            SchemaConflict: If two tables map to the same variable name.
            SchemaError: If a table lacks an identifying column.
        """
        items = tables.items() if isinstance(tables, Mapping) else tables
        seen: set[str] = set()
        measurements: list[Measurement] = []
        for raw_name, rows in items:
            variable = str(raw_name).strip()
            if not variable:
                raise SchemaError("Measurement table names must be non-empty")
            if variable in seen:
                raise SchemaConflict(
                    f"Variable '{variable}' is provided by more than one table"
                )
            seen.add(variable)
            table_measurements = self._unpivot(variable, rows)
            logger.debug(
                "Reshape: %s -> %s measurement(s)",
                variable,
                len(table_measurements),
                extra={"variable": variable, "measurements": len(table_measurements)},
            )
            measurements.extend(table_measurements)

        logger.info(
            "Reshape: %s table(s) produced %s measurement(s)",
            len(seen),
            len(measurements),
        )
        return measurements

    def _unpivot(self, variable: str, rows: Table) -> list[Measurement]:
        columns: list[str] = []
        for row in rows:
            for column in row:
                if column not in columns:
                    columns.append(column)

        missing = [c for c in self.id_columns if rows and c not in columns]
        if missing:
            raise SchemaError(
                f"Table '{variable}' is missing identifying column(s): {', '.join(missing)}"
            )

        level_columns: list[str] = []
        for column in columns:
            if column in self.id_columns:
                continue
            cells = [row.get(column) for row in rows]
            present = [cell for cell in cells if not _is_missing(cell)]
            if present and all(_is_number(cell) for cell in present):
                level_columns.append(column)
            else:
                logger.debug(
                    "Reshape: %s column '%s' is not numeric; carried, not unpivoted",
                    variable,
                    column,
                )

        measurements = []
        for row in rows:
            cushion = row.get(self.cushion_column)
            foam = row.get(self.foam_column)
            if _is_missing(cushion) or _is_missing(foam):
                raise SchemaError(
                    f"Table '{variable}' has a row without {self.cushion_column}/{self.foam_column}"
                )
            for level in level_columns:
                cell = row.get(level)
                if _is_missing(cell):
                    continue
                measurements.append(
                    Measurement(
                        variable=variable,
                        cushion_id=_as_label(cushion),
                        foam=_as_label(foam),
                        level=str(level),
                        value=float(cell),
                    )
                )
        return measurements

    def widen(self, measurements: Iterable[Measurement]) -> dict[str, list[dict[str, object]]]:
        """Rebuild one wide table per variable, one row per (cushion, foam)."""
        tables: dict[str, dict[tuple[str, str], dict[str, object]]] = {}
        for m in measurements:
            rows = tables.setdefault(m.variable, {})
            row = rows.setdefault(
                (m.cushion_id, m.foam),
                {self.cushion_column: m.cushion_id, self.foam_column: m.foam},
            )
            if m.level in row:
                raise SchemaConflict(
                    f"Duplicate measurement for {m.variable}/{m.level} on cushion {m.cushion_id}"
                )
            row[m.level] = m.value
        return {variable: list(rows.values()) for variable, rows in tables.items()}


def _as_label(cell: object) -> str:
    # Spreadsheet ids such as 12 come back as 12.0
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()


__all__ = ["LongFormReshaper", "Row", "Table"]
