"""cushionstats exception hierarchy.

All cushionstats-specific exceptions inherit from CushionStatsError, allowing
callers to catch any analysis error with a single except clause:

    try:
        report = cushionstats.analyze(tables)
    except cushionstats.CushionStatsError as e:
        handle_gracefully(e)

Each domain exception also inherits from its stdlib counterpart so
existing ``except ValueError:`` / ``except KeyError:`` handlers
continue to work.
"""

from __future__ import annotations


class CushionStatsError(Exception):
    """Base exception for all cushionstats errors."""


class ConfigurationError(CushionStatsError, ValueError):
    """Invalid configuration, parameters, or reference tables."""


class SchemaError(CushionStatsError, ValueError):
    """Input table does not have the expected columns."""


class SchemaConflict(SchemaError):
    """Two input tables (or rows) claim the same identity."""


class InsufficientData(CushionStatsError, ValueError):
    """Not enough data points to compute a quantity."""


class InsufficientSample(InsufficientData):
    """A sample (or foam subgroup) has fewer than two observations."""


class InvalidGeometry(CushionStatsError, ValueError):
    """Cushion geometry is negative, or yields a non-positive volume."""


class EmptyGroup(CushionStatsError, KeyError):
    """A requested (variable, level) group holds no measurements."""


class DependencyError(CushionStatsError, ImportError):
    """Missing optional dependency."""


__all__ = [
    "CushionStatsError",
    "ConfigurationError",
    "SchemaError",
    "SchemaConflict",
    "InsufficientData",
    "InsufficientSample",
    "InvalidGeometry",
    "EmptyGroup",
    "DependencyError",
]
