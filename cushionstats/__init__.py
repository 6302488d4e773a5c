"""cushionstats - equivalence analysis of foam cushion test data.

The primary interface is the `analyze()` function:

    import cushionstats
    report = cushionstats.analyze({"hysteresis": rows}, geometries=cushions)
    print(report.summary())

Each (variable, load level) group is compared across the two foam grades
with a Welch two-one-sided-test (TOST); the structural foam density of each
cushion is estimated as an interval from its geometry and mass.
"""

from cushionstats._version import __version__
from cushionstats.analysis import (
    AnalysisReport,
    DensityEstimator,
    EquivalenceTestEngine,
    GroupIndexer,
    LongFormReshaper,
    ResultAggregator,
    SummaryStatsCalculator,
    analyze,
)
from cushionstats.config import AnalysisConfig
from cushionstats.core.entities import DEFAULT_FOAM_SPEC, CushionGeometry, FoamSpec
from cushionstats.exceptions import (
    ConfigurationError,
    CushionStatsError,
    EmptyGroup,
    InsufficientData,
    InsufficientSample,
    InvalidGeometry,
    SchemaConflict,
    SchemaError,
)

__all__ = [
    # Main API
    "analyze",
    "AnalysisReport",
    "AnalysisConfig",
    # Stages
    "DensityEstimator",
    "LongFormReshaper",
    "GroupIndexer",
    "SummaryStatsCalculator",
    "EquivalenceTestEngine",
    "ResultAggregator",
    # Data model
    "CushionGeometry",
    "FoamSpec",
    "DEFAULT_FOAM_SPEC",
    # Exceptions
    "CushionStatsError",
    "ConfigurationError",
    "SchemaError",
    "SchemaConflict",
    "InsufficientData",
    "InsufficientSample",
    "InvalidGeometry",
    "EmptyGroup",
    # Version
    "__version__",
]
