"""Foam equivalence analysis stages.

Stages run leaf-first: density estimation, wide-to-long reshaping, grouping
by (variable, level), summary statistics, TOST equivalence testing and
result aggregation. ``analyze`` wires them together.
"""

from __future__ import annotations

from .aggregate import ResultAggregator
from .density import DensityEstimator
from .equivalence import EquivalenceTestEngine
from .grouping import GroupIndex, GroupIndexer
from .pipeline import AnalysisReport, analyze
from .reshape import LongFormReshaper
from .summary import SummaryOutcome, SummaryStatsCalculator

__all__ = [
    "DensityEstimator",
    "LongFormReshaper",
    "GroupIndex",
    "GroupIndexer",
    "SummaryOutcome",
    "SummaryStatsCalculator",
    "EquivalenceTestEngine",
    "ResultAggregator",
    "AnalysisReport",
    "analyze",
]
