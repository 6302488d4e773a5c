"""Descriptive statistics with Student-t confidence intervals."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from statistics import mean, median, stdev

from scipy import stats

from cushionstats.analysis.grouping import GroupIndex
from cushionstats.core.entities import Group, GroupFailure, SummaryStat
from cushionstats.exceptions import ConfigurationError, InsufficientSample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleStatistics:
    n: int
    mean: float
    median: float
    sd: float
    se: float
    ci_lower: float
    ci_upper: float


@dataclass(frozen=True)
class SummaryOutcome:
    """Summary row for one (variable, level, foam) cell, or why it failed."""

    variable: str
    level: str
    foam: str | None
    n: int
    stat: SummaryStat | None = None
    failure: GroupFailure | None = None

    @property
    def ok(self) -> bool:
        return self.stat is not None


def t_critical_value(df: float, confidence_level: float) -> float:
    """Two-sided Student-t quantile for the given confidence level."""
    return float(stats.t.ppf((confidence_level + 1) / 2, df))


class SummaryStatsCalculator:
    """Mean, median, sd, se and a t-based CI for a numeric sample."""

    def __init__(self, confidence_level: float = 0.95) -> None:
        if not 0 < confidence_level < 1:
            raise ConfigurationError(
                f"confidence_level must be in (0, 1), got {confidence_level}"
            )
        self.confidence_level = confidence_level

    def describe(self, values: Sequence[float]) -> SampleStatistics:
        """Summarise a sample of at least two values.

        Raises:
            InsufficientSample: If fewer than two values are given.
        """
        n = len(values)
        if n < 2:
            raise InsufficientSample(
                f"Need at least 2 observations for a standard deviation, got {n}"
            )
        avg = mean(values)
        sd = stdev(values, xbar=avg)
        se = sd / math.sqrt(n)
        margin = t_critical_value(n - 1, self.confidence_level) * se
        return SampleStatistics(
            n=n,
            mean=avg,
            median=median(values),
            sd=sd,
            se=se,
            ci_lower=avg - margin,
            ci_upper=avg + margin,
        )

    def summarize(
        self,
        values: Sequence[float],
        *,
        variable: str,
        level: str,
        foam: str | None = None,
    ) -> SummaryStat:
        sample = self.describe(values)
        return SummaryStat(
            variable=variable,
            level=level,
            foam=foam,
            n=sample.n,
            mean=sample.mean,
            median=sample.median,
            sd=sample.sd,
            se=sample.se,
            ci_lower=sample.ci_lower,
            ci_upper=sample.ci_upper,
            confidence_level=self.confidence_level,
        )

    def summarize_group(self, group: Group) -> SummaryStat:
        """Pooled statistics over every foam in the group."""
        return self.summarize(group.values, variable=group.variable, level=group.level)

    def summarize_by_foam(self, index: GroupIndex) -> list[SummaryOutcome]:
        """Per (variable, level, foam) statistics; undersized cells are marked, not dropped."""
        outcomes: list[SummaryOutcome] = []
        for key, foam, values in index.foam_partitions():
            try:
                stat = self.summarize(
                    values, variable=key.variable, level=key.level, foam=foam
                )
            except InsufficientSample as exc:
                logger.warning(
                    "Summary: %s foam %s skipped (%s)",
                    key,
                    foam,
                    exc,
                    extra={"variable": key.variable, "level": key.level, "foam": foam},
                )
                outcomes.append(
                    SummaryOutcome(
                        variable=key.variable,
                        level=key.level,
                        foam=foam,
                        n=len(values),
                        failure=GroupFailure.from_exception(exc),
                    )
                )
                continue
            outcomes.append(
                SummaryOutcome(
                    variable=key.variable,
                    level=key.level,
                    foam=foam,
                    n=stat.n,
                    stat=stat,
                )
            )
        return outcomes


__all__ = [
    "SampleStatistics",
    "SummaryOutcome",
    "SummaryStatsCalculator",
    "t_critical_value",
]
