"""Two one-sided tests (TOST) for equivalence of two foam types.

For each (variable, level) group the two foam subgroups are treated as
independent, unpaired samples. Three t-tests are run on the difference
``mean_a - mean_b``:

1. two-sided, H0: difference == 0                  -> ``difference_p``
2. one-sided, H0: difference <= -bound             -> ``eq_lower_p``
3. one-sided, H0: difference >= +bound             -> ``eq_upper_p``

Equivalence is declared only when both one-sided tests reject. A group can
be significantly different and equivalent at the same time, or neither.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from statistics import fmean

from scipy import stats

from cushionstats.analysis.grouping import GroupIndex
from cushionstats.analysis.summary import SampleStatistics, SummaryStatsCalculator
from cushionstats.core.entities import (
    EquivalenceResult,
    Group,
    GroupFailure,
    GroupOutcome,
)
from cushionstats.exceptions import (
    ConfigurationError,
    CushionStatsError,
    InsufficientData,
    InsufficientSample,
    SchemaConflict,
)

logger = logging.getLogger(__name__)

DEFAULT_EQUIVALENCE_FRACTION = 1 / 20


def welch_df(a: SampleStatistics, b: SampleStatistics) -> float:
    """Welch-Satterthwaite degrees of freedom."""
    va = a.sd**2 / a.n
    vb = b.sd**2 / b.n
    return (va + vb) ** 2 / (va**2 / (a.n - 1) + vb**2 / (b.n - 1))


def pooled_df(a: SampleStatistics, b: SampleStatistics) -> float:
    return float(a.n + b.n - 2)


def _standard_error(a: SampleStatistics, b: SampleStatistics, equal_var: bool) -> float:
    if equal_var:
        pooled_var = ((a.n - 1) * a.sd**2 + (b.n - 1) * b.sd**2) / (a.n + b.n - 2)
        return math.sqrt(pooled_var * (1 / a.n + 1 / b.n))
    return math.sqrt(a.sd**2 / a.n + b.sd**2 / b.n)


class EquivalenceTestEngine:
    """Run a TOST per group and classify the result.

    Args:
        alpha: Significance level shared by all three tests.
        equivalence_fraction: Equivalence bound as a fraction of the pooled
            group mean (default 1/20, i.e. +/-5%).
        equal_var: Use the pooled-variance t-test instead of Welch's.
        foams: Explicit ``(foam_a, foam_b)`` order; otherwise the two foam
            labels of each group are used in sorted order.
        max_workers: Groups are independent; values above 1 test them on a
            thread pool.
    """

    def __init__(
        self,
        *,
        alpha: float = 0.05,
        equivalence_fraction: float = DEFAULT_EQUIVALENCE_FRACTION,
        equal_var: bool = False,
        foams: Sequence[str] | None = None,
        max_workers: int = 1,
    ) -> None:
        if not 0 < alpha < 0.5:
            raise ConfigurationError(f"alpha must be in (0, 0.5), got {alpha}")
        if equivalence_fraction <= 0:
            raise ConfigurationError(
                f"equivalence_fraction must be > 0, got {equivalence_fraction}"
            )
        if foams is not None and (len(foams) != 2 or foams[0] == foams[1]):
            raise ConfigurationError(
                f"foams must name two different foam types, got {list(foams)}"
            )
        if max_workers < 1:
            raise ConfigurationError("max_workers must be >= 1")
        self.alpha = alpha
        self.equivalence_fraction = equivalence_fraction
        self.equal_var = equal_var
        self.foams = tuple(foams) if foams is not None else None
        self.max_workers = max_workers
        self._calculator = SummaryStatsCalculator()

    def equivalence_bound(self, group: Group) -> float:
        return abs(fmean(group.values)) * self.equivalence_fraction

    def _foam_pair(self, group: Group) -> tuple[str, str]:
        if self.foams is not None:
            return self.foams[0], self.foams[1]
        foams = group.foams
        if len(foams) < 2:
            raise InsufficientSample(
                f"Group {group.key} has only foam type(s) {list(foams)}; two are needed"
            )
        if len(foams) > 2:
            raise SchemaConflict(
                f"Group {group.key} has {len(foams)} foam types {list(foams)}; "
                "configure the pair to compare"
            )
        return foams[0], foams[1]

    def _describe(self, group: Group, foam: str) -> SampleStatistics:
        values = group.by_foam(foam)
        try:
            return self._calculator.describe(values)
        except InsufficientSample:
            raise InsufficientSample(
                f"Group {group.key}: foam {foam} has {len(values)} observation(s); "
                "at least 2 are needed"
            ) from None

    def test_group(self, group: Group) -> EquivalenceResult:
        """Run the TOST for one group.

        Raises:
            InsufficientSample: If either foam subgroup has fewer than two values.
            InsufficientData: If both subgroups have zero variance.
            SchemaConflict: If the foam pair is ambiguous.
        """
        foam_a, foam_b = self._foam_pair(group)
        a = self._describe(group, foam_a)
        b = self._describe(group, foam_b)
        if a.sd == 0 and b.sd == 0:
            raise InsufficientData(
                f"Group {group.key}: both foam subgroups have zero variance"
            )

        values_a = group.by_foam(foam_a)
        values_b = group.by_foam(foam_b)
        bound = self.equivalence_bound(group)

        two_sided = stats.ttest_ind(
            values_a, values_b, equal_var=self.equal_var, alternative="two-sided"
        )
        lower = stats.ttest_ind(
            [v + bound for v in values_a],
            values_b,
            equal_var=self.equal_var,
            alternative="greater",
        )
        upper = stats.ttest_ind(
            [v - bound for v in values_a],
            values_b,
            equal_var=self.equal_var,
            alternative="less",
        )

        difference = a.mean - b.mean
        df = pooled_df(a, b) if self.equal_var else welch_df(a, b)
        margin = float(stats.t.ppf(1 - self.alpha, df)) * _standard_error(
            a, b, self.equal_var
        )
        difference_p = float(two_sided.pvalue)
        eq_lower_p = float(lower.pvalue)
        eq_upper_p = float(upper.pvalue)

        return EquivalenceResult(
            variable=group.variable,
            level=group.level,
            foam_a=foam_a,
            foam_b=foam_b,
            n_a=a.n,
            n_b=b.n,
            mean_a=a.mean,
            mean_b=b.mean,
            difference=difference,
            equivalence_bound=bound,
            t_statistic=float(two_sided.statistic),
            df=df,
            difference_p=difference_p,
            eq_lower_p=eq_lower_p,
            eq_upper_p=eq_upper_p,
            is_significant_difference=difference_p < self.alpha,
            is_equivalent=eq_lower_p < self.alpha and eq_upper_p < self.alpha,
            ci_lower=difference - margin,
            ci_upper=difference + margin,
            alpha=self.alpha,
        )

    def _outcome(self, group: Group) -> GroupOutcome:
        try:
            result = self.test_group(group)
        except CushionStatsError as exc:
            logger.warning(
                "Equivalence: group %s not tested (%s: %s)",
                group.key,
                type(exc).__name__,
                exc,
                extra={"variable": group.variable, "level": group.level},
            )
            return GroupOutcome(key=group.key, failure=GroupFailure.from_exception(exc))
        logger.debug(
            "Equivalence: %s -> %s (p_diff=%.4g, p_lower=%.4g, p_upper=%.4g)",
            group.key,
            result.classification,
            result.difference_p,
            result.eq_lower_p,
            result.eq_upper_p,
        )
        return GroupOutcome(key=group.key, result=result)

    def run(self, index: GroupIndex) -> list[GroupOutcome]:
        """Test every group; one failing group never aborts the others."""
        groups = list(index)
        if self.max_workers <= 1 or len(groups) <= 1:
            outcomes = [self._outcome(group) for group in groups]
        else:
            logger.info(
                "Equivalence: testing %s group(s) on %s workers",
                len(groups),
                self.max_workers,
                extra={"workers": self.max_workers},
            )
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(self._outcome, groups))

        outcomes.sort(key=lambda outcome: outcome.key)
        failed = [str(o.key) for o in outcomes if not o.ok]
        logger.info(
            "Equivalence: %s group(s) tested, %s failed",
            len(outcomes) - len(failed),
            len(failed),
            extra={"failed_groups": failed},
        )
        return outcomes


__all__ = [
    "DEFAULT_EQUIVALENCE_FRACTION",
    "EquivalenceTestEngine",
    "welch_df",
    "pooled_df",
]
