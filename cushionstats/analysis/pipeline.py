"""End-to-end orchestration of the foam equivalence analysis."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from cushionstats.analysis.aggregate import ResultAggregator
from cushionstats.analysis.density import DensityEstimator
from cushionstats.analysis.equivalence import EquivalenceTestEngine
from cushionstats.analysis.grouping import GroupIndex, GroupIndexer
from cushionstats.analysis.reshape import LongFormReshaper, Table
from cushionstats.analysis.summary import SummaryOutcome, SummaryStatsCalculator
from cushionstats.config.schema import AnalysisConfig
from cushionstats.core.entities import (
    DEFAULT_FOAM_SPEC,
    CushionGeometry,
    DensityEstimate,
    FoamSpec,
    GroupKey,
    GroupOutcome,
    Measurement,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Everything one analysis run produced."""

    config: AnalysisConfig
    measurements: list[Measurement]
    index: GroupIndex
    summaries: list[SummaryOutcome]
    outcomes: list[GroupOutcome]
    comparison: list[dict[str, object]]
    summary_rows: list[dict[str, object]]
    densities: dict[str, DensityEstimate] = field(default_factory=dict)

    @property
    def failed_keys(self) -> list[GroupKey]:
        return [o.key for o in self.outcomes if not o.ok]

    def summary(self) -> str:
        """Human-readable overview of the comparison table."""
        tested = [o.result for o in self.outcomes if o.result is not None]
        lines = [
            f"Groups: {len(self.outcomes)} ({len(tested)} tested, "
            f"{len(self.failed_keys)} failed)",
            f"Significantly different: {sum(r.is_significant_difference for r in tested)}",
            f"Significantly equivalent: {sum(r.is_equivalent for r in tested)}",
        ]
        if self.densities:
            out_of_spec = sorted(
                cid for cid, e in self.densities.items() if e.within_spec is False
            )
            lines.append(
                f"Density estimates: {len(self.densities)} cushion(s)"
                + (f", outside spec: {', '.join(out_of_spec)}" if out_of_spec else "")
            )
        lines.append("")
        for outcome in self.outcomes:
            if outcome.result is not None:
                r = outcome.result
                lines.append(
                    f"  {outcome.key}: {r.classification} "
                    f"(diff={r.difference:+.4g}, bound=±{r.equivalence_bound:.4g}, "
                    f"p={r.difference_p:.4f}, p_lower={r.eq_lower_p:.4f}, "
                    f"p_upper={r.eq_upper_p:.4f})"
                )
            elif outcome.failure is not None:
                lines.append(
                    f"  {outcome.key}: FAILED ({outcome.failure.kind}: {outcome.failure.message})"
                )
        return "\n".join(lines)


def analyze(
    measurement_tables: Mapping[str, Table] | Iterable[tuple[str, Table]],
    *,
    geometries: Iterable[CushionGeometry] | None = None,
    foam_spec: FoamSpec = DEFAULT_FOAM_SPEC,
    config: AnalysisConfig | None = None,
) -> AnalysisReport:
    """Run density estimation, reshaping, grouping, summaries and TOST.

    Density and reshaping errors abort the run. Equivalence failures are
    recorded per group and reported in the comparison table.
    """
    config = config or AnalysisConfig()
    logger.info(
        "Pipeline: starting analysis (ci=%s, alpha=%s, margin=%s of group mean)",
        config.confidence_level,
        config.alpha,
        config.equivalence_fraction,
        extra={
            "confidence_level": config.confidence_level,
            "alpha": config.alpha,
            "equivalence_fraction": config.equivalence_fraction,
        },
    )

    densities: dict[str, DensityEstimate] = {}
    if geometries is not None:
        densities = DensityEstimator(foam_spec).estimate_all(geometries)

    measurements = LongFormReshaper().to_long(measurement_tables)
    index = GroupIndexer().build(measurements)

    calculator = SummaryStatsCalculator(config.confidence_level)
    summaries = calculator.summarize_by_foam(index)

    engine = EquivalenceTestEngine(
        alpha=config.alpha,
        equivalence_fraction=config.equivalence_fraction,
        equal_var=config.equal_var,
        foams=config.foams,
        max_workers=config.max_workers,
    )
    outcomes = engine.run(index)

    aggregator = ResultAggregator()
    report = AnalysisReport(
        config=config,
        measurements=measurements,
        index=index,
        summaries=summaries,
        outcomes=outcomes,
        comparison=aggregator.comparison_table(outcomes),
        summary_rows=aggregator.summary_table(summaries),
        densities=densities,
    )
    logger.info(
        "Pipeline: finished with %s group(s), %s failed",
        len(outcomes),
        len(report.failed_keys),
    )
    return report


__all__ = ["AnalysisReport", "analyze"]
