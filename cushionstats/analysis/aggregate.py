"""Assemble per-group outputs into plain tabular rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from cushionstats.analysis.summary import SummaryOutcome
from cushionstats.core.entities import (
    DENSITY_BOUNDS,
    DensityEstimate,
    DensityPoint,
    GroupOutcome,
    Measurement,
)
from cushionstats.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_FAILED = "failed"

COMPARISON_COLUMNS = (
    "variable",
    "level",
    "difference_p",
    "eq_lower_p",
    "eq_upper_p",
    "is_significant_difference",
    "is_equivalent",
    "status",
    "error",
    "foam_a",
    "foam_b",
    "n_a",
    "n_b",
    "mean_a",
    "mean_b",
    "difference",
    "equivalence_bound",
    "ci_lower",
    "ci_upper",
)

SUMMARY_COLUMNS = (
    "variable",
    "level",
    "foam",
    "n",
    "mean",
    "median",
    "sd",
    "se",
    "ci_lower",
    "ci_upper",
    "status",
    "error",
)


class ResultAggregator:
    """Build the comparison and summary tables and the density diagnostic."""

    def comparison_table(self, outcomes: Iterable[GroupOutcome]) -> list[dict[str, object]]:
        """One row per (variable, level), sorted, failed groups included."""
        rows = []
        for outcome in sorted(outcomes, key=lambda o: o.key):
            row: dict[str, object] = dict.fromkeys(COMPARISON_COLUMNS)
            row["variable"] = outcome.key.variable
            row["level"] = outcome.key.level
            if outcome.result is not None:
                result = outcome.result
                row.update(
                    difference_p=result.difference_p,
                    eq_lower_p=result.eq_lower_p,
                    eq_upper_p=result.eq_upper_p,
                    is_significant_difference=result.is_significant_difference,
                    is_equivalent=result.is_equivalent,
                    status=STATUS_OK,
                    error="",
                    foam_a=result.foam_a,
                    foam_b=result.foam_b,
                    n_a=result.n_a,
                    n_b=result.n_b,
                    mean_a=result.mean_a,
                    mean_b=result.mean_b,
                    difference=result.difference,
                    equivalence_bound=result.equivalence_bound,
                    ci_lower=result.ci_lower,
                    ci_upper=result.ci_upper,
                )
            else:
                failure = outcome.failure
                row.update(
                    is_significant_difference=False,
                    is_equivalent=False,
                    status=STATUS_FAILED,
                    error=f"{failure.kind}: {failure.message}" if failure else "",
                )
            rows.append(row)
        return rows

    def summary_table(self, outcomes: Iterable[SummaryOutcome]) -> list[dict[str, object]]:
        rows = []
        for outcome in sorted(
            outcomes, key=lambda o: (o.variable, o.level, o.foam or "")
        ):
            row: dict[str, object] = dict.fromkeys(SUMMARY_COLUMNS)
            row.update(
                variable=outcome.variable,
                level=outcome.level,
                foam=outcome.foam,
                n=outcome.n,
            )
            if outcome.stat is not None:
                stat = outcome.stat
                row.update(
                    mean=stat.mean,
                    median=stat.median,
                    sd=stat.sd,
                    se=stat.se,
                    ci_lower=stat.ci_lower,
                    ci_upper=stat.ci_upper,
                    status=STATUS_OK,
                    error="",
                )
            else:
                failure = outcome.failure
                row.update(
                    status=STATUS_FAILED,
                    error=f"{failure.kind}: {failure.message}" if failure else "",
                )
            rows.append(row)
        return rows

    def density_table(self, estimates: Mapping[str, DensityEstimate]) -> list[dict[str, object]]:
        rows = []
        for cushion_id in sorted(estimates):
            e = estimates[cushion_id]
            rows.append(
                {
                    "cushion": e.cushion_id,
                    "foam": e.foam,
                    "mean_thickness": e.mean_thickness,
                    "overlay_volume": e.overlay_volume,
                    "cutout_volume": e.cutout_volume,
                    "structural_volume": e.structural_volume,
                    "overlay_mass_min": e.overlay_mass_min,
                    "overlay_mass_max": e.overlay_mass_max,
                    "structural_mass_min": e.structural_mass_min,
                    "structural_mass_max": e.structural_mass_max,
                    "structural_density_min": e.structural_density_min,
                    "structural_density_max": e.structural_density_max,
                    "within_spec": e.within_spec,
                }
            )
        return rows

    def density_join(
        self,
        measurements: Iterable[Measurement],
        estimates: Mapping[str, DensityEstimate],
        *,
        variable: str,
        foam: str,
        bound: str = "structural_density_max",
    ) -> list[DensityPoint]:
        """Pair matching measurements with their cushion's density bound.

        Left join on cushion id: cushions without an estimate keep a ``None``
        density. Nothing is excluded; the view is for manual outlier review.
        """
        if bound not in DENSITY_BOUNDS:
            raise ConfigurationError(
                f"Unknown density bound '{bound}'; expected one of {DENSITY_BOUNDS}"
            )
        points = []
        unmatched: set[str] = set()
        for m in measurements:
            if m.variable != variable or m.foam != foam:
                continue
            estimate = estimates.get(m.cushion_id)
            if estimate is None:
                unmatched.add(m.cushion_id)
            points.append(
                DensityPoint(
                    cushion_id=m.cushion_id,
                    foam=m.foam,
                    level=m.level,
                    value=m.value,
                    density_bound=estimate.density_bound(bound) if estimate else None,
                )
            )
        if unmatched:
            logger.warning(
                "Aggregate: no density estimate for cushion(s) %s",
                ", ".join(sorted(unmatched)),
                extra={"unmatched": sorted(unmatched)},
            )
        points.sort(key=lambda p: (p.level, p.cushion_id))
        return points


__all__ = [
    "ResultAggregator",
    "COMPARISON_COLUMNS",
    "SUMMARY_COLUMNS",
    "STATUS_OK",
    "STATUS_FAILED",
]
