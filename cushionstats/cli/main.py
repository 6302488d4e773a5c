"""Cyclopts-powered CLI entrypoints for cushionstats."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Sequence

from cyclopts import App, Parameter

from cushionstats.analysis.aggregate import ResultAggregator
from cushionstats.analysis.density import DensityEstimator
from cushionstats.config import load_run_config, schema
from cushionstats.config.runtime import anomaly_points, run_analysis_from_config
from cushionstats.core.entities import DEFAULT_FOAM_SPEC
from cushionstats.exceptions import CushionStatsError
from cushionstats.io import load_foam_spec, load_geometries
from cushionstats.utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)

app = App(help="Foam cushion equivalence analysis (density estimates, summaries, TOST)")


def _format_p(value: object) -> str:
    return f"{value:.4f}" if isinstance(value, float) else "-"


def _print_comparison(rows: list[dict[str, object]]) -> None:
    header = f"{'variable':<16} {'level':<10} {'p_diff':>8} {'p_lower':>8} {'p_upper':>8}  result"
    print(header)
    print("-" * len(header))
    for row in rows:
        if row["status"] == "ok":
            flags = []
            if row["is_significant_difference"]:
                flags.append("different")
            if row["is_equivalent"]:
                flags.append("equivalent")
            verdict = " & ".join(flags) or "inconclusive"
        else:
            verdict = f"FAILED: {row['error']}"
        print(
            f"{row['variable']!s:<16} {row['level']!s:<10} "
            f"{_format_p(row['difference_p']):>8} {_format_p(row['eq_lower_p']):>8} "
            f"{_format_p(row['eq_upper_p']):>8}  {verdict}"
        )


def _execute(config: schema.RunConfig, *, show_anomalies: bool) -> int:
    try:
        report = run_analysis_from_config(config)
    except (CushionStatsError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        logger.debug("Analysis failed", exc_info=True)
        return 1

    print(report.summary())
    print()
    _print_comparison(report.comparison)

    if show_anomalies and config.anomaly.enable and report.densities:
        print()
        print(
            f"Density check: {config.anomaly.variable} ({config.anomaly.foam}) "
            f"vs {config.anomaly.bound}"
        )
        for point in anomaly_points(report, config):
            density = (
                f"{point.density_bound:.2f}" if point.density_bound is not None else "-"
            )
            print(f"  {point.cushion_id:<10} {point.level:<10} {point.value:>10.4g} {density:>10}")

    for label, path in (
        ("CSV", config.output.csv_path),
        ("summary CSV", config.output.summary_csv_path),
        ("density CSV", config.output.density_csv_path),
        ("JSON", config.output.json_path),
        ("plots", config.output.plots_dir),
    ):
        if path:
            print(f"\n✓ Exported {label}: {path}")
    return 0


@app.command()
def analyze(
    data_dir: Annotated[
        Path, Parameter(help="Directory holding density.csv and measurements/*.csv")
    ],
    *,
    confidence_level: Annotated[
        float, Parameter(help="Confidence level for summary intervals")
    ] = 0.95,
    alpha: Annotated[float, Parameter(help="Significance level for the t-tests")] = 0.05,
    equivalence_fraction: Annotated[
        float, Parameter(help="Equivalence bound as a fraction of the group mean")
    ] = 0.05,
    equal_var: Annotated[
        bool, Parameter(help="Use the pooled-variance t-test instead of Welch")
    ] = False,
    workers: Annotated[int, Parameter(help="Groups tested in parallel")] = 1,
    foam_spec: Annotated[
        Path | None, Parameter(help="CSV with foam,min,max density rows")
    ] = None,
    csv_output: Annotated[
        Path | None, Parameter(help="Write the comparison table to this CSV")
    ] = None,
    summary_output: Annotated[
        Path | None, Parameter(help="Write the per-foam summary table to this CSV")
    ] = None,
    json_output: Annotated[
        Path | None, Parameter(help="Write the full report to this JSON file")
    ] = None,
    plots_dir: Annotated[
        Path | None, Parameter(help="Write plotly HTML figures to this directory")
    ] = None,
    log_level: Annotated[
        str, Parameter(help="Logging level (critical/error/warning/info/debug/trace)")
    ] = "warning",
    json_logs: Annotated[bool, Parameter(help="Output logs as JSON")] = False,
) -> int:
    """Run the full analysis on a data directory."""
    configure_logging(log_level, log_format="json" if json_logs else "human")
    try:
        config = schema.RunConfig(
            input=schema.InputConfig(
                data_dir=str(data_dir),
                foam_spec_file=str(foam_spec) if foam_spec else None,
            ),
            analysis=schema.AnalysisConfig(
                confidence_level=confidence_level,
                alpha=alpha,
                equivalence_fraction=equivalence_fraction,
                equal_var=equal_var,
                max_workers=workers,
            ),
            output=schema.OutputConfig(
                csv_path=str(csv_output) if csv_output else None,
                summary_csv_path=str(summary_output) if summary_output else None,
                json_path=str(json_output) if json_output else None,
                plots_dir=str(plots_dir) if plots_dir else None,
            ),
        )
    except CushionStatsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return _execute(config, show_anomalies=True)


@app.command()
def run(
    *,
    config: Annotated[Path, Parameter(help="Path to a YAML run config")],
    overrides: Annotated[
        tuple[str, ...],
        Parameter(
            help="Optional dotlist overrides (e.g. analysis.alpha=0.01)",
            show_default=False,
        ),
    ] = (),
    log_level: Annotated[
        str, Parameter(help="Logging level (critical/error/warning/info/debug/trace)")
    ] = "warning",
) -> int:
    """Run an analysis described by a config file."""
    configure_logging(log_level)
    try:
        run_config = load_run_config(config, overrides=overrides)
    except CushionStatsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return _execute(run_config, show_anomalies=True)


@app.command()
def density(
    geometry: Annotated[Path, Parameter(help="Geometry/mass CSV table")],
    *,
    foam_spec: Annotated[
        Path | None, Parameter(help="CSV with foam,min,max density rows")
    ] = None,
    thickness_prefix: Annotated[
        str, Parameter(help="Column prefix of the thickness probes")
    ] = "T",
    log_level: Annotated[
        str, Parameter(help="Logging level (critical/error/warning/info/debug/trace)")
    ] = "warning",
) -> int:
    """Print the estimated structural density interval of every cushion."""
    configure_logging(log_level)
    try:
        spec = load_foam_spec(foam_spec) if foam_spec else DEFAULT_FOAM_SPEC
        geometries = load_geometries(geometry, thickness_prefix=thickness_prefix)
        estimates = DensityEstimator(spec).estimate_all(geometries)
    except (CushionStatsError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"{'cushion':<10} {'foam':<10} {'min kg/m3':>10} {'max kg/m3':>10}  spec")
    for row in ResultAggregator().density_table(estimates):
        in_spec = {True: "ok", False: "OUT", None: "-"}[row["within_spec"]]
        print(
            f"{row['cushion']!s:<10} {row['foam']!s:<10} "
            f"{row['structural_density_min']:>10.2f} {row['structural_density_max']:>10.2f}  {in_spec}"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parsed_argv = list(argv) if argv is not None else None
    try:
        result = app(parsed_argv)
    except SystemExit as exc:  # pragma: no cover - CLI integration path
        return int(exc.code or 0)
    return int(result) if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
