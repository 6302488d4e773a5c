"""Runtime helpers for executing analyses from run configs."""

from __future__ import annotations

import logging
from pathlib import Path

from cushionstats.analysis.aggregate import ResultAggregator
from cushionstats.analysis.pipeline import AnalysisReport, analyze
from cushionstats.core.entities import DEFAULT_FOAM_SPEC
from cushionstats.exceptions import ConfigurationError
from cushionstats.export import (
    export_comparison_csv,
    export_density_csv,
    export_report_json,
    export_summary_csv,
)
from cushionstats.io import load_foam_spec, load_geometries, load_measurement_tables

from . import schema

logger = logging.getLogger(__name__)


def _resolve(base: Path | None, name: str | None) -> Path | None:
    if name is None:
        return None
    path = Path(name)
    if not path.is_absolute() and base is not None:
        path = base / path
    return path


def run_analysis_from_config(config: schema.RunConfig) -> AnalysisReport:
    """Load the configured inputs, run the analysis and write requested outputs."""
    base = Path(config.input.data_dir) if config.input.data_dir else None
    measurements_dir = _resolve(base, config.input.measurements_dir)
    if measurements_dir is None:
        raise ConfigurationError("input.measurements_dir must be set")
    tables = load_measurement_tables(measurements_dir)

    foam_spec = DEFAULT_FOAM_SPEC
    spec_path = _resolve(base, config.input.foam_spec_file)
    if spec_path is not None:
        foam_spec = load_foam_spec(spec_path)

    geometries = None
    geometry_path = _resolve(base, config.input.geometry_file)
    if geometry_path is not None:
        if geometry_path.exists():
            geometries = load_geometries(
                geometry_path, thickness_prefix=config.input.thickness_prefix
            )
        else:
            logger.warning(
                "IO: geometry table %s not found; skipping density estimation",
                geometry_path,
            )

    report = analyze(
        tables,
        geometries=geometries,
        foam_spec=foam_spec,
        config=config.analysis,
    )
    write_outputs(report, config)
    return report


def anomaly_points(report: AnalysisReport, config: schema.RunConfig):
    """Density diagnostic view for the configured (variable, foam)."""
    return ResultAggregator().density_join(
        report.measurements,
        report.densities,
        variable=config.anomaly.variable,
        foam=config.anomaly.foam,
        bound=config.anomaly.bound,
    )


def write_outputs(report: AnalysisReport, config: schema.RunConfig) -> list[Path]:
    output = config.output
    written: list[Path] = []
    if output.csv_path:
        written.append(export_comparison_csv(report.comparison, output.csv_path))
    if output.summary_csv_path:
        written.append(export_summary_csv(report.summary_rows, output.summary_csv_path))
    if output.density_csv_path and report.densities:
        rows = ResultAggregator().density_table(report.densities)
        written.append(export_density_csv(rows, output.density_csv_path))
    if output.json_path:
        written.append(export_report_json(report, output.json_path))
    if output.plots_dir:
        written.extend(_write_plots(report, config, Path(output.plots_dir)))
    for path in written:
        logger.info("IO: wrote %s", path)
    return written


def _write_plots(
    report: AnalysisReport, config: schema.RunConfig, directory: Path
) -> list[Path]:
    from cushionstats.visualization import (
        density_scatter,
        measurement_boxplot,
        write_figures,
    )

    figures = {
        variable: measurement_boxplot(report.measurements, variable)
        for variable in report.index.variables
    }
    if config.anomaly.enable and report.densities:
        points = anomaly_points(report, config)
        if any(p.density_bound is not None for p in points):
            figures[f"{config.anomaly.variable}_density"] = density_scatter(
                points, variable=config.anomaly.variable, bound=config.anomaly.bound
            )
    return write_figures(figures, directory)


__all__ = ["run_analysis_from_config", "write_outputs", "anomaly_points"]
