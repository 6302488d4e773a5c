"""Structured configuration definitions for OmegaConf."""

from __future__ import annotations

from dataclasses import dataclass, field

from cushionstats.exceptions import ConfigurationError


@dataclass
class AnalysisConfig:
    confidence_level: float = 0.95
    alpha: float = 0.05
    # Equivalence bound as a fraction of the pooled group mean
    equivalence_fraction: float = 0.05
    equal_var: bool = False
    foams: list[str] | None = None
    max_workers: int = 1

    def __post_init__(self) -> None:
        if not 0 < self.confidence_level < 1:
            raise ConfigurationError(
                f"analysis.confidence_level must be in (0, 1), got {self.confidence_level}"
            )
        if not 0 < self.alpha < 0.5:
            raise ConfigurationError(f"analysis.alpha must be in (0, 0.5), got {self.alpha}")
        if self.equivalence_fraction <= 0:
            raise ConfigurationError(
                "analysis.equivalence_fraction must be > 0, got "
                f"{self.equivalence_fraction}"
            )
        if self.foams is not None and len(self.foams) != 2:
            raise ConfigurationError(
                f"analysis.foams must list exactly two foam types, got {list(self.foams)}"
            )
        if self.max_workers < 1:
            raise ConfigurationError("analysis.max_workers must be >= 1")


@dataclass
class InputConfig:
    data_dir: str | None = None
    geometry_file: str | None = "density.csv"
    foam_spec_file: str | None = None
    measurements_dir: str = "measurements"
    thickness_prefix: str = "T"


@dataclass
class AnomalyConfig:
    enable: bool = True
    variable: str = "hysteresis"
    foam: str = "EN40-230"
    bound: str = "structural_density_max"


@dataclass
class OutputConfig:
    csv_path: str | None = None
    summary_csv_path: str | None = None
    density_csv_path: str | None = None
    json_path: str | None = None
    plots_dir: str | None = None


@dataclass
class RunConfig:
    name: str = "foam_equivalence"
    input: InputConfig = field(default_factory=InputConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    anomaly: AnomalyConfig = field(default_factory=AnomalyConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
