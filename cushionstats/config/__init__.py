"""Configuration schema and loading helpers."""

from __future__ import annotations

from .loader import dump_run_config, load_run_config
from .schema import AnalysisConfig, AnomalyConfig, InputConfig, OutputConfig, RunConfig

__all__ = [
    "AnalysisConfig",
    "AnomalyConfig",
    "InputConfig",
    "OutputConfig",
    "RunConfig",
    "load_run_config",
    "dump_run_config",
]
