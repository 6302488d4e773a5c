"""Load run configurations from YAML files with dotlist overrides."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from cushionstats.exceptions import ConfigurationError

from . import schema


def load_run_config(
    path: str | Path | None = None,
    *,
    overrides: Sequence[str] = (),
) -> schema.RunConfig:
    """Merge a YAML file and ``key=value`` overrides onto the defaults.

    Args:
        path: Optional YAML config file.
        overrides: Dotlist overrides, e.g. ``analysis.alpha=0.01``.

    Raises:
        ConfigurationError: If the file is missing or a value does not fit
            the schema.
    """
    base = OmegaConf.structured(schema.RunConfig)
    layers = [base]
    try:
        if path is not None:
            config_path = Path(path)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            layers.append(OmegaConf.load(config_path))
        if overrides:
            layers.append(OmegaConf.from_dotlist(list(overrides)))
        merged = OmegaConf.merge(*layers)
        config = OmegaConf.to_object(merged)
    except OmegaConfBaseException as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
    assert isinstance(config, schema.RunConfig)
    return config


def dump_run_config(config: schema.RunConfig) -> str:
    return OmegaConf.to_yaml(OmegaConf.structured(config))


__all__ = ["load_run_config", "dump_run_config"]
