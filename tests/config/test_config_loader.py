import pytest

from cushionstats.config import AnalysisConfig, RunConfig, dump_run_config, load_run_config
from cushionstats.exceptions import ConfigurationError


def test_defaults_without_file():
    config = load_run_config()

    assert isinstance(config, RunConfig)
    assert config.analysis.confidence_level == 0.95
    assert config.analysis.equivalence_fraction == 0.05
    assert config.input.geometry_file == "density.csv"
    assert config.input.thickness_prefix == "T"
    assert config.anomaly.variable == "hysteresis"
    assert config.anomaly.foam == "EN40-230"


def test_load_run_config_supports_overrides(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
        name: pilot
        input:
          data_dir: data
        analysis:
          alpha: 0.01
          foams: [EN50-250, EN40-230]
        """
    )

    config = load_run_config(
        config_path, overrides=["analysis.max_workers=4", "output.csv_path=out.csv"]
    )

    assert config.name == "pilot"
    assert config.input.data_dir == "data"
    assert config.analysis.alpha == 0.01
    assert config.analysis.foams == ["EN50-250", "EN40-230"]
    assert config.analysis.max_workers == 4
    assert config.output.csv_path == "out.csv"
    assert isinstance(config.analysis, AnalysisConfig)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_run_config(tmp_path / "missing.yaml")


def test_unknown_key_raises():
    with pytest.raises(ConfigurationError):
        load_run_config(overrides=["analysis.colour=blue"])


def test_wrong_type_raises():
    with pytest.raises(ConfigurationError):
        load_run_config(overrides=["analysis.alpha=lots"])


def test_out_of_range_value_raises():
    with pytest.raises(ConfigurationError, match="alpha"):
        load_run_config(overrides=["analysis.alpha=0.7"])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"confidence_level": 1.0},
        {"alpha": 0.0},
        {"equivalence_fraction": -0.1},
        {"foams": ["EN40-230"]},
        {"max_workers": 0},
    ],
)
def test_analysis_config_validation(kwargs):
    with pytest.raises(ConfigurationError):
        AnalysisConfig(**kwargs)


def test_dump_round_trips(tmp_path):
    config = load_run_config(overrides=["analysis.equal_var=true"])
    path = tmp_path / "dumped.yaml"
    path.write_text(dump_run_config(config))

    reloaded = load_run_config(path)

    assert reloaded == config
