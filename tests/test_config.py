"""Tests for watch score configuration loading."""

import json
from pathlib import Path

import pytest

from watchability.config import (
    CONFIG_ENV_VAR,
    ConfigError,
    FactorWeights,
    Thresholds,
    WatchScoreConfig,
    load_config,
    save_config,
)


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


class TestDefaults:
    def test_weights_sum_to_one(self):
        assert FactorWeights().total == pytest.approx(1.0)

    def test_default_values(self):
        config = WatchScoreConfig()
        assert config.model_version == "v1.0"
        assert config.weights.closeness == 0.30
        assert config.thresholds.blowout_margin == 25
        assert config.thresholds.max_lead_changes == 15

    def test_no_path_no_env(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config() == WatchScoreConfig()


class TestLoadConfig:
    """Tests for load_config() / WatchScoreConfig.from_dict()."""

    def test_partial_blocks_keep_defaults(self, tmp_path):
        path = write_json(tmp_path / "c.json", {
            "model_version": "v1.1",
            "thresholds": {"blowout_margin": 20},
        })
        config = load_config(path)
        assert config.model_version == "v1.1"
        assert config.thresholds.blowout_margin == 20
        assert config.thresholds.max_lead_changes == 15
        assert config.weights == FactorWeights()

    def test_env_var(self, tmp_path, monkeypatch):
        path = write_json(tmp_path / "env.json", {"model_version": "from-env"})
        monkeypatch.setenv(CONFIG_ENV_VAR, path)
        assert load_config().model_version == "from-env"

    def test_explicit_path_beats_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, write_json(tmp_path / "env.json", {"model_version": "env"}))
        explicit = write_json(tmp_path / "explicit.json", {"model_version": "explicit"})
        assert load_config(explicit).model_version == "explicit"

    def test_unknown_keys_ignored(self):
        config = WatchScoreConfig.from_dict({
            "owner": "ops",
            "weights": {"closeness": 0.30, "hype": 0.5},
        })
        assert not hasattr(config.weights, "hype")

    @pytest.mark.parametrize("weights", [{"closeness": -0.1}, {"closeness": "heavy"}, {"closeness": True}])
    def test_invalid_weight(self, weights):
        with pytest.raises(ConfigError):
            WatchScoreConfig.from_dict({"weights": weights})

    @pytest.mark.parametrize("thresholds", [
        {"blowout_margin": 0},
        {"max_lead_changes": -3},
        {"upset_win_prob_floor": 0.5},
    ])
    def test_invalid_threshold(self, thresholds):
        with pytest.raises(ConfigError):
            WatchScoreConfig.from_dict({"thresholds": thresholds})

    def test_non_object_blocks(self):
        with pytest.raises(ConfigError):
            WatchScoreConfig.from_dict([1, 2])
        with pytest.raises(ConfigError):
            WatchScoreConfig.from_dict({"weights": [0.3]})

    def test_weight_sum_warning(self, caplog):
        with caplog.at_level("WARNING"):
            WatchScoreConfig.from_dict({"weights": {"closeness": 0.9}})
        assert "sum to" in caplog.text

    def test_no_warning_within_tolerance(self, caplog):
        with caplog.at_level("WARNING"):
            WatchScoreConfig.from_dict({"weights": {"closeness": 0.33}})
        assert "sum to" not in caplog.text

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="not valid JSON"):
            load_config(str(path))

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            Thresholds(top_tier_rank=0)


def test_save_and_reload(tmp_path):
    config = WatchScoreConfig(
        model_version="v2",
        weights=FactorWeights(closeness=0.4, time_remaining=0.1),
        thresholds=Thresholds(blowout_margin=30),
    )
    path = str(tmp_path / "nested" / "watchscore.json")
    save_config(config, path)
    assert load_config(path) == config


def test_bundled_default_file_matches_builtin():
    bundled = Path(__file__).resolve().parents[1] / "config" / "watchscore.json"
    assert load_config(str(bundled)) == WatchScoreConfig()
