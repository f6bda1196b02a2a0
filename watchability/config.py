"""
Watch score weights and thresholds.

The configuration is a plain value: load it once, pass it to
``compute_watch_score``. Nothing in the scoring code reads files or
environment variables.
"""

import json
import logging
import math
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .models.watchscore import FACTOR_NAMES

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WATCHSCORE_CONFIG"
WEIGHT_SUM_TOLERANCE = 0.05


class ConfigError(ValueError):
    """Raised when a watch score configuration value is invalid."""


@dataclass(frozen=True)
class FactorWeights:
    closeness: float = 0.30
    time_remaining: float = 0.20
    lead_changes: float = 0.15
    upset_likelihood: float = 0.15
    ranked_stakes: float = 0.10
    tourney_implications: float = 0.10

    def __post_init__(self):
        for name in FACTOR_NAMES:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigError(f"Weight '{name}' must be a number, got {value!r}")
            if value < 0:
                raise ConfigError(f"Weight '{name}' must be non-negative, got {value}")

    @property
    def total(self) -> float:
        return sum(getattr(self, name) for name in FACTOR_NAMES)

    def get(self, name: str) -> float:
        return getattr(self, name, 0.0)


@dataclass(frozen=True)
class Thresholds:
    blowout_margin: float = 25  # margin at which closeness reaches 0
    max_lead_changes: int = 15  # lead changes for a full lead_changes score
    upset_win_prob_floor: float = 0.10  # favorite win prob at which upset score reaches 1
    max_ranked: int = 25
    top_tier_rank: int = 10

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"Threshold '{f.name}' must be a positive number, got {value!r}")
        if self.upset_win_prob_floor >= 0.5:
            raise ConfigError("upset_win_prob_floor must be below 0.5")


@dataclass(frozen=True)
class WatchScoreConfig:
    model_version: str = "v1.0"
    weights: FactorWeights = field(default_factory=FactorWeights)
    thresholds: Thresholds = field(default_factory=Thresholds)

    def to_dict(self) -> dict:
        return {
            "model_version": self.model_version,
            "weights": asdict(self.weights),
            "thresholds": asdict(self.thresholds),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WatchScoreConfig":
        """Build from parsed JSON; missing keys keep their defaults."""
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a JSON object, got {type(data).__name__}")
        for key in data:
            if key not in ("model_version", "weights", "thresholds"):
                logger.debug(f"Ignoring unknown config key '{key}'")
        config = cls(
            model_version=str(data.get("model_version", "v1.0")),
            weights=FactorWeights(**_known(FactorWeights, data.get("weights"), "weights")),
            thresholds=Thresholds(**_known(Thresholds, data.get("thresholds"), "thresholds")),
        )
        total = config.weights.total
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            logger.warning(f"Watch score weights sum to {total:.3f}, expected ~1.0")
        return config


def _known(cls, block: Any, section: str) -> Dict[str, Any]:
    if block is None:
        return {}
    if not isinstance(block, dict):
        raise ConfigError(f"'{section}' must be a JSON object")
    names = {f.name for f in fields(cls)}
    for key in block:
        if key not in names:
            logger.debug(f"Ignoring unknown {section} key '{key}'")
    return {k: v for k, v in block.items() if k in names}


def load_config(path: Optional[str] = None) -> WatchScoreConfig:
    """
    Load a configuration.

    Resolution order: ``path``, then the WATCHSCORE_CONFIG environment
    variable, then built-in defaults.
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    if not path:
        return WatchScoreConfig()
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
    logger.debug(f"Loaded watch score config from {path}")
    return WatchScoreConfig.from_dict(data)


def save_config(config: WatchScoreConfig, path: str) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
