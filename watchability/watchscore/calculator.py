"""
Watch score calculator.

Each factor returns 0-1; the weighted sum is scaled to 0-100:

    score = clamp(round(sum(factor_i * weight_i) * 100), 0, 100)

Per-factor contributions are reported on the same 0-100 scale, to one
decimal, for explanations and UI breakdowns.
"""

import logging
from typing import Dict, Optional

from ..config import WatchScoreConfig
from ..models.watchscore import WatchScoreInput, WatchScoreResult
from .explainer import build_explanation
from .factors import compute_factors, round_half_up

logger = logging.getLogger(__name__)


def compute_watch_score(inp: WatchScoreInput, config: Optional[WatchScoreConfig] = None) -> WatchScoreResult:
    """
    Score one game.

    Args:
        inp: Flattened game state
        config: Weights and thresholds; defaults to the built-in configuration

    Returns:
        WatchScoreResult with raw factors, contributions and explanation
    """
    config = config or WatchScoreConfig()
    factors = compute_factors(inp, config.thresholds)

    contributions: Dict[str, float] = {}
    weighted_sum = 0.0
    for name, raw in factors.items():
        contribution = raw * config.weights.get(name)
        contributions[name] = round_half_up(contribution * 1000) / 10
        weighted_sum += contribution

    score = min(100, max(0, round_half_up(weighted_sum * 100)))
    explanation = build_explanation(factors, contributions, inp, config.thresholds)
    logger.debug(f"Game {inp.game_id or '?'}: {score} ({explanation})")

    return WatchScoreResult(
        score=score,
        factor_scores=factors,
        factor_contributions=contributions,
        explanation=explanation,
        model_version=config.model_version,
    )
