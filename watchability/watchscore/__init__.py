"""Watch score engine: factors, weighted score, explanation, projections."""

from .calculator import compute_watch_score
from .explainer import build_explanation
from .factors import compute_factors
from .projection import ProjectedScore, project_score, thrill_score
from .slate import PregamePrediction, ScoredGame, score_game, sort_games

__all__ = [
    "PregamePrediction",
    "ProjectedScore",
    "ScoredGame",
    "build_explanation",
    "compute_factors",
    "compute_watch_score",
    "project_score",
    "score_game",
    "sort_games",
    "thrill_score",
]
