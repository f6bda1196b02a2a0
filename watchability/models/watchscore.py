"""Inputs and outputs of the watch score calculator."""

from dataclasses import asdict, dataclass, field
from typing import Dict, Optional

from .game import CanonicalGame, GameStatus

FACTOR_NAMES = (
    "closeness",
    "time_remaining",
    "lead_changes",
    "upset_likelihood",
    "ranked_stakes",
    "tourney_implications",
)


@dataclass(frozen=True)
class WatchScoreInput:
    """Flattened view of one game's state at scoring time."""

    status: GameStatus
    game_id: str = ""
    home_score: int = 0
    away_score: int = 0
    period: int = 1
    clock_display: Optional[str] = None
    lead_changes: int = 0
    win_prob_home: Optional[float] = None
    home_team_ranking: Optional[int] = None
    away_team_ranking: Optional[int] = None
    spread: Optional[float] = None  # positive = home favored by N points pregame

    def __post_init__(self):
        object.__setattr__(self, "status", GameStatus(self.status))

    @property
    def margin(self) -> int:
        return abs(self.home_score - self.away_score)

    @classmethod
    def from_game(cls, game: CanonicalGame) -> "WatchScoreInput":
        live = game.live_state
        return cls(
            status=game.status,
            game_id=game.external_id,
            home_score=live.home_score if live else 0,
            away_score=live.away_score if live else 0,
            period=live.period if live else 1,
            clock_display=live.clock_display if live else None,
            lead_changes=live.lead_changes if live else 0,
            win_prob_home=live.win_prob_home if live else None,
            home_team_ranking=game.home_team.ranking,
            away_team_ranking=game.away_team.ranking,
            spread=game.spread,
        )


@dataclass(frozen=True)
class FactorScores:
    """Raw 0-1 factor values."""

    closeness: float = 0.0
    time_remaining: float = 0.0
    lead_changes: float = 0.0
    upset_likelihood: float = 0.0
    ranked_stakes: float = 0.0
    tourney_implications: float = 0.0

    def items(self):
        return [(name, getattr(self, name)) for name in FACTOR_NAMES]

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class WatchScoreResult:
    score: int  # 0-100
    factor_scores: FactorScores
    factor_contributions: Dict[str, float] = field(default_factory=dict)  # 0-100 scale points
    explanation: str = ""
    model_version: str = ""

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "factor_scores": self.factor_scores.to_dict(),
            "factor_contributions": dict(self.factor_contributions),
            "explanation": self.explanation,
            "model_version": self.model_version,
        }
