"""Domain models shared across providers, reconciliation and scoring."""

from .game import CanonicalGame, CanonicalTeam, GameStatus, LiveState
from .stats import BartTorvikTeamStats, HaslametricsTeamStats, NormalizedTeamStats, Provider
from .team import MappingStatus, Team, TeamNameMapping
from .watchscore import FactorScores, WatchScoreInput, WatchScoreResult

__all__ = [
    "BartTorvikTeamStats",
    "CanonicalGame",
    "CanonicalTeam",
    "FactorScores",
    "GameStatus",
    "HaslametricsTeamStats",
    "LiveState",
    "MappingStatus",
    "NormalizedTeamStats",
    "Provider",
    "Team",
    "TeamNameMapping",
    "WatchScoreInput",
    "WatchScoreResult",
]
