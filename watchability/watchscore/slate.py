"""Score and order a day's slate of games."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from ..config import WatchScoreConfig
from ..models.game import CanonicalGame, GameStatus
from ..models.stats import NormalizedTeamStats
from ..models.watchscore import WatchScoreInput, WatchScoreResult
from .calculator import compute_watch_score
from .projection import project_score, thrill_score

logger = logging.getLogger(__name__)

SORT_KEYS = ("watch_score", "thrill_score", "start_time", "ranked")
UNRANKED = 999
_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class PregamePrediction:
    home_score: int
    away_score: int
    thrill_score: int
    why_it_matters: str


@dataclass(frozen=True)
class ScoredGame:
    game: CanonicalGame
    watch_score: WatchScoreResult
    pregame: Optional[PregamePrediction] = None
    live_context: Optional[str] = None
    home_record: Optional[Tuple[int, int]] = None
    away_record: Optional[Tuple[int, int]] = None

    @property
    def best_rank(self) -> int:
        ranks = [r for r in (self.game.home_team.ranking, self.game.away_team.ranking) if r is not None]
        return min(ranks) if ranks else UNRANKED

    def to_dict(self) -> dict:
        game = self.game
        live = game.live_state
        return {
            "id": game.external_id,
            "date": game.game_date,
            "status": game.status.value,
            "home": game.home_team.name,
            "away": game.away_team.name,
            "home_rank": game.home_team.ranking,
            "away_rank": game.away_team.ranking,
            "score": f"{live.away_score}-{live.home_score}" if live else None,
            "tv": game.tv_network,
            "watch_score": self.watch_score.to_dict(),
            "pregame": None if self.pregame is None else {
                "home_score": self.pregame.home_score,
                "away_score": self.pregame.away_score,
                "thrill_score": self.pregame.thrill_score,
                "why_it_matters": self.pregame.why_it_matters,
            },
            "live_context": self.live_context,
        }


def _record(stats: Optional[NormalizedTeamStats], fallback: Optional[Tuple[int, int]]):
    if stats is not None:
        return (stats.wins, stats.losses)
    return fallback


def score_game(
    game: CanonicalGame,
    config: Optional[WatchScoreConfig] = None,
    home_stats: Optional[NormalizedTeamStats] = None,
    away_stats: Optional[NormalizedTeamStats] = None,
) -> ScoredGame:
    """
    Watch score plus pregame projection (scheduled) or live context (live).

    The projection needs stats for both teams from the same provider;
    without them the prediction is 0-0 and thrill falls back to the watch
    score.
    """
    result = compute_watch_score(WatchScoreInput.from_game(game), config)

    pregame = None
    if game.status is GameStatus.SCHEDULED:
        comparable = (
            home_stats is not None
            and away_stats is not None
            and home_stats.provider == away_stats.provider
        )
        if comparable:
            projected = project_score(home_stats, away_stats)
            pregame = PregamePrediction(
                home_score=projected.home_score,
                away_score=projected.away_score,
                thrill_score=thrill_score(home_stats, away_stats, projected.home_score, projected.away_score),
                why_it_matters=result.explanation,
            )
        else:
            if home_stats is not None or away_stats is not None:
                logger.debug(f"Game {game.external_id}: stats missing or from different providers")
            pregame = PregamePrediction(0, 0, result.score, result.explanation)

    return ScoredGame(
        game=game,
        watch_score=result,
        pregame=pregame,
        live_context=result.explanation if game.status.is_live else None,
        home_record=_record(home_stats, game.home_team.record),
        away_record=_record(away_stats, game.away_team.record),
    )


def _status_group(status: GameStatus) -> int:
    if status.is_live:
        return 0
    if status is GameStatus.SCHEDULED:
        return 1
    return 2


def sort_games(scored: Iterable[ScoredGame], key: str = "watch_score") -> List[ScoredGame]:
    """
    Live games first, then scheduled, then everything else; within a group:

    - watch_score: highest first
    - thrill_score: highest pregame thrill first, games without one last
    - start_time: earliest first, unknown start last
    - ranked: best-ranked team first
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{key}', expected one of {SORT_KEYS}")

    def sort_key(item: ScoredGame):
        group = _status_group(item.game.status)
        if key == "thrill_score":
            thrill = item.pregame.thrill_score if item.pregame else -1
            return (group, -thrill)
        if key == "start_time":
            return (group, item.game.scheduled_at or _FAR_FUTURE)
        if key == "ranked":
            return (group, item.best_rank)
        return (group, -item.watch_score.score)

    return sorted(scored, key=sort_key)
