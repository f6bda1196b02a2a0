"""Canonical game state produced by the live scoreboard normalizer."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class GameStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    HALFTIME = "HALFTIME"
    FINAL = "FINAL"
    POSTPONED = "POSTPONED"
    CANCELLED = "CANCELLED"

    @property
    def is_live(self) -> bool:
        return self in (GameStatus.IN_PROGRESS, GameStatus.HALFTIME)

    @property
    def never_started(self) -> bool:
        return self in (GameStatus.SCHEDULED, GameStatus.POSTPONED, GameStatus.CANCELLED)


@dataclass(frozen=True)
class CanonicalTeam:
    """One side of a game as the scoreboard provider describes it."""

    external_id: str
    name: str
    short_name: Optional[str] = None
    abbreviation: Optional[str] = None
    logo_url: Optional[str] = None
    ranking: Optional[int] = None  # poll rank 1-25, None if unranked
    conference: Optional[str] = None
    record: Optional[Tuple[int, int]] = None  # (wins, losses)


@dataclass(frozen=True)
class LiveState:
    home_score: int = 0
    away_score: int = 0
    period: int = 1
    clock_display: Optional[str] = None  # "5:32", "Halftime", ...
    lead_changes: int = 0
    win_prob_home: Optional[float] = None  # 0-1
    possession: Optional[str] = None  # "home" | "away"

    @property
    def margin(self) -> int:
        return abs(self.home_score - self.away_score)


@dataclass(frozen=True)
class CanonicalGame:
    external_id: str
    provider: str
    game_date: str  # YYYY-MM-DD, the calendar day that was requested
    home_team: CanonicalTeam
    away_team: CanonicalTeam
    status: GameStatus = GameStatus.SCHEDULED
    scheduled_at: Optional[datetime] = None
    tv_network: Optional[str] = None
    live_state: Optional[LiveState] = None
    spread: Optional[float] = None  # positive = home favored
    over_under: Optional[float] = None
