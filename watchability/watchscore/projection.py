"""
Pregame score projection and "thrill" estimate.

Efficiency-based and deterministic, not a probabilistic forecast:

    tempo      = (home.tempo + away.tempo) / 2
    home_score = round(home.adj_o * (away.adj_d / 102) * tempo / 100)
    away_score = round(away.adj_o * (home.adj_d / 102) * tempo / 100)

There is no home-court term, so swapping the teams swaps the scores.
"""

from dataclasses import dataclass

from ..models.stats import NormalizedTeamStats
from .factors import round_half_up

LEAGUE_AVG_EFFICIENCY = 102.0  # D1 points per 100 possessions
THRILL_CLOSE_MARGIN = 20
THRILL_CLOSENESS_WEIGHT = 0.6
THRILL_QUALITY_WEIGHT = 0.4


@dataclass(frozen=True)
class ProjectedScore:
    home_score: int
    away_score: int

    @property
    def margin(self) -> int:
        return abs(self.home_score - self.away_score)


def _expected_points(offense: NormalizedTeamStats, defense: NormalizedTeamStats, tempo: float) -> int:
    return round_half_up(offense.adj_o * (defense.adj_d / LEAGUE_AVG_EFFICIENCY) * tempo / 100)


def project_score(home: NormalizedTeamStats, away: NormalizedTeamStats) -> ProjectedScore:
    tempo = (home.tempo + away.tempo) / 2
    return ProjectedScore(
        home_score=_expected_points(home, away, tempo),
        away_score=_expected_points(away, home, tempo),
    )


def thrill_score(
    home: NormalizedTeamStats,
    away: NormalizedTeamStats,
    home_score: int,
    away_score: int,
) -> int:
    """
    0-100 blend of projected closeness (60%) and team quality (40%).

    Closeness hits 0 at a 20-point margin; quality is the mean win
    expectancy of the two teams.
    """
    margin = abs(home_score - away_score)
    closeness = max(0.0, 1 - margin / THRILL_CLOSE_MARGIN)
    quality = (home.win_expectancy + away.win_expectancy) / 2
    raw = THRILL_CLOSENESS_WEIGHT * closeness + THRILL_QUALITY_WEIGHT * quality
    return min(100, max(0, round_half_up(raw * 100)))
