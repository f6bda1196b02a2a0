"""
The six watch score factors.

Each factor maps a WatchScoreInput to [0, 1] independently of the others.
Factors that describe game flow (closeness, time, lead changes, upset) are
neutral or zero for games that are not live; ranking factors apply to
every game.
"""

import math
from typing import Optional

from ..config import Thresholds
from ..models.game import GameStatus
from ..models.watchscore import FactorScores, WatchScoreInput

REGULATION_HALF_SECONDS = 1200
OVERTIME_SECONDS = 300

FIRST_HALF_CEILING = 0.35
HALFTIME_SCORE = 0.45
OVERTIME_FLOOR = 0.90

# Fallbacks for a clock that cannot be parsed
FIRST_HALF_FALLBACK = 0.15
SECOND_HALF_FALLBACK = 0.60
OVERTIME_FALLBACK = 0.95
UNKNOWN_PERIOD_SCORE = 0.5

PREGAME_CLOSENESS = 0.5


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def parse_clock_seconds(clock: Optional[str]) -> Optional[int]:
    """"5:32" -> 332. None when the clock is missing or not M:SS."""
    if not clock:
        return None
    parts = clock.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        minutes, seconds = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if minutes < 0 or seconds < 0:
        return None
    return minutes * 60 + seconds


def is_ranked(rank: Optional[int], thresholds: Thresholds) -> bool:
    return rank is not None and 1 <= rank <= thresholds.max_ranked


def _is_top_tier(rank: Optional[int], thresholds: Thresholds) -> bool:
    return rank is not None and 1 <= rank <= thresholds.top_tier_rank


def closeness(inp: WatchScoreInput, thresholds: Thresholds) -> float:
    """1.0 for a tie, falling linearly to 0 at the blowout margin."""
    if not inp.status.is_live:
        return PREGAME_CLOSENESS
    return max(0.0, 1.0 - inp.margin / thresholds.blowout_margin)


def time_remaining(inp: WatchScoreInput, thresholds: Thresholds) -> float:
    """
    How late in the game it is.

    First half ramps 0 -> 0.35, halftime is 0.45, second half ramps
    0.35 -> 1.0, overtime sits in 0.9 -> 1.0.
    """
    if not inp.status.is_live:
        return 0.0
    if inp.status is GameStatus.HALFTIME:
        return HALFTIME_SCORE

    clock = parse_clock_seconds(inp.clock_display)
    period = inp.period

    if period == 1:
        if clock is None:
            return FIRST_HALF_FALLBACK
        elapsed = REGULATION_HALF_SECONDS - clock
        return _clamp01(min(FIRST_HALF_CEILING, elapsed / REGULATION_HALF_SECONDS * FIRST_HALF_CEILING))

    if period == 2:
        if clock is None:
            return SECOND_HALF_FALLBACK
        fraction = _clamp01(1 - clock / REGULATION_HALF_SECONDS)
        return FIRST_HALF_CEILING + fraction * (1 - FIRST_HALF_CEILING)

    if period >= 3:
        if clock is None:
            return OVERTIME_FALLBACK
        fraction = _clamp01(1 - clock / OVERTIME_SECONDS)
        return OVERTIME_FLOOR + fraction * (1 - OVERTIME_FLOOR)

    return UNKNOWN_PERIOD_SCORE


def lead_changes(inp: WatchScoreInput, thresholds: Thresholds) -> float:
    if inp.status.never_started or inp.lead_changes <= 0:
        return 0.0
    return min(1.0, inp.lead_changes / thresholds.max_lead_changes)


def ranked_stakes(inp: WatchScoreInput, thresholds: Thresholds) -> float:
    """Both ranked: 0.7 plus a top-10 bonus. One ranked: 0.3-0.5 by rank."""
    home = inp.home_team_ranking
    away = inp.away_team_ranking
    home_ranked = is_ranked(home, thresholds)
    away_ranked = is_ranked(away, thresholds)

    if home_ranked and away_ranked:
        best = min(home, away)
        bonus = max(0.0, (thresholds.top_tier_rank - best) * 0.03)
        return min(1.0, 0.7 + bonus)
    if home_ranked or away_ranked:
        rank = home if home_ranked else away
        return max(0.3, 0.5 - (rank - 1) * 0.01)
    return 0.0


def tourney_implications(inp: WatchScoreInput, thresholds: Thresholds) -> float:
    """Proxy for bracket stakes until bubble data is wired in: rank tiers only."""
    home = inp.home_team_ranking
    away = inp.away_team_ranking
    if _is_top_tier(home, thresholds) and _is_top_tier(away, thresholds):
        return 0.9
    if _is_top_tier(home, thresholds) or _is_top_tier(away, thresholds):
        return 0.6
    if is_ranked(home, thresholds) or is_ranked(away, thresholds):
        return 0.35
    return 0.0


def upset_likelihood(inp: WatchScoreInput, thresholds: Thresholds) -> float:
    """
    Max of three signals:

    - the pregame favorite's live win probability has dropped below 50%
      (0 at 50%, 1 at the floor)
    - an unranked team leads a ranked one
    - a worse-ranked team leads a better-ranked one
    """
    if not inp.status.is_live:
        return 0.0

    signals = []

    if inp.win_prob_home is not None and inp.spread:
        p_favorite = inp.win_prob_home if inp.spread > 0 else 1 - inp.win_prob_home
        if p_favorite < 0.5:
            span = 0.5 - thresholds.upset_win_prob_floor
            signals.append(min(1.0, (0.5 - p_favorite) / span))

    home = inp.home_team_ranking
    away = inp.away_team_ranking
    home_ranked = is_ranked(home, thresholds)
    away_ranked = is_ranked(away, thresholds)
    home_leading = inp.home_score > inp.away_score
    away_leading = inp.away_score > inp.home_score

    if home_leading and away_ranked and not home_ranked:
        signals.append(max(0.3, 0.8 - (away - 1) * 0.02))
    elif away_leading and home_ranked and not away_ranked:
        signals.append(max(0.3, 0.8 - (home - 1) * 0.02))

    if home_ranked and away_ranked:
        if home_leading and home > away:
            signals.append(min(0.6, (home - away) * 0.05))
        elif away_leading and away > home:
            signals.append(min(0.6, (away - home) * 0.05))

    return _clamp01(max(signals)) if signals else 0.0


def compute_factors(inp: WatchScoreInput, thresholds: Thresholds) -> FactorScores:
    return FactorScores(
        closeness=closeness(inp, thresholds),
        time_remaining=time_remaining(inp, thresholds),
        lead_changes=lead_changes(inp, thresholds),
        upset_likelihood=upset_likelihood(inp, thresholds),
        ranked_stakes=ranked_stakes(inp, thresholds),
        tourney_implications=tourney_implications(inp, thresholds),
    )
