"""One-line, human-readable explanation of a watch score."""

from typing import Dict, List, Optional

from ..config import Thresholds
from ..models.game import GameStatus
from ..models.watchscore import FACTOR_NAMES, FactorScores, WatchScoreInput
from .factors import is_ranked

GENERIC_PHRASE = "Interesting matchup"
MAX_CONSIDERED = 3
MAX_PHRASES = 2


def describe_factor(
    name: str,
    factors: FactorScores,
    inp: WatchScoreInput,
    thresholds: Optional[Thresholds] = None,
) -> Optional[str]:
    """Phrase for one factor, or None when it is too weak to mention."""
    thresholds = thresholds or Thresholds()
    if name == "closeness":
        if not inp.status.is_live:
            return None
        value = factors.closeness
        if value >= 0.9:
            return "tied game"
        if value >= 0.7:
            return f"{inp.margin}-point game"
        if value >= 0.5:
            return f"within {inp.margin}"
        return None

    if name == "time_remaining":
        if inp.status is GameStatus.HALFTIME:
            return "halftime"
        value = factors.time_remaining
        if value >= 0.9:
            return "final minutes"
        if value >= 0.75:
            return "late in the game"
        if value >= 0.5:
            return "second half"
        return None

    if name == "lead_changes":
        value = factors.lead_changes
        if value >= 0.8:
            return f"{inp.lead_changes} lead changes"
        if value >= 0.5:
            return "back-and-forth battle"
        if value >= 0.3:
            return "multiple lead changes"
        return None

    if name == "upset_likelihood":
        value = factors.upset_likelihood
        if value >= 0.7:
            return "major upset brewing"
        if value >= 0.4:
            return "upset in the making"
        if value >= 0.2:
            return "underdog hanging around"
        return None

    if name == "ranked_stakes":
        if factors.ranked_stakes <= 0:
            return None
        home = inp.home_team_ranking
        away = inp.away_team_ranking
        home_ranked = is_ranked(home, thresholds)
        away_ranked = is_ranked(away, thresholds)
        if home_ranked and away_ranked:
            return f"#{min(home, away)} vs #{max(home, away)} ranked matchup"
        if home_ranked:
            return "ranked team at home"
        if away_ranked:
            return "ranked team on the road"
        return "ranked matchup"

    if name == "tourney_implications":
        value = factors.tourney_implications
        if value >= 0.8:
            return "huge tournament implications"
        if value >= 0.5:
            return "tournament stakes"
        return None

    return None


def _capitalize(phrase: str) -> str:
    return phrase[:1].upper() + phrase[1:]


def build_explanation(
    factors: FactorScores,
    contributions: Dict[str, float],
    inp: WatchScoreInput,
    thresholds: Optional[Thresholds] = None,
) -> str:
    """
    Combine the strongest factors into a short sentence.

    The top three factors by contribution are considered (ties keep factor
    order) and the first two that produce a phrase are used:
    "Tied game + final minutes".
    """
    ranked = sorted(FACTOR_NAMES, key=lambda name: -contributions.get(name, 0.0))

    parts: List[str] = []
    for name in ranked[:MAX_CONSIDERED]:
        phrase = describe_factor(name, factors, inp, thresholds)
        if phrase:
            parts.append(phrase)
        if len(parts) >= MAX_PHRASES:
            break

    if not parts:
        return GENERIC_PHRASE
    if len(parts) == 1:
        return _capitalize(parts[0])
    return f"{_capitalize(parts[0])} + {parts[1]}"
