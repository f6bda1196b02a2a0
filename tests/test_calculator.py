"""Tests for the watch score calculator and explanation."""

import itertools

import pytest

from watchability.config import FactorWeights, WatchScoreConfig
from watchability.models.game import GameStatus
from watchability.models.watchscore import FACTOR_NAMES, FactorScores, WatchScoreInput
from watchability.watchscore.calculator import compute_watch_score
from watchability.watchscore.explainer import build_explanation, describe_factor


@pytest.fixture
def config():
    return WatchScoreConfig()


def test_tied_game_in_final_minutes(config):
    inp = WatchScoreInput(
        status=GameStatus.IN_PROGRESS,
        home_score=70,
        away_score=70,
        period=2,
        clock_display="0:30",
        lead_changes=12,
    )
    result = compute_watch_score(inp, config)

    # 0.30 * 1.0 + 0.20 * 0.98375 + 0.15 * 0.8
    assert result.score == 62
    assert result.factor_contributions["closeness"] == 30.0
    assert result.factor_contributions["time_remaining"] == 19.7
    assert result.factor_contributions["lead_changes"] == 12.0
    assert result.factor_contributions["ranked_stakes"] == 0.0
    assert result.explanation == "Tied game + final minutes"
    assert result.model_version == "v1.0"


def test_scheduled_unranked_game(config):
    result = compute_watch_score(WatchScoreInput(status=GameStatus.SCHEDULED), config)
    assert result.score == 15
    assert result.factor_scores.closeness == 0.5
    assert result.explanation == "Interesting matchup"


def test_scheduled_top_ten_matchup(config):
    inp = WatchScoreInput(status=GameStatus.SCHEDULED, home_team_ranking=12, away_team_ranking=3)
    result = compute_watch_score(inp, config)
    # 0.15 + 0.1 * 0.91 + 0.1 * 0.6
    assert result.score == 30
    assert result.explanation == "#3 vs #12 ranked matchup + tournament stakes"


def test_contributions_rounded_to_one_decimal(config):
    inp = WatchScoreInput(status=GameStatus.IN_PROGRESS, home_score=61, away_score=60,
                          period=1, clock_display="7:13", lead_changes=4)
    result = compute_watch_score(inp, config)
    for name, raw in result.factor_scores.items():
        expected = int(raw * config.weights.get(name) * 1000 + 0.5) / 10
        assert result.factor_contributions[name] == expected


def test_zero_weights_give_zero():
    zero = WatchScoreConfig(weights=FactorWeights(**{name: 0.0 for name in FACTOR_NAMES}))
    inp = WatchScoreInput(status=GameStatus.IN_PROGRESS, lead_changes=20, home_team_ranking=1)
    assert compute_watch_score(inp, zero).score == 0


def test_score_clamped_when_weights_oversum():
    heavy = WatchScoreConfig(weights=FactorWeights(**{name: 1.0 for name in FACTOR_NAMES}))
    inp = WatchScoreInput(status=GameStatus.IN_PROGRESS, period=2, clock_display="0:00",
                          lead_changes=20, home_team_ranking=1, away_team_ranking=2)
    assert compute_watch_score(inp, heavy).score == 100


def test_config_defaults_when_omitted():
    assert compute_watch_score(WatchScoreInput(status="SCHEDULED")).model_version == "v1.0"


def test_score_always_in_range(config):
    for status, lc, ranks, margin in itertools.product(
        GameStatus, [0, 5, 30], [(None, None), (1, 2), (None, 7)], [0, 9, 40]
    ):
        inp = WatchScoreInput(status=status, home_score=60 + margin, away_score=60,
                              lead_changes=lc, home_team_ranking=ranks[0], away_team_ranking=ranks[1],
                              period=2, clock_display="4:00", win_prob_home=0.2, spread=3)
        assert 0 <= compute_watch_score(inp, config).score <= 100


@pytest.mark.parametrize("field", ["lead_changes", "home_score_gap_shrinks", "clock_runs_down"])
def test_score_non_decreasing_in_each_factor(config, field):
    base = dict(status=GameStatus.IN_PROGRESS, home_score=70, away_score=60, period=2,
                clock_display="10:00", lead_changes=3)
    steps = {
        "lead_changes": [dict(lead_changes=n) for n in range(0, 20, 2)],
        "home_score_gap_shrinks": [dict(away_score=s) for s in range(40, 71, 3)],
        "clock_runs_down": [dict(clock_display=f"{m}:00") for m in range(20, -1, -2)],
    }[field]
    scores = [compute_watch_score(WatchScoreInput(**{**base, **step}), config).score for step in steps]
    assert scores == sorted(scores)


# ---------------------------------------------------------------------------
# Explanation phrases
# ---------------------------------------------------------------------------


class TestExplainer:
    """Tests for build_explanation() / describe_factor()."""

    def _inp(self, **kwargs):
        kwargs.setdefault("status", GameStatus.IN_PROGRESS)
        return WatchScoreInput(**kwargs)

    @pytest.mark.parametrize("value,margin,expected", [
        (0.96, 1, "tied game"),
        (0.8, 5, "5-point game"),
        (0.6, 10, "within 10"),
        (0.3, 18, None),
    ])
    def test_closeness(self, value, margin, expected):
        inp = self._inp(home_score=60 + margin, away_score=60)
        assert describe_factor("closeness", FactorScores(closeness=value), inp) == expected

    def test_closeness_silent_before_tipoff(self):
        inp = self._inp(status=GameStatus.SCHEDULED)
        assert describe_factor("closeness", FactorScores(closeness=0.5), inp) is None

    def test_halftime(self):
        inp = self._inp(status=GameStatus.HALFTIME)
        assert describe_factor("time_remaining", FactorScores(time_remaining=0.45), inp) == "halftime"

    def test_lead_change_count(self):
        inp = self._inp(lead_changes=13)
        assert describe_factor("lead_changes", FactorScores(lead_changes=13 / 15), inp) == "13 lead changes"

    @pytest.mark.parametrize("value,expected", [
        (0.75, "major upset brewing"),
        (0.5, "upset in the making"),
        (0.25, "underdog hanging around"),
        (0.1, None),
    ])
    def test_upset(self, value, expected):
        assert describe_factor("upset_likelihood", FactorScores(upset_likelihood=value), self._inp()) == expected

    @pytest.mark.parametrize("home,away,expected", [
        (12, 3, "#3 vs #12 ranked matchup"),
        (4, None, "ranked team at home"),
        (None, 4, "ranked team on the road"),
    ])
    def test_ranked_stakes(self, home, away, expected):
        inp = self._inp(home_team_ranking=home, away_team_ranking=away)
        assert describe_factor("ranked_stakes", FactorScores(ranked_stakes=0.5), inp) == expected

    def test_rank_outside_top_25_is_not_called_ranked(self):
        inp = self._inp(home_team_ranking=5, away_team_ranking=30)
        assert describe_factor("ranked_stakes", FactorScores(ranked_stakes=0.46), inp) == "ranked team at home"

    def test_ranked_phrase_agrees_with_factor(self, config):
        inp = WatchScoreInput(status=GameStatus.SCHEDULED, home_team_ranking=30, away_team_ranking=4)
        result = compute_watch_score(inp, config)
        assert result.factor_scores.ranked_stakes == pytest.approx(0.47)
        assert "#4 vs #30" not in result.explanation
        assert "ranked team on the road" in result.explanation

    def test_ranked_stakes_silent_when_zero(self):
        assert describe_factor("ranked_stakes", FactorScores(), self._inp()) is None

    def test_generic_fallback(self):
        assert build_explanation(FactorScores(), {}, self._inp()) == "Interesting matchup"

    def test_single_phrase_capitalized(self):
        scores = FactorScores(tourney_implications=0.9)
        text = build_explanation(scores, {"tourney_implications": 9.0}, self._inp())
        assert text == "Huge tournament implications"

    def test_only_top_three_considered(self):
        # tourney is fourth by contribution, so it never reaches the sentence
        scores = FactorScores(closeness=0.3, time_remaining=0.2, lead_changes=0.1, tourney_implications=0.9)
        contributions = {"closeness": 9.0, "time_remaining": 4.0, "lead_changes": 1.5,
                         "tourney_implications": 1.0}
        inp = self._inp(home_score=80, away_score=62)
        assert build_explanation(scores, contributions, inp) == "Interesting matchup"

    def test_stops_after_two_phrases(self):
        scores = FactorScores(closeness=1.0, time_remaining=0.95, lead_changes=0.9)
        contributions = {"closeness": 30.0, "time_remaining": 19.0, "lead_changes": 13.5}
        inp = self._inp(lead_changes=14)
        assert build_explanation(scores, contributions, inp) == "Tied game + final minutes"
