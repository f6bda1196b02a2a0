"""Tests for the canonical team name reconciler."""

from datetime import datetime, timezone

import pytest

from watchability.data.mapping_store import (
    InMemoryMappingRepository,
    JsonMappingRepository,
    PersistenceError,
)
from watchability.data.team_name_resolver import (
    MatchResult,
    TeamNameResolver,
    best_candidate,
)
from watchability.models.team import MappingStatus, Team, TeamNameMapping


@pytest.fixture
def teams():
    return [
        Team("t1", "North Carolina", aliases=["Tar Heels"]),
        Team("t2", "Duke", aliases=["Blue Devils"]),
        Team("t3", "Texas Tech"),
        Team("t4", "Iowa State", aliases=["Iowa St."]),
        Team("t5", "Iowa"),
    ]


@pytest.fixture
def repo():
    return InMemoryMappingRepository()


@pytest.fixture
def resolver(repo):
    return TeamNameResolver(repo)


class FailingRepository(InMemoryMappingRepository):
    def upsert(self, mapping):
        raise PersistenceError("disk full")


# ---------------------------------------------------------------------------
# Fuzzy resolution and decision policy
# ---------------------------------------------------------------------------


class TestResolve:
    """Tests for TeamNameResolver.resolve()."""

    def test_unc_resolves_to_north_carolina(self, resolver):
        result = resolver.resolve(
            "UNC", "espn", [Team("t1", "North Carolina", aliases=["Tar Heels"])]
        )
        assert result.team_id == "t1"
        assert result.confidence >= 0.85
        assert result.resolved

    def test_alias_match(self, resolver, teams):
        result = resolver.resolve("Tar Heels", "espn", teams)
        assert result.team_id == "t1"
        assert result.confidence == 1.0
        assert result.method == "fuzzy"

    def test_trailing_st(self, resolver, teams):
        result = resolver.resolve("Iowa St", "barttorvik", teams)
        assert result.team_id == "t4"

    def test_single_word_does_not_steal_compound(self, resolver, teams):
        result = resolver.resolve("Iowa", "barttorvik", teams)
        assert result.team_id == "t5"

    def test_high_confidence_is_auto_confirmed(self, resolver, repo, teams):
        resolver.resolve("Duke", "haslametrics", teams)
        mapping = repo.get("Duke", "haslametrics")
        assert mapping.status == MappingStatus.AUTO_CONFIRMED
        assert mapping.confirmed_at is not None
        assert mapping.team_id == "t2"

    def test_mid_confidence_stored_unconfirmed(self, resolver, repo, teams):
        result = resolver.resolve("Texas Tech Red Raiders", "espn", teams)
        assert result.team_id == "t3"
        assert 0.80 <= result.confidence < 0.95

        mapping = repo.get("Texas Tech Red Raiders", "espn")
        assert mapping.status == MappingStatus.UNCONFIRMED
        assert mapping.confirmed_at is None

    def test_low_confidence_is_unresolved_and_not_stored(self, resolver, repo, teams):
        result = resolver.resolve("Mississippi Valley State", "barttorvik", teams)
        assert not result.resolved
        assert result.method == "unresolved"
        assert result.confidence < 0.80
        assert repo.get("Mississippi Valley State", "barttorvik") is None

    def test_unresolved_logged(self, resolver, teams, caplog):
        with caplog.at_level("WARNING"):
            resolver.resolve("Alcorn State", "barttorvik", teams)
        assert "Alcorn State" in caplog.text

    def test_empty_name(self, resolver, teams):
        result = resolver.resolve("   ", "espn", teams)
        assert result == MatchResult(None, 0.0, "empty")

    def test_no_candidates(self, resolver):
        result = resolver.resolve("Duke", "espn", [])
        assert not result.resolved


class TestCacheAndSuppression:
    """Cached mappings short-circuit scoring; suppressed names never resolve."""

    def test_cached_mapping_returned_without_rescoring(self, teams):
        cached = TeamNameMapping("Heels", "espn", "t1", 0.83)
        resolver = TeamNameResolver(InMemoryMappingRepository([cached]))

        result = resolver.resolve("Heels", "espn", [])
        assert result.team_id == "t1"
        assert result.confidence == 0.83
        assert result.method == "cached"

    def test_cache_is_per_provider(self, resolver, repo, teams):
        repo.upsert(TeamNameMapping("Duke", "espn", "t1", 0.9))
        assert resolver.resolve("Duke", "espn", teams).team_id == "t1"
        assert resolver.resolve("Duke", "barttorvik", teams).team_id == "t2"

    def test_second_resolve_hits_cache(self, resolver, teams):
        first = resolver.resolve("Blue Devils", "espn", teams)
        second = resolver.resolve("Blue Devils", "espn", teams)
        assert first.method == "fuzzy"
        assert second.method == "cached"
        assert second.team_id == first.team_id

    def test_suppressed_name_not_resolved(self, resolver, repo, teams):
        repo.suppress("Duke", "espn")
        result = resolver.resolve("Duke", "espn", teams)
        assert not result.resolved
        assert result.method == "suppressed"
        assert repo.get("Duke", "espn") is None


# ---------------------------------------------------------------------------
# Determinism, failures, batch
# ---------------------------------------------------------------------------


def test_tie_break_is_independent_of_candidate_order():
    zeta = Team("z", "Zeta College", aliases=["Shared Name"])
    alpha = Team("a", "Alpha College", aliases=["Shared Name"])

    forward, score_f = best_candidate("Shared Name", [zeta, alpha])
    backward, score_b = best_candidate("Shared Name", [alpha, zeta])
    assert forward.id == backward.id == "a"
    assert score_f == score_b == 1.0


def test_persistence_failure_propagates(teams):
    resolver = TeamNameResolver(FailingRepository())
    with pytest.raises(PersistenceError):
        resolver.resolve("Duke", "espn", teams)


def test_retry_after_failed_write_is_not_cached(tmp_path, teams):
    path = tmp_path / "mappings.json"
    resolver = TeamNameResolver(JsonMappingRepository(str(path)))
    path.mkdir()

    for _ in range(2):
        with pytest.raises(PersistenceError):
            resolver.resolve("UNC", "espn", teams)
    assert resolver.repository.get("UNC", "espn") is None

    path.rmdir()
    result = resolver.resolve("UNC", "espn", teams)
    assert result.team_id == "t1"
    assert result.method == "fuzzy"
    assert path.is_file()


def test_unresolved_does_not_touch_failing_store(teams):
    resolver = TeamNameResolver(FailingRepository())
    assert not resolver.resolve("Nowhere A&M", "espn", teams).resolved


def test_invalid_thresholds():
    with pytest.raises(ValueError):
        TeamNameResolver(InMemoryMappingRepository(), match_threshold=0.9, auto_confirm_threshold=0.8)


def test_resolve_batch_keeps_order(resolver, teams):
    names = ["Duke", "UNC", "Nowhere A&M", "Texas Tech"]
    results = resolver.resolve_batch(names, "espn", teams, max_workers=4)
    assert [r.team_id for r in results] == ["t2", "t1", None, "t3"]


def test_confirmed_at_is_timezone_aware(resolver, repo, teams):
    resolver.resolve("Duke", "espn", teams)
    confirmed_at = repo.get("Duke", "espn").confirmed_at
    assert confirmed_at.tzinfo is not None
    assert confirmed_at <= datetime.now(timezone.utc)
