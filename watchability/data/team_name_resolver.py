"""
Canonical team identity resolution across data providers.

College basketball has no universal team ID. The same school shows up as:

  ESPN:          "North Carolina Tar Heels"
  BartTorvik:    "North Carolina"
  Haslametrics:  "North Carolina"
  Box scores:    "UNC"

`TeamNameResolver` maps any provider's name to a canonical `Team`:

1. Suppressed names (rejected during review) resolve to nothing, forever
2. A cached mapping for (external_name, provider) is returned as-is
3. Otherwise every candidate's canonical name and aliases are scored with
   `match_score`, and the best team wins
4. Scores below 0.80 are unresolved and nothing is stored; 0.80-0.95 are
   stored unconfirmed for review; 0.95 and up are stored auto-confirmed

An unresolved name is a normal outcome (providers list hundreds of
low-major programs outside the canonical set), so it is returned, not
raised. Only mapping-store failures raise, as `PersistenceError`.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models.team import MappingStatus, Team, TeamNameMapping
from .mapping_store import MappingRepository, PersistenceError
from .normalize import match_score

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.80
AUTO_CONFIRM_THRESHOLD = 0.95


@dataclass(frozen=True)
class MatchResult:
    """Result of a team name resolution attempt."""

    team_id: Optional[str]
    confidence: float  # 0.0 to 1.0
    method: str  # "cached", "fuzzy", "unresolved", "suppressed", "empty"

    @property
    def resolved(self) -> bool:
        return self.team_id is not None

    @classmethod
    def not_found(cls, confidence: float = 0.0, method: str = "unresolved") -> "MatchResult":
        return cls(team_id=None, confidence=confidence, method=method)


def _tie_break_key(team: Team) -> Tuple[str, str]:
    return (team.canonical_name.casefold(), team.id)


def best_candidate(external_name: str, candidates: Iterable[Team]) -> Tuple[Optional[Team], float]:
    """
    Score a name against every candidate and return (best_team, score).

    Each team scores the max over its canonical name and aliases. Equal
    scores are broken by canonical name, then id, so the winner does not
    depend on the order the directory returned the candidates in.
    """
    best_team: Optional[Team] = None
    best_score = 0.0
    for team in candidates:
        score = max(match_score(external_name, name) for name in team.names)
        if best_team is None or score > best_score:
            best_team, best_score = team, score
        elif score == best_score and _tie_break_key(team) < _tie_break_key(best_team):
            best_team = team
    return best_team, best_score


class TeamNameResolver:
    """
    Resolves provider team names to canonical team ids, caching the result.

    The mapping cache is read-then-written without a transaction: two
    concurrent resolutions of the same unseen name both score the candidates
    and the last write wins. For a stable candidate list both computations
    pick the same team.
    """

    def __init__(
        self,
        repository: MappingRepository,
        match_threshold: float = MATCH_THRESHOLD,
        auto_confirm_threshold: float = AUTO_CONFIRM_THRESHOLD,
    ):
        if not 0.0 <= match_threshold <= auto_confirm_threshold <= 1.0:
            raise ValueError(
                f"Thresholds must satisfy 0 <= match ({match_threshold}) "
                f"<= auto-confirm ({auto_confirm_threshold}) <= 1"
            )
        self.repository = repository
        self.match_threshold = match_threshold
        self.auto_confirm_threshold = auto_confirm_threshold

    def resolve(self, external_name: str, provider: str, candidates: Sequence[Team]) -> MatchResult:
        """
        Resolve one provider name to a canonical team.

        Args:
            external_name: Team name exactly as the provider spells it
            provider: Provider tag (cache namespace), e.g. "espn"
            candidates: Canonical teams, ideally in a stable order

        Returns:
            MatchResult; ``result.resolved`` is False when no team qualifies

        Raises:
            PersistenceError: the mapping could not be written
        """
        if not external_name or not external_name.strip():
            return MatchResult.not_found(method="empty")

        if self.repository.is_suppressed(external_name, provider):
            return MatchResult.not_found(method="suppressed")

        existing = self.repository.get(external_name, provider)
        if existing is not None:
            return MatchResult(existing.team_id, existing.confidence, "cached")

        team, score = best_candidate(external_name, candidates)
        if team is None or score < self.match_threshold:
            logger.warning(
                f"No match (score<{self.match_threshold}) for '{external_name}' ({provider}); "
                f"best score {score:.3f}"
            )
            return MatchResult.not_found(confidence=score)

        self._persist(external_name, provider, team, score)
        return MatchResult(team.id, score, "fuzzy")

    def _persist(self, external_name: str, provider: str, team: Team, score: float) -> None:
        auto = score >= self.auto_confirm_threshold
        try:
            mapping = TeamNameMapping(
                external_name=external_name,
                provider=provider,
                team_id=team.id,
                confidence=score,
                status=MappingStatus.AUTO_CONFIRMED if auto else MappingStatus.UNCONFIRMED,
                confirmed_at=datetime.now(timezone.utc) if auto else None,
            )
        except ValueError as exc:
            raise PersistenceError(f"Malformed mapping for '{external_name}' ({provider}): {exc}") from exc

        try:
            self.repository.upsert(mapping)
        except PersistenceError:
            logger.error(f"Failed to persist mapping '{external_name}' ({provider}) -> {team.id}")
            raise

        logger.info(
            f"Mapped '{external_name}' ({provider}) -> {team.canonical_name} "
            f"[{score:.3f}, {mapping.status.value}]"
        )

    def resolve_batch(
        self,
        names: Sequence[str],
        provider: str,
        candidates: Sequence[Team],
        max_workers: int = 8,
    ) -> List[MatchResult]:
        """
        Resolve many names concurrently. Results keep the order of ``names``.

        ``max_workers`` bounds concurrent access to the mapping store. A
        PersistenceError for any name propagates once all work is submitted.
        """
        if not names:
            return []
        candidates = list(candidates)
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            return list(executor.map(lambda n: self.resolve(n, provider, candidates), names))
