"""
Manual review of fuzzy team-name mappings.

Mappings scored between the match and auto-confirm thresholds are stored
unconfirmed. A reviewer works through them either directly
(``confirm`` / ``override`` / ``suppress``) or through a CSV round trip:

    export_csv()  -> team-mappings.csv + canonical-teams.csv
    (reviewer fills in the correctTeamName column)
    apply_csv()   -> ReviewSummary

correctTeamName rules:
    blank      accept the current match
    SKIP       suppress the name for good (low-major noise)
    team name  redirect to that canonical team (case-insensitive)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..models.team import Team, TeamNameMapping
from .mapping_store import MappingRepository, PersistenceError

logger = logging.getLogger(__name__)

MAPPING_COLUMNS = ["provider", "externalName", "confidence", "currentMatchedTeam", "correctTeamName"]
TEAM_COLUMNS = ["id", "canonicalName", "conference"]
SKIP_TOKEN = "SKIP"


@dataclass
class ReviewSummary:
    """Outcome counts for one applied review file."""

    confirmed: int = 0
    overridden: int = 0
    suppressed: int = 0
    errors: int = 0
    messages: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.confirmed + self.overridden + self.suppressed + self.errors

    def to_dict(self) -> dict:
        return {
            "confirmed": self.confirmed,
            "overridden": self.overridden,
            "suppressed": self.suppressed,
            "errors": self.errors,
        }


class MappingReview:
    """Review operations over a mapping repository and the canonical team list."""

    def __init__(self, repository: MappingRepository, teams: Sequence[Team]):
        self.repository = repository
        self.teams = list(teams)
        self._by_id: Dict[str, Team] = {t.id: t for t in self.teams}
        self._id_by_name: Dict[str, str] = {t.canonical_name.lower(): t.id for t in self.teams}

    def pending(self, provider: Optional[str] = None) -> List[TeamNameMapping]:
        """Unconfirmed mappings, grouped by provider, lowest confidence first."""
        rows = [m for m in self.repository.list_mappings(provider) if not m.is_confirmed]
        return sorted(rows, key=lambda m: (m.provider, m.confidence, m.external_name))

    def unmatched_count(self, provider: Optional[str] = None) -> int:
        return len(self.pending(provider))

    def _require(self, external_name: str, provider: str) -> TeamNameMapping:
        mapping = self.repository.get(external_name, provider)
        if mapping is None:
            raise PersistenceError(f"No mapping for '{external_name}' ({provider})")
        return mapping

    def confirm(self, external_name: str, provider: str,
                when: Optional[datetime] = None) -> TeamNameMapping:
        """Accept the current match."""
        mapping = self._require(external_name, provider).confirm(when or datetime.now(timezone.utc))
        return self.repository.upsert(mapping)

    def override(self, external_name: str, provider: str, new_team_id: str,
                 when: Optional[datetime] = None) -> TeamNameMapping:
        """Redirect a name to a different canonical team."""
        if new_team_id not in self._by_id:
            raise PersistenceError(f"Unknown team id '{new_team_id}'")
        mapping = self._require(external_name, provider).override(
            new_team_id, when or datetime.now(timezone.utc)
        )
        return self.repository.upsert(mapping)

    def suppress(self, external_name: str, provider: str) -> None:
        """Drop the mapping and stop the resolver from ever matching this name."""
        self.repository.suppress(external_name, provider)

    def export_csv(self, mappings_path: str, teams_path: str) -> int:
        """
        Write pending mappings and the canonical team list for review.

        Returns:
            Number of pending mappings exported
        """
        rows = []
        for m in self.pending():
            team = self._by_id.get(m.team_id)
            rows.append({
                "provider": m.provider,
                "externalName": m.external_name,
                "confidence": f"{m.confidence:.3f}",
                "currentMatchedTeam": team.canonical_name if team else m.team_id,
                "correctTeamName": "",
            })
        mappings_df = pd.DataFrame(rows, columns=MAPPING_COLUMNS)
        teams_df = pd.DataFrame(
            [{"id": t.id, "canonicalName": t.canonical_name, "conference": t.conference or ""}
             for t in sorted(self.teams, key=lambda t: t.canonical_name)],
            columns=TEAM_COLUMNS,
        )

        for path, df in ((mappings_path, mappings_df), (teams_path, teams_df)):
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(path, index=False)

        logger.info(f"Exported {len(mappings_df)} pending mappings to {mappings_path}")
        for provider, count in mappings_df.groupby("provider").size().items():
            logger.info(f"  {provider}: {count} pending")
        return len(mappings_df)

    def apply_csv(self, path: str) -> ReviewSummary:
        """Apply a reviewed mappings CSV. Bad rows are counted, not raised."""
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        missing = [c for c in ("provider", "externalName", "correctTeamName") if c not in df.columns]
        if missing:
            raise ValueError(f"{path} is missing columns: {missing}")

        summary = ReviewSummary()
        for row in df.itertuples(index=False):
            provider = row.provider.strip()
            external_name = row.externalName
            correction = row.correctTeamName.strip()
            label = f'{provider} · "{external_name}"'

            try:
                if correction.upper() == SKIP_TOKEN:
                    self.suppress(external_name, provider)
                    summary.suppressed += 1
                    summary.messages.append(f"SKIP     {label}")
                elif not correction:
                    self.confirm(external_name, provider)
                    summary.confirmed += 1
                    summary.messages.append(f"CONFIRM  {label}")
                else:
                    team_id = self._id_by_name.get(correction.lower())
                    if team_id is None:
                        summary.errors += 1
                        summary.messages.append(f'ERROR    {label}: unknown team "{correction}"')
                        continue
                    self.override(external_name, provider, team_id)
                    summary.overridden += 1
                    summary.messages.append(f"OVERRIDE {label} -> {self._by_id[team_id].canonical_name}")
            except PersistenceError as e:
                summary.errors += 1
                summary.messages.append(f"ERROR    {label}: {e}")

        for line in summary.messages:
            logger.debug(line)
        logger.info(
            f"Applied {path}: {summary.confirmed} confirmed, {summary.overridden} overridden, "
            f"{summary.suppressed} suppressed, {summary.errors} errors"
        )
        return summary
