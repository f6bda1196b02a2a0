"""Advanced-stats ingestion: normalize, reconcile, store."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ...models.stats import NormalizedTeamStats, Provider
from ...models.team import Team
from ..mapping_store import PersistenceError
from ..providers import normalize_stats_payload
from ..stats_store import AdvancedStatsStore
from ..team_name_resolver import MatchResult, TeamNameResolver

logger = logging.getLogger(__name__)


@dataclass
class IngestionConfig:
    max_workers: int = 8
    # ~36-40% unmatched is normal: providers list every D1 program, the
    # canonical set does not. Above this the feed itself is suspect.
    partial_unmatched_ratio: float = 0.45


class RunStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"


@dataclass
class ProviderCounts:
    parsed: int = 0
    upserted: int = 0
    unmatched: int = 0
    errors: int = 0
    unmatched_names: List[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.upserted + self.unmatched + self.errors


@dataclass
class IngestionRun:
    """Per-run record of what was ingested; mirrors an admin "agent run" row."""

    as_of: date
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    status: RunStatus = RunStatus.SUCCESS
    counts: Dict[Provider, ProviderCounts] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    summary: str = ""

    def log(self, message: str) -> None:
        stamp = datetime.now(timezone.utc).isoformat()
        self.logs.append(f"[{stamp}] {message}")
        logger.info(message)

    @property
    def total_upserted(self) -> int:
        return sum(c.upserted for c in self.counts.values())

    @property
    def total_unmatched(self) -> int:
        return sum(c.unmatched for c in self.counts.values())

    @property
    def total_errors(self) -> int:
        return sum(c.errors for c in self.counts.values())

    @property
    def unmatched_ratio(self) -> float:
        attempted = sum(c.attempted for c in self.counts.values())
        return self.total_unmatched / attempted if attempted else 0.0

    def to_dict(self) -> dict:
        return {
            "as_of": self.as_of.isoformat(),
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "status": self.status.value,
            "summary": self.summary,
            "counts": {
                p.value: {
                    "parsed": c.parsed,
                    "upserted": c.upserted,
                    "unmatched": c.unmatched,
                    "errors": c.errors,
                }
                for p, c in self.counts.items()
            },
            "logs": list(self.logs),
        }


class AdvancedStatsIngestor:
    """Runs provider payloads through normalization, reconciliation and storage."""

    def __init__(
        self,
        resolver: TeamNameResolver,
        store: AdvancedStatsStore,
        config: Optional[IngestionConfig] = None,
    ):
        self.resolver = resolver
        self.store = store
        self.config = config or IngestionConfig()

    def run(
        self,
        payloads: Mapping[Provider, Any],
        candidates: Sequence[Team],
        as_of: Optional[date] = None,
    ) -> IngestionRun:
        """
        Ingest one payload per provider.

        Args:
            payloads: Raw payload per provider (T-Rank array, Haslametrics XML)
            candidates: Canonical teams to reconcile against
            as_of: Snapshot date; defaults to today (UTC)

        Returns:
            IngestionRun. Item-level failures are recorded on the run, not raised.
        """
        as_of = as_of or datetime.now(timezone.utc).date()
        run = IngestionRun(as_of=as_of)
        candidates = list(candidates)
        run.log(f"Loaded {len(candidates)} canonical teams for matching.")

        for provider, raw in payloads.items():
            provider = Provider(provider)
            rows = normalize_stats_payload(provider, raw, as_of=as_of)
            counts = ProviderCounts(parsed=len(rows))
            run.counts[provider] = counts
            run.log(f"Parsed {len(rows)} {provider.value} entries.")
            self._ingest_rows(provider, rows, candidates, counts, run)
            run.log(
                f"{provider.value} done: {counts.upserted} upserted, "
                f"{counts.unmatched} unmatched, {counts.errors} errors."
            )

        ratio = run.unmatched_ratio
        if ratio > self.config.partial_unmatched_ratio or run.total_errors:
            run.status = RunStatus.PARTIAL
        parts = [
            f"{p.value}: {c.upserted} upserted / {c.unmatched} unmatched"
            for p, c in run.counts.items()
        ]
        run.summary = f"{', '.join(parts)}. {round(ratio * 100)}% unmatched."
        if run.total_errors:
            run.summary += f" {run.total_errors} errors."
        run.completed_at = datetime.now(timezone.utc)
        run.log(f"{run.status.value}: {run.summary}")
        return run

    def _resolve(self, provider: Provider, row: NormalizedTeamStats,
                 candidates: List[Team]) -> Tuple[NormalizedTeamStats, Optional[MatchResult], Optional[str]]:
        try:
            return row, self.resolver.resolve(row.team_name, provider.value, candidates), None
        except PersistenceError as e:
            return row, None, str(e)

    def _ingest_rows(
        self,
        provider: Provider,
        rows: List[NormalizedTeamStats],
        candidates: List[Team],
        counts: ProviderCounts,
        run: IngestionRun,
    ) -> None:
        if not rows:
            return
        workers = max(1, self.config.max_workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(lambda r: self._resolve(provider, r, candidates), rows))

        for row, match, error in outcomes:
            if error is not None:
                counts.errors += 1
                run.log(f"ERROR resolving '{row.team_name}' ({provider.value}): {error}")
                continue
            if not match.resolved:
                counts.unmatched += 1
                counts.unmatched_names.append(row.team_name)
                continue
            self.store.upsert(match.team_id, row)
            counts.upserted += 1
