"""
Dated advanced-stats snapshots, attached to canonical teams.

One snapshot exists per (team_id, provider, as_of); writing the same key
again replaces it. The store is a plain in-memory index with JSON
save/load so the CLI can carry it between runs.
"""

import json
import logging
import threading
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..models.stats import NormalizedTeamStats, Provider, stats_from_dict

logger = logging.getLogger(__name__)

SnapshotKey = Tuple[str, Provider, date]


class AdvancedStatsStore:
    """Advanced stats keyed by canonical team id, provider and snapshot date."""

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshots: Dict[SnapshotKey, NormalizedTeamStats] = {}

    def __len__(self) -> int:
        return len(self._snapshots)

    def upsert(self, team_id: str, stats: NormalizedTeamStats) -> SnapshotKey:
        """Insert or replace one snapshot. ``stats`` must carry provider and as_of."""
        if stats.provider is None or stats.as_of is None:
            raise ValueError(f"Snapshot for {team_id} needs a provider and an as_of date")
        key = (team_id, Provider(stats.provider), stats.as_of)
        with self._lock:
            self._snapshots[key] = stats
        return key

    def get(self, team_id: str, provider: Provider, as_of: date) -> Optional[NormalizedTeamStats]:
        return self._snapshots.get((team_id, Provider(provider), as_of))

    def latest(self, team_id: str, provider: Provider) -> Optional[NormalizedTeamStats]:
        """Most recent snapshot for a team from one provider."""
        provider = Provider(provider)
        with self._lock:
            dated = [
                (as_of, stats)
                for (tid, prov, as_of), stats in self._snapshots.items()
                if tid == team_id and prov is provider
            ]
        if not dated:
            return None
        return max(dated, key=lambda item: item[0])[1]

    def history(self, team_id: str, provider: Provider) -> List[NormalizedTeamStats]:
        """All snapshots for a team from one provider, oldest first."""
        provider = Provider(provider)
        with self._lock:
            rows = [
                (as_of, stats)
                for (tid, prov, as_of), stats in self._snapshots.items()
                if tid == team_id and prov is provider
            ]
        return [stats for _, stats in sorted(rows, key=lambda item: item[0])]

    def team_ids(self) -> List[str]:
        with self._lock:
            return sorted({key[0] for key in self._snapshots})

    def save(self, path: str) -> None:
        """Write every snapshot to a JSON file."""
        with self._lock:
            rows = [
                {"team_id": team_id, "stats": stats.to_dict()}
                for (team_id, _, _), stats in sorted(
                    self._snapshots.items(),
                    key=lambda item: (item[0][0], item[0][1].value, item[0][2]),
                )
            ]
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, 'w') as f:
            json.dump({"snapshots": rows}, f, indent=2)
        logger.info(f"Saved {len(rows)} stats snapshots to {out}")

    @classmethod
    def load(cls, path: str) -> "AdvancedStatsStore":
        """Load a store written by ``save``; a missing file yields an empty store."""
        store = cls()
        src = Path(path)
        if not src.exists():
            return store
        with open(src, 'r') as f:
            data = json.load(f)
        for row in data.get("snapshots", []):
            store.upsert(row["team_id"], stats_from_dict(row["stats"]))
        logger.debug(f"Loaded {len(store)} stats snapshots from {src}")
        return store
