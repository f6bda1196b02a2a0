"""Team reconciliation, provider normalizers, and stored mappings/stats."""

from .mapping_store import (
    InMemoryMappingRepository,
    JsonMappingRepository,
    MappingRepository,
    PersistenceError,
)
from .normalize import match_score, normalize_team_name
from .stats_store import AdvancedStatsStore
from .team_name_resolver import MatchResult, TeamNameResolver

__all__ = [
    "AdvancedStatsStore",
    "InMemoryMappingRepository",
    "JsonMappingRepository",
    "MappingRepository",
    "MatchResult",
    "PersistenceError",
    "TeamNameResolver",
    "match_score",
    "normalize_team_name",
]
