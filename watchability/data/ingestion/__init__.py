"""Ingestion runs over already-fetched provider payloads."""

from .advanced_stats import (
    AdvancedStatsIngestor,
    IngestionConfig,
    IngestionRun,
    ProviderCounts,
    RunStatus,
)

__all__ = [
    "AdvancedStatsIngestor",
    "IngestionConfig",
    "IngestionRun",
    "ProviderCounts",
    "RunStatus",
]
