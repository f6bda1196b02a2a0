"""Persistence for cached team-name mappings.

The resolver only needs ``get`` and ``upsert``; the review workflow also
lists, deletes and suppresses names. Both implementations here are
thread-safe so a batch of names can be resolved concurrently.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from ..models.team import TeamNameMapping

logger = logging.getLogger(__name__)

MappingKey = Tuple[str, str]


class PersistenceError(RuntimeError):
    """Raised when a mapping write fails or the operation is malformed."""


class MappingRepository(ABC):
    """Store of (external_name, provider) → team mappings."""

    @abstractmethod
    def get(self, external_name: str, provider: str) -> Optional[TeamNameMapping]:
        """Return the cached mapping, or None."""

    @abstractmethod
    def upsert(self, mapping: TeamNameMapping) -> TeamNameMapping:
        """Insert or replace the mapping for ``mapping.key``."""

    @abstractmethod
    def delete(self, external_name: str, provider: str) -> bool:
        """Remove a mapping. Returns False when nothing was stored."""

    @abstractmethod
    def list_mappings(self, provider: Optional[str] = None) -> List[TeamNameMapping]:
        """All stored mappings, optionally limited to one provider."""

    @abstractmethod
    def suppress(self, external_name: str, provider: str) -> None:
        """Delete the mapping and never resolve this name again."""

    @abstractmethod
    def is_suppressed(self, external_name: str, provider: str) -> bool:
        """True if the name was suppressed through review."""


def _check_mapping(mapping) -> None:
    if not isinstance(mapping, TeamNameMapping):
        raise PersistenceError(f"Expected TeamNameMapping, got {type(mapping).__name__}")


class InMemoryMappingRepository(MappingRepository):
    """Dictionary-backed repository, used in tests and short-lived runs."""

    def __init__(self, mappings: Optional[List[TeamNameMapping]] = None):
        self._lock = threading.RLock()
        self._mappings: Dict[MappingKey, TeamNameMapping] = {}
        self._suppressed: Set[MappingKey] = set()
        for mapping in mappings or []:
            self._mappings[mapping.key] = mapping

    def get(self, external_name: str, provider: str) -> Optional[TeamNameMapping]:
        with self._lock:
            return self._mappings.get((external_name, provider))

    def upsert(self, mapping: TeamNameMapping) -> TeamNameMapping:
        _check_mapping(mapping)
        with self._lock:
            self._mappings[mapping.key] = mapping
        return mapping

    def delete(self, external_name: str, provider: str) -> bool:
        with self._lock:
            return self._mappings.pop((external_name, provider), None) is not None

    def list_mappings(self, provider: Optional[str] = None) -> List[TeamNameMapping]:
        with self._lock:
            mappings = list(self._mappings.values())
        if provider:
            mappings = [m for m in mappings if m.provider == provider]
        return mappings

    def suppress(self, external_name: str, provider: str) -> None:
        with self._lock:
            self._mappings.pop((external_name, provider), None)
            self._suppressed.add((external_name, provider))

    def is_suppressed(self, external_name: str, provider: str) -> bool:
        with self._lock:
            return (external_name, provider) in self._suppressed

    @property
    def suppressed(self) -> Set[MappingKey]:
        with self._lock:
            return set(self._suppressed)


class JsonMappingRepository(InMemoryMappingRepository):
    """
    Repository persisted to a single JSON file.

    The whole file is rewritten after every change. File layout::

        {
            "mappings": [{"external_name": ..., "provider": ..., ...}],
            "suppressed": [["Some Low-Major", "barttorvik"]]
        }
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Mapping file {self.path} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise PersistenceError(f"Could not read mappings from {self.path}: {exc}") from exc

        try:
            for row in data.get("mappings", []):
                mapping = TeamNameMapping.from_dict(row)
                self._mappings[mapping.key] = mapping
            for name, provider in data.get("suppressed", []):
                self._suppressed.add((name, provider))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Mapping file {self.path} is malformed: {exc!r}") from exc
        logger.debug(f"Loaded {len(self._mappings)} mappings from {self.path}")

    def _flush(self) -> None:
        payload = {
            "mappings": [m.to_dict() for m in self._mappings.values()],
            "suppressed": sorted([list(k) for k in self._suppressed]),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(payload, f, indent=2)
        except (OSError, TypeError) as exc:
            raise PersistenceError(f"Could not write mappings to {self.path}: {exc}") from exc

    def _flush_or_rollback(self, mappings: Dict[MappingKey, TeamNameMapping], suppressed: Set[MappingKey]) -> None:
        # A failed write leaves memory as it was before the change
        try:
            self._flush()
        except PersistenceError:
            self._mappings = mappings
            self._suppressed = suppressed
            raise

    def upsert(self, mapping: TeamNameMapping) -> TeamNameMapping:
        with self._lock:
            previous = (dict(self._mappings), set(self._suppressed))
            super().upsert(mapping)
            self._flush_or_rollback(*previous)
        return mapping

    def delete(self, external_name: str, provider: str) -> bool:
        with self._lock:
            previous = (dict(self._mappings), set(self._suppressed))
            removed = super().delete(external_name, provider)
            if removed:
                self._flush_or_rollback(*previous)
        return removed

    def suppress(self, external_name: str, provider: str) -> None:
        with self._lock:
            previous = (dict(self._mappings), set(self._suppressed))
            super().suppress(external_name, provider)
            self._flush_or_rollback(*previous)
