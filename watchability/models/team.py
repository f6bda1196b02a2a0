"""Canonical team identity and cached name mappings."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class Team:
    """A canonical team, independent of any provider's naming."""

    id: str
    canonical_name: str
    aliases: Tuple[str, ...] = ()
    conference: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Team id must be non-empty")
        if not self.canonical_name:
            raise ValueError(f"Team {self.id} has no canonical name")
        # Accept any iterable of aliases but store an immutable tuple
        object.__setattr__(self, "aliases", tuple(self.aliases or ()))

    @property
    def names(self) -> Tuple[str, ...]:
        """Canonical name followed by every alias."""
        return (self.canonical_name,) + self.aliases

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "canonical_name": self.canonical_name,
            "aliases": list(self.aliases),
            "conference": self.conference,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Team":
        """Build from either snake_case or camelCase keys."""
        return cls(
            id=str(data["id"]),
            canonical_name=data.get("canonical_name") or data.get("canonicalName") or "",
            aliases=tuple(data.get("aliases") or ()),
            conference=data.get("conference"),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MappingStatus(str, Enum):
    UNCONFIRMED = "unconfirmed"
    AUTO_CONFIRMED = "auto_confirmed"
    CONFIRMED = "confirmed"
    OVERRIDDEN = "overridden"


@dataclass(frozen=True)
class TeamNameMapping:
    """
    Cached resolution of one (external_name, provider) pair to a team.

    Mappings are immutable; review transitions return a new instance
    which the caller writes back through the repository.
    """

    external_name: str
    provider: str
    team_id: str
    confidence: float
    status: MappingStatus = MappingStatus.UNCONFIRMED
    confirmed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.external_name or not self.provider:
            raise ValueError("Mapping requires a non-empty external name and provider")
        if not self.team_id:
            raise ValueError(f"Mapping for '{self.external_name}' has no team id")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0 and 1, got {self.confidence}")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.external_name, self.provider)

    @property
    def is_confirmed(self) -> bool:
        return self.confirmed_at is not None

    def confirm(self, when: Optional[datetime] = None) -> "TeamNameMapping":
        """Accept the current match."""
        return replace(
            self,
            status=MappingStatus.CONFIRMED,
            confirmed_at=when or _utcnow(),
        )

    def override(self, team_id: str, when: Optional[datetime] = None) -> "TeamNameMapping":
        """Redirect to a different team; a human decision counts as full confidence."""
        return replace(
            self,
            team_id=team_id,
            confidence=1.0,
            status=MappingStatus.OVERRIDDEN,
            confirmed_at=when or _utcnow(),
        )

    def to_dict(self) -> dict:
        return {
            "external_name": self.external_name,
            "provider": self.provider,
            "team_id": self.team_id,
            "confidence": self.confidence,
            "status": self.status.value,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TeamNameMapping":
        confirmed_at = data.get("confirmed_at")
        created_at = data.get("created_at")
        return cls(
            external_name=data["external_name"],
            provider=data["provider"],
            team_id=data["team_id"],
            confidence=float(data["confidence"]),
            status=MappingStatus(data.get("status", MappingStatus.UNCONFIRMED.value)),
            confirmed_at=datetime.fromisoformat(confirmed_at) if confirmed_at else None,
            created_at=datetime.fromisoformat(created_at) if created_at else _utcnow(),
        )
