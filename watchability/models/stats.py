"""Provider-neutral efficiency snapshots produced by the normalizers."""

from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Optional


class Provider(str, Enum):
    """Data provider tag, also used as the mapping-cache namespace."""

    ESPN = "espn"
    BARTTORVIK = "barttorvik"
    HASLAMETRICS = "haslametrics"


@dataclass(frozen=True)
class NormalizedTeamStats:
    """
    A dated snapshot of one team's efficiency metrics from one provider.

    Efficiency values are points per 100 possessions; ``win_expectancy`` is a
    0-1 index of how often the team would beat an average opponent.
    """

    team_name: str
    rank: int
    adj_o: float
    adj_d: float
    tempo: float
    win_expectancy: float
    wins: int = 0
    losses: int = 0
    as_of: Optional[date] = None
    provider: Optional[Provider] = None

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["provider"] = self.provider.value if self.provider else None
        data["as_of"] = self.as_of.isoformat() if self.as_of else None
        return data


@dataclass(frozen=True)
class BartTorvikTeamStats(NormalizedTeamStats):
    """T-Rank row. ``win_expectancy`` carries barthag."""

    provider: Provider = Provider.BARTTORVIK
    conference: str = ""
    wab: float = 0.0  # wins above bubble

    @property
    def trank(self) -> int:
        return self.rank

    @property
    def barthag(self) -> float:
        return self.win_expectancy


@dataclass(frozen=True)
class HaslametricsTeamStats(NormalizedTeamStats):
    """Haslametrics ratings row. ``win_expectancy`` carries the All-Play fraction."""

    provider: Provider = Provider.HASLAMETRICS
    tid: int = 0  # team capsule id used in haslametrics.com URLs
    ap_pct: float = 0.0  # All-Play %, 0-100
    momentum: float = 0.0
    momentum_o: float = 0.0
    momentum_d: float = 0.0
    ptf: float = 0.0  # Paper Tiger Factor

    @property
    def pace(self) -> float:
        return self.tempo


def stats_from_dict(data: dict) -> NormalizedTeamStats:
    """Rebuild a snapshot from ``to_dict`` output, picking the provider subclass."""
    payload = dict(data)
    raw_provider = payload.pop("provider", None)
    provider = Provider(raw_provider) if raw_provider else None
    as_of = payload.get("as_of")
    payload["as_of"] = date.fromisoformat(as_of) if as_of else None
    cls = {
        Provider.BARTTORVIK: BartTorvikTeamStats,
        Provider.HASLAMETRICS: HaslametricsTeamStats,
    }.get(provider, NormalizedTeamStats)
    known = {f for f in cls.__dataclass_fields__}
    kwargs = {k: v for k, v in payload.items() if k in known}
    if provider is not None:
        kwargs["provider"] = provider
    return cls(**kwargs)
