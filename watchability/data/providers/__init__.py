"""Provider payload normalizers (raw payload in, typed records out)."""

from datetime import date
from typing import Any, List, Optional, Union

from ...models.stats import NormalizedTeamStats, Provider
from .espn import normalize_scoreboard, normalize_summary_live_state
from .haslametrics import normalize_haslametrics
from .torvik import normalize_barttorvik


def normalize_stats_payload(
    provider: Union[Provider, str],
    raw: Any,
    as_of: Optional[date] = None,
) -> List[NormalizedTeamStats]:
    """Dispatch an advanced-stats payload to its provider's normalizer."""
    provider = Provider(provider)
    if provider is Provider.BARTTORVIK:
        return normalize_barttorvik(raw, as_of=as_of)
    if provider is Provider.HASLAMETRICS:
        return normalize_haslametrics(raw, as_of=as_of)
    raise ValueError(f"{provider.value} does not publish team efficiency stats")


__all__ = [
    "normalize_barttorvik",
    "normalize_haslametrics",
    "normalize_scoreboard",
    "normalize_stats_payload",
    "normalize_summary_live_state",
]
