"""
Haslametrics ratings normalizer.

``ratings.xml`` holds one self-closing ``<mr>`` element per team with all
values as attributes:

    rk   rank                      oe/de  adjusted off/def efficiency
    t    team name                 ou     pace (possessions per game)
    id   raw numeric id            mom    momentum (mmo / mmd: off / def)
    ap   All-Play, 0-1 fraction    ptf    Paper Tiger Factor
    w/l  wins / losses
"""

import logging
from datetime import date
from typing import List, Optional

from bs4 import BeautifulSoup

from ...models.stats import HaslametricsTeamStats
from ._parse import safe_float, safe_int

logger = logging.getLogger(__name__)


def compute_tid(raw_id: int) -> int:
    """Team capsule id used in haslametrics.com URLs (from ratings.php)."""
    return raw_id * 2 + 23


def normalize_haslametrics(xml: Optional[str], as_of: Optional[date] = None) -> List[HaslametricsTeamStats]:
    """
    Normalize the ratings XML into typed stats.

    Elements without a team name or with a missing/zero id are skipped.
    The All-Play fraction is kept as ``win_expectancy`` and rescaled to a
    0-100 percentage in ``ap_pct``.
    """
    if not isinstance(xml, str) or not xml.strip():
        return []

    soup = BeautifulSoup(xml, "xml")
    results: List[HaslametricsTeamStats] = []
    skipped = 0

    for el in soup.find_all("mr"):
        team_name = (el.get("t") or "").strip()
        raw_id = safe_int(el.get("id"))
        if not team_name or not raw_id:
            logger.debug(f"Skipping Haslametrics element without name/id: {el.attrs}")
            skipped += 1
            continue

        ap = safe_float(el.get("ap"))
        results.append(HaslametricsTeamStats(
            team_name=team_name,
            rank=safe_int(el.get("rk")),
            adj_o=safe_float(el.get("oe")),
            adj_d=safe_float(el.get("de")),
            tempo=safe_float(el.get("ou")),
            win_expectancy=ap,
            wins=safe_int(el.get("w")),
            losses=safe_int(el.get("l")),
            as_of=as_of,
            tid=compute_tid(raw_id),
            ap_pct=ap * 100,
            momentum=safe_float(el.get("mom")),
            momentum_o=safe_float(el.get("mmo")),
            momentum_d=safe_float(el.get("mmd")),
            ptf=safe_float(el.get("ptf")),
        ))

    logger.info(f"Haslametrics: normalized {len(results)} teams, skipped {skipped}")
    return results
