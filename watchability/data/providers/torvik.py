"""
BartTorvik T-Rank normalizer.

``team_results.json`` is a list of positional arrays, one per team. Only the
columns below are read; everything else in the row is ignored.
"""

import logging
from datetime import date
from typing import Any, List, Optional

from ...models.stats import BartTorvikTeamStats
from ._parse import parse_record, safe_float, safe_int

logger = logging.getLogger(__name__)

# Column positions in team_results.json. Update here if the layout changes.
COL_TRANK = 0
COL_TEAM_NAME = 1
COL_CONFERENCE = 2
COL_RECORD = 3  # "W-L"
COL_ADJ_O = 4
COL_ADJ_D = 6
COL_BARTHAG = 8  # pythagorean win expectancy, 0-1
COL_WAB = 41  # wins above bubble
COL_ADJ_T = 44  # adjusted tempo, possessions per 40 minutes

MIN_COLUMNS = 45


def normalize_barttorvik(raw: Any, as_of: Optional[date] = None) -> List[BartTorvikTeamStats]:
    """
    Normalize a T-Rank payload into typed stats.

    Rows with fewer than 45 columns or without a team name are skipped. A
    malformed record string keeps the row with a 0-0 record, and numeric
    columns that fail to parse become 0.

    Args:
        raw: Decoded JSON payload (expected: list of lists)
        as_of: Snapshot date stamped on every row

    Returns:
        One BartTorvikTeamStats per usable row, in payload order
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.debug(f"BartTorvik payload is {type(raw).__name__}, expected list")
        return []

    results: List[BartTorvikTeamStats] = []
    skipped = 0
    for idx, row in enumerate(raw):
        if not isinstance(row, (list, tuple)) or len(row) < MIN_COLUMNS:
            logger.debug(f"Skipping BartTorvik row {idx}: not an array of >= {MIN_COLUMNS} columns")
            skipped += 1
            continue

        team_name = row[COL_TEAM_NAME]
        if not isinstance(team_name, str) or not team_name.strip():
            logger.debug(f"Skipping BartTorvik row {idx}: missing team name")
            skipped += 1
            continue

        wins, losses = parse_record(row[COL_RECORD]) or (0, 0)
        conference = row[COL_CONFERENCE]

        results.append(BartTorvikTeamStats(
            team_name=team_name.strip(),
            rank=safe_int(row[COL_TRANK]),
            adj_o=safe_float(row[COL_ADJ_O]),
            adj_d=safe_float(row[COL_ADJ_D]),
            tempo=safe_float(row[COL_ADJ_T]),
            win_expectancy=safe_float(row[COL_BARTHAG]),
            wins=wins,
            losses=losses,
            as_of=as_of,
            conference=conference if isinstance(conference, str) else "",
            wab=safe_float(row[COL_WAB]),
        ))

    logger.info(f"BartTorvik: normalized {len(results)} teams, skipped {skipped}")
    return results
