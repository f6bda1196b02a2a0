"""
ESPN scoreboard normalizer.

ESPN's scoreboard JSON is undocumented, so every field is read with a
default. Each event is normalized inside its own try/except: one malformed
event is logged and dropped, the rest of the slate survives.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional

import pytz

from ...models.game import CanonicalGame, CanonicalTeam, GameStatus, LiveState
from ...models.stats import Provider
from ._parse import parse_record, safe_float, safe_int

logger = logging.getLogger(__name__)

SCOREBOARD_TIMEZONE = pytz.timezone("America/New_York")
MAX_POLL_RANK = 25


def _get(obj: Any, *path, default=None):
    """Walk nested dicts/lists, returning ``default`` at the first gap."""
    current = obj
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return default
            current = current[key]
        else:
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
    return default if current is None else current


def scoreboard_date(now: Optional[datetime] = None) -> str:
    """Today's calendar date (YYYY-MM-DD) in US Eastern time."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(SCOREBOARD_TIMEZONE).strftime("%Y-%m-%d")


def _status_key(name: str) -> str:
    key = name.strip().lower()
    return key[len("status_"):] if key.startswith("status_") else key


def map_espn_status(state: str, name: str) -> GameStatus:
    """Map ESPN's (state, name) pair onto a GameStatus."""
    key = _status_key(name or "")
    if state == "post":
        return GameStatus.FINAL
    if state == "in":
        return GameStatus.HALFTIME if key == "halftime" else GameStatus.IN_PROGRESS
    if key == "postponed":
        return GameStatus.POSTPONED
    if key in ("cancelled", "canceled"):
        return GameStatus.CANCELLED
    return GameStatus.SCHEDULED


def _find_side(competitors: Any, side: str) -> Optional[dict]:
    if not isinstance(competitors, list):
        return None
    for competitor in competitors:
        if isinstance(competitor, dict) and competitor.get("homeAway") == side:
            return competitor
    return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """ESPN dates look like 2025-03-01T00:00Z (seconds optional)."""
    if not isinstance(value, str) or not value:
        return None
    for fmt in ("%Y-%m-%dT%H:%MZ", "%Y-%m-%dT%H:%M:%SZ"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _normalize_team(competitor: dict) -> CanonicalTeam:
    team = competitor.get("team") or {}

    raw_rank = _get(competitor, "curatedRank", "current", default=team.get("rank"))
    rank = safe_int(raw_rank)
    ranking = rank if 0 < rank <= MAX_POLL_RANK else None

    records = competitor.get("records") or []
    total = next(
        (r for r in records if isinstance(r, dict)
         and (r.get("type") == "total" or r.get("abbreviation") == "Total")),
        records[0] if records else None,
    )
    record = parse_record(total.get("summary")) if isinstance(total, dict) else None

    conference = team.get("conferenceId")
    return CanonicalTeam(
        external_id=str(team.get("id") or ""),
        name=team.get("displayName") or team.get("name") or "Unknown",
        short_name=team.get("shortDisplayName"),
        abbreviation=team.get("abbreviation"),
        logo_url=team.get("logo"),
        ranking=ranking,
        conference=str(conference) if conference is not None else None,
        record=record,
    )


def _normalize_live_state(competition: dict) -> LiveState:
    competitors = competition.get("competitors")
    home = _find_side(competitors, "home") or {}
    away = _find_side(competitors, "away") or {}
    situation = competition.get("situation") or {}

    # ESPN reports 0-100
    raw_prob = _get(situation, "lastPlay", "probability", "homeWinPercentage",
                    default=_get(situation, "probability", "homeWinPercentage"))
    win_prob_pct = _optional_float(raw_prob)
    win_prob_home = win_prob_pct / 100 if win_prob_pct is not None else None

    possession = _get(situation, "possession", "homeAway")
    return LiveState(
        home_score=safe_int(home.get("score")),
        away_score=safe_int(away.get("score")),
        period=safe_int(_get(competition, "status", "period"), default=1) or 1,
        clock_display=_get(competition, "status", "displayClock"),
        lead_changes=safe_int(situation.get("leadChanges")),
        win_prob_home=win_prob_home,
        possession=possession if possession in ("home", "away") else None,
    )


def _extract_tv_network(competition: dict) -> Optional[str]:
    broadcasts = competition.get("broadcasts") or []
    if broadcasts:
        first = broadcasts[0]
        if isinstance(first, str):
            return first
        return _get(first, "names", 0) or _get(first, "market", "shortName")

    geo = competition.get("geoBroadcasts") or []
    if geo:
        return _get(geo[0], "media", "shortName") or _get(geo[0], "media", "name")
    return None


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    result = safe_float(value, default=math.nan)
    return None if math.isnan(result) else result


def _normalize_event(event: dict, game_date: str) -> Optional[CanonicalGame]:
    competition = _get(event, "competitions", 0)
    if not isinstance(competition, dict):
        return None

    home = _find_side(competition.get("competitors"), "home")
    away = _find_side(competition.get("competitors"), "away")
    if home is None or away is None:
        return None

    state = _get(competition, "status", "type", "state", default="pre")
    name = _get(competition, "status", "type", "name", default="")
    status = map_espn_status(state, name)

    odds = _get(competition, "odds", 0, default={})
    return CanonicalGame(
        external_id=str(event.get("id") or ""),
        provider=Provider.ESPN.value,
        game_date=game_date,
        home_team=_normalize_team(home),
        away_team=_normalize_team(away),
        status=status,
        scheduled_at=_parse_timestamp(event.get("date")),
        tv_network=_extract_tv_network(competition),
        live_state=_normalize_live_state(competition) if status.is_live else None,
        spread=_optional_float(odds.get("spread")) if isinstance(odds, dict) else None,
        over_under=_optional_float(odds.get("overUnder")) if isinstance(odds, dict) else None,
    )


def normalize_scoreboard(raw: Any, requested_date: Optional[str] = None) -> List[CanonicalGame]:
    """
    Normalize a scoreboard payload into canonical games.

    Args:
        raw: Decoded scoreboard JSON (``{"events": [...]}``)
        requested_date: Calendar day (YYYY-MM-DD) the scoreboard was queried
            for. Every game is stamped with it rather than with the event's
            UTC timestamp, which rolls evening tip-offs onto the next day.
            Defaults to today in US Eastern time.

    Returns:
        Games in payload order, minus events that could not be normalized
    """
    events = raw.get("events") if isinstance(raw, dict) else None
    if not isinstance(events, list):
        return []

    game_date = requested_date or scoreboard_date()
    games: List[CanonicalGame] = []
    dropped = 0
    for event in events:
        try:
            game = _normalize_event(event, game_date) if isinstance(event, dict) else None
        except Exception as e:
            event_id = event.get("id") if isinstance(event, dict) else None
            logger.warning(f"Dropping ESPN event {event_id}: {e}")
            game = None
        if game is None:
            dropped += 1
            continue
        games.append(game)

    logger.info(f"ESPN: normalized {len(games)} games for {game_date}, dropped {dropped}")
    return games


def normalize_summary_live_state(raw: Any) -> Optional[LiveState]:
    """Live state from a single-game summary payload (``header.competitions[0]``)."""
    competition = _get(raw, "header", "competitions", 0)
    if not isinstance(competition, dict):
        return None
    return _normalize_live_state(competition)
