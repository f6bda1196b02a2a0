"""Command line interface for the college basketball watchability ranker."""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import ConfigError, load_config
from .data.ingestion import AdvancedStatsIngestor, IngestionConfig
from .data.mapping_store import JsonMappingRepository, PersistenceError
from .data.providers import normalize_scoreboard
from .data.review import MappingReview
from .data.stats_store import AdvancedStatsStore
from .data.team_name_resolver import TeamNameResolver
from .models.game import CanonicalGame
from .models.stats import NormalizedTeamStats, Provider
from .models.team import Team
from .watchscore.slate import SORT_KEYS, score_game, sort_games

logger = logging.getLogger(__name__)

# Provider preference when attaching stats to a scheduled game
STATS_PREFERENCE = (Provider.BARTTORVIK, Provider.HASLAMETRICS)


def load_teams(path: str) -> List[Team]:
    """Canonical teams from a JSON list (or ``{"teams": [...]}``)."""
    with open(path, 'r') as f:
        data = json.load(f)
    rows = data.get("teams", []) if isinstance(data, dict) else data
    teams = [Team.from_dict(row) for row in rows]
    return sorted(teams, key=lambda t: (t.canonical_name.casefold(), t.id))


def _load_json(path: str):
    with open(path, 'r') as f:
        return json.load(f)


def _stats_pair(
    store: AdvancedStatsStore, home_id: Optional[str], away_id: Optional[str]
) -> Tuple[Optional[NormalizedTeamStats], Optional[NormalizedTeamStats]]:
    """Latest stats for both teams from the first provider that covers both."""
    if not home_id or not away_id:
        return None, None
    for provider in STATS_PREFERENCE:
        home = store.latest(home_id, provider)
        away = store.latest(away_id, provider)
        if home is not None and away is not None:
            return home, away
    return None, None


def rank_games(args):
    """Score a saved scoreboard payload and print the ranked slate."""
    try:
        config = load_config(args.config)
    except (ConfigError, OSError) as e:
        print(f"Error loading config: {e}")
        return 1

    games: List[CanonicalGame] = normalize_scoreboard(_load_json(args.scoreboard), requested_date=args.date)
    if not games:
        print(f"No games found in {args.scoreboard}")
        return 1

    resolver = None
    teams: List[Team] = []
    store = AdvancedStatsStore()
    if args.teams and args.mappings:
        teams = load_teams(args.teams)
        try:
            resolver = TeamNameResolver(JsonMappingRepository(args.mappings))
        except PersistenceError as e:
            print(f"Error: {e}")
            return 1
        if args.stats:
            store = AdvancedStatsStore.load(args.stats)

    scored = []
    for game in games:
        home_stats = away_stats = None
        if resolver is not None:
            try:
                home = resolver.resolve(game.home_team.name, Provider.ESPN.value, teams)
                away = resolver.resolve(game.away_team.name, Provider.ESPN.value, teams)
            except PersistenceError as e:
                print(f"Error saving team mapping: {e}")
                return 1
            home_stats, away_stats = _stats_pair(store, home.team_id, away.team_id)
        scored.append(score_game(game, config, home_stats, away_stats))

    ranked = sort_games(scored, args.sort)

    print(f"\n{'='*72}")
    print(f"WATCHABILITY - {games[0].game_date} (model {config.model_version}, sorted by {args.sort})")
    print(f"{'='*72}\n")
    for item in ranked:
        game = item.game
        matchup = f"{_label(game.away_team)} @ {_label(game.home_team)}"
        line = f"{item.watch_score.score:>3}  {game.status.value:<11} {matchup}"
        if game.live_state:
            line += f"  [{game.live_state.away_score}-{game.live_state.home_score}]"
        print(line)
        if item.pregame and item.pregame.home_score:
            print(f"      projected {item.pregame.away_score}-{item.pregame.home_score}, thrill {item.pregame.thrill_score}")
        print(f"      {item.watch_score.explanation}")

    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as f:
            json.dump([item.to_dict() for item in ranked], f, indent=2)
        print(f"\nSaved ranked slate to {args.output}")
    return 0


def _label(team) -> str:
    return f"#{team.ranking} {team.name}" if team.ranking else team.name


def ingest_stats(args):
    """Normalize saved advanced-stats payloads and attach them to canonical teams."""
    payloads: Dict[Provider, object] = {}
    if args.torvik:
        payloads[Provider.BARTTORVIK] = _load_json(args.torvik)
    if args.haslametrics:
        payloads[Provider.HASLAMETRICS] = Path(args.haslametrics).read_text(encoding="utf-8")
    if not payloads:
        print("Error: pass at least one of --torvik / --haslametrics")
        return 1

    teams = load_teams(args.teams)
    try:
        repository = JsonMappingRepository(args.mappings)
    except PersistenceError as e:
        print(f"Error: {e}")
        return 1
    store = AdvancedStatsStore.load(args.stats)
    ingestor = AdvancedStatsIngestor(
        TeamNameResolver(repository),
        store,
        IngestionConfig(max_workers=args.workers),
    )

    as_of = date.fromisoformat(args.as_of) if args.as_of else None
    run = ingestor.run(payloads, teams, as_of=as_of)
    store.save(args.stats)

    for line in run.logs:
        print(line)
    if args.run_log:
        with open(args.run_log, 'w') as f:
            json.dump(run.to_dict(), f, indent=2)
    print(f"✓ {run.status.value}: {run.summary}")
    return 0


def export_mappings(args):
    """Write pending (unconfirmed) mappings to CSV for manual review."""
    try:
        review = MappingReview(JsonMappingRepository(args.mappings), load_teams(args.teams))
    except PersistenceError as e:
        print(f"Error: {e}")
        return 1
    count = review.export_csv(args.output, args.teams_output)
    print(f"✓ Exported {count} unconfirmed mappings -> {args.output}")
    print(f"✓ Exported canonical team list -> {args.teams_output}")
    print('\nFill in "correctTeamName": blank = accept, team name = override, SKIP = suppress.')
    return 0


def apply_mappings(args):
    """Apply a reviewed mappings CSV."""
    if not Path(args.input).exists():
        print(f"Error: {args.input} not found. Run export-mappings first.")
        return 1
    try:
        review = MappingReview(JsonMappingRepository(args.mappings), load_teams(args.teams))
        summary = review.apply_csv(args.input)
    except (PersistenceError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    for line in summary.messages:
        print(f"  {line}")
    print(
        f"\n✓ {summary.confirmed} confirmed, {summary.overridden} overridden, "
        f"{summary.suppressed} skipped, {summary.errors} errors"
    )
    return 0 if summary.errors == 0 else 1


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="College basketball watchability - rank games by how worth watching they are"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Rank command
    rank_parser = subparsers.add_parser("rank", help="Rank a saved scoreboard payload")
    rank_parser.add_argument("--scoreboard", "-s", required=True, help="Scoreboard JSON file")
    rank_parser.add_argument("--date", help="Calendar day the scoreboard was fetched for (YYYY-MM-DD)")
    rank_parser.add_argument("--config", "-c", help="Watch score config JSON (default: $WATCHSCORE_CONFIG or built-in)")
    rank_parser.add_argument("--teams", help="Canonical teams JSON (enables pregame projections)")
    rank_parser.add_argument("--mappings", help="Team name mapping JSON file")
    rank_parser.add_argument("--stats", help="Advanced stats store JSON file")
    rank_parser.add_argument(
        "--sort",
        choices=list(SORT_KEYS),
        default="watch_score",
        help="Ordering within each status group (default: watch_score)"
    )
    rank_parser.add_argument("--output", "-o", help="Write the ranked slate to this JSON file")

    # Ingest command
    ingest_parser = subparsers.add_parser("ingest-stats", help="Ingest saved advanced-stats payloads")
    ingest_parser.add_argument("--teams", required=True, help="Canonical teams JSON")
    ingest_parser.add_argument("--torvik", help="BartTorvik team_results.json")
    ingest_parser.add_argument("--haslametrics", help="Haslametrics ratings.xml")
    ingest_parser.add_argument("--mappings", required=True, help="Team name mapping JSON file")
    ingest_parser.add_argument("--stats", required=True, help="Advanced stats store JSON file")
    ingest_parser.add_argument("--as-of", help="Snapshot date (YYYY-MM-DD, default: today)")
    ingest_parser.add_argument("--workers", type=int, default=8, help="Concurrent name resolutions (default: 8)")
    ingest_parser.add_argument("--run-log", help="Write the ingestion run record to this JSON file")

    # Review commands
    export_parser = subparsers.add_parser("export-mappings", help="Export unconfirmed mappings for review")
    export_parser.add_argument("--teams", required=True, help="Canonical teams JSON")
    export_parser.add_argument("--mappings", required=True, help="Team name mapping JSON file")
    export_parser.add_argument("--output", "-o", default="team-mappings.csv")
    export_parser.add_argument("--teams-output", default="canonical-teams.csv")

    apply_parser = subparsers.add_parser("apply-mappings", help="Apply a reviewed mappings CSV")
    apply_parser.add_argument("--teams", required=True, help="Canonical teams JSON")
    apply_parser.add_argument("--mappings", required=True, help="Team name mapping JSON file")
    apply_parser.add_argument("--input", "-i", default="team-mappings.csv")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "rank":
        return rank_games(args)
    elif args.command == "ingest-stats":
        return ingest_stats(args)
    elif args.command == "export-mappings":
        return export_mappings(args)
    elif args.command == "apply-mappings":
        return apply_mappings(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
