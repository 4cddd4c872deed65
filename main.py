import argparse
import dataclasses
import json
import logging
import sys
from datetime import date
from typing import Any, Optional, Sequence

import pendulum

from energy_league.activities.errors import LeagueError
from energy_league.database import start_db
from energy_league.database.db_manager import DBManager
from energy_league.league import League
from energy_league.utils.env import get_settings, load_env
from energy_league.utils.logs import setup_logging

logger = logging.getLogger(__name__)


def parse_day(raw: str) -> date:
    try:
        return pendulum.parse(raw, strict=False).date()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f'not a date: {raw!r}') from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='energy-league')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('migrate', help='Create the schema and run pending migrations')
    sub.add_parser('rankings', help='Print team rankings as JSON')

    participants = sub.add_parser(
        'participants', help='Print participant rankings of one event as JSON'
    )
    participants.add_argument('event_id', type=int)

    regularity = sub.add_parser('regularity', help='Print team regularity as JSON')
    regularity.add_argument('--today', type=parse_day, default=None)

    heatmap = sub.add_parser('heatmap', help='Print a team activity heatmap as JSON')
    heatmap.add_argument('team_id', type=int)
    heatmap.add_argument('--days', type=int, default=90)
    heatmap.add_argument('--today', type=parse_day, default=None)
    return parser


def to_json(rows: Sequence[Any]) -> str:
    return json.dumps([dataclasses.asdict(r) for r in rows], default=str, indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_env()
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == 'migrate':
        with DBManager() as db:
            start_db.run(db)
        return 0

    league = League.from_postgres(settings)
    try:
        if args.command == 'rankings':
            print(to_json(league.get_team_rankings()))
        elif args.command == 'participants':
            print(to_json(league.get_participant_rankings(args.event_id)))
        elif args.command == 'regularity':
            print(to_json(league.get_team_regularity(args.today)))
        elif args.command == 'heatmap':
            print(to_json(league.get_team_heatmap(args.team_id, args.days, args.today)))
    except LeagueError as e:
        logger.error(f'{e.kind}: {e.message}')
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1
    finally:
        DBManager.close_pool()
    return 0


if __name__ == '__main__':
    sys.exit(main())
