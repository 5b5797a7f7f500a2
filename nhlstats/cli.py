"""Command line entrypoint: print the schedule for one or more dates."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from datetime import date, datetime

from nhlstats.entities import Game, Schedule
from nhlstats.session import Session
from nhlstats.settings import Params
from nhlstats.status import BASIC, FULL, MINIMAL, Detail

DETAIL_LEVELS: dict[str, frozenset[Detail]] = {
    "minimal": MINIMAL,
    "basic": BASIC,
    "full": FULL,
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show NHL games for the given dates.",
    )
    parser.add_argument(
        "--date",
        dest="dates",
        action="append",
        type=_parse_date,
        help="Date in YYYY-MM-DD format. May be repeated; defaults to today.",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Never contact the stats API; use cached data only.",
    )
    parser.add_argument(
        "--cache-file",
        type=str,
        help="SQLite file used as the persistent cache (default: in memory).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every URL that is fetched or skipped.",
    )
    parser.add_argument(
        "--detail",
        choices=sorted(DETAIL_LEVELS),
        default="basic",
        help="How much of each game to resolve.",
    )
    return parser.parse_args(argv)


def _parse_date(raw: str) -> date:
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date {raw!r}: use YYYY-MM-DD") from exc


def _build_params(args: argparse.Namespace) -> Params:
    params = Params.from_env()
    overrides: dict[str, object] = {}
    if args.offline:
        overrides["offline"] = True
    if args.verbose:
        overrides["verbose"] = True
    if args.cache_file:
        overrides["cache_file"] = args.cache_file
    return replace(params, **overrides)


def _team_label(team, team_id: int | None) -> str:
    if team is not None:
        return team.abbreviation or team.team_name or str(team.unique_id)
    return str(team_id) if team_id is not None else "TBD"


def format_game(game: Game) -> str:
    start = game.start_time.strftime("%H:%MZ") if game.start_time else "--:--"
    away = _team_label(game.away, game.away_team_id)
    home = _team_label(game.home, game.home_team_id)
    line = f"{start}  {away:>4} {game.away_score if game.away_score is not None else '-'}"
    line += f" - {game.home_score if game.home_score is not None else '-'} {home:<4}"
    if game.status is not None and game.status.detailed_state:
        line += f"  {game.status.detailed_state}"
    if game.goals:
        line += f"  ({len(game.goals)} goals)"
    return line


def format_schedule(day: date, schedule: Schedule | None) -> list[str]:
    lines = [day.isoformat()]
    if schedule is None:
        lines.append("  no schedule available")
        return lines
    if not schedule.games:
        lines.append(f"  {schedule.total_games} games")
        return lines
    lines.extend(f"  {format_game(game)}" for game in schedule.games)
    return lines


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args(argv)
    params = _build_params(args)
    detail = DETAIL_LEVELS[args.detail]
    dates = args.dates or [date.today()]

    exit_code = 0
    with Session(params) as session:
        with session.batch():
            for day in dates:
                fetched = session.get_schedule(day, detail)
                log = logging.warning if fetched.has_errors else logging.info
                log(
                    "Schedule date=%s outcome=%s status=%s",
                    day,
                    fetched.outcome.value,
                    fetched.status,
                )
                for line in format_schedule(day, fetched.value):
                    print(line)
                if not fetched.ok:
                    exit_code = 1
                session.release(fetched.value)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
