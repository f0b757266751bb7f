"""Command line entry point.

Usage:
    python -m doubles seed-courts
    python -m doubles rankings --export rankings.xlsx
    python -m doubles pairings --mode ranked --sets 3 --date 2025-05-10 --courts 1,2
    python -m doubles pairings --game 4
    python -m doubles audit --type ERROR --export audit.txt
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Sequence

from doubles.db.database import get_connection
from doubles.domain.pairing import PAIRING_MODES
from doubles.services.audit_log import EVENT_TYPES, EXPORT_FILE, AuditLogService
from doubles.services.export_service import ExportService, pairing_rows, ranking_rows
from doubles.services.pairings import PairingService
from doubles.services.rankings import recalculate_rankings
from doubles.services.roster import RosterService
from doubles.settings import get_db_path


def _parse_ids(value: str) -> list[int]:
    try:
        return [int(item) for item in value.split(",") if item.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid id list: {value}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doubles",
        description="Doubles match scheduler: rankings and court pairings",
    )
    parser.add_argument("--db", default=None, help="SQLite database path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("seed-courts", help="Create the allowed courts")

    rankings = subparsers.add_parser("rankings", help="Recompute and print rankings")
    rankings.add_argument("--export", default=None, help="Write rankings to an xlsx file")

    pairings = subparsers.add_parser("pairings", help="Generate court pairings")
    pairings.add_argument("--mode", choices=PAIRING_MODES, default=None)
    pairings.add_argument("--sets", type=int, default=None, help="Sets per match")
    pairings.add_argument("--date", default=None, help="Game date (YYYY-MM-DD)")
    pairings.add_argument("--courts", type=_parse_ids, default=None, help="Comma separated court ids")
    pairings.add_argument("--game", type=int, default=None, help="Pair the players of a stored game")
    pairings.add_argument("--seed", type=int, default=None, help="Random seed for random mode")
    pairings.add_argument("--export", default=None, help="Write pairings to an xlsx file")

    audit = subparsers.add_parser("audit", help="Show the audit log")
    audit.add_argument("--type", dest="event_type", choices=EVENT_TYPES, default=None)
    audit.add_argument("--query", default="", help="Search in titles and details")
    audit.add_argument("--limit", type=int, default=20)
    audit.add_argument("--export", default=None, help="Write matching events to a text file")
    return parser


def _print_rows(columns: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
    print(" | ".join(columns))
    for row in rows:
        print(" | ".join("" if value is None else str(value) for value in row))


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    connection = get_connection(args.db or get_db_path())
    audit_log = AuditLogService(connection)
    exporter = ExportService()
    try:
        if args.command == "seed-courts":
            created = RosterService(connection).seed_default_courts()
            print(f"Courts created: {len(created)}")
        elif args.command == "rankings":
            report = recalculate_rankings(connection=connection)
            for warning in report.warnings:
                print(f"warning: {warning}", file=sys.stderr)
            _print_rows(
                ["Place", "Player", "Points", "GP", "GW", "SP", "SW"],
                ranking_rows(report.rankings),
            )
            if args.export:
                path = exporter.export_rankings_xlsx(args.export, report.rankings)
                audit_log.log_event(EXPORT_FILE, "Rankings exported", str(path))
        elif args.command == "pairings":
            service = PairingService(
                connection, rng=random.Random(args.seed) if args.seed is not None else None
            )
            if args.game is not None:
                plan = service.generate_for_game(args.game, mode=args.mode)
            else:
                plan = service.generate(
                    mode=args.mode,
                    sets=args.sets,
                    game_date=args.date,
                    selected_court_ids=args.courts,
                )
            _print_rows(["Court", "Pair 1", "Pair 2", "Sets", "Date"], pairing_rows(plan.pairings))
            for player in plan.waiting:
                print(f"waiting: {player.display_name}")
            if args.export:
                path = exporter.export_pairings_xlsx(args.export, plan.pairings)
                audit_log.log_event(EXPORT_FILE, "Pairings exported", str(path))
        elif args.command == "audit":
            for event in audit_log.list_events(args.event_type, args.query, limit=args.limit):
                print(event.format_line())
            if args.export:
                path = audit_log.export_txt(args.export, args.event_type, args.query)
                print(f"Audit log written to {path}")
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        connection.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
