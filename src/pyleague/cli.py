"""Command-line interface for squad points and league maintenance."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from pyleague.config_loader import LeagueProfile
from pyleague.ledger.audit import audit_squad
from pyleague.ledger.points import compute_squad_points
from pyleague.models.squad import Squad
from pyleague.persistence import SquadStore
from pyleague.service import TransferService, banked_warn_ratio, default_squad_size


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Squad points ledger tools")
    sub = parser.add_subparsers(dest="command", required=True)

    points = sub.add_parser("points", help="Compute points for a squad JSON document")
    points.add_argument("squad", type=Path, help="Path to squad JSON")
    points.add_argument("--squad-size", type=int, default=None, help="Main squad size (default from league or env)")
    points.add_argument("--league", type=Path, default=None, help="League profile JSON supplying the squad size")

    audit = sub.add_parser("audit", help="Audit a squad JSON document for data problems")
    audit.add_argument("squad", type=Path, help="Path to squad JSON")
    audit.add_argument("--squad-size", type=int, default=None, help="Main squad size (default from league or env)")
    audit.add_argument("--league", type=Path, default=None, help="League profile JSON supplying the squad size")

    recalc = sub.add_parser("recalculate", help="Recalculate every squad in a stored league")
    recalc.add_argument("league_id", help="League id")
    recalc.add_argument("--db", type=Path, default=None, help="SQLite database path")

    load = sub.add_parser("load-league", help="Store league settings from a profile JSON")
    load.add_argument("profile", type=Path, help="League profile JSON")
    load.add_argument("--db", type=Path, default=None, help="SQLite database path")

    return parser.parse_args(argv)


def _load_squad(path: Path) -> Squad:
    return Squad.model_validate(json.loads(path.read_text(encoding="utf-8")))


def _resolve_squad_size(args: argparse.Namespace) -> int:
    if args.squad_size is not None:
        return max(1, args.squad_size)
    if args.league is not None:
        return LeagueProfile.load(args.league).settings.squad_size
    return default_squad_size()


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.command == "points":
        squad = _load_squad(args.squad)
        points = compute_squad_points(squad, _resolve_squad_size(args))
        print(json.dumps({"squadId": squad.id, **points.as_dict(), "bankedPoints": squad.banked_points}, indent=2))
        return 0

    if args.command == "audit":
        squad = _load_squad(args.squad)
        result = audit_squad(squad, _resolve_squad_size(args), banked_warn_ratio=banked_warn_ratio())
        print(json.dumps(result.to_dict(), indent=2))
        return 1 if result.severity == "critical" else 0

    store = SquadStore(args.db)

    if args.command == "load-league":
        profile = LeagueProfile.load(args.profile)
        store.save_league(profile.settings)
        print(f"Saved league {profile.settings.id} ({profile.settings.name or 'unnamed'})")
        return 0

    try:
        squads = TransferService(store).recalculate_league(args.league_id)
    except KeyError as exc:
        print(f"Unknown league or pool: {exc.args[0]}")
        return 2
    for squad in squads:
        print(f"{squad.id}\t{squad.squad_name}\t{squad.total_points:.2f}")
    print(f"Recalculated {len(squads)} squads in league {args.league_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
