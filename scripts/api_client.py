"""Lightweight REST client for the pyleague API."""

from __future__ import annotations

import argparse
import json

import httpx


def _print_response(resp: httpx.Response, what: str) -> None:
    if resp.status_code == 404:
        raise SystemExit(f"{what} not found")
    if resp.status_code == 409:
        body = resp.json()
        raise SystemExit(f"{body.get('kind')}: {body.get('detail')}")
    resp.raise_for_status()
    print(json.dumps(resp.json(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pyleague REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--squad", metavar="SQUAD_ID", help="Squad to operate on")
    parser.add_argument("--league", metavar="LEAGUE_ID", help="League to operate on")
    parser.add_argument("--points", action="store_true", help="Show live points for --squad")
    parser.add_argument(
        "--transfer",
        metavar="JSON",
        help='Submit a transfer for --squad, e.g. \'{"transfer_type": "bench", "change_type": "playerSubstitution", ...}\'',
    )
    parser.add_argument("--reverse", type=int, metavar="INDEX", help="Reverse the transfer at INDEX for --squad")
    parser.add_argument("--recalculate", action="store_true", help="Recalculate --squad or every squad in --league")
    parser.add_argument("--audit", action="store_true", help="Audit every squad in --league")
    args = parser.parse_args()

    if not args.squad and not args.league:
        raise SystemExit("--squad or --league is required")

    with httpx.Client(base_url=args.base_url) as client:
        if args.squad:
            if args.transfer:
                try:
                    payload = json.loads(args.transfer)
                except json.JSONDecodeError as exc:
                    raise SystemExit(f"Invalid transfer JSON: {exc}") from exc
                _print_response(client.post(f"/squads/{args.squad}/transfers", json=payload), f"squad {args.squad}")
            if args.reverse is not None:
                _print_response(
                    client.post(f"/squads/{args.squad}/transfers/{args.reverse}/reverse"),
                    f"squad {args.squad}",
                )
            if args.recalculate:
                _print_response(client.post(f"/squads/{args.squad}/recalculate"), f"squad {args.squad}")
            if args.points:
                _print_response(client.get(f"/squads/{args.squad}/points"), f"squad {args.squad}")
        if args.league:
            if args.recalculate:
                _print_response(client.post(f"/leagues/{args.league}/recalculate"), f"league {args.league}")
            if args.audit:
                _print_response(client.get(f"/leagues/{args.league}/audit"), f"league {args.league}")


if __name__ == "__main__":
    main()
