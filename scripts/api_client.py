"""Lightweight REST client for the fantaelite API."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

import httpx


def _print_roster(label: str, roster: dict) -> None:
    summary = roster["summary"]
    print(
        f"{label}: total={summary['total']} tolerance={roster['satisfied_tolerance']} "
        f"fallback={roster['fallback'] or '-'} seed={roster['seed']}"
    )
    for player in roster["players"]:
        print(f"  {player['role']}  {player['name']:<24} {player['team']:<12} {player['price']:>6}")
    if roster.get("diversity"):
        print("  diversity:", json.dumps(roster["diversity"]))
    unpriced = roster.get("warnings", {}).get("missing_prices", [])
    if unpriced:
        print("  no price for:", ", ".join(player["name"] for player in unpriced))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the fantaelite REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--api-key", default=os.getenv("FANTAELITE_API_KEY"), help="Bearer API key")
    parser.add_argument("--mode", default="equilibrata", help="Strategy mode")
    parser.add_argument("--budget-min", type=float, default=0.0, help="Minimum total credits")
    parser.add_argument("--budget-max", type=float, default=1000.0, help="Maximum total credits")
    parser.add_argument("--seed", default=None, help="Seed for reproducible rosters")
    parser.add_argument("--paired", action="store_true", help="Request two diverse rosters")
    parser.add_argument("--cheapest", action="store_true", help="Request the cheapest composition")
    parser.add_argument("--preview", type=Path, help="Upload a catalog CSV and print its normalization report")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON response")
    args = parser.parse_args()

    if not args.api_key:
        raise SystemExit("An API key is required (--api-key or FANTAELITE_API_KEY)")
    headers = {"Authorization": f"Bearer {args.api_key}"}

    with httpx.Client(base_url=args.base_url, headers=headers, timeout=60.0) as client:
        if args.preview:
            files = {"catalog": (args.preview.name, args.preview.read_bytes(), "text/csv")}
            resp = client.post("/api/catalog/preview", files=files)
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        body = {
            "mode": args.mode,
            "budgetMin": args.budget_min,
            "budgetMax": args.budget_max,
            "seed": args.seed,
            "paired": args.paired,
            "cheapest": args.cheapest,
        }
        resp = client.post("/api/generate", json=body)
        if resp.status_code >= 400:
            raise SystemExit(f"Request failed ({resp.status_code}): {resp.text}")
        payload = resp.json()

    if args.json:
        print(json.dumps(payload, indent=2))
        return
    _print_roster("Roster", payload["roster"])
    if payload.get("second_roster"):
        _print_roster("Second roster", payload["second_roster"])


if __name__ == "__main__":
    main()
