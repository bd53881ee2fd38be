"""Command-line interface for generating rosters from a catalog CSV."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path

from fantaelite.allocator import (
    CatalogInsufficientError,
    allocate,
    allocate_pair,
    cheapest_composition,
)
from fantaelite.catalog import build_catalog
from fantaelite.config import build_spec, iter_strategies, load_settings
from fantaelite.config_loader import HeaderProfile
from fantaelite.ingest import DEFAULT_HEADER_SYNONYMS, SchemaError, load_rows_csv, normalize_rows
from fantaelite.report import export_rosters_to_csv, missing_prices, summarize_result


def _parse_args() -> argparse.Namespace:
    modes = ", ".join(strategy.name for strategy in iter_strategies())
    parser = argparse.ArgumentParser(description="Generate fantasy football rosters from a catalog CSV")
    parser.add_argument("catalog", type=Path, help="Path to the catalog CSV")
    parser.add_argument("--mode", default="equilibrata", help=f"Strategy mode ({modes})")
    parser.add_argument("--budget-min", type=float, default=None, help="Minimum total credits")
    parser.add_argument("--budget-max", type=float, default=None, help="Maximum total credits")
    parser.add_argument("--seed", default=None, help="Seed string for reproducible rosters")
    parser.add_argument("--delimiter", default=None, help="CSV delimiter (sniffed when omitted)")
    parser.add_argument(
        "--paired",
        action="store_true",
        help="Build a second roster that differs from the first",
    )
    parser.add_argument(
        "--min-distinct",
        type=float,
        default=0.6,
        help="Minimum fraction of the second roster not shared with the first (0-1)",
    )
    parser.add_argument(
        "--cheapest",
        action="store_true",
        help="Skip the randomized search and take the cheapest candidates per role",
    )
    parser.add_argument("--header-profile", type=Path, default=None, help="Load header synonyms JSON")
    parser.add_argument("--save-profile", type=Path, default=None, help="Save header synonyms JSON")
    parser.add_argument("--output", type=Path, default=Path("roster.csv"), help="Output CSV path")
    parser.add_argument("--report", type=Path, default=None, help="Optional path to write summary JSON")
    parser.add_argument("--verbose", action="store_true", help="Log allocator progress")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    settings = load_settings()

    synonyms = DEFAULT_HEADER_SYNONYMS
    if args.header_profile:
        synonyms = HeaderProfile.load(args.header_profile).merged_with(DEFAULT_HEADER_SYNONYMS)
    if args.save_profile:
        HeaderProfile(synonyms).save(args.save_profile)
        print(f"Saved header profile to {args.save_profile}")

    headers, rows = load_rows_csv(args.catalog, delimiter=args.delimiter)
    try:
        normalized = normalize_rows(rows, headers=headers, synonyms=synonyms)
    except SchemaError as exc:
        raise SystemExit(f"Catalog schema error: {exc}") from exc
    report = normalized.report
    print(f"Loaded {report.accepted}/{report.total_rows} candidates from {args.catalog}")
    if report.dropped:
        reasons = ", ".join(f"{reason}={count}" for reason, count in report.dropped_by_reason.items() if count)
        print(f"Dropped {report.dropped} rows ({reasons})")

    catalog = build_catalog(normalized.candidates)
    try:
        spec = build_spec(args.mode, budget_min=args.budget_min, budget_max=args.budget_max, seed=args.seed)
    except (KeyError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc

    try:
        if args.paired:
            spec_b = dataclasses.replace(spec, seed=f"{spec.seed}/b")
            first, second = allocate_pair(
                catalog,
                spec,
                spec_b,
                args.min_distinct,
                max_tries=settings.max_tries,
                top_k=settings.top_k,
            )
            results = [(first, spec), (second, spec_b)]
        elif args.cheapest:
            results = [(cheapest_composition(catalog, spec), spec)]
        else:
            results = [(allocate(catalog, spec, max_tries=settings.max_tries, top_k=settings.top_k), spec)]
    except CatalogInsufficientError as exc:
        raise SystemExit(f"Catalog too small: {exc}") from exc
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    args.output.write_text(
        export_rosters_to_csv([result for result, _ in results]),
        encoding="utf-8",
    )
    print(f"Wrote {len(results)} roster(s) to {args.output}")

    payload = []
    for result, result_spec in results:
        summary = summarize_result(result, result_spec)
        unpriced = missing_prices(result)
        print(
            f"Roster seed={result.seed} total={summary.total:g} "
            f"tolerance={result.satisfied_tolerance.value} fallback={result.fallback.value if result.fallback else '-'}"
        )
        entry = {
            "seed": result.seed,
            "mode": result_spec.mode,
            "satisfied_tolerance": result.satisfied_tolerance.value,
            "used_fallback": result.used_fallback,
            "attempts": result.attempts,
            "summary": dataclasses.asdict(summary),
            "missing_prices": [
                {"role": record.role.value, "name": record.name, "team": record.team}
                for record in unpriced
            ],
        }
        if unpriced:
            print("Warning: no price for " + ", ".join(record.name for record in unpriced))
        if result.diversity is not None:
            entry["diversity"] = dataclasses.asdict(result.diversity)
            if not result.diversity.satisfied:
                print(
                    f"Second roster shares {result.diversity.overlap} players "
                    f"({result.diversity.overlap_fraction:.0%}); diversity not achieved"
                )
        payload.append(entry)

    if args.report:
        args.report.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote summary report to {args.report}")


if __name__ == "__main__":
    main()
