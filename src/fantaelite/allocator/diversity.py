"""Paired roster generation with a minimum-distinctness requirement."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Tuple

from fantaelite.catalog import Catalog, PriorityIndex, build_priority_index
from fantaelite.config import AllocationSpec
from fantaelite.config.settings import MAX_TRIES, TOP_K
from fantaelite.models import ROLE_ORDER

from .service import (
    AllocationResult,
    DiversityReport,
    Roster,
    allocate,
    cheapest_composition,
)


logger = logging.getLogger(__name__)

BUDGET_WIDENING = 40.0

_OVERLAP_EPSILON = 1e-9


def roster_overlap(first: Roster, second: Roster) -> int:
    """Number of candidate names present in both rosters."""

    return len(first.names() & second.names())


def widen_budget(spec: AllocationSpec, amount: float = BUDGET_WIDENING) -> AllocationSpec:
    return dataclasses.replace(
        spec,
        budget_min=max(0.0, spec.budget_min - amount),
        budget_max=spec.budget_max + amount,
    )


def _report(
    first: Roster,
    second: Roster,
    *,
    max_overlap_fraction: float,
    budget_widened: bool,
    attempts: int,
) -> DiversityReport:
    overlap = roster_overlap(first, second)
    size = max(second.size, 1)
    fraction = overlap / size
    return DiversityReport(
        overlap=overlap,
        overlap_fraction=fraction,
        max_overlap_fraction=max_overlap_fraction,
        satisfied=fraction <= max_overlap_fraction + _OVERLAP_EPSILON,
        budget_widened=budget_widened,
        attempts=attempts,
    )


def _search(
    catalog: Catalog,
    first: AllocationResult,
    spec: AllocationSpec,
    *,
    seed_prefix: str,
    max_overlap_fraction: float,
    max_tries: int,
    top_k: int,
    budget_widened: bool,
    attempts_so_far: int,
) -> Tuple[Optional[AllocationResult], int]:
    attempts = attempts_so_far
    for n in range(max_tries):
        attempts += 1
        candidate_spec = dataclasses.replace(spec, seed=f"{spec.seed}#{seed_prefix}{n}")
        result = allocate(catalog, candidate_spec, max_tries=max_tries, top_k=top_k)
        report = _report(
            first.roster,
            result.roster,
            max_overlap_fraction=max_overlap_fraction,
            budget_widened=budget_widened,
            attempts=attempts,
        )
        if report.satisfied:
            return dataclasses.replace(result, diversity=report), attempts
    return None, attempts


def minimum_overlap(first: Roster, index: PriorityIndex, spec: AllocationSpec) -> int:
    """Fewest names any roster drawn from ``index`` under ``spec`` must share with ``first``.

    Per role, only the top-K candidates not already in ``first`` are fresh;
    a quota larger than that forces the remainder to be shared.
    """

    shared = 0
    for role in ROLE_ORDER:
        quota = spec.role_quota.get(role, 0)
        if quota <= 0:
            continue
        view = {record.name for record in index.view(role)}
        taken = view & {record.name for record in first.slots.get(role, ())}
        shared += max(0, quota - (len(view) - len(taken)))
    return shared


def _cheapest_fallback(
    catalog: Catalog,
    first: AllocationResult,
    spec: AllocationSpec,
    *,
    max_overlap_fraction: float,
    budget_widened: bool,
    attempts: int,
) -> AllocationResult:
    fallback = cheapest_composition(catalog, spec)
    report = _report(
        first.roster,
        fallback.roster,
        max_overlap_fraction=max_overlap_fraction,
        budget_widened=budget_widened,
        attempts=attempts,
    )
    return dataclasses.replace(fallback, diversity=report)


def allocate_pair(
    catalog: Catalog,
    spec_a: AllocationSpec,
    spec_b: AllocationSpec,
    min_distinct_fraction: float = 0.6,
    *,
    max_tries: int = MAX_TRIES,
    top_k: int = TOP_K,
    budget_widening: float = BUDGET_WIDENING,
) -> Tuple[AllocationResult, AllocationResult]:
    """Build two rosters sharing at most ``1 - min_distinct_fraction`` of names.

    The second roster is searched over fresh seeds, then once more with a
    widened budget window, and finally replaced by the cheapest composition.
    When the top-K pools are too small for the bound to be reachable at all,
    both searches are skipped. The second roster's ``diversity`` report says
    whether the overlap bound was met.
    """

    if not 0.0 <= min_distinct_fraction <= 1.0:
        raise ValueError(f"min_distinct_fraction must be within [0, 1], got {min_distinct_fraction}")
    max_overlap_fraction = 1.0 - min_distinct_fraction
    max_tries = max(1, max_tries)

    first = allocate(catalog, spec_a, max_tries=max_tries, top_k=top_k)

    floor = minimum_overlap(first.roster, build_priority_index(catalog, k=top_k), spec_b)
    size = max(spec_b.roster_size, 1)
    if floor / size > max_overlap_fraction + _OVERLAP_EPSILON:
        logger.info(
            "Diversity bound %.2f unreachable (at least %s/%s shared); skipping seed search",
            max_overlap_fraction,
            floor,
            size,
        )
        return first, _cheapest_fallback(
            catalog,
            first,
            spec_b,
            max_overlap_fraction=max_overlap_fraction,
            budget_widened=False,
            attempts=0,
        )

    second, attempts = _search(
        catalog,
        first,
        spec_b,
        seed_prefix="",
        max_overlap_fraction=max_overlap_fraction,
        max_tries=max_tries,
        top_k=top_k,
        budget_widened=False,
        attempts_so_far=0,
    )
    if second is not None:
        return first, second

    widened = widen_budget(spec_b, budget_widening)
    logger.info(
        "No diverse roster after %s seeds; widening budget to %.1f–%.1f",
        attempts,
        widened.budget_min,
        widened.budget_max,
    )
    second, attempts = _search(
        catalog,
        first,
        widened,
        seed_prefix="w",
        max_overlap_fraction=max_overlap_fraction,
        max_tries=max_tries,
        top_k=top_k,
        budget_widened=True,
        attempts_so_far=attempts,
    )
    if second is not None:
        return first, second

    logger.warning(
        "Diversity bound %.2f not met after %s seeds; using cheapest composition",
        max_overlap_fraction,
        attempts,
    )
    return first, _cheapest_fallback(
        catalog,
        first,
        spec_b,
        max_overlap_fraction=max_overlap_fraction,
        budget_widened=True,
        attempts=attempts,
    )
