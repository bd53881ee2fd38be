"""Randomized constrained roster allocation with tolerance escalation."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

from fantaelite.catalog import Catalog, PriorityIndex, build_priority_index
from fantaelite.config import AllocationSpec
from fantaelite.config.settings import MAX_TRIES, TOP_K
from fantaelite.models import ROLE_ORDER, CandidateRecord, Role

from .rng import Randomizer


logger = logging.getLogger(__name__)

_BAND_EPSILON = 1e-9

BUDGET_PENALTY_WEIGHT = 10.0
SHARE_PENALTY_WEIGHT = 1000.0


class Tolerance(str, Enum):
    STRICT = "strict"
    RELAXED_2PCT = "relaxed_2pct"
    RELAXED_5PCT = "relaxed_5pct"
    NONE = "none"


TOLERANCE_LADDER: Tuple[Tuple[Tolerance, float], ...] = (
    (Tolerance.STRICT, 0.0),
    (Tolerance.RELAXED_2PCT, 0.02),
    (Tolerance.RELAXED_5PCT, 0.05),
)


class FallbackKind(str, Enum):
    PENALTY = "penalty"
    CHEAPEST = "cheapest"


class CatalogInsufficientError(RuntimeError):
    """Raised when a role bucket cannot fill its quota."""

    def __init__(self, role: Role, available: int, required: int):
        self.role = role
        self.available = available
        self.required = required
        super().__init__(
            f"Role {role.value} has {available} candidates but the quota requires {required}"
        )


@dataclass(frozen=True)
class Roster:
    slots: Mapping[Role, Tuple[CandidateRecord, ...]]
    total: float
    role_spend: Mapping[Role, float]
    role_share: Mapping[Role, float]

    def flatten(self) -> Iterator[CandidateRecord]:
        for role in ROLE_ORDER:
            yield from self.slots.get(role, ())

    def names(self) -> frozenset[str]:
        return frozenset(record.name for record in self.flatten())

    @property
    def size(self) -> int:
        return sum(len(players) for players in self.slots.values())


@dataclass(frozen=True)
class DiversityReport:
    overlap: int
    overlap_fraction: float
    max_overlap_fraction: float
    satisfied: bool
    budget_widened: bool
    attempts: int


@dataclass(frozen=True)
class AllocationResult:
    roster: Roster
    seed: str
    satisfied_tolerance: Tolerance
    used_fallback: bool
    attempts: int = 0
    within_budget: bool = False
    fallback: Optional[FallbackKind] = None
    diversity: Optional[DiversityReport] = None


def build_roster(slots: Mapping[Role, Sequence[CandidateRecord]]) -> Roster:
    """Freeze picked candidates into a Roster with derived spend figures."""

    frozen = {role: tuple(slots[role]) for role in ROLE_ORDER if role in slots}
    total = sum(record.price for role in ROLE_ORDER for record in frozen.get(role, ()))
    role_spend = {role: sum(record.price for record in players) for role, players in frozen.items()}
    if total > 0:
        role_share = {role: spend / total for role, spend in role_spend.items()}
    else:
        role_share = {role: 0.0 for role in role_spend}
    return Roster(slots=frozen, total=total, role_spend=role_spend, role_share=role_share)


def _within_budget(total: float, spec: AllocationSpec) -> bool:
    return spec.budget_min <= total <= spec.budget_max


def _budget_deviation(total: float, spec: AllocationSpec) -> float:
    return max(0.0, spec.budget_min - total) + max(0.0, total - spec.budget_max)


def _quota_roles(spec: AllocationSpec) -> Tuple[Role, ...]:
    return tuple(role for role in ROLE_ORDER if spec.role_quota.get(role, 0) > 0)


def match_tolerance(roster: Roster, spec: AllocationSpec) -> Optional[Tolerance]:
    """Return the tightest tolerance level at which every role's share fits."""

    roles = _quota_roles(spec)
    for level, widen in TOLERANCE_LADDER:
        fits = True
        for role in roles:
            low, high = spec.band(role)
            share = roster.role_share.get(role, 0.0)
            if share < low - widen - _BAND_EPSILON or share > high + widen + _BAND_EPSILON:
                fits = False
                break
        if fits:
            return level
    return None


def penalty_score(roster: Roster, spec: AllocationSpec) -> float:
    """Lower is better: budget miss, then share-band miss, then distance to band floors."""

    outside = 0.0
    to_floor = 0.0
    for role in _quota_roles(spec):
        low, high = spec.band(role)
        share = roster.role_share.get(role, 0.0)
        outside += max(0.0, low - share) + max(0.0, share - high)
        to_floor += abs(share - low)
    return (
        BUDGET_PENALTY_WEIGHT * _budget_deviation(roster.total, spec)
        + SHARE_PENALTY_WEIGHT * outside
        + to_floor
    )


def _ensure_sufficient(index: PriorityIndex, spec: AllocationSpec) -> None:
    for role in ROLE_ORDER:
        required = spec.role_quota.get(role, 0)
        if required <= 0:
            continue
        available = index.available(role)
        if available < required:
            raise CatalogInsufficientError(role, available, required)


def _sample_roster(index: PriorityIndex, spec: AllocationSpec, rng: Randomizer) -> Roster:
    picks: Dict[Role, list[CandidateRecord]] = {}
    for role in _quota_roles(spec):
        pool = list(index.view(role))
        picks[role] = rng.draw(pool, spec.role_quota[role])
    return build_roster(picks)


def allocate(
    catalog: Catalog,
    spec: AllocationSpec,
    *,
    max_tries: int = MAX_TRIES,
    top_k: int = TOP_K,
) -> AllocationResult:
    """Sample rosters until one fits the budget and share bands.

    Returns the first sample that passes the budget window and some level of
    the tolerance ladder. When ``max_tries`` samples all miss, the sample with
    the lowest penalty score is returned flagged as a fallback. Only
    CatalogInsufficientError is raised, before any sampling happens.
    """

    index = build_priority_index(catalog, k=top_k)
    _ensure_sufficient(index, spec)
    max_tries = max(1, max_tries)

    rng = Randomizer.from_seed(spec.seed)
    best: Optional[Roster] = None
    best_score = math.inf
    start = time.perf_counter()

    for attempt in range(1, max_tries + 1):
        roster = _sample_roster(index, spec, rng)
        in_budget = _within_budget(roster.total, spec)
        if in_budget:
            tolerance = match_tolerance(roster, spec)
            if tolerance is not None:
                logger.info(
                    "Roster accepted on attempt %s/%s – tolerance=%s, total=%.1f (mode=%s, %.3fs)",
                    attempt,
                    max_tries,
                    tolerance.value,
                    roster.total,
                    spec.mode,
                    time.perf_counter() - start,
                )
                return AllocationResult(
                    roster=roster,
                    seed=spec.seed,
                    satisfied_tolerance=tolerance,
                    used_fallback=False,
                    attempts=attempt,
                    within_budget=True,
                )
        score = penalty_score(roster, spec)
        if score < best_score:
            best, best_score = roster, score

    if best is None:
        raise RuntimeError("Sampling loop produced no roster")
    logger.warning(
        "No roster met budget %.1f–%.1f and share bands after %s attempts (mode=%s); "
        "using best penalty %.3f, total=%.1f",
        spec.budget_min,
        spec.budget_max,
        max_tries,
        spec.mode,
        best_score,
        best.total,
    )
    return AllocationResult(
        roster=best,
        seed=spec.seed,
        satisfied_tolerance=Tolerance.NONE,
        used_fallback=True,
        attempts=max_tries,
        within_budget=_within_budget(best.total, spec),
        fallback=FallbackKind.PENALTY,
    )


def _cheapest_key(record: CandidateRecord) -> Tuple[float, float, int]:
    return (record.price, -record.fantasy_rating, -record.appearances)


def cheapest_composition(catalog: Catalog, spec: AllocationSpec) -> AllocationResult:
    """Deterministic last resort: the cheapest candidates for every quota."""

    for role in ROLE_ORDER:
        required = spec.role_quota.get(role, 0)
        if required > 0 and catalog.size(role) < required:
            raise CatalogInsufficientError(role, catalog.size(role), required)

    picks = {
        role: sorted(catalog.bucket(role), key=_cheapest_key)[: spec.role_quota[role]]
        for role in _quota_roles(spec)
    }
    roster = build_roster(picks)
    in_budget = _within_budget(roster.total, spec)
    tolerance = match_tolerance(roster, spec) if in_budget else None
    logger.info(
        "Cheapest composition built – total=%.1f, tolerance=%s (mode=%s)",
        roster.total,
        (tolerance or Tolerance.NONE).value,
        spec.mode,
    )
    return AllocationResult(
        roster=roster,
        seed=spec.seed,
        satisfied_tolerance=tolerance or Tolerance.NONE,
        used_fallback=True,
        attempts=0,
        within_budget=in_budget,
        fallback=FallbackKind.CHEAPEST,
    )
