"""Budget and spend summaries of allocation results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from fantaelite.allocator import AllocationResult
from fantaelite.config import AllocationSpec
from fantaelite.models import ROLE_ORDER, CandidateRecord


def _round1(value: float) -> float:
    return round(value * 10) / 10


@dataclass(frozen=True)
class RosterSummary:
    counts: Dict[str, int]
    total: float
    spend_per_role: Dict[str, float]
    percent_per_role: Dict[str, float]
    budget_min: float
    budget_max: float
    within_range: bool
    diff_from_min: float
    diff_from_max: float


def summarize_result(result: AllocationResult, spec: AllocationSpec) -> RosterSummary:
    """Per-role counts and spend plus how the total sits in the budget window."""

    roster = result.roster
    counts = {role.value: len(roster.slots.get(role, ())) for role in ROLE_ORDER}
    spend = {role.value: roster.role_spend.get(role, 0.0) for role in ROLE_ORDER}
    percent = {
        role.value: _round1(roster.role_share.get(role, 0.0) * 100.0) for role in ROLE_ORDER
    }
    return RosterSummary(
        counts=counts,
        total=roster.total,
        spend_per_role=spend,
        percent_per_role=percent,
        budget_min=spec.budget_min,
        budget_max=spec.budget_max,
        within_range=spec.budget_min <= roster.total <= spec.budget_max,
        diff_from_min=roster.total - spec.budget_min,
        diff_from_max=spec.budget_max - roster.total,
    )


def missing_prices(result: AllocationResult) -> List[CandidateRecord]:
    """Roster slots with no usable price in the catalog (price read as 0)."""

    return [record for record in result.roster.flatten() if record.price <= 0.0]
