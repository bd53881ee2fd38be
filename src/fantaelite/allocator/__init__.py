"""Roster allocation: randomized search, cheapest fallback and paired generation."""

from .diversity import BUDGET_WIDENING, allocate_pair, minimum_overlap, roster_overlap, widen_budget
from .rng import Randomizer, hash_seed
from .service import (
    AllocationResult,
    CatalogInsufficientError,
    DiversityReport,
    FallbackKind,
    Roster,
    Tolerance,
    allocate,
    build_roster,
    cheapest_composition,
    match_tolerance,
    penalty_score,
)

__all__ = [
    "AllocationResult",
    "BUDGET_WIDENING",
    "CatalogInsufficientError",
    "DiversityReport",
    "FallbackKind",
    "Randomizer",
    "Roster",
    "Tolerance",
    "allocate",
    "allocate_pair",
    "build_roster",
    "cheapest_composition",
    "hash_seed",
    "match_tolerance",
    "minimum_overlap",
    "penalty_score",
    "roster_overlap",
    "widen_budget",
]
