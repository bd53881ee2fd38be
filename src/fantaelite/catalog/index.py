"""Immutable catalog snapshots and the per-role priority index."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple

from fantaelite.config.settings import TOP_K
from fantaelite.models import ROLE_ORDER, CandidateRecord, Role


def priority_key(record: CandidateRecord) -> Tuple[int, float, float]:
    """Sort key: appearances desc, then fantasy rating desc, then price desc."""

    return (-record.appearances, -record.fantasy_rating, -record.price)


@dataclass(frozen=True)
class Catalog:
    """Read-only snapshot of candidates bucketed by role in priority order."""

    buckets: Mapping[Role, Tuple[CandidateRecord, ...]]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def roles(self) -> Tuple[Role, ...]:
        return tuple(role for role in ROLE_ORDER if role in self.buckets)

    def bucket(self, role: Role) -> Tuple[CandidateRecord, ...]:
        return self.buckets.get(role, ())

    def size(self, role: Role) -> int:
        return len(self.bucket(role))

    def candidates(self) -> Iterator[CandidateRecord]:
        for role in self.roles:
            yield from self.buckets[role]

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.buckets.values())


def build_catalog(candidates: Iterable[CandidateRecord]) -> Catalog:
    """Partition candidates by role and order each bucket by priority."""

    grouped: Dict[Role, List[CandidateRecord]] = defaultdict(list)
    for record in candidates:
        grouped[record.role].append(record)
    buckets = {
        role: tuple(sorted(grouped[role], key=priority_key))
        for role in ROLE_ORDER
        if role in grouped
    }
    return Catalog(buckets=MappingProxyType(buckets))


@dataclass(frozen=True)
class PriorityIndex:
    """Bounded top-K view of each catalog bucket."""

    catalog: Catalog
    k: int = TOP_K

    def view(self, role: Role) -> Tuple[CandidateRecord, ...]:
        return self.catalog.bucket(role)[: self.k]

    def available(self, role: Role) -> int:
        return len(self.view(role))


def build_priority_index(catalog: Catalog, *, k: int = TOP_K) -> PriorityIndex:
    if k < 1:
        raise ValueError(f"k must be positive, got {k}")
    return PriorityIndex(catalog=catalog, k=k)
