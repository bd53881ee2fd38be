"""Strategy modes: per-role quotas, spend-share bands and budget windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple
from uuid import uuid4

from fantaelite.models import Role


DEFAULT_BUDGET_MIN = 0.0
DEFAULT_BUDGET_MAX = 1000.0

DEFAULT_ROLE_QUOTA: Mapping[Role, int] = {
    Role.P: 3,
    Role.D: 8,
    Role.C: 8,
    Role.A: 6,
}


@dataclass(frozen=True)
class StrategyMode:
    name: str
    label: str
    role_quota: Mapping[Role, int]
    share_bands: Mapping[Role, Tuple[float, float]]
    budget_min: float = DEFAULT_BUDGET_MIN
    budget_max: float = DEFAULT_BUDGET_MAX


@dataclass(frozen=True)
class AllocationSpec:
    """Everything the allocator needs to know about one roster request."""

    role_quota: Mapping[Role, int]
    budget_min: float
    budget_max: float
    role_share_bands: Mapping[Role, Tuple[float, float]]
    seed: str
    mode: str = field(default="custom")

    @property
    def roster_size(self) -> int:
        return sum(self.role_quota.values())

    def band(self, role: Role) -> Tuple[float, float]:
        return self.role_share_bands.get(role, (0.0, 1.0))


_STRATEGIES: Dict[str, StrategyMode] = {
    "equilibrata": StrategyMode(
        name="equilibrata",
        label="Balanced",
        role_quota=DEFAULT_ROLE_QUOTA,
        share_bands={
            Role.P: (0.04, 0.10),
            Role.D: (0.12, 0.22),
            Role.C: (0.16, 0.28),
            Role.A: (0.45, 0.62),
        },
    ),
    "attacco": StrategyMode(
        name="attacco",
        label="Attack-heavy",
        role_quota=DEFAULT_ROLE_QUOTA,
        share_bands={
            Role.P: (0.03, 0.08),
            Role.D: (0.08, 0.16),
            Role.C: (0.14, 0.24),
            Role.A: (0.55, 0.72),
        },
    ),
    "difesa": StrategyMode(
        name="difesa",
        label="Defence-first",
        role_quota=DEFAULT_ROLE_QUOTA,
        share_bands={
            Role.P: (0.06, 0.12),
            Role.D: (0.18, 0.28),
            Role.C: (0.20, 0.30),
            Role.A: (0.35, 0.50),
        },
    ),
}


def iter_strategies() -> Iterable[StrategyMode]:
    """Return an iterator of all configured strategy modes."""

    return _STRATEGIES.values()


def get_strategy(name: str) -> StrategyMode:
    """Fetch a strategy by name, raising KeyError if missing."""

    key = name.strip().lower()
    if key not in _STRATEGIES:
        raise KeyError(f"No strategy configured for mode={name!r}")
    return _STRATEGIES[key]


def build_spec(
    mode: str,
    *,
    budget_min: Optional[float] = None,
    budget_max: Optional[float] = None,
    seed: Optional[str] = None,
) -> AllocationSpec:
    """Resolve a named mode plus caller overrides into an AllocationSpec."""

    strategy = get_strategy(mode)
    low = strategy.budget_min if budget_min is None else float(budget_min)
    high = strategy.budget_max if budget_max is None else float(budget_max)
    if low > high:
        raise ValueError(f"budget_min ({low}) exceeds budget_max ({high})")
    return AllocationSpec(
        role_quota=dict(strategy.role_quota),
        budget_min=low,
        budget_max=high,
        role_share_bands=dict(strategy.share_bands),
        seed=seed or str(uuid4()),
        mode=strategy.name,
    )
