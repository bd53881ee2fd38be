"""Configuration helpers for strategy modes and runtime settings."""

from .settings import Settings, load_settings
from .strategy import (
    AllocationSpec,
    StrategyMode,
    build_spec,
    get_strategy,
    iter_strategies,
)

__all__ = [
    "AllocationSpec",
    "Settings",
    "StrategyMode",
    "build_spec",
    "get_strategy",
    "iter_strategies",
    "load_settings",
]
