"""Catalog snapshots, the priority index and the snapshot cache."""

from .cache import CatalogCache
from .index import Catalog, PriorityIndex, build_catalog, build_priority_index, priority_key

__all__ = [
    "Catalog",
    "CatalogCache",
    "PriorityIndex",
    "build_catalog",
    "build_priority_index",
    "priority_key",
]
