"""Owned, periodically replaced catalog snapshot."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .index import Catalog


logger = logging.getLogger(__name__)

CatalogLoader = Callable[[], Catalog]


class CatalogCache:
    """Holds the current Catalog and swaps in a fresh one when it goes stale.

    Readers take a reference to one snapshot and keep using it for the whole
    allocation; a refresh publishes a new object instead of mutating the old.
    """

    def __init__(self, loader: CatalogLoader | None = None, *, refresh_seconds: float = 3600.0):
        self._loader = loader
        self._refresh_seconds = max(0.0, refresh_seconds)
        self._snapshot: Optional[Catalog] = None
        self._loaded_at: float = 0.0
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[Catalog]:
        return self._snapshot

    @property
    def configured(self) -> bool:
        return self._loader is not None or self._snapshot is not None

    def replace(self, catalog: Catalog) -> None:
        self._snapshot = catalog
        self._loaded_at = time.monotonic()

    def is_stale(self) -> bool:
        if self._snapshot is None:
            return True
        if self._loader is None:
            return False
        return time.monotonic() - self._loaded_at >= self._refresh_seconds

    def get(self) -> Catalog:
        """Return the current snapshot, refreshing it first when stale.

        A failed refresh keeps serving the previous snapshot and waits a full
        interval before retrying; it only raises when nothing was ever loaded.
        """

        snapshot = self._snapshot
        if snapshot is not None and not self.is_stale():
            return snapshot
        if self._loader is None:
            raise LookupError("No catalog loaded and no loader configured")
        with self._lock:
            if self._snapshot is not None and not self.is_stale():
                return self._snapshot
            start = time.perf_counter()
            try:
                catalog = self._loader()
            except Exception as exc:
                if self._snapshot is None:
                    raise
                self._loaded_at = time.monotonic()
                logger.warning(
                    "Catalog refresh failed – keeping snapshot from %s: %s",
                    self._snapshot.created_at.isoformat(),
                    exc,
                )
                return self._snapshot
            self.replace(catalog)
            logger.info(
                "Catalog refreshed – %s candidates (%s) in %.2fs",
                len(catalog),
                ", ".join(f"{role.value}:{catalog.size(role)}" for role in catalog.roles) or "-",
                time.perf_counter() - start,
            )
            return catalog
