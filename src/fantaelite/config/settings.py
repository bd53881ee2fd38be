"""Environment-driven runtime settings."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

_API_KEY_ENV = "FANTAELITE_API_KEY"
_CATALOG_PATH_ENV = "FANTAELITE_CATALOG_PATH"
_CATALOG_REFRESH_ENV = "FANTAELITE_CATALOG_REFRESH_SECONDS"
_MAX_TRIES_ENV = "FANTAELITE_MAX_TRIES"
_TOP_K_ENV = "FANTAELITE_TOP_K"

MAX_TRIES = 500
TOP_K = 120
CATALOG_REFRESH_SECONDS = 3600.0


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        logger.warning("Ignoring %s=%r: expected a finite number, keeping %s", name, raw, default)
        return default
    return value if clamp_min is None else max(clamp_min, value)


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected a whole number, keeping %s", name, raw, default)
        return default
    return value if min_value is None else max(min_value, value)


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    catalog_path: Optional[Path] = None
    catalog_refresh_seconds: float = CATALOG_REFRESH_SECONDS
    max_tries: int = MAX_TRIES
    top_k: int = TOP_K


def load_settings() -> Settings:
    """Read settings from the process environment."""

    catalog_raw = os.getenv(_CATALOG_PATH_ENV)
    return Settings(
        api_key=os.getenv(_API_KEY_ENV) or None,
        catalog_path=Path(catalog_raw) if catalog_raw else None,
        catalog_refresh_seconds=_env_float(_CATALOG_REFRESH_ENV, CATALOG_REFRESH_SECONDS, clamp_min=0.0),
        max_tries=_env_int(_MAX_TRIES_ENV, MAX_TRIES, min_value=1),
        top_k=_env_int(_TOP_K_ENV, TOP_K, min_value=1),
    )
