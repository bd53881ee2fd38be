from __future__ import annotations

from typing import Dict

from pydantic import BaseModel


class CatalogPreviewResponse(BaseModel):
    total_rows: int
    accepted: int
    dropped: int
    dropped_by_reason: Dict[str, int]
    columns: Dict[str, str]
    role_counts: Dict[str, int]
