"""Pydantic models for API I/O."""

from .catalog import CatalogPreviewResponse
from .roster import (
    BudgetCheckResponse,
    DiversityResponse,
    GenerateRequest,
    GenerateResponse,
    MissingPriceResponse,
    RosterResponse,
    RosterSlotResponse,
    RosterSummaryResponse,
    RosterWarningsResponse,
)

__all__ = [
    "BudgetCheckResponse",
    "CatalogPreviewResponse",
    "DiversityResponse",
    "GenerateRequest",
    "GenerateResponse",
    "MissingPriceResponse",
    "RosterResponse",
    "RosterSlotResponse",
    "RosterSummaryResponse",
    "RosterWarningsResponse",
]
