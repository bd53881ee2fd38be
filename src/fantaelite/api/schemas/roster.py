from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class GenerateRequest(BaseModel):
    mode: str = Field(default="equilibrata")
    email: str | None = None
    budget_min: float = Field(default=0.0, ge=0.0, alias="budgetMin")
    budget_max: float = Field(default=1000.0, ge=0.0, alias="budgetMax")
    seed: str | None = Field(default=None, min_length=1, max_length=200)
    paired: bool = False
    min_distinct_fraction: float = Field(default=0.6, ge=0.0, le=1.0, alias="minDistinctFraction")
    cheapest: bool = False

    model_config = ConfigDict(populate_by_name=True)


class RosterSlotResponse(BaseModel):
    role: str
    name: str
    team: str
    fantasy_rating: float
    appearances: int
    price: float


class RosterSummaryResponse(BaseModel):
    counts: Dict[str, int]
    total: float
    spend_per_role: Dict[str, float]
    percent_per_role: Dict[str, float]


class BudgetCheckResponse(BaseModel):
    min: float
    max: float
    total: float
    within_range: bool
    diff_from_min: float
    diff_from_max: float


class DiversityResponse(BaseModel):
    overlap: int
    overlap_fraction: float
    max_overlap_fraction: float
    satisfied: bool
    budget_widened: bool
    attempts: int


class MissingPriceResponse(BaseModel):
    role: str
    name: str
    team: str


class RosterWarningsResponse(BaseModel):
    missing_prices: List[MissingPriceResponse] = Field(default_factory=list)


class RosterResponse(BaseModel):
    seed: str
    satisfied_tolerance: str
    used_fallback: bool
    fallback: str | None = None
    attempts: int
    players: List[RosterSlotResponse]
    summary: RosterSummaryResponse
    budget: BudgetCheckResponse
    diversity: DiversityResponse | None = None
    warnings: RosterWarningsResponse = Field(default_factory=RosterWarningsResponse)


class GenerateResponse(BaseModel):
    ok: bool = True
    mode: str
    email: str | None = None
    seed: str
    generated_at: datetime
    roster: RosterResponse
    second_roster: RosterResponse | None = None
