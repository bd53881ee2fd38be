"""Canonical candidate models shared across ingestion and allocation layers."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Role(str, Enum):
    """Player position, using the single-letter codes of the Italian game."""

    P = "P"
    D = "D"
    C = "C"
    A = "A"


ROLE_ORDER: Tuple[Role, ...] = (Role.P, Role.D, Role.C, Role.A)


class CandidateRecord(BaseModel):
    """Normalized player payload used by the allocator."""

    name: str = Field(..., min_length=1)
    team: str = ""
    role: Role
    price: float = Field(..., ge=0.0)
    rating: float = Field(default=0.0, ge=0.0)
    fantasy_rating: float = Field(default=0.0, ge=0.0)
    appearances: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)
