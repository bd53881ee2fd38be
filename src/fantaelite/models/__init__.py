"""Canonical data models."""

from .candidate import ROLE_ORDER, CandidateRecord, Role

__all__ = ["ROLE_ORDER", "CandidateRecord", "Role"]
