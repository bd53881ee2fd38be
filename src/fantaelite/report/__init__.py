"""Roster reporting utilities (summaries, export)."""

from .export import EXPORT_HEADERS, RosterExportError, export_rosters_to_csv
from .summary import RosterSummary, missing_prices, summarize_result

__all__ = [
    "EXPORT_HEADERS",
    "RosterExportError",
    "RosterSummary",
    "export_rosters_to_csv",
    "missing_prices",
    "summarize_result",
]
