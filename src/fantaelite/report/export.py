"""CSV export helpers for generated rosters."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Sequence

from fantaelite.allocator import AllocationResult


EXPORT_HEADERS = (
    "roster",
    "role",
    "name",
    "team",
    "fantasy_rating",
    "appearances",
    "price",
)


class RosterExportError(RuntimeError):
    """Raised when rosters cannot be exported."""


def export_rosters_to_csv(
    results: Sequence[AllocationResult],
    *,
    labels: Sequence[str] | None = None,
) -> str:
    """One row per roster slot, rosters in the order given."""

    if labels is not None and len(labels) != len(results):
        raise RosterExportError("labels length must match results length")

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_HEADERS)

    for idx, result in enumerate(results):
        label = labels[idx] if labels is not None else f"R{idx + 1:02}"
        for record in result.roster.flatten():
            writer.writerow([
                label,
                record.role.value,
                record.name,
                record.team,
                f"{record.fantasy_rating:.2f}",
                record.appearances,
                f"{record.price:g}",
            ])

    return buffer.getvalue()


__all__ = [
    "EXPORT_HEADERS",
    "RosterExportError",
    "export_rosters_to_csv",
]
