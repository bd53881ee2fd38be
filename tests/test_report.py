import csv
from io import StringIO

import pytest

from fantaelite.allocator import AllocationResult, Tolerance, build_roster
from fantaelite.models import Role
from fantaelite.report import (
    EXPORT_HEADERS,
    RosterExportError,
    export_rosters_to_csv,
    missing_prices,
    summarize_result,
)

from tests.factories import candidate, make_spec


def _result(seed: str = "r") -> AllocationResult:
    roster = build_roster({
        Role.P: [candidate("Keeper", Role.P, 1, team="Lecce", fantasy_rating=5.875, appearances=7)],
        Role.D: [candidate("Back", Role.D, 2, team="Parma")],
    })
    return AllocationResult(
        roster=roster,
        seed=seed,
        satisfied_tolerance=Tolerance.STRICT,
        used_fallback=False,
        attempts=1,
        within_budget=True,
    )


def test_summary_rounds_percentages_to_one_decimal():
    summary = summarize_result(_result(), make_spec(budget_min=0.0, budget_max=10.0))

    assert summary.counts == {"P": 1, "D": 1, "C": 0, "A": 0}
    assert summary.total == 3.0
    assert summary.spend_per_role == {"P": 1.0, "D": 2.0, "C": 0.0, "A": 0.0}
    assert summary.percent_per_role == {"P": 33.3, "D": 66.7, "C": 0.0, "A": 0.0}


def test_summary_budget_window_diffs():
    inside = summarize_result(_result(), make_spec(budget_min=1.0, budget_max=10.0))
    over = summarize_result(_result(), make_spec(budget_min=0.0, budget_max=2.5))

    assert inside.within_range is True
    assert inside.diff_from_min == pytest.approx(2.0)
    assert inside.diff_from_max == pytest.approx(7.0)
    assert over.within_range is False
    assert over.diff_from_max == pytest.approx(-0.5)


def test_export_writes_one_row_per_slot():
    text = export_rosters_to_csv([_result("a"), _result("b")])

    rows = list(csv.reader(StringIO(text)))

    assert tuple(rows[0]) == EXPORT_HEADERS
    assert len(rows) == 5
    assert rows[1] == ["R01", "P", "Keeper", "Lecce", "5.88", "7", "1"]
    assert [row[0] for row in rows[1:]] == ["R01", "R01", "R02", "R02"]


def test_export_uses_custom_labels():
    text = export_rosters_to_csv([_result()], labels=["Main"])

    assert "\r\nMain,D,Back," in text


def test_export_rejects_mismatched_labels():
    with pytest.raises(RosterExportError):
        export_rosters_to_csv([_result()], labels=["one", "two"])


def test_missing_prices_lists_zero_priced_slots():
    roster = build_roster({
        Role.P: [candidate("Unpriced", Role.P, 0), candidate("Keeper", Role.P, 4)],
        Role.A: [candidate("Striker", Role.A, 30)],
    })
    result = AllocationResult(
        roster=roster,
        seed="m",
        satisfied_tolerance=Tolerance.NONE,
        used_fallback=True,
    )

    assert [record.name for record in missing_prices(result)] == ["Unpriced"]
    assert missing_prices(_result()) == []
