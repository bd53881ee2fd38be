"""Helpers to load raw catalog rows and emit canonical candidate records."""

from __future__ import annotations

import csv
import math
import re
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from fantaelite.catalog import Catalog, build_catalog
from fantaelite.models import CandidateRecord, Role


RawValue = Union[str, float, None]

MANDATORY_FIELDS: Tuple[str, ...] = ("name", "role", "price")

# Resolution order matters for substring matching: "fantasy_rating" must claim
# "Fantamedia" before "rating" gets a chance to match it through "media".
FIELD_ORDER: Tuple[str, ...] = (
    "name",
    "role",
    "price",
    "team",
    "fantasy_rating",
    "rating",
    "appearances",
)

DEFAULT_HEADER_SYNONYMS: Dict[str, List[str]] = {
    "name": ["Nome", "Giocatore", "Calciatore", "Player", "Name"],
    "team": ["Squadra", "Team", "Club"],
    "role": ["Ruolo", "R", "Role", "Posizione", "Pos"],
    "price": ["Quotazione", "Prezzo", "Crediti", "Valore", "Costo", "Qt", "Price"],
    "rating": ["Media", "Media Voto", "MV", "Voto", "Rating"],
    "fantasy_rating": ["Fantamedia", "Fanta Media", "FM", "FMV", "Fantasy Rating"],
    "appearances": ["Partite", "Presenze", "PG", "Pv", "Gare", "Appearances"],
}

_MIN_SUBSTRING_TOKEN = 3

_THOUSANDS_DOT_COMMA_DECIMAL = re.compile(r"^[-+]?\d{1,3}(?:\.\d{3})+,\d+$")
_THOUSANDS_COMMA_DOT_DECIMAL = re.compile(r"^[-+]?\d{1,3}(?:,\d{3})+\.\d+$")
_COMMA_DECIMAL = re.compile(r"^[-+]?\d*,\d+$")

_ROLE_CODES = {"p": Role.P, "d": Role.D, "c": Role.C, "a": Role.A}
_ROLE_SUBSTRINGS: Tuple[Tuple[Tuple[str, ...], Role], ...] = (
    (("port",), Role.P),
    (("dif",), Role.D),
    (("centro", "med"), Role.C),
    (("att", "punta", "ala", "est"), Role.A),
)


class SchemaError(ValueError):
    """Raised when mandatory catalog columns cannot be resolved."""

    def __init__(self, missing: Sequence[str], headers: Sequence[str]):
        self.missing = tuple(missing)
        self.headers = tuple(headers)
        super().__init__(
            f"Unable to resolve mandatory columns {', '.join(self.missing)} "
            f"from headers {list(self.headers)!r}"
        )


def _header_token(value: str) -> str:
    return re.sub(r"[\s_]+", "", str(value).lower())


def resolve_columns(
    headers: Sequence[str],
    synonyms: Mapping[str, Sequence[str]] | None = None,
) -> Dict[str, int]:
    """Map logical fields to column indexes, exact matches before substrings."""

    synonyms = synonyms or DEFAULT_HEADER_SYNONYMS
    tokens = [_header_token(header) for header in headers]
    resolved: Dict[str, int] = {}
    claimed: set[int] = set()

    def claim(field_name: str, *, exact: bool) -> None:
        for label in synonyms.get(field_name, ()):
            wanted = _header_token(label)
            if not wanted:
                continue
            if not exact and len(wanted) < _MIN_SUBSTRING_TOKEN:
                continue
            for idx, token in enumerate(tokens):
                if idx in claimed:
                    continue
                if (token == wanted) if exact else (wanted in token):
                    resolved[field_name] = idx
                    claimed.add(idx)
                    return

    for field_name in FIELD_ORDER:
        claim(field_name, exact=True)
    for field_name in FIELD_ORDER:
        if field_name not in resolved:
            claim(field_name, exact=False)

    missing = [name for name in MANDATORY_FIELDS if name not in resolved]
    if missing:
        raise SchemaError(missing, headers)
    return resolved


def parse_number(value: RawValue) -> float:
    """Parse a locale-ambiguous numeric token; unparseable input yields 0.0.

    A lone comma is read as a decimal separator, so ``"1,234"`` becomes
    1.234 rather than one thousand two hundred thirty-four.
    """

    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = re.sub(r"\s+", "", str(value))
    if not text:
        return 0.0
    if _THOUSANDS_DOT_COMMA_DECIMAL.match(text):
        text = text.replace(".", "").replace(",", ".")
    elif _THOUSANDS_COMMA_DOT_DECIMAL.match(text):
        text = text.replace(",", "")
    elif _COMMA_DECIMAL.match(text):
        text = text.replace(",", ".")
    else:
        text = text.replace(",", "")
    try:
        return float(text)
    except ValueError:
        return 0.0


def resolve_role(label: RawValue) -> Optional[Role]:
    if label is None:
        return None
    text = str(label).strip().lower()
    if not text:
        return None
    if text in _ROLE_CODES:
        return _ROLE_CODES[text]
    for needles, role in _ROLE_SUBSTRINGS:
        if any(needle in text for needle in needles):
            return role
    return None


def _non_negative(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, value)


class RawCandidateRow(BaseModel):
    raw_name: str = ""
    raw_team: str = ""
    raw_role: RawValue = None
    raw_price: RawValue = None
    raw_rating: RawValue = None
    raw_fantasy_rating: RawValue = None
    raw_appearances: RawValue = None

    @classmethod
    def from_mapping(
        cls,
        row: Mapping[str, RawValue],
        headers: Sequence[str],
        columns: Mapping[str, int],
    ) -> "RawCandidateRow":
        def extract(field_name: str) -> RawValue:
            idx = columns.get(field_name)
            if idx is None:
                return None
            value = row.get(headers[idx])
            if isinstance(value, str):
                return value.strip()
            return value

        def text(field_name: str) -> str:
            value = extract(field_name)
            return "" if value is None else str(value).strip()

        return cls(
            raw_name=text("name"),
            raw_team=text("team"),
            raw_role=extract("role"),
            raw_price=extract("price"),
            raw_rating=extract("rating"),
            raw_fantasy_rating=extract("fantasy_rating"),
            raw_appearances=extract("appearances"),
        )


@dataclass(frozen=True)
class NormalizationReport:
    total_rows: int
    accepted: int
    dropped: int
    dropped_by_reason: Dict[str, int]
    columns: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NormalizationResult:
    candidates: Tuple[CandidateRecord, ...]
    report: NormalizationReport


def _row_to_record(raw: RawCandidateRow) -> Tuple[Optional[CandidateRecord], Optional[str]]:
    if not raw.raw_name:
        return None, "missing_name"
    role = resolve_role(raw.raw_role)
    if role is None:
        return None, "unknown_role"
    price = parse_number(raw.raw_price)
    if not math.isfinite(price):
        return None, "invalid_price"
    record = CandidateRecord(
        name=raw.raw_name,
        team=raw.raw_team,
        role=role,
        price=max(0.0, price),
        rating=_non_negative(parse_number(raw.raw_rating)),
        fantasy_rating=_non_negative(parse_number(raw.raw_fantasy_rating)),
        appearances=int(round(_non_negative(parse_number(raw.raw_appearances)))),
    )
    return record, None


def normalize_rows(
    rows: Sequence[Mapping[str, RawValue]],
    *,
    headers: Sequence[str] | None = None,
    synonyms: Mapping[str, Sequence[str]] | None = None,
) -> NormalizationResult:
    """Turn raw tabular rows into canonical candidates.

    Raises SchemaError when the name, role or price column cannot be found.
    Rows with an empty name, an unknown role or a non-finite price are
    dropped and counted in the returned report.
    """

    rows = list(rows)
    if headers is None:
        headers = list(rows[0].keys()) if rows else []
    headers = list(headers)
    columns = resolve_columns(headers, synonyms)

    candidates: List[CandidateRecord] = []
    dropped_by_reason = {"missing_name": 0, "unknown_role": 0, "invalid_price": 0}
    for row in rows:
        raw = RawCandidateRow.from_mapping(row, headers, columns)
        record, reason = _row_to_record(raw)
        if record is None:
            dropped_by_reason[reason] += 1
            continue
        candidates.append(record)

    dropped = sum(dropped_by_reason.values())
    report = NormalizationReport(
        total_rows=len(rows),
        accepted=len(candidates),
        dropped=dropped,
        dropped_by_reason=dropped_by_reason,
        columns={name: headers[idx] for name, idx in columns.items()},
    )
    return NormalizationResult(candidates=tuple(candidates), report=report)


def _sniff_delimiter(sample: str) -> str:
    try:
        return csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
    except csv.Error:
        return ","


def parse_rows_csv(text: str, *, delimiter: str | None = None) -> Tuple[List[str], List[Dict[str, str]]]:
    """Parse CSV text into (headers, rows), sniffing the delimiter if needed."""

    text = text.lstrip("\ufeff")
    delimiter = delimiter or _sniff_delimiter(text[:4096])
    reader = csv.DictReader(StringIO(text, newline=""), delimiter=delimiter)
    rows = [dict(row) for row in reader]
    headers = list(reader.fieldnames or [])
    return headers, rows


def load_rows_csv(path: Path, *, delimiter: str | None = None) -> Tuple[List[str], List[Dict[str, str]]]:
    return parse_rows_csv(path.read_text(encoding="utf-8-sig"), delimiter=delimiter)


def load_catalog_csv(
    path: Path,
    *,
    synonyms: Mapping[str, Sequence[str]] | None = None,
    delimiter: str | None = None,
) -> Tuple[Catalog, NormalizationReport]:
    headers, rows = load_rows_csv(path, delimiter=delimiter)
    result = normalize_rows(rows, headers=headers, synonyms=synonyms)
    return build_catalog(result.candidates), result.report
