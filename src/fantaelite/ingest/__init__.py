"""Input adapters that normalize raw catalog data."""

from .catalog import (
    DEFAULT_HEADER_SYNONYMS,
    NormalizationReport,
    NormalizationResult,
    RawCandidateRow,
    SchemaError,
    load_catalog_csv,
    load_rows_csv,
    normalize_rows,
    parse_number,
    parse_rows_csv,
    resolve_columns,
    resolve_role,
)

__all__ = [
    "DEFAULT_HEADER_SYNONYMS",
    "NormalizationReport",
    "NormalizationResult",
    "RawCandidateRow",
    "SchemaError",
    "load_catalog_csv",
    "load_rows_csv",
    "normalize_rows",
    "parse_number",
    "parse_rows_csv",
    "resolve_columns",
    "resolve_role",
]
