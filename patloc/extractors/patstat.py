"""Read the bibliographic input tables from DuckDB into pandas.

Architecture: DuckDB tables -> pandas DataFrames -> ``PatstatTables``

The bundle is immutable: every downstream stage builds new frames from it and
never mutates the inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import pandas as pd
from loguru import logger

from ..config.schemas import InputTablesConfig
from ..exceptions import ErrorCode, FileSystemError, ValidationError
from ..models.location import NAME_COLUMNS
from ..utils.duckdb_client import DuckDBClient


REQUIRED_COLUMNS: dict[str, list[str]] = {
    "filings": [
        "appln_id",
        "appln_kind",
        "appln_auth",
        "appln_filing_date",
        "appln_filing_year",
        "docdb_family_id",
        "internat_appln_id",
        "earliest_filing_id",
        "nat_phase",
        "reg_phase",
    ],
    "publications": ["appln_id", "publn_auth", "publn_nr", "publn_kind"],
    "priority_claims": ["appln_id", "prior_appln_id"],
    "continuations": ["appln_id", "parent_appln_id"],
    "tech_relations": ["appln_id", "tech_rel_appln_id"],
    "person_applications": ["appln_id", "person_id", "invt_seq_nr", "applt_seq_nr"],
    "persons": ["person_id", "person_ctry_code"],
    "geocoded_locations": ["appln_id", "person_id", "lat", "lng"],
}

OPTIONAL_COLUMNS: dict[str, list[str]] = {
    "filings": ["receiving_office", "inpadoc_family_id"],
    "publications": ["publn_nr_original"],
    "priority_claims": ["prior_appln_seq_nr"],
    "continuations": [],
    "tech_relations": [],
    "person_applications": [],
    "persons": [],
    "geocoded_locations": [
        "role",
        "lat_exact",
        "lng_exact",
        *NAME_COLUMNS,
        "country",
        "locality",
        "administrative_area_level_1",
        "administrative_area_level_2",
        "administrative_area_level_3",
        "country_geon",
        "lat_geon",
        "lng_geon",
        "admin_name1",
        "admin_name2",
        "admin_name3",
        "admin_name4",
        "numresults",
        "match_geon",
        "coord_source",
        "data_source",
    ],
}

# Tables that may be absent from the backing store
OPTIONAL_TABLES = frozenset({"continuations", "tech_relations", "geocoded_locations"})

MISSING_DATE_PLACEHOLDER = "9999-12-31"

_ID_COLUMNS = {
    "filings": ["appln_id", "docdb_family_id", "internat_appln_id", "earliest_filing_id"],
    "publications": ["appln_id"],
    "priority_claims": ["appln_id", "prior_appln_id"],
    "continuations": ["appln_id", "parent_appln_id"],
    "tech_relations": ["appln_id", "tech_rel_appln_id"],
    "person_applications": ["appln_id", "person_id", "invt_seq_nr", "applt_seq_nr"],
    "persons": ["person_id"],
    "geocoded_locations": ["appln_id", "person_id"],
}


def parse_filing_dates(values: pd.Series) -> pd.Series:
    """Parse ISO filing dates; the "9999-12-31" placeholder becomes NaT."""
    if pd.api.types.is_datetime64_any_dtype(values):
        return values
    text = values.astype("string")
    text = text.mask(text.str.startswith(MISSING_DATE_PLACEHOLDER, na=False))
    return pd.to_datetime(text, errors="raise", format="ISO8601")


def _empty_frame(name: str) -> pd.DataFrame:
    return pd.DataFrame(columns=REQUIRED_COLUMNS[name] + OPTIONAL_COLUMNS[name])


def normalize_table(name: str, df: pd.DataFrame) -> pd.DataFrame:
    """Check required columns, add missing optional ones and coerce key types.

    Raises:
        ValidationError: if a required column is missing or a value cannot be parsed
    """
    missing = [col for col in REQUIRED_COLUMNS[name] if col not in df.columns]
    if missing:
        raise ValidationError(
            f"Table '{name}' is missing required column(s): {', '.join(missing)}",
            component="extractor.patstat",
            operation="normalize_table",
            details={"table": name, "missing_columns": missing},
        )

    out = df.copy()
    for col in OPTIONAL_COLUMNS[name]:
        if col not in out.columns:
            out[col] = pd.NA

    try:
        for col in _ID_COLUMNS[name]:
            out[col] = pd.to_numeric(out[col], errors="raise").astype("Int64")
        if name == "filings":
            out["appln_filing_date"] = parse_filing_dates(out["appln_filing_date"])
            out["appln_filing_year"] = pd.to_numeric(
                out["appln_filing_year"], errors="raise"
            ).astype("Int64")
        if name == "priority_claims":
            out["prior_appln_seq_nr"] = pd.to_numeric(
                out["prior_appln_seq_nr"], errors="raise"
            ).astype("Int64")
        if name == "geocoded_locations":
            for col in ("lat", "lng", "lat_exact", "lng_exact", "lat_geon", "lng_geon"):
                out[col] = pd.to_numeric(out[col], errors="raise").astype("float64")
            out["numresults"] = pd.to_numeric(out["numresults"], errors="raise").astype("Int64")
    except (ValueError, TypeError) as e:
        raise ValidationError(
            f"Table '{name}' contains malformed values: {e}",
            component="extractor.patstat",
            operation="normalize_table",
            details={"table": name},
            cause=e,
        ) from e

    return out


@dataclass(frozen=True, eq=False)
class PatstatTables:
    """Immutable bundle of the input tables."""

    filings: pd.DataFrame
    publications: pd.DataFrame
    priority_claims: pd.DataFrame
    person_applications: pd.DataFrame
    persons: pd.DataFrame
    continuations: pd.DataFrame = None  # type: ignore[assignment]
    tech_relations: pd.DataFrame = None  # type: ignore[assignment]
    geocoded_locations: pd.DataFrame = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        for table in fields(self):
            df = getattr(self, table.name)
            if df is None:
                df = _empty_frame(table.name)
            object.__setattr__(self, table.name, normalize_table(table.name, df))

    @classmethod
    def table_names(cls) -> list[str]:
        return [table.name for table in fields(cls)]

    def row_counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in self.table_names()}


class PatstatExtractor:
    """Load ``PatstatTables`` from a DuckDB database."""

    def __init__(self, client: DuckDBClient, table_names: InputTablesConfig | None = None):
        self.client = client
        self.table_names = table_names or InputTablesConfig()

    def _read(self, name: str) -> pd.DataFrame | None:
        table = getattr(self.table_names, name)
        if not self.client.table_exists(table):
            if name in OPTIONAL_TABLES:
                logger.warning(f"Optional table '{table}' not found; using an empty {name} table")
                return None
            raise ValidationError(
                f"Required input table '{table}' not found",
                component="extractor.patstat",
                operation="extract",
                details={"table": table, "logical_name": name},
            )

        available = set(self.client.table_columns(table))
        wanted = [
            col for col in REQUIRED_COLUMNS[name] + OPTIONAL_COLUMNS[name] if col in available
        ]
        df = self.client.read_table(table, columns=wanted)
        logger.debug(f"Read {len(df)} rows from {table}")
        return df

    def extract(self) -> PatstatTables:
        """Read every input table and return the validated bundle.

        Raises:
            ValidationError: for missing required tables or columns and malformed values
            ExtractionError: if DuckDB fails while reading
        """
        frames = {name: self._read(name) for name in PatstatTables.table_names()}
        tables = PatstatTables(**frames)
        logger.info("Extracted input tables", **tables.row_counts())
        return tables

    def import_csv_directory(self, csv_dir: Path) -> dict[str, int]:
        """Load ``<table name>.csv`` files from ``csv_dir`` into DuckDB.

        Tables without a CSV file are left untouched.

        Returns:
            Imported row count per table name
        """
        if not csv_dir.is_dir():
            raise FileSystemError(
                f"CSV directory not found: {csv_dir}",
                file_path=str(csv_dir),
                operation="import_csv_directory",
                status_code=ErrorCode.FILE_NOT_FOUND,
            )
        imported = {}
        for name in PatstatTables.table_names():
            table = getattr(self.table_names, name)
            csv_path = csv_dir / f"{table}.csv"
            if csv_path.exists():
                imported[table] = self.client.import_csv(csv_path, table)
            else:
                logger.debug(f"No CSV for table '{table}' in {csv_dir}")
        logger.info(f"Imported {len(imported)} CSV file(s) from {csv_dir}")
        return imported
