"""Schemas for the backing DuckDB store and its table names."""

from __future__ import annotations

from pydantic import BaseModel, Field


class InputTablesConfig(BaseModel):
    """Names of the bibliographic input tables in the backing store."""

    filings: str = "tls201_appln"
    publications: str = "tls211_pat_publn"
    priority_claims: str = "tls204_appln_prior"
    continuations: str = "tls216_appln_contn"
    tech_relations: str = "tls205_tech_rel"
    person_applications: str = "tls207_pers_appln"
    persons: str = "tls206_person"
    geocoded_locations: str = "geoc_locations"


class OutputTablesConfig(BaseModel):
    """Names of the tables rebuilt on every run."""

    first_filings: str = "first_filings"
    bridge: str = "first_and_subsequent_filings"
    pool: str = "subsequent_filings"
    geographic: str = "pf_inv_geoc"
    country: str = "pf_inv_pers_ctry"


class DuckDBConfig(BaseModel):
    """Configuration for DuckDB."""

    database_path: str = Field(
        default="data/patstat.duckdb", description="DuckDB database path (:memory: for in-memory)"
    )
    read_only: bool = False
    threads: int | None = None
    memory_limit_gb: int | None = None
    input_tables: InputTablesConfig = Field(default_factory=InputTablesConfig)
    output_tables: OutputTablesConfig = Field(default_factory=OutputTablesConfig)


__all__ = ["DuckDBConfig", "InputTablesConfig", "OutputTablesConfig"]
