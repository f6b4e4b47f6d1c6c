"""Shared utilities: logging setup and the DuckDB client."""

from .duckdb_client import DuckDBClient, get_duckdb_client
from .logging_config import configure_logging_from_config, log_with_context, setup_logging


__all__ = [
    "DuckDBClient",
    "configure_logging_from_config",
    "get_duckdb_client",
    "log_with_context",
    "setup_logging",
]
