"""Output persistence."""

from .duckdb_loader import DuckDBLoader


__all__ = ["DuckDBLoader"]
