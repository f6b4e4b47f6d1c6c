"""
DuckDB loader for the imputation outputs.

Every output table is dropped and recreated from scratch on each run; there
is no incremental or append mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd
from loguru import logger

from ..config.schemas import OutputTablesConfig
from ..utils.duckdb_client import DuckDBClient


if TYPE_CHECKING:
    from ..transformers.imputation_pipeline import ImputationResult


class DuckDBLoader:
    """
    Write pipeline outputs into the backing DuckDB database.

    Handles:
    - Mapping logical output names to configured table names
    - Drop-and-rebuild of every table
    - Per-table row count bookkeeping
    """

    def __init__(self, client: DuckDBClient, output_tables: OutputTablesConfig | None = None):
        """
        Initialize DuckDB Loader.

        Args:
            client: DuckDB client of the target database
            output_tables: Table names per logical output (defaults apply when omitted)
        """
        self.client = client
        self.output_tables = output_tables or OutputTablesConfig()
        self.stats: dict[str, int] = {}

    def table_name(self, logical_name: str) -> str:
        return getattr(self.output_tables, logical_name)

    def replace_table(self, df: pd.DataFrame, table_name: str) -> int:
        """
        Drop ``table_name`` and recreate it from ``df``.

        Returns:
            Number of rows written

        Raises:
            LoadError: if DuckDB rejects the write
        """
        if df.empty:
            logger.warning(f"Writing empty table '{table_name}'")
        rows = self.client.replace_table_from_df(df, table_name)
        self.stats[table_name] = rows
        logger.info(f"Rebuilt table '{table_name}' with {rows:,} rows")
        return rows

    def write_result(self, result: ImputationResult) -> dict[str, int]:
        """
        Persist every output of a pipeline run in a single transaction.

        A failing table leaves every output table as the previous run wrote it.

        Returns:
            Row count per written table name

        Raises:
            LoadError: if any table cannot be written
        """
        frames = {
            self.table_name(logical_name): df
            for logical_name, df in result.output_tables().items()
        }
        for table, df in frames.items():
            if df.empty:
                logger.warning(f"Writing empty table '{table}'")

        written = self.client.replace_tables_from_dfs(frames)
        self.stats.update(written)
        for table, rows in written.items():
            logger.info(f"Rebuilt table '{table}' with {rows:,} rows")
        return written
