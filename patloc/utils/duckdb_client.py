"""DuckDB client utilities for the backing relational store."""

from contextlib import contextmanager
from pathlib import Path
from typing import Any

import duckdb
import pandas as pd

from ..config.loader import get_config
from ..exceptions import ExtractionError, FileSystemError, LoadError, wrap_exception
from .logging_config import log_with_context


class DuckDBClient:
    """Client for DuckDB database operations."""

    def __init__(
        self,
        database_path: str | None = None,
        read_only: bool = False,
        threads: int | None = None,
        memory_limit_gb: int | None = None,
    ):
        """Initialize DuckDB client.

        Args:
            database_path: Path to database file, or None for in-memory
            read_only: Whether to open database in read-only mode
            threads: Optional DuckDB thread count
            memory_limit_gb: Optional DuckDB memory limit
        """
        self.database_path = database_path or ":memory:"
        self.read_only = read_only
        self.threads = threads
        self.memory_limit_gb = memory_limit_gb
        # In-memory databases only live as long as their connection
        self._persistent_conn: duckdb.DuckDBPyConnection | None = None

    def _configure(self, conn: duckdb.DuckDBPyConnection) -> None:
        if self.threads:
            conn.execute(f"SET threads={int(self.threads)}")
        if self.memory_limit_gb:
            conn.execute(f"SET memory_limit='{int(self.memory_limit_gb)}GB'")

    @contextmanager
    def connection(self):
        """Context manager for database connection."""
        if self.database_path == ":memory:":
            if self._persistent_conn is None:
                self._persistent_conn = duckdb.connect(self.database_path)
                self._configure(self._persistent_conn)
            yield self._persistent_conn
        else:
            if not self.read_only:
                Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)
            conn = duckdb.connect(self.database_path, read_only=self.read_only)
            try:
                self._configure(conn)
                yield conn
            finally:
                conn.close()

    def close(self) -> None:
        """Close persistent connection if it exists."""
        if self._persistent_conn is not None:
            self._persistent_conn.close()
            self._persistent_conn = None

    def execute_query_df(self, query: str, parameters: list[Any] | None = None) -> pd.DataFrame:
        """Execute a query and return results as pandas DataFrame.

        Raises:
            ExtractionError: if DuckDB rejects the query
        """
        try:
            with self.connection() as conn:
                if parameters:
                    return conn.execute(query, parameters).fetchdf()
                return conn.execute(query).fetchdf()
        except duckdb.Error as e:
            raise wrap_exception(
                e,
                ExtractionError,
                message=f"Query failed: {e}",
                component="utils.duckdb_client",
                operation="execute_query_df",
                details={"query": query.strip()[:200]},
            ) from e

    def read_table(self, table_name: str, columns: list[str] | None = None) -> pd.DataFrame:
        """Read a whole table (optionally a subset of its columns)."""
        select = ", ".join(f'"{col}"' for col in columns) if columns else "*"
        return self.execute_query_df(f'SELECT {select} FROM "{table_name}"')

    def table_columns(self, table_name: str) -> list[str]:
        """Column names of a table, in declaration order."""
        df = self.execute_query_df(
            "SELECT column_name FROM information_schema.columns "
            "WHERE table_name = ? ORDER BY ordinal_position",
            [table_name],
        )
        return df["column_name"].tolist()

    def table_exists(self, table_name: str) -> bool:
        """Check if table exists."""
        df = self.execute_query_df(
            "SELECT table_name FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        )
        return len(df) > 0

    def row_count(self, table_name: str) -> int:
        df = self.execute_query_df(f'SELECT COUNT(*) AS n FROM "{table_name}"')
        return int(df["n"].iloc[0])

    def import_csv(self, csv_path: Path, table_name: str, delimiter: str = ",") -> int:
        """Import a CSV file into a (re-created) DuckDB table.

        Returns:
            Number of imported rows
        """
        with log_with_context(stage="extract", run_id="csv_import") as logger:
            if not csv_path.exists():
                raise FileSystemError(
                    f"CSV file not found: {csv_path}",
                    file_path=str(csv_path),
                    operation="import_csv",
                )

            logger.info(f"Importing CSV {csv_path} into table {table_name}")
            try:
                with self.connection() as conn:
                    conn.execute(f'DROP TABLE IF EXISTS "{table_name}"')
                    conn.execute(
                        f"CREATE TABLE \"{table_name}\" AS "
                        f"SELECT * FROM read_csv_auto(?, delim=?, header=true)",
                        [str(csv_path), delimiter],
                    )
                    row_count = conn.execute(f'SELECT COUNT(*) FROM "{table_name}"').fetchone()[0]
            except duckdb.Error as e:
                raise wrap_exception(
                    e,
                    ExtractionError,
                    message=f"Failed to import CSV {csv_path}: {e}",
                    component="utils.duckdb_client",
                    operation="import_csv",
                    details={"table": table_name},
                ) from e

            logger.info(f"Imported {row_count} rows into table '{table_name}'")
            return int(row_count)

    def replace_table_from_df(self, df: pd.DataFrame, table_name: str) -> int:
        """Drop ``table_name`` and recreate it from a DataFrame.

        Returns:
            Number of rows written
        """
        try:
            with self.connection() as conn:
                conn.register("temp_df", df)
                try:
                    conn.execute(f'DROP TABLE IF EXISTS "{table_name}"')
                    conn.execute(f'CREATE TABLE "{table_name}" AS SELECT * FROM temp_df')
                    row_count = conn.execute(f'SELECT COUNT(*) FROM "{table_name}"').fetchone()[0]
                finally:
                    conn.unregister("temp_df")
        except duckdb.Error as e:
            raise wrap_exception(
                e,
                LoadError,
                message=f"Failed to replace table {table_name}: {e}",
                component="utils.duckdb_client",
                operation="replace_table_from_df",
                details={"table": table_name, "rows": len(df)},
                retryable=isinstance(e, duckdb.IOException),
            ) from e
        return int(row_count)

    def replace_tables_from_dfs(self, frames: dict[str, pd.DataFrame]) -> dict[str, int]:
        """Drop and recreate several tables in one transaction.

        Either every table holds its new rows afterwards or none was touched.

        Returns:
            Number of rows written per table name

        Raises:
            LoadError: if any write fails (the transaction is rolled back)
        """
        written: dict[str, int] = {}
        with self.connection() as conn:
            conn.execute("BEGIN TRANSACTION")
            try:
                for i, (table_name, df) in enumerate(frames.items()):
                    view = f"temp_df_{i}"
                    conn.register(view, df)
                    try:
                        conn.execute(f'DROP TABLE IF EXISTS "{table_name}"')
                        conn.execute(f'CREATE TABLE "{table_name}" AS SELECT * FROM {view}')
                        written[table_name] = conn.execute(
                            f'SELECT COUNT(*) FROM "{table_name}"'
                        ).fetchone()[0]
                    finally:
                        conn.unregister(view)
                conn.execute("COMMIT")
            except duckdb.Error as e:
                conn.execute("ROLLBACK")
                raise wrap_exception(
                    e,
                    LoadError,
                    message=f"Failed to replace tables, no table was changed: {e}",
                    component="utils.duckdb_client",
                    operation="replace_tables_from_dfs",
                    details={"tables": list(frames)},
                    retryable=isinstance(e, duckdb.IOException),
                ) from e
        return {table: int(rows) for table, rows in written.items()}


def get_duckdb_client() -> DuckDBClient:
    """Get configured DuckDB client instance."""
    config = get_config()
    return DuckDBClient(
        database_path=config.duckdb.database_path,
        read_only=config.duckdb.read_only,
        threads=config.duckdb.threads,
        memory_limit_gb=config.duckdb.memory_limit_gb,
    )
