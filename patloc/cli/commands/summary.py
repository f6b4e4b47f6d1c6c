"""Row counts of the output tables."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from ...exceptions import PatlocError
from ...utils.duckdb_client import DuckDBClient
from ..context import CommandContext
from ..display.errors import handle_error


_SOURCE_BREAKDOWN = ("geographic", "country")


def summary(
    ctx: typer.Context,
    database: Path | None = typer.Option(
        None, "--database", "-d", help="DuckDB database (defaults to duckdb.database_path)"
    ),
) -> None:
    """Show row counts of the output tables, per source rank for imputed tables."""
    context: CommandContext = ctx.obj
    output_tables = context.config.duckdb.output_tables
    client = DuckDBClient(
        database_path=str(database) if database else context.config.duckdb.database_path,
        read_only=True,
    )

    table = Table(title="Output tables", show_header=True, header_style="bold magenta")
    table.add_column("Output", style="cyan", no_wrap=True)
    table.add_column("Table", style="blue")
    table.add_column("Rows", justify="right")
    table.add_column("Rows by source", style="dim")

    try:
        for logical_name, table_name in output_tables.model_dump().items():
            if not client.table_exists(table_name):
                table.add_row(logical_name, table_name, "[dim]missing[/dim]", "-")
                continue
            by_source = "-"
            if logical_name in _SOURCE_BREAKDOWN:
                counts = client.execute_query_df(
                    f'SELECT source, COUNT(*) AS n FROM "{table_name}" GROUP BY source ORDER BY source'
                )
                by_source = ", ".join(
                    f"{int(row.source)}: {int(row.n):,}" for row in counts.itertuples()
                )
            table.add_row(logical_name, table_name, f"{client.row_count(table_name):,}", by_source)
    except PatlocError as e:
        handle_error(e, context)
    finally:
        client.close()

    context.console.print(table)


def register_command(main_app: typer.Typer) -> None:
    """Register the summary command with main app."""
    main_app.command("summary")(summary)
