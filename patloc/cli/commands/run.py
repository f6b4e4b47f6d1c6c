"""Run the whole imputation pipeline against a DuckDB database."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from ...exceptions import PatlocError
from ...extractors.patstat import PatstatExtractor
from ...loaders.duckdb_loader import DuckDBLoader
from ...transformers.imputation_pipeline import FirstFilingImputationPipeline, ImputationResult
from ...utils.duckdb_client import DuckDBClient
from ..context import CommandContext
from ..display.errors import handle_error


def _coverage_table(result: ImputationResult, written: dict[str, int]) -> Table:
    table = Table(title=f"Run {result.run_id}", show_header=True, header_style="bold magenta")
    table.add_column("Output", style="cyan", no_wrap=True)
    table.add_column("Rows", justify="right")
    table.add_column("First filings covered", justify="right")
    table.add_column("Rows by source", style="dim")

    coverage = {summary.table: summary for summary in result.coverage}
    for name, rows in written.items():
        table.add_row(name, f"{rows:,}", "-", "-")
    for summary in coverage.values():
        by_source = ", ".join(f"{rank}: {n:,}" for rank, n in summary.rows_by_source.items())
        table.add_row(
            f"{summary.table} imputation",
            f"{summary.total_rows:,}",
            f"{summary.covered_first_filings:,}/{summary.first_filings:,} ({summary.coverage_ratio:.1%})",
            by_source or "-",
        )
    return table


def run(
    ctx: typer.Context,
    database: Path | None = typer.Option(
        None, "--database", "-d", help="DuckDB database (defaults to duckdb.database_path)"
    ),
    csv_dir: Path | None = typer.Option(
        None, "--csv-dir", help="Import <table>.csv files from this directory before running"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail when an output invariant does not hold"
    ),
) -> None:
    """Rebuild the first filing and imputed output tables."""
    context: CommandContext = ctx.obj
    config = context.config
    updates = {}
    if database is not None:
        updates["duckdb"] = config.duckdb.model_copy(update={"database_path": str(database)})
    if strict:
        updates["imputation"] = config.imputation.model_copy(update={"strict_validation": True})
    if updates:
        config = config.model_copy(update=updates)

    client = DuckDBClient(
        database_path=config.duckdb.database_path,
        read_only=False,
        threads=config.duckdb.threads,
        memory_limit_gb=config.duckdb.memory_limit_gb,
    )
    try:
        extractor = PatstatExtractor(client, config.duckdb.input_tables)
        if csv_dir is not None:
            extractor.import_csv_directory(csv_dir)
        tables = extractor.extract()
        result = FirstFilingImputationPipeline(config).run(tables, run_id=context.run_id)
        written = DuckDBLoader(client, config.duckdb.output_tables).write_result(result)
    except PatlocError as e:
        context.logger.error(f"Run failed: {e.message}", **e.to_dict())
        handle_error(e, context)
    finally:
        client.close()

    context.console.print(_coverage_table(result, written))
    if not result.passed:
        context.console.print(
            f"[yellow]{len(result.quality_issues)} quality issue(s) reported, see the log[/yellow]"
        )


def register_command(main_app: typer.Typer) -> None:
    """Register the run command with main app."""
    main_app.command("run")(run)
