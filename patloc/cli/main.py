"""Main CLI application entry point for the first filing imputation pipeline."""

from __future__ import annotations

import typer
from rich.console import Console

from ..exceptions import ConfigurationError
from ..utils.logging_config import setup_logging
from .context import CommandContext
from .display.errors import handle_error


app = typer.Typer(
    name="patloc",
    help="First filing imputation of inventor locations and country codes",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    environment: str | None = typer.Option(
        None, "--environment", "-e", help="Configuration overlay (config/<environment>.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Classify first filings and impute missing inventor locations and country codes."""
    try:
        ctx.obj = CommandContext.create(environment=environment)
    except ConfigurationError as e:
        handle_error(e)

    logging_config = ctx.obj.config.logging
    setup_logging(
        level="DEBUG" if verbose else logging_config.level,
        format_type=logging_config.format,
        file_path=logging_config.file_path if logging_config.file_enabled else None,
        max_file_size_mb=logging_config.max_file_size_mb,
        backup_count=logging_config.backup_count,
        include_stage=logging_config.include_stage,
        include_run_id=logging_config.include_run_id,
        include_timestamps=logging_config.include_timestamps,
    )


from .commands import run, summary  # noqa: E402

run.register_command(app)
summary.register_command(app)


if __name__ == "__main__":
    app()
