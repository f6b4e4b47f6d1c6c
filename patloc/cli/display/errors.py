"""Error formatting and display utilities."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ...exceptions import (
    ConfigurationError,
    FileSystemError,
    PatlocError,
    ValidationError,
    get_error_code,
    is_retryable,
)
from ..context import CommandContext


class CLIError(Exception):
    """CLI error with exit code and suggested fixes."""

    def __init__(self, message: str, exit_code: int = 1, suggestions: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.suggestions = suggestions or []


def _suggestions(error: Exception) -> list[str]:
    if isinstance(error, CLIError):
        return error.suggestions
    if isinstance(error, ConfigurationError):
        return [
            "Verify config/base.yaml syntax",
            "Check PATLOC__SECTION__KEY environment variable overrides",
        ]
    if isinstance(error, FileSystemError):
        return ["Check the --csv-dir and --database paths"]
    if isinstance(error, ValidationError):
        return [
            "Check that the input tables carry the required columns",
            "Run with --verbose for detailed error messages",
        ]
    if is_retryable(error):
        return ["The failure is transient; re-run the command"]
    return []


def format_error(error: Exception) -> Panel:
    """Format an error for Rich display."""
    error_text = Text()
    error_text.append("✗ ", style="bold red")
    error_text.append(error.message if isinstance(error, PatlocError) else str(error), style="red")

    if type(error).__name__ != "Exception":
        error_text.append(f"\n\nType: {type(error).__name__}", style="dim")
    if isinstance(error, PatlocError) and error.component:
        error_text.append(f"\nComponent: {error.component}", style="dim")
    code = get_error_code(error)
    if code is not None:
        error_text.append(f"\nCode: {code}", style="dim")

    suggestions = _suggestions(error)
    if suggestions:
        suggestion_text = Text("\n\nSuggested fixes:", style="bold yellow")
        for i, suggestion in enumerate(suggestions, 1):
            suggestion_text.append(f"\n  {i}. {suggestion}", style="yellow")
        error_text.append(suggestion_text)

    return Panel(error_text, title="Error", border_style="red")


def exit_code_for(error: Exception) -> int:
    """2 for configuration errors, the CLIError's own code, 1 otherwise."""
    if isinstance(error, CLIError):
        return error.exit_code
    if isinstance(error, ConfigurationError):
        return 2
    return 1


def handle_error(
    error: Exception,
    context: CommandContext | None = None,
    exit_code: int | None = None,
) -> None:
    """Display an error panel, then exit.

    Raises:
        typer.Exit: always
    """
    console = context.console if context else Console()
    console.print(format_error(error))
    raise typer.Exit(code=exit_code if exit_code is not None else exit_code_for(error))
