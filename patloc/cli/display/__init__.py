"""Rich display helpers for the CLI."""

from .errors import CLIError, format_error, handle_error


__all__ = ["CLIError", "format_error", "handle_error"]
