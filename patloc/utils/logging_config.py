"""Structured logging configuration using loguru."""

import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path

from loguru import logger

from ..config.loader import get_config


stage_context: ContextVar[str | None] = ContextVar("stage", default=None)
run_id_context: ContextVar[str | None] = ContextVar("run_id", default=None)

_VALID_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    file_path: str | None = None,
    max_file_size_mb: int = 100,
    backup_count: int = 5,
    include_stage: bool = True,
    include_run_id: bool = True,
    include_timestamps: bool = True,
) -> None:
    """Install the console sink and an optional rotating file sink.

    Unknown level names fall back to INFO with a warning.
    """
    logger.remove()
    # stage/run_id are referenced by the text format even when nothing is bound
    logger.configure(extra={"stage": "-", "run_id": "-"})

    format_parts = []
    if include_timestamps:
        format_parts.append("<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>")
    format_parts.append("<level>{level: <8}</level>")
    if include_stage:
        format_parts.append("<cyan>{extra[stage]: <14}</cyan>")
    if include_run_id:
        format_parts.append("<magenta>{extra[run_id]: <8}</magenta>")
    format_parts.append("<level>{message}</level>")

    if format_type == "json":
        log_format = "{message}"
        serialize = True
    else:
        log_format = " | ".join(format_parts)
        serialize = False

    safe_level = level.upper() if level.upper() in _VALID_LEVELS else "INFO"

    logger.add(
        sys.stdout,
        level=safe_level,
        format=log_format,
        serialize=serialize,
        colorize=format_type != "json",
    )

    if file_path:
        log_file_path = Path(file_path)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file_path,
            level=safe_level,
            format=log_format,
            serialize=serialize,
            rotation=f"{max_file_size_mb} MB",
            retention=backup_count,
            encoding="utf-8",
        )

    if safe_level != level.upper():
        logger.warning(f"Invalid logging level '{level}' provided; falling back to 'INFO'")


def configure_logging_from_config() -> None:
    """Configure logging using the current configuration."""
    config = get_config()

    setup_logging(
        level=config.logging.level,
        format_type=config.logging.format,
        file_path=config.logging.file_path if config.logging.file_enabled else None,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        include_stage=config.logging.include_stage,
        include_run_id=config.logging.include_run_id,
        include_timestamps=config.logging.include_timestamps,
    )


@contextmanager
def log_with_context(stage: str | None = None, run_id: str | None = None):
    """Bind ``stage`` and ``run_id`` for the duration of the block.

    Yields a logger carrying both values; code called inside the block picks
    them up through ``current_logger``.
    """
    tokens = []
    if stage is not None:
        tokens.append((stage_context, stage_context.set(stage)))
    if run_id is not None:
        tokens.append((run_id_context, run_id_context.set(run_id)))
    try:
        yield current_logger()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def current_logger():
    """Logger bound to the stage and run id of the enclosing ``log_with_context``."""
    return logger.bind(stage=stage_context.get() or "-", run_id=run_id_context.get() or "-")
