"""Runtime-supporting configuration schemas (logging)."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "text"
    file_path: str | None = "logs/patloc.log"
    max_file_size_mb: int = 100
    backup_count: int = 5
    include_stage: bool = True
    include_run_id: bool = True
    include_timestamps: bool = True
    file_enabled: bool = False

    @field_validator("format")
    @classmethod
    def _normalize_format(cls, value: str) -> str:
        lowered = value.lower()
        if lowered in {"pretty", "text", "plain"}:
            return "text"
        if lowered in {"json", "structured"}:
            return "json"
        raise ValueError(f"Unsupported log format '{value}' (expected 'json' or 'text')")

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


__all__ = ["LoggingConfig"]
