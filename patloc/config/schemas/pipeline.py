"""Root PipelineConfig composed from modular schema components."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .data_pipeline import DuckDBConfig
from .imputation import ImputationConfig, ScopeConfig
from .runtime import LoggingConfig


class PipelineMetadata(BaseModel):
    """Metadata for the configured pipeline."""

    name: str = Field(default="patloc-first-filings", description="Pipeline identifier")
    version: str = Field(default="0.1.0", description="Semantic version of the pipeline")
    environment: str = Field(default="development", description="Active environment name")

    model_config = ConfigDict(extra="allow")


class PipelineConfig(BaseModel):
    """Root configuration model for the first-filing imputation pipeline."""

    pipeline: PipelineMetadata = Field(default_factory=PipelineMetadata)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    duckdb: DuckDBConfig = Field(default_factory=DuckDBConfig)
    scope: ScopeConfig = Field(default_factory=ScopeConfig)
    imputation: ImputationConfig = Field(default_factory=ImputationConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="allow",
    )


__all__ = ["PipelineConfig", "PipelineMetadata"]
