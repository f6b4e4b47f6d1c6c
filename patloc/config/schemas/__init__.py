"""Modular configuration schemas for the first-filing imputation pipeline."""

from .data_pipeline import DuckDBConfig, InputTablesConfig, OutputTablesConfig
from .imputation import (
    DEFAULT_EXCLUDED_PUBLICATION_KINDS,
    DEFAULT_JURISDICTIONS,
    DEFAULT_SUPRANATIONAL_OFFICES,
    ImputationConfig,
    ScopeConfig,
    ScopeFilters,
)
from .pipeline import PipelineConfig, PipelineMetadata
from .runtime import LoggingConfig


__all__ = [
    "DEFAULT_EXCLUDED_PUBLICATION_KINDS",
    "DEFAULT_JURISDICTIONS",
    "DEFAULT_SUPRANATIONAL_OFFICES",
    "DuckDBConfig",
    "ImputationConfig",
    "InputTablesConfig",
    "LoggingConfig",
    "OutputTablesConfig",
    "PipelineConfig",
    "PipelineMetadata",
    "ScopeConfig",
    "ScopeFilters",
]
