"""Domain models: filing enums, column layouts and quality reporting."""

from .filing import (
    BRIDGE_COLUMNS,
    FIRST_FILING_COLUMNS,
    POOL_COLUMNS,
    FirstFilingType,
    PersonRole,
    RelationshipKind,
    SourceRank,
)
from .quality import CoverageSummary, QualityIssue, QualitySeverity


__all__ = [
    "BRIDGE_COLUMNS",
    "FIRST_FILING_COLUMNS",
    "POOL_COLUMNS",
    "CoverageSummary",
    "FirstFilingType",
    "PersonRole",
    "QualityIssue",
    "QualitySeverity",
    "RelationshipKind",
    "SourceRank",
]
