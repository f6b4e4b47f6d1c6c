"""Pydantic models for data quality reporting."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QualitySeverity(str, Enum):
    """Severity levels for quality issues."""

    WARNING = "warning"
    HIGH = "high"
    CRITICAL = "critical"


class QualityIssue(BaseModel):
    """Individual data quality issue."""

    field: str = Field(..., description="Column (or column set) with the issue")
    value: Any | None = Field(None, description="Offending value or count")
    expected: Any | None = Field(None, description="Expected value or bound")
    message: str = Field(..., description="Human-readable error message")
    severity: QualitySeverity = Field(..., description="Issue severity level")
    rule: str | None = Field(None, description="Check that failed")

    model_config = ConfigDict(validate_assignment=True, use_enum_values=True)


class CoverageSummary(BaseModel):
    """Row counts of one imputed output table."""

    table: str = Field(..., description="Logical output name")
    first_filings: int = Field(..., ge=0, description="First filings eligible for imputation")
    covered_first_filings: int = Field(..., ge=0, description="First filings present in output")
    total_rows: int = Field(..., ge=0)
    rows_by_source: dict[int, int] = Field(default_factory=dict)
    rows_by_type: dict[str, int] = Field(default_factory=dict)

    @property
    def coverage_ratio(self) -> float:
        if self.first_filings == 0:
            return 0.0
        return self.covered_first_filings / self.first_filings


__all__ = ["CoverageSummary", "QualityIssue", "QualitySeverity"]
