"""Output invariant checks."""

from .imputation_checks import (
    check_allowed_values,
    check_unique_keys,
    coverage_summary,
    has_critical_issues,
    validate_first_filings,
    validate_imputed_output,
)


__all__ = [
    "check_allowed_values",
    "check_unique_keys",
    "coverage_summary",
    "has_critical_issues",
    "validate_first_filings",
    "validate_imputed_output",
]
