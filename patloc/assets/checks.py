"""Asset checks for the output invariants of the imputation stages."""

import pandas as pd
from dagster import (
    AssetCheckExecutionContext,
    AssetCheckResult,
    AssetCheckSeverity,
    MetadataValue,
    asset_check,
)

from ..config.loader import get_config
from ..models import QualityIssue
from ..transformers.imputation_pipeline import COUNTRY_KEYS, GEO_KEYS
from ..validators import validate_first_filings, validate_imputed_output
from .first_filing_assets import (
    first_filings,
    imputed_inventor_countries,
    imputed_inventor_locations,
)


def _result(issues: list[QualityIssue], subject: str, rows: int) -> AssetCheckResult:
    passed = not issues
    if passed:
        description = f"✓ {subject}: all invariants hold ({rows} rows)"
    else:
        description = f"✗ {subject}: {len(issues)} invariant(s) violated"
    return AssetCheckResult(
        passed=passed,
        severity=AssetCheckSeverity.WARN if passed else AssetCheckSeverity.ERROR,
        description=description,
        metadata={
            "rows": rows,
            "issues": MetadataValue.json([issue.model_dump(mode="json") for issue in issues]),
        },
    )


@asset_check(asset=first_filings, description="Every first filing carries exactly one type tag")
def first_filings_single_tag_check(
    context: AssetCheckExecutionContext, first_filings: dict
) -> AssetCheckResult:
    issues = []
    for df in first_filings.values():
        issues += validate_first_filings(df)
    rows = sum(len(df) for df in first_filings.values())
    context.log.info(f"Single tag check: {len(issues)} issue(s)")
    return _result(issues, "first filings", rows)


@asset_check(
    asset=imputed_inventor_locations,
    description="At most one location per first filing, source rank within 1..7",
)
def inventor_locations_invariants_check(
    context: AssetCheckExecutionContext, imputed_inventor_locations: pd.DataFrame
) -> AssetCheckResult:
    issues = validate_imputed_output(imputed_inventor_locations, GEO_KEYS)
    context.log.info(f"Location invariants check: {len(issues)} issue(s)")
    return _result(issues, "inventor locations", len(imputed_inventor_locations))


@asset_check(
    asset=imputed_inventor_countries,
    description=(
        "At most one country per (first filing, person), source rank within 1..7, "
        "no supranational office used as a country"
    ),
)
def inventor_countries_invariants_check(
    context: AssetCheckExecutionContext, imputed_inventor_countries: pd.DataFrame
) -> AssetCheckResult:
    issues = validate_imputed_output(
        imputed_inventor_countries,
        COUNTRY_KEYS,
        get_config().imputation.supranational_offices,
    )
    context.log.info(f"Country invariants check: {len(issues)} issue(s)")
    return _result(issues, "inventor countries", len(imputed_inventor_countries))
