"""Invariant and coverage checks for first filings and imputed outputs."""

from collections.abc import Iterable, Sequence

import pandas as pd

from ..models import CoverageSummary, FirstFilingType, QualityIssue, QualitySeverity, SourceRank


def check_unique_keys(df: pd.DataFrame, keys: Sequence[str], rule: str) -> list[QualityIssue]:
    """Report rows sharing the same key.

    Args:
        df: DataFrame to check
        keys: Columns forming the key
        rule: Rule name recorded on the issue

    Returns:
        List of quality issues found
    """
    missing = [key for key in keys if key not in df.columns]
    if missing:
        return [
            QualityIssue(
                field=str(missing),
                value=None,
                expected="columns exist",
                message=f"Key columns are missing: {missing}",
                severity=QualitySeverity.CRITICAL,
                rule=rule,
            )
        ]

    duplicated = int(df.duplicated(subset=list(keys), keep=False).sum())
    if not duplicated:
        return []
    return [
        QualityIssue(
            field=str(list(keys)),
            value=duplicated,
            expected=0,
            message=f"Found {duplicated} rows sharing a key on {list(keys)}",
            severity=QualitySeverity.CRITICAL,
            rule=rule,
        )
    ]


def check_allowed_values(
    df: pd.DataFrame, field: str, allowed: Iterable, rule: str
) -> list[QualityIssue]:
    allowed = list(allowed)
    invalid = df.loc[~df[field].isin(allowed), field]
    if invalid.empty:
        return []
    examples = [value if pd.notna(value) else None for value in invalid.unique()[:5]]
    return [
        QualityIssue(
            field=field,
            value=examples,
            expected=allowed,
            message=f"Found {len(invalid)} values of '{field}' outside {allowed}",
            severity=QualitySeverity.CRITICAL,
            rule=rule,
        )
    ]


def validate_first_filings(first_filings: pd.DataFrame) -> list[QualityIssue]:
    """Every first filing carries exactly one known type tag."""
    issues = check_unique_keys(first_filings, ["appln_id"], rule="single_type_tag")
    issues += check_allowed_values(
        first_filings, "type", [t.value for t in FirstFilingType], rule="known_type_tag"
    )
    return issues


def validate_imputed_output(
    df: pd.DataFrame,
    keys: Sequence[str],
    supranational_offices: Iterable[str] = (),
) -> list[QualityIssue]:
    """Check an imputed output table.

    Checks at most one row per key, source ranks within 1..7 and, when the
    table carries country codes, that no supranational office code was used
    as a country.

    Args:
        df: Geographic or country-code output
        keys: Output key columns
        supranational_offices: Office codes that do not denote a country

    Returns:
        List of quality issues found
    """
    issues = check_unique_keys(df, keys, rule="one_row_per_key")
    issues += check_allowed_values(
        df, "source", [int(rank) for rank in SourceRank], rule="source_rank_range"
    )

    if "ctry_code" in df.columns:
        offices = sorted(set(supranational_offices))
        fallback = df["source"].eq(int(SourceRank.JURISDICTION_FALLBACK)).fillna(False)
        supranational = fallback & df["ctry_code"].isin(offices)
        if supranational.any():
            issues.append(
                QualityIssue(
                    field="ctry_code",
                    value=int(supranational.sum()),
                    expected=0,
                    message=(
                        f"{int(supranational.sum())} fallback rows use a supranational "
                        f"office as country code"
                    ),
                    severity=QualitySeverity.CRITICAL,
                    rule="no_supranational_fallback",
                )
            )
    return issues


def coverage_summary(table: str, first_filings: pd.DataFrame, output: pd.DataFrame) -> CoverageSummary:
    """Row counts of ``output`` per source rank and per type."""
    return CoverageSummary(
        table=table,
        first_filings=int(first_filings["appln_id"].nunique()),
        covered_first_filings=int(output["appln_id"].nunique()),
        total_rows=len(output),
        rows_by_source={
            int(rank): int(n) for rank, n in output["source"].value_counts().sort_index().items()
        },
        rows_by_type={str(t): int(n) for t, n in output["type"].value_counts().sort_index().items()},
    )


def has_critical_issues(issues: Iterable[QualityIssue]) -> bool:
    return any(issue.severity == QualitySeverity.CRITICAL for issue in issues)
