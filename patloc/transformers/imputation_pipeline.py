"""End-to-end first filing imputation run.

Stages, each fully materialised before the next one starts:

1. classification of first filings (one pass per imputation profile)
2. the unfiltered first/subsequent filing bridge
3. the candidate pool of every profile
4. geographic and country-code imputation
5. invariant checks and coverage counts

Every stage returns fresh DataFrames; nothing is shared between runs.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from ..config.loader import get_config
from ..config.schemas import PipelineConfig
from ..exceptions import DataQualityError
from ..extractors.patstat import PatstatTables
from ..models import CoverageSummary, QualityIssue, QualitySeverity
from ..utils.logging_config import log_with_context
from ..validators import (
    coverage_summary,
    has_critical_issues,
    validate_first_filings,
    validate_imputed_output,
)
from .bridge import build_bridge_table
from .candidate_pool import build_candidate_pool
from .country_imputation import impute_inventor_countries
from .first_filing_resolver import FilingScope, classify_first_filings
from .location_imputation import impute_inventor_locations
from .location_preparation import prepare_geocoded_locations


GEOGRAPHIC = "geographic"
COUNTRY = "country"

GEO_KEYS = ["appln_id"]
COUNTRY_KEYS = ["appln_id", "person_id"]


@dataclass(frozen=True, eq=False)
class ImputationResult:
    """Everything one run produced."""

    run_id: str
    first_filings: dict[str, pd.DataFrame]
    pools: dict[str, pd.DataFrame]
    bridge: pd.DataFrame
    inventor_locations: pd.DataFrame | None = None
    inventor_countries: pd.DataFrame | None = None
    quality_issues: tuple[QualityIssue, ...] = ()
    coverage: tuple[CoverageSummary, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return not has_critical_issues(self.quality_issues)

    def output_tables(self) -> dict[str, pd.DataFrame]:
        """Outputs keyed by their logical name in ``duckdb.output_tables``.

        The per-profile first filings and pools are stacked with a ``profile``
        column.
        """
        tables = {
            "first_filings": stack_profiles(self.first_filings),
            "bridge": self.bridge,
            "pool": stack_profiles(self.pools),
        }
        if self.inventor_locations is not None:
            tables["geographic"] = self.inventor_locations
        if self.inventor_countries is not None:
            tables["country"] = self.inventor_countries
        return tables


def stack_profiles(frames: dict[str, pd.DataFrame]) -> pd.DataFrame:
    if not frames:
        return pd.DataFrame()
    return pd.concat(
        [df.assign(profile=profile) for profile, df in frames.items()], ignore_index=True
    )


class FirstFilingImputationPipeline:
    """Runs every stage against one snapshot of the input tables."""

    def __init__(self, config: PipelineConfig | None = None):
        self.config = config or get_config()

    def _variants(self) -> list[str]:
        return [v for v in (GEOGRAPHIC, COUNTRY) if v in self.config.imputation.variants]

    def run(
        self,
        tables: PatstatTables,
        run_id: str | None = None,
        lastupdate: datetime | None = None,
    ) -> ImputationResult:
        """Run the whole pipeline.

        Raises:
            FirstFilingResolutionError: if classification fails
            ImputationError: if a donor tier fails
            DataQualityError: if strict validation is enabled and an output
                invariant does not hold
        """
        run_id = run_id or uuid.uuid4().hex[:8]
        lastupdate = lastupdate or datetime.now()
        imputation = self.config.imputation
        variants = self._variants()

        first_filings: dict[str, pd.DataFrame] = {}
        for profile in variants:
            with log_with_context(stage="first_filings", run_id=run_id) as log:
                scope = FilingScope.from_config(self.config.scope, profile=profile)
                first_filings[profile] = classify_first_filings(tables, scope)
                log.info(
                    f"{len(first_filings[profile])} first filings classified ({profile} profile)",
                    **first_filings[profile]["type"].value_counts().to_dict(),
                )

        with log_with_context(stage="bridge", run_id=run_id):
            bridge = build_bridge_table(tables, lastupdate=lastupdate)

        pools: dict[str, pd.DataFrame] = {}
        with log_with_context(stage="pool", run_id=run_id):
            for profile in variants:
                pools[profile] = build_candidate_pool(first_filings[profile], tables)

        locations = None
        if GEOGRAPHIC in variants:
            with log_with_context(stage="impute_geo", run_id=run_id):
                locations = impute_inventor_locations(
                    first_filings[GEOGRAPHIC],
                    pools[GEOGRAPHIC],
                    prepare_geocoded_locations(tables.geocoded_locations),
                    tables.person_applications,
                    unknown_person_id=imputation.unknown_person_id,
                    lastupdate=lastupdate,
                )

        countries = None
        if COUNTRY in variants:
            with log_with_context(stage="impute_country", run_id=run_id):
                countries = impute_inventor_countries(
                    first_filings[COUNTRY],
                    pools[COUNTRY],
                    tables.person_applications,
                    tables.persons,
                    supranational_offices=imputation.supranational_offices,
                    unknown_person_id=imputation.unknown_person_id,
                    lastupdate=lastupdate,
                )

        with log_with_context(stage="validate", run_id=run_id) as log:
            issues: list[QualityIssue] = []
            coverage: list[CoverageSummary] = []
            for ff in first_filings.values():
                issues += validate_first_filings(ff)
            if locations is not None:
                issues += validate_imputed_output(locations, GEO_KEYS)
                coverage.append(coverage_summary(GEOGRAPHIC, first_filings[GEOGRAPHIC], locations))
            if countries is not None:
                issues += validate_imputed_output(
                    countries, COUNTRY_KEYS, imputation.supranational_offices
                )
                coverage.append(coverage_summary(COUNTRY, first_filings[COUNTRY], countries))

            for summary in coverage:
                log.info(
                    f"{summary.table}: {summary.covered_first_filings}/{summary.first_filings} "
                    f"first filings covered ({summary.coverage_ratio:.1%}), {summary.total_rows} rows",
                    **{f"source_{rank}": n for rank, n in summary.rows_by_source.items()},
                )
            for issue in issues:
                log.warning(f"Quality issue [{issue.rule}]: {issue.message}")

            critical = [i for i in issues if i.severity == QualitySeverity.CRITICAL]
            if critical and imputation.strict_validation:
                raise DataQualityError(
                    f"{len(critical)} output invariant(s) violated",
                    threshold=0,
                    actual_value=len(critical),
                    component="transformer.imputation_pipeline",
                    operation="run",
                    details={"issues": [i.model_dump() for i in critical]},
                )

        return ImputationResult(
            run_id=run_id,
            first_filings=first_filings,
            pools=pools,
            bridge=bridge,
            inventor_locations=locations,
            inventor_countries=countries,
            quality_issues=tuple(issues),
            coverage=tuple(coverage),
        )
