"""
Dagster job that materialises every first filing imputation stage.

Materializes patstat_tables, first_filings, first_filing_bridge,
subsequent_filing_pool, imputed_inventor_locations and
imputed_inventor_countries; the asset checks in ``patloc.assets.checks`` run
against the stage outputs in the same run.
"""

from ..first_filing_assets import GROUP_NAME
from .job_registry import JobSpec, build_job_from_spec


first_filing_imputation_job = build_job_from_spec(
    JobSpec(
        name="first_filing_imputation_job",
        description=(
            "Classify first filings, build the bridge and candidate pools, and rebuild "
            "the imputed inventor location and country tables."
        ),
        asset_groups=(GROUP_NAME,),
    )
)


__all__ = ["first_filing_imputation_job"]
