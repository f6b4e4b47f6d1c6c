"""Dagster assets for the first filing imputation stages.

Each asset materialises one stage and rebuilds its output table in the
backing DuckDB database:

  patstat_tables -> first_filings -> subsequent_filing_pool
                 -> first_filing_bridge
  (first_filings, subsequent_filing_pool) -> imputed_inventor_locations
                                          -> imputed_inventor_countries
"""

import pandas as pd
from dagster import AssetExecutionContext, MetadataValue, Output, asset

from ..config.loader import get_config
from ..extractors.patstat import PatstatExtractor, PatstatTables
from ..loaders.duckdb_loader import DuckDBLoader
from ..models.location import COUNTRY_OUTPUT_COLUMNS, GEO_OUTPUT_COLUMNS
from ..transformers.bridge import build_bridge_table
from ..transformers.candidate_pool import build_candidate_pool
from ..transformers.country_imputation import impute_inventor_countries
from ..transformers.first_filing_resolver import FilingScope, classify_first_filings
from ..transformers.imputation_pipeline import COUNTRY, GEOGRAPHIC, stack_profiles
from ..transformers.location_imputation import impute_inventor_locations
from ..transformers.location_preparation import prepare_geocoded_locations
from ..utils.duckdb_client import get_duckdb_client
from ..utils.logging_config import log_with_context


GROUP_NAME = "first_filings"


def _loader() -> DuckDBLoader:
    return DuckDBLoader(get_duckdb_client(), get_config().duckdb.output_tables)


def _counts(series: pd.Series) -> MetadataValue:
    return MetadataValue.json({str(k): int(v) for k, v in series.value_counts().sort_index().items()})


@asset(
    description="Bibliographic input tables read from DuckDB",
    group_name=GROUP_NAME,
    compute_kind="duckdb",
)
def patstat_tables(context: AssetExecutionContext) -> Output[PatstatTables]:
    config = get_config()
    with log_with_context(stage="extract", run_id=context.run_id):
        tables = PatstatExtractor(get_duckdb_client(), config.duckdb.input_tables).extract()

    counts = tables.row_counts()
    context.log.info(f"Loaded {len(counts)} input tables")
    return Output(value=tables, metadata={"row_counts": MetadataValue.json(counts)})


@asset(
    description="First filings with one canonical type tag, per imputation profile",
    group_name=GROUP_NAME,
    compute_kind="pandas",
)
def first_filings(
    context: AssetExecutionContext, patstat_tables: PatstatTables
) -> Output[dict]:
    config = get_config()
    result = {}
    with log_with_context(stage="first_filings", run_id=context.run_id):
        for profile in (GEOGRAPHIC, COUNTRY):
            if profile in config.imputation.variants:
                scope = FilingScope.from_config(config.scope, profile=profile)
                result[profile] = classify_first_filings(patstat_tables, scope)
        rows = _loader().replace_table(stack_profiles(result), config.duckdb.output_tables.first_filings)

    metadata = {"num_records": rows}
    for profile, df in result.items():
        metadata[f"{profile}_first_filings"] = len(df)
        metadata[f"{profile}_by_type"] = _counts(df["type"])
    return Output(value=result, metadata=metadata)


@asset(
    description="Unfiltered first filing / subsequent filing bridge with publications",
    group_name=GROUP_NAME,
    compute_kind="pandas",
)
def first_filing_bridge(
    context: AssetExecutionContext, patstat_tables: PatstatTables
) -> Output[pd.DataFrame]:
    with log_with_context(stage="bridge", run_id=context.run_id):
        bridge = build_bridge_table(patstat_tables)
        _loader().replace_table(bridge, get_config().duckdb.output_tables.bridge)

    return Output(
        value=bridge,
        metadata={
            "num_records": len(bridge),
            "first_filings": int(bridge["prior_appln_id"].nunique()),
            "rows_by_type": _counts(bridge["type"]),
        },
    )


@asset(
    description="Candidate donor pool of every first filing, per imputation profile",
    group_name=GROUP_NAME,
    compute_kind="pandas",
)
def subsequent_filing_pool(
    context: AssetExecutionContext,
    first_filings: dict,
    patstat_tables: PatstatTables,
) -> Output[dict]:
    with log_with_context(stage="pool", run_id=context.run_id):
        pools = {
            profile: build_candidate_pool(df, patstat_tables)
            for profile, df in first_filings.items()
        }
        rows = _loader().replace_table(stack_profiles(pools), get_config().duckdb.output_tables.pool)

    metadata = {"num_records": rows}
    for profile, pool in pools.items():
        metadata[f"{profile}_pairs"] = len(pool)
        metadata[f"{profile}_by_nb_priorities"] = _counts(pool["nb_priorities"])
    return Output(value=pools, metadata=metadata)


@asset(
    description="One imputed inventor location per first filing",
    group_name=GROUP_NAME,
    compute_kind="pandas",
)
def imputed_inventor_locations(
    context: AssetExecutionContext,
    first_filings: dict,
    subsequent_filing_pool: dict,
    patstat_tables: PatstatTables,
) -> Output[pd.DataFrame]:
    config = get_config()
    if GEOGRAPHIC not in first_filings:
        context.log.info("Geographic imputation disabled")
        return Output(value=pd.DataFrame(columns=GEO_OUTPUT_COLUMNS), metadata={"num_records": 0})

    with log_with_context(stage="impute_geo", run_id=context.run_id):
        locations = impute_inventor_locations(
            first_filings[GEOGRAPHIC],
            subsequent_filing_pool[GEOGRAPHIC],
            prepare_geocoded_locations(patstat_tables.geocoded_locations),
            patstat_tables.person_applications,
            unknown_person_id=config.imputation.unknown_person_id,
        )
        _loader().replace_table(locations, config.duckdb.output_tables.geographic)

    return Output(
        value=locations,
        metadata={
            "num_records": len(locations),
            "first_filings": len(first_filings[GEOGRAPHIC]),
            "rows_by_source": _counts(locations["source"]),
            "preview": MetadataValue.md(locations.head(10).to_markdown()),
        },
    )


@asset(
    description="Imputed inventor country codes per first filing and person",
    group_name=GROUP_NAME,
    compute_kind="pandas",
)
def imputed_inventor_countries(
    context: AssetExecutionContext,
    first_filings: dict,
    subsequent_filing_pool: dict,
    patstat_tables: PatstatTables,
) -> Output[pd.DataFrame]:
    config = get_config()
    if COUNTRY not in first_filings:
        context.log.info("Country-code imputation disabled")
        return Output(
            value=pd.DataFrame(columns=COUNTRY_OUTPUT_COLUMNS), metadata={"num_records": 0}
        )

    with log_with_context(stage="impute_country", run_id=context.run_id):
        countries = impute_inventor_countries(
            first_filings[COUNTRY],
            subsequent_filing_pool[COUNTRY],
            patstat_tables.person_applications,
            patstat_tables.persons,
            supranational_offices=config.imputation.supranational_offices,
            unknown_person_id=config.imputation.unknown_person_id,
        )
        _loader().replace_table(countries, config.duckdb.output_tables.country)

    return Output(
        value=countries,
        metadata={
            "num_records": len(countries),
            "first_filings": len(first_filings[COUNTRY]),
            "rows_by_source": _counts(countries["source"]),
            "countries": _counts(countries["ctry_code"]),
        },
    )
