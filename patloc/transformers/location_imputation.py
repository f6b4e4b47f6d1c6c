"""Geographic imputation: one location per first filing.

Donor tiers, strongest first:

1. inventor locations of the first filing itself
2. inventor locations of its earliest equivalent
3. inventor locations of its earliest other subsequent filing
4. applicant locations of the first filing itself
5. applicant locations of its earliest equivalent
6. applicant locations of its earliest other subsequent filing

The winning donor may list several located persons. The output keeps one of
them (lowest person id, then lowest coordinates) and records how many distinct
locations the donor had in ``n_locations``.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from ..models.filing import PersonRole, SourceRank
from ..models.location import GEO_OUTPUT_COLUMNS, GEO_PAYLOAD_COLUMNS
from ..utils.logging_config import current_logger
from .attribute_resolver import (
    AttributeResolver,
    DonorTier,
    earliest_subsequent_records,
    equivalents,
    other_subsequent_filings,
    own_records,
)
from .location_preparation import person_locations


def location_tiers(
    pool: pd.DataFrame, inventor_locations: pd.DataFrame, applicant_locations: pd.DataFrame
) -> list[DonorTier]:
    """The six geographic donor tiers."""
    return [
        DonorTier(SourceRank.SELF_INVENTOR, "own inventors", own_records(inventor_locations)),
        DonorTier(
            SourceRank.EQUIVALENT_INVENTOR,
            "earliest equivalent, inventors",
            earliest_subsequent_records(pool, inventor_locations, equivalents),
        ),
        DonorTier(
            SourceRank.OTHER_SUBSEQUENT_INVENTOR,
            "earliest other subsequent filing, inventors",
            earliest_subsequent_records(pool, inventor_locations, other_subsequent_filings),
        ),
        DonorTier(SourceRank.SELF_APPLICANT, "own applicants", own_records(applicant_locations)),
        DonorTier(
            SourceRank.EQUIVALENT_APPLICANT,
            "earliest equivalent, applicants",
            earliest_subsequent_records(pool, applicant_locations, equivalents),
        ),
        DonorTier(
            SourceRank.OTHER_SUBSEQUENT_APPLICANT,
            "earliest other subsequent filing, applicants",
            earliest_subsequent_records(pool, applicant_locations, other_subsequent_filings),
        ),
    ]


def _one_location_per_filing(records: pd.DataFrame) -> pd.DataFrame:
    n_locations = (
        records.drop_duplicates(subset=["appln_id", "lat", "lng"])
        .groupby("appln_id")
        .size()
        .rename("n_locations")
    )
    chosen = records.sort_values(["appln_id", "person_id", "lat", "lng"]).drop_duplicates(
        subset="appln_id", keep="first"
    )
    chosen = chosen.merge(n_locations.reset_index(), on="appln_id", how="left")
    return chosen.rename(columns={"person_id": "donor_person_id"})


def impute_inventor_locations(
    first_filings: pd.DataFrame,
    pool: pd.DataFrame,
    geocoded_locations: pd.DataFrame,
    person_applications: pd.DataFrame,
    unknown_person_id: int = 0,
    lastupdate: datetime | None = None,
) -> pd.DataFrame:
    """Resolve one location per first filing.

    Args:
        first_filings: Output of ``classify_first_filings``
        pool: Output of ``build_candidate_pool``
        geocoded_locations: Output of ``prepare_geocoded_locations``
        person_applications: Person-role edges
        unknown_person_id: Sentinel person id of anonymous locations
        lastupdate: Timestamp stamped on every row (defaults to now)

    Returns:
        DataFrame with ``GEO_OUTPUT_COLUMNS``, one row per resolved first filing
    """
    log = current_logger()
    inventors = person_locations(
        geocoded_locations, person_applications, PersonRole.INVENTOR, unknown_person_id
    )
    applicants = person_locations(
        geocoded_locations, person_applications, PersonRole.APPLICANT, unknown_person_id
    )

    resolver = AttributeResolver(
        location_tiers(pool, inventors, applicants),
        record_columns=["appln_id", "person_id", *GEO_PAYLOAD_COLUMNS, "donor_appln_id"],
    )
    records = resolver.resolve(first_filings)

    output = _one_location_per_filing(records).assign(
        lastupdate=pd.Timestamp(lastupdate or datetime.now())
    )
    for col in ("donor_person_id", "n_locations", "priority_year"):
        output[col] = output[col].astype("Int64")

    log.info(
        f"Imputed locations for {len(output)} of {first_filings['appln_id'].nunique()} first filings",
        **{f"source_{rank}": n for rank, n in output["source"].value_counts().sort_index().items()},
    )
    return output[GEO_OUTPUT_COLUMNS].sort_values("appln_id").reset_index(drop=True)
