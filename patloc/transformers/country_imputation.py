"""Country-code imputation: one country code per (first filing, person).

The same six donor tiers as the geographic imputation, read from the person
country table instead of geocoded locations, followed by a seventh tier that
falls back on the filing office unless that office is supranational.

Rows are keyed by (first filing, person). The person is the inventor for the
inventor tiers and the applicant for the applicant tiers, so an applicant tier
names the applicant, never the inventor it stands in for.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import pandas as pd

from ..models.filing import PersonRole, SourceRank
from ..models.location import COUNTRY_OUTPUT_COLUMNS
from ..utils.logging_config import current_logger
from .attribute_resolver import (
    AttributeResolver,
    DonorLookup,
    DonorTier,
    earliest_subsequent_records,
    equivalents,
    other_subsequent_filings,
    own_records,
)
from .country_names import add_country_names
from .location_preparation import person_countries


def jurisdiction_fallback(
    supranational_offices: Iterable[str], unknown_person_id: int = 0
) -> DonorLookup:
    """Tier lookup using the filing office as country code."""
    excluded = frozenset(supranational_offices)

    def lookup(unresolved: pd.DataFrame) -> pd.DataFrame:
        national = unresolved[
            unresolved["patent_office"].notna() & ~unresolved["patent_office"].isin(excluded)
        ]
        return pd.DataFrame(
            {
                "appln_id": national["appln_id"],
                "person_id": unknown_person_id,
                "ctry_code": national["patent_office"],
                "donor_appln_id": national["appln_id"],
            }
        )

    return lookup


def country_tiers(
    pool: pd.DataFrame,
    inventor_countries: pd.DataFrame,
    applicant_countries: pd.DataFrame,
    supranational_offices: Iterable[str],
    unknown_person_id: int = 0,
) -> list[DonorTier]:
    """The seven country-code donor tiers."""
    return [
        DonorTier(SourceRank.SELF_INVENTOR, "own inventors", own_records(inventor_countries)),
        DonorTier(
            SourceRank.EQUIVALENT_INVENTOR,
            "earliest equivalent, inventors",
            earliest_subsequent_records(pool, inventor_countries, equivalents),
        ),
        DonorTier(
            SourceRank.OTHER_SUBSEQUENT_INVENTOR,
            "earliest other subsequent filing, inventors",
            earliest_subsequent_records(pool, inventor_countries, other_subsequent_filings),
        ),
        DonorTier(SourceRank.SELF_APPLICANT, "own applicants", own_records(applicant_countries)),
        DonorTier(
            SourceRank.EQUIVALENT_APPLICANT,
            "earliest equivalent, applicants",
            earliest_subsequent_records(pool, applicant_countries, equivalents),
        ),
        DonorTier(
            SourceRank.OTHER_SUBSEQUENT_APPLICANT,
            "earliest other subsequent filing, applicants",
            earliest_subsequent_records(pool, applicant_countries, other_subsequent_filings),
        ),
        DonorTier(
            SourceRank.JURISDICTION_FALLBACK,
            "filing office",
            jurisdiction_fallback(supranational_offices, unknown_person_id),
        ),
    ]


def impute_inventor_countries(
    first_filings: pd.DataFrame,
    pool: pd.DataFrame,
    person_applications: pd.DataFrame,
    persons: pd.DataFrame,
    supranational_offices: Iterable[str],
    unknown_person_id: int = 0,
    lastupdate: datetime | None = None,
) -> pd.DataFrame:
    """Resolve inventor country codes for every first filing.

    Returns:
        DataFrame with ``COUNTRY_OUTPUT_COLUMNS``, one row per
        (first filing, person); first filings filed at a supranational office
        with no donor at ranks 1-6 are absent
    """
    log = current_logger()
    inventors = person_countries(person_applications, persons, PersonRole.INVENTOR)
    applicants = person_countries(person_applications, persons, PersonRole.APPLICANT)

    resolver = AttributeResolver(
        country_tiers(
            pool,
            inventors.dropna(subset=["ctry_code"]),
            applicants.dropna(subset=["ctry_code"]),
            supranational_offices,
            unknown_person_id,
        ),
        record_columns=["appln_id", "person_id", "ctry_code", "donor_appln_id"],
    )
    records = resolver.resolve(first_filings).drop_duplicates(subset=["appln_id", "person_id"])

    output = add_country_names(records).assign(
        lastupdate=pd.Timestamp(lastupdate or datetime.now())
    )
    for col in ("person_id", "priority_year"):
        output[col] = output[col].astype("Int64")

    log.info(
        f"Imputed country codes for {output['appln_id'].nunique()} of "
        f"{first_filings['appln_id'].nunique()} first filings ({len(output)} rows)",
        **{f"source_{rank}": n for rank, n in output["source"].value_counts().sort_index().items()},
    )
    return output[COUNTRY_OUTPUT_COLUMNS].sort_values(["appln_id", "person_id"]).reset_index(drop=True)
