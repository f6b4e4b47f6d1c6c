"""Multi-pass imputation engine.

The resolver walks an ordered list of donor tiers. Each tier is asked for
donor rows for the first filings that are still unresolved; every first
filing that receives at least one row is committed with that tier's rank and
removed from the working set, so a later (weaker) tier can never overwrite an
earlier one. First filings no tier can serve are simply absent from the
result.

The geographic and country-code imputations are two instantiations of this
engine with different donor tables (see ``location_imputation`` and
``country_imputation``).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import pandas as pd

from ..exceptions import ImputationError
from ..models.filing import SourceRank
from ..utils.logging_config import current_logger
from .candidate_pool import EQUIVALENT_FAN_IN
from .tie_breaker import restrict_to_earliest


DonorLookup = Callable[[pd.DataFrame], pd.DataFrame]


@dataclass(frozen=True)
class DonorTier:
    """One resolver pass.

    ``lookup`` receives the unresolved first filings and returns donor rows
    keyed by ``appln_id`` carrying a ``donor_appln_id`` column.
    """

    rank: SourceRank
    name: str
    lookup: DonorLookup


def equivalents(pool: pd.DataFrame) -> pd.Series:
    return pool["nb_priorities"].eq(EQUIVALENT_FAN_IN).fillna(False).astype(bool)


def other_subsequent_filings(pool: pd.DataFrame) -> pd.Series:
    return pool["nb_priorities"].gt(EQUIVALENT_FAN_IN).fillna(False).astype(bool)


def own_records(donors: pd.DataFrame) -> DonorLookup:
    """Tier lookup reading the first filing's own donor rows."""

    def lookup(unresolved: pd.DataFrame) -> pd.DataFrame:
        rows = donors[donors["appln_id"].isin(unresolved["appln_id"])]
        return rows.assign(donor_appln_id=rows["appln_id"])

    return lookup


def earliest_subsequent_records(
    pool: pd.DataFrame,
    donors: pd.DataFrame,
    bucket: Callable[[pd.DataFrame], pd.Series],
) -> DonorLookup:
    """Tier lookup reading the earliest subsequent filing of a pool bucket.

    Only subsequent filings that actually have donor rows compete, so an
    earlier filing without data never hides a later one that has it.
    """

    def lookup(unresolved: pd.DataFrame) -> pd.DataFrame:
        candidates = pool.loc[
            bucket(pool) & pool["appln_id"].isin(unresolved["appln_id"]),
            ["appln_id", "subsequent_id", "subsequent_date"],
        ]
        donor_rows = donors.rename(columns={"appln_id": "subsequent_id"})
        rows = candidates.merge(donor_rows, on="subsequent_id", how="inner")
        rows = restrict_to_earliest(rows)
        return rows.drop(columns=["subsequent_date"]).rename(
            columns={"subsequent_id": "donor_appln_id"}
        )

    return lookup


class AttributeResolver:
    """Strict-priority fill loop over ordered donor tiers."""

    def __init__(self, tiers: Sequence[DonorTier], record_columns: Sequence[str]):
        """
        Args:
            tiers: Donor tiers in strictly increasing rank order
            record_columns: Columns kept from each tier's rows (``appln_id``
                and ``donor_appln_id`` are always kept)
        """
        ranks = [int(tier.rank) for tier in tiers]
        if ranks != sorted(set(ranks)):
            raise ImputationError(
                "Donor tiers must have strictly increasing ranks",
                operation="AttributeResolver.__init__",
                details={"ranks": ranks},
            )
        self.tiers = list(tiers)
        self.record_columns = ["appln_id", *[c for c in record_columns if c != "appln_id"]]
        if "donor_appln_id" not in self.record_columns:
            self.record_columns.append("donor_appln_id")

    def _empty(self) -> pd.DataFrame:
        empty = pd.DataFrame({col: pd.Series(dtype="object") for col in self.record_columns})
        return empty.astype({"appln_id": "Int64", "donor_appln_id": "Int64"}).assign(
            source=pd.Series(dtype="Int64")
        )

    def resolve(self, first_filings: pd.DataFrame) -> pd.DataFrame:
        """Run every tier and return the committed rows.

        Returns:
            ``record_columns`` plus ``source``, ``patent_office``,
            ``priority_date``, ``priority_year`` and ``type``

        Raises:
            ImputationError: if a tier lookup fails
        """
        log = current_logger()
        unresolved = first_filings.drop_duplicates(subset="appln_id")
        committed: list[pd.DataFrame] = []

        for tier in self.tiers:
            if unresolved.empty:
                break
            try:
                rows = tier.lookup(unresolved)
                rows = rows.loc[rows["appln_id"].isin(unresolved["appln_id"]), self.record_columns]
            except (KeyError, ValueError, TypeError) as e:
                raise ImputationError(
                    f"Donor tier '{tier.name}' failed: {e}",
                    rank=int(tier.rank),
                    operation="resolve",
                    cause=e,
                ) from e

            filled = rows["appln_id"].nunique()
            if filled:
                committed.append(rows.assign(source=int(tier.rank)))
                unresolved = unresolved[~unresolved["appln_id"].isin(rows["appln_id"])]
            log.debug(
                f"rank {int(tier.rank)} ({tier.name}): filled {filled}, "
                f"{len(unresolved)} first filings remain unresolved"
            )

        records = pd.concat(committed, ignore_index=True) if committed else self._empty()
        records["source"] = records["source"].astype("Int64")

        attributes = first_filings.drop_duplicates(subset="appln_id")[
            ["appln_id", "patent_office", "appln_filing_date", "appln_filing_year", "type"]
        ].rename(columns={"appln_filing_date": "priority_date", "appln_filing_year": "priority_year"})
        return records.merge(attributes, on="appln_id", how="left")
