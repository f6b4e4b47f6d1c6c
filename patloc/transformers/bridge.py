"""First filing <-> member filing bridge table.

Maps every published filing to the first filing of its lineage, one row per
(first filing, member filing, publication). Passes run in the same precedence
order as the classification rules; each pass only adds lineages whose first
filing is not yet a member of an earlier one, except for the chaining rules
(PCT phase entries, continuation and technical-relation children) which attach
members to first filings that are already present.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from ..extractors.patstat import PatstatTables
from ..models.filing import (
    BRIDGE_COLUMNS,
    INTERNATIONAL_KIND,
    PHASE_ENTERED,
    RELATIONSHIP_EDGES,
    FirstFilingType,
    RelationshipKind,
)
from ..utils.logging_config import current_logger


_PUBLICATION_COLUMNS = ["appln_id", "publn_auth", "publn_nr", "publn_nr_original", "publn_kind"]
_FILING_COLUMNS = [
    "appln_id",
    "appln_auth",
    "appln_kind",
    "appln_filing_date",
    "appln_filing_year",
    "docdb_family_id",
    "inpadoc_family_id",
]


def _link(
    pairs: pd.DataFrame, first: str, member: str, publications: pd.DataFrame, kind: FirstFilingType
) -> pd.DataFrame:
    """Attach the member filing's publications to ``(first, member)`` pairs."""
    linked = (
        pd.DataFrame(
            {"prior_appln_id": pairs[first].to_numpy(), "appln_id": pairs[member].to_numpy()}
        )
        .dropna()
        .astype("Int64")
        .drop_duplicates()
        .merge(publications, on="appln_id", how="inner")
    )
    return linked.assign(type=kind.value)


class _Bridge:
    """Accumulates bridge rows across passes."""

    def __init__(self) -> None:
        self._parts: list[pd.DataFrame] = []

    def add(self, rows: pd.DataFrame) -> None:
        self._parts.append(rows)

    def _frame(self) -> pd.DataFrame:
        if not self._parts:
            return pd.DataFrame(columns=["prior_appln_id", "appln_id", "type"])
        return pd.concat(self._parts, ignore_index=True)

    def members(self) -> pd.Series:
        return self._frame()["appln_id"]

    def first_filings(self, kind: FirstFilingType | None = None) -> pd.Series:
        frame = self._frame()
        if kind is not None:
            frame = frame[frame["type"] == kind.value]
        return frame["prior_appln_id"]

    def result(self) -> pd.DataFrame:
        return self._frame()


def _chain_edge(
    bridge: _Bridge,
    tables: PatstatTables,
    publications: pd.DataFrame,
    edge: RelationshipKind,
    kind: FirstFilingType,
) -> None:
    table, parent = RELATIONSHIP_EDGES[edge]
    edges = getattr(tables, table)

    # parents not yet present as a member start their own lineage
    new_roots = edges[~edges[parent].isin(bridge.members())]
    bridge.add(_link(new_roots, parent, parent, publications, kind))

    # children of any parent that is already a first filing join its lineage
    chained = edges[edges[parent].isin(bridge.first_filings())]
    bridge.add(_link(chained, parent, "appln_id", publications, kind))


def build_bridge_table(tables: PatstatTables, lastupdate: datetime | None = None) -> pd.DataFrame:
    """Build the unfiltered first filing bridge.

    Args:
        tables: Input tables
        lastupdate: Timestamp stamped on every row (defaults to now)

    Returns:
        DataFrame with ``BRIDGE_COLUMNS``, duplicates removed
    """
    log = current_logger()
    publications = tables.publications[_PUBLICATION_COLUMNS]
    filings = tables.filings.drop_duplicates(subset="appln_id")
    bridge = _Bridge()

    # PRIORITY: the claiming filing and the claimed filing both map to the claimed one
    claims = tables.priority_claims
    bridge.add(_link(claims, "prior_appln_id", "appln_id", publications, FirstFilingType.PRIORITY))
    bridge.add(
        _link(claims, "prior_appln_id", "prior_appln_id", publications, FirstFilingType.PRIORITY)
    )

    # PCT: international roots, then phase entries chained to an existing PCT root
    roots = filings[
        filings["appln_kind"].eq(INTERNATIONAL_KIND)
        & filings["internat_appln_id"].eq(0).fillna(False)
        & filings["appln_id"].eq(filings["earliest_filing_id"]).fillna(False)
        & ~filings["appln_id"].isin(bridge.members())
    ]
    bridge.add(_link(roots, "appln_id", "appln_id", publications, FirstFilingType.PCT))

    phase_entries = filings[
        filings["internat_appln_id"].ne(0).fillna(False)
        & (filings["reg_phase"].eq(PHASE_ENTERED) | filings["nat_phase"].eq(PHASE_ENTERED))
        & filings["internat_appln_id"].isin(bridge.first_filings(FirstFilingType.PCT))
    ]
    bridge.add(
        _link(phase_entries, "internat_appln_id", "appln_id", publications, FirstFilingType.PCT)
    )

    _chain_edge(bridge, tables, publications, RelationshipKind.CONTINUATION, FirstFilingType.CONTINUATION)
    _chain_edge(bridge, tables, publications, RelationshipKind.TECH_REL, FirstFilingType.TECH_REL)

    family_size = filings.groupby("docdb_family_id")["appln_id"].transform("nunique")
    singles = filings[family_size.eq(1).fillna(False) & ~filings["appln_id"].isin(bridge.members())]
    bridge.add(_link(singles, "appln_id", "appln_id", publications, FirstFilingType.SINGLE))

    result = (
        bridge.result()
        .merge(filings[_FILING_COLUMNS], on="appln_id", how="left")
        .drop_duplicates(subset=[col for col in BRIDGE_COLUMNS if col != "lastupdate"])
        .assign(lastupdate=pd.Timestamp(lastupdate or datetime.now()))
    )
    for col in ("prior_appln_id", "appln_id"):
        result[col] = result[col].astype("Int64")

    counts = result["type"].value_counts().to_dict()
    log.info(f"Bridge table built with {len(result)} rows", **counts)
    return result[BRIDGE_COLUMNS].sort_values(["prior_appln_id", "appln_id"]).reset_index(drop=True)
