"""Subsequent filing pool: the imputation donors of every first filing.

Each pool row pairs a first filing with a later filing that cites it and
records ``nb_priorities``, the fan-in of that later filing. ``nb_priorities ==
1`` marks an equivalent (a single-parent counterpart); larger values mark
other subsequent filings that aggregate several first filings.

Fan-in per relationship:

- PRIORITY: the highest priority sequence number claimed by the subsequent
  filing (falls back to the number of its claims when sequence numbers are
  missing).
- CONTINUATION / TECH_REL: the number of edges the subsequent filing declares
  in that relationship table.
- PCT: regional phase entries are forced to 1 and national phase entries to 2.
"""

from __future__ import annotations

import pandas as pd

from ..extractors.patstat import PatstatTables
from ..models.filing import (
    PHASE_ENTERED,
    POOL_COLUMNS,
    RELATIONSHIP_EDGES,
    FirstFilingType,
    RelationshipKind,
)
from ..utils.logging_config import current_logger


EQUIVALENT_FAN_IN = 1
REGIONAL_PHASE_FAN_IN = 1
NATIONAL_PHASE_FAN_IN = 2

_EDGE_FOR_TYPE = {
    FirstFilingType.PRIORITY: RelationshipKind.PRIORITY_CLAIM,
    FirstFilingType.CONTINUATION: RelationshipKind.CONTINUATION,
    FirstFilingType.TECH_REL: RelationshipKind.TECH_REL,
}


def _fan_in(edges: pd.DataFrame, edge: RelationshipKind) -> pd.DataFrame:
    """``(appln_id, nb_priorities)`` per subsequent filing of one edge table."""
    counted = edges.groupby("appln_id").size().rename("nb_priorities")
    if edge is RelationshipKind.PRIORITY_CLAIM:
        highest_seq = edges.groupby("appln_id")["prior_appln_seq_nr"].max()
        counted = highest_seq.fillna(counted).rename("nb_priorities")
    return counted.astype("Int64").reset_index()


def _edge_pool(
    first_filings: pd.DataFrame, tables: PatstatTables, kind: FirstFilingType
) -> pd.DataFrame:
    edge = _EDGE_FOR_TYPE[kind]
    table, parent = RELATIONSHIP_EDGES[edge]
    edges = getattr(tables, table)

    parents = first_filings.loc[first_filings["type"] == kind.value, ["appln_id"]]
    links = (
        edges[["appln_id", parent]]
        .rename(columns={"appln_id": "subsequent_id", parent: "appln_id"})
        .merge(parents, on="appln_id", how="inner")
        .drop_duplicates()
    )
    return links.merge(
        _fan_in(edges, edge).rename(columns={"appln_id": "subsequent_id"}),
        on="subsequent_id",
        how="left",
    ).assign(relationship=edge.value)


def _pct_pool(first_filings: pd.DataFrame, tables: PatstatTables) -> pd.DataFrame:
    roots = first_filings.loc[first_filings["type"] == FirstFilingType.PCT.value, ["appln_id"]]
    filings = tables.filings
    entries = filings[filings["internat_appln_id"].ne(0).fillna(False)]

    regional = entries["reg_phase"].eq(PHASE_ENTERED)
    national = entries["nat_phase"].eq(PHASE_ENTERED)
    # an entry flagged both ways is treated as regional
    fan_in = pd.Series(pd.NA, index=entries.index, dtype="Int64")
    fan_in[national] = NATIONAL_PHASE_FAN_IN
    fan_in[regional] = REGIONAL_PHASE_FAN_IN

    phase = pd.DataFrame(
        {
            "appln_id": entries["internat_appln_id"],
            "subsequent_id": entries["appln_id"],
            "nb_priorities": fan_in,
        }
    ).dropna(subset=["nb_priorities"])
    return phase.merge(roots, on="appln_id", how="inner").assign(
        relationship=RelationshipKind.PCT_PHASE.value
    )


def build_candidate_pool(first_filings: pd.DataFrame, tables: PatstatTables) -> pd.DataFrame:
    """Enumerate every (first filing, subsequent filing) donor pair.

    Args:
        first_filings: Output of ``classify_first_filings``
        tables: Input tables

    Returns:
        DataFrame with ``POOL_COLUMNS`` ordered by first filing id then
        ascending subsequent date
    """
    log = current_logger()
    parts = [_edge_pool(first_filings, tables, kind) for kind in _EDGE_FOR_TYPE]
    parts.append(_pct_pool(first_filings, tables))
    pairs = pd.concat(parts, ignore_index=True)

    subsequent = tables.filings.drop_duplicates(subset="appln_id")[
        ["appln_id", "appln_filing_date"]
    ].rename(columns={"appln_id": "subsequent_id", "appln_filing_date": "subsequent_date"})
    owners = first_filings[["appln_id", "patent_office", "appln_filing_year", "type"]]

    pool = (
        pairs.merge(subsequent, on="subsequent_id", how="inner")
        .merge(owners, on="appln_id", how="inner")
        .sort_values(["appln_id", "subsequent_date", "subsequent_id", "nb_priorities"])
        .drop_duplicates(subset=["appln_id", "subsequent_id"], keep="first")
    )
    for col in ("appln_id", "subsequent_id", "nb_priorities"):
        pool[col] = pool[col].astype("Int64")

    equivalents = int((pool["nb_priorities"] == EQUIVALENT_FAN_IN).sum())
    log.info(
        f"Candidate pool built: {len(pool)} pairs for {pool['appln_id'].nunique()} first filings",
        equivalents=equivalents,
        other_subsequent=len(pool) - equivalents,
    )
    return pool[POOL_COLUMNS].reset_index(drop=True)
