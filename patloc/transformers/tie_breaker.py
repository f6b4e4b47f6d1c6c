"""Earliest-candidate selection.

Given candidate rows ``(first filing, subsequent filing, subsequent date)``,
keep exactly one subsequent filing per first filing: the one with the minimum
date and, among same-day candidates, the one with the minimum identifier.
Candidates may carry several rows each (one per donor location or person);
every row of the winning candidate is kept.
"""

from __future__ import annotations

import pandas as pd


def earliest_candidates(
    candidates: pd.DataFrame,
    key: str = "appln_id",
    candidate: str = "subsequent_id",
    date: str = "subsequent_date",
) -> pd.DataFrame:
    """Return one ``(key, candidate, date)`` row per key.

    Two-stage reduction: restrict to the minimum date per key, then to the
    minimum candidate id among the survivors. Rows with a null date are never
    selected.
    """
    pairs = candidates[[key, candidate, date]].dropna(subset=[date]).drop_duplicates()
    if pairs.empty:
        return pairs.reset_index(drop=True)

    earliest_date = pairs.groupby(key)[date].transform("min")
    pairs = pairs[pairs[date] == earliest_date]

    lowest_id = pairs.groupby(key)[candidate].transform("min")
    winners = pairs[pairs[candidate] == lowest_id]

    return winners.sort_values(key).reset_index(drop=True)


def restrict_to_earliest(
    rows: pd.DataFrame,
    key: str = "appln_id",
    candidate: str = "subsequent_id",
    date: str = "subsequent_date",
) -> pd.DataFrame:
    """Keep every row belonging to the earliest candidate of each key."""
    winners = earliest_candidates(rows, key=key, candidate=candidate, date=date)
    return rows.merge(winners[[key, candidate]], on=[key, candidate], how="inner")
