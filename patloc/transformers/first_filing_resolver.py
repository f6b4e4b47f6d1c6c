"""Classify filings as first filings.

Each filing receives at most one canonical tag. Rules are evaluated in
precedence order (PRIORITY > PCT > CONTINUATION > TECH_REL > SINGLE); a rule
only sees filings no earlier rule has tagged, so a filing matching several
rules keeps the strongest tag. A filing matching no rule is a pure subsequent
filing and is simply absent from the result.

Usage
-----
scope = FilingScope.from_config(config.scope, profile="geographic")
first_filings = classify_first_filings(tables, scope)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace

import pandas as pd

from ..config.schemas import ScopeConfig
from ..exceptions import FirstFilingResolutionError
from ..extractors.patstat import PatstatTables
from ..models.filing import (
    FIRST_FILING_COLUMNS,
    INTERNATIONAL_KIND,
    RELATIONSHIP_EDGES,
    FirstFilingType,
    RelationshipKind,
)
from ..utils.logging_config import current_logger


@dataclass(frozen=True)
class FilingScope:
    """Eligibility predicate shared by every classification rule."""

    jurisdictions: frozenset[str]
    excluded_publication_kinds: Mapping[str, frozenset[str]] = field(default_factory=dict)
    min_filing_year: int | None = None
    max_filing_year: int | None = None
    require_publication: bool = False
    never_accepted_publication_kind: str = "D2"
    national_kinds: frozenset[str] | None = None

    @classmethod
    def from_config(cls, scope: ScopeConfig, profile: str = "geographic") -> FilingScope:
        """Build the scope of one imputation profile ("geographic" or "country")."""
        filters = getattr(scope, profile)
        return cls(
            jurisdictions=frozenset(scope.jurisdictions),
            excluded_publication_kinds=(
                {office: frozenset(kinds) for office, kinds in scope.excluded_publication_kinds.items()}
                if filters.kind_exclusions
                else {}
            ),
            min_filing_year=scope.min_filing_year if filters.year_window else None,
            max_filing_year=scope.max_filing_year if filters.year_window else None,
            require_publication=filters.require_publication,
            never_accepted_publication_kind=scope.excluded_publication_kind_always,
            national_kinds=(
                frozenset(filters.national_kinds) if filters.national_kinds is not None else None
            ),
        )

    def _excluded_filings(self, publications: pd.DataFrame) -> pd.Series:
        hit = pd.Series(False, index=publications.index)
        for office, kinds in self.excluded_publication_kinds.items():
            hit |= publications["publn_auth"].eq(office) & publications["publn_kind"].isin(kinds)
        return publications.loc[hit, "appln_id"]

    def _published_filings(self, publications: pd.DataFrame) -> pd.Series:
        number = publications["publn_nr"].astype("string").str.strip()
        ok = number.notna() & number.ne("") & publications["publn_kind"].ne(
            self.never_accepted_publication_kind
        )
        return publications.loc[ok.fillna(False).astype(bool), "appln_id"]

    def eligible(self, tables: PatstatTables) -> pd.Series:
        """Boolean mask over ``tables.filings`` of filings that may become first filings."""
        filings = tables.filings
        is_international = filings["appln_kind"].eq(INTERNATIONAL_KIND)

        receiving = filings["receiving_office"].astype("string").str.strip()
        office = receiving.where(receiving.notna() & receiving.ne(""), filings["appln_auth"])
        in_jurisdiction = (is_international & office.isin(self.jurisdictions)) | (
            ~is_international & filings["appln_auth"].isin(self.jurisdictions)
        )
        if self.national_kinds is not None:
            in_jurisdiction &= is_international | filings["appln_kind"].isin(self.national_kinds)

        people = tables.person_applications
        inventors = people.loc[(people["invt_seq_nr"] > 0).fillna(False), "appln_id"]

        mask = (
            in_jurisdiction
            & filings["internat_appln_id"].eq(0).fillna(False)
            & filings["appln_id"].isin(inventors)
        )
        if self.min_filing_year is not None:
            mask &= (filings["appln_filing_year"] >= self.min_filing_year).fillna(False)
        if self.max_filing_year is not None:
            mask &= (filings["appln_filing_year"] <= self.max_filing_year).fillna(False)
        if self.excluded_publication_kinds:
            mask &= ~filings["appln_id"].isin(self._excluded_filings(tables.publications))
        if self.require_publication:
            mask &= filings["appln_id"].isin(self._published_filings(tables.publications))

        return mask.fillna(False).astype(bool)


@dataclass(frozen=True)
class ClassificationRule:
    """One classification pass: the tag it assigns and the filings it matches."""

    type: FirstFilingType
    matches: Callable[[PatstatTables], pd.Series]
    edge: RelationshipKind | None = None


def _cited_through(edge: RelationshipKind) -> Callable[[PatstatTables], pd.Series]:
    table, earlier = RELATIONSHIP_EDGES[edge]

    def matches(tables: PatstatTables) -> pd.Series:
        return tables.filings["appln_id"].isin(getattr(tables, table)[earlier].dropna())

    return matches


def _international_root(tables: PatstatTables) -> pd.Series:
    filings = tables.filings
    return (
        filings["appln_kind"].eq(INTERNATIONAL_KIND)
        & filings["nat_phase"].eq("N")
        & filings["reg_phase"].eq("N")
        & filings["appln_id"].eq(filings["earliest_filing_id"]).fillna(False)
    )


def _singleton_family(tables: PatstatTables) -> pd.Series:
    filings = tables.filings
    family_size = filings.groupby("docdb_family_id")["appln_id"].transform("nunique")
    return family_size.eq(1).fillna(False)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        FirstFilingType.PRIORITY,
        _cited_through(RelationshipKind.PRIORITY_CLAIM),
        RelationshipKind.PRIORITY_CLAIM,
    ),
    ClassificationRule(FirstFilingType.PCT, _international_root, RelationshipKind.PCT_PHASE),
    ClassificationRule(
        FirstFilingType.CONTINUATION,
        _cited_through(RelationshipKind.CONTINUATION),
        RelationshipKind.CONTINUATION,
    ),
    ClassificationRule(
        FirstFilingType.TECH_REL,
        _cited_through(RelationshipKind.TECH_REL),
        RelationshipKind.TECH_REL,
    ),
    ClassificationRule(FirstFilingType.SINGLE, _singleton_family),
)


def classify_first_filings(
    tables: PatstatTables,
    scope: FilingScope,
    rules: Sequence[ClassificationRule] = DEFAULT_RULES,
) -> pd.DataFrame:
    """Tag every eligible first filing with exactly one type.

    Returns:
        DataFrame with ``FIRST_FILING_COLUMNS``, one row per first filing

    Raises:
        FirstFilingResolutionError: if two rules assign the same tag
    """
    types = [rule.type for rule in rules]
    if len(set(types)) != len(types):
        raise FirstFilingResolutionError(
            "Classification rules must assign distinct types",
            operation="classify_first_filings",
            details={"types": [t.value for t in types]},
        )

    log = current_logger()
    filings = tables.filings.drop_duplicates(subset="appln_id")
    if len(filings) != len(tables.filings):
        log.warning(f"Dropped {len(tables.filings) - len(filings)} duplicated filing rows")
    scoped = replace(tables, filings=filings) if len(filings) != len(tables.filings) else tables

    eligible = scope.eligible(scoped)
    tagged = pd.Series(False, index=filings.index)
    passes = []

    for rule in sorted(rules, key=lambda r: r.type.precedence):
        hit = eligible & rule.matches(scoped).astype(bool) & ~tagged
        passes.append(filings.loc[hit].assign(type=rule.type.value))
        tagged |= hit
        log.debug(f"{rule.type.value} pass tagged {int(hit.sum())} filings")

    result = pd.concat(passes, ignore_index=True).rename(columns={"appln_auth": "patent_office"})
    return result[FIRST_FILING_COLUMNS].sort_values("appln_id").reset_index(drop=True)
