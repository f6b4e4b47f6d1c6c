"""Unit tests for first filing classification and the filing scope."""

import pandas as pd
import pytest

from patloc.config.schemas import ScopeConfig
from patloc.exceptions import FirstFilingResolutionError
from patloc.models import FIRST_FILING_COLUMNS, FirstFilingType
from patloc.transformers.first_filing_resolver import (
    DEFAULT_RULES,
    ClassificationRule,
    FilingScope,
    classify_first_filings,
)
from patloc.validators import validate_first_filings
from tests.factories import PatstatTablesBuilder


pytestmark = pytest.mark.fast


@pytest.fixture
def geographic_scope() -> FilingScope:
    return FilingScope.from_config(ScopeConfig(), profile="geographic")


@pytest.fixture
def country_scope() -> FilingScope:
    return FilingScope.from_config(ScopeConfig(), profile="country")


def _types(first_filings: pd.DataFrame) -> dict[int, str]:
    return dict(zip(first_filings["appln_id"].tolist(), first_filings["type"].tolist()))


class TestFilingScope:
    """Tests for FilingScope construction and eligibility."""

    def test_profiles_from_config(self, geographic_scope, country_scope):
        assert geographic_scope.min_filing_year == 1980
        assert geographic_scope.require_publication is True
        assert geographic_scope.national_kinds == frozenset({"A"})
        assert "US" in geographic_scope.excluded_publication_kinds

        assert country_scope.min_filing_year is None
        assert country_scope.require_publication is False
        assert country_scope.national_kinds is None
        assert country_scope.excluded_publication_kinds == {}

    def test_basic_eligibility(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1, auth="DE")
            .with_filing(2, auth="AR")  # office not in scope
            .with_filing(3, auth="FR")  # no inventor
            .with_filing(4, auth="IT", internat_appln_id=99)  # phase entry
            .with_inventor(1, 100)
            .with_inventor(2, 200)
            .with_inventor(4, 400)
            .build()
        )

        eligible = tables.filings.loc[geographic_scope.eligible(tables), "appln_id"].tolist()

        assert eligible == [1]

    def test_international_filing_uses_receiving_office(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1, auth="WO", kind="W", receiving_office="FR")
            .with_filing(2, auth="WO", kind="W", receiving_office="AR")
            .with_filing(3, auth="IB", kind="W")  # falls back to appln_auth
            .with_inventor(1, 100)
            .with_inventor(2, 200)
            .with_inventor(3, 300)
            .build()
        )

        eligible = tables.filings.loc[geographic_scope.eligible(tables), "appln_id"].tolist()

        assert eligible == [1, 3]

    def test_optional_filters_only_in_geographic_profile(self, geographic_scope, country_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1, filing_date="1975-05-01")  # before the year window
            .with_filing(2, auth="US", publn_kind="E")  # re-issue
            .with_filing(3, publn_kind=None)  # never published
            .with_filing(4, publn_kind="D2")
            .with_filing(5, kind="U")  # utility model
            .with_filing(6)
            .with_inventor(1, 100)
            .with_inventor(2, 200)
            .with_inventor(3, 300)
            .with_inventor(4, 400)
            .with_inventor(5, 500)
            .with_inventor(6, 600)
            .build()
        )

        geographic = tables.filings.loc[geographic_scope.eligible(tables), "appln_id"].tolist()
        country = tables.filings.loc[country_scope.eligible(tables), "appln_id"].tolist()

        assert geographic == [6]
        assert country == [1, 2, 3, 4, 5, 6]

    def test_excluded_kind_is_office_specific(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1, auth="FR", publn_kind="A3")  # excluded for FR
            .with_filing(2, auth="DE", publn_kind="A3")  # not excluded for DE
            .with_inventor(1, 100)
            .with_inventor(2, 200)
            .build()
        )

        eligible = tables.filings.loc[geographic_scope.eligible(tables), "appln_id"].tolist()

        assert eligible == [2]


class TestClassification:
    """Tests for classify_first_filings."""

    def test_priority(self, priority_scenario, geographic_scope):
        first_filings = classify_first_filings(priority_scenario.build(), geographic_scope)

        assert _types(first_filings) == {1: "PRIORITY"}
        assert list(first_filings.columns) == FIRST_FILING_COLUMNS
        assert first_filings.loc[0, "patent_office"] == "DE"

    def test_singleton(self, geographic_scope):
        tables = PatstatTablesBuilder().with_filing(3).with_inventor(3, 300).build()

        assert _types(classify_first_filings(tables, geographic_scope)) == {3: "SINGLE"}

    def test_family_of_two_without_relationship_is_not_first(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1, family=7)
            .with_filing(2, family=7)
            .with_inventor(1, 100)
            .with_inventor(2, 200)
            .build()
        )

        assert classify_first_filings(tables, geographic_scope).empty

    def test_pct_root(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(5, auth="WO", kind="W", receiving_office="FR", family=50)
            .with_filing(6, auth="JP", internat_appln_id=5, nat_phase="Y", family=50)
            .with_inventor(5, 500)
            .build()
        )

        assert _types(classify_first_filings(tables, geographic_scope)) == {5: "PCT"}

    def test_pct_root_requires_no_phase_entry_flag(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(5, auth="WO", kind="W", receiving_office="FR", nat_phase="Y", family=50)
            .with_filing(6, auth="FR", family=50)
            .with_inventor(5, 500)
            .build()
        )

        assert classify_first_filings(tables, geographic_scope).empty

    def test_continuation_and_tech_rel(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(10, auth="US", family=1)
            .with_filing(11, auth="US", family=1)
            .with_filing(20, auth="US", family=2)
            .with_filing(21, auth="US", family=2)
            .with_continuation(11, 10)
            .with_tech_relation(21, 20)
            .with_inventor(10, 1)
            .with_inventor(20, 2)
            .build()
        )

        assert _types(classify_first_filings(tables, geographic_scope)) == {
            10: "CONTINUATION",
            20: "TECH_REL",
        }

    def test_precedence_keeps_strongest_tag(self, geographic_scope):
        # filing 1 is claimed as priority, is a continuation parent and a singleton
        tables = (
            PatstatTablesBuilder()
            .with_filing(1)
            .with_filing(2, auth="US", family=20)
            .with_filing(3, auth="US", family=30)
            .with_priority_claim(2, 1)
            .with_continuation(3, 1)
            .with_inventor(1, 100)
            .build()
        )

        first_filings = classify_first_filings(tables, geographic_scope)

        assert _types(first_filings) == {1: "PRIORITY"}
        assert validate_first_filings(first_filings) == []

    def test_rule_order_does_not_matter(self, geographic_scope):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1)
            .with_filing(2, auth="US", family=20)
            .with_priority_claim(2, 1)
            .with_inventor(1, 100)
            .build()
        )

        first_filings = classify_first_filings(
            tables, geographic_scope, rules=tuple(reversed(DEFAULT_RULES))
        )

        assert _types(first_filings) == {1: "PRIORITY"}

    def test_duplicate_rule_types_rejected(self, geographic_scope):
        tables = PatstatTablesBuilder().with_filing(1).with_inventor(1, 100).build()
        rules = (*DEFAULT_RULES, ClassificationRule(FirstFilingType.SINGLE, DEFAULT_RULES[-1].matches))

        with pytest.raises(FirstFilingResolutionError):
            classify_first_filings(tables, geographic_scope, rules=rules)

    def test_duplicated_filing_rows_tagged_once(self, geographic_scope):
        builder = PatstatTablesBuilder().with_filing(3).with_inventor(3, 300)
        builder.filings.append(dict(builder.filings[0]))

        first_filings = classify_first_filings(builder.build(), geographic_scope)

        assert first_filings["appln_id"].tolist() == [3]

    def test_country_profile_keeps_unpublished_first_filings(self, country_scope, geographic_scope):
        tables = PatstatTablesBuilder().with_filing(3, publn_kind=None).with_inventor(3, 300).build()

        assert _types(classify_first_filings(tables, country_scope)) == {3: "SINGLE"}
        assert classify_first_filings(tables, geographic_scope).empty
