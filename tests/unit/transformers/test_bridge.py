"""Unit tests for the first filing bridge table."""

from datetime import datetime

import pytest

from patloc.models import BRIDGE_COLUMNS
from patloc.transformers.bridge import build_bridge_table
from tests.factories import PatstatTablesBuilder


pytestmark = pytest.mark.fast


def _pairs(bridge) -> set[tuple[int, int, str]]:
    return set(
        zip(bridge["prior_appln_id"].tolist(), bridge["appln_id"].tolist(), bridge["type"].tolist())
    )


class TestBuildBridgeTable:
    """Tests for build_bridge_table."""

    def test_priority_maps_both_filings_to_claimed_one(self, priority_scenario):
        bridge = build_bridge_table(priority_scenario.build())

        assert _pairs(bridge) == {(1, 1, "PRIORITY"), (1, 2, "PRIORITY")}
        assert list(bridge.columns) == BRIDGE_COLUMNS

    def test_pct_phase_entries_chain_to_root(self):
        tables = (
            PatstatTablesBuilder()
            .with_filing(5, auth="WO", kind="W", receiving_office="FR", family=50)
            .with_filing(6, auth="JP", internat_appln_id=5, nat_phase="Y", family=50)
            .with_filing(7, auth="EP", internat_appln_id=5, reg_phase="Y", family=50)
            .build()
        )

        bridge = build_bridge_table(tables)

        assert _pairs(bridge) == {(5, 5, "PCT"), (5, 6, "PCT"), (5, 7, "PCT")}

    def test_continuation_children_join_existing_first_filing(self):
        tables = (
            PatstatTablesBuilder()
            .with_filing(1, family=10)
            .with_filing(2, auth="US", family=10)
            .with_filing(3, auth="US", family=30)
            .with_priority_claim(2, 1)
            .with_continuation(3, 1)
            .build()
        )

        bridge = build_bridge_table(tables)

        assert _pairs(bridge) == {
            (1, 1, "PRIORITY"),
            (1, 2, "PRIORITY"),
            (1, 3, "CONTINUATION"),
        }

    def test_new_continuation_lineage(self):
        tables = (
            PatstatTablesBuilder()
            .with_filing(10, auth="US", family=1)
            .with_filing(11, auth="US", family=1)
            .with_tech_relation(21, 20)
            .with_filing(20, auth="US", family=2)
            .with_filing(21, auth="US", family=2)
            .with_continuation(11, 10)
            .build()
        )

        assert _pairs(build_bridge_table(tables)) == {
            (10, 10, "CONTINUATION"),
            (10, 11, "CONTINUATION"),
            (20, 20, "TECH_REL"),
            (20, 21, "TECH_REL"),
        }

    def test_singletons_and_unpublished_filings(self):
        tables = (
            PatstatTablesBuilder()
            .with_filing(40)
            .with_filing(41, publn_kind=None)
            .build()
        )

        assert _pairs(build_bridge_table(tables)) == {(40, 40, "SINGLE")}

    def test_one_row_per_publication(self):
        tables = (
            PatstatTablesBuilder()
            .with_filing(40, publn_kind="A1")
            .with_publication(40, auth="DE", kind="B1", number="0000041")
            .build()
        )

        bridge = build_bridge_table(tables)

        assert len(bridge) == 2
        assert sorted(bridge["publn_kind"].tolist()) == ["A1", "B1"]

    def test_lastupdate_stamped(self):
        stamp = datetime(2024, 1, 31, 12, 0)
        tables = PatstatTablesBuilder().with_filing(40).build()

        bridge = build_bridge_table(tables, lastupdate=stamp)

        assert (bridge["lastupdate"] == stamp).all()
