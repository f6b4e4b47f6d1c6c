"""Unit tests for the DuckDB output loader."""

from dataclasses import replace

import pandas as pd
import pytest

from patloc.config.schemas import OutputTablesConfig
from patloc.exceptions import LoadError
from patloc.loaders import DuckDBLoader
from patloc.transformers.imputation_pipeline import ImputationResult
from patloc.utils.duckdb_client import DuckDBClient


pytestmark = pytest.mark.fast


@pytest.fixture
def client():
    client = DuckDBClient(":memory:")
    yield client
    client.close()


def _result(with_countries: bool = True) -> ImputationResult:
    first = pd.DataFrame({"appln_id": [1, 2], "type": ["PRIORITY", "SINGLE"]})
    return ImputationResult(
        run_id="test",
        first_filings={"geographic": first, "country": first.iloc[:1]},
        pools={"geographic": pd.DataFrame({"appln_id": [1], "subsequent_id": [3]})},
        bridge=pd.DataFrame({"prior_appln_id": [1, 1], "appln_id": [1, 3]}),
        inventor_locations=pd.DataFrame({"appln_id": [1], "source": [2]}),
        inventor_countries=(
            pd.DataFrame({"appln_id": [1, 2], "person_id": [100, 0], "source": [1, 7]})
            if with_countries
            else None
        ),
    )


class TestDuckDBLoader:
    """Tests for rebuilding the output tables."""

    def test_replace_table_drops_previous_content(self, client):
        loader = DuckDBLoader(client)

        loader.replace_table(pd.DataFrame({"a": [1, 2, 3]}), "out")
        rows = loader.replace_table(pd.DataFrame({"a": [9]}), "out")

        assert rows == 1
        assert client.read_table("out")["a"].tolist() == [9]
        assert loader.stats == {"out": 1}

    def test_write_result_uses_configured_names(self, client):
        names = OutputTablesConfig(geographic="geo_out")
        loader = DuckDBLoader(client, names)

        written = loader.write_result(_result())

        assert written == {
            "first_filings": 3,
            "first_and_subsequent_filings": 2,
            "subsequent_filings": 1,
            "geo_out": 1,
            "pf_inv_pers_ctry": 2,
        }
        stacked = client.read_table("first_filings")
        assert sorted(stacked["profile"].unique()) == ["country", "geographic"]

    def test_disabled_variant_not_written(self, client):
        written = DuckDBLoader(client).write_result(_result(with_countries=False))

        assert "pf_inv_pers_ctry" not in written
        assert not client.table_exists("pf_inv_pers_ctry")

    def test_failed_write_leaves_previous_outputs(self, client):
        loader = DuckDBLoader(client)
        loader.write_result(_result())
        with client.connection() as conn:
            conn.execute("DROP TABLE subsequent_filings")
            conn.execute("CREATE VIEW subsequent_filings AS SELECT 1 AS x")

        rerun = replace(_result(), bridge=pd.DataFrame({"prior_appln_id": [1], "appln_id": [1]}))
        with pytest.raises(LoadError) as excinfo:
            loader.write_result(rerun)

        assert excinfo.value.operation == "replace_tables_from_dfs"
        assert client.row_count("first_and_subsequent_filings") == 2
        assert client.row_count("first_filings") == 3
        assert loader.stats["first_and_subsequent_filings"] == 2
