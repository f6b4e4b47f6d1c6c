"""Unit tests for the input table extractor."""

import pandas as pd
import pytest

from patloc.exceptions import ErrorCode, FileSystemError, ValidationError
from patloc.extractors.patstat import (
    PatstatExtractor,
    PatstatTables,
    normalize_table,
    parse_filing_dates,
)
from patloc.utils.duckdb_client import DuckDBClient
from tests.factories import write_csv_tables


pytestmark = pytest.mark.fast


def _raw_filings(**overrides) -> pd.DataFrame:
    row = {
        "appln_id": 1,
        "appln_kind": "A",
        "appln_auth": "DE",
        "appln_filing_date": "1995-03-01",
        "appln_filing_year": 1995,
        "docdb_family_id": 10,
        "internat_appln_id": 0,
        "earliest_filing_id": 1,
        "nat_phase": "N",
        "reg_phase": "N",
    }
    row.update(overrides)
    return pd.DataFrame([row])


@pytest.fixture
def client():
    client = DuckDBClient(":memory:")
    yield client
    client.close()


class TestNormalizeTable:
    """Tests for column checks and type coercion."""

    def test_missing_required_column(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_table("filings", _raw_filings().drop(columns=["nat_phase"]))

        assert exc_info.value.details["missing_columns"] == ["nat_phase"]
        assert exc_info.value.component == "extractor.patstat"

    def test_optional_columns_added(self):
        filings = normalize_table("filings", _raw_filings())

        assert "receiving_office" in filings.columns
        assert filings["receiving_office"].isna().all()
        assert str(filings["appln_id"].dtype) == "Int64"

    def test_only_consumed_optional_columns_added(self):
        filings = normalize_table("filings", _raw_filings())
        publications = normalize_table(
            "publications",
            pd.DataFrame([{"appln_id": 1, "publn_auth": "DE", "publn_nr": "1", "publn_kind": "A"}]),
        )

        assert "granted" not in filings.columns
        assert list(publications.columns) == [
            "appln_id",
            "publn_auth",
            "publn_nr",
            "publn_kind",
            "publn_nr_original",
        ]

    def test_placeholder_date_is_missing(self):
        filings = normalize_table("filings", _raw_filings(appln_filing_date="9999-12-31"))

        assert pd.isna(filings.loc[0, "appln_filing_date"])

    def test_malformed_date(self):
        with pytest.raises(ValidationError, match="malformed"):
            normalize_table("filings", _raw_filings(appln_filing_date="March 95"))

    def test_malformed_identifier(self):
        with pytest.raises(ValidationError):
            normalize_table("filings", _raw_filings(appln_id="abc"))

    def test_parse_filing_dates_keeps_datetimes(self):
        dates = pd.Series(pd.to_datetime(["1995-03-01"]))
        assert parse_filing_dates(dates) is dates


class TestPatstatTables:
    """Tests for the input bundle."""

    def test_optional_tables_default_to_empty(self, builder):
        built = builder.with_filing(1).build()
        tables = PatstatTables(
            filings=built.filings,
            publications=built.publications,
            priority_claims=built.priority_claims,
            person_applications=built.person_applications,
            persons=built.persons,
        )

        assert tables.continuations.empty
        assert "tech_rel_appln_id" in tables.tech_relations.columns
        assert "lat" in tables.geocoded_locations.columns
        assert tables.row_counts()["filings"] == 1


class TestPatstatExtractor:
    """Tests for reading the bundle from DuckDB."""

    def test_extract_reads_every_table(self, client, priority_scenario, tmp_path):
        write_csv_tables(priority_scenario.build(), tmp_path / "csv")
        extractor = PatstatExtractor(client)
        extractor.import_csv_directory(tmp_path / "csv")

        tables = extractor.extract()

        assert sorted(tables.filings["appln_id"].tolist()) == [1, 2]
        assert tables.priority_claims["prior_appln_id"].tolist() == [1]
        assert tables.row_counts()["person_applications"] == 2

    def test_missing_optional_table(self, client, priority_scenario, tmp_path):
        write_csv_tables(priority_scenario.build(), tmp_path / "csv")
        (tmp_path / "csv" / "tls205_tech_rel.csv").unlink()
        extractor = PatstatExtractor(client)
        imported = extractor.import_csv_directory(tmp_path / "csv")

        tables = extractor.extract()

        assert "tls205_tech_rel" not in imported
        assert tables.tech_relations.empty

    def test_missing_required_table(self, client):
        with pytest.raises(ValidationError, match="tls201_appln"):
            PatstatExtractor(client).extract()

    def test_missing_csv_directory(self, client, tmp_path):
        with pytest.raises(FileSystemError) as exc_info:
            PatstatExtractor(client).import_csv_directory(tmp_path / "absent")

        assert exc_info.value.status_code == ErrorCode.FILE_NOT_FOUND

    def test_reads_from_dataframes(self, client):
        client.replace_table_from_df(_raw_filings(), "tls201_appln")
        for name, columns in {
            "tls211_pat_publn": ["appln_id", "publn_auth", "publn_nr", "publn_kind"],
            "tls204_appln_prior": ["appln_id", "prior_appln_id"],
            "tls207_pers_appln": ["appln_id", "person_id", "invt_seq_nr", "applt_seq_nr"],
        }.items():
            client.replace_table_from_df(pd.DataFrame({c: [1] for c in columns}), name)
        client.replace_table_from_df(
            pd.DataFrame({"person_id": [1], "person_ctry_code": ["DE"]}), "tls206_person"
        )

        tables = PatstatExtractor(client).extract()

        assert tables.filings.loc[0, "appln_filing_date"] == pd.Timestamp("1995-03-01")
        assert tables.priority_claims["prior_appln_seq_nr"].isna().all()
