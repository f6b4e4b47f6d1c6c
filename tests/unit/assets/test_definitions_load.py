"""Smoke tests for the Dagster code location."""

import sys

import pytest
from dagster import Definitions, load_assets_from_modules
from loguru import logger

from patloc.assets import iter_asset_modules


pytestmark = pytest.mark.fast


@pytest.fixture
def test_environment(monkeypatch):
    monkeypatch.setenv("PATLOC__PIPELINE__ENVIRONMENT", "test")
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")


def test_asset_modules_exclude_jobs():
    names = {module.__name__ for module in iter_asset_modules()}

    assert {"patloc.assets.first_filing_assets", "patloc.assets.checks"} <= names
    assert not any(name.startswith("patloc.assets.jobs") for name in names)


def test_definitions_load(test_environment):
    from patloc.definitions import defs

    Definitions.validate_loadable(defs)
    job = defs.get_job_def("first_filing_imputation_job")
    assert job.name == "first_filing_imputation_job"


def test_asset_modules_define_every_stage():
    keys = {
        key.to_user_string()
        for assets_def in load_assets_from_modules(iter_asset_modules())
        for key in assets_def.keys
    }
    assert keys == {
        "patstat_tables",
        "first_filings",
        "first_filing_bridge",
        "subsequent_filing_pool",
        "imputed_inventor_locations",
        "imputed_inventor_countries",
    }
