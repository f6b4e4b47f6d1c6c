"""Dagster definitions for the first filing imputation pipeline."""

from dagster import Definitions, load_asset_checks_from_modules, load_assets_from_modules

from . import assets as assets_pkg
from .assets.jobs import first_filing_imputation_job
from .utils.logging_config import configure_logging_from_config


configure_logging_from_config()

asset_modules = assets_pkg.iter_asset_modules()

defs = Definitions(
    assets=load_assets_from_modules(asset_modules),
    asset_checks=load_asset_checks_from_modules(asset_modules),
    jobs=[first_filing_imputation_job],
)
