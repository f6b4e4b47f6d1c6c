"""Dagster job definitions."""

from .imputation_job import first_filing_imputation_job


__all__ = ["first_filing_imputation_job"]
