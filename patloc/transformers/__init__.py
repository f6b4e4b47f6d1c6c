"""First filing classification, candidate pools and attribute imputation."""

from .attribute_resolver import AttributeResolver, DonorTier
from .bridge import build_bridge_table
from .candidate_pool import build_candidate_pool
from .country_imputation import impute_inventor_countries
from .first_filing_resolver import ClassificationRule, FilingScope, classify_first_filings
from .imputation_pipeline import FirstFilingImputationPipeline, ImputationResult
from .location_imputation import impute_inventor_locations
from .location_preparation import person_countries, person_locations, prepare_geocoded_locations
from .tie_breaker import earliest_candidates, restrict_to_earliest


__all__ = [
    "AttributeResolver",
    "ClassificationRule",
    "DonorTier",
    "FilingScope",
    "FirstFilingImputationPipeline",
    "ImputationResult",
    "build_bridge_table",
    "build_candidate_pool",
    "classify_first_filings",
    "earliest_candidates",
    "impute_inventor_countries",
    "impute_inventor_locations",
    "person_countries",
    "person_locations",
    "prepare_geocoded_locations",
    "restrict_to_earliest",
]
