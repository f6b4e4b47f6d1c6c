"""Schemas for filing scope and imputation behaviour.

The office list, the per-office publication-kind exclusions and the list of
supranational offices are domain data. They are shipped in ``config/base.yaml``
and mirrored here as model defaults so the pipeline also runs without a
configuration directory.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_JURISDICTIONS: tuple[str, ...] = (
    "AL", "AT", "AU", "BE", "BG", "BR", "CA", "CH", "CL", "CN", "CY", "CZ", "DE",
    "DK", "EE", "EP", "ES", "FI", "FR", "GB", "GR", "HR", "HU", "IB", "IE", "IL",
    "IN", "IS", "IT", "JP", "KR", "LT", "LU", "LV", "MK", "MT", "MX", "NL", "NO",
    "NZ", "PL", "PT", "RO", "RS", "RU", "SE", "SI", "SK", "SM", "TR", "US", "ZA",
)  # fmt: skip

DEFAULT_EXCLUDED_PUBLICATION_KINDS: dict[str, tuple[str, ...]] = {
    "AU": ("A3", "B3", "B4", "C1", "C4", "D0"),
    "BE": ("A6", "A7"),
    "FR": ("A3", "A4", "A7"),
    "IE": ("A2", "B2"),
    "NL": ("C1",),
    "SI": ("A2",),
    "US": ("E", "E1", "H", "H1", "I4", "P", "P1", "P2", "P3", "S1"),
}

DEFAULT_SUPRANATIONAL_OFFICES: tuple[str, ...] = ("EP", "AP", "EA", "GC", "OA", "WO")

_OFFICE_CODE = re.compile(r"^[A-Z]{2}$")


def _check_office_codes(codes: list[str], field: str) -> list[str]:
    bad = [code for code in codes if not isinstance(code, str) or not _OFFICE_CODE.match(code)]
    if bad:
        raise ValueError(f"{field}: unknown jurisdiction code(s) {bad}")
    return codes


class ScopeFilters(BaseModel):
    """Optional eligibility filters for one imputation profile."""

    year_window: bool = True
    kind_exclusions: bool = True
    require_publication: bool = True
    national_kinds: list[str] | None = Field(
        default_factory=lambda: ["A"],
        description="Kinds accepted for national filings (null means every non-W kind)",
    )


class ScopeConfig(BaseModel):
    """Which filings are eligible to become first filings."""

    jurisdictions: list[str] = Field(default_factory=lambda: list(DEFAULT_JURISDICTIONS))
    excluded_publication_kinds: dict[str, list[str]] = Field(
        default_factory=lambda: {
            office: list(kinds) for office, kinds in DEFAULT_EXCLUDED_PUBLICATION_KINDS.items()
        }
    )
    min_filing_year: int = 1980
    max_filing_year: int = 2015
    excluded_publication_kind_always: str = Field(
        default="D2", description="Publication kind never accepted as proof of publication"
    )
    geographic: ScopeFilters = Field(default_factory=ScopeFilters)
    country: ScopeFilters = Field(
        default_factory=lambda: ScopeFilters(
            year_window=False,
            kind_exclusions=False,
            require_publication=False,
            national_kinds=None,
        )
    )

    @field_validator("jurisdictions")
    @classmethod
    def validate_jurisdictions(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("jurisdictions must not be empty")
        return _check_office_codes(value, "jurisdictions")

    @field_validator("excluded_publication_kinds")
    @classmethod
    def validate_exclusions(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        _check_office_codes(list(value), "excluded_publication_kinds")
        return value

    @model_validator(mode="after")
    def validate_year_window(self) -> ScopeConfig:
        if self.min_filing_year > self.max_filing_year:
            raise ValueError(
                f"min_filing_year ({self.min_filing_year}) exceeds "
                f"max_filing_year ({self.max_filing_year})"
            )
        return self


class ImputationConfig(BaseModel):
    """Configuration of the attribute resolver."""

    supranational_offices: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SUPRANATIONAL_OFFICES)
    )
    unknown_person_id: int = Field(
        default=0, description="Sentinel person id for locations without a person identity"
    )
    variants: list[str] = Field(default_factory=lambda: ["geographic", "country"])
    strict_validation: bool = Field(
        default=False, description="Raise DataQualityError instead of reporting issues"
    )

    @field_validator("supranational_offices")
    @classmethod
    def validate_supranational(cls, value: list[str]) -> list[str]:
        return _check_office_codes(value, "supranational_offices")

    @field_validator("variants")
    @classmethod
    def validate_variants(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one imputation variant must be enabled")
        unknown = sorted(set(value) - {"geographic", "country"})
        if unknown:
            raise ValueError(f"Unknown imputation variant(s): {unknown}")
        return value


__all__ = [
    "DEFAULT_EXCLUDED_PUBLICATION_KINDS",
    "DEFAULT_JURISDICTIONS",
    "DEFAULT_SUPRANATIONAL_OFFICES",
    "ImputationConfig",
    "ScopeConfig",
    "ScopeFilters",
]
