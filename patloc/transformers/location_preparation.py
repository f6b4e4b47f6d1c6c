"""Normalise the external geocoding lookup into person-level donor tables."""

from __future__ import annotations

import pandas as pd

from ..models.filing import PersonRole
from ..models.location import (
    GAZETTEER_COORD_SOURCE,
    GEO_PAYLOAD_COLUMNS,
    GEOCODER_COORD_SOURCE,
    PERSON_COUNTRY_COLUMNS,
    PERSON_LOCATION_COLUMNS,
)


# (output column, geocoder column, gazetteer column)
_COALESCED_NAMES = [
    ("country_googlegeon", "country", "country_geon"),
    ("city", "locality", "admin_name1"),
    ("admin_level", "administrative_area_level_1", "admin_name2"),
    ("sub_admin_level", "administrative_area_level_2", "admin_name3"),
    ("subsub_admin_level", "administrative_area_level_3", "admin_name4"),
]


def _blank_to_na(values: pd.Series) -> pd.Series:
    text = values.astype("string").str.strip()
    return text.mask(text == "")


def prepare_geocoded_locations(raw: pd.DataFrame) -> pd.DataFrame:
    """Apply the gazetteer fallback and coalesce administrative names.

    Rows the geocoder could not resolve (``numresults == 0``) but the
    gazetteer matched take their coordinates and country from the gazetteer
    and are tagged ``coord_source = "geonames"``.
    """
    locations = raw.copy()

    gazetteer = (locations["numresults"] == 0).fillna(False) & locations["match_geon"].notna()
    for col in ("lat", "lat_exact"):
        locations.loc[gazetteer, col] = locations.loc[gazetteer, "lat_geon"]
    for col in ("lng", "lng_exact"):
        locations.loc[gazetteer, col] = locations.loc[gazetteer, "lng_geon"]
    locations.loc[gazetteer, "country"] = locations.loc[gazetteer, "country_geon"]
    locations["coord_source"] = locations["coord_source"].astype("object")
    locations.loc[gazetteer, "coord_source"] = GAZETTEER_COORD_SOURCE

    for target, geocoder, fallback in _COALESCED_NAMES:
        locations[target] = _blank_to_na(locations[geocoder]).fillna(
            _blank_to_na(locations[fallback])
        )

    locations["coord_source"] = locations["coord_source"].fillna(GEOCODER_COORD_SOURCE)
    locations["lat_exact"] = locations["lat_exact"].fillna(locations["lat"])
    locations["lng_exact"] = locations["lng_exact"].fillna(locations["lng"])

    keep = ["appln_id", "person_id", "role", *GEO_PAYLOAD_COLUMNS]
    return locations[keep].drop_duplicates().reset_index(drop=True)


def _role_holders(person_applications: pd.DataFrame, role: PersonRole) -> pd.DataFrame:
    holds = (person_applications[role.seq_column] > 0).fillna(False).astype(bool)
    return person_applications.loc[holds, ["appln_id", "person_id"]].drop_duplicates()


def person_locations(
    locations: pd.DataFrame,
    person_applications: pd.DataFrame,
    role: PersonRole,
    unknown_person_id: int = 0,
) -> pd.DataFrame:
    """Geocoded locations of the persons holding ``role`` on each filing.

    Rows carrying a real person id are kept when that person holds the role
    on the filing. Rows carrying the unknown-person sentinel cannot be matched
    to a person; they are kept when their ``role`` column names this role, or
    unconditionally when the lookup has no role information.
    """
    located = locations[locations["lat"].notna()]
    anonymous = located["person_id"].eq(unknown_person_id).fillna(False)

    identified = located[~anonymous].merge(
        _role_holders(person_applications, role), on=["appln_id", "person_id"], how="inner"
    )

    unmatched = located[anonymous]
    roles = unmatched["role"].astype("string").str.upper()
    if roles.notna().any():
        unmatched = unmatched[roles.eq(role.value).fillna(False).astype(bool)]

    combined = pd.concat([identified, unmatched], ignore_index=True)
    return combined[PERSON_LOCATION_COLUMNS].drop_duplicates().reset_index(drop=True)


def person_countries(
    person_applications: pd.DataFrame, persons: pd.DataFrame, role: PersonRole
) -> pd.DataFrame:
    """``(appln_id, person_id, ctry_code)`` for the persons holding ``role``.

    Empty country codes are treated as missing.
    """
    codes = persons[["person_id", "person_ctry_code"]].drop_duplicates(subset="person_id")
    countries = _role_holders(person_applications, role).merge(codes, on="person_id", how="left")
    countries["ctry_code"] = _blank_to_na(countries["person_ctry_code"])
    return countries[PERSON_COUNTRY_COLUMNS].reset_index(drop=True)
