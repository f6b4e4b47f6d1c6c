"""Column layouts of person locations and of the two imputed output tables."""

NAME_COLUMNS = [f"name_{level}" for level in range(6)]

GEO_PAYLOAD_COLUMNS = [
    *NAME_COLUMNS,
    "lat",
    "lng",
    "lat_exact",
    "lng_exact",
    "country_googlegeon",
    "city",
    "admin_level",
    "sub_admin_level",
    "subsub_admin_level",
    "data_source",
    "coord_source",
]

PERSON_LOCATION_COLUMNS = ["appln_id", "person_id", *GEO_PAYLOAD_COLUMNS]

PERSON_COUNTRY_COLUMNS = ["appln_id", "person_id", "ctry_code"]

GEO_OUTPUT_COLUMNS = [
    "appln_id",
    "patent_office",
    "priority_date",
    "priority_year",
    "donor_appln_id",
    "donor_person_id",
    "n_locations",
    *GEO_PAYLOAD_COLUMNS,
    "source",
    "type",
    "lastupdate",
]

# person_id is the person whose country was taken: an inventor for sources 1-3,
# an applicant of the donor filing for sources 4-6, and the unknown-person id
# (0 by default) for the office fallback of source 7.
COUNTRY_OUTPUT_COLUMNS = [
    "appln_id",
    "person_id",
    "patent_office",
    "priority_date",
    "priority_year",
    "ctry_code",
    "country",
    "donor_appln_id",
    "source",
    "type",
    "lastupdate",
]

GEOCODER_COORD_SOURCE = "geolocalization"
GAZETTEER_COORD_SOURCE = "geonames"
