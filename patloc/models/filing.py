"""Filing-level enums and column layouts shared by the transformers."""

from enum import Enum, IntEnum


class FirstFilingType(str, Enum):
    """Canonical tag of a first filing, declared in precedence order."""

    PRIORITY = "PRIORITY"
    PCT = "PCT"
    CONTINUATION = "CONTINUATION"
    TECH_REL = "TECH_REL"
    SINGLE = "SINGLE"

    @property
    def precedence(self) -> int:
        """1 for the strongest tag (PRIORITY), 5 for SINGLE."""
        return list(FirstFilingType).index(self) + 1


class RelationshipKind(str, Enum):
    """Kinds of directed edges between a subsequent filing and an earlier one."""

    PRIORITY_CLAIM = "PRIORITY_CLAIM"
    CONTINUATION = "CONTINUATION"
    TECH_REL = "TECH_REL"
    PCT_PHASE = "PCT_PHASE"


class SourceRank(IntEnum):
    """Donor tier that supplied an imputed value (1 is the most trusted)."""

    SELF_INVENTOR = 1
    EQUIVALENT_INVENTOR = 2
    OTHER_SUBSEQUENT_INVENTOR = 3
    SELF_APPLICANT = 4
    EQUIVALENT_APPLICANT = 5
    OTHER_SUBSEQUENT_APPLICANT = 6
    JURISDICTION_FALLBACK = 7


class PersonRole(str, Enum):
    """Role of a person on a filing, with the codes used by the geocoding lookup."""

    INVENTOR = "INV"
    APPLICANT = "APP"

    @property
    def seq_column(self) -> str:
        return "invt_seq_nr" if self is PersonRole.INVENTOR else "applt_seq_nr"


INTERNATIONAL_KIND = "W"
PHASE_ENTERED = "Y"

FIRST_FILING_COLUMNS = [
    "appln_id",
    "appln_kind",
    "patent_office",
    "appln_filing_date",
    "appln_filing_year",
    "docdb_family_id",
    "type",
]

POOL_COLUMNS = [
    "appln_id",
    "subsequent_id",
    "patent_office",
    "appln_filing_year",
    "subsequent_date",
    "nb_priorities",
    "relationship",
    "type",
]

BRIDGE_COLUMNS = [
    "prior_appln_id",
    "appln_id",
    "publn_auth",
    "publn_nr",
    "publn_nr_original",
    "publn_kind",
    "appln_auth",
    "appln_kind",
    "appln_filing_date",
    "appln_filing_year",
    "docdb_family_id",
    "inpadoc_family_id",
    "type",
    "lastupdate",
]

# (input table, column holding the earlier filing) for each explicit edge kind;
# the later filing is always ``appln_id``
RELATIONSHIP_EDGES: dict[RelationshipKind, tuple[str, str]] = {
    RelationshipKind.PRIORITY_CLAIM: ("priority_claims", "prior_appln_id"),
    RelationshipKind.CONTINUATION: ("continuations", "parent_appln_id"),
    RelationshipKind.TECH_REL: ("tech_relations", "tech_rel_appln_id"),
}
