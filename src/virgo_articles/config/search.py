"""Static search configuration shared by callers and providers."""

from pydantic import BaseModel, Field


class SearchFieldConfig(BaseModel):
    """An advanced search field offered to callers."""

    name: str = Field(description="Generic field name")
    label: str = Field(description="Human readable label")
    range: bool = Field(default=False, description="True for date-range fields")


# Advanced search fields, keyed by generic name
ADVANCED_SEARCH_FIELDS: dict[str, SearchFieldConfig] = {
    field.name: field
    for field in (
        SearchFieldConfig(name="author", label="Author"),
        SearchFieldConfig(name="title", label="Title"),
        SearchFieldConfig(name="journal", label="Journal Title"),
        SearchFieldConfig(name="subject", label="Subject"),
        SearchFieldConfig(name="keyword", label="Keywords"),
        SearchFieldConfig(name="issn", label="ISSN"),
        SearchFieldConfig(name="publication_date", label="Year Published", range=True),
    )
}

# Sort keys accepted by every provider
SORT_RELEVANCY = "relevancy"
SORT_DATE = "date"
SORT_KEYS = (SORT_RELEVANCY, SORT_DATE)

# Pseudo-facet selecting peer-reviewed (scholarly) articles only
PEER_REVIEWED_FACET = "tlevel"
PEER_REVIEWED_VALUE = "peer_reviewed"

# Facet fields requested from each provider
EBSCO_FACETS = (
    "tlevel",
    "PublicationYear",
    "SourceType",
    "SubjectEDS",
    "Journal",
    "Publisher",
    "Language",
    "SubjectGeographic",
    "ContentProvider",
)
PRIMO_FACETS = ("creationdate", "rtype", "creator", "topic", "jtitle", "lang")
SUMMON_FACETS = (
    "SubjectTerms",
    "ContentType",
    "PublicationTitle",
    "Author",
    "Language",
    "Audience",
    "GeographicLocations",
)
