"""Schemas for Summon API 2.0.0 JSON payloads.

Summon returns most document fields as lists, even single-valued ones. The
models keep the lists and expose the first value through properties, in the
manner of the Summon client SDKs.
"""

from pydantic import BaseModel, ConfigDict, Field


class SummonModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )


def _first(values: list[str]) -> str | None:
    for value in values:
        if value and str(value).strip():
            return str(value).strip()
    return None


class SummonAuthor(SummonModel):
    fullname: str = ""


class SummonDate(SummonModel):
    """Publication date parts, as strings."""

    year: str | None = None
    month: str | None = None
    day: str | None = None
    text: str | None = None


class SummonDocument(SummonModel):
    """One entry of ``documents``."""

    ids: list[str] = Field(default_factory=list, alias="ID")
    titles: list[str] = Field(default_factory=list, alias="Title")
    authors: list[SummonAuthor] = Field(default_factory=list, alias="Author_xml")
    publication_titles: list[str] = Field(default_factory=list, alias="PublicationTitle")
    publication_dates: list[SummonDate] = Field(
        default_factory=list, alias="PublicationDate_xml"
    )
    volumes: list[str] = Field(default_factory=list, alias="Volume")
    issues: list[str] = Field(default_factory=list, alias="Issue")
    start_pages: list[str] = Field(default_factory=list, alias="StartPage")
    end_pages: list[str] = Field(default_factory=list, alias="EndPage")
    page_counts: list[str] = Field(default_factory=list, alias="PageCount")
    editions: list[str] = Field(default_factory=list, alias="Edition")
    dois: list[str] = Field(default_factory=list, alias="DOI")
    issns: list[str] = Field(default_factory=list, alias="ISSN")
    eissns: list[str] = Field(default_factory=list, alias="EISSN")
    call_numbers: list[str] = Field(default_factory=list, alias="LCCCallNum")
    languages: list[str] = Field(default_factory=list, alias="Language")
    publishers: list[str] = Field(default_factory=list, alias="Publisher")
    subject_terms: list[str] = Field(default_factory=list, alias="SubjectTerms")
    abstracts: list[str] = Field(default_factory=list, alias="Abstract")
    content_types: list[str] = Field(default_factory=list, alias="ContentType")
    link: str | None = None
    thumbnail_small: list[str] = Field(default_factory=list, alias="thumbnail_s")
    thumbnail_medium: list[str] = Field(default_factory=list, alias="thumbnail_m")
    thumbnail_large: list[str] = Field(default_factory=list, alias="thumbnail_l")

    @property
    def id(self) -> str | None:
        return _first(self.ids)

    @property
    def title(self) -> str | None:
        return _first(self.titles)

    @property
    def publication_title(self) -> str | None:
        return _first(self.publication_titles)

    @property
    def publication_date(self) -> SummonDate | None:
        return self.publication_dates[0] if self.publication_dates else None

    @property
    def volume(self) -> str | None:
        return _first(self.volumes)

    @property
    def issue(self) -> str | None:
        return _first(self.issues)

    @property
    def start_page(self) -> str | None:
        return _first(self.start_pages)

    @property
    def end_page(self) -> str | None:
        return _first(self.end_pages)

    @property
    def page_count(self) -> str | None:
        return _first(self.page_counts)

    @property
    def edition(self) -> str | None:
        return _first(self.editions)

    @property
    def doi(self) -> str | None:
        return _first(self.dois)

    @property
    def abstract(self) -> str | None:
        return _first(self.abstracts)

    @property
    def thumbnail(self) -> str | None:
        return (
            _first(self.thumbnail_medium)
            or _first(self.thumbnail_small)
            or _first(self.thumbnail_large)
        )


class SummonFacetCount(SummonModel):
    value: str = ""
    count: int = 0


class SummonFacet(SummonModel):
    """One entry of ``facetFields``."""

    display_name: str = Field(default="", alias="displayName")
    field_name: str = Field(default="", alias="fieldName")
    combine_mode: str | None = Field(default=None, alias="combineMode")
    counts: list[SummonFacetCount] = Field(default_factory=list)


class SummonError(SummonModel):
    code: str | None = None
    message: str = ""


class SummonSearch(SummonModel):
    """A search reply."""

    record_count: int = Field(default=0, alias="recordCount")
    page_count: int = Field(default=0, alias="pageCount")
    documents: list[SummonDocument] = Field(default_factory=list)
    facets: list[SummonFacet] = Field(default_factory=list, alias="facetFields")
    errors: list[SummonError] = Field(default_factory=list)
