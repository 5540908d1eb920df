"""Schemas for EBSCO EDS API XML payloads.

These mirror the EDS record structure; mapping onto the canonical Document
happens in providers/ebsco/mapping.py.
"""

from pydantic import BaseModel, Field


class Header(BaseModel):
    """Record header."""

    dbid: str = Field(default="", description="Database id (DbId)")
    an: str = Field(default="", description="Accession number (An)")
    db_label: str | None = None
    score: str | None = Field(default=None, description="RelevancyScore")
    access_level: str | None = None
    pub_type: str | None = None
    pub_type_id: str | None = None


class DisplayElement(BaseModel):
    """One entry of the flat Items list."""

    key: str = Field(default="", description="Item Name, used for dispatch")
    value: str = Field(default="", description="Item Data (HTML-ish markup)")
    label: str | None = None
    group: str | None = None


class Title(BaseModel):
    type: str | None = None
    value: str = Field(default="", description="TitleFull")


class Number(BaseModel):
    number_type: str = Field(default="", description="volume, issue...")
    value: str = ""


class DateDMY(BaseModel):
    date_type: str = ""
    text: str = ""
    day: str = ""
    month: str = ""
    year: str = ""


class Identifier(BaseModel):
    identifier_type: str = Field(default="", description="doi, issn-print...")
    value: str = ""
    scope: str | None = None


class Pagination(BaseModel):
    start_page: str = "0"
    page_count: str = ""


class Subject(BaseModel):
    subject_full: str = ""
    type: str | None = None
    authority: str | None = None


class Language(BaseModel):
    language: str | None = Field(default=None, description="Language name")
    code: str | None = None


class BibEntity(BaseModel):
    """Bibliographic entity of a record or of its container."""

    entity_id: str | None = None
    entity_type: str | None = None
    identifiers: list[Identifier] = Field(default_factory=list)
    pagination: Pagination | None = None
    subjects: list[Subject] = Field(default_factory=list)
    languages: list[Language] = Field(default_factory=list)
    titles: list[Title] = Field(default_factory=list)
    numbering: list[Number] = Field(default_factory=list)
    dates: list[DateDMY] = Field(default_factory=list)


class BibRecord(BaseModel):
    bib_entity: BibEntity | None = None
    contributors: list[str] = Field(
        default_factory=list, description="PersonEntity NameFull values"
    )
    is_part_of: list[BibEntity] = Field(default_factory=list)


class DownloadText(BaseModel):
    availability: int = 0
    value: str | None = None


class DownloadLink(BaseModel):
    url: str | None = None
    type: str | None = None

    @property
    def format(self) -> str | None:
        """Type in a form suitable for display."""
        if self.type is None:
            return None
        lowered = self.type.lower()
        if lowered.startswith("pdf"):
            return "PDF"
        if lowered.startswith("epub"):
            return "ePub"
        return "Text"


DEFAULT_DOWNLOAD_FORMAT = "PDF"


class CustomLink(BaseModel):
    text: str = ""
    name: str = ""
    url: str = ""
    icon_url: str = ""
    category: str | None = None
    hover_text: str | None = None


class FullText(BaseModel):
    text: DownloadText | None = None
    download_links: list[DownloadLink] = Field(default_factory=list)
    custom_links: list[CustomLink] = Field(default_factory=list)


class EbscoRecord(BaseModel):
    """One Record element from a search or retrieve response."""

    header: Header = Field(default_factory=Header)
    display_elements: list[DisplayElement] = Field(default_factory=list)
    full_text: FullText | None = None
    custom_links: list[CustomLink] = Field(default_factory=list)
    plink: str | None = None
    bib_record: BibRecord | None = None
    result_id: str | None = None

    @property
    def full_text_available(self) -> bool:
        text = self.full_text.text if self.full_text else None
        return bool(text and (text.value or text.availability))

    @property
    def download_formats(self) -> list[str]:
        if not self.full_text:
            return []
        return [link.format for link in self.full_text.download_links if link.format]


class EbscoFacetValue(BaseModel):
    value: str = ""
    count: int = 0


class EbscoFacet(BaseModel):
    id: str = ""
    values: list[EbscoFacetValue] = Field(default_factory=list)


class EbscoSearchResult(BaseModel):
    """SearchResponseMessage/SearchResult."""

    total_hits: int = 0
    records: list[EbscoRecord] = Field(default_factory=list)
    facets: list[EbscoFacet] = Field(default_factory=list)


class APIErrorMessage(BaseModel):
    detailed_error_description: str = ""
    error_description: str = ""
    error_number: int = 0
