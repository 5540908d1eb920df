"""Canonical article document shared by all providers."""

import re

from pydantic import BaseModel, Field, model_validator

# Supported citation export formats
EXPORT_FORMATS: dict[str, str] = {
    "ris": "ris",
    "endnote": "endnote",
    "refworks_marc_txt": "refworks",
}

DEFAULT_TYPE = "Article"
NO_TITLE = "n/a"


class Display(BaseModel):
    """Bibliographic display fields."""

    creator: str | None = Field(default=None, description="Authors, reading order")
    identifier: str | None = Field(
        default=None, description="Identifier summary, e.g. 'DOI x; ISSN y'"
    )
    language: str | None = Field(default=None, description="Language(s)")
    subject: str | None = Field(default=None, description="Subjects, joined")
    title: str | None = Field(default=None, description="Article title")
    type: str = Field(default=DEFAULT_TYPE, description="Document type")
    description: list[str] = Field(
        default_factory=list, description="Abstract(s), sanitized HTML"
    )
    is_part_of: str | None = Field(default=None, description="Citation of container")
    lds50: str | None = Field(default=None, description="Peer-reviewed marker")
    source: str | None = Field(default=None, description="Source database/publisher")
    version: str | None = Field(default=None, description="Record version")


class AdditionalData(BaseModel):
    """Container (journal) data."""

    journal: str | None = Field(default=None, description="Journal title")
    volume: str | None = Field(default=None, description="Volume")
    issue: str | None = Field(default=None, description="Issue")
    start_page: str | None = Field(default=None, description="First page")
    end_page: str | None = Field(default=None, description="Last page")


class SearchData(BaseModel):
    """Retrieval metadata."""

    creation_date: str | None = Field(default=None, description="Publication date")
    id: str | None = Field(default=None, description="Provider record id")
    subject_facet: list[str] = Field(
        default_factory=list, description="Subjects usable as facet values"
    )


class Link(BaseModel):
    """A link to the item or to one of its representations."""

    url: str | None = Field(default=None, description="Target URL")
    text: str | None = Field(default=None, description="Link label or format")
    name: str | None = Field(default=None, description="Display name")
    thumbnail: str | None = Field(default=None, description="Thumbnail image URL")

    @model_validator(mode="after")
    def _default_name(self) -> "Link":
        if self.name is None:
            self.name = self.url
        return self


class GetIt(BaseModel):
    """Primo delivery link pair."""

    get_it_1: str | None = Field(default=None, description="Primary delivery link")
    get_it_2: str | None = Field(default=None, description="Secondary delivery link")
    delivery_category: str | None = Field(default=None, description="Delivery type")


class Document(BaseModel):
    """Provider-agnostic article record.

    A document is owned by the Response that produced it and is rebuilt on
    every request.
    """

    id: str = Field(description="Identifier usable with lookup_by_id")
    provider: str = Field(description="Provider that produced the record")
    display: Display = Field(default_factory=Display)
    additional_data: AdditionalData = Field(default_factory=AdditionalData)
    search: SearchData = Field(default_factory=SearchData)
    links: list[Link] = Field(default_factory=list)
    get_its: list[GetIt] = Field(default_factory=list)
    dois: list[str] = Field(default_factory=list)
    issns: list[str] = Field(default_factory=list)
    call_numbers: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list, description="Names as indexed")
    download_links: list[Link] = Field(default_factory=list)
    download_text: str | None = Field(
        default=None, description="Sanitized full text, when provided"
    )
    full_text_available: bool = Field(default=False)
    login_needed: bool = Field(
        default=False, description="Provider withheld details from a guest"
    )

    @property
    def title(self) -> str | None:
        return self.display.title

    @property
    def pub_year(self) -> str | None:
        """Year of publication taken from the creation date."""
        date = self.search.creation_date or ""
        match = re.search(r"\d{4}", date)
        return match.group(0) if match else None

    @property
    def show_heading_title(self) -> str:
        return self.display.title or self.additional_data.journal or NO_TITLE

    @property
    def export_formats(self) -> list[str]:
        return list(EXPORT_FORMATS.values())
