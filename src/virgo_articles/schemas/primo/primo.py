"""Schemas for Primo brief-search X-service payloads.

Primo records map almost one-to-one onto the canonical Document, so only the
result-set envelope and the facet language names live here.
"""

from pydantic import BaseModel, Field

from virgo_articles.schemas.base.documents import Document
from virgo_articles.schemas.base.responses import Facet, FacetItem

# Display names for the codes of the "lang" facet
LANGUAGES: dict[str, str] = {
    "ara": "Arabic",
    "chi": "Chinese",
    "dut": "Dutch",
    "eng": "English",
    "fre": "French",
    "ger": "German",
    "gre": "Greek",
    "heb": "Hebrew",
    "ita": "Italian",
    "jpn": "Japanese",
    "kor": "Korean",
    "lat": "Latin",
    "pol": "Polish",
    "por": "Portuguese",
    "rus": "Russian",
    "spa": "Spanish",
    "swe": "Swedish",
    "tur": "Turkish",
}


class PrimoFacetItem(FacetItem):
    """Facet value whose language codes display as language names."""

    def display_value(self, facet_name: str | None = None) -> str:
        if facet_name == "lang" and self.value.lower() in LANGUAGES:
            return LANGUAGES[self.value.lower()]
        return super().display_value(facet_name)


class PrimoCounts(BaseModel):
    """DOCSET paging attributes."""

    hits: int = Field(default=0, description="TOTALHITS")
    first_hit: int = Field(default=1, description="FIRSTHIT, 1-based")
    last_hit: int = Field(default=0, description="LASTHIT")


class PrimoSearchResult(BaseModel):
    """A parsed JAGROOT reply.

    ``counts`` is None when the reply carried no DOCSET; such a reply is not
    a usable result set.
    """

    counts: PrimoCounts | None = None
    docs: list[Document] = Field(default_factory=list)
    facets: list[Facet] = Field(default_factory=list)
