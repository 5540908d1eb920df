"""Tool result schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from virgo_articles.schemas.base.documents import Document
from virgo_articles.schemas.base.responses import Facet, Response


class ArticleSearchResult(BaseModel):
    """One page of article search results."""

    provider: str = Field(description="Provider that answered")
    total: int = Field(description="Total hits reported by the provider")
    page: int = Field(description="Current page (1-based)")
    per_page: int = Field(description="Results per page")
    total_pages: int = Field(description="Pages the provider will hand out")
    documents: list[Document] = Field(default_factory=list)
    facets: list[Facet] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: Response) -> ArticleSearchResult:
        scope = response.paginate_values()
        return cls(
            provider=response.provider,
            total=response.total,
            page=scope.current_page,
            per_page=response.per_page,
            total_pages=scope.total_pages,
            documents=response.docs,
            facets=response.facets,
        )


class ProviderInfo(BaseModel):
    """An article provider and its limits."""

    name: str = Field(description="Provider key (ebsco, primo, summon)")
    label: str = Field(description="Display name")
    active: bool = Field(description="True for the provider answering searches")
    max_accessible_results: int | None = Field(
        default=None, description="Ceiling on retrievable results, None if unbounded"
    )
    max_per_page: int = Field(description="Largest accepted page size")
    facet_fields: list[str] = Field(default_factory=list)
