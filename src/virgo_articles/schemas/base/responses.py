"""Response and facet schemas shared by all providers."""

from __future__ import annotations

import html
import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from virgo_articles.schemas.base.documents import Document
from virgo_articles.utils.paging import PageScope, compute_paging
from virgo_articles.utils.text import titleize

if TYPE_CHECKING:
    from virgo_articles.schemas.base.params import SearchParams

EM_DASH = "—"

SUCCESS_CODE = 0
FAILURE_CODE = -1
# EBSCO "session token invalid"; the caller may reopen the session and retry
SESSION_INVALID_CODE = 109

DEF_PER_PAGE = 20
DEF_CURRENT_PAGE = 1
DEF_PAGE_SIZES = (20, 50, 100)


class FacetItem(BaseModel):
    """A facet value with its hit count."""

    value: str = Field(description="Facet value as sent back in a filter")
    hits: int = Field(default=0, description="Number of matching records")

    def display_value(self, facet_name: str | None = None) -> str:
        """Value for display, with '--' rendered as an em dash."""
        if facet_name == "tlevel":
            result = self.value.replace("_", " ").title()
        else:
            result = titleize(self.value)
        return re.sub(r"\s*--\s*", EM_DASH, html.escape(result, quote=False))


class Facet(BaseModel):
    """A named filter dimension."""

    name: str = Field(description="Facet field name")
    items: list[FacetItem] = Field(default_factory=list)

    def display_values(self) -> list[str]:
        return [item.display_value(self.name) for item in self.items]


class Response(BaseModel):
    """Result of one provider search or lookup.

    When ``error_code`` is not ``SUCCESS_CODE`` the documents and facets are
    empty; ``reset`` enforces this.
    """

    provider: str = Field(description="Provider that produced the response")
    error_code: int = Field(default=FAILURE_CODE, description="0 means success")
    counts: int = Field(default=0, description="Total hits reported")
    docs: list[Document] = Field(default_factory=list)
    facets: list[Facet] = Field(default_factory=list)
    start: int = Field(default=0, description="Zero-based offset of first result")
    per_page: int = Field(default=DEF_PER_PAGE)
    current_page: int = Field(default=DEF_CURRENT_PAGE)
    max_accessible_results: int | None = Field(
        default=None, description="Provider ceiling on retrievable results"
    )

    def ok(self) -> bool:
        return self.error_code == SUCCESS_CODE

    def reset(self, code: int = FAILURE_CODE) -> Response:
        """Mark the response as failed and drop any partial results.

        Args:
            code: Error code to record (never SUCCESS_CODE)

        Returns:
            self, for chaining
        """
        self.error_code = code
        self.counts = 0
        self.docs = []
        self.facets = []
        self.current_page = DEF_CURRENT_PAGE
        return self

    @property
    def total(self) -> int:
        return self.counts

    def paginate_values(self) -> PageScope:
        return compute_paging(
            self.counts, self.per_page, self.start, self.max_accessible_results
        )

    @property
    def total_pages(self) -> int:
        return self.paginate_values().total_pages

    @property
    def previous_page(self) -> int | None:
        return self.current_page - 1 if self.current_page > 1 else None

    @property
    def next_page(self) -> int | None:
        return self.current_page + 1 if self.current_page < self.total_pages else None

    @staticmethod
    def page(params: SearchParams) -> int:
        """Requested page, defaulting to the first."""
        return params.page if params.page and params.page > 0 else DEF_CURRENT_PAGE

    @staticmethod
    def page_size(params: SearchParams) -> int:
        """Requested page size, defaulting to DEF_PER_PAGE."""
        return (
            params.per_page if params.per_page and params.per_page > 0 else DEF_PER_PAGE
        )
