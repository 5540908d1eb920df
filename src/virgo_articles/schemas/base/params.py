"""Provider-agnostic search parameters."""

from pydantic import BaseModel, Field


class DateRange(BaseModel):
    """Inclusive date range; either bound may be blank."""

    start: str = Field(default="", description="Start date (year, year-month...)")
    end: str = Field(default="", description="End date (year, year-month...)")

    def is_blank(self) -> bool:
        return not self.start.strip() and not self.end.strip()


class SearchParams(BaseModel):
    """One search request, passed explicitly through every provider call.

    Either ``page``/``per_page`` select a page of results, or ``index`` asks
    for the single result at an absolute 1-based position.
    """

    q: str | None = Field(default=None, description="Free-text query")
    search_field: str | None = Field(
        default=None, description="Generic search field for q (default keyword)"
    )
    facets: dict[str, list[str]] = Field(
        default_factory=dict, description="Selected facet values per facet field"
    )
    sort: str | None = Field(default=None, description="Sort key (relevancy, date)")
    page: int = Field(default=1, description="1-based page number")
    per_page: int = Field(default=20, description="Results per page")
    index: int | None = Field(
        default=None, description="Absolute 1-based position of a single result"
    )
    advanced: dict[str, str] = Field(
        default_factory=dict, description="Advanced search values per field name"
    )
    date_ranges: dict[str, DateRange] = Field(
        default_factory=dict, description="Date ranges per range field name"
    )
    as_guest: bool = Field(default=True, description="Caller is not signed in")

    @property
    def query(self) -> str:
        return (self.q or "").strip()

    def facet_values(self) -> list[tuple[str, str]]:
        """Flatten selected facets into (field, value) pairs, skipping blanks."""
        return [
            (field, value)
            for field, values in self.facets.items()
            for value in values
            if value and value.strip()
        ]
