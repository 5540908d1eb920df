"""Build Summon search query parameters."""

from collections.abc import Callable
import math
import re

from virgo_articles.config.search import (
    ADVANCED_SEARCH_FIELDS,
    PEER_REVIEWED_FACET,
    SORT_DATE,
    SUMMON_FACETS,
)
from virgo_articles.schemas.base.params import SearchParams
from virgo_articles.schemas.base.responses import Response

# Summon only hands out the first 1000 results of any result set
SUMMON_MAX_ACCESSIBLE_RESULTS = 1000
SUMMON_MAX_PER_PAGE = 50

SEARCH_FIELD_MAP: dict[str, str] = {
    "keyword": "Keywords",
    "author": "Author",
    "title": "Title",
    "journal": "PublicationTitle",
    "publication_date": "PublicationDate",
    "subject": "SubjectTerms",
    "issn": "ISSN",
}
DEFAULT_SEARCH_FIELD = "Keywords"

SORT_MAP: dict[str, str] = {
    SORT_DATE: "PublicationDate:desc",
}

CONTENT_TYPE_FILTER = "ContentType,Journal Article"
SCHOLARLY_FILTER = "isScholarly,true"

_SPECIALS = re.compile(r"([,:()${}])")


def search_field(name: str | None) -> str:
    return SEARCH_FIELD_MAP.get(name or "", DEFAULT_SEARCH_FIELD)


def scrubbed_query(query: str) -> str:
    """Backslash-escape characters Summon treats as syntax.

    Backslashes already present are dropped first, so scrubbing twice gives
    the same result as scrubbing once.
    """
    return _SPECIALS.sub(r"\\\1", query.replace("\\", ""))


def advanced_queries(
    params: SearchParams, date_format: Callable[[str], str]
) -> list[tuple[str, str]]:
    """Keyword terms (s.q), field filters (s.fq) and date ranges (s.rf)."""
    queries: list[str] = []
    filters: list[tuple[str, str]] = []
    if params.query:
        field = search_field(params.search_field)
        if field == DEFAULT_SEARCH_FIELD:
            queries.append(params.query)
        else:
            filters.append(("s.fq", f"{field}:({scrubbed_query(params.query)})"))
    ranges: list[tuple[str, str]] = []
    for name, field_def in ADVANCED_SEARCH_FIELDS.items():
        field = search_field(name)
        if field_def.range:
            date_range = params.date_ranges.get(name)
            if date_range is None or date_range.is_blank():
                continue
            start = date_format(date_range.start)
            end = date_format(date_range.end) if date_range.end.strip() else start
            ranges.append(("s.rf", f"{field},{start}:{end}"))
            continue
        value = (params.advanced.get(name) or "").strip()
        if not value:
            continue
        if field == DEFAULT_SEARCH_FIELD:
            queries.append(value)
        else:
            filters.append(("s.fq", f"{field}:({scrubbed_query(value)})"))
    result = [("s.q", " AND ".join(queries))] if queries else []
    return result + filters + ranges


def page_request(params: SearchParams) -> tuple[int, int]:
    """Page size and 1-based page number to request.

    An index lookup fetches the full page holding that position. The page
    never extends past the accessible results.
    """
    if params.index:
        per_page = SUMMON_MAX_PER_PAGE
        page = math.ceil(params.index / per_page)
    else:
        per_page = min(Response.page_size(params), SUMMON_MAX_PER_PAGE)
        page = Response.page(params)
    if per_page * page > SUMMON_MAX_ACCESSIBLE_RESULTS:
        page = SUMMON_MAX_ACCESSIBLE_RESULTS // per_page
    return per_page, page


def paging_part(params: SearchParams) -> list[tuple[str, str]]:
    per_page, page = page_request(params)
    return [("s.ps", str(per_page)), ("s.pn", str(page))]


def sort_part(params: SearchParams) -> list[tuple[str, str]]:
    sort = SORT_MAP.get(params.sort or "")
    return [("s.sort", sort)] if sort else []


def facets_and_filters(params: SearchParams) -> list[tuple[str, str]]:
    """Facet value filters, always limited to journal articles."""
    result = [("s.fvf", CONTENT_TYPE_FILTER)]
    for field, value in params.facet_values():
        if field == PEER_REVIEWED_FACET:
            pair = ("s.fvf", SCHOLARLY_FILTER)
            if pair in result:
                continue
        else:
            pair = ("s.fvf", f"{field},{scrubbed_query(value)}")
        result.append(pair)
    return result


def list_facets() -> list[tuple[str, str]]:
    return [("s.ff", f"{field},and") for field in SUMMON_FACETS]


def build_search_query(
    params: SearchParams, date_format: Callable[[str], str]
) -> list[tuple[str, str]]:
    """All query parameters for a Summon search, in request order."""
    return [
        *advanced_queries(params, date_format),
        ("s.ho", "true"),
        *paging_part(params),
        ("s.hl", "false"),
        *sort_part(params),
        *facets_and_filters(params),
        *list_facets(),
    ]


def build_lookup_query(article_id: str) -> list[tuple[str, str]]:
    """Query parameters fetching one record by its Summon id."""
    return [("s.fids", article_id)]
