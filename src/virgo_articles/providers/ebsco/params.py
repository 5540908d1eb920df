"""Build EBSCO EDS search query parameters."""

from collections.abc import Callable
import re

from virgo_articles.config.search import (
    ADVANCED_SEARCH_FIELDS,
    PEER_REVIEWED_FACET,
    SORT_DATE,
    SORT_RELEVANCY,
)
from virgo_articles.schemas.base.params import SearchParams
from virgo_articles.schemas.base.responses import Response

SEARCH_FIELD_MAP: dict[str, str] = {
    "keyword": "TX",
    "author": "AU",
    "title": "TI",
    "journal": "SO",
    "publication_date": "DT1",
    "subject": "SU",
    "issn": "IS",
    "isbn": "IB",
}
DEFAULT_SEARCH_FIELD = "TX"

DateFormatter = Callable[[str, int], str]

SORT_MAP: dict[str, str] = {
    SORT_RELEVANCY: "relevance",
    SORT_DATE: "date",
}

PEER_REVIEWED_LIMITER = "RV:Y"

# Special characters are escaped unless already preceded by a backslash
_QUERY_SPECIALS = re.compile(r"(?<!\\)([:,()])")
_FACET_SPECIALS = re.compile(r"(?<!\\)([:,])")
_ESCAPED = re.compile(r"\\([:,()])")


def search_field(name: str | None) -> str:
    return SEARCH_FIELD_MAP.get(name or "", DEFAULT_SEARCH_FIELD)


def scrubbed_query(query: str, facet: bool = False) -> str:
    """Backslash-escape characters EDS treats as query syntax.

    Free text escapes ':', ',', '(' and ')'; facet values only ':' and ','.
    Already escaped characters are left alone. URL encoding is left to the
    HTTP client.
    """
    pattern = _FACET_SPECIALS if facet else _QUERY_SPECIALS
    return pattern.sub(r"\\\1", query)


def unscrubbed_query(value: str) -> str:
    """Reverse scrubbed_query."""
    return _ESCAPED.sub(r"\1", value)


def query_part(params: SearchParams) -> list[tuple[str, str]]:
    if not params.query:
        return []
    field = search_field(params.search_field)
    return [("query-1", f"AND,{field}:{scrubbed_query(params.query)}")]


def paging_part(params: SearchParams) -> list[tuple[str, str]]:
    """Page selection; an index lookup fetches a one-record page at that index."""
    if params.index:
        per_page, page = 1, params.index
    else:
        per_page, page = Response.page_size(params), Response.page(params)
    return [("resultsperpage", str(per_page)), ("action-0", f"GoToPage({page})")]


def facets_and_limiters(params: SearchParams) -> list[tuple[str, str]]:
    """Facet filters, numbered from 0; tlevel becomes the peer-reviewed limiter."""
    result: list[tuple[str, str]] = []
    index = -1
    for field, value in params.facet_values():
        if field == PEER_REVIEWED_FACET:
            pair = ("limiter", PEER_REVIEWED_LIMITER)
            if pair not in result:
                result.append(pair)
            continue
        index += 1
        result.append(("facetfilter", f"{index},{field}:{scrubbed_query(value, facet=True)}"))
    return result


def sort_part(params: SearchParams) -> list[tuple[str, str]]:
    sort = SORT_MAP.get(params.sort or "")
    return [("sort", sort)] if sort else []


def advanced_queries(params: SearchParams, date_format: DateFormatter) -> list[tuple[str, str]]:
    """Advanced search terms (query-2, query-3...) and the date-range limiter.

    Args:
        params: Search parameters
        date_format: Callable turning (value, month) into 'YYYY-MM'
    """
    result: list[tuple[str, str]] = []
    index = 1
    for name, field_def in ADVANCED_SEARCH_FIELDS.items():
        field = search_field(name)
        if field_def.range:
            date_range = params.date_ranges.get(name)
            if date_range is None or date_range.is_blank():
                continue
            start = date_format(date_range.start, 1)
            end = date_format(date_range.end or date_range.start, 12)
            result.append(("limiter", f"{field}:{start}/{end}"))
        else:
            value = (params.advanced.get(name) or "").strip()
            if value:
                index += 1
                result.append((f"query-{index}", f"AND,{field}:{scrubbed_query(value)}"))
    return result


def build_search_query(params: SearchParams, date_format: DateFormatter) -> list[tuple[str, str]]:
    """All query parameters for an EDS search request, in request order."""
    return [
        *advanced_queries(params, date_format),
        *query_part(params),
        ("expander", "fulltext"),
        ("searchmode", "all"),
        ("view", "detailed"),
        ("includefacets", "y"),
        *paging_part(params),
        ("highlight", "n"),
        *sort_part(params),
        *facets_and_limiters(params),
    ]
