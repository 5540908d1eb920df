"""Build Primo brief-search query parameters.

Primo takes repeated ``query`` parameters of the form
``field,precision,value``; facets are queried as ``facet_<name>``.
"""

from collections.abc import Callable
import re

from virgo_articles.config.search import (
    ADVANCED_SEARCH_FIELDS,
    PEER_REVIEWED_FACET,
    PEER_REVIEWED_VALUE,
    SORT_DATE,
    SORT_RELEVANCY,
)
from virgo_articles.schemas.base.params import DateRange, SearchParams
from virgo_articles.schemas.base.responses import Response
from virgo_articles.utils.paging import page_offset

# Primo only hands out the first 2000 results of any result set
PRIMO_MAX_ACCESSIBLE_RESULTS = 2000

SEARCH_FIELD_MAP: dict[str, str] = {
    "keyword": "any",
    "author": "creator",
    "title": "title",
    "journal": "jtitle",
    "publication_date": "creationdate",
    "subject": "sub",
}
DEFAULT_SEARCH_FIELD = "any"

SORT_MAP: dict[str, str] = {
    SORT_RELEVANCY: "rank",
    SORT_DATE: "scdate",
}

SCOPE = ("loc", "adaptor,primo_central_multiple_fe")
FULL_TEXT_FILTER = ("query", "facet_tlevel,exact,online_resources_PC_TN")

_QUOTED = re.compile(r"""^["'].+["']$""", re.DOTALL)
_SCRUBBED = str.maketrans(":,;.!?'\"", " " * 8)


def search_field(name: str | None) -> str:
    return SEARCH_FIELD_MAP.get(name or "", DEFAULT_SEARCH_FIELD)


def precision(query: str) -> str:
    """'exact' for a quoted query, 'contains' otherwise."""
    return "exact" if _QUOTED.match(query.strip()) else "contains"


def scrubbed_query(query: str) -> str:
    """Replace quotes and punctuation Primo treats as syntax with spaces."""
    return query.translate(_SCRUBBED)


def term(field: str, value: str) -> tuple[str, str]:
    return ("query", f"{field},{precision(value)},{scrubbed_query(value)}")


def subject_as_query(params: SearchParams) -> bool:
    """True when a blank main query is replaced by the subject search."""
    return not params.query and bool((params.advanced.get("subject") or "").strip())


def query_part(params: SearchParams) -> list[tuple[str, str]]:
    if params.query:
        return [term(search_field(params.search_field), params.query)]
    if subject_as_query(params):
        return [term(search_field("subject"), params.advanced["subject"].strip())]
    return []


def date_span(date_range: DateRange, date_format: Callable[[str], str]) -> str:
    """Render a range as '[start TO end]'; a blank bound takes the other's value."""
    start = date_format(date_range.start) or date_format(date_range.end)
    end = date_format(date_range.end) or start
    return f"[{start} TO {end}]"


def advanced_queries(
    params: SearchParams, date_format: Callable[[str], str]
) -> list[tuple[str, str]]:
    """Advanced search terms.

    The journal field narrows the search to one journal via its facet rather
    than searching journal titles.
    """
    result: list[tuple[str, str]] = []
    for name, field_def in ADVANCED_SEARCH_FIELDS.items():
        field = search_field(name)
        if field_def.range:
            date_range = params.date_ranges.get(name)
            if date_range is None or date_range.is_blank():
                continue
            result.append(("query", f"facet_{field},exact,{date_span(date_range, date_format)}"))
            continue
        if name == "subject" and subject_as_query(params):
            continue
        value = (params.advanced.get(name) or "").strip()
        if not value:
            continue
        if field == "jtitle":
            result.append(("query", f"facet_{field},exact,{value}"))
        else:
            result.append(term(field, value))
    return result


def facet_queries(params: SearchParams) -> list[tuple[str, str]]:
    result: list[tuple[str, str]] = []
    for field, value in params.facet_values():
        if field == PEER_REVIEWED_FACET:
            value = PEER_REVIEWED_VALUE
        elif field == "creationdate":
            value = f"[{value} TO {value}]"
        result.append(("query", f"facet_{field},exact,{value}"))
    return result


def start_index(params: SearchParams) -> tuple[int, int]:
    """Zero-based offset and page size of the request.

    An index lookup fetches a one-record page at that position.
    """
    if params.index:
        return max(params.index - 1, 0), 1
    per_page = Response.page_size(params)
    return page_offset(Response.page(params), per_page), per_page


def paging_part(params: SearchParams) -> list[tuple[str, str]]:
    """``indx`` (1-based) and ``bulkSize``, never past the accessible results."""
    offset, per_page = start_index(params)
    if offset > PRIMO_MAX_ACCESSIBLE_RESULTS:
        offset = (PRIMO_MAX_ACCESSIBLE_RESULTS // per_page) * per_page
    return [("indx", str(offset + 1)), ("bulkSize", str(per_page))]


def sort_part(params: SearchParams) -> list[tuple[str, str]]:
    sort = SORT_MAP.get(params.sort or "")
    return [("sortField", sort)] if sort else []


def build_search_query(
    params: SearchParams, date_format: Callable[[str], str]
) -> list[tuple[str, str]]:
    """All query parameters for a Primo search, in request order."""
    return [
        *advanced_queries(params, date_format),
        *query_part(params),
        *facet_queries(params),
        *paging_part(params),
        *sort_part(params),
        SCOPE,
        FULL_TEXT_FILTER,
    ]


def build_lookup_query(article_id: str) -> list[tuple[str, str]]:
    """Query parameters fetching one record by its Primo record id."""
    return [("query", f"rid,exact,{article_id}"), SCOPE]
