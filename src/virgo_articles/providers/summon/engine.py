"""ProQuest Summon engine.

Summon needs no session; every request is signed instead. Single-result
lookups by absolute index fetch the fixed-size page holding that position
and pick the record out of it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from virgo_articles.config.providers import SummonConfig
from virgo_articles.config.search import SUMMON_FACETS
from virgo_articles.providers.base import (
    RECOVERABLE_ERRORS,
    ArticleEngine,
    DateAnchor,
    Provider,
    limiter_facets,
)
from virgo_articles.providers.summon.client import signed_headers
from virgo_articles.providers.summon.mapping import map_document, map_facet, parse_search_response
from virgo_articles.providers.summon.params import (
    SUMMON_MAX_ACCESSIBLE_RESULTS,
    SUMMON_MAX_PER_PAGE,
    build_lookup_query,
    build_search_query,
    page_request,
    search_field,
)
from virgo_articles.schemas.base.responses import SUCCESS_CODE, Response
from virgo_articles.utils.paging import compute_paging, page_offset, position_in_page
from virgo_articles.utils.text import squish

if TYPE_CHECKING:
    import httpx

    from virgo_articles.schemas.base.documents import Document
    from virgo_articles.schemas.base.params import SearchParams
    from virgo_articles.schemas.summon.summon import SummonSearch

logger = logging.getLogger(__name__)

SUMMON_SEARCH_PATH = "/2.0.0/search"

# Year used for an open-ended start of a date range
SUMMON_MIN_YEAR = "1000"


class SummonEngine(ArticleEngine):
    """Summon API engine."""

    provider = Provider.SUMMON
    config_class = SummonConfig
    max_accessible_results = SUMMON_MAX_ACCESSIBLE_RESULTS
    max_per_page = SUMMON_MAX_PER_PAGE
    facet_fields = SUMMON_FACETS

    def __init__(self, config: SummonConfig, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout=config.timeout)
        self.config = config
        self.url = f"{config.base_url.rstrip('/')}{SUMMON_SEARCH_PATH}"

    def search_field(self, name: str | None) -> str:
        return search_field(name)

    def date_format(self, value: str | None, anchor: DateAnchor = None) -> str:
        """Summon takes dates as entered; a blank date becomes the year 1000."""
        return squish(value) or SUMMON_MIN_YEAR

    async def _request(self, query: list[tuple[str, str]]) -> SummonSearch:
        headers = signed_headers(
            self.config.access_id, self.config.secret_key, self.url, query
        )
        http = await self.send_request(self.url, params=query, headers=headers)
        return parse_search_response(http.content)

    async def search(
        self, params: SearchParams, session: str | None = None
    ) -> tuple[Response, list[Document] | None]:
        """Perform a Summon search.

        With ``params.index`` the response holds only the record at that
        absolute position.

        Raises:
            NetworkError: If Summon is unreachable
        """
        response = self.new_response(params)
        if params.index and params.index > SUMMON_MAX_ACCESSIBLE_RESULTS:
            logger.info(
                f"ARTICLES - Summon index {params.index} beyond {SUMMON_MAX_ACCESSIBLE_RESULTS}"
            )
            response.error_code = SUCCESS_CODE
            return response, []

        try:
            result = await self._request(build_search_query(params, self.date_format))
            docs = [map_document(doc) for doc in result.documents]
            facets = [map_facet(facet) for facet in result.facets]
        except RECOVERABLE_ERRORS as e:
            self.fail(response, "search", e)
            return response, None

        response.counts = result.record_count
        response.facets = facets + limiter_facets()
        if params.index:
            _, offset = position_in_page(params.index, SUMMON_MAX_PER_PAGE)
            docs = docs[offset - 1 : offset]
            per_page, start = 1, params.index - 1
        else:
            per_page, page = page_request(params)
            start = page_offset(page, per_page)
        scope = compute_paging(result.record_count, per_page, start, SUMMON_MAX_ACCESSIBLE_RESULTS)
        response.per_page = per_page
        response.current_page = scope.current_page
        response.start = page_offset(scope.current_page, per_page)
        response.docs = docs
        response.error_code = SUCCESS_CODE
        return response, response.docs

    async def lookup_by_id(
        self,
        article_id: str,
        params: SearchParams | None = None,
        session: str | None = None,
    ) -> tuple[Response, Document | None]:
        """Fetch one record by its Summon id.

        Raises:
            NetworkError: If Summon is unreachable
        """
        response = self.new_response(params)
        try:
            result = await self._request(build_lookup_query(article_id))
            docs = [map_document(doc) for doc in result.documents[:1]]
        except RECOVERABLE_ERRORS as e:
            self.fail(response, "lookup_by_id", e)
            return response, None

        response.counts = result.record_count
        response.docs = docs
        response.error_code = SUCCESS_CODE
        return response, (docs[0] if docs else None)
