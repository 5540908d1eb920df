"""Ex Libris Primo engine (brief-search X-service).

Primo needs no session. It only hands out the first 2000 results of a
result set, so requests beyond that are answered locally.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from virgo_articles.config.providers import PrimoConfig
from virgo_articles.config.search import PRIMO_FACETS
from virgo_articles.providers.base import (
    RECOVERABLE_ERRORS,
    ArticleEngine,
    DateAnchor,
    Provider,
)
from virgo_articles.providers.errors import ParseError
from virgo_articles.providers.primo.params import (
    PRIMO_MAX_ACCESSIBLE_RESULTS,
    build_lookup_query,
    build_search_query,
    search_field,
    start_index,
)
from virgo_articles.providers.primo.parse import parse_search_response
from virgo_articles.schemas.base.responses import SUCCESS_CODE, Response
from virgo_articles.utils.paging import compute_paging, exceeds_ceiling, last_page, page_offset
from virgo_articles.utils.text import squish

if TYPE_CHECKING:
    import httpx

    from virgo_articles.schemas.base.documents import Document
    from virgo_articles.schemas.base.params import SearchParams
    from virgo_articles.schemas.primo.primo import PrimoSearchResult

logger = logging.getLogger(__name__)

PRIMO_SEARCH_PATH = "/PrimoWebServices/xservice/search/brief"


class PrimoEngine(ArticleEngine):
    """Primo brief-search engine."""

    provider = Provider.PRIMO
    config_class = PrimoConfig
    max_accessible_results = PRIMO_MAX_ACCESSIBLE_RESULTS
    max_per_page = 100
    facet_fields = PRIMO_FACETS

    def __init__(self, config: PrimoConfig, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout=config.timeout)
        self.config = config
        self.url = f"{config.base_url.rstrip('/')}{PRIMO_SEARCH_PATH}"

    def search_field(self, name: str | None) -> str:
        return search_field(name)

    def date_format(self, value: str | None, anchor: DateAnchor = None) -> str:
        """Primo takes dates as entered; a blank date stays blank."""
        return squish(value)

    def _base_params(self) -> list[tuple[str, str]]:
        return [
            ("institution", self.config.institution),
            ("onCampus", "true" if self.config.on_campus else "false"),
        ]

    async def _request(self, query: list[tuple[str, str]]) -> PrimoSearchResult:
        http = await self.send_request(self.url, params=self._base_params() + query)
        result = parse_search_response(http.content)
        if result.counts is None:
            raise ParseError(http.content)
        return result

    async def _search_request(self, query: list[tuple[str, str]]) -> PrimoSearchResult:
        """Send a search, re-issuing it once if the reply is unusable.

        Primo occasionally replies with a truncated payload or without a
        DOCSET; the identical request usually succeeds the second time.

        Raises:
            ParseError: If the second reply is unusable as well
        """
        try:
            return await self._request(query)
        except ParseError as e:
            logger.info(f"ARTICLES - Primo reply unusable ({e}), retrying")
        return await self._request(query)

    async def search(
        self, params: SearchParams, session: str | None = None
    ) -> tuple[Response, list[Document] | None]:
        """Perform a Primo search.

        A request starting past the accessible results returns an empty,
        successful Response without contacting Primo.

        Raises:
            NetworkError: If Primo is unreachable
        """
        response = self.new_response(params)
        offset, per_page = start_index(params)
        if exceeds_ceiling(offset, self.max_accessible_results):
            logger.info(
                f"ARTICLES - Primo offset {offset} beyond {self.max_accessible_results}"
            )
            response.per_page = per_page
            response.current_page = last_page(
                self.max_accessible_results, per_page, self.max_accessible_results
            )
            response.start = page_offset(response.current_page, per_page)
            response.error_code = SUCCESS_CODE
            return response, []

        try:
            result = await self._search_request(build_search_query(params, self.date_format))
        except RECOVERABLE_ERRORS as e:
            self.fail(response, "search", e)
            return response, None

        scope = compute_paging(result.counts.hits, per_page, offset, self.max_accessible_results)
        response.counts = result.counts.hits
        response.docs = result.docs
        response.facets = result.facets
        response.per_page = per_page
        response.current_page = scope.current_page
        response.start = page_offset(scope.current_page, per_page)
        response.error_code = SUCCESS_CODE
        return response, response.docs

    async def lookup_by_id(
        self,
        article_id: str,
        params: SearchParams | None = None,
        session: str | None = None,
    ) -> tuple[Response, Document | None]:
        """Fetch one record by its Primo record id.

        Raises:
            NetworkError: If Primo is unreachable
        """
        response = self.new_response(params)
        try:
            result = await self._request(build_lookup_query(article_id))
        except RECOVERABLE_ERRORS as e:
            self.fail(response, "lookup_by_id", e)
            return response, None
        if not result.docs:
            logger.info(f"ARTICLES - Primo record {article_id} not found")
            return response.reset(), None

        response.counts = result.counts.hits
        response.docs = result.docs[:1]
        response.error_code = SUCCESS_CODE
        return response, response.docs[0]
