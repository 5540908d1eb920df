"""Article search tools.

Tools for searching the configured article provider and fetching single
articles by the id found in search results.
"""

import logging
from typing import Protocol

from fastmcp import Context, FastMCP
from fastmcp.exceptions import ToolError

from virgo_articles.config.search import ADVANCED_SEARCH_FIELDS, SORT_KEYS
from virgo_articles.providers.base import Provider
from virgo_articles.providers.errors import NetworkError, SessionError
from virgo_articles.providers.registry import get_engine_class
from virgo_articles.schemas.base.documents import Document
from virgo_articles.schemas.base.params import DateRange, SearchParams
from virgo_articles.schemas.base.results import ArticleSearchResult, ProviderInfo
from virgo_articles.services.articles import ArticleService

logger = logging.getLogger(__name__)

UNAVAILABLE = "The article search service is temporarily unavailable"


class ServiceGetter(Protocol):
    """Protocol for the article service getter function."""

    def __call__(self) -> ArticleService: ...


def build_params(
    query: str | None = None,
    search_field: str | None = None,
    facets: dict[str, list[str]] | None = None,
    sort: str | None = None,
    page: int = 1,
    per_page: int = 20,
    advanced: dict[str, str] | None = None,
    publication_date_start: str | None = None,
    publication_date_end: str | None = None,
    peer_reviewed: bool = False,
) -> SearchParams:
    """Collect tool arguments into SearchParams.

    Raises:
        ToolError: If a sort key or advanced field is unknown
    """
    if sort and sort not in SORT_KEYS:
        raise ToolError(f"Unknown sort '{sort}', use one of: {', '.join(SORT_KEYS)}")
    advanced = {k: v for k, v in (advanced or {}).items() if v}
    unknown = sorted(set(advanced) - set(ADVANCED_SEARCH_FIELDS))
    if unknown:
        raise ToolError(f"Unknown advanced search field(s): {', '.join(unknown)}")

    facets = {k: list(v) for k, v in (facets or {}).items()}
    if peer_reviewed:
        facets.setdefault("tlevel", []).append("peer_reviewed")

    date_ranges = {}
    if publication_date_start or publication_date_end:
        date_ranges["publication_date"] = DateRange(
            start=publication_date_start or "", end=publication_date_end or ""
        )
    return SearchParams(
        q=query,
        search_field=search_field,
        facets=facets,
        sort=sort,
        page=max(page, 1),
        per_page=max(per_page, 1),
        advanced=advanced,
        date_ranges=date_ranges,
    )


def register_search_tools(
    mcp: FastMCP,
    get_service: ServiceGetter,
) -> None:
    """Register article search tools on the given MCP server.

    Args:
        mcp: The FastMCP server instance to register tools on
        get_service: Function that returns the ArticleService
    """

    @mcp.tool
    async def search_articles(
        query: str | None = None,
        search_field: str | None = None,
        facets: dict[str, list[str]] | None = None,
        sort: str | None = None,
        page: int = 1,
        per_page: int = 20,
        advanced: dict[str, str] | None = None,
        publication_date_start: str | None = None,
        publication_date_end: str | None = None,
        peer_reviewed: bool = False,
        ctx: Context | None = None,
    ) -> ArticleSearchResult:
        """Search journal articles through the configured article provider.

        PURPOSE: Find scholarly articles and their access links

        WHEN TO USE:
        - User looks for journal articles on a topic, by an author or in a journal
        - To narrow earlier results with facet values returned by this tool

        WHEN NOT TO USE:
        - When an article id is already known → use get_article()

        Args:
            query: Free-text query; quote it for an exact phrase
            search_field: keyword (default), author, title, journal, subject or issn
            facets: Facet values to filter on, keyed by facet name from earlier results
            sort: "relevancy" (default) or "date"
            page: Page of results (1-based)
            per_page: Results per page
            advanced: Additional field searches, e.g. {"author": "Smith", "journal": "Nature"}
            publication_date_start: Earliest publication year (e.g. "1990")
            publication_date_end: Latest publication year (e.g. "2000")
            peer_reviewed: Only peer-reviewed articles
            ctx: FastMCP Context

        Returns:
            ArticleSearchResult with documents, facets and paging info
        """
        params = build_params(
            query=query,
            search_field=search_field,
            facets=facets,
            sort=sort,
            page=page,
            per_page=per_page,
            advanced=advanced,
            publication_date_start=publication_date_start,
            publication_date_end=publication_date_end,
            peer_reviewed=peer_reviewed,
        )
        service = get_service()
        if ctx:
            await ctx.info(f"Searching {service.engine.label}: {params.query or '*'}")

        try:
            response, _ = await service.search(params)
        except (NetworkError, SessionError) as e:
            logger.error(f"Article search failed: {e}")
            raise ToolError(UNAVAILABLE) from e
        if not response.ok():
            raise ToolError(UNAVAILABLE)

        result = ArticleSearchResult.from_response(response)
        if ctx:
            await ctx.info(
                f"Found: {result.total} articles "
                f"(page {result.page} of {result.total_pages})"
            )
        return result

    @mcp.tool
    async def get_article(
        article_id: str,
        ctx: Context | None = None,
    ) -> Document:
        """Fetch one article by its id.

        PURPOSE: Full details and access links of a single article

        WHEN TO USE:
        - After search_articles(), to see one result in full
        - When the user supplies an article id

        Args:
            article_id: Document id as returned by search_articles()
            ctx: FastMCP Context

        Returns:
            The article as a Document
        """
        if not article_id or not article_id.strip():
            raise ToolError("article_id is required")

        service = get_service()
        if ctx:
            await ctx.info(f"Loading article {article_id} from {service.engine.label}")

        try:
            response, doc = await service.lookup_by_id(article_id.strip())
        except (NetworkError, SessionError) as e:
            logger.error(f"Article lookup failed: {e}")
            raise ToolError(UNAVAILABLE) from e
        if not response.ok():
            raise ToolError(UNAVAILABLE)
        if doc is None:
            raise ToolError(f"Article not found: {article_id}")
        return doc

    @mcp.tool
    async def list_providers() -> list[ProviderInfo]:
        """List the article providers and which one answers searches.

        Returns:
            One ProviderInfo per provider, with its result limits and facets
        """
        active = get_service().engine.provider
        result = []
        for provider in Provider:
            engine_class = get_engine_class(provider)
            result.append(
                ProviderInfo(
                    name=provider.value,
                    label=provider.label,
                    active=provider is active,
                    max_accessible_results=engine_class.max_accessible_results,
                    max_per_page=engine_class.max_per_page,
                    facet_fields=list(engine_class.facet_fields),
                )
            )
        return result
