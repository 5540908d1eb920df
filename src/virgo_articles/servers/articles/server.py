"""FastMCP server for article search.

Searches the configured article provider (EBSCO, Primo or Summon) and
returns provider-independent documents.
"""

import logging

from fastmcp import FastMCP
import httpx

from virgo_articles.config.base import settings
from virgo_articles.providers.registry import create_engine
from virgo_articles.servers.articles.tools.search import register_search_tools
from virgo_articles.services.articles import ArticleService

logger = logging.getLogger(__name__)

# FastMCP Server Instance
mcp = FastMCP("Articles")


# HTTP Client (singleton)
def _create_client() -> httpx.AsyncClient:
    """Create HTTP client for provider requests."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        follow_redirects=True,
        headers={"User-Agent": "virgo-articles/1.0"},
    )


_service: ArticleService | None = None


def get_service() -> ArticleService:
    """Get the article service for the configured provider."""
    global _service
    if _service is None:
        engine = create_engine(settings.provider, settings, client=_create_client())
        logger.info(f"Article provider: {engine.label}")
        _service = ArticleService(engine)
    return _service


# Register tools
register_search_tools(mcp, get_service)
