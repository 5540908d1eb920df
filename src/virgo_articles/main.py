"""Entry point for the virgo-articles MCP Server.

Federated journal-article search over EBSCO EDS, Ex Libris Primo and
ProQuest Summon behind one document model.
"""

import logging

from fastmcp import FastMCP

from virgo_articles.config.base import settings
from virgo_articles.servers.articles import server as articles

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Main aggregator server
app = FastMCP(
    name=settings.server_name,
    instructions="""
    MCP Server for journal article search through a library discovery provider.

    Available tools:
    - articles_search_articles: Search articles (query, fields, facets, dates)
    - articles_get_article: Full record of one article by id
    - articles_list_providers: Providers, their limits and facets

    Typical workflow:
    1. articles_search_articles → Get results and facets
    2. articles_search_articles with facets → Narrow results
    3. articles_get_article → Retrieve details and access links
    """,
)

# Mount the article server with its prefix
app.mount(server=articles.mcp, prefix="articles")


# For direct execution
def main() -> None:
    """Run the MCP server."""
    logger.info("Starting Virgo Articles MCP Server...")
    logger.info(f"Server name: {settings.server_name}")
    logger.info(f"Article provider: {settings.provider}")
    app.run()


if __name__ == "__main__":
    main()
