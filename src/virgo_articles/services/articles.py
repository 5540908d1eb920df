"""Article search entry points.

ArticleService wraps one engine and scopes a provider session around every
call. When EBSCO reports that its session token went stale mid-request, the
call is repeated once with a fresh session. When no session can be opened at
all the call fails with an empty Response.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from virgo_articles.schemas.base.params import SearchParams
from virgo_articles.schemas.base.responses import SESSION_INVALID_CODE

if TYPE_CHECKING:
    from virgo_articles.providers.base import ArticleEngine
    from virgo_articles.schemas.base.documents import Document
    from virgo_articles.schemas.base.responses import Response

logger = logging.getLogger(__name__)

# Attempts per call; only an invalid session causes another attempt
DEFAULT_ARTICLE_ATTEMPTS = 2


class ArticleService:
    """Search and lookup against one article provider."""

    def __init__(self, engine: ArticleEngine, attempts: int = DEFAULT_ARTICLE_ATTEMPTS) -> None:
        self.engine = engine
        self.attempts = max(attempts, 1)

    def _no_session(self, credential: str | None, method: str) -> bool:
        if credential or not self.engine.requires_session:
            return False
        logger.warning(f"ARTICLES - {self.engine.label} {method} without session")
        return True

    @property
    def provider(self) -> str:
        return self.engine.provider.value

    async def search(
        self, params: SearchParams
    ) -> tuple[Response, list[Document] | None]:
        """Search the provider.

        Raises:
            NetworkError: If the provider is unreachable
        """
        for attempt in range(1, self.attempts + 1):
            async with self.engine.session(params.as_guest) as credential:
                if self._no_session(credential, "search"):
                    return self.engine.new_response(params).reset(), None
                response, docs = await self.engine.search(params, session=credential)
            if response.error_code != SESSION_INVALID_CODE:
                break
            logger.info(f"ARTICLES - session invalid on search, attempt {attempt}")
        return response, docs

    async def lookup_by_id(
        self, article_id: str, params: SearchParams | None = None
    ) -> tuple[Response, Document | None]:
        """Fetch one article by id.

        Raises:
            NetworkError: If the provider is unreachable
        """
        params = params or SearchParams()
        for attempt in range(1, self.attempts + 1):
            async with self.engine.session(params.as_guest) as credential:
                if self._no_session(credential, "lookup"):
                    return self.engine.new_response(params).reset(), None
                response, doc = await self.engine.lookup_by_id(
                    article_id, params, session=credential
                )
            if response.error_code != SESSION_INVALID_CODE:
                break
            logger.info(f"ARTICLES - session invalid on lookup, attempt {attempt}")
        return response, doc

    async def lookup_many(
        self, article_ids: list[str], params: SearchParams | None = None
    ) -> tuple[list[Response], list[Document]]:
        """Fetch several articles one by one; failed lookups are skipped.

        Returns:
            Tuple of (one Response per id, the documents found)
        """
        responses: list[Response] = []
        docs: list[Document] = []
        for article_id in article_ids:
            response, doc = await self.lookup_by_id(article_id, params)
            responses.append(response)
            if doc is not None:
                docs.append(doc)
        return responses, docs
