"""Article engine contract shared by all providers.

Every provider (EBSCO, Primo, Summon) implements ArticleEngine. Callers pick
an engine once through the registry and then use it without knowing which
vendor is behind it:

    engine = create_engine(Provider.EBSCO)
    async with engine, engine.session(as_guest=True) as credential:
        response, docs = await engine.search(params, session=credential)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
from http import HTTPStatus
import logging
from typing import TYPE_CHECKING, ClassVar, Literal, NoReturn

import httpx

from virgo_articles.config.search import PEER_REVIEWED_FACET, PEER_REVIEWED_VALUE
from virgo_articles.providers.errors import (
    NetworkError,
    ParseError,
    ProtocolError,
    SessionError,
)
from virgo_articles.schemas.base.responses import (
    FAILURE_CODE,
    SESSION_INVALID_CODE,
    Facet,
    FacetItem,
    Response,
)

if TYPE_CHECKING:
    from types import TracebackType

    from pydantic import BaseModel

    from virgo_articles.config.base import Settings
    from virgo_articles.schemas.base.documents import Document
    from virgo_articles.schemas.base.params import SearchParams

logger = logging.getLogger(__name__)

DateAnchor = Literal["start", "end"] | int | None


class Provider(str, Enum):
    """Implemented article providers."""

    EBSCO = "ebsco"
    PRIMO = "primo"
    SUMMON = "summon"

    @property
    def label(self) -> str:
        return PROVIDER_LABELS[self]


PROVIDER_LABELS: dict[Provider, str] = {
    Provider.EBSCO: "EBSCO",
    Provider.PRIMO: "Primo",
    Provider.SUMMON: "Summon",
}

# Vendor-side failures that degrade a Response instead of propagating
RECOVERABLE_ERRORS = (ProtocolError, ParseError, KeyError, TypeError, ValueError)


def limiter_facets() -> list[Facet]:
    """The peer-reviewed limiter, offered to callers as a facet."""
    return [
        Facet(
            name=PEER_REVIEWED_FACET,
            items=[FacetItem(value=PEER_REVIEWED_VALUE, hits=1)],
        )
    ]


class ArticleEngine(ABC):
    """Base class for article search providers.

    Holds the HTTP client and the pieces of request handling that do not
    depend on the vendor: session scoping, transport error conversion and
    error logging.

    Can be used as an async context manager; a client passed in by the caller
    is left open.
    """

    provider: ClassVar[Provider]
    config_class: ClassVar[type[BaseModel]]
    # True when search and lookup need a credential from start_session
    requires_session: ClassVar[bool] = False
    max_accessible_results: ClassVar[int | None] = None
    max_per_page: ClassVar[int] = 100
    facet_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self, client: httpx.AsyncClient | None = None, timeout: float = 10.0
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None
    ) -> ArticleEngine:
        """Engine configured from the provider section of settings."""
        return cls(cls.config_class.from_settings(settings), client=client)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
            self._owns_client = True
        return self._client

    async def __aenter__(self) -> ArticleEngine:
        self.setup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this engine created it."""
        self.teardown()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def label(self) -> str:
        return self.provider.label

    def setup(self) -> None:
        """Prepare the engine before its first session."""
        logger.debug(f"ARTICLES - {self.label} setup")

    def teardown(self) -> None:
        """Release engine resources after its last session."""
        logger.debug(f"ARTICLES - {self.label} teardown")

    # Sessions

    async def start_session(self, as_guest: bool = True) -> str | None:
        """Start a provider session.

        Providers without sessions return None.

        Args:
            as_guest: True if the caller is not signed in

        Returns:
            Session credential, or None
        """
        logger.debug(f"ARTICLES - {self.label} start_session({as_guest})")
        return None

    async def stop_session(self, credential: str | None) -> None:
        """Stop a provider session; a no-op for providers without sessions."""
        logger.debug(f"ARTICLES - {self.label} stop_session")

    @asynccontextmanager
    async def session(self, as_guest: bool = True) -> AsyncIterator[str | None]:
        """Scope one session: the session is stopped on every exit path."""
        credential = await self.start_session(as_guest)
        try:
            yield credential
        finally:
            await self.stop_session(credential)

    # Search and access

    @abstractmethod
    def search_field(self, name: str | None) -> str:
        """Translate a generic search field name into the vendor's field code."""

    @abstractmethod
    def date_format(self, value: str | None, anchor: DateAnchor = None) -> str:
        """Translate a date into the vendor's query form.

        Args:
            value: Date as entered (year, year-month, ...)
            anchor: Month used when value has none: "start", "end" or 1-12
        """

    @abstractmethod
    async def search(
        self, params: SearchParams, session: str | None = None
    ) -> tuple[Response, list[Document] | None]:
        """Search the provider.

        Vendor failures never raise: they come back as a reset Response and
        None. NetworkError propagates.
        """

    @abstractmethod
    async def lookup_by_id(
        self,
        article_id: str,
        params: SearchParams | None = None,
        session: str | None = None,
    ) -> tuple[Response, Document | None]:
        """Fetch one record by the id found in Document.id."""

    # Helpers for subclasses

    def new_response(self, params: SearchParams | None = None) -> Response:
        """Empty Response carrying this provider's paging defaults."""
        response = Response(
            provider=self.provider.value,
            max_accessible_results=self.max_accessible_results,
        )
        if params is not None:
            response.per_page = Response.page_size(params)
            response.current_page = Response.page(params)
            response.start = (response.current_page - 1) * response.per_page
        return response

    def _handle_transport_error(self, error: httpx.TransportError, url: str) -> NoReturn:
        """Convert connection-level failures to NetworkError."""
        logger.error(f"ARTICLES - {self.label} unreachable at {url}: {error!r}")
        raise NetworkError(f"{self.label} request failed: {error!r}") from error

    def classify_error(self, response: httpx.Response) -> ProtocolError:
        """Build the ProtocolError for a non-success reply."""
        return ProtocolError(
            f"{self.label} HTTP {response.status_code}",
            status=response.status_code,
            body=response.text,
        )

    def ignorable_error(self, error: ProtocolError) -> bool:
        """True for errors whose payload is not worth logging."""
        return False

    async def send_request(
        self,
        url: str,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a GET request.

        Raises:
            NetworkError: On connection failures and timeouts
            ProtocolError: If the reply is not a success
        """
        logger.info(f"ARTICLES - {self.label} request: {url}")
        try:
            response = await self.client.get(url, params=params, headers=headers)
        except httpx.TransportError as e:
            self._handle_transport_error(e, url)
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            raise self.classify_error(response)
        return response

    def log_error(
        self, method: str, error: BaseException, data: str | bytes | None = None
    ) -> None:
        """Log a handled error, dumping the offending payload where useful."""
        if not logger.isEnabledFor(logging.INFO):
            return

        logger.info(f"ARTICLES - {method}: {error}")
        if isinstance(error, (SessionError, NetworkError)):
            return

        if isinstance(error, ProtocolError):
            data = data or error.body
            if self.ignorable_error(error):
                data = None
        elif isinstance(error, ParseError):
            data = data or error.source
        else:
            logger.info(f"ARTICLES - {method}: unexpected error", exc_info=error)

        if not data:
            return
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")
        logger.info(
            f"ARTICLES >>> {self.label} response BEGIN ==========\n"
            f"{data}\n"
            f"ARTICLES <<< {self.label} response END ============"
        )

    def fail(
        self,
        response: Response,
        method: str,
        error: BaseException,
        data: str | bytes | None = None,
    ) -> Response:
        """Log a recoverable error and reset the response.

        An invalid-session reply resets with SESSION_INVALID_CODE so the
        caller can reopen the session.
        """
        self.log_error(method, error, data)
        if isinstance(error, ProtocolError) and error.session_invalid:
            return response.reset(SESSION_INVALID_CODE)
        return response.reset(FAILURE_CODE)
