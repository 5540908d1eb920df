"""EBSCO Discovery Service (EDS) engine.

Every EDS request after createsession must carry the session token in the
``x-sessionToken`` header. The token is created and released explicitly and
travels as a value; use ``engine.session()`` to scope it:

    async with EbscoEngine.from_settings(settings) as engine:
        async with engine.session(as_guest=True) as token:
            response, docs = await engine.search(params, session=token)
"""

from __future__ import annotations

from datetime import date, datetime
import logging
import re
from typing import TYPE_CHECKING

from virgo_articles.config.providers import EbscoConfig
from virgo_articles.config.search import EBSCO_FACETS
from virgo_articles.providers.base import (
    RECOVERABLE_ERRORS,
    ArticleEngine,
    DateAnchor,
    Provider,
    limiter_facets,
)
from virgo_articles.providers.ebsco.article_id import ArticleId
from virgo_articles.providers.ebsco.mapping import map_facets, map_record
from virgo_articles.providers.ebsco.params import build_search_query, search_field
from virgo_articles.providers.ebsco.parse import (
    parse_error_message,
    parse_retrieve_response,
    parse_search_response,
    parse_session_token,
)
from virgo_articles.providers.errors import (
    ArticleProviderError,
    NetworkError,
    ProtocolError,
    SessionError,
)
from virgo_articles.schemas.base.responses import SUCCESS_CODE, Response
from virgo_articles.utils.paging import compute_paging, page_offset
from virgo_articles.utils.text import squish

if TYPE_CHECKING:
    import httpx

    from virgo_articles.schemas.base.documents import Document
    from virgo_articles.schemas.base.params import SearchParams

logger = logging.getLogger(__name__)

EBSCO_EDS_PATH = "/edsapi/rest"

# EDS error number for "Session Token Invalid"
SESSION_TOKEN_INVALID = 109

# Year reported when a date cannot be understood
INVALID_DATE_YEAR = "0"

_DATE_FORMATS = ("%Y/%m/%d", "%Y/%m", "%Y/%B/%d", "%Y/%B", "%Y/%b", "%m/%d/%Y", "%B/%Y", "%b/%Y")


def _parse_date(value: str) -> date | None:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def self_corrected_page(current_page: int, per_page: int, total: int) -> int:
    """Clamp the page after EDS shrank its total by de-duplicating.

    EDS removes duplicates while paging, so the reported total can drop
    below what an already displayed page number implied. A page past the
    new total would come back empty; the last page that still holds results
    is used instead.
    """
    page = compute_paging(total, per_page, page_offset(current_page, per_page)).current_page
    if page != current_page:
        logger.info(f"ARTICLES - EBSCO total shrank to {total}, page {current_page} -> {page}")
    return page


class EbscoEngine(ArticleEngine):
    """EBSCO EDS REST+XML engine."""

    provider = Provider.EBSCO
    config_class = EbscoConfig
    requires_session = True
    max_accessible_results = None
    max_per_page = 100
    facet_fields = EBSCO_FACETS

    def __init__(self, config: EbscoConfig, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout=config.timeout)
        self.config = config
        self.base_url = f"{config.base_url.rstrip('/')}{EBSCO_EDS_PATH}"

    # Sessions

    async def start_session(self, as_guest: bool = True) -> str | None:
        """Open an EDS session.

        Returns:
            The session token, or None if no session could be opened

        Raises:
            NetworkError: If EDS is unreachable
        """
        params = {"profile": self.config.profile, "guest": "y" if as_guest else "n"}
        headers = {"Accept": "application/json"}
        if self.config.auth_token:
            headers["x-authenticationToken"] = self.config.auth_token
        try:
            http = await self.send_request(
                f"{self.base_url}/createsession", params=params, headers=headers
            )
            return parse_session_token(http.content)
        except NetworkError:
            raise
        except ArticleProviderError as e:
            self.log_error("start_session", e)
            return None

    async def stop_session(self, credential: str | None) -> None:
        """Close an EDS session; failures are logged, not raised."""
        if not credential:
            self.log_error("stop_session", SessionError("missing x-sessionToken"))
            return
        headers = {"Accept": "application/json", "SessionTokenHeader": credential}
        try:
            await self.send_request(
                f"{self.base_url}/endsession",
                params={"sessiontoken": credential},
                headers=headers,
            )
        except NetworkError:
            raise
        except ArticleProviderError as e:
            self.log_error("stop_session", e)

    def _session_headers(self, session: str | None) -> dict[str, str]:
        if not session:
            raise SessionError("missing x-sessionToken")
        return {"Accept": "application/xml", "x-sessionToken": session}

    # Error classification

    def classify_error(self, response: httpx.Response) -> ProtocolError:
        content_type = response.headers.get("content-type", "")
        message = parse_error_message(response.content, content_type)
        number = message.error_number if message else None
        description = message.error_description if message else ""
        return ProtocolError(
            f"EBSCO HTTP {response.status_code}"
            + (f" error {number}: {description}" if number else ""),
            status=response.status_code,
            body=response.text,
            error_number=number,
            session_invalid=(
                response.status_code == 400 and number == SESSION_TOKEN_INVALID
            ),
        )

    def ignorable_error(self, error: ProtocolError) -> bool:
        return error.session_invalid

    # Translation

    def search_field(self, name: str | None) -> str:
        return search_field(name)

    def date_format(self, value: str | None, anchor: DateAnchor = None) -> str:
        """Format a date as 'YYYY-MM' for the DT1 limiter.

        A bare year gets the anchor month; a two-digit year gets the current
        century. An unreadable date becomes '0-MM'.

        Example:
            >>> engine.date_format("1999", "end")
            '1999-12'
        """
        if anchor == "end":
            month = 12
        elif isinstance(anchor, int) and 1 <= anchor <= 12:
            month = anchor
        else:
            month = 1
        month_str = f"{month:02d}"

        text = re.sub(r"[ \-]", "/", squish(value))
        if re.fullmatch(r"\d{2}", text):
            text = f"{date.today().year // 100:02d}{text}"
        if re.fullmatch(r"\d{4}", text):
            text = f"{text}/{month_str}"
        parsed = _parse_date(text)
        if parsed is None:
            return f"{INVALID_DATE_YEAR}-{month_str}"
        return f"{parsed.year:04d}-{parsed.month:02d}"

    # Search and access

    async def search(
        self, params: SearchParams, session: str | None = None
    ) -> tuple[Response, list[Document] | None]:
        """Perform an EDS search.

        Raises:
            SessionError: If no session token was given
            NetworkError: If EDS is unreachable
        """
        response = self.new_response(params)
        headers = self._session_headers(session)
        query = build_search_query(params, self.date_format)
        try:
            http = await self.send_request(
                f"{self.base_url}/search", params=query, headers=headers
            )
            result = parse_search_response(http.content)
            docs = [map_record(record, self.config.proxy_prefix) for record in result.records]
            facets = map_facets(result.facets)
        except RECOVERABLE_ERRORS as e:
            self.fail(response, "search", e)
            return response, None

        response.counts = result.total_hits
        response.docs = docs
        response.facets = facets + limiter_facets()
        if params.index:
            response.per_page = 1
            response.current_page = params.index
        response.current_page = self_corrected_page(
            response.current_page, response.per_page, response.counts
        )
        response.start = response.per_page * (response.current_page - 1)
        response.error_code = SUCCESS_CODE
        return response, response.docs

    async def lookup_by_id(
        self,
        article_id: str,
        params: SearchParams | None = None,
        session: str | None = None,
    ) -> tuple[Response, Document | None]:
        """Retrieve one record by "dbid:an" (raw or percent-encoded).

        Raises:
            SessionError: If no session token was given
            NetworkError: If EDS is unreachable
        """
        response = self.new_response(params)
        headers = self._session_headers(session)
        article = ArticleId(article_id)
        try:
            http = await self.send_request(
                f"{self.base_url}/retrieve",
                params={"dbid": article.dbid, "an": article.an},
                headers=headers,
            )
            record = parse_retrieve_response(http.content)
            doc = map_record(record, self.config.proxy_prefix)
        except RECOVERABLE_ERRORS as e:
            self.fail(response, "lookup_by_id", e)
            return response, None

        response.counts = 1
        response.docs = [doc]
        response.error_code = SUCCESS_CODE
        return response, doc
