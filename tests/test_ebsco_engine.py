"""Tests for the EBSCO engine against a mocked EDS API."""

import httpx
import pytest

from test_ebsco import RETRIEVE_XML, SEARCH_XML
from virgo_articles.config.providers import EbscoConfig
from virgo_articles.providers.ebsco.engine import EbscoEngine
from virgo_articles.providers.errors import NetworkError, SessionError
from virgo_articles.schemas.base.params import SearchParams
from virgo_articles.schemas.base.responses import FAILURE_CODE, SESSION_INVALID_CODE
from virgo_articles.services.articles import ArticleService

SESSION_INVALID_REPLY = {
    "DetailedErrorDescription": "",
    "ErrorDescription": "Session Token Invalid",
    "ErrorNumber": "109",
}


class FakeEds:
    """Minimal EDS API: records every request and serves canned replies."""

    def __init__(self, search=None, retrieve=None, createsession=None):
        self.requests: list[httpx.Request] = []
        self.createsession = createsession
        self.search = search or (lambda request: httpx.Response(200, text=SEARCH_XML))
        self.retrieve = retrieve or (lambda request: httpx.Response(200, text=RETRIEVE_XML))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/createsession"):
            if self.createsession:
                return self.createsession(request)
            token = f"token-{len(self.calls('createsession'))}"
            return httpx.Response(200, json={"SessionToken": token})
        if path.endswith("/endsession"):
            return httpx.Response(200, json={"IsSuccessful": "y"})
        if path.endswith("/search"):
            return self.search(request)
        if path.endswith("/retrieve"):
            return self.retrieve(request)
        return httpx.Response(404)

    def calls(self, name: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/{name}")]


def _engine(fake: FakeEds) -> EbscoEngine:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return EbscoEngine(EbscoConfig(base_url="https://eds.test", profile="test"), client=client)


class TestSessions:
    @pytest.mark.asyncio
    async def test_start_session(self):
        fake = FakeEds()
        token = await _engine(fake).start_session(as_guest=False)
        assert token == "token-1"
        request = fake.calls("createsession")[0]
        assert request.url.params["profile"] == "test"
        assert request.url.params["guest"] == "n"

    @pytest.mark.asyncio
    async def test_start_session_failure_returns_none(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        engine = EbscoEngine(EbscoConfig(base_url="https://eds.test"), client=client)
        assert await engine.start_session() is None

    @pytest.mark.asyncio
    async def test_session_is_released(self):
        fake = FakeEds()
        engine = _engine(fake)
        async with engine.session() as token:
            await engine.search(SearchParams(q="rome"), session=token)
        ends = fake.calls("endsession")
        assert len(ends) == 1
        assert ends[0].url.params["sessiontoken"] == "token-1"

    @pytest.mark.asyncio
    async def test_session_released_on_network_error(self):
        def search(request):
            raise httpx.ConnectError("unreachable", request=request)

        fake = FakeEds(search=search)
        engine = _engine(fake)
        with pytest.raises(NetworkError):
            async with engine.session() as token:
                await engine.search(SearchParams(q="rome"), session=token)
        assert len(fake.calls("endsession")) == 1

    @pytest.mark.asyncio
    async def test_search_without_session(self):
        with pytest.raises(SessionError):
            await _engine(FakeEds()).search(SearchParams(q="rome"), session=None)


class TestSearch:
    @pytest.mark.asyncio
    async def test_success(self):
        fake = FakeEds()
        response, docs = await _engine(fake).search(SearchParams(q="rome"), session="abc")
        assert response.ok()
        assert response.counts == 2
        assert [doc.id for doc in docs] == ["edsmzh:1993066095"]
        assert [facet.name for facet in response.facets] == ["Language", "tlevel"]

        request = fake.calls("search")[0]
        assert request.headers["x-sessionToken"] == "abc"
        assert request.url.params["query-1"] == "AND,TX:rome"

    @pytest.mark.asyncio
    async def test_page_past_total_is_clamped(self):
        params = SearchParams(q="rome", page=3, per_page=20)
        response, _ = await _engine(FakeEds()).search(params, session="abc")
        assert response.current_page == 1
        assert response.start == 0

    @pytest.mark.asyncio
    async def test_index_lookup(self):
        params = SearchParams(q="rome", index=2)
        fake = FakeEds()
        response, _ = await _engine(fake).search(params, session="abc")
        assert response.per_page == 1
        assert response.current_page == 2
        assert response.start == 1
        assert fake.calls("search")[0].url.params["resultsperpage"] == "1"

    @pytest.mark.asyncio
    async def test_malformed_reply_fails(self):
        fake = FakeEds(search=lambda request: httpx.Response(200, text="<SearchResponse"))
        response, docs = await _engine(fake).search(SearchParams(q="rome"), session="abc")
        assert docs is None
        assert response.error_code == FAILURE_CODE
        assert response.docs == []
        assert response.facets == []

    @pytest.mark.asyncio
    async def test_invalid_session_reply(self):
        fake = FakeEds(search=lambda request: httpx.Response(400, json=SESSION_INVALID_REPLY))
        response, docs = await _engine(fake).search(SearchParams(q="rome"), session="stale")
        assert docs is None
        assert response.error_code == SESSION_INVALID_CODE


class TestLookup:
    @pytest.mark.asyncio
    async def test_retrieve_sends_dbid_and_an(self):
        fake = FakeEds()
        response, doc = await _engine(fake).lookup_by_id("edsmzh%3A1993066095", session="abc")
        assert response.ok()
        assert doc.id == "edsmzh:1993066095"
        params = fake.calls("retrieve")[0].url.params
        assert params["dbid"] == "edsmzh"
        assert params["an"] == "1993066095"

    @pytest.mark.asyncio
    async def test_retrieve_error_reply(self):
        fake = FakeEds(retrieve=lambda request: httpx.Response(500, text="oops"))
        response, doc = await _engine(fake).lookup_by_id("edsmzh:1", session="abc")
        assert doc is None
        assert response.error_code == FAILURE_CODE


class TestServiceRetry:
    @pytest.mark.asyncio
    async def test_retries_once_with_fresh_session(self):
        replies = iter(
            [httpx.Response(400, json=SESSION_INVALID_REPLY), httpx.Response(200, text=SEARCH_XML)]
        )
        fake = FakeEds(search=lambda request: next(replies))
        service = ArticleService(_engine(fake))
        response, docs = await service.search(SearchParams(q="rome"))
        assert response.ok()
        assert len(docs) == 1
        assert len(fake.calls("createsession")) == 2
        assert len(fake.calls("endsession")) == 2
        tokens = [r.headers["x-sessionToken"] for r in fake.calls("search")]
        assert tokens == ["token-1", "token-2"]

    @pytest.mark.asyncio
    async def test_gives_up_after_two_attempts(self):
        fake = FakeEds(search=lambda request: httpx.Response(400, json=SESSION_INVALID_REPLY))
        response, docs = await ArticleService(_engine(fake)).search(SearchParams(q="rome"))
        assert docs is None
        assert response.error_code == SESSION_INVALID_CODE
        assert len(fake.calls("search")) == 2

    @pytest.mark.asyncio
    async def test_other_failures_are_not_retried(self):
        fake = FakeEds(search=lambda request: httpx.Response(500, text="oops"))
        response, _ = await ArticleService(_engine(fake)).search(SearchParams(q="rome"))
        assert response.error_code == FAILURE_CODE
        assert len(fake.calls("search")) == 1


class TestServiceWithoutSession:
    @pytest.mark.asyncio
    async def test_createsession_error_fails_search(self):
        fake = FakeEds(createsession=lambda request: httpx.Response(500, text="boom"))
        response, docs = await ArticleService(_engine(fake)).search(SearchParams(q="rome"))
        assert docs is None
        assert response.error_code == FAILURE_CODE
        assert response.counts == 0
        assert len(fake.calls("createsession")) == 1
        assert fake.calls("search") == []

    @pytest.mark.asyncio
    async def test_createsession_without_token_fails_lookup(self):
        fake = FakeEds(createsession=lambda request: httpx.Response(200, json={}))
        response, doc = await ArticleService(_engine(fake)).lookup_by_id("edsmzh:1")
        assert doc is None
        assert response.error_code == FAILURE_CODE
        assert fake.calls("retrieve") == []
