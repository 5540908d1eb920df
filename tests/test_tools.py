"""Tests for the MCP tools, the engine registry and result schemas."""

from fastmcp import Client, FastMCP
from fastmcp.exceptions import ToolError
import pytest

from test_service import ScriptedEngine
from virgo_articles.config.base import Settings
from virgo_articles.providers.base import Provider
from virgo_articles.providers.ebsco.engine import EbscoEngine
from virgo_articles.providers.primo.engine import PrimoEngine
from virgo_articles.providers.registry import create_engine, get_engine_class
from virgo_articles.providers.summon.engine import SummonEngine
from virgo_articles.schemas.base.responses import (
    FAILURE_CODE,
    SESSION_INVALID_CODE,
    SUCCESS_CODE,
    Response,
)
from virgo_articles.schemas.base.results import ArticleSearchResult
from virgo_articles.servers.articles.tools.search import build_params, register_search_tools
from virgo_articles.services.articles import ArticleService


def _server(engine: ScriptedEngine) -> FastMCP:
    mcp = FastMCP("Test")
    service = ArticleService(engine)
    register_search_tools(mcp, lambda: service)
    return mcp


class TestBuildParams:
    def test_defaults(self):
        params = build_params(query="rome")
        assert params.query == "rome"
        assert params.page == 1
        assert params.per_page == 20
        assert params.facets == {}
        assert params.date_ranges == {}

    def test_peer_reviewed(self):
        params = build_params(facets={"Language": ["english"]}, peer_reviewed=True)
        assert params.facets == {"Language": ["english"], "tlevel": ["peer_reviewed"]}

    def test_publication_dates(self):
        params = build_params(publication_date_start="1990")
        date_range = params.date_ranges["publication_date"]
        assert (date_range.start, date_range.end) == ("1990", "")

    def test_blank_advanced_values_dropped(self):
        params = build_params(advanced={"author": "Smith", "title": ""})
        assert params.advanced == {"author": "Smith"}

    def test_unknown_sort(self):
        with pytest.raises(ToolError, match="Unknown sort"):
            build_params(sort="popularity")

    def test_unknown_advanced_field(self):
        with pytest.raises(ToolError, match="colour"):
            build_params(advanced={"colour": "blue"})

    def test_page_floor(self):
        params = build_params(page=0, per_page=0)
        assert (params.page, params.per_page) == (1, 1)


class TestTools:
    @pytest.mark.asyncio
    async def test_search_articles(self):
        async with Client(_server(ScriptedEngine([SUCCESS_CODE]))) as client:
            result = await client.call_tool("search_articles", {"query": "rome"})
        data = result.structured_content
        assert data["provider"] == "ebsco"
        assert data["total"] == 1
        assert data["documents"][0]["id"] == "doc-1"

    @pytest.mark.asyncio
    async def test_search_failure(self):
        async with Client(_server(ScriptedEngine([FAILURE_CODE]))) as client:
            with pytest.raises(ToolError, match="temporarily unavailable"):
                await client.call_tool("search_articles", {"query": "rome"})

    @pytest.mark.asyncio
    async def test_search_network_error(self):
        async with Client(_server(ScriptedEngine(["network"]))) as client:
            with pytest.raises(ToolError, match="temporarily unavailable"):
                await client.call_tool("search_articles", {"query": "rome"})

    @pytest.mark.asyncio
    async def test_search_retries_invalid_session(self):
        engine = ScriptedEngine([SESSION_INVALID_CODE, SUCCESS_CODE])
        async with Client(_server(engine)) as client:
            result = await client.call_tool("search_articles", {"query": "rome"})
        assert result.structured_content["total"] == 1
        assert engine.calls == 2

    @pytest.mark.asyncio
    async def test_get_article(self):
        async with Client(_server(ScriptedEngine([SUCCESS_CODE]))) as client:
            result = await client.call_tool("get_article", {"article_id": " a:1 "})
        assert result.structured_content["id"] == "a:1"

    @pytest.mark.asyncio
    async def test_get_article_blank_id(self):
        async with Client(_server(ScriptedEngine([]))) as client:
            with pytest.raises(ToolError, match="article_id is required"):
                await client.call_tool("get_article", {"article_id": "  "})

    @pytest.mark.asyncio
    async def test_get_article_not_found(self):
        engine = ScriptedEngine([], missing={"gone:1"})
        async with Client(_server(engine)) as client:
            with pytest.raises(ToolError, match="Article not found"):
                await client.call_tool("get_article", {"article_id": "gone:1"})

    @pytest.mark.asyncio
    async def test_list_providers(self):
        async with Client(_server(ScriptedEngine([]))) as client:
            result = await client.call_tool("list_providers", {})
        providers = {p["name"]: p for p in result.structured_content["result"]}
        assert set(providers) == {"ebsco", "primo", "summon"}
        assert providers["ebsco"]["active"]
        assert not providers["primo"]["active"]
        assert providers["primo"]["max_accessible_results"] == 2000
        assert providers["summon"]["max_per_page"] == 50
        assert providers["ebsco"]["max_accessible_results"] is None
        assert "tlevel" in providers["ebsco"]["facet_fields"]


class TestRegistry:
    def test_engine_classes(self):
        assert get_engine_class("ebsco") is EbscoEngine
        assert get_engine_class(Provider.PRIMO) is PrimoEngine
        assert get_engine_class("summon") is SummonEngine

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            get_engine_class("worldcat")
        with pytest.raises(ValueError):
            create_engine("worldcat", Settings())

    def test_create_engine_from_settings(self):
        settings = Settings(
            provider="primo", primo_url="https://primo.test/", primo_institution="TEST"
        )
        engine = create_engine(settings=settings)
        assert isinstance(engine, PrimoEngine)
        assert engine.url == "https://primo.test/PrimoWebServices/xservice/search/brief"
        assert engine.config.institution == "TEST"

    def test_engine_from_settings(self):
        settings = Settings(ebsco_url="https://eds.test/", ebsco_profile="test")
        engine = EbscoEngine.from_settings(settings)
        assert isinstance(engine, EbscoEngine)
        assert engine.base_url == "https://eds.test/edsapi/rest"
        assert engine.config.profile == "test"

    def test_session_requirement(self):
        assert EbscoEngine.requires_session
        assert not PrimoEngine.requires_session
        assert not SummonEngine.requires_session

    def test_explicit_provider_wins(self):
        engine = create_engine("summon", Settings(provider="ebsco", summon_access_id="id"))
        assert isinstance(engine, SummonEngine)
        assert engine.config.access_id == "id"


class TestArticleSearchResult:
    def test_from_response(self):
        response = Response(
            provider="primo",
            error_code=SUCCESS_CODE,
            counts=5000,
            per_page=20,
            start=40,
            current_page=3,
            max_accessible_results=2000,
        )
        result = ArticleSearchResult.from_response(response)
        assert result.total == 5000
        assert result.total_pages == 100
        assert result.page == 3
        assert result.per_page == 20

    def test_page_past_total_is_clamped(self):
        response = Response(
            provider="primo",
            error_code=SUCCESS_CODE,
            counts=42,
            per_page=20,
            start=980,
            current_page=50,
            max_accessible_results=2000,
        )
        result = ArticleSearchResult.from_response(response)
        assert result.page == 3
        assert result.total_pages == 3
