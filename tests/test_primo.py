"""Tests for Primo query building, parsing and the Primo engine."""

import httpx
import pytest

from virgo_articles.config.providers import PrimoConfig
from virgo_articles.providers.primo.engine import PrimoEngine
from virgo_articles.providers.primo.params import (
    FULL_TEXT_FILTER,
    SCOPE,
    build_lookup_query,
    build_search_query,
    precision,
    scrubbed_query,
)
from virgo_articles.providers.primo.parse import parse_search_response
from virgo_articles.schemas.base.params import DateRange, SearchParams
from virgo_articles.schemas.base.responses import FAILURE_CODE

BRIEF_XML = """<?xml version="1.0" encoding="UTF-8"?>
<sear:SEGMENTS xmlns:sear="http://www.exlibrisgroup.com/xsd/jaguar/search">
  <sear:JAGROOT>
    <sear:RESULT>
      <sear:FACETLIST ACCURATE_COUNTERS="true">
        <sear:FACET NAME="lang" COUNT="2">
          <sear:FACET_VALUES KEY="eng" VALUE="40"/>
          <sear:FACET_VALUES KEY="ger" VALUE="2"/>
        </sear:FACET>
      </sear:FACETLIST>
      <sear:DOCSET HIT_TIME="15" TOTALHITS="42" FIRSTHIT="21" LASTHIT="40" TOTAL_TIME="80">
        <sear:DOC ID="1" RANK="0.9">
          <PrimoNMBib xmlns="http://www.exlibrisgroup.com/xsd/primo/primo_nm_bib">
            <record>
              <display>
                <type>article</type>
                <title>Roman roads</title>
                <creator>Smith, John ; Doe, Jane</creator>
                <ispartof>Journal of Roman Studies, 2010, Vol.12(3), pp.101-110</ispartof>
                <identifier>&lt;b&gt;ISSN: &lt;/b&gt;1234-5678</identifier>
                <language>eng</language>
                <description>Roads &lt;i&gt;and&lt;/i&gt; bridges.</description>
                <lds50>peer_reviewed</lds50>
              </display>
              <search>
                <creationdate>2010</creationdate>
                <recordid>TN_jstor10.2307</recordid>
                <subject>Roads</subject>
                <subject>Rome</subject>
              </search>
              <addata>
                <jtitle>Journal of Roman Studies</jtitle>
                <volume>12</volume>
                <issue>3</issue>
                <spage>101</spage>
                <epage>110</epage>
                <doi>10.2307/123</doi>
                <issn>1234-5678</issn>
                <eissn>8765-4321</eissn>
              </addata>
            </record>
          </PrimoNMBib>
          <sear:GETIT GetIt1="http://getit.test/1" GetIt2="http://getit.test/2" deliveryCategory="Remote Search Resource"/>
          <sear:LINKS>
            <sear:openurlfulltext>http://resolver.test/full</sear:openurlfulltext>
            <sear:thumbnail>http://thumbs.test/1.jpg</sear:thumbnail>
          </sear:LINKS>
        </sear:DOC>
      </sear:DOCSET>
    </sear:RESULT>
  </sear:JAGROOT>
</sear:SEGMENTS>
"""

NO_DOCSET_XML = """<sear:SEGMENTS xmlns:sear="http://www.exlibrisgroup.com/xsd/jaguar/search">
  <sear:JAGROOT><sear:RESULT/></sear:JAGROOT>
</sear:SEGMENTS>
"""


def _format(value):
    return PrimoEngine(PrimoConfig(base_url="https://primo.test")).date_format(value)


def _engine(handler) -> PrimoEngine:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PrimoEngine(PrimoConfig(base_url="https://primo.test", institution="UVA"), client=client)


def _queries(query):
    return [value for key, value in query if key == "query"]


class TestQueryBuilding:
    def test_precision(self):
        assert precision('"roman roads"') == "exact"
        assert precision("roman roads") == "contains"

    def test_scrubbing(self):
        assert scrubbed_query("war: peace, etc.") == "war  peace  etc "

    def test_basic_query(self):
        query = build_search_query(SearchParams(q="roman roads", page=2, per_page=10), _format)
        assert _queries(query)[0] == "any,contains,roman roads"
        assert ("indx", "11") in query
        assert ("bulkSize", "10") in query
        assert query[-2:] == [SCOPE, FULL_TEXT_FILTER]

    def test_quoted_query(self):
        query = build_search_query(SearchParams(q='"roman roads"'), _format)
        assert _queries(query)[0] == "any,exact, roman roads "

    def test_search_field(self):
        query = build_search_query(SearchParams(q="Smith", search_field="author"), _format)
        assert "creator,contains,Smith" in _queries(query)

    def test_date_range_with_blank_start(self):
        params = SearchParams(
            q="rome", date_ranges={"publication_date": DateRange(end="2000")}
        )
        query = build_search_query(params, _format)
        assert "facet_creationdate,exact,[2000 TO 2000]" in _queries(query)

    def test_journal_narrows_by_facet(self):
        params = SearchParams(q="rome", advanced={"journal": "Journal of Roman Studies"})
        query = build_search_query(params, _format)
        assert "facet_jtitle,exact,Journal of Roman Studies" in _queries(query)

    def test_subject_replaces_blank_query(self):
        params = SearchParams(advanced={"subject": "Rome"})
        queries = _queries(build_search_query(params, _format))
        assert queries.count("sub,contains,Rome") == 1

    def test_facets(self):
        params = SearchParams(
            q="rome", facets={"tlevel": ["peer_reviewed"], "creationdate": ["2010"]}
        )
        queries = _queries(build_search_query(params, _format))
        assert "facet_tlevel,exact,peer_reviewed" in queries
        assert "facet_creationdate,exact,[2010 TO 2010]" in queries

    def test_sort(self):
        assert ("sortField", "scdate") in build_search_query(
            SearchParams(q="rome", sort="date"), _format
        )

    def test_blank_date(self):
        assert _format("") == ""
        assert _format(" 1999 ") == "1999"

    def test_lookup_query(self):
        assert build_lookup_query("TN_1") == [("query", "rid,exact,TN_1"), SCOPE]


class TestParse:
    @pytest.fixture
    def result(self):
        return parse_search_response(BRIEF_XML)

    def test_counts(self, result):
        assert result.counts.hits == 42
        assert result.counts.first_hit == 21
        assert result.counts.last_hit == 40

    def test_document(self, result):
        doc = result.docs[0]
        assert doc.id == "TN_jstor10.2307"
        assert doc.provider == "primo"
        assert doc.display.title == "Roman roads"
        assert doc.display.type == "article"
        assert doc.display.identifier == "ISSN: 1234-5678"
        assert doc.display.description == ["Roads <i>and</i> bridges."]
        assert doc.authors == ["Smith, John", "Doe, Jane"]
        assert doc.display.creator == "Smith, John; Doe, Jane"
        assert doc.search.subject_facet == ["Roads", "Rome"]
        assert doc.dois == ["10.2307/123"]
        assert doc.issns == ["1234-5678", "8765-4321"]
        assert doc.additional_data.end_page == "110"

    def test_links(self, result):
        doc = result.docs[0]
        assert doc.links[0].url == "http://resolver.test/full"
        assert doc.links[0].thumbnail == "http://thumbs.test/1.jpg"
        assert doc.full_text_available
        assert doc.get_its[0].get_it_1 == "http://getit.test/1"
        assert doc.get_its[0].delivery_category == "Remote Search Resource"

    def test_facets(self, result):
        facet = result.facets[0]
        assert facet.name == "lang"
        assert facet.items[0].hits == 40
        assert facet.display_values() == ["English", "German"]

    def test_missing_docset(self):
        result = parse_search_response(NO_DOCSET_XML)
        assert result.counts is None
        assert result.docs == []


class TestEngine:
    @pytest.mark.asyncio
    async def test_search(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=BRIEF_XML)

        response, docs = await _engine(handler).search(SearchParams(q="rome", page=2))
        assert response.ok()
        assert response.counts == 42
        assert response.current_page == 2
        assert response.start == 20
        assert len(docs) == 1

        params = requests[0].url.params
        assert params["institution"] == "UVA"
        assert params["onCampus"] == "false"
        assert params["indx"] == "21"
        assert requests[0].url.path == "/PrimoWebServices/xservice/search/brief"

    @pytest.mark.asyncio
    async def test_request_past_ceiling_is_answered_locally(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=BRIEF_XML)

        engine = _engine(handler)
        response, docs = await engine.search(SearchParams(q="rome", page=101, per_page=20))
        assert response.ok()
        assert docs == []
        assert response.current_page == 100
        assert response.per_page == 20

        response, docs = await engine.search(SearchParams(q="rome", index=2001))
        assert response.ok()
        assert docs == []
        assert requests == []

    @pytest.mark.asyncio
    async def test_last_accessible_page_is_requested(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=BRIEF_XML)

        await _engine(handler).search(SearchParams(q="rome", page=100, per_page=20))
        assert requests[0].url.params["indx"] == "1981"

    @pytest.mark.asyncio
    async def test_missing_docset_is_retried_once(self):
        replies = iter([NO_DOCSET_XML, BRIEF_XML])
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text=next(replies))

        response, docs = await _engine(handler).search(SearchParams(q="rome"))
        assert response.ok()
        assert len(docs) == 1
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_missing_docset_twice_fails(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text=NO_DOCSET_XML)

        response, docs = await _engine(handler).search(SearchParams(q="rome"))
        assert docs is None
        assert response.error_code == FAILURE_CODE
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_truncated_reply_is_retried_once(self):
        replies = iter(["<JAGROOT><RESULT><DOCSET", BRIEF_XML])
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text=next(replies))

        response, docs = await _engine(handler).search(SearchParams(q="rome"))
        assert response.ok()
        assert len(docs) == 1
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_truncated_reply_twice_fails(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text="<JAGROOT><RESULT>")

        response, docs = await _engine(handler).search(SearchParams(q="rome"))
        assert docs is None
        assert response.error_code == FAILURE_CODE
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_http_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, text="busy")

        response, docs = await _engine(handler).search(SearchParams(q="rome"))
        assert docs is None
        assert response.error_code == FAILURE_CODE
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_page_past_total_is_clamped(self):
        def handler(request):
            return httpx.Response(200, text=BRIEF_XML)

        response, _ = await _engine(handler).search(SearchParams(q="rome", page=50, per_page=20))
        assert response.counts == 42
        assert response.current_page == 3
        assert response.start == 40
        assert response.total_pages == 3

    @pytest.mark.asyncio
    async def test_lookup(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=BRIEF_XML)

        response, doc = await _engine(handler).lookup_by_id("TN_jstor10.2307")
        assert response.ok()
        assert doc.id == "TN_jstor10.2307"
        assert requests[0].url.params.get_list("query") == ["rid,exact,TN_jstor10.2307"]

    @pytest.mark.asyncio
    async def test_lookup_not_found(self):
        def handler(request):
            return httpx.Response(200, text=NO_DOCSET_XML)

        response, doc = await _engine(handler).lookup_by_id("nothing")
        assert doc is None
        assert response.error_code == FAILURE_CODE
