"""Parse Primo X-service XML into canonical documents.

The payload mixes the ``sear`` (envelope) and ``prim`` (PNX record)
namespaces; lookups use ``{*}`` so either prefix binding parses the same.
"""

import logging
import re

from lxml import etree

from virgo_articles.providers.base import Provider
from virgo_articles.schemas.base.documents import (
    DEFAULT_TYPE,
    AdditionalData,
    Display,
    Document,
    GetIt,
    Link,
    SearchData,
)
from virgo_articles.schemas.base.responses import Facet
from virgo_articles.schemas.primo.primo import (
    PrimoCounts,
    PrimoFacetItem,
    PrimoSearchResult,
)
from virgo_articles.utils.sanitize import sanitize_html
from virgo_articles.utils.text import ITEM_SEPARATOR, squish
from virgo_articles.utils.xml import load_xml

logger = logging.getLogger(__name__)

_BOLD = re.compile(r"</?b>")


def _optional(element: etree._Element | None, path: str) -> str | None:
    if element is None:
        return None
    found = element.find(path)
    if found is None:
        return None
    return squish("".join(found.itertext())) or None


def _all(element: etree._Element | None, path: str) -> list[str]:
    if element is None:
        return []
    values = (squish("".join(el.itertext())) for el in element.findall(path))
    return [value for value in values if value]


def _int_attr(element: etree._Element, name: str, default: int) -> int:
    try:
        return int(element.get(name, ""))
    except ValueError:
        return default


def parse_display(element: etree._Element | None) -> Display:
    identifier = _optional(element, "{*}identifier")
    return Display(
        creator=_optional(element, "{*}creator"),
        identifier=_BOLD.sub("", identifier) if identifier else None,
        is_part_of=_optional(element, "{*}ispartof"),
        language=_optional(element, "{*}language"),
        lds50=_optional(element, "{*}lds50"),
        source=_optional(element, "{*}source"),
        subject=_optional(element, "{*}subject"),
        title=_optional(element, "{*}title"),
        type=_optional(element, "{*}type") or DEFAULT_TYPE,
        version=_optional(element, "{*}version"),
        description=[sanitize_html(d) for d in _all(element, "{*}description")],
    )


def parse_additional_data(element: etree._Element | None) -> AdditionalData:
    return AdditionalData(
        journal=_optional(element, "{*}jtitle"),
        volume=_optional(element, "{*}volume"),
        issue=_optional(element, "{*}issue"),
        start_page=_optional(element, "{*}spage"),
        end_page=_optional(element, "{*}epage"),
    )


def parse_search_data(element: etree._Element | None) -> SearchData:
    return SearchData(
        creation_date=_optional(element, "{*}creationdate"),
        id=_optional(element, "{*}recordid"),
        subject_facet=_all(element, "{*}subject"),
    )


def parse_links(doc_element: etree._Element) -> list[Link]:
    links = []
    for element in doc_element.iter("{*}LINKS"):
        url = _optional(element, "{*}openurlfulltext") or _optional(element, "{*}backlink")
        thumbnail = _optional(element, "{*}thumbnail")
        if url or thumbnail:
            links.append(Link(url=url, text=Provider.PRIMO.label, thumbnail=thumbnail))
    return links


def parse_get_its(doc_element: etree._Element) -> list[GetIt]:
    return [
        GetIt(
            get_it_1=element.get("GetIt1"),
            get_it_2=element.get("GetIt2"),
            delivery_category=element.get("deliveryCategory"),
        )
        for element in doc_element.iter("{*}GETIT")
    ]


def parse_document(doc_element: etree._Element) -> Document:
    """Build a Document from one DOC element."""
    record = doc_element.find(".//{*}record")
    display = parse_display(record.find("{*}display") if record is not None else None)
    addata = record.find("{*}addata") if record is not None else None
    search = parse_search_data(record.find("{*}search") if record is not None else None)
    links = parse_links(doc_element)
    authors = [squish(a) for a in (display.creator or "").split(";") if squish(a)]
    if authors:
        display.creator = ITEM_SEPARATOR.join(authors)
    return Document(
        id=search.id or "",
        provider=Provider.PRIMO.value,
        display=display,
        additional_data=parse_additional_data(addata),
        search=search,
        links=links,
        get_its=parse_get_its(doc_element),
        dois=_all(addata, "{*}doi"),
        issns=_all(addata, "{*}issn") + _all(addata, "{*}eissn"),
        authors=authors,
        full_text_available=any(link.url for link in links),
    )


def parse_facets(root: etree._Element) -> list[Facet]:
    return [
        Facet(
            name=element.get("NAME", ""),
            items=[
                PrimoFacetItem(
                    value=value.get("KEY", ""),
                    hits=_int_attr(value, "VALUE", 0),
                )
                for value in element.findall("{*}FACET_VALUES")
            ],
        )
        for element in root.iter("{*}FACET")
    ]


def parse_counts(root: etree._Element) -> PrimoCounts | None:
    docset = next(root.iter("{*}DOCSET"), None)
    if docset is None:
        return None
    return PrimoCounts(
        hits=_int_attr(docset, "TOTALHITS", 0),
        first_hit=_int_attr(docset, "FIRSTHIT", 1),
        last_hit=_int_attr(docset, "LASTHIT", 0),
    )


def parse_search_response(content: bytes | str) -> PrimoSearchResult:
    """Parse a JAGROOT brief-search reply.

    Raises:
        EmptyResponseError: If the payload is empty
        ParseError: If the payload is not well-formed XML
    """
    root = load_xml(content)
    counts = parse_counts(root)
    if counts is None:
        logger.debug("Primo reply has no DOCSET")
        return PrimoSearchResult()
    return PrimoSearchResult(
        counts=counts,
        docs=[parse_document(el) for el in root.iter("{*}DOC")],
        facets=parse_facets(root),
    )
