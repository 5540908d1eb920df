"""Parse Summon JSON and map its documents onto the canonical Document."""

from __future__ import annotations

from datetime import date
import json
import logging

from pydantic import ValidationError

from virgo_articles.providers.base import Provider
from virgo_articles.providers.errors import ParseError, ProtocolError
from virgo_articles.schemas.base.documents import Document, Link
from virgo_articles.schemas.base.responses import Facet, FacetItem
from virgo_articles.schemas.summon.summon import (
    SummonDate,
    SummonDocument,
    SummonFacet,
    SummonSearch,
)
from virgo_articles.utils.sanitize import sanitize_html
from virgo_articles.utils.text import ITEM_SEPARATOR, LIST_SEPARATOR

logger = logging.getLogger(__name__)

LINK_TEXT = "Access through UVA Library"


def parse_search_response(content: bytes | str) -> SummonSearch:
    """Parse a Summon search reply.

    Raises:
        ParseError: If the reply is not a Summon search object
        ProtocolError: If Summon reported errors
    """
    try:
        search = SummonSearch.model_validate(json.loads(content))
    except (ValueError, ValidationError) as e:
        raise ParseError(content) from e
    if search.errors:
        messages = "; ".join(f"{e.code or ''} {e.message}".strip() for e in search.errors)
        body = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
        raise ProtocolError(f"Summon error: {messages}", body=body)
    return search


def _int(value: str | None) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def creation_date(value: SummonDate | None) -> str | None:
    """Display date: 'May 2010', 'May 4, 2010' or just the year."""
    year = _int(value.year) if value else 0
    if year <= 0:
        return None
    month, day = _int(value.month), _int(value.day)
    try:
        if not month:
            return str(year)
        if not day:
            return date(year, month, 1).strftime("%B %Y")
        parsed = date(year, month, day)
    except ValueError:
        return str(year)
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def citation(doc: SummonDocument) -> str | None:
    """Container citation: title, year, edition, volume, issue and pages."""
    pub_date = doc.publication_date
    parts = [
        doc.publication_title,
        pub_date.year if pub_date else None,
        doc.edition,
        f"Vol. {doc.volume}" if doc.volume else None,
        f"({doc.issue})" if doc.issue else None,
    ]
    pages = f"p. {doc.start_page}" if doc.start_page else ""
    if _int(doc.page_count) > 0:
        pages += f"({doc.page_count})"
    elif doc.end_page:
        pages += f"-{doc.end_page}"
    parts.append(pages)
    parts = [part for part in parts if part]
    return ITEM_SEPARATOR.join(parts) if parts else None


def end_page(doc: SummonDocument) -> str | None:
    """Last page, derived from the page count when not given."""
    if doc.end_page:
        return doc.end_page
    start, count = _int(doc.start_page), _int(doc.page_count)
    if start and count:
        return str(start + count - 1)
    return None


def identifiers(doc: SummonDocument) -> str:
    ids = [f"DOI: {doc.doi}"] if doc.doi else []
    ids += [f"ISSN: {issn}" for issn in doc.issns if issn]
    ids += [f"E-ISSN: {issn}" for issn in doc.eissns if issn]
    return ITEM_SEPARATOR.join(ids)


def map_document(doc: SummonDocument) -> Document:
    """Build a Document from one Summon document."""
    authors = [a.fullname.strip() for a in doc.authors if a.fullname.strip()]
    result = Document(
        id=doc.id or "",
        provider=Provider.SUMMON.value,
        authors=authors,
        dois=[doc.doi] if doc.doi else [],
        issns=[*doc.issns, *doc.eissns],
        call_numbers=list(doc.call_numbers),
    )
    display = result.display
    display.creator = ITEM_SEPARATOR.join(authors) or None
    display.title = doc.title
    display.identifier = identifiers(doc) or None
    display.is_part_of = citation(doc)
    display.language = LIST_SEPARATOR.join(doc.languages) or None
    display.source = ITEM_SEPARATOR.join(doc.publishers) or None
    display.subject = ITEM_SEPARATOR.join(doc.subject_terms) or None
    if doc.abstract:
        display.description.append(sanitize_html(doc.abstract))

    data = result.additional_data
    data.journal = doc.publication_title
    data.volume = doc.volume
    data.issue = doc.issue
    data.start_page = doc.start_page
    data.end_page = end_page(doc)

    result.search.id = doc.id
    result.search.creation_date = creation_date(doc.publication_date)
    result.search.subject_facet = [term for term in doc.subject_terms if term]

    if doc.link or doc.thumbnail:
        result.links.append(Link(url=doc.link, text=LINK_TEXT, thumbnail=doc.thumbnail))
    result.full_text_available = bool(doc.link)
    return result


def map_facet(facet: SummonFacet) -> Facet:
    return Facet(
        name=facet.display_name or facet.field_name,
        items=[FacetItem(value=count.value, hits=count.count) for count in facet.counts],
    )
