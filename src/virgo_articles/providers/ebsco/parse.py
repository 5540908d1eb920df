"""Parse EBSCO EDS XML payloads into schema objects.

Element lookups use the ``{*}`` namespace wildcard so payloads parse the same
with or without the EDS contract namespace.
"""

import json
import logging

from lxml import etree

from virgo_articles.providers.errors import ParseError
from virgo_articles.schemas.ebsco.ebsco import (
    APIErrorMessage,
    BibEntity,
    BibRecord,
    CustomLink,
    DateDMY,
    DisplayElement,
    DownloadLink,
    DownloadText,
    EbscoFacet,
    EbscoFacetValue,
    EbscoRecord,
    EbscoSearchResult,
    FullText,
    Header,
    Identifier,
    Language,
    Number,
    Pagination,
    Subject,
    Title,
)
from virgo_articles.utils.xml import load_xml

logger = logging.getLogger(__name__)


def _text(element: etree._Element | None, path: str, default: str = "") -> str:
    """Text content of the first element matching path, or default."""
    if element is None:
        return default
    found = element.find(path)
    if found is None:
        return default
    return "".join(found.itertext())


def _optional(element: etree._Element | None, path: str) -> str | None:
    value = _text(element, path).strip()
    return value or None


def _int(value: str, default: int = 0) -> int:
    try:
        return int(value.strip())
    except (TypeError, ValueError):
        return default


def _each(element: etree._Element | None, container: str, child: str) -> list:
    if element is None:
        return []
    return element.findall(f"{{*}}{container}/{{*}}{child}")


def parse_header(element: etree._Element | None) -> Header:
    return Header(
        dbid=_text(element, "{*}DbId").strip(),
        an=_text(element, "{*}An").strip(),
        db_label=_optional(element, "{*}DbLabel"),
        score=_optional(element, "{*}RelevancyScore"),
        access_level=_optional(element, "{*}AccessLevel"),
        pub_type=_optional(element, "{*}PubType"),
        pub_type_id=_optional(element, "{*}PubTypeId"),
    )


def parse_custom_link(element: etree._Element) -> CustomLink:
    return CustomLink(
        text=_text(element, "{*}Text"),
        name=_text(element, "{*}Name"),
        url=_text(element, "{*}Url").strip(),
        icon_url=_text(element, "{*}Icon").strip(),
        category=_optional(element, "{*}Category"),
        hover_text=_optional(element, "{*}MouseOverText"),
    )


def parse_full_text(element: etree._Element | None) -> FullText | None:
    if element is None:
        return None
    text_el = element.find("{*}Text")
    text = None
    if text_el is not None:
        text = DownloadText(
            availability=_int(_text(text_el, "{*}Availability")),
            value=_text(text_el, "{*}Value") or None,
        )
    return FullText(
        text=text,
        download_links=[
            DownloadLink(
                url=_optional(link, "{*}Url"),
                type=_optional(link, "{*}Type"),
            )
            for link in _each(element, "Links", "Link")
        ],
        custom_links=[
            parse_custom_link(link) for link in _each(element, "CustomLinks", "CustomLink")
        ],
    )


def parse_bib_entity(element: etree._Element | None) -> BibEntity | None:
    """Parse a BibEntity (of the record itself or of an IsPartOf container)."""
    if element is None:
        return None

    pagination = None
    pagination_el = element.find("{*}PhysicalDescription/{*}Pagination")
    if pagination_el is not None:
        pagination = Pagination(
            start_page=_text(pagination_el, "{*}StartPage", "0") or "0",
            page_count=_text(pagination_el, "{*}PageCount"),
        )

    return BibEntity(
        entity_id=_optional(element, "{*}Id"),
        entity_type=_optional(element, "{*}Type"),
        identifiers=[
            Identifier(
                identifier_type=_text(el, "{*}Type").strip(),
                value=_text(el, "{*}Value").strip(),
                scope=_optional(el, "{*}Scope"),
            )
            for el in _each(element, "Identifiers", "Identifier")
        ],
        pagination=pagination,
        subjects=[
            Subject(
                subject_full=_text(el, "{*}SubjectFull"),
                type=_optional(el, "{*}Type"),
                authority=_optional(el, "{*}Authority"),
            )
            for el in _each(element, "Subjects", "Subject")
        ],
        languages=[
            Language(
                language=_optional(el, "{*}Text"),
                code=_optional(el, "{*}Code"),
            )
            for el in _each(element, "Languages", "Language")
        ],
        titles=[
            Title(type=_optional(el, "{*}Type"), value=_text(el, "{*}TitleFull"))
            for el in _each(element, "Titles", "Title")
        ],
        numbering=[
            Number(
                number_type=_text(el, "{*}Type").strip(),
                value=_text(el, "{*}Value").strip(),
            )
            for el in _each(element, "Numbering", "Number")
        ],
        dates=[
            DateDMY(
                date_type=_text(el, "{*}Type").strip(),
                text=_text(el, "{*}Text").strip(),
                day=_text(el, "{*}D").strip(),
                month=_text(el, "{*}M").strip(),
                year=_text(el, "{*}Y").strip(),
            )
            for el in _each(element, "Dates", "Date")
        ],
    )


def parse_bib_record(element: etree._Element | None) -> BibRecord | None:
    if element is None:
        return None
    relationships = element.find("{*}BibRelationships")
    contributors = [
        _text(el, "{*}PersonEntity/{*}Name/{*}NameFull")
        for el in _each(relationships, "HasContributorRelationships", "HasContributor")
    ]
    is_part_of = [
        parse_bib_entity(el.find("{*}BibEntity"))
        for el in _each(relationships, "IsPartOfRelationships", "IsPartOf")
    ]
    return BibRecord(
        bib_entity=parse_bib_entity(element.find("{*}BibEntity")),
        contributors=[name for name in contributors if name.strip()],
        is_part_of=[entity for entity in is_part_of if entity is not None],
    )


def parse_record(element: etree._Element) -> EbscoRecord:
    """Parse one Record element."""
    return EbscoRecord(
        header=parse_header(element.find("{*}Header")),
        display_elements=[
            DisplayElement(
                key=_text(el, "{*}Name").strip(),
                value=_text(el, "{*}Data"),
                label=_optional(el, "{*}Label"),
                group=_optional(el, "{*}Group"),
            )
            for el in element.findall("{*}Items/{*}Item")
        ],
        full_text=parse_full_text(element.find("{*}FullText")),
        custom_links=[
            parse_custom_link(el) for el in _each(element, "CustomLinks", "CustomLink")
        ],
        plink=_optional(element, "{*}PLink"),
        bib_record=parse_bib_record(element.find("{*}RecordInfo/{*}BibRecord")),
        result_id=_optional(element, "{*}ResultId"),
    )


def parse_search_response(content: bytes | str) -> EbscoSearchResult:
    """Parse a SearchResponseMessage payload.

    Raises:
        ParseError: If the payload has no SearchResult element
    """
    root = load_xml(content)
    result = root if etree.QName(root).localname == "SearchResult" else None
    if result is None:
        result = root.find(".//{*}SearchResult")
    if result is None:
        raise ParseError(content)

    facets = [
        EbscoFacet(
            id=_text(el, "{*}Id").strip(),
            values=[
                EbscoFacetValue(
                    value=_text(val, "{*}Value"),
                    count=_int(_text(val, "{*}Count")),
                )
                for val in _each(el, "AvailableFacetValues", "AvailableFacetValue")
            ],
        )
        for el in result.findall("{*}AvailableFacets/{*}AvailableFacet")
    ]
    return EbscoSearchResult(
        total_hits=_int(_text(result, "{*}Statistics/{*}TotalHits", "0")),
        records=[
            parse_record(el) for el in result.findall("{*}Data/{*}Records/{*}Record")
        ],
        facets=facets,
    )


def parse_retrieve_response(content: bytes | str) -> EbscoRecord:
    """Parse a RetrieveResponseMessage payload.

    Raises:
        ParseError: If the payload holds no Record
    """
    root = load_xml(content)
    if etree.QName(root).localname == "Record":
        record = root
    else:
        record = root.find("{*}Record")
    if record is None:
        raise ParseError(content)
    return parse_record(record)


def parse_session_token(content: bytes | str) -> str:
    """Extract SessionToken from a createsession JSON reply.

    Raises:
        ParseError: If the reply holds no token
    """
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as e:
        raise ParseError(content) from e
    token = data.get("SessionToken") if isinstance(data, dict) else None
    if not token:
        raise ParseError(content)
    return str(token)


def parse_error_message(content: bytes | str, content_type: str) -> APIErrorMessage | None:
    """Extract the EBSCO error from an error reply, if it is readable."""
    try:
        if "json" in content_type:
            data = json.loads(content)
            return APIErrorMessage(
                detailed_error_description=str(data.get("DetailedErrorDescription") or ""),
                error_description=str(data.get("ErrorDescription") or ""),
                error_number=_int(str(data.get("ErrorNumber") or 0)),
            )
        if "xml" in content_type:
            root = load_xml(content)
            return APIErrorMessage(
                detailed_error_description=_text(root, ".//{*}DetailedErrorDescription"),
                error_description=_text(root, ".//{*}ErrorDescription"),
                error_number=_int(_text(root, ".//{*}ErrorNumber", "0")),
            )
    except (ValueError, AttributeError, ParseError) as e:
        logger.debug(f"Unreadable EBSCO error payload: {e}")
    return None
