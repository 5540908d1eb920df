"""Map parsed EBSCO records onto the canonical Document."""

import calendar
import logging
import re

from virgo_articles.providers.ebsco.article_id import ArticleId
from virgo_articles.providers.ebsco.fulltext import sanitize_full_text
from virgo_articles.schemas.base.documents import Document, Link
from virgo_articles.schemas.base.responses import Facet, FacetItem
from virgo_articles.schemas.ebsco.ebsco import (
    DEFAULT_DOWNLOAD_FORMAT,
    BibEntity,
    DisplayElement,
    EbscoFacet,
    EbscoRecord,
    Pagination,
)
from virgo_articles.utils.sanitize import sanitize_html
from virgo_articles.utils.text import (
    ITEM_SEPARATOR,
    LIST_SEPARATOR,
    bib_order,
    name_reverse,
    squish,
    strip_html,
    strip_phrase_end,
    titleize,
)

logger = logging.getLogger(__name__)

PLEASE_SIGN_IN = "Please sign in to Virgo to see this information"
NO_DOWNLOAD = "Download not provided by this journal/publisher"
PLINK_TEXT = "EBSCO"
PLINK_NAME = "Online via <strong>EBSCO Discovery Service</strong>"

ABSTRACT_TYPES = ("Abstract", "AbstractNonEng", "AbstractSuppliedCopyright")

_BREAK = re.compile(r"<br\s*/?>")
_TITLE_SLASH = re.compile(r"\s*/\s*")
_FULL_LENGTH = re.compile(r"^\s*full\s+length\s+article:\s*", re.IGNORECASE)
_LETTERS_DIGITS = re.compile(r"(?<!\w)([a-z][a-z/.-]+)(\d+)(?!\w)", re.IGNORECASE)
_AUTHOR_ROLE = re.compile(r"\s*[,;:]\s*author$", re.IGNORECASE)


def _split_lines(value: str) -> list[str]:
    text = strip_html(_BREAK.sub("\n", value))
    return [line for line in (squish(part) for part in text.split("\n")) if line]


def _title(value: str) -> str:
    value = _TITLE_SLASH.sub(" / ", strip_html(value))
    value = _FULL_LENGTH.sub("", value)
    return strip_phrase_end(titleize(value))


def _title_source(value: str) -> str:
    value = strip_html(re.sub(r"^In <", "<", value))
    value = _LETTERS_DIGITS.sub(r"\1 \2", value)
    value = titleize(value, force=True)
    # undo over-capitalized page markers
    value = re.sub(r"(?<!\w)pp(?!\w)", "pp", value, flags=re.IGNORECASE)
    value = re.sub(r"(?<!\w)P(\.?\d+|\.)", r"p\1", value)
    value = re.sub(r"(?<!\w)(\d+)P(?!\w)", r"\1p", value)
    return strip_phrase_end(value)


def _abstract(value: str) -> str:
    if "script>" in value:
        value = re.sub(r"<(/?sub)script>", r"<\1>", value)
        value = re.sub(r"<(/?sup)erscript>", r"<\1>", value)
    return sanitize_html(value)


def set_bib_data(doc: Document, elements: list[DisplayElement]) -> None:
    """Fill title, is_part_of, type, description and identifier lists.

    An empty element list means EBSCO withheld the details from a guest.
    """
    if not elements:
        doc.login_needed = True
        return

    description_part: dict[str, list[str]] = {}
    for element in elements:
        value = element.value
        if not value or not value.strip():
            continue
        key = element.key
        if key == "Title":
            doc.display.title = _title(value)
        elif key == "TitleSource":
            doc.display.is_part_of = _title_source(value)
        elif key == "TypeDocument":
            doc.display.type = titleize(strip_html(value))
        elif key == "DOI":
            doc.dois.extend(_split_lines(value))
        elif key == "ISSN":
            doc.issns.extend(_split_lines(value))
        elif key == "Number Other":
            doc.call_numbers.append(strip_html(value))
        elif key in ABSTRACT_TYPES:
            description_part.setdefault(key, []).append(_abstract(value))
        else:
            logger.debug(f"ARTICLES - ignoring data item {key!r}")

    doc.call_numbers = list(dict.fromkeys(doc.call_numbers))
    description: list[str] = []
    for key in sorted(description_part):
        description.extend(description_part[key])
    doc.display.description = list(dict.fromkeys(description))


def set_authors(doc: Document, contributors: list[str]) -> None:
    """Fill the author list (bibliographic order) and creator (reading order)."""
    names: list[str] = []
    for value in contributors:
        value = _AUTHOR_ROLE.sub("", value.strip())
        if not value:
            continue
        monocase = value == value.lower() or value == value.upper()
        names.append(titleize(value) if monocase else value)
    names = list(dict.fromkeys(names))
    if not names:
        return
    doc.authors = [bib_order(name) for name in names]
    doc.display.creator = strip_html(ITEM_SEPARATOR.join(name_reverse(n) for n in names))


def set_languages(doc: Document, entity: BibEntity | None) -> None:
    if entity is None:
        return
    languages = [lang.language for lang in entity.languages if lang.language]
    if languages:
        doc.display.language = strip_html(LIST_SEPARATOR.join(dict.fromkeys(languages)))


def set_identifiers(doc: Document, entity: BibEntity | None, is_part_of: list[BibEntity]) -> None:
    """Merge DOIs and ISSNs from display elements and bibliographic entities.

    ISSNs get a dash after the fourth digit; each number appears once in the
    display identifier ("DOI x; ISSN y").
    """
    identifiers = [ident for part in is_part_of for ident in part.identifiers]
    if entity is not None:
        identifiers += entity.identifiers

    for identifier in identifiers:
        id_value = identifier.value.strip()
        id_type = identifier.identifier_type.strip()
        if not id_value or id_type.lower() == "issn-locals":
            continue
        kind, _, modifier = id_type.partition("-")
        if modifier:
            id_value = f"{id_value} ({modifier})"
        if kind.upper() == "DOI":
            doc.dois.append(id_value)
        elif kind.upper() == "ISSN":
            if len(id_value) > 4 and id_value[4] != "-":
                id_value = f"{id_value[:4]}-{id_value[4:]}"
            doc.issns.append(id_value)

    final: dict[str, list[str]] = {"DOI": [], "ISSN": []}
    display: list[str] = []
    for kind, values in (("DOI", doc.dois), ("ISSN", doc.issns)):
        for value in dict.fromkeys(values):
            number_only = value.split(" ", 1)[0]
            if not number_only or number_only in final[kind] or value in final[kind]:
                continue
            final[kind].append(number_only)
            display.append(f"{kind} {value}")
    doc.display.identifier = ITEM_SEPARATOR.join(display) or None
    doc.dois = final["DOI"]
    doc.issns = final["ISSN"]


def set_subjects(doc: Document, entity: BibEntity | None) -> None:
    if entity is None:
        return
    subjects = [
        titleize(strip_html(subject.subject_full), force=True)
        for subject in entity.subjects
        if subject.subject_full.strip()
    ]
    subjects = list(dict.fromkeys(subjects))
    if subjects:
        doc.search.subject_facet = subjects
        doc.display.subject = ITEM_SEPARATOR.join(subjects)


def set_item_access_data(doc: Document, record: EbscoRecord, proxy_prefix: str = "") -> None:
    """Fill full text, download links and online links.

    Search results carry only availability indicators; retrieved records may
    carry the text and links themselves, unless withheld from a guest.
    """
    full_text = record.full_text
    doc.full_text_available = record.full_text_available
    doc.download_text = sanitize_full_text(
        full_text.text.value if full_text and full_text.text else None
    )

    if full_text:
        for download in full_text.download_links:
            if not download.url:
                continue
            doc.download_links.append(
                Link(
                    url=download.url,
                    text=download.format,
                    name=f"<strong>Download</strong> in {download.format} format",
                )
            )
    if not doc.download_links:
        name = PLEASE_SIGN_IN if record.download_formats else NO_DOWNLOAD
        doc.download_links.append(Link(url=None, text=DEFAULT_DOWNLOAD_FORMAT, name=name))

    custom_links = (full_text.custom_links if full_text else []) + record.custom_links
    first_link = None
    for custom in custom_links:
        if not custom.url:
            continue
        link = Link(
            url=custom.url,
            text=strip_html(custom.text),
            name=strip_html(custom.name),
            thumbnail=custom.icon_url or None,
        )
        # the link resolver ("Find@UVa") goes first
        if link.name and "Serials Solutions" in link.name:
            first_link = link
        else:
            doc.links.append(link)
    if first_link is not None:
        doc.links.insert(0, first_link)

    if record.plink:
        default_url = proxy_prefix + record.plink
        doc.links = [link for link in doc.links if link.url != default_url]
        doc.links.append(Link(url=default_url, text=PLINK_TEXT, name=PLINK_NAME))


def set_page_numbers(doc: Document, pagination: Pagination | None) -> None:
    """Compute the end page from start page and page count.

    Start pages may carry a prefix or suffix ("S12", "12a"), which the end
    page keeps.
    """
    if pagination is None:
        return
    start_page = pagination.start_page.strip()
    prefix = postfix = ""
    match = re.match(r"^(\D*)(\d+)(.*)$", start_page)
    sp = int(match.group(2)) if match else 0
    if match and start_page != str(sp):
        prefix, postfix = match.group(1), match.group(3)
    try:
        pages = int(pagination.page_count.strip() or 0)
    except ValueError:
        pages = 0
    end_page = f"{prefix}{sp + pages - 1}{postfix}" if pages else ""
    doc.additional_data.start_page = start_page
    doc.additional_data.end_page = end_page


def set_journal(doc: Document, is_part_of: list[BibEntity]) -> None:
    titles = [
        titleize(strip_html(title.value))
        for part in is_part_of
        for title in part.titles
        if title.value.strip()
    ]
    if titles:
        doc.additional_data.journal = ITEM_SEPARATOR.join(dict.fromkeys(titles))


def set_volume_issue(doc: Document, is_part_of: list[BibEntity]) -> None:
    for part in is_part_of:
        for number in part.numbering:
            if number.number_type == "volume":
                doc.additional_data.volume = number.value
            elif number.number_type == "issue":
                doc.additional_data.issue = number.value


def _int_or_none(value: str) -> int | None:
    try:
        return int(value) if value.strip() else None
    except ValueError:
        return None


def set_creation_date(doc: Document, is_part_of: list[BibEntity]) -> None:
    """Format the 'published' date as 'YYYY/Month/D', 'YYYY/Month' or 'YYYY'."""
    for part in is_part_of:
        for date in part.dates:
            if date.date_type != "published":
                continue
            y, m, d = (_int_or_none(v) for v in (date.year, date.month, date.day))
            if y and m and 1 <= m <= 12 and d:
                value = f"{y:04d}/{calendar.month_name[m]}/{d}"
            elif y and m and 1 <= m <= 12:
                value = f"{y:04d}/{calendar.month_name[m]}"
            elif y:
                value = f"{y:04d}"
            else:
                value = date.text or None
            doc.search.creation_date = value


def map_record(record: EbscoRecord, proxy_prefix: str = "") -> Document:
    """Build the canonical Document for one EBSCO record."""
    article_id = ArticleId(record.header.dbid, record.header.an)
    doc = Document(id=str(article_id), provider="ebsco")
    doc.display.title = PLEASE_SIGN_IN
    doc.display.source = record.header.db_label
    doc.search.id = str(article_id)

    bib = record.bib_record
    entity = bib.bib_entity if bib else None
    is_part_of = bib.is_part_of if bib else []

    set_bib_data(doc, record.display_elements)
    set_authors(doc, bib.contributors if bib else [])
    set_languages(doc, entity)
    set_identifiers(doc, entity, is_part_of)
    set_subjects(doc, entity)
    set_item_access_data(doc, record, proxy_prefix)
    set_page_numbers(doc, entity.pagination if entity else None)
    set_journal(doc, is_part_of)
    set_volume_issue(doc, is_part_of)
    set_creation_date(doc, is_part_of)
    return doc


def map_facets(facets: list[EbscoFacet]) -> list[Facet]:
    """Canonical facets; values other than tlevel are titleized."""
    result = []
    for facet in facets:
        if not facet.id:
            continue
        items = [
            FacetItem(
                value=value.value if facet.id == "tlevel" else titleize(value.value),
                hits=value.count,
            )
            for value in facet.values
            if value.value
        ]
        result.append(Facet(name=facet.id, items=items))
    return result
