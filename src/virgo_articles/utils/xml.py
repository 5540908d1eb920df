"""XML loading shared by the XML-speaking providers."""

import logging

from lxml import etree

from virgo_articles.providers.errors import EmptyResponseError, ParseError

logger = logging.getLogger(__name__)

XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def load_xml(content: bytes | str) -> etree._Element:
    """Parse an XML payload.

    Raises:
        EmptyResponseError: If the payload is empty
        ParseError: If the payload is not well-formed XML
    """
    if not content or not content.strip():
        raise EmptyResponseError(content)
    if isinstance(content, str):
        content = content.encode("utf-8")
    try:
        return etree.fromstring(content, parser=XML_PARSER)
    except etree.XMLSyntaxError as e:
        logger.debug(f"XML syntax error: {e}")
        raise ParseError(content) from e
