"""Allow-list HTML sanitizer built on lxml.html.

Disallowed elements are unwrapped (their text and children are kept),
disallowed attributes are dropped, and scripting content is removed outright.
"""

from collections.abc import Iterable, Mapping
from html import escape
import logging
import re

from lxml import etree
from lxml import html as lxml_html

logger = logging.getLogger(__name__)

ALLOWED_TAGS: frozenset[str] = frozenset(
    ["a", "b", "br", "em", "i", "p", "sub", "sup", "string", "strong", "u"]
)
ALLOWED_ATTRS: Mapping[str, frozenset[str]] = {"a": frozenset(["href", "title"])}

# Elements removed together with their content
REMOVED_TAGS = frozenset(["script", "style", "iframe", "object", "embed"])

URL_ATTRS = frozenset(["href", "src"])
SAFE_URL = re.compile(r"^(https?:|mailto:|#|/|[^:]*$)", re.IGNORECASE)


def _inner_html(root: lxml_html.HtmlElement) -> str:
    parts = [escape(root.text, quote=False) if root.text else ""]
    parts.extend(
        etree.tostring(child, encoding="unicode", method="html", with_tail=True)
        for child in root
    )
    return "".join(parts)


def sanitize_html(
    value: str | None,
    tags: Iterable[str] = ALLOWED_TAGS,
    attributes: Mapping[str, Iterable[str]] = ALLOWED_ATTRS,
) -> str:
    """Remove unwanted HTML while retaining the text it encloses.

    Args:
        value: String with an embedded HTML fragment
        tags: Element names to keep
        attributes: Allowed attribute names per element name

    Returns:
        Sanitized HTML fragment
    """
    if not value:
        return ""
    if "<" not in value:
        return value

    allowed_tags = frozenset(tags)
    allowed_attrs = {tag: frozenset(names) for tag, names in attributes.items()}
    try:
        root = lxml_html.fragment_fromstring(value, create_parent="div")
    except (etree.ParserError, ValueError) as e:
        logger.warning(f"Unparseable HTML fragment dropped to text: {e}")
        return escape(re.sub(r"<[^>]*>", "", value), quote=False)

    # Children before parents, so unwrapping never skips nested elements
    for element in reversed(list(root.iterdescendants())):
        if not isinstance(element.tag, str):
            # comments and processing instructions
            element.drop_tree()
            continue
        tag = element.tag.lower()
        if tag in REMOVED_TAGS:
            element.drop_tree()
            continue
        if tag not in allowed_tags:
            element.drop_tag()
            continue
        keep = allowed_attrs.get(tag, frozenset())
        for name in list(element.attrib):
            val = element.attrib[name]
            if name not in keep or (name in URL_ATTRS and not SAFE_URL.match(val)):
                del element.attrib[name]

    return _inner_html(root)
