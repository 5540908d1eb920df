"""Translate EBSCO full-text markup into sanitized HTML.

EBSCO delivers full text in its own dialect (ulink, bold, olist, reflink and
bibl footnote cross-references...). The markup is rewritten into standard
HTML by an ordered table of substitutions and then passed through the
allow-list sanitizer with an extended tag and attribute set.
"""

from html import escape
import re

from virgo_articles.utils.sanitize import ALLOWED_ATTRS, ALLOWED_TAGS, sanitize_html

# Proprietary tags and their HTML replacements; applied in order
FULL_TEXT_TAG_TRANSLATIONS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"<(/?){tag}(\s+[^>]*)?>"), rf"<\1{new_tag}\2>")
    for tag, new_tag in (
        ("ulink", "a"),
        ("bold", "b"),
        ("italic", "i"),
        ("item", "li"),
        ("olist", "ol"),
        ("ulist", "ul"),
        ("superscript", "sup"),
        ("subscript", "sub"),
        ("sups", "sup"),
        ("subs", "sub"),
        ("title", "atitle"),
    )
)

# Optional brackets/spaces around footnote labels
_LB = r"\s*[\[(]?"
_RB = r"\s*[\])]?"

CRLF = re.compile(r"\r\n|\r|\n")

FULL_TEXT_OTHER_TRANSLATIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    # stray spacing characters
    (re.compile("[\u0085\u00a0]"), ""),
    # normalize footnote labels
    (
        re.compile(rf"{_LB}<(reflink|bibl)(.*?)>{_LB}[a-z]*([\d-]+)\.?{_RB}(<.*?>){_RB}"),
        r"<\1\2>[\3]\4",
    ),
    # footnote reference links to its note
    (
        re.compile(r'<(reflink)(.*?)(idref=")([^"]+)(.*?)>(.*?)(<.*?>)'),
        r'<\1\2\3\4\5><a href="#\4" title="Jump to note \6">\6</a>\7',
    ),
    # note links back to the referring text
    (
        re.compile(r'<(bibl)(.*?)(idref=")([^"]+)(.*?)>(.*?)(<.*?>)'),
        r'<\1\2\3\4\5><a href="#\4" title="Jump back to text">\6</a>\7',
    ),
    # images link to their source
    (
        re.compile(r'<(img)(.*?)(src=")([^"]+)(.*?)>'),
        r'<a href="\4" target="_blank"><\1\2\3\4\5></a>',
    ),
    # "[sub 2]" / "[sup -9]" inside ephtml tables
    (re.compile(r"\[(sub|sup)(\s*[0-9\s][^\]]*)\]"), r"<\1>\2</\1>"),
    (CRLF, " "),
)

FULL_TEXT_TRANSLATIONS = FULL_TEXT_TAG_TRANSLATIONS + FULL_TEXT_OTHER_TRANSLATIONS

FULL_TEXT_TAGS = frozenset(
    """
    anid jsection atitle sbt aug
    hd hd1 img
    ol ul li
    ephtml table thead tbody tfoot col colgroup tr th td
    et ct rj
    reflink blist bibtext bibl ref
    """.split()
)

FULL_TEXT_ATTRS: dict[str, frozenset[str]] = {
    "atitle": frozenset(["id"]),
    "hd": frozenset(["id"]),
    "img": frozenset(["src", "alt", "title"]),
    "table": frozenset(["sortable"]),
    "col": frozenset(["span"]),
    "th": frozenset(["colspan", "rowspan", "scope"]),
    "td": frozenset(["colspan", "rowspan", "align", "valign"]),
    "ct": frozenset(["id"]),
    "reflink": frozenset(["id", "idref"]),
    "bibl": frozenset(["id", "idref"]),
    "ref": frozenset(["id"]),
}

# Combined allow-list for full text
ALL_FULL_TEXT_TAGS = ALLOWED_TAGS | FULL_TEXT_TAGS
ALL_FULL_TEXT_ATTRS = {
    tag: ALLOWED_ATTRS.get(tag, frozenset()) | FULL_TEXT_ATTRS.get(tag, frozenset())
    for tag in set(ALLOWED_ATTRS) | set(FULL_TEXT_ATTRS)
}
# anchors produced by the translations keep their target
ALL_FULL_TEXT_ATTRS["a"] = ALL_FULL_TEXT_ATTRS["a"] | {"target"}

_PRESERVED_NEWLINE = "@PRESERVED_NEWLINE@"
_CT_BLOCK = re.compile(r"<ct[^>]*>.*?</ct>", re.DOTALL)
_CT_LEADING = re.compile(rf"(<ct[^>]*?>)({_PRESERVED_NEWLINE})+")
_EPHTML_BLOCK = re.compile(r"<ephtml[^>]*>.*?</ephtml>", re.DOTALL)
_BREAK = re.compile(r"<br */?>")


def translate_full_text(text: str) -> str:
    """Apply the ordered markup translations."""
    for pattern, replacement in FULL_TEXT_TRANSLATIONS:
        text = pattern.sub(replacement, text)
    return text


def _protect_ct(match: re.Match[str]) -> str:
    block = CRLF.sub(_PRESERVED_NEWLINE, match.group(0))
    block = _CT_LEADING.sub(r"\1", block, count=1)
    return escape(block, quote=False)


def sanitize_full_text(text: str | None) -> str | None:
    """Full text as sanitized HTML.

    Newlines inside <ct> (character table) blocks are kept as line breaks;
    breaks inside <ephtml> blocks are removed.

    Args:
        text: Full-text value from a retrieved record

    Returns:
        Sanitized HTML, or None if there is no text
    """
    if not text or not text.strip():
        return None

    has_ct = "<ct" in text
    if has_ct:
        text = _CT_BLOCK.sub(_protect_ct, text)

    result = sanitize_html(
        translate_full_text(text), ALL_FULL_TEXT_TAGS, ALL_FULL_TEXT_ATTRS
    )

    if has_ct:
        result = result.replace(_PRESERVED_NEWLINE, "<br/>")
    if "<ephtml" in result:
        result = _EPHTML_BLOCK.sub(lambda m: _BREAK.sub("", m.group(0)), result)
    return result
