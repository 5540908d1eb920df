"""Plain-text helpers for bibliographic metadata."""

import html
import re

from lxml import etree
from lxml import html as lxml_html

LIST_SEPARATOR = ", "
ITEM_SEPARATOR = "; "

# Trailing punctuation left over from MARC-style field endings
PHRASE_END = re.compile(r"[.,;:/\s]+$")

# Words kept lowercase inside a title unless they start a phrase
LOWERCASE_WORDS = frozenset(
    "a an and as at but by en for from if in into nor of on or per so the to "
    "upon v vs via with yet".split()
)

NAME_SUFFIX_WORDS = frozenset(
    ["Jr", "Jr.", "Sr", "Sr.", "II", "III", "IV", "V", "Ph.D.", "M.D.", "Esq."]
)

_WORD_PART = re.compile(r"([^:;/+\-]+)")
_AFFIXES = re.compile(r"^(\W*)(.*?)(\W*)$", re.DOTALL)
_ROMAN = re.compile(r"^(?=[MDCLXVI])M*(C[MD]|D?C{0,3})(X[CL]|L?X{0,3})(I[XV]|V?I{0,3})$")


def squish(value: str | None) -> str:
    """Collapse whitespace runs into single spaces and trim."""
    return " ".join((value or "").split())


def strip_html(value: str | None) -> str:
    """Remove HTML tags, keeping the enclosed text with entities decoded.

    Args:
        value: String which may contain an HTML fragment

    Returns:
        Plain text
    """
    if not value:
        return ""
    if "<" not in value:
        return html.unescape(value)
    try:
        fragment = lxml_html.fragment_fromstring(value, create_parent="div")
    except (etree.ParserError, ValueError):
        return html.unescape(re.sub(r"<[^>]*>", "", value))
    return str(fragment.text_content())


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def titleize(value: str | None, force: bool = False) -> str:
    """Title-case a phrase.

    All-uppercase or all-lowercase phrases are fully recased. In a mixed-case
    phrase only all-lowercase words are capitalized; uppercase and mixed-case
    words are assumed to be intentional (acronyms, names) and are kept.

    Args:
        value: Phrase to titleize
        force: Recase every word, even in a mixed-case phrase

    Returns:
        Titleized phrase
    """
    source = value or ""
    words = source.split()
    if not words:
        return source
    has_lower = any(ch.islower() for ch in source)
    has_upper = any(ch.isupper() for ch in source)
    if not has_lower and not has_upper:
        return source
    uniform = force or ((has_lower != has_upper) and len(words) > 1)

    result = []
    new_phrase = True
    for word in words:
        capitalize_small = new_phrase or word[:1] in "`'\""
        new_phrase = word[-1:] in ":;/?."

        def transform(match: re.Match[str]) -> str:
            nonlocal capitalize_small
            lead, core, tail = _AFFIXES.match(match.group(1)).groups()
            lowered = core.lower()
            if _ROMAN.match(core.upper()) and core.isupper():
                new_core = core
            elif lowered in LOWERCASE_WORDS:
                new_core = _capitalize(core) if capitalize_small else lowered
            elif core.islower():
                new_core = _capitalize(core)
            elif core.isupper() and uniform:
                new_core = _capitalize(core)
            else:
                new_core = core
            capitalize_small = False
            return f"{lead}{new_core}{tail}"

        result.append(_WORD_PART.sub(transform, word))
    return " ".join(result)


def strip_phrase_end(value: str) -> str:
    return PHRASE_END.sub("", value)


def _extract_last_name(name_parts: list[str]) -> str:
    """Pop the surname (with lowercase particles like 'de la') off name_parts."""
    surname = name_parts.pop()
    lowercase = re.compile(r"^[a-z]+([\s.\-][a-z])*$")
    if any(lowercase.match(part) for part in name_parts):
        result = [surname]
        while name_parts and not lowercase.match(name_parts[-1]):
            result.insert(0, name_parts.pop())
        while name_parts and lowercase.match(name_parts[-1]):
            result.insert(0, name_parts.pop())
        return " ".join(result)
    return surname


def name_reverse(name: str | None) -> str:
    """Put a name in reading order ("Croix, Jean de la" -> "Jean de la Croix").

    Corporate names (containing parentheses) are returned unchanged.
    """
    name = squish(name)
    if not name or "(" in name or ")" in name:
        return name

    comma_parts = [part.strip() for part in name.split(",") if part.strip()]
    suffix_parts: list[str] = []
    while comma_parts and comma_parts[-1] in NAME_SUFFIX_WORDS:
        suffix_parts.insert(0, comma_parts.pop())
    if not comma_parts:
        return name

    if len(comma_parts) > 1:
        last_name = comma_parts[0]
        other_names = ", ".join(comma_parts[1:])
    else:
        name_parts = comma_parts[0].split(" ")
        last_name = _extract_last_name(name_parts)
        other_names = " ".join(name_parts)

    result = f"{other_names} {last_name}" if other_names else last_name
    if suffix_parts:
        result += ", " + ", ".join(suffix_parts)
    return result


def bib_order(name: str | None) -> str:
    """Put a name in bibliographic order ("Jean de la Croix" -> "de la Croix, Jean")."""
    name = squish(name)
    if not name:
        return name

    comma_parts = name.split(", ")
    suffix_parts: list[str] = []
    while comma_parts and comma_parts[-1] in NAME_SUFFIX_WORDS:
        suffix_parts.insert(0, comma_parts.pop())
    if len(comma_parts) != 1:
        return name

    name_parts = comma_parts[0].split(" ")
    last_name = _extract_last_name(name_parts)
    parts = [last_name]
    if name_parts:
        parts.append(" ".join(name_parts))
    return ", ".join(parts + suffix_parts)
