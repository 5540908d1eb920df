"""EBSCO article identifier."""

from __future__ import annotations

import re
from urllib.parse import unquote

# Stands in for a missing database id or accession number
MISSING_PART = "0"

_ENCODED_SEPARATOR = re.compile("%3A", re.IGNORECASE)
_UNRESERVED = re.compile(rb"[^a-zA-Z0-9_\-]")


def encode(value: str) -> str:
    """Percent-encode for use within a URL, escaping '.' as well."""
    return _UNRESERVED.sub(
        lambda m: f"%{m.group(0)[0]:02X}".encode("ascii"), value.encode("utf-8")
    ).decode("ascii")


def decode(value: str) -> str:
    return unquote(value.replace("+", " "))


class ArticleId:
    """Database id and accession number of an EBSCO record.

    Accepts a raw id ("edsmzh:1993066095"), an encoded id
    ("edsmzh%3A1993066095") or the two parts separately.

    Example:
        >>> str(ArticleId("edsmzh:1993066095"))
        'edsmzh:1993066095'
        >>> ArticleId("edsmzh", "1993066095").encoded
        'edsmzh%3A1993066095'
    """

    def __init__(self, dbid: str | ArticleId | None = None, an: str | None = None) -> None:
        self.dbid: str | None = None
        self.an: str | None = None
        encoded: str | None = None
        if isinstance(dbid, ArticleId):
            self.dbid, self.an = dbid.dbid, dbid.an
        elif dbid and ":" in dbid:
            first, _, rest = dbid.partition(":")
            self.dbid, self.an = first, rest
        elif dbid and "%" in dbid:
            parts = _ENCODED_SEPARATOR.split(dbid)
            self.dbid = decode(parts[0])
            self.an = decode("%3A".join(parts[1:])) if len(parts) > 1 else None
            encoded = dbid
        self.dbid = self.dbid or dbid or MISSING_PART
        self.an = self.an or an or MISSING_PART
        self.encoded = encoded or encode(str(self))

    @property
    def decoded(self) -> str:
        return decode(self.encoded)

    def __str__(self) -> str:
        return f"{self.dbid}:{self.an}"

    def __repr__(self) -> str:
        return f"ArticleId({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ArticleId):
            return (self.dbid, self.an) == (other.dbid, other.an)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.dbid, self.an))
