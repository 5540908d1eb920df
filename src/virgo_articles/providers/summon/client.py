"""Summon API request signing.

Every Summon request is authenticated by an HMAC-SHA1 digest over the
request's accept type, date, host, path and sorted query string.
"""

from __future__ import annotations

import base64
from email.utils import formatdate
import hashlib
import hmac
from urllib.parse import urlsplit

SUMMON_ACCEPT = "application/json"


def canonical_query(params: list[tuple[str, str]]) -> str:
    """Query string as signed: unencoded, sorted by parameter name.

    Repeated parameters keep their relative order.
    """
    return "&".join(f"{key}={value}" for key, value in sorted(params, key=lambda p: p[0]))


def summon_digest(
    secret_key: str,
    accept: str,
    date: str,
    host: str,
    path: str,
    params: list[tuple[str, str]],
) -> str:
    """Base64 HMAC-SHA1 digest of the request identity.

    Args:
        secret_key: Summon secret key
        accept: Accept header value
        date: x-summon-date header value
        host: Request host
        path: Request path
        params: Query parameters, unencoded

    Returns:
        Digest for the Authorization header
    """
    identity = "\n".join([accept, date, host, path, canonical_query(params)]) + "\n"
    mac = hmac.new(secret_key.encode("utf-8"), identity.encode("utf-8"), hashlib.sha1)
    return base64.b64encode(mac.digest()).decode("ascii")


def signed_headers(
    access_id: str,
    secret_key: str,
    url: str,
    params: list[tuple[str, str]],
    date: str | None = None,
) -> dict[str, str]:
    """Headers authenticating one Summon request.

    Args:
        access_id: Summon access id
        secret_key: Summon secret key
        url: Full request URL without query string
        params: Query parameters, unencoded
        date: RFC 1123 date; the current time if omitted
    """
    parts = urlsplit(url)
    date = date or formatdate(usegmt=True)
    digest = summon_digest(secret_key, SUMMON_ACCEPT, date, parts.netloc, parts.path, params)
    return {
        "Accept": SUMMON_ACCEPT,
        "x-summon-date": date,
        "Host": parts.netloc,
        "Authorization": f"Summon {access_id};{digest}",
    }
