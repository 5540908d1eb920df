"""Exceptions raised by article providers.

Only NetworkError and SessionError reach callers; the others are caught
inside the provider and turned into an empty, failed Response.
"""

from __future__ import annotations


class ArticleProviderError(Exception):
    """Base exception for article provider errors."""

    pass


class NetworkError(ArticleProviderError):
    """Provider not reachable (connection, DNS or timeout)."""

    pass


class SessionError(ArticleProviderError):
    """Request attempted without a session token."""

    pass


class ProtocolError(ArticleProviderError):
    """Non-success HTTP status or an error payload from the provider."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str | None = None,
        error_number: int | None = None,
        session_invalid: bool = False,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.error_number = error_number
        self.session_invalid = session_invalid


class ParseError(ArticleProviderError):
    """Malformed response body."""

    def __init__(self, source: str | bytes | None = None) -> None:
        super().__init__("invalid response from article provider")
        if isinstance(source, bytes):
            source = source.decode("utf-8", errors="replace")
        self.source = source or ""


class EmptyResponseError(ParseError):
    """Response body was empty."""

    def __init__(self, source: str | bytes | None = None) -> None:
        super().__init__(source)
        self.args = ("empty response from article provider",)
