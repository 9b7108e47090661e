"""Exceptions for search source adapters."""

from __future__ import annotations


class SearchSourceError(Exception):
    """Base exception for all search source errors."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class TransientSourceError(SearchSourceError):
    """Error that may succeed on a later attempt."""


class RequestTimeout(TransientSourceError):
    """The request did not complete within the configured timeout."""


class NetworkError(TransientSourceError):
    """No response at all (DNS failure, connection refused or reset)."""


class UpstreamServerError(TransientSourceError):
    """Provider answered with a 5xx status."""


class RateLimitExceeded(TransientSourceError):
    """Provider answered 429."""


class UpstreamClientError(SearchSourceError):
    """Provider answered with a 4xx status other than 429."""


class ResponseParseError(SearchSourceError):
    """Response body did not have the expected shape."""
