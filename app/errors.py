from __future__ import annotations


class FetchError(Exception):
    """Base class for classified quote fetch failures."""

    kind = "FETCH_ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.kind)
        self.message = message


class RateLimitedError(FetchError):
    kind = "RATE_LIMITED"


class SourceError(FetchError):
    kind = "SOURCE_ERROR"


class NoDataError(FetchError):
    kind = "NO_DATA"


class TransportError(FetchError):
    kind = "TRANSPORT_ERROR"
