"""Exception hierarchy shared by the trending history services."""

from __future__ import annotations

__all__ = [
    "TrendingError",
    "ConfigError",
    "InvalidHost",
    "FetchError",
    "RequestBuildError",
    "TransportError",
    "HTTPStatusError",
    "BodyReadError",
    "PersistenceError",
]


class TrendingError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(TrendingError, ValueError):
    """Configuration or instance list problem. Aborts the run before any fetch."""


class InvalidHost(ConfigError):
    """A raw instance string could not be normalised into a host."""


class FetchError(TrendingError):
    """A single (host, category) fetch failed and should be skipped."""

    def __init__(self, host: str, category: str, message: str) -> None:
        super().__init__(message)
        self.host = host
        self.category = category


class RequestBuildError(FetchError):
    """The request could not be constructed (bad URL or header value)."""


class TransportError(FetchError):
    """DNS, connect, TLS or timeout failure."""


class HTTPStatusError(FetchError):
    """The instance answered with a non-200 status."""

    def __init__(self, host: str, category: str, status_code: int, reason: str = "") -> None:
        text = f"{status_code} {reason}".strip()
        super().__init__(host, category, text)
        self.status_code = status_code
        self.reason = reason


class BodyReadError(FetchError):
    """The response body stream broke while reading."""


class PersistenceError(TrendingError, OSError):
    """A directory or file could not be written."""
