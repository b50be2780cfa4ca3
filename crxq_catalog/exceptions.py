"""
Exception hierarchy for the resource catalog pipeline.

This module provides the typed errors raised while loading, normalizing and
querying the resource catalog, plus helpers that translate aiohttp failures
and HTTP status codes into that hierarchy.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Union

import aiohttp


class CatalogError(Exception):
    """
    Base exception for all catalog operations.

    Attributes:
        message: Human-readable error message
        url: URL that caused the error (if applicable)
        details: Additional error details as keyword arguments
    """

    def __init__(self, message: str, url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.details = kwargs


class ConfigurationError(CatalogError):
    """
    Raised when the storage endpoint or credential is missing or invalid.

    Fatal for any load: no acquisition strategy is attempted.
    """

    pass


class NotFoundError(CatalogError):
    """Raised when a lookup by resource id yields no match."""

    def __init__(self, message: str, resource_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.resource_id = resource_id


class TransportError(CatalogError):
    """
    Raised for any failure talking to a storage backend.

    Strategies convert these into failed results so the loader can fall
    through to the next strategy.
    """

    pass


class NetworkError(TransportError):
    """Raised for low-level network failures (DNS, socket, protocol)."""

    pass


class TimeoutError(TransportError):
    """
    Raised when a request or a whole load exceeds its time limit.

    Attributes:
        timeout_value: The timeout value that was exceeded (in seconds)
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        timeout_value: Optional[float] = None,
    ) -> None:
        super().__init__(message, url)
        self.timeout_value = timeout_value


class ConnectionError(TransportError):
    """Raised when a connection to the backend cannot be established."""

    pass


class ContentError(TransportError):
    """Raised when a response body cannot be decoded."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> None:
        super().__init__(message, url)
        self.content_type = content_type


class HTTPError(TransportError):
    """Raised for non-2xx responses."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        response_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code
        self.headers = headers or {}
        self.response_text = response_text


class RateLimitError(HTTPError):
    """Raised when the backend answers 429 Too Many Requests."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        retry_after: Optional[Union[int, float]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message, 429, url, headers)
        self.retry_after = retry_after


class AuthenticationError(HTTPError):
    """Raised for 401/403 responses (bad or unauthorized credential)."""

    pass


class ServerError(HTTPError):
    """Raised for 5xx responses."""

    pass


class ErrorHandler:
    """
    Converts aiohttp exceptions and HTTP statuses into catalog errors.
    """

    @staticmethod
    def handle_aiohttp_error(
        error: Exception, url: Optional[str] = None
    ) -> CatalogError:
        """
        Convert an aiohttp (or asyncio) exception to a TransportError subclass.

        Errors that already belong to the hierarchy are returned unchanged.
        """
        if isinstance(error, CatalogError):
            return error

        if isinstance(error, asyncio.TimeoutError):
            return TimeoutError(f"Request timed out: {error}", url=url)

        elif isinstance(error, aiohttp.ContentTypeError):
            return ContentError(f"Unexpected content type: {error}", url=url)

        elif isinstance(error, aiohttp.ClientResponseError):
            return ErrorHandler.handle_http_status_error(
                error.status,
                error.message or str(error),
                url,
                dict(error.headers) if error.headers else None,
            )

        elif isinstance(error, aiohttp.ClientSSLError):
            return ConnectionError(f"SSL error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientConnectorError):
            return ConnectionError(f"Connector error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientConnectionError):
            return ConnectionError(f"Connection error: {error}", url=url)

        elif isinstance(error, aiohttp.ClientPayloadError):
            return ContentError(f"Payload error: {error}", url=url)

        else:
            return NetworkError(f"Unexpected network error: {error}", url=url)

    @staticmethod
    def handle_http_status_error(
        status_code: int,
        message: str,
        url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        response_text: Optional[str] = None,
    ) -> HTTPError:
        """
        Create the HTTPError subclass matching a status code.

        Args:
            status_code: HTTP status code
            message: Error message
            url: The URL that caused the error
            headers: Response headers
            response_text: Response body text

        Returns:
            Appropriate HTTPError subclass
        """
        if status_code in (401, 403):
            return AuthenticationError(
                f"Access denied ({status_code}): {message}",
                status_code,
                url,
                headers,
                response_text,
            )

        elif status_code == 429:
            return RateLimitError(
                f"Rate limit exceeded: {message}",
                url,
                ErrorHandler.parse_retry_after(headers),
                headers,
            )

        elif 500 <= status_code < 600:
            return ServerError(
                f"Server error: {message}", status_code, url, headers, response_text
            )

        else:
            return HTTPError(message, status_code, url, headers, response_text)

    @staticmethod
    def parse_retry_after(headers: Optional[Dict[str, str]]) -> Optional[float]:
        """Read a numeric Retry-After header, ignoring HTTP-date forms."""
        if not headers:
            return None
        value = headers.get("Retry-After") or headers.get("retry-after")
        if not value:
            return None
        try:
            return max(0.0, float(value))
        except ValueError:
            return None

    @staticmethod
    def is_rate_limited(error: Exception) -> bool:
        """Only explicit 429 signals are retried within a strategy."""
        return isinstance(error, RateLimitError)

    @staticmethod
    def get_retry_delay(
        error: Exception,
        attempt: int,
        base_delay: float = 1.0,
        exponential_base: float = 2.0,
        max_delay: float = 60.0,
    ) -> float:
        """
        Calculate the delay before retrying a rate-limited call.

        Args:
            error: The exception that occurred
            attempt: Current attempt number (0-based)
            base_delay: Base delay in seconds
            exponential_base: Backoff multiplier
            max_delay: Upper bound on the computed delay

        Returns:
            Delay in seconds before next retry
        """
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return min(float(error.retry_after), max_delay)

        if ErrorHandler.is_rate_limited(error):
            return min(base_delay * (exponential_base**attempt), max_delay)

        return 0.0


__all__ = [
    "CatalogError",
    "ConfigurationError",
    "NotFoundError",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "ContentError",
    "HTTPError",
    "RateLimitError",
    "AuthenticationError",
    "ServerError",
    "ErrorHandler",
]
