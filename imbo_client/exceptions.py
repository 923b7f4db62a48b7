"""
Custom exceptions for the Imbo client library.
"""

from typing import Optional


class ImboClientError(Exception):
    """Base exception for Imbo client errors."""
    pass


class ConfigurationError(ImboClientError):
    """Raised when client configuration is invalid."""
    pass


class InvalidIdentifierError(ImboClientError):
    """Raised when a user name or image identifier cannot be used in a path."""
    pass


class InvalidQueryError(ImboClientError):
    """Raised when an images query is given an out-of-range value."""
    pass


class InvalidLocalFileError(ImboClientError):
    """Raised when a local file is missing or empty. No request is made."""
    pass


class TransportError(ImboClientError):
    """Raised when the request could not be delivered (DNS, TCP, TLS)."""
    pass


class CancellationError(ImboClientError):
    """Raised when a request timed out or was cancelled by the caller."""
    pass


class ApiError(ImboClientError):
    """Raised when the server answers with a non-successful status code."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: bytes = b"",
        error_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.error_code = error_code

    def __str__(self):
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class ClientError(ApiError):
    """Raised for 4xx responses: the request itself was rejected."""
    pass


class ServerError(ApiError):
    """Raised for 5xx responses: the server failed to handle the request."""
    pass


class FetchError(ApiError):
    """Raised when raw image bytes could not be fetched from a URL."""
    pass
