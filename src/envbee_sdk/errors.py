"""
Exception hierarchy for the envbee SDK.

All errors raised by the SDK derive from EnvbeeError so callers can catch
everything with a single clause, while still telling apart the cases that
matter:

    - ConfigurationError: the client cannot be built (fatal, never retried)
    - NetworkError: the service could not be reached at all
    - ProtocolError: the service answered with a non-200 status
    - AuthenticationError: the service rejected the credentials (401/403)
    - DecryptionError: a value was fetched but cannot be read
    - StorageError / CacheWriteError: local cache failures
"""

from __future__ import annotations

from typing import Any

MISSING_KEY_AND_SECRET = "Missing key and / or secret"


class EnvbeeError(Exception):
    """Base exception for all envbee SDK errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(EnvbeeError):
    """
    Raised when the client configuration is invalid or incomplete.

    This includes missing API key/secret, a malformed encryption key, and
    unreadable or invalid configuration files.
    """

    pass


class NetworkError(EnvbeeError):
    """
    Raised when the HTTP request could not be completed.

    The originating requests exception is chained as __cause__.

    Attributes:
        url: The URL that was being requested.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ProtocolError(EnvbeeError):
    """
    Raised when the service responds with a non-200 status.

    Attributes:
        status_code: The HTTP status code returned.
        body: The raw (parsed, when possible) response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationError(ProtocolError):
    """Raised when the service rejects the API key or signature (401/403)."""

    pass


class DecryptionError(EnvbeeError):
    """
    Raised when an encrypted value cannot be decrypted.

    Distinguishes "value unreadable" from "value unreachable" (NetworkError,
    ProtocolError). Never triggers a cache fallback.

    Attributes:
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StorageError(EnvbeeError):
    """Base exception for local cache errors."""

    pass


class CacheWriteError(StorageError):
    """Raised internally when a cache entry cannot be written."""

    pass
