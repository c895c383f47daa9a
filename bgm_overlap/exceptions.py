"""Error taxonomy for bgm_overlap.

Callers are expected to catch ``BgmOverlapError`` and show a single generic
failure notice; the subclasses exist for logs and tests.
"""

from __future__ import annotations


class BgmOverlapError(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        error_code: Optional code for programmatic handling
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class TransportError(BgmOverlapError):
    """Network, DNS, timeout or non-success HTTP status from the API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, error_code="TRANSPORT_ERROR")
        self.status_code = status_code


class FormatError(BgmOverlapError):
    """The API answered with something that is not a collection page."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="FORMAT_ERROR")


class IdentityResolutionError(BgmOverlapError):
    """The caller did not supply a usable username."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="IDENTITY_ERROR")


class PersistenceError(BgmOverlapError):
    """Writing the cache slot failed (disk full, permissions, ...)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="PERSISTENCE_ERROR")


class CacheFormatError(BgmOverlapError):
    """Persisted cache content does not decode into a valid snapshot."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="CACHE_FORMAT_ERROR")


class RetrievalError(BgmOverlapError):
    """Fetching a user's collection failed; wraps the first underlying error.

    Attributes:
        username: The user whose collection could not be retrieved
        cause: The TransportError or FormatError that aborted the fetch
    """

    def __init__(self, username: str, cause: BgmOverlapError) -> None:
        super().__init__(
            f"Failed to retrieve collection for '{username}': {cause.message}",
            error_code="RETRIEVAL_ERROR",
        )
        self.username = username
        self.cause = cause
