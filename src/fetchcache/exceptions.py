"""Exception hierarchy for fetchcache.

All exceptions inherit from :class:`FetchcacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`fetchcache.exit_codes`
and a short ``kind`` tag. The resolver never raises these to its caller;
it attaches them to :attr:`~fetchcache.models.ResolutionResult.error`
instead, so ``kind`` is what callers usually branch on.

Subclass hierarchy::

    FetchcacheError          (exit 1, "error")
    +-- InvalidUsageError    (exit 2, "invalid_usage")
    +-- ConfigError          (exit 1, "config")
    +-- FetchError           (exit 6, "fetch")
    |   +-- NetworkError     (exit 6, "network")
    |   +-- HttpStatusError  (exit 5, "http_status")
    +-- StorageError         (exit 7, "storage")
    +-- NoDataAvailable      (exit 4, "no_data")
"""

from __future__ import annotations

from fetchcache.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_STATUS,
    EXIT_INVALID_USAGE,
    EXIT_NETWORK_ERROR,
    EXIT_NO_DATA,
    EXIT_STORAGE_ERROR,
)


class FetchcacheError(Exception):
    """Base exception for all fetchcache errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    kind: str = "error"

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(FetchcacheError):
    """Raised for invalid resolver arguments (e.g. a missing expected version)."""

    exit_code = EXIT_INVALID_USAGE
    kind = "invalid_usage"


class ConfigError(FetchcacheError):
    """Raised for configuration problems (invalid JSON, unknown backends)."""

    exit_code = EXIT_GENERIC_FAILURE
    kind = "config"


class FetchError(FetchcacheError):
    """Base class for failures reported by a :class:`~fetchcache.fetcher.RemoteFetcher`."""

    exit_code = EXIT_NETWORK_ERROR
    kind = "fetch"


class NetworkError(FetchError):
    """Raised on transport failures (timeout, DNS resolution, connection refused)."""

    kind = "network"


class HttpStatusError(FetchError):
    """Raised when the remote source answers with a non-2xx status.

    Args:
        code: The HTTP status code.
        message: Optional description; defaults to ``"HTTP <code>"``.
    """

    exit_code = EXIT_HTTP_STATUS
    kind = "http_status"

    def __init__(self, code: int, message: str | None = None):
        super().__init__(message or f"HTTP {code}")
        self.code = code


class StorageError(FetchcacheError):
    """Raised when the local store cannot read, write or delete an entry."""

    exit_code = EXIT_STORAGE_ERROR
    kind = "storage"


class NoDataAvailable(FetchcacheError):
    """Raised when neither the remote source nor the local store has a value."""

    exit_code = EXIT_NO_DATA
    kind = "no_data"
