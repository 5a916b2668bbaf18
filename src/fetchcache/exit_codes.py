"""Numeric exit codes for applications that surface fetchcache errors.

Each constant maps to an error category and is referenced by the
corresponding :class:`~fetchcache.exceptions.FetchcacheError` subclass.
Application code that turns a failed resolution into a process exit can
use ``exc.exit_code`` directly instead of matching on exception types.

Example::

    result = await resolver.resolve("/users", PolicyKind.PREFER_REMOTE)
    if result.error is not None:
        sys.exit(result.error.exit_code)
"""

EXIT_SUCCESS = 0
"""The value was resolved."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The resolver was called with invalid arguments."""

EXIT_NO_DATA = 4
"""Neither the remote source nor the local store could provide a value."""

EXIT_HTTP_STATUS = 5
"""The remote API answered with a non-2xx status."""

EXIT_NETWORK_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_STORAGE_ERROR = 7
"""The local store could not be read or written."""
