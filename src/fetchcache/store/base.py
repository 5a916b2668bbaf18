"""Abstract local store contract consumed by the resolver.

A :class:`LocalStore` is a synchronous key/value store of
:class:`~fetchcache.models.CacheEntry` objects. It never performs network
I/O, so the resolver calls it directly from inside a coroutine. Failures
are reported by raising :class:`~fetchcache.exceptions.StorageError`;
backends translate their own exception types before they escape.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from fetchcache.models import CacheEntry


class LocalStore(ABC):
    """Unified interface for local persistence backends."""

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry stored under *key*, or ``None`` on a miss."""

    @abstractmethod
    def set(self, key: str, value: Any, version: int) -> CacheEntry:
        """Replace the entry under *key* and return what was written.

        Raises:
            StorageError: If the entry could not be persisted.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entry under *key*. Deleting a missing key is not an error.

        Raises:
            StorageError: If the backend failed to delete the entry.
        """

    def close(self) -> None:
        """Release backend resources. The default implementation does nothing."""

    def __enter__(self) -> LocalStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
