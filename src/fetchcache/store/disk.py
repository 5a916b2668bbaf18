"""Disk-backed local store.

Uses :mod:`diskcache` to persist :class:`~fetchcache.models.CacheEntry`
objects on the filesystem, optionally with a time-to-live. Entries are
stored as plain dicts (``CacheEntry.model_dump()``) so the on-disk format
does not depend on the model class being importable under the same path.

Store keys are SHA-256 hashes of the cache key, which keeps arbitrary URL
paths and query strings safe to use as keys.

See Also:
    :class:`~fetchcache.models.StoreConfig` -- the Pydantic model that
    controls ``directory`` and ``ttl_seconds``.
"""

from __future__ import annotations

import hashlib
import pickle
import sqlite3
from pathlib import Path
from typing import Any, Optional

import diskcache
from pydantic import ValidationError

from fetchcache.exceptions import StorageError
from fetchcache.models import CacheEntry
from fetchcache.store.base import LocalStore

_DISK_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)
_PICKLE_ERRORS = (pickle.PicklingError, TypeError, AttributeError)


class DiskStore(LocalStore):
    """Disk-backed :class:`LocalStore`.

    Args:
        directory: Root directory for the store. An ``entries/``
            subdirectory is created inside it.
        ttl_seconds: Expire entries this many seconds after they were
            written. ``None`` keeps entries until they are deleted.

    Example::

        from fetchcache.store import DiskStore

        with DiskStore("/tmp/fetchcache") as store:
            store.set("/users", [{"id": 1}], version=1)
            entry = store.get("/users")
    """

    def __init__(self, directory: str | Path, ttl_seconds: Optional[int] = None) -> None:
        self._directory = Path(directory)
        self._ttl_seconds = ttl_seconds
        self._cache: Optional[diskcache.Cache] = None
        try:
            self._cache = diskcache.Cache(str(self._directory / "entries"))
        except _DISK_ERRORS as exc:
            raise StorageError(f"Cannot open store at {self._directory}: {exc}") from exc

    def get(self, key: str) -> Optional[CacheEntry]:
        cache = self._require_open()
        try:
            raw = cache.get(self._make_key(key))
        except _DISK_ERRORS as exc:
            raise StorageError(f"Cannot read {key!r}: {exc}") from exc
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate(raw)
        except ValidationError as exc:
            raise StorageError(f"Corrupt entry for {key!r}: {exc}") from exc

    def set(self, key: str, value: Any, version: int) -> CacheEntry:
        cache = self._require_open()
        entry = CacheEntry(key=key, value=value, version=version)
        try:
            cache.set(self._make_key(key), entry.model_dump(), expire=self._ttl_seconds)
        except _DISK_ERRORS as exc:
            raise StorageError(f"Cannot write {key!r}: {exc}") from exc
        except _PICKLE_ERRORS as exc:
            raise StorageError(f"Cannot serialise value for {key!r}: {exc}") from exc
        return entry

    def delete(self, key: str) -> None:
        cache = self._require_open()
        try:
            cache.delete(self._make_key(key))
        except _DISK_ERRORS as exc:
            raise StorageError(f"Cannot delete {key!r}: {exc}") from exc

    def clear(self) -> None:
        """Remove all entries from the store."""
        cache = self._require_open()
        try:
            cache.clear()
        except _DISK_ERRORS as exc:
            raise StorageError(f"Cannot clear store at {self._directory}: {exc}") from exc

    def stats(self) -> dict[str, Any]:
        """Return store statistics.

        Returns:
            A ``dict`` with ``size`` (number of entries), ``directory``
            (str path) and ``ttl_seconds`` (int or ``None``).

        Raises:
            StorageError: If the store has been closed.
        """
        cache = self._require_open()
        return {
            "size": len(cache),
            "directory": str(self._directory / "entries"),
            "ttl_seconds": self._ttl_seconds,
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()
            self._cache = None

    def _require_open(self) -> diskcache.Cache:
        if self._cache is None:
            raise StorageError(f"Store at {self._directory} is closed")
        return self._cache

    def _make_key(self, key: str) -> str:
        """Hash *key* into a fixed-length store key."""
        return hashlib.sha256(key.encode()).hexdigest()
