"""In-process store backed by a plain dict."""

from __future__ import annotations

import copy
from typing import Any, Optional

from fetchcache.exceptions import StorageError
from fetchcache.models import CacheEntry
from fetchcache.store.base import LocalStore


class MemoryStore(LocalStore):
    """Dict-backed :class:`LocalStore` that lives as long as the process.

    Values are deep-copied on the way in and on the way out, so callers
    never hold a reference into the store.

    Args:
        max_entries: Optional quota. Writing a *new* key once the store holds
            this many entries raises :class:`StorageError`, the same way a
            browser's storage quota rejects writes. Overwriting an existing
            key is always allowed.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return entry.model_copy(deep=True)

    def set(self, key: str, value: Any, version: int) -> CacheEntry:
        if (
            self._max_entries is not None
            and key not in self._entries
            and len(self._entries) >= self._max_entries
        ):
            raise StorageError(
                f"Store quota exceeded ({self._max_entries} entries), cannot add {key!r}"
            )
        try:
            owned = copy.deepcopy(value)
        except (copy.Error, TypeError) as exc:
            raise StorageError(f"Cannot copy value for {key!r}: {exc}") from exc
        entry = CacheEntry(key=key, value=owned, version=version)
        self._entries[key] = entry
        return entry.model_copy(deep=True)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
