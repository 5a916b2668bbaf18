"""Local persistence backends for fetchcache.

:class:`LocalStore` is the contract the resolver depends on;
:class:`MemoryStore` keeps entries in a dict and :class:`DiskStore`
persists them with :mod:`diskcache`.
"""

from fetchcache.store.base import LocalStore
from fetchcache.store.disk import DiskStore
from fetchcache.store.memory import MemoryStore

__all__ = ["LocalStore", "MemoryStore", "DiskStore"]
