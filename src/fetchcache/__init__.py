"""fetchcache -- versioned client-side response caching with named policies.

A :class:`CachePolicyResolver` sits between a remote source
(:class:`~fetchcache.fetcher.RemoteFetcher`) and a local persistent store
(:class:`~fetchcache.store.LocalStore`) and decides per call which of them
to consult::

    from fetchcache import PolicyKind, create_resolver

    resolver = create_resolver()
    async with resolver.fetcher:
        result = await resolver.resolve("/settings", PolicyKind.LOCAL_THEN_REMOTE, 4)

Modules:
    resolver: The policy resolver.
    store: Local store contract and the memory and disk backends.
    fetcher: Remote fetcher contract and the httpx-based HTTP fetcher.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    factory: Builds stores, fetchers and resolvers from configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics and result rendering with Rich.
"""

from fetchcache.exceptions import (
    ConfigError,
    FetchcacheError,
    FetchError,
    HttpStatusError,
    InvalidUsageError,
    NetworkError,
    NoDataAvailable,
    StorageError,
)
from fetchcache.factory import create_fetcher, create_resolver, create_store
from fetchcache.fetcher import HttpFetcher, RemoteFetcher
from fetchcache.models import CacheEntry, PolicyKind, ResolutionResult, ResultSource
from fetchcache.resolver import CachePolicyResolver
from fetchcache.store import DiskStore, LocalStore, MemoryStore

__version__ = "0.1.0"

__all__ = [
    "CachePolicyResolver",
    "PolicyKind",
    "ResultSource",
    "CacheEntry",
    "ResolutionResult",
    "LocalStore",
    "MemoryStore",
    "DiskStore",
    "RemoteFetcher",
    "HttpFetcher",
    "create_store",
    "create_fetcher",
    "create_resolver",
    "FetchcacheError",
    "FetchError",
    "NetworkError",
    "HttpStatusError",
    "StorageError",
    "NoDataAvailable",
    "InvalidUsageError",
    "ConfigError",
]
