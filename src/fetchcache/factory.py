"""Factories that build stores, fetchers and resolvers from configuration."""

from __future__ import annotations

from typing import Optional

from fetchcache.exceptions import ConfigError
from fetchcache.fetcher.http import HttpFetcher
from fetchcache.models import FetcherConfig, GlobalConfig, StoreConfig
from fetchcache.resolver import CachePolicyResolver
from fetchcache.store.base import LocalStore


def create_store(config: Optional[StoreConfig] = None) -> LocalStore:
    """Instantiate the configured store backend.

    Args:
        config: Store settings. Defaults to a disk store under
            :func:`~fetchcache.config.get_cache_dir`.

    Raises:
        ConfigError: If the backend is unknown.
    """
    config = config or StoreConfig()

    if config.backend == "memory":
        from fetchcache.store.memory import MemoryStore

        return MemoryStore(max_entries=config.max_entries)

    if config.backend == "disk":
        from fetchcache.config import get_cache_dir
        from fetchcache.store.disk import DiskStore

        directory = config.directory or get_cache_dir()
        return DiskStore(directory, ttl_seconds=config.ttl_seconds)

    raise ConfigError(f"Unsupported store backend: {config.backend!r}")


def create_fetcher(config: Optional[FetcherConfig] = None) -> HttpFetcher:
    """Instantiate an :class:`HttpFetcher` from fetcher settings."""
    return HttpFetcher(config or FetcherConfig())


def create_resolver(config: Optional[GlobalConfig] = None) -> CachePolicyResolver:
    """Build a resolver with its store and fetcher from *config*.

    Args:
        config: Effective configuration. When ``None``,
            :func:`~fetchcache.config.resolve_config` is consulted.

    Example::

        resolver = create_resolver()
        async with resolver.fetcher:
            result = await resolver.resolve("/users")
    """
    if config is None:
        from fetchcache.config import resolve_config

        config = resolve_config()

    return CachePolicyResolver(
        store=create_store(config.store),
        fetcher=create_fetcher(config.fetcher),
        default_policy=config.resolver.default_policy,
        write_through=config.resolver.write_through,
        serialize_per_key=config.resolver.serialize_per_key,
    )
