"""Abstract remote fetcher contract consumed by the resolver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class RemoteFetcher(ABC):
    """Performs the network request for a cache key.

    Implementations raise :class:`~fetchcache.exceptions.NetworkError` for
    transport failures (timeouts included) and
    :class:`~fetchcache.exceptions.HttpStatusError` for non-2xx answers.
    Any retry policy lives here, never in the resolver.
    """

    @abstractmethod
    async def fetch(self, key: str) -> Any:
        """Fetch and return the payload for *key*."""

    async def open(self) -> None:
        """Acquire transport resources. The default implementation does nothing."""

    async def aclose(self) -> None:
        """Release transport resources. The default implementation does nothing."""

    async def __aenter__(self) -> RemoteFetcher:
        await self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
