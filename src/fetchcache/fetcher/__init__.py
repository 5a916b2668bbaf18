"""Remote fetchers for fetchcache.

:class:`RemoteFetcher` is the contract the resolver depends on;
:class:`HttpFetcher` implements it on top of :class:`httpx.AsyncClient`.
"""

from fetchcache.fetcher.base import RemoteFetcher
from fetchcache.fetcher.http import HttpFetcher, extract_response_data

__all__ = ["RemoteFetcher", "HttpFetcher", "extract_response_data"]
