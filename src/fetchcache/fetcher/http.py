"""Asynchronous HTTP fetcher backed by :mod:`httpx`.

:class:`HttpFetcher` treats a cache key as a URL path relative to the
configured ``base_url``. Each call sends a GET request, retries 5xx answers
and transport errors with exponential backoff, maps failures onto the
fetchcache error types, and decodes the body.

See Also:
    :class:`~fetchcache.models.FetcherConfig` for the settings it reads.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from fetchcache.exceptions import HttpStatusError, NetworkError
from fetchcache.fetcher.base import RemoteFetcher
from fetchcache.models import FetcherConfig
from fetchcache.output import get_output


class HttpFetcher(RemoteFetcher):
    """GET-only :class:`RemoteFetcher` for JSON APIs.

    Can be used as an async context manager, in which case one
    :class:`httpx.AsyncClient` is shared by every fetch. Used without it,
    the client is opened lazily on the first fetch and must be released
    with :meth:`aclose`.

    Args:
        config: Base URL, timeout, SSL verification, retries and extra
            headers.

    Example::

        async with HttpFetcher(FetcherConfig(base_url="https://api.example.com")) as f:
            users = await f.fetch("/users")
    """

    def __init__(self, config: Optional[FetcherConfig] = None) -> None:
        self._config = config or FetcherConfig()
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url or "",
                timeout=self._config.timeout,
                verify=self._config.verify_ssl,
                follow_redirects=True,
            )

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #

    async def fetch(self, key: str) -> Any:
        """Fetch *key* and return the decoded body.

        Args:
            key: URL path appended to ``base_url`` (or an absolute URL).

        Returns:
            The JSON-decoded body, the raw text when the body is not JSON,
            or ``None`` for an empty body.

        Raises:
            HttpStatusError: On a non-2xx status after all retries.
            NetworkError: On transport or timeout errors after all retries,
                and at once on redirect loops, undecodable bodies or an
                invalid URL.
        """
        await self.open()
        headers: dict[str, str] = {"Accept": "application/json"}
        headers.update(self._config.headers)

        response = await self._execute_with_retry(key, headers)
        if not response.is_success:
            raise HttpStatusError(
                response.status_code,
                f"HTTP {response.status_code} for {key}",
            )
        try:
            return extract_response_data(response)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Cannot decode response for {key}: {exc}") from exc

    async def _execute_with_retry(self, key: str, headers: dict[str, str]) -> httpx.Response:
        """Send the request, retrying 5xx answers and transport errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- call open() first"

        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.get(key, headers=headers)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Network error for {key}: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise NetworkError(
                    f"Fetching {key} failed after {max_retries + 1} attempts: {exc}"
                ) from exc
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                # Non-transport failures are not retried.
                raise NetworkError(f"Fetching {key} failed: {exc}") from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code} for {key}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise NetworkError(f"Fetching {key} failed after all retries")  # pragma: no cover


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. the
    response is HTML or plain text), returns the raw text. Returns
    ``None`` for responses with no content.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text
