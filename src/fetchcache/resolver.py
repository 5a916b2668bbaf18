"""Policy-driven resolution between a remote fetcher and a local store.

:class:`CachePolicyResolver` decides, per call, whether a key is served from
the :class:`~fetchcache.store.LocalStore`, fetched through the
:class:`~fetchcache.fetcher.RemoteFetcher`, or both, and whether the fetched
value is written back. Four policies are supported (see
:class:`~fetchcache.models.PolicyKind`):

* ``NO_CACHE`` -- fetch; the store is never read or written.
* ``PREFER_REMOTE`` -- fetch; on failure serve the stored copy flagged stale.
  With write-through enabled a successful fetch is stored at the current
  stored version (1 for a new key).
* ``PREFER_LOCAL`` -- serve the stored copy; on a miss fetch and store at
  version 1.
* ``LOCAL_THEN_REMOTE`` -- serve the stored copy while its version is at
  least ``expected_version``; otherwise fetch and store at
  ``expected_version``, falling back to the stored copy (stale) on failure.

``resolve`` never raises for fetch or storage failures. They are attached
to :attr:`~fetchcache.models.ResolutionResult.error` instead, except for a
failed write, which only sets ``persisted=False``. Task cancellation is the
one thing that propagates: cancelling the awaiting task raises
:class:`asyncio.CancelledError` at the fetch and nothing is written.

The resolver keeps no data between calls. Concurrent calls for the same key
race on the store (last write wins) unless ``serialize_per_key`` is set.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional, cast

from fetchcache.exceptions import (
    FetchcacheError,
    FetchError,
    InvalidUsageError,
    NetworkError,
    NoDataAvailable,
    StorageError,
)
from fetchcache.fetcher.base import RemoteFetcher
from fetchcache.models import CacheEntry, PolicyKind, ResolutionResult, ResultSource
from fetchcache.output import get_output
from fetchcache.store.base import LocalStore


class _KeyLocks:
    """Per-key :class:`asyncio.Lock` registry that forgets idle keys."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class CachePolicyResolver:
    """Stateless resolver implementing the four cache policies.

    Args:
        store: Local persistence, read and written synchronously.
        fetcher: Remote source, awaited for every fetch.
        default_policy: Policy used when :meth:`resolve` is called without one.
        write_through: Store successful ``PREFER_REMOTE`` fetches.
        serialize_per_key: Run the read-decide-write sequence of calls for
            the same key one at a time.

    Example::

        resolver = CachePolicyResolver(DiskStore(cache_dir), HttpFetcher(config))
        result = await resolver.resolve("/config", PolicyKind.LOCAL_THEN_REMOTE, 3)
        if result.ok:
            use(result.value)
    """

    def __init__(
        self,
        store: LocalStore,
        fetcher: RemoteFetcher,
        default_policy: PolicyKind | str = PolicyKind.PREFER_REMOTE,
        write_through: bool = True,
        serialize_per_key: bool = False,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._default_policy = PolicyKind.parse(default_policy)
        self._write_through = write_through
        self._locks: Optional[_KeyLocks] = _KeyLocks() if serialize_per_key else None
        self._handlers = {
            PolicyKind.NO_CACHE: self._no_cache,
            PolicyKind.PREFER_REMOTE: self._prefer_remote,
            PolicyKind.PREFER_LOCAL: self._prefer_local,
            PolicyKind.LOCAL_THEN_REMOTE: self._local_then_remote,
        }

    @property
    def store(self) -> LocalStore:
        return self._store

    @property
    def fetcher(self) -> RemoteFetcher:
        return self._fetcher

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def resolve(
        self,
        key: str,
        policy: PolicyKind | str | None = None,
        expected_version: Optional[int] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> ResolutionResult:
        """Resolve *key* according to *policy*.

        Args:
            key: Cache key, passed unchanged to the store and the fetcher.
            policy: A :class:`PolicyKind` or its name. Defaults to the
                resolver's ``default_policy``.
            expected_version: Minimum acceptable stored version. Required by
                ``LOCAL_THEN_REMOTE``, ignored by the other policies. It must
                be an ``int`` of at least 1, the lowest version a store
                accepts; ``None``, ``bool`` or a smaller value yields an
                :class:`InvalidUsageError` result without any I/O.
            cancel: Optional event the caller sets to abandon the call. It is
                checked immediately before every store write; once set, no
                write happens and the result reports ``persisted=False``.

        Returns:
            The :class:`ResolutionResult`. Failures are reported through its
            ``error`` field, never raised.
        """
        try:
            kind = self._default_policy if policy is None else PolicyKind.parse(policy)
        except ValueError as exc:
            return ResolutionResult(error=InvalidUsageError(str(exc)))

        if kind == PolicyKind.LOCAL_THEN_REMOTE:
            usage_error = _check_expected_version(expected_version)
            if usage_error is not None:
                return ResolutionResult(error=usage_error)

        handler = self._handlers[kind]
        if self._locks is None:
            return await handler(key, expected_version, cancel)
        async with self._locks.hold(key):
            return await handler(key, expected_version, cancel)

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Return the stored entry for *key* without fetching, or ``None``."""
        return self._read(key)

    def invalidate(self, key: str) -> bool:
        """Delete the stored entry for *key*.

        Returns:
            ``True`` if the store accepted the delete, ``False`` if it
            raised :class:`StorageError`.
        """
        try:
            self._store.delete(key)
        except StorageError as exc:
            get_output().warning(f"Could not invalidate {key}: {exc}")
            return False
        get_output().debug(f"Invalidated {key}")
        return True

    # ------------------------------------------------------------------ #
    # Policies
    # ------------------------------------------------------------------ #

    async def _no_cache(
        self, key: str, expected_version: Optional[int], cancel: Optional[asyncio.Event]
    ) -> ResolutionResult:
        value, fetch_error = await self._fetch(key)
        if fetch_error is not None:
            return ResolutionResult(error=fetch_error)
        get_output().debug(f"no_cache {key}: fetched")
        return ResolutionResult(value=value, source=ResultSource.REMOTE)

    async def _prefer_remote(
        self, key: str, expected_version: Optional[int], cancel: Optional[asyncio.Event]
    ) -> ResolutionResult:
        value, fetch_error = await self._fetch(key)
        if fetch_error is None:
            get_output().debug(f"prefer_remote {key}: fetched")
            if not self._write_through:
                return ResolutionResult(value=value, source=ResultSource.REMOTE)
            current = self._read(key)
            version = current.version if current is not None else 1
            persisted = self._write(key, value, version, cancel)
            return ResolutionResult(
                value=value,
                source=ResultSource.REMOTE,
                persisted=persisted,
                version=version if persisted else None,
            )

        entry = self._read(key)
        if entry is not None:
            get_output().warning(f"Serving stale {key} (v{entry.version}): {fetch_error}")
            return _local(entry, stale=True)
        return ResolutionResult(error=_no_data(key, fetch_error))

    async def _prefer_local(
        self, key: str, expected_version: Optional[int], cancel: Optional[asyncio.Event]
    ) -> ResolutionResult:
        entry = self._read(key)
        if entry is not None:
            get_output().debug(f"prefer_local {key}: hit v{entry.version}")
            return _local(entry)

        get_output().debug(f"prefer_local {key}: miss")
        value, fetch_error = await self._fetch(key)
        if fetch_error is not None:
            return ResolutionResult(error=_no_data(key, fetch_error))
        persisted = self._write(key, value, 1, cancel)
        return ResolutionResult(
            value=value,
            source=ResultSource.REMOTE,
            persisted=persisted,
            version=1 if persisted else None,
        )

    async def _local_then_remote(
        self, key: str, expected_version: Optional[int], cancel: Optional[asyncio.Event]
    ) -> ResolutionResult:
        # resolve() has already validated expected_version.
        wanted = cast(int, expected_version)
        entry = self._read(key)
        if entry is not None and entry.version >= wanted:
            get_output().debug(
                f"local_then_remote {key}: v{entry.version} >= v{wanted}"
            )
            return _local(entry)

        get_output().debug(
            f"local_then_remote {key}: "
            + ("miss" if entry is None else f"v{entry.version} < v{wanted}")
        )
        value, fetch_error = await self._fetch(key)
        if fetch_error is None:
            persisted = self._write(key, value, wanted, cancel)
            return ResolutionResult(
                value=value,
                source=ResultSource.REMOTE,
                persisted=persisted,
                version=wanted if persisted else None,
            )

        if entry is not None:
            get_output().warning(f"Serving stale {key} (v{entry.version}): {fetch_error}")
            return _local(entry, stale=True)
        return ResolutionResult(error=_no_data(key, fetch_error))

    # ------------------------------------------------------------------ #
    # Store and fetcher access
    # ------------------------------------------------------------------ #

    async def _fetch(self, key: str) -> tuple[Any, Optional[FetchError]]:
        """Await the fetcher, turning failures into a returned error."""
        try:
            return await self._fetcher.fetch(key), None
        except FetchError as exc:
            get_output().debug(f"Fetch failed for {key}: {exc}")
            return None, exc
        except (asyncio.TimeoutError, TimeoutError, OSError) as exc:
            get_output().debug(f"Fetch failed for {key}: {exc!r}")
            error = NetworkError(f"Fetching {key} failed: {exc!r}")
            error.__cause__ = exc
            return None, error

    def _read(self, key: str) -> Optional[CacheEntry]:
        """Read *key*, treating a storage failure as a miss."""
        try:
            return self._store.get(key)
        except StorageError as exc:
            get_output().warning(f"Could not read {key} from the store: {exc}")
            return None

    def _write(
        self, key: str, value: Any, version: int, cancel: Optional[asyncio.Event]
    ) -> bool:
        """Write *key* unless the call was abandoned. Returns whether it persisted."""
        if cancel is not None and cancel.is_set():
            get_output().debug(f"Skipping write of {key}: resolution was cancelled")
            return False
        try:
            self._store.set(key, value, version)
        except StorageError as exc:
            get_output().warning(f"Could not persist {key} (v{version}): {exc}")
            return False
        get_output().debug(f"Stored {key} at v{version}")
        return True


def _local(entry: CacheEntry, stale: bool = False) -> ResolutionResult:
    return ResolutionResult(
        value=entry.value,
        source=ResultSource.LOCAL,
        stale=stale,
        version=entry.version,
    )


def _no_data(key: str, cause: FetchError) -> NoDataAvailable:
    error = NoDataAvailable(f"No data available for {key}: {cause}")
    error.__cause__ = cause
    return error


def _check_expected_version(expected_version: Any) -> Optional[FetchcacheError]:
    if expected_version is None:
        return InvalidUsageError("local_then_remote requires an expected_version")
    if isinstance(expected_version, bool) or not isinstance(expected_version, int):
        return InvalidUsageError(
            f"expected_version must be an integer, got {expected_version!r}"
        )
    if expected_version < 1:
        return InvalidUsageError(f"expected_version must be >= 1, got {expected_version}")
    return None
