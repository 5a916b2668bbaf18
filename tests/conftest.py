"""Shared test fixtures for fetchcache.

Provides a recording store, a scripted fetcher, config isolation and
output-state reset. These fixtures are discovered automatically by pytest.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import pytest

from fetchcache.exceptions import StorageError
from fetchcache.fetcher.base import RemoteFetcher
from fetchcache.models import CacheEntry
from fetchcache.output import OutputManager, reset_output, set_output
from fetchcache.store.memory import MemoryStore


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet, colourless OutputManager and drop it after the test."""
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


class SpyStore(MemoryStore):
    """MemoryStore that records every call and can be told to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str]] = []
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> Optional[CacheEntry]:
        self.calls.append(("get", key))
        if self.fail_reads:
            raise StorageError("disk unavailable")
        return super().get(key)

    def set(self, key: str, value: Any, version: int) -> CacheEntry:
        self.calls.append(("set", key))
        if self.fail_writes:
            raise StorageError("quota exceeded")
        return super().set(key, value, version)

    def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if self.fail_writes:
            raise StorageError("read-only store")
        super().delete(key)

    def seed(self, key: str, value: Any, version: int) -> None:
        """Store an entry without recording a call."""
        super().set(key, value, version)

    def ops(self, name: str) -> list[str]:
        return [key for op, key in self.calls if op == name]


class ScriptedFetcher(RemoteFetcher):
    """RemoteFetcher that returns canned payloads or raises a canned error.

    Set :attr:`gate` to an unset :class:`asyncio.Event` to hold every fetch
    until the test releases it; :attr:`started` is set once a fetch begins.
    """

    def __init__(self) -> None:
        self.payloads: dict[str, Any] = {}
        self.error: Optional[BaseException] = None
        self.calls: list[str] = []
        self.gate: Optional[asyncio.Event] = None
        self.started = asyncio.Event()

    async def fetch(self, key: str) -> Any:
        self.calls.append(key)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payloads.get(key, {"key": key})


@pytest.fixture
def spy_store() -> SpyStore:
    return SpyStore()


@pytest.fixture
def fetcher() -> ScriptedFetcher:
    return ScriptedFetcher()


@pytest.fixture
def other_fetcher() -> ScriptedFetcher:
    """A second, independent fetcher for tests that race two resolvers."""
    return ScriptedFetcher()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_CACHE_HOME at subdirectories of tmp_path,
    forces the XDG code path, clears FETCHCACHE_* variables and changes the
    working directory to tmp_path.
    """
    monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

    for var in ["FETCHCACHE_BASE_URL", "FETCHCACHE_POLICY", "FETCHCACHE_STORE"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
