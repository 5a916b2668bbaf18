"""Canonical models shared across all fetchcache modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`StoreConfig`, :class:`FetcherConfig`, :class:`ResolverConfig`
    and :class:`GlobalConfig`.

**Cache models** -- produced and consumed by the resolver and its stores:
    :class:`PolicyKind`, :class:`ResultSource`, :class:`CacheEntry` and
    :class:`ResolutionResult`.

Pydantic v2 models are used for everything that is persisted.
:class:`ResolutionResult` is a plain dataclass because it carries a live
exception instance back to the caller and is never serialised as-is.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from fetchcache.exceptions import FetchcacheError


# --- Policies ---


class PolicyKind(str, enum.Enum):
    """Named strategies governing how the remote and local sources are consulted.

    * ``NO_CACHE`` -- always fetch, never touch the store.
    * ``PREFER_REMOTE`` -- fetch, fall back to the stored copy on failure.
    * ``PREFER_LOCAL`` -- serve the stored copy, fetch only on a miss.
    * ``LOCAL_THEN_REMOTE`` -- serve the stored copy while its version is
      current, fetch when it is older than the expected version.
    """

    NO_CACHE = "no_cache"
    PREFER_REMOTE = "prefer_remote"
    PREFER_LOCAL = "prefer_local"
    LOCAL_THEN_REMOTE = "local_then_remote"

    @classmethod
    def parse(cls, value: PolicyKind | str) -> PolicyKind:
        """Coerce *value* into a :class:`PolicyKind`.

        Accepts an existing member, a value (``"prefer_local"``), a member
        name (``"PREFER_LOCAL"``) or the CamelCase spelling
        (``"PreferLocal"``).

        Raises:
            ValueError: If *value* does not name a policy.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        normalised = "".join(
            f"_{ch.lower()}" if ch.isupper() and i else ch.lower()
            for i, ch in enumerate(text)
        ).replace("-", "_").replace("__", "_")
        for member in cls:
            if text.lower() == member.value or normalised == member.value:
                return member
        raise ValueError(f"Unknown cache policy: {value!r}")


class ResultSource(str, enum.Enum):
    """Where the value of a :class:`ResolutionResult` came from."""

    REMOTE = "remote"
    LOCAL = "local"
    NONE = "none"


# --- Cache entries ---


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    """A single stored value owned by a :class:`~fetchcache.store.LocalStore`.

    Entries are replaced whole: a store never updates the value without the
    version or vice versa.

    Attributes:
        key: The key the entry is stored under.
        value: Opaque payload, typically the decoded JSON body of a response.
        version: Integer tag compared by ``LOCAL_THEN_REMOTE``.
        fetched_at: UTC time the value was written.
    """

    key: str
    value: Any = None
    version: int = Field(default=1, ge=1)
    fetched_at: datetime = Field(default_factory=_utcnow)


@dataclass
class ResolutionResult:
    """Outcome of a single :meth:`~fetchcache.resolver.CachePolicyResolver.resolve` call.

    Attributes:
        value: The resolved payload, or ``None`` when nothing was found.
        source: Where *value* came from.
        error: The tagged failure, or ``None`` on success. A stale fallback
            is a success and carries no error.
        stale: ``True`` when *value* was served from the store because the
            remote source failed.
        persisted: ``None`` when no write was attempted, otherwise whether
            the fetched value reached the store.
        version: Version of the stored entry that backs *value*, if any.
    """

    value: Any = None
    source: ResultSource = ResultSource.NONE
    error: Optional[FetchcacheError] = None
    stale: bool = False
    persisted: Optional[bool] = None
    version: Optional[int] = None

    @property
    def ok(self) -> bool:
        """Whether a value was resolved."""
        return self.error is None

    @property
    def from_cache(self) -> bool:
        """Whether the value was served from the local store."""
        return self.source == ResultSource.LOCAL

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible summary, used by the output layer."""
        return {
            "value": self.value,
            "source": self.source.value,
            "stale": self.stale,
            "persisted": self.persisted,
            "version": self.version,
            "error": None
            if self.error is None
            else {"kind": self.error.kind, "message": str(self.error)},
        }


# --- Configuration ---


class StoreConfig(BaseModel):
    """Local store settings stored in :class:`GlobalConfig`."""

    backend: Literal["disk", "memory"] = Field(
        default="disk", description="Store backend: disk or memory"
    )
    directory: Optional[str] = Field(
        default=None, description="Disk store root (defaults to the XDG cache dir)"
    )
    ttl_seconds: Optional[int] = Field(
        default=None, description="Expire disk entries after this many seconds"
    )
    max_entries: Optional[int] = Field(
        default=None, description="Reject new keys beyond this count (memory backend)"
    )


class FetcherConfig(BaseModel):
    """HTTP fetcher settings stored in :class:`GlobalConfig`."""

    base_url: Optional[str] = Field(
        default=None, description="Base URL that cache keys are appended to"
    )
    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=0, description="Max retry attempts")
    headers: dict[str, str] = Field(default_factory=dict)


class ResolverConfig(BaseModel):
    """Resolver behaviour stored in :class:`GlobalConfig`."""

    default_policy: PolicyKind = PolicyKind.PREFER_REMOTE
    serialize_per_key: bool = Field(
        default=False, description="Run calls for the same key one at a time"
    )
    write_through: bool = Field(
        default=True, description="Store successful PREFER_REMOTE fetches"
    )

    @field_validator("default_policy", mode="before")
    @classmethod
    def _parse_policy(cls, value: Any) -> PolicyKind:
        return PolicyKind.parse(value)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/fetchcache/config.json``.

    Loaded and saved by :func:`~fetchcache.config.load_global_config` and
    :func:`~fetchcache.config.save_global_config`. See
    :func:`~fetchcache.config.resolve_config` for the precedence chain.
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
