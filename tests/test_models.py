"""Tests for fetchcache.models."""

from __future__ import annotations

from datetime import timezone

import pytest
from pydantic import ValidationError

from fetchcache.exceptions import HttpStatusError
from fetchcache.models import CacheEntry, PolicyKind, ResolutionResult, ResultSource


class TestPolicyKind:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("no_cache", PolicyKind.NO_CACHE),
            ("NoCache", PolicyKind.NO_CACHE),
            ("no-cache", PolicyKind.NO_CACHE),
            ("PreferRemote", PolicyKind.PREFER_REMOTE),
            ("PREFER_LOCAL", PolicyKind.PREFER_LOCAL),
            ("LocalThenRemote", PolicyKind.LOCAL_THEN_REMOTE),
            (PolicyKind.PREFER_LOCAL, PolicyKind.PREFER_LOCAL),
        ],
    )
    def test_parse(self, text, expected) -> None:
        assert PolicyKind.parse(text) is expected

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown cache policy"):
            PolicyKind.parse("reload")


class TestCacheEntry:
    def test_defaults(self) -> None:
        entry = CacheEntry(key="k")
        assert entry.version == 1
        assert entry.fetched_at.tzinfo == timezone.utc

    def test_version_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CacheEntry(key="k", version=0)


class TestResolutionResult:
    def test_ok_and_from_cache(self) -> None:
        result = ResolutionResult(value=1, source=ResultSource.LOCAL, stale=True)
        assert result.ok
        assert result.from_cache

    def test_error_result(self) -> None:
        result = ResolutionResult(error=HttpStatusError(418))
        assert not result.ok
        assert not result.from_cache
        assert result.to_dict()["error"] == {"kind": "http_status", "message": "HTTP 418"}
