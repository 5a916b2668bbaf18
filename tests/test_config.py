"""Tests for fetchcache.config — XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from fetchcache.config import (
    _atomic_write,
    get_cache_dir,
    get_config_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from fetchcache.exceptions import ConfigError
from fetchcache.models import GlobalConfig, PolicyKind, StoreConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "fetchcache"
        assert result.is_dir()

    def test_cache_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_cache"
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CACHE_HOME", str(custom))

        result = get_cache_dir()
        assert result == custom / "fetchcache"
        assert result.is_dir()

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".fetchcache"
        assert get_cache_dir() == tmp_path / ".fetchcache" / "cache"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"a": 1}')
        assert target.read_text(encoding="utf-8") == '{"a": 1}'

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        with patch("fetchcache.config.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError):
                _atomic_write(target, "data")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.resolver.default_policy == PolicyKind.PREFER_REMOTE
        assert config.store.backend == "disk"

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        config = GlobalConfig()
        config.store = StoreConfig(backend="memory", max_entries=10)
        config.resolver.default_policy = PolicyKind.PREFER_LOCAL
        save_global_config(config)

        loaded = load_global_config()
        assert loaded.store.backend == "memory"
        assert loaded.store.max_entries == 10
        assert loaded.resolver.default_policy == PolicyKind.PREFER_LOCAL

    def test_saved_policy_is_plain_string(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig())
        raw = json.loads((get_config_dir() / "config.json").read_text(encoding="utf-8"))
        assert raw["resolver"]["default_policy"] == "prefer_remote"

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"store": {"backend": "floppy"}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_camel_case_policy_is_accepted(self, isolated_config: Path) -> None:
        _write_json(
            get_config_dir() / "config.json",
            {"resolver": {"default_policy": "LocalThenRemote"}},
        )
        assert load_global_config().resolver.default_policy == PolicyKind.LOCAL_THEN_REMOTE


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_load_returns_none_when_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_load_valid_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "fetchcache.json", {"fetcher": {"timeout": 5}})
        assert load_project_config() == {"fetcher": {"timeout": 5}}

    def test_non_object_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "fetchcache.json", [1, 2])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == GlobalConfig()

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig.model_validate({"fetcher": {"timeout": 10, "max_retries": 2}}))
        _write_json(isolated_config / "fetchcache.json", {"fetcher": {"timeout": 3}})

        config = resolve_config()
        assert config.fetcher.timeout == 3
        assert config.fetcher.max_retries == 2

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(
            isolated_config / "fetchcache.json",
            {"fetcher": {"base_url": "https://project.example.com"}},
        )
        monkeypatch.setenv("FETCHCACHE_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("FETCHCACHE_POLICY", "PreferLocal")
        monkeypatch.setenv("FETCHCACHE_STORE", "memory")

        config = resolve_config()
        assert config.fetcher.base_url == "https://env.example.com"
        assert config.resolver.default_policy == PolicyKind.PREFER_LOCAL
        assert config.store.backend == "memory"

    def test_arguments_override_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FETCHCACHE_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("FETCHCACHE_POLICY", "no_cache")

        config = resolve_config(base_url="https://arg.example.com", policy=PolicyKind.PREFER_LOCAL)
        assert config.fetcher.base_url == "https://arg.example.com"
        assert config.resolver.default_policy == PolicyKind.PREFER_LOCAL

    def test_invalid_env_policy_raises_config_error(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FETCHCACHE_POLICY", "only-if-cached")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config()

    def test_does_not_touch_real_home(self, isolated_config: Path) -> None:
        resolve_config()
        assert Path(os.environ["XDG_CONFIG_HOME"]).is_relative_to(isolated_config)
