"""Tests for AppConfig defaults."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from bundocs.config import DEFAULT_LIST_LIMIT, DEFAULT_SEARCH_LIMIT, AppConfig
from bundocs.errors import ConfigError


def test_explicit_values(tmp_path: Path) -> None:
    config = AppConfig(cache_root=tmp_path, version="1.2.3")

    assert config.version_dir == tmp_path / "1.2.3"
    assert config.docs_dir == tmp_path / "1.2.3" / "docs"
    assert config.db_path == tmp_path / "1.2.3" / "search.db"
    assert config.search_limit == DEFAULT_SEARCH_LIMIT
    assert config.list_limit == DEFAULT_LIST_LIMIT


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUNDOCS_CACHE_DIR", str(tmp_path))
    monkeypatch.setenv("BUNDOCS_VERSION", "1.0.0")

    config = AppConfig()

    assert config.cache_root == tmp_path
    assert config.version == "1.0.0"


def test_version_from_bun_binary(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BUNDOCS_VERSION", raising=False)

    with patch("bundocs.config.detect_bun_version", return_value="1.1.30"):
        config = AppConfig(cache_root=tmp_path)

    assert config.version == "1.1.30"


def test_platform_cache_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BUNDOCS_CACHE_DIR", raising=False)

    with patch("bundocs.config.platformdirs.user_cache_dir", return_value="/var/cache/bundocs"):
        config = AppConfig(version="1.2.3")

    assert config.cache_root == Path("/var/cache/bundocs")


def test_unknown_version(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BUNDOCS_VERSION", raising=False)

    with patch("bundocs.config.detect_bun_version", return_value=None):
        config = AppConfig(cache_root=tmp_path)

    with pytest.raises(ConfigError, match="BUNDOCS_VERSION"):
        _ = config.docs_dir
