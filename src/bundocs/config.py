"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import platformdirs

from bundocs.errors import ConfigError
from bundocs.source import detect_bun_version

APP_NAME = "bundocs"
DEFAULT_REPO_URL = "https://github.com/oven-sh/bun.git"
DEFAULT_SEARCH_LIMIT = 30
DEFAULT_LIST_LIMIT = 50
SCHEMA_VERSION = 1


def _get_default_cache_root() -> Path:
    """Cache root from the environment, falling back to the platform cache dir."""
    override = os.getenv("BUNDOCS_CACHE_DIR")
    if override:
        return Path(override).expanduser()
    return Path(platformdirs.user_cache_dir(APP_NAME))


def _get_default_version() -> str | None:
    return os.getenv("BUNDOCS_VERSION") or detect_bun_version()


@dataclass(slots=True)
class AppConfig:
    cache_root: Path | None = None
    version: str | None = None
    repo_url: str = DEFAULT_REPO_URL
    search_limit: int = DEFAULT_SEARCH_LIMIT
    list_limit: int = DEFAULT_LIST_LIMIT
    cache_ttl: float = 300.0
    schema_version: int = SCHEMA_VERSION

    def __post_init__(self) -> None:
        if self.cache_root is None:
            self.cache_root = _get_default_cache_root()
        self.cache_root = Path(self.cache_root)
        if self.version is None:
            self.version = _get_default_version()

    @property
    def version_dir(self) -> Path:
        if not self.version:
            raise ConfigError(
                "Bun version is unknown; set BUNDOCS_VERSION or install bun"
            )
        return Path(self.cache_root) / self.version

    @property
    def docs_dir(self) -> Path:
        return self.version_dir / "docs"

    @property
    def db_path(self) -> Path:
        return self.version_dir / "search.db"
