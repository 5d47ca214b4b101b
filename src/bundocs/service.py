"""Query façade shared by the MCP, HTTP and CLI surfaces.

A :class:`DocsContext` owns everything one corpus needs at query time: the
resource catalog, the open full-text store and the cached searcher.
:class:`DocsService` puts the four operations on top of it. Its ``*_results``
style methods raise typed errors; the plain ``search``/``grep``/``read``/
``list`` methods are the single place where those errors become a
:class:`~bundocs.models.ToolResult` with ``is_error`` set.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

from bundocs.cache import DEFAULT_TTL_SECONDS, TTLCache
from bundocs.config import DEFAULT_LIST_LIMIT, DEFAULT_SEARCH_LIMIT, SCHEMA_VERSION, AppConfig
from bundocs.errors import (
    BundocsError,
    DocumentNotFoundError,
    InvalidSlugError,
    NotADocumentError,
)
from bundocs.index.grep import grep_documents
from bundocs.index.indexer import IndexStats, Indexer
from bundocs.index.search import Searcher
from bundocs.index.storage import SQLiteSearchStore
from bundocs.models import URI_SCHEME, DocumentEntry, IndexedResource, PageInfo, SearchResult, ToolResult
from bundocs.navigation import parse_navigation
from bundocs.source import initialize_docs_dir
from bundocs.utils.files import read_text
from bundocs.utils.text import select_lines, strip_frontmatter

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DocsContext:
    docs_dir: Path
    catalog: Dict[str, IndexedResource]
    store: SQLiteSearchStore
    searcher: Searcher
    stats: IndexStats
    scheme: str = URI_SCHEME

    def close(self) -> None:
        self.store.close()


def open_context(
    docs_dir: Path,
    db_path: Path,
    *,
    pages: Mapping[str, PageInfo] | None = None,
    rebuild: bool = False,
    schema_version: int = SCHEMA_VERSION,
    cache_ttl: float = DEFAULT_TTL_SECONDS,
) -> DocsContext:
    """Parse navigation, open the store and build the catalog for ``docs_dir``.

    ``rebuild`` repopulates the full-text store even when it already has rows.
    """
    if pages is None:
        pages = parse_navigation(docs_dir)

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    store = SQLiteSearchStore(db_path, schema_version=schema_version)
    try:
        build = Indexer(docs_dir, store).build(pages, force=rebuild)
    except Exception:
        store.close()
        raise

    cache: TTLCache[List[SearchResult]] = TTLCache(cache_ttl)
    return DocsContext(
        docs_dir=Path(docs_dir),
        catalog=build.catalog,
        store=store,
        searcher=Searcher(store, cache),
        stats=build.stats,
    )


def normalize_slug(value: str) -> str:
    """Turn caller input such as ``/runtime/bun-apis.md`` into ``runtime/bun-apis``."""
    slug = value.strip()
    if not slug:
        raise InvalidSlugError("Document slug is required")
    if "://" in slug:
        raise InvalidSlugError("Use documentation slugs like runtime/bun-apis")
    slug = slug.strip("/")
    if slug.endswith(".md"):
        slug = slug[: -len(".md")]
    if not slug:
        raise InvalidSlugError("Document slug is required")
    return slug


def _to_json(items: List[Any]) -> str:
    return json.dumps([asdict(item) for item in items], indent=2, ensure_ascii=False)


class DocsService:
    """The four documentation tools."""

    def __init__(
        self,
        context: DocsContext,
        *,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        list_limit: int = DEFAULT_LIST_LIMIT,
    ) -> None:
        self.context = context
        self.search_limit = search_limit
        self.list_limit = list_limit

    @classmethod
    def from_config(cls, config: AppConfig, *, rebuild: bool = False) -> "DocsService":
        """Fetch the docs if needed, index them and wrap the result."""
        docs_dir = initialize_docs_dir(config)
        context = open_context(
            docs_dir,
            config.db_path,
            rebuild=rebuild,
            schema_version=config.schema_version,
            cache_ttl=config.cache_ttl,
        )
        return cls(context, search_limit=config.search_limit, list_limit=config.list_limit)

    def close(self) -> None:
        self.context.close()

    @staticmethod
    def _clamp(limit: int | None, default: int) -> int:
        return default if limit is None else max(1, limit)

    def search_results(
        self, query: str, path: str | None = None, limit: int | None = None
    ) -> List[SearchResult]:
        return self.context.searcher.search(
            query, path=path or "", limit=self._clamp(limit, self.search_limit)
        )

    def grep_results(
        self,
        pattern: str,
        path: str | None = None,
        limit: int | None = None,
        flags: str | None = None,
    ) -> List[SearchResult]:
        return grep_documents(
            self.context.catalog,
            pattern,
            path=path or "",
            limit=self._clamp(limit, self.search_limit),
            flags=flags,
        )

    def read_document(
        self, path: str, offset: int | None = None, max_lines: int | None = None
    ) -> str:
        slug = normalize_slug(path)
        resource = self.context.catalog.get(f"{self.context.scheme}{slug}")
        if resource is None:
            raise DocumentNotFoundError(path)
        if not resource.is_document:
            raise NotADocumentError(path)
        content = strip_frontmatter(read_text(resource.file_path))
        return select_lines(content, offset or 0, max_lines)

    def list_documents(
        self, category: str | None = None, limit: int | None = None
    ) -> List[DocumentEntry]:
        limit = self._clamp(limit, self.list_limit)
        entries: List[DocumentEntry] = []
        for resource in self.context.catalog.values():
            if resource.is_directory:
                continue
            if category and not resource.slug.startswith(category):
                continue
            entries.append(
                DocumentEntry(uri=resource.uri, title=resource.name, description=resource.description)
            )
            if len(entries) >= limit:
                break
        return entries

    def _guard(self, label: str, func: Callable[[], str]) -> ToolResult:
        try:
            return ToolResult(text=func())
        except (BundocsError, OSError, ValueError) as exc:
            LOGGER.debug("%s error: %s", label, exc)
            return ToolResult(text=f"{label} error: {exc}", is_error=True)
        except Exception as exc:
            LOGGER.exception("Unexpected %s failure", label.lower())
            return ToolResult(text=f"{label} error: {exc}", is_error=True)

    def search(self, query: str, path: str | None = None, limit: int | None = None) -> ToolResult:
        return self._guard("Search", lambda: _to_json(self.search_results(query, path, limit)))

    def grep(
        self,
        pattern: str,
        path: str | None = None,
        limit: int | None = None,
        flags: str | None = None,
    ) -> ToolResult:
        return self._guard("Grep", lambda: _to_json(self.grep_results(pattern, path, limit, flags)))

    def read(self, path: str, offset: int | None = None, max_lines: int | None = None) -> ToolResult:
        return self._guard("Read", lambda: self.read_document(path, offset, max_lines))

    def list(self, category: str | None = None, limit: int | None = None) -> ToolResult:
        return self._guard("List", lambda: _to_json(self.list_documents(category, limit)))
