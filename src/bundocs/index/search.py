"""Full-text search interface."""

from __future__ import annotations

import logging
import re
from typing import List

from bundocs.cache import TTLCache
from bundocs.config import DEFAULT_SEARCH_LIMIT
from bundocs.index.storage import SNIPPET_CLOSE, SNIPPET_OPEN, SQLiteSearchStore
from bundocs.models import URI_SCHEME, SearchResult

LOGGER = logging.getLogger(__name__)

# Characters FTS5 would read as query syntax.
_FTS_SPECIAL = re.compile(r'[":*^()]')
EMPHASIS = "**"


def sanitize_query(query: str) -> str:
    """Turn free text into an FTS5 query of quoted terms joined with OR.

    Returns an empty string when nothing survives cleaning.
    """
    terms = []
    for term in query.split():
        cleaned = _FTS_SPECIAL.sub("", term)
        if cleaned:
            terms.append(f'"{cleaned}"')
    return " OR ".join(terms)


def _cache_key(match: str, path: str, limit: int) -> str:
    return f"{match}:{path}:{limit}"


class Searcher:
    """High-level API to query the full-text store."""

    def __init__(
        self,
        store: SQLiteSearchStore,
        cache: TTLCache[List[SearchResult]] | None = None,
        *,
        scheme: str = URI_SCHEME,
    ) -> None:
        self.store = store
        self.cache = cache
        self.scheme = scheme

    def search(
        self, query: str, *, path: str = "", limit: int = DEFAULT_SEARCH_LIMIT
    ) -> List[SearchResult]:
        match = sanitize_query(query)
        if not match:
            return []

        key = _cache_key(match, path, limit)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                LOGGER.debug("Search cache hit for %r", key)
                return list(cached)

        rows = self.store.query(match, path_prefix=path, limit=limit)
        results = [
            SearchResult(
                uri=f"{self.scheme}{row['uri']}",
                title=row["title"],
                score=round(-float(row["score"]), 2),
                snippet=row["snippet"].replace(SNIPPET_OPEN, EMPHASIS).replace(SNIPPET_CLOSE, EMPHASIS),
            )
            for row in rows
        ]

        if self.cache is not None:
            self.cache.set(key, results)
        return list(results)
