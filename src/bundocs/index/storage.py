"""SQLite FTS5 document store."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List

from bundocs.config import SCHEMA_VERSION
from bundocs.errors import SearchStoreError
from bundocs.models import SearchRecord

LOGGER = logging.getLogger(__name__)

# bm25() column weights: uri, title, category, summary, content.
BM25_WEIGHTS = (1.0, 2.0, 1.5, 3.0, 1.0)
# Private-use code points so the markers never collide with document text.
SNIPPET_OPEN = "\ue000"
SNIPPET_CLOSE = "\ue001"
SNIPPET_ELLIPSIS = "..."
SNIPPET_TOKENS = 32

_BM25_ARGS = ", ".join(str(weight) for weight in BM25_WEIGHTS)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteSearchStore:
    """Persistence layer for the full-text document index."""

    def __init__(self, db_path: Path, *, schema_version: int = SCHEMA_VERSION) -> None:
        self.db_path = Path(db_path)
        self.expected_version = schema_version
        # Shared by the HTTP worker threads; every use goes through _lock.
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._lock = threading.RLock()
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise

    @property
    def schema_version(self) -> int:
        try:
            with self._lock:
                row = self._conn.execute("SELECT version FROM schema_version").fetchone()
        except sqlite3.OperationalError:
            return 0
        return int(row["version"] or 0) if row else 0

    def _ensure_schema(self) -> None:
        current = self.schema_version
        if current >= self.expected_version:
            return

        LOGGER.info(
            "Search index schema %d is older than %d, recreating %s",
            current,
            self.expected_version,
            self.db_path,
        )
        with self.transaction() as conn:
            conn.execute("DROP TABLE IF EXISTS docs_fts")
            conn.execute("DROP TABLE IF EXISTS schema_version")
            conn.execute("CREATE TABLE schema_version (version INTEGER)")
            conn.execute(
                "INSERT INTO schema_version(version) VALUES (?)",
                (self.expected_version,),
            )
            conn.execute(
                """
                CREATE VIRTUAL TABLE docs_fts USING fts5(
                    uri,
                    title,
                    category,
                    summary,
                    content,
                    tokenize='porter unicode61'
                )
                """
            )

    def count(self) -> int:
        try:
            with self._lock:
                row = self._conn.execute("SELECT COUNT(*) AS count FROM docs_fts").fetchone()
        except sqlite3.Error as exc:
            raise SearchStoreError(str(exc)) from exc
        return int(row["count"])

    def rebuild(self, records: Iterable[SearchRecord]) -> int:
        """Replace every row with ``records`` in a single transaction.

        On any failure the previous contents are kept.
        """
        inserted = 0
        try:
            with self.transaction() as conn:
                conn.execute("DELETE FROM docs_fts")
                for record in records:
                    conn.execute(
                        """
                        INSERT INTO docs_fts(uri, title, category, summary, content)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (
                            record.slug,
                            record.title,
                            record.category,
                            record.summary,
                            record.content,
                        ),
                    )
                    inserted += 1
        except sqlite3.Error as exc:
            raise SearchStoreError(f"Failed to rebuild search index: {exc}") from exc
        return inserted

    def query(self, match: str, *, path_prefix: str = "", limit: int = 30) -> List[sqlite3.Row]:
        """Run an FTS5 MATCH query ranked by weighted bm25 (lower is better)."""
        sql = f"""
            SELECT
                uri,
                title,
                bm25(docs_fts, {_BM25_ARGS}) AS score,
                snippet(docs_fts, 4, '{SNIPPET_OPEN}', '{SNIPPET_CLOSE}', '{SNIPPET_ELLIPSIS}', {SNIPPET_TOKENS}) AS snippet
            FROM docs_fts
            WHERE docs_fts MATCH ?
        """
        params: list[object] = [match]
        if path_prefix:
            sql += " AND uri LIKE ? ESCAPE '\\'"
            params.append(f"{_escape_like(path_prefix)}%")
        sql += " ORDER BY score LIMIT ?"
        params.append(limit)

        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise SearchStoreError(str(exc)) from exc
