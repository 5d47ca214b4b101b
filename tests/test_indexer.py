"""Tests for Indexer."""

from pathlib import Path
from unittest.mock import patch

import pytest

from bundocs.errors import SearchStoreError
from bundocs.index.indexer import GUIDES_DESCRIPTION, IndexStats, Indexer, page_description
from bundocs.index.storage import SQLiteSearchStore
from bundocs.models import DIRECTORY_MIME, MARKDOWN_MIME, PageInfo
from bundocs.navigation import parse_navigation


@pytest.fixture
def store(tmp_path):
    store = SQLiteSearchStore(tmp_path / "search.db")
    yield store
    store.close()


class TestIndexStats:
    """Test IndexStats defaults."""

    def test_init_defaults(self):
        stats = IndexStats()
        assert stats.nav_indexed == 0
        assert stats.nav_missing == 0
        assert stats.guides_indexed == 0
        assert stats.ecosystem_indexed == 0
        assert stats.failed == 0
        assert stats.fts_rebuilt is False


class TestPageDescription:
    """Test how nav metadata becomes a description."""

    def test_both(self):
        assert page_description(PageInfo("a", "A", description="d", divider="D")) == "D / d"

    def test_divider_only(self):
        assert page_description(PageInfo("a", "A", divider="D")) == "D"

    def test_description_only(self):
        assert page_description(PageInfo("a", "A", description="d")) == "d"

    def test_neither(self):
        assert page_description(PageInfo("a", "A")) == ""


class TestBuild:
    """Test a full indexing pass over the sample tree."""

    def test_stats(self, docs_dir: Path, store):
        build = Indexer(docs_dir, store).build(parse_navigation(docs_dir))

        assert build.stats.nav_indexed == 3
        assert build.stats.nav_missing == 1
        assert build.stats.guides_indexed == 2
        assert build.stats.ecosystem_indexed == 1
        assert build.stats.fts_rebuilt is True
        assert build.stats.fts_rows == 6
        assert store.count() == 6

    def test_catalog_order(self, docs_dir: Path, store):
        build = Indexer(docs_dir, store).build(parse_navigation(docs_dir))

        assert list(build.catalog) == [
            "buncument://runtime/bun-apis",
            "buncument://runtime/http-server",
            "buncument://bundler",
            "buncument://guides",
            "buncument://guides/http/simple",
            "buncument://guides/read-file/text",
            "buncument://guides/http",
            "buncument://guides/read-file",
            "buncument://ecosystem/react",
        ]

    def test_nav_resources(self, docs_dir: Path, store):
        catalog = Indexer(docs_dir, store).build(parse_navigation(docs_dir)).catalog

        page = catalog["buncument://runtime/http-server"]
        assert page.name == "Http Server"
        assert page.description == "Runtime / Core"
        assert page.mime_type == MARKDOWN_MIME
        assert page.file_path == docs_dir / "runtime" / "http-server.mdx"
        assert catalog["buncument://bundler"].file_path == docs_dir / "bundler" / "index.md"
        assert "buncument://runtime/missing-page" not in catalog

    def test_guides_resources(self, docs_dir: Path, store):
        catalog = Indexer(docs_dir, store).build(parse_navigation(docs_dir)).catalog

        root = catalog["buncument://guides"]
        assert root.is_directory
        assert root.mime_type == DIRECTORY_MIME
        assert root.description == GUIDES_DESCRIPTION
        assert root.file_path is None

        simple = catalog["buncument://guides/http/simple"]
        assert simple.name == "Write a simple HTTP server"
        assert simple.description == "Use Bun.serve to start a server"

        text = catalog["buncument://guides/read-file/text"]
        assert text.name == "text"
        assert text.description == "Read a file as text"

        http_dir = catalog["buncument://guides/http"]
        assert (http_dir.name, http_dir.description) == ("HTTP", "HTTP guides")
        read_dir = catalog["buncument://guides/read-file"]
        assert (read_dir.name, read_dir.description) == ("read-file", "Directory")

    def test_ecosystem_resources(self, docs_dir: Path, store):
        catalog = Indexer(docs_dir, store).build(parse_navigation(docs_dir)).catalog

        react = catalog["buncument://ecosystem/react"]
        assert react.name == "React"
        assert react.description == "Bun supports JSX and React out of the box."

    def test_fts_categories(self, docs_dir: Path, store):
        Indexer(docs_dir, store).build(parse_navigation(docs_dir))

        rows = {
            row["uri"]: row["category"]
            for row in store.connection.execute("SELECT uri, category FROM docs_fts")
        }
        assert rows == {
            "runtime/bun-apis": "Runtime / Core",
            "runtime/http-server": "Runtime / Core",
            "bundler": "Bundler / Basics",
            "guides/http/simple": "Guides",
            "guides/read-file/text": "Guides",
            "ecosystem/react": "Ecosystem",
        }

    def test_existing_rows_not_rebuilt(self, docs_dir: Path, store):
        pages = parse_navigation(docs_dir)
        Indexer(docs_dir, store).build(pages)

        with patch.object(store, "rebuild") as mock_rebuild:
            build = Indexer(docs_dir, store).build(pages)

        mock_rebuild.assert_not_called()
        assert build.stats.fts_rebuilt is False
        assert build.stats.fts_rows == 6
        assert len(build.catalog) == 9

    def test_force_rebuild(self, docs_dir: Path, store):
        pages = parse_navigation(docs_dir)
        Indexer(docs_dir, store).build(pages)

        build = Indexer(docs_dir, store).build(pages, force=True)

        assert build.stats.fts_rebuilt is True
        assert store.count() == 6

    def test_stale_rows_survive(self, docs_dir: Path, store):
        """Files removed after the first build stay searchable until a rebuild."""
        pages = parse_navigation(docs_dir)
        Indexer(docs_dir, store).build(pages)
        (docs_dir / "ecosystem" / "react.md").unlink()

        build = Indexer(docs_dir, store).build(pages)

        assert "buncument://ecosystem/react" not in build.catalog
        assert store.count() == 6

    def test_disabled_and_external_pages_skipped(self, tmp_path: Path, store):
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "b.md").write_text("b")
        (tmp_path / "c.md").write_text("c")
        pages = {
            "a": PageInfo("a", "A"),
            "b": PageInfo("b", "B", disabled=True),
            "c": PageInfo("c", "C", href="https://example.com"),
        }

        build = Indexer(tmp_path, store).build(pages)

        assert list(build.catalog) == ["buncument://a"]
        assert build.stats.nav_missing == 0

    def test_nav_page_not_duplicated_by_guides(self, tmp_path: Path, store):
        (tmp_path / "guides").mkdir()
        (tmp_path / "guides" / "intro.md").write_text("Intro to guides")
        pages = {"guides/intro": PageInfo("guides/intro", "Intro", divider="Guides")}

        build = Indexer(tmp_path, store).build(pages)

        assert build.catalog["buncument://guides/intro"].name == "Intro"
        assert build.stats.guides_indexed == 0
        assert store.count() == 1

    def test_unreadable_directory_metadata(self, tmp_path: Path, store):
        (tmp_path / "guides" / "broken").mkdir(parents=True)
        (tmp_path / "guides" / "broken" / "index.json").write_text("{oops")

        catalog = Indexer(tmp_path, store).build({}).catalog

        broken = catalog["buncument://guides/broken"]
        assert (broken.name, broken.description) == ("broken", "Directory")

    def test_failed_rebuild_propagates(self, docs_dir: Path, store):
        with patch.object(store, "rebuild", side_effect=SearchStoreError("disk full")):
            with pytest.raises(SearchStoreError):
                Indexer(docs_dir, store).build(parse_navigation(docs_dir))

    def test_unreadable_file_skipped(self, docs_dir: Path, store):
        original = Path.read_text

        def flaky(self, *args, **kwargs):
            if self.name == "react.md":
                raise PermissionError("denied")
            return original(self, *args, **kwargs)

        with patch.object(Path, "read_text", flaky):
            build = Indexer(docs_dir, store).build(parse_navigation(docs_dir))

        assert "buncument://ecosystem/react" not in build.catalog
        assert build.stats.failed == 1
        assert store.count() == 5
