"""Resource catalog and full-text index builder."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping

from bundocs.index.storage import SQLiteSearchStore
from bundocs.models import (
    DIRECTORY_MIME,
    MARKDOWN_MIME,
    URI_SCHEME,
    IndexedResource,
    PageInfo,
    SearchRecord,
)
from bundocs.utils.files import (
    iter_markdown_paths,
    iter_subdirectories,
    read_text,
    relative_slug,
    resolve_page_file,
)
from bundocs.utils.text import capitalize_first, first_line, parse_frontmatter

LOGGER = logging.getLogger(__name__)

GUIDES_DIR = "guides"
ECOSYSTEM_DIR = "ecosystem"
GUIDES_NAME = "Guides"
GUIDES_DESCRIPTION = (
    "A collection of code samples and walkthroughs for performing common tasks with Bun."
)
ECOSYSTEM_CATEGORY = "Ecosystem"
DIRECTORY_DESCRIPTION = "Directory"
DIRECTORY_METADATA_FILE = "index.json"


@dataclass(slots=True)
class IndexStats:
    nav_indexed: int = 0
    nav_missing: int = 0
    guides_indexed: int = 0
    ecosystem_indexed: int = 0
    failed: int = 0
    fts_rebuilt: bool = False
    fts_rows: int = 0


@dataclass(slots=True)
class IndexBuild:
    """Result of one indexing pass."""

    catalog: Dict[str, IndexedResource] = field(default_factory=dict)
    stats: IndexStats = field(default_factory=IndexStats)
    records: List[SearchRecord] = field(default_factory=list)


def page_description(page: PageInfo) -> str:
    if page.divider and page.description:
        return f"{page.divider} / {page.description}"
    return page.description or page.divider


class Indexer:
    """Builds the resource catalog and, when the store is empty, its rows."""

    def __init__(
        self,
        docs_dir: Path,
        store: SQLiteSearchStore,
        *,
        scheme: str = URI_SCHEME,
    ) -> None:
        self.docs_dir = Path(docs_dir)
        self.store = store
        self.scheme = scheme

    def uri_for(self, slug: str) -> str:
        return f"{self.scheme}{slug}"

    def build(self, pages: Mapping[str, PageInfo], *, force: bool = False) -> IndexBuild:
        """Index navigation pages plus the guides and ecosystem trees.

        The full-text store is only repopulated when it holds no rows. The
        repopulation is one transaction, so a failure leaves the old rows.
        ``force`` repopulates regardless.
        """
        needs_rebuild = force or self.store.count() == 0
        build = IndexBuild()

        self._index_navigation(pages, build, needs_rebuild)
        LOGGER.info(
            "Indexed %d nav pages (%d missing)",
            build.stats.nav_indexed,
            build.stats.nav_missing,
        )
        self._index_guides(build, needs_rebuild)
        LOGGER.info("Indexed %d guides files", build.stats.guides_indexed)
        self._index_ecosystem(build, needs_rebuild)
        LOGGER.info("Indexed %d ecosystem files", build.stats.ecosystem_indexed)

        if needs_rebuild:
            build.stats.fts_rows = self.store.rebuild(build.records)
            build.stats.fts_rebuilt = True
        else:
            build.stats.fts_rows = self.store.count()

        LOGGER.info(
            "Total indexed resources: %d (FTS: %d)",
            len(build.catalog),
            build.stats.fts_rows,
        )
        return build

    def _read(self, path: Path, build: IndexBuild) -> str | None:
        try:
            return read_text(path)
        except OSError as exc:
            LOGGER.warning("Failed to read %s: %s", path, exc)
            build.stats.failed += 1
            return None

    def _index_navigation(
        self, pages: Mapping[str, PageInfo], build: IndexBuild, needs_rebuild: bool
    ) -> None:
        for slug, page in pages.items():
            if page.disabled or page.href:
                continue

            file_path = resolve_page_file(self.docs_dir, slug)
            if file_path is None:
                LOGGER.debug("No file for nav page %s", slug)
                build.stats.nav_missing += 1
                continue

            if needs_rebuild:
                content = self._read(file_path, build)
                if content is None:
                    continue
                build.records.append(
                    SearchRecord(slug=slug, title=page.title, category=page.divider, content=content)
                )

            uri = self.uri_for(slug)
            build.catalog[uri] = IndexedResource(
                uri=uri,
                name=page.title,
                description=page_description(page),
                mime_type=MARKDOWN_MIME,
                file_path=file_path,
            )
            build.stats.nav_indexed += 1

    def _index_guides(self, build: IndexBuild, needs_rebuild: bool) -> None:
        guides_dir = self.docs_dir / GUIDES_DIR
        if not guides_dir.is_dir():
            return

        root_uri = self.uri_for(GUIDES_DIR)
        build.catalog[root_uri] = IndexedResource(
            uri=root_uri,
            name=GUIDES_NAME,
            description=GUIDES_DESCRIPTION,
            mime_type=DIRECTORY_MIME,
            is_directory=True,
        )

        for file_path in iter_markdown_paths(guides_dir):
            slug = relative_slug(self.docs_dir, file_path)
            if self.uri_for(slug) in build.catalog:
                continue
            content = self._read(file_path, build)
            if content is None:
                continue
            frontmatter = parse_frontmatter(content)
            name = frontmatter.get("name") or file_path.stem
            uri = self.uri_for(slug)
            build.catalog[uri] = IndexedResource(
                uri=uri,
                name=name,
                description=frontmatter.get("description") or first_line(content),
                mime_type=MARKDOWN_MIME,
                file_path=file_path,
            )
            if needs_rebuild:
                build.records.append(
                    SearchRecord(slug=slug, title=name, category=GUIDES_NAME, content=content)
                )
            build.stats.guides_indexed += 1

        for directory in iter_subdirectories(guides_dir):
            uri = self.uri_for(directory.relative_to(self.docs_dir).as_posix())
            if uri in build.catalog:
                continue
            name, description = self._directory_metadata(directory)
            build.catalog[uri] = IndexedResource(
                uri=uri,
                name=name,
                description=description,
                mime_type=DIRECTORY_MIME,
                is_directory=True,
            )

    def _directory_metadata(self, directory: Path) -> tuple[str, str]:
        name, description = directory.name, DIRECTORY_DESCRIPTION
        metadata_path = directory / DIRECTORY_METADATA_FILE
        if not metadata_path.is_file():
            return name, description
        try:
            data = json.loads(read_text(metadata_path))
            name = data.get("name") or name
            description = data.get("description") or description
        except (OSError, ValueError, AttributeError) as exc:
            LOGGER.warning("Ignoring unreadable %s: %s", metadata_path, exc)
        return name, description

    def _index_ecosystem(self, build: IndexBuild, needs_rebuild: bool) -> None:
        ecosystem_dir = self.docs_dir / ECOSYSTEM_DIR
        for file_path in iter_markdown_paths(ecosystem_dir):
            slug = relative_slug(self.docs_dir, file_path)
            if self.uri_for(slug) in build.catalog:
                continue
            content = self._read(file_path, build)
            if content is None:
                continue
            title = capitalize_first(file_path.stem)
            uri = self.uri_for(slug)
            build.catalog[uri] = IndexedResource(
                uri=uri,
                name=title,
                description=first_line(content) or file_path.stem,
                mime_type=MARKDOWN_MIME,
                file_path=file_path,
            )
            if needs_rebuild:
                build.records.append(
                    SearchRecord(slug=slug, title=title, category=ECOSYSTEM_CATEGORY, content=content)
                )
            build.stats.ecosystem_indexed += 1
