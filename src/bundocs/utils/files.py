"""Utility helpers for working with the documentation tree."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

MARKDOWN_SUFFIXES = (".md", ".mdx")


def page_candidates(docs_dir: Path, slug: str) -> list[Path]:
    """Files that may back ``slug``, in lookup order."""
    return [
        docs_dir / f"{slug}.md",
        docs_dir / f"{slug}.mdx",
        docs_dir / slug / "index.md",
        docs_dir / slug / "index.mdx",
    ]


def resolve_page_file(docs_dir: Path, slug: str) -> Path | None:
    for candidate in page_candidates(docs_dir, slug):
        if candidate.is_file():
            return candidate
    return None


def iter_markdown_paths(root: Path) -> Iterator[Path]:
    """Yield Markdown files below ``root`` in a stable order."""
    if not root.is_dir():
        return
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix in MARKDOWN_SUFFIXES:
            yield path


def iter_subdirectories(root: Path) -> Iterator[Path]:
    if not root.is_dir():
        return
    yield from sorted(path for path in root.rglob("*") if path.is_dir())


def strip_markdown_suffix(path: Path) -> Path:
    return path.with_suffix("") if path.suffix in MARKDOWN_SUFFIXES else path


def relative_slug(docs_dir: Path, path: Path) -> str:
    """Slug for a file inside the docs tree: relative POSIX path without extension."""
    return strip_markdown_suffix(path.relative_to(docs_dir)).as_posix()


def read_text(path: Path) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")
