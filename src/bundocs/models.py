"""Core bundocs data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from bundocs.utils.text import extract_summary

URI_SCHEME = "buncument://"
MARKDOWN_MIME = "text/markdown"
DIRECTORY_MIME = "application/json"


@dataclass(slots=True, frozen=True)
class PageInfo:
    """Navigation entry describing one logical page."""

    slug: str
    title: str
    description: str = ""
    divider: str = ""
    disabled: bool = False
    href: str | None = None


@dataclass(slots=True, frozen=True)
class IndexedResource:
    """Addressable unit exposed to clients."""

    uri: str
    name: str
    description: str
    mime_type: str = MARKDOWN_MIME
    file_path: Path | None = None
    is_directory: bool = False

    @property
    def slug(self) -> str:
        scheme, sep, rest = self.uri.partition("://")
        return rest if sep else scheme

    @property
    def is_document(self) -> bool:
        return self.file_path is not None and not self.is_directory


@dataclass(slots=True)
class SearchRecord:
    """One row waiting to be written to the full-text store."""

    slug: str
    title: str
    category: str
    content: str
    summary: str = field(init=False)

    def __post_init__(self) -> None:
        self.summary = extract_summary(self.content)


@dataclass(slots=True)
class SearchResult:
    uri: str
    title: str
    score: float
    snippet: str


@dataclass(slots=True)
class DocumentEntry:
    uri: str
    title: str
    description: str


@dataclass(slots=True)
class ToolResult:
    """Outcome of a façade operation: text payload plus an error flag."""

    text: str
    is_error: bool = False
