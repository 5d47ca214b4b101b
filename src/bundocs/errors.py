"""Exception types raised by bundocs components."""

from __future__ import annotations

from pathlib import Path


class BundocsError(Exception):
    """Base class for all bundocs errors."""


class ConfigError(BundocsError):
    """Configuration is incomplete or invalid."""


class DocsDownloadError(BundocsError):
    """The documentation tree could not be fetched."""


class NavigationNotFoundError(BundocsError):
    """No supported navigation file exists in the docs directory."""


class NavigationParseError(BundocsError):
    """A navigation file exists but could not be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to parse {self.path.name}: {reason}")


class SearchStoreError(BundocsError):
    """The full-text store failed to answer a query or write."""


class InvalidPatternError(BundocsError):
    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Invalid regular expression: {pattern}")


class InvalidSlugError(BundocsError):
    """A caller supplied something that is not a bare document slug."""


class DocumentNotFoundError(BundocsError):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Document not found for slug: {slug}")


class NotADocumentError(BundocsError):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Requested slug is not a document: {slug}")
