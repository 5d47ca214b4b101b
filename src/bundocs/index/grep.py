"""Regular expression search over the resource catalog.

Flags use the single-letter form familiar from JavaScript regexes (``gi``,
``ms`` ...) because that is what tool callers send. ``g`` is always in
effect: every match in a document is counted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Mapping

from bundocs.config import DEFAULT_SEARCH_LIMIT
from bundocs.errors import InvalidPatternError
from bundocs.models import IndexedResource, SearchResult
from bundocs.utils.files import read_text
from bundocs.utils.text import match_snippet

LOGGER = logging.getLogger(__name__)

DEFAULT_FLAGS = "gi"
ALLOWED_FLAGS = "gimuys"

_FLAG_BITS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


@dataclass(slots=True)
class GrepPattern:
    regex: re.Pattern[str]
    sticky: bool = False

    def finditer(self, content: str) -> Iterator[re.Match[str]]:
        if not self.sticky:
            yield from self.regex.finditer(content)
            return
        # Sticky: each match must start exactly where the previous one ended.
        position = 0
        while position <= len(content):
            match = self.regex.match(content, position)
            if match is None:
                return
            yield match
            position = match.end() if match.end() > position else position + 1


def normalize_flags(flags: str | None) -> str:
    """Keep allowed, de-duplicated flag letters and force ``g``."""
    if flags is None:
        flags = DEFAULT_FLAGS
    kept: list[str] = []
    for flag in flags:
        if flag in ALLOWED_FLAGS and flag not in kept:
            kept.append(flag)
    if "g" not in kept:
        kept.append("g")
    return "".join(kept)


def compile_pattern(pattern: str, flags: str | None = None) -> GrepPattern:
    letters = normalize_flags(flags)
    bits = 0
    for letter in letters:
        bits |= _FLAG_BITS.get(letter, 0)
    try:
        regex = re.compile(pattern, bits)
    except (re.error, TypeError) as exc:
        raise InvalidPatternError(pattern) from exc
    return GrepPattern(regex=regex, sticky="y" in letters)


def grep_documents(
    catalog: Mapping[str, IndexedResource],
    pattern: str,
    *,
    path: str = "",
    limit: int = DEFAULT_SEARCH_LIMIT,
    flags: str | None = None,
) -> List[SearchResult]:
    """Scan every document in ``catalog`` and rank by match count."""
    compiled = compile_pattern(pattern, flags)
    results: List[SearchResult] = []

    for resource in catalog.values():
        if not resource.is_document:
            continue
        if path and not resource.slug.startswith(path):
            continue

        try:
            content = read_text(resource.file_path)
        except OSError as exc:
            LOGGER.debug("Skipping %s: %s", resource.file_path, exc)
            continue

        first = None
        count = 0
        for match in compiled.finditer(content):
            if first is None:
                first = match
            count += 1
        if first is None:
            continue

        results.append(
            SearchResult(
                uri=resource.uri,
                title=resource.name,
                score=count,
                snippet=match_snippet(content, first.start()),
            )
        )

    results.sort(key=lambda result: result.score, reverse=True)
    return results[:limit]
