"""Text helpers for Markdown front matter, summaries and snippets."""

from __future__ import annotations

import re

FRONTMATTER_DELIMITER = "---"
SUMMARY_MAX_LENGTH = 300
ELLIPSIS = "..."

_FRONTMATTER_LINE = re.compile(r"^(\w+):\s*(.*)$")

# Applied in order; images go before links so "![alt](src)" is dropped whole.
_MARKDOWN_NOISE: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"```.*?```", re.DOTALL), ""),
    (re.compile(r"`[^`]+`"), ""),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"\n+"), " "),
)


def capitalize_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def title_from_slug(slug: str) -> str:
    """Derive a display title from the last slug segment: ``bun-apis`` -> ``Bun Apis``."""
    last = slug.split("/")[-1] or slug
    return " ".join(capitalize_first(word) for word in last.split("-"))


def parse_frontmatter(content: str) -> dict[str, str]:
    """Read ``key: value`` pairs from a leading ``---`` block.

    Lines that do not look like ``key: value`` are ignored and an
    unterminated block runs to the end of the document.
    """
    lines = content.split("\n")
    if lines[0].rstrip("\r") != FRONTMATTER_DELIMITER:
        return {}

    values: dict[str, str] = {}
    for raw in lines[1:]:
        line = raw.rstrip("\r")
        if line == FRONTMATTER_DELIMITER:
            break
        match = _FRONTMATTER_LINE.match(line)
        if match and match.group(2):
            values[match.group(1)] = match.group(2)
    return values


def strip_frontmatter(content: str) -> str:
    """Return the document body without its leading front-matter block."""
    lines = content.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != FRONTMATTER_DELIMITER:
        return content
    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r\n") == FRONTMATTER_DELIMITER:
            return "".join(lines[index + 1 :])
    return content


def extract_summary(content: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Plain-text excerpt of a Markdown document, at most ``max_length`` chars.

    Prefers to stop at the last sentence boundary past half the limit,
    otherwise hard-truncates and appends an ellipsis.
    """
    text = content
    if text.startswith(FRONTMATTER_DELIMITER):
        end = text.find(FRONTMATTER_DELIMITER, len(FRONTMATTER_DELIMITER))
        if end != -1:
            text = text[end + len(FRONTMATTER_DELIMITER) :]

    for pattern, replacement in _MARKDOWN_NOISE:
        text = pattern.sub(replacement, text)
    text = text.strip()

    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_sentence = truncated.rfind(". ")
    if last_sentence > max_length * 0.5:
        return truncated[: last_sentence + 1]
    return truncated + ELLIPSIS


def match_snippet(content: str, position: int, *, before: int = 50, after: int = 100) -> str:
    """Newline-collapsed window around ``position`` with ellipses at cut edges."""
    start = max(0, position - before)
    end = min(len(content), position + after)
    snippet = re.sub(r"\n+", " ", content[start:end]).strip()
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet = snippet + ELLIPSIS
    return snippet


def first_line(content: str, limit: int = 100) -> str:
    return content.split("\n", 1)[0][:limit]


def select_lines(text: str, offset: int = 0, max_lines: int | None = None) -> str:
    """Return the window of ``text`` starting at line ``offset``."""
    if offset < 0:
        raise ValueError("offset must be >= 0")
    if max_lines is not None and max_lines < 1:
        raise ValueError("max_lines must be >= 1")
    if offset == 0 and max_lines is None:
        return text

    lines = text.splitlines(keepends=True)
    stop = None if max_lines is None else offset + max_lines
    return "".join(lines[offset:stop])
