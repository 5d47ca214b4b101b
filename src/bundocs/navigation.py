"""Navigation parsing for the two docs layouts.

Newer Bun releases ship a Mintlify ``docs.json`` that groups pages by tab and
group. Older releases describe the sidebar as a flat list of pages and
dividers; that list is read from ``nav.json``. Both are reduced to a mapping
of ``slug -> PageInfo`` so the indexer never needs to know which one it got.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

from bundocs.errors import NavigationNotFoundError, NavigationParseError
from bundocs.models import PageInfo
from bundocs.utils.text import title_from_slug

LOGGER = logging.getLogger(__name__)

PageMap = dict[str, PageInfo]
NavigationParser = Callable[[Any], PageMap]


def _parse_grouped(data: Any) -> PageMap:
    pages: PageMap = {}
    for tab in data["navigation"]["tabs"]:
        # Tabs such as Reference or Blog have no groups and no local pages.
        groups = tab.get("groups") or []
        for group in groups:
            for page_path in group.get("pages") or []:
                slug = page_path[1:] if page_path.startswith("/") else page_path
                pages[slug] = PageInfo(
                    slug=slug,
                    title=title_from_slug(slug),
                    divider=f"{tab['tab']} / {group['group']}",
                )
    return pages


def _parse_flat(data: Any) -> PageMap:
    pages: PageMap = {}
    current_divider = ""
    for item in data["items"]:
        kind = item.get("type")
        if kind == "divider":
            current_divider = item["title"]
        elif kind == "page":
            pages[item["slug"]] = PageInfo(
                slug=item["slug"],
                title=item["title"],
                description=item.get("description") or "",
                divider=current_divider,
                disabled=bool(item.get("disabled", False)),
                href=item.get("href") or None,
            )
    return pages


# Ordered by precedence: the first file that exists is the only one consulted.
NAVIGATION_FORMATS: tuple[tuple[str, NavigationParser], ...] = (
    ("docs.json", _parse_grouped),
    ("nav.json", _parse_flat),
)


def navigation_files(docs_dir: Path) -> list[Path]:
    return [Path(docs_dir) / name for name, _ in NAVIGATION_FORMATS]


def has_navigation(docs_dir: Path) -> bool:
    return any(path.is_file() for path in navigation_files(docs_dir))


def parse_navigation(docs_dir: Path) -> PageMap:
    """Parse whichever navigation file ``docs_dir`` provides."""
    docs_dir = Path(docs_dir)
    for filename, parser in NAVIGATION_FORMATS:
        path = docs_dir / filename
        if not path.is_file():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            pages = parser(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise NavigationParseError(path, str(exc) or type(exc).__name__) from exc
        LOGGER.debug("Parsed %d pages from %s", len(pages), path)
        return pages

    names = ", ".join(name for name, _ in NAVIGATION_FORMATS)
    raise NavigationNotFoundError(f"No navigation file ({names}) found in {docs_dir}")
