"""bundocs MCP server."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from bundocs.config import DEFAULT_LIST_LIMIT, DEFAULT_SEARCH_LIMIT
from bundocs.models import ToolResult
from bundocs.service import DocsService

SERVER_NAME = "bun-doc-mcp"

INSTRUCTIONS = """This MCP server provides access to Bun documentation with full-text search (FTS5 + BM25 ranking).

## How to use:
- Use **search_bun_docs** for natural language queries (recommended)
- Use **grep_bun_docs** for regex patterns when you need exact matching
- Call **read_bun_doc** with a documentation slug to fetch the full markdown
- Call **list_bun_docs** to browse pages below a slug prefix

## Tips:
- Read the documents to find out whether Bun has a better API before reaching for a Node one
- Check 'api/' for API references, 'guides/' for walkthroughs, and 'runtime/' for runtime specifics
- Search results include snippets showing context around matches"""


def _unwrap(result: ToolResult) -> str:
    if result.is_error:
        raise ToolError(result.text)
    return result.text


def create_server(service: DocsService) -> FastMCP:
    """Register the documentation tools against ``service``."""
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)

    @mcp.tool()
    def search_bun_docs(query: str, path: str = "", limit: int = DEFAULT_SEARCH_LIMIT) -> str:
        """
        Search Bun documentation using full-text search with BM25 ranking.

        Uses SQLite FTS5 with Porter stemming, so "running" matches "run".
        Returns a JSON array of results with uri, title, score and snippet.

        Args:
            query: Search query (natural language)
            path: Optional slug prefix to filter results (e.g. 'api/' or 'guides/')
            limit: Maximum number of results to return
        """
        return _unwrap(service.search(query, path or None, limit))

    @mcp.tool()
    def grep_bun_docs(
        pattern: str,
        path: str = "",
        limit: int = DEFAULT_SEARCH_LIMIT,
        flags: str = "gi",
    ) -> str:
        """
        Search Bun documentation with a regular expression.

        Use this for exact matching when full-text search is not precise enough.
        The score of each result is its number of matches.

        Args:
            pattern: Regular expression, e.g. 'Bun\\.serve' or 'Bun\\.(serve|file|write)'
            path: Optional slug prefix to search in
            limit: Maximum number of results to return
            flags: Regex flags from 'gimsuy' (default 'gi': global, case-insensitive)
        """
        return _unwrap(service.grep(pattern, path or None, limit, flags))

    @mcp.tool()
    def read_bun_doc(path: str, offset: int = 0, max_lines: int | None = None) -> str:
        """
        Read a Bun documentation markdown file by slug.

        Args:
            path: Slug of the document to read (e.g. runtime/bun-apis)
            offset: First line to return (0-based)
            max_lines: Maximum number of lines to return
        """
        return _unwrap(service.read(path, offset, max_lines))

    @mcp.tool()
    def list_bun_docs(category: str = "", limit: int = DEFAULT_LIST_LIMIT) -> str:
        """
        List available Bun documentation pages, optionally below a slug prefix.

        Args:
            category: Optional prefix to filter by (e.g. 'api/', 'guides/', 'runtime/')
            limit: Maximum number of results to return
        """
        return _unwrap(service.list(category or None, limit))

    return mcp
