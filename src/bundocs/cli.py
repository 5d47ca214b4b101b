"""Command line interface for bundocs."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from bundocs import __version__
from bundocs.config import DEFAULT_LIST_LIMIT, DEFAULT_SEARCH_LIMIT, AppConfig
from bundocs.errors import BundocsError
from bundocs.models import ToolResult
from bundocs.service import DocsService

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="bundocs - search the Bun documentation")

CACHE_DIR_OPTION = typer.Option(None, "--cache-dir", help="Cache root for docs and the search index")
VERSION_OPTION = typer.Option(None, "--bun-version", help="Bun version whose docs to use")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose logging")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    # stdout carries results and the MCP stdio channel.
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s", stream=sys.stderr)


def _build_config(cache_dir: Optional[Path], bun_version: Optional[str]) -> AppConfig:
    return AppConfig(cache_root=cache_dir, version=bun_version)


def _open_service(config: AppConfig, *, rebuild: bool = False) -> DocsService:
    try:
        return DocsService.from_config(config, rebuild=rebuild)
    except BundocsError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def _print_result(result: ToolResult) -> None:
    if result.is_error:
        err_console.print(f"[red]{result.text}[/red]")
        raise typer.Exit(code=1)
    console.print(result.text, markup=False, highlight=False, emoji=False, soft_wrap=True)


def _print_results_table(result: ToolResult, columns: tuple[str, ...]) -> None:
    if result.is_error:
        _print_result(result)
    rows = json.loads(result.text)
    if not rows:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    for column in columns:
        table.add_column(column.capitalize())
    for row in rows:
        table.add_row(*(str(row[column]).replace("\n", " ")[:180] for column in columns))
    console.print(table)


def _version_callback(value: bool) -> None:
    if value:
        console.print(__version__)
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Search the Bun documentation."""


@app.command()
def index(
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    rebuild: bool = typer.Option(False, "--rebuild", help="Repopulate the full-text index"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Download the docs if needed and build the search index."""
    _setup_logging(verbose)
    config = _build_config(cache_dir, bun_version)
    service = _open_service(config, rebuild=rebuild)
    stats = service.context.stats
    console.print(
        f"Nav pages: {stats.nav_indexed} ({stats.nav_missing} missing), "
        f"guides: {stats.guides_indexed}, ecosystem: {stats.ecosystem_indexed}, "
        f"failed: {stats.failed}"
    )
    console.print(
        f"Total resources: {len(service.context.catalog)} "
        f"(FTS rows: {stats.fts_rows}{', rebuilt' if stats.fts_rebuilt else ''})"
    )
    console.print(f"Bun documents cached in [bold]{service.context.docs_dir}[/bold]")
    service.close()


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    path: Optional[str] = typer.Option(None, "--path", help="Slug prefix, e.g. api/"),
    limit: int = typer.Option(DEFAULT_SEARCH_LIMIT, help="Number of results to display"),
    raw: bool = typer.Option(False, "--json", help="Print raw JSON"),
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Ranked full-text search."""
    _setup_logging(verbose)
    service = _open_service(_build_config(cache_dir, bun_version))
    try:
        result = service.search(query, path, limit)
        if raw:
            _print_result(result)
        else:
            _print_results_table(result, ("score", "uri", "title", "snippet"))
    finally:
        service.close()


@app.command()
def grep(
    pattern: str = typer.Argument(..., help="Regular expression"),
    path: Optional[str] = typer.Option(None, "--path", help="Slug prefix, e.g. guides/"),
    limit: int = typer.Option(DEFAULT_SEARCH_LIMIT, help="Number of results to display"),
    flags: Optional[str] = typer.Option(None, "--flags", help="Regex flags from 'gimsuy' (default: gi)"),
    raw: bool = typer.Option(False, "--json", help="Print raw JSON"),
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Regular expression search over the raw Markdown."""
    _setup_logging(verbose)
    service = _open_service(_build_config(cache_dir, bun_version))
    try:
        result = service.grep(pattern, path, limit, flags)
        if raw:
            _print_result(result)
        else:
            _print_results_table(result, ("score", "uri", "title", "snippet"))
    finally:
        service.close()


@app.command()
def read(
    slug: str = typer.Argument(..., help="Document slug, e.g. runtime/bun-apis"),
    offset: int = typer.Option(0, help="First line to print"),
    max_lines: Optional[int] = typer.Option(None, "--max-lines", help="Number of lines to print"),
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print one document."""
    _setup_logging(verbose)
    service = _open_service(_build_config(cache_dir, bun_version))
    try:
        _print_result(service.read(slug, offset, max_lines))
    finally:
        service.close()


@app.command("list")
def list_docs(
    category: Optional[str] = typer.Argument(None, help="Slug prefix, e.g. api/"),
    limit: int = typer.Option(DEFAULT_LIST_LIMIT, help="Number of entries to display"),
    raw: bool = typer.Option(False, "--json", help="Print raw JSON"),
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List documents, optionally below a slug prefix."""
    _setup_logging(verbose)
    service = _open_service(_build_config(cache_dir, bun_version))
    try:
        result = service.list(category, limit)
        if raw:
            _print_result(result)
        else:
            _print_results_table(result, ("uri", "title", "description"))
    finally:
        service.close()


@app.command()
def serve(
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Serve the documentation tools over MCP (stdio)."""
    from bundocs.mcp_server import create_server

    _setup_logging(verbose)
    service = _open_service(_build_config(cache_dir, bun_version))
    try:
        create_server(service).run()
    finally:
        service.close()


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    cache_dir: Optional[Path] = CACHE_DIR_OPTION,
    bun_version: Optional[str] = VERSION_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Serve the documentation tools over HTTP."""
    import uvicorn

    from bundocs.web.app import app as web_app
    from bundocs.web.app import configure

    _setup_logging(verbose)
    configure(_open_service(_build_config(cache_dir, bun_version)))
    console.print(f"Starting web interface on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
