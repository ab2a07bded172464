"""Command line interface for PostFinder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from postfinder.config import AppConfig
from postfinder.errors import IndexIOError
from postfinder.index.indexer import Indexer
from postfinder.index.search import SearchIndex, SearchOptions
from postfinder.index.watcher import watch as watch_content
from postfinder.pagination import format_window, page_window
from postfinder.sitemap import write_sitemap
from postfinder.web.app import create_app


console = Console()
app = typer.Typer(help="PostFinder - fuzzy search index for a markdown blog")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


@app.command()
def build(
    content: Path = typer.Argument(AppConfig().content_dir, help="Directory with markdown posts."),
    output: Path = typer.Option(AppConfig().output_path, "--output", "-o", help="Search index path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build the search index once."""
    _setup_logging(verbose)
    config = AppConfig(content_dir=content, output_path=output)
    content_dir = config.resolve_content_dir(Path.cwd())
    output_path = config.resolve_output_path(Path.cwd())

    console.print(f"Indexing [bold]{content_dir}[/bold]...")
    try:
        stats = Indexer(content_dir, output_path).build()
    except IndexIOError as exc:
        _fail(str(exc))

    console.print(
        f"Indexed: {stats.indexed}, parse failures: {stats.parse_failures}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}"
    )
    console.print(f"Wrote [bold]{output_path}[/bold]")


@app.command()
def watch(
    content: Path = typer.Argument(AppConfig().content_dir, help="Directory with markdown posts."),
    output: Path = typer.Option(AppConfig().output_path, "--output", "-o", help="Search index path"),
    marker: Path = typer.Option(AppConfig().marker_path, "--marker", help="Freshness marker path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build the search index, then rebuild it whenever posts change."""
    _setup_logging(verbose)
    config = AppConfig(content_dir=content, output_path=output, marker_path=marker)
    content_dir = config.resolve_content_dir(Path.cwd())
    if not content_dir.is_dir():
        _fail(f"Content directory not found: {content_dir}")

    console.print(f"Watching [bold]{content_dir}[/bold] (Ctrl+C to stop)")
    watch_content(
        content_dir,
        config.resolve_output_path(Path.cwd()),
        marker_path=config.resolve_marker_path(Path.cwd()),
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    index: Path = typer.Option(AppConfig().output_path, "--index", help="Search index path"),
    limit: int = typer.Option(AppConfig().result_limit, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run a fuzzy search against the index."""
    _setup_logging(verbose)
    config = AppConfig(output_path=index)
    index_path = config.resolve_output_path(Path.cwd())
    if not index_path.exists():
        _fail(f"Search index not found: {index_path}")

    options = SearchOptions(threshold=config.threshold, snippet_chars=config.snippet_chars)
    try:
        search_index = SearchIndex.load(index_path, options)
    except IndexIOError as exc:
        _fail(str(exc))

    limit = max(1, min(limit, config.result_limit))
    results = search_index.query(query, limit=limit)
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Slug")
    table.add_column("Title")
    table.add_column("Snippet")

    for result in results:
        table.add_row(
            f"{result.score:.4f}", result.id, result.title, result.snippet.replace("\n", " ")
        )

    console.print(table)


@app.command()
def pages(
    total: int = typer.Argument(..., help="Total number of items"),
    per_page: int = typer.Option(AppConfig().items_per_page, "--per-page", help="Items per page"),
    page: int = typer.Option(1, "--page", help="Current page"),
    visible_range: int = typer.Option(AppConfig().visible_range, "--range", help="Pages shown on each side"),
) -> None:
    """Print the pagination window for a list."""
    try:
        window = page_window(total, per_page, page, visible_range)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if len(window) <= 1:
        console.print("[yellow]Everything fits on one page.[/yellow]")
        return
    console.print(format_window(window, page))


@app.command()
def sitemap(
    content: Path = typer.Argument(AppConfig().content_dir, help="Directory with markdown posts."),
    output: Path = typer.Option(AppConfig().sitemap_path, "--output", "-o", help="Sitemap path"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Site origin for URLs"),
) -> None:
    """Generate sitemap.xml for every post."""
    config = AppConfig(content_dir=content, sitemap_path=output)
    if base_url:
        config.base_url = base_url
    output_path = config.resolve_sitemap_path(Path.cwd())
    try:
        count = write_sitemap(config.resolve_content_dir(Path.cwd()), output_path, config.base_url)
    except IndexIOError as exc:
        _fail(str(exc))
    console.print(f"Wrote {count} URLs to [bold]{output_path}[/bold]")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    index: Path = typer.Option(AppConfig().output_path, "--index", help="Search index path"),
    marker: Path = typer.Option(AppConfig().marker_path, "--marker", help="Freshness marker path"),
) -> None:
    """Serve the search API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(output_path=index, marker_path=marker)
    index_path = config.resolve_output_path(Path.cwd())
    if not index_path.exists():
        console.print("[yellow]Warning: search index not found, searches will fail until it is built.[/yellow]")

    console.print(f"Starting search API on http://{host}:{port} (index: {index_path})")
    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
