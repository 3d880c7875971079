"""
MiniPaper CLI - Turn a list of article URLs into a mini newspaper PDF.

Usage:
    minipaper generate https://example.com/a https://example.com/b
    minipaper generate --urls-file urls.txt --columns 3 --images -o paper.pdf
    minipaper inspect https://example.com/a
    minipaper serve  # Start web interface
"""

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import DEFAULT_NEWSPAPER_TITLE
from .exceptions import CompileError
from .extractor import ExtractionResult
from .layout import LayoutConfig
from .pipeline import (
    ArticleDiagnostics,
    NewspaperGenerator,
    output_filename,
    parse_url_list,
)

app = typer.Typer(
    name="minipaper",
    help="Turn a list of article URLs into a printable multi-column mini newspaper.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"MiniPaper v{__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def validate_url(url: str) -> str:
    """Validate and normalize URL."""
    parsed = urlparse(url)
    if not parsed.scheme:
        url = f"https://{url}"
        parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise typer.BadParameter(f"Invalid URL scheme: {parsed.scheme}")

    if not parsed.netloc:
        raise typer.BadParameter(f"Invalid URL: missing domain in {url}")

    return url


def collect_urls(urls: Optional[List[str]], urls_file: Optional[Path]) -> list[str]:
    """URLs from arguments and an optional one-per-line file."""
    collected = list(urls or [])
    if urls_file is not None:
        collected.extend(parse_url_list(urls_file.read_text(encoding="utf-8")))
    try:
        return [validate_url(u.strip()) for u in collected if u.strip()]
    except typer.BadParameter as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def print_diagnostics(results: list[ExtractionResult]) -> None:
    table = Table(title="Preview & Diagnostics")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Characters", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Success")

    for i, result in enumerate(results, start=1):
        if result.succeeded:
            status = "[green]yes[/green]"
        else:
            status = f"[red]{escape(result.error or '')}[/red]"
        table.add_row(
            str(i),
            escape(result.title),
            f"{result.char_count:,}",
            f"{result.word_count:,}",
            status,
        )
    console.print(table)


def print_previews(results: list[ExtractionResult]) -> None:
    """Source URL, counts and the opening of each article."""
    for i, result in enumerate(results, start=1):
        diag = ArticleDiagnostics.from_result(result)
        console.print(f"\n[bold]{i}. {escape(diag.title)}[/bold]")
        console.print(f"[dim]{escape(diag.url)}[/dim]")
        if not diag.succeeded:
            console.print(f"[red]{escape(diag.preview)}[/red]")
            continue
        console.print(f"[cyan]{diag.char_count:,} chars, {diag.word_count:,} words[/cyan]")
        console.print(f"{escape(diag.preview)}...")


def fetch_with_progress(generator: NewspaperGenerator, urls: list[str]) -> list[ExtractionResult]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Fetching articles...", total=len(urls))
        results = generator.fetch_articles(
            urls, on_result=lambda _: progress.advance(task)
        )
        progress.update(task, description="Articles fetched")
    return results


URLS_ARGUMENT = typer.Argument(None, help="Article URLs, in newspaper order")
URLS_FILE_OPTION = typer.Option(
    None,
    "--urls-file", "-f",
    exists=True,
    dir_okay=False,
    help="File with one article URL per line",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-V", help="Show debug logging")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Turn a list of article URLs into a printable mini newspaper."""


@app.command()
def generate(
    urls: Optional[List[str]] = URLS_ARGUMENT,
    urls_file: Optional[Path] = URLS_FILE_OPTION,
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output PDF filename (default: <title>_<date>.pdf)",
    ),
    title: str = typer.Option(
        DEFAULT_NEWSPAPER_TITLE, "--title", "-t", help="Newspaper title"
    ),
    columns: int = typer.Option(
        2, "--columns", "-c", min=2, max=3, help="Number of columns (2 or 3)"
    ),
    include_images: bool = typer.Option(
        False,
        "--images/--no-images",
        help="Include article images",
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """
    Fetch the articles and generate the newspaper PDF.

    Example:
        minipaper generate https://example.com/story --columns 3
    """
    setup_logging(verbose)
    url_list = collect_urls(urls, urls_file)
    if not url_list:
        console.print("[yellow]Please enter at least one URL[/yellow]")
        raise typer.Exit(1)

    config = LayoutConfig(column_count=columns, include_images=include_images, title=title)
    if output is None:
        output = Path(output_filename(title))

    console.print(f"\n[bold]MiniPaper[/bold] v{__version__}")
    console.print(f"Building [cyan]{escape(title)}[/cyan] from {len(url_list)} article(s)\n")

    with NewspaperGenerator() as generator:
        results = fetch_with_progress(generator, url_list)
        print_diagnostics(results)

        if not any(r.has_content for r in results):
            console.print("[red]Error:[/red] No article could be extracted.")
            raise typer.Exit(1)

        try:
            with console.status("Generating PDF..."):
                newspaper = generator.generate(results, config, output_path=output)
        except CompileError as e:
            console.print(f"\n[red]PDF generation failed:[/red] {escape(str(e))}")
            if include_images:
                console.print("Try again with [bold]--no-images[/bold].")
            raise typer.Exit(1)

    console.print()
    console.print(f"[green]Success![/green] PDF saved to: [bold]{output}[/bold]")
    console.print(f"  Articles: {newspaper.document.article_count}")
    console.print(f"  Images: {len(newspaper.document.image_paths)}")
    console.print()


@app.command()
def inspect(
    urls: Optional[List[str]] = URLS_ARGUMENT,
    urls_file: Optional[Path] = URLS_FILE_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Fetch the articles and show what would be printed, without a PDF."""
    setup_logging(verbose)
    url_list = collect_urls(urls, urls_file)
    if not url_list:
        console.print("[yellow]Please enter at least one URL[/yellow]")
        raise typer.Exit(1)

    with NewspaperGenerator() as generator:
        results = fetch_with_progress(generator, url_list)
    print_diagnostics(results)
    print_previews(results)


@app.command()
def source(
    urls: Optional[List[str]] = URLS_ARGUMENT,
    urls_file: Optional[Path] = URLS_FILE_OPTION,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the source here instead of stdout"
    ),
    title: str = typer.Option(
        DEFAULT_NEWSPAPER_TITLE, "--title", "-t", help="Newspaper title"
    ),
    columns: int = typer.Option(
        2, "--columns", "-c", min=2, max=3, help="Number of columns (2 or 3)"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """Print the assembled document source (text only) without compiling it."""
    setup_logging(verbose)
    url_list = collect_urls(urls, urls_file)
    if not url_list:
        console.print("[yellow]Please enter at least one URL[/yellow]")
        raise typer.Exit(1)

    config = LayoutConfig(column_count=columns, title=title)
    with NewspaperGenerator() as generator:
        results = generator.fetch_articles(url_list)
        document = generator.assemble(results, config)

    if output is None:
        typer.echo(document.source_text, nl=False)
    else:
        output.write_text(document.source_text, encoding="utf-8")
        console.print(f"Source written to [bold]{output}[/bold]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
):
    """
    Start the web interface for MiniPaper.

    Opens a browser-based UI for building newspapers.
    """
    import uvicorn

    console.print(f"\n[bold]MiniPaper[/bold] Web Interface")
    console.print(f"Starting server at [cyan]http://{host}:{port}[/cyan]\n")

    uvicorn.run(
        "minipaper.web:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
