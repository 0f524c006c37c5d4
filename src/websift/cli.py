"""Command-line interface for WebSift."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import structlog
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from websift import __version__
from websift.config import Config, find_config_file
from websift.container import DependencyContainer
from websift.exceptions import ScrapeError
from websift.extractor.models import ExtractionRequest, ExtractionResult, ScrapeOptions
from websift.observability.logging import configure_logging
from websift.security.validation import URLValidationError, validate_url

console = Console()
logger = structlog.get_logger(__name__)


def load_config(config_path: Optional[Path], log_level: str) -> Config:
    """Load configuration from ``config_path`` (or the discovered file) and apply the CLI log level."""
    path = config_path or find_config_file()
    config = Config.from_yaml(path) if path else Config()
    config.monitoring.log_level = log_level
    return config


def build_container(ctx: click.Context) -> DependencyContainer:
    return DependencyContainer(config=ctx.obj["config"], config_path=ctx.obj["config_path"])


def parse_headers(values: Tuple[str, ...]) -> Dict[str, str]:
    headers = {}
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = header_value.strip()
    return headers


def render_result(result: ExtractionResult) -> None:
    metadata = result.metadata
    console.print(
        Panel.fit(
            f"[bold]{metadata.title or result.url}[/bold]\n"
            f"URL: {result.url}\n"
            f"Method: {result.method}\n"
            f"Found: {result.found} element(s) for '{result.selector}'\n"
            f"Duration: {result.duration_ms} ms",
            title="Scrape Result",
        )
    )
    if not result.elements:
        return

    table = Table(title="Elements")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Tag", style="magenta")
    table.add_column("Text")
    for element in result.elements:
        text = element.text if len(element.text) <= 120 else element.text[:117] + "..."
        table.add_row(str(element.index), element.tag, text)
    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: str) -> None:
    """WebSift - selector-driven web extraction with search-backed discovery."""
    ctx.ensure_object(dict)
    config_path = Path(config) if config else None
    loaded = load_config(config_path, log_level)
    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = loaded
    configure_logging(loaded.monitoring)


@cli.command()
@click.argument("url")
@click.option("--selector", "-s", default=None, help="CSS selector (default: 'h1, h2, h3, p')")
@click.option("--javascript", "-j", is_flag=True, help="Render the page in a headless browser")
@click.option("--wait-for", default=None, help="Selector to wait for after rendering")
@click.option("--timeout", "timeout_ms", default=30000, type=click.IntRange(min=0), help="Timeout in milliseconds")
@click.option("--header", "-H", "headers", multiple=True, help="Extra request header, 'Name: value'")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def scrape(
    ctx: click.Context,
    url: str,
    selector: Optional[str],
    javascript: bool,
    wait_for: Optional[str],
    timeout_ms: int,
    headers: Tuple[str, ...],
    as_json: bool,
) -> None:
    """Extract the elements matching a selector from URL."""
    try:
        url = validate_url(url)
    except URLValidationError as e:
        raise click.BadParameter(str(e), param_hint="URL") from e

    request = ExtractionRequest(
        url=url,
        selector=selector or ctx.obj["config"].scraper.default_selector,
        options=ScrapeOptions(
            render_javascript=javascript,
            wait_for_selector=wait_for,
            timeout_ms=timeout_ms,
            extra_headers=parse_headers(headers),
        ),
    )

    async def run_scrape() -> ExtractionResult:
        container = build_container(ctx)
        async with container.lifecycle():
            return await container.get_extraction().scrape_website(request)

    try:
        result = asyncio.run(run_scrape())
    except ScrapeError as e:
        if as_json:
            click.echo(json.dumps({"error": "Scraping failed", "message": str(e)}))
        else:
            console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        render_result(result)


@cli.command()
@click.argument("query")
@click.option("--max-results", "-n", default=5, type=click.IntRange(min=0), help="Maximum search results")
@click.option("--selector", "-s", default=None, help="CSS selector applied to every result")
@click.option("--javascript", "-j", is_flag=True, help="Render result pages in a headless browser")
@click.option("--no-scrape", is_flag=True, help="Only list search results")
@click.option("--validate", "validate_results", is_flag=True, help="Drop social-media and malformed results")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    max_results: int,
    selector: Optional[str],
    javascript: bool,
    no_scrape: bool,
    validate_results: bool,
    as_json: bool,
) -> None:
    """Search the web for QUERY and scrape every result."""

    async def run_search() -> Dict[str, Any]:
        container = build_container(ctx)
        async with container.lifecycle():
            orchestrator = container.get_search()
            results = await orchestrator.search_websites(query, max_results)
            if validate_results:
                results = orchestrator.validate_results(results)

            payload: Dict[str, Any] = {
                "query": query,
                "searchResults": [result.to_dict() for result in results],
                "suggestions": orchestrator.get_search_suggestions(query),
            }
            if no_scrape or not results:
                return payload

            report = await container.get_batch().scrape_all(
                results,
                selector or ctx.obj["config"].scraper.default_selector,
                ScrapeOptions(render_javascript=javascript),
            )
            payload["scrapedData"] = [item.to_dict() for item in report.items]
            payload["summary"] = report.summary
            return payload

    payload = asyncio.run(run_search())

    if as_json:
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(title=f"Search results for '{query}'")
    table.add_column("Rank", style="cyan", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("URL", style="blue")
    table.add_column("Source", style="magenta")
    scraped: List[Dict[str, Any]] = payload.get("scrapedData", [])
    if scraped:
        table.add_column("Scraped")
    for index, result in enumerate(payload["searchResults"]):
        row = [str(result["rank"]), result["title"], result["url"], result["source"]]
        if scraped:
            item = scraped[index]
            row.append(f"✅ {item['scraped']['found']} found" if item["success"] else f"❌ {item['error']}")
        table.add_row(*row)
    console.print(table)

    if "summary" in payload:
        summary = payload["summary"]
        console.print(
            f"[green]{summary['successfulScrapes']}[/green] of {summary['totalFound']} scraped, "
            f"[red]{summary['failedScrapes']}[/red] failed"
        )
    console.print(f"[dim]Try also: {', '.join(payload['suggestions'])}[/dim]")


@cli.command()
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to bind to")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the HTTP API."""
    from websift.web.main import create_app

    config: Config = ctx.obj["config"]
    host = host or config.web.host
    port = port or config.web.port
    console.print(f"[green]🚀 Starting WebSift API at http://{host}:{port}[/green]")

    uvicorn.run(
        create_app(build_container(ctx)),
        host=host,
        port=port,
        log_level=config.monitoring.log_level.lower(),
    )


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
