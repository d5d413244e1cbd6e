"""Command-line entry points for regional news briefings."""

import json
import sys
from typing import Optional

import typer
from rich import print as rprint
from rich.markup import escape

from .config import configure_logging, get_settings
from .filters import filter_by_country, search_articles, trending_topics
from .pipeline import BriefingContext, get_region_articles, summarize_region
from .sources import UnknownRegionError, get_sources, list_regions, normalize_region
from .streaming import END_OF_STREAM

app = typer.Typer(help="Fetch regional RSS feeds and print deduplicated news briefings.")


def _build_context() -> BriefingContext:
    return BriefingContext.from_settings(get_settings())


def _check_region(region: str) -> str:
    try:
        get_sources(region)
    except UnknownRegionError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return normalize_region(region)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)."
    ),
):
    configure_logging(log_level)


@app.command("regions")
def regions_command():
    """List the regions and their feeds."""
    for info in list_regions():
        rprint(f"[cyan]{info.id}[/cyan] {info.name} ({info.source_count} sources)")
        for name in info.sources:
            rprint(f"  - {escape(name)}")


@app.command("news")
def news_command(
    region: str = typer.Argument(..., help="Region id, e.g. europe or north_america."),
    country: Optional[str] = typer.Option(None, "--country", help="Only articles mentioning this country."),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Substring search."),
    as_json: bool = typer.Option(False, "--json", help="Print articles as JSON."),
):
    """Print the deduplicated article list for a region."""
    key = _check_region(region)
    articles = get_region_articles(key, _build_context())
    articles = search_articles(filter_by_country(articles, country), query)

    if as_json:
        payload = [a.model_dump(mode="json", by_alias=True) for a in articles]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not articles:
        rprint("[yellow]No articles found.[/yellow]")
        return
    for article in articles:
        coverage = f" [dim](+{article.covered_by - 1} sources)[/dim]" if article.covered_by else ""
        rprint(f"[green]{escape(article.source_name)}[/green] {escape(article.title)}{coverage}")
    topics = trending_topics(articles)
    if topics:
        rprint(f"[cyan]Trending: {', '.join(topics)}[/cyan]")


@app.command("summarize")
def summarize_command(
    region: str = typer.Argument(..., help="Region id, e.g. europe or north_america."),
    country: Optional[str] = typer.Option(None, "--country", help="Narrow the briefing to one country."),
    stream: bool = typer.Option(False, "--stream", help="Print the briefing incrementally."),
):
    """Build the extractive briefing for a region."""
    key = _check_region(region)
    context = _build_context()
    summary = summarize_region(key, context, country)
    if not stream:
        typer.echo(summary)
        return
    for batch in context.streamer.stream(summary):
        if batch == END_OF_STREAM:
            break
        sys.stdout.write(batch)
        sys.stdout.flush()
    sys.stdout.write("\n")


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
):
    """Run the HTTP API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "world_briefing.server:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


def main():
    app()


if __name__ == "__main__":
    main()
