#!/usr/bin/env python3
"""
BeatCheck - Feed Fetching Core
==============================

Operator CLI for checking configuration and exercising the fetching core.

Usage:
    python main.py --help                    # Show all commands
    python main.py check-config              # Validate configuration
    python main.py fetch-feed URL            # Fetch and parse one feed
    python main.py discover URL              # Discover the feed behind a site
    python main.py fetch-content URL         # Fetch full article text
    python main.py blocklist --check TEXT    # Show or test the blocklist
    python main.py refresh URL [URL ...]     # Refresh several feeds concurrently
"""

import sys
import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from beatcheck.config.settings import get_settings
from beatcheck.models import Feed
from beatcheck.processing.blocklist import Blocklist
from beatcheck.processing.feed_fetcher import FeedFetcher
from beatcheck.services.content_fetcher import ContentFetcher
from beatcheck.utils.logging import configure_application_logging
from beatcheck.utils.exceptions import BeatCheckError, get_user_friendly_message

console = Console()
logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, debug):
    """BeatCheck - RSS/Atom feed fetching core."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug

    if ctx.invoked_subcommand is None:
        # Show help if no subcommand provided
        click.echo(ctx.get_help())
        return

    if ctx.invoked_subcommand != 'check-config':
        _setup_logging(debug)


def _setup_logging(debug: bool) -> None:
    try:
        settings = get_settings()
    except BeatCheckError as e:
        console.print(f"[bold red]❌ {get_user_friendly_message(e)}[/bold red]")
        sys.exit(1)

    configure_application_logging(
        log_level="DEBUG" if debug else settings.get_effective_log_level(),
        log_file=settings.logging.file_path,
        enable_console=settings.logging.console_logging,
        structured_logging=settings.logging.structured_logging,
        max_file_size=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )


@cli.command()
def check_config():
    """Validate environment variables and derived paths."""
    console.print("[bold blue]🔧 Checking BeatCheck Configuration[/bold blue]")

    try:
        settings = get_settings()
    except BeatCheckError as e:
        console.print(f"[bold red]❌ Configuration error: {e}[/bold red]")
        sys.exit(1)

    table = Table(title="Configuration Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    checks = [
        ("Feed Fetching", _check_fetch_config),
        ("Full Content", _check_content_config),
        ("Blocklist", _check_blocklist_config),
        ("Logging", _check_logging_config),
        ("Integrations", _check_integrations_config),
    ]

    all_passed = True
    for name, check_func in checks:
        status, details = check_func(settings)
        table.add_row(name, "✅ Valid" if status else "❌ Invalid", details)
        if not status:
            all_passed = False

    console.print(table)

    if all_passed:
        console.print("[bold green]✅ All configuration checks passed![/bold green]")
        sys.exit(0)
    else:
        console.print("[bold red]❌ Configuration validation failed[/bold red]")
        sys.exit(1)


@cli.command()
@click.argument('url')
@click.option('--limit', default=5, show_default=True, help='Articles to show')
def fetch_feed(url, limit):
    """Fetch and parse a single RSS/Atom feed."""
    console.print(f"[bold blue]📡 Fetching feed: {url}[/bold blue]")

    try:
        articles = asyncio.run(FeedFetcher().fetch_feed(0, url))
    except BeatCheckError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)

    console.print(f"[bold green]✅ Parsed {len(articles)} articles[/bold green]")

    table = Table(title=f"Articles (showing first {min(limit, len(articles))})")
    table.add_column("Published", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Link", overflow="fold")

    for article in articles[:limit]:
        published = article.published_at.strftime("%Y-%m-%d %H:%M") if article.published_at else "No date"
        table.add_row(published, article.title, article.author or "", article.url)

    console.print(table)


@cli.command()
@click.argument('url')
def discover(url):
    """Discover the RSS/Atom feed behind a site or feed URL."""
    console.print(f"[bold blue]🔍 Discovering feed at: {url}[/bold blue]")

    try:
        feed = asyncio.run(FeedFetcher().discover_feed(url))
    except BeatCheckError as e:
        console.print(f"[bold red]❌ {get_user_friendly_message(e)}[/bold red]")
        logger.debug(f"Discovery failed: {e}")
        sys.exit(1)

    table = Table(title="Discovered Feed")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Title", feed.title)
    table.add_row("Feed URL", feed.url)
    table.add_row("Site URL", feed.site_url or "")
    table.add_row("Description", feed.description or "")

    console.print(table)


@cli.command()
@click.argument('url')
@click.option('--full', is_flag=True, help='Print the whole text instead of a preview')
def fetch_content(url, full):
    """Fetch the full text of an article using browser cookies."""
    console.print(f"[bold blue]📰 Fetching article: {url}[/bold blue]")

    text = asyncio.run(ContentFetcher().fetch_full_content(url))
    if text is None:
        console.print("[yellow]⚠️ No readable content extracted[/yellow]")
        sys.exit(1)

    console.print(f"[bold green]✅ Extracted {len(text)} characters[/bold green]\n")
    console.print(text if full else text[:1000] + ("..." if len(text) > 1000 else ""))


@cli.command()
@click.option('--check', 'check_text', help='Test whether TEXT is blocked')
@click.option('--path', type=click.Path(dir_okay=False), help='Blocklist file to read')
def blocklist(check_text, path):
    """Show the keyword blocklist, or test a keyword against it."""
    blocked = Blocklist.load(path)

    if check_text is not None:
        if blocked.matches(check_text):
            console.print(f"[bold red]🚫 '{check_text}' is blocked[/bold red]")
        else:
            console.print(f"[bold green]✅ '{check_text}' is not blocked[/bold green]")
        return

    if blocked.is_empty():
        console.print(f"[yellow]📋 Blocklist is empty ({blocked.path})[/yellow]")
        return

    table = Table(title=f"Blocklist: {blocked.path}")
    table.add_column("Keyword", style="cyan")
    for keyword in sorted(blocked.keywords):
        table.add_row(keyword)

    console.print(table)
    console.print(f"\n[bold blue]📊 {len(blocked)} keywords[/bold blue]")


@cli.command()
@click.argument('urls', nargs=-1, required=True)
@click.option('--max-concurrent', type=int, default=None, help='Maximum concurrent fetches')
def refresh(urls, max_concurrent):
    """Refresh several feeds concurrently and summarize the results."""
    feeds = [Feed(id=i, title=url, url=url) for i, url in enumerate(urls, start=1)]
    console.print(f"[bold blue]🔄 Refreshing {len(feeds)} feeds[/bold blue]")

    fetcher = FeedFetcher(max_concurrent=max_concurrent)
    refreshed = dict(asyncio.run(fetcher.refresh_all(feeds)))

    table = Table(title="Feed Refresh Results")
    table.add_column("Feed", style="cyan", overflow="fold")
    table.add_column("Status")
    table.add_column("Articles", justify="right")

    for feed in feeds:
        if feed.id in refreshed:
            table.add_row(feed.url, "✅ OK", str(len(refreshed[feed.id])))
        else:
            table.add_row(feed.url, "❌ Failed", "-")

    console.print(table)
    console.print(
        f"\n[bold blue]📊 Summary: {len(refreshed)} successful, "
        f"{len(feeds) - len(refreshed)} failed[/bold blue]"
    )

    if not refreshed:
        sys.exit(1)


def _check_fetch_config(settings) -> tuple[bool, str]:
    """Check feed fetching configuration."""
    fetch = settings.fetch
    if fetch.connect_timeout > fetch.request_timeout:
        return False, "connect_timeout exceeds request_timeout"
    return True, (
        f"Parallel: {fetch.parallel_feeds}, Timeout: {fetch.request_timeout}s "
        f"(connect {fetch.connect_timeout}s)"
    )


def _check_content_config(settings) -> tuple[bool, str]:
    """Check full-content configuration and report available cookie stores."""
    content = settings.content
    chromium = [p for p in content.chromium_cookie_paths if Path(p).expanduser().is_file()]
    firefox = (Path(content.firefox_profiles_dir).expanduser() / "profiles.ini").is_file()

    stores = []
    if chromium:
        stores.append("Chromium")
    if firefox:
        stores.append("Firefox")

    return True, f"Width: {content.text_width}, Cookie stores: {', '.join(stores) or 'none'}"


def _check_blocklist_config(settings) -> tuple[bool, str]:
    """Check blocklist location."""
    path = settings.blocklist.resolved_path()
    if path.exists() and not path.is_file():
        return False, f"{path} is not a file"
    return True, f"{path}{'' if path.exists() else ' (not created)'}"


def _check_logging_config(settings) -> tuple[bool, str]:
    """Check logging configuration."""
    log_file = settings.logging.file_path or "console only"
    return True, f"Level: {settings.get_effective_log_level()}, File: {log_file}"


def _check_integrations_config(settings) -> tuple[bool, str]:
    """Report which optional integrations have credentials."""
    configured = []
    if settings.claude_api_key:
        configured.append("Claude")
    if settings.raindrop_token:
        configured.append("Raindrop")
    return True, f"Configured: {', '.join(configured) or 'none'}, DB: {settings.db_path}"


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 BeatCheck interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[bold red]❌ Unexpected error: {e}[/bold red]")
        sys.exit(1)
