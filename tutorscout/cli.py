"""tutorscout CLI: run the crawl and manage the response cache.

Usage:
    tutorscout run                           # Crawl every location/subject pair
    tutorscout run -l melbourne -s physics   # Crawl a subset
    tutorscout targets                       # List pairs and listing URLs
    tutorscout clear-cache                   # Delete cached pages
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from tutorscout.common.exceptions import CacheUnavailableError
from tutorscout.common.response_cache import ResponseCache
from tutorscout.config import CrawlConfig
from tutorscout.driver.orchestrator import Orchestrator, filter_pairs
from tutorscout.scraper.listing import listing_url

_DEFAULTS = CrawlConfig()


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _build_config(
    base_url: str | None = None,
    locations: tuple[str, ...] = (),
    subjects: tuple[str, ...] = (),
    **overrides: object,
) -> CrawlConfig:
    try:
        return _DEFAULTS.with_overrides(
            base_url=base_url,
            locations=locations or None,
            subjects=subjects or None,
            **overrides,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.version_option(package_name="tutorscout")
def cli() -> None:
    """tutorscout: tutor directory crawler."""


@cli.command()
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=str(_DEFAULTS.output_path),
    show_default=True,
    help="CSV file to write (overwritten).",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=str(_DEFAULTS.cache_dir),
    show_default=True,
    help="Directory for cached HTML responses.",
)
@click.option(
    "--base-url",
    default=_DEFAULTS.base_url,
    show_default=True,
    help="Site to crawl.",
)
@click.option(
    "-l",
    "--location",
    "locations",
    multiple=True,
    help="Location slug to crawl (repeatable). Default: all.",
)
@click.option(
    "-s",
    "--subject",
    "subjects",
    multiple=True,
    help="Subject slug to crawl (repeatable). Default: all.",
)
@click.option(
    "--concurrency",
    type=int,
    default=_DEFAULTS.concurrency,
    show_default=True,
    help="Maximum concurrent profile fetches.",
)
@click.option(
    "--retries",
    "max_attempts",
    type=int,
    default=_DEFAULTS.max_attempts,
    show_default=True,
    help="Network attempts per URL.",
)
@click.option(
    "--delay",
    "request_delay",
    type=float,
    default=_DEFAULTS.request_delay,
    show_default=True,
    help="Seconds to wait before each network request.",
)
@click.option(
    "--backoff",
    "backoff_base",
    type=float,
    default=_DEFAULTS.backoff_base,
    show_default=True,
    help="Backoff seconds, multiplied by the attempt number.",
)
@click.option(
    "--timeout",
    "request_timeout",
    type=float,
    default=None,
    help="Transport timeout in seconds. Default: none.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def run(
    output_path: str,
    cache_dir: str,
    base_url: str,
    locations: tuple[str, ...],
    subjects: tuple[str, ...],
    concurrency: int,
    max_attempts: int,
    request_delay: float,
    backoff_base: float,
    request_timeout: float | None,
    verbose: bool,
) -> None:
    """Crawl every location/subject pair and write the CSV."""
    _configure_logging(verbose)

    config = _build_config(
        base_url=base_url,
        locations=locations,
        subjects=subjects,
        output_path=output_path,
        cache_dir=cache_dir,
        concurrency=concurrency,
        max_attempts=max_attempts,
        request_delay=request_delay,
        backoff_base=backoff_base,
        request_timeout=request_timeout,
    )

    pair_count = len(config.locations) * len(config.subjects)
    click.echo(f"Site:    {config.base_url}")
    click.echo(f"Pairs:   {pair_count}")
    click.echo(f"Cache:   {config.cache_dir}")

    orchestrator = Orchestrator(config)
    try:
        records = asyncio.run(orchestrator.run())
    except CacheUnavailableError as e:
        raise click.ClickException(str(e)) from e

    if orchestrator.write_error is None:
        click.echo(f"Wrote {len(records)} records to {config.output_path}")
    else:
        click.echo(
            f"Collected {len(records)} records but could not write "
            f"{config.output_path}",
            err=True,
        )


@cli.command()
@click.option(
    "--base-url",
    default=_DEFAULTS.base_url,
    show_default=True,
    help="Site to crawl.",
)
def targets(base_url: str) -> None:
    """List every location/subject pair and its first listing page."""
    config = _build_config(base_url=base_url)
    for pair in filter_pairs(config):
        location, subject = pair.label()
        url = listing_url(config.base_url, pair, 1)
        click.echo(f"{location:<10} {subject:<20} {url}")


@cli.command("clear-cache")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=str(_DEFAULTS.cache_dir),
    show_default=True,
    help="Directory for cached HTML responses.",
)
def clear_cache(cache_dir: str) -> None:
    """Delete every cached response so the next run refetches."""
    removed = ResponseCache(Path(cache_dir)).clear()
    click.echo(f"Removed {removed} cached responses from {cache_dir}")


def main() -> None:
    """Entry point for the ``tutorscout`` console script."""
    cli()
