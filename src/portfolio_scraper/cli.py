"""Command-line entry point: extract one URL and print the result as JSON.

Usage::

    portfolio-scraper https://lytell.carrd.co/#portfolio
    portfolio-scraper "https://hyphensam.com/assets/images/image04.jpg?v=2cc95429" \\
        --referer https://hyphensam.com/#test-image

Options:
    --referer        Page the URL was found on.
    --custom-domain  Extra host served by Carrd (repeatable).
    --platform       Skip host routing and use this strategy.
    --log-level      Logging verbosity (default from settings).

Exit codes:
    0 — Success; the result is printed to stdout.
    1 — No strategy for the URL, unsupported URL, or the page could not be
        fetched.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from portfolio_scraper.config.settings import Settings, get_settings
from portfolio_scraper.core.exceptions import PortfolioScraperError
from portfolio_scraper.core.logging_config import configure_logging
from portfolio_scraper.core.models import ExtractionResult
from portfolio_scraper.fetcher.http_fetcher import HttpPageFetcher
from portfolio_scraper.strategies.registry import autodiscover, find_strategy, get_strategy


async def _run(
    url: str,
    referer: str | None,
    platform: str | None,
    settings: Settings,
) -> ExtractionResult:
    """Route *url* to a strategy and run the extraction.

    Raises:
        PortfolioScraperError: On fetch failure or an unsupported URL.
        KeyError: If *platform* names no registered strategy.
        LookupError: If no strategy handles *url*.
    """
    autodiscover()
    if platform:
        strategy_cls = get_strategy(platform)
    else:
        found = find_strategy(url, referer=referer, settings=settings)
        if found is None:
            raise LookupError(f"No strategy handles {url}")
        strategy_cls = found

    async with HttpPageFetcher(
        user_agent=settings.user_agent,
        timeout=settings.request_timeout,
    ) as fetcher:
        return await strategy_cls(fetcher, settings).extract(url, referer=referer)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    parser = argparse.ArgumentParser(
        prog="portfolio-scraper",
        description="Extract artwork, identity and commentary from a portfolio site URL.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("url", help="Asset, page or profile URL.")
    parser.add_argument("--referer", default=None, help="Page the URL was found on.")
    parser.add_argument(
        "--custom-domain",
        action="append",
        default=[],
        dest="custom_domains",
        help="Custom domain served by Carrd. May be given more than once.",
    )
    parser.add_argument(
        "--platform",
        default=None,
        help="Use this strategy instead of routing by host (e.g. 'carrd').",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging verbosity: DEBUG, INFO, WARNING, ERROR.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``portfolio-scraper`` console script."""
    args = _parse_args(argv)
    settings = get_settings()
    if args.custom_domains:
        settings = Settings(
            carrd_custom_domains=[*settings.carrd_custom_domains, *args.custom_domains]
        )
    configure_logging(args.log_level or settings.log_level)

    try:
        result = asyncio.run(_run(args.url, args.referer, args.platform, settings))
    except (PortfolioScraperError, LookupError) as exc:
        print(f"[portfolio-scraper] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    print(result.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
