"""Exception hierarchy for the portfolio scraper.

All custom exceptions subclass ``PortfolioScraperError`` so callers can catch
the whole hierarchy with a single ``except`` clause.

Hierarchy::

    PortfolioScraperError
    ├── FetchFailure           (url, status_code, reason)
    └── UnsupportedURLError    (url, platform)

Only a failed fetch of the primary page is surfaced to callers.  Pages with
unexpected structure produce an empty :class:`~portfolio_scraper.core.models.ExtractionResult`
and failed ``_original`` variant probes fall back to the unsuffixed asset, so
neither has an exception type.  URL classification is total and never raises.
"""

from __future__ import annotations


class PortfolioScraperError(Exception):
    """Base class for all portfolio scraper exceptions."""


class FetchFailure(PortfolioScraperError):
    """Raised when the page fetcher could not retrieve the primary page.

    No partial result accompanies this error since there was no HTML to
    extract from.

    Args:
        url: URL that was requested.
        reason: Human-readable failure description (e.g. ``"timeout"``,
            ``"HTTP 404"``).
        status_code: HTTP status code, or ``None`` on network error.
    """

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class UnsupportedURLError(PortfolioScraperError):
    """Raised when a strategy receives a URL it cannot interpret at all.

    This signals a routing mistake upstream (the registry handed the URL to
    the wrong strategy), not a degraded page.

    Args:
        url: The offending URL.
        platform: ``platform_name`` of the strategy that rejected it.
    """

    def __init__(self, url: str, platform: str | None = None) -> None:
        msg = f"Unsupported URL: {url}"
        if platform:
            msg += f" (platform '{platform}')"
        super().__init__(msg)
        self.url = url
        self.platform = platform
