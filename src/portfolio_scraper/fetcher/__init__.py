"""Page fetching for the extraction strategies.

Sub-modules:
- ``config``       — constants (timeouts, pool sizing, accepted content types)
- ``http_fetcher`` — ``PageFetcher`` protocol, ``FetchResult`` and the
  ``httpx``-based ``HttpPageFetcher``
"""

from __future__ import annotations

from portfolio_scraper.fetcher.http_fetcher import FetchResult, HttpPageFetcher, PageFetcher

__all__ = [
    "FetchResult",
    "HttpPageFetcher",
    "PageFetcher",
]
