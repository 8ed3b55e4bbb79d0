"""Abstract base class for all site extraction strategies.

Every platform family (one site builder and its custom-domain variant) is
one ``ExtractionStrategy`` subclass.  The registry picks a strategy by host;
the strategy then does the finer-grained work: classify the URL, fetch and
interpret the page, resolve media variants and normalize commentary.

Example usage::

    from portfolio_scraper.strategies.base import ExtractionStrategy
    from portfolio_scraper.strategies.registry import register

    @register
    class MyStrategy(ExtractionStrategy):
        platform_name = "my_platform"
        description = "My site builder"

        @classmethod
        def handles_host_of(cls, url, settings): ...
        def classify(self, url): ...
        async def extract(self, url, referer=None): ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from portfolio_scraper.config.settings import Settings, get_settings
from portfolio_scraper.core.models import ExtractionResult, SourceURL, UrlKind

if TYPE_CHECKING:
    from portfolio_scraper.fetcher.http_fetcher import PageFetcher

logger = logging.getLogger(__name__)


class ExtractionStrategy(ABC):
    """Abstract base class for per-platform extraction strategies.

    Subclasses must define the class-level attributes ``platform_name`` and
    ``description`` and implement all abstract methods.  The constructor
    injects the page fetcher so strategies never manage HTTP transport
    themselves.

    Class Attributes:
        platform_name: Unique registry key (e.g. ``"carrd"``).
        description: One-line human-readable description.

    Args:
        fetcher: Transport used for page fetches and asset probes.
        settings: Optional settings override; defaults to :func:`get_settings`.
    """

    platform_name: str
    description: str = ""

    def __init__(
        self,
        fetcher: PageFetcher,
        settings: Settings | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Abstract interface, implemented by every strategy
    # ------------------------------------------------------------------

    @classmethod
    @abstractmethod
    def handles_host_of(cls, url: str, settings: Settings) -> bool:
        """Return ``True`` if *url* is on a host served by this platform.

        A classmethod so that
        :func:`~portfolio_scraper.strategies.registry.find_strategy` can route
        without building a strategy.  Must be cheap and must not perform I/O.
        """

    @classmethod
    def handles_same_site(cls, url: str, referer: str, settings: Settings) -> bool:
        """Return ``True`` if a same-host *referer* makes *url* this platform's.

        Consulted only after no strategy claims either host outright.
        """
        return False

    def handles_url(self, url: str) -> bool:
        """Return ``True`` if *url* is on a host served by this platform."""
        return type(self).handles_host_of(url, self.settings)

    @abstractmethod
    def classify(self, url: str) -> SourceURL:
        """Classify *url* into image, page, profile or unclassified.

        Must be total: unrecognised URLs become ``UrlKind.UNCLASSIFIED``
        rather than raising.
        """

    @abstractmethod
    async def extract(self, url: str, referer: str | None = None) -> ExtractionResult:
        """Run the full extraction for *url*.

        Args:
            url: The URL the user supplied.
            referer: Optional page the URL was found on.  Lets a bare asset
                URL recover its page context.

        Returns:
            A freshly built :class:`ExtractionResult`.

        Raises:
            FetchFailure: If the primary page could not be fetched.
            UnsupportedURLError: If *url* cannot be interpreted at all.
        """

    # ------------------------------------------------------------------
    # Convenience predicates
    # ------------------------------------------------------------------

    def is_image_url(self, url: str) -> bool:
        """Return ``True`` if *url* classifies as a direct asset URL."""
        return self.classify(url).kind is UrlKind.IMAGE

    def is_page_url(self, url: str) -> bool:
        """Return ``True`` if *url* classifies as a page URL."""
        return self.classify(url).kind is UrlKind.PAGE

    def is_profile_url(self, url: str) -> bool:
        """Return ``True`` if *url* classifies as a bare profile URL."""
        return self.classify(url).kind is UrlKind.PROFILE
