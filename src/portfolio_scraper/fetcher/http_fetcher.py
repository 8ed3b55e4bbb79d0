"""Async page fetcher used by the extraction strategies.

The strategies depend only on the :class:`PageFetcher` protocol: one call to
retrieve a page's bytes and one existence check for asset probing.
:class:`HttpPageFetcher` is the default ``httpx`` implementation; callers with
their own transport (caching, retries, rate limiting) pass any object with
the same two coroutines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Protocol

import httpx

from portfolio_scraper.fetcher.config import (
    CONNECTION_POOL_LIMITS,
    DEFAULT_TIMEOUT,
    HTML_CONTENT_TYPES,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass
class FetchResult:
    """Result of a single page fetch attempt.

    Attributes:
        content: Raw response body, or ``None`` if the fetch failed.
        content_type: Value of the ``Content-Type`` header (may be empty).
        status_code: HTTP status code, or ``None`` on network error.
        final_url: URL after following redirects.
        error: Human-readable error description, or ``None`` on success.
        encoding: Charset reported by the response, if any.
    """

    content: bytes | None
    content_type: str
    status_code: int | None
    final_url: str | None
    error: str | None
    encoding: str | None = None

    @property
    def ok(self) -> bool:
        """``True`` when a body was retrieved without error."""
        return self.error is None and self.content is not None

    @property
    def text(self) -> str:
        """Response body decoded with the reported charset (UTF-8 fallback)."""
        if self.content is None:
            return ""
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class PageFetcher(Protocol):
    """Transport consumed by the extraction strategies.

    Both methods are potentially slow, fallible network calls and are
    expected to apply their own timeouts.
    """

    async def fetch(self, url: str, *, referer: str | None = None) -> FetchResult:
        """Retrieve *url*, optionally sending a ``Referer`` header.

        Failures are reported through :attr:`FetchResult.error`, not raised.
        """
        ...

    async def exists(self, url: str) -> bool:
        """Return whether the asset at *url* exists.

        May raise on network errors; callers decide how to recover.
        """
        ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _media_type(content_type: str) -> str:
    return content_type.lower().split(";")[0].strip()


def _is_html_content_type(content_type: str) -> bool:
    """Return ``True`` if the Content-Type is HTML, or absent."""
    media_type = _media_type(content_type)
    return not media_type or media_type in HTML_CONTENT_TYPES


# ---------------------------------------------------------------------------
# httpx implementation
# ---------------------------------------------------------------------------


class HttpPageFetcher:
    """:class:`PageFetcher` implementation backed by ``httpx.AsyncClient``.

    Args:
        client: Optional injected client (for connection sharing and tests).
            When omitted the fetcher builds and owns its own client; use the
            fetcher as an async context manager to close it.
        user_agent: ``User-Agent`` header sent with every request.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        user_agent: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = client is None
        self.timeout = timeout
        self.headers: dict[str, str] = {"User-Agent": user_agent} if user_agent else {}
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            limits=httpx.Limits(**CONNECTION_POOL_LIMITS),
        )

    async def __aenter__(self) -> HttpPageFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str, *, referer: str | None = None) -> FetchResult:
        """Fetch a page with a single ``GET``.

        Performs the following checks in order:

        1. **HTTP GET** with the configured user-agent and optional referer,
           following redirects.
        2. **HTTP error status** — any status >= 400 becomes an error result.
        3. **Content type** — non-HTML bodies (images, PDFs, ...) become an
           error result; a missing header is accepted.

        Args:
            url: Page URL.
            referer: Optional ``Referer`` header value.

        Returns:
            A :class:`FetchResult`.  Never raises for transport failures.
        """
        headers = dict(self.headers)
        if referer:
            headers["Referer"] = referer

        try:
            response = await self._client.get(
                url,
                headers=headers,
                timeout=self.timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException:
            logger.warning("fetcher: timeout fetching %s", url)
            return FetchResult(None, "", None, url, "timeout")
        except httpx.TooManyRedirects:
            logger.warning("fetcher: too many redirects for %s", url)
            return FetchResult(None, "", None, url, "too many redirects")
        except httpx.RequestError as exc:
            logger.warning("fetcher: request error for %s: %s", url, exc)
            return FetchResult(None, "", None, url, f"request error: {exc}")

        final_url = str(response.url)
        content_type = response.headers.get("content-type", "")

        if response.status_code >= 400:
            logger.info("fetcher: HTTP %d for %s", response.status_code, url)
            return FetchResult(
                None,
                content_type,
                response.status_code,
                final_url,
                f"HTTP {response.status_code}",
            )

        if not _is_html_content_type(content_type):
            logger.info("fetcher: non-HTML content-type '%s' for %s", content_type, url)
            return FetchResult(
                None,
                content_type,
                response.status_code,
                final_url,
                f"non-HTML content-type: {content_type}",
            )

        return FetchResult(
            content=response.content,
            content_type=content_type,
            status_code=response.status_code,
            final_url=final_url,
            error=None,
            encoding=response.charset_encoding,
        )

    async def exists(self, url: str) -> bool:
        """Check whether an asset exists with a ``HEAD`` request.

        Servers that reject ``HEAD`` (405) are retried with a streamed
        ``GET`` whose body is never read.  An HTML response counts as
        missing because some hosts answer unknown paths with their
        landing page.

        Args:
            url: Asset URL.

        Returns:
            ``True`` if the asset exists.

        Raises:
            httpx.HTTPError: On network errors and timeouts.
        """
        response = await self._client.head(
            url,
            headers=self.headers,
            timeout=self.timeout,
            follow_redirects=True,
        )
        if response.status_code == 405:
            async with self._client.stream(
                "GET",
                url,
                headers=self.headers,
                timeout=self.timeout,
                follow_redirects=True,
            ) as streamed:
                response = streamed

        if response.status_code >= 400:
            logger.debug("fetcher: HTTP %d probing %s", response.status_code, url)
            return False

        media_type = _media_type(response.headers.get("content-type", ""))
        return media_type not in HTML_CONTENT_TYPES
