"""Variant resolution and deduplication for Carrd media.

Carrd stores gallery uploads under a content-derived basename.  When the
uploader enabled full-size viewing, a higher-resolution sibling sits next to
the display copy::

    /assets/images/gallery01/a86d9fc4.jpg
    /assets/images/gallery01/a86d9fc4_original.jpg

Resolution always prefers the sibling.  Each probe is an independent,
idempotent ``HEAD`` request, so a page's probes run concurrently under a
semaphore; ``asyncio.gather`` returns results in submission order, which keeps
document order intact regardless of completion order.

A failed probe (timeout, connection reset, ...) resolves to "not found": one
unreachable variant never fails the page.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import posixpath
import urllib.parse
from collections.abc import Iterable, Sequence

from portfolio_scraper.core.models import MediaCandidate, MediaKind
from portfolio_scraper.core.url_utils import strip_query
from portfolio_scraper.fetcher.http_fetcher import PageFetcher
from portfolio_scraper.strategies.carrd.config import IMAGE_EXTENSIONS, ORIGINAL_SUFFIX

logger = logging.getLogger(__name__)


def has_original_suffix(url: str) -> bool:
    """Return ``True`` if the URL's basename already ends in ``_original``."""
    path = urllib.parse.urlsplit(url).path
    stem, _ext = posixpath.splitext(posixpath.basename(path))
    return stem.endswith(ORIGINAL_SUFFIX)


def original_variant_url(url: str) -> str | None:
    """Return the ``_original`` sibling of an image URL.

    Args:
        url: Image asset URL, query string allowed.

    Returns:
        The query-stripped sibling URL, or ``None`` if *url* is already the
        original or does not end in an image extension.

    Example::

        original_variant_url("https://a.carrd.co/assets/images/gallery01/a86d9fc4.jpg?v=1")
        # "https://a.carrd.co/assets/images/gallery01/a86d9fc4_original.jpg"
    """
    stripped = strip_query(url)
    parts = urllib.parse.urlsplit(stripped)
    stem, ext = posixpath.splitext(parts.path)
    if ext.lower() not in IMAGE_EXTENSIONS or has_original_suffix(stripped):
        return None
    return urllib.parse.urlunsplit(
        (parts.scheme, parts.netloc, f"{stem}{ORIGINAL_SUFFIX}{ext}", "", "")
    )


async def resolve_variant(raw_image_url: str, fetcher: PageFetcher) -> str:
    """Return the highest-fidelity URL for an image asset.

    Args:
        raw_image_url: Image URL as found on the page or supplied by the user.
        fetcher: Transport providing the ``exists`` probe.

    Returns:
        The ``_original`` sibling if it exists, otherwise *raw_image_url*.
        Either way the query string is stripped.
    """
    sibling = original_variant_url(raw_image_url)
    if sibling is None:
        return strip_query(raw_image_url)

    try:
        found = await fetcher.exists(sibling)
    except Exception as exc:  # noqa: BLE001
        logger.warning("carrd: variant probe failed for %s: %s", sibling, exc)
        found = False

    if found:
        logger.debug("carrd: using original variant %s", sibling)
        return sibling
    return strip_query(raw_image_url)


async def resolve_candidates(
    candidates: Sequence[MediaCandidate],
    fetcher: PageFetcher,
    concurrency: int = 8,
) -> list[MediaCandidate]:
    """Resolve every candidate's URL, probing distinct images concurrently.

    Videos are never probed; their resolved form is the query-stripped raw
    URL.  A raw URL that appears several times is probed once.

    Args:
        candidates: Candidates in document order.
        fetcher: Transport providing the ``exists`` probe.
        concurrency: Maximum number of probes in flight.

    Returns:
        New candidates, same order, with ``resolved_url`` set.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _bounded(raw_url: str) -> str:
        async with semaphore:
            return await resolve_variant(raw_url, fetcher)

    image_urls = list(
        dict.fromkeys(c.raw_url for c in candidates if c.kind is MediaKind.IMAGE)
    )
    resolved_urls = await asyncio.gather(*(_bounded(url) for url in image_urls))
    resolved = dict(zip(image_urls, resolved_urls))

    return [
        dataclasses.replace(
            candidate,
            resolved_url=resolved.get(candidate.raw_url, strip_query(candidate.raw_url)),
        )
        for candidate in candidates
    ]


def deduplicate(candidates: Iterable[MediaCandidate]) -> tuple[MediaCandidate, ...]:
    """Drop later candidates whose resolved URL was already seen.

    Query strings never distinguish two assets.  Survivors are renumbered
    so ``order_index`` stays contiguous.

    Args:
        candidates: Resolved candidates in document order.

    Returns:
        First occurrences only, in document order.
    """
    seen: set[str] = set()
    unique: list[MediaCandidate] = []
    for candidate in candidates:
        if candidate.dedup_key in seen:
            continue
        seen.add(candidate.dedup_key)
        unique.append(dataclasses.replace(candidate, order_index=len(unique)))
    return tuple(unique)
