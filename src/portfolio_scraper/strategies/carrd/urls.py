"""URL classification for Carrd sites.

Classification is a pure function over an explicit, ordered rule table of
``(matcher, UrlKind)`` pairs; the first matching rule wins and
``UrlKind.UNCLASSIFIED`` is the fallback.  Nothing here performs I/O, so every
rule can be tested without fetching a page.

Examples::

    classify("https://rosymiz.carrd.co/assets/images/gallery01/1a19b400.jpg?v=c6f079b5").kind
    # UrlKind.IMAGE
    classify("https://caminukai-art.carrd.co/#home").kind
    # UrlKind.PAGE
    classify("https://caminukai-art.carrd.co#").kind
    # UrlKind.PROFILE
"""

from __future__ import annotations

import urllib.parse
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from portfolio_scraper.core.models import MediaKind, SourceURL, UrlKind
from portfolio_scraper.core.url_utils import (
    path_extension,
    strip_query_keep_fragment,
)
from portfolio_scraper.strategies.carrd.config import (
    ASSET_PATH_PREFIXES,
    IMAGE_EXTENSIONS,
    PLATFORM_HOST_RE,
    RESERVED_LABELS,
    VIDEO_EXTENSIONS,
)


@dataclass(frozen=True)
class _ParsedUrl:
    """The parts of a URL the rules look at."""

    scheme: str
    host: str
    path: str
    fragment: str
    is_platform_host: bool


# ---------------------------------------------------------------------------
# Host helpers
# ---------------------------------------------------------------------------


def _normalize_host(host: str) -> str:
    return host.lower().rstrip(".").removeprefix("www.")


def platform_username(host: str) -> str | None:
    """Return the site label of a platform subdomain, or ``None``.

    Args:
        host: Hostname such as ``"caminukai-art.carrd.co"``.

    Returns:
        ``"caminukai-art"``; ``None`` for custom domains and reserved labels.
    """
    match = PLATFORM_HOST_RE.match(host.lower().rstrip("."))
    if match is None:
        return None
    username = match.group("username")
    return None if username in RESERVED_LABELS else username


def is_platform_host(host: str, custom_domains: Iterable[str] = ()) -> bool:
    """Return ``True`` for platform subdomains and the given custom domains."""
    if platform_username(host) is not None:
        return True
    normalized = _normalize_host(host)
    return bool(normalized) and normalized in {_normalize_host(d) for d in custom_domains}


def media_kind_for(url: str) -> MediaKind | None:
    """Return the media kind implied by the URL's final extension, or ``None``.

    ``video02.mp4.jpg`` (a video's cover image) is an image.
    """
    extension = path_extension(url)
    if extension in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if extension in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    return None


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


def _is_asset(parsed: _ParsedUrl) -> bool:
    return parsed.path.startswith(ASSET_PATH_PREFIXES) and media_kind_for(parsed.path) is not None


def _is_site_root(parsed: _ParsedUrl) -> bool:
    return parsed.path in ("", "/") and not parsed.fragment


def _is_page(parsed: _ParsedUrl) -> bool:
    return not parsed.path.startswith(ASSET_PATH_PREFIXES)


_RULES: tuple[tuple[Callable[[_ParsedUrl], bool], UrlKind], ...] = (
    (_is_asset, UrlKind.IMAGE),
    (_is_site_root, UrlKind.PROFILE),
    (_is_page, UrlKind.PAGE),
)
"""Ordered ``(matcher, kind)`` pairs applied to URLs on platform hosts."""


def _parse(url: str, custom_domains: Iterable[str]) -> _ParsedUrl | None:
    try:
        parts = urllib.parse.urlsplit(url.strip())
        host = parts.hostname or ""
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not host:
        return None
    return _ParsedUrl(
        scheme=parts.scheme.lower(),
        host=_normalize_host(host),
        path=parts.path,
        fragment=parts.fragment,
        is_platform_host=is_platform_host(host, custom_domains),
    )


def _canonical_form(kind: UrlKind, url: str, parsed: _ParsedUrl) -> str:
    if kind is UrlKind.IMAGE:
        return url
    if kind is UrlKind.PROFILE:
        return f"{parsed.scheme}://{parsed.host}"
    return strip_query_keep_fragment(url)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify(url: str, custom_domains: Iterable[str] = ()) -> SourceURL:
    """Classify a URL as an asset, page, profile or unclassified.

    Never raises.  Query parameters play no part in classification.

    Args:
        url: Any URL string.
        custom_domains: Hosts known to be served by the platform in addition
            to its own subdomains.

    Returns:
        An immutable :class:`SourceURL`.
    """
    url = url.strip()
    parsed = _parse(url, custom_domains)
    if parsed is None or not parsed.is_platform_host:
        return SourceURL(kind=UrlKind.UNCLASSIFIED, original=url, canonical_form=url)

    for matcher, kind in _RULES:
        if matcher(parsed):
            return SourceURL(
                kind=kind,
                original=url,
                canonical_form=_canonical_form(kind, url, parsed),
                host=parsed.host,
                fragment=parsed.fragment,
                username=platform_username(parsed.host),
                media_kind=media_kind_for(parsed.path) if kind is UrlKind.IMAGE else None,
            )

    return SourceURL(kind=UrlKind.UNCLASSIFIED, original=url, canonical_form=url)


def is_image_url(url: str, custom_domains: Iterable[str] = ()) -> bool:
    """Return ``True`` if *url* is a direct asset URL on a platform host."""
    return classify(url, custom_domains).kind is UrlKind.IMAGE


def is_page_url(url: str, custom_domains: Iterable[str] = ()) -> bool:
    """Return ``True`` if *url* is a page URL on a platform host."""
    return classify(url, custom_domains).kind is UrlKind.PAGE


def is_profile_url(url: str, custom_domains: Iterable[str] = ()) -> bool:
    """Return ``True`` if *url* is a bare site root on a platform host."""
    return classify(url, custom_domains).kind is UrlKind.PROFILE
