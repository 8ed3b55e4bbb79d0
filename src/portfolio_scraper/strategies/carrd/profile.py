"""Artist identity for Carrd sites.

A platform subdomain is the only reliable identity signal: the label of
``caminukai-art.carrd.co`` is the artist's username.  Custom domains carry no
such signal; the only other marker honoured is an explicit
``<meta name="author">`` declaration.  It always sets the display name; on
a custom domain it is also the only entry of ``other_names``, while a
subdomain site keeps ``other_names`` to its label alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from portfolio_scraper.core.models import SourceURL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileInfo:
    """Identity fields of an :class:`~portfolio_scraper.core.models.ExtractionResult`."""

    username: str | None = None
    display_name: str | None = None
    other_names: frozenset[str] = frozenset()
    profile_url: str | None = None
    profile_urls: tuple[str, ...] = ()


def declared_author(soup: BeautifulSoup | None) -> str | None:
    """Return the trimmed ``content`` of ``<meta name="author">``, if any."""
    if soup is None:
        return None
    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        name = meta.get("name")
        if isinstance(name, str) and name.strip().lower() == "author":
            content = meta.get("content")
            if isinstance(content, str) and content.strip():
                return " ".join(content.split())
    return None


def resolve_profile(
    source: SourceURL,
    soup: BeautifulSoup | None = None,
    *,
    has_page_context: bool,
) -> ProfileInfo:
    """Derive identity and profile URLs for a classified URL.

    Args:
        source: The classified input URL (or the referer, for an asset that
            arrived with one).
        soup: The parsed page, when one was fetched.
        has_page_context: Whether a page was involved at all.  A bare asset
            URL has none and gets no ``profile_url``.

    Returns:
        A :class:`ProfileInfo`.  Every field may be empty; absence is normal.
    """
    root = source.root
    username = source.username
    display_name = declared_author(soup)

    if username:
        other_names = frozenset({username})
    elif display_name:
        other_names = frozenset({display_name})
    else:
        other_names = frozenset()

    info = ProfileInfo(
        username=username,
        display_name=display_name,
        other_names=other_names,
        profile_url=root if has_page_context else None,
        profile_urls=(root,) if root else (),
    )
    logger.debug(
        "carrd: profile for %s: username=%s display_name=%s",
        source.original,
        info.username,
        info.display_name,
    )
    return info
