"""Gallery extraction: media candidates and page sections from Carrd HTML.

Carrd renders each site as a stack of ``<section id="{anchor}-section">``
blocks, one per page of the site; ``https://name.carrd.co/#portfolio`` shows
the ``portfolio-section`` block.  Images are lazy-loaded: the real source sits
in ``data-src`` while ``src`` often holds an inline ``data:`` placeholder.
Gallery thumbnails may be wrapped in an ``<a>`` pointing at the full-size
asset.

The functions here walk the parsed tree once in document order and return
plain candidates; variant resolution and deduplication happen later in
:mod:`.resolver`.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from portfolio_scraper.core.models import MediaCandidate, MediaKind, PageSection, UrlKind
from portfolio_scraper.core.url_utils import extract_host, is_inline_data
from portfolio_scraper.strategies.carrd.config import (
    HTML_PARSER,
    LAZY_SOURCE_ATTRIBUTES,
    SECTION_ID_SUFFIX,
)
from portfolio_scraper.strategies.carrd.urls import classify

logger = logging.getLogger(__name__)

#: Elements whose descendants are never rendered by a browser with scripts on.
_HIDDEN_CONTAINERS: tuple[str, ...] = ("noscript", "template")


@dataclass(frozen=True)
class GalleryExtraction:
    """Result of :func:`extract_gallery`.

    Attributes:
        candidates: Media in document order, unresolved.
        sections: Anchored page sections in document order.
        soup: The parsed document, reused by the commentary normalizer so a
            page is parsed only once.
        scopes: For each candidate, the anchors of every section around it,
            nested ones included.
    """

    candidates: tuple[MediaCandidate, ...]
    sections: tuple[PageSection, ...]
    soup: BeautifulSoup = field(compare=False, repr=False)
    scopes: tuple[frozenset[str], ...] = field(default=(), compare=False, repr=False)

    def candidates_in(self, anchor: str | None) -> tuple[MediaCandidate, ...]:
        """Return the candidates anywhere inside the section *anchor* (all if ``None``)."""
        if anchor is None:
            return self.candidates
        return tuple(c for c, scope in zip(self.candidates, self.scopes) if anchor in scope)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_html(html: str | bytes | BeautifulSoup) -> BeautifulSoup:
    """Parse *html* with BeautifulSoup (pass-through for an already parsed tree)."""
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html, HTML_PARSER)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def _first_network_source(tag: Tag) -> str | None:
    for attribute in LAZY_SOURCE_ATTRIBUTES:
        value = tag.get(attribute)
        if isinstance(value, str) and value.strip() and not is_inline_data(value):
            return value.strip()
    return None


def effective_source(tag: Tag) -> str | None:
    """Return the element's network source, preferring the lazy-load attribute.

    ``data-src`` wins over ``src``; ``data:`` URIs are never returned.  For a
    ``<video>`` without a usable source of its own, child ``<source>``
    elements are checked in order.  The poster image is never a source.

    Args:
        tag: An ``<img>`` or ``<video>`` element.

    Returns:
        The raw (possibly relative) source, or ``None``.
    """
    source = _first_network_source(tag)
    if source is None and tag.name == "video":
        for child in tag.find_all("source"):
            source = _first_network_source(child)
            if source is not None:
                break
    return source


def _full_size_link(img: Tag, base_url: str, custom_domains: Iterable[str]) -> str | None:
    """Return the href of an enclosing ``<a>`` that links to a full-size image asset."""
    anchor = img.find_parent("a")
    if anchor is None:
        return None
    href = anchor.get("href")
    if not isinstance(href, str) or not href.strip() or is_inline_data(href):
        return None
    absolute = urllib.parse.urljoin(base_url, href.strip())
    target = classify(absolute, custom_domains)
    if target.kind is UrlKind.IMAGE and target.media_kind is MediaKind.IMAGE:
        return absolute
    return None


def media_source(
    tag: Tag,
    base_url: str,
    custom_domains: Iterable[str] = (),
) -> tuple[str, MediaKind] | None:
    """Return the absolute raw URL and kind of an ``<img>`` or ``<video>``.

    A thumbnail wrapped in a link to a full-size image asset reports the
    link target, so both markup patterns yield one asset.

    Args:
        tag: The media element.
        base_url: URL the page was fetched from (for relative sources).
        custom_domains: Extra platform hosts; the page's own host is always
            included.

    Returns:
        ``(absolute_url, kind)``, or ``None`` if the element has no network
        source.
    """
    domains = (*custom_domains, extract_host(base_url))
    if tag.name == "img":
        full_size = _full_size_link(tag, base_url, domains)
        if full_size is not None:
            return full_size, MediaKind.IMAGE
        kind = MediaKind.IMAGE
    elif tag.name == "video":
        kind = MediaKind.VIDEO
    else:
        return None

    source = effective_source(tag)
    if source is None:
        return None
    return urllib.parse.urljoin(base_url, source), kind


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def section_anchor(element_id: str) -> str:
    """Map a section element id to the fragment that selects it."""
    return element_id.removesuffix(SECTION_ID_SUFFIX)


def enclosing_section(tag: Tag) -> str | None:
    """Return the anchor of the nearest ``<section id=...>`` around *tag*."""
    section = tag.find_parent("section", id=True)
    if section is None:
        return None
    return section_anchor(str(section["id"]))


def enclosing_sections(tag: Tag) -> frozenset[str]:
    """Return the anchors of all ``<section id=...>`` elements around *tag*."""
    return frozenset(section_anchor(str(s["id"])) for s in tag.find_parents("section", id=True))


def find_section(soup: BeautifulSoup, fragment: str) -> Tag | None:
    """Locate the element a URL fragment refers to.

    ``#portfolio`` selects ``<section id="portfolio-section">``; failing that,
    any ``<section>`` whose id equals the fragment.

    Args:
        soup: Parsed page.
        fragment: Fragment without the leading ``#``.

    Returns:
        The section element, or ``None`` if the fragment matches nothing.
    """
    fragment = urllib.parse.unquote(fragment).strip()
    if not fragment:
        return None
    for element_id in (fragment + SECTION_ID_SUFFIX, fragment):
        section = soup.find("section", id=element_id)
        if isinstance(section, Tag):
            return section
    return None


def _is_hidden(tag: Tag) -> bool:
    return tag.find_parent(list(_HIDDEN_CONTAINERS)) is not None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_gallery(
    html: str | bytes | BeautifulSoup,
    base_url: str,
    custom_domains: Iterable[str] = (),
) -> GalleryExtraction:
    """Extract media candidates and page sections in document order.

    A page without any media yields an empty candidate sequence, not an
    error.  Duplicates are kept here; they are removed after variant
    resolution so that two raw URLs resolving to one asset count once.

    Args:
        html: Raw page HTML or an already parsed tree.
        base_url: URL the page was fetched from.
        custom_domains: Extra platform hosts (see :func:`media_source`).

    Returns:
        A :class:`GalleryExtraction`.
    """
    soup = parse_html(html)

    sections = tuple(
        PageSection(
            anchor=section_anchor(str(element["id"])),
            element_id=str(element["id"]),
            order_index=index,
        )
        for index, element in enumerate(soup.find_all("section", id=True))
    )

    candidates: list[MediaCandidate] = []
    scopes: list[frozenset[str]] = []
    for tag in soup.find_all(["img", "video"]):
        if _is_hidden(tag):
            continue
        found = media_source(tag, base_url, custom_domains)
        if found is None:
            logger.debug("carrd: skipping <%s> without a network source", tag.name)
            continue
        raw_url, kind = found
        candidates.append(
            MediaCandidate(
                raw_url=raw_url,
                kind=kind,
                order_index=len(candidates),
                section=enclosing_section(tag),
            )
        )
        scopes.append(enclosing_sections(tag))

    logger.debug(
        "carrd: found %d media candidates in %d sections on %s",
        len(candidates),
        len(sections),
        base_url,
    )
    return GalleryExtraction(
        candidates=tuple(candidates),
        sections=sections,
        soup=soup,
        scopes=tuple(scopes),
    )
