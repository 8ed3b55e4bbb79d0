"""Data model shared by every extraction strategy.

Internal values (classified URLs, media candidates, page sections) are frozen
dataclasses.  The unit handed to the catalog pipeline,
:class:`ExtractionResult`, is a frozen Pydantic model so it validates its own
invariants and serialises to JSON without extra glue.

Absence semantics of :class:`ExtractionResult` fields:

- ``page_url``: ``None`` when the input was a bare asset URL with no
  referring page.  In that case ``media`` holds exactly the one asset and
  both commentary fields are empty.
- ``profile_url``: ``None`` when no page context was available.
- ``profile_urls``: empty when the site could not be identified as a platform
  site at all.
- ``username``: ``None`` for custom domains (no subdomain signal).
- ``display_name``: ``None`` unless the page declares an author.
- ``other_names``: may be empty.
- ``commentary_title`` / ``commentary_body``: empty strings, never ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from portfolio_scraper.core.url_utils import strip_query


class UrlKind(str, Enum):
    """Classification of an input URL.

    Attributes:
        IMAGE: Direct asset URL (image or video file).
        PAGE: Page URL, usually anchored to a subsection (``/#portfolio``).
        PROFILE: Bare site root (``https://name.carrd.co``).
        UNCLASSIFIED: Anything else.  The safe default, never an error.
    """

    IMAGE = "image"
    PAGE = "page"
    PROFILE = "profile"
    UNCLASSIFIED = "unclassified"


class MediaKind(str, Enum):
    """Kind of a media asset."""

    IMAGE = "image"
    VIDEO = "video"


class TitlePolicy(str, Enum):
    """Which heading of a page section becomes ``commentary_title``.

    Attributes:
        NONE: Never promote a heading; all headings stay in the body.
        FIRST_H1: Promote the first ``<h1>`` of the selected scope and drop it
            from the body.
    """

    NONE = "none"
    FIRST_H1 = "first_h1"


@dataclass(frozen=True)
class SourceURL:
    """A classified input URL.

    Attributes:
        kind: Result of classification.
        original: The URL exactly as supplied.
        canonical_form: Form used for fetching.  Image URLs keep their query
            verbatim (the platform serves cache-busted assets); page URLs
            drop the query but keep the fragment; profile URLs are reduced
            to ``scheme://host``.
        host: Lowercase hostname without ``www.``.
        fragment: Fragment without ``#`` (empty string if none).
        username: Platform subdomain label, or ``None`` for custom domains
            and unclassified URLs.
        media_kind: For ``IMAGE`` URLs, whether the asset is an image or a
            video; ``None`` otherwise.
    """

    kind: UrlKind
    original: str
    canonical_form: str
    host: str = ""
    fragment: str = ""
    username: str | None = None
    media_kind: MediaKind | None = None

    @property
    def root(self) -> str | None:
        """``scheme://host`` of the URL, or ``None`` if unclassified."""
        if self.kind is UrlKind.UNCLASSIFIED:
            return None
        scheme = self.canonical_form.split("://", 1)[0].lower()
        return f"{scheme}://{self.host}" if self.host else None


@dataclass(frozen=True)
class PageSection:
    """An anchored section of a page (``<section id="portfolio-section">``).

    Attributes:
        anchor: Fragment that selects the section (``"portfolio"``).
        element_id: The element's ``id`` attribute.
        order_index: Position among the page's sections.
    """

    anchor: str
    element_id: str
    order_index: int


@dataclass(frozen=True)
class MediaCandidate:
    """An image or video reference found on a page.

    Attributes:
        raw_url: Absolute URL exactly as referenced by the markup.
        kind: Image or video.
        order_index: Position in document order (stable ordering key).
        resolved_url: Highest-fidelity URL after variant resolution, or
            ``None`` before resolution.
        size_bytes: Filled by a downstream fetch, always ``None`` here.
        section: Anchor of the enclosing page section, if any.
    """

    raw_url: str
    kind: MediaKind
    order_index: int
    resolved_url: str | None = None
    size_bytes: int | None = None
    section: str | None = None

    @property
    def dedup_key(self) -> str:
        """URL used for duplicate detection; query strings never count."""
        return strip_query(self.resolved_url or self.raw_url)

    @property
    def url(self) -> str:
        """Resolved URL when available, raw URL otherwise."""
        return self.resolved_url or self.raw_url


class ExtractionResult(BaseModel):
    """Extraction output for one input URL, consumed by the catalog pipeline.

    Constructed fresh per extraction call and immutable afterwards.  See the
    module docstring for the absence semantics of each field.
    """

    model_config = ConfigDict(frozen=True)

    page_url: str | None = None
    profile_url: str | None = None
    profile_urls: tuple[str, ...] = ()
    username: str | None = None
    display_name: str | None = None
    other_names: frozenset[str] = frozenset()
    media: tuple[MediaCandidate, ...] = ()
    commentary_title: str = ""
    commentary_body: str = ""

    @model_validator(mode="after")
    def _check_bare_asset_invariant(self) -> ExtractionResult:
        if self.page_url is None:
            if len(self.media) != 1:
                raise ValueError(
                    f"a result without page_url must carry exactly one media item, got {len(self.media)}"
                )
            if self.commentary_title or self.commentary_body:
                raise ValueError("a result without page_url cannot carry commentary")
        return self

    @property
    def media_urls(self) -> list[str]:
        """Resolved media URLs in page order."""
        return [candidate.url for candidate in self.media]
