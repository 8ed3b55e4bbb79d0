"""Carrd extraction strategy.

Ties the Carrd components together::

    classify ─┬─ image ──────────────► resolve variant ─► single-media result
              │    └─ same-site referer ► fetch referer ─► + commentary
              └─ page / profile ─► fetch ─► parse once ─┬─ gallery ─► resolve ─► dedup
                                                        ├─ commentary
                                                        └─ profile

Only a failed fetch of the primary page raises.  A page whose markup
yields nothing produces an empty but valid result.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from bs4 import BeautifulSoup, Tag

from portfolio_scraper.config.settings import Settings
from portfolio_scraper.core.exceptions import FetchFailure, UnsupportedURLError
from portfolio_scraper.core.logging_config import source_url_var
from portfolio_scraper.core.models import (
    ExtractionResult,
    MediaCandidate,
    MediaKind,
    SourceURL,
    UrlKind,
)
from portfolio_scraper.core.url_utils import extract_host, strip_query
from portfolio_scraper.strategies.base import ExtractionStrategy
from portfolio_scraper.strategies.carrd import urls
from portfolio_scraper.strategies.carrd.commentary import Commentary, normalize
from portfolio_scraper.strategies.carrd.gallery import (
    GalleryExtraction,
    extract_gallery,
    find_section,
    section_anchor,
)
from portfolio_scraper.strategies.carrd.profile import resolve_profile
from portfolio_scraper.strategies.carrd.resolver import (
    deduplicate,
    resolve_candidates,
    resolve_variant,
)
from portfolio_scraper.strategies.registry import register

logger = structlog.get_logger(__name__)


@register
class CarrdStrategy(ExtractionStrategy):
    """Extraction strategy for Carrd one-page sites.

    Custom domains are recognised when listed in
    ``Settings.carrd_custom_domains``, or for a single call when the URL
    arrives with a referer on the same host.
    """

    platform_name = "carrd"
    description = "Carrd one-page sites (*.carrd.co, *.crd.co and custom domains)"

    @classmethod
    def handles_host_of(cls, url: str, settings: Settings) -> bool:
        host = extract_host(url)
        return bool(host) and urls.is_platform_host(host, settings.carrd_custom_domains)

    @classmethod
    def handles_same_site(cls, url: str, referer: str, settings: Settings) -> bool:
        host = extract_host(url)
        return bool(host) and extract_host(referer) == host

    def classify(self, url: str) -> SourceURL:
        return urls.classify(url, self.settings.carrd_custom_domains)

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def extract(self, url: str, referer: str | None = None) -> ExtractionResult:
        """Extract media, identity and commentary for *url*.

        Args:
            url: Asset, page or profile URL.
            referer: Page the URL was found on, if known.

        Returns:
            A fresh :class:`ExtractionResult`.

        Raises:
            FetchFailure: If the page (for page and profile URLs) could not
                be fetched.
            UnsupportedURLError: If *url* is neither on a Carrd host nor a
                direct media file.
        """
        token = source_url_var.set(url)
        try:
            with structlog.contextvars.bound_contextvars(platform=self.platform_name):
                result = await self._extract(url, referer)
        finally:
            source_url_var.reset(token)

        logger.info(
            "extraction_complete",
            source_url=url,
            page_url=result.page_url,
            media=len(result.media),
            username=result.username,
        )
        return result

    async def _extract(self, url: str, referer: str | None) -> ExtractionResult:
        domains = list(self.settings.carrd_custom_domains)
        same_site = bool(referer) and extract_host(referer or "") == extract_host(url)
        if same_site:
            domains.append(extract_host(url))

        source = urls.classify(url, domains)
        logger.debug("classified", kind=source.kind.value, canonical=source.canonical_form)

        if source.kind is UrlKind.IMAGE:
            if referer and same_site:
                page = urls.classify(referer, domains)
                if page.kind in (UrlKind.PAGE, UrlKind.PROFILE):
                    return await self._extract_asset_with_page(source, page, domains)
            return await self._extract_asset(source)

        if source.kind in (UrlKind.PAGE, UrlKind.PROFILE):
            return await self._extract_page(source, domains, referer)

        kind = urls.media_kind_for(url)
        if kind is not None:
            logger.info("passthrough_media", reason="host not recognised as a Carrd site")
            return ExtractionResult(
                media=(MediaCandidate(raw_url=url, resolved_url=url, kind=kind, order_index=0),),
            )
        raise UnsupportedURLError(url, self.platform_name)

    async def _resolve_single(self, source: SourceURL) -> MediaCandidate:
        kind = source.media_kind or MediaKind.IMAGE
        if kind is MediaKind.IMAGE:
            resolved = await resolve_variant(source.canonical_form, self.fetcher)
        else:
            resolved = strip_query(source.canonical_form)
        return MediaCandidate(
            raw_url=source.canonical_form,
            resolved_url=resolved,
            kind=kind,
            order_index=0,
        )

    async def _extract_asset(self, source: SourceURL) -> ExtractionResult:
        candidate = await self._resolve_single(source)
        profile = resolve_profile(source, has_page_context=False)
        return ExtractionResult(
            page_url=None,
            profile_url=None,
            profile_urls=profile.profile_urls,
            username=profile.username,
            display_name=profile.display_name,
            other_names=profile.other_names,
            media=(candidate,),
        )

    async def _extract_asset_with_page(
        self,
        source: SourceURL,
        page: SourceURL,
        domains: Sequence[str],
    ) -> ExtractionResult:
        candidate = await self._resolve_single(source)
        commentary = Commentary()
        soup: BeautifulSoup | None = None

        fetched = await self.fetcher.fetch(strip_query(page.canonical_form))
        if fetched.ok:
            base_url = fetched.final_url or page.canonical_form
            gallery = extract_gallery(fetched.text, base_url, domains)
            soup = gallery.soup
            scope, candidates = self._scope(gallery, page.fragment)
            resolved = await resolve_candidates(
                candidates, self.fetcher, self.settings.probe_concurrency
            )
            commentary = normalize(
                scope,
                _media_index(resolved),
                base_url,
                self.settings.carrd_title_policy,
                domains,
            )
        else:
            logger.warning("referer_fetch_failed", referer=page.original, error=fetched.error)

        profile = resolve_profile(page, soup, has_page_context=True)
        return ExtractionResult(
            page_url=page.canonical_form,
            profile_url=profile.profile_url,
            profile_urls=profile.profile_urls,
            username=profile.username,
            display_name=profile.display_name,
            other_names=profile.other_names,
            media=(candidate,),
            commentary_title=commentary.title,
            commentary_body=commentary.body,
        )

    async def _extract_page(
        self,
        source: SourceURL,
        domains: Sequence[str],
        referer: str | None,
    ) -> ExtractionResult:
        fetch_url = strip_query(source.canonical_form)
        fetched = await self.fetcher.fetch(fetch_url, referer=referer)
        if not fetched.ok:
            raise FetchFailure(fetch_url, fetched.error or "empty response", fetched.status_code)

        base_url = fetched.final_url or fetch_url
        gallery = extract_gallery(fetched.text, base_url, domains)
        scope, candidates = self._scope(gallery, source.fragment)

        resolved = await resolve_candidates(
            candidates, self.fetcher, self.settings.probe_concurrency
        )
        media = deduplicate(resolved)
        commentary = normalize(
            scope,
            _media_index(resolved),
            base_url,
            self.settings.carrd_title_policy,
            domains,
        )
        profile = resolve_profile(source, gallery.soup, has_page_context=True)

        if not media and not commentary.body:
            logger.info("empty_page", page_url=source.canonical_form)

        return ExtractionResult(
            page_url=source.canonical_form,
            profile_url=profile.profile_url,
            profile_urls=profile.profile_urls,
            username=profile.username,
            display_name=profile.display_name,
            other_names=profile.other_names,
            media=media,
            commentary_title=commentary.title,
            commentary_body=commentary.body,
        )

    def _scope(
        self,
        gallery: GalleryExtraction,
        fragment: str,
    ) -> tuple[Tag, tuple[MediaCandidate, ...]]:
        """Pick the element and candidates a fragment refers to.

        A fragment that matches no section falls back to the whole page.
        """
        soup = gallery.soup
        whole_page: Tag = soup.body if soup.body is not None else soup
        if not fragment:
            return whole_page, gallery.candidates

        section = find_section(soup, fragment)
        if section is None:
            logger.info("section_not_found", fragment=fragment)
            return whole_page, gallery.candidates

        anchor = section_anchor(str(section["id"]))
        return section, gallery.candidates_in(anchor)


def _media_index(candidates: Sequence[MediaCandidate]) -> dict[str, str]:
    return {c.raw_url: c.url for c in candidates}
