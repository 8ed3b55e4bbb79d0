"""Shared pytest fixtures for portfolio scraper tests.

Fixture summary
---------------
settings        — ``Settings`` built from defaults only (no environment, no .env).
carrd_html      — Loader for the Carrd HTML fixtures in ``tests/fixtures/carrd``.
fake_fetcher    — In-memory ``PageFetcher`` with configurable pages and assets.

All tests run without network access: HTTP is either mocked with respx or
served by ``fake_fetcher``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from portfolio_scraper.config.settings import Settings, get_settings
from portfolio_scraper.fetcher.http_fetcher import FetchResult

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop PORTFOLIO_SCRAPER_* variables and the settings cache around each test."""
    for key in list(os.environ):
        if key.startswith("PORTFOLIO_SCRAPER_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment and any .env file."""
    return Settings(_env_file=None)


# ---------------------------------------------------------------------------
# HTML fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def carrd_html() -> Callable[[str], str]:
    """Return a loader: ``carrd_html("lytell")`` reads ``fixtures/carrd/lytell.html``."""

    def _load(name: str) -> str:
        return (FIXTURES_DIR / "carrd" / f"{name}.html").read_text(encoding="utf-8")

    return _load


# ---------------------------------------------------------------------------
# Fake fetcher
# ---------------------------------------------------------------------------


class FakeFetcher:
    """Records calls and answers from in-memory tables.

    Attributes:
        pages: URL -> HTML served by ``fetch``.  Unknown URLs return HTTP 404.
        assets: URLs for which ``exists`` returns ``True``.
        failing: URLs for which ``exists`` raises ``ConnectionError``.
        fetched: URLs passed to ``fetch``, in call order.
        probed: URLs passed to ``exists``, in call order.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        assets: set[str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.assets = assets or set()
        self.failing = failing or set()
        self.fetched: list[str] = []
        self.probed: list[str] = []

    async def fetch(self, url: str, *, referer: str | None = None) -> FetchResult:
        self.fetched.append(url)
        if url not in self.pages:
            return FetchResult(None, "text/html", 404, url, "HTTP 404")
        return FetchResult(
            content=self.pages[url].encode("utf-8"),
            content_type="text/html; charset=utf-8",
            status_code=200,
            final_url=url,
            error=None,
            encoding="utf-8",
        )

    async def exists(self, url: str) -> bool:
        self.probed.append(url)
        if url in self.failing:
            raise ConnectionError(f"connection reset probing {url}")
        return url in self.assets


@pytest.fixture
def fake_fetcher() -> Callable[..., FakeFetcher]:
    """Return a factory building :class:`FakeFetcher` instances."""
    return FakeFetcher
