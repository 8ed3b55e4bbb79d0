"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
Every tunable that varies between deployments is read through this module;
module-level constants that never change at runtime live in the per-package
``config.py`` files instead.

Usage::

    from portfolio_scraper.config.settings import get_settings

    settings = get_settings()
    timeout = settings.request_timeout
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_scraper.core.models import TitlePolicy


class Settings(BaseSettings):
    """Runtime configuration backed by environment variables and an optional .env file.

    Every field has a default so the extractor works out of the box.  Variables
    are prefixed with ``PORTFOLIO_SCRAPER_``, e.g.
    ``PORTFOLIO_SCRAPER_PROBE_CONCURRENCY=4``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_SCRAPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    user_agent: str = (
        "PortfolioScraper/0.1 (+https://github.com/portfolio-scraper; media cataloging)"
    )
    """User-agent string sent with every page fetch and variant probe."""

    request_timeout: float = Field(default=30.0, gt=0)
    """Per-request timeout in seconds for page fetches and existence probes."""

    probe_concurrency: int = Field(default=8, ge=1, le=64)
    """Maximum number of ``_original`` variant probes in flight for one page."""

    # ------------------------------------------------------------------
    # Carrd strategy
    # ------------------------------------------------------------------

    carrd_custom_domains: list[str] = []
    """Custom domains known to be served by Carrd (e.g. ``["hyphensam.com"]``).

    Platform subdomains (``*.carrd.co``, ``*.crd.co``) are always recognised;
    custom domains have no host signal and must be listed here, or arrive
    with a referer on the same host.
    """

    carrd_title_policy: TitlePolicy = TitlePolicy.NONE
    """Which heading, if any, is promoted to ``commentary_title``.

    ``none`` keeps every heading inside the commentary body, which is what
    the platform's pages look like in practice.  ``first_h1`` promotes the
    first ``<h1>`` of the selected section.
    """

    @field_validator("carrd_custom_domains")
    @classmethod
    def _lowercase_domains(cls, value: list[str]) -> list[str]:
        return [domain.strip().lower().removeprefix("www.") for domain in value if domain.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings singleton.

    In tests, call ``get_settings.cache_clear()`` after patching environment
    variables.

    Returns:
        Settings: The validated settings object.
    """
    return Settings()
