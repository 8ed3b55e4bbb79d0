"""Configuration package for the portfolio scraper.

Re-exports the settings symbols so callers can write::

    from portfolio_scraper.config import get_settings
"""

from __future__ import annotations

from portfolio_scraper.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
