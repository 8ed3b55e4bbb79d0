"""Constants for the page fetcher."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

#: Default HTTP request timeout in seconds.  Overridden by settings.
DEFAULT_TIMEOUT: float = 30.0

#: Connection pool sizing for a fetcher-owned ``httpx.AsyncClient``.
CONNECTION_POOL_LIMITS: dict[str, int] = {
    "max_connections": 20,
    "max_keepalive_connections": 10,
}

#: Content-Type prefixes accepted as an HTML page.
HTML_CONTENT_TYPES: frozenset[str] = frozenset(
    {
        "text/html",
        "application/xhtml+xml",
    }
)
