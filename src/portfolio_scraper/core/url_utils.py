"""Platform-neutral URL helpers shared by every extraction strategy.

All functions in this module are pure (no I/O) and never raise on malformed
input; they return the input unchanged (or ``None``) instead.
"""

from __future__ import annotations

import posixpath
import urllib.parse


def extract_host(url: str) -> str:
    """Return the lowercase hostname of *url*, without port or ``www.`` prefix.

    Args:
        url: Absolute URL string.

    Returns:
        Hostname, or an empty string if *url* has none.
    """
    try:
        host = urllib.parse.urlsplit(url).hostname or ""
    except ValueError:
        return ""
    return host.lower().removeprefix("www.")


def strip_query(url: str) -> str:
    """Drop the query string and fragment from *url*.

    Used for the resolved form of asset URLs: cache-busting tokens such as
    ``?v=c6f079b5`` never distinguish two assets.

    Args:
        url: URL string.

    Returns:
        *url* without ``?query`` and ``#fragment``.
    """
    try:
        parsed = urllib.parse.urlsplit(url)
    except ValueError:
        return url
    return urllib.parse.urlunsplit((parsed.scheme, parsed.netloc, parsed.path, "", ""))


def strip_query_keep_fragment(url: str) -> str:
    """Drop only the query string from *url*, keeping any ``#fragment``.

    Args:
        url: URL string.

    Returns:
        *url* without ``?query``.
    """
    try:
        parsed = urllib.parse.urlsplit(url)
    except ValueError:
        return url
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, "", parsed.fragment)
    )


def path_extension(url: str) -> str:
    """Return the lowercase final extension of the URL path (``".jpg"``), or ``""``.

    Only the last extension counts, so ``video02.mp4.jpg`` yields ``".jpg"``.
    """
    try:
        path = urllib.parse.urlsplit(url).path
    except ValueError:
        return ""
    return posixpath.splitext(path)[1].lower()


def is_inline_data(url: str | None) -> bool:
    """Return ``True`` if *url* is a ``data:`` URI (inline content, not a network reference)."""
    if not url:
        return False
    return url.strip().lower().startswith("data:")
