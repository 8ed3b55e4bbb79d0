"""Constants for the Carrd extraction strategy.

Carrd publishes every site as one static HTML page at ``{name}.carrd.co``
(or ``{name}.crd.co``, or a custom domain).  Uploaded media live under
``/assets/images/`` and ``/assets/videos/``; gallery uploads may have a
higher-resolution sibling named ``{basename}_original.{ext}``.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Hosts
# ---------------------------------------------------------------------------

#: Platform subdomain pattern.  The label doubles as the artist's username.
PLATFORM_HOST_RE: re.Pattern[str] = re.compile(
    r"^(?P<username>[a-z0-9][a-z0-9-]*)\.(?:carrd|crd)\.co$"
)

#: Subdomain labels that belong to the platform itself, not to a site.
RESERVED_LABELS: frozenset[str] = frozenset({"www"})

# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

#: Path prefixes of uploaded media.
ASSET_PATH_PREFIXES: tuple[str, ...] = ("/assets/images/", "/assets/videos/")

#: File extensions of image assets.
IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".svg"}
)

#: File extensions of video assets.
VIDEO_EXTENSIONS: frozenset[str] = frozenset({".mp4", ".webm", ".mov", ".m4v"})

#: Suffix inserted before the extension of the higher-resolution sibling.
ORIGINAL_SUFFIX: str = "_original"

# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

#: Lazy-load attribute checked before ``src``.
LAZY_SOURCE_ATTRIBUTES: tuple[str, ...] = ("data-src", "src")

#: Suffix Carrd appends to a section's fragment to form its element id.
SECTION_ID_SUFFIX: str = "-section"

#: Parser handed to BeautifulSoup.
HTML_PARSER: str = "html.parser"

# ---------------------------------------------------------------------------
# Commentary
# ---------------------------------------------------------------------------

#: Elements dropped from commentary together with their content.
IGNORED_TAGS: frozenset[str] = frozenset(
    {"script", "style", "noscript", "svg", "iframe", "template", "head", "title", "meta", "link"}
)

#: Elements rendered as a separate block (one blank line before and after).
BLOCK_TAGS: frozenset[str] = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "dd", "div", "dl", "dt",
        "figcaption", "figure", "footer", "form", "header", "html", "main", "nav",
        "ol", "p", "pre", "section", "table", "tr", "ul",
    }
)

#: Path of Cloudflare's e-mail obfuscation endpoint.  The fragment of such a
#: link encodes the address and is dropped from the rendered target.
EMAIL_PROTECTION_PATH: str = "/cdn-cgi/l/email-protection"
