"""Conversion of Carrd page sections into DText commentary.

The normalized markup is the line-oriented DText dialect the catalog uses for
every site::

    h1. portfolio

    illustrations - chibis - sketches
    [i]for designs please refer to my commission pages[/i]

    * "[image]":[https://lytell.carrd.co/assets/images/gallery04/bca0b2f2_original.jpg]
    * "[image]":[https://lytell.carrd.co/assets/images/gallery04/47493cd2_original.jpg]

Conversion is a tree walk: :func:`node_kind` maps every node onto a small
closed set of :class:`NodeKind` values and :class:`CommentaryRenderer`
dispatches on that kind.  Block-level nodes emit blank-line separators that
are collapsed in a final line pass, so the output never depends on the
source markup's indentation.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PageElement, PreformattedString

from portfolio_scraper.core.models import TitlePolicy
from portfolio_scraper.core.url_utils import is_inline_data, strip_query
from portfolio_scraper.strategies.carrd.config import (
    BLOCK_TAGS,
    EMAIL_PROTECTION_PATH,
    IGNORED_TAGS,
)
from portfolio_scraper.strategies.carrd.gallery import media_source, parse_html

logger = logging.getLogger(__name__)

_BLOCK_BREAK = "\n\n"


class NodeKind(str, Enum):
    """Closed set of node kinds the renderer distinguishes."""

    HEADING = "heading"
    BOLD = "bold"
    ITALIC = "italic"
    RULE = "rule"
    IMAGE = "image"
    VIDEO = "video"
    LINK = "link"
    TEXT = "text"
    LINE_BREAK = "line_break"
    BLOCK = "block"
    LIST_ITEM = "list_item"
    IGNORED = "ignored"
    CONTAINER = "container"


_TAG_KINDS: dict[str, NodeKind] = {
    **{f"h{level}": NodeKind.HEADING for level in range(1, 7)},
    "b": NodeKind.BOLD,
    "strong": NodeKind.BOLD,
    "i": NodeKind.ITALIC,
    "em": NodeKind.ITALIC,
    "hr": NodeKind.RULE,
    "img": NodeKind.IMAGE,
    "video": NodeKind.VIDEO,
    "a": NodeKind.LINK,
    "br": NodeKind.LINE_BREAK,
    "li": NodeKind.LIST_ITEM,
    **{name: NodeKind.BLOCK for name in BLOCK_TAGS},
    **{name: NodeKind.IGNORED for name in IGNORED_TAGS},
}


def node_kind(node: PageElement) -> NodeKind:
    """Classify a parsed node.

    Comments, doctypes and other preformatted strings are ``IGNORED``; plain
    strings are ``TEXT``; unknown tags (``span``, ``label``, ...) are
    transparent ``CONTAINER`` nodes.
    """
    if isinstance(node, PreformattedString):
        return NodeKind.IGNORED
    if isinstance(node, NavigableString):
        return NodeKind.TEXT
    if isinstance(node, Tag):
        return _TAG_KINDS.get(node.name.lower(), NodeKind.CONTAINER)
    return NodeKind.IGNORED


@dataclass(frozen=True)
class Commentary:
    """Normalized commentary of one page or section.

    Attributes:
        title: Promoted heading text, or ``""``.
        body: DText body, or ``""``.
    """

    title: str = ""
    body: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _single_line(text: str) -> str:
    return text.replace("\n", " ").strip()


def _normalize_lines(text: str) -> str:
    """Trim every line and collapse runs of blank lines to one."""
    lines: list[str] = []
    for line in text.split("\n"):
        line = line.strip()
        if not line and (not lines or not lines[-1]):
            continue
        lines.append(line)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def _link_target(href: str, base_url: str) -> str:
    target = urllib.parse.urljoin(base_url, href)
    if urllib.parse.urlsplit(target).path == EMAIL_PROTECTION_PATH:
        return strip_query(target)
    return target


def _contains_media(tag: Tag) -> bool:
    return tag.find(["img", "video"]) is not None


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class CommentaryRenderer:
    """Visitor rendering a parsed fragment as DText.

    Args:
        media_index: Raw media URL to resolved URL, as produced by the
            resolver.  Media missing from the index render with their
            query-stripped raw URL.
        base_url: URL the page was fetched from (for relative links).
        custom_domains: Extra platform hosts, forwarded to
            :func:`~portfolio_scraper.strategies.carrd.gallery.media_source`
            so media keys match the gallery's.
        skip: A node left out of the output (the promoted title heading).
    """

    def __init__(
        self,
        media_index: Mapping[str, str],
        base_url: str,
        custom_domains: Iterable[str] = (),
        skip: Tag | None = None,
    ) -> None:
        self.media_index = media_index
        self.base_url = base_url
        self.custom_domains = tuple(custom_domains)
        self.skip = skip
        self._handlers: dict[NodeKind, Callable[[Any], str]] = {
            NodeKind.HEADING: self._heading,
            NodeKind.BOLD: self._bold,
            NodeKind.ITALIC: self._italic,
            NodeKind.RULE: self._rule,
            NodeKind.IMAGE: self._image,
            NodeKind.VIDEO: self._video,
            NodeKind.LINK: self._link,
            NodeKind.TEXT: self._text,
            NodeKind.LINE_BREAK: self._line_break,
            NodeKind.BLOCK: self._block,
            NodeKind.LIST_ITEM: self._list_item,
            NodeKind.IGNORED: self._ignored,
            NodeKind.CONTAINER: self.render_children,
        }

    def render(self, node: PageElement) -> str:
        """Render *node* and its descendants (unnormalized line structure)."""
        if node is self.skip:
            return ""
        return self._handlers[node_kind(node)](node)

    def render_children(self, node: PageElement) -> str:
        if not isinstance(node, Tag):
            return ""
        return "".join(self.render(child) for child in node.children)

    # ------------------------------------------------------------------
    # Per-kind handlers
    # ------------------------------------------------------------------

    def _heading(self, node: Tag) -> str:
        text = _single_line(self.render_children(node))
        if not text:
            return ""
        return f"{_BLOCK_BREAK}{node.name.lower()}. {text}{_BLOCK_BREAK}"

    def _wrap(self, node: Tag, marker: str) -> str:
        inner = self.render_children(node)
        if not inner.strip():
            return inner
        return f"[{marker}]{inner}[/{marker}]"

    def _bold(self, node: Tag) -> str:
        return self._wrap(node, "b")

    def _italic(self, node: Tag) -> str:
        return self._wrap(node, "i")

    def _rule(self, node: Tag) -> str:
        return f"{_BLOCK_BREAK}[hr]{_BLOCK_BREAK}"

    def _media_token(self, node: Tag, label: str) -> str:
        found = media_source(node, self.base_url, self.custom_domains)
        if found is None:
            return ""
        raw_url, _kind = found
        resolved = self.media_index.get(raw_url) or strip_query(raw_url)
        return f'"[{label}]":[{resolved}]'

    def _image(self, node: Tag) -> str:
        return self._media_token(node, "image")

    def _video(self, node: Tag) -> str:
        return self._media_token(node, "video")

    def _link(self, node: Tag) -> str:
        href = node.get("href")
        if (
            not isinstance(href, str)
            or not href.strip()
            or href.strip().lower().startswith("javascript:")
            or is_inline_data(href)
            or _contains_media(node)
        ):
            return self.render_children(node)

        text = _single_line(self.render_children(node))
        if not text:
            return ""
        return f'"{text}":[{_link_target(href.strip(), self.base_url)}]'

    def _text(self, node: NavigableString) -> str:
        text = str(node)
        for char in ("\r", "\n", "\t", "\xa0"):
            text = text.replace(char, " ")
        return text

    def _line_break(self, node: Tag) -> str:
        return "\n"

    def _block(self, node: Tag) -> str:
        return f"{_BLOCK_BREAK}{self.render_children(node)}{_BLOCK_BREAK}"

    def _list_item(self, node: Tag) -> str:
        lines = [line.strip() for line in self.render_children(node).split("\n")]
        lines = [line for line in lines if line]
        if not lines:
            return ""
        return "\n* " + "\n".join(lines)

    def _ignored(self, node: PageElement) -> str:
        return ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _scope_of(fragment: str | bytes | Tag) -> Tag:
    if isinstance(fragment, Tag):
        return fragment
    soup: BeautifulSoup = parse_html(fragment)
    body = soup.body
    return body if body is not None else soup


def find_title_heading(scope: Tag, policy: TitlePolicy) -> Tag | None:
    """Return the heading promoted to ``commentary_title`` under *policy*."""
    if policy is TitlePolicy.FIRST_H1:
        for heading in scope.find_all("h1"):
            if heading.find_parent(list(IGNORED_TAGS)) is None and heading.get_text().strip():
                return heading
    return None


def normalize(
    html_fragment: str | bytes | Tag,
    media_index: Mapping[str, str],
    base_url: str,
    title_policy: TitlePolicy = TitlePolicy.NONE,
    custom_domains: Iterable[str] = (),
) -> Commentary:
    """Render an HTML fragment as DText commentary.

    Args:
        html_fragment: HTML string or an element of an already parsed page
            (a ``<section>`` or ``<body>``).
        media_index: Raw media URL to resolved URL.
        base_url: URL the page was fetched from.
        title_policy: Which heading, if any, becomes the title.
        custom_domains: Extra platform hosts.

    Returns:
        A :class:`Commentary`.  Both fields are empty for a fragment without
        text or media.
    """
    scope = _scope_of(html_fragment)
    heading = find_title_heading(scope, title_policy)
    title = " ".join(heading.get_text().split()) if heading is not None else ""

    renderer = CommentaryRenderer(media_index, base_url, custom_domains, skip=heading)
    body = _normalize_lines(renderer.render(scope))

    logger.debug("carrd: rendered %d commentary lines", body.count("\n") + 1 if body else 0)
    return Commentary(title=title, body=body)
