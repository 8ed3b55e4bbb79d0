"""Tests for DText commentary normalization.

Covers:
- The node-kind table (headings, bold, italic, rules, media, links, lists)
- Blank-line collapsing and whitespace handling
- Ignored content (scripts, styles, comments)
- Link edge cases (javascript:, empty text, media inside links,
  Cloudflare e-mail protection)
- Title policy
- Full sections from the Carrd fixtures
"""

from __future__ import annotations

from collections.abc import Callable

from bs4 import BeautifulSoup
from bs4.element import Comment

from portfolio_scraper.core.models import TitlePolicy
from portfolio_scraper.core.url_utils import strip_query
from portfolio_scraper.strategies.carrd.commentary import NodeKind, node_kind, normalize
from portfolio_scraper.strategies.carrd.gallery import extract_gallery, find_section
from portfolio_scraper.strategies.carrd.resolver import original_variant_url

_BASE = "https://lytell.carrd.co/"


def _body(html: str, media_index: dict[str, str] | None = None, base_url: str = _BASE) -> str:
    return normalize(html, media_index or {}, base_url).body


class TestNodeKind:
    def test_tags(self) -> None:
        soup = BeautifulSoup(
            "<h3>a</h3><strong>b</strong><em>c</em><hr><a>d</a><li>e</li><span>f</span><script></script>",
            "html.parser",
        )
        assert node_kind(soup.h3) is NodeKind.HEADING
        assert node_kind(soup.strong) is NodeKind.BOLD
        assert node_kind(soup.em) is NodeKind.ITALIC
        assert node_kind(soup.hr) is NodeKind.RULE
        assert node_kind(soup.a) is NodeKind.LINK
        assert node_kind(soup.li) is NodeKind.LIST_ITEM
        assert node_kind(soup.span) is NodeKind.CONTAINER
        assert node_kind(soup.script) is NodeKind.IGNORED

    def test_strings(self) -> None:
        soup = BeautifulSoup("<p>text<!-- note --></p>", "html.parser")
        text, comment = soup.p.contents
        assert node_kind(text) is NodeKind.TEXT
        assert isinstance(comment, Comment)
        assert node_kind(comment) is NodeKind.IGNORED


class TestBlocks:
    def test_headings_keep_their_level(self) -> None:
        assert _body("<h1>one</h1><h4>four</h4>") == "h1. one\n\nh4. four"

    def test_empty_heading_is_dropped(self) -> None:
        assert _body("<h2> </h2><p>text</p>") == "text"

    def test_paragraphs_are_separated_by_one_blank_line(self) -> None:
        assert _body("<p>a</p><p>b</p>") == "a\n\nb"

    def test_blank_runs_collapse(self) -> None:
        assert _body("<p>a</p><br><br><br><div><div></div></div><p>b</p>") == "a\n\nb"

    def test_line_break_inside_paragraph(self) -> None:
        assert _body("<p>@GenshinTarot<br />\n\t\tArtist: @ddengart</p>") == "@GenshinTarot\nArtist: @ddengart"

    def test_rule(self) -> None:
        assert _body("<p>a</p><hr><p>b</p>") == "a\n\n[hr]\n\nb"

    def test_inline_markup(self) -> None:
        assert _body("<p><strong>bold</strong> and <em>italic</em></p>") == "[b]bold[/b] and [i]italic[/i]"

    def test_whitespace_only_emphasis_has_no_markers(self) -> None:
        assert _body("<p>x<strong> </strong>y</p>") == "x y"

    def test_interior_spaces_are_kept(self) -> None:
        assert _body("<h3><strong>Art &amp; Animation  -  Motion  </strong></h3>") == (
            "h3. [b]Art & Animation  -  Motion  [/b]"
        )

    def test_non_breaking_space_becomes_space(self) -> None:
        assert _body("<p>a&#160;b</p>") == "a b"

    def test_list_items_are_adjacent(self) -> None:
        assert _body("<ul>\n  <li>one</li>\n  <li>two</li>\n</ul>") == "* one\n* two"

    def test_ignored_content(self) -> None:
        html = "<p>a<!-- hidden --></p><script>var x = 1;</script><style>.a{}</style><noscript><p>b</p></noscript>"
        assert _body(html) == "a"

    def test_empty_fragment(self) -> None:
        commentary = normalize("", {}, _BASE)
        assert commentary.title == ""
        assert commentary.body == ""


class TestMedia:
    def test_image_uses_resolved_url(self) -> None:
        raw = "https://lytell.carrd.co/assets/images/image01.jpg?v=5aa8a3a1"
        body = _body('<img data-src="assets/images/image01.jpg?v=5aa8a3a1">', {raw: "https://lytell.carrd.co/x_original.jpg"})
        assert body == '"[image]":[https://lytell.carrd.co/x_original.jpg]'

    def test_unindexed_image_is_query_stripped(self) -> None:
        assert _body('<img src="assets/images/image01.jpg?v=1">') == (
            '"[image]":[https://lytell.carrd.co/assets/images/image01.jpg]'
        )

    def test_video(self) -> None:
        html = '<video poster="assets/videos/video02.mp4.jpg"><source src="assets/videos/video02.mp4?v=1"></video>'
        assert _body(html) == '"[video]":[https://lytell.carrd.co/assets/videos/video02.mp4]'

    def test_placeholder_only_image_renders_nothing(self) -> None:
        assert _body('<p>a</p><img src="data:image/svg+xml;charset=utf8,%3Csvg%3E"><p>b</p>') == "a\n\nb"


class TestLinks:
    def test_link(self) -> None:
        assert _body('<p><a href="https://www.youtube.com/playlist?list=PLxyz">playlist</a></p>') == (
            '"playlist":[https://www.youtube.com/playlist?list=PLxyz]'
        )

    def test_relative_link_is_absolutized(self) -> None:
        assert _body('<a href="#contact">contact me</a>') == '"contact me":[https://lytell.carrd.co/#contact]'

    def test_javascript_link_keeps_text_only(self) -> None:
        assert _body('<p><a href="javascript:void(0)">menu</a></p>') == "menu"

    def test_link_without_href_keeps_text_only(self) -> None:
        assert _body("<p><a>anchor</a></p>") == "anchor"

    def test_link_without_text_is_dropped(self) -> None:
        assert _body('<p>a<a href="https://twitter.com/x"> </a></p>') == "a"

    def test_link_around_media_renders_media_only(self) -> None:
        html = '<a href="https://twitter.com/x"><img src="assets/images/icon.png?v=1"></a>'
        assert _body(html) == '"[image]":[https://lytell.carrd.co/assets/images/icon.png]'

    def test_email_protection_link_drops_fragment(self) -> None:
        html = (
            '<p><a href="/cdn-cgi/l/email-protection#4b3b2e2f3924">'
            '<span class="__cf_email__">[email&#160;protected]</span></a></p>'
        )
        assert _body(html, base_url="https://popuru.crd.co/") == (
            '"[email protected]":[https://popuru.crd.co/cdn-cgi/l/email-protection]'
        )


class TestTitlePolicy:
    def test_none_keeps_headings_in_body(self) -> None:
        commentary = normalize("<h1>portfolio</h1><p>x</p>", {}, _BASE)
        assert commentary.title == ""
        assert commentary.body == "h1. portfolio\n\nx"

    def test_first_h1_is_promoted(self) -> None:
        commentary = normalize(
            "<h2>intro</h2><h1> </h1><h1>Real   title</h1><p>x</p><h1>second</h1>",
            {},
            _BASE,
            TitlePolicy.FIRST_H1,
        )
        assert commentary.title == "Real title"
        assert commentary.body == "h2. intro\n\nx\n\nh1. second"

    def test_first_h1_without_h1(self) -> None:
        commentary = normalize("<h2>intro</h2>", {}, _BASE, TitlePolicy.FIRST_H1)
        assert commentary.title == ""
        assert commentary.body == "h2. intro"


class TestFixtureSections:
    def test_lytell_portfolio(self, carrd_html: Callable[[str], str]) -> None:
        gallery = extract_gallery(carrd_html("lytell"), _BASE)
        section = find_section(gallery.soup, "portfolio")
        assert section is not None
        index = {
            c.raw_url: original_variant_url(c.raw_url) or strip_query(c.raw_url)
            for c in gallery.candidates_in("portfolio")
        }

        commentary = normalize(section, index, _BASE)

        images = "https://lytell.carrd.co/assets/images"
        assert commentary.title == ""
        assert commentary.body == "\n".join(
            [
                "h1. portfolio",
                "",
                "illustrations - chibis - sketches",
                "[i]for designs, 2d animation, motion graphic animation please refer to my "
                "commission pages for those respective categories for samples[/i]",
                "",
                f'* "[image]":[{images}/gallery04/bca0b2f2_original.jpg]',
                f'* "[image]":[{images}/gallery04/47493cd2_original.jpg]',
                f'* "[image]":[{images}/gallery04/3ac05b2e_original.jpg]',
                "",
                f'* "[image]":[{images}/gallery05/0b8d3183_original.jpg]',
                f'* "[image]":[{images}/gallery05/a9a31be0_original.jpg]',
                f'* "[image]":[{images}/gallery05/75d61bc7_original.jpg]',
                "",
                '"click for full playlist!":[https://www.youtube.com/playlist?list=PLxyz]',
            ]
        )

    def test_rosymiz_home(self, carrd_html: Callable[[str], str]) -> None:
        base = "https://rosymiz.carrd.co/"
        gallery = extract_gallery(carrd_html("rosymiz"), base)
        section = find_section(gallery.soup, "home")
        assert section is not None

        body = normalize(section, {}, base).body

        assets = "https://rosymiz.carrd.co/assets"
        assert body == "\n".join(
            [
                f'"[image]":[{assets}/images/image01.jpg]',
                "",
                "h1. [b]Alice Choi[/b]",
                "",
                "h3. [b]3D Character Art & Animation  -  Motion Designer  [/b]",
                "",
                "[hr]",
                "",
                "h3. 3D Character Art",
                "",
                f'* "[image]":[{assets}/images/gallery01/1a46013e.jpg]',
                f'* "[image]":[{assets}/images/gallery01/1a19b400.jpg]',
                "",
                "h3. Motion Design",
                "",
                f'"[video]":[{assets}/videos/video02.mp4]',
                "",
                "@GenshinTarot",
                "Artist: @ddengart",
                "",
                f'"[video]":[{assets}/videos/video03.mp4]',
                "",
                "@GenshinTarot",
                "Artist: @sorryoutofrice",
            ]
        )

    def test_whole_page_skips_head_and_scripts(self, carrd_html: Callable[[str], str]) -> None:
        soup = BeautifulSoup(carrd_html("lytell"), "html.parser")
        body = normalize(soup.body, {}, _BASE).body

        assert body.startswith("h1. lytell")
        assert "addEventListener" not in body
        assert "opacity" not in body
        assert body.endswith('commissions: "lytell@example.com":[mailto:lytell@example.com]')
