"""Unit tests for the httpx page fetcher.

Tests successful page fetches, HTTP error handling, non-HTML content-type
rejection, transport errors, and the ``exists`` probe used for variant
resolution, all with mocked httpx responses.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from portfolio_scraper.fetcher.http_fetcher import (
    FetchResult,
    HttpPageFetcher,
    _is_html_content_type,
)


# ---------------------------------------------------------------------------
# Unit tests for helper functions
# ---------------------------------------------------------------------------


class TestIsHtmlContentType:
    def test_html(self) -> None:
        assert _is_html_content_type("text/html; charset=utf-8") is True

    def test_xhtml(self) -> None:
        assert _is_html_content_type("application/xhtml+xml") is True

    def test_missing_header_is_accepted(self) -> None:
        assert _is_html_content_type("") is True

    def test_image_is_not_html(self) -> None:
        assert _is_html_content_type("image/jpeg") is False


class TestFetchResult:
    def test_text_uses_reported_encoding(self) -> None:
        result = FetchResult("æøå".encode("latin-1"), "text/html", 200, "https://a.test/", None, "latin-1")
        assert result.text == "æøå"

    def test_unknown_encoding_falls_back_to_utf8(self) -> None:
        result = FetchResult("ok".encode(), "text/html", 200, "https://a.test/", None, "x-bogus")
        assert result.text == "ok"

    def test_failed_result_is_not_ok(self) -> None:
        result = FetchResult(None, "", None, "https://a.test/", "timeout")
        assert result.ok is False
        assert result.text == ""


# ---------------------------------------------------------------------------
# fetch() with respx
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestFetch:
    async def test_successful_fetch(self) -> None:
        html_body = "<html><body><section id='home-section'>hi</section></body></html>"
        with respx.mock(base_url="https://lytell.carrd.co") as mock:
            mock.get("/").mock(
                return_value=httpx.Response(
                    200,
                    text=html_body,
                    headers={"content-type": "text/html; charset=utf-8"},
                )
            )
            async with httpx.AsyncClient() as client:
                result = await HttpPageFetcher(client).fetch("https://lytell.carrd.co/")

        assert result.ok
        assert result.error is None
        assert result.text == html_body
        assert result.status_code == 200
        assert result.final_url == "https://lytell.carrd.co/"

    async def test_sends_user_agent_and_referer(self) -> None:
        with respx.mock(base_url="https://lytell.carrd.co") as mock:
            route = mock.get("/").mock(
                return_value=httpx.Response(200, text="<html></html>", headers={"content-type": "text/html"})
            )
            async with httpx.AsyncClient() as client:
                fetcher = HttpPageFetcher(client, user_agent="TestAgent/1.0")
                await fetcher.fetch("https://lytell.carrd.co/", referer="https://lytell.carrd.co/#home")

        request = route.calls.last.request
        assert request.headers["user-agent"] == "TestAgent/1.0"
        assert request.headers["referer"] == "https://lytell.carrd.co/#home"

    async def test_http_404_returns_error(self) -> None:
        with respx.mock(base_url="https://gone.carrd.co") as mock:
            mock.get("/").mock(return_value=httpx.Response(404))
            async with httpx.AsyncClient() as client:
                result = await HttpPageFetcher(client).fetch("https://gone.carrd.co/")

        assert not result.ok
        assert result.content is None
        assert result.status_code == 404
        assert "404" in (result.error or "")

    async def test_non_html_content_type_rejected(self) -> None:
        with respx.mock(base_url="https://lytell.carrd.co") as mock:
            mock.get("/assets/images/image01.jpg").mock(
                return_value=httpx.Response(200, content=b"\xff\xd8\xff", headers={"content-type": "image/jpeg"})
            )
            async with httpx.AsyncClient() as client:
                result = await HttpPageFetcher(client).fetch("https://lytell.carrd.co/assets/images/image01.jpg")

        assert not result.ok
        assert "non-HTML" in (result.error or "")

    async def test_timeout_returns_error(self) -> None:
        with respx.mock(base_url="https://slow.carrd.co") as mock:
            mock.get("/").mock(side_effect=httpx.ReadTimeout("timed out"))
            async with httpx.AsyncClient() as client:
                result = await HttpPageFetcher(client).fetch("https://slow.carrd.co/")

        assert result.error == "timeout"
        assert result.status_code is None

    async def test_connect_error_returns_error(self) -> None:
        with respx.mock(base_url="https://down.carrd.co") as mock:
            mock.get("/").mock(side_effect=httpx.ConnectError("refused"))
            async with httpx.AsyncClient() as client:
                result = await HttpPageFetcher(client).fetch("https://down.carrd.co/")

        assert result.error is not None
        assert result.error.startswith("request error")


# ---------------------------------------------------------------------------
# exists() with respx
# ---------------------------------------------------------------------------

_ORIGINAL = "/assets/images/gallery21/a86d9fc4_original.jpg"


@pytest.mark.asyncio
class TestExists:
    async def test_found(self) -> None:
        with respx.mock(base_url="https://caminukai-art.carrd.co") as mock:
            mock.head(_ORIGINAL).mock(return_value=httpx.Response(200, headers={"content-type": "image/jpeg"}))
            async with httpx.AsyncClient() as client:
                assert await HttpPageFetcher(client).exists(f"https://caminukai-art.carrd.co{_ORIGINAL}") is True

    async def test_missing(self) -> None:
        with respx.mock(base_url="https://caminukai-art.carrd.co") as mock:
            mock.head(_ORIGINAL).mock(return_value=httpx.Response(404))
            async with httpx.AsyncClient() as client:
                assert await HttpPageFetcher(client).exists(f"https://caminukai-art.carrd.co{_ORIGINAL}") is False

    async def test_html_fallback_page_counts_as_missing(self) -> None:
        with respx.mock(base_url="https://hyphensam.com") as mock:
            mock.head("/assets/images/image04_original.jpg").mock(
                return_value=httpx.Response(200, headers={"content-type": "text/html"})
            )
            async with httpx.AsyncClient() as client:
                found = await HttpPageFetcher(client).exists("https://hyphensam.com/assets/images/image04_original.jpg")

        assert found is False

    async def test_head_not_allowed_retries_with_get(self) -> None:
        with respx.mock(base_url="https://caminukai-art.carrd.co") as mock:
            mock.head(_ORIGINAL).mock(return_value=httpx.Response(405))
            get_route = mock.get(_ORIGINAL).mock(
                return_value=httpx.Response(200, content=b"\xff\xd8\xff", headers={"content-type": "image/jpeg"})
            )
            async with httpx.AsyncClient() as client:
                found = await HttpPageFetcher(client).exists(f"https://caminukai-art.carrd.co{_ORIGINAL}")

        assert found is True
        assert get_route.called

    async def test_network_error_propagates(self) -> None:
        with respx.mock(base_url="https://caminukai-art.carrd.co") as mock:
            mock.head(_ORIGINAL).mock(side_effect=httpx.ConnectError("reset"))
            async with httpx.AsyncClient() as client:
                with pytest.raises(httpx.ConnectError):
                    await HttpPageFetcher(client).exists(f"https://caminukai-art.carrd.co{_ORIGINAL}")


@pytest.mark.asyncio
class TestClientOwnership:
    async def test_owned_client_closed_on_exit(self) -> None:
        async with HttpPageFetcher() as fetcher:
            client = fetcher._client
        assert client.is_closed

    async def test_injected_client_left_open(self) -> None:
        async with httpx.AsyncClient() as client:
            async with HttpPageFetcher(client):
                pass
            assert not client.is_closed
