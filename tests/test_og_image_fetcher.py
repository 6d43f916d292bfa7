"""
Aquarium Log Backend: Open Graph Fetcher Tests
================================================

What:  OgImageFetcher against httpx.MockTransport; no network access.

What we test:
    ✅ og:image found, relative URLs resolved against the final page URL
    ✅ every failure (status, transport error, bad URL, no tag) gives None
"""

import httpx
import pytest

from aquarium_log.services.og_image_fetcher import OgImageFetcher, extract_og_image

PAGE = """
<html><head>
  <meta charset="utf-8">
  <meta property="og:title" content="Sumida Aquarium">
  <meta property="og:image" content="{image}">
</head><body></body></html>
"""


def _fetcher(handler):
    return OgImageFetcher(transport=httpx.MockTransport(handler))


class TestExtract:

    def test_absolute(self):
        html = PAGE.format(image="https://cdn.example.jp/top.jpg")
        assert extract_og_image(html, "https://aqua.example.jp/") == "https://cdn.example.jp/top.jpg"

    def test_relative(self):
        html = PAGE.format(image="/img/top.jpg")
        assert extract_og_image(html, "https://aqua.example.jp/about/") == "https://aqua.example.jp/img/top.jpg"

    def test_missing_tag(self):
        assert extract_og_image("<html><head></head></html>", "https://aqua.example.jp/") is None

    def test_empty_content_ignored(self):
        assert extract_og_image(PAGE.format(image=""), "https://aqua.example.jp/") is None


class TestFetch:

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request):
            seen["user_agent"] = request.headers.get("user-agent")
            return httpx.Response(200, html=PAGE.format(image="/og.png"))

        result = await _fetcher(handler).fetch("https://aqua.example.jp/")

        assert result == "https://aqua.example.jp/og.png"
        assert seen["user_agent"] == "aquarium-visit-log (og image fetcher)"

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/":
                return httpx.Response(301, headers={"Location": "https://aqua.example.jp/ja/"})
            return httpx.Response(200, html=PAGE.format(image="og.png"))

        result = await _fetcher(handler).fetch("https://aqua.example.jp/")

        assert result == "https://aqua.example.jp/ja/og.png"

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        result = await _fetcher(lambda request: httpx.Response(404)).fetch("https://aqua.example.jp/")
        assert result is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert await _fetcher(handler).fetch("https://aqua.example.jp/") is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert await _fetcher(handler).fetch("https://aqua.example.jp/") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", [None, "", "   ", "ftp://aqua.example.jp/", "not a url"])
    async def test_unusable_urls(self, url):
        def handler(request):
            raise AssertionError("no request expected")

        assert await _fetcher(handler).fetch(url) is None

    @pytest.mark.asyncio
    async def test_page_without_tag(self):
        handler = lambda request: httpx.Response(200, html="<html></html>")  # noqa: E731
        assert await _fetcher(handler).fetch("https://aqua.example.jp/") is None
