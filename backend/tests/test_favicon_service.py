"""
WebVault Backend — Favicon Proxy Tests
========================================

What we test:
    ✅ Domain normalisation
    ✅ Sources are tried in order; the first non-empty 2xx wins
    ✅ Every source failing yields None (never an exception)
    ✅ Route: image bytes with cache headers, 307 to the default icon, 422
       without a domain

How:
    FaviconService takes an httpx transport, so the service tests plug in
    httpx.MockTransport. The route tests patch the module-level service.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from webvault.config import settings
from webvault.routes import favicon as favicon_route
from webvault.services.favicon_service import Favicon, FaviconService, normalize_domain

ICON_BYTES = b"\x00\x00\x01\x00fake-icon"


class TestNormalizeDomain:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("example.com", "example.com"),
            ("  Example.COM  ", "example.com"),
            ("https://docs.example.com/path?q=1", "docs.example.com"),
            ("example.com:8080", "example.com"),
        ],
    )
    def test_valid(self, raw, expected):
        assert normalize_domain(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "localhost", "bad_host!.com", "-lead.com"])
    def test_invalid(self, raw):
        assert normalize_domain(raw) is None


class TestFaviconService:
    @pytest.mark.asyncio
    async def test_first_source_wins(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.host)
            return httpx.Response(200, content=ICON_BYTES, headers={"content-type": "image/png"})

        service = FaviconService(transport=httpx.MockTransport(handler))
        favicon = await service.fetch("example.com")

        assert favicon == Favicon(
            content=ICON_BYTES,
            content_type="image/png",
            source="https://www.google.com/s2/favicons?domain=example.com&sz=32",
        )
        assert seen == ["www.google.com"]

    @pytest.mark.asyncio
    async def test_falls_through_failures_and_empty_bodies(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "www.google.com":
                raise httpx.ConnectError("unreachable", request=request)
            if request.url.host == "favicon.yandex.net":
                return httpx.Response(200, content=b"")
            return httpx.Response(200, content=ICON_BYTES)

        service = FaviconService(transport=httpx.MockTransport(handler))
        favicon = await service.fetch("example.com")

        assert favicon is not None
        assert favicon.source == "https://example.com/favicon.ico"
        assert favicon.content_type == "image/x-icon"

    @pytest.mark.asyncio
    async def test_all_sources_failing_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        service = FaviconService(transport=httpx.MockTransport(handler))
        assert await service.fetch("example.com") is None

    @pytest.mark.asyncio
    async def test_sends_user_agent(self):
        agents = []

        def handler(request: httpx.Request) -> httpx.Response:
            agents.append(request.headers["User-Agent"])
            return httpx.Response(200, content=ICON_BYTES)

        service = FaviconService(transport=httpx.MockTransport(handler))
        await service.fetch("example.com")
        assert agents == [settings.favicon_user_agent]


class TestFaviconRoute:
    @pytest.mark.asyncio
    async def test_returns_icon_with_cache_headers(self, test_client):
        favicon = Favicon(content=ICON_BYTES, content_type="image/png", source="test")
        with patch.object(favicon_route.favicon_service, "fetch", AsyncMock(return_value=favicon)):
            response = await test_client.get("/api/favicon", params={"domain": "example.com"})

        assert response.status_code == 200
        assert response.content == ICON_BYTES
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "public, max-age=3600, s-maxage=3600"

    @pytest.mark.asyncio
    async def test_not_found_redirects_to_default(self, test_client):
        with patch.object(favicon_route.favicon_service, "fetch", AsyncMock(return_value=None)):
            response = await test_client.get("/api/favicon", params={"domain": "example.com"})

        assert response.status_code == 307
        assert response.headers["location"] == settings.default_favicon_path

    @pytest.mark.asyncio
    async def test_lookup_crash_still_redirects(self, test_client):
        with patch.object(
            favicon_route.favicon_service, "fetch", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            response = await test_client.get("/api/favicon", params={"domain": "example.com"})

        assert response.status_code == 307

    @pytest.mark.asyncio
    async def test_invalid_domain_redirects_without_lookup(self, test_client):
        fetch = AsyncMock()
        with patch.object(favicon_route.favicon_service, "fetch", fetch):
            response = await test_client.get("/api/favicon", params={"domain": "not a host"})

        assert response.status_code == 307
        fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_domain_is_422(self, test_client):
        response = await test_client.get("/api/favicon")

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "fail"
        assert "domain" in body["errors"]

    @pytest.mark.asyncio
    async def test_default_icon_is_served(self, test_client):
        response = await test_client.get(settings.default_favicon_path)
        assert response.status_code == 200
        assert "svg" in response.headers["content-type"]
