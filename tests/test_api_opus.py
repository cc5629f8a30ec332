"""Tests for opus API and page endpoints."""

import httpx
import pytest
from aiohttp.test_utils import TestClient
from opusview.config import Config
from opusview.server import create_app

from tests.conftest import opus_response, text_paragraph, word

MISSING_ID = "404"
BROKEN_ID = "500"
NON_JSON_ID = "418"


def _upstream(request: httpx.Request) -> httpx.Response:
    opus_id = request.url.params["id"]
    if opus_id == MISSING_ID:
        return httpx.Response(200, json={"code": -404, "message": "not found", "ttl": 1, "data": None})
    if opus_id == BROKEN_ID:
        return httpx.Response(500, text="internal error")
    if opus_id == NON_JSON_ID:
        return httpx.Response(200, text="<html>risk control</html>")
    paragraphs = [text_paragraph(word(f"opus {opus_id}")), {"para_type": 42}]
    return httpx.Response(200, json=opus_response(paragraphs, title="Hello <world>"))


@pytest.fixture
def client(test_config: Config, aiohttp_client) -> TestClient:
    """Create test client with a mocked upstream API."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(_upstream))
    app = create_app(test_config, verbose=True, http_client=http_client)
    return aiohttp_client(app)


class TestGetOpus:
    """Tests for GET /api/opus/{id}."""

    @pytest.mark.asyncio
    async def test__existing_opus__returns_rendered_content(self, client) -> None:
        """Return metadata and the rendered fragment."""
        test_client = await client
        response = await test_client.get("/api/opus/1133181564352462851")

        assert response.status == 200
        data = await response.json()
        assert data["meta"]["id"] == "1133181564352462851"
        assert data["meta"]["title"] == "Hello <world>"
        assert data["meta"]["author"] == "Author"
        assert data["content"] == (
            '<p style="text-align:left;" data-v-2505e99a="">'
            '<span data-v-2505e99a="">opus 1133181564352462851</span></p>'
        )

    @pytest.mark.asyncio
    async def test__response__has_etag_and_cache_control(self, client) -> None:
        """Send caching headers with rendered content."""
        test_client = await client
        response = await test_client.get("/api/opus/1")

        assert response.headers["ETag"].startswith('"')
        assert response.headers["Cache-Control"] == "private, max-age=60"

    @pytest.mark.asyncio
    async def test__matching_etag__returns_304(self, client) -> None:
        """Return 304 when If-None-Match matches the content hash."""
        test_client = await client
        first = await test_client.get("/api/opus/1")
        etag = first.headers["ETag"]

        response = await test_client.get("/api/opus/1", headers={"If-None-Match": etag})

        assert response.status == 304
        assert response.headers["ETag"] == etag

    @pytest.mark.asyncio
    async def test__missing_content__returns_404(self, client) -> None:
        """Return 404 with an explanation when the content module is missing."""
        test_client = await client
        response = await test_client.get(f"/api/opus/{MISSING_ID}")

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "Module content not found, check opus id and cookie settings"
        assert data["id"] == MISSING_ID

    @pytest.mark.asyncio
    async def test__upstream_failure__returns_502(self, client) -> None:
        """Return 502 when the upstream API fails."""
        test_client = await client
        response = await test_client.get(f"/api/opus/{BROKEN_ID}")

        assert response.status == 502
        data = await response.json()
        assert data["error"] == "Upstream request failed"

    @pytest.mark.asyncio
    async def test__non_json_upstream__returns_502(self, client) -> None:
        """Return 502 when the upstream answers with a non-JSON body."""
        test_client = await client
        response = await test_client.get(f"/api/opus/{NON_JSON_ID}")

        assert response.status == 502
        data = await response.json()
        assert data["error"] == "Upstream request failed"

    @pytest.mark.asyncio
    async def test__non_numeric_id__returns_404(self, client) -> None:
        """Reject non-numeric opus IDs at the router."""
        test_client = await client
        response = await test_client.get("/api/opus/abc")

        assert response.status == 404


class TestOpusPage:
    """Tests for GET /opus/{id} and GET /."""

    @pytest.mark.asyncio
    async def test__opus_page__returns_html_document(self, client) -> None:
        """Embed the fragment in a page with stylesheets and title."""
        test_client = await client
        response = await test_client.get("/opus/77")

        assert response.status == 200
        assert response.content_type == "text/html"
        text = await response.text()
        assert text.startswith("<!doctype html>")
        assert '<link rel="stylesheet" href="https://static.test/opus.css">' in text
        assert "<title>Hello &lt;world&gt;</title>" in text
        assert 'style="max-width: 708px; margin: 0 auto;"' in text
        assert "opus 77</span>" in text

    @pytest.mark.asyncio
    async def test__missing_content__returns_404(self, client) -> None:
        """Return 404 page when the content module is missing."""
        test_client = await client
        response = await test_client.get(f"/opus/{MISSING_ID}")

        assert response.status == 404
        assert "Module content not found" in await response.text()

    @pytest.mark.asyncio
    async def test__upstream_failure__returns_502(self, client) -> None:
        """Return 502 page when the upstream API fails."""
        test_client = await client
        response = await test_client.get(f"/opus/{BROKEN_ID}")

        assert response.status == 502

    @pytest.mark.asyncio
    async def test__non_json_upstream__returns_502(self, client) -> None:
        """Return 502 page when the upstream answers with a non-JSON body."""
        test_client = await client
        response = await test_client.get(f"/opus/{NON_JSON_ID}")

        assert response.status == 502

    @pytest.mark.asyncio
    async def test__root__renders_default_opus(self, client) -> None:
        """Render the configured default opus at the root URL."""
        test_client = await client
        response = await test_client.get("/")

        assert response.status == 200
        assert "opus 1133181564352462851</span>" in await response.text()

    @pytest.mark.asyncio
    async def test__root_without_default__returns_404(self, test_config: Config, aiohttp_client) -> None:
        """Return 404 at the root URL when no default opus is configured."""
        test_config.server.default_opus_id = None
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(_upstream))
        test_client = await aiohttp_client(create_app(test_config, http_client=http_client))

        response = await test_client.get("/")

        assert response.status == 404
        assert "No default opus configured" in await response.text()
