"""Tests for document extraction and the opus renderer."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from opusview.config import RenderConfig
from opusview.core.document import extract_document
from opusview.core.renderer import OpusRenderer

from tests.conftest import opus_response, text_paragraph, word


class TestExtractDocument:
    """Tests for extract_document()."""

    def test__content_module__returns_paragraphs_and_meta(self) -> None:
        """Extract paragraphs, title, author and publish time."""
        paragraphs = [text_paragraph(word("hello"))]

        document = extract_document(opus_response(paragraphs, title="T", author="A"))

        assert document is not None
        assert document.paragraphs == paragraphs
        assert document.to_meta() == {
            "id": "1133181564352462851",
            "title": "T",
            "author": "A",
            "pub_time": "2025年11月02日 14:54",
        }
        assert document.warnings == []

    def test__no_title_module__uses_basic_title(self) -> None:
        """Fall back to basic.title when the title module is absent."""
        response = opus_response([])
        modules = response["data"]["item"]["modules"]
        response["data"]["item"]["modules"] = [m for m in modules if m["module_type"] != "MODULE_TYPE_TITLE"]

        document = extract_document(response)

        assert document is not None
        assert document.title == "Basic title"

    def test__no_content_module__returns_none(self) -> None:
        """Signal missing content with None."""
        assert extract_document(opus_response(None)) is None

    @pytest.mark.parametrize(
        "response",
        [
            {"code": -404, "message": "not found", "ttl": 1, "data": None},
            {"code": 0, "data": {"item": {"modules": "x"}}},
            {"code": 0, "data": {"item": {"modules": [{"module_type": "MODULE_TYPE_CONTENT"}]}}},
            {
                "code": 0,
                "data": {
                    "item": {
                        "modules": [
                            {"module_type": "MODULE_TYPE_CONTENT", "module_content": {"paragraphs": None}}
                        ]
                    }
                },
            },
            [],
        ],
    )
    def test__malformed_response__returns_none(self, response: object) -> None:
        """Return None for any response without a paragraph list."""
        assert extract_document(response) is None  # type: ignore[arg-type]

    def test__nonzero_code_with_content__records_warning(self) -> None:
        """Keep rendering but record a warning for non-zero API codes."""
        response = opus_response([])
        response["code"] = 4100000
        response["message"] = "partial"

        document = extract_document(response)

        assert document is not None
        assert document.warnings == ["API returned code 4100000: partial"]


class TestOpusRenderer:
    """Tests for OpusRenderer."""

    def test__render_response__renders_html_and_warnings(self) -> None:
        """Render paragraphs and warn about unsupported ones."""
        renderer = OpusRenderer(RenderConfig(scoped_attr=None))
        response = opus_response([text_paragraph(word("x")), {"para_type": 99}])

        result = renderer.render_response(response)

        assert result is not None
        assert result.html == '<p style="text-align:left;"><span>x</span></p>'
        assert result.title == "Opus title"
        assert result.warnings == ["Paragraph 1: unsupported or malformed para_type 99"]

    def test__render_response__missing_content_returns_none(self) -> None:
        """Return None when the content module is missing."""
        assert OpusRenderer(RenderConfig()).render_response(opus_response(None)) is None

    @pytest.mark.asyncio
    async def test__render__fetches_with_client(self) -> None:
        """Fetch the opus through the client before rendering."""
        client = MagicMock()
        client.fetch_opus = AsyncMock(return_value=opus_response([text_paragraph(word("x"))]))
        renderer = OpusRenderer(RenderConfig(), client)

        result = await renderer.render("123")

        client.fetch_opus.assert_awaited_once_with("123")
        assert result is not None
        assert "x</span>" in result.html

    @pytest.mark.asyncio
    async def test__render_without_client__raises(self) -> None:
        """Refuse to fetch without a client."""
        with pytest.raises(RuntimeError, match="no Bilibili client"):
            await OpusRenderer(RenderConfig()).render("123")
