"""Opus rendering.

Wraps the paragraph renderer with document extraction and, for live
documents, the Bilibili client.
"""

from dataclasses import dataclass
from typing import Any

from opusview.bilibili.client import BilibiliClient
from opusview.config import RenderConfig
from opusview.core.document import OpusDocument, extract_document
from opusview.core.models import UnknownParagraph, parse_document
from opusview.core.paragraph import render_document


@dataclass
class RenderResult:
    """Result of rendering an opus document."""

    html: str
    document: OpusDocument
    warnings: list[str]

    @property
    def title(self) -> str | None:
        return self.document.title


class OpusRenderer:
    """Renders opus documents to HTML fragments.

    Nothing is cached: every call fetches and renders afresh.
    """

    def __init__(self, config: RenderConfig, client: BilibiliClient | None = None) -> None:
        """Initialize renderer.

        Args:
            config: Render options
            client: Bilibili client, required only by render()
        """
        self._config = config
        self._client = client

    @property
    def config(self) -> RenderConfig:
        return self._config

    async def render(self, opus_id: str) -> RenderResult | None:
        """Fetch and render an opus.

        Args:
            opus_id: Opus ID

        Returns:
            RenderResult, or None when the response has no content module

        Raises:
            RuntimeError: If the renderer was created without a client
            httpx.HTTPError: If the upstream request fails
        """
        if self._client is None:
            raise RuntimeError("OpusRenderer has no Bilibili client")
        response = await self._client.fetch_opus(opus_id)
        return self.render_response(response)

    def render_response(self, response: dict[str, Any]) -> RenderResult | None:
        """Render an already decoded detail response.

        Args:
            response: API response envelope

        Returns:
            RenderResult, or None when the response has no content module
        """
        document = extract_document(response)
        if document is None:
            return None

        paragraphs = parse_document(document.paragraphs)
        warnings = list(document.warnings)
        for index, paragraph in enumerate(paragraphs):
            if isinstance(paragraph, UnknownParagraph):
                warnings.append(
                    f"Paragraph {index}: unsupported or malformed para_type {paragraph.para_type!r}"
                )

        return RenderResult(
            html=render_document(paragraphs, self._config),
            document=document,
            warnings=warnings,
        )
