"""Shared test fixtures."""

from typing import Any

import pytest
from opusview.config import (
    BilibiliConfig,
    Config,
    PageConfig,
    RenderConfig,
    ServerConfig,
)


def word(words: str, **extra: Any) -> dict[str, Any]:
    """Build a raw word node."""
    return {"type": "TEXT_NODE_TYPE_WORD", "word": {"words": words, **extra}}


def rich(rich_type: str, **fields: Any) -> dict[str, Any]:
    """Build a raw rich-reference node."""
    return {"type": "TEXT_NODE_TYPE_RICH", "rich": {"type": f"RICH_TEXT_NODE_TYPE_{rich_type}", **fields}}


def text_paragraph(*nodes: dict[str, Any], align: int = 0) -> dict[str, Any]:
    """Build a raw text paragraph."""
    return {"para_type": 1, "align": align, "text": {"nodes": list(nodes)}}


def opus_response(
    paragraphs: list[dict[str, Any]] | None,
    *,
    title: str = "Opus title",
    author: str = "Author",
) -> dict[str, Any]:
    """Build an opus detail response envelope."""
    modules: list[dict[str, Any]] = [
        {"module_type": "MODULE_TYPE_TITLE", "module_title": {"text": title}},
        {
            "module_type": "MODULE_TYPE_AUTHOR",
            "module_author": {
                "mid": 35025955,
                "name": author,
                "face": "https://i0.hdslb.com/face.jpg",
                "pub_time": "2025年11月02日 14:54",
            },
        },
    ]
    if paragraphs is not None:
        modules.append(
            {"module_type": "MODULE_TYPE_CONTENT", "module_content": {"paragraphs": paragraphs}}
        )
    return {
        "code": 0,
        "message": "0",
        "ttl": 1,
        "data": {
            "item": {
                "id_str": "1133181564352462851",
                "type": 1,
                "basic": {"title": "Basic title"},
                "modules": modules,
            }
        },
    }


@pytest.fixture
def render_config() -> RenderConfig:
    return RenderConfig()


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration with a cookie and a default opus."""
    return Config(
        server=ServerConfig(default_opus_id="1133181564352462851"),
        bilibili=BilibiliConfig(
            api_url="https://api.test/opus/detail",
            cookie="SESSDATA=test",
            features=["htmlNewStyle"],
        ),
        render=RenderConfig(),
        page=PageConfig(stylesheets=["https://static.test/opus.css"]),
    )
