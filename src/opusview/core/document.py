"""Opus document extraction from the detail API response."""

from dataclasses import dataclass, field
from typing import Any

from opusview.bilibili.types import BiliResponseDict

MODULE_TYPE_CONTENT = "MODULE_TYPE_CONTENT"
MODULE_TYPE_TITLE = "MODULE_TYPE_TITLE"
MODULE_TYPE_AUTHOR = "MODULE_TYPE_AUTHOR"


@dataclass
class OpusDocument:
    """Content paragraphs of an opus plus the metadata shown around them."""

    id: str | None
    paragraphs: list[Any]
    title: str | None = None
    author: str | None = None
    pub_time: str | None = None
    warnings: list[str] = field(default_factory=list)

    def to_meta(self) -> dict[str, str | None]:
        """Convert metadata to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "pub_time": self.pub_time,
        }


def extract_document(response: BiliResponseDict | dict[str, Any]) -> OpusDocument | None:
    """Locate the content module in an opus detail response.

    Args:
        response: Decoded API response envelope

    Returns:
        OpusDocument, or None when the response has no content paragraphs
        (usually a wrong opus id or missing cookie)
    """
    if not isinstance(response, dict):
        return None

    warnings: list[str] = []
    code = response.get("code")
    if code not in (0, None):
        message = f"API returned code {code}: {response.get('message')}"
        warnings.append(message)

    data = response.get("data")
    item = data.get("item") if isinstance(data, dict) else None
    if not isinstance(item, dict):
        return None

    modules = item.get("modules")
    if not isinstance(modules, list):
        return None

    content = _find_module(modules, MODULE_TYPE_CONTENT, "module_content")
    if content is None:
        return None
    paragraphs = content.get("paragraphs")
    if not isinstance(paragraphs, list):
        return None

    title_module = _find_module(modules, MODULE_TYPE_TITLE, "module_title") or {}
    author_module = _find_module(modules, MODULE_TYPE_AUTHOR, "module_author") or {}
    basic = item.get("basic") if isinstance(item.get("basic"), dict) else {}

    return OpusDocument(
        id=_optional_str(item.get("id_str")),
        paragraphs=paragraphs,
        title=_optional_str(title_module.get("text")) or _optional_str(basic.get("title")),
        author=_optional_str(author_module.get("name")),
        pub_time=_optional_str(author_module.get("pub_time")),
        warnings=warnings,
    )


def _find_module(modules: list[Any], module_type: str, key: str) -> dict[str, Any] | None:
    for module in modules:
        if isinstance(module, dict) and module.get("module_type") == module_type:
            body = module.get(key)
            return body if isinstance(body, dict) else None
    return None


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
