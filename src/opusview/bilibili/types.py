"""TypedDicts for the Bilibili opus detail API.

Only the parts of the response the renderer reads are described; paragraph
payloads stay as plain dictionaries and are parsed by opusview.core.models.
"""

from typing import Any, Generic, NotRequired, TypedDict, TypeVar

T = TypeVar("T")


class BiliResponseDict(TypedDict, Generic[T]):
    """Generic API response envelope."""

    code: int
    message: str
    ttl: int
    data: T


class ModuleContentDict(TypedDict):
    """Body of the MODULE_TYPE_CONTENT module."""

    paragraphs: list[dict[str, Any]]


class ModuleTitleDict(TypedDict):
    """Body of the MODULE_TYPE_TITLE module."""

    text: str


class ModuleAuthorDict(TypedDict):
    """Body of the MODULE_TYPE_AUTHOR module."""

    mid: int | str
    name: str
    face: str
    pub_time: NotRequired[str]
    pub_ts: NotRequired[int]
    jump_url: NotRequired[str]


class ModuleDict(TypedDict):
    """One page module; exactly one module_* body is present."""

    module_type: str
    module_content: NotRequired[ModuleContentDict]
    module_title: NotRequired[ModuleTitleDict]
    module_author: NotRequired[ModuleAuthorDict]


class OpusBasicDict(TypedDict):
    """Ownership and title information of an opus."""

    comment_id_str: NotRequired[str]
    rid_str: NotRequired[str]
    title: NotRequired[str]
    uid: NotRequired[int]


class OpusItemDict(TypedDict):
    """The opus item."""

    id_str: str
    type: int
    basic: OpusBasicDict
    modules: list[ModuleDict]


class OpusResponseDict(TypedDict):
    """Payload of the opus detail response."""

    item: OpusItemDict


OpusDetailResponse = BiliResponseDict[OpusResponseDict]
