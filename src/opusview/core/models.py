"""Opus document model.

Paragraphs and text nodes arrive as loosely-typed JSON. They are parsed into
closed sets of frozen dataclasses here; anything unrecognised, or a known kind
missing its required payload, becomes an explicit Unknown variant that renders
as nothing. Parsing never raises.
"""

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any


class Alignment(Enum):
    START = "start"
    CENTER = "center"
    END = "end"

    @classmethod
    def from_code(cls, code: object) -> "Alignment":
        """Map the API's 0/1/2 alignment code, defaulting to start."""
        if code == 1 and not isinstance(code, bool):
            return cls.CENTER
        if code == 2:
            return cls.END
        return cls.START


class ParagraphKind(IntEnum):
    TEXT = 1
    PICTURES = 2
    LINE = 3
    BLOCKQUOTE = 4
    LIST = 5
    LINK_CARD = 6
    CODE = 7
    HEADING = 8


class NodeKind(Enum):
    WORD = "TEXT_NODE_TYPE_WORD"
    RICH = "TEXT_NODE_TYPE_RICH"
    FORMULA = "TEXT_NODE_TYPE_FORMULA"


class RichType(Enum):
    AT = "RICH_TEXT_NODE_TYPE_AT"
    TOPIC = "RICH_TEXT_NODE_TYPE_TOPIC"
    WEB = "RICH_TEXT_NODE_TYPE_WEB"
    MAIL = "RICH_TEXT_NODE_TYPE_MAIL"
    BV = "RICH_TEXT_NODE_TYPE_BV"
    AV = "RICH_TEXT_NODE_TYPE_AV"
    CV = "RICH_TEXT_NODE_TYPE_CV"
    EMOJI = "RICH_TEXT_NODE_TYPE_EMOJI"
    OTHER = ""

    @classmethod
    def parse(cls, value: object) -> "RichType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class StyleFlag(Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"


# Text nodes


@dataclass(frozen=True)
class WordNode:
    words: str
    font_size: float | None = None
    color: str | None = None
    styles: frozenset[StyleFlag] = frozenset()
    line_height: str | None = None
    letter_spacing: str | None = None


@dataclass(frozen=True)
class Emoji:
    text: str = ""
    size: int = 2
    url: str | None = None


@dataclass(frozen=True)
class RichNode:
    rich_type: RichType
    text: str | None = None
    orig_text: str | None = None
    rid: str | None = None
    jump_url: str | None = None
    emoji: Emoji | None = None

    @property
    def label(self) -> str:
        """Display text, falling back to the original text."""
        if self.text is not None:
            return self.text
        return self.orig_text or ""


@dataclass(frozen=True)
class FormulaNode:
    latex: str


@dataclass(frozen=True)
class UnknownNode:
    node_type: str | None = None


TextNode = WordNode | RichNode | FormulaNode | UnknownNode


# Paragraphs


@dataclass(frozen=True)
class TextParagraph:
    nodes: tuple[TextNode, ...]
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class HeadingParagraph:
    level: int
    nodes: tuple[TextNode, ...]
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class Image:
    url: str
    width: float | None = None
    height: float | None = None


@dataclass(frozen=True)
class ImageGalleryParagraph:
    images: tuple[Image, ...]
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class RuleParagraph:
    url: str | None = None
    height: float | None = None
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class BlockquoteParagraph:
    nodes: tuple[TextNode, ...]
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class ListItem:
    nodes: tuple[TextNode, ...] = ()


@dataclass(frozen=True)
class ListParagraph:
    ordered: bool
    items: tuple[ListItem, ...]
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class LinkCardParagraph:
    url: str | None = None
    label: str | None = None
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class CodeParagraph:
    content: str = ""
    lang: str | None = None
    align: Alignment = Alignment.START


@dataclass(frozen=True)
class UnknownParagraph:
    para_type: object = None
    align: Alignment = Alignment.START


Paragraph = (
    TextParagraph
    | HeadingParagraph
    | ImageGalleryParagraph
    | RuleParagraph
    | BlockquoteParagraph
    | ListParagraph
    | LinkCardParagraph
    | CodeParagraph
    | UnknownParagraph
)

_PARAGRAPH_TYPES = (
    TextParagraph,
    HeadingParagraph,
    ImageGalleryParagraph,
    RuleParagraph,
    BlockquoteParagraph,
    ListParagraph,
    LinkCardParagraph,
    CodeParagraph,
    UnknownParagraph,
)
_NODE_TYPES = (WordNode, RichNode, FormulaNode, UnknownNode)


def parse_node(raw: object) -> TextNode:
    """Parse one raw text node.

    Nodes with a missing or unknown type are still rendered as words or rich
    references when they carry the corresponding object.
    """
    if isinstance(raw, _NODE_TYPES):
        return raw
    if not isinstance(raw, dict):
        return UnknownNode()

    node_type = raw.get("type")
    word = _mapping(raw.get("word"))
    rich = _mapping(raw.get("rich"))
    formula = _mapping(raw.get("formula"))

    if node_type == NodeKind.WORD.value and word is not None:
        return _parse_word(word)
    if node_type == NodeKind.RICH.value and rich is not None:
        return _parse_rich(rich)
    if node_type == NodeKind.FORMULA.value and formula is not None:
        return FormulaNode(latex=_text(formula.get("latex_content")) or "")

    if word is not None and word.get("words"):
        return _parse_word(word)
    if rich is not None:
        return _parse_rich(rich)
    return UnknownNode(node_type=node_type if isinstance(node_type, str) else None)


def parse_nodes(raw: object) -> tuple[TextNode, ...]:
    if not isinstance(raw, list | tuple):
        return ()
    return tuple(parse_node(item) for item in raw)


def parse_paragraph(raw: object) -> Paragraph:
    """Parse one raw paragraph into its variant."""
    if isinstance(raw, _PARAGRAPH_TYPES):
        return raw
    if not isinstance(raw, dict):
        return UnknownParagraph()

    para_type = raw.get("para_type")
    align = Alignment.from_code(raw.get("align"))

    try:
        kind = ParagraphKind(para_type)
    except ValueError:
        return UnknownParagraph(para_type=para_type, align=align)

    if kind in (ParagraphKind.TEXT, ParagraphKind.BLOCKQUOTE):
        text = _mapping(raw.get("text"))
        if text is None:
            return UnknownParagraph(para_type=para_type, align=align)
        nodes = parse_nodes(text.get("nodes"))
        if kind is ParagraphKind.TEXT:
            return TextParagraph(nodes=nodes, align=align)
        return BlockquoteParagraph(nodes=nodes, align=align)

    if kind is ParagraphKind.HEADING:
        heading = _mapping(raw.get("heading"))
        if heading is None:
            return UnknownParagraph(para_type=para_type, align=align)
        return HeadingParagraph(
            level=_heading_level(heading.get("level")),
            nodes=parse_nodes(heading.get("nodes")),
            align=align,
        )

    if kind is ParagraphKind.PICTURES:
        pic = _mapping(raw.get("pic")) or {}
        pics = pic.get("pics")
        images: list[Image] = []
        if isinstance(pics, list):
            for item in pics:
                item = _mapping(item) or {}
                images.append(
                    Image(
                        url=_text(item.get("url")) or "",
                        width=positive_number(item.get("width")),
                        height=positive_number(item.get("height")),
                    )
                )
        return ImageGalleryParagraph(images=tuple(images), align=align)

    if kind is ParagraphKind.LINE:
        line = _mapping(raw.get("line")) or {}
        pic = _mapping(line.get("pic")) or {}
        return RuleParagraph(
            url=_text(pic.get("url")) or None,
            height=positive_number(pic.get("height")),
            align=align,
        )

    if kind is ParagraphKind.LIST:
        data = _mapping(raw.get("list"))
        if data is None:
            return UnknownParagraph(para_type=para_type, align=align)
        items_raw = data.get("items")
        items = tuple(
            ListItem(nodes=parse_nodes((_mapping(item) or {}).get("nodes")))
            for item in (items_raw if isinstance(items_raw, list) else [])
        )
        return ListParagraph(ordered=data.get("style") == 1, items=items, align=align)

    if kind is ParagraphKind.LINK_CARD:
        link_card = _mapping(raw.get("link_card")) or {}
        card = _mapping(link_card.get("card")) or {}
        return LinkCardParagraph(
            url=_text(card.get("jump_url")) or None,
            label=_text(card.get("type")) or None,
            align=align,
        )

    code = _mapping(raw.get("code")) or {}
    return CodeParagraph(
        content=_text(code.get("content")) or "",
        lang=_text(code.get("lang")) or None,
        align=align,
    )


def parse_document(raw: object) -> list[Paragraph]:
    if not isinstance(raw, list | tuple):
        return []
    return [parse_paragraph(item) for item in raw]


def positive_number(value: object) -> float | None:
    """Coerce a JSON value to a finite positive number.

    Numeric strings are accepted; booleans, NaN, infinities and
    non-positive values yield None.
    """
    number = _number(value)
    if number is None or number <= 0:
        return None
    return number


def _parse_word(word: dict[str, Any]) -> WordNode:
    style = _mapping(word.get("style")) or {}
    styles = {flag for flag in StyleFlag if style.get(flag.value)}
    if style.get("strike"):
        styles.add(StyleFlag.STRIKETHROUGH)
    return WordNode(
        words=_text(word.get("words")) or "",
        font_size=positive_number(word.get("font_size")),
        color=_truthy_text(word.get("color")),
        styles=frozenset(styles),
        line_height=_truthy_text(style.get("lineHeight")),
        letter_spacing=_truthy_text(style.get("letterSpacing")),
    )


def _parse_rich(rich: dict[str, Any]) -> RichNode:
    emoji = None
    emoji_raw = _mapping(rich.get("emoji"))
    if emoji_raw is not None:
        size = _number(emoji_raw.get("size"))
        emoji = Emoji(
            text=_text(emoji_raw.get("text")) or "",
            size=int(size) if size and size == int(size) else 2,
            url=(
                _text(emoji_raw.get("webp_url"))
                or _text(emoji_raw.get("icon_url"))
                or _text(emoji_raw.get("gif_url"))
                or None
            ),
        )
    return RichNode(
        rich_type=RichType.parse(rich.get("type")),
        text=_text(rich.get("text")),
        orig_text=_text(rich.get("orig_text")),
        rid=_text(rich.get("rid")),
        jump_url=_text(rich.get("jump_url")) or None,
        emoji=emoji,
    )


def _heading_level(value: object) -> int:
    level = int(_number(value) or 2) or 2
    return min(6, max(1, level))


def _mapping(value: object) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def _text(value: object) -> str | None:
    if value is None or isinstance(value, bool | dict | list):
        return None
    return str(value)


def _truthy_text(value: object) -> str | None:
    # 0 and "" mean unset.
    if not value:
        return None
    return _text(value)


def _number(value: object) -> float | None:
    """Coerce a JSON number or numeric string to a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, int | float) or not math.isfinite(value):
        return None
    return value
