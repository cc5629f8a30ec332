"""Inline text node rendering.

Turns word, rich-reference and formula nodes into inline HTML the way the
Bilibili opus page renders them. Each node is rendered on its own; sibling
nodes never affect each other's markup.
"""

import logging
import re
from collections.abc import Iterable
from urllib.parse import quote

from opusview.config import RenderConfig
from opusview.core.html import (
    esc_html,
    format_number,
    protocol_relative,
    scoped,
    text_with_br,
    wrap_strong,
)
from opusview.core.models import (
    Emoji,
    FormulaNode,
    RichNode,
    RichType,
    StyleFlag,
    TextNode,
    WordNode,
    parse_node,
)

logger = logging.getLogger(__name__)

SPACE_URL = "https://space.bilibili.com/"
SEARCH_URL = "https://search.bilibili.com/all?keyword="
VIDEO_URL = "https://www.bilibili.com/video/"
READ_URL = "https://www.bilibili.com/read/"

# Applied in this order so inline style strings are stable.
STYLE_DECLARATIONS: tuple[tuple[StyleFlag, str], ...] = (
    (StyleFlag.BOLD, "font-weight:700"),
    (StyleFlag.ITALIC, "font-style:italic"),
    (StyleFlag.UNDERLINE, "text-decoration:underline"),
    (StyleFlag.STRIKETHROUGH, "text-decoration:line-through"),
)

EMOJI_SIZES_EM = {1: 1.0, 3: 1.5}
DEFAULT_EMOJI_EM = 1.25

_BV_RE = re.compile(r"BV[0-9A-Za-z]+")
_DIGITS_RE = re.compile(r"\d+")
_NON_DIGITS_RE = re.compile(r"\D+")
_SCHEME_RE = re.compile(r"^https?:", re.IGNORECASE)


def render_nodes(
    nodes: Iterable[TextNode | dict] | None,
    config: RenderConfig | None = None,
    *,
    as_heading: bool = False,
) -> str:
    """Render a node sequence, concatenated in order with no separator."""
    if not nodes:
        return ""
    config = config or RenderConfig()
    return "".join(render_inline(node, config, as_heading=as_heading) for node in nodes)


def render_inline(
    node: TextNode | dict,
    config: RenderConfig | None = None,
    *,
    as_heading: bool = False,
) -> str:
    """Render one text node.

    Args:
        node: Parsed node or raw node dictionary
        config: Render options (defaults when omitted)
        as_heading: Wrap words and links in <strong>

    Returns:
        Inline HTML, empty for unknown or malformed nodes
    """
    config = config or RenderConfig()
    node = parse_node(node)
    if isinstance(node, WordNode):
        return _render_word(node, config, as_heading)
    if isinstance(node, RichNode):
        return _render_rich(node, as_heading)
    if isinstance(node, FormulaNode):
        return _render_formula(node)
    logger.debug(f"Skipping unknown text node type: {node.node_type!r}")
    return ""


def word_css(node: WordNode) -> str:
    """Build the inline style declarations for a word node."""
    styles: list[str] = []
    if node.color:
        styles.append(f"color:{node.color}")
    if node.font_size is not None:
        styles.append(f"font-size:{format_number(node.font_size)}px")
    for flag, declaration in STYLE_DECLARATIONS:
        if flag in node.styles:
            styles.append(declaration)
    if node.line_height:
        styles.append(f"line-height:{node.line_height}")
    if node.letter_spacing:
        styles.append(f"letter-spacing:{node.letter_spacing}")
    return ";".join(styles)


def _render_word(node: WordNode, config: RenderConfig, as_heading: bool) -> str:
    style = word_css(node)
    style_attr = f' style="{esc_html(style)}"' if style else ""
    span = f"<span{scoped(config.scoped_attr)}{style_attr}>{text_with_br(node.words)}</span>"
    return wrap_strong(span, as_heading)


def _render_formula(node: FormulaNode) -> str:
    latex = esc_html(node.latex)
    return f'<span data-latex="{latex}">{latex}</span>'


def _anchor(href: str, label: str, *, new_tab: bool = True) -> str:
    target = ' target="_blank"' if new_tab else ""
    return f'<a href="{esc_html(href)}"{target}>{esc_html(label)}</a>'


def _render_rich(node: RichNode, as_heading: bool) -> str:
    rich_type = node.rich_type
    text = node.label

    if rich_type is RichType.EMOJI:
        return _render_emoji(node.emoji)

    if rich_type is RichType.AT:
        mid = _NON_DIGITS_RE.sub("", node.rid or "")
        markup = _anchor(f"{SPACE_URL}{mid}", text or "@")
    elif rich_type is RichType.TOPIC:
        topic = text.strip("#")
        href = node.jump_url or f"{SEARCH_URL}{quote(topic, safe='')}"
        markup = _anchor(href, f"#{topic}")
    elif rich_type is RichType.WEB:
        href = text if _SCHEME_RE.match(text) else "https://" + text.lstrip("/")
        markup = _anchor(href, text)
    elif rich_type is RichType.MAIL:
        markup = _anchor(f"mailto:{text}", text, new_tab=False)
    elif rich_type is RichType.BV:
        markup = _anchor(f"{VIDEO_URL}{_first_match(_BV_RE, text)}", text)
    elif rich_type is RichType.AV:
        markup = _anchor(f"{VIDEO_URL}av{_first_match(_DIGITS_RE, text)}", text)
    elif rich_type is RichType.CV:
        markup = _anchor(f"{READ_URL}cv{_first_match(_DIGITS_RE, text)}", text)
    elif node.jump_url:
        markup = _anchor(node.jump_url, text or node.jump_url)
    else:
        markup = text_with_br(text)

    return wrap_strong(markup, as_heading)


def _render_emoji(emoji: Emoji | None) -> str:
    if emoji is None:
        return ""
    alt = esc_html(emoji.text)
    if not emoji.url:
        return alt
    em = format_number(EMOJI_SIZES_EM.get(emoji.size, DEFAULT_EMOJI_EM))
    style = f"width:{em}em;height:{em}em;vertical-align:middle;"
    return f'<img src="{esc_html(protocol_relative(emoji.url))}" alt="{alt}" style="{style}">'


def _first_match(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    return match.group(0) if match else text
