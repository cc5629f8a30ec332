"""Paragraph rendering.

Dispatches on paragraph kind and produces block-level HTML that mirrors the
DOM of Bilibili's opus detail page. Malformed or unknown paragraphs render as
an empty string so that one bad paragraph never aborts a document.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from opusview.config import RenderConfig
from opusview.core.html import (
    align_to_css,
    esc_html,
    format_number,
    protocol_relative,
    scoped,
    with_size_suffix,
)
from opusview.core.inline import render_nodes
from opusview.core.models import (
    Alignment,
    BlockquoteParagraph,
    CodeParagraph,
    HeadingParagraph,
    Image,
    ImageGalleryParagraph,
    LinkCardParagraph,
    ListParagraph,
    Paragraph,
    RuleParagraph,
    TextNode,
    TextParagraph,
    WordNode,
    parse_paragraph,
)

logger = logging.getLogger(__name__)

LINK_CARD_PLACEHOLDER = "LINK_CARD"


@dataclass(frozen=True)
class ImageBox:
    """Display box of one gallery image after scaling to the display width."""

    width: float
    height: float
    scale: float


def render_document(
    paragraphs: Iterable[Paragraph | dict] | None,
    config: RenderConfig | None = None,
) -> str:
    """Render a paragraph sequence, concatenated in original order."""
    if paragraphs is None or isinstance(paragraphs, str | bytes | dict):
        return ""
    config = config or RenderConfig()
    return "".join(render_paragraph(paragraph, config) for paragraph in paragraphs)


def render_paragraph(paragraph: Paragraph | dict, config: RenderConfig | None = None) -> str:
    """Render a single paragraph.

    Args:
        paragraph: Parsed paragraph or raw paragraph dictionary
        config: Render options (defaults when omitted)

    Returns:
        Block-level HTML, empty for unknown or malformed paragraphs
    """
    config = config or RenderConfig()
    paragraph = parse_paragraph(paragraph)

    if isinstance(paragraph, HeadingParagraph):
        return _render_heading(paragraph.level, paragraph.nodes, paragraph.align, config)
    if isinstance(paragraph, TextParagraph):
        return _render_text(paragraph, config)
    if isinstance(paragraph, ImageGalleryParagraph):
        return _render_gallery(paragraph, config)
    if isinstance(paragraph, RuleParagraph):
        return _render_rule(paragraph, config)
    if isinstance(paragraph, BlockquoteParagraph):
        inner = render_nodes(paragraph.nodes, config)
        return f"<blockquote{_align_style(paragraph.align)}{scoped(config.scoped_attr)}>{inner}</blockquote>"
    if isinstance(paragraph, ListParagraph):
        return _render_list(paragraph, config)
    if isinstance(paragraph, LinkCardParagraph):
        return _render_link_card(paragraph)
    if isinstance(paragraph, CodeParagraph):
        return _render_code(paragraph)

    logger.debug(f"Skipping unknown paragraph type: {paragraph.para_type!r}")
    return ""


def max_font_size(nodes: Iterable[TextNode]) -> float:
    """Largest declared font size among word nodes, 0 when none declare one."""
    sizes = [node.font_size for node in nodes if isinstance(node, WordNode) and node.font_size]
    return max(sizes, default=0)


def heading_level_for(font_size: float, config: RenderConfig) -> int | None:
    """Pick the heading level a text paragraph is promoted to, if any.

    The h1 threshold is checked first; both thresholds are inclusive.
    """
    if font_size >= config.h1_size:
        return 1
    if font_size >= config.h2_size:
        return 2
    return None


def image_box(image: Image, config: RenderConfig) -> ImageBox:
    """Scale an image to the configured display width.

    Images without usable dimensions take the display width and the default
    aspect ratio.
    """
    display_width = config.image_display_width
    width = image.width or display_width
    height = image.height or display_width * config.image_aspect_ratio
    scale = display_width / width
    return ImageBox(width=display_width, height=round(height * scale, 3), scale=scale)


def _align_style(align: Alignment) -> str:
    return f' style="text-align:{align_to_css(align)};"'


def _render_heading(
    level: int,
    nodes: tuple[TextNode, ...],
    align: Alignment,
    config: RenderConfig,
) -> str:
    tag = f"h{level}"
    inner = render_nodes(nodes, config, as_heading=config.heading_strong)
    return f"<{tag}{_align_style(align)}{scoped(config.scoped_attr)}>{inner}</{tag}>"


def _render_text(paragraph: TextParagraph, config: RenderConfig) -> str:
    level = heading_level_for(max_font_size(paragraph.nodes), config)
    if level is not None:
        return _render_heading(level, paragraph.nodes, paragraph.align, config)

    inner = render_nodes(paragraph.nodes, config)
    return f"<p{_align_style(paragraph.align)}{scoped(config.scoped_attr)}>{inner}</p>"


def _render_gallery(paragraph: ImageGalleryParagraph, config: RenderConfig) -> str:
    if not paragraph.images:
        return ""
    center = " center" if paragraph.align is Alignment.CENTER else ""
    return "".join(_render_picture(image, center, config) for image in paragraph.images)


def _render_picture(image: Image, center: str, config: RenderConfig) -> str:
    box = image_box(image, config)
    size_style = f'style="width: {format_number(box.width)}px; height: {format_number(box.height)}px;"'
    avif = esc_html(with_size_suffix(image.url, config.picture_srcset_width, "avif"))
    webp = esc_html(with_size_suffix(image.url, config.picture_srcset_width, "webp"))
    return (
        f'<div class="opus-para-pic{center}">'
        f'<div class="bili-dyn-pic" {size_style}>'
        '<div class="bili-dyn-pic__img">'
        '<div class="b-img">'
        '<picture class="b-img__inner">'
        f'<source type="image/avif" srcset="{avif}">'
        f'<source type="image/webp" srcset="{webp}">'
        f'<img src="{webp}" loading="lazy" onload="bmgOnLoad(this)" onerror="bmgOnError(this)"'
        ' data-onload="bmgCmptOnload" data-onerror="bmgCmptOnerror">'
        "</picture>"
        "</div> <!---->"
        "</div> <!---->"
        "</div>"
        "</div>"
    )


def _render_rule(paragraph: RuleParagraph, config: RenderConfig) -> str:
    height = format_number(paragraph.height or config.rule_height)
    src = esc_html(protocol_relative(paragraph.url))
    return (
        f'<figure class="opus-para-line" style="max-height:{height}px;">'
        f'<img alt="cut-off" src="{src}" style="max-height:{height}px;">'
        "</figure>"
    )


def _render_list(paragraph: ListParagraph, config: RenderConfig) -> str:
    tag = "ol" if paragraph.ordered else "ul"
    inner = "".join(f"<li>{render_nodes(item.nodes, config)}</li>" for item in paragraph.items)
    return f"<{tag}{_align_style(paragraph.align)}>{inner}</{tag}>"


def _render_link_card(paragraph: LinkCardParagraph) -> str:
    href = esc_html(paragraph.url or "#")
    label = esc_html(paragraph.label or LINK_CARD_PLACEHOLDER)
    return f'<div{_align_style(paragraph.align)}><a href="{href}" target="_blank">{label}</a></div>'


def _render_code(paragraph: CodeParagraph) -> str:
    lang = f' data-lang="{esc_html(paragraph.lang)}"' if paragraph.lang else ""
    return f"<pre{_align_style(paragraph.align)}><code{lang}>{esc_html(paragraph.content)}</code></pre>"
