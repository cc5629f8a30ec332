"""Standalone HTML page around a rendered opus fragment.

The fragment relies on Bilibili's opus-detail stylesheets, which are linked
from the page head.
"""

from opusview.config import PageConfig
from opusview.core.html import esc_html

CONTAINER_CLASS = "opus-module-content opus-paragraph-children"


def render_page(fragment: str, config: PageConfig, *, title: str | None = None) -> str:
    """Embed a fragment in a complete HTML document.

    Args:
        fragment: Rendered paragraph HTML
        config: Page configuration (stylesheets, container width)
        title: Optional document title

    Returns:
        HTML document
    """
    links = "".join(f'<link rel="stylesheet" href="{esc_html(href)}">' for href in config.stylesheets)
    title_tag = f"<title>{esc_html(title)}</title>" if title else ""
    container_style = f"max-width: {config.max_width}px; margin: 0 auto;"
    return (
        "<!doctype html><html>"
        f'<head><meta charset="utf-8">{title_tag}{links}</head>'
        f'<body><div class="{CONTAINER_CLASS}" style="{container_style}">{fragment}</div></body>'
        "</html>"
    )
