"""HTML string helpers shared by the inline and paragraph renderers."""

import re

from opusview.core.models import Alignment

_SCHEME_RE = re.compile(r"^https?:", re.IGNORECASE)

_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;"}
)

_ALIGN_CSS = {
    Alignment.START: "left",
    Alignment.CENTER: "center",
    Alignment.END: "right",
}


def esc_html(value: str | None) -> str:
    """Escape text for use in element content and quoted attributes."""
    if not value:
        return ""
    return value.translate(_ESCAPES)


def text_with_br(value: str | None) -> str:
    """Escape text and turn newlines into <br> elements."""
    if not value:
        return ""
    return esc_html(value).replace("\n", "<br>")


def wrap_strong(markup: str, enable: bool) -> str:
    if not enable or not markup:
        return markup
    return f"<strong>{markup}</strong>"


def align_to_css(align: Alignment) -> str:
    return _ALIGN_CSS.get(align, "left")


def scoped(attr: str | bool | None) -> str:
    """Return the scoped-style attribute fragment, or nothing when disabled."""
    if not attr or attr is True:
        return ""
    return f' {attr}=""'


def protocol_relative(url: str | None) -> str:
    """Strip the http(s) scheme so the URL becomes //host/path."""
    if not url:
        return ""
    return _SCHEME_RE.sub("", url, count=1)


def with_size_suffix(url: str | None, width: int, ext: str) -> str:
    """Build a sized image URL, e.g. //i0.hdslb.com/bfs/a.png@1192w.webp."""
    no_query = protocol_relative(url).split("?", 1)[0]
    return f"{no_query}@{width}w.{ext}"


def format_number(value: float) -> str:
    """Format a CSS number with at most three decimals and no trailing zeros."""
    text = f"{round(value, 3):.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text

