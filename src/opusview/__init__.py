"""Opusview - Bilibili opus documents rendered as the original page renders them."""

from opusview.core.inline import render_nodes
from opusview.core.paragraph import render_document, render_paragraph

__all__ = [
    "render_document",
    "render_nodes",
    "render_paragraph",
]
