"""Structural predicates over pasted markup nodes."""

from __future__ import annotations

from typing import Any

from bs4.element import Tag

from ..core.markup import tag_name


BLOCK_ELEMENTS = frozenset(
    {
        "address",
        "article",
        "blockquote",
        "canvas",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "iframe",
        "li",
        "main",
        "nav",
        "ol",
        "output",
        "p",
        "pre",
        "section",
        "table",
        "td",
        "tr",
        "ul",
        "video",
    }
)

LIST_ELEMENTS = frozenset({"ol", "ul"})


def is_line(node: Any) -> bool:
    """Return True for non-empty block-level elements.

    Empty elements (``<p></p>``) and text nodes never count as lines.
    """
    if not isinstance(node, Tag) or not node.contents:
        return False
    return tag_name(node) in BLOCK_ELEMENTS


def is_pre(node: Any) -> bool:
    """Return True when ``node`` is, or sits inside, a ``<pre>`` element."""
    current = node
    while current is not None:
        if tag_name(current) == "pre":
            return True
        current = current.parent
    return False


def list_depth(node: Any) -> int:
    """Count the ``<ol>``/``<ul>`` ancestors of ``node``."""
    depth = 0
    parent = node.parent
    while parent is not None:
        if tag_name(parent) in LIST_ELEMENTS:
            depth += 1
        parent = parent.parent
    return depth


__all__ = ["BLOCK_ELEMENTS", "LIST_ELEMENTS", "is_line", "is_pre", "list_depth"]
