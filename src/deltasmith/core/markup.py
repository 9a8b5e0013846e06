"""Read-only accessors over parsed BeautifulSoup markup nodes."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, cast

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag


def parse_markup(markup: str, parser: str = "html.parser") -> BeautifulSoup:
    """Parse ``markup`` into a BeautifulSoup tree."""
    return BeautifulSoup(markup, parser)


def markup_root(soup: BeautifulSoup) -> Tag:
    """Return the ``<body>`` of a parsed document, or the document itself."""
    body = soup.body
    return body if body is not None else soup


def is_element(node: Any) -> bool:
    """Return True for element nodes."""
    return isinstance(node, Tag)


def is_text(node: Any) -> bool:
    """Return True for character data (comments, doctypes and CDATA excluded)."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def tag_name(node: Any) -> str:
    """Return the lower-cased tag name of an element, or an empty string."""
    if not isinstance(node, Tag):
        return ""
    return (node.name or "").lower()


def child_nodes(node: Any) -> list[PageElement]:
    """Return the children of an element (empty for text nodes)."""
    if not isinstance(node, Tag):
        return []
    return list(node.contents)


def first_child(node: Any) -> PageElement | None:
    children = child_nodes(node)
    return children[0] if children else None


def gather_classes(value: Any) -> list[str]:
    """Return a list of classes extracted from a BeautifulSoup attribute."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [cast(str, item) for item in value if isinstance(item, str)]
    return []


def node_classes(node: Any) -> list[str]:
    """Return the class list of an element."""
    if not isinstance(node, Tag):
        return []
    return gather_classes(node.get("class"))


def node_attribute(node: Any, name: str) -> str | None:
    """Return an attribute value as a string when present."""
    if not isinstance(node, Tag):
        return None
    value = node.get(name)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return " ".join(gather_classes(value))


def node_styles(node: Any) -> dict[str, str]:
    """Parse the inline ``style`` attribute into a lower-cased mapping."""
    raw = node_attribute(node, "style")
    if not raw:
        return {}
    styles: dict[str, str] = {}
    for declaration in raw.split(";"):
        name, sep, value = declaration.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        value = value.strip()
        if name and value:
            styles[name] = value
    return styles


def text_content(node: Any) -> str:
    """Return the visible text of a node."""
    if isinstance(node, Tag):
        return node.get_text()
    if isinstance(node, NavigableString):
        return str(node)
    return ""


__all__ = [
    "child_nodes",
    "first_child",
    "gather_classes",
    "is_element",
    "is_text",
    "markup_root",
    "node_attribute",
    "node_classes",
    "node_styles",
    "parse_markup",
    "tag_name",
    "text_content",
]
