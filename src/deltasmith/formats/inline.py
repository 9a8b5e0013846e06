"""Inline wrapper formats."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from ..core.markup import node_attribute, tag_name
from ..core.registry import FormatRegistry, InlineBlot, escape_text


def sanitize_url(url: str, protocols: tuple[str, ...]) -> bool:
    """Return whether ``url`` uses one of ``protocols``.

    Relative references carry no scheme and resolve against the document,
    so they are accepted.
    """
    scheme = urlsplit(url.strip()).scheme.lower()
    return not scheme or scheme in protocols


class Bold(InlineBlot):
    blot_name = "bold"
    tag_names = ("strong", "b")


class Italic(InlineBlot):
    blot_name = "italic"
    tag_names = ("em", "i")


class Underline(InlineBlot):
    blot_name = "underline"
    tag_names = ("u",)


class Strike(InlineBlot):
    blot_name = "strike"
    tag_names = ("s", "strike", "del")


class Link(InlineBlot):
    """Hyperlink carrying its target as the format value."""

    blot_name = "link"
    tag_names = ("a",)
    SANITIZED_URL = "about:blank"
    PROTOCOL_WHITELIST = ("http", "https", "mailto", "tel", "sms")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return node_attribute(node, "href")

    @classmethod
    def sanitize(cls, url: str) -> str:
        return url if sanitize_url(url, cls.PROTOCOL_WHITELIST) else cls.SANITIZED_URL

    @classmethod
    def wrap(cls, inner: str, value: Any) -> str:
        href = escape_text(cls.sanitize(str(value))).replace('"', "&quot;")
        return f'<a href="{href}">{inner}</a>'


class Script(InlineBlot):
    """Subscript or superscript text."""

    blot_name = "script"
    tag_names = ("sub", "sup")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        name = tag_name(node)
        if name == "sub":
            return "sub"
        if name == "sup":
            return "super"
        return None

    @classmethod
    def wrap(cls, inner: str, value: Any) -> str:
        tag = "sub" if value == "sub" else "sup"
        return f"<{tag}>{inner}</{tag}>"


__all__ = ["Bold", "Italic", "Link", "Script", "Strike", "Underline", "sanitize_url"]
