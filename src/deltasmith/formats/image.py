"""Image embed."""

from __future__ import annotations

from typing import Any

from ..core.markup import node_attribute
from ..core.registry import EmbedBlot, FormatRegistry, escape_text
from .inline import sanitize_url


class Image(EmbedBlot):
    """Image embed; the value is the stored asset id or the source URL."""

    blot_name = "image"
    tag_names = ("img",)
    ATTRIBUTES = ("alt", "width", "height", "data-id", "scale")
    PROTOCOLS = ("http", "https", "data", "file")

    @classmethod
    def value(cls, node: Any) -> Any:
        return node_attribute(node, "data-id") or node_attribute(node, "src")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        formats: dict[str, str] = {}
        for name in cls.ATTRIBUTES:
            value = node_attribute(node, name)
            if value is not None:
                formats[name] = value
        return formats

    @classmethod
    def sanitize(cls, url: str) -> str:
        return url if sanitize_url(url, cls.PROTOCOLS) else "//:0"

    @classmethod
    def html(cls, value: Any, attributes: dict[str, Any]) -> str:
        parts = [f'src="{_attr(cls.sanitize(str(value)))}"']
        for name in cls.ATTRIBUTES:
            if name in attributes and attributes[name] is not None:
                parts.append(f'{name}="{_attr(str(attributes[name]))}"')
        return f"<img {' '.join(parts)}>"


def _attr(value: str) -> str:
    return escape_text(value).replace('"', "&quot;")


__all__ = ["Image"]
