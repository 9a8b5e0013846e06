"""Video block embed rendered as an iframe."""

from __future__ import annotations

from typing import Any

from ..core.markup import node_attribute
from ..core.registry import BlockEmbed, FormatRegistry, escape_text
from .inline import Link

ATTRIBUTES = ("height", "width")


class Video(BlockEmbed):
    blot_name = "video"
    class_name = "ql-video"
    tag_names = ("iframe",)

    @classmethod
    def value(cls, node: Any) -> Any:
        return node_attribute(node, "src")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return {name: node_attribute(node, name) for name in ATTRIBUTES if node_attribute(node, name)}

    @classmethod
    def html(cls, value: Any, attributes: dict[str, Any]) -> str:
        src = escape_text(Link.sanitize(str(value))).replace('"', "&quot;")
        return f'<a href="{src}">{src}</a>'


__all__ = ["Video"]
