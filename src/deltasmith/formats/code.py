"""Inline code and code-block lines."""

from __future__ import annotations

from typing import Any

from ..core.markup import node_attribute
from ..core.registry import BlockBlot, FormatRegistry, InlineBlot, escape_text


class Code(InlineBlot):
    blot_name = "code"
    tag_names = ("code",)


class CodeBlock(BlockBlot):
    """Code line; consecutive code lines export as a single ``<pre>``."""

    blot_name = "code-block"
    class_name = "ql-code-block"
    TAB = "  "
    PLAIN = "plain"

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return node_attribute(node, "data-language") or cls.PLAIN

    @classmethod
    def html(cls, lines: list[str]) -> str:
        return f"<pre>{escape_text(chr(10).join(lines))}</pre>"


__all__ = ["Code", "CodeBlock"]
