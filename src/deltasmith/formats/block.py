"""Line-level formats: headers, quotes, list items and table structure."""

from __future__ import annotations

import re
from typing import Any

from ..core.markup import node_attribute, tag_name
from ..core.registry import BlockBlot, FormatRegistry

FOLDED = "fold"
UNFOLDED = "unfold"

_HEADER_TAG = re.compile(r"^h([1-6])$")


def fold_state(node: Any) -> str:
    """Return the fold marker of a hierarchical line node."""
    return node_attribute(node, "data-fold") or UNFOLDED


class Header(BlockBlot):
    """Heading line; the value carries its level and fold state."""

    blot_name = "header"
    tag_names = ("h1", "h2", "h3", "h4", "h5", "h6")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        match = _HEADER_TAG.match(tag_name(node))
        if match is None:
            return None
        return {"value": int(match.group(1)), "fold": fold_state(node)}

    @classmethod
    def level(cls, value: Any) -> int:
        if isinstance(value, dict):
            value = value.get("value")
        try:
            level = int(value)
        except (TypeError, ValueError):
            return 1
        return min(max(level, 1), 6)

    @classmethod
    def line_tag(cls, value: Any) -> str:
        return f"h{cls.level(value)}"


class Blockquote(BlockBlot):
    blot_name = "blockquote"
    tag_names = ("blockquote",)

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return True


class ListItem(BlockBlot):
    """List line; ``value`` is ordered, bullet, checked or unchecked."""

    blot_name = "list"
    tag_names = ("li",)
    KINDS = ("ordered", "bullet", "checked", "unchecked")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        kind = node_attribute(node, "data-list")
        if not kind:
            return None
        return {"value": kind, "fold": fold_state(node)}

    @classmethod
    def kind(cls, value: Any) -> str | None:
        if isinstance(value, dict):
            return value.get("value")
        return value if isinstance(value, str) else None


class TableCell(BlockBlot):
    """Table cell line; the value is the row the cell belongs to."""

    blot_name = "table"
    tag_names = ("td", "th")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return node_attribute(node, "data-row")


class TableCellLine(BlockBlot):
    """Paragraph inside a table cell, addressed by row and cell ids."""

    blot_name = "table-cell-line"
    class_name = "qlbt-cell-line"
    ATTRIBUTES = ("row", "cell", "rowspan", "colspan")

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        formats: dict[str, str] = {}
        for name in cls.ATTRIBUTES:
            value = node_attribute(node, f"data-{name}")
            if value is not None:
                formats[name] = value
        return formats or None


class TableRow(BlockBlot):
    blot_name = "row"
    class_name = "qlbt-row"

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return node_attribute(node, "data-row") or True


class TableCol(BlockBlot):
    """Column definition line carrying the column width."""

    blot_name = "table-col"
    class_name = "qlbt-col"

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        width = node_attribute(node, "width")
        return {"width": width} if width else True


TABLE_STRUCTURE_FORMATS = ("table-col", "table-cell-line")

__all__ = [
    "Blockquote",
    "FOLDED",
    "Header",
    "ListItem",
    "TABLE_STRUCTURE_FORMATS",
    "TableCell",
    "TableCellLine",
    "TableCol",
    "TableRow",
    "UNFOLDED",
    "fold_state",
]
