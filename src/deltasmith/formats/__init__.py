"""Default formats of the document model."""

from __future__ import annotations

from ..core.registry import FormatRegistry
from .attributes import (
    AlignAttribute,
    AlignClass,
    AlignStyle,
    BackgroundClass,
    BackgroundStyle,
    DirectionAttribute,
    DirectionClass,
    DirectionStyle,
    FontClass,
    FontStyle,
    SizeClass,
    SizeStyle,
)
from .block import (
    Blockquote,
    Header,
    ListItem,
    TableCell,
    TableCellLine,
    TableCol,
    TableRow,
)
from .code import Code, CodeBlock
from .color import ColorClass, ColorStyle
from .image import Image
from .indent import IndentClass
from .inline import Bold, Italic, Link, Script, Strike, Underline
from .video import Video

ATTRIBUTORS = (
    DirectionAttribute,
    AlignClass,
    BackgroundClass,
    ColorClass,
    DirectionClass,
    FontClass,
    SizeClass,
    AlignStyle,
    BackgroundStyle,
    ColorStyle,
    DirectionStyle,
    FontStyle,
    SizeStyle,
)

FORMATS = (
    AlignClass,
    BackgroundStyle,
    ColorStyle,
    DirectionClass,
    FontClass,
    SizeClass,
    IndentClass,
    Blockquote,
    Header,
    ListItem,
    TableCell,
    TableCellLine,
    TableRow,
    TableCol,
    CodeBlock,
    Bold,
    Italic,
    Underline,
    Strike,
    Link,
    Script,
    Code,
    Image,
    Video,
)


def build_registry() -> FormatRegistry:
    """Return a registry holding every default format."""
    registry = FormatRegistry()
    registry.register(*ATTRIBUTORS)
    registry.register(*FORMATS)
    return registry


__all__ = [
    "AlignAttribute",
    "Blockquote",
    "Bold",
    "Code",
    "CodeBlock",
    "ColorStyle",
    "Header",
    "Image",
    "IndentClass",
    "Italic",
    "Link",
    "ListItem",
    "Script",
    "Strike",
    "TableCell",
    "TableCellLine",
    "TableCol",
    "TableRow",
    "Underline",
    "Video",
    "build_registry",
]
