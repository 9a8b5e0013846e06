"""Alignment, direction, background, font and size attributors.

Each concern is available in several storage flavours (attribute, class,
inline style). Only one flavour is registered by default; the others are
consulted directly when pasted markup carries them.
"""

from __future__ import annotations

from ..core.registry import Attributor, ClassAttributor, Scope, StyleAttributor
from .color import ColorAttributor

ALIGNMENTS = ("right", "center", "justify")

AlignAttribute = Attributor("align", "align", scope=Scope.BLOCK, whitelist=ALIGNMENTS)
AlignClass = ClassAttributor("align", "ql-align", scope=Scope.BLOCK, whitelist=ALIGNMENTS)
AlignStyle = StyleAttributor("align", "text-align", scope=Scope.BLOCK, whitelist=ALIGNMENTS)

DirectionAttribute = Attributor("direction", "dir", scope=Scope.BLOCK, whitelist=("rtl",))
DirectionClass = ClassAttributor("direction", "ql-direction", scope=Scope.BLOCK, whitelist=("rtl",))
DirectionStyle = StyleAttributor("direction", "direction", scope=Scope.BLOCK, whitelist=("rtl",))

BackgroundClass = ClassAttributor("background", "ql-bg", scope=Scope.INLINE)
BackgroundStyle = ColorAttributor("background", "background-color", scope=Scope.INLINE)

FONTS = ("serif", "monospace")
FontClass = ClassAttributor("font", "ql-font", scope=Scope.INLINE, whitelist=FONTS)
FontStyle = StyleAttributor("font", "font-family", scope=Scope.INLINE, whitelist=FONTS)

SIZES = ("10px", "18px", "32px")
SizeClass = ClassAttributor("size", "ql-size", scope=Scope.INLINE, whitelist=("small", "large", "huge"))
SizeStyle = StyleAttributor("size", "font-size", scope=Scope.INLINE, whitelist=SIZES)

__all__ = [
    "AlignAttribute",
    "AlignClass",
    "AlignStyle",
    "BackgroundClass",
    "BackgroundStyle",
    "DirectionAttribute",
    "DirectionClass",
    "DirectionStyle",
    "FontClass",
    "FontStyle",
    "SizeClass",
    "SizeStyle",
]
