"""Text colour attributors."""

from __future__ import annotations

import re
from typing import Any

from ..core.registry import ClassAttributor, Scope, StyleAttributor

_LEADING = re.compile(r"^[^\d]+")
_TRAILING = re.compile(r"[^\d]+$")


def rgb_to_hex(value: str) -> str:
    """Convert an ``rgb(r, g, b)`` colour to ``#rrggbb``; other values pass through."""
    if not value.startswith("rgb("):
        return value
    body = _TRAILING.sub("", _LEADING.sub("", value))
    components = []
    for component in body.split(","):
        try:
            channel = int(component.strip())
        except ValueError:
            return value
        components.append(f"{channel:02x}"[-2:])
    return "#" + "".join(components)


class ColorAttributor(StyleAttributor):
    """Style attributor normalising ``rgb()`` colours to hex notation."""

    def value(self, node: Any) -> Any:
        value = super().value(node)
        if not isinstance(value, str):
            return value
        return rgb_to_hex(value)


ColorClass = ClassAttributor("acolor", "ql-color", scope=Scope.INLINE)
ColorStyle = ColorAttributor("acolor", "color", scope=Scope.INLINE)

__all__ = ["ColorAttributor", "ColorClass", "ColorStyle", "rgb_to_hex"]
