"""Attribute, class, and inline-style extraction for pasted elements."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.delta import is_set
from ..core.registry import Attributor, ClassAttributor, FormatRegistry, Scope, StyleAttributor
from ..formats.attributes import (
    AlignAttribute,
    AlignStyle,
    BackgroundStyle,
    DirectionAttribute,
    DirectionStyle,
    FontStyle,
    SizeStyle,
)
from ..formats.color import ColorStyle


ATTRIBUTE_ATTRIBUTORS: dict[str, Attributor] = {
    attributor.key_name: attributor for attributor in (AlignAttribute, DirectionAttribute)
}

STYLE_ATTRIBUTORS: dict[str, Attributor] = {
    attributor.key_name: attributor
    for attributor in (AlignStyle, BackgroundStyle, ColorStyle, DirectionStyle, FontStyle, SizeStyle)
}


class AttributeResolver:
    """Collect the attributor formats carried by a single element.

    Every attribute name, class prefix and inline style property of the node
    is looked up in the registry first. When the registry has no usable
    value the fallback attribute and style attributors are consulted.
    """

    def __init__(
        self,
        registry: FormatRegistry,
        *,
        attribute_attributors: Mapping[str, Attributor] | None = None,
        style_attributors: Mapping[str, Attributor] | None = None,
        include_styles: bool = True,
    ) -> None:
        self.registry = registry
        self.attribute_attributors = dict(
            ATTRIBUTE_ATTRIBUTORS if attribute_attributors is None else attribute_attributors
        )
        self.style_attributors = dict(
            STYLE_ATTRIBUTORS if style_attributors is None else style_attributors
        )
        self.include_styles = include_styles

    def keys(self, node: Any) -> list[str]:
        keys = [*Attributor.keys(node), *ClassAttributor.keys(node)]
        if self.include_styles:
            keys.extend(StyleAttributor.keys(node))
        seen: dict[str, None] = dict.fromkeys(key for key in keys if key)
        return list(seen)

    def resolve(self, node: Any) -> dict[str, Any]:
        """Return ``{format: value}`` for every attributor found on ``node``."""
        formats: dict[str, Any] = {}
        for name in self.keys(node):
            attributor = self.registry.query(name, Scope.ATTRIBUTE)
            if isinstance(attributor, Attributor):
                value = attributor.value(node)
                formats[attributor.attr_name] = value
                if is_set(value):
                    continue
            for fallback in (self.attribute_attributors.get(name), self.style_attributors.get(name)):
                if fallback is None:
                    continue
                value = fallback.value(node)
                if is_set(value) or fallback.attr_name not in formats:
                    formats[fallback.attr_name] = value if is_set(value) else None
        return formats


__all__ = ["ATTRIBUTE_ATTRIBUTORS", "STYLE_ATTRIBUTORS", "AttributeResolver"]
