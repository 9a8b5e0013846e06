"""Format registry mapping markup nodes and format names to format types.

Two families of format types live in the registry:

`Attributors`
: read one named attribute, class prefix, or inline style from a node and
  produce a canonical value (``align``, ``indent``, ``acolor`` ...).

`Blots`
: describe a whole node kind: inline wrappers (``bold``), line-level
  blocks (``header``, ``list``) and embeds (``image``).

Lookups are scoped with :class:`Scope`, whose bit layout separates the
*type* (attribute or blot) from the *level* (inline or block). A format
matches a requested scope only when it shares both a type bit and a level
bit with it.
"""

from __future__ import annotations

from enum import IntFlag
import html
from typing import Any, ClassVar

from bs4.element import NavigableString, Tag

from .markup import node_attribute, node_classes, node_styles, tag_name


class Scope(IntFlag):
    """Type/level bit masks used to filter registry lookups."""

    TYPE = 0b0011
    LEVEL = 0b1100
    ATTRIBUTE = 0b1101
    BLOT = 0b1110
    INLINE = 0b0111
    BLOCK = 0b1011
    BLOCK_BLOT = 0b1010
    INLINE_BLOT = 0b0110
    BLOCK_ATTRIBUTE = 0b1001
    INLINE_ATTRIBUTE = 0b0101
    ANY = 0b1111


def scope_matches(candidate: Scope, requested: Scope) -> bool:
    """Return whether a format registered with ``candidate`` satisfies ``requested``."""
    return bool(requested & Scope.LEVEL & candidate) and bool(requested & Scope.TYPE & candidate)


class Attributor:
    """Format stored in a plain markup attribute."""

    def __init__(
        self,
        attr_name: str,
        key_name: str,
        *,
        scope: Scope | None = None,
        whitelist: tuple[Any, ...] | list[Any] | None = None,
    ) -> None:
        self.attr_name = attr_name
        self.key_name = key_name
        attribute_bit = Scope.TYPE & Scope.ATTRIBUTE
        if scope is not None:
            self.scope = Scope((scope & Scope.LEVEL) | attribute_bit)
        else:
            self.scope = Scope.ATTRIBUTE
        self.whitelist = tuple(whitelist) if whitelist is not None else None

    @staticmethod
    def keys(node: Any) -> list[str]:
        """Return the attribute names present on ``node``."""
        if not isinstance(node, Tag):
            return []
        return [str(name) for name in node.attrs]

    def can_add(self, value: Any) -> bool:
        if self.whitelist is None:
            return True
        return value in self.whitelist

    def raw_value(self, node: Any) -> str | None:
        return node_attribute(node, self.key_name)

    def value(self, node: Any) -> Any:
        """Return the canonical value stored on ``node`` or an empty string."""
        raw = self.raw_value(node)
        if raw and self.can_add(raw):
            return raw
        return ""

    def resolve(self, current: Any, value: Any) -> Any:
        """Return the value to store when ``value`` is applied over ``current``."""
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attr_name!r}, {self.key_name!r})"


class ClassAttributor(Attributor):
    """Format stored as a ``<key>-<value>`` class name."""

    @staticmethod
    def keys(node: Any) -> list[str]:
        return ["-".join(name.split("-")[:-1]) for name in node_classes(node)]

    def raw_value(self, node: Any) -> str | None:
        prefix = f"{self.key_name}-"
        for name in node_classes(node):
            if name.startswith(prefix):
                return name[len(prefix):]
        return None


class StyleAttributor(Attributor):
    """Format stored as an inline style property."""

    @staticmethod
    def keys(node: Any) -> list[str]:
        return list(node_styles(node))

    def raw_value(self, node: Any) -> str | None:
        return node_styles(node).get(self.key_name)


class Blot:
    """Base class describing a node kind of the document model."""

    blot_name: ClassVar[str] = "abstract"
    tag_names: ClassVar[tuple[str, ...]] = ()
    class_name: ClassVar[str | None] = None
    scope: ClassVar[Scope] = Scope.BLOT

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return None

    @classmethod
    def resolve(cls, current: Any, value: Any) -> Any:
        return value

    @classmethod
    def tag(cls) -> str:
        return cls.tag_names[0] if cls.tag_names else "span"


class InlineBlot(Blot):
    """Inline wrapper such as bold or italic."""

    scope = Scope.INLINE_BLOT

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return True

    @classmethod
    def wrap(cls, inner: str, value: Any) -> str:
        """Wrap already-escaped ``inner`` markup in this format's element."""
        tag = cls.tag()
        return f"<{tag}>{inner}</{tag}>"


class BlockBlot(Blot):
    """Line-level container (paragraph kinds)."""

    scope = Scope.BLOCK_BLOT

    @classmethod
    def line_tag(cls, value: Any) -> str:
        """Return the element wrapping a line carrying this format."""
        return cls.tag()


class EmbedBlot(Blot):
    """Atomic content unit of length one."""

    scope = Scope.INLINE_BLOT

    @classmethod
    def value(cls, node: Any) -> Any:
        return True

    @classmethod
    def formats(cls, node: Any, registry: FormatRegistry) -> Any:
        return {}

    @classmethod
    def html(cls, value: Any, attributes: dict[str, Any]) -> str:
        return f"<{cls.tag()}>"


class BlockEmbed(EmbedBlot):
    """Embed occupying a whole line."""

    scope = Scope.BLOCK_BLOT


FormatType = Attributor | type[Blot]


def is_embed(definition: Any) -> bool:
    return isinstance(definition, type) and issubclass(definition, EmbedBlot)


def is_block_embed(definition: Any) -> bool:
    return isinstance(definition, type) and issubclass(definition, BlockEmbed)


def is_block(definition: Any) -> bool:
    """Return True for block blots (line kinds), embeds excluded."""
    return isinstance(definition, type) and issubclass(definition, BlockBlot)


def format_name(definition: Any) -> str:
    if isinstance(definition, Attributor):
        return definition.attr_name
    return definition.blot_name


class FormatRegistry:
    """Registry of format types indexed by name, key, class, and tag."""

    def __init__(self) -> None:
        self._types: dict[str, FormatType] = {}
        self._attributes: dict[str, Attributor] = {}
        self._classes: dict[str, type[Blot]] = {}
        self._tags: dict[str, type[Blot]] = {}

    def register(self, *definitions: FormatType) -> None:
        """Register attributors and blots; later registrations win."""
        for definition in definitions:
            if isinstance(definition, Attributor):
                self._types[definition.attr_name] = definition
                self._attributes[definition.key_name] = definition
                continue
            if not (isinstance(definition, type) and issubclass(definition, Blot)):
                msg = f"Cannot register {definition!r}: not an attributor or blot"
                raise TypeError(msg)
            if definition.blot_name == "abstract":
                msg = f"Cannot register abstract blot {definition.__name__}"
                raise ValueError(msg)
            self._types[definition.blot_name] = definition
            if definition.class_name:
                self._classes[definition.class_name] = definition
            for tag in definition.tag_names:
                # Class-named blots only claim tags nobody else owns.
                if tag.lower() not in self._tags or not definition.class_name:
                    self._tags[tag.lower()] = definition

    def query(self, query: Any, scope: Scope = Scope.ANY) -> FormatType | None:
        """Return the format type for a name or node within ``scope``."""
        match: FormatType | None = None
        if isinstance(query, Tag):
            for name in node_classes(query):
                match = self._classes.get(name)
                if match is not None:
                    break
            if match is None:
                match = self._tags.get(tag_name(query))
        elif isinstance(query, str) and not isinstance(query, NavigableString):
            match = self._types.get(query) or self._attributes.get(query)
        if match is None:
            return None
        if scope_matches(match.scope, scope):
            return match
        return None

    def names(self) -> list[str]:
        return list(self._types)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._types


def escape_text(text: str) -> str:
    """Escape character data for semantic markup export."""
    return html.escape(text, quote=False)


__all__ = [
    "Attributor",
    "BlockBlot",
    "BlockEmbed",
    "Blot",
    "ClassAttributor",
    "EmbedBlot",
    "FormatRegistry",
    "FormatType",
    "InlineBlot",
    "Scope",
    "StyleAttributor",
    "escape_text",
    "format_name",
    "is_block",
    "is_block_embed",
    "is_embed",
    "scope_matches",
]
