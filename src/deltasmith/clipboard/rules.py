"""Matcher declaration and registry for the markup-to-delta pipeline.

Matchers are plain callables ``(node, delta, context) -> Delta`` that refine
the delta produced for a node. They are attached to a *selector*:

`TEXT_NODE`
: every text node, folded over an empty delta.

`ELEMENT_NODE`
: every element, folded over the delta of its children.

`CSS selector`
: elements of the pasted tree matched by ``select()`` on the conversion
  root; applied after the element matchers.

:class:`MatcherRegistry` keeps :class:`MatcherRule` instances in registration
order. :meth:`MatcherRegistry.prepare` resolves CSS selectors once per
conversion into a :class:`MatcherPlan` indexed by node identity, so the
traversal never re-runs selector queries.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from delta import Delta
import soupsieve


if TYPE_CHECKING:  # pragma: no cover - typing only
    from bs4.element import Tag

    from ..core.config import ClipboardConfig
    from ..core.registry import FormatRegistry
    from .attributes import AttributeResolver


TEXT_NODE = "#text"
ELEMENT_NODE = "#element"

MatcherCallable = Callable[[Any, Delta, "ConversionContext"], Delta]


@dataclass(frozen=True, slots=True)
class ConversionContext:
    """Shared state handed to every matcher during one conversion."""

    registry: FormatRegistry
    resolver: AttributeResolver
    config: ClipboardConfig


@dataclass(slots=True)
class MatcherRule:
    """Concrete matcher bound to one selector."""

    selector: str
    name: str
    handler: MatcherCallable

    @property
    def is_text(self) -> bool:
        return self.selector == TEXT_NODE

    @property
    def is_element(self) -> bool:
        return self.selector == ELEMENT_NODE

    @property
    def is_css(self) -> bool:
        return not (self.is_text or self.is_element)


@dataclass(slots=True)
class MatcherPlan:
    """Rules resolved against one parsed tree."""

    text_rules: tuple[MatcherRule, ...] = ()
    element_rules: tuple[MatcherRule, ...] = ()
    index: dict[int, list[MatcherRule]] = field(default_factory=dict)

    def rules_for(self, node: Any) -> list[MatcherRule]:
        """Return the selector rules whose query matched ``node``."""
        return self.index.get(id(node), [])


class MatcherRegistry:
    """Ordered container of matcher rules."""

    def __init__(self) -> None:
        self._rules: list[MatcherRule] = []

    def register(self, rule: MatcherRule) -> None:
        """Register a rule, validating CSS selectors eagerly."""
        if rule.is_css:
            try:
                soupsieve.compile(rule.selector)
            except soupsieve.SelectorSyntaxError as exc:
                msg = f"Invalid matcher selector {rule.selector!r} for '{rule.name}'"
                raise ValueError(msg) from exc
        self._rules.append(rule)

    def add(
        self,
        selector: str,
        handler: MatcherCallable,
        *,
        name: str | None = None,
    ) -> MatcherRule:
        """Register ``handler`` for ``selector`` and return the bound rule."""
        name = name or getattr(handler, "__name__", type(handler).__name__)
        rule = MatcherRule(selector=selector, name=name, handler=handler)
        self.register(rule)
        return rule

    def prepare(self, root: Tag) -> MatcherPlan:
        """Resolve selector rules against the descendants of ``root``."""
        index: dict[int, list[MatcherRule]] = {}
        for rule in self._rules:
            if not rule.is_css:
                continue
            for node in root.select(rule.selector):
                index.setdefault(id(node), []).append(rule)
        return MatcherPlan(
            text_rules=tuple(rule for rule in self._rules if rule.is_text),
            element_rules=tuple(rule for rule in self._rules if rule.is_element),
            index=index,
        )

    def extend(self, pairs: Iterable[tuple[str, MatcherCallable]]) -> None:
        for selector, handler in pairs:
            self.add(selector, handler)

    def __iter__(self) -> Iterator[MatcherRule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)


__all__ = [
    "ELEMENT_NODE",
    "TEXT_NODE",
    "ConversionContext",
    "MatcherCallable",
    "MatcherPlan",
    "MatcherRegistry",
    "MatcherRule",
]
