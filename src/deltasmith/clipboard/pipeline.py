"""Conversion of pasted markup or text into an insert-only delta.

The pipeline walks the parsed tree post-order. Each text node is folded
through the text matchers starting from an empty delta; each element is
folded through the element matchers and then through the selector matchers
whose query matched it, starting from the concatenated deltas of its
children.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from typing import Any

from bs4.element import Tag
from delta import Delta

from ..core.config import ClipboardConfig
from ..core.delta import delta_ends_with, is_set
from ..core.diagnostics import DiagnosticEmitter, NullEmitter
from ..core.markup import child_nodes, is_element, is_text, markup_root, parse_markup
from ..core.registry import FormatRegistry
from .attributes import AttributeResolver
from .markdown import markdown_to_html
from .matchers import CLIPBOARD_CONFIG
from .rules import ConversionContext, MatcherCallable, MatcherPlan, MatcherRegistry, MatcherRule


class MatcherPipeline:
    """Convert clipboard payloads into deltas using ordered matchers."""

    def __init__(
        self,
        registry: FormatRegistry,
        config: ClipboardConfig | None = None,
        *,
        matchers: Iterable[tuple[str, MatcherCallable]] | None = None,
        resolver: AttributeResolver | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or ClipboardConfig()
        self.resolver = resolver or AttributeResolver(registry)
        self.emitter = emitter or NullEmitter()
        self.matchers = MatcherRegistry()
        self.matchers.extend(CLIPBOARD_CONFIG if matchers is None else matchers)
        self.matchers.extend(self.config.matchers)

    def add_matcher(self, selector: str, handler: MatcherCallable, *, name: str | None = None) -> MatcherRule:
        """Append a matcher after the ones already registered."""
        return self.matchers.add(selector, handler, name=name)

    def context(self) -> ConversionContext:
        return ConversionContext(registry=self.registry, resolver=self.resolver, config=self.config)

    def convert(
        self,
        html: str | None = None,
        text: str | None = None,
        formats: Mapping[str, Any] | None = None,
    ) -> Delta:
        """Convert a payload pasted where ``formats`` are active.

        Table cells and code blocks only accept plain text. Without markup the
        text is rendered as Markdown (or inserted verbatim when Markdown pastes
        are disabled).
        """
        formats = dict(formats or {})
        text = text or ""
        if is_set(formats.get("table-cell-line")):
            return self._convert_cell_text(text, formats)
        if is_set(formats.get("code-block")):
            return Delta().insert(text, **{"code-block": formats["code-block"]})
        if not html:
            if not self.config.markdown_paste:
                return Delta().insert(text)
            html = markdown_to_html(text, self.config.markdown_extensions)
            if not html.strip():
                return Delta()
        delta = self.convert_markup(html)
        last = delta.ops[-1] if delta.ops else {}
        if delta_ends_with(delta, "\n") and (not last.get("attributes") or is_set(formats.get("table"))):
            return delta.compose(Delta().retain(delta.length() - 1).delete(1))
        return delta

    def convert_markup(self, html: str) -> Delta:
        """Run the matchers over ``html`` without trimming the trailing newline."""
        root = markup_root(parse_markup(html, self.config.parser))
        for child in child_nodes(root):
            if isinstance(child, Tag):
                child.attrs.pop("id", None)
        plan = self.matchers.prepare(root)
        context = self.context()
        delta = self._traverse(root, plan, context)
        self.emitter.event("convert", {"length": delta.length(), "ops": len(delta.ops)})
        return delta

    def _convert_cell_text(self, text: str, formats: Mapping[str, Any]) -> Delta:
        ops: list[dict[str, Any]] = []
        for part in text.split("\n"):
            if part:
                ops.append({"insert": part})
            ops.append({"insert": "\n", "attributes": copy.deepcopy(dict(formats))})
        # The cell already owns its terminator.
        ops[-1]["insert"] = ""
        return Delta(ops)

    def _traverse(self, node: Any, plan: MatcherPlan, context: ConversionContext) -> Delta:
        if is_text(node):
            return self._fold(plan.text_rules, node, Delta(), context)
        if not is_element(node):
            return Delta()
        delta = Delta()
        for child in child_nodes(node):
            child_delta = self._traverse(child, plan, context)
            if is_element(child):
                child_delta = self._fold(plan.element_rules, child, child_delta, context)
                child_delta = self._fold(plan.rules_for(child), child, child_delta, context)
            for op in child_delta.ops:
                delta.push(op)
        return delta

    def _fold(
        self,
        rules: Iterable[MatcherRule],
        node: Any,
        delta: Delta,
        context: ConversionContext,
    ) -> Delta:
        for rule in rules:
            result = rule.handler(node, delta, context)
            if not isinstance(result, Delta):
                msg = f"Matcher '{rule.name}' returned {type(result).__name__}, expected Delta"
                raise TypeError(msg)
            delta = result
        return delta


__all__ = ["MatcherPipeline"]
