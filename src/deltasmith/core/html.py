"""Semantic HTML serialisation of document lines."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from delta import Delta

from .delta import is_set
from .registry import (
    Attributor,
    ClassAttributor,
    FormatRegistry,
    InlineBlot,
    Scope,
    StyleAttributor,
    escape_text,
    is_block,
    is_embed,
)

# Inline wrappers from outermost to innermost.
INLINE_ORDER = ("link", "underline", "strike", "italic", "bold", "script", "code")

LineSegment = tuple[Delta, Mapping[str, Any]]


def escape_attribute(value: Any) -> str:
    return escape_text(str(value)).replace('"', "&quot;")


def _open_tag(tag: str, classes: list[str], styles: list[str], attributes: dict[str, str]) -> str:
    parts = [tag]
    if classes:
        parts.append(f'class="{escape_attribute(" ".join(classes))}"')
    if styles:
        parts.append(f'style="{escape_attribute("; ".join(styles))}"')
    for name, value in attributes.items():
        parts.append(f'{name}="{escape_attribute(value)}"')
    return f"<{' '.join(parts)}>"


def _attributor_markup(
    formats: Mapping[str, Any],
    registry: FormatRegistry,
    scope: Scope,
    skip: tuple[str, ...] = (),
) -> tuple[list[str], list[str], dict[str, str]]:
    classes: list[str] = []
    styles: list[str] = []
    attributes: dict[str, str] = {}
    for name, value in formats.items():
        if name in skip or not is_set(value):
            continue
        definition = registry.query(name, scope)
        if not isinstance(definition, Attributor):
            continue
        if isinstance(definition, ClassAttributor):
            classes.append(f"{definition.key_name}-{value}")
        elif isinstance(definition, StyleAttributor):
            styles.append(f"{definition.key_name}: {value}")
        else:
            attributes[definition.key_name] = str(value)
    return classes, styles, attributes


def render_inline(content: Delta, registry: FormatRegistry) -> str:
    """Render the inserts of one line without its terminator."""
    parts: list[str] = []
    for op in content.ops:
        value = op.get("insert")
        attributes = op.get("attributes") or {}
        if isinstance(value, str):
            inner = escape_text(value.replace("\n", ""))
        elif isinstance(value, Mapping) and value:
            name, payload = next(iter(value.items()))
            definition = registry.query(name)
            inner = definition.html(payload, attributes) if is_embed(definition) else ""
        else:
            continue
        parts.append(_wrap_inline(inner, attributes, registry))
    return "".join(parts)


def _wrap_inline(inner: str, attributes: Mapping[str, Any], registry: FormatRegistry) -> str:
    classes, styles, extra = _attributor_markup(attributes, registry, Scope.INLINE)
    if classes or styles or extra:
        inner = f"{_open_tag('span', classes, styles, extra)}{inner}</span>"
    blots: dict[str, type[InlineBlot]] = {}
    for name, value in attributes.items():
        definition = registry.query(name, Scope.INLINE)
        if is_set(value) and isinstance(definition, type) and issubclass(definition, InlineBlot):
            blots[name] = definition
    ordered = sorted(
        blots,
        key=lambda name: INLINE_ORDER.index(name) if name in INLINE_ORDER else len(INLINE_ORDER),
        reverse=True,
    )
    for name in ordered:
        inner = blots[name].wrap(inner, attributes[name])
    return inner


def _list_kind(value: Any) -> str:
    if isinstance(value, Mapping):
        value = value.get("value")
    return str(value) if value else "bullet"


def _render_list(group: list[LineSegment], registry: FormatRegistry) -> str:
    out: list[str] = []
    open_tags: list[str] = []
    for content, formats in group:
        kind = _list_kind(formats.get("list"))
        tag = "ol" if kind == "ordered" else "ul"
        depth = int(formats.get("indent") or 0)
        while len(open_tags) > depth + 1:
            out.append(f"</li></{open_tags.pop()}>")
        if len(open_tags) == depth + 1:
            if open_tags[-1] != tag:
                out.append(f"</li></{open_tags.pop()}><{tag}>")
                open_tags.append(tag)
            else:
                out.append("</li>")
        else:
            while len(open_tags) < depth + 1:
                out.append(f"<{tag}>")
                open_tags.append(tag)
                if len(open_tags) < depth + 1:
                    out.append("<li>")
        classes, styles, extra = _attributor_markup(formats, registry, Scope.BLOCK, skip=("indent",))
        out.append(_open_tag("li", classes, styles, {"data-list": kind, **extra}))
        out.append(render_inline(content, registry))
    while open_tags:
        out.append(f"</li></{open_tags.pop()}>")
    return "".join(out)


def _render_table(group: list[LineSegment], registry: FormatRegistry) -> str:
    out = ["<table><tbody>"]
    current: Any = None
    for position, (content, formats) in enumerate(group):
        row = formats.get("table")
        if position == 0 or row != current:
            if position:
                out.append("</tr>")
            out.append("<tr>")
            current = row
        out.append(f'<td data-row="{escape_attribute(row)}">{render_inline(content, registry)}</td>')
    out.append("</tr></tbody></table>")
    return "".join(out)


def _render_code(group: list[LineSegment], registry: FormatRegistry) -> str:
    texts = [
        "".join(op["insert"] for op in content.ops if isinstance(op.get("insert"), str))
        for content, _ in group
    ]
    definition = registry.query("code-block")
    if definition is not None and hasattr(definition, "html"):
        return definition.html(texts)
    return f"<pre>{escape_text(chr(10).join(texts))}</pre>"


def _render_block(content: Delta, formats: Mapping[str, Any], registry: FormatRegistry) -> str:
    tag = "p"
    for name, value in formats.items():
        definition = registry.query(name, Scope.BLOCK_BLOT)
        if is_set(value) and is_block(definition):
            tag = definition.line_tag(value)
            break
    classes, styles, extra = _attributor_markup(formats, registry, Scope.BLOCK)
    return f"{_open_tag(tag, classes, styles, extra)}{render_inline(content, registry)}</{tag}>"


def _group_key(formats: Mapping[str, Any]) -> str | None:
    for name in ("code-block", "list", "table"):
        if is_set(formats.get(name)):
            return name
    return None


def render_lines(lines: Iterable[LineSegment], registry: FormatRegistry) -> str:
    """Render ``(content, line formats)`` pairs as semantic HTML."""
    parts: list[str] = []
    group: list[LineSegment] = []
    group_key: str | None = None

    def flush() -> None:
        if not group:
            return
        if group_key == "code-block":
            parts.append(_render_code(group, registry))
        elif group_key == "list":
            parts.append(_render_list(group, registry))
        elif group_key == "table":
            parts.append(_render_table(group, registry))
        group.clear()

    for content, formats in lines:
        key = _group_key(formats)
        if key != group_key:
            flush()
            group_key = key
        if key is None:
            parts.append(_render_block(content, formats, registry))
        else:
            group.append((content, formats))
    flush()
    return "".join(parts)


def delta_to_html(contents: Delta, registry: FormatRegistry) -> str:
    """Render a whole insert-only delta as semantic HTML."""
    segments: list[LineSegment] = [
        (line, attributes or {}) for line, attributes, _ in contents.iter_lines()
    ]
    return render_lines(segments, registry)


__all__ = ["INLINE_ORDER", "delta_to_html", "escape_attribute", "render_inline", "render_lines"]
