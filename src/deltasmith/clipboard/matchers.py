"""Built-in matchers turning pasted markup into delta operations.

Each matcher receives the node, the delta accumulated so far for it, and the
:class:`~deltasmith.clipboard.rules.ConversionContext`. Matchers never raise
on unrecognised input; they return the delta unchanged instead.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from delta import Delta

from ..core.delta import apply_format, delta_ends_with
from ..core.markup import first_child, node_styles, tag_name
from ..core.registry import is_block, is_block_embed, is_embed
from .nodes import is_line, is_pre, list_depth
from .rules import ELEMENT_NODE, TEXT_NODE, MatcherCallable


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .rules import ConversionContext


_COLLAPSE = re.compile(r"\s\s+")
_LEADING = re.compile(r"^\s+")
_TRAILING = re.compile(r"\s+$")
_NON_NBSP = re.compile(r"[^\u00a0]")
_INT_PREFIX = re.compile(r"^\s*([-+]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))")


def _append_newline(delta: Delta) -> Delta:
    return delta.concat(Delta().insert("\n"))


def _keep_nbsp(match: str, collapse: bool) -> str:
    kept = _NON_NBSP.sub("", match)
    if not kept and collapse:
        return " "
    return kept


def _int_prefix(value: str) -> int | None:
    found = _INT_PREFIX.match(value)
    return int(found.group(1)) if found else None


def _float_prefix(value: str) -> float | None:
    found = _FLOAT_PREFIX.match(value)
    return float(found.group(1)) if found else None


def match_text(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    """Insert the text of a character node, normalising whitespace outside ``<pre>``."""
    text = str(node)
    parent = node.parent
    # Office exports wrap paragraph tails in <o:p>.
    if tag_name(parent) == "o:p":
        return delta.concat(Delta().insert(text.strip()))
    if not text.strip() and "\n" in text:
        return delta
    if not is_pre(node):
        text = text.replace("\r\n", " ").replace("\n", " ")
        text = _COLLAPSE.sub(lambda found: _keep_nbsp(found.group(0), True), text)
        previous = node.previous_sibling
        following = node.next_sibling
        if (previous is None and is_line(parent)) or (previous is not None and is_line(previous)):
            text = _LEADING.sub(lambda found: _keep_nbsp(found.group(0), False), text)
        if (following is None and is_line(parent)) or (following is not None and is_line(following)):
            text = _TRAILING.sub(lambda found: _keep_nbsp(found.group(0), False), text)
    return delta.concat(Delta().insert(text))


def match_newline(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    """Terminate the delta of block elements, or of nodes followed by one."""
    if delta_ends_with(delta, "\n"):
        return delta
    if is_line(node):
        return _append_newline(delta)
    if delta.length() > 0 and node.next_sibling is not None:
        sibling = node.next_sibling
        while sibling is not None:
            if is_line(sibling):
                return _append_newline(delta)
            if is_block_embed(context.registry.query(sibling)):
                return _append_newline(delta)
            sibling = first_child(sibling)
    return delta


def match_break(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    if not delta_ends_with(delta, "\n"):
        return _append_newline(delta)
    return delta


def match_blot(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    """Apply the blot registered for the element's class or tag."""
    match = context.registry.query(node)
    if match is None:
        return delta
    if is_embed(match):
        value = match.value(node)
        if value is None:
            return delta
        attributes = match.formats(node, context.registry) or {}
        return Delta().insert({match.blot_name: value}, **attributes)
    if is_block(match) and not delta_ends_with(delta, "\n"):
        delta = _append_newline(delta)
    return apply_format(delta, match.blot_name, match.formats(node, context.registry))


def match_attributor(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    formats = context.resolver.resolve(node)
    if formats:
        return apply_format(delta, formats)
    return delta


def match_styles(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    """Map presentational inline styles onto inline formats."""
    styles = {name: value.lower() for name, value in node_styles(node).items()}
    formats: dict[str, Any] = {}
    if styles.get("font-style") == "italic":
        formats["italic"] = True
    decoration = styles.get("text-decoration")
    if decoration == "underline":
        formats["underline"] = True
    elif decoration == "line-through":
        formats["strike"] = True
    weight = styles.get("font-weight", "")
    numeric = _int_prefix(weight)
    if weight.startswith("bold") or (numeric is not None and numeric >= 700):
        formats["bold"] = True
    if formats:
        delta = apply_format(delta, formats)
    indent = _float_prefix(styles.get("text-indent", ""))
    if indent is not None and indent > 0:
        return Delta().insert("\t").concat(delta)
    return delta


def match_indent(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    """Stamp ``indent`` on list items nested deeper than one list."""
    match = context.registry.query(node)
    if getattr(match, "blot_name", None) != "list" or not delta_ends_with(delta, "\n"):
        return delta
    indent = list_depth(node) - 1
    if indent <= 0:
        return delta
    result = Delta()
    for op in delta.ops:
        if "insert" not in op:
            result.push(op)
            continue
        result.insert(op["insert"], **{"indent": indent, **(op.get("attributes") or {})})
    return result


def match_list(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    value = "ordered" if tag_name(node) == "ol" else "bullet"
    return apply_format(delta, "list", {"value": value, "fold": "unfold"})


def match_code_block(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    match = context.registry.query("code-block")
    language: Any = match.formats(node, context.registry) if match is not None else True
    if language == "plain":
        language = context.config.default_code_language
    return apply_format(delta, "code-block", language)


def match_table(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    """Stamp cells with their 1-based row number within the enclosing table."""
    parent = node.parent
    if parent is None:
        return delta
    table = parent if tag_name(parent) == "table" else parent.parent
    if table is None or not hasattr(table, "select"):
        return delta
    row = next((position for position, tr in enumerate(table.select("tr"), 1) if tr is node), 0)
    return apply_format(delta, "table", row)


def match_ignore(node: Any, delta: Delta, context: ConversionContext) -> Delta:
    return Delta()


def format_alias(name: str) -> MatcherCallable:
    """Return a matcher applying ``name`` unconditionally."""

    def match_alias(node: Any, delta: Delta, context: ConversionContext) -> Delta:
        return apply_format(delta, name, True)

    match_alias.__name__ = f"match_{name}_alias"
    return match_alias


match_bold = format_alias("bold")
match_italic = format_alias("italic")
match_strike = format_alias("strike")


CLIPBOARD_CONFIG: tuple[tuple[str, MatcherCallable], ...] = (
    (TEXT_NODE, match_text),
    (TEXT_NODE, match_newline),
    ("br", match_break),
    (ELEMENT_NODE, match_newline),
    (ELEMENT_NODE, match_blot),
    (ELEMENT_NODE, match_attributor),
    (ELEMENT_NODE, match_styles),
    ("li", match_indent),
    ("ol, ul", match_list),
    ("pre", match_code_block),
    ("tr", match_table),
    ("b", match_bold),
    ("i", match_italic),
    ("strike", match_strike),
    ("style", match_ignore),
)


__all__ = [
    "CLIPBOARD_CONFIG",
    "format_alias",
    "match_attributor",
    "match_blot",
    "match_break",
    "match_code_block",
    "match_ignore",
    "match_indent",
    "match_list",
    "match_newline",
    "match_styles",
    "match_table",
    "match_text",
]
