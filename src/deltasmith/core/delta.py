"""Helpers layered over the operation algebra provided by ``quill-delta``.

The algebra itself (composition, concatenation, length accounting) is used
as a black box; the functions here only inspect or rebuild operation lists.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from delta import Delta


_MISSING = object()


def is_set(value: Any) -> bool:
    """Return whether a format value counts as present.

    Mappings and lists always count, even when empty; ``None``, ``False``,
    empty strings and zero do not.
    """
    if value is None or value is False:
        return False
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return bool(value)
    return True


def insert(delta: Delta, content: Any, attributes: Mapping[str, Any] | None = None) -> Delta:
    """Append an insert carrying ``attributes`` to ``delta``."""
    return delta.insert(content, **dict(attributes or {}))


def delta_ends_with(delta: Delta, text: str) -> bool:
    """Return whether the trailing string inserts of ``delta`` end with ``text``."""
    end_text = ""
    for op in reversed(delta.ops):
        if len(end_text) >= len(text):
            break
        content = op.get("insert")
        if not isinstance(content, str):
            break
        end_text = content + end_text
    return end_text[-len(text):] == text if text else True


def apply_format(delta: Delta, format: str | Mapping[str, Any], value: Any = None) -> Delta:
    """Stamp ``format`` on every insert that does not already carry it.

    ``format`` may be a mapping, in which case each entry is applied in
    turn. Attributes already present on an operation take precedence.
    """
    if isinstance(format, Mapping):
        result = delta
        for name, item in format.items():
            result = apply_format(result, name, item)
        return result

    result = Delta()
    for op in delta.ops:
        if "insert" not in op:
            result.push(op)
            continue
        attributes = op.get("attributes") or {}
        if is_set(attributes.get(format)):
            result.push(op)
            continue
        formats = {format: value} if is_set(value) else {}
        insert(result, op["insert"], {**formats, **attributes})
    return result


def attributes_diff(a: Mapping[str, Any] | None, b: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return the attributes that turn ``a`` into ``b``.

    Keys whose values differ are reported with ``b``'s value, or ``None``
    (an explicit clear) when ``b`` lacks the key.
    """
    a = a or {}
    b = b or {}
    result: dict[str, Any] = {}
    for key in [*a.keys(), *(name for name in b if name not in a)]:
        if a.get(key, _MISSING) != b.get(key, _MISSING):
            result[key] = b.get(key)
    return result


def strip_empty_inserts(delta: Delta) -> Delta:
    """Drop zero-length inserts, which carry no content for composition."""
    return Delta([op for op in delta.ops if op.get("insert", _MISSING) != ""])


def _base_length(delta: Delta) -> int:
    return sum(op.get("retain", 0) + op.get("delete", 0) for op in delta.ops)


def _target_length(delta: Delta) -> int:
    length = 0
    for op in delta.ops:
        content = op.get("insert", _MISSING)
        if content is _MISSING:
            length += op.get("retain", 0)
        else:
            length += len(content) if isinstance(content, str) else 1
    return length


def compose_changes(first: Delta, second: Delta) -> Delta:
    """Compose two successive changes, keeping explicit attribute clears.

    ``quill-delta`` reads an exhausted left operand as an unbounded retain
    and drops ``None`` attributes of the right operand past that point, so
    ``first`` is padded to the reach of ``second`` before composing.
    """
    padded = Delta([dict(op) for op in first.ops])
    missing = _base_length(second) - _target_length(first)
    if missing > 0:
        padded.retain(missing)
    return padded.compose(second)


__all__ = [
    "Delta",
    "apply_format",
    "attributes_diff",
    "compose_changes",
    "delta_ends_with",
    "insert",
    "is_set",
    "strip_empty_inserts",
]
