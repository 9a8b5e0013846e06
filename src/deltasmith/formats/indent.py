"""Indentation class attributor with relative updates."""

from __future__ import annotations

from typing import Any

from ..core.registry import ClassAttributor, Scope

MAX_INDENT = 8


class IndentAttributor(ClassAttributor):
    """``ql-indent-N`` classes; accepts ``"+1"``/``"-1"`` relative values."""

    def can_add(self, value: Any) -> bool:
        return True

    def value(self, node: Any) -> Any:
        raw = self.raw_value(node)
        try:
            indent = max(0, int(raw)) if raw is not None else 0
        except ValueError:
            indent = 0
        return indent or None

    def resolve(self, current: Any, value: Any) -> Any:
        if value in ("+1", "-1"):
            indent = _as_int(current)
            if indent >= MAX_INDENT and value == "+1":
                return indent
            value = indent + 1 if value == "+1" else indent - 1
        if value is None or value is False:
            return None
        indent = _as_int(value)
        return indent if indent > 0 else None


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


IndentClass = IndentAttributor(
    "indent",
    "ql-indent",
    scope=Scope.BLOCK,
    whitelist=list(range(1, MAX_INDENT + 1)),
)

__all__ = ["IndentAttributor", "IndentClass", "MAX_INDENT"]
