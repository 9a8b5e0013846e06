"""Core editing commands shared by several bindings.

Line merges keep the formats of the upper line: Backspace at the start of a
line, Delete at the end of one, and range deletions spanning several lines
all re-apply the attribute difference onto the surviving terminator.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from typing import TYPE_CHECKING, Any

from delta import Delta

from ..core.delta import attributes_diff, is_set
from ..core.document import Source
from ..core.registry import Scope
from ..formats.block import FOLDED, TABLE_STRUCTURE_FORMATS, UNFOLDED
from .bindings import HandlerResult


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..core.document import Range
    from .dispatcher import DispatchContext, Keyboard


# Formats that do not carry over to the line created by Enter.
NON_PERSISTENT_FORMATS = frozenset(
    {"code", "link", "tag", "bookmark-link", "remark-link", "bookmark", "file"}
)


def handle_backspace(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    document = keyboard.document
    if range.index == 0 or document.get_length() <= 1:
        return HandlerResult.HANDLED
    line, _ = document.get_line(range.index)
    delta = Delta().retain(range.index - 1).delete(1)
    if context.offset == 0 and line is not None:
        previous, _ = document.get_line(range.index - 1)
        if previous is not None and not (previous.kind == "block" and previous.length <= 1):
            formats = attributes_diff(line.formats, document.get_format(range.index - 1, 1))
            if formats:
                # The current terminator survives the merge, one unit to the left.
                # Built in one pass: composing would drop the explicit clears.
                delta.retain(line.length - 1).retain(1, **formats)
    document.update_contents(delta, Source.USER)
    document.focus()
    return HandlerResult.HANDLED


def handle_delete(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    document = keyboard.document
    if range.index >= document.get_length() - 1:
        return HandlerResult.HANDLED
    formats: dict[str, Any] = {}
    next_length = 0
    line, _ = document.get_line(range.index)
    if line is not None and context.offset >= line.length - 1:
        following, _ = document.get_line(range.index + 1)
        if following is not None:
            if following.kind == "table":
                document.set_selection(range.index + 1, source=Source.USER)
                return HandlerResult.HANDLED
            formats = attributes_diff(following.formats, line.formats)
            next_length = following.length
    document.delete_text(range.index, 1, Source.USER)
    if formats:
        document.format_line(range.index + next_length - 1, 1, formats, Source.USER)
    return HandlerResult.HANDLED


def handle_delete_range(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    document = keyboard.document
    lines = document.get_lines(range)
    formats: dict[str, Any] = {}
    if len(lines) > 1:
        formats = attributes_diff(lines[-1].formats, lines[0].formats)
    document.delete_text(range, source=Source.USER)
    if any(is_set(formats.get(name)) for name in TABLE_STRUCTURE_FORMATS):
        return HandlerResult.HANDLED
    if formats:
        document.format_line(range.index, 1, formats, Source.USER)
    document.set_selection(range.index, source=Source.SILENT)
    document.focus()
    return HandlerResult.HANDLED


def _line_formats(keyboard: Keyboard, formats: Mapping[str, Any]) -> dict[str, Any]:
    registry = keyboard.document.registry
    return {
        name: copy.deepcopy(value)
        for name, value in formats.items()
        if name != "file"
        and not isinstance(value, list)
        and registry.query(name, Scope.BLOCK) is not None
    }


def handle_enter(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    """Split the line, carrying block formats onto the new line.

    Folded list items insert after their last folded child instead. Inline
    formats active at the caret are re-applied unless they are link-like.
    """
    document = keyboard.document
    line_formats = _line_formats(keyboard, context.format)
    target = range.index + 1
    delta: Delta | None = None

    list_format = line_formats.get("list")
    if isinstance(list_format, Mapping):
        list_format = {name: value for name, value in list_format.items() if name != "id"}
        list_format["fold"] = UNFOLDED
        line_formats["list"] = list_format
        line, _ = document.get_line(range.index)
        current = line.formats.get("list") if line is not None else None
        if line is not None and isinstance(current, Mapping) and current.get("fold") == FOLDED:
            children = document.descendants(line)
            if not children:
                return HandlerResult.HANDLED
            last = children[-1]
            delta = Delta().retain(last.end).insert("\n", **line_formats)
            target = last.end

    if delta is None:
        delta = Delta().retain(range.index).delete(range.length).insert("\n", **line_formats)

    document.update_contents(delta, Source.USER)
    document.set_selection(target, source=Source.SILENT)
    if is_set(line_formats.get("header")):
        document.format("header", None)
    document.focus()

    for name, value in context.format.items():
        if line_formats.get(name) is not None or isinstance(value, list):
            continue
        if name in NON_PERSISTENT_FORMATS:
            continue
        document.format(name, value, Source.USER)
    return HandlerResult.HANDLED


def handle_noop(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    return HandlerResult.HANDLED


__all__ = [
    "NON_PERSISTENT_FORMATS",
    "handle_backspace",
    "handle_delete",
    "handle_delete_range",
    "handle_enter",
    "handle_noop",
]
