"""Default keyboard bindings.

Named defaults are registered first, in table order, and may be replaced or
disabled by name through ``KeyboardConfig.bindings``. The core Enter,
Backspace and Delete bindings follow and always act as the fallbacks.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from typing import TYPE_CHECKING, Any

from delta import Delta

from ..core.config import KeyboardConfig
from ..core.delta import is_set
from ..core.document import Source
from ..core.tables import find_table, table_side
from ..formats.block import FOLDED, UNFOLDED, ListItem
from ..formats.indent import MAX_INDENT
from .bindings import HandlerResult
from .handlers import handle_backspace, handle_delete, handle_delete_range, handle_enter, handle_noop


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..core.document import Range
    from .dispatcher import DispatchContext, Keyboard


LIST_AUTOFILL_PREFIX = r"^\s*?(\d+(\.|。)|-|\*|－|×|(\[|【) ?(\]|】)|(\[|【)x(\]|】))$"

_UNCHECKED_MARKERS = frozenset({"[]", "[ ]", "【】", "【 】"})
_CHECKED_MARKERS = frozenset({"[x]", "【x】"})
_BULLET_MARKERS = frozenset({"-", "*", "×", "－"})


def autofill_kind(marker: str) -> str:
    """Return the list kind typed as ``marker`` (``"1."``, ``"-"``, ``"[ ]"`` ...)."""
    marker = marker.strip()
    if marker in _UNCHECKED_MARKERS:
        return "unchecked"
    if marker in _CHECKED_MARKERS:
        return "checked"
    if marker in _BULLET_MARKERS:
        return "bullet"
    return "ordered"


# Formatting ------------------------------------------------------------------


def make_format_handler(name: str) -> dict[str, Any]:
    def handler(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
        keyboard.document.format(name, not is_set(context.format.get(name)), Source.USER)

    return {"key": name[0], "shortKey": True, "handler": handler}


# Indentation -----------------------------------------------------------------


def indent(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    if context.format.get("indent") == MAX_INDENT:
        return HandlerResult.HANDLED
    keyboard.document.format("indent", "+1", Source.USER)
    return HandlerResult.HANDLED


def indent_selection(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    if context.collapsed:
        return HandlerResult.PASS
    return indent(keyboard, range, context)


def outdent(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    keyboard.document.format("indent", "-1", Source.USER)
    return HandlerResult.HANDLED


def outdent_backspace(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    document = keyboard.document
    if context.format.get("indent") is not None:
        if is_set(context.format.get("header")):
            document.format("header", None, Source.USER)
        document.format("indent", "-1", Source.USER)
    elif context.format.get("list") is not None:
        document.format("list", False, Source.USER)


def make_code_block_handler(indent: bool) -> dict[str, Any]:
    """Shift every selected code line by the code-block tab, keeping the selection."""

    def handler(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
        document = keyboard.document
        definition = document.registry.query("code-block")
        tab = getattr(definition, "TAB", "\t")
        lines = document.get_lines(range.index, 1) if range.collapsed else document.get_lines(range)
        index, length = range.index, range.length
        change = Delta()
        position = 0
        for number, line in enumerate(lines):
            if indent:
                change.retain(line.index - position).insert(tab)
                position = line.index
                shift = len(tab)
            elif line.text.startswith(tab):
                change.retain(line.index - position).delete(len(tab))
                position = line.index + len(tab)
                shift = -len(tab)
            else:
                continue
            if number == 0:
                index += shift
            else:
                length += shift
        if change.ops:
            document.update_contents(change, Source.USER)
        document.set_selection(index, length, Source.SILENT)

    return {
        "key": "Tab",
        "shiftKey": not indent,
        "format": {"code-block": True},
        "handler": handler,
    }


def remove_tab(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    keyboard.document.delete_text(range.index - 1, 1, Source.USER)


def soft_tab(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    if is_set(context.format.get("table")):
        return HandlerResult.PASS
    keyboard.history.cutoff()
    change = Delta().retain(range.index).delete(range.length).insert("\t")
    keyboard.document.update_contents(change, Source.USER)
    keyboard.history.cutoff()
    keyboard.document.set_selection(range.index + 1, source=Source.SILENT)
    return HandlerResult.HANDLED


# Enter -----------------------------------------------------------------------


def blockquote_empty_enter(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    keyboard.document.format("blockquote", False, Source.USER)


def list_empty_enter(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    formats: dict[str, Any] = {"list": None}
    if is_set(context.format.get("indent")):
        formats["indent"] = False
    keyboard.document.format_line(range.index, range.length, formats, Source.USER)


def checklist_enter(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    """Split a checked item; the new continuation line starts unchecked."""
    document = keyboard.document
    line, offset = document.get_line(range.index)
    if line is None:
        return HandlerResult.PASS
    formats = copy.deepcopy(line.formats)
    if ListItem.kind(formats.get("list")) != "checked":
        return HandlerResult.PASS
    change = (
        Delta()
        .retain(range.index)
        .insert("\n", **formats)
        .retain(line.length - offset - 1)
        .retain(1, list={"value": "unchecked"})
    )
    document.update_contents(change, Source.USER)
    document.set_selection(range.index + 1, source=Source.SILENT)
    document.scroll_into_view()
    return HandlerResult.HANDLED


def header_enter(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    """Enter at the end of a header opens a plain line below it.

    Folded headers open a new unfolded header of the same level after the
    last line they hide.
    """
    document = keyboard.document
    line, offset = document.get_line(range.index)
    if line is None:
        return
    formats = copy.deepcopy(line.formats)
    header = formats.get("header")
    if isinstance(header, Mapping) and header.get("fold") == FOLDED:
        children = document.descendants(line)
        if children:
            last = children[-1]
            unfolded = {"fold": UNFOLDED, "value": header.get("value")}
            change = Delta().retain(last.end).insert("\n", **{**formats, "header": unfolded})
            document.update_contents(change, Source.USER)
            document.set_selection(last.end, source=Source.SILENT)
            document.scroll_into_view()
            return
    change = (
        Delta()
        .retain(range.index)
        .insert("\n", **formats)
        .retain(line.length - offset - 1)
        .retain(1, **{**formats, "header": None})
    )
    document.update_contents(change, Source.USER)
    document.set_selection(range.index + 1, source=Source.SILENT)
    document.scroll_into_view()


def code_exit(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    """Leave a code block after the configured number of empty code lines."""
    document = keyboard.document
    line, offset = document.get_line(range.index)
    if line is None:
        return HandlerResult.PASS
    lines = document.lines()
    cursor = next(i for i, candidate in enumerate(lines) if candidate.index == line.index)
    remaining = keyboard.config.code_exit_blank_lines
    while cursor >= 0 and lines[cursor].length <= 1 and is_set(lines[cursor].formats.get("code-block")):
        remaining -= 1
        if remaining <= 0:
            change = Delta().retain(range.index + line.length - offset - 1).retain(1, **{"code-block": None})
            document.update_contents(change, Source.USER)
            document.set_selection(range.index, source=Source.SILENT)
            return HandlerResult.HANDLED
        cursor -= 1
    return HandlerResult.PASS


# Lists -----------------------------------------------------------------------


def list_autofill(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
    """Turn a typed marker such as ``1.`` or ``[ ]`` followed by Space into a list."""
    document = keyboard.document
    if document.registry.query("list") is None:
        return HandlerResult.PASS
    length = len(context.prefix)
    line, offset = document.get_line(range.index)
    if line is None or is_set(line.formats.get("table-cell-line")):
        return HandlerResult.PASS
    if offset > length:
        return HandlerResult.PASS
    value = autofill_kind(context.prefix)
    document.insert_text(range.index, " ", source=Source.USER)
    keyboard.history.cutoff()
    # The line grew by the inserted space.
    change = (
        Delta()
        .retain(range.index - offset)
        .delete(length + 1)
        .retain(line.length - 1 - offset)
        .retain(1, list={"value": value})
    )
    document.update_contents(change, Source.USER)
    keyboard.history.cutoff()
    document.set_selection(range.index - length, source=Source.SILENT)
    return HandlerResult.HANDLED


# Embeds ----------------------------------------------------------------------


def make_embed_arrow_handler(key: str, shift: bool) -> dict[str, Any]:
    """Move over an embed as a single unit."""
    where = "prefix" if key == "ArrowLeft" else "suffix"

    def handler(keyboard: Keyboard, range: Range, context: DispatchContext) -> HandlerResult:
        document = keyboard.document
        index = range.index
        if key == "ArrowRight":
            index += range.length + 1
        leaf, _ = document.get_leaf(index)
        if leaf is None or not leaf.is_embed:
            return HandlerResult.PASS
        if key == "ArrowLeft":
            if shift:
                document.set_selection(range.index - 1, range.length + 1, Source.USER)
            else:
                document.set_selection(range.index - 1, source=Source.USER)
        elif shift:
            document.set_selection(range.index, range.length + 1, Source.USER)
        else:
            document.set_selection(range.index + range.length + 1, source=Source.USER)
        return HandlerResult.HANDLED

    return {"key": key, "shiftKey": shift, "altKey": None, where: r"^$", "handler": handler}


# Tables ----------------------------------------------------------------------


def table_enter(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    """Open a line before the first row or after the last row of a table."""
    document = keyboard.document
    position = find_table(document, range.index)
    if position is None:
        return
    shift = table_side(position)
    if shift is None:
        return
    index = position.table.offset()
    if shift < 0:
        document.update_contents(Delta().retain(index).insert("\n"), Source.USER)
        document.set_selection(range.index + 1, range.length, Source.SILENT)
    else:
        index += position.table.length()
        document.update_contents(Delta().retain(index).insert("\n"), Source.USER)
        document.set_selection(index, source=Source.USER)


def table_tab(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
    cell = context.line
    if context.event.shift_key:
        keyboard.document.set_selection(cell.index - 1, source=Source.USER)
    else:
        keyboard.document.set_selection(cell.index + cell.length, source=Source.USER)


def make_table_arrow_handler(up: bool) -> dict[str, Any]:
    """Move to the same cell of the adjacent row, or out of the table."""

    def handler(keyboard: Keyboard, range: Range, context: DispatchContext) -> None:
        document = keyboard.document
        position = find_table(document, range.index)
        if position is None:
            return
        rows = position.table.rows
        target_row = position.row + (-1 if up else 1)
        if 0 <= target_row < len(rows):
            cells = rows[target_row]
            cell = cells[min(position.cell, len(cells) - 1)]
            index = cell.index + min(context.offset, cell.length - 1)
            document.set_selection(index, 0, Source.USER)
            return
        target = position.table.prev_line if up else position.table.next_line
        if target is None:
            return
        if up:
            document.set_selection(target.end - 1, 0, Source.USER)
        else:
            document.set_selection(target.index, 0, Source.USER)

    return {
        "key": "ArrowUp" if up else "ArrowDown",
        "collapsed": True,
        "format": ["table"],
        "handler": handler,
    }


# Registration ----------------------------------------------------------------


def default_bindings() -> dict[str, Any]:
    """Return the named default binding descriptors in registration order."""
    return {
        "bold": make_format_handler("bold"),
        "italic": make_format_handler("italic"),
        "underline": make_format_handler("underline"),
        "indent": {"key": "Tab", "format": ["indent", "list"], "handler": indent},
        "indent selection": {"key": "Tab", "handler": indent_selection},
        "outdent": {"key": "Tab", "shiftKey": True, "format": ["indent", "list"], "handler": outdent},
        "outdent backspace": {
            "key": "Backspace",
            "collapsed": True,
            "shiftKey": None,
            "metaKey": None,
            "ctrlKey": None,
            "altKey": None,
            "format": ["indent", "list"],
            "offset": 0,
            "handler": outdent_backspace,
        },
        "indent code-block": make_code_block_handler(True),
        "outdent code-block": make_code_block_handler(False),
        "remove tab": {
            "key": "Tab",
            "shiftKey": True,
            "collapsed": True,
            "prefix": r"\t$",
            "handler": remove_tab,
        },
        "tab": {"key": "Tab", "handler": soft_tab},
        "blockquote empty enter": {
            "key": "Enter",
            "collapsed": True,
            "format": ["blockquote"],
            "empty": True,
            "handler": blockquote_empty_enter,
        },
        "list empty enter": {
            "key": "Enter",
            "collapsed": True,
            "format": ["list"],
            "empty": True,
            "handler": list_empty_enter,
        },
        "checklist enter": {
            "key": "Enter",
            "collapsed": True,
            "format": ["list"],
            "handler": checklist_enter,
        },
        "header enter": {
            "key": "Enter",
            "collapsed": True,
            "format": ["header"],
            "suffix": r"^$",
            "handler": header_enter,
        },
        "table backspace": {
            "key": "Backspace",
            "format": ["table"],
            "collapsed": True,
            "offset": 0,
            "handler": handle_noop,
        },
        "table delete": {
            "key": "Delete",
            "format": ["table"],
            "collapsed": True,
            "suffix": r"^$",
            "handler": handle_noop,
        },
        "table enter": {"key": "Enter", "shiftKey": None, "format": ["table"], "handler": table_enter},
        "table tab": {"key": "Tab", "shiftKey": None, "format": ["table"], "handler": table_tab},
        "list autofill": {
            "key": " ",
            "shiftKey": None,
            "collapsed": True,
            "format": {
                "list": False,
                "code-block": False,
                "blockquote": False,
                "header": False,
                "table": False,
            },
            "prefix": LIST_AUTOFILL_PREFIX,
            "handler": list_autofill,
        },
        "code exit": {
            "key": "Enter",
            "collapsed": True,
            "format": ["code-block"],
            "prefix": r"^$",
            "suffix": r"^\s*$",
            "handler": code_exit,
        },
        "embed left": make_embed_arrow_handler("ArrowLeft", False),
        "embed left shift": make_embed_arrow_handler("ArrowLeft", True),
        "embed right": make_embed_arrow_handler("ArrowRight", False),
        "embed right shift": make_embed_arrow_handler("ArrowRight", True),
        "table down": make_table_arrow_handler(False),
        "table up": make_table_arrow_handler(True),
    }


def core_bindings(config: KeyboardConfig) -> list[dict[str, Any]]:
    """Return the fallback Enter/Backspace/Delete bindings."""
    bindings: list[dict[str, Any]] = [
        {"key": "Enter", "shiftKey": None, "handler": handle_enter, "name": "enter"},
        {
            "key": "Enter",
            "metaKey": None,
            "ctrlKey": None,
            "altKey": None,
            "handler": handle_noop,
            "name": "enter modifiers",
        },
    ]
    if config.firefox:
        bindings += [
            {"key": "Backspace", "collapsed": True, "handler": handle_backspace, "name": "backspace"},
            {"key": "Delete", "collapsed": True, "handler": handle_delete, "name": "delete"},
        ]
    else:
        bindings += [
            {
                "key": "Backspace",
                "collapsed": True,
                "prefix": r"^.?$",
                "handler": handle_backspace,
                "name": "backspace",
            },
            {
                "key": "Delete",
                "collapsed": True,
                "suffix": r"^.?$",
                "handler": handle_delete,
                "name": "delete",
            },
        ]
    bindings += [
        {"key": "Backspace", "collapsed": False, "handler": handle_delete_range, "name": "backspace range"},
        {"key": "Delete", "collapsed": False, "handler": handle_delete_range, "name": "delete range"},
        {
            "key": "Backspace",
            "altKey": None,
            "ctrlKey": None,
            "metaKey": None,
            "shiftKey": None,
            "collapsed": True,
            "offset": 0,
            "handler": handle_backspace,
            "name": "backspace line start",
        },
    ]
    return bindings


def register_defaults(keyboard: Keyboard) -> None:
    """Install the default and core bindings on ``keyboard``."""
    bindings = default_bindings()
    bindings.update(keyboard.config.bindings)
    for name, descriptor in bindings.items():
        if not descriptor:
            continue
        if isinstance(descriptor, Mapping):
            descriptor = {"name": name, **descriptor}
        keyboard.add_binding(descriptor)
    for descriptor in core_bindings(keyboard.config):
        keyboard.add_binding(descriptor)


__all__ = [
    "LIST_AUTOFILL_PREFIX",
    "autofill_kind",
    "core_bindings",
    "default_bindings",
    "make_code_block_handler",
    "make_embed_arrow_handler",
    "make_format_handler",
    "make_table_arrow_handler",
    "register_defaults",
]
