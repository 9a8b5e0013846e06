"""Live editable document.

The document is an insert-only operation sequence that always ends with a
line terminator. Lines and leaves are derived snapshots rebuilt after each
change; they are never mutated in place.

Every applied change is recorded in :class:`~deltasmith.core.history.History`
and published on the :class:`~deltasmith.core.events.EventBus` as a
``text-change`` event (silent changes are recorded but not published).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any

from delta import Delta

from .delta import compose_changes, is_set, strip_empty_inserts
from .events import SCROLL_INTO_VIEW, SELECTION_CHANGE, TEXT_CHANGE, EventBus
from .exceptions import DocumentRangeError
from .history import History
from .registry import FormatRegistry, Scope, is_block


_log = logging.getLogger(__name__)

# Line kinds checked in priority order when a line carries several block formats.
LINE_KINDS = ("table", "table-cell-line", "table-col", "code-block", "header", "list", "blockquote")
# Block formats that replace one another on a line.
EXCLUSIVE_LINE_FORMATS = ("header", "list", "blockquote", "code-block")


class Source(str, Enum):
    """Origin of a document change or selection update."""

    API = "api"
    USER = "user"
    SILENT = "silent"


@dataclass(frozen=True, slots=True)
class Range:
    """Selection over the flattened document; ``length == 0`` is a caret."""

    index: int
    length: int = 0

    @property
    def collapsed(self) -> bool:
        return self.length == 0

    @property
    def end(self) -> int:
        return self.index + self.length


@dataclass(frozen=True, slots=True)
class Leaf:
    """Text run, embed, or the zero-length break of an empty line."""

    index: int
    length: int
    insert: Any
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def is_text(self) -> bool:
        return isinstance(self.insert, str) and self.length > 0

    @property
    def is_embed(self) -> bool:
        return isinstance(self.insert, Mapping)

    @property
    def is_break(self) -> bool:
        return self.length == 0


@dataclass(frozen=True, slots=True)
class Line:
    """One line of the document, terminator included in ``length``."""

    index: int
    length: int
    formats: dict[str, Any]
    leaves: tuple[Leaf, ...]
    kind: str = "block"

    @property
    def end(self) -> int:
        return self.index + self.length

    @property
    def text(self) -> str:
        return "".join(leaf.insert for leaf in self.leaves if leaf.is_text)


def _coerce_source(source: Source | str) -> Source:
    return source if isinstance(source, Source) else Source(source)


def _ends_with_newline(delta: Delta) -> bool:
    if not delta.ops:
        return False
    content = delta.ops[-1].get("insert")
    return isinstance(content, str) and content.endswith("\n")


def combine_formats(candidates: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Intersect format maps; differing values are collected into lists."""
    iterator = iter(candidates)
    first = next(iterator, None)
    if first is None:
        return {}
    combined: dict[str, Any] = dict(first)
    for formats in iterator:
        if not combined:
            break
        merged: dict[str, Any] = {}
        for name, value in combined.items():
            other = formats.get(name)
            if other is None:
                continue
            if value == other:
                merged[name] = value
            elif isinstance(value, list):
                merged[name] = value if other in value else [*value, other]
            else:
                merged[name] = [value, other]
        combined = merged
    return combined


class EditorDocument:
    """In-memory editable document with selection, focus, and history."""

    def __init__(
        self,
        registry: FormatRegistry,
        contents: Delta | list[dict[str, Any]] | None = None,
        *,
        history: History | None = None,
        bus: EventBus | None = None,
        enabled: bool = True,
    ) -> None:
        self.registry = registry
        self.history = history if history is not None else History()
        self.bus = bus if bus is not None else EventBus()
        self.cursor_formats: dict[str, Any] = {}
        self._contents = Delta().insert("\n")
        self._lines: list[Line] | None = None
        self._selection: Range | None = None
        self._saved_selection: Range | None = None
        self._focused = False
        self._enabled = enabled
        if contents is not None:
            self.set_contents(contents, source=Source.SILENT)
            self.history.clear()

    # Contents -----------------------------------------------------------

    def get_length(self) -> int:
        return self._contents.length()

    def get_contents(self, index: int = 0, length: int | None = None) -> Delta:
        """Return a copy of the contents covering ``[index, index + length)``."""
        total = self.get_length()
        if length is None:
            length = total - index
        if length <= 0 or index >= total:
            return Delta()
        sliced = self._contents[index : index + length]
        return Delta(copy.deepcopy(sliced.ops))

    def get_text(self, index: int | Range = 0, length: int | None = None) -> str:
        if isinstance(index, Range):
            index, length = index.index, index.length
        contents = self.get_contents(index, length)
        return "".join(op["insert"] for op in contents.ops if isinstance(op.get("insert"), str))

    def set_contents(self, contents: Delta | list[dict[str, Any]], source: Source | str = Source.API) -> Delta:
        """Replace the whole document."""
        delta = contents if isinstance(contents, Delta) else Delta(list(contents))
        replacement = Delta()
        for op in delta.ops:
            if "insert" not in op:
                continue
            replacement.push(op)
        replacement = strip_empty_inserts(replacement)
        if not _ends_with_newline(replacement):
            replacement.insert("\n")
        change = Delta().delete(self.get_length()).concat(replacement)
        return self._apply(change, replacement, _coerce_source(source))

    def update_contents(self, delta: Delta | list[dict[str, Any]], source: Source | str = Source.API) -> Delta:
        """Compose ``delta`` onto the document and return the applied change."""
        source = _coerce_source(source)
        change = delta if isinstance(delta, Delta) else Delta(list(delta))
        change = strip_empty_inserts(change)
        if not change.ops:
            return Delta()
        self._validate(change)
        composed = self._contents.compose(change)
        if not _ends_with_newline(composed):
            terminator = Delta().retain(composed.length()).insert("\n")
            composed = composed.compose(terminator)
            change = change.compose(terminator)
        return self._apply(change, composed, source)

    def insert_text(
        self,
        index: int,
        text: str,
        formats: Mapping[str, Any] | None = None,
        source: Source | str = Source.API,
    ) -> Delta:
        return self.update_contents(Delta().retain(index).insert(text, **dict(formats or {})), source)

    def delete_text(
        self,
        index: int | Range,
        length: int | None = None,
        source: Source | str = Source.API,
    ) -> Delta:
        if isinstance(index, Range):
            index, length = index.index, index.length
        return self.update_contents(Delta().retain(index).delete(length or 0), source)

    def _validate(self, change: Delta) -> None:
        length = self.get_length()
        position = 0
        for op in change.ops:
            if isinstance(op.get("retain"), int):
                position += op["retain"]
            elif isinstance(op.get("delete"), int):
                position += op["delete"]
            if position > length:
                msg = f"Change reaches index {position} beyond document length {length}."
                raise DocumentRangeError(msg)

    def _apply(self, change: Delta, contents: Delta, source: Source) -> Delta:
        if not self._enabled and source is Source.USER:
            _log.debug("Ignoring user change on a disabled document.")
            return Delta()
        old_contents = self._contents
        self._contents = contents
        self._lines = None
        self.cursor_formats = {}
        if self._selection is not None:
            priority = source is not Source.USER
            start = change.transform_position(self._selection.index, priority)
            end = change.transform_position(self._selection.end, priority)
            self._selection = self._clamp(start, max(0, end - start))
        self.history.record(change, old_contents)
        if source is not Source.SILENT:
            self.bus.emit(TEXT_CHANGE, change, old_contents, source)
        return change

    # Lines and leaves ----------------------------------------------------

    def lines(self) -> list[Line]:
        if self._lines is None:
            self._lines = self._build_lines()
        return self._lines

    def _build_lines(self) -> list[Line]:
        lines: list[Line] = []
        leaves: list[Leaf] = []
        line_start = 0
        index = 0
        for op in self._contents.ops:
            content = op["insert"]
            attributes = copy.deepcopy(op.get("attributes") or {})
            if not isinstance(content, str):
                leaves.append(Leaf(index, 1, copy.deepcopy(content), attributes))
                index += 1
                continue
            segments = content.split("\n")
            for position, segment in enumerate(segments):
                if segment:
                    leaves.append(Leaf(index, len(segment), segment, dict(attributes)))
                    index += len(segment)
                if position < len(segments) - 1:
                    lines.append(self._make_line(line_start, index + 1 - line_start, attributes, leaves))
                    index += 1
                    line_start = index
                    leaves = []
        return lines

    def _make_line(
        self,
        index: int,
        length: int,
        attributes: Mapping[str, Any],
        leaves: list[Leaf],
    ) -> Line:
        formats = {
            name: copy.deepcopy(value)
            for name, value in attributes.items()
            if self.registry.query(name, Scope.BLOCK) is not None
        }
        if not leaves:
            leaves = [Leaf(index, 0, "", {})]
        return Line(index, length, formats, tuple(leaves), self._line_kind(formats))

    def _line_kind(self, formats: Mapping[str, Any]) -> str:
        for name in LINE_KINDS:
            if is_set(formats.get(name)):
                return name
        for name, value in formats.items():
            if is_set(value) and is_block(self.registry.query(name, Scope.BLOCK_BLOT)):
                return name
        return "block"

    def get_line(self, index: int) -> tuple[Line | None, int]:
        """Return the line containing ``index`` and the offset within it."""
        for line in self.lines():
            if line.index <= index < line.end:
                return line, index - line.index
        return None, -1

    def get_lines(self, index: int | Range = 0, length: int | None = None) -> list[Line]:
        """Return the lines intersecting ``[index, index + length)``.

        A zero length selects the line containing ``index``.
        """
        if isinstance(index, Range):
            index, length = index.index, index.length
        if length is None:
            length = self.get_length() - index
        length = max(length, 1)
        end = index + length
        return [line for line in self.lines() if line.index < end and line.end > index]

    def get_leaf(self, index: int) -> tuple[Leaf | None, int]:
        """Return the leaf at ``index``, preferring the leaf ending there."""
        line, offset = self.get_line(index)
        if line is None:
            return None, -1
        leaves = line.leaves
        for position, leaf in enumerate(leaves):
            following = leaves[position + 1] if position + 1 < len(leaves) else None
            if offset < leaf.length or (
                offset == leaf.length and (following is None or following.length != 0)
            ):
                return leaf, offset
            offset -= leaf.length
        return None, -1

    def descendants(self, line: Line) -> list[Line]:
        """Return the lines folded under ``line``.

        List items own the following deeper-indented list items; headers own
        every line up to the next header of the same or a higher level.
        """
        lines = self.lines()
        try:
            position = next(i for i, candidate in enumerate(lines) if candidate.index == line.index)
        except StopIteration:
            return []
        children: list[Line] = []
        if is_set(line.formats.get("list")):
            depth = int(line.formats.get("indent") or 0)
            for candidate in lines[position + 1 :]:
                if not is_set(candidate.formats.get("list")):
                    break
                if int(candidate.formats.get("indent") or 0) <= depth:
                    break
                children.append(candidate)
        elif is_set(line.formats.get("header")):
            level = _header_level(line.formats["header"])
            for candidate in lines[position + 1 :]:
                header = candidate.formats.get("header")
                if is_set(header) and _header_level(header) <= level:
                    break
                children.append(candidate)
        return children

    # Formats -------------------------------------------------------------

    def get_format(self, index: int | Range | None = None, length: int = 0) -> dict[str, Any]:
        """Return the formats active at a caret or shared by a range."""
        if isinstance(index, Range):
            index, length = index.index, index.length
        if index is None:
            selection = self.get_selection(focus=True)
            if selection is None:
                return {}
            index, length = selection.index, selection.length
        if length == 0:
            line, _ = self.get_line(index)
            if line is None:
                return {}
            leaf, _ = self.get_leaf(index)
            formats = {**line.formats, **(leaf.attributes if leaf is not None else {})}
            selection = self._selection
            if selection is not None and selection.collapsed and selection.index == index:
                for name, value in self.cursor_formats.items():
                    if is_set(value):
                        formats[name] = value
                    else:
                        formats.pop(name, None)
            return copy.deepcopy(formats)
        end = index + length
        lines = self.get_lines(index, length)
        leaves = [
            leaf
            for line in lines
            for leaf in line.leaves
            if leaf.length > 0 and leaf.index < end and leaf.index + leaf.length > index
        ]
        line_formats = combine_formats(line.formats for line in lines)
        leaf_formats = combine_formats(leaf.attributes for leaf in leaves)
        return copy.deepcopy({**line_formats, **leaf_formats})

    def format_line(
        self,
        index: int,
        length: int,
        formats: Mapping[str, Any],
        source: Source | str = Source.API,
    ) -> Delta:
        """Apply block formats to every line touched by the range."""
        delta = Delta()
        position = 0
        for line in self.get_lines(index, max(length, 1)):
            attributes: dict[str, Any] = {}
            for name, value in formats.items():
                definition = self.registry.query(name, Scope.BLOCK)
                if definition is None:
                    continue
                resolved = definition.resolve(line.formats.get(name), value)
                attributes[name] = resolved if is_set(resolved) else None
                if is_set(resolved) and name in EXCLUSIVE_LINE_FORMATS:
                    for other in EXCLUSIVE_LINE_FORMATS:
                        if other != name and other in line.formats and other not in formats:
                            attributes[other] = None
            if not attributes:
                continue
            newline = line.end - 1
            delta.retain(newline - position).retain(1, **attributes)
            position = newline + 1
        if not delta.ops:
            return Delta()
        return self.update_contents(delta, source)

    def format_text(
        self,
        index: int,
        length: int,
        formats: Mapping[str, Any] | str,
        value: Any = None,
        source: Source | str = Source.API,
    ) -> Delta:
        """Apply inline formats to the text of a range; block formats go to lines."""
        if isinstance(formats, str):
            formats = {formats: value}
        block = {name: item for name, item in formats.items() if self.registry.query(name, Scope.BLOCK)}
        inline = {
            name: (item if is_set(item) else None)
            for name, item in formats.items()
            if name not in block
        }
        change = Delta()
        if inline and length > 0:
            end = index + length
            delta = Delta().retain(index)
            position = index
            for line in self.get_lines(index, length):
                newline = line.end - 1
                stop = min(newline, end)
                if stop > position:
                    delta.retain(stop - position, **inline)
                    position = stop
                if newline < end:
                    delta.retain(newline + 1 - position)
                    position = newline + 1
            change = self.update_contents(delta, source)
        if block:
            change = compose_changes(change, self.format_line(index, length, block, source))
        return change

    def format(self, name: str, value: Any, source: Source | str = Source.API) -> Delta:
        """Format the current selection: lines, text, or the caret."""
        selection = self.get_selection(focus=True)
        if selection is None:
            return Delta()
        if self.registry.query(name, Scope.BLOCK) is not None:
            change = self.format_line(selection.index, selection.length, {name: value}, source)
        elif selection.collapsed:
            self.cursor_formats[name] = value
            return Delta()
        else:
            change = self.format_text(selection.index, selection.length, {name: value}, source=source)
        self.set_selection(selection, source=Source.SILENT)
        return change

    # Selection and focus -------------------------------------------------

    def _clamp(self, index: int, length: int) -> Range:
        last = max(0, self.get_length() - 1)
        start = max(0, min(index, last))
        return Range(start, max(0, min(length, last - start)))

    def get_selection(self, focus: bool = False) -> Range | None:
        if focus:
            self.focus()
        return self._selection

    def set_selection(
        self,
        index: int | Range | None,
        length: int = 0,
        source: Source | str = Source.API,
    ) -> None:
        source = _coerce_source(source)
        if index is None:
            self.blur()
            return
        if isinstance(index, Range):
            index, length = index.index, index.length
        old = self._selection
        selection = self._clamp(index, length)
        self._selection = selection
        self._saved_selection = selection
        self._focused = True
        if selection != old:
            self.cursor_formats = {}
            if source is not Source.SILENT:
                self.bus.emit(SELECTION_CHANGE, selection, old, source)

    def has_focus(self) -> bool:
        return self._focused

    def focus(self) -> None:
        if self._focused:
            return
        self._focused = True
        if self._selection is None and self._saved_selection is not None:
            self._selection = self._clamp(self._saved_selection.index, self._saved_selection.length)

    def blur(self) -> None:
        if self._selection is not None:
            self._saved_selection = self._selection
        self._selection = None
        self._focused = False

    def is_enabled(self) -> bool:
        return self._enabled

    def enable(self, enabled: bool = True) -> None:
        self._enabled = enabled

    def disable(self) -> None:
        self.enable(False)

    def scroll_into_view(self) -> None:
        self.bus.emit(SCROLL_INTO_VIEW, self._selection)

    # Export --------------------------------------------------------------

    def get_semantic_html(self, index: int | Range = 0, length: int | None = None) -> str:
        """Render a range of the document as semantic HTML."""
        from .html import render_lines

        if isinstance(index, Range):
            index, length = index.index, index.length
        if length is None:
            length = self.get_length() - index
        end = index + length
        segments: list[tuple[Delta, dict[str, Any]]] = []
        for line in self.get_lines(index, length):
            start = max(index, line.index)
            stop = min(end, line.end - 1)
            content = self.get_contents(start, stop - start) if stop > start else Delta()
            segments.append((content, line.formats))
        return render_lines(segments, self.registry)


def _header_level(value: Any) -> int:
    if isinstance(value, Mapping):
        value = value.get("value")
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1


__all__ = [
    "EXCLUSIVE_LINE_FORMATS",
    "EditorDocument",
    "LINE_KINDS",
    "Leaf",
    "Line",
    "Range",
    "Source",
    "combine_formats",
]
