"""Key-down dispatch against registered bindings.

Per key-down the dispatcher:

1. ignores consumed events and IME composition artifacts;
2. gathers the bindings registered for the key name and its legacy code,
   keeping those whose modifier expectations match;
3. requires a focused selection and builds a :class:`DispatchContext`;
4. runs the first binding whose predicates hold, moving on to the next
   candidate while handlers return :attr:`HandlerResult.PASS`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from ..core.config import KeyboardConfig
from ..core.diagnostics import DiagnosticEmitter, LoggingEmitter
from ..core.document import EditorDocument, Line, Range
from ..core.events import KEYDOWN, EventBus
from .bindings import Binding, BindingRegistry, HandlerResult, Overrides


_log = logging.getLogger(__name__)

# Legacy key code reported while an input method composes.
COMPOSITION_CODE = 229
COMPOSITION_KEYS = frozenset({"Backspace", "Enter", " "})


@dataclass(slots=True)
class KeyEvent:
    """Physical key-down delivered by the host."""

    key: str
    which: int | None = None
    alt_key: bool = False
    ctrl_key: bool = False
    meta_key: bool = False
    shift_key: bool = False
    is_composing: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass(slots=True)
class DispatchContext:
    """Selection state evaluated by binding predicates and handlers."""

    collapsed: bool
    empty: bool
    format: dict[str, Any]
    line: Line
    offset: int
    prefix: str
    suffix: str
    event: KeyEvent


class Keyboard:
    """Resolve key-down events into document commands."""

    def __init__(
        self,
        document: EditorDocument,
        *,
        config: KeyboardConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
        install_defaults: bool = True,
    ) -> None:
        self.document = document
        self.history = document.history
        self.config = config or KeyboardConfig()
        self.emitter = emitter or LoggingEmitter(logger_obj=_log)
        self.bindings = BindingRegistry(platform=self.config.resolved_platform())
        if install_defaults:
            from .defaults import register_defaults

            register_defaults(self)

    def add_binding(
        self,
        descriptor: Any,
        context: Overrides = None,
        handler: Overrides = None,
    ) -> list[Binding]:
        return self.bindings.add(descriptor, context, handler)

    def listen(self, bus: EventBus) -> None:
        """Handle ``keydown`` events published on ``bus``."""
        bus.on(KEYDOWN, self.handle_keydown)

    def context_for(self, selection: Range, event: KeyEvent) -> DispatchContext | None:
        document = self.document
        line, offset = document.get_line(selection.index)
        if line is None:
            return None
        leaf_start, offset_start = document.get_leaf(selection.index)
        if selection.collapsed:
            leaf_end, offset_end = leaf_start, offset_start
        else:
            leaf_end, offset_end = document.get_leaf(selection.end)
        prefix = leaf_start.insert[:offset_start] if leaf_start is not None and leaf_start.is_text else ""
        suffix = leaf_end.insert[offset_end:] if leaf_end is not None and leaf_end.is_text else ""
        return DispatchContext(
            collapsed=selection.collapsed,
            empty=selection.collapsed and line.length <= 1,
            format=document.get_format(selection),
            line=line,
            offset=offset,
            prefix=prefix,
            suffix=suffix,
            event=event,
        )

    def handle_keydown(self, event: KeyEvent) -> bool:
        """Dispatch ``event``; return whether its default action was prevented."""
        if event.default_prevented or event.is_composing:
            return False
        if event.which == COMPOSITION_CODE and event.key in COMPOSITION_KEYS:
            return False
        candidates = self.bindings.candidates(event)
        if not candidates:
            return False
        selection = self.document.get_selection()
        if selection is None or not self.document.has_focus():
            return False
        context = self.context_for(selection, event)
        if context is None:
            return False

        prevented = False
        handled_by: str | None = None
        for binding in candidates:
            if binding.handler is None or not binding.accepts(context):
                continue
            result = HandlerResult.coerce(binding.handler(self, selection, context))
            if result is HandlerResult.PASS:
                continue
            handled_by = binding.name or str(binding.key)
            prevented = result is HandlerResult.HANDLED
            break

        if prevented:
            event.prevent_default()
        self.emitter.event(
            "keydown",
            {"key": event.key, "binding": handled_by, "prevented": prevented},
        )
        return prevented


__all__ = ["COMPOSITION_CODE", "DispatchContext", "KeyEvent", "Keyboard"]
