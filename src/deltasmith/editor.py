"""Editor facade wiring the document, clipboard, and keyboard together."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from delta import Delta

from .clipboard import Clipboard, MatcherPipeline, Uploader
from .core.config import EditorConfig
from .core.diagnostics import DiagnosticEmitter, LoggingEmitter
from .core.document import EditorDocument, Range, Source
from .core.events import KEYDOWN, EventBus
from .core.history import History
from .formats import build_registry
from .keyboard import KeyEvent, Keyboard


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .core.registry import FormatRegistry


class Editor:
    """One editable document with its clipboard and keyboard modules.

    Key-downs published on :attr:`bus` under ``keydown`` reach the keyboard,
    so hosts may either call :meth:`keydown` or emit on the bus.
    """

    def __init__(
        self,
        config: EditorConfig | None = None,
        registry: FormatRegistry | None = None,
        contents: Delta | list[dict[str, Any]] | None = None,
        *,
        uploader: Uploader | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.registry = registry or build_registry()
        self.emitter = emitter or LoggingEmitter()
        self.bus = EventBus()
        self.history = History()
        self.document = EditorDocument(
            self.registry,
            contents,
            history=self.history,
            bus=self.bus,
            enabled=not self.config.read_only,
        )
        pipeline = MatcherPipeline(self.registry, self.config.clipboard, emitter=self.emitter)
        self.clipboard = Clipboard(
            self.document,
            config=self.config.clipboard,
            pipeline=pipeline,
            uploader=uploader,
            emitter=self.emitter,
        )
        self.keyboard = Keyboard(self.document, config=self.config.keyboard, emitter=self.emitter)
        self.keyboard.listen(self.bus)

    def keydown(self, key: str, **modifiers: Any) -> KeyEvent:
        """Dispatch a key-down and return the event, ``default_prevented`` updated."""
        event = KeyEvent(key=key, **modifiers)
        self.bus.emit(KEYDOWN, event)
        return event

    def paste(self, text: str | None = None, html: str | None = None) -> Delta:
        """Paste at the current selection (the document start when unfocused)."""
        selection = self.document.get_selection(focus=True) or Range(0)
        return self.clipboard.on_paste(selection, text=text, html=html)

    def convert(self, html: str | None = None, text: str | None = None) -> Delta:
        return self.clipboard.convert(html=html, text=text)

    def set_contents(self, contents: Delta | list[dict[str, Any]], source: Source | str = Source.API) -> Delta:
        return self.document.set_contents(contents, source)

    def get_contents(self) -> Delta:
        return self.document.get_contents()

    def set_selection(self, index: int | Range | None, length: int = 0) -> None:
        self.document.set_selection(index, length, Source.USER)

    def get_selection(self) -> Range | None:
        return self.document.get_selection()

    def undo(self) -> bool:
        return self.history.undo(self.document)

    def redo(self) -> bool:
        return self.history.redo(self.document)


__all__ = ["Editor"]
