"""Clipboard orchestration: copy, cut, and paste against a live document."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

from delta import Delta

from ..core.config import ClipboardConfig
from ..core.delta import is_set
from ..core.diagnostics import DiagnosticEmitter, LoggingEmitter
from ..core.document import EditorDocument, Range, Source
from ..core.events import PASTE_REFRESH
from ..core.markup import markup_root, node_classes, parse_markup
from .markdown import html_to_markdown
from .pipeline import MatcherPipeline


_log = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"
CODE_COPY_CLASSES = ("code-copy", "ql-code-block")


@dataclass(slots=True)
class ClipboardData:
    """MIME-keyed payload carried by a clipboard event."""

    data: dict[str, str] = field(default_factory=dict)
    files: list[Any] = field(default_factory=list)

    def get_data(self, mime: str) -> str:
        return self.data.get(mime, "")

    def set_data(self, mime: str, value: str) -> None:
        self.data[mime] = value


@dataclass(slots=True)
class ClipboardEvent:
    """Copy, cut, or paste event delivered by the host."""

    clipboard_data: ClipboardData = field(default_factory=ClipboardData)
    target: Any = None
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


class Uploader(Protocol):
    """Receives files pasted without accompanying markup."""

    def upload(self, range: Range, files: Sequence[Any]) -> None: ...


class LoggingUploader:
    """Fallback uploader that drops files with a warning."""

    def upload(self, range: Range, files: Sequence[Any]) -> None:
        _log.warning("No uploader configured; dropping %d pasted file(s) at %d.", len(files), range.index)


class Clipboard:
    """Bridge between host clipboard events and an :class:`EditorDocument`."""

    def __init__(
        self,
        document: EditorDocument,
        *,
        config: ClipboardConfig | None = None,
        pipeline: MatcherPipeline | None = None,
        uploader: Uploader | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.document = document
        self.config = config or ClipboardConfig()
        self.emitter = emitter or LoggingEmitter(logger_obj=_log)
        self.pipeline = pipeline or MatcherPipeline(document.registry, self.config, emitter=self.emitter)
        self.uploader = uploader or LoggingUploader()

    def convert(
        self,
        html: str | None = None,
        text: str | None = None,
        formats: dict[str, Any] | None = None,
    ) -> Delta:
        return self.pipeline.convert(html=html, text=text, formats=formats)

    def add_matcher(self, selector: str, handler: Any) -> None:
        self.pipeline.add_matcher(selector, handler)

    # Copy ----------------------------------------------------------------

    def on_copy(self, range: Range) -> tuple[str, str]:
        """Return the ``(html, text)`` payload for ``range``; text is Markdown."""
        html = self.document.get_semantic_html(range)
        text = html_to_markdown(html, parser=self.config.parser)
        _log.debug("Copied %d unit(s) at %d.", range.length, range.index)
        return html, text

    def on_capture_copy(self, event: ClipboardEvent, is_cut: bool = False) -> None:
        target = event.target
        if target is not None and any(name in node_classes(target) for name in CODE_COPY_CLASSES):
            event.prevent_default()
            scope = target.parent if target.parent is not None else target
            lines = [f"{block.get_text()}\n" for block in scope.select(".ql-code-block")]
            event.clipboard_data.set_data(TEXT_PLAIN, "".join(lines))
            return

        selection = self.document.get_selection()
        if selection is None:
            return
        formats = self.document.get_format()
        if is_set(formats.get("table-cell-line")):
            event.prevent_default()
            text = self.document.get_text(selection)
            event.clipboard_data.set_data(TEXT_PLAIN, text)
            if is_cut:
                self.document.delete_text(selection.index, len(text.strip()), Source.USER)
            return

        if event.default_prevented:
            return
        event.prevent_default()
        html, text = self.on_copy(selection)
        event.clipboard_data.set_data(TEXT_PLAIN, text)
        event.clipboard_data.set_data(TEXT_HTML, html)
        if is_cut:
            self.document.delete_text(selection, source=Source.USER)

    # Paste ---------------------------------------------------------------

    def on_capture_paste(self, event: ClipboardEvent) -> None:
        if event.default_prevented or not self.document.is_enabled():
            return
        event.prevent_default()
        selection = self.document.get_selection(focus=True)
        if selection is None:
            return
        html = event.clipboard_data.get_data(TEXT_HTML)
        if html:
            html = self._strip_tags(html)
        text = event.clipboard_data.get_data(TEXT_PLAIN)
        files = list(event.clipboard_data.files or [])
        if not html and files:
            self.emitter.event("upload", {"files": len(files)})
            self.uploader.upload(selection, files)
        else:
            self.on_paste(selection, text=text, html=html)

    def _strip_tags(self, html: str) -> str:
        root = markup_root(parse_markup(html, self.config.parser))
        for name in self.config.strip_tags:
            for node in root.find_all(name):
                node.decompose()
        return str(root)

    def on_paste(self, range: Range, text: str | None = None, html: str | None = None) -> Delta:
        """Replace ``range`` with the converted payload and place the caret after it."""
        formats = self.document.get_format(range.index)
        pasted = self.convert(html=html, text=text, formats=formats)
        in_row = is_set(formats.get("row"))
        delta = (
            Delta()
            .retain(range.index)
            .delete(0 if in_row and range.length == 1 else range.length)
            .concat(pasted)
        )
        self.document.update_contents(delta, Source.USER)
        self.document.set_selection(delta.length() - range.length, source=Source.SILENT)
        self.document.scroll_into_view()
        self.emitter.event(
            "paste",
            {"index": range.index, "length": range.length, "inserted": pasted.length()},
        )
        self.document.bus.emit_later(PASTE_REFRESH)
        return delta

    def dangerously_paste_html(
        self,
        index: int | str,
        html: str | None = None,
        source: Source | str = Source.API,
    ) -> None:
        """Insert converted ``html`` at ``index``, or replace the document.

        Called with markup as the first argument, the whole document is
        replaced and the second argument is read as the change source.
        """
        if isinstance(index, str):
            delta = self.convert(html=index, text="")
            self.document.set_contents(delta, html or source)
            self.document.set_selection(0, source=Source.SILENT)
            return
        paste = self.convert(html=html or "", text="")
        self.document.update_contents(Delta().retain(index).concat(paste), source)
        self.document.set_selection(index + paste.length(), source=Source.SILENT)


__all__ = [
    "CODE_COPY_CLASSES",
    "TEXT_HTML",
    "TEXT_PLAIN",
    "Clipboard",
    "ClipboardData",
    "ClipboardEvent",
    "LoggingUploader",
    "Uploader",
]
