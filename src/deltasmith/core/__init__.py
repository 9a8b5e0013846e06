"""Document model, format registry, and shared infrastructure."""

from __future__ import annotations

from .config import ClipboardConfig, EditorConfig, KeyboardConfig
from .diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from .document import EditorDocument, Leaf, Line, Range, Source
from .events import EventBus
from .exceptions import ConversionError, DeltasmithError, DocumentRangeError, InvalidBindingError
from .history import History
from .registry import FormatRegistry, Scope


__all__ = [
    "ClipboardConfig",
    "ConversionError",
    "DeltasmithError",
    "DiagnosticEmitter",
    "DocumentRangeError",
    "EditorConfig",
    "EditorDocument",
    "EventBus",
    "FormatRegistry",
    "History",
    "InvalidBindingError",
    "KeyboardConfig",
    "Leaf",
    "Line",
    "LoggingEmitter",
    "NullEmitter",
    "Range",
    "Scope",
    "Source",
]
