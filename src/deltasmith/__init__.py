"""Primary public API for deltasmith."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from deltasmith.clipboard import Clipboard, MatcherPipeline
from deltasmith.core.config import ClipboardConfig, EditorConfig, KeyboardConfig
from deltasmith.core.document import EditorDocument, Range, Source
from deltasmith.core.exceptions import (
    ConversionError,
    DeltasmithError,
    DocumentRangeError,
    InvalidBindingError,
)
from deltasmith.core.html import delta_to_html
from deltasmith.editor import Editor
from deltasmith.formats import build_registry
from deltasmith.keyboard import Binding, HandlerResult, KeyEvent, Keyboard
from deltasmith.version import get_version


try:
    __version__ = _pkg_version("deltasmith")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "Binding",
    "Clipboard",
    "ClipboardConfig",
    "ConversionError",
    "DeltasmithError",
    "DocumentRangeError",
    "Editor",
    "EditorConfig",
    "EditorDocument",
    "HandlerResult",
    "InvalidBindingError",
    "KeyEvent",
    "Keyboard",
    "KeyboardConfig",
    "MatcherPipeline",
    "Range",
    "Source",
    "__version__",
    "build_registry",
    "delta_to_html",
    "get_version",
]
