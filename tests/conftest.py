from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from deltasmith.clipboard import MatcherPipeline
from deltasmith.core.config import ClipboardConfig, KeyboardConfig
from deltasmith.core.document import EditorDocument, Range
from deltasmith.core.registry import FormatRegistry
from deltasmith.formats import build_registry
from deltasmith.keyboard import KeyEvent, Keyboard


@pytest.fixture
def registry() -> FormatRegistry:
    return build_registry()


@pytest.fixture
def pipeline(registry: FormatRegistry) -> MatcherPipeline:
    return MatcherPipeline(registry, ClipboardConfig())


@pytest.fixture
def make_document(registry: FormatRegistry) -> Callable[..., EditorDocument]:
    def factory(ops: list[dict[str, Any]] | None = None, *, selection: int | Range | None = None) -> EditorDocument:
        document = EditorDocument(registry, ops)
        if selection is not None:
            document.set_selection(selection)
        return document

    return factory


@pytest.fixture
def make_keyboard(make_document: Callable[..., EditorDocument]) -> Callable[..., Keyboard]:
    def factory(
        ops: list[dict[str, Any]] | None = None,
        *,
        selection: int | Range = 0,
        **config: Any,
    ) -> Keyboard:
        document = make_document(ops, selection=selection)
        options = {"platform": "other", **config}
        return Keyboard(document, config=KeyboardConfig(**options))

    return factory


@pytest.fixture
def press() -> Callable[..., KeyEvent]:
    """Dispatch a key-down and return the event."""

    def dispatch(keyboard: Keyboard, key: str, **modifiers: Any) -> KeyEvent:
        event = KeyEvent(key=key, **modifiers)
        keyboard.handle_keydown(event)
        return event

    return dispatch
