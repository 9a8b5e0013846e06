from __future__ import annotations

import logging
import re

import pytest

from deltasmith.core.exceptions import InvalidBindingError
from deltasmith.keyboard import (
    Binding,
    BindingRegistry,
    HandlerResult,
    KeyEvent,
    coerce_binding,
    default_bindings,
    normalize,
)


def _handler(keyboard, range, context):
    return None


def test_bare_keys_normalise_to_bindings() -> None:
    assert normalize("Enter") == Binding(key="Enter")
    assert normalize(13) == Binding(key=13)


def test_camel_and_snake_case_fields() -> None:
    camel = normalize({"key": "a", "shiftKey": True, "altKey": None})
    snake = normalize({"key": "a", "shift_key": True, "alt_key": None})
    assert camel == snake
    assert camel is not None
    assert camel.shift_key is True
    assert camel.alt_key is None
    assert camel.ctrl_key is False


@pytest.mark.parametrize(
    ("platform", "modifier"),
    [("mac", "meta_key"), ("other", "ctrl_key")],
)
def test_short_key_follows_platform(platform: str, modifier: str) -> None:
    binding = normalize({"key": "b", "shortKey": True}, platform)
    assert binding is not None
    assert getattr(binding, modifier) is True


def test_patterns_are_compiled() -> None:
    binding = normalize({"key": "Tab", "prefix": r"\t$"})
    assert binding is not None
    assert isinstance(binding.prefix, re.Pattern)
    assert binding.prefix.search("a\t")


@pytest.mark.parametrize(
    "descriptor",
    [True, None, 1.5, {"key": None}, {"key": True}, {"key": "a", "bogus": 1}, {"key": "a", "prefix": 3}],
)
def test_invalid_descriptors_normalise_to_none(descriptor: object) -> None:
    assert normalize(descriptor) is None


def test_coerce_binding_raises_on_invalid_input() -> None:
    with pytest.raises(InvalidBindingError):
        coerce_binding({"key": "a", "handler": "not callable"})


def test_handler_result_coercion() -> None:
    assert HandlerResult.coerce(None) is HandlerResult.HANDLED
    assert HandlerResult.coerce(False) is HandlerResult.HANDLED
    assert HandlerResult.coerce(True) is HandlerResult.PASS
    assert HandlerResult.coerce(HandlerResult.ALLOW_DEFAULT) is HandlerResult.ALLOW_DEFAULT


def test_dont_care_modifiers_match_either_state() -> None:
    binding = Binding(key="Enter", shift_key=None)
    assert binding.matches_event(KeyEvent(key="Enter"))
    assert binding.matches_event(KeyEvent(key="Enter", shift_key=True))
    assert not binding.matches_event(KeyEvent(key="Enter", ctrl_key=True))


def test_legacy_codes_match_by_which() -> None:
    binding = Binding(key=13)
    assert binding.matches_event(KeyEvent(key="Enter", which=13))
    assert not binding.matches_event(KeyEvent(key="Enter"))


def test_registry_expands_key_lists() -> None:
    registry = BindingRegistry()
    added = registry.add({"key": ["a", "b"], "handler": _handler})
    assert [binding.key for binding in added] == ["a", "b"]
    assert registry.keys() == ["a", "b"]
    assert len(registry) == 2


def test_registry_merges_context_and_handler() -> None:
    registry = BindingRegistry()
    (binding,) = registry.add("Tab", {"collapsed": True, "shiftKey": True}, _handler)
    assert binding.collapsed is True
    assert binding.shift_key is True
    assert binding.handler is _handler


def test_registry_candidates_include_legacy_code() -> None:
    registry = BindingRegistry()
    registry.add("Enter", _handler)
    registry.add(13, _handler)
    registry.add({"key": "Enter", "shiftKey": True}, _handler)
    candidates = registry.candidates(KeyEvent(key="Enter", which=13))
    assert [binding.key for binding in candidates] == ["Enter", 13]


def test_invalid_bindings_are_skipped_with_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    registry = BindingRegistry()
    with caplog.at_level(logging.WARNING, logger="deltasmith.keyboard.bindings"):
        assert registry.add({"key": True}, _handler) == []
        assert registry.add("a") == []
    assert len(registry) == 0
    assert "invalid keyboard binding" in caplog.text
    assert "has no handler" in caplog.text


def test_describe_lists_modifiers() -> None:
    binding = Binding(key="b", ctrl_key=True, shift_key=None, name="bold", format=("list",))
    assert binding.describe() == {
        "name": "bold",
        "key": "b",
        "modifiers": "ctrl+shift?",
        "collapsed": None,
        "format": ["list"],
    }


def test_default_bindings_are_named_descriptors() -> None:
    bindings = default_bindings()
    assert list(bindings)[:3] == ["bold", "italic", "underline"]
    assert {"checklist enter", "list autofill", "code exit", "table up"} <= set(bindings)
    for descriptor in bindings.values():
        assert normalize(descriptor) is not None
