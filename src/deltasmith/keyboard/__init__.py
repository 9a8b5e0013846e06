"""Keyboard bindings and key-down dispatch."""

from __future__ import annotations

from .bindings import Binding, BindingRegistry, HandlerResult, coerce_binding, normalize
from .defaults import core_bindings, default_bindings, register_defaults
from .dispatcher import DispatchContext, KeyEvent, Keyboard


__all__ = [
    "Binding",
    "BindingRegistry",
    "DispatchContext",
    "HandlerResult",
    "KeyEvent",
    "Keyboard",
    "coerce_binding",
    "core_bindings",
    "default_bindings",
    "normalize",
    "register_defaults",
]
