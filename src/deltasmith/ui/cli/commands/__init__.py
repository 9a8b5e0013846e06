"""CLI command implementations."""

from __future__ import annotations

from .bindings import bindings
from .convert import convert
from .render import render


__all__ = ["bindings", "convert", "render"]
