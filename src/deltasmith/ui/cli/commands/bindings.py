"""Implementation of the `deltasmith bindings` command."""

from __future__ import annotations

import typer

from deltasmith.core.config import EditorConfig, KeyboardConfig
from deltasmith.core.document import EditorDocument
from deltasmith.formats import build_registry
from deltasmith.keyboard import Keyboard

from .._options import FirefoxOption, PlatformOption
from ..state import get_cli_state


def _format_value(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, dict):
        return ", ".join(f"{name}={item}" for name, item in value.items())
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return str(value)


def bindings(platform: PlatformOption = None, firefox: FirefoxOption = False) -> None:
    """Print the keyboard bindings registered by default, in dispatch order."""
    if platform not in {None, "mac", "other"}:
        raise typer.BadParameter("Expected 'mac' or 'other'.", param_hint="--platform")

    from rich import box
    from rich.table import Table

    config = EditorConfig(keyboard=KeyboardConfig(platform=platform, firefox=firefox))
    keyboard = Keyboard(EditorDocument(build_registry()), config=config.keyboard)

    table = Table(box=box.SIMPLE, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Modifiers")
    table.add_column("Name", style="green")
    table.add_column("Collapsed")
    table.add_column("Format")
    for entry in keyboard.bindings.describe():
        table.add_row(
            repr(entry["key"]),
            _format_value(entry["modifiers"] or None),
            _format_value(entry["name"] or None),
            _format_value(entry["collapsed"]),
            _format_value(entry["format"]),
        )
    get_cli_state().console.print(table)


__all__ = ["bindings"]
