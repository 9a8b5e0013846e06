"""Input and output helpers shared by CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Any

import typer


def read_input(path: Path | None) -> str:
    """Return the contents of ``path``, or standard input for ``None``/``-``."""
    if path is None or str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(f"Unable to read '{path}': {exc}", param_hint="INPUT") from exc


def parse_json_object(raw: str | None, *, option: str) -> dict[str, Any]:
    """Decode a JSON object passed on the command line."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc.msg}", param_hint=option) from exc
    if not isinstance(value, dict):
        raise typer.BadParameter("Expected a JSON object.", param_hint=option)
    return value


def write_output(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


__all__ = ["parse_json_object", "read_input", "write_output"]
