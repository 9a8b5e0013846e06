"""Implementation of the `deltasmith render` command."""

from __future__ import annotations

import json
from typing import Any

from delta import Delta
import typer

from deltasmith.clipboard import html_to_markdown
from deltasmith.core.exceptions import DeltasmithError
from deltasmith.core.html import delta_to_html
from deltasmith.formats import build_registry

from .._options import InputPathArgument, MarkdownOutputOption, OutputPathOption
from ..state import emit_error
from ..utils import parse_json_object, read_input, write_output


def _load_ops(raw: str) -> list[dict[str, Any]]:
    if raw.lstrip().startswith("["):
        try:
            ops = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON: {exc.msg}", param_hint="INPUT") from exc
    else:
        ops = parse_json_object(raw, option="INPUT").get("ops")
    if not isinstance(ops, list):
        raise typer.BadParameter("Expected a list of operations or an object with 'ops'.", param_hint="INPUT")
    return ops


def render(
    input_path: InputPathArgument = None,
    markdown: MarkdownOutputOption = False,
    output: OutputPathOption = None,
) -> None:
    """Render a Delta document as the HTML (or Markdown) placed on the clipboard by copy."""
    ops = _load_ops(read_input(input_path))
    try:
        html = delta_to_html(Delta(ops), build_registry())
        result = html_to_markdown(html) if markdown else html
    except DeltasmithError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if output is not None:
        try:
            write_output(output, result + "\n")
        except OSError as exc:
            emit_error(str(exc), exception=exc)
            raise typer.Exit(code=1) from exc
        return
    typer.echo(result)


__all__ = ["render"]
