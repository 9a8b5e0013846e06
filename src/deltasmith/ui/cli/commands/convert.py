"""Implementation of the `deltasmith convert` command."""

from __future__ import annotations

import json

import typer

from deltasmith.clipboard import MatcherPipeline
from deltasmith.core.config import ClipboardConfig
from deltasmith.core.exceptions import ConversionError
from deltasmith.formats import build_registry

from .._options import (
    CompactOption,
    FormatsOption,
    InputPathArgument,
    NoMarkdownOption,
    OutputPathOption,
    ParserOption,
    PlainTextOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, get_cli_state
from ..utils import parse_json_object, read_input, write_output


def convert(
    input_path: InputPathArgument = None,
    text: PlainTextOption = False,
    formats: FormatsOption = None,
    parser: ParserOption = None,
    no_markdown: NoMarkdownOption = False,
    output: OutputPathOption = None,
    compact: CompactOption = False,
) -> None:
    """Convert pasted HTML (or plain text) into a Delta and print it as JSON."""
    active_formats = parse_json_object(formats, option="--formats")
    payload = read_input(input_path)

    options: dict[str, object] = {"markdown_paste": not no_markdown}
    if parser:
        options["parser"] = parser
    config = ClipboardConfig(**options)
    state = get_cli_state()
    emitter = CliEmitter(state)
    pipeline = MatcherPipeline(build_registry(), config, emitter=emitter)

    try:
        if text:
            delta = pipeline.convert(html=None, text=payload, formats=active_formats)
        else:
            delta = pipeline.convert(html=payload, text="", formats=active_formats)
    except ConversionError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    emitter.render_summary()

    document = {"ops": delta.ops}
    if output is not None:
        try:
            write_output(output, json.dumps(document, ensure_ascii=False, indent=None if compact else 2) + "\n")
        except OSError as exc:
            emit_error(str(exc), exception=exc)
            raise typer.Exit(code=1) from exc
        return
    if compact:
        typer.echo(json.dumps(document, ensure_ascii=False))
    else:
        state.console.print_json(data=document, ensure_ascii=False)


__all__ = ["convert"]
