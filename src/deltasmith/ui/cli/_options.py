"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
CONVERSION_PANEL = "Conversion"
OUTPUT_PANEL = "Output"

InputPathArgument = Annotated[
    Path | None,
    typer.Argument(
        metavar="INPUT",
        help="File to read. Reads standard input when omitted or '-'.",
        file_okay=True,
        dir_okay=False,
        allow_dash=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

PlainTextOption = Annotated[
    bool,
    typer.Option(
        "--text",
        help="Treat the input as plain clipboard text instead of HTML.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

FormatsOption = Annotated[
    str | None,
    typer.Option(
        "--formats",
        help="JSON object of formats active at the paste position, e.g. '{\"code-block\": \"python\"}'.",
        rich_help_panel=CONVERSION_PANEL,
    ),
]

ParserOption = Annotated[
    str | None,
    typer.Option(
        "--parser",
        help="BeautifulSoup parser backend (html.parser, lxml, html5lib).",
        rich_help_panel=CONVERSION_PANEL,
    ),
]

NoMarkdownOption = Annotated[
    bool,
    typer.Option(
        "--no-markdown",
        help="Insert plain text verbatim instead of rendering it as Markdown.",
        rich_help_panel=CONVERSION_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Write the result to this file instead of standard output.",
        dir_okay=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CompactOption = Annotated[
    bool,
    typer.Option(
        "--compact",
        help="Print JSON on a single line.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

MarkdownOutputOption = Annotated[
    bool,
    typer.Option(
        "--markdown",
        help="Emit the Markdown clipboard text instead of HTML.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

PlatformOption = Annotated[
    str | None,
    typer.Option(
        "--platform",
        help="Resolve shortKey for 'mac' or 'other'. Defaults to the running platform.",
    ),
]

FirefoxOption = Annotated[
    bool,
    typer.Option(
        "--firefox",
        help="List the unconditional Backspace/Delete bindings.",
    ),
]


__all__ = [
    "CompactOption",
    "FirefoxOption",
    "FormatsOption",
    "InputPathArgument",
    "MarkdownOutputOption",
    "NoMarkdownOption",
    "OutputPathOption",
    "ParserOption",
    "PlainTextOption",
    "PlatformOption",
]
