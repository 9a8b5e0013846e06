"""Render clipboard and keyboard diagnostics on the CLI consoles."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from deltasmith.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


# Numeric payload fields totalled per event in the summary table.
SUMMARY_FIELDS = ("ops", "length", "inserted", "files")


def describe_event(name: str, payload: Mapping[str, Any]) -> str:
    """Return a one-line description for any diagnostic event."""
    message = format_event_message(name, payload)
    if message:
        return message
    details = ", ".join(f"{key}={value!r}" for key, value in sorted(payload.items()))
    return f"{name}: {details}" if details else name


class CliEmitter:
    """Route pipeline diagnostics to the rich consoles.

    Warnings and errors are printed immediately. Events are recorded on the
    CLI state; with ``-v`` each one is echoed as it happens and
    :meth:`render_summary` totals them once the command has finished.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)
        self.warnings = 0

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings += 1
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        data = dict(payload)
        self._state.record_event(name, data)
        if self._state.verbosity >= 1:
            render_message("info", describe_event(name, data))

    def summary_rows(self) -> list[tuple[str, int, dict[str, int]]]:
        """Return ``(event, count, totals)`` for every recorded event name."""
        rows: list[tuple[str, int, dict[str, int]]] = []
        for name, entries in sorted(self._state.events.items()):
            totals = {
                field: sum(int(entry.get(field) or 0) for entry in entries)
                for field in SUMMARY_FIELDS
                if any(field in entry for entry in entries)
            }
            rows.append((name, len(entries), totals))
        return rows

    def render_summary(self) -> None:
        """Print a table of recorded events to stderr when verbose."""
        if self._state.verbosity < 1:
            return
        rows = self.summary_rows()
        if not rows and not self.warnings:
            return

        from rich import box
        from rich.table import Table

        table = Table(title="Diagnostics", box=box.SIMPLE, header_style="bold cyan")
        table.add_column("Event", style="bold")
        table.add_column("Count", justify="right")
        for field in SUMMARY_FIELDS:
            table.add_column(field.capitalize(), justify="right")
        for name, count, totals in rows:
            cells = (str(totals[field]) if field in totals else "-" for field in SUMMARY_FIELDS)
            table.add_row(name, str(count), *cells)
        if self.warnings:
            table.add_row("warnings", str(self.warnings), *("-" for _ in SUMMARY_FIELDS), style="yellow")
        self._state.err_console.print(table)


__all__ = ["SUMMARY_FIELDS", "CliEmitter", "describe_event"]
