"""Undo history grouping applied document changes between cutoffs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
import time
from typing import TYPE_CHECKING

from delta import Delta

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .document import EditorDocument


_log = logging.getLogger(__name__)

DEFAULT_DELAY = 1.0
DEFAULT_MAX_STACK = 100


@dataclass(slots=True)
class HistoryEntry:
    """A group of changes undone and redone together."""

    before: Delta
    changes: list[Delta] = field(default_factory=list)
    after: Delta | None = None


class History:
    """Group changes recorded close together in time.

    A change joins the previous group when it arrives within ``delay``
    seconds of it and no :meth:`cutoff` happened in between.
    """

    def __init__(
        self,
        delay: float = DEFAULT_DELAY,
        max_stack: int = DEFAULT_MAX_STACK,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay = delay
        self.max_stack = max(1, max_stack)
        self.clock = clock
        self.undo_stack: list[HistoryEntry] = []
        self.redo_stack: list[HistoryEntry] = []
        self._last_recorded: float | None = None
        self._ignoring = False

    def record(self, change: Delta, old_contents: Delta) -> None:
        if self._ignoring or not change.ops:
            return
        now = self.clock()
        self.redo_stack.clear()
        if (
            self.undo_stack
            and self._last_recorded is not None
            and now - self._last_recorded < self.delay
        ):
            self.undo_stack[-1].changes.append(change)
        else:
            self.undo_stack.append(HistoryEntry(before=old_contents, changes=[change]))
            overflow = len(self.undo_stack) - self.max_stack
            if overflow > 0:
                del self.undo_stack[:overflow]
        self._last_recorded = now

    def cutoff(self) -> None:
        """Force the next recorded change into a new group."""
        self._last_recorded = None

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
        self._last_recorded = None

    def undo(self, document: EditorDocument) -> bool:
        """Restore the contents preceding the latest group."""
        if not self.undo_stack:
            return False
        entry = self.undo_stack.pop()
        entry.after = document.get_contents()
        self._restore(document, entry.before)
        self.redo_stack.append(entry)
        return True

    def redo(self, document: EditorDocument) -> bool:
        if not self.redo_stack:
            return False
        entry = self.redo_stack.pop()
        if entry.after is None:
            _log.debug("History entry has no redo snapshot; skipping.")
            return False
        self._restore(document, entry.after)
        self.undo_stack.append(entry)
        return True

    def _restore(self, document: EditorDocument, contents: Delta) -> None:
        self._ignoring = True
        try:
            document.set_contents(contents, source="user")
        finally:
            self._ignoring = False
        self.cutoff()


__all__ = ["History", "HistoryEntry"]
