"""Minimal publish/subscribe bus shared by the editor modules."""

from __future__ import annotations

import asyncio
from collections import defaultdict, deque
from collections.abc import Callable
import logging
from typing import Any


_log = logging.getLogger(__name__)

Listener = Callable[..., Any]

TEXT_CHANGE = "text-change"
SELECTION_CHANGE = "selection-change"
SCROLL_INTO_VIEW = "scroll-into-view"
PASTE_REFRESH = "paste-refresh"
KEYDOWN = "keydown"


class EventBus:
    """Dispatch named events to listeners in subscription order.

    :meth:`emit_later` defers delivery: with a running asyncio loop the
    event is scheduled with ``call_soon``; otherwise it is queued until
    :meth:`drain` is called.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._pending: deque[tuple[str, tuple[Any, ...]]] = deque()

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners[event].append(listener)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            listener(*args)

    def emit_later(self, event: str, *args: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._pending.append((event, args))
            return
        loop.call_soon(self.emit, event, *args)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def drain(self) -> int:
        """Deliver queued deferred events and return how many were sent."""
        delivered = 0
        while self._pending:
            event, args = self._pending.popleft()
            _log.debug("Delivering deferred '%s' event.", event)
            self.emit(event, *args)
            delivered += 1
        return delivered


__all__ = [
    "EventBus",
    "KEYDOWN",
    "Listener",
    "PASTE_REFRESH",
    "SCROLL_INTO_VIEW",
    "SELECTION_CHANGE",
    "TEXT_CHANGE",
]
