"""Keyboard binding records, descriptor normalisation, and storage.

A binding couples a key identity (``"Enter"``, ``"b"`` or a legacy numeric
code such as ``13``) with modifier expectations, optional context predicates
and a handler. Modifiers take ``True``/``False`` or ``None`` for
"don't care"; an unset modifier means ``False``.

Descriptors accepted by :func:`normalize`:

`str | int`
: a bare key.

`Mapping`
: camelCase (``shiftKey``, ``shortKey``) or snake_case (``shift_key``,
  ``short_key``) fields; ``prefix``/``suffix`` may be strings or compiled
  patterns; ``key`` may be a list, expanded by the registry.

`Binding`
: returned as-is.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, fields, replace
from enum import Enum
import logging
import re
from typing import TYPE_CHECKING, Any, Literal

from ..core.exceptions import InvalidBindingError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..core.document import Range
    from .dispatcher import DispatchContext, KeyEvent, Keyboard


_log = logging.getLogger(__name__)

Key = str | int
Handler = Callable[["Keyboard", "Range", "DispatchContext"], Any]

MODIFIERS = ("alt_key", "ctrl_key", "meta_key", "shift_key")

_FIELD_ALIASES = {
    "key": "key",
    "altKey": "alt_key",
    "ctrlKey": "ctrl_key",
    "metaKey": "meta_key",
    "shiftKey": "shift_key",
    "shortKey": "short_key",
}


class HandlerResult(Enum):
    """Outcome of a binding handler."""

    HANDLED = "handled"
    """Stop dispatching and prevent the default action."""

    PASS = "pass"
    """Not applicable: keep trying the next candidate binding."""

    ALLOW_DEFAULT = "allow-default"
    """Stop dispatching but let the default action happen."""

    @classmethod
    def coerce(cls, value: Any) -> HandlerResult:
        """Read legacy return values: ``True`` passes, anything else handles."""
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.PASS
        return cls.HANDLED


@dataclass(frozen=True, slots=True)
class Binding:
    """Canonical keyboard binding."""

    key: Key | tuple[Key, ...]
    alt_key: bool | None = False
    ctrl_key: bool | None = False
    meta_key: bool | None = False
    shift_key: bool | None = False
    collapsed: bool | None = None
    empty: bool | None = None
    offset: int | None = None
    format: tuple[str, ...] | Mapping[str, Any] | None = None
    prefix: re.Pattern[str] | None = None
    suffix: re.Pattern[str] | None = None
    handler: Handler | None = None
    name: str | None = None

    def matches_event(self, event: KeyEvent) -> bool:
        """Return whether modifiers and key identity match ``event``."""
        for modifier in MODIFIERS:
            expected = getattr(self, modifier)
            if expected is not None and bool(expected) != getattr(event, modifier):
                return False
        return self.key == event.key or (event.which is not None and self.key == event.which)

    def accepts(self, context: DispatchContext) -> bool:
        """Return whether every context predicate of the binding holds."""
        if self.collapsed is not None and self.collapsed != context.collapsed:
            return False
        if self.empty is not None and self.empty != context.empty:
            return False
        if self.offset is not None and self.offset != context.offset:
            return False
        if isinstance(self.format, tuple):
            if all(context.format.get(name) is None for name in self.format):
                return False
        elif isinstance(self.format, Mapping):
            for name, expected in self.format.items():
                actual = context.format.get(name)
                if expected is True:
                    if actual is None:
                        return False
                elif expected is False:
                    if actual is not None:
                        return False
                elif expected != actual:
                    return False
        if self.prefix is not None and not self.prefix.search(context.prefix):
            return False
        if self.suffix is not None and not self.suffix.search(context.suffix):
            return False
        return True

    def describe(self) -> dict[str, object]:
        modifiers = [
            modifier.removesuffix("_key") + ("?" if getattr(self, modifier) is None else "")
            for modifier in MODIFIERS
            if getattr(self, modifier) is not False
        ]
        return {
            "name": self.name or "",
            "key": self.key,
            "modifiers": "+".join(modifiers),
            "collapsed": self.collapsed,
            "format": list(self.format) if isinstance(self.format, tuple) else self.format,
        }


_BINDING_FIELDS = frozenset(item.name for item in fields(Binding))


def _compile(pattern: Any, field_name: str) -> re.Pattern[str] | None:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    if isinstance(pattern, str):
        return re.compile(pattern)
    msg = f"Binding {field_name} must be a regular expression, got {type(pattern).__name__}"
    raise InvalidBindingError(msg)


def binding_fields(
    values: Mapping[str, Any],
    platform: Literal["mac", "other"] = "other",
) -> dict[str, Any]:
    """Translate descriptor fields to :class:`Binding` field names."""
    result: dict[str, Any] = {}
    for raw_name, value in values.items():
        name = _FIELD_ALIASES.get(raw_name, raw_name)
        if name in {"short_key", "shortKey"}:
            if value:
                result["meta_key" if platform == "mac" else "ctrl_key"] = value
            continue
        if name not in _BINDING_FIELDS:
            msg = f"Unknown binding field '{raw_name}'"
            raise InvalidBindingError(msg)
        if name in {"prefix", "suffix"}:
            value = _compile(value, name)
        elif name == "format" and isinstance(value, (list, tuple)):
            value = tuple(value)
        elif name == "key" and isinstance(value, list):
            value = tuple(value)
        elif name == "handler" and value is not None and not callable(value):
            msg = "Binding handler must be callable"
            raise InvalidBindingError(msg)
        result[name] = value
    return result


def coerce_binding(descriptor: Any, platform: Literal["mac", "other"] = "other") -> Binding:
    """Build a :class:`Binding`, raising :class:`InvalidBindingError` on bad input."""
    if isinstance(descriptor, Binding):
        return descriptor
    if isinstance(descriptor, bool):
        msg = "Boolean is not a valid binding key"
        raise InvalidBindingError(msg)
    if isinstance(descriptor, (str, int)):
        return Binding(key=descriptor)
    if isinstance(descriptor, Mapping):
        values = binding_fields(descriptor, platform)
        key = values.get("key")
        keys = key if isinstance(key, tuple) else (key,)
        if not keys or any(isinstance(item, bool) or not isinstance(item, (str, int)) for item in keys):
            msg = f"Binding key must be a string or number, got {key!r}"
            raise InvalidBindingError(msg)
        return Binding(**values)
    msg = f"Unsupported binding descriptor {type(descriptor).__name__}"
    raise InvalidBindingError(msg)


def normalize(descriptor: Any, platform: Literal["mac", "other"] = "other") -> Binding | None:
    """Return the canonical binding for ``descriptor`` or ``None`` when invalid."""
    try:
        return coerce_binding(descriptor, platform)
    except InvalidBindingError as exc:
        _log.debug("Rejected binding descriptor %r: %s", descriptor, exc)
        return None


Overrides = Mapping[str, Any] | Handler | None


class BindingRegistry:
    """Bindings grouped by key identity in registration order."""

    def __init__(self, *, platform: Literal["mac", "other"] = "other") -> None:
        self.platform = platform
        self._bindings: dict[Key, list[Binding]] = {}

    def _overrides(self, value: Overrides) -> dict[str, Any]:
        if value is None:
            return {}
        if callable(value):
            return {"handler": value}
        if isinstance(value, Mapping):
            return binding_fields(value, self.platform)
        msg = f"Unsupported binding override {type(value).__name__}"
        raise InvalidBindingError(msg)

    def add(
        self,
        descriptor: Any,
        context: Overrides = None,
        handler: Overrides = None,
    ) -> list[Binding]:
        """Register ``descriptor`` merged with ``context`` and ``handler``.

        Invalid descriptors are skipped with a warning and yield ``[]``.
        """
        binding = normalize(descriptor, self.platform)
        if binding is None:
            _log.warning("Attempted to add invalid keyboard binding %r", descriptor)
            return []
        try:
            overrides = {**self._overrides(context), **self._overrides(handler)}
        except InvalidBindingError as exc:
            _log.warning("Attempted to add invalid keyboard binding %r: %s", descriptor, exc)
            return []
        overrides.pop("key", None)
        keys = binding.key if isinstance(binding.key, tuple) else (binding.key,)
        added: list[Binding] = []
        for key in keys:
            single = replace(binding, key=key, **overrides)
            if single.handler is None:
                _log.warning("Keyboard binding for %r has no handler; skipping.", key)
                continue
            self._bindings.setdefault(key, []).append(single)
            added.append(single)
        return added

    def get(self, key: Key) -> list[Binding]:
        return list(self._bindings.get(key, ()))

    def candidates(self, event: KeyEvent) -> list[Binding]:
        """Return the bindings for the event's key and legacy code matching its modifiers."""
        bindings = self.get(event.key)
        if event.which is not None:
            bindings.extend(self.get(event.which))
        return [binding for binding in bindings if binding.matches_event(event)]

    def keys(self) -> list[Key]:
        return list(self._bindings)

    def describe(self) -> list[dict[str, object]]:
        return [binding.describe() for binding in self]

    def __iter__(self) -> Iterator[Binding]:
        for bindings in list(self._bindings.values()):
            yield from bindings

    def __len__(self) -> int:
        return sum(len(bindings) for bindings in self._bindings.values())


__all__ = [
    "MODIFIERS",
    "Binding",
    "BindingRegistry",
    "Handler",
    "HandlerResult",
    "Key",
    "binding_fields",
    "coerce_binding",
    "normalize",
]
