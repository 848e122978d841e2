"""Emitters whose listeners may subscribe to regular expressions as well as exact names."""

from __future__ import annotations

import re
from collections.abc import Hashable
from typing import Any

from pattern_emitter.config import cfg
from pattern_emitter.events import EventEmitter, OnceWrapper, _check_listener
from pattern_emitter.registry import Key, Listener, Pattern

__all__ = [
    "PatternEmitter",
    "StringPatternEmitter",
    "listener_count",
    "matching_listener_count",
    "pattern_listener_count",
]


class PatternEmitter(EventEmitter):
    """Event emitter with pattern subscriptions.

    ``on(name, fn)`` registers an exact-name listener; ``on(re.compile(...), fn)``
    or ``on_pattern(source, fn)`` registers a pattern listener. ``emit(name)``
    calls the exact-name listeners, then the listeners of every pattern whose
    ``search`` matches ``name``, in pattern registration order. Only ``str``
    names are matched against patterns.
    """

    def __init__(self, *, max_listeners: int | None = None, pattern_flags: int | None = None) -> None:
        super().__init__(max_listeners=max_listeners)
        self._pattern_flags = cfg.pattern_flag_bits if pattern_flags is None else int(pattern_flags)

    def _key(self, name: object) -> Key:
        if isinstance(name, re.Pattern):
            return Pattern.from_regex(name)
        if isinstance(name, Pattern):
            return name
        return super()._key(name)

    def _check_emit_name(self, name: object) -> None:
        if isinstance(name, (re.Pattern, Pattern)):
            raise TypeError("cannot emit a pattern; emit an event name")
        super()._check_emit_name(name)

    def _pattern_key(self, pattern: object, flags: int | None = None) -> Pattern:
        if not isinstance(pattern, str):
            raise TypeError(f"pattern must be a string, got {type(pattern).__name__}")
        return Pattern(pattern, self._pattern_flags if flags is None else flags)

    def _listeners_for_emit(self, name: Hashable) -> list[Listener]:
        return self._registry.matching(name)

    # Explicit pattern registration by source string

    def add_pattern_listener(self, pattern: str, listener: Listener, *, flags: int | None = None) -> PatternEmitter:
        """Register ``listener`` for every event name ``pattern`` matches."""
        key = self._pattern_key(pattern, flags)
        _check_listener(listener)
        return self._add(key, listener)

    on_pattern = add_pattern_listener

    def once_on_pattern(self, pattern: str, listener: Listener, *, flags: int | None = None) -> PatternEmitter:
        key = self._pattern_key(pattern, flags)
        _check_listener(listener)
        return self._add(key, OnceWrapper(self, key, listener))

    def remove_pattern_listener(
        self, pattern: str, listener: Listener, *, flags: int | None = None
    ) -> PatternEmitter:
        key = self._pattern_key(pattern, flags)
        _check_listener(listener)
        return self._remove(key, listener)

    def remove_all_pattern_listeners(self, pattern: str, *, flags: int | None = None) -> PatternEmitter:
        self._clear(self._pattern_key(pattern, flags))
        return self

    def pattern_listeners(self, pattern: str | re.Pattern[str], *, flags: int | None = None) -> list[Listener]:
        """Listeners registered under exactly this pattern."""
        key = self._key(pattern) if isinstance(pattern, re.Pattern) else self._pattern_key(pattern, flags)
        return self._registry.listeners(key)

    def pattern_listener_count(self, pattern: str | re.Pattern[str], *, flags: int | None = None) -> int:
        return len(self.pattern_listeners(pattern, flags=flags))

    # Matching

    def matching_listeners(self, name: Hashable) -> list[Listener]:
        """Listeners ``emit(name)`` would call, in call order."""
        self._check_emit_name(name)
        return self._registry.matching(name)

    def matching_listener_count(self, name: Hashable) -> int:
        return len(self.matching_listeners(name))


class StringPatternEmitter(PatternEmitter):
    """Pattern emitter where every key is a regular-expression source string.

    ``on("^user:", fn)`` fires for ``emit("user:login")``; an exact name is just
    a pattern that happens to match itself. Non-string keys and names are
    rejected.
    """

    def _key(self, name: object) -> Key:
        return self._pattern_key(name)

    def _check_emit_name(self, name: object) -> None:
        if not isinstance(name, str):
            raise TypeError(f"event name must be a string, got {type(name).__name__}")

    def _public_key(self, key: Key) -> Any:
        return key.source if isinstance(key, Pattern) else key.name


def listener_count(emitter: EventEmitter, name: Hashable) -> int:
    """Listeners registered under exactly ``name`` on ``emitter``."""
    return emitter.listener_count(name)


def matching_listener_count(emitter: PatternEmitter, name: Hashable) -> int:
    """Listeners ``emitter.emit(name)`` would call."""
    return emitter.matching_listener_count(name)


def pattern_listener_count(emitter: PatternEmitter, pattern: str | re.Pattern[str]) -> int:
    """Listeners registered under exactly ``pattern`` on ``emitter``."""
    if not isinstance(pattern, (str, re.Pattern)):
        raise TypeError(f"pattern must be a string, got {type(pattern).__name__}")
    return emitter.pattern_listener_count(pattern)
