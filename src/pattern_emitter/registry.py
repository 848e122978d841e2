"""Listener registry: literal buckets, pattern buckets and the compiled-pattern index.

Two namespaces never share a bucket. A ``Literal`` key indexes by exact event
name; a ``Pattern`` key indexes by ``(source, flags)`` so independently compiled
but identical expressions land in the same bucket. The pattern bucket map and
the compiled index always have the same key set.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Union

from loguru import logger

from pattern_emitter.core.errors import InvalidPatternError

Listener = Callable[..., Any]


@dataclass(frozen=True)
class Literal:
    """Exact event-name key."""

    name: Hashable


@dataclass(frozen=True)
class Pattern:
    """Regular-expression key. Flags are normalized the way ``re`` reports them.

    The stored flags are those of the compiled expression, so inline flags such
    as ``(?i)`` and the implicit ``UNICODE`` bit are folded in and every
    spelling of the same expression yields the same key.
    """

    source: str
    flags: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.source, str):
            raise TypeError("pattern must be a string")
        object.__setattr__(self, "flags", _compile(self.source, int(self.flags)).flags)

    @classmethod
    def from_regex(cls, regex: re.Pattern[Any]) -> Pattern:
        if not isinstance(regex.pattern, str):
            raise TypeError("bytes patterns cannot match event names")
        return cls(regex.pattern, regex.flags)

    def compile(self) -> re.Pattern[str]:
        return _compile(self.source, self.flags)


def _compile(source: str, flags: int) -> re.Pattern[str]:
    try:
        return re.compile(source, flags)
    except (re.error, ValueError) as exc:
        raise InvalidPatternError(
            f"Invalid pattern {source!r}: {exc}",
            code="invalid_pattern",
            details={"source": source, "flags": flags},
            original_error=exc,
        ) from exc


Key = Union[Literal, Pattern]


def key_for(value: object) -> Key:
    """Tag a registration key: compiled expressions become patterns, anything else a literal."""
    if isinstance(value, (Literal, Pattern)):
        return value
    if isinstance(value, re.Pattern):
        return Pattern.from_regex(value)
    if not isinstance(value, Hashable):
        raise TypeError(f"event name must be hashable, got {type(value).__name__}")
    return Literal(value)


def _same_listener(entry: Listener, listener: Listener) -> bool:
    """Match a stored entry by callable equality, looking through once-wrappers."""
    if entry == listener:
        return True
    return getattr(entry, "_once", False) is True and entry.listener == listener


class Registry:
    """Owns the literal buckets, the pattern buckets and the compiled patterns."""

    def __init__(self) -> None:
        self._literal: dict[Hashable, list[Listener]] = {}
        self._patterns: dict[Pattern, list[Listener]] = {}
        self._compiled: dict[Pattern, re.Pattern[str]] = {}

    def _bucket(self, key: Key) -> list[Listener] | None:
        if isinstance(key, Pattern):
            return self._patterns.get(key)
        return self._literal.get(key.name)

    def compiled(self, key: Pattern) -> re.Pattern[str]:
        """Compiled form of a pattern key, compiling it if it is not indexed yet."""
        regex = self._compiled.get(key)
        return regex if regex is not None else key.compile()

    def add(self, key: Key, listener: Listener, *, prepend: bool = False) -> int:
        """Register ``listener`` under ``key``; return the bucket size afterwards."""
        if isinstance(key, Pattern):
            bucket = self._patterns.get(key)
            if bucket is None:
                regex = key.compile()
                bucket = self._patterns[key] = []
                self._compiled[key] = regex
                logger.debug("Compiled pattern {!r} (flags={})", key.source, key.flags)
        else:
            bucket = self._literal.setdefault(key.name, [])

        if prepend:
            bucket.insert(0, listener)
        else:
            bucket.append(listener)
        return len(bucket)

    def remove(self, key: Key, listener: Listener) -> Listener | None:
        """Remove the first entry matching ``listener``; return the stored entry, if any."""
        bucket = self._bucket(key)
        if not bucket:
            return None

        for i, entry in enumerate(bucket):
            if _same_listener(entry, listener):
                del bucket[i]
                break
        else:
            return None

        if not bucket:
            self._drop(key)
        return entry

    def clear(self, key: Key) -> list[Listener]:
        """Drop the whole bucket for ``key``; return what it held."""
        bucket = self._bucket(key)
        if bucket is None:
            return []
        self._drop(key)
        return bucket

    def _drop(self, key: Key) -> None:
        if isinstance(key, Pattern):
            del self._patterns[key]
            del self._compiled[key]
            logger.debug("Dropped pattern {!r}", key.source)
        else:
            del self._literal[key.name]

    def listeners(self, key: Key) -> list[Listener]:
        """Copy of the bucket for exactly ``key``; no pattern matching."""
        return list(self._bucket(key) or ())

    def count(self, key: Key) -> int:
        bucket = self._bucket(key)
        return len(bucket) if bucket else 0

    def keys(self) -> list[Key]:
        """Keys with listeners: literals first, then patterns, each in registration order."""
        return [Literal(name) for name in self._literal] + list(self._patterns)

    def matching(self, name: Hashable) -> list[Listener]:
        """Listeners for an emitted name: the literal bucket, then every matching pattern bucket.

        Only ``str`` names are tested against patterns. The result is a fresh
        list, so callers may invoke it while listeners mutate the registry.
        """
        matched = list(self._literal.get(name, ()))
        if not isinstance(name, str):
            return matched

        for key, regex in self._compiled.items():
            if regex.search(name) is not None:
                matched.extend(self._patterns[key])
        return matched
