"""Literal event emitter: register, unregister and synchronous dispatch by exact name."""

from __future__ import annotations

import contextlib
import re
import warnings
from collections.abc import Hashable, Iterator
from typing import Any

from loguru import logger

from pattern_emitter.config import cfg
from pattern_emitter.core.constants import ERROR_EVENT, NEW_LISTENER_EVENT, REMOVE_LISTENER_EVENT
from pattern_emitter.core.errors import MaxListenersExceededWarning, UnhandledErrorEvent
from pattern_emitter.registry import Key, Listener, Literal, Pattern, Registry


def _check_listener(listener: object) -> None:
    if not callable(listener):
        raise TypeError(f"listener must be callable, got {type(listener).__name__}")


def _check_max_listeners(n: object) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"max listeners must be an int, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"max listeners must be >= 0, got {n}")
    return n


class OnceWrapper:
    """Caps a listener to one call; deregisters itself before calling through."""

    __slots__ = ("emitter", "key", "listener", "fired")

    # Registry looks through wrappers carrying this marker when removing
    _once = True

    def __init__(self, emitter: EventEmitter, key: Key, listener: Listener) -> None:
        self.emitter = emitter
        self.key = key
        self.listener = listener
        self.fired = False

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.fired:
            return None
        self.fired = True
        self.emitter._remove(self.key, self)
        return self.listener(*args, **kwargs)

    def __repr__(self) -> str:
        return f"<OnceWrapper {self.listener!r}>"


class EventEmitter:
    """Observer with exact-name subscriptions.

    Listeners run synchronously, in registration order, on the caller's stack.
    During dispatch ``emitter.event`` holds the name being emitted.
    """

    def __init__(self, *, max_listeners: int | None = None) -> None:
        self._registry = Registry()
        self._max_listeners = _check_max_listeners(
            cfg.default_max_listeners if max_listeners is None else max_listeners
        )
        self._warned: set[Key] = set()
        self.event: Hashable | None = None

    # Key handling; subclasses widen or narrow what a key may be

    def _key(self, name: object) -> Key:
        if isinstance(name, (re.Pattern, Pattern)):
            raise TypeError(f"{type(self).__name__} does not accept patterns")
        if not isinstance(name, Hashable):
            raise TypeError(f"event name must be hashable, got {type(name).__name__}")
        return Literal(name)

    def _check_emit_name(self, name: object) -> None:
        self._key(name)

    def _public_key(self, key: Key) -> Any:
        """The form of a key handed to lifecycle listeners and event_names()."""
        if isinstance(key, Pattern):
            return self._registry.compiled(key)
        return key.name

    def _listeners_for_emit(self, name: Hashable) -> list[Listener]:
        return self._registry.listeners(Literal(name))

    # Registration

    def _add(self, key: Key, listener: Listener, *, prepend: bool = False) -> EventEmitter:
        original = listener.listener if isinstance(listener, OnceWrapper) else listener
        # Before the listener is live, so it never sees its own registration
        self.emit(NEW_LISTENER_EVENT, self._public_key(key), original)
        size = self._registry.add(key, listener, prepend=prepend)
        if self._max_listeners and size > self._max_listeners and key not in self._warned:
            self._warned.add(key)
            self._warn_leak(key, size)
        return self

    def _warn_leak(self, key: Key, size: int) -> None:
        message = (
            f"Possible listener leak: {size} listeners on {self._public_key(key)!r}, "
            f"max is {self._max_listeners}. Use set_max_listeners() to raise the limit."
        )
        logger.warning(message)
        warnings.warn(MaxListenersExceededWarning(message), stacklevel=4)

    def add_listener(self, name: Hashable, listener: Listener) -> EventEmitter:
        """Register ``listener`` for ``name``."""
        key = self._key(name)
        _check_listener(listener)
        return self._add(key, listener)

    on = add_listener

    def prepend_listener(self, name: Hashable, listener: Listener) -> EventEmitter:
        key = self._key(name)
        _check_listener(listener)
        return self._add(key, listener, prepend=True)

    def once(self, name: Hashable, listener: Listener) -> EventEmitter:
        """Register ``listener`` for a single call of ``name``."""
        key = self._key(name)
        _check_listener(listener)
        return self._add(key, OnceWrapper(self, key, listener))

    def prepend_once_listener(self, name: Hashable, listener: Listener) -> EventEmitter:
        key = self._key(name)
        _check_listener(listener)
        return self._add(key, OnceWrapper(self, key, listener), prepend=True)

    # Removal

    def _remove(self, key: Key, listener: Listener) -> EventEmitter:
        removed = self._registry.remove(key, listener)
        if removed is None:
            return self
        public = self._public_key(key)
        if not self._registry.count(key):
            self._warned.discard(key)
        original = removed.listener if isinstance(removed, OnceWrapper) else removed
        self.emit(REMOVE_LISTENER_EVENT, public, original)
        return self

    def _clear(self, key: Key) -> None:
        removed = self._registry.clear(key)
        self._warned.discard(key)
        if not removed:
            return
        public = self._public_key(key)
        for entry in removed:
            original = entry.listener if isinstance(entry, OnceWrapper) else entry
            self.emit(REMOVE_LISTENER_EVENT, public, original)

    def remove_listener(self, name: Hashable, listener: Listener) -> EventEmitter:
        """Remove the first registration of ``listener`` for ``name``; absent is a no-op."""
        key = self._key(name)
        _check_listener(listener)
        return self._remove(key, listener)

    off = remove_listener

    def remove_all_listeners(self, name: Hashable | None = None) -> EventEmitter:
        """Drop every listener for ``name``, or for every key when ``name`` is None."""
        if name is not None:
            self._clear(self._key(name))
            return self

        remove_key = self._key(REMOVE_LISTENER_EVENT)
        for key in self._registry.keys():
            if key != remove_key:
                self._clear(key)
        # Last, so removeListener observers hear about everything else
        self._clear(remove_key)
        return self

    # Introspection

    def listeners(self, name: Hashable) -> list[Listener]:
        """Listeners registered under exactly ``name`` (once-wrappers included)."""
        return self._registry.listeners(self._key(name))

    def listener_count(self, name: Hashable) -> int:
        return self._registry.count(self._key(name))

    def event_names(self) -> list[Any]:
        return [self._public_key(key) for key in self._registry.keys()]

    def set_max_listeners(self, n: int) -> EventEmitter:
        """Bucket size past which a leak warning is issued; 0 disables."""
        self._max_listeners = _check_max_listeners(n)
        return self

    def get_max_listeners(self) -> int:
        return self._max_listeners

    # Dispatch

    @contextlib.contextmanager
    def _current_event(self, name: Hashable) -> Iterator[None]:
        """Expose ``name`` as ``self.event`` for the dispatch; restore it whatever happens."""
        previous = self.event
        self.event = name
        try:
            yield
        finally:
            self.event = previous

    def emit(self, name: Hashable, *args: Any, **kwargs: Any) -> bool:
        """Call every listener for ``name`` with the given arguments.

        Returns True if any listener was called. A listener exception aborts
        the remaining listeners; it propagates unless something listens for
        ``"error"``, in which case it is emitted there instead.
        """
        self._check_emit_name(name)
        handlers = self._listeners_for_emit(name)
        if not handlers:
            if name == ERROR_EVENT:
                payload = args[0] if args else None
                if isinstance(payload, BaseException):
                    raise payload
                raise UnhandledErrorEvent(payload)
            return False

        with self._current_event(name):
            self._dispatch(name, handlers, args, kwargs)
        return True

    def _dispatch(
        self,
        name: Hashable,
        handlers: list[Listener],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                if name == ERROR_EVENT or not self._listeners_for_emit(ERROR_EVENT):
                    raise
                logger.debug("Listener {!r} for {!r} raised {!r}; routing to error listeners", handler, name, exc)
                self.emit(ERROR_EVENT, exc)
                return
