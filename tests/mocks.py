"""Recording listeners for emitter tests."""

from __future__ import annotations

from typing import Any


class Recorder:
    """Listener that records every call along with the emitter's current event."""

    def __init__(self, emitter: Any = None, name: str = "recorder", log: list[str] | None = None) -> None:
        self.emitter = emitter
        self.name = name
        self.log = log
        self.calls: list[tuple[Any, tuple[Any, ...], dict[str, Any]]] = []

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        event = self.emitter.event if self.emitter is not None else None
        self.calls.append((event, args, kwargs))
        if self.log is not None:
            self.log.append(self.name)

    def __repr__(self) -> str:
        return f"<Recorder {self.name}>"

    def calls_for(self, event: Any) -> list[tuple[Any, ...]]:
        """Positional args of the calls made while ``event`` was being emitted."""
        return [args for evt, args, _ in self.calls if evt == event]

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def clear(self) -> None:
        self.calls.clear()


class Raiser:
    """Listener that raises the given exception."""

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc
        self.call_count = 0

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.call_count += 1
        raise self.exc
