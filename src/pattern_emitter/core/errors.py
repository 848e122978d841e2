"""Emitter domain exceptions and warnings."""

from __future__ import annotations


class EmitterError(Exception):
    """Base for emitter domain errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_error = original_error


class EmitterConfigurationError(EmitterError):
    """Config validation or load failure."""


class InvalidPatternError(EmitterError, ValueError):
    """Pattern source could not be compiled."""


class UnhandledErrorEvent(EmitterError):
    """'error' was emitted with a non-exception payload and nobody listening."""

    def __init__(self, payload: object) -> None:
        super().__init__(
            f"Unhandled error event: {payload!r}",
            code="unhandled_error_event",
            details={"payload": payload},
        )
        self.payload = payload


class MaxListenersExceededWarning(RuntimeWarning):
    """A bucket grew past the emitter's max-listener threshold."""
