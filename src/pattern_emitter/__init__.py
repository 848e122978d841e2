"""Event emitter with regular-expression subscriptions."""

from loguru import logger

from pattern_emitter.core.errors import (
    EmitterConfigurationError,
    EmitterError,
    InvalidPatternError,
    MaxListenersExceededWarning,
    UnhandledErrorEvent,
)
from pattern_emitter.emitter import (
    PatternEmitter,
    StringPatternEmitter,
    listener_count,
    matching_listener_count,
    pattern_listener_count,
)
from pattern_emitter.events import EventEmitter

__version__ = "0.1.0"

# Silent unless the application opts in (see pattern_emitter.log.setup_logging)
logger.disable("pattern_emitter")

__all__ = [
    "EmitterConfigurationError",
    "EmitterError",
    "EventEmitter",
    "InvalidPatternError",
    "MaxListenersExceededWarning",
    "PatternEmitter",
    "StringPatternEmitter",
    "UnhandledErrorEvent",
    "__version__",
    "listener_count",
    "matching_listener_count",
    "pattern_listener_count",
]
