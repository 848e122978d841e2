"""Logging setup for applications embedding the emitter."""

from __future__ import annotations

import os
import sys
from typing import Any

from loguru import logger

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def resolve_level(verbose: bool = False) -> str:
    """verbose=True or LOG_LEVEL=DEBUG enables DEBUG; otherwise LOG_LEVEL or INFO."""
    if verbose:
        return "DEBUG"
    env_level = (os.environ.get("LOG_LEVEL") or "").upper()
    return env_level if env_level in _LEVELS else "INFO"


def setup_logging(verbose: bool = False, sink: Any = None) -> int:
    """Enable pattern_emitter logs and send them to ``sink`` (stderr by default).

    Returns the loguru handler id so callers can remove the sink again.
    """
    level = resolve_level(verbose)
    logger.enable("pattern_emitter")
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}",
    )
