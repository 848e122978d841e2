"""Shared fixtures for emitter tests."""

from __future__ import annotations

import pytest
from loguru import logger

from pattern_emitter.config import cfg
from pattern_emitter.emitter import PatternEmitter, StringPatternEmitter
from pattern_emitter.events import EventEmitter


@pytest.fixture
def emitter() -> PatternEmitter:
    return PatternEmitter(max_listeners=10, pattern_flags=0)


@pytest.fixture
def string_emitter() -> StringPatternEmitter:
    return StringPatternEmitter(max_listeners=10, pattern_flags=0)


@pytest.fixture
def literal_emitter() -> EventEmitter:
    return EventEmitter(max_listeners=10)


@pytest.fixture
def order() -> list[str]:
    """Shared call log for listeners that record their invocation order."""
    return []


@pytest.fixture
def restore_cfg():
    """Put the global config back after a test reloads it."""
    saved = dict(cfg.raw)
    yield cfg
    cfg.reload(saved, validate=False)


@pytest.fixture
def log_messages():
    """Enable library logging into a list for the duration of a test."""
    from pattern_emitter.log import setup_logging

    messages: list[str] = []
    handler_id = setup_logging(verbose=True, sink=messages.append)
    yield messages
    logger.remove(handler_id)
    logger.disable("pattern_emitter")
