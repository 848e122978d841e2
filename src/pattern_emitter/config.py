"""Configuration: YAML + env overlay for emitter defaults."""

from __future__ import annotations

import functools
import operator
import os
import re
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from pattern_emitter.core.constants import DEFAULT_MAX_LISTENERS
from pattern_emitter.core.errors import EmitterConfigurationError

# Env keys that override config (loaded once per reload)
_ENV_OVERRIDE_KEYS = ("PATTERN_EMITTER_MAX_LISTENERS",)

_FLAG_NAMES = frozenset({"ASCII", "IGNORECASE", "MULTILINE", "DOTALL", "VERBOSE"})


def _check_flag_name(index: int, name: object) -> None:
    if not isinstance(name, str) or name.upper() not in _FLAG_NAMES:
        raise EmitterConfigurationError(
            f"pattern_flags[{index}] is not a re flag name",
            code="unknown_pattern_flag",
            details={"index": index, "value": name},
        )


def _load_env_overrides() -> dict[str, str]:
    return {k: os.environ.get(k, "") for k in _ENV_OVERRIDE_KEYS}


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path) -> dict[str, Any]:
    """Load config from YAML file. Use SafeLoader. Returns raw dict."""
    path = Path(path)
    if not path.exists():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config {}: {}", path, exc)
        raise
    if not isinstance(data, dict):
        logger.warning("Config file {} has invalid structure (expected dict)", path)
        return {}
    return data


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load config from YAML after loading .env, so env overrides see it."""
    from dotenv import load_dotenv

    load_dotenv()
    return load_config(path)


class Config:
    """Config accessor with attribute-style access for nested keys."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._env: dict[str, str] = _load_env_overrides()

    def reload(self, data: dict[str, Any], *, validate: bool = True) -> None:
        """Replace config data and re-read env overrides."""
        self._data = data or {}
        self._env = _load_env_overrides()
        if validate:
            self._validate()
        logger.debug(
            "Config reloaded: max_listeners={}, pattern_flags={}",
            self.default_max_listeners,
            self.pattern_flags,
        )

    def _validate(self) -> None:
        """Raise EmitterConfigurationError on bad values."""
        raw_max = self._data.get("default_max_listeners")
        if raw_max is not None:
            try:
                value = int(raw_max)
            except (TypeError, ValueError) as exc:
                raise EmitterConfigurationError(
                    "default_max_listeners must be an integer",
                    code="invalid_max_listeners",
                    details={"value": raw_max},
                    original_error=exc,
                ) from exc
            if value < 0:
                raise EmitterConfigurationError(
                    "default_max_listeners must be >= 0",
                    code="invalid_max_listeners",
                    details={"value": value},
                )

        flags = self._data.get("pattern_flags")
        if flags is not None and not isinstance(flags, list):
            raise EmitterConfigurationError(
                "pattern_flags must be a list",
                code="invalid_pattern_flags",
                details={"type": type(flags).__name__},
            )
        for i, name in enumerate(self.pattern_flags):
            _check_flag_name(i, name)

    @property
    def raw(self) -> dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get value by dot-separated path (e.g. 'emitters.0.max_listeners')."""
        parts = key.split(".")
        obj: Any = self._data
        for part in parts:
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            elif isinstance(obj, list) and part.isdigit() and int(part) < len(obj):
                obj = obj[int(part)]
            else:
                return default
        return obj

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def default_max_listeners(self) -> int:
        """Listener threshold for new emitters; env PATTERN_EMITTER_MAX_LISTENERS wins."""
        env_val = self._env.get("PATTERN_EMITTER_MAX_LISTENERS", "")
        if env_val.strip().isdigit():
            return int(env_val)
        return int(self._data.get("default_max_listeners", DEFAULT_MAX_LISTENERS))

    @property
    def pattern_flags(self) -> list[str]:
        """re flag names applied to patterns registered by string source."""
        flags = self._data.get("pattern_flags")
        return flags if isinstance(flags, list) else []

    @property
    def pattern_flag_bits(self) -> int:
        """pattern_flags folded into an int for re.compile."""
        bits = []
        for i, name in enumerate(self.pattern_flags):
            _check_flag_name(i, name)
            bits.append(getattr(re, name.upper()))
        return int(functools.reduce(operator.or_, bits, 0))


# Global config instance; new emitters read their defaults from it
cfg: Config = Config({})
