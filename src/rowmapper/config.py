"""
Runtime settings resolved from keyword arguments or the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

SLOW_QUERY_ENV = "ROWMAPPER_SLOW_QUERY_MS"
STRICT_IDENTITY_ENV = "ROWMAPPER_STRICT_IDENTITY_MAP"
LOG_LEVEL_ENV = "ROWMAPPER_LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for '{key}': {value!r}")


def parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value for '{key}': {value!r}") from exc


def resolve_slow_query_ms(
    *, default: int, override: Optional[int] = None, environ: Optional[Mapping[str, str]] = None
) -> int:
    """
    Pick the slow-query threshold: explicit override, then environment, then default.
    """
    if override is not None:
        return override
    env = os.environ if environ is None else environ
    raw = env.get(SLOW_QUERY_ENV)
    if raw:
        return parse_int(raw, key=SLOW_QUERY_ENV)
    return default


@dataclass
class Settings:
    """
    Session-wide behaviour switches.
    """

    slow_query_ms: int = 200
    strict_identity_map: bool = True
    log_level: int = logging.INFO

    def __post_init__(self) -> None:
        if self.slow_query_ms < 0:
            raise ValueError("slow_query_ms must be >= 0")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {
            "slow_query_ms": resolve_slow_query_ms(default=cls.slow_query_ms, environ=env),
        }
        if env.get(STRICT_IDENTITY_ENV):
            kwargs["strict_identity_map"] = parse_bool(env[STRICT_IDENTITY_ENV], key=STRICT_IDENTITY_ENV)
        if env.get(LOG_LEVEL_ENV):
            level = logging.getLevelName(env[LOG_LEVEL_ENV].strip().upper())
            if not isinstance(level, int):
                raise ValueError(f"Invalid log level for '{LOG_LEVEL_ENV}': {env[LOG_LEVEL_ENV]!r}")
            kwargs["log_level"] = level
        return cls(**kwargs)  # type: ignore[arg-type]
