"""Logging helpers: package logger setup, correlation ids, query timing and redaction."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterable, Iterator, Optional

ROOT_LOGGER = "rowmapper"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"
REDACTED_VALUE = "***"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_SENSITIVE_TOKENS = frozenset(
    {"password", "passwd", "secret", "token", "api_key", "apikey", "private_key", "bearer"}
)


class CorrelationIdFilter(logging.Filter):
    """Stamp every record with the active correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: Optional[int] = None) -> None:
    """
    Attach the package handler on first use. ``level`` is applied every time
    it is given; the first call without one settles on INFO.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        root.addHandler(handler)
        if level is None:
            level = logging.INFO
    if level is not None:
        root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or uuid.uuid4().hex
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    current = _correlation_id.get()
    return current if current is not None else set_correlation_id()


@contextmanager
def correlation_scope(value: Optional[str] = None) -> Iterator[str]:
    """
    Run a block under its own correlation id, restoring the previous one on exit.
    """
    reset_token = _correlation_id.set(value or uuid.uuid4().hex)
    try:
        yield _correlation_id.get()  # type: ignore[misc]
    finally:
        _correlation_id.reset(reset_token)


def redact_value(value: Any) -> Any:
    text = value.decode("utf-8", errors="ignore") if isinstance(value, bytes) else value
    if isinstance(text, str):
        lowered = text.lower()
        if any(token in lowered for token in _SENSITIVE_TOKENS):
            return REDACTED_VALUE
        return text
    return value


def redact_params(params: Iterable[Any] | None) -> list[Any]:
    if params is None:
        return []
    return [redact_value(value) for value in params]


class QueryTimer:
    """
    Context manager logging how long a block took. Blocks at or over
    ``threshold_ms`` are reported at WARNING, the rest at DEBUG.
    """

    def __init__(
        self,
        name: str,
        logger: logging.Logger,
        sql: str | None,
        params: Any,
        threshold_ms: int,
    ) -> None:
        self.name = name
        self.logger = logger
        self.sql = sql
        self.params = params
        self.threshold_ms = threshold_ms
        self.elapsed_ms = 0.0
        self._started = 0.0

    def __enter__(self) -> "QueryTimer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed_ms = (time.perf_counter() - self._started) * 1000
        slow = self.elapsed_ms >= self.threshold_ms
        self.logger.log(
            logging.WARNING if slow else logging.DEBUG,
            "%s took %.2fms",
            self.name,
            self.elapsed_ms,
            extra={"sql": self.sql, "params": self.params, "elapsed_ms": self.elapsed_ms},
        )


def time_call(
    name: str,
    logger: logging.Logger,
    *,
    sql: str | None = None,
    params: Iterable[Any] | None = None,
    threshold_ms: int = 100,
) -> QueryTimer:
    return QueryTimer(name, logger, sql, params, threshold_ms)
