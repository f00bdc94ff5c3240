"""
Adapter protocol and connection configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Sequence
from urllib.parse import parse_qs, urlencode, urlparse

from ..config import resolve_slow_query_ms
from ..dialects.base import Dialect
from ..utils import get_logger, redact_params, time_call


class AdapterError(RuntimeError):
    """Root of the errors raised by database adapters."""


class AdapterConfigurationError(AdapterError):
    """Bad connection settings, or the database driver is not installed."""


class AdapterConnectionError(AdapterError):
    """The adapter has no usable connection."""


class AdapterExecutionError(AdapterError):
    """Raised when statement parameters do not match the SQL."""


@dataclass
class DSN:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    query: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, value: str) -> "DSN":
        parsed = urlparse(value)
        return cls(
            driver=parsed.scheme,
            username=parsed.username,
            password=parsed.password,
            host=parsed.hostname,
            port=parsed.port,
            database=parsed.path.lstrip("/") or None,
            query={key: values[0] for key, values in parse_qs(parsed.query).items()},
        )

    def redacted(self) -> str:
        """
        Return the DSN with the password masked.
        """
        user = self.username or ""
        if user and self.password:
            user = f"{user}:***"
        host = self.host or ""
        if host and self.port:
            host = f"{host}:{self.port}"
        netloc = f"{user}@{host}" if user else host
        result = f"{self.driver}://{netloc}/{self.database or ''}"
        if self.query:
            result += f"?{urlencode(self.query)}"
        return result


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.
    """

    url: str
    timeout: float | None = None
    isolation_level: str | None = None
    options: dict[str, Any] | None = None
    dsn: DSN | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from a DSN; ``timeout`` and ``isolation_level`` query
        parameters are lifted into fields and the rest are passed to the
        driver as options.
        """
        parsed = DSN.parse(dsn)
        query = dict(parsed.query)
        if "timeout" in query:
            raw = query.pop("timeout")
            try:
                kwargs.setdefault("timeout", float(raw))
            except ValueError as exc:
                raise AdapterConfigurationError(f"Invalid float value for 'timeout': {raw!r}") from exc
        if "isolation_level" in query:
            kwargs.setdefault("isolation_level", query.pop("isolation_level"))
        options = dict(query)
        options.update(kwargs.pop("options", None) or {})
        return cls(url=dsn, dsn=parsed, options=options or None, **kwargs)

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


def rows_as_dicts(cursor: Any, rows: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Convert DB-API result rows into column-name dictionaries using ``cursor.description``.
    """
    description = cursor.description or ()
    names = [column[0] for column in description]
    return [dict(zip(names, row)) for row in rows]


class DatabaseAdapter(Protocol):
    """
    Storage connection used by gateways and the transaction manager.
    """

    dialect: Dialect
    slow_query_ms: int

    def connect(self, config: ConnectionConfig) -> Any:
        """
        Open the connection described by ``config`` and return the driver handle.
        """

    def close(self) -> None:
        """
        Release the connection. Safe to call more than once.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute one statement; the returned cursor exposes ``rowcount``,
        ``description``, ``fetchone`` and ``fetchall``.
        """

    def begin(self) -> None:
        """
        Start a physical transaction.
        """

    def commit(self) -> None:
        """
        Commit the current transaction.
        """

    def rollback(self) -> None:
        """
        Roll back the current transaction.
        """

    def default_config(self) -> ConnectionConfig:
        """
        Config used when a session is opened without one.
        """

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        """
        Key generated for ``pk_column`` by the insert that produced ``cursor``.
        """


def count_format_placeholders(sql: str) -> int:
    """
    Count ``%s`` placeholders, skipping escaped ``%%``.
    """
    count = 0
    idx = 0
    while idx < len(sql) - 1:
        if sql[idx] == "%" and sql[idx + 1] == "s":
            count += 1
            idx += 2
            continue
        if sql[idx] == "%" and sql[idx + 1] == "%":
            idx += 2
            continue
        idx += 1
    return count


def validate_format_params(sql: str, params: Sequence[Any]) -> None:
    expected = count_format_placeholders(sql)
    if expected != len(params):
        raise AdapterExecutionError(
            f"Parameter count mismatch: expected {expected}, received {len(params)}."
        )


class SQLAdapter(DatabaseAdapter):
    """
    Shared plumbing for the bundled DB-API adapters: one connection, timed
    execution with redacted parameters, and transactions driven by plain SQL
    statements so savepoints nest the same way on every backend.

    Subclasses open the driver connection in :meth:`_open`.
    """

    label: ClassVar[str]
    begin_sql: ClassVar[str] = "BEGIN"
    # passed to the driver when a statement has no parameters
    no_params: ClassVar[Any] = None

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect = self._make_dialect()
        self._connection: Any = None
        self.logger = get_logger(f"adapters.{self.label}")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def _make_dialect(self) -> Dialect:
        raise NotImplementedError

    def _open(self, config: ConnectionConfig) -> Any:
        raise NotImplementedError

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, config: ConnectionConfig) -> Any:
        self._connection = self._open(config)
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None

    def default_config(self) -> ConnectionConfig:
        raise AdapterConfigurationError(
            f"{type(self).__name__} has no default connection; pass a ConnectionConfig."
        )

    def _ensure_connection(self) -> Any:
        if self._connection is None:
            raise AdapterConnectionError(f"{type(self).__name__} is not connected.")
        return self._connection

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def _check_params(self, sql: str, params: Sequence[Any]) -> None:
        """
        Hook for drivers whose placeholder mismatches are worth catching early.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        connection = self._ensure_connection()
        params = tuple(params or ())
        self._check_params(sql, params)
        cursor = connection.cursor()
        with time_call(
            f"{self.label}.execute",
            self.logger,
            sql=sql,
            params=redact_params(params),
            threshold_ms=self.slow_query_ms,
        ):
            cursor.execute(sql, params or self.no_params)
        return cursor

    def begin(self) -> None:
        self.execute(self.begin_sql)

    def commit(self) -> None:
        self.execute("COMMIT")

    def rollback(self) -> None:
        self.execute("ROLLBACK")

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        return cursor.lastrowid
