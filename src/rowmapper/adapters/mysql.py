"""
MySQL database adapter implementation.
"""

from __future__ import annotations

from typing import Any, Dict, Sequence

from ..dialects.mysql import MySQLDialect
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    ConnectionConfig,
    SQLAdapter,
    validate_format_params,
)


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]
        import pymysql.constants.CLIENT  # type: ignore[import-untyped]  # noqa: F401

        return pymysql
    except ImportError:
        return None


class MySQLAdapter(SQLAdapter):
    """
    Adapter wrapping PyMySQL.

    Connections are opened with the ``FOUND_ROWS`` client flag: MySQL
    otherwise reports an UPDATE that writes identical values as affecting
    zero rows, which the mappers would treat as a lost row.
    """

    label = "mysql"
    begin_sql = "START TRANSACTION"

    def _make_dialect(self) -> MySQLDialect:
        return MySQLDialect()

    def _open(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("PyMySQL is required to use MySQLAdapter.")
        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for MySQL connections."
            )

        dsn = config.dsn
        connect_kwargs: Dict[str, Any] = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
            "autocommit": True,
            "client_flag": driver.constants.CLIENT.FOUND_ROWS,
            **(config.options or {}),
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port
        if config.timeout:
            connect_kwargs.setdefault("connect_timeout", int(config.timeout))

        self.logger.info("Connecting to MySQL %s", config.descriptive_label())
        try:
            connection = driver.connect(**connect_kwargs)
        except driver.Error as exc:
            raise AdapterConnectionError("Failed to connect to MySQL.") from exc
        if config.isolation_level:
            connection.cursor().execute(
                f"SET SESSION TRANSACTION ISOLATION LEVEL {config.isolation_level}"
            )
        return connection

    def _check_params(self, sql: str, params: Sequence[Any]) -> None:
        validate_format_params(sql, params)
