"""
PostgreSQL database adapter implementation.
"""

from __future__ import annotations

from typing import Any, Sequence

from ..dialects.postgres import PostgresDialect
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterExecutionError,
    ConnectionConfig,
    SQLAdapter,
    validate_format_params,
)


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresAdapter(SQLAdapter):
    """
    Adapter wrapping the psycopg PostgreSQL driver.

    The driver runs in autocommit mode; ``BEGIN``/``COMMIT``/``ROLLBACK`` are
    issued as statements. Generated keys are read back from the ``RETURNING``
    row of the insert.
    """

    label = "postgres"

    def _make_dialect(self) -> PostgresDialect:
        return PostgresDialect()

    def _open(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresAdapter.")

        options = dict(config.options or {})
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        self.logger.info("Connecting to PostgreSQL %s", config.descriptive_label())
        # query parameters were already split into options by ConnectionConfig
        conninfo = config.url.split("?", 1)[0]
        try:
            connection = driver.connect(conninfo, autocommit=True, **options)
        except driver.Error as exc:
            raise AdapterConnectionError("Failed to connect to PostgreSQL.") from exc
        if config.isolation_level:
            connection.execute(
                f"SET SESSION CHARACTERISTICS AS TRANSACTION ISOLATION LEVEL {config.isolation_level}"
            )
        return connection

    def _check_params(self, sql: str, params: Sequence[Any]) -> None:
        validate_format_params(sql, params)

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        row = cursor.fetchone()
        if not row:
            raise AdapterExecutionError(f"No RETURNING data available for {table}.{pk_column}.")
        return row[0]
