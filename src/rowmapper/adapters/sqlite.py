"""
SQLite database adapter implementation.
"""

from __future__ import annotations

import sqlite3

from ..dialects.sqlite import SQLiteDialect
from .base import ConnectionConfig, SQLAdapter

_MEMORY_URLS = ("sqlite:///:memory:", "sqlite://", ":memory:")


class SQLiteAdapter(SQLAdapter):
    """
    Adapter wrapping the stdlib sqlite3 module.

    The connection is opened with ``isolation_level=None`` so that the
    adapter, not the driver, decides when transactions begin.
    """

    label = "sqlite"
    no_params = ()

    def _make_dialect(self) -> SQLiteDialect:
        return SQLiteDialect()

    def default_config(self) -> ConnectionConfig:
        return ConnectionConfig(url="sqlite:///:memory:")

    def _open(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = self._normalize_path(config.url)
        connection = sqlite3.connect(
            path,
            isolation_level=None,
            timeout=config.timeout if config.timeout is not None else 5.0,
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        self.logger.debug("Connected to SQLite %s", path)
        return connection

    @staticmethod
    def _normalize_path(url: str) -> str:
        if url in _MEMORY_URLS:
            return ":memory:"
        prefix = "sqlite:///"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return url
