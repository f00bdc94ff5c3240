"""
SQLite dialect implementation.
"""

from __future__ import annotations

from .base import DialectCapabilities, SQLDialect


class SQLiteDialect(SQLDialect):
    name = "sqlite"
    param_style = "qmark"
    capabilities = DialectCapabilities(supports_returning=False, supports_savepoints=True)
    unbounded_limit = "-1"
