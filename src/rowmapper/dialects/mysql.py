"""
MySQL dialect implementation.
"""

from __future__ import annotations

from .base import DialectCapabilities, SQLDialect


class MySQLDialect(SQLDialect):
    """
    Backtick quoting and ``%s`` placeholders. MySQL has no OFFSET without
    LIMIT, so an offset alone is paired with the largest unsigned LIMIT.
    """

    name = "mysql"
    param_style = "format"
    quote_char = "`"
    placeholder = "%s"
    unbounded_limit = "18446744073709551615"
    capabilities = DialectCapabilities(
        supports_returning=False,
        supports_savepoints=True,
        supports_schema_namespaces=True,
    )

    def default_values_insert(self, table_sql: str) -> str:
        return f"INSERT INTO {table_sql} () VALUES ()"
