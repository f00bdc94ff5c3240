"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from .base import DialectCapabilities, SQLDialect


class PostgresDialect(SQLDialect):
    """
    psycopg uses ``%s`` placeholders; generated keys come back through RETURNING.
    """

    name = "postgresql"
    param_style = "format"
    placeholder = "%s"
    capabilities = DialectCapabilities(
        supports_returning=True,
        supports_savepoints=True,
        supports_schema_namespaces=True,
    )
