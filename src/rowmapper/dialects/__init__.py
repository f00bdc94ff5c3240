"""
Dialect strategy registry.
"""

from .base import Dialect, DialectCapabilities, SQLDialect
from .mysql import MySQLDialect
from .postgres import PostgresDialect
from .sqlite import SQLiteDialect

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "SQLDialect",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
]
