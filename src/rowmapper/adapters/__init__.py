"""
Database adapter interfaces and implementations.
"""

from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterExecutionError,
    ConnectionConfig,
    DatabaseAdapter,
    DSN,
    SQLAdapter,
)
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

__all__ = [
    "ConnectionConfig",
    "DatabaseAdapter",
    "SQLAdapter",
    "DSN",
    "AdapterError",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "AdapterExecutionError",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
]
