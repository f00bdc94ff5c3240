"""
rowmapper public package initialization.
"""

from .adapters import ConnectionConfig, MySQLAdapter, PostgresAdapter, SQLiteAdapter  # noqa: F401
from .config import Settings  # noqa: F401
from .errors import (  # noqa: F401
    CannotDeleteError,
    CannotInsertError,
    CannotUpdateError,
    IdentityConflictError,
    ImmutableRowError,
    MapperNotFoundError,
    RowMapperError,
    TableConfigurationError,
    TransactionError,
    UnexpectedRowCountError,
    UnknownColumnError,
)
from .hooks import HookDispatcher  # noqa: F401
from .mapper import Mapper, MapperLocator, Record, RecordSet  # noqa: F401
from .persistence import Session, Transaction, TransactionState  # noqa: F401
from .table import Row, RowIdentity, RowStatus, Table, TableGateway  # noqa: F401

__all__ = [
    "ConnectionConfig",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
    "Settings",
    "Table",
    "Row",
    "RowIdentity",
    "RowStatus",
    "TableGateway",
    "Mapper",
    "MapperLocator",
    "Record",
    "RecordSet",
    "HookDispatcher",
    "Session",
    "Transaction",
    "TransactionState",
    "RowMapperError",
    "TableConfigurationError",
    "UnknownColumnError",
    "ImmutableRowError",
    "IdentityConflictError",
    "CannotInsertError",
    "CannotUpdateError",
    "CannotDeleteError",
    "UnexpectedRowCountError",
    "MapperNotFoundError",
    "TransactionError",
]
