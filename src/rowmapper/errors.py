"""
Error hierarchy raised by the mapping and persistence layers.
"""

from __future__ import annotations

from typing import Any


class RowMapperError(Exception):
    """Base error for rowmapper failures."""


class TableConfigurationError(RowMapperError):
    """Raised when table metadata is inconsistent."""


class UnknownColumnError(RowMapperError, KeyError):
    """Raised when a column name is not part of the table."""

    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Unknown column '{column}' on table '{table}'")

    def __str__(self) -> str:
        return self.args[0]


class ImmutableRowError(RowMapperError):
    """Raised when a deleted row, or the primary key of a stored row, is modified."""


class IdentityConflictError(RowMapperError):
    """Raised when a second row instance is registered under an existing identity."""


class CannotInsertError(RowMapperError):
    """Raised when inserting a row that is not NEW."""


class CannotUpdateError(RowMapperError):
    """Raised when updating a row that was never stored or is already deleted."""


class CannotDeleteError(RowMapperError):
    """Raised when deleting a row that was never stored or is already deleted."""


class UnexpectedRowCountError(RowMapperError):
    """
    Raised when a write affected a different number of rows than expected.
    """

    def __init__(self, count: int, *, expected: Any = 1, operation: str | None = None) -> None:
        self.count = count
        self.expected = expected
        self.operation = operation
        prefix = f"{operation}: " if operation else ""
        super().__init__(f"{prefix}expected {expected} row(s) affected, got {count}")


class MapperNotFoundError(RowMapperError, KeyError):
    """Raised when a mapper name is not registered."""

    def __str__(self) -> str:
        return self.args[0]


class TransactionError(RowMapperError):
    """Raised on invalid transaction lifecycle usage."""
