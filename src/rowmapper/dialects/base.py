"""
Dialect strategy interfaces describing SQL rendering behaviors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Protocol, Sequence


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_returning: bool = False
    supports_savepoints: bool = True
    supports_schema_namespaces: bool = False


class Dialect(Protocol):
    """
    Strategy interface consumed by statement builders and the transaction manager.
    """

    @property
    def name(self) -> str: ...

    @property
    def param_style(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def limit_clause(self, limit: int | None, offset: int | None) -> str: ...

    def parameter_placeholder(self, position: int | None = None) -> str: ...

    def returning_clause(self, columns: Sequence[str]) -> str: ...

    def default_values_insert(self, table_sql: str) -> str: ...

    def savepoint(self, name: str) -> str: ...

    def release_savepoint(self, name: str) -> str: ...

    def rollback_to_savepoint(self, name: str) -> str: ...


class SQLDialect:
    """
    Shared rendering for the bundled dialects. Subclasses only declare how
    they differ: quote character, placeholder, capabilities and the LIMIT
    value that stands for "no limit" when only an offset is given.
    """

    name: ClassVar[str]
    param_style: ClassVar[str]
    capabilities: ClassVar[DialectCapabilities]
    quote_char: ClassVar[str] = '"'
    placeholder: ClassVar[str] = "?"
    unbounded_limit: ClassVar[str | None] = None

    def quote_identifier(self, identifier: str) -> str:
        q = self.quote_char
        return f"{q}{identifier.replace(q, q * 2)}{q}"

    def format_table(self, table_name: str) -> str:
        if self.capabilities.supports_schema_namespaces and "." in table_name:
            return ".".join(self.quote_identifier(part) for part in table_name.split(".", 1))
        return self.quote_identifier(table_name)

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        if limit is None and offset is not None:
            limit_sql = f"LIMIT {self.unbounded_limit}" if self.unbounded_limit else ""
        else:
            limit_sql = f"LIMIT {limit}" if limit is not None else ""
        offset_sql = f"OFFSET {offset}" if offset is not None else ""
        return " ".join(part for part in (limit_sql, offset_sql) if part)

    def parameter_placeholder(self, position: int | None = None) -> str:
        return self.placeholder

    def returning_clause(self, columns: Sequence[str]) -> str:
        if not columns or not self.capabilities.supports_returning:
            return ""
        return "RETURNING " + ", ".join(self.quote_identifier(column) for column in columns)

    def default_values_insert(self, table_sql: str) -> str:
        """
        INSERT for a row that takes every column from its default.
        """
        return f"INSERT INTO {table_sql} DEFAULT VALUES"

    def savepoint(self, name: str) -> str:
        return f"SAVEPOINT {self.quote_identifier(name)}"

    def release_savepoint(self, name: str) -> str:
        return f"RELEASE SAVEPOINT {self.quote_identifier(name)}"

    def rollback_to_savepoint(self, name: str) -> str:
        return f"ROLLBACK TO SAVEPOINT {self.quote_identifier(name)}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
