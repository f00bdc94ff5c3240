"""
Table metadata and the registry that hands it to gateways.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from ..errors import TableConfigurationError, UnknownColumnError


@dataclass(frozen=True, init=False)
class Table:
    """
    Read-only description of one table: column order, primary key,
    autoincrement column and per-column defaults for new rows.
    """

    name: str
    columns: Tuple[str, ...]
    primary_key: Tuple[str, ...]
    autoincrement: Optional[str] = None
    defaults: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __init__(
        self,
        name: str,
        columns: Sequence[str],
        primary_key: str | Sequence[str],
        *,
        autoincrement: Optional[str] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if isinstance(primary_key, str):
            primary_key = (primary_key,)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "columns", tuple(columns))
        object.__setattr__(self, "primary_key", tuple(primary_key))
        object.__setattr__(self, "autoincrement", autoincrement)
        object.__setattr__(self, "defaults", MappingProxyType(dict(defaults or {})))
        self._validate()

    def _validate(self) -> None:
        if not self.name:
            raise TableConfigurationError("Table name must not be empty.")
        if len(set(self.columns)) != len(self.columns):
            raise TableConfigurationError(f"Duplicate column names on table '{self.name}'.")
        if not self.primary_key:
            raise TableConfigurationError(f"Table '{self.name}' has no primary key.")
        for column in self.primary_key:
            if column not in self.columns:
                raise TableConfigurationError(
                    f"Primary key column '{column}' is not a column of table '{self.name}'."
                )
        if self.autoincrement is not None:
            if self.autoincrement not in self.primary_key:
                raise TableConfigurationError(
                    f"Autoincrement column '{self.autoincrement}' must be part of the primary key."
                )
            if self.is_composite:
                raise TableConfigurationError(
                    f"Table '{self.name}' cannot autoincrement a composite primary key."
                )
        for column in self.defaults:
            if column not in self.columns:
                raise TableConfigurationError(
                    f"Default given for unknown column '{column}' on table '{self.name}'."
                )

    @property
    def is_composite(self) -> bool:
        return len(self.primary_key) > 1

    def has_column(self, column: str) -> bool:
        return column in self.columns

    def require_column(self, column: str) -> str:
        if column not in self.columns:
            raise UnknownColumnError(self.name, column)
        return column

    def get_default(self) -> Dict[str, Any]:
        """
        Column values for a brand-new row, in column order.
        """
        return {column: self.defaults.get(column) for column in self.columns}


class TableRegistry:
    """
    Explicit table lookup built once and passed to the components that need it.
    """

    def __init__(self, tables: Iterable[Table] = ()) -> None:
        self._tables: Dict[str, Table] = {}
        for table in tables:
            self.register(table)

    def register(self, table: Table) -> Table:
        existing = self._tables.get(table.name)
        if existing is not None and existing != table:
            raise TableConfigurationError(f"Table '{table.name}' is already registered.")
        self._tables[table.name] = table
        return table

    def get(self, name: str) -> Table:
        try:
            return self._tables[name]
        except KeyError as exc:
            raise TableConfigurationError(f"Unknown table '{name}'.") from exc

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)
