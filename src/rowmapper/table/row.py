"""
In-memory rows and their change-status state machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from ..errors import ImmutableRowError
from .identity import RowIdentity
from .metadata import Table


class RowStatus(str, Enum):
    """
    ``NEW`` -> ``CLEAN`` <-> ``DIRTY`` -> ``DELETED``.
    """

    NEW = "new"
    CLEAN = "clean"
    DIRTY = "dirty"
    DELETED = "deleted"


_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class RowMemento:
    status: RowStatus
    values: Mapping[str, Any]
    initial: Mapping[str, Any]


class Row:
    """
    Column values for one table row plus the snapshot last known to match storage.

    Columns may be read as attributes or items. Columns missing from a
    partial select read as ``None``; use :meth:`is_initialized` to tell them
    apart from stored nulls.
    """

    __slots__ = ("_table", "_values", "_initial", "_status")

    def __init__(
        self,
        table: Table,
        values: Optional[Mapping[str, Any]] = None,
        *,
        status: RowStatus = RowStatus.NEW,
    ) -> None:
        object.__setattr__(self, "_table", table)
        object.__setattr__(self, "_values", {})
        object.__setattr__(self, "_initial", _EMPTY)
        object.__setattr__(self, "_status", RowStatus.NEW)
        for column, value in (values or {}).items():
            table.require_column(column)
            self._values[column] = value
        if status is RowStatus.CLEAN:
            self._mark_clean()
        elif status is not RowStatus.NEW:
            raise ValueError(f"Rows can only be created NEW or CLEAN, not {status.value}.")

    # ------------------------------------------------------------------ #
    # Column access
    # ------------------------------------------------------------------ #
    @property
    def table(self) -> Table:
        return self._table

    @property
    def status(self) -> RowStatus:
        return self._status

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or not self._table.has_column(name):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return self._values.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in Row.__slots__:
            raise AttributeError(f"Cannot replace internal attribute {name!r}")
        self.set(name, value)

    def __getitem__(self, column: str) -> Any:
        return self.get(column)

    def __setitem__(self, column: str, value: Any) -> None:
        self.set(column, value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def get(self, column: str) -> Any:
        self._table.require_column(column)
        return self._values.get(column)

    def set(self, column: str, value: Any) -> None:
        self._table.require_column(column)
        if self._status is RowStatus.DELETED:
            raise ImmutableRowError(
                f"Cannot modify column '{column}' of a deleted row in '{self._table.name}'."
            )
        unchanged = column in self._values and self._values[column] == value
        if unchanged:
            return
        if column in self._table.primary_key and self._status is not RowStatus.NEW:
            raise ImmutableRowError(
                f"Primary key column '{column}' of a stored row in '{self._table.name}' is immutable."
            )
        self._values[column] = value
        if self._status is RowStatus.CLEAN:
            object.__setattr__(self, "_status", RowStatus.DIRTY)

    def is_initialized(self, column: str) -> bool:
        self._table.require_column(column)
        return column in self._values

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    # ------------------------------------------------------------------ #
    # Change tracking
    # ------------------------------------------------------------------ #
    @property
    def identity(self) -> RowIdentity:
        return RowIdentity.from_values(self._table.primary_key, self._values)

    def get_initial(self) -> Mapping[str, Any]:
        return self._initial

    def get_dirty_columns(self) -> Dict[str, Any]:
        """
        Columns whose current value differs from the last CLEAN snapshot, in column order.
        """
        dirty: Dict[str, Any] = {}
        for column in self._table.columns:
            if column not in self._values:
                continue
            value = self._values[column]
            if column not in self._initial or self._initial[column] != value:
                dirty[column] = value
        return dirty

    def has_dirty_columns(self) -> bool:
        return bool(self.get_dirty_columns())

    def memento(self) -> RowMemento:
        return RowMemento(self._status, dict(self._values), self._initial)

    def restore(self, memento: RowMemento) -> None:
        object.__setattr__(self, "_values", dict(memento.values))
        object.__setattr__(self, "_initial", memento.initial)
        object.__setattr__(self, "_status", memento.status)

    # Status transitions are driven by the identity map.
    def _mark_clean(self) -> None:
        object.__setattr__(self, "_initial", MappingProxyType(dict(self._values)))
        object.__setattr__(self, "_status", RowStatus.CLEAN)

    def _mark_deleted(self) -> None:
        object.__setattr__(self, "_status", RowStatus.DELETED)

    def __repr__(self) -> str:
        parts = ", ".join(f"{column}={value!r}" for column, value in self._values.items())
        return f"<Row {self._table.name} [{self._status.value}] {parts}>"
