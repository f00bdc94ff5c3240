"""
Table gateway: resolves query results into Rows through the identity map and
decides which writes a Row needs.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..adapters.base import DatabaseAdapter, rows_as_dicts
from ..errors import (
    CannotDeleteError,
    CannotInsertError,
    CannotUpdateError,
    UnexpectedRowCountError,
)
from ..utils import get_logger
from .identity import RowIdentity
from .identity_map import IdentityMap
from .metadata import Table
from .row import Row, RowMemento, RowStatus
from .statements import Delete, Insert, Select, Update


class TableGateway:
    """
    Owns the identity map of one table and talks to storage through an adapter.
    """

    def __init__(
        self,
        table: Table,
        adapter: DatabaseAdapter,
        *,
        identity_map: Optional[IdentityMap] = None,
    ) -> None:
        self.table = table
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.identity_map = identity_map if identity_map is not None else IdentityMap()
        self.logger = get_logger("table.gateway")

    # ------------------------------------------------------------------ #
    # Row construction and identification
    # ------------------------------------------------------------------ #
    def new_row(self, cols: Optional[Mapping[str, Any]] = None) -> Row:
        values = self.table.get_default()
        for column, value in (cols or {}).items():
            self.table.require_column(column)
            values[column] = value
        return Row(self.table, values)

    def new_selected_row(self, cols: Mapping[str, Any]) -> Row:
        return Row(self.table, cols, status=RowStatus.CLEAN)

    def get_primary_identity(self, primary_val: Any) -> RowIdentity:
        return RowIdentity.from_primary_val(self.table.primary_key, primary_val)

    def get_identified_row(self, primary_val: Any) -> Optional[Row]:
        row = self.identity_map.get_row(self.get_primary_identity(primary_val))
        if row is None or row.status is RowStatus.DELETED:
            return None
        return row

    def get_identified_or_selected_row(self, cols: Mapping[str, Any]) -> Row:
        """
        Return the mapped Row for the selected columns' identity, or map a new
        CLEAN Row built from them. Mapped rows keep their in-memory values.
        """
        missing = [column for column in self.table.primary_key if column not in cols]
        if missing:
            raise ValueError(
                f"Selected columns for '{self.table.name}' lack primary key column(s) {missing}."
            )
        identity = RowIdentity.from_values(self.table.primary_key, cols)
        existing = self.identity_map.get_row(identity)
        if existing is not None and existing.status is not RowStatus.DELETED:
            return existing
        # a DELETED row under this key gives way to the stored one
        return self.identity_map.set_row(identity, self.new_selected_row(cols))

    def identify_or_select_rows(self, primary_vals: Iterable[Any]) -> List[Row]:
        """
        Resolve many primary values, selecting only the ones not already
        mapped. Rows come back in the order requested; unknown keys are skipped.
        """
        identities = [self.get_primary_identity(value) for value in primary_vals]
        found: Dict[RowIdentity, Row] = {}
        missing: List[RowIdentity] = []
        for identity in identities:
            row = self.identity_map.get_row(identity)
            if row is not None and row.status is not RowStatus.DELETED:
                found[identity] = row
            elif identity not in missing:
                missing.append(identity)

        if missing:
            select = self.select().where_identities(missing)
            for cols in self.fetch_all(select):
                row = self.get_identified_or_selected_row(cols)
                found[row.identity] = row

        return [found[identity] for identity in identities if identity in found]

    # ------------------------------------------------------------------ #
    # Reading
    # ------------------------------------------------------------------ #
    def select(self, where_equals: Optional[Mapping[str, Any]] = None) -> Select:
        select = Select(self.table, self.dialect)
        if where_equals:
            select.where_equals(where_equals)
        return select

    def fetch_one(self, select: Select) -> Optional[Dict[str, Any]]:
        cursor = self.adapter.execute(*select.compile())
        row = cursor.fetchone()
        if row is None:
            return None
        return rows_as_dicts(cursor, [row])[0]

    def fetch_all(self, select: Select) -> List[Dict[str, Any]]:
        cursor = self.adapter.execute(*select.compile())
        return rows_as_dicts(cursor, cursor.fetchall())

    def fetch_count(self, select: Select) -> int:
        cursor = self.adapter.execute(*select.count_statement())
        return int(cursor.fetchone()[0])

    # ------------------------------------------------------------------ #
    # Write decisions
    # ------------------------------------------------------------------ #
    def new_insert(self, row: Row) -> Insert:
        if row.status is not RowStatus.NEW:
            raise CannotInsertError(
                f"Cannot insert a {row.status.value} row into '{self.table.name}'."
            )
        cols = {column: value for column, value in row.to_dict().items() if value is not None}
        ordered = {column: cols[column] for column in self.table.columns if column in cols}
        returning: List[str] = []
        autoinc = self.table.autoincrement
        if autoinc and autoinc not in ordered and self.dialect.capabilities.supports_returning:
            returning.append(autoinc)
        return Insert(self.table, self.dialect, ordered, returning=returning)

    def new_update(self, row: Row) -> Update:
        """
        Build an UPDATE of the dirty columns. A CLEAN row, or a DIRTY row
        whose changes were reverted, yields an Update without columns.
        """
        if row.status not in (RowStatus.DIRTY, RowStatus.CLEAN):
            raise CannotUpdateError(
                f"Cannot update a {row.status.value} row in '{self.table.name}'."
            )
        cols = {
            column: value
            for column, value in row.get_dirty_columns().items()
            if column not in self.table.primary_key
        }
        return Update(self.table, self.dialect, cols, row.identity)

    def new_delete(self, row: Row) -> Delete:
        if row.status in (RowStatus.NEW, RowStatus.DELETED):
            raise CannotDeleteError(
                f"Cannot delete a {row.status.value} row from '{self.table.name}'."
            )
        identity = row.identity
        if not identity.is_complete():
            raise CannotDeleteError(
                f"Cannot delete from '{self.table.name}' without a complete primary key."
            )
        return Delete(self.table, self.dialect, identity)

    # ------------------------------------------------------------------ #
    # Performing writes
    # ------------------------------------------------------------------ #
    def perform_insert(self, row: Row, insert: Insert) -> bool:
        cursor = self.adapter.execute(*insert.compile())
        count = cursor.rowcount
        if count != 1:
            raise UnexpectedRowCountError(count, operation=f"insert into {self.table.name}")
        autoinc = self.table.autoincrement
        if autoinc and row.get(autoinc) is None:
            row.set(autoinc, self.adapter.last_insert_id(cursor, self.table.name, autoinc))
        self.identity_map.set_row_inserted(row)
        return True

    def perform_update(self, row: Row, update: Update) -> bool:
        if not update.has_cols():
            self.identity_map.set_row_updated(row)
            return False
        cursor = self.adapter.execute(*update.compile())
        count = cursor.rowcount
        if count != 1:
            raise UnexpectedRowCountError(count, operation=f"update {self.table.name}")
        self.identity_map.set_row_updated(row)
        return True

    def perform_delete(self, row: Row, delete: Delete) -> bool:
        cursor = self.adapter.execute(*delete.compile())
        count = cursor.rowcount
        if count > 1:
            raise UnexpectedRowCountError(
                count, expected="0 or 1", operation=f"delete from {self.table.name}"
            )
        self.identity_map.set_row_deleted(row)
        if count == 0:
            self.logger.info("Delete of %r matched no rows", delete.identity)
            return False
        return True

    def insert(self, row: Row) -> bool:
        return self.perform_insert(row, self.new_insert(row))

    def update(self, row: Row) -> bool:
        return self.perform_update(row, self.new_update(row))

    def delete(self, row: Row) -> bool:
        return self.perform_delete(row, self.new_delete(row))

    # ------------------------------------------------------------------ #
    def restore(self, row: Row, memento: RowMemento) -> None:
        """
        Put a row back to an earlier state after its write was rolled back.
        """
        if memento.status is RowStatus.NEW:
            self.identity_map.remove(row)
        row.restore(memento)
