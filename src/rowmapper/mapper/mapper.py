"""
Data mapper returning Record and RecordSet objects for one table.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from ..adapters.base import DatabaseAdapter
from ..errors import RowMapperError
from ..hooks import HookDispatcher
from ..table.gateway import TableGateway
from ..table.identity_map import IdentityMap
from ..table.metadata import Table
from ..table.row import Row
from ..utils import get_logger
from .record import Record, RecordSet, Related
from .select import MapperSelect


class Mapper:
    """
    Maps one table's rows to Records.

    Record and RecordSet classes, related field names and hooks are handed
    in explicitly when the mapper is built. Direct ``insert``, ``update`` and
    ``delete`` calls raise on failure; wrap them in a
    :class:`~rowmapper.persistence.unit_of_work.Transaction` for
    all-or-nothing behaviour.
    """

    def __init__(
        self,
        gateway: TableGateway,
        *,
        name: Optional[str] = None,
        record_class: Type[Record] = Record,
        record_set_class: Type[RecordSet] = RecordSet,
        related: Sequence[str] = (),
        hooks: Optional[HookDispatcher] = None,
    ) -> None:
        self.gateway = gateway
        self.name = name or gateway.table.name
        self.record_class = record_class
        self.record_set_class = record_set_class
        self.related_fields = tuple(related)
        self.hooks = hooks if hooks is not None else HookDispatcher()
        self.logger = get_logger("mapper")
        for field in self.related_fields:
            if gateway.table.has_column(field):
                raise RowMapperError(
                    f"Related field '{field}' collides with a column of '{gateway.table.name}'."
                )

    @property
    def table(self) -> Table:
        return self.gateway.table

    @property
    def adapter(self) -> DatabaseAdapter:
        return self.gateway.adapter

    @property
    def identity_map(self) -> IdentityMap:
        return self.gateway.identity_map

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #
    def fetch_record(self, primary_val: Any) -> Optional[Record]:
        row = self.gateway.get_identified_row(primary_val)
        if row is not None:
            return self._new_record_from_row(row)
        identity = self.gateway.get_primary_identity(primary_val)
        return self.fetch_record_by(**identity.as_dict())

    def fetch_record_by(self, **where: Any) -> Optional[Record]:
        return self.select(**where).fetch_record()

    def fetch_record_set(self, primary_vals: Iterable[Any]) -> RecordSet:
        rows = self.gateway.identify_or_select_rows(primary_vals)
        return self._new_record_set_from_rows(rows)

    def fetch_record_set_by(self, **where: Any) -> RecordSet:
        return self.select(**where).fetch_record_set()

    def select(self, **where: Any) -> MapperSelect:
        return MapperSelect(self, self.gateway.select(where))

    def get_selected_record(self, cols: Mapping[str, Any]) -> Record:
        return self._new_record_from_row(self.gateway.get_identified_or_selected_row(cols))

    def get_selected_record_set(self, data: Iterable[Mapping[str, Any]]) -> RecordSet:
        rows = [self.gateway.get_identified_or_selected_row(cols) for cols in data]
        return self._new_record_set_from_rows(rows)

    # ------------------------------------------------------------------ #
    # Writing
    # ------------------------------------------------------------------ #
    def insert(self, record: Record) -> bool:
        row = self._row_of(record)
        self.hooks.fire("before_insert", record, mapper=self)
        insert = self.gateway.new_insert(row)
        self.hooks.fire("modify_insert", record, mapper=self, statement=insert)
        result = self.gateway.perform_insert(row, insert)
        self.hooks.fire("after_insert", record, mapper=self, statement=insert)
        return result

    def update(self, record: Record) -> bool:
        """
        Write the record's dirty columns. Returns ``False`` without touching
        storage when there is nothing to write.
        """
        row = self._row_of(record)
        self.hooks.fire("before_update", record, mapper=self)
        update = self.gateway.new_update(row)
        self.hooks.fire("modify_update", record, mapper=self, statement=update)
        result = self.gateway.perform_update(row, update)
        if result:
            self.hooks.fire("after_update", record, mapper=self, statement=update)
        else:
            self.logger.debug("Nothing to update for %r", row.identity)
        return result

    def delete(self, record: Record) -> bool:
        """
        Delete the record's row. Returns ``False`` if storage no longer had it.
        """
        row = self._row_of(record)
        self.hooks.fire("before_delete", record, mapper=self)
        delete = self.gateway.new_delete(row)
        self.hooks.fire("modify_delete", record, mapper=self, statement=delete)
        result = self.gateway.perform_delete(row, delete)
        if result:
            self.hooks.fire("after_delete", record, mapper=self, statement=delete)
        return result

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def new_record(self, cols: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Record:
        values: Dict[str, Any] = dict(cols or {})
        values.update(kwargs)
        related = {name: values.pop(name) for name in list(values) if name in self.related_fields}
        record = self._new_record_from_row(self.gateway.new_row(values))
        for name, value in related.items():
            record.related.set(name, value)
        self.hooks.fire("modify_new_record", record, mapper=self)
        return record

    def new_record_set(self, records: Iterable[Record] = ()) -> RecordSet:
        return self.record_set_class(records, new_record=self.new_record)

    def _new_record_from_row(self, row: Row) -> Record:
        return self.record_class(self, row, Related(self.related_fields))

    def _new_record_set_from_rows(self, rows: List[Row]) -> RecordSet:
        return self.new_record_set(self._new_record_from_row(row) for row in rows)

    def _row_of(self, record: Record) -> Row:
        row = record.row
        if row.table is not self.table:
            raise RowMapperError(
                f"Mapper '{self.name}' cannot write a row of table '{row.table.name}'."
            )
        return row

    def __repr__(self) -> str:
        return f"<Mapper {self.name}>"
