"""
Session facade coordinating adapters, mappers and transactions.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Optional, Sequence, Type

from ..adapters.base import ConnectionConfig, DatabaseAdapter
from ..config import Settings
from ..dialects.base import Dialect
from ..hooks import HookDispatcher
from ..mapper import Mapper, MapperLocator, MapperSelect, Record, RecordSet
from ..table import IdentityMap, Table, TableGateway, TableRegistry
from ..utils import configure_logging, correlation_scope, get_logger, redact_params, time_call
from .transaction import TransactionManager
from .unit_of_work import Transaction


class Session:
    """
    Entry point holding the registered tables and mappers of one connection.

    Mappers are registered explicitly with :meth:`register`; each gets its own
    identity map, which lives as long as the session does.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        connection_config: Optional[ConnectionConfig] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        configure_logging(self.settings.log_level)
        self.adapter = adapter
        self.dialect: Dialect = adapter.dialect
        self.connection_config = connection_config or adapter.default_config()
        self.tables = TableRegistry()
        self.mappers = MapperLocator()
        self.hooks = HookDispatcher()
        self.transaction_manager = TransactionManager(adapter, self.dialect)
        self._exception: Optional[Exception] = None
        self.logger = get_logger("persistence.session")
        self.adapter.connect(self.connection_config)
        self.logger.debug("Session opened on %s", self.connection_config.descriptive_label())

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        for mapper in self.mappers:
            mapper.identity_map.clear()
        self.adapter.close()
        self.logger.debug("Session closed")

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    def register(
        self,
        table: Table,
        *,
        name: Optional[str] = None,
        record_class: Type[Record] = Record,
        record_set_class: Type[RecordSet] = RecordSet,
        related: Sequence[str] = (),
        hooks: Optional[HookDispatcher] = None,
    ) -> Mapper:
        """
        Register ``table`` and build its mapper. Session-wide hooks run before
        the mapper's own.
        """
        self.tables.register(table)
        gateway = TableGateway(
            table,
            self.adapter,
            identity_map=IdentityMap(strict=self.settings.strict_identity_map),
        )
        if hooks is None:
            hooks = HookDispatcher(parent=self.hooks)
        elif hooks.parent is None:
            hooks.parent = self.hooks
        mapper = Mapper(
            gateway,
            name=name,
            record_class=record_class,
            record_set_class=record_set_class,
            related=related,
            hooks=hooks,
        )
        return self.mappers.register(mapper.name, mapper)

    def mapper(self, name: str) -> Mapper:
        return self.mappers.get(name)

    # ------------------------------------------------------------------ #
    # Records
    # ------------------------------------------------------------------ #
    def new_record(self, name: str, **cols: Any) -> Record:
        return self.mapper(name).new_record(cols)

    def new_record_set(self, name: str, records: Iterable[Record] = ()) -> RecordSet:
        return self.mapper(name).new_record_set(records)

    def fetch_record(self, name: str, primary_val: Any) -> Optional[Record]:
        return self.mapper(name).fetch_record(primary_val)

    def fetch_record_by(self, name: str, **where: Any) -> Optional[Record]:
        return self.mapper(name).fetch_record_by(**where)

    def fetch_record_set(self, name: str, primary_vals: Iterable[Any]) -> RecordSet:
        return self.mapper(name).fetch_record_set(primary_vals)

    def fetch_record_set_by(self, name: str, **where: Any) -> RecordSet:
        return self.mapper(name).fetch_record_set_by(**where)

    def select(self, name: str, **where: Any) -> MapperSelect:
        return self.mapper(name).select(**where)

    # ------------------------------------------------------------------ #
    # Writing
    # ------------------------------------------------------------------ #
    def new_transaction(self) -> Transaction:
        return Transaction(self.transaction_manager)

    def insert(self, record: Record) -> bool:
        return self._transact("insert", record)

    def update(self, record: Record) -> bool:
        return self._transact("update", record)

    def delete(self, record: Record) -> bool:
        return self._transact("delete", record)

    def get_exception(self) -> Optional[Exception]:
        """
        Exception raised by the last failed one-off insert/update/delete.
        """
        return self._exception

    def _transact(self, operation: str, record: Record) -> bool:
        self._exception = None
        transaction = self.new_transaction()
        getattr(transaction, operation)(record)
        if transaction.exec():
            return bool(transaction.get_completed()[0].result)
        self._exception = transaction.get_exception()
        return False

    # ------------------------------------------------------------------ #
    @contextmanager
    def transaction(self):
        """
        Open a transaction; transactions executed inside it use savepoints.
        Log records emitted inside the block share one correlation id.
        """
        with correlation_scope(), self.transaction_manager.transaction():
            yield self

    def execute(self, sql: str, params: Iterable[Any] | None = None):
        param_list = list(params or [])
        with time_call(
            "session.execute",
            self.logger,
            sql=sql,
            params=redact_params(param_list),
            threshold_ms=self.settings.slow_query_ms,
        ):
            return self.adapter.execute(sql, param_list)
