"""
Unit of work: an ordered plan of record writes executed all-or-nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import List, Optional

from ..errors import TransactionError
from ..mapper.record import Record
from ..utils import get_logger
from .transaction import TransactionManager


class TransactionState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(eq=False)
class Work:
    """
    One planned write. ``result`` stays ``None`` until the work has run.
    """

    label: str
    operation: str
    record: Record
    invoked: bool = False
    result: Optional[bool] = None
    error: Optional[Exception] = None

    @property
    def pending(self) -> bool:
        return not self.invoked

    def __call__(self) -> bool:
        mapper = self.record.mapper
        self.invoked = True
        try:
            self.result = getattr(mapper, self.operation)(self.record)
        except Exception as exc:
            self.error = exc
            raise
        return self.result


class Transaction:
    """
    Queue insert/update/delete operations, then run them with :meth:`exec`.

    Work runs strictly in the order it was planned inside one physical
    transaction, or a savepoint when the manager already has one open. The
    first failure stops execution and rolls everything back, including the
    in-memory state of rows touched so far. ``exec`` never raises for a
    failed write; inspect :meth:`get_failed` and :meth:`get_exception`.
    A transaction runs once.
    """

    def __init__(self, manager: TransactionManager) -> None:
        self._manager = manager
        self._plan: List[Work] = []
        self._completed: List[Work] = []
        self._failed: Optional[Work] = None
        self._exception: Optional[Exception] = None
        self.state = TransactionState.PENDING
        self.logger = get_logger("persistence.unit_of_work")

    # ------------------------------------------------------------------ #
    # Planning
    # ------------------------------------------------------------------ #
    def insert(self, record: Record) -> Work:
        return self._plan_work("insert", record)

    def update(self, record: Record) -> Work:
        return self._plan_work("update", record)

    def delete(self, record: Record) -> Work:
        return self._plan_work("delete", record)

    def _plan_work(self, operation: str, record: Record) -> Work:
        if self.state is not TransactionState.PENDING:
            raise TransactionError(f"Cannot plan work on a {self.state.value} transaction.")
        if not isinstance(record, Record):
            raise TypeError(f"Expected a Record, got {type(record).__name__}")
        label = f"{operation} {record.mapper.name} #{len(self._plan)}"
        work = Work(label, operation, record)
        self._plan.append(work)
        return work

    def get_plan(self) -> List[Work]:
        return list(self._plan)

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def exec(self) -> bool:
        if self.state is not TransactionState.PENDING:
            raise TransactionError(f"Transaction already {self.state.value}; create a new one.")
        self.state = TransactionState.RUNNING

        try:
            self._manager.begin()
        except Exception as exc:
            self.logger.warning("Could not begin transaction: %s", exc)
            self._exception = exc
            self.state = TransactionState.ROLLED_BACK
            return False

        for work in self._plan:
            row = work.record.row
            gateway = work.record.mapper.gateway
            self._manager.on_rollback(partial(gateway.restore, row, row.memento()))
            try:
                work()
            except Exception as exc:
                self.logger.warning("%s failed: %s", work.label, exc)
                self._failed = work
                self._exception = exc
                self._rollback()
                return False
            self._completed.append(work)

        try:
            self._manager.commit()
        except Exception as exc:
            self.logger.warning("Commit failed: %s", exc)
            self._exception = exc
            self._rollback()
            return False

        self.state = TransactionState.COMMITTED
        self.logger.debug("Transaction committed %d work item(s)", len(self._completed))
        return True

    def _rollback(self) -> None:
        try:
            self._manager.rollback()
        except Exception:
            # the triggering exception stays the one reported to the caller
            self.logger.exception("Rollback failed")
        self.state = TransactionState.ROLLED_BACK

    # ------------------------------------------------------------------ #
    # Results
    # ------------------------------------------------------------------ #
    def get_completed(self) -> List[Work]:
        return list(self._completed)

    def get_failed(self) -> Optional[Work]:
        return self._failed

    def get_exception(self) -> Optional[Exception]:
        return self._exception
