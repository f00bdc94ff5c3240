"""
Transaction manager handling nested transactions through savepoints.
"""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Generator, List, Optional

from ..adapters.base import DatabaseAdapter
from ..dialects.base import Dialect
from ..errors import TransactionError
from ..utils import get_logger

UndoCallback = Callable[[], None]


@dataclass
class _Level:
    savepoint: Optional[str]
    undo: List[UndoCallback] = field(default_factory=list)


class TransactionManager:
    """
    Coordinates begin/commit/rollback, opening a savepoint when a
    transaction is already active.

    Callbacks registered with :meth:`on_rollback` run in reverse order when
    the level they were registered at rolls back. Releasing a savepoint hands
    its callbacks to the enclosing level; committing the outermost level
    discards them.
    """

    def __init__(self, adapter: DatabaseAdapter, dialect: Optional[Dialect] = None) -> None:
        self.adapter = adapter
        self.dialect = dialect or adapter.dialect
        self._stack: List[_Level] = []
        self._savepoint_counter = itertools.count(1)
        self.logger = get_logger("persistence.transaction")

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def in_transaction(self) -> bool:
        return bool(self._stack)

    def begin(self) -> None:
        if self.depth == 0:
            self.adapter.begin()
            self._stack.append(_Level(None))
            self.logger.debug("Transaction started")
            return

        if not self.dialect.capabilities.supports_savepoints:
            raise TransactionError("Nested transactions not supported by current dialect.")

        name = self._next_savepoint_name()
        self.adapter.execute(self.dialect.savepoint(name))
        self._stack.append(_Level(name))
        self.logger.debug("Savepoint %s created", name)

    def commit(self) -> None:
        if self.depth == 0:
            raise TransactionError("No active transaction to commit.")

        level = self._stack[-1]
        if level.savepoint is None:
            self.adapter.commit()
            self._stack.pop()
            self.logger.debug("Transaction committed")
            return

        self.adapter.execute(self.dialect.release_savepoint(level.savepoint))
        self._stack.pop()
        self._stack[-1].undo.extend(level.undo)
        self.logger.debug("Savepoint %s released", level.savepoint)

    def rollback(self) -> None:
        if self.depth == 0:
            raise TransactionError("No active transaction to roll back.")

        level = self._stack.pop()
        try:
            if level.savepoint is None:
                self.adapter.rollback()
                self.logger.debug("Transaction rolled back")
            else:
                self.adapter.execute(self.dialect.rollback_to_savepoint(level.savepoint))
                self.adapter.execute(self.dialect.release_savepoint(level.savepoint))
                self.logger.debug("Rolled back to savepoint %s", level.savepoint)
        finally:
            for callback in reversed(level.undo):
                callback()

    def on_rollback(self, callback: UndoCallback) -> None:
        if self.depth == 0:
            raise TransactionError("No active transaction to attach a rollback callback to.")
        self._stack[-1].undo.append(callback)

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        self.begin()
        try:
            yield
        except Exception:
            self.rollback()
            raise
        else:
            self.commit()

    def _next_savepoint_name(self) -> str:
        return f"sp_{next(self._savepoint_counter)}"
