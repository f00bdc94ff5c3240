"""
Identity map ensuring a single in-memory Row instance per primary key.
"""

from __future__ import annotations

from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

from ..errors import CannotInsertError, CannotUpdateError, IdentityConflictError
from ..utils import get_logger
from .identity import RowIdentity
from .row import Row, RowStatus


class IdentityMap:
    """
    Stores rows of one table keyed by :class:`RowIdentity`.

    A registered identity always resolves to the same Row object. When
    ``strict`` is true, registering a different Row under a taken identity
    raises :class:`IdentityConflictError`; otherwise the existing Row wins
    and is returned to the caller.

    A DELETED row gives way to a new row with the same identity, since
    storage may hand its key out again. The displaced row is put back if the
    newcomer is removed, which is what undoing an insert does.
    """

    def __init__(self, *, strict: bool = True) -> None:
        self.strict = strict
        self._rows: Dict[RowIdentity, Row] = {}
        self._displaced: Dict[RowIdentity, Row] = {}
        self._lock = RLock()
        self.logger = get_logger("table.identity_map")

    # ------------------------------------------------------------------ #
    # Lookup and registration
    # ------------------------------------------------------------------ #
    def get_row(self, identity: RowIdentity) -> Optional[Row]:
        with self._lock:
            return self._rows.get(identity)

    def set_row(self, identity: RowIdentity, row: Row) -> Row:
        if not identity.is_complete():
            # rows without a full key are not yet addressable
            return row
        with self._lock:
            existing = self._rows.get(identity)
            if existing is None:
                self._rows[identity] = row
                return row
            if existing is row:
                return row
            if existing.status is RowStatus.DELETED:
                self._displaced[identity] = existing
                self._rows[identity] = row
                self.logger.debug("Reusing deleted identity %r", identity)
                return row
            if self.strict:
                raise IdentityConflictError(f"{identity!r} is already mapped to another row.")
            self.logger.warning("Ignoring second row registered for %r", identity)
            return existing

    def get_row_identity(self, row: Row) -> RowIdentity:
        return row.identity

    def remove(self, row: Row) -> None:
        identity = row.identity
        with self._lock:
            if self._rows.get(identity) is not row:
                return
            displaced = self._displaced.pop(identity, None)
            if displaced is None:
                del self._rows[identity]
            else:
                self._rows[identity] = displaced

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
            self._displaced.clear()

    def values(self) -> List[Row]:
        with self._lock:
            return list(self._rows.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Row):
            identity = item.identity
            with self._lock:
                return self._rows.get(identity) is item
        with self._lock:
            return item in self._rows

    # ------------------------------------------------------------------ #
    # Status transitions
    # ------------------------------------------------------------------ #
    def set_row_inserted(self, row: Row) -> None:
        """
        NEW -> CLEAN; registers the row under its post-insert identity.
        """
        if row.status is not RowStatus.NEW:
            raise CannotInsertError(f"Expected a NEW row, got {row.status.value}.")
        row._mark_clean()
        self.set_row(row.identity, row)

    def set_row_updated(self, row: Row) -> None:
        """
        DIRTY -> CLEAN, refreshing the snapshot used for dirty checks.
        """
        if row.status not in (RowStatus.DIRTY, RowStatus.CLEAN):
            raise CannotUpdateError(f"Expected a DIRTY row, got {row.status.value}.")
        row._mark_clean()

    def set_row_deleted(self, row: Row) -> None:
        row._mark_deleted()

    def is_initialized(self, row: Row, column: str) -> bool:
        return row.is_initialized(column)

    def get_initial(self, row: Row) -> Mapping[str, Any]:
        return row.get_initial()
