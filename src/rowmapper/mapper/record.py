"""
Records and record sets: application-facing wrappers around Rows.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    MutableSequence,
    Optional,
    Union,
    overload,
)

from ..table.row import Row

if TYPE_CHECKING:
    from .mapper import Mapper


class Related:
    """
    Named slots for related data attached to a Record.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._values: Dict[str, Any] = dict.fromkeys(names)

    def has(self, name: str) -> bool:
        return name in self._values

    def get(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError as exc:
            raise AttributeError(f"No related field '{name}'") from exc

    def set(self, name: str, value: Any) -> None:
        if name not in self._values:
            raise AttributeError(f"No related field '{name}'")
        self._values[name] = value

    def names(self) -> List[str]:
        return list(self._values)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for name, value in self._values.items():
            if isinstance(value, (Record, RecordSet)):
                value = value.to_dict() if isinstance(value, Record) else value.to_list()
            result[name] = value
        return result


class Record:
    """
    Composes a Row with related data. Column names and related names are
    both readable and writable as attributes.
    """

    _internal = ("_mapper", "_row", "_related")

    def __init__(self, mapper: "Mapper", row: Row, related: Optional[Related] = None) -> None:
        object.__setattr__(self, "_mapper", mapper)
        object.__setattr__(self, "_row", row)
        object.__setattr__(self, "_related", related if related is not None else Related())

    @property
    def mapper(self) -> "Mapper":
        return self._mapper

    @property
    def row(self) -> Row:
        return self._row

    @property
    def related(self) -> Related:
        return self._related

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if self._row.table.has_column(name):
            return self._row.get(name)
        if self._related.has(name):
            return self._related.get(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._internal:
            raise AttributeError(f"Cannot replace internal attribute {name!r}")
        if self._row.table.has_column(name):
            self._row.set(name, value)
        elif self._related.has(name):
            self._related.set(name, value)
        else:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def has(self, name: str) -> bool:
        return self._row.table.has_column(name) or self._related.has(name)

    def to_dict(self) -> Dict[str, Any]:
        data = self._row.to_dict()
        data.update(self._related.to_dict())
        return data

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._row!r}>"


def _matches(record: Record, where: Dict[str, Any]) -> bool:
    return all(getattr(record, name) == value for name, value in where.items())


class RecordSet(MutableSequence[Record]):
    """
    Ordered collection of Records. An empty set is falsy and is what set
    fetches return when nothing matched.
    """

    def __init__(
        self,
        records: Iterable[Record] = (),
        *,
        new_record: Optional[Callable[..., Record]] = None,
    ) -> None:
        self._records: List[Record] = []
        self._new_record = new_record
        for record in records:
            self.append(record)

    @staticmethod
    def _check(record: Any) -> Record:
        if not isinstance(record, Record):
            raise TypeError(f"RecordSet members must be Records, got {type(record).__name__}")
        return record

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> "RecordSet": ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Record, "RecordSet"]:
        if isinstance(index, slice):
            return type(self)(self._records[index], new_record=self._new_record)
        return self._records[index]

    def __setitem__(self, index, value) -> None:  # type: ignore[override]
        if isinstance(index, slice):
            self._records[index] = [self._check(record) for record in value]
        else:
            self._records[index] = self._check(value)

    def __delitem__(self, index) -> None:  # type: ignore[override]
        del self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def insert(self, index: int, value: Record) -> None:
        self._records.insert(index, self._check(value))

    def is_empty(self) -> bool:
        return not self._records

    def append_new(self, **cols: Any) -> Record:
        if self._new_record is None:
            raise TypeError("This RecordSet was not created by a mapper and cannot build records.")
        record = self._new_record(**cols)
        self.append(record)
        return record

    def get_one_by(self, **where: Any) -> Optional[Record]:
        for record in self._records:
            if _matches(record, where):
                return record
        return None

    def get_all_by(self, **where: Any) -> "RecordSet":
        return type(self)(
            (record for record in self._records if _matches(record, where)),
            new_record=self._new_record,
        )

    def remove_all_by(self, **where: Any) -> "RecordSet":
        removed = self.get_all_by(**where)
        self._records = [record for record in self._records if not _matches(record, where)]
        return removed

    def to_list(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self._records]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} of {len(self._records)}>"
