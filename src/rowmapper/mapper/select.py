"""
Mapper-level select returning Records and RecordSets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..table.statements import Select

if TYPE_CHECKING:
    from .mapper import Mapper
    from .record import Record, RecordSet


class MapperSelect:
    """
    Wraps a table :class:`Select` so results are resolved through the
    mapper's identity map. Builder methods return ``self`` for chaining.
    """

    def __init__(self, mapper: "Mapper", select: Select) -> None:
        self.mapper = mapper
        self.statement = select

    def cols(self, *columns: str) -> "MapperSelect":
        self.statement.cols(*columns)
        return self

    def where(self, condition: str, *params: Any) -> "MapperSelect":
        self.statement.where(condition, *params)
        return self

    def where_equals(self, **cols_vals: Any) -> "MapperSelect":
        self.statement.where_equals(cols_vals)
        return self

    def order_by(self, *specs: str) -> "MapperSelect":
        self.statement.order_by(*specs)
        return self

    def limit(self, value: Optional[int]) -> "MapperSelect":
        self.statement.limit(value)
        return self

    def offset(self, value: Optional[int]) -> "MapperSelect":
        self.statement.offset(value)
        return self

    # ------------------------------------------------------------------ #
    def fetch_one(self) -> Optional[Dict[str, Any]]:
        self.statement.limit(1)
        return self.mapper.gateway.fetch_one(self.statement)

    def fetch_all(self) -> List[Dict[str, Any]]:
        return self.mapper.gateway.fetch_all(self.statement)

    def fetch_count(self) -> int:
        return self.mapper.gateway.fetch_count(self.statement)

    def fetch_record(self) -> Optional["Record"]:
        cols = self.fetch_one()
        if cols is None:
            return None
        return self.mapper.get_selected_record(cols)

    def fetch_record_set(self) -> "RecordSet":
        return self.mapper.get_selected_record_set(self.fetch_all())
