"""
Statement builders rendering INSERT, UPDATE, DELETE and SELECT for one table.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..dialects.base import Dialect
from .identity import RowIdentity
from .metadata import Table


class Statement:
    """
    Base for write statements; ``cols`` may be adjusted by ``modify_*`` hooks
    before the statement is rendered.
    """

    def __init__(self, table: Table, dialect: Dialect) -> None:
        self.table = table
        self.dialect = dialect

    def _table_sql(self) -> str:
        return self.dialect.format_table(self.table.name)

    def _quote(self, column: str) -> str:
        return self.dialect.quote_identifier(column)

    def _placeholder(self) -> str:
        return self.dialect.parameter_placeholder()

    def _where_identity(self, identity: RowIdentity) -> Tuple[str, List[Any]]:
        clauses = [f"{self._quote(column)} = {self._placeholder()}" for column in identity.columns]
        return " AND ".join(clauses), list(identity.values)

    def get_statement(self) -> str:
        raise NotImplementedError

    def get_bind_values(self) -> List[Any]:
        raise NotImplementedError

    def compile(self) -> Tuple[str, List[Any]]:
        return self.get_statement(), self.get_bind_values()


class Insert(Statement):
    def __init__(
        self,
        table: Table,
        dialect: Dialect,
        cols: Mapping[str, Any],
        *,
        returning: Sequence[str] = (),
    ) -> None:
        super().__init__(table, dialect)
        self.cols: Dict[str, Any] = dict(cols)
        self.returning = list(returning)

    def get_statement(self) -> str:
        if self.cols:
            columns = ", ".join(self._quote(column) for column in self.cols)
            placeholders = ", ".join(self._placeholder() for _ in self.cols)
            sql = f"INSERT INTO {self._table_sql()} ({columns}) VALUES ({placeholders})"
        else:
            sql = self.dialect.default_values_insert(self._table_sql())
        returning = self.dialect.returning_clause(self.returning)
        if returning:
            sql = f"{sql} {returning}"
        return sql

    def get_bind_values(self) -> List[Any]:
        return list(self.cols.values())


class Update(Statement):
    def __init__(
        self,
        table: Table,
        dialect: Dialect,
        cols: Mapping[str, Any],
        identity: RowIdentity,
    ) -> None:
        super().__init__(table, dialect)
        self.cols: Dict[str, Any] = dict(cols)
        self.identity = identity

    def has_cols(self) -> bool:
        return bool(self.cols)

    def get_statement(self) -> str:
        assignments = ", ".join(
            f"{self._quote(column)} = {self._placeholder()}" for column in self.cols
        )
        where_sql, _ = self._where_identity(self.identity)
        return f"UPDATE {self._table_sql()} SET {assignments} WHERE {where_sql}"

    def get_bind_values(self) -> List[Any]:
        return list(self.cols.values()) + list(self.identity.values)


class Delete(Statement):
    def __init__(self, table: Table, dialect: Dialect, identity: RowIdentity) -> None:
        super().__init__(table, dialect)
        self.identity = identity

    def get_statement(self) -> str:
        where_sql, _ = self._where_identity(self.identity)
        return f"DELETE FROM {self._table_sql()} WHERE {where_sql}"

    def get_bind_values(self) -> List[Any]:
        return list(self.identity.values)


class Select(Statement):
    """
    Minimal SELECT builder: column list, equality/IN filters, raw conditions,
    ordering and paging. All filters are ANDed.
    """

    def __init__(self, table: Table, dialect: Dialect) -> None:
        super().__init__(table, dialect)
        self.columns: List[str] = list(table.columns)
        self._where: List[Tuple[str, List[Any]]] = []
        self._order_by: List[str] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    def cols(self, *columns: str) -> "Select":
        for column in columns:
            self.table.require_column(column)
        self.columns = list(columns)
        return self

    def where(self, condition: str, *params: Any) -> "Select":
        self._where.append((condition, list(params)))
        return self

    def where_equals(self, cols_vals: Mapping[str, Any]) -> "Select":
        for column, value in cols_vals.items():
            self.table.require_column(column)
            quoted = self._quote(column)
            if value is None:
                self._where.append((f"{quoted} IS NULL", []))
            elif isinstance(value, (list, tuple, set, frozenset)):
                values = list(value)
                if not values:
                    self._where.append(("1 = 0", []))
                    continue
                placeholders = ", ".join(self._placeholder() for _ in values)
                self._where.append((f"{quoted} IN ({placeholders})", values))
            else:
                self._where.append((f"{quoted} = {self._placeholder()}", [value]))
        return self

    def where_identities(self, identities: Iterable[RowIdentity]) -> "Select":
        identities = list(identities)
        if not identities:
            self._where.append(("1 = 0", []))
            return self
        if not self.table.is_composite:
            column = self.table.primary_key[0]
            return self.where_equals({column: [identity.values[0] for identity in identities]})
        groups = []
        params: List[Any] = []
        for identity in identities:
            group_sql, group_params = self._where_identity(identity)
            groups.append(f"({group_sql})")
            params.extend(group_params)
        self._where.append((f"({' OR '.join(groups)})", params))
        return self

    def order_by(self, *specs: str) -> "Select":
        """
        Accepts column names, prefixed with ``-`` for descending order.
        """
        for spec in specs:
            descending = spec.startswith("-")
            column = self.table.require_column(spec.lstrip("-"))
            direction = "DESC" if descending else "ASC"
            self._order_by.append(f"{self._quote(column)} {direction}")
        return self

    def limit(self, value: Optional[int]) -> "Select":
        self._limit = value
        return self

    def offset(self, value: Optional[int]) -> "Select":
        self._offset = value
        return self

    def _where_sql(self) -> Tuple[str, List[Any]]:
        if not self._where:
            return "", []
        params: List[Any] = []
        for _, condition_params in self._where:
            params.extend(condition_params)
        return " WHERE " + " AND ".join(condition for condition, _ in self._where), params

    def get_statement(self) -> str:
        select_list = ", ".join(self._quote(column) for column in self.columns)
        where_sql, _ = self._where_sql()
        sql = f"SELECT {select_list} FROM {self._table_sql()}{where_sql}"
        if self._order_by:
            sql += " ORDER BY " + ", ".join(self._order_by)
        limit_clause = self.dialect.limit_clause(self._limit, self._offset)
        if limit_clause:
            sql += f" {limit_clause}"
        return sql

    def get_bind_values(self) -> List[Any]:
        return self._where_sql()[1]

    def count_statement(self) -> Tuple[str, List[Any]]:
        where_sql, params = self._where_sql()
        return f"SELECT COUNT(*) FROM {self._table_sql()}{where_sql}", params
