"""
Primary-key identity values used as identity map keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class RowIdentity:
    """
    Ordered ``(column, value)`` pairs of a primary key.

    Equality and hashing are structural, so two identities built from the
    same key columns in the same order with equal values are interchangeable.
    """

    pairs: Tuple[Tuple[str, Any], ...]

    @classmethod
    def from_values(cls, primary_key: Sequence[str], values: Mapping[str, Any]) -> "RowIdentity":
        return cls(tuple((column, values.get(column)) for column in primary_key))

    @classmethod
    def from_primary_val(cls, primary_key: Sequence[str], primary_val: Any) -> "RowIdentity":
        """
        Build an identity from a scalar (simple keys), a mapping of column to
        value, or a sequence of values in key order (composite keys).
        """
        if isinstance(primary_val, RowIdentity):
            if primary_val.columns != tuple(primary_key):
                raise ValueError(
                    f"Identity columns {primary_val.columns} do not match primary key {tuple(primary_key)}."
                )
            return primary_val
        if isinstance(primary_val, Mapping):
            missing = [column for column in primary_key if column not in primary_val]
            extra = [column for column in primary_val if column not in primary_key]
            if missing or extra:
                raise ValueError(
                    f"Primary value must name exactly the key columns {tuple(primary_key)}."
                )
            return cls.from_values(primary_key, primary_val)
        if len(primary_key) == 1:
            return cls(((primary_key[0], primary_val),))
        if isinstance(primary_val, (tuple, list)) and len(primary_val) == len(primary_key):
            return cls(tuple(zip(primary_key, primary_val)))
        raise ValueError(
            f"Composite primary key {tuple(primary_key)} needs a mapping or a "
            f"sequence of {len(primary_key)} values, got {primary_val!r}."
        )

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(column for column, _ in self.pairs)

    @property
    def values(self) -> Tuple[Any, ...]:
        return tuple(value for _, value in self.pairs)

    def is_complete(self) -> bool:
        return all(value is not None for _, value in self.pairs)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.pairs)

    def __repr__(self) -> str:
        inner = ", ".join(f"{column}={value!r}" for column, value in self.pairs)
        return f"<RowIdentity {inner}>"
