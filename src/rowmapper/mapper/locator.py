"""
Explicit name-to-mapper registry.
"""

from __future__ import annotations

from typing import Dict, Iterator

from ..errors import MapperNotFoundError
from .mapper import Mapper


class MapperLocator:
    def __init__(self) -> None:
        self._mappers: Dict[str, Mapper] = {}

    def register(self, name: str, mapper: Mapper) -> Mapper:
        if name in self._mappers and self._mappers[name] is not mapper:
            raise ValueError(f"A mapper named '{name}' is already registered.")
        self._mappers[name] = mapper
        return mapper

    def get(self, name: str) -> Mapper:
        try:
            return self._mappers[name]
        except KeyError:
            raise MapperNotFoundError(f"No mapper registered as '{name}'.") from None

    def __contains__(self, name: object) -> bool:
        return name in self._mappers

    def __iter__(self) -> Iterator[Mapper]:
        return iter(self._mappers.values())

    def __len__(self) -> int:
        return len(self._mappers)
