"""
Mapper layer: records, record sets and the mappers that build them.
"""

from .locator import MapperLocator
from .mapper import Mapper
from .record import Record, RecordSet, Related
from .select import MapperSelect

__all__ = ["Mapper", "MapperLocator", "MapperSelect", "Record", "RecordSet", "Related"]
