"""
Table layer: metadata, rows, identity map and the table gateway.
"""

from .gateway import TableGateway
from .identity import RowIdentity
from .identity_map import IdentityMap
from .metadata import Table, TableRegistry
from .row import Row, RowMemento, RowStatus
from .statements import Delete, Insert, Select, Update

__all__ = [
    "Delete",
    "IdentityMap",
    "Insert",
    "Row",
    "RowIdentity",
    "RowMemento",
    "RowStatus",
    "Select",
    "Table",
    "TableGateway",
    "TableRegistry",
    "Update",
]
