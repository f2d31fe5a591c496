"""
Entidades del dominio.
"""
from tablesync.domain.entities.table import (
    Cell,
    MatchCondition,
    Position,
    ReturnType,
    TableHandle,
    TableSchema,
)
from tablesync.domain.entities.properties import (
    PropertyPage,
    PropertyTag,
    ROLLUP_ITEM_TAGS,
)

__all__ = [
    "Cell",
    "MatchCondition",
    "Position",
    "ReturnType",
    "TableHandle",
    "TableSchema",
    "PropertyPage",
    "PropertyTag",
    "ROLLUP_ITEM_TAGS",
]
