"""
Tipos de propiedad de documentos externos (Notion).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class PropertyTag(Enum):
    """
    Conjunto cerrado de tags de propiedad soportados.

    Agregar un tag exige agregar su handler en PropertyDecoder: el modulo
    del decoder verifica al importarse que la tabla de despacho cubre
    todos los miembros.
    """
    TITLE = "title"
    RICH_TEXT = "rich_text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    CHECKBOX = "checkbox"
    STATUS = "status"
    UNIQUE_ID = "unique_id"
    FORMULA = "formula"
    ROLLUP = "rollup"
    RELATION = "relation"
    URL = "url"
    PEOPLE = "people"
    CREATED_TIME = "created_time"
    LAST_EDITED_TIME = "last_edited_time"
    
    @classmethod
    def lookup(cls, raw: Any) -> Optional["PropertyTag"]:
        """Retorna el tag o None si no es reconocido."""
        try:
            return cls(raw)
        except ValueError:
            return None


# Version reducida de la tabla usada para items de rollups tipo array
ROLLUP_ITEM_TAGS = frozenset({
    PropertyTag.TITLE,
    PropertyTag.RICH_TEXT,
    PropertyTag.NUMBER,
    PropertyTag.DATE,
    PropertyTag.CHECKBOX,
})


@dataclass(frozen=True)
class PropertyPage:
    """Una pagina de items devuelta por un page fetcher."""
    items: List[Any] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None
