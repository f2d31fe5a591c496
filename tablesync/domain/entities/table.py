"""
Modelo tabular: esquema, celdas y argumentos enumerados.

Una tabla tiene un nombre unico, un esquema de headers write-once y una
secuencia ordenada de filas. Las filas se identifican por posicion
(1-based, sin contar el header).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Type, TypeVar

from tablesync.shared.exceptions.domain import SchemaError

E = TypeVar("E", bound=Enum)


class Position(Enum):
    """Donde se insertan filas nuevas."""
    TOP = "top"         # Justo debajo del header
    BOTTOM = "bottom"   # Despues de la ultima fila


class ReturnType(Enum):
    """Forma del resultado de una consulta."""
    ROWS = "rows"   # Indices de fila 1-based
    DATA = "data"   # Mapping header -> valor por fila


class MatchCondition(Enum):
    """Combinacion de predicados en consultas multiples."""
    ALL = "all"
    ANY = "any"


def parse_enum(enum_cls: Type[E], raw: Any, argument: str) -> E:
    """
    Convierte un argumento (str o miembro) al enum correspondiente.

    Raises:
        SchemaError: si el valor no pertenece al enum
    """
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        valid = [m.value for m in enum_cls]
        raise SchemaError(
            f"Valor invalido para {argument}: {raw!r} (validos: {valid})",
            error_code="INVALID_ARGUMENT",
            details={"argument": argument, "value": repr(raw), "valid": valid},
        )


@dataclass
class Cell:
    """
    Celda de una fila.

    Si `formula` esta definida, `value` es el valor cacheado del ultimo
    calculo y la celda nunca se sobreescribe desde un upsert.
    """
    value: Any = ""
    formula: Optional[str] = None
    is_checkbox: bool = False
    horizontal_alignment: Optional[str] = None
    
    @property
    def is_formula(self) -> bool:
        return bool(self.formula)
    
    @classmethod
    def from_value(cls, value: Any) -> "Cell":
        """
        Construye una celda literal a partir de un valor de registro.

        - None -> ""
        - bool -> checkbox centrado
        - listas -> texto separado por comas
        """
        if value is None:
            return cls(value="")
        if isinstance(value, bool):
            return cls(value=value, is_checkbox=True, horizontal_alignment="center")
        if isinstance(value, (list, tuple)):
            return cls(value=", ".join("" if v is None else str(v) for v in value))
        return cls(value=value)


@dataclass(frozen=True)
class TableSchema:
    """Descriptor explicito del esquema (headers ordenados) de una tabla."""
    headers: Tuple[str, ...]
    
    @classmethod
    def of(cls, headers: Sequence[str]) -> "TableSchema":
        return cls(headers=tuple(headers))
    
    def __contains__(self, header: object) -> bool:
        return header in self.headers
    
    def __len__(self) -> int:
        return len(self.headers)
    
    def index_of(self, header: str) -> int:
        """
        Posicion 0-based de un header.

        Raises:
            SchemaError: si el header no existe en la tabla
        """
        try:
            return self.headers.index(header)
        except ValueError:
            raise SchemaError(
                f"Header desconocido: '{header}'",
                error_code="UNKNOWN_HEADER",
                details={"header": header, "headers": list(self.headers)},
            )
    
    def validate_new(self) -> None:
        """Valida un esquema antes de crear una tabla con el."""
        if not self.headers:
            raise SchemaError("Una tabla nueva necesita al menos un header")
        seen = set()
        for h in self.headers:
            if not isinstance(h, str) or not h:
                raise SchemaError(f"Header invalido: {h!r}")
            if h in seen:
                raise SchemaError(f"Header duplicado: '{h}'", details={"header": h})
            seen.add(h)


@dataclass(frozen=True)
class TableHandle:
    """Referencia a una tabla ligada al esquema que tiene en el backend."""
    name: str
    schema: TableSchema
    created: bool = False
    
    @property
    def headers(self) -> Tuple[str, ...]:
        return self.schema.headers
    
    def row_to_mapping(self, cells: Sequence[Cell]) -> Dict[str, Any]:
        """Mapea una fila (celdas) a header -> valor."""
        return {
            h: (cells[i].value if i < len(cells) else "")
            for i, h in enumerate(self.schema.headers)
        }

