"""
Consultas de filas por predicados header/valor.

- Dentro de un predicado los valores se combinan con OR
- Un valor False tambien coincide con celdas vacias ("")
- Varios predicados se combinan con "all" (AND) o "any" (OR)

Los argumentos se validan antes de leer cualquier dato.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from tablesync.application.services.schema_store import SchemaStore
from tablesync.core.config import Settings
from tablesync.domain.entities.table import (
    Cell,
    MatchCondition,
    ReturnType,
    TableHandle,
    parse_enum,
)
from tablesync.shared.exceptions.domain import ValidationError
from tablesync.shared.utils.values import as_value_list, matches_any

Predicate = Tuple[str, Any]
Predicates = Union[Mapping[str, Any], Sequence[Predicate]]
QueryResult = Union[List[int], List[Dict[str, Any]]]


def _normalize_predicates(predicates: Predicates) -> List[Tuple[str, List[Any]]]:
    """Acepta {"Status": [...]} o [("Status", [...]), ...]."""
    if isinstance(predicates, Mapping):
        items = list(predicates.items())
    else:
        items = []
        for predicate in predicates:
            if isinstance(predicate, Mapping):
                items.append((predicate.get("header"), predicate.get("values")))
            else:
                header, values = predicate
                items.append((header, values))
    return [(header, as_value_list(values)) for header, values in items]


class RowQueryEngine:
    """
    Busqueda de filas sobre un snapshot leido al inicio de cada llamada.

    Uso:
        engine = RowQueryEngine(schema_store, settings)
        rows = engine.find_by_header_value("Forms", "Status", ["open", "pending"])
        data = engine.find_by_header_value("Forms", "URI", "u1", return_type="data")
    """

    def __init__(self, schema_store: SchemaStore, settings: Optional[Settings] = None) -> None:
        self._schemas = schema_store
        self._backend = schema_store.backend
        self._message_column = settings.MESSAGE_COLUMN if settings else "Message"

    def find_by_header_value(
        self,
        table: str,
        header: str,
        values: Any,
        return_type: Union[str, ReturnType] = ReturnType.ROWS,
    ) -> QueryResult:
        """
        Filas cuya celda en `header` es igual a alguno de `values`.

        Returns:
            List[int] con return_type="rows" (1-based, sin header) o
            List[Dict] con return_type="data"

        Raises:
            SchemaError: tabla o header desconocido, return_type invalido
        """
        rtype = parse_enum(ReturnType, return_type, "return_type")
        handle = self._schemas.get_table(table)
        col = handle.schema.index_of(header)
        candidates = as_value_list(values)

        snapshot = self._backend.read_rows(handle.name)
        matched = [
            number
            for number, cells in enumerate(snapshot, start=1)
            if matches_any(self._value_at(cells, col), candidates)
        ]

        logger.debug(f"Consulta '{handle.name}'.{header} in {candidates}: {len(matched)} filas")
        return self._shape(handle, snapshot, matched, rtype)

    def find_by_multiple_header_values(
        self,
        table: str,
        predicates: Predicates,
        condition: Union[str, MatchCondition] = MatchCondition.ALL,
        return_type: Union[str, ReturnType] = ReturnType.ROWS,
    ) -> QueryResult:
        """
        Filas que cumplen los predicados combinados segun `condition`.

        Args:
            predicates: {header: values} o [(header, values), ...]
            condition: "all" (AND) o "any" (OR)

        Raises:
            SchemaError: tabla o header desconocido, condition/return_type invalidos
            ValidationError: sin predicados
        """
        cond = parse_enum(MatchCondition, condition, "condition")
        rtype = parse_enum(ReturnType, return_type, "return_type")
        normalized = _normalize_predicates(predicates)
        if not normalized:
            raise ValidationError("Se requiere al menos un predicado", field="predicates")

        handle = self._schemas.get_table(table)
        resolved = [(handle.schema.index_of(h), values) for h, values in normalized]
        combine = all if cond is MatchCondition.ALL else any

        snapshot = self._backend.read_rows(handle.name)
        matched = [
            number
            for number, cells in enumerate(snapshot, start=1)
            if combine(matches_any(self._value_at(cells, col), values) for col, values in resolved)
        ]

        logger.debug(
            f"Consulta multiple '{handle.name}' ({cond.value}, {len(resolved)} predicados): "
            f"{len(matched)} filas"
        )
        return self._shape(handle, snapshot, matched, rtype)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    @staticmethod
    def _value_at(cells: Sequence[Cell], col: int) -> Any:
        return cells[col].value if col < len(cells) else ""

    def _shape(
        self,
        handle: TableHandle,
        snapshot: Sequence[Sequence[Cell]],
        matched: List[int],
        rtype: ReturnType,
    ) -> QueryResult:
        if rtype is ReturnType.ROWS:
            return matched
        return [self._row_data(handle, snapshot[number - 1]) for number in matched]

    def _row_data(self, handle: TableHandle, cells: Sequence[Cell]) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for idx, header in enumerate(handle.headers):
            cell = cells[idx] if idx < len(cells) else Cell()
            if cell.is_formula:
                data[header] = {"value": cell.value, "formula": cell.formula}
            elif header == self._message_column:
                data[header] = self._parse_message(cell.value)
            else:
                data[header] = cell.value
        return data

    @staticmethod
    def _parse_message(raw: Any) -> Any:
        """Intenta interpretar el texto como JSON; si falla, retorna el texto."""
        if not isinstance(raw, str):
            return raw
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
