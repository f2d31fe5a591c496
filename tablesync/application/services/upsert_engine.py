"""
Motor de escritura: append y upsert por columnas de match.

Diseño (resumen):
- La tabla se crea al primer write si no existe (SchemaStore)
- Cada registro relee el snapshot de filas antes de decidir
- Match por igualdad estricta en TODAS las columnas de match; gana la primera fila
- Las celdas con formula nunca se sobreescriben
- Un error a mitad de lote aborta el resto; lo ya escrito no se revierte

Concurrencia: se asume un unico escritor por tabla. Dos upserts
concurrentes con claves solapadas pueden duplicar filas.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from loguru import logger

from tablesync.application.services.schema_store import SchemaStore
from tablesync.core.config import Settings
from tablesync.domain.entities.table import Cell, Position, TableHandle, TableSchema, parse_enum
from tablesync.shared.exceptions.domain import SchemaError
from tablesync.shared.utils.values import strict_equals

Record = Mapping[str, Any]


def _has_value(record: Record, key: str) -> bool:
    return key in record and record[key] is not None


def _collect_headers(records: Sequence[Record]) -> List[str]:
    """Union ordenada de las claves de los registros (orden de aparicion)."""
    headers: List[str] = []
    seen = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


class UpsertEngine:
    """
    Inserta o actualiza filas de una tabla.

    Uso:
        engine = UpsertEngine(schema_store, settings)
        merged = engine.upsert("Forms", [{"URI": "u1", "Status": "open"}], ["URI"])
    """

    def __init__(self, schema_store: SchemaStore, settings: Optional[Settings] = None) -> None:
        self._schemas = schema_store
        self._backend = schema_store.backend
        self._default_position = settings.DEFAULT_POSITION if settings else Position.BOTTOM.value

    def upsert(
        self,
        table: str,
        records: Sequence[Record],
        match_columns: Sequence[str],
        position: Union[str, Position, None] = None,
        headers: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Inserta o actualiza cada registro, en orden de entrada.

        Args:
            table: Nombre de la tabla (se crea si no existe)
            records: Mappings header -> valor
            match_columns: Columnas que identifican la fila (AND, igualdad estricta)
            position: "top" o "bottom" para filas nuevas
            headers: Headers para una tabla nueva; por defecto la union de claves

        Returns:
            List[Dict[str, Any]]: registro resultante por cada entrada

        Raises:
            SchemaError: sin columnas de match, ningun registro las define,
                columna de match desconocida o posicion invalida
        """
        records = list(records)
        match_columns = list(match_columns)
        pos = parse_enum(Position, position or self._default_position, "position")

        if not match_columns:
            raise SchemaError("match_columns no puede estar vacio", error_code="MISSING_MATCH_COLUMNS")
        if not any(_has_value(r, col) for r in records for col in match_columns):
            raise SchemaError(
                f"Ningun registro define alguna de las columnas de match {match_columns}",
                error_code="MISSING_MATCH_COLUMNS",
                details={"match_columns": match_columns},
            )

        requested = headers if headers is not None else _collect_headers(records)
        # Columnas de match validadas contra el esquema efectivo antes de crear nada.
        if self._schemas.table_exists(table):
            effective = self._schemas.get_table(table).schema
        else:
            effective = TableSchema.of(requested)
        for col in match_columns:
            effective.index_of(col)

        handle = self._schemas.ensure_table(table, requested)
        match_idx = [(col, handle.schema.index_of(col)) for col in match_columns]

        results: List[Dict[str, Any]] = []
        inserted = updated = 0
        for record in records:
            snapshot = self._backend.read_rows(handle.name)
            row_number = self._find_match(snapshot, record, match_idx)

            if row_number is None:
                results.append(self._insert(handle, record, pos, len(snapshot)))
                inserted += 1
            else:
                results.append(self._merge(handle, record, row_number, snapshot[row_number - 1]))
                updated += 1

        logger.info(
            f"Upsert en '{handle.name}': {len(records)} registros "
            f"(insertados={inserted}, actualizados={updated}, match={match_columns})"
        )
        return results

    def append(
        self,
        table: str,
        records: Sequence[Record],
        position: Union[str, Position, None] = None,
        headers: Optional[Sequence[str]] = None,
    ) -> None:
        """
        Inserta cada registro como fila nueva, sin matching.

        Con position="top" se conserva el orden de entrada: el primer
        registro queda justo debajo del header.
        """
        records = list(records)
        pos = parse_enum(Position, position or self._default_position, "position")
        if not records:
            logger.debug(f"Append en '{table}' sin registros; nada que hacer")
            return

        handle = self._schemas.ensure_table(table, headers if headers is not None else _collect_headers(records))
        existing = len(self._backend.read_rows(handle.name))

        for offset, record in enumerate(records):
            if pos is Position.TOP:
                self._write_new_row(handle, record, 1 + offset)
            else:
                self._write_new_row(handle, record, existing + offset + 1)

        logger.info(f"Append en '{handle.name}': {len(records)} filas ({pos.value})")

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    @staticmethod
    def _find_match(
        snapshot: Sequence[Sequence[Cell]],
        record: Record,
        match_idx: Sequence[tuple],
    ) -> Optional[int]:
        """Numero 1-based de la primera fila que coincide en todas las columnas."""
        for number, cells in enumerate(snapshot, start=1):
            if all(
                idx < len(cells)
                and _has_value(record, col)
                and strict_equals(cells[idx].value, Cell.from_value(record[col]).value)
                for col, idx in match_idx
            ):
                return number
        return None

    def _merge(
        self,
        handle: TableHandle,
        record: Record,
        row_number: int,
        cells: Sequence[Cell],
    ) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        updates: Dict[int, Cell] = {}

        for idx, header in enumerate(handle.headers):
            current = cells[idx] if idx < len(cells) else Cell()
            if _has_value(record, header) and not current.is_formula:
                new_cell = Cell.from_value(record[header])
                updates[idx] = new_cell
                merged[header] = new_cell.value
            else:
                merged[header] = current.value

        if updates:
            self._backend.update_cells(handle.name, row_number, updates)
        logger.debug(f"Fila {row_number} de '{handle.name}' actualizada ({len(updates)} celdas)")
        return merged

    def _insert(
        self,
        handle: TableHandle,
        record: Record,
        pos: Position,
        row_count: int,
    ) -> Dict[str, Any]:
        row_number = 1 if pos is Position.TOP else row_count + 1
        return self._write_new_row(handle, record, row_number)

    def _write_new_row(self, handle: TableHandle, record: Record, row_number: int) -> Dict[str, Any]:
        cells = [Cell.from_value(record.get(h, "")) for h in handle.headers]
        self._backend.insert_row(handle.name, row_number, cells)
        # Al insertar se hereda la altura de la fila superior; se restablece la de defecto.
        self._backend.set_row_height(handle.name, row_number, self._backend.default_row_height(handle.name))
        logger.debug(f"Fila {row_number} insertada en '{handle.name}'")
        return {h: c.value for h, c in zip(handle.headers, cells)}
