"""
Backend tabular en memoria del proceso.

Util para desarrollo y tests: replica la semantica de una hoja de calculo
(header congelado, filas posicionales, altura heredada al insertar) sin
I/O. No es seguro para escritores concurrentes.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from tablesync.domain.entities.table import Cell
from tablesync.domain.repositories.table_backend import ITableBackend
from tablesync.shared.exceptions.domain import SchemaError


@dataclass
class _MemoryTable:
    headers: List[str]
    rows: List[List[Cell]] = field(default_factory=list)
    heights: List[int] = field(default_factory=list)
    frozen_rows: int = 1
    bold_header: bool = True
    default_height: int = 21


class InMemoryTableBackend(ITableBackend):
    def __init__(self, default_row_height: int = 21) -> None:
        self._tables: Dict[str, _MemoryTable] = {}
        self._default_row_height = default_row_height

    def _table(self, name: str) -> _MemoryTable:
        table = self._tables.get(name)
        if table is None:
            raise SchemaError(f"La tabla '{name}' no existe", error_code="TABLE_NOT_FOUND")
        return table

    def _check_row(self, table: _MemoryTable, row_number: int) -> int:
        if not 1 <= row_number <= len(table.rows):
            raise IndexError(f"Fila fuera de rango: {row_number} (filas={len(table.rows)})")
        return row_number - 1

    def table_exists(self, name: str) -> bool:
        return name in self._tables

    def create_table(self, name: str, headers: Sequence[str]) -> None:
        if name in self._tables:
            return
        self._tables[name] = _MemoryTable(
            headers=list(headers),
            default_height=self._default_row_height,
        )

    def read_headers(self, name: str) -> List[str]:
        return list(self._table(name).headers)

    def read_rows(self, name: str) -> List[List[Cell]]:
        # Copia profunda: el snapshot no debe cambiar con escrituras posteriores.
        return copy.deepcopy(self._table(name).rows)

    def insert_row(self, name: str, row_number: int, cells: Sequence[Cell]) -> None:
        table = self._table(name)
        if not 1 <= row_number <= len(table.rows) + 1:
            raise IndexError(f"Posicion de insercion fuera de rango: {row_number}")

        width = len(table.headers)
        row = [copy.copy(c) for c in cells[:width]]
        row.extend(Cell() for _ in range(width - len(row)))

        # La fila nueva hereda la altura de la fila de arriba (o del header).
        above = table.heights[row_number - 2] if row_number >= 2 else table.default_height
        table.rows.insert(row_number - 1, row)
        table.heights.insert(row_number - 1, above)

    def update_cells(self, name: str, row_number: int, updates: Mapping[int, Cell]) -> None:
        table = self._table(name)
        idx = self._check_row(table, row_number)
        for col, cell in updates.items():
            table.rows[idx][col] = copy.copy(cell)

    def get_row_height(self, name: str, row_number: int) -> int:
        table = self._table(name)
        return table.heights[self._check_row(table, row_number)]

    def set_row_height(self, name: str, row_number: int, height: int) -> None:
        table = self._table(name)
        table.heights[self._check_row(table, row_number)] = height

    def default_row_height(self, name: str) -> int:
        return self._table(name).default_height

    def is_header_frozen(self, name: str) -> bool:
        table = self._table(name)
        return table.frozen_rows >= 1 and table.bold_header

    def set_formula(self, name: str, row_number: int, column: int, formula: str, cached_value) -> None:
        """
        Define una celda calculada con su valor cacheado.

        Las formulas las escriben usuarios/herramientas externas; el motor
        de upsert solo las lee.
        """
        self.update_cells(name, row_number, {column: Cell(value=cached_value, formula=formula)})
