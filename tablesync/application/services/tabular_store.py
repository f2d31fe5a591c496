"""
Fachada del almacen tabular consumida por los procesos de ingesta.

Expone las cinco operaciones del almacen sobre un unico backend:
ensure_table, append, upsert, find_by_header_value y
find_by_multiple_header_values.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from tablesync.application.services.row_query_engine import RowQueryEngine
from tablesync.application.services.schema_store import SchemaStore
from tablesync.application.services.upsert_engine import Record, UpsertEngine
from tablesync.core.config import Settings
from tablesync.domain.entities.table import TableHandle
from tablesync.domain.repositories.table_backend import ITableBackend
from tablesync.infrastructure.storage.memory_backend import InMemoryTableBackend
from tablesync.shared.exceptions.domain import ValidationError


class TabularStore:
    """Agrupa SchemaStore, UpsertEngine y RowQueryEngine sobre un backend."""

    def __init__(self, backend: ITableBackend, settings: Settings) -> None:
        self.settings = settings
        self.schemas = SchemaStore(backend)
        self.writer = UpsertEngine(self.schemas, settings)
        self.reader = RowQueryEngine(self.schemas, settings)

    @property
    def backend(self) -> ITableBackend:
        return self.schemas.backend

    def ensure_table(self, name: str, headers: Sequence[str]) -> TableHandle:
        return self.schemas.ensure_table(name, headers)

    def append(self, table: str, records: Sequence[Record], position=None, headers=None) -> None:
        self.writer.append(table, records, position=position, headers=headers)

    def upsert(
        self,
        table: str,
        records: Sequence[Record],
        match_columns: Sequence[str],
        position=None,
        headers=None,
    ) -> List[Dict[str, Any]]:
        return self.writer.upsert(table, records, match_columns, position=position, headers=headers)

    def find_by_header_value(self, table: str, header: str, values: Any, return_type="rows"):
        return self.reader.find_by_header_value(table, header, values, return_type=return_type)

    def find_by_multiple_header_values(self, table: str, predicates, condition="all", return_type="rows"):
        return self.reader.find_by_multiple_header_values(
            table, predicates, condition=condition, return_type=return_type
        )


def build_tabular_store(settings: Settings, backend: Optional[ITableBackend] = None) -> TabularStore:
    """
    Construye el almacen para la configuracion dada.

    Con STORAGE_BACKEND=postgres el backend debe venir construido por el
    caller, que es quien controla la conexion y los commits.
    """
    if backend is None:
        if settings.uses_postgres:
            raise ValidationError(
                "STORAGE_BACKEND=postgres requiere pasar un PostgresTableBackend con su conexion",
                field="backend",
            )
        backend = InMemoryTableBackend(default_row_height=settings.DEFAULT_ROW_HEIGHT)
    return TabularStore(backend, settings)
