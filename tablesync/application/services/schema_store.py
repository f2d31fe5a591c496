"""
Resolucion de tablas por nombre con esquema write-once.

Una llamada de creacion solo fija headers para una tabla NUEVA. Si la
tabla ya existe, sus headers persistidos son la fuente de verdad y los
headers pedidos se ignoran.
"""
from __future__ import annotations

from typing import Sequence

from loguru import logger

from tablesync.domain.entities.table import TableHandle, TableSchema
from tablesync.domain.repositories.table_backend import ITableBackend
from tablesync.shared.exceptions.domain import SchemaError, ValidationError


class SchemaStore:
    """
    Puerta de entrada a las tablas del backend.

    Uso:
        store = SchemaStore(backend)
        handle = store.ensure_table("Forms", ["URI", "Status"])
    """

    def __init__(self, backend: ITableBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> ITableBackend:
        return self._backend

    def table_exists(self, name: str) -> bool:
        return self._backend.table_exists(name)

    def ensure_table(self, name: str, headers: Sequence[str]) -> TableHandle:
        """
        Retorna la tabla, creandola con `headers` si no existe.

        Args:
            name: Nombre de la tabla
            headers: Headers a usar solo si la tabla es nueva

        Returns:
            TableHandle: ligado al esquema efectivo de la tabla
        """
        self._validate_name(name)

        if self._backend.table_exists(name):
            handle = self.get_table(name)
            if tuple(headers) and tuple(headers) != handle.headers:
                logger.debug(
                    f"Tabla '{name}' ya existe; se ignoran headers pedidos {list(headers)} "
                    f"y se usan {list(handle.headers)}"
                )
            return handle

        schema = TableSchema.of(headers)
        schema.validate_new()
        self._backend.create_table(name, schema.headers)
        logger.info(f"Tabla '{name}' creada con headers {list(schema.headers)}")
        return TableHandle(name=name, schema=schema, created=True)

    def get_table(self, name: str) -> TableHandle:
        """
        Abre una tabla existente.

        Raises:
            SchemaError: si la tabla no existe
        """
        self._validate_name(name)
        if not self._backend.table_exists(name):
            raise SchemaError(
                f"La tabla '{name}' no existe",
                error_code="TABLE_NOT_FOUND",
                details={"table": name},
            )
        return TableHandle(name=name, schema=TableSchema.of(self._backend.read_headers(name)))

    @staticmethod
    def _validate_name(name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("El nombre de tabla no puede estar vacio", field="name")
