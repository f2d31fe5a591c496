"""
Servicios de aplicacion.

Contiene el decoder de propiedades y los motores del almacen tabular.
"""
from tablesync.application.services.property_decoder import PropertyDecoder
from tablesync.application.services.schema_store import SchemaStore
from tablesync.application.services.upsert_engine import UpsertEngine
from tablesync.application.services.row_query_engine import RowQueryEngine
from tablesync.application.services.tabular_store import TabularStore, build_tabular_store

__all__ = [
    # Decodificacion
    "PropertyDecoder",
    # Almacen tabular
    "SchemaStore",
    "UpsertEngine",
    "RowQueryEngine",
    "TabularStore",
    "build_tabular_store",
]
