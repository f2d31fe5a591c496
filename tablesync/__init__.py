"""
tablesync: almacen tabular para registrar payloads de servicios externos.

Componentes principales:
- PropertyDecoder: documento tipado (Notion) -> mapping plano
- SchemaStore: resolucion/creacion de tablas con esquema write-once
- UpsertEngine: insercion/actualizacion por columnas de match
- RowQueryEngine: busqueda de filas por predicados header/valor
"""

__version__ = "1.0.0"
