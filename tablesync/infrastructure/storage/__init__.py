"""
Backends de almacenamiento tabular.

El backend Postgres se importa desde `pg_backend` directamente para no
exigir psycopg cuando solo se usa el backend en memoria.
"""
from tablesync.infrastructure.storage.memory_backend import InMemoryTableBackend

__all__ = ["InMemoryTableBackend"]
