"""
Excepciones de la aplicacion.
"""
from tablesync.shared.exceptions.base import AppException
from tablesync.shared.exceptions.domain import (
    DecodeError,
    SchemaError,
    ValidationError,
)
from tablesync.shared.exceptions.integration import FetchError, NotionApiError

__all__ = [
    "AppException",
    "SchemaError",
    "ValidationError",
    "DecodeError",
    "FetchError",
    "NotionApiError",
]
